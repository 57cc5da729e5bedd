"""
Search components for LLFS.

Term classification, scoring, time filtering and ranking. The facade that ties
them to the filesystem walker lives in ``llfs.search.engine``.
"""

from .classifier import parse_terms, classify_term, TermSet
from .scoring import score_directory, score_file_base, score_file, clamp_score
from .ranking import filter_and_rank

__all__ = [
    'parse_terms',
    'classify_term',
    'TermSet',
    'score_directory',
    'score_file_base',
    'score_file',
    'clamp_score',
    'filter_and_rank',
]
