"""
Scoring functions for the fuzzy search engine.

Every function here is pure: the score depends only on the candidate name or
path, the term and the extension. Scores are integers in [0, MAX_SCORE]; 0 means
"no match". Base scores follow a fixed ladder of tiers evaluated top-down, and
the first tier that matches wins:

    6  exact name
    5  name starts with the term
    4  all term words in order
    3  all term words in any order
    2  at least 70% of the term words
    1  some word longer than two characters
"""

import math
import os
import re
from typing import Iterable, List, Optional

from ..models.search_results import MAX_SCORE
from ..models.search_terms import SearchTerm, TermKind
from .categories import PENALTY, category_for_term, has_penalty_term


EXACT_SCORE = MAX_SCORE
PARTIAL_SCORE = MAX_SCORE - 1
SEQUENTIAL_SCORE = MAX_SCORE - 2
ALL_WORDS_SCORE = MAX_SCORE - 3
MOST_WORDS_SCORE = MAX_SCORE - 4
WEAK_SCORE = MAX_SCORE - 5

MOST_WORDS_RATIO = 0.7
CATEGORY_FORMAT_BOOST = 1.5
CATEGORY_TERM_BOOST = 1.1
DIRECTORY_PARTIAL_PENALTY = 3


def clamp_score(value: float) -> int:
    """Round half up and clamp into [0, MAX_SCORE]."""
    return max(0, min(MAX_SCORE, int(math.floor(value + 0.5))))


def _path_segments(path: str) -> List[str]:
    normalized = path.replace('\\', '/').lower()
    return [segment for segment in normalized.split('/') if segment]


def _normalize_name(text: str) -> str:
    return re.sub(r'\s+', '_', text.strip().lower())


def _term_words(normalized_term: str) -> List[str]:
    return [word for word in re.split(r'[_\-]+', normalized_term) if word]


def score_directory(path: str, term: str) -> int:
    """
    Score a directory path against a directory term.

    Args:
        path: Directory path, usually relative to the search root
        term: Directory term value, e.g. "projects" or "work/projects"

    Returns:
        6 when a path segment equals the term, 5 when a segment contains it,
        4 when the whole path contains it or every "_" part of the term is a
        "_" part of the directory name, else 0
    """
    segments = _path_segments(path)
    term = '/'.join(_path_segments(term))
    if not term or not segments:
        return 0

    if term in segments:
        return EXACT_SCORE

    if any(term in segment for segment in segments):
        return PARTIAL_SCORE

    if term in '/'.join(segments):
        return SEQUENTIAL_SCORE

    if _is_compound_match(segments[-1], term):
        return SEQUENTIAL_SCORE

    return 0


def _is_compound_match(name: str, term: str) -> bool:
    """Every "_" part of the term is a "_" part of the name."""
    if '_' not in term:
        return False
    term_parts = [part for part in term.split('_') if part]
    name_parts = name.lower().split('_')
    return bool(term_parts) and all(part in name_parts for part in term_parts)


def _path_ends_with(path: str, term: str) -> bool:
    """The path ends with the term's segments, e.g. "a/work/projects" and "work/projects"."""
    joined = '/'.join(_path_segments(path))
    term = '/'.join(_path_segments(term))
    return bool(term) and (joined == term or joined.endswith('/' + term))


def score_directory_entry(path: str, name: str, term: str) -> int:
    """
    Directory score as used by the walker.

    Only an exact segment, a trailing path or a compound "_" match names the
    directory searched for. A hit that is merely a substring of a segment or of
    the path loses DIRECTORY_PARTIAL_PENALTY, which puts it at or below the
    default relevance floor. The denylist penalty then applies to the directory
    name.
    """
    score = score_directory(path, term)
    names_directory = _is_compound_match(name, term) or _path_ends_with(path, term)
    if score in (PARTIAL_SCORE, SEQUENTIAL_SCORE) and not names_directory:
        score -= DIRECTORY_PARTIAL_PENALTY
    if score > 0 and has_penalty_term(name):
        score -= PENALTY
    return clamp_score(score)


def score_file_base(name: str, term: str) -> int:
    """
    Score a file name (without extension) against a content term.

    Args:
        name: File name without its extension
        term: Content term value; whitespace is treated like "_"

    Returns:
        Base tier score from the ladder in the module docstring
    """
    candidate = _normalize_name(name)
    normalized = _normalize_name(term)
    words = _term_words(normalized)
    if not candidate or not words:
        return 0

    if candidate == normalized:
        return EXACT_SCORE

    if candidate.startswith(normalized):
        return PARTIAL_SCORE

    sequential = '.*?'.join(re.escape(word) for word in words)
    if re.search(sequential, candidate):
        return SEQUENTIAL_SCORE

    found = [word for word in words if word in candidate]
    if len(found) == len(words):
        return ALL_WORDS_SCORE

    if len(found) >= math.ceil(MOST_WORDS_RATIO * len(words)):
        return MOST_WORDS_SCORE

    if any(len(word) > 2 for word in found):
        return WEAK_SCORE

    return 0


def boost_score(base: int, term: str, extension: str) -> float:
    """Apply the category boost for a content term."""
    category = category_for_term(term)
    if category is None:
        return float(base)
    if category.has_format(extension):
        return base * CATEGORY_FORMAT_BOOST
    return base * CATEGORY_TERM_BOOST


def score_file(filename: str, term: SearchTerm, extension: Optional[str] = None) -> int:
    """
    Score a file against one term.

    Filetype terms are a hard gate: MAX_SCORE on an exact extension match, 0
    otherwise. Content terms take the base score, the category boost and the
    denylist penalty, then clamp. Directory and time terms never score files.

    Args:
        filename: Base name of the file including its extension
        term: Classified search term
        extension: Lower-case extension without dot; derived from filename if None
    """
    stem, suffix = os.path.splitext(filename)
    if extension is None:
        extension = suffix.lstrip('.').lower()

    if term.kind == TermKind.FILETYPE:
        return MAX_SCORE if extension == term.value else 0

    if term.kind != TermKind.CONTENT:
        return 0

    base = score_file_base(stem, term.value)
    if base == 0:
        return 0

    score = boost_score(base, term.value, extension)
    if has_penalty_term(filename):
        score -= PENALTY

    return clamp_score(score)


def best_file_score(filename: str, extension: str, terms: Iterable[SearchTerm]) -> int:
    """
    Best score of a file across its scoring terms.

    With no scoring terms (a query made only of time terms) every file gets
    MAX_SCORE and the time filters decide.
    """
    terms = list(terms)
    if not terms:
        return MAX_SCORE
    return max(score_file(filename, term, extension) for term in terms)


def best_directory_score(path: str, name: str, terms: Iterable[SearchTerm]) -> int:
    """Best score of a directory across the directory terms."""
    return max((score_directory_entry(path, name, term.value) for term in terms), default=0)
