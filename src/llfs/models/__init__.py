"""
Data models for LLFS.

This module contains all the core data structures used throughout the engine.
"""

from .search_terms import SearchTerm, TermKind, TimeFilter, TimeFilterKind
from .search_results import MAX_SCORE, EntryMetadata, Entry, ScoredEntry, SearchResults
from .config import FinderConfig, LimitsConfig

__all__ = [
    'SearchTerm',
    'TermKind',
    'TimeFilter',
    'TimeFilterKind',
    'MAX_SCORE',
    'EntryMetadata',
    'Entry',
    'ScoredEntry',
    'SearchResults',
    'FinderConfig',
    'LimitsConfig',
]
