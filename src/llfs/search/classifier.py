"""
Term classifier.

Turns the raw term string produced by the term extractor, for example
``resume,filetype:pdf,dir:projects,time:today``, into an ordered list of typed
SearchTerm objects. Prefixes are dispatched once here; nothing downstream
re-parses them.
"""

import re
import logging
from typing import List, Optional

from ..models.search_terms import SearchTerm, TermKind
from .categories import STOP_WORDS
from .time_filters import parse_time_filter


logger = logging.getLogger(__name__)

TERM_SEPARATORS = re.compile(r'[,|]')

# Longest prefixes first so "filetype:" is never mistaken for something shorter
PREFIXES = [
    ('filetype:', TermKind.FILETYPE),
    ('time:', TermKind.TIME),
    ('date:', TermKind.TIME),
    ('dir:', TermKind.DIRECTORY),
]


def classify_term(raw_term: str) -> Optional[SearchTerm]:
    """
    Classify a single raw term.

    Args:
        raw_term: One piece of the term string, e.g. "dir:Projects"

    Returns:
        The classified term, or None when the piece carries no usable value
    """
    text = raw_term.strip().strip('"\'').strip().lower()
    if not text:
        return None

    kind = TermKind.CONTENT
    for prefix, prefix_kind in PREFIXES:
        if text.startswith(prefix):
            kind = prefix_kind
            text = text[len(prefix):].strip()
            break

    if kind == TermKind.FILETYPE:
        text = text.lstrip('.')

    if not text:
        logger.debug(f"Dropping empty term '{raw_term}'")
        return None

    if kind == TermKind.CONTENT and text in STOP_WORDS:
        logger.debug(f"Dropping stop-word '{text}'")
        return None

    if kind == TermKind.TIME:
        return SearchTerm(kind=kind, value=text, time_filter=parse_time_filter(text))

    return SearchTerm(kind=kind, value=text)


def parse_terms(raw: Optional[str]) -> List[SearchTerm]:
    """
    Parse a comma or pipe separated term string.

    Args:
        raw: Term string from the extractor; None or blank yields no terms

    Returns:
        Classified terms in their original order
    """
    if not raw or not raw.strip():
        return []

    terms = []
    for piece in TERM_SEPARATORS.split(raw):
        term = classify_term(piece)
        if term is not None:
            terms.append(term)

    logger.debug(f"Classified {len(terms)} terms from '{raw}'")
    return terms


class TermSet:
    """
    Classified terms grouped by kind, preserving order within each group.
    """

    def __init__(self, terms: List[SearchTerm]):
        self.terms = list(terms)
        self.content = [t for t in self.terms if t.kind == TermKind.CONTENT]
        self.directories = [t for t in self.terms if t.kind == TermKind.DIRECTORY]
        self.filetypes = [t for t in self.terms if t.kind == TermKind.FILETYPE]
        self.times = [t for t in self.terms if t.kind == TermKind.TIME]

    @classmethod
    def parse(cls, raw: Optional[str]) -> 'TermSet':
        return cls(parse_terms(raw))

    def __bool__(self) -> bool:
        return bool(self.terms)

    def __len__(self) -> int:
        return len(self.terms)

    @property
    def has_directory_terms(self) -> bool:
        return bool(self.directories)

    @property
    def has_file_terms(self) -> bool:
        """
        Whether any term selects files rather than directories.

        Alongside directory terms only content terms select files; time and
        filetype terms then just filter the directories found.
        """
        if self.directories:
            return bool(self.content)
        return bool(self.content or self.filetypes or self.times)

    @property
    def requested_extensions(self) -> List[str]:
        return [t.value for t in self.filetypes]

    @property
    def file_scoring_terms(self) -> List[SearchTerm]:
        """
        Terms files are scored against: content terms when present, otherwise
        filetype terms. Time terms never score; they only filter.
        """
        return self.content or self.filetypes
