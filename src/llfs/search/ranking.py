"""
Result filtering and ranking.

Takes every positively scored entry from a walk and decides which survive:
relevance floor, requested extensions, time predicates and AND semantics across
several content terms. Survivors are de-duplicated, sorted by score (ties broken
by path) and capped. Running the filter on its own output changes nothing.
"""

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from ..models.search_results import ScoredEntry
from .classifier import TermSet
from .scoring import score_file_base
from .time_filters import passes_time_filters


logger = logging.getLogger(__name__)

DEFAULT_MIN_SCORE = 2
DEFAULT_MAX_RESULTS = 50


def matches_all_content_terms(candidate: ScoredEntry, terms: TermSet) -> bool:
    """Each content term must independently match the file's name."""
    stem = candidate.entry.stem
    return all(score_file_base(stem, term.value) > 0 for term in terms.content)


def rank_key(candidate: ScoredEntry):
    return (-candidate.score, candidate.path)


def deduplicate(candidates: Iterable[ScoredEntry]) -> List[ScoredEntry]:
    """Keep the best scored candidate per path, in first-seen order."""
    best: Dict[str, ScoredEntry] = {}
    for candidate in candidates:
        current = best.get(candidate.path)
        if current is None or candidate.score > current.score:
            best[candidate.path] = candidate
    return list(best.values())


def filter_and_rank(candidates: Iterable[ScoredEntry],
                    terms: TermSet,
                    min_score: int = DEFAULT_MIN_SCORE,
                    max_results: int = DEFAULT_MAX_RESULTS,
                    now: Optional[datetime] = None) -> List[ScoredEntry]:
    """
    Filter, sort and cap scored candidates.

    Args:
        candidates: Positively scored files and directories
        terms: The classified terms the candidates were scored against
        min_score: Entries scoring at or below this are dropped
        max_results: Maximum number of entries returned
        now: Reference time for time predicates (defaults to now)

    Returns:
        Ranked entries, best first
    """
    if not terms:
        return []

    candidates = list(candidates)
    now = now or datetime.now()
    extensions = set(terms.requested_extensions)
    time_filters = [term.time_filter for term in terms.times]
    require_all_content = len(terms.content) > 1

    kept = []
    for candidate in candidates:
        if candidate.score <= min_score:
            continue

        if extensions and not candidate.is_directory and candidate.entry.extension not in extensions:
            continue

        if time_filters and not passes_time_filters(candidate.metadata, time_filters, now):
            continue

        if require_all_content and not candidate.is_directory \
                and not matches_all_content_terms(candidate, terms):
            continue

        kept.append(candidate)

    ranked = sorted(deduplicate(kept), key=rank_key)
    if len(ranked) > max_results:
        logger.info(f"Capping {len(ranked)} results at {max_results}")

    logger.debug(f"Kept {len(kept)} of {len(candidates)} candidates")
    return ranked[:max_results]
