"""
Search facade for LLFS.

``search(root_paths, raw_terms)`` is the single entry point: it classifies the
term string, walks the roots, and filters and ranks what the walk found. The
engine keeps no state between calls. Natural-language understanding happens
upstream in a TermExtractor; any conversation context is passed to it
explicitly by the caller.
"""

import time
import logging
from typing import List, Optional, Protocol

from ..config.parser import load_config
from ..models.config import FinderConfig
from ..models.search_results import ScoredEntry, SearchResults
from ..tools.fs_walker import FSWalker
from .classifier import TermSet
from .ranking import filter_and_rank


logger = logging.getLogger(__name__)


class TermExtractor(Protocol):
    """
    Upstream collaborator turning a user query into a term string.

    ``previous_terms`` is the term string of an earlier query the caller wants to
    refine, or an empty string for a fresh search.
    """

    def extract_terms(self, query: str, previous_terms: str = "") -> str:
        ...


def default_config() -> FinderConfig:
    """
    Configuration from LLFS_CONFIG or a discovered config file, else defaults.

    Roots from SEARCH_PATHS override whatever the file says.

    Raises:
        ConfigurationError: If the configuration file is invalid
    """
    result = load_config()
    for warning in result.warnings:
        logger.warning(warning)
    return result.config


class SearchEngine:
    """
    Runs searches against a fixed configuration.

    Attributes:
        config: Roots, ignore patterns and limits used for every search
    """

    def __init__(self, config: Optional[FinderConfig] = None):
        self.config = config or default_config()
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def run(self, raw_terms: Optional[str], roots: Optional[List[str]] = None) -> SearchResults:
        """
        Execute one search.

        Args:
            raw_terms: Comma or pipe separated term string
            roots: Root directories to walk; the configured roots when None

        Returns:
            SearchResults with the ranked matches and walk statistics
        """
        start_time = time.time()
        terms = TermSet.parse(raw_terms)

        if not terms:
            self.logger.info("No usable search terms, skipping filesystem walk")
            return SearchResults(raw_terms=raw_terms or "")

        if roots is not None and not any(root and root.strip() for root in roots):
            self.logger.warning("No root directories given, nothing to search")
            return SearchResults(raw_terms=raw_terms, terms=terms.terms)

        config = self.config if roots is None else self.config.with_roots(roots)

        self.logger.info(f"Searching {len(config.roots)} roots for: {', '.join(str(t) for t in terms.terms)}")

        walker = FSWalker(config)
        candidates = walker.walk(config.roots, terms)
        matches = filter_and_rank(
            candidates,
            terms,
            min_score=config.limits.min_score,
            max_results=config.limits.max_results,
        )
        stats = walker.get_stats()

        results = SearchResults(
            raw_terms=raw_terms,
            terms=terms.terms,
            roots=config.roots,
            matches=matches,
            total_scanned=stats['entries_scanned'],
            total_candidates=len(candidates),
            errors=stats['errors'],
            execution_time=time.time() - start_time,
        )
        self.logger.info(str(results))
        return results

    def find(self, query: str, extractor: TermExtractor, previous_terms: str = "",
             roots: Optional[List[str]] = None) -> SearchResults:
        """Extract terms for a natural-language query, then search with them."""
        raw_terms = extractor.extract_terms(query, previous_terms)
        self.logger.info(f"Extracted terms for '{query}': {raw_terms}")
        return self.run(raw_terms, roots=roots)


def search(root_paths: Optional[List[str]], raw_terms: Optional[str],
           config: Optional[FinderConfig] = None) -> List[ScoredEntry]:
    """
    Search the given roots for entries matching a term string.

    Args:
        root_paths: Ordered root directories; None uses the configured roots
        raw_terms: Term string such as "resume,filetype:pdf"
        config: Engine configuration; loaded by default_config() if omitted

    Returns:
        Ranked scored entries, best first; empty for an empty term string
    """
    if not raw_terms or not raw_terms.strip():
        return []
    return SearchEngine(config).run(raw_terms, roots=root_paths).matches


def find(query: str, extractor: TermExtractor, previous_terms: str = "",
         root_paths: Optional[List[str]] = None,
         config: Optional[FinderConfig] = None) -> SearchResults:
    """Convenience wrapper around SearchEngine.find."""
    return SearchEngine(config).find(query, extractor, previous_terms, roots=root_paths)
