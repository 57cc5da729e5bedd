"""
Filesystem walker for LLFS.

This module traverses the search roots, reads metadata for every entry, and scores
files and directories against classified search terms. Each subtree is walked by a
recursive call that returns its own list of scored entries; the caller merges them.
Unreadable entries and directories are logged and skipped, never raised.
"""

import os
import time
import threading
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Set, Tuple

from ..models.config import FinderConfig, LimitsConfig
from ..models.search_results import Entry, EntryMetadata, ScoredEntry
from ..search.classifier import TermSet
from ..search.scoring import best_directory_score, best_file_score


logger = logging.getLogger(__name__)


def _new_stats() -> Dict[str, int]:
    return {
        'entries_scanned': 0,
        'entries_matched': 0,
        'directories_traversed': 0,
        'entries_ignored': 0,
        'errors': 0
    }


class WalkBudget:
    """
    Time and entry-count budget shared by all roots of one search.

    Once exhausted it stays exhausted; the walk keeps what it has collected.
    """

    def __init__(self, limits: LimitsConfig, clock=time.monotonic):
        self._clock = clock
        self.deadline = clock() + limits.timeout_seconds
        self.max_entries = limits.max_files
        self.entries = 0
        self.exhausted_reason: Optional[str] = None
        self._lock = threading.Lock()

    def consume(self) -> bool:
        """Account for one more entry; False once the budget is spent."""
        with self._lock:
            if self.exhausted_reason:
                return False

            if self._clock() > self.deadline:
                self.exhausted_reason = "time budget exceeded"
            elif self.entries >= self.max_entries:
                self.exhausted_reason = f"entry limit of {self.max_entries} reached"
            else:
                self.entries += 1
                return True

        logger.warning(f"Stopping walk: {self.exhausted_reason}")
        return False


class _RootWalk:
    """State owned by the walk of a single root."""

    def __init__(self, root: str):
        self.root = root
        self.stats = _new_stats()
        self.visited: Set[Tuple[int, int]] = set()


class FSWalker:
    """
    Filesystem walker that enumerates entries and scores them.

    Behaviour depends on the terms:
    - with directory terms, directories are scored against them and a matched
      directory is a result, not a path to traverse further (unless file terms
      also exist, in which case the walk descends but never reports a directory
      nested inside one already matched);
    - files are scored when the query selects files: any content term, or,
      without directory terms, filetype or time terms alone.

    A directory scoring at or below the relevance floor is still reported as a
    candidate but is walked like any other directory.
    """

    def __init__(self, config: FinderConfig):
        """
        Initialize the filesystem walker.

        Args:
            config: Configuration object containing ignore patterns and limits
        """
        self.config = config
        self._stats = _new_stats()

    def walk(self, roots: List[str], terms: TermSet,
             budget: Optional[WalkBudget] = None) -> List[ScoredEntry]:
        """
        Walk the root directories and return every positively scored entry.

        Args:
            roots: Root directory paths, walked in order
            terms: Classified search terms
            budget: Shared walk budget; a fresh one is created if omitted

        Returns:
            Scored entries from all roots, in root order
        """
        self.reset_stats()
        if not terms or not roots:
            return []

        budget = budget or WalkBudget(self.config.limits)
        workers = max(1, min(self.config.limits.max_concurrent, len(roots)))

        if workers == 1:
            walks = [self._walk_root(root, terms, budget) for root in roots]
        else:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                walks = list(executor.map(lambda root: self._walk_root(root, terms, budget), roots))

        results: List[ScoredEntry] = []
        for root_results, root_walk in walks:
            results.extend(root_results)
            for key, value in root_walk.stats.items():
                self._stats[key] += value

        logger.info(
            f"Walked {len(roots)} roots: {self._stats['entries_scanned']} entries scanned, "
            f"{len(results)} candidates"
        )
        return results

    def _walk_root(self, root: str, terms: TermSet,
                   budget: WalkBudget) -> Tuple[List[ScoredEntry], _RootWalk]:
        """Walk one root; failures are logged and yield no results."""
        root_walk = _RootWalk(os.path.abspath(os.path.expanduser(root)))
        root_path = root_walk.root

        if not os.path.exists(root_path):
            logger.warning(f"Root directory does not exist: {root_path}")
            return [], root_walk

        if not os.path.isdir(root_path):
            logger.warning(f"Root path is not a directory: {root_path}")
            return [], root_walk

        logger.info(f"Walking directory tree: {root_path}")
        try:
            if self.config.follow_symlinks:
                root_stat = os.stat(root_path)
                root_walk.visited.add((root_stat.st_dev, root_stat.st_ino))

            results = self._walk_directory(root_path, 1, terms, budget, root_walk, inside_match=False)
        except Exception as e:
            logger.error(f"Error walking root {root_path}: {e}")
            root_walk.stats['errors'] += 1
            results = []

        return results, root_walk

    def _walk_directory(self, dir_path: str, depth: int, terms: TermSet, budget: WalkBudget,
                        root_walk: _RootWalk, inside_match: bool) -> List[ScoredEntry]:
        """
        Recursively walk one directory.

        Args:
            dir_path: Directory to list
            depth: Depth of this directory's children below the root
            terms: Classified search terms
            budget: Shared walk budget
            root_walk: State of the current root walk
            inside_match: Whether an ancestor directory was already reported

        Returns:
            Scored entries found in this subtree
        """
        results: List[ScoredEntry] = []
        stats = root_walk.stats

        try:
            with os.scandir(dir_path) as iterator:
                children = sorted(iterator, key=lambda e: e.name)
        except OSError as e:
            logger.warning(f"Cannot read directory {dir_path}: {e}")
            stats['errors'] += 1
            return results

        stats['directories_traversed'] += 1

        for child in children:
            if self.config.should_ignore(child.name):
                stats['entries_ignored'] += 1
                continue

            if not budget.consume():
                break

            stats['entries_scanned'] += 1

            try:
                is_dir = child.is_dir(follow_symlinks=self.config.follow_symlinks)
                stat_result = child.stat(follow_symlinks=self.config.follow_symlinks)
                metadata = EntryMetadata.from_stat(stat_result)
            except (OSError, ValueError, OverflowError) as e:
                logger.warning(f"Skipping {child.path}: cannot read metadata: {e}")
                stats['errors'] += 1
                continue

            if is_dir:
                matched = False
                if terms.has_directory_terms and not inside_match:
                    relative = os.path.relpath(child.path, root_walk.root)
                    score = best_directory_score(relative, child.name, terms.directories)
                    if score > 0:
                        logger.debug(f"Directory match {child.path} (score: {score})")
                        results.append(self._scored(child, True, metadata, score))
                        stats['entries_matched'] += 1
                        matched = score > self.config.limits.min_score

                # A matched directory is the answer, not a path, unless files are wanted too
                if matched and not terms.has_file_terms:
                    continue

                if depth >= self.config.limits.max_depth:
                    logger.debug(f"Not descending into {child.path}: depth limit reached")
                    continue

                if self.config.follow_symlinks and not self._first_visit(stat_result, root_walk):
                    logger.debug(f"Not descending into {child.path}: already visited")
                    continue

                results.extend(self._walk_directory(
                    child.path, depth + 1, terms, budget, root_walk, inside_match or matched
                ))

            elif terms.has_file_terms:
                extension = os.path.splitext(child.name)[1].lstrip('.').lower()
                score = best_file_score(child.name, extension, terms.file_scoring_terms)
                if score > 0:
                    logger.debug(f"File match {child.path} (score: {score})")
                    results.append(self._scored(child, False, metadata, score))
                    stats['entries_matched'] += 1

        return results

    def _first_visit(self, stat_result: os.stat_result, root_walk: _RootWalk) -> bool:
        """Record a directory reached while following symlinks; False on a repeat."""
        key = (stat_result.st_dev, stat_result.st_ino)
        if key in root_walk.visited:
            return False
        root_walk.visited.add(key)
        return True

    @staticmethod
    def _scored(child: os.DirEntry, is_dir: bool, metadata: EntryMetadata, score: int) -> ScoredEntry:
        entry = Entry(path=child.path, name=child.name, is_directory=is_dir, metadata=metadata)
        return ScoredEntry(entry=entry, score=score, is_directory=is_dir)

    def get_stats(self) -> Dict[str, int]:
        """
        Get statistics about the last walk.

        Returns:
            Dictionary containing operation statistics
        """
        return self._stats.copy()

    def reset_stats(self) -> None:
        """Reset the statistics counters."""
        self._stats = _new_stats()
