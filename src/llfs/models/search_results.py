"""
Search results data models for LLFS.

This module defines the data structures produced by a search: the filesystem
metadata captured during the walk, the visited entries, their relevance scores,
and the complete result set of one search invocation.
"""

import os
from typing import Dict, List, Any
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from .search_terms import SearchTerm


MAX_SCORE = 6


class EntryMetadata(BaseModel):
    """
    Filesystem metadata read once per entry at walk time.

    Attributes:
        created: Creation timestamp (st_birthtime where available, else st_ctime)
        modified: Last modification timestamp
        accessed: Last access timestamp
        size: Size in bytes
    """

    created: datetime = Field(..., description="Creation timestamp")
    modified: datetime = Field(..., description="Last modification timestamp")
    accessed: datetime = Field(..., description="Last access timestamp")
    size: int = Field(..., ge=0, description="Size in bytes")

    @classmethod
    def from_stat(cls, stat_result: os.stat_result) -> 'EntryMetadata':
        """
        Build metadata from an ``os.stat_result``.

        Raises OverflowError or OSError when a timestamp is out of range.
        """
        # macOS and BSD expose a real birth time; elsewhere ctime is the closest we get
        created_ts = getattr(stat_result, 'st_birthtime', None)
        if created_ts is None:
            created_ts = stat_result.st_ctime

        return cls(
            created=datetime.fromtimestamp(created_ts),
            modified=datetime.fromtimestamp(stat_result.st_mtime),
            accessed=datetime.fromtimestamp(stat_result.st_atime),
            size=stat_result.st_size,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert metadata to dictionary representation."""
        return {
            'created': self.created.isoformat(),
            'modified': self.modified.isoformat(),
            'accessed': self.accessed.isoformat(),
            'size': self.size,
        }


class Entry(BaseModel):
    """
    One filesystem node visited during a walk.

    Attributes:
        path: Absolute path of the entry
        name: Base name of the entry
        is_directory: Whether the entry is a directory
        metadata: Metadata captured when the entry was visited
    """

    path: str = Field(..., min_length=1, description="Absolute path of the entry")
    name: str = Field(..., min_length=1, description="Base name of the entry")
    is_directory: bool = Field(False, description="Whether the entry is a directory")
    metadata: EntryMetadata = Field(..., description="Filesystem metadata")

    @field_validator('path')
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Make the path absolute without resolving symlinks."""
        if not v or not v.strip():
            raise ValueError("Entry path cannot be empty")
        return os.path.abspath(v)

    @property
    def stem(self) -> str:
        """Base name without its final extension."""
        if self.is_directory:
            return self.name
        return os.path.splitext(self.name)[0]

    @property
    def extension(self) -> str:
        """Lower-case extension without the leading dot, empty when there is none."""
        if self.is_directory:
            return ''
        return os.path.splitext(self.name)[1].lstrip('.').lower()


class ScoredEntry(BaseModel):
    """
    An entry together with its relevance score.

    Attributes:
        entry: The visited filesystem entry
        score: Relevance score in [0, MAX_SCORE]
        is_directory: Whether the entry is a directory
    """

    entry: Entry = Field(..., description="The scored filesystem entry")
    score: int = Field(..., ge=0, le=MAX_SCORE, description="Relevance score")
    is_directory: bool = Field(False, description="Whether the entry is a directory")

    @property
    def path(self) -> str:
        return self.entry.path

    @property
    def name(self) -> str:
        return self.entry.name

    @property
    def metadata(self) -> EntryMetadata:
        return self.entry.metadata

    def to_dict(self) -> Dict[str, Any]:
        """Convert the scored entry to dictionary representation."""
        return {
            'path': self.path,
            'score': self.score,
            'is_directory': self.is_directory,
            'metadata': self.metadata.to_dict(),
        }

    def __str__(self) -> str:
        kind = "dir" if self.is_directory else "file"
        return f"{self.path} ({kind}, score: {self.score})"


class SearchResults(BaseModel):
    """
    Complete results from one search invocation.

    Attributes:
        raw_terms: The term string as received
        terms: The classified terms that produced these results
        roots: Root directories that were walked
        matches: Ranked matches, best first
        total_scanned: Number of entries examined during the walk
        total_candidates: Number of positively scored entries before filtering
        errors: Number of entries or subtrees skipped because of I/O errors
        execution_time: Time taken by the search in seconds
        timestamp: When the search was executed
    """

    raw_terms: str = Field("", description="Term string as received")
    terms: List[SearchTerm] = Field(default_factory=list, description="Classified search terms")
    roots: List[str] = Field(default_factory=list, description="Root directories walked")
    matches: List[ScoredEntry] = Field(default_factory=list, description="Ranked matches")
    total_scanned: int = Field(0, ge=0, description="Entries examined during the walk")
    total_candidates: int = Field(0, ge=0, description="Scored entries before filtering")
    errors: int = Field(0, ge=0, description="Entries or subtrees skipped on I/O errors")
    execution_time: float = Field(0.0, ge=0.0, description="Search duration in seconds")
    timestamp: datetime = Field(default_factory=datetime.now, description="When the search ran")

    def get_match_count(self) -> int:
        return len(self.matches)

    def get_directories(self) -> List[ScoredEntry]:
        return [match for match in self.matches if match.is_directory]

    def get_files(self) -> List[ScoredEntry]:
        return [match for match in self.matches if not match.is_directory]

    def to_dict(self) -> Dict[str, Any]:
        """Convert search results to dictionary representation."""
        matches = []
        for rank, match in enumerate(self.matches, 1):
            data = match.to_dict()
            data['rank'] = rank
            matches.append(data)

        return {
            'raw_terms': self.raw_terms,
            'terms': [str(term) for term in self.terms],
            'roots': list(self.roots),
            'matches': matches,
            'match_count': self.get_match_count(),
            'total_scanned': self.total_scanned,
            'total_candidates': self.total_candidates,
            'errors': self.errors,
            'execution_time': self.execution_time,
            'timestamp': self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        """String representation of search results."""
        parts = [f"Found {self.get_match_count()} matches"]
        parts.append(f"Scanned {self.total_scanned} entries")
        parts.append(f"Took {self.execution_time:.2f}s")

        if self.errors:
            parts.append(f"Errors: {self.errors}")

        return " | ".join(parts)
