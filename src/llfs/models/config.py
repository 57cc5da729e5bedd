"""
Configuration data models for LLFS.

This module defines the data structures for managing engine configuration,
including the search roots, ignore patterns, symlink handling, and the limits
that bound a single search.
"""

import os
import fnmatch
from typing import Dict, List, Any, Optional, Mapping
from pathlib import Path
from pydantic import BaseModel, Field, field_validator, ValidationError


SEARCH_PATHS_ENV = "SEARCH_PATHS"

DEFAULT_IGNORE_PATTERNS = [
    ".git",
    ".svn",
    ".hg",
    "node_modules",
    "__pycache__",
    ".pytest_cache",
    ".venv",
    "venv",
    ".Trash",
    ".DS_Store",
    "Thumbs.db",
]


def default_search_paths() -> List[str]:
    """Current directory plus the user's Documents, Downloads and Desktop folders."""
    home = Path.home()
    return [
        str(Path.cwd()),
        str(home / "Documents"),
        str(home / "Downloads"),
        str(home / "Desktop"),
    ]


def roots_from_environment(environ: Optional[Mapping[str, str]] = None) -> Optional[List[str]]:
    """
    Read root paths from the SEARCH_PATHS environment variable.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        List of paths, or None when the variable is unset or blank
    """
    environ = os.environ if environ is None else environ
    value = environ.get(SEARCH_PATHS_ENV, "")
    roots = [part.strip() for part in value.split(",") if part.strip()]
    return roots or None


class LimitsConfig(BaseModel):
    """
    Configuration for the limits that bound one search.

    Attributes:
        max_results: Maximum number of ranked results returned
        min_score: Entries scoring at or below this are dropped
        max_depth: Maximum directory depth below a root
        max_files: Maximum number of entries examined per search
        timeout_seconds: Wall-clock budget for the walk
        max_concurrent: Number of roots walked in parallel
    """

    max_results: int = Field(50, gt=0, description="Maximum number of ranked results")
    min_score: int = Field(2, ge=0, le=6, description="Relevance floor (exclusive)")
    max_depth: int = Field(32, gt=0, description="Maximum directory depth below a root")
    max_files: int = Field(200000, gt=0, description="Maximum number of entries examined")
    timeout_seconds: float = Field(300, gt=0, description="Wall-clock budget for the walk")
    max_concurrent: int = Field(4, gt=0, description="Number of roots walked in parallel")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return self.model_dump()


class FinderConfig(BaseModel):
    """
    Main configuration class for LLFS.

    Attributes:
        roots: Root directories to search, in order
        ignore: Glob patterns matched against entry names; matches are skipped
        follow_symlinks: Whether symlinked directories are descended into
        limits: Search limits and budgets
    """

    roots: List[str] = Field(default_factory=default_search_paths, description="Root directories to search")
    ignore: List[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORE_PATTERNS),
        description="Glob patterns for entry names to skip"
    )
    follow_symlinks: bool = Field(False, description="Whether to descend into symlinked directories")
    limits: LimitsConfig = Field(default_factory=LimitsConfig, description="Search limits and budgets")

    @field_validator('roots')
    @classmethod
    def validate_roots(cls, v: List[str]) -> List[str]:
        """Expand, absolutize and de-duplicate root directories."""
        normalized_roots = []
        for root in v:
            if not root or not str(root).strip():
                continue

            root_path = os.path.abspath(os.path.expanduser(str(root).strip()))
            if root_path not in normalized_roots:
                normalized_roots.append(root_path)

        if not normalized_roots:
            raise ValueError("At least one root directory must be specified")

        return normalized_roots

    @field_validator('ignore')
    @classmethod
    def validate_ignore_patterns(cls, v: List[str]) -> List[str]:
        """Drop blanks and comments from ignore patterns."""
        patterns = []
        for pattern in v:
            if not pattern or not pattern.strip():
                continue

            pattern = pattern.strip()
            if pattern.startswith('#'):
                continue

            # Patterns match single entry names, never paths
            patterns.append(pattern.rstrip('/'))

        return patterns

    def should_ignore(self, name: str) -> bool:
        """Check whether an entry name matches any ignore pattern."""
        return any(fnmatch.fnmatchcase(name, pattern) for pattern in self.ignore)

    def with_roots(self, roots: List[str]) -> 'FinderConfig':
        """Return a copy of this configuration searching the given roots."""
        data = self.model_dump()
        data['roots'] = list(roots)
        return FinderConfig.model_validate(data)

    def is_root_accessible(self, root: str) -> bool:
        """Check if a root directory is accessible."""
        try:
            return os.path.isdir(root) and os.access(root, os.R_OK | os.X_OK)
        except OSError:
            return False

    def get_accessible_roots(self) -> List[str]:
        return [root for root in self.roots if self.is_root_accessible(root)]

    def get_inaccessible_roots(self) -> List[str]:
        return [root for root in self.roots if not self.is_root_accessible(root)]

    def validate_configuration(self) -> List[str]:
        """Validate the complete configuration and return any warnings."""
        warnings = []

        inaccessible = self.get_inaccessible_roots()
        if inaccessible:
            warnings.append(f"Inaccessible root directories: {', '.join(inaccessible)}")

        for i, root1 in enumerate(self.roots):
            for root2 in self.roots[i + 1:]:
                outer, inner = (root1, root2) if len(root1) <= len(root2) else (root2, root1)
                if inner.startswith(outer.rstrip(os.sep) + os.sep):
                    warnings.append(
                        f"Root directory '{inner}' is nested under '{outer}'; "
                        f"it will be walked twice"
                    )

        if self.follow_symlinks:
            warnings.append("Following symlinks may walk the same directories more than once")

        return warnings

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary representation."""
        data = self.model_dump()
        data['limits'] = self.limits.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FinderConfig':
        """Create configuration from dictionary representation."""
        return cls.model_validate(data)

    def __str__(self) -> str:
        """String representation of the configuration."""
        parts = [f"Roots: {len(self.roots)} directories"]
        parts.append(f"Ignore patterns: {len(self.ignore)}")
        parts.append(f"Follow symlinks: {self.follow_symlinks}")
        parts.append(f"Max results: {self.limits.max_results}")

        return " | ".join(parts)


def validate_config_dict(config_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate a configuration dictionary using Pydantic.

    Args:
        config_data: Dictionary containing configuration data

    Returns:
        Validated and normalized configuration dictionary

    Raises:
        ValueError: If configuration is invalid
    """
    unknown = set(config_data) - set(FinderConfig.model_fields)
    if unknown:
        raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

    try:
        config = FinderConfig.model_validate(config_data)
    except ValidationError as e:
        raise ValueError(str(e)) from e

    return config.to_dict()
