"""
Search term data models for LLFS.

This module defines the typed representation of a classified search term string,
including the term kinds produced by prefix dispatch and the parsed time filters
carried by time terms.
"""

from typing import Optional
from datetime import datetime
from enum import Enum
from pydantic import BaseModel, Field, field_validator, model_validator


class TermKind(Enum):
    """Enumeration of search term kinds."""
    CONTENT = "content"
    DIRECTORY = "directory"
    FILETYPE = "filetype"
    TIME = "time"


class TimeFilterKind(Enum):
    """Enumeration of supported time predicates."""
    TODAY = "today"
    YESTERDAY = "yesterday"
    THIS_WEEK = "thisweek"
    THIS_MONTH = "thismonth"
    BEFORE = "before"
    AFTER = "after"
    INVALID = "invalid"


class TimeFilter(BaseModel):
    """
    Parsed form of a time term value.

    Attributes:
        kind: Which predicate to apply
        date: Reference date for BEFORE/AFTER predicates
        raw: The original term value, kept for logging
    """

    kind: TimeFilterKind = Field(..., description="Time predicate kind")
    date: Optional[datetime] = Field(None, description="Reference date for before/after")
    raw: str = Field("", description="Original term value")

    @model_validator(mode='after')
    def validate_reference_date(self):
        """Before/after predicates need a reference date."""
        if self.kind in (TimeFilterKind.BEFORE, TimeFilterKind.AFTER) and self.date is None:
            raise ValueError(f"Time filter '{self.kind.value}' requires a reference date")
        return self

    def is_valid(self) -> bool:
        return self.kind != TimeFilterKind.INVALID


class SearchTerm(BaseModel):
    """
    One classified unit of a parsed search query.

    Attributes:
        kind: Term kind derived from the value prefix
        value: Lower-cased, trimmed value with the prefix removed
        time_filter: Parsed predicate for TIME terms, None otherwise
    """

    kind: TermKind = Field(..., description="Kind of search term")
    value: str = Field(..., min_length=1, description="Normalized term value")
    time_filter: Optional[TimeFilter] = Field(None, description="Parsed time predicate")

    @field_validator('value')
    @classmethod
    def validate_value(cls, v: str) -> str:
        """Normalize the term value."""
        if not v or not v.strip():
            raise ValueError("Search term value cannot be empty")
        return v.strip().lower()

    @field_validator('kind', mode='before')
    @classmethod
    def validate_kind(cls, v) -> TermKind:
        """Ensure kind is a TermKind enum."""
        if isinstance(v, str):
            try:
                return TermKind(v)
            except ValueError:
                raise ValueError(f"Invalid term kind: {v}")
        return v

    @model_validator(mode='after')
    def validate_time_filter(self):
        """Only time terms carry a time filter, and they always do."""
        if self.kind == TermKind.TIME and self.time_filter is None:
            raise ValueError("Time terms require a parsed time filter")
        if self.kind != TermKind.TIME and self.time_filter is not None:
            raise ValueError(f"{self.kind.value} terms cannot carry a time filter")
        return self

    @property
    def is_content(self) -> bool:
        return self.kind == TermKind.CONTENT

    @property
    def is_directory(self) -> bool:
        return self.kind == TermKind.DIRECTORY

    @property
    def is_filetype(self) -> bool:
        return self.kind == TermKind.FILETYPE

    @property
    def is_time(self) -> bool:
        return self.kind == TermKind.TIME

    def __str__(self) -> str:
        """Render the term back in its prefixed form."""
        prefixes = {
            TermKind.DIRECTORY: 'dir:',
            TermKind.FILETYPE: 'filetype:',
            TermKind.TIME: 'time:',
        }
        return f"{prefixes.get(self.kind, '')}{self.value}"
