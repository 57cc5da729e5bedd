"""
Time term parsing and evaluation.

Time terms arrive as ``time:today``, ``time:thisweek`` or ``date:before:2024-01-31``.
They are parsed once into a TimeFilter and later evaluated against the created and
modified timestamps of each entry.
"""

import re
import logging
from datetime import datetime, timedelta
from typing import Iterable, Optional

from ..models.search_terms import TimeFilter, TimeFilterKind
from ..models.search_results import EntryMetadata


logger = logging.getLogger(__name__)

DATE_FORMATS = [
    '%Y-%m-%d',
    '%Y-%m-%d %H:%M:%S',
    '%Y-%m-%dT%H:%M:%S',
    '%Y-%m-%dT%H:%M:%SZ',
    '%Y/%m/%d',
    '%m/%d/%Y',
    '%d.%m.%Y',
    '%Y-%m',
    '%Y',
]

_KEYWORDS = {
    'today': TimeFilterKind.TODAY,
    'yesterday': TimeFilterKind.YESTERDAY,
    'thisweek': TimeFilterKind.THIS_WEEK,
    'thismonth': TimeFilterKind.THIS_MONTH,
}

_RANGE_RE = re.compile(r'^(before|after)[:\s]+(.+)$')


def parse_date(value: str) -> Optional[datetime]:
    """
    Parse an absolute date string.

    Args:
        value: Date text such as "2024-01-31" or "2024/01/31 10:00:00"

    Returns:
        Parsed datetime, or None when no known format matches
    """
    value = value.strip()

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue

    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def parse_time_filter(value: str) -> TimeFilter:
    """
    Parse the value of a time term.

    Unknown keywords and unparsable dates produce an INVALID filter, which rejects
    every entry when evaluated.
    """
    raw = value.strip().lower()

    keyword = re.sub(r'[\s_\-]+', '', raw)
    if keyword in _KEYWORDS:
        return TimeFilter(kind=_KEYWORDS[keyword], raw=raw)

    match = _RANGE_RE.match(raw)
    if match:
        direction, date_text = match.groups()
        date = parse_date(date_text)
        if date is not None:
            kind = TimeFilterKind.BEFORE if direction == 'before' else TimeFilterKind.AFTER
            return TimeFilter(kind=kind, date=date, raw=raw)
        logger.warning(f"Unparsable date in time term '{raw}'; it will match nothing")
    else:
        logger.warning(f"Unknown time term '{raw}'; it will match nothing")

    return TimeFilter(kind=TimeFilterKind.INVALID, raw=raw)


def timestamp_matches(timestamp: datetime, time_filter: TimeFilter, now: datetime) -> bool:
    """Check a single timestamp against a time filter."""
    kind = time_filter.kind

    if kind == TimeFilterKind.TODAY:
        return timestamp.date() == now.date()
    if kind == TimeFilterKind.YESTERDAY:
        return timestamp.date() == (now - timedelta(days=1)).date()
    if kind == TimeFilterKind.THIS_WEEK:
        return timedelta(0) <= now - timestamp <= timedelta(days=7)
    if kind == TimeFilterKind.THIS_MONTH:
        return (timestamp.year, timestamp.month) == (now.year, now.month)
    if kind == TimeFilterKind.BEFORE:
        return timestamp < time_filter.date
    if kind == TimeFilterKind.AFTER:
        return timestamp > time_filter.date

    return False


def metadata_matches(metadata: EntryMetadata, time_filter: TimeFilter, now: datetime) -> bool:
    """A filter passes when either the created or the modified time satisfies it."""
    return (timestamp_matches(metadata.created, time_filter, now)
            or timestamp_matches(metadata.modified, time_filter, now))


def passes_time_filters(metadata: EntryMetadata,
                        time_filters: Iterable[TimeFilter],
                        now: Optional[datetime] = None) -> bool:
    """Every filter must pass."""
    now = now or datetime.now()
    return all(metadata_matches(metadata, time_filter, now) for time_filter in time_filters)
