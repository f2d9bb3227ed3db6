# bidtracker/services/normalize.py
"""
Normalization helpers for loosely formatted bid data.

None of these functions raise on bad input: dates signal failure with
``None``, statuses fall back to a default and numbers fall back to ``0``.
"""

import math
import re
import logging
from datetime import date, datetime

logger = logging.getLogger(__name__)

BID_STATUSES = ('Active', 'Complete', 'Archived', 'Hot', 'Cold')
SCOPE_STATUSES = ('Pending', 'Won', 'Lost')

DEFAULT_BID_STATUS = 'Active'
DEFAULT_SCOPE_STATUS = 'Pending'

# Every accepted spelling, lower-cased. Unlisted values resolve to DEFAULT_BID_STATUS.
BID_STATUS_SYNONYMS = {
    'active': 'Active',
    'complete': 'Complete',
    'completed': 'Complete',
    'archive': 'Archived',
    'archived': 'Archived',
    'hot': 'Hot',
    'cold': 'Cold',
}

SCOPE_STATUS_LOOKUP = {status.lower(): status for status in SCOPE_STATUSES}

ISO_PREFIX_RE = re.compile(r'^\d{4}-\d{2}-\d{2}')
DAY_FIRST_RE = re.compile(r'^(\d{1,2})[/-](\d{1,2})[/-](\d{4})$')
THOUSANDS_RE = re.compile(r'[,\s]+')

# Tried in order when neither the ISO nor the day-first pattern matches
FALLBACK_DATE_FORMATS = (
    '%Y/%m/%d',
    '%B %d, %Y',
    '%b %d, %Y',
    '%B %d %Y',
    '%b %d %Y',
    '%d %B %Y',
    '%d %b %Y',
    '%a %b %d %Y',
)


def _text(value):
    return '' if value is None else str(value).strip()


def parse_loose_date(text):
    """
    Parse a date from import or form data.

    Accepts ``YYYY-MM-DD`` (optionally followed by a time part),
    ``D/M/YYYY`` or ``D-M-YYYY`` read day-first, and a handful of spelled-out
    formats. Day-first is a fixed business rule for the import sheets and is
    never swapped based on the values.

    Args:
        text: Raw value, usually a string

    Returns:
        date or None: The calendar date, or None when the value is not a valid date
    """
    if isinstance(text, datetime):
        return text.date()
    if isinstance(text, date):
        return text

    value = _text(text)
    if not value:
        return None

    if ISO_PREFIX_RE.match(value):
        try:
            return datetime.fromisoformat(value.replace('Z', '+00:00')).date()
        except ValueError:
            logger.debug(f"Rejected ISO-like date '{value}'")
            return None

    match = DAY_FIRST_RE.match(value)
    if match:
        day, month, year = (int(part) for part in match.groups())
        try:
            return date(year, month, day)
        except ValueError:
            logger.debug(f"Rejected day-first date '{value}'")
            return None

    for fmt in FALLBACK_DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue

    return None


def clean_scope_status(text):
    """
    Canonicalize a scope status.

    Returns 'Pending', 'Won' or 'Lost' for a case-insensitive match, otherwise
    None. Callers pick the default; unspecified is not the same as Pending here.
    """
    return SCOPE_STATUS_LOOKUP.get(_text(text).lower())


def clean_bid_status(text):
    """Canonicalize a bid status. Never returns None; unknown values become 'Active'."""
    return BID_STATUS_SYNONYMS.get(_text(text).lower(), DEFAULT_BID_STATUS)


def to_number_or_zero(value):
    """
    Coerce ``value`` to a float, stripping thousands separators and whitespace.

    Anything that does not parse to a finite number becomes 0.
    """
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        cleaned = THOUSANDS_RE.sub('', _text(value))
        if not cleaned or '_' in cleaned:
            return 0.0
        try:
            number = float(cleaned)
        except ValueError:
            return 0.0
    return number if math.isfinite(number) else 0.0


def sanitize_scopes(raw_scopes):
    """
    Turn incoming scope payloads into persistable scope dicts.

    Empty names are dropped, cost is coerced to a non-negative number and the
    status defaults to Pending. Accepts dicts or objects with ``name``,
    ``cost`` and ``status`` attributes; anything that is not a list yields [].
    """
    if not isinstance(raw_scopes, (list, tuple)):
        return []

    cleaned = []
    for raw in raw_scopes:
        if isinstance(raw, dict):
            name, cost, status = raw.get('name'), raw.get('cost'), raw.get('status')
        else:
            name = getattr(raw, 'name', None)
            cost = getattr(raw, 'cost', None)
            status = getattr(raw, 'status', None)

        name = _text(name)
        if not name:
            continue

        cleaned.append({
            'name': name,
            'cost': max(to_number_or_zero(cost), 0.0),
            'status': clean_scope_status(status) or DEFAULT_SCOPE_STATUS,
        })
    return cleaned
