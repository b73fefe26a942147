"""Fixed-offset civil calendar helpers.

"Today" for the partner is a calendar day in a fixed UTC offset (UTC-3 by
default), independent of the timezone the server process runs in. All
arithmetic goes through aware ``datetime`` objects so day, month and year
rollovers are handled by the standard library rather than by hand.
"""

from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Tuple, Union

from ..schemas.files import FileEntry

TimestampLike = Union[datetime, str, None]


def fixed_offset(hours: float) -> timezone:
    """Return a ``timezone`` for a fixed offset in hours from UTC."""
    return timezone(timedelta(hours=hours))


BUSINESS_TIMEZONE = fixed_offset(-3)


def ensure_aware(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_timestamp(value: TimestampLike) -> Optional[datetime]:
    """Parse a modification timestamp into an aware datetime.

    Accepts datetimes and ISO-8601 strings (a trailing ``Z`` is read as UTC).
    Naive values are taken to be UTC. Returns None when the value cannot be
    interpreted.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return ensure_aware(value)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return ensure_aware(parsed)


def civil_day_bounds(
    now: datetime, tz: timezone = BUSINESS_TIMEZONE
) -> Tuple[datetime, datetime]:
    """Return the first and last millisecond of ``now``'s calendar day in ``tz``.

    Both bounds are aware datetimes in ``tz``; the window is inclusive.
    """
    local = ensure_aware(now).astimezone(tz)
    start = local.replace(hour=0, minute=0, second=0, microsecond=0)
    end = local.replace(hour=23, minute=59, second=59, microsecond=999000)
    return start, end


def filter_modified_today(
    entries: Iterable[FileEntry],
    now: Optional[datetime] = None,
    tz: timezone = BUSINESS_TIMEZONE,
) -> List[FileEntry]:
    """Keep entries modified during the current civil day in ``tz``.

    Entries without a usable modification time are dropped.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    start, end = civil_day_bounds(now, tz)

    todays = []
    for entry in entries:
        modified = parse_timestamp(entry.date_modified)
        if modified is None:
            continue
        if start <= modified.astimezone(tz) <= end:
            todays.append(entry)
    return todays


def format_civil(value: TimestampLike, tz: timezone = BUSINESS_TIMEZONE) -> str:
    """Render a timestamp as ``dd/mm/yyyy HH:MM:SS`` in ``tz``.

    Unparseable values render as an empty string.
    """
    parsed = parse_timestamp(value)
    if parsed is None:
        return ""
    return parsed.astimezone(tz).strftime("%d/%m/%Y %H:%M:%S")
