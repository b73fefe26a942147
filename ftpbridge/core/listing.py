"""Turn raw FTP directory listings into ``FileEntry`` objects.

Two listing sources are understood:

* ``MLSD`` facts (RFC 3659), whose ``modify`` fact is always UTC.
* ``LIST`` output in Unix ``ls -l`` style or MS-DOS/IIS style. ``LIST`` does
  not say which timezone its times are in; they are read as UTC.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from loguru import logger

from ..schemas.files import FileEntry

_MONTHS = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}

UNIX_LINE = re.compile(
    r"^(?P<type>[-dlbcps])\S*\s+\d+\s+\S+\s+(?:\S+\s+)?(?P<size>\d+)\s+"
    r"(?P<month>[A-Za-z]{3})\s+(?P<day>\d{1,2})\s+"
    r"(?P<time_or_year>\d{1,2}:\d{2}|\d{4})\s+(?P<name>.+)$"
)

DOS_LINE = re.compile(
    r"^(?P<date>\d{1,2}-\d{1,2}-\d{2,4})\s+(?P<time>\d{1,2}:\d{2}\s*[AaPp][Mm])\s+"
    r"(?P<size><DIR>|\d+)\s+(?P<name>.+)$"
)

SKIPPED_NAMES = {".", ".."}


def parse_mlsd_modify(value: Optional[str]) -> Optional[datetime]:
    """Parse an MLSD ``modify`` fact (``YYYYMMDDHHMMSS[.sss]``, UTC)."""
    if not value:
        return None
    whole, _, fraction = value.partition(".")
    try:
        parsed = datetime.strptime(whole, "%Y%m%d%H%M%S")
    except ValueError:
        return None
    if fraction.isdigit():
        parsed = parsed.replace(microsecond=int(fraction[:6].ljust(6, "0")))
    return parsed.replace(tzinfo=timezone.utc)


def entries_from_mlsd(facts: Iterable[Tuple[str, Dict[str, str]]]) -> List[FileEntry]:
    """Build entries from the ``(name, facts)`` pairs yielded by ``FTP.mlsd``."""
    entries = []
    for name, fact in facts:
        kind = fact.get("type", "").lower()
        if name in SKIPPED_NAMES or kind in ("cdir", "pdir"):
            continue
        size = fact.get("size") or fact.get("sizd") or "0"
        entries.append(
            FileEntry(
                name=name,
                size=int(size) if size.isdigit() else 0,
                is_directory=kind == "dir",
                date_modified=parse_mlsd_modify(fact.get("modify")),
            )
        )
    return entries


def _unix_timestamp(
    month: str, day: str, time_or_year: str, now: datetime
) -> Optional[datetime]:
    month_number = _MONTHS.get(month.lower())
    if month_number is None:
        return None
    try:
        if ":" in time_or_year:
            hour, minute = (int(part) for part in time_or_year.split(":"))
            stamp = datetime(
                now.year, month_number, int(day), hour, minute, tzinfo=timezone.utc
            )
            # Recent entries omit the year; a date ahead of now belongs to last year
            if stamp > now + timedelta(days=1):
                stamp = stamp.replace(year=now.year - 1)
            return stamp
        return datetime(int(time_or_year), month_number, int(day), tzinfo=timezone.utc)
    except ValueError:
        return None


def _dos_timestamp(date: str, time: str) -> Optional[datetime]:
    month, day, year = date.split("-")
    year_format = "%Y" if len(year) == 4 else "%y"
    try:
        parsed = datetime.strptime(
            f"{month}-{day}-{year} {time.replace(' ', '').upper()}",
            f"%m-%d-{year_format} %I:%M%p",
        )
    except ValueError:
        return None
    return parsed.replace(tzinfo=timezone.utc)


def parse_list_line(line: str, now: Optional[datetime] = None) -> Optional[FileEntry]:
    """Parse one ``LIST`` line, returning None for lines that describe no entry."""
    if now is None:
        now = datetime.now(timezone.utc)
    line = line.rstrip("\r\n")

    match = UNIX_LINE.match(line)
    if match:
        name = match.group("name")
        kind = match.group("type")
        if kind == "l" and " -> " in name:
            name = name.split(" -> ", 1)[0]
        if name in SKIPPED_NAMES:
            return None
        return FileEntry(
            name=name,
            size=int(match.group("size")),
            is_directory=kind == "d",
            date_modified=_unix_timestamp(
                match.group("month"),
                match.group("day"),
                match.group("time_or_year"),
                now,
            ),
        )

    match = DOS_LINE.match(line)
    if match:
        name = match.group("name")
        if name in SKIPPED_NAMES:
            return None
        is_directory = match.group("size") == "<DIR>"
        return FileEntry(
            name=name,
            size=0 if is_directory else int(match.group("size")),
            is_directory=is_directory,
            date_modified=_dos_timestamp(match.group("date"), match.group("time")),
        )

    if line.strip() and not line.lower().startswith("total"):
        logger.debug(f"Unrecognized LIST line skipped: {line!r}")
    return None


def entries_from_list(lines: Iterable[str], now: Optional[datetime] = None) -> List[FileEntry]:
    """Build entries from raw ``LIST`` lines."""
    entries = []
    for line in lines:
        entry = parse_list_line(line, now=now)
        if entry is not None:
            entries.append(entry)
    return entries
