# timeutil.py
from datetime import datetime, timezone
import re


def utcnow() -> datetime:
    """Current time as naive UTC, the form stored in SQLite."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_lenient_iso_to_naive_utc(s: str | None):
    """
    Accepts '2025-09-07T18:30:00Z', '...+00:00', or even the bad '...+00:00Z'.
    Returns a naive UTC datetime (tzinfo=None) for SQLite, None for empty input.
    Raises ValueError when the text is not a date at all.
    """
    if not s:
        return None
    s = s.strip()
    if s.endswith("Z") and re.search(r"[+-]\d{2}:?\d{2}$", s[:-1]):
        s = s[:-1]                     # drop the stray Z if an offset is present
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"          # make 'Z' parseable

    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        # last resort: strip a trailing offset/Z and parse as naive
        s2 = re.sub(r"([+-]\d{2}:?\d{2}|Z)$", "", s)
        dt = datetime.fromisoformat(s2)

    if dt.tzinfo:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def iso_utc(d: datetime | None):
    """Safe ISO string for JSON. Returns None if d is None."""
    if d is None:
        return None
    if d.tzinfo:
        d = d.astimezone(timezone.utc).replace(tzinfo=None)
    return d.replace(microsecond=0).isoformat() + "Z"
