"""Time conversions.

The simulation clock runs on a uniform terrestrial time scale (TT). Reported
events are converted to civil time with a polynomial model of
ΔT = TT - UT.
"""
from datetime import datetime, timedelta, timezone

from . import constants as C

UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_ns(dt: datetime) -> int:
    """Nanoseconds since the Unix epoch. Naive datetimes are taken as UTC."""
    return ((as_utc(dt) - UNIX_EPOCH) // timedelta(microseconds=1)) * 1000


def from_ns(ns: int) -> datetime:
    """Inverse of :func:`to_ns`, truncated to microseconds."""
    return UNIX_EPOCH + timedelta(microseconds=int(ns) // 1000)


def delta_t(dt: datetime) -> float:
    """Return ΔT = TT - UT in seconds for the month containing ``dt``.

    Two polynomial fits in the fractional year ``t`` counted from 2000: a
    cubic before 2005 and a quadratic afterwards.
    """
    t = dt.year + (dt.month - 0.5) / 12.0 - 2000.0
    if dt.year < 2005:
        return 63.86 + 0.3345 * t - 0.060374 * t * t + 0.0017275 * t * t * t
    return 62.92 + 0.32217 * t + 0.005589 * t * t


def tt_to_utc(dt: datetime) -> datetime:
    """Convert a TT instant to civil time, dropping the fractional second of ΔT."""
    return dt - timedelta(seconds=int(delta_t(dt)))


def format_utc(dt: datetime) -> str:
    return as_utc(dt).strftime(C.SNAPSHOT_TIME_FORMAT)


def parse_utc(text: str) -> datetime:
    """Parse an ISO-8601 timestamp; a trailing ``Z`` or a missing offset means UTC."""
    text = text.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return as_utc(datetime.fromisoformat(text))
