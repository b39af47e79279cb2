"""Human-readable rendering of durations and wall-clock times."""

from datetime import datetime


def format_duration(seconds: float) -> str:
    """Render seconds as ``H:MM:SS.mmm``. Hours are not capped at 24."""
    total_ms = max(0, round(seconds * 1000))
    hours, rest = divmod(total_ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    secs, ms = divmod(rest, 1000)
    return f"{hours}:{minutes:02d}:{secs:02d}.{ms:03d}"


def format_datetime(value: datetime | None, fmt: str) -> str:
    """Render an aware datetime in local time, or ``none`` when missing."""
    if value is None:
        return "none"
    return value.astimezone().strftime(fmt)
