from datetime import UTC, datetime


def utcnow() -> datetime:
    """Server wall-clock time as naive UTC, matching how timestamps are stored."""
    return datetime.now(UTC).replace(tzinfo=None)
