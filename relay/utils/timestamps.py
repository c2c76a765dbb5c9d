from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def rfc3339(value: datetime) -> str:
    """
    Format an aware datetime as RFC 3339 with second precision.

    Example:
        >>> rfc3339(datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc))
        '2024-05-01T12:30:00Z'
    """
    return (
        value.astimezone(timezone.utc)
        .isoformat(timespec="seconds")
        .replace("+00:00", "Z")
    )
