from datetime import UTC, datetime
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Naive UTC timestamp, matching how DateTime columns are stored"""
    return datetime.now(UTC).replace(tzinfo=None)
