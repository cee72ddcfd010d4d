from datetime import UTC, datetime


class SystemClock:
    """Naive UTC wall clock, matching how timestamps are stored."""

    def now(self) -> datetime:
        return datetime.now(UTC).replace(tzinfo=None)
