"""
Calendar policy: how timestamps map to local days and weeks.

Every day or week boundary in the engine goes through a CalendarPolicy so
that the user's timezone and preferred first day of the week are applied
consistently, and so tests can pin "today" without touching the clock.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .config import DEFAULT_FIRST_WEEKDAY, DEFAULT_TIMEZONE
from .models import DateLike, ValidationError


def resolve_timezone(name: str | None) -> tzinfo:
    """
    Resolve an IANA timezone name.

    Args:
        name: e.g. "Europe/Berlin"; None or "UTC" gives UTC

    Returns:
        tzinfo instance

    Raises:
        ValidationError: If the name is not a known timezone
    """
    raw = (name or DEFAULT_TIMEZONE).strip()
    if raw.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(raw)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValidationError(f"Unknown timezone: {raw!r}") from e


@dataclass(frozen=True)
class CalendarPolicy:
    """
    Timezone and week-start rule.

    Naive datetimes are taken to be local wall-clock time already; aware
    datetimes are converted into the policy's timezone before the day is
    taken.  Plain dates pass through unchanged.
    """

    tz: tzinfo = field(default=timezone.utc)
    first_weekday: int = DEFAULT_FIRST_WEEKDAY  # 0 = Monday … 6 = Sunday

    def __post_init__(self) -> None:
        if not 0 <= self.first_weekday <= 6:
            raise ValidationError(
                f"first_weekday must be between 0 (Monday) and 6 (Sunday), got {self.first_weekday}"
            )

    @classmethod
    def from_names(cls, timezone_name: str | None = None, first_weekday: int = DEFAULT_FIRST_WEEKDAY) -> "CalendarPolicy":
        return cls(tz=resolve_timezone(timezone_name), first_weekday=first_weekday)

    def local_day(self, value: DateLike) -> date:
        """Calendar day a logged date belongs to."""
        if isinstance(value, datetime):
            if value.tzinfo is not None:
                value = value.astimezone(self.tz)
            return value.date()
        return value

    def local_datetime(self, value: DateLike) -> datetime:
        """Aware datetime for a logged date; plain dates map to local midnight."""
        if isinstance(value, datetime):
            if value.tzinfo is None:
                return value.replace(tzinfo=self.tz)
            return value.astimezone(self.tz)
        return datetime.combine(value, time.min, tzinfo=self.tz)

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def today(self) -> date:
        return self.now().date()

    def week_start(self, day: date) -> date:
        """First day of the week containing *day*."""
        offset = (day.weekday() - self.first_weekday) % 7
        return day - timedelta(days=offset)


DEFAULT_CALENDAR = CalendarPolicy()
