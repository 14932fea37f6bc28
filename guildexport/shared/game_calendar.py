"""Game calendar arithmetic.

The game server runs on a fixed offset from UTC and its weeks start on a
configurable weekday (Monday by default). Every collected dataset is stamped
with a `CalendarCoordinate` so that reports can check that all data belongs
to the same game week.

Weekdays follow the game client convention: Sunday = 0 ... Saturday = 6.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from guildexport.shared.config import Config
from guildexport.shared.utils import add_hours, from_epoch_ms, to_epoch_ms, to_utc

MS_PER_DAY = 86_400_000
MS_PER_WEEK = 7 * MS_PER_DAY

# 1970-01-01 was a Thursday
EPOCH_WEEKDAY = 4


@dataclass(frozen=True)
class CalendarCoordinate:
    """Position of an instant in the game calendar."""

    timestamp: datetime
    day_in_week: int
    week_id: int
    week_start: datetime
    week_end: datetime

    def to_dict(self) -> dict:
        return {
            "timestamp": format_timestamp(self.timestamp),
            "dayInWeek": self.day_in_week,
            "weekId": self.week_id,
            "weekStart": format_timestamp(self.week_start),
            "weekEnd": format_timestamp(self.week_end),
        }


def format_timestamp(dt: datetime) -> str:
    """ISO 8601 UTC with millisecond precision, e.g. 2024-06-16T20:00:00.000Z."""
    dt = to_utc(dt)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 timestamp (trailing ``Z`` allowed) to aware UTC.

    Raises:
        TypeError: If `value` is not a string.
        ValueError: If `value` is not ISO 8601.
    """
    if not isinstance(value, str):
        raise TypeError(f"Timestamp must be an ISO 8601 string, got {type(value).__name__}")
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return to_utc(datetime.fromisoformat(text))


def js_weekday(dt: datetime) -> int:
    """Weekday with Sunday = 0."""
    return (dt.weekday() + 1) % 7


def monday_index(day_in_week: int) -> int:
    """Convert a Sunday-based weekday to a Monday-based column index."""
    return (day_in_week + 6) % 7


def get_absolute_week(date: datetime, start_day: int = 1) -> tuple[int, datetime, datetime]:
    """Absolute week number of an instant.

    Args:
        date: Instant to locate.
        start_day: First day of the week (Sunday = 0, Monday = 1, ...).

    Returns:
        (week_id, week_start, week_end) with bounds in UTC.
    """
    offset = (EPOCH_WEEKDAY - start_day) * MS_PER_DAY
    week_id = (to_epoch_ms(date) + offset) // MS_PER_WEEK
    week_start = from_epoch_ms(week_id * MS_PER_WEEK - offset)
    week_end = from_epoch_ms((week_id + 1) * MS_PER_WEEK - offset)
    return week_id, week_start, week_end


def get_game_day_info(
    timestamp: datetime | int | float,
    gmt_offset_hours: float = 2,
    week_start_day: int = 1,
) -> CalendarCoordinate:
    """Compute the calendar coordinate of `timestamp` in game time."""
    instant = to_utc(timestamp)
    game_date = add_hours(instant, -gmt_offset_hours)
    week_id, week_start, week_end = get_absolute_week(game_date, week_start_day)
    return CalendarCoordinate(
        timestamp=instant,
        day_in_week=js_weekday(game_date),
        week_id=week_id,
        week_start=add_hours(week_start, gmt_offset_hours),
        week_end=add_hours(week_end, gmt_offset_hours),
    )


class GameCalendar:
    """Game calendar bound to one timezone offset and week start day."""

    def __init__(
        self,
        gmt_offset_hours: float | None = None,
        week_start_day: int | None = None,
    ) -> None:
        self.gmt_offset_hours = (
            Config.GMT_OFFSET_HOURS if gmt_offset_hours is None else gmt_offset_hours
        )
        self.week_start_day = Config.WEEK_START_DAY if week_start_day is None else week_start_day
        if not 0 <= self.week_start_day <= 6:
            raise ValueError(f"week_start_day must be between 0 and 6, got {self.week_start_day}")

    def day_info(self, timestamp: datetime | int | float) -> CalendarCoordinate:
        return get_game_day_info(timestamp, self.gmt_offset_hours, self.week_start_day)

    def week_dates(self, timestamp: datetime | int | float) -> list[str]:
        """ISO dates of the seven days of the week containing `timestamp`."""
        week_start = self.day_info(timestamp).week_start
        return [(week_start + timedelta(days=days)).strftime("%Y-%m-%d") for days in range(7)]

    def local_date(self, timestamp: datetime | int | float) -> str:
        """ISO date of `timestamp` in game time."""
        return add_hours(to_utc(timestamp), -self.gmt_offset_hours).strftime("%Y-%m-%d")
