"""Shared utilities and configuration."""

from guildexport.shared.config import Config
from guildexport.shared.game_calendar import CalendarCoordinate, GameCalendar, get_game_day_info
from guildexport.shared.utils import setup_logger, to_utc

__all__ = [
    "CalendarCoordinate",
    "Config",
    "GameCalendar",
    "get_game_day_info",
    "setup_logger",
    "to_utc",
]
