"""Configuration management for the guild export tool."""
import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Application configuration."""

    # Project paths
    ROOT_DIR = Path(__file__).parent.parent.parent
    DATA_DIR = ROOT_DIR / "data"
    LOGS_DIR = ROOT_DIR / "logs"
    REPORTS_DIR = DATA_DIR / "reports"

    # Game calendar (server time is GMT+2, weeks start on Monday)
    GMT_OFFSET_HOURS: float = float(os.getenv("GMT_OFFSET_HOURS", "2"))
    WEEK_START_DAY: int = int(os.getenv("WEEK_START_DAY", "1"))

    # Reports are collected on Sunday; Monday is accepted for last week's data
    COLLECTION_WEEKDAY: int = int(os.getenv("COLLECTION_WEEKDAY", "0"))
    GRACE_WEEKDAY: int = int(os.getenv("GRACE_WEEKDAY", "1"))

    # Debug settings
    DATA_LOGGING_ENABLED: bool = _env_flag("DATA_LOGGING_ENABLED")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def validate(cls) -> None:
        """Validate calendar configuration."""
        for name in ("WEEK_START_DAY", "COLLECTION_WEEKDAY", "GRACE_WEEKDAY"):
            value = getattr(cls, name)
            if not 0 <= value <= 6:
                raise ValueError(f"{name} must be a weekday between 0 and 6, got {value}")
        if not -12 <= cls.GMT_OFFSET_HOURS <= 14:
            raise ValueError(f"GMT_OFFSET_HOURS out of range: {cls.GMT_OFFSET_HOURS}")


config = Config()
