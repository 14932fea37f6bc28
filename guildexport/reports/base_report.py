"""Abstract base class for the weekly report tables.

Every report turns a `GuildWeek` into one table with a fixed column order
and exports it as CSV:
- Store in data/reports/
- File naming: {CATEGORY}_{week start YYYY-MM-DD}.csv
- Empty cells are written as blanks, booleans as true/false
"""

from abc import ABC, abstractmethod
from pathlib import Path

import pandas as pd

from guildexport.reports.members import GuildWeek
from guildexport.shared.config import Config
from guildexport.shared.utils import setup_logger


class PersistenceFailure(RuntimeError):
    """Writing a report artifact failed.

    Attributes:
        path: Target file.
        content: Serialized artifact, for delivery by other means.
    """

    def __init__(self, message: str, path: Path, content: str) -> None:
        super().__init__(message)
        self.path = path
        self.content = content


def format_cell(value) -> str:
    """Serialize one cell the way the game's web client prints values."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if value != value:
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value)


class BaseReport(ABC):
    """Base class for all report tables.

    Subclasses must define:
        CATEGORY (str): file name prefix (e.g. "stats", "event_log").
        COLUMNS (list[str]): fixed column order.

    Subclasses must implement:
        rows(): build the table rows for a week.
    """

    CATEGORY: str
    COLUMNS: list[str]

    def __init__(self, log_file: Path | None = None) -> None:
        self.logger = setup_logger(self.__class__.__name__, log_file)

    @abstractmethod
    def rows(self, week: GuildWeek) -> list[list]:
        """Build the table rows, one list per row in COLUMNS order."""
        ...

    def build(self, week: GuildWeek) -> pd.DataFrame:
        """Build the report table.

        Cells keep their Python types (object dtype) so that integer columns
        with blanks are not widened to floats.
        """
        rows = self.rows(week)
        df = pd.DataFrame(rows, columns=self.COLUMNS, dtype=object)
        self.logger.info("Built %s table with %d rows", self.CATEGORY, len(df))
        return df

    def filename(self, week_start: str) -> str:
        return f"{self.CATEGORY}_{week_start}.csv"

    @staticmethod
    def to_csv(df: pd.DataFrame) -> str:
        formatted = pd.DataFrame(
            {column: [format_cell(value) for value in df[column]] for column in df.columns},
            columns=df.columns,
        )
        return formatted.to_csv(index=False, lineterminator="\n")

    def export(self, df: pd.DataFrame, week_start: str, output_dir: Path | None = None) -> Path:
        """Export a report table following the naming convention.

        File path: {output_dir}/{CATEGORY}_{YYYY-MM-DD}.csv

        Args:
            df: Report table.
            week_start: First day of the report week (YYYY-MM-DD).
            output_dir: Target directory (default: data/reports/).

        Returns:
            Path to the written file.

        Raises:
            PersistenceFailure: If the file cannot be written.
        """
        output_dir = output_dir or Config.REPORTS_DIR
        path = output_dir / self.filename(week_start)
        content = self.to_csv(df)
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.write(content)
        except OSError as exc:
            self.logger.error("Save failed: %s (%s)", path, exc)
            raise PersistenceFailure(f"File saving failed: {path.name}", path, content) from exc

        self.logger.info("Exported %d records to %s", len(df), path)
        return path
