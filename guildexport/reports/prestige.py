"""Numeric helpers for the weekly report.

Guild prestige runs in roughly 28-day cycles. The report estimates the
prestige the guild will have at the end of the current cycle by scaling the
progress so far to a full cycle, then maps that to a prestige level.
"""

import math
from datetime import datetime, timedelta

from guildexport.shared.utils import setup_logger, to_utc

logger = setup_logger(__name__)

CYCLE_LENGTH = timedelta(days=28)


def _utc(text: str) -> datetime:
    return to_utc(datetime.strptime(text, "%Y-%m-%d %H:%M:%S"))


# Historical prestige cycles (UTC), ordered by end time
PRESTIGE_CYCLES: tuple[tuple[datetime, datetime], ...] = tuple(
    (_utc(start), _utc(end))
    for start, end in (
        ("2024-06-05 02:00:00", "2024-06-30 14:00:00"),
        ("2024-07-01 14:00:00", "2024-07-28 14:00:00"),
        ("2024-07-29 02:00:00", "2024-08-25 02:00:00"),
        ("2024-08-26 02:00:00", "2024-09-22 02:00:00"),
        ("2024-09-23 02:00:00", "2024-10-20 02:00:00"),
        ("2024-10-21 02:00:00", "2024-11-17 02:00:00"),
        ("2024-11-18 02:00:00", "2024-12-15 02:00:00"),
        ("2024-12-16 02:00:00", "2025-01-12 02:00:00"),
        ("2025-01-13 02:00:00", "2025-02-09 02:00:00"),
        ("2025-02-10 02:00:00", "2025-03-09 02:00:00"),
        ("2025-03-10 14:00:00", "2025-04-07 14:00:00"),
        ("2025-04-08 14:00:00", "2025-05-06 14:00:00"),
        ("2025-05-07 14:00:00", "2025-06-04 14:00:00"),
        ("2025-06-05 14:00:00", "2025-07-03 14:00:00"),
        ("2025-07-04 14:00:00", "2025-08-01 14:00:00"),
        ("2025-08-02 14:00:00", "2025-08-30 14:00:00"),
        ("2025-08-31 14:00:00", "2025-09-28 14:00:00"),
        ("2025-09-29 14:00:00", "2025-10-27 14:00:00"),
        ("2025-10-28 14:00:00", "2025-11-25 14:00:00"),
        ("2025-11-26 14:00:00", "2025-12-24 14:00:00"),
        ("2025-12-25 14:00:00", "2026-01-26 14:00:00"),
    )
)

# Cumulative prestige needed to leave level i (level i while progress < PRESTIGE_POINTS[i])
PRESTIGE_POINTS: tuple[int, ...] = (
    0, 5000, 10500, 18000, 27000, 37500, 49750, 63500,
    78750, 95500, 113500, 133000, 154000, 176250, 199750, 224750, 251000,
    278500, 307250, 337500, 368750, 401250, 435250, 470250, 506500, 544000,
    582750, 622500, 663500, 705750, 749250, 793750, 839500, 886500, 934500,
    983750, 1034000, 1085000, 1138000, 1191500, 1246500, 1302250, 1359250, 1417250,
    1476500, 1536750, 1598250, 1660500, 1724000, 1788750, 1854250, 1921000, 1988750,
    2057500, 2127500, 2198500, 2270500, 2343500, 2417500, 2492500, 2568750, 2645750,
    2724000, 2803250, 2883500, 2964750, 3047000, 3130250, 3214500, 3300000,
)

# Prestige per level past the end of the table
PRESTIGE_STEP = 90000


def cycle_start(
    end_time: datetime,
    cycles: tuple[tuple[datetime, datetime], ...] = PRESTIGE_CYCLES,
) -> datetime:
    """Start of the prestige cycle ending at `end_time`.

    Falls back to `end_time - 28 days` when no known cycle ends at or after it.
    """
    end_time = to_utc(end_time)
    for start, end in cycles:
        if end_time <= end:
            return start
    return end_time - CYCLE_LENGTH


def final_prestige_progress(
    progress: float,
    now: datetime,
    end_time: datetime,
    cycles: tuple[tuple[datetime, datetime], ...] = PRESTIGE_CYCLES,
) -> int:
    """Scale the progress made so far to a full 28-day cycle.

    Args:
        progress: Prestige collected since the cycle started.
        now: Time the progress was observed.
        end_time: End of the current cycle.
        cycles: Known cycle date ranges.

    Returns:
        Projected progress, floored. Progress observed before the cycle
        start (between two known cycles) is returned unscaled.
    """
    start = cycle_start(end_time, cycles)
    elapsed = to_utc(now) - start
    if elapsed <= timedelta(0):
        logger.warning(
            "Observation time %s precedes the prestige cycle start %s; progress not scaled",
            now,
            start,
        )
        return math.floor(float(progress))
    return math.floor(float(progress) * (CYCLE_LENGTH / elapsed))


def prestige_level(
    progress: float,
    points: tuple[int, ...] = PRESTIGE_POINTS,
    step: int = PRESTIGE_STEP,
) -> int:
    """Prestige level reached with `progress` points."""
    for level, cap in enumerate(points):
        if progress < cap:
            return level
    return len(points) + int((progress - points[-1]) // step)


def win_status(you: float, enemy: float) -> str:
    if you > enemy:
        return "Victory"
    if you < enemy:
        return "Defeat"
    return "Draw"


def guild_name(title: str, server_id) -> str:
    """Display name used to match guilds across Clash of Worlds logs."""
    return f"{str(title).strip()} Server {server_id}"
