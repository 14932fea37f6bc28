"""Tests for prestige and naming helpers."""

from datetime import datetime, timedelta

import pytz

from guildexport.reports.prestige import (
    PRESTIGE_CYCLES,
    PRESTIGE_POINTS,
    PRESTIGE_STEP,
    cycle_start,
    final_prestige_progress,
    guild_name,
    prestige_level,
    win_status,
)

START = datetime(2024, 1, 1, tzinfo=pytz.UTC)
CYCLES = ((START, START + timedelta(days=28)),)


class TestFinalPrestigeProgress:
    def test_half_cycle_doubles(self):
        now = START + timedelta(days=14)
        assert final_prestige_progress(1000, now, START + timedelta(days=28), CYCLES) == 2000

    def test_floors_result(self):
        now = START + timedelta(days=21)
        # 1000 * 28 / 21 = 1333.33
        assert final_prestige_progress(1000, now, START + timedelta(days=28), CYCLES) == 1333

    def test_unknown_cycle_falls_back_to_28_days(self):
        end = START + timedelta(days=100)
        now = end - timedelta(days=14)
        assert cycle_start(end, CYCLES) == end - timedelta(days=28)
        assert final_prestige_progress(500, now, end, CYCLES) == 1000

    def test_known_cycle(self):
        end = datetime(2024, 6, 30, 14, tzinfo=pytz.UTC)
        assert cycle_start(end) == PRESTIGE_CYCLES[0][0]

    def test_observation_before_cycle_start(self):
        now = START - timedelta(hours=1)
        assert final_prestige_progress(1000.7, now, START + timedelta(days=28), CYCLES) == 1000

    def test_gap_between_known_cycles(self):
        # 2025-03-09 14:00 .. 2025-03-10 14:00 belongs to no known cycle
        now = datetime(2025, 3, 10, 6, tzinfo=pytz.UTC)
        end = datetime(2025, 4, 7, 14, tzinfo=pytz.UTC)
        assert final_prestige_progress(1000, now, end) == 1000


class TestPrestigeLevel:
    def test_table(self):
        assert len(PRESTIGE_POINTS) == 70
        assert prestige_level(0) == 1
        assert prestige_level(4999) == 1
        assert prestige_level(336000) == 19

    def test_boundary_selects_next_level(self):
        # A value equal to a cap is no longer below it
        assert prestige_level(5000) == 2
        assert prestige_level(PRESTIGE_POINTS[-1] - 1) == 69

    def test_beyond_table(self):
        last = PRESTIGE_POINTS[-1]
        assert prestige_level(last) == 70
        assert prestige_level(last + PRESTIGE_STEP - 1) == 70
        assert prestige_level(last + 3 * PRESTIGE_STEP) == 73

    def test_monotonic(self):
        levels = [prestige_level(value) for value in range(0, 4_000_000, 7919)]
        assert levels == sorted(levels)


def test_win_status():
    assert win_status(30, 20) == "Victory"
    assert win_status(10, 25) == "Defeat"
    assert win_status(5, 5) == "Draw"


def test_guild_name():
    assert guild_name(" Knights ", 12) == "Knights Server 12"
