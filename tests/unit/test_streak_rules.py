"""Unit tests for daily streak transitions."""

from datetime import date

from apaddicto.progress.streak_service import next_streak

DAY = date(2026, 3, 10)


class TestNextStreak:
    def test_first_activity_starts_streak(self):
        assert next_streak(0, 0, None, DAY) == (1, 1)

    def test_same_day_is_unchanged(self):
        assert next_streak(3, 5, DAY, DAY) == (3, 5)

    def test_consecutive_day_extends(self):
        assert next_streak(3, 5, date(2026, 3, 9), DAY) == (4, 5)

    def test_extending_past_longest_raises_longest(self):
        assert next_streak(5, 5, date(2026, 3, 9), DAY) == (6, 6)

    def test_gap_resets_to_one(self):
        assert next_streak(7, 7, date(2026, 3, 7), DAY) == (1, 7)

    def test_month_boundary(self):
        assert next_streak(2, 2, date(2026, 2, 28), date(2026, 3, 1)) == (3, 3)

    def test_out_of_order_activity_does_not_move_streak(self):
        assert next_streak(4, 4, DAY, date(2026, 3, 8)) == (4, 4)

    def test_longest_never_below_current(self):
        for last in (None, DAY, date(2026, 3, 9), date(2026, 3, 1)):
            current, longest = next_streak(2, 0, last, DAY)
            assert longest >= current
