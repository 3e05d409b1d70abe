"""Tests for movement and experience rules."""

import pytest

from cryospace.game.rules import (
    MAX_LEVEL,
    XP_TABLE,
    get_distance,
    get_level,
    get_xp_for_next_level,
    get_xp_progress,
    is_valid_move,
)


class TestMovement:
    """Test grid movement rules."""

    def test_distance_is_manhattan(self):
        assert get_distance(0, 0, 3, 4) == 7
        assert get_distance(5, 5, 2, 1) == 7

    def test_move_within_speed(self):
        assert is_valid_move(0, 0, 3, 3, 6) is True

    def test_move_at_exact_speed(self):
        assert is_valid_move(2, 2, 2, 8, 6) is True

    def test_move_beyond_speed(self):
        assert is_valid_move(0, 0, 4, 3, 6) is False

    def test_diagonal_counts_both_axes(self):
        assert is_valid_move(0, 0, 1, 1, 1) is False

    def test_staying_put(self):
        assert is_valid_move(3, 3, 3, 3, 0) is True


class TestLevels:
    """Test XP thresholds."""

    def test_table_shape(self):
        assert MAX_LEVEL == 20
        assert XP_TABLE[0] == 0
        assert list(XP_TABLE) == sorted(XP_TABLE)

    @pytest.mark.parametrize(
        "xp,level",
        [(0, 1), (299, 1), (300, 2), (899, 2), (900, 3), (354999, 19), (355000, 20), (10**7, 20), (-50, 1)],
    )
    def test_get_level(self, xp, level):
        assert get_level(xp) == level

    def test_next_level_threshold(self):
        assert get_xp_for_next_level(0) == 300
        assert get_xp_for_next_level(300) == 900
        assert get_xp_for_next_level(355000) is None


class TestProgress:
    """Test fractional progress between levels."""

    def test_start_of_level(self):
        assert get_xp_progress(300) == 0.0

    def test_halfway(self):
        assert get_xp_progress(150) == pytest.approx(0.5)
        assert get_xp_progress(600) == pytest.approx(0.5)

    def test_max_level(self):
        assert get_xp_progress(355000) == 1.0
        assert get_xp_progress(999999) == 1.0

    def test_negative_xp_clamped(self):
        assert get_xp_progress(-100) == 0.0
