"""
Tests for Modernity and Popularity
==================================
"""

import sys
from pathlib import Path

import pytest

# Ensure repo root is on path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from jakmyeong.modernity import (
    is_old_fashioned, modernity_adjustment, modernity_points, popularity_score,
)


class TestModernityPoints:
    """Tests for the modernity step table."""

    @pytest.mark.parametrize('avg,points', [
        (9.7, 55),
        (9.5, 55),
        (8.0, 43),
        (6.5, 24),
        (6.0, 15),
    ])
    def test_steps(self, avg, points):
        assert modernity_points(avg) == points


class TestAdjustment:
    """Tests for the old-fashioned penalty and trendy bonus."""

    def test_old_fashioned_names(self):
        assert is_old_fashioned('영희')
        assert is_old_fashioned('철수')
        assert not is_old_fashioned('서윤')

    def test_trendy_name(self):
        """서윤 is a trendy name built from two trendy syllables."""
        adjustment = modernity_adjustment('서', '윤')
        assert adjustment.penalty == 0
        assert adjustment.bonus == 18
        assert adjustment.syllable_score == 5

    def test_dated_name(self):
        adjustment = modernity_adjustment('영', '희')
        assert adjustment.penalty == 50
        assert adjustment.bonus == 0


class TestPopularity:
    """Tests for the popularity score."""

    def test_trendy_beats_dated(self):
        assert popularity_score('서', '윤') > popularity_score('영', '희')
