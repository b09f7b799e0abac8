"""
Tests for Saju Calculation
==========================
Tests for the four pillars, element analysis and yongsin extraction.
"""

import sys
from datetime import date, datetime
from pathlib import Path

import pytest

# Ensure repo root is on path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from jakmyeong.elements import GENERATES, birther_of
from jakmyeong.saju import (
    GISIN_WEIGHT, HUISIN_WEIGHT, YONGSIN_WEIGHT, InvalidBirthDateError, Pillar,
    analyze_elements, calculate_saju, day_pillar, extract_yongsin, hour_branch_index,
    hour_pillar, month_pillar, parse_birth_date, saju_to_weights, year_pillar, yongsin_weights,
)


class TestPillars:
    """Tests for the individual pillars."""

    def test_reference_day(self):
        """2000-01-01 is a 무오 day."""
        assert day_pillar(date(2000, 1, 1)).name == '무오'

    def test_day_cycle_wraps(self):
        assert day_pillar(date(2000, 3, 1)).name == Pillar.from_index(54 + 60).name

    def test_year_changes_at_ipchun(self):
        """1984 is 갑자 from 입춘 (Feb 4) on."""
        assert year_pillar(date(1984, 2, 4)).name == '갑자'
        assert year_pillar(date(1984, 2, 3)).name == '계해'

    def test_month_pillar(self):
        """The 묘 month of a 갑 year is 정묘."""
        assert month_pillar(date(1984, 3, 15)).name == '정묘'

    def test_hour_branch(self):
        """자시 spans 23:00 to 00:59."""
        assert hour_branch_index(23) == 0
        assert hour_branch_index(0) == 0
        assert hour_branch_index(1) == 1
        assert hour_branch_index(12) == 6

    def test_hour_pillar(self):
        assert hour_pillar(Pillar('갑', '자'), 0).name == '갑자'
        assert hour_pillar(Pillar('을', '축'), 0).name == '병자'

    def test_pillar_from_name(self):
        pillar = Pillar.from_name('갑진(甲辰)')
        assert pillar.name == '갑진'
        assert pillar.hanja == '甲辰'
        with pytest.raises(ValueError):
            Pillar.from_name('가나')


class TestCalculateSaju:
    """Tests for calculate_saju()."""

    def test_without_hour(self):
        saju = calculate_saju('2000-01-01')
        assert saju.hour is None
        assert len(saju.pillars()) == 3
        assert saju.source == 'local_calculation'

    def test_with_hour(self):
        saju = calculate_saju(date(2024, 3, 15), 9)
        assert saju.hour is not None
        assert saju.birth_hour == 9

    def test_accepts_datetime(self):
        assert parse_birth_date(datetime(2024, 3, 15, 9, 30)) == date(2024, 3, 15)

    @pytest.mark.parametrize('value', ['2024/03/15', 'yesterday', '2024-13-01'])
    def test_invalid_date(self, value):
        with pytest.raises(InvalidBirthDateError):
            calculate_saju(value)

    @pytest.mark.parametrize('hour', [24, -1])
    def test_invalid_hour(self, hour):
        with pytest.raises(InvalidBirthDateError):
            calculate_saju('2024-03-15', hour)

    def test_invalid_date_is_value_error(self):
        with pytest.raises(ValueError):
            calculate_saju('not a date')


class TestElementAnalysis:
    """Tests for element counts and weights."""

    def test_distribution_counts_every_character(self):
        saju = calculate_saju('2024-03-15', 9)
        analysis = analyze_elements(saju)
        assert analysis.total == 8
        assert set(analysis.distribution) == {'Wood', 'Fire', 'Earth', 'Metal', 'Water'}

    def test_needed_and_excess(self):
        saju = calculate_saju('2024-03-15', 9)
        analysis = analyze_elements(saju)
        assert all(analysis.distribution[e] <= 1 for e in analysis.needed)
        assert all(analysis.distribution[e] >= 3 for e in analysis.excess)

    def test_weights_scarcest_first(self):
        saju = calculate_saju('2024-03-15', 9)
        weights = saju_to_weights(saju)
        needed = analyze_elements(saju).needed
        if needed:
            assert weights[needed[0]] == 30


class TestYongsin:
    """Tests for yongsin extraction."""

    @pytest.mark.parametrize('birth', ['1990-05-15', '2024-03-15', '2000-01-01', '1984-02-04'])
    def test_yongsin_follows_strength(self, birth):
        saju = calculate_saju(birth, 12)
        result = extract_yongsin(saju)
        day_element = saju.day.stem_element
        if result.strength.is_strong:
            assert result.yongsin == [GENERATES[day_element]]
        else:
            assert result.yongsin == [birther_of(day_element)]
        assert not set(result.yongsin) & set(result.gisin)

    def test_weights(self):
        result = extract_yongsin(calculate_saju('1990-05-15', 12))
        weights = yongsin_weights(result)
        for element in result.yongsin:
            assert weights[element] == YONGSIN_WEIGHT
        for element in result.huisin:
            assert weights[element] == HUISIN_WEIGHT
        for element in result.gisin:
            assert weights[element] == GISIN_WEIGHT

    def test_to_dict(self):
        data = extract_yongsin(calculate_saju('1990-05-15')).to_dict()
        assert 'yongsin' in data
        assert data['summary']
