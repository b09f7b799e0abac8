"""
Tests for Name Report
=====================
Tests for the report sections: numerology, yin-yang, natural elements,
pronunciation elements and the character review.
"""

import sys
from pathlib import Path

import pytest

# Ensure repo root is on path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from jakmyeong.report import (
    ReportGenerator, element_flow, forbidden_char_review, forbidden_summary, natural_elements,
    pronunciation, yin_yang,
)
from jakmyeong.saju import calculate_saju
from jakmyeong.tables import UnknownHanjaError, UnknownSurnameError


@pytest.fixture
def report():
    """Report for 김서윤 (金瑞允)."""
    return ReportGenerator().generate('김', '서윤', given_hanja='瑞允')


class TestReport:
    """Tests for ReportGenerator.generate()."""

    def test_names(self, report):
        assert report.full_hangul == '김서윤'
        assert report.full_hanja == '金瑞允'

    def test_numerology(self, report):
        assert [p.number for p in report.numerology] == [18, 22, 12, 26]
        assert [p.level for p in report.numerology] == ['길', '흉', '흉', '흉']

    def test_yin_yang(self, report):
        """8, 14 and 4 strokes are all even, so all 음."""
        assert [c.type for c in report.yin_yang.characters] == ['음', '음', '음']
        assert not report.yin_yang.is_balanced

    def test_natural_elements_without_saju(self, report):
        assert report.natural_element.has_saju is False
        assert report.natural_element.name_elements['Metal'] == 40
        assert report.natural_element.name_elements['Earth'] == 20
        assert report.natural_element.saju_elements is None

    def test_pronunciation(self, report):
        elements = [c.element for c in report.pronunciation.characters]
        assert elements == ['Wood', 'Metal', 'Earth']

    def test_character_review(self, report):
        assert [c.status for c in report.forbidden] == ['good', 'good']
        assert '瑞, 允' in report.forbidden_summary

    def test_summary_and_dict(self, report):
        assert report.summary
        data = report.to_dict()
        assert data['full_name'] == {'hangul': '김서윤', 'hanja': '金瑞允'}
        assert len(data['numerology']) == 4

    def test_with_saju(self):
        saju = calculate_saju('2024-03-15', 9)
        report = ReportGenerator().generate('김', '서윤', given_hanja='瑞允', saju=saju)
        assert report.natural_element.has_saju
        assert set(report.natural_element.filled) <= {'Metal', 'Earth'}


class TestReportErrors:
    """Tests for invalid input."""

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            ReportGenerator().generate('김', '서윤', given_hanja='瑞')

    def test_one_syllable_name(self):
        with pytest.raises(ValueError):
            ReportGenerator().generate('김', '서', given_hanja='瑞')

    def test_unknown_hanja(self):
        with pytest.raises(UnknownHanjaError):
            ReportGenerator().generate('김', '서윤', given_hanja='龘允')

    def test_wrong_reading(self):
        with pytest.raises(ValueError, match='瑞'):
            ReportGenerator().generate('김', '하윤', given_hanja='瑞允')

    def test_unknown_surname(self):
        with pytest.raises(UnknownSurnameError):
            ReportGenerator().generate('갹', '서윤', given_hanja='瑞允')


class TestAnalyzers:
    """Tests for the standalone analyzers."""

    def test_yin_yang_balance(self):
        analysis = yin_yang([('金', 8), ('河', 9)])
        assert analysis.is_balanced
        assert [c.type for c in analysis.characters] == ['음', '양']

    def test_element_flow(self):
        assert element_flow(['Wood', 'Fire', 'Earth']) == 'harmonious'
        assert element_flow(['Wood', 'Earth', 'Water']) == 'conflicting'
        assert element_flow(['Wood', None, 'Fire']) == 'neutral'

    def test_pronunciation_harmony(self):
        """ㄱ(Wood) → ㄴ(Fire) → ㅇ(Earth)."""
        assert pronunciation('가나아').relationship == 'harmonious'

    def test_graph_is_capped(self):
        analysis = natural_elements(['Wood'] * 7)
        assert analysis.name_elements['Wood'] == 100

    def test_forbidden_review(self):
        review = forbidden_char_review('寒鬼')
        assert [c.status for c in review] == ['caution', 'forbidden']
        assert forbidden_summary(review).startswith('일부')
        assert forbidden_summary(review[:1]).startswith('대체로')
