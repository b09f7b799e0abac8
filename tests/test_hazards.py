"""
Tests for Name Hazard Checker
=============================
Tests for the HARD / SOFT / WARNING hazard layers and the score
helpers built on the same tables.
"""

import sys
from pathlib import Path

import pytest

# Ensure repo root is on path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from jakmyeong.hazards import (
    HARD, SOFT, WARNING, NameHazardChecker, bunpa_level, bunpa_score, common_word_penalty,
    diagnose, homophone_penalty, semantic_risk_score,
)
from jakmyeong.tables import HanjaEntry


@pytest.fixture
def checker():
    """Create a hazard checker."""
    return NameHazardChecker()


class TestHazardChecker:
    """Tests for NameHazardChecker.check()."""

    def test_clean_name(self, checker):
        result = checker.check('김', '서', '윤')
        assert result.is_safe
        assert result.severity == 'clear'
        assert result.issues == []

    def test_critical_homophone(self, checker):
        """지진 sounds like 'earthquake'."""
        result = checker.check('김', '지', '진')
        assert not result.is_safe
        assert result.severity == 'critical'
        types = [issue['type'] for issue in result.issues]
        assert 'homophone' in types

    def test_blocked_full_name(self, checker):
        result = checker.check('이', '완', '용')
        assert any(issue['type'] == 'blocked_full_name' for issue in result.issues)
        assert not result.is_safe

    def test_old_fashioned_is_soft(self, checker):
        result = checker.check('김', '영', '희')
        issue = next(i for i in result.issues if i['type'] == 'old_fashioned')
        assert issue['layer'] == SOFT
        assert not result.is_safe

    def test_warning_only_stays_safe(self, checker):
        """Warning homophones do not make a name unsafe."""
        result = checker.check('김', '서', '민')
        assert result.is_safe
        assert all(issue['layer'] == WARNING for issue in result.issues)

    def test_global_risk_ignores_surname_seam(self, checker):
        """가 + 연우 only spells gay across the surname."""
        result = checker.check('가', '연', '우')
        assert not [i for i in result.issues if i['type'] == 'global_risk']

    def test_global_risk_on_given_name(self, checker):
        result = checker.check('이', '아', '날')
        assert not result.is_safe
        assert [i['type'] for i in result.issues if i['layer'] == HARD] == ['global_risk']

    def test_bunpa_needs_hanja(self, checker):
        """The 분파 check only runs for Hanja entries."""
        h1 = HanjaEntry('順', '순', '순할 순', 12, 'Fire')
        h2 = HanjaEntry('允', '윤', '진실로 윤', 4, 'Earth')
        result = checker.check('김', h1, h2)
        bunpa = [i for i in result.issues if i['type'] == 'bunpa']
        assert len(bunpa) == 1
        assert bunpa[0]['level'] == 'strong'
        assert not any(i['type'] == 'bunpa' for i in checker.check('김', '순', '윤').issues)


class TestDiagnose:
    """Tests for the first blocking issue."""

    def test_awkward_combination(self):
        filtered = diagnose('김', '소', '주')
        assert filtered is not None
        assert filtered.layer == HARD
        assert filtered.reason.startswith('awkward_combination')
        assert filtered.name == '소주'

    def test_clean_name(self):
        assert diagnose('김', '서', '윤') is None


class TestScoreHelpers:
    """Tests for the penalty helpers used by the generator."""

    def test_homophone_penalty(self):
        assert homophone_penalty('지진') == 30
        assert homophone_penalty('서민') == 15
        assert homophone_penalty('서윤') == 0

    def test_common_word_penalty(self):
        assert common_word_penalty('예민') == 50
        assert common_word_penalty('다수') == 100

    def test_semantic_risk(self):
        assert semantic_risk_score('지', '도') == -20
        assert semantic_risk_score('서', '유') == 0
        assert semantic_risk_score('수', '유') == -10
        assert semantic_risk_score('영', '희') == -30

    def test_bunpa(self):
        assert bunpa_level('川') == 'strong'
        assert bunpa_level('林') == 'medium'
        assert bunpa_level('瑞') is None
        assert bunpa_score('川', '林') == -40
