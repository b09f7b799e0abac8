"""
Tests for Phonetic Filters
==========================
Tests for the hard sound filters and the flow scores.
"""

import sys
from pathlib import Path

# Ensure repo root is on path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from jakmyeong.phonetics import (
    advanced_phonetic_score, aspirated_block, awkward_phonetics, initial_repetition,
    jong_cho_conflict, phonetic_filters, rhythm_type, round_vowel_conflict, syllable_block,
)


class TestFilters:
    """Each filter returns a reason string or None."""

    def test_clean_name_passes_everything(self):
        assert phonetic_filters('김', '서', '윤') == []

    def test_syllable_block(self):
        assert syllable_block('애', '린')
        assert syllable_block('민', '숙')
        assert syllable_block('예', '준') is None

    def test_awkward_phonetics(self):
        """받침 ㄴ followed by initial ㄹ."""
        assert awkward_phonetics('한', '라')

    def test_initial_repetition(self):
        assert initial_repetition('김', '지', '진')
        assert initial_repetition('김', '서', '윤') is None

    def test_silent_initial_is_not_repetition(self):
        """Two ㅇ initials do not count as a repeated sound."""
        assert initial_repetition('이', '아', '윤') is None

    def test_round_vowel_conflict(self):
        assert round_vowel_conflict('우', '주')
        assert round_vowel_conflict('서', '우') is None

    def test_jong_cho_conflict(self):
        assert jong_cho_conflict('신', '라')
        assert jong_cho_conflict('김', '서') is None

    def test_aspirated_block(self):
        """Popular aspirated syllables are allowed."""
        assert aspirated_block('서', '탁') is None
        assert aspirated_block('서', '콩')

    def test_filters_are_collected_in_order(self):
        reasons = phonetic_filters('김', '지', '진')
        assert any('초성' in r for r in reasons)


class TestScores:
    """Tests for the flow scores."""

    def test_advanced_score_is_numeric(self):
        score = advanced_phonetic_score('김', '서', '윤')
        assert isinstance(score, (int, float))

    def test_rhythm_type(self):
        assert rhythm_type('서', '윤') in ('rising', 'falling', 'heavy', 'balanced')
