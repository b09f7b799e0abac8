"""
Tests for Hangul Utilities
==========================
Tests for syllable decomposition, composition and romanization.
"""

import sys
from pathlib import Path

import pytest

# Ensure repo root is on path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from jakmyeong.hangul import (
    compose, decompose, has_jong, initial_sound, is_hangul, is_round_vowel,
    romanization_variants, romanize,
)


class TestDecompose:
    """Tests for splitting syllables into jamo."""

    def test_open_syllable(self):
        """Test a syllable without a final consonant."""
        jamo = decompose('서')
        assert jamo.cho == 'ㅅ'
        assert jamo.jung == 'ㅓ'
        assert jamo.jong == ''

    def test_closed_syllable(self):
        """Test a syllable with a final consonant."""
        jamo = decompose('윤')
        assert (jamo.cho, jamo.jung, jamo.jong) == ('ㅇ', 'ㅠ', 'ㄴ')

    def test_non_hangul_returns_none(self):
        """Test that Latin letters and Hanja are not decomposed."""
        assert decompose('a') is None
        assert decompose('瑞') is None
        assert decompose('') is None

    @pytest.mark.parametrize('syllable', ['가', '김', '힣', '뷁', '예'])
    def test_compose_inverts_decompose(self, syllable):
        """Test that compose rebuilds the original syllable."""
        jamo = decompose(syllable)
        assert compose(jamo.cho, jamo.jung, jamo.jong) == syllable


class TestPredicates:
    """Tests for the syllable predicates."""

    def test_is_hangul(self):
        assert is_hangul('가')
        assert not is_hangul('가나')
        assert not is_hangul('ㄱ')

    def test_initial_sound(self):
        assert initial_sound('김') == 'ㄱ'
        assert initial_sound('x') == 'x'

    def test_has_jong(self):
        assert has_jong('민')
        assert not has_jong('서')

    def test_round_vowel(self):
        """Test ㅗ/ㅜ family detection."""
        assert is_round_vowel('우')
        assert is_round_vowel('주')
        assert not is_round_vowel('서')


class TestRomanize:
    """Tests for romanization."""

    def test_given_name(self):
        assert romanize('서윤') == 'seoyun'

    def test_surname(self):
        assert romanize('김') == 'gim'

    def test_passes_through_latin(self):
        """Test that already romanized input is only lowercased."""
        assert romanize('Sindy') == 'sindy'

    def test_variants_start_with_official_spelling(self):
        variants = romanization_variants('서윤')
        assert variants[0] == 'seoyun'
        assert 'soyun' in variants

    def test_variants_are_unique(self):
        """Test that duplicate spellings are dropped."""
        variants = romanization_variants('지아')
        assert len(variants) == len(set(variants))
