"""
Tests for Name Generator
========================
Tests for enumeration, the filter chain, scoring, ranking, single-name
evaluation and LLM re-scoring.
"""

import sys
from pathlib import Path

import pytest

# Ensure repo root is on path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from jakmyeong.generator import NameGenerator, rank_candidates, rescore_with_llm
from jakmyeong.hangul import initial_sound
from jakmyeong.hazards import HARD
from jakmyeong.llm_evaluator import NameEvaluation, apply_llm_score
from jakmyeong.saju import calculate_saju, extract_yongsin
from jakmyeong.suri import calculate_four_geok, lucky_count
from jakmyeong.tables import HanjaEntry, UnknownHanjaError, UnknownSurnameError, get_surname


@pytest.fixture(scope='module')
def generator():
    return NameGenerator()


@pytest.fixture(scope='module')
def kim_result(generator):
    """All candidates for 김, any gender."""
    return generator.generate('김')


class TestGenerate:
    """Tests for NameGenerator.generate()."""

    def test_has_candidates(self, kim_result):
        assert kim_result.candidates
        assert kim_result.total_combinations > len(kim_result.candidates)

    def test_every_combination_accounted_for(self, kim_result):
        """Each pair is either a candidate or recorded as filtered."""
        total = len(kim_result.candidates) + len(kim_result.filtered_out)
        assert total == kim_result.total_combinations

    def test_scores_in_range(self, kim_result):
        assert all(0 <= c.score <= 100 for c in kim_result.candidates)

    def test_ranks_are_sequential(self, kim_result):
        assert [c.rank for c in kim_result.candidates] == list(range(1, len(kim_result.candidates) + 1))

    def test_sorted_by_score(self, kim_result):
        scores = [c.score for c in kim_result.candidates]
        assert scores == sorted(scores, reverse=True)

    def test_deterministic(self, generator):
        first = [c.key for c in generator.generate('김', limit=10).candidates]
        second = [c.key for c in generator.generate('김', limit=10).candidates]
        assert first == second
        assert len(first) == 10

    def test_no_identical_initials(self, kim_result):
        for c in kim_result.candidates:
            assert initial_sound(c.hanja1.hangul) != initial_sound(c.hanja2.hangul)

    def test_positions_respected(self, kim_result):
        for c in kim_result.candidates:
            assert c.hanja1.position != 'last'
            assert c.hanja2.position != 'first'
            assert c.hanja1.hanja != c.hanja2.hanja

    def test_suri_matches_strokes(self, kim_result):
        surname = get_surname('김')
        for c in kim_result.candidates[:50]:
            expected = calculate_four_geok(surname.strokes, c.hanja1.strokes, c.hanja2.strokes)
            assert c.four_geok == expected

    def test_filtered_reasons(self, kim_result):
        reasons = kim_result.filtered_by_reason()
        assert sum(reasons.values()) == len(kim_result.filtered_out)
        assert all(f.layer in ('HARD', 'SOFT') for f in kim_result.filtered_out)

    def test_candidate_dict(self, kim_result):
        data = kim_result.candidates[0].to_dict()
        assert data['rank'] == 1
        assert data['full_name']['hangul'].startswith('김')
        assert data['full_name']['hanja'].startswith('金')
        assert len(data['suri']) == 4


class TestGenerateOptions:
    """Tests for gender, style and yongsin options."""

    def test_gender_pool(self, generator):
        result = generator.generate('김', gender='F', limit=30)
        for c in result.candidates:
            assert c.hanja1.gender in ('F', 'N')
            assert c.hanja2.gender in ('F', 'N')

    def test_modern_style(self, generator):
        result = generator.generate('이', style_mode='modern')
        assert all(lucky_count(c.four_geok) >= 3 for c in result.candidates)

    def test_saju_perfect_style(self, generator):
        result = generator.generate('이', style_mode='saju_perfect')
        assert all(lucky_count(c.four_geok) == 4 for c in result.candidates)

    def test_yongsin_bonus(self, generator):
        yongsin = extract_yongsin(calculate_saju('2024-03-15', 9))
        result = generator.generate('김', yongsin=yongsin, limit=50)
        assert any(c.breakdown.yongsin_bonus != 0 for c in result.candidates)
        assert all(0 <= c.score <= 100 for c in result.candidates)

    def test_limit(self, generator):
        assert len(generator.generate('박', limit=3).candidates) == 3

    def test_unknown_surname(self, generator):
        with pytest.raises(UnknownSurnameError):
            generator.generate('갹')

    def test_bad_gender(self, generator):
        with pytest.raises(ValueError):
            generator.generate('김', gender='X')

    def test_bad_style(self, generator):
        with pytest.raises(ValueError):
            generator.generate('김', style_mode='fancy')

    def test_global_risk_filter(self):
        """아날 reads as an English word once romanized."""
        table = [
            HanjaEntry('雅', '아', '맑을 아', 12, 'Wood', modernity=9),
            HanjaEntry('捺', '날', '누를 날', 11, 'Fire', modernity=9),
        ]
        result = NameGenerator(hanja_table=table).generate('이')
        reasons = {f.name: f.reason for f in result.filtered_out}
        assert reasons['아날'].startswith('global_risk')
        assert result.filtered_by_reason().get('global_risk') == 1

    def test_custom_table(self):
        """Ordered pairs skip same-Hanja pairs and position conflicts."""
        table = [
            HanjaEntry('瑞', '서', '상서 서', 14, 'Metal', modernity=9.5),
            HanjaEntry('允', '윤', '진실로 윤', 4, 'Earth', modernity=9),
            HanjaEntry('智', '지', '지혜 지', 12, 'Fire', position='first', modernity=8.5),
        ]
        result = NameGenerator(hanja_table=table).generate('김')
        assert result.total_combinations == 4
        assert all(c.hanja2.hanja != '智' for c in result.candidates)


class TestEvaluate:
    """Tests for NameGenerator.evaluate()."""

    def test_surviving_name(self, generator):
        candidate, filtered = generator.evaluate('김', '瑞允')
        assert filtered is None
        assert candidate.hangul == '서윤'
        assert candidate.rank == 1
        assert candidate.suri_tier == 'D'

    def test_filtered_name(self, generator):
        """智珍 reads 지진 (earthquake)."""
        candidate, filtered = generator.evaluate('김', '智珍')
        assert candidate is None
        assert filtered.layer == HARD
        assert filtered.reason.startswith('homophone')

    def test_wrong_length(self, generator):
        with pytest.raises(ValueError):
            generator.evaluate('김', '瑞')

    def test_unknown_hanja(self, generator):
        with pytest.raises(UnknownHanjaError):
            generator.evaluate('김', '龘允')


class FakeEvaluator:
    """Marks the first name old-fashioned and fails the rest."""

    def __init__(self):
        self.requested = []

    def evaluate_batch(self, names, surname=None, gender=None):
        self.requested.extend(names)
        results = []
        for idx, (full_name, hanja_name) in enumerate(names):
            if idx == 0:
                results.append(NameEvaluation(full_name, hanja_name, modernity_score=3,
                                              pronunciation_score=5, is_old_fashioned=True))
            else:
                results.append(NameEvaluation(full_name, hanja_name, error='Request failed'))
        return results


class TestRescore:
    """Tests for rescore_with_llm() and rank_candidates()."""

    def test_rescore(self, generator):
        candidates = generator.generate('김', limit=5).candidates
        top = candidates[0]
        base = top.score
        others = {c.key: c.score for c in candidates[1:]}
        evaluator = FakeEvaluator()

        ranked = rescore_with_llm(candidates, evaluator, '김', top_n=3, weight=0.25)

        assert len(evaluator.requested) == 3
        expected = max(0, apply_llm_score(base, NameEvaluation(
            '', '', modernity_score=3, pronunciation_score=5, is_old_fashioned=True), 0.25) - 25)
        assert top.score == expected
        assert top.llm is not None
        for c in ranked:
            if c.key in others:
                assert c.score == others[c.key]
        assert [c.rank for c in ranked] == [1, 2, 3, 4, 5]

    def test_rank_tiebreak_is_stable(self, generator):
        candidates = generator.generate('김', limit=20).candidates
        reranked = rank_candidates(list(reversed(candidates)))
        assert [c.key for c in reranked] == [c.key for c in candidates]
