#!/usr/bin/env python3
"""
Name Generator
==============
Enumerates two-Hanja given names for a surname, runs them through the
filter chain, scores the survivors and ranks them.

Pipeline:
    1. Hanja pool       - gender and minimum modernity
    2. Enumeration      - ordered pairs respecting first/last positions
    3. Filter chain     - suri style, taboo words, phonetics, global risk
    4. Scoring          - modernity + traditional + phonetic components
    5. Normalization    - suri tier multiplier, clamped to 0..100
    6. Yongsin bonus    - favoured elements from the birth chart
    7. Post filters     - gender tendency, initials, modernity balance
    8. Ranking          - score, suri quality, modernity, Hanja

Every removed pair is recorded in ``GenerationResult.filtered_out``
with its layer and reason.

Usage:
    gen = NameGenerator()
    result = gen.generate('김', gender='F')
    for c in result.candidates[:10]:
        print(c.rank, c.full_hangul, c.full_hanja, c.score)
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from jakmyeong import elements, phonetics
from jakmyeong.global_check import GlobalCheckResult, check_global_name, check_global_risk
from jakmyeong.hangul import initial_sound, romanize
from jakmyeong.hazards import (
    HARD, SOFT, FilteredName, awkward_combination, bad_combination,
    bunpa_score, common_word_penalty, homophone_penalty, semantic_risk_score,
)
from jakmyeong.modernity import modernity_adjustment, modernity_points, popularity_score
from jakmyeong.saju import YongsinResult, yongsin_weights
from jakmyeong.settings import get_setting, require_setting
from jakmyeong.suri import (
    FourGeok, bad_count, calculate_four_geok, daegil_count, passes_style,
    suri_tier, weighted_suri_score, STYLE_MODES,
)
from jakmyeong.tables import (
    HanjaEntry, Surname, UnknownHanjaError, get_surname, load_filters, load_hanja_table,
)

logger = logging.getLogger(__name__)

GENDERS = ('M', 'F')


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class ScoreBreakdown:
    """Every component that went into a candidate's score."""
    modernity: float = 0
    traditional: float = 0
    base: float = 0
    element: float = 0
    suri: float = 0
    bonus: float = 0
    penalty: float = 0
    popularity: float = 0
    flow: float = 0
    semantic_risk: float = 0
    bunpa: float = 0
    surname_harmony: float = 0
    surname_flow: float = 0
    advanced_phonetic: float = 0
    modernity_penalty: float = 0
    modernity_bonus: float = 0
    raw: float = 0
    tier_multiplier: float = 1.0
    normalized: int = 0
    yongsin_bonus: float = 0
    llm: Optional[float] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class NameCandidate:
    """A ranked name candidate."""
    surname: Surname
    hanja1: HanjaEntry
    hanja2: HanjaEntry
    four_geok: FourGeok
    score: int = 0
    breakdown: ScoreBreakdown = field(default_factory=ScoreBreakdown)
    suri_tier: str = 'D'
    global_check: Optional[GlobalCheckResult] = None
    warnings: List[Dict[str, Any]] = field(default_factory=list)
    rank: int = 0
    llm: Optional[Dict[str, Any]] = None

    @property
    def hangul(self) -> str:
        return self.hanja1.hangul + self.hanja2.hangul

    @property
    def hanja(self) -> str:
        return self.hanja1.hanja + self.hanja2.hanja

    @property
    def full_hangul(self) -> str:
        return self.surname.hangul + self.hangul

    @property
    def full_hanja(self) -> str:
        return self.surname.hanja + self.hanja

    @property
    def roman(self) -> str:
        return romanize(self.full_hangul)

    @property
    def key(self) -> str:
        """Combination key used for pagination and history."""
        return f"{self.hangul}-{self.hanja}"

    @property
    def modernity_avg(self) -> float:
        return (self.hanja1.modernity + self.hanja2.modernity) / 2

    @property
    def daegil_count(self) -> int:
        return daegil_count(self.four_geok)

    @property
    def bad_count(self) -> int:
        return bad_count(self.four_geok)

    def to_dict(self) -> dict:
        return {
            'rank': self.rank,
            'hangul': self.hangul,
            'hanja': self.hanja,
            'full_name': {
                'hangul': self.full_hangul,
                'hanja': self.full_hanja,
                'roman': self.roman,
            },
            'score': self.score,
            'suri_tier': self.suri_tier,
            'suri': self.four_geok.to_dict(),
            'hanja_detail': [self.hanja1.to_dict(), self.hanja2.to_dict()],
            'breakdown': self.breakdown.to_dict(),
            'global_check': self.global_check.to_dict() if self.global_check else None,
            'warnings': list(self.warnings),
            'llm': self.llm,
        }


@dataclass
class GenerationResult:
    candidates: List[NameCandidate] = field(default_factory=list)
    filtered_out: List[FilteredName] = field(default_factory=list)
    total_combinations: int = 0

    def filtered_by_reason(self) -> Dict[str, int]:
        """Count of removed pairs per reason prefix."""
        counts: Dict[str, int] = {}
        for item in self.filtered_out:
            key = item.reason.split(':')[0]
            counts[key] = counts.get(key, 0) + 1
        return counts


# =============================================================================
# Generator
# =============================================================================

class NameGenerator:
    """
    Hanja name generator for one-syllable surnames.

    ``hanja_table`` replaces the bundled table (mainly for tests).
    """

    def __init__(self, hanja_table: Optional[Sequence[HanjaEntry]] = None):
        self._table = tuple(hanja_table) if hanja_table is not None else load_hanja_table()
        self._cfg = require_setting("generator")
        self._min_modernity = require_setting("generator.min_modernity")
        self._norm = require_setting("generator.normalization")
        self._post = require_setting("generator.post_filter")
        self._yongsin_cfg = require_setting("generator.yongsin")

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def generate(self,
                 surname: str,
                 surname_hanja: Optional[str] = None,
                 gender: Optional[str] = None,
                 element_weights: Optional[Dict[str, float]] = None,
                 style_mode: str = "balanced",
                 yongsin: Optional[YongsinResult] = None,
                 limit: Optional[int] = None) -> GenerationResult:
        """
        Generate ranked candidates.

        Args:
            surname: Surname in Hangul (one syllable)
            surname_hanja: Surname Hanja; the major variant when omitted
            gender: 'M', 'F' or None for both
            element_weights: Element weights for the element score
            style_mode: 'balanced', 'modern' or 'saju_perfect'
            yongsin: Yongsin analysis; adds the yongsin bonus and, without
                explicit weights, supplies the element weights
            limit: Keep only the top N candidates

        Returns:
            GenerationResult with ranked candidates and removed pairs
        """
        surname_info = get_surname(surname, surname_hanja)
        if gender is not None and gender not in GENDERS:
            raise ValueError(f"gender must be one of {GENDERS} or None")
        if style_mode not in STYLE_MODES:
            raise ValueError(f"Unknown style mode: {style_mode}")

        yongsin_map = yongsin_weights(yongsin) if yongsin else None
        if element_weights is None and yongsin_map:
            element_weights = elements.build_element_weights(yongsin_map)

        pool = self._hanja_pool(gender)
        logger.debug(f"Hanja pool: {len(pool)} of {len(self._table)} for gender={gender}")

        result = GenerationResult()
        scored = []
        for h1 in pool:
            if h1.position == 'last':
                continue
            for h2 in pool:
                if h2.position == 'first' or h1.hanja == h2.hanja:
                    continue
                result.total_combinations += 1

                four_geok = calculate_four_geok(surname_info.strokes, h1.strokes, h2.strokes)
                rejected = self._filter_chain(surname_info, h1, h2, four_geok, style_mode)
                if rejected:
                    result.filtered_out.append(rejected)
                    continue

                candidate = self._score(surname_info, h1, h2, four_geok, element_weights, yongsin_map)

                rejected = self._post_filter(candidate, gender)
                if rejected:
                    result.filtered_out.append(rejected)
                    continue
                scored.append(candidate)

        logger.debug(
            f"{surname}: {result.total_combinations} combinations, "
            f"{len(result.filtered_out)} filtered, {len(scored)} scored"
        )

        result.candidates = rank_candidates(scored)
        if limit is not None:
            result.candidates = result.candidates[:limit]
        return result

    def evaluate(self,
                 surname: str,
                 given_hanja: str,
                 surname_hanja: Optional[str] = None,
                 gender: Optional[str] = None,
                 style_mode: str = "balanced",
                 yongsin: Optional[YongsinResult] = None):
        """
        Run one given name through the same filters and scoring as ``generate``.

        Returns:
            (candidate, None) when the name survives, or (None, FilteredName)
            naming the first filter that removed it
        """
        surname_info = get_surname(surname, surname_hanja)
        if len(given_hanja) != 2:
            raise ValueError(f"Given name Hanja must be two characters: {given_hanja!r}")
        index = {h.hanja: h for h in self._table}
        missing = [char for char in given_hanja if char not in index]
        if missing:
            raise UnknownHanjaError(f"Unknown name Hanja: {''.join(missing)}")
        h1, h2 = index[given_hanja[0]], index[given_hanja[1]]

        yongsin_map = yongsin_weights(yongsin) if yongsin else None
        element_weights = elements.build_element_weights(yongsin_map) if yongsin_map else None

        four_geok = calculate_four_geok(surname_info.strokes, h1.strokes, h2.strokes)
        rejected = self._filter_chain(surname_info, h1, h2, four_geok, style_mode)
        if rejected:
            return None, rejected
        candidate = self._score(surname_info, h1, h2, four_geok, element_weights, yongsin_map)
        rejected = self._post_filter(candidate, gender)
        if rejected:
            return None, rejected
        candidate.rank = 1
        return candidate, None

    # -------------------------------------------------------------------------
    # Stages
    # -------------------------------------------------------------------------

    def _hanja_pool(self, gender: Optional[str]) -> List[HanjaEntry]:
        return [
            h for h in self._table
            if (gender is None or h.gender in (gender, 'N'))
            and h.modernity >= self._min_modernity
        ]

    def _filter_chain(self, surname: Surname, h1: HanjaEntry, h2: HanjaEntry,
                      four_geok: FourGeok, style_mode: str) -> Optional[FilteredName]:
        """First filter that rejects the pair, or None."""
        given = h1.hangul + h2.hangul

        def reject(layer: str, reason: str) -> FilteredName:
            return FilteredName(name=given, layer=layer, reason=reason, hanja=h1.hanja + h2.hanja)

        if not passes_style(four_geok, style_mode):
            return reject(SOFT, f"suri_style: {style_mode} 수리 조건 미달")

        row = awkward_combination(surname.hangul, given)
        if row and row.get('severity') == 'critical':
            return reject(HARD, f"awkward_combination: {row.get('reason', '')}")

        for row in load_filters().get('homophones') or []:
            if row['word'] in given and row.get('severity') == 'critical':
                return reject(HARD, f"homophone: {row.get('reason', '')}")

        reason = phonetics.aspirated_block(h1.hangul, h2.hangul)
        if reason:
            return reject(HARD, f"aspirated: {reason}")

        reason = (phonetics.syllable_block(h1.hangul, h2.hangul)
                  or phonetics.awkward_phonetics(h1.hangul, h2.hangul))
        if reason:
            return reject(HARD, f"awkward_phonetics: {reason}")

        reason = phonetics.initial_repetition(surname.hangul, h1.hangul, h2.hangul)
        if reason:
            return reject(HARD, f"initial_repetition: {reason}")

        reason = phonetics.round_vowel_conflict(h1.hangul, h2.hangul)
        if reason:
            return reject(HARD, f"round_vowel: {reason}")

        reason = (phonetics.jong_cho_conflict(surname.hangul, h1.hangul)
                  or phonetics.jong_cho_conflict(h1.hangul, h2.hangul))
        if reason:
            return reject(HARD, f"seam_conflict: {reason}")

        row = bad_combination(surname.hangul, given)
        if row:
            return reject(HARD, f"bad_combination: '{row['word']}' {row.get('reason', '')}")

        risk = check_global_risk(given)
        if risk.is_critical:
            return reject(HARD, f"global_risk: {risk.warning.get('reason', '')}")

        return None

    def _score(self, surname: Surname, h1: HanjaEntry, h2: HanjaEntry, four_geok: FourGeok,
               element_weights: Optional[Dict[str, float]],
               yongsin_map: Optional[Dict[str, float]]) -> NameCandidate:
        cfg = self._cfg
        given = h1.hangul + h2.hangul
        b = ScoreBreakdown()

        b.base = cfg['base_score']
        b.element = elements.element_score(surname.element, h1.element, h2.element, element_weights)
        b.suri = weighted_suri_score(four_geok)
        b.bonus = elements.bonus_score(h1, h2)
        b.penalty = homophone_penalty(given) + common_word_penalty(given)
        raw_traditional = b.base + b.element + b.suri + b.bonus - b.penalty
        b.traditional = round(raw_traditional / cfg['traditional_raw_max'] * cfg['traditional_points_max'])

        modernity_avg = (h1.modernity + h2.modernity) / 2
        b.modernity = modernity_points(modernity_avg)
        b.popularity = popularity_score(h1.hangul, h2.hangul) * cfg['popularity_weight']
        b.flow = phonetics.phonetic_flow_score(h1.hangul, h2.hangul) * cfg['flow_weight']
        b.semantic_risk = semantic_risk_score(h1.hangul, h2.hangul)
        b.bunpa = bunpa_score(h1.hanja, h2.hanja)
        b.surname_harmony = phonetics.surname_harmony(surname.hangul, h1.hangul, h2.hangul)
        b.surname_flow = phonetics.surname_flow(surname.hangul, h1.hangul)
        b.advanced_phonetic = phonetics.advanced_phonetic_score(surname.hangul, h1.hangul, h2.hangul)
        adjustment = modernity_adjustment(h1.hangul, h2.hangul)
        b.modernity_penalty = adjustment.penalty
        b.modernity_bonus = adjustment.bonus

        b.raw = (b.modernity + b.traditional + b.popularity + b.flow + b.semantic_risk
                 + b.bunpa + b.surname_harmony + b.surname_flow + b.advanced_phonetic
                 - b.modernity_penalty + b.modernity_bonus)

        tier = suri_tier(four_geok)
        b.tier_multiplier = self._norm['tier_multipliers'][tier]
        normalized = (b.raw * b.tier_multiplier * self._norm['scale']
                      + daegil_count(four_geok) * self._norm['daegil_bonus']
                      - bad_count(four_geok) * self._norm['bad_penalty'])
        b.normalized = _clamp_score(normalized)
        score = b.normalized

        if yongsin_map:
            b.yongsin_bonus = self._yongsin_bonus(h1, h2, yongsin_map, adjustment.syllable_score)
            score = _clamp_score(score + b.yongsin_bonus)

        warnings = []
        risk = check_global_risk(given)
        if risk.warning:
            warnings.append({'type': 'global_risk', **risk.warning})

        return NameCandidate(
            surname=surname,
            hanja1=h1,
            hanja2=h2,
            four_geok=four_geok,
            score=score,
            breakdown=b,
            suri_tier=tier,
            global_check=check_global_name(surname.hangul + given),
            warnings=warnings,
        )

    def _yongsin_bonus(self, h1: HanjaEntry, h2: HanjaEntry,
                       weights: Dict[str, float], syllable_score: float) -> float:
        """Bonus for characters of favoured elements, scaled by syllable modernity."""
        cfg = self._yongsin_cfg
        multiplier = (syllable_score + cfg['multiplier_offset']) / cfg['multiplier_divisor']
        multiplier = max(cfg['multiplier_min'], min(cfg['multiplier_max'], multiplier))

        bonus = 0
        yongsin_chars = 0
        for entry in (h1, h2):
            weight = weights.get(entry.element, 0)
            if weight >= cfg['yongsin_threshold']:
                bonus += round(cfg['yongsin_points'] * multiplier)
                yongsin_chars += 1
            elif weight >= cfg['huisin_threshold']:
                bonus += round(cfg['huisin_points'] * multiplier)
            elif weight <= cfg['gisin_threshold']:
                bonus -= cfg['gisin_points']
        if yongsin_chars == 2:
            bonus += round(cfg['double_yongsin_points'] * multiplier)
        return bonus / cfg['scale_divisor']

    def _post_filter(self, candidate: NameCandidate, gender: Optional[str]) -> Optional[FilteredName]:
        post = self._post
        h1, h2 = candidate.hanja1, candidate.hanja2

        def reject(layer: str, reason: str) -> FilteredName:
            return FilteredName(name=candidate.hangul, layer=layer, reason=reason, hanja=candidate.hanja)

        tendency = (h1.gender_tendency + h2.gender_tendency) / 2
        if gender == 'M' and tendency <= post['male_min_tendency']:
            return reject(SOFT, f"gender_tendency: 여성적 경향 ({tendency:.1f})")
        if gender == 'F' and tendency >= post['female_max_tendency']:
            return reject(SOFT, f"gender_tendency: 남성적 경향 ({tendency:.1f})")

        if initial_sound(h1.hangul) == initial_sound(h2.hangul):
            return reject(HARD, f"identical_initials: {initial_sound(h1.hangul)}")

        if candidate.surname.hangul == h1.hangul:
            return reject(HARD, "surname_repeat: 성씨와 첫 글자 동일")

        avg = candidate.modernity_avg
        gap = abs(h1.modernity - h2.modernity)
        if avg < post['min_avg_modernity']:
            return reject(SOFT, f"modernity: 평균 현대성 {avg:.1f}")
        if avg < post['balanced_avg_modernity'] and gap > post['max_modernity_gap']:
            return reject(SOFT, f"modernity: 현대성 불균형 {avg:.1f}/{gap:.1f}")

        filters = load_filters()
        if candidate.full_hangul in (filters.get('blocked_full_names') or []):
            return reject(HARD, "blocked_full_name: 사용할 수 없는 이름")
        if candidate.hangul in (filters.get('critical_blocks') or []):
            return reject(HARD, "critical_block: 부적절한 의미")

        return None


# =============================================================================
# Ranking
# =============================================================================

def _clamp_score(value: float) -> int:
    return max(0, min(100, round(value)))


def _rank_key(candidate: NameCandidate):
    return (
        -candidate.score,
        candidate.bad_count,
        -candidate.daegil_count,
        -candidate.modernity_avg,
        candidate.hanja,
    )


def rank_candidates(candidates: List[NameCandidate]) -> List[NameCandidate]:
    """Sort by score and suri quality; ranks start at 1."""
    ranked = sorted(candidates, key=_rank_key)
    for idx, candidate in enumerate(ranked, start=1):
        candidate.rank = idx
    return ranked


def rescore_with_llm(candidates: List[NameCandidate],
                     evaluator,
                     surname: str,
                     gender: Optional[str] = None,
                     top_n: Optional[int] = None,
                     weight: Optional[float] = None) -> List[NameCandidate]:
    """
    Blend LLM evaluations into the top candidates and re-rank.

    Old-fashioned verdicts lose the configured penalty (floored at 0).
    Candidates beyond ``top_n`` keep their scores, and so do evaluations
    that came back with an error.
    """
    from jakmyeong.llm_evaluator import apply_llm_score

    if top_n is None:
        top_n = get_setting("llm.max_candidates", 50)
    if weight is None:
        weight = get_setting("llm.score_weight", 0.25)
    old_penalty = get_setting("llm.old_fashioned_penalty", 25)

    head = candidates[:top_n]
    evaluations = evaluator.evaluate_batch(
        [(c.full_hangul, c.hanja) for c in head], surname=surname, gender=gender,
    )
    for candidate, evaluation in zip(head, evaluations):
        if evaluation is None or evaluation.error:
            continue
        candidate.llm = evaluation.to_dict()
        blended = apply_llm_score(candidate.score, evaluation, weight)
        if evaluation.is_old_fashioned:
            blended = max(0, blended - old_penalty)
        candidate.breakdown.llm = blended
        candidate.score = blended

    logger.debug(f"LLM rescored {len(head)} candidates")
    return rank_candidates(candidates)
