#!/usr/bin/env python3
"""
Modernity and Popularity
========================
How contemporary a name sounds: Hanja modernity points, syllable and
n-gram popularity with trends, and the old-fashioned/trendy adjustment.
"""

from dataclasses import dataclass

from jakmyeong.tables import load_filters, load_phonetics

# (minimum average modernity, points), checked top-down
MODERNITY_STEPS = [
    (9.5, 55),
    (9.0, 52),
    (8.5, 48),
    (8.0, 43),
    (7.5, 38),
    (7.0, 33),
    (6.5, 24),
]
MODERNITY_FLOOR = 15


@dataclass
class ModernityAdjustment:
    penalty: float = 0
    bonus: float = 0
    syllable_score: float = 0.0


def modernity_points(avg: float) -> int:
    for threshold, points in MODERNITY_STEPS:
        if avg >= threshold:
            return points
    return MODERNITY_FLOOR


def is_old_fashioned(name: str) -> bool:
    """True for given names typical of older generations."""
    names = (load_filters().get('old_fashioned', {}) or {}).get('names') or []
    return name in names


def popularity_score(h1: str, h2: str) -> float:
    """Usage statistics of the pair and its syllables."""
    popularity = load_phonetics().get('popularity', {}) or {}
    combination = h1 + h2
    score = 0.0

    ngrams = popularity.get('ngrams', {}) or {}
    score += (ngrams.get('positive') or {}).get(combination, 0)
    score += (ngrams.get('negative') or {}).get(combination, 0)

    syllables = popularity.get('syllables', {}) or {}
    info1 = syllables.get(h1) or {}
    info2 = syllables.get(h2) or {}
    score += (info1.get('score', 0) + info2.get('score', 0)) * 0.15
    for info in (info1, info2):
        if info.get('trend') == 'rising':
            score += 5
        elif info.get('trend') == 'declining':
            score -= 8

    trending = popularity.get('trending', {}) or {}
    for entry in trending.get('rising') or []:
        if entry['name'] == combination:
            score += entry['score'] * 0.3
            break
    for entry in trending.get('declining') or []:
        if entry['name'] == combination:
            score += entry['score'] * 0.5
            break

    beginnings = popularity.get('preferred_beginnings', {}) or {}
    endings = popularity.get('preferred_endings', {}) or {}
    if h1 in (beginnings.get('M') or []) or h1 in (beginnings.get('F') or []):
        score += 8
    if h2 in (endings.get('M') or []) or h2 in (endings.get('F') or []):
        score += 8
    if h1 in (popularity.get('avoided_beginnings') or []):
        score -= 15
    if h2 in (popularity.get('avoided_endings') or []):
        score -= 20

    return score


def syllable_modernity(syllable: str) -> float:
    """Per-syllable modernity in -5..5 (0 when unlisted)."""
    return (load_phonetics().get('syllable_modernity') or {}).get(syllable, 0)


def modernity_adjustment(h1: str, h2: str) -> ModernityAdjustment:
    """
    Penalty for dated names and syllables, bonus for trendy ones.

    ``syllable_score`` is the mean syllable modernity of the pair; the
    yongsin bonus scales with it.
    """
    rules = load_phonetics()
    cfg = rules.get('modernity_adjustment', {}) or {}
    old = load_filters().get('old_fashioned', {}) or {}
    values = [syllable_modernity(h1), syllable_modernity(h2)]
    result = ModernityAdjustment(syllable_score=sum(values) / 2)

    if is_old_fashioned(h1 + h2):
        result.penalty += old.get('penalty', 0)
    for value in values:
        if value <= cfg.get('old_syllable_threshold', -3):
            result.penalty += cfg.get('old_syllable_penalty', 0)
        if value >= cfg.get('trendy_syllable_threshold', 4):
            result.bonus += cfg.get('trendy_syllable_bonus', 0)

    if h1 + h2 in (rules.get('trendy_names') or []):
        result.bonus += cfg.get('trendy_name_bonus', 0)

    return result
