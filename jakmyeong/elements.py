#!/usr/bin/env python3
"""
Five Elements (오행)
====================
Generation (상생) and destruction (상극) cycles, the element score of a
name pair, and the consonant elements used for pronunciation (발음오행).

    상생: Wood → Fire → Earth → Metal → Water → Wood
    상극: Wood → Earth → Water → Fire → Metal → Wood
"""

from typing import Dict, Iterable, List, Optional

from jakmyeong.settings import get_setting, require_setting
from jakmyeong.tables import ELEMENTS, HanjaEntry

GENERATES = {
    'Wood': 'Fire',
    'Fire': 'Earth',
    'Earth': 'Metal',
    'Metal': 'Water',
    'Water': 'Wood',
}

DESTROYS = {
    'Wood': 'Earth',
    'Earth': 'Water',
    'Water': 'Fire',
    'Fire': 'Metal',
    'Metal': 'Wood',
}

YANG_ELEMENTS = frozenset(['Wood', 'Fire'])

KOREAN_NAMES = {
    'Wood': '목',
    'Fire': '화',
    'Earth': '토',
    'Metal': '금',
    'Water': '수',
}

# 발음오행 (훈민정음 해례 기준)
CONSONANT_ELEMENTS = {
    'ㄱ': 'Wood', 'ㅋ': 'Wood', 'ㄲ': 'Wood',
    'ㄴ': 'Fire', 'ㄷ': 'Fire', 'ㄹ': 'Fire', 'ㅌ': 'Fire', 'ㄸ': 'Fire',
    'ㅇ': 'Earth', 'ㅎ': 'Earth',
    'ㅅ': 'Metal', 'ㅈ': 'Metal', 'ㅊ': 'Metal', 'ㅆ': 'Metal', 'ㅉ': 'Metal',
    'ㅁ': 'Water', 'ㅂ': 'Water', 'ㅍ': 'Water', 'ㅃ': 'Water',
}


def generates(a: str, b: str) -> bool:
    return GENERATES.get(a) == b


def destroys(a: str, b: str) -> bool:
    return DESTROYS.get(a) == b


def relation(a: str, b: str) -> str:
    """'same', 'generates', 'generated_by', 'destroys', 'destroyed_by'."""
    if a == b:
        return 'same'
    if generates(a, b):
        return 'generates'
    if generates(b, a):
        return 'generated_by'
    if destroys(a, b):
        return 'destroys'
    return 'destroyed_by'


def birther_of(element: str) -> str:
    """The element that generates ``element``."""
    for source, target in GENERATES.items():
        if target == element:
            return source
    raise ValueError(f"Unknown element: {element}")


def controller_of(element: str) -> str:
    """The element that destroys ``element``."""
    for source, target in DESTROYS.items():
        if target == element:
            return source
    raise ValueError(f"Unknown element: {element}")


def element_score(surname_el: str, el1: str, el2: str,
                  weights: Optional[Dict[str, float]] = None) -> float:
    """
    Five-element harmony of surname → first → second character.

    With ``weights`` (from yongsin analysis or preferences) each
    character earns 0.4 points per weight point, and a character whose
    element carries no weight loses 15. Weights only apply when they
    sum to more than zero.
    """
    cfg = get_setting("generator.element", {}) or {}
    score = cfg.get('start', 20)
    if generates(el1, el2):
        score += cfg.get('generates_bonus', 10)
    if generates(surname_el, el1):
        score += cfg.get('surname_generates_bonus', 5)
    if destroys(el1, el2):
        score -= cfg.get('destroys_penalty', 10)

    if weights and sum(weights.values()) > 0:
        factor = cfg.get('weight_factor', 0.4)
        w1 = weights.get(el1, 0)
        w2 = weights.get(el2, 0)
        for w in (w1, w2):
            if w == 0:
                score -= cfg.get('zero_weight_penalty', 15)
            else:
                score += w * factor
        threshold = cfg.get('strong_pair_threshold', 15)
        if w1 >= threshold and w2 >= threshold:
            score += cfg.get('strong_pair_bonus', 10)

    return max(cfg.get('min', -20), min(cfg.get('max', 80), score))


def bonus_score(h1: HanjaEntry, h2: HanjaEntry) -> int:
    """Positional fit and yin/yang balance of a pair."""
    bonus = 0
    if h1.position == 'first' and h2.position == 'last':
        bonus += 3
    if (h1.element in YANG_ELEMENTS) != (h2.element in YANG_ELEMENTS):
        bonus += 3
    return min(require_setting("generator.bonus_cap"), bonus)


def consonant_element(initial: str) -> Optional[str]:
    return CONSONANT_ELEMENTS.get(initial)


def build_element_weights(yongsin_weights: Optional[Dict[str, float]] = None,
                          preference_weights: Optional[Dict[str, float]] = None,
                          tags: Optional[Iterable[str]] = None,
                          rules: Optional[List[Dict]] = None) -> Dict[str, float]:
    """
    Merge element weights from the available sources.

    Explicit ``preference_weights`` are added to the yongsin weights.
    Without them, each tag naming an element adds the configured
    preference weight. Logic rules whose tag is present then add their
    weight to an element, but only where that element is already
    favoured.
    """
    weights: Dict[str, float] = dict(yongsin_weights or {})
    tags = list(tags or [])

    if preference_weights:
        for element, value in preference_weights.items():
            weights[element] = weights.get(element, 0) + value
    else:
        tag_weight = get_setting("generator.preference_tag_weight", 5)
        for tag in tags:
            if tag in ELEMENTS:
                weights[tag] = weights.get(tag, 0) + tag_weight

    if rules is None:
        rules = get_setting("generator.logic_rules", []) or []
    for rule in rules:
        element = rule.get('element')
        if rule.get('tag') not in tags:
            continue
        if weights.get(element, 0) > 0:
            weights[element] += rule.get('weight', 0)

    return weights
