#!/usr/bin/env python3
"""
Global Name Check
=================
Checks how a Korean name reads to English speakers:

- romanized spellings resembling negative English words
- consonant clusters that are hard for foreign speakers
- configured bad words in the romanized name (``filters.yaml``)

Input may be Hangul or an already romanized string; Hangul is
romanized first.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from jakmyeong.hangul import romanize, romanization_variants
from jakmyeong.tables import load_filters

NEGATIVE_SOUND_PATTERNS = [
    (re.compile(r'die', re.IGNORECASE), '영어 "die"(죽다)와 유사한 발음'),
    (re.compile(r'kill', re.IGNORECASE), '영어 "kill"(죽이다)와 유사한 발음'),
    (re.compile(r'dead', re.IGNORECASE), '영어 "dead"(죽은)와 유사한 발음'),
    (re.compile(r'sick', re.IGNORECASE), '영어 "sick"(아픈)과 유사한 발음'),
    (re.compile(r'sin', re.IGNORECASE), '영어 "sin"(죄)과 유사한 발음'),
    (re.compile(r'fat', re.IGNORECASE), '영어 "fat"(뚱뚱한)과 유사한 발음'),
    (re.compile(r'dumb', re.IGNORECASE), '영어 "dumb"(바보)와 유사한 발음'),
    (re.compile(r'hell', re.IGNORECASE), '영어 "hell"(지옥)과 유사한 발음'),
    (re.compile(r'hate', re.IGNORECASE), '영어 "hate"(증오)와 유사한 발음'),
    (re.compile(r'poo', re.IGNORECASE), '영어 "poo"(똥)와 유사한 발음'),
    (re.compile(r'bum', re.IGNORECASE), '영어 "bum"(부랑자)과 유사한 발음'),
    (re.compile(r'butt', re.IGNORECASE), '영어 "butt"(엉덩이)와 유사한 발음'),
]

CONSONANT_RUN = re.compile(r'[bcdfghjklmnpqrstvwxyz]{4,}', re.IGNORECASE)
NG_CLUSTER = re.compile(r'ng[gk]', re.IGNORECASE)


@dataclass
class GlobalCheckResult:
    """Foreign pronunciation review of one name."""
    romanized: str
    warnings: List[Dict[str, str]] = field(default_factory=list)

    @property
    def is_safe(self) -> bool:
        return not self.warnings

    @property
    def primary_warning(self) -> Optional[Dict[str, str]]:
        return self.warnings[0] if self.warnings else None

    def to_dict(self) -> dict:
        return {
            'romanized': self.romanized,
            'is_safe': self.is_safe,
            'warnings': list(self.warnings),
            'primary_warning': self.primary_warning,
        }


@dataclass
class GlobalRiskResult:
    is_critical: bool
    warning: Optional[Dict[str, str]] = None


def check_english_pronunciation(name: str) -> List[Dict[str, str]]:
    """First negative pattern matched by each romanization variant."""
    warnings = []
    for variant in romanization_variants(name):
        for pattern, reason in NEGATIVE_SOUND_PATTERNS:
            if pattern.search(variant):
                warnings.append({
                    'type': 'pronunciation',
                    'severity': 'warning',
                    'romanized': variant,
                    'reason': reason,
                })
                break
    return warnings


def check_phonetic_complexity(name: str) -> List[Dict[str, str]]:
    romanized = romanize(name)
    warnings = []
    if CONSONANT_RUN.search(romanized):
        warnings.append({
            'type': 'complexity',
            'severity': 'info',
            'reason': '영어권에서 발음하기 어려운 자음 조합',
        })
    if NG_CLUSTER.search(romanized):
        warnings.append({
            'type': 'complexity',
            'severity': 'info',
            'reason': 'ng + g/k 조합은 외국인에게 발음이 어려움',
        })
    return warnings


def check_global_name(name: str) -> GlobalCheckResult:
    return GlobalCheckResult(
        romanized=romanize(name),
        warnings=check_english_pronunciation(name) + check_phonetic_complexity(name),
    )


def check_global_risk(name: str) -> GlobalRiskResult:
    """
    Match configured bad words against every romanization variant.

    The first matching entry decides: a critical entry blocks the name,
    anything else comes back as a warning.
    """
    variants = romanization_variants(name)
    for risk in load_filters().get('global_risk') or []:
        bad_word = risk['bad_word'].lower()
        if any(bad_word in variant for variant in variants):
            if risk.get('severity') == 'critical':
                return GlobalRiskResult(is_critical=True, warning={
                    'word': bad_word,
                    'reason': risk.get('reason', ''),
                })
            return GlobalRiskResult(is_critical=False, warning={
                'word': bad_word,
                'reason': risk.get('reason', ''),
                'alternative': risk.get('alternative', ''),
            })
    return GlobalRiskResult(is_critical=False)
