#!/usr/bin/env python3
"""
Name Hazard Checker
===================
Checks a surname + two-syllable given name against the taboo tables in
``data/filters.yaml``:

- awkward combinations (술, 하수 ...)
- homophones and everyday words
- bad combinations inside the full name
- semantic clashes of the ending syllable
- 분파 characters
- blocked full names and critical blocks
- old-fashioned names
- foreign bad words in the romanized name

Each issue carries a severity (clear < low < medium < high < critical)
and a layer:

    HARD    - the candidate is removed
    SOFT    - strong score penalty
    WARNING - mild penalty, shown to the user
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from jakmyeong.global_check import check_global_risk
from jakmyeong.modernity import is_old_fashioned
from jakmyeong.settings import require_setting
from jakmyeong.tables import HanjaEntry, load_filters

HARD = 'HARD'
SOFT = 'SOFT'
WARNING = 'WARNING'

Syllable = Union[str, HanjaEntry]


@dataclass
class HazardResult:
    """Result of hazard checking."""
    is_safe: bool
    severity: str  # 'clear', 'low', 'medium', 'high', 'critical'
    issues: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def blocking(self) -> List[Dict[str, Any]]:
        return [i for i in self.issues if i.get('layer') == HARD]


@dataclass
class FilteredName:
    """A candidate removed by a filter, with the layer and reason."""
    name: str
    layer: str
    reason: str
    hanja: str = ''

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'hanja': self.hanja,
            'layer': self.layer,
            'reason': self.reason,
        }


def _reading(syllable: Syllable) -> Tuple[str, str]:
    if isinstance(syllable, HanjaEntry):
        return syllable.hangul, syllable.hanja
    return syllable, ''


def _require_cfg(cfg: Dict[str, Any], key: str, context: str):
    value = cfg.get(key)
    if value is None:
        raise ValueError(f"{context}.{key} must be set in filters.yaml")
    return value


# =============================================================================
# Score helpers
# =============================================================================

def _matches(table: str, given: str) -> List[Dict[str, Any]]:
    return [row for row in load_filters().get(table) or [] if row['word'] in given]


def homophone_penalty(given: str) -> int:
    """Points lost to homophones of the given name."""
    rates = require_setting("generator.penalties.homophone")
    return sum(rates.get(row.get('severity', 'warning'), 0) for row in _matches('homophones', given))


def common_word_penalty(given: str) -> int:
    rates = require_setting("generator.penalties.common_word")
    return sum(
        rates.get(row.get('severity', 'warning'), 0)
        for row in load_filters().get('common_words') or []
        if row['word'] == given
    )


def _semantic_rules(h1: str, h2: str) -> List[Dict[str, Any]]:
    hits = []
    for rule in load_filters().get('semantic_risk') or []:
        if rule['ending'] != h2:
            continue
        if 'after' in rule and h1 not in rule['after']:
            continue
        if 'unless_after' in rule and h1 in rule['unless_after']:
            continue
        hits.append(rule)
    return hits


def semantic_risk_score(h1: str, h2: str) -> int:
    """Ending-syllable clashes (<= 0)."""
    return sum(rule.get('score', 0) for rule in _semantic_rules(h1, h2))


def bunpa_level(hanja: str) -> Optional[str]:
    """'strong', 'medium', 'mild' or None."""
    table = load_filters().get('bunpa', {}) or {}
    for level in ('strong', 'medium', 'mild'):
        if hanja in (table.get(level) or []):
            return level
    return None


def bunpa_score(hanja1: str, hanja2: str) -> int:
    penalties = (load_filters().get('bunpa', {}) or {}).get('penalties', {}) or {}
    score = 0
    for hanja in (hanja1, hanja2):
        level = bunpa_level(hanja)
        if level:
            score += penalties.get(level, 0)
    return score


def awkward_combination(surname: str, given: str) -> Optional[Dict[str, Any]]:
    full = surname + given
    for row in load_filters().get('awkward_combinations') or []:
        if row['name'] in (given, full):
            return row
    return None


def bad_combination(surname: str, given: str) -> Optional[Dict[str, Any]]:
    """Taboo word equal to the given name or inside the full name."""
    full = surname + given
    for row in load_filters().get('bad_combinations') or []:
        if given == row['word'] or row['word'] in full:
            return row
    return None


# =============================================================================
# Checker
# =============================================================================

class NameHazardChecker:
    """
    Collects every hazard of one name.

    Usage:
        checker = NameHazardChecker()
        result = checker.check('김', '지', '진')
        if not result.is_safe:
            print(result.issues)
    """

    def __init__(self):
        self._filters = load_filters()
        rank_map = self._filters.get('severity_rank')
        if not rank_map:
            raise ValueError("severity_rank must be set in filters.yaml")
        self._severity_rank_map = {k: int(v) for k, v in rank_map.items()}
        self._severity_default = _require_cfg(self._filters, 'severity_default', 'filters')
        self._safe_max_rank = _require_cfg(self._filters, 'safe_max_rank', 'filters')
        self._severity_map = {v: k for k, v in self._severity_rank_map.items()}

    def _issue(self, issue_type: str, severity: str, layer: str, reason: str, **extra) -> Dict[str, Any]:
        issue = {'type': issue_type, 'severity': severity, 'layer': layer, 'reason': reason}
        issue.update(extra)
        return issue

    def check(self, surname: str, h1: Syllable, h2: Syllable) -> HazardResult:
        """
        Check a name for hazards.

        Parameters
        ----------
        surname : str
            Surname in Hangul
        h1, h2 : str or HanjaEntry
            Given-name syllables. Hanja entries enable the 분파 check.

        Returns
        -------
        HazardResult
            Result with safety assessment and issues found
        """
        hangul1, hanja1 = _reading(h1)
        hangul2, hanja2 = _reading(h2)
        given = hangul1 + hangul2
        full = surname + given
        issues = []

        row = awkward_combination(surname, given)
        if row:
            critical = row.get('severity') == 'critical'
            issues.append(self._issue(
                'awkward_combination',
                'critical' if critical else 'medium',
                HARD if critical else WARNING,
                row.get('reason', ''),
                word=row['name'],
            ))

        for row in _matches('homophones', given):
            critical = row.get('severity') == 'critical'
            issues.append(self._issue(
                'homophone',
                'critical' if critical else 'medium',
                HARD if critical else WARNING,
                row.get('reason', ''),
                word=row['word'],
                category=row.get('category', ''),
            ))

        for row in self._filters.get('common_words') or []:
            if row['word'] == given:
                critical = row.get('severity') == 'critical'
                issues.append(self._issue(
                    'common_word',
                    'high' if critical else 'medium',
                    SOFT if critical else WARNING,
                    row.get('reason', ''),
                    word=row['word'],
                    category=row.get('category', ''),
                ))

        row = bad_combination(surname, given)
        if row:
            issues.append(self._issue('bad_combination', 'critical', HARD,
                                      row.get('reason', ''), word=row['word']))

        for rule in _semantic_rules(hangul1, hangul2):
            issues.append(self._issue('semantic_risk', 'low', WARNING,
                                      rule.get('reason', ''), score=rule.get('score', 0)))

        for hanja in (hanja1, hanja2):
            level = bunpa_level(hanja) if hanja else None
            if level:
                issues.append(self._issue(
                    'bunpa',
                    'medium' if level == 'strong' else 'low',
                    WARNING,
                    f"분파 한자 {hanja} ({level})",
                    hanja=hanja,
                    level=level,
                ))

        if full in (self._filters.get('blocked_full_names') or []):
            issues.append(self._issue('blocked_full_name', 'critical', HARD, '사용할 수 없는 이름'))

        if given in (self._filters.get('critical_blocks') or []):
            issues.append(self._issue('critical_block', 'critical', HARD, '부적절한 의미'))

        if is_old_fashioned(given):
            issues.append(self._issue('old_fashioned', 'high', SOFT, '세대감이 강한 이름'))

        risk = check_global_risk(given)
        if risk.warning:
            issues.append(self._issue(
                'global_risk',
                'critical' if risk.is_critical else 'medium',
                HARD if risk.is_critical else WARNING,
                risk.warning.get('reason', ''),
                word=risk.warning.get('word', ''),
            ))

        max_rank = 0
        for issue in issues:
            rank = self._severity_rank_map.get(
                issue['severity'], self._severity_rank_map[self._severity_default])
            max_rank = max(max_rank, rank)

        return HazardResult(
            is_safe=max_rank <= self._safe_max_rank,
            severity=self._severity_map.get(max_rank, 'clear'),
            issues=issues,
        )

    def diagnose(self, surname: str, h1: Syllable, h2: Syllable) -> Optional[FilteredName]:
        """First HARD issue of a name, or None when nothing blocks it."""
        result = self.check(surname, h1, h2)
        blocking = result.blocking
        if not blocking:
            return None
        hangul1, hanja1 = _reading(h1)
        hangul2, hanja2 = _reading(h2)
        issue = blocking[0]
        return FilteredName(
            name=hangul1 + hangul2,
            layer=HARD,
            reason=f"{issue['type']}: {issue['reason']}",
            hanja=hanja1 + hanja2,
        )


def diagnose(surname: str, h1: Syllable, h2: Syllable) -> Optional[FilteredName]:
    return NameHazardChecker().diagnose(surname, h1, h2)
