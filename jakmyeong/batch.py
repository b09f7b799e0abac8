#!/usr/bin/env python3
"""
Batch Pagination
================
Serves ranked candidates a few at a time without repeating a
Hangul+Hanja combination.

Candidates are walked in tiers (100 names when there are at least 150
candidates, otherwise 60). Inside a tier:

    unique_hangul - names whose Hangul reading has not been shown yet
    hanja_alt     - remaining Hanja alternatives of shown readings

then the next tier begins. The state is a JSON-safe dict so a session
can be resumed (see ``history.NameHistoryDB.save_batch_state``).
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from jakmyeong.settings import require_setting

logger = logging.getLogger(__name__)

PHASE_UNIQUE = 'unique_hangul'
PHASE_HANJA_ALT = 'hanja_alt'
PHASES = (PHASE_UNIQUE, PHASE_HANJA_ALT)


@dataclass
class BatchResult:
    names: List[Any] = field(default_factory=list)
    has_more: bool = False
    total_used: int = 0
    is_exhausted: bool = False


class BatchManager:
    """
    Paginates a ranked candidate list.

    Candidates need ``hangul``, ``hanja``, ``key`` and ``score``
    attributes (``generator.NameCandidate`` has them).

    Usage:
        manager = BatchManager(result.candidates)
        first = manager.get_next_batch()
        second = manager.get_next_batch()
    """

    def __init__(self, candidates: Sequence[Any], batch_size: Optional[int] = None):
        cfg = require_setting("batch")
        self.candidates = list(candidates)
        self.batch_size = batch_size or cfg['default_batch_size']
        if len(self.candidates) >= cfg['large_pool_threshold']:
            self.tier_size = cfg['large_tier_size']
        else:
            self.tier_size = cfg['small_tier_size']
        self.reset()

    def reset(self):
        self.used_hangul = set()
        self.used_combinations = set()
        self.tier_start = 0
        self.phase = PHASE_UNIQUE
        self.search_index = 0

    def is_exhausted(self) -> bool:
        return self.tier_start >= len(self.candidates)

    def _tier(self) -> List[Any]:
        return self.candidates[self.tier_start:self.tier_start + self.tier_size]

    def _next_candidate(self) -> Optional[Any]:
        while not self.is_exhausted():
            tier = self._tier()
            for idx in range(self.search_index, len(tier)):
                candidate = tier[idx]
                if candidate.key in self.used_combinations:
                    continue
                if self.phase == PHASE_UNIQUE and candidate.hangul in self.used_hangul:
                    continue
                self.search_index = idx + 1
                return candidate

            self.search_index = 0
            if self.phase == PHASE_UNIQUE:
                self.phase = PHASE_HANJA_ALT
            else:
                self.phase = PHASE_UNIQUE
                self.tier_start += self.tier_size
                logger.debug(f"Batch tier advanced to {self.tier_start}")
        return None

    def get_next_batch(self, batch_size: Optional[int] = None) -> BatchResult:
        """Next ``batch_size`` unseen candidates, best score first."""
        size = batch_size or self.batch_size
        names = []
        while len(names) < size:
            candidate = self._next_candidate()
            if candidate is None:
                break
            self.used_hangul.add(candidate.hangul)
            self.used_combinations.add(candidate.key)
            names.append(candidate)

        names.sort(key=lambda c: -c.score)
        exhausted = self.is_exhausted()
        return BatchResult(
            names=names,
            has_more=bool(names) and not exhausted,
            total_used=len(self.used_combinations),
            is_exhausted=exhausted,
        )

    def get_state(self) -> Dict[str, Any]:
        return {
            'used_hangul': sorted(self.used_hangul),
            'used_combinations': sorted(self.used_combinations),
            'tier_start': self.tier_start,
            'phase': self.phase,
            'search_index': self.search_index,
        }

    def restore_state(self, state: Dict[str, Any]):
        phase = state.get('phase', PHASE_UNIQUE)
        if phase not in PHASES:
            raise ValueError(f"Unknown batch phase: {phase}")
        self.used_hangul = set(state.get('used_hangul') or [])
        self.used_combinations = set(state.get('used_combinations') or [])
        self.tier_start = int(state.get('tier_start', 0))
        self.phase = phase
        self.search_index = int(state.get('search_index', 0))

    def stats(self) -> Dict[str, Any]:
        return {
            'total_candidates': len(self.candidates),
            'tier_size': self.tier_size,
            'tier_start': self.tier_start,
            'phase': self.phase,
            'used': len(self.used_combinations),
            'unique_hangul_used': len(self.used_hangul),
            'remaining': len(self.candidates) - len(self.used_combinations),
            'is_exhausted': self.is_exhausted(),
        }
