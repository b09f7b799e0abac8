#!/usr/bin/env python3
"""
Jakmyeong - Korean Baby Name Generator
======================================

Generates and ranks Hanja given names for Korean surnames, scored on
81-suri numerology, Five Elements, phonetics, modernity and taboo
checks, optionally tuned to the child's birth chart (사주).

Quick Start
-----------
    from jakmyeong import Jakmyeong

    jm = Jakmyeong()

    # Ranked candidates
    result = jm.generate('김', gender='F', birth_date='2024-03-15', birth_hour=9)

    # Five at a time, never repeating a name
    manager = jm.batches('김', gender='F')
    batch = manager.get_next_batch()

    # Narrative report for a chosen name
    report = jm.report('김', '서윤', '瑞允')

Modules
-------
    jakmyeong.generator     - Enumeration, filters, scoring and ranking
    jakmyeong.batch         - Pagination without repeats
    jakmyeong.saju          - Four pillars and yongsin
    jakmyeong.kasi          - KASI lunar calendar client
    jakmyeong.llm_evaluator - Optional LLM re-scoring
    jakmyeong.report        - Name report
    jakmyeong.pure_korean   - 순우리말 names
    jakmyeong.history       - SQLite store for saved names

CLI Usage
---------
    python -m jakmyeong generate 김 --gender F -n 10
    python -m jakmyeong more 김 --gender F
    python -m jakmyeong report 김 서윤 瑞允
"""

__version__ = "0.2.0"
__author__ = "Jakmyeong"

from typing import Optional

# =============================================================================
# Submodule Imports
# =============================================================================

from .batch import BatchManager, BatchResult
from .config import Config, get_config
from .generator import GenerationResult, NameCandidate, NameGenerator, rank_candidates, rescore_with_llm
from .hazards import FilteredName, HazardResult, NameHazardChecker
from .history import HistoryEntry, NameHistoryDB, NameStatus
from .kasi import KasiClient, KasiError, get_saju
from .llm_evaluator import LLMEvaluator, NameEvaluation, apply_llm_score
from .pure_korean import PureKoreanGenerator, PureKoreanName
from .report import NameReport, ReportGenerator
from .saju import InvalidBirthDateError, SajuResult, YongsinResult, calculate_saju, extract_yongsin
from .tables import UnknownHanjaError, UnknownSurnameError, given_name_entries


# =============================================================================
# Jakmyeong Main Class
# =============================================================================

class Jakmyeong:
    """
    Main interface tying generation, birth-chart analysis, reports and
    history together.

    Attributes
    ----------
    history : NameHistoryDB
        Saved names and paging sessions (opened on first use)
    config : Config
        API keys from .env

    Examples
    --------
        >>> jm = Jakmyeong()
        >>> result = jm.generate('이', gender='M', limit=5)
        >>> for c in result.candidates:
        ...     print(c.rank, c.full_hangul, c.full_hanja, c.score)
    """

    def __init__(self, db_path: str = None):
        """
        Parameters
        ----------
        db_path : str, optional
            Path to the history database. Defaults to ``history.db_path``
            in app.yaml.
        """
        self._config = get_config()
        self._db_path = db_path
        self._history = None

        self._generator = NameGenerator()
        self._reports = ReportGenerator()
        self._pure = None
        self._llm = None

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def history(self) -> NameHistoryDB:
        if self._history is None:
            self._history = NameHistoryDB(self._db_path)
        return self._history

    @property
    def config(self) -> Config:
        return self._config

    # -------------------------------------------------------------------------
    # Birth chart
    # -------------------------------------------------------------------------

    def saju(self, birth_date, birth_hour: Optional[int] = None) -> SajuResult:
        """Four pillars, from KASI when a key is configured."""
        return get_saju(birth_date, birth_hour)

    def yongsin(self, birth_date, birth_hour: Optional[int] = None) -> YongsinResult:
        return extract_yongsin(self.saju(birth_date, birth_hour))

    # -------------------------------------------------------------------------
    # Generation
    # -------------------------------------------------------------------------

    def generate(self,
                 surname: str,
                 gender: Optional[str] = None,
                 style_mode: str = "balanced",
                 birth_date=None,
                 birth_hour: Optional[int] = None,
                 surname_hanja: Optional[str] = None,
                 limit: Optional[int] = None,
                 use_llm: bool = False) -> GenerationResult:
        """
        Generate ranked candidates.

        Parameters
        ----------
        surname : str
            Surname in Hangul
        gender : str, optional
            'M', 'F' or None for both
        style_mode : str
            'balanced', 'modern' or 'saju_perfect'
        birth_date : str or date, optional
            Birth date; enables the yongsin bonus
        birth_hour : int, optional
            Birth hour (0-23)
        surname_hanja : str, optional
            Surname Hanja when the surname has several
        limit : int, optional
            Keep only the top N candidates
        use_llm : bool
            Blend LLM evaluations into the top candidates

        Returns
        -------
        GenerationResult
        """
        yongsin = self.yongsin(birth_date, birth_hour) if birth_date else None
        result = self._generator.generate(
            surname,
            surname_hanja=surname_hanja,
            gender=gender,
            style_mode=style_mode,
            yongsin=yongsin,
        )
        if use_llm:
            result.candidates = rescore_with_llm(result.candidates, self.llm, surname, gender)
        if limit is not None:
            result.candidates = result.candidates[:limit]
        return result

    def batches(self, surname: str, batch_size: Optional[int] = None, **kwargs) -> BatchManager:
        """A BatchManager over every candidate ``generate`` would return."""
        kwargs.pop('limit', None)
        result = self.generate(surname, **kwargs)
        return BatchManager(result.candidates, batch_size=batch_size)

    @property
    def llm(self) -> LLMEvaluator:
        if self._llm is None:
            self._llm = LLMEvaluator()
        return self._llm

    def pure(self, surname: str, gender: Optional[str] = None, limit: Optional[int] = 20) -> list:
        """순우리말 names for a surname."""
        if self._pure is None:
            self._pure = PureKoreanGenerator()
        return self._pure.generate(surname, gender=gender, limit=limit)

    # -------------------------------------------------------------------------
    # Review
    # -------------------------------------------------------------------------

    def check(self,
              surname: str,
              given_name: str,
              given_hanja: Optional[str] = None,
              surname_hanja: Optional[str] = None,
              gender: Optional[str] = None) -> dict:
        """
        Filters and hazards for one name.

        Returns
        -------
        dict
            'hazards' (HazardResult), 'phonetics' (filter reasons),
            'global_check' (GlobalCheckResult), 'candidate' (NameCandidate
            or None) and 'filtered' (FilteredName or None). Without Hanja
            the candidate is not scored.
        """
        from .global_check import check_global_name
        from .phonetics import phonetic_filters

        if len(given_name) != 2:
            raise ValueError(f"Given name must be two syllables: {given_name!r}")

        result = {'candidate': None, 'filtered': None}
        syllables = list(given_name)
        if given_hanja:
            syllables = given_name_entries(given_name, given_hanja)
            result['candidate'], result['filtered'] = self._generator.evaluate(
                surname, given_hanja, surname_hanja=surname_hanja, gender=gender)

        result['hazards'] = NameHazardChecker().check(surname, *syllables)
        result['phonetics'] = phonetic_filters(surname, given_name[0], given_name[1])
        result['global_check'] = check_global_name(surname + given_name)
        return result

    def report(self,
               surname: str,
               given_name: str,
               given_hanja: str,
               surname_hanja: Optional[str] = None,
               birth_date=None,
               birth_hour: Optional[int] = None) -> NameReport:
        saju = self.saju(birth_date, birth_hour) if birth_date else None
        return self._reports.generate(
            surname, given_name,
            surname_hanja=surname_hanja,
            given_hanja=given_hanja,
            saju=saju,
        )

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def save(self, candidate, status: str = None) -> HistoryEntry:
        """Save a candidate to the history database."""
        return self.history.save(candidate, NameStatus(status) if status else None)


# =============================================================================
# Public API
# =============================================================================

__all__ = [
    '__version__',
    'Jakmyeong',

    # Generation
    'NameGenerator',
    'NameCandidate',
    'GenerationResult',
    'rank_candidates',
    'rescore_with_llm',
    'BatchManager',
    'BatchResult',
    'PureKoreanGenerator',
    'PureKoreanName',

    # Checks and reports
    'NameHazardChecker',
    'HazardResult',
    'FilteredName',
    'ReportGenerator',
    'NameReport',

    # Birth chart
    'SajuResult',
    'YongsinResult',
    'calculate_saju',
    'extract_yongsin',
    'get_saju',
    'KasiClient',
    'KasiError',

    # LLM
    'LLMEvaluator',
    'NameEvaluation',
    'apply_llm_score',

    # Persistence
    'NameHistoryDB',
    'HistoryEntry',
    'NameStatus',

    # Config and errors
    'Config',
    'get_config',
    'UnknownSurnameError',
    'UnknownHanjaError',
    'InvalidBirthDateError',
]
