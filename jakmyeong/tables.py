#!/usr/bin/env python3
"""
Data Tables
===========
Loads the bundled YAML tables under ``jakmyeong/data``:

- hanja.yaml       - name Hanja with strokes, element, gender and modernity
- surnames.yaml    - surname variants keyed by Hangul reading
- suri_81.yaml     - the 81-suri fortune table
- filters.yaml     - taboo, homophone and risk lists
- phonetics.yaml   - syllable blocks, popularity and sound patterns
- pure_korean.yaml - pure Korean name words

Tables are read once and cached for the life of the process.
"""

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, List, Optional

import yaml

from jakmyeong.settings import DATA_DIR

ELEMENTS = ('Wood', 'Fire', 'Earth', 'Metal', 'Water')


class UnknownSurnameError(ValueError):
    """Raised when a surname (or surname Hanja) is not in the table."""


class UnknownHanjaError(ValueError):
    """Raised when a given-name Hanja is not in the name table."""


@dataclass(frozen=True)
class HanjaEntry:
    """A Hanja usable in a given name."""
    hanja: str
    hangul: str
    meaning: str
    strokes: int
    element: str
    gender: str = 'N'          # 'M', 'F' or 'N'
    position: str = 'any'      # 'first', 'last' or 'any'
    gender_tendency: float = 0.0
    modernity: float = 5.0
    tags: tuple = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            'hanja': self.hanja,
            'hangul': self.hangul,
            'meaning': self.meaning,
            'strokes': self.strokes,
            'element': self.element,
            'gender': self.gender,
            'position': self.position,
            'gender_tendency': self.gender_tendency,
            'modernity': self.modernity,
            'tags': list(self.tags),
        }


@dataclass(frozen=True)
class Surname:
    """One Hanja variant of a surname."""
    hangul: str
    hanja: str
    strokes: int
    element: str
    meaning: str = ''
    is_major: bool = False


@lru_cache(maxsize=10)
def load_table(filename: str) -> Dict:
    """Load a YAML table from the data directory."""
    filepath = DATA_DIR / filename
    if not filepath.exists():
        raise FileNotFoundError(f"Missing data table: {filepath}")
    with open(filepath, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f) or {}


def load_filters() -> Dict:
    return load_table('filters.yaml')


def load_phonetics() -> Dict:
    return load_table('phonetics.yaml')


def load_pure_korean() -> Dict:
    return load_table('pure_korean.yaml')


@lru_cache(maxsize=1)
def load_hanja_table() -> tuple:
    """All name Hanja, in table order."""
    entries = []
    for row in load_table('hanja.yaml').get('hanja', []):
        entries.append(HanjaEntry(
            hanja=row['hanja'],
            hangul=row['hangul'],
            meaning=row.get('meaning', ''),
            strokes=int(row['strokes']),
            element=row['element'],
            gender=row.get('gender', 'N'),
            position=row.get('position', 'any'),
            gender_tendency=float(row.get('gender_tendency', 0)),
            modernity=float(row.get('modernity', 5)),
            tags=tuple(row.get('tags', []) or []),
        ))
    return tuple(entries)


def get_hanja(char: str) -> Optional[HanjaEntry]:
    """Look up a Hanja character; None if it is not a name Hanja."""
    for entry in load_hanja_table():
        if entry.hanja == char:
            return entry
    return None


def given_name_entries(given_name: str, given_hanja: str) -> List[HanjaEntry]:
    """
    Resolve a two-syllable given name and its Hanja to table entries.

    Raises ValueError when either side is not two characters or a
    Hanja is not read as its syllable, and UnknownHanjaError for a
    character outside the table.
    """
    if len(given_name or '') != 2 or len(given_hanja or '') != 2:
        raise ValueError(
            f"Given name {given_name!r} and Hanja {given_hanja!r} must be two characters each")
    entries = []
    for hangul, char in zip(given_name, given_hanja):
        entry = get_hanja(char)
        if entry is None:
            raise UnknownHanjaError(f"Unknown name Hanja: {char}")
        if entry.hangul != hangul:
            raise ValueError(f"{char} is read {entry.hangul}, not {hangul}")
        entries.append(entry)
    return entries


def hanja_by_reading(hangul: str) -> List[HanjaEntry]:
    """All Hanja read as the given syllable."""
    return [e for e in load_hanja_table() if e.hangul == hangul]


@lru_cache(maxsize=1)
def _surname_index() -> Dict[str, tuple]:
    index = {}
    for hangul, variants in (load_table('surnames.yaml').get('surnames') or {}).items():
        index[hangul] = tuple(
            Surname(
                hangul=hangul,
                hanja=v['hanja'],
                strokes=int(v['strokes']),
                element=v['element'],
                meaning=v.get('meaning', ''),
                is_major=bool(v.get('is_major', False)),
            )
            for v in variants
        )
    return index


def surname_variants(hangul: str) -> List[Surname]:
    """Every Hanja variant of a surname (empty when unknown)."""
    return list(_surname_index().get(hangul, ()))


def get_surname(hangul: str, hanja: Optional[str] = None) -> Surname:
    """
    Resolve a surname to one Hanja variant.

    Without ``hanja`` the major variant is returned (the first one when
    none is flagged). Raises UnknownSurnameError for unknown input.
    """
    variants = surname_variants(hangul)
    if not variants:
        raise UnknownSurnameError(f"Unknown surname: {hangul}")
    if hanja:
        for variant in variants:
            if variant.hanja == hanja:
                return variant
        raise UnknownSurnameError(f"Unknown Hanja {hanja} for surname {hangul}")
    for variant in variants:
        if variant.is_major:
            return variant
    return variants[0]


def known_surnames() -> List[str]:
    return list(_surname_index().keys())
