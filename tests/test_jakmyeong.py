"""
Tests for Jakmyeong Main Class
==============================
Tests for the Jakmyeong facade plus the table, settings and .env
loaders it builds on.
"""

import os
import sys
from pathlib import Path

import pytest

# Ensure repo root is on path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from jakmyeong import Jakmyeong, NameStatus, UnknownHanjaError, UnknownSurnameError
from jakmyeong.config import get_config
from jakmyeong.settings import get_setting, require_setting, resolve_path
from jakmyeong.tables import get_hanja, get_surname, given_name_entries, hanja_by_reading, surname_variants


@pytest.fixture
def jm(tmp_path):
    """Create a Jakmyeong instance with a temporary history."""
    return Jakmyeong(db_path=str(tmp_path / 'history.db'))


class TestJakmyeongInit:
    """Tests for initialization."""

    def test_history_is_lazy(self, jm, tmp_path):
        assert jm._history is None
        assert not (tmp_path / 'history.db').exists()
        jm.history.stats()
        assert (tmp_path / 'history.db').exists()

    def test_llm_is_lazy(self, jm):
        assert jm._llm is None


class TestJakmyeongGenerate:
    """Tests for generation through the facade."""

    def test_generate(self, jm):
        result = jm.generate('김', gender='F', limit=5)
        assert len(result.candidates) == 5

    def test_generate_with_birth(self, jm, monkeypatch):
        from jakmyeong import kasi
        monkeypatch.setattr(kasi.KasiClient, 'has_api_access', property(lambda self: False))
        result = jm.generate('김', birth_date='2024-03-15', birth_hour=9, limit=5)
        assert all(0 <= c.score <= 100 for c in result.candidates)

    def test_batches(self, jm):
        manager = jm.batches('김', batch_size=4, gender='M', limit=2)
        assert len(manager.candidates) > 2
        assert len(manager.get_next_batch().names) == 4

    def test_pure(self, jm):
        names = jm.pure('김', gender='F', limit=5)
        assert len(names) == 5


class TestJakmyeongCheck:
    """Tests for Jakmyeong.check()."""

    def test_with_hanja(self, jm):
        result = jm.check('김', '서윤', given_hanja='瑞允')
        assert result['candidate'] is not None
        assert result['filtered'] is None
        assert result['hazards'].is_safe
        assert result['phonetics'] == []
        assert result['global_check'].romanized == 'gimseoyun'

    def test_without_hanja(self, jm):
        result = jm.check('김', '지진')
        assert result['candidate'] is None
        assert not result['hazards'].is_safe

    def test_filtered_hanja(self, jm):
        result = jm.check('김', '지진', given_hanja='智珍')
        assert result['candidate'] is None
        assert result['filtered'].reason.startswith('homophone')

    def test_bad_length(self, jm):
        with pytest.raises(ValueError):
            jm.check('김', '서')

    def test_reading_mismatch(self, jm):
        with pytest.raises(ValueError):
            jm.check('김', '하윤', given_hanja='瑞允')

    def test_unknown_hanja(self, jm):
        with pytest.raises(UnknownHanjaError):
            jm.check('김', '서윤', given_hanja='龘允')


class TestJakmyeongPersistence:
    """Tests for saving through the facade."""

    def test_save(self, jm):
        candidate = jm.generate('김', limit=1).candidates[0]
        entry = jm.save(candidate, 'favorite')
        assert entry.status == NameStatus.FAVORITE
        assert jm.history.stats()['total'] == 1

    def test_report(self, jm):
        report = jm.report('김', '서윤', '瑞允')
        assert report.full_hanja == '金瑞允'


class TestTables:
    """Tests for the bundled data tables."""

    def test_hanja_lookup(self):
        entry = get_hanja('瑞')
        assert entry.hangul == '서'
        assert entry.strokes == 14
        assert entry.element == 'Metal'
        assert get_hanja('龘') is None

    def test_hanja_by_reading(self):
        assert {e.hanja for e in hanja_by_reading('윤')} >= {'允', '潤'}

    def test_major_surname(self):
        surname = get_surname('김')
        assert surname.hanja == '金'
        assert surname.strokes == 8

    def test_surname_variant(self):
        assert len(surname_variants('정')) >= 2
        assert get_surname('정', '丁').strokes == 2

    def test_given_name_entries(self):
        entries = given_name_entries('서윤', '瑞允')
        assert [e.hanja for e in entries] == ['瑞', '允']

    def test_given_name_entries_need_two_characters(self):
        for name, hanja in (('서', '瑞'), ('서윤', '瑞'), ('서윤아', '瑞允雅')):
            with pytest.raises(ValueError):
                given_name_entries(name, hanja)

    def test_unknown_surname(self):
        with pytest.raises(UnknownSurnameError):
            get_surname('갹')
        with pytest.raises(UnknownSurnameError):
            get_surname('김', '李')


class TestSettings:
    """Tests for app.yaml and .env loading."""

    def test_get_setting(self):
        assert get_setting('batch.default_batch_size') == 5
        assert get_setting('missing.key', 'fallback') == 'fallback'

    def test_require_setting(self):
        with pytest.raises(ValueError, match='must be set in app.yaml'):
            require_setting('missing.key')

    def test_resolve_path(self, tmp_path):
        assert resolve_path('x.db', base=tmp_path) == (tmp_path / 'x.db').resolve()
        assert resolve_path(str(tmp_path)) == tmp_path

    def test_env_file(self, tmp_path, monkeypatch):
        monkeypatch.setattr(os, 'environ', dict(os.environ))
        env = tmp_path / '.env'
        env.write_text('# comment\nKASI_API_KEY=abc\nJAKMYEONG_LLM_ENDPOINT=https://llm.test/x\n',
                       encoding='utf-8')
        cfg = get_config(env)
        assert cfg.kasi_api_key == 'abc'
        assert cfg.has_kasi
        assert cfg.has_llm

    def test_generator_style_comes_from_cli(self):
        generator = get_setting('generator')
        assert 'default_style' not in generator
        assert 'styles' not in generator
