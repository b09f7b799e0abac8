"""
Tests for LLM Evaluator
=======================
Tests for response parsing, score blending, the file cache and the
batch request flow. The proxy is never contacted: ``_post`` is
replaced through monkeypatch.
"""

import json
import sys
from pathlib import Path

import pytest

# Ensure repo root is on path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from jakmyeong import llm_evaluator as llm_module
from jakmyeong import retry as retry_module
from jakmyeong.llm_evaluator import (
    LLMEvaluator, NameEvaluation, apply_llm_score, llm_score, parse_batch_response,
    parse_evaluation, should_exclude_as_old_fashioned,
)
from jakmyeong.retry import RateLimitError


@pytest.fixture
def evaluator(tmp_path):
    """Evaluator pointed at a fake endpoint with an isolated cache."""
    return LLMEvaluator(endpoint='https://llm.example.test/evaluate', cache_dir=str(tmp_path / 'cache'))


class TestParsing:
    """Tests for parsing model answers."""

    def test_parse_object_in_text(self):
        text = 'Here you go: {"modernityScore": 8, "pronunciationScore": 7, ' \
               '"isOldFashioned": false, "imageKeywords": ["a", "b", "c", "d"], ' \
               '"briefComment": "좋은 이름"} thanks'
        evaluation = parse_evaluation(text, '김서윤', '瑞允')
        assert evaluation.error is None
        assert evaluation.modernity_score == 8
        assert evaluation.pronunciation_score == 7
        assert evaluation.image_keywords == ['a', 'b', 'c']
        assert evaluation.comment == '좋은 이름'

    def test_scores_are_clamped(self):
        evaluation = parse_evaluation('{"modernityScore": 42, "pronunciationScore": "x"}', '김서윤', '瑞允')
        assert evaluation.modernity_score == 10
        assert evaluation.pronunciation_score == 5

    def test_parse_error(self):
        evaluation = parse_evaluation('no json here', '김서윤', '瑞允')
        assert evaluation.error

    def test_batch_array(self):
        items = parse_batch_response('[{"fullName": "김서윤"}, 3, {"fullName": "김하윤"}]')
        assert [i['fullName'] for i in items] == ['김서윤', '김하윤']

    def test_batch_single_object(self):
        assert parse_batch_response('{"fullName": "김서윤"}') == [{'fullName': '김서윤'}]

    def test_batch_garbage(self):
        assert parse_batch_response('nothing') == []


class TestScoring:
    """Tests for blending the LLM verdict into a score."""

    def test_llm_score(self):
        evaluation = NameEvaluation('김서윤', '瑞允', modernity_score=8, pronunciation_score=6)
        assert llm_score(evaluation) == 68

    def test_blend(self):
        evaluation = NameEvaluation('김서윤', '瑞允', modernity_score=8, pronunciation_score=6)
        assert apply_llm_score(80, evaluation, weight=0.25) == 77

    def test_error_keeps_base_score(self):
        evaluation = NameEvaluation('김서윤', '瑞允', error='Request failed')
        assert apply_llm_score(80, evaluation) == 80
        assert apply_llm_score(80, None) == 80

    def test_bounds(self):
        high = NameEvaluation('a', 'b', modernity_score=10, pronunciation_score=10)
        low = NameEvaluation('a', 'b', modernity_score=1, pronunciation_score=1, is_old_fashioned=True)
        assert 0 <= apply_llm_score(100, high, weight=1.0) <= 100
        assert apply_llm_score(0, low, weight=1.0) == 0

    def test_old_fashioned_exclusion(self):
        assert should_exclude_as_old_fashioned(NameEvaluation('a', 'b', modernity_score=5))
        assert not should_exclude_as_old_fashioned(NameEvaluation('a', 'b', modernity_score=8))
        assert not should_exclude_as_old_fashioned(None)


class TestEvaluator:
    """Tests for LLMEvaluator with a mocked transport."""

    def test_no_endpoint(self, tmp_path):
        evaluator = LLMEvaluator(cache_dir=str(tmp_path))
        evaluator.endpoint = None
        evaluation = evaluator.evaluate('김서윤', '瑞允')
        assert evaluation.error

    def test_evaluate_and_cache(self, evaluator, monkeypatch):
        calls = []

        def fake_post(prompt, max_output_tokens):
            calls.append(prompt)
            return '{"modernityScore": 9, "pronunciationScore": 8, "isOldFashioned": false}'

        monkeypatch.setattr(evaluator, '_post', fake_post)
        first = evaluator.evaluate('김서윤', '瑞允', gender='F')
        second = evaluator.evaluate('김서윤', '瑞允', gender='F')

        assert first.modernity_score == 9
        assert not first.cached
        assert second.cached
        assert len(calls) == 1
        assert '김서윤' in calls[0]

    def test_transport_failure(self, evaluator, monkeypatch):
        def failing_post(prompt, max_output_tokens):
            raise OSError('connection refused')

        monkeypatch.setattr(evaluator, '_post', failing_post)
        evaluation = evaluator.evaluate('김서윤', '瑞允')
        assert evaluation.error.startswith('Request failed')

    def test_batch_alignment(self, evaluator, monkeypatch):
        """Results follow the input order; missing names carry an error."""
        answer = json.dumps([
            {'fullName': '김하윤', 'modernityScore': 7, 'pronunciationScore': 7},
            {'fullName': '김서윤', 'modernityScore': 9, 'pronunciationScore': 8},
        ], ensure_ascii=False)
        monkeypatch.setattr(evaluator, '_post', lambda prompt, tokens: answer)

        names = [('김서윤', '瑞允'), ('김하윤', '河允'), ('김지안', '智安')]
        results = evaluator.evaluate_batch(names, surname='김', gender='F')

        assert [r.full_name for r in results] == ['김서윤', '김하윤', '김지안']
        assert results[0].modernity_score == 9
        assert results[1].modernity_score == 7
        assert results[2].error

    def test_batch_uses_cache(self, evaluator, monkeypatch):
        evaluator._save_to_cache(NameEvaluation('김서윤', '瑞允', modernity_score=9))
        sent = []

        def fake_post(prompt, max_output_tokens):
            sent.append(prompt)
            return '[]'

        monkeypatch.setattr(evaluator, '_post', fake_post)
        results = evaluator.evaluate_batch([('김서윤', '瑞允'), ('김하윤', '河允')])

        assert results[0].cached
        assert '김서윤 (한자: 瑞允)' not in sent[0]
        assert '1. 김하윤 (한자: 河允)' in sent[0]


class FakeResponse:
    def __init__(self, status, body, headers=None):
        self.status = status
        self._body = body
        self._headers = headers or {}

    def read(self):
        return self._body.encode('utf-8')

    def getheader(self, name, default=None):
        return self._headers.get(name, default)


class TestTransport:
    """Tests for the HTTP round trip with a fake connection."""

    @pytest.fixture
    def responses(self, monkeypatch):
        queue = []

        class FakeConnection:
            def __init__(self, *args, **kwargs):
                pass

            def request(self, method, path, body=None, headers=None):
                pass

            def getresponse(self):
                return queue.pop(0)

            def close(self):
                pass

        monkeypatch.setattr(llm_module.http.client, 'HTTPSConnection', FakeConnection)
        return queue

    def test_rate_limit_carries_retry_after(self, evaluator, responses):
        responses.append(FakeResponse(429, 'slow down', {'Retry-After': '7'}))
        with pytest.raises(RateLimitError) as excinfo:
            evaluator._post_once('prompt', 100)
        assert excinfo.value.retry_after == 7.0

    def test_retries_after_rate_limit(self, evaluator, responses, monkeypatch):
        delays = []
        monkeypatch.setattr(retry_module.time, 'sleep', delays.append)
        answer = json.dumps({'candidates': [{'content': {'parts': [{'text': 'hello'}]}}]})
        responses.extend([FakeResponse(429, '', {'Retry-After': '1'}), FakeResponse(200, answer)])
        assert evaluator._post('prompt', 100) == 'hello'
        assert delays == [1.0]
