#!/usr/bin/env python3
"""
LLM Name Evaluator
==================
Optional second opinion on generated names from a language model
behind an HTTP proxy. The proxy takes

    {"prompt": ..., "model": ..., "temperature": ..., "maxOutputTokens": ...}

and answers in the Gemini response shape
(``candidates[0].content.parts[0].text``).

Configure the proxy with JAKMYEONG_LLM_ENDPOINT in .env or
``llm.endpoint`` in app.yaml. Without an endpoint every evaluation
comes back with ``error`` set and scores are left alone.

Usage:
    evaluator = LLMEvaluator()
    ev = evaluator.evaluate("김서윤", "瑞允", gender="F")
    score = apply_llm_score(82, ev)
"""

import hashlib
import http.client
import json
import logging
import re
import ssl
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple
from urllib.parse import urlparse

from jakmyeong.config import config
from jakmyeong.retry import RateLimitError, RetryHandler, parse_retry_after
from jakmyeong.settings import get_setting, resolve_path

logger = logging.getLogger(__name__)

GENDER_LABELS = {'M': '남아', 'F': '여아'}

EVALUATION_PROMPT = """당신은 2020년대 한국 작명 전문가입니다. 다음 아기 이름을 엄격하게 평가해주세요.

이름: {full_name}
한자: {hanja_name}
성별: {gender}

1. modernityScore (1-10): 현대적인 느낌. 서윤, 하준 같은 이름은 10점, 영수, 순자 같은 이름은 1-3점
2. pronunciationScore (1-10): 발음의 자연스러움
3. isOldFashioned (boolean): 부모님 세대에 흔했던 이름이거나 옛 돌림자가 들어가면 true
4. imageKeywords: 연상되는 이미지 2-3개
5. briefComment: 한줄 평가 (20자 이내)

JSON 형식으로만 응답:
{{"modernityScore": 8, "pronunciationScore": 9, "isOldFashioned": false,
 "imageKeywords": ["밝은", "세련된"], "briefComment": "현대적이고 부르기 좋은 이름"}}"""

BATCH_EVALUATION_PROMPT = """당신은 2020년대 한국 작명 전문가입니다. 다음 {gender} 이름들을 각각 엄격하게 평가해주세요.

{name_list}

각 이름마다 modernityScore (1-10), pronunciationScore (1-10),
isOldFashioned (boolean), briefComment (20자 이내)를 매기세요.

JSON 배열로만 응답:
[{{"fullName": "김서윤", "modernityScore": 9, "pronunciationScore": 9,
  "isOldFashioned": false, "briefComment": "세련된 이름"}}]"""

OBJECT_PATTERN = re.compile(r'\{[\s\S]*\}')
ARRAY_PATTERN = re.compile(r'\[[\s\S]*\]')

MAX_KEYWORDS = 3
MAX_COMMENT_LENGTH = 50


class LLMError(Exception):
    """Non-retryable failure talking to the LLM proxy."""


@dataclass
class NameEvaluation:
    """LLM verdict on one name."""
    full_name: str
    hanja_name: str
    modernity_score: int = 5
    pronunciation_score: int = 5
    is_old_fashioned: bool = False
    image_keywords: List[str] = field(default_factory=list)
    comment: str = ''
    error: Optional[str] = None
    cached: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


def _clamp_score(value) -> int:
    """1..10; missing, zero or unparseable values count as 5."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 5
    if not number:
        return 5
    return int(max(1, min(10, round(number))))


def evaluation_from_dict(full_name: str, hanja_name: str, data: dict) -> NameEvaluation:
    keywords = data.get('imageKeywords')
    return NameEvaluation(
        full_name=full_name,
        hanja_name=hanja_name,
        modernity_score=_clamp_score(data.get('modernityScore')),
        pronunciation_score=_clamp_score(data.get('pronunciationScore')),
        is_old_fashioned=bool(data.get('isOldFashioned')),
        image_keywords=[str(k) for k in keywords[:MAX_KEYWORDS]] if isinstance(keywords, list) else [],
        comment=str(data.get('briefComment') or '')[:MAX_COMMENT_LENGTH],
    )


def parse_evaluation(text: str, full_name: str, hanja_name: str) -> NameEvaluation:
    """Parse the first JSON object in a model answer."""
    match = OBJECT_PATTERN.search(text)
    try:
        data = json.loads(match.group(0) if match else text)
    except json.JSONDecodeError as e:
        return NameEvaluation(full_name, hanja_name, error=f"Parse error: {e}")
    if not isinstance(data, dict):
        return NameEvaluation(full_name, hanja_name, error="Parse error: expected a JSON object")
    return evaluation_from_dict(full_name, hanja_name, data)


def parse_batch_response(text: str) -> List[dict]:
    """JSON array of verdicts; a lone object becomes a one-item list."""
    for pattern in (ARRAY_PATTERN, OBJECT_PATTERN):
        match = pattern.search(text)
        if not match:
            continue
        try:
            data = json.loads(match.group(0))
        except json.JSONDecodeError:
            return []
        if isinstance(data, dict):
            return [data]
        return [item for item in data if isinstance(item, dict)]
    return []


def llm_score(evaluation: NameEvaluation) -> int:
    return (evaluation.modernity_score * 5
            + evaluation.pronunciation_score * 3
            + (-30 if evaluation.is_old_fashioned else 10))


def apply_llm_score(base_score: float, evaluation: Optional[NameEvaluation],
                    weight: Optional[float] = None) -> int:
    """Blend the rule-based score with the LLM verdict, clamped to 0..100."""
    if evaluation is None or evaluation.error:
        return max(0, min(100, round(base_score)))
    if weight is None:
        weight = get_setting("llm.score_weight", 0.25)
    adjusted = base_score * (1 - weight) + llm_score(evaluation) * weight
    return round(max(0, min(100, adjusted)))


def should_exclude_as_old_fashioned(evaluation: Optional[NameEvaluation]) -> bool:
    if evaluation is None or evaluation.error:
        return False
    return evaluation.is_old_fashioned or evaluation.modernity_score <= 5


class LLMEvaluator:
    """
    Evaluates names through the configured LLM proxy, with a JSON file
    cache keyed by ``"fullName:hanjaName"``.
    """

    def __init__(self,
                 endpoint: Optional[str] = None,
                 api_key: Optional[str] = None,
                 cache_dir: Optional[str] = None,
                 retry: Optional[RetryHandler] = None):
        cfg = get_setting("llm", {}) or {}
        env = config()
        self.endpoint = endpoint or env.llm_endpoint or cfg.get("endpoint")
        self.api_key = api_key or env.llm_api_key
        self.model = cfg.get("model")
        self.temperature = cfg.get("temperature")
        self.max_output_tokens = cfg.get("max_output_tokens")
        self.batch_max_output_tokens = cfg.get("batch_max_output_tokens")
        self.request_timeout_seconds = cfg.get("request_timeout_seconds")
        self.cache_ttl_seconds = cfg.get("cache_ttl_seconds")
        self.cache_hash_length = cfg.get("cache_hash_length")

        if not self.model:
            raise ValueError("llm.model must be set in app.yaml")
        if self.temperature is None:
            raise ValueError("llm.temperature must be set in app.yaml")
        if self.max_output_tokens is None or self.batch_max_output_tokens is None:
            raise ValueError("llm.max_output_tokens and llm.batch_max_output_tokens must be set in app.yaml")
        if self.request_timeout_seconds is None:
            raise ValueError("llm.request_timeout_seconds must be set in app.yaml")
        if self.cache_ttl_seconds is None:
            raise ValueError("llm.cache_ttl_seconds must be set in app.yaml")
        if self.cache_hash_length is None:
            raise ValueError("llm.cache_hash_length must be set in app.yaml")

        self.cache_dir = resolve_path(cache_dir or cfg.get("cache_dir"))
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self.retry = retry or RetryHandler(section="llm.retry")

    @property
    def has_api_access(self) -> bool:
        return bool(self.endpoint)

    # -------------------------------------------------------------------------
    # Cache
    # -------------------------------------------------------------------------

    def _get_cache_path(self, full_name: str, hanja_name: str) -> Path:
        key = f"{full_name}:{hanja_name}"
        key_hash = hashlib.md5(key.lower().encode()).hexdigest()[:self.cache_hash_length]
        return self.cache_dir / f"{key_hash}.json"

    def _load_from_cache(self, full_name: str, hanja_name: str) -> Optional[NameEvaluation]:
        cache_path = self._get_cache_path(full_name, hanja_name)
        if not cache_path.exists():
            return None
        try:
            data = json.loads(cache_path.read_text(encoding='utf-8'))
            if time.time() - data.get('timestamp', 0) > self.cache_ttl_seconds:
                return None
            evaluation = NameEvaluation(**data['evaluation'])
        except (json.JSONDecodeError, KeyError, TypeError):
            return None
        evaluation.cached = True
        return evaluation

    def _save_to_cache(self, evaluation: NameEvaluation):
        cache_path = self._get_cache_path(evaluation.full_name, evaluation.hanja_name)
        stored = evaluation.to_dict()
        stored['cached'] = False
        data = {'evaluation': stored, 'timestamp': time.time()}
        cache_path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding='utf-8')

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    def _post_once(self, prompt: str, max_output_tokens: int) -> str:
        url = urlparse(self.endpoint)
        if url.scheme == 'http':
            conn = http.client.HTTPConnection(url.netloc, timeout=self.request_timeout_seconds)
        else:
            conn = http.client.HTTPSConnection(
                url.netloc,
                context=ssl.create_default_context(),
                timeout=self.request_timeout_seconds
            )

        headers = {'Content-Type': 'application/json', 'Accept': 'application/json'}
        if self.api_key:
            headers['Authorization'] = f"Bearer {self.api_key}"
        body = json.dumps({
            'prompt': prompt,
            'model': self.model,
            'temperature': self.temperature,
            'maxOutputTokens': max_output_tokens,
        })

        conn.request("POST", url.path or "/", body=body.encode('utf-8'), headers=headers)
        response = conn.getresponse()
        payload = response.read().decode('utf-8')

        if response.status == 429:
            raise RateLimitError("Rate limit exceeded",
                                 retry_after=parse_retry_after(response.getheader('Retry-After')))
        if response.status != 200:
            raise LLMError(f"API error {response.status}: {payload[:200]}")

        try:
            data = json.loads(payload)
            text = data['candidates'][0]['content']['parts'][0]['text']
        except (json.JSONDecodeError, KeyError, IndexError, TypeError):
            raise LLMError("Empty response from model")
        if not text:
            raise LLMError("Empty response from model")
        return text

    def _post(self, prompt: str, max_output_tokens: int) -> str:
        return self.retry.execute(
            self._post_once,
            args=(prompt, max_output_tokens),
            retryable_exceptions=(RateLimitError,),
        )

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def evaluate(self, full_name: str, hanja_name: str,
                 gender: Optional[str] = None) -> NameEvaluation:
        """
        Evaluate one full name (surname included).

        Never raises for transport problems; check ``error`` instead.
        """
        cached = self._load_from_cache(full_name, hanja_name)
        if cached:
            return cached
        if not self.has_api_access:
            return NameEvaluation(full_name, hanja_name,
                                  error="No LLM endpoint. Set JAKMYEONG_LLM_ENDPOINT in .env.")

        prompt = EVALUATION_PROMPT.format(
            full_name=full_name,
            hanja_name=hanja_name,
            gender=GENDER_LABELS.get(gender, '미정'),
        )
        try:
            text = self._post(prompt, self.max_output_tokens)
        except Exception as e:
            logger.warning(f"LLM evaluation failed for {full_name}: {e}")
            return NameEvaluation(full_name, hanja_name, error=f"Request failed: {e}")

        evaluation = parse_evaluation(text, full_name, hanja_name)
        if not evaluation.error:
            self._save_to_cache(evaluation)
        return evaluation

    def evaluate_batch(self,
                       names: Sequence[Tuple[str, str]],
                       surname: Optional[str] = None,
                       gender: Optional[str] = None) -> List[NameEvaluation]:
        """
        Evaluate several ``(full_name, hanja_name)`` pairs with one request.

        The result list is aligned with ``names``. Cached names are not
        sent again; names missing from the answer carry an error.
        """
        results: List[Optional[NameEvaluation]] = [None] * len(names)
        pending = []
        for idx, (full_name, hanja_name) in enumerate(names):
            cached = self._load_from_cache(full_name, hanja_name)
            if cached:
                results[idx] = cached
            else:
                pending.append(idx)

        if pending and not self.has_api_access:
            for idx in pending:
                full_name, hanja_name = names[idx]
                results[idx] = NameEvaluation(full_name, hanja_name,
                                              error="No LLM endpoint. Set JAKMYEONG_LLM_ENDPOINT in .env.")
            return results

        if pending:
            name_list = '\n'.join(
                f"{n}. {names[idx][0]} (한자: {names[idx][1]})"
                for n, idx in enumerate(pending, start=1)
            )
            prompt = BATCH_EVALUATION_PROMPT.format(
                gender=GENDER_LABELS.get(gender, '아기'),
                name_list=name_list,
            )
            try:
                items = parse_batch_response(self._post(prompt, self.batch_max_output_tokens))
                error = None
            except Exception as e:
                logger.warning(f"LLM batch evaluation failed ({surname or ''}, {len(pending)} names): {e}")
                items = []
                error = f"Request failed: {e}"

            by_name = {str(item.get('fullName', '')): item for item in items}
            for idx in pending:
                full_name, hanja_name = names[idx]
                item = by_name.get(full_name)
                if item is None:
                    results[idx] = NameEvaluation(full_name, hanja_name,
                                                  error=error or "No evaluation returned")
                    continue
                evaluation = evaluation_from_dict(full_name, hanja_name, item)
                self._save_to_cache(evaluation)
                results[idx] = evaluation

            logger.debug(f"LLM batch: {len(pending)} sent, {len(items)} parsed")

        return results
