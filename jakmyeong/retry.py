#!/usr/bin/env python3
"""
Retry Handling
==============
Backoff for the LLM proxy when it answers HTTP 429.

The wait before retry ``n`` (0-based) is ``base_delay * exponential_base**n``
capped at ``max_delay``. A ``Retry-After`` value sent by the proxy replaces
the computed wait, under the same cap.
"""

import logging
import time
from typing import Any, Callable, Optional

from jakmyeong.settings import get_setting

logger = logging.getLogger(__name__)


class RateLimitError(Exception):
    """HTTP 429 from a remote service, with its Retry-After seconds if sent."""

    def __init__(self, message: str = "Rate limit exceeded", retry_after: Optional[float] = None):
        super().__init__(message)
        self.retry_after = retry_after


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Seconds from a Retry-After header; None when absent or an HTTP date."""
    if not value:
        return None
    try:
        seconds = float(value.strip())
    except ValueError:
        return None
    return seconds if seconds >= 0 else None


class RetryHandler:
    """
    Retries a call on rate-limit errors.

    Values not passed in come from ``<section>`` in app.yaml
    (``llm.retry`` by default).

    Usage:
        retry = RetryHandler()
        text = retry.execute(post_prompt, args=(payload,),
                             retryable_exceptions=(RateLimitError,))
    """

    def __init__(self,
                 max_retries: Optional[int] = None,
                 base_delay: Optional[float] = None,
                 max_delay: Optional[float] = None,
                 exponential_base: Optional[float] = None,
                 section: str = "llm.retry"):
        cfg = get_setting(section, {}) or {}
        values = {
            'max_retries': max_retries if max_retries is not None else cfg.get('max_retries'),
            'base_delay': base_delay if base_delay is not None else cfg.get('base_delay'),
            'max_delay': max_delay if max_delay is not None else cfg.get('max_delay'),
            'exponential_base': exponential_base if exponential_base is not None else cfg.get('exponential_base'),
        }
        missing = [key for key, value in values.items() if value is None]
        if missing:
            raise ValueError(f"{section}.{missing[0]} must be set in app.yaml")

        self.max_retries = int(values['max_retries'])
        self.base_delay = float(values['base_delay'])
        self.max_delay = float(values['max_delay'])
        self.exponential_base = float(values['exponential_base'])

    def delay_for(self, attempt: int, error: Optional[BaseException] = None) -> float:
        retry_after = getattr(error, 'retry_after', None)
        if retry_after is not None:
            return min(retry_after, self.max_delay)
        return min(self.base_delay * (self.exponential_base ** attempt), self.max_delay)

    def execute(self,
                func: Callable,
                args: tuple = (),
                kwargs: dict = None,
                retryable_exceptions: tuple = (RateLimitError,)) -> Any:
        """
        Call ``func`` until it succeeds or the retries run out.

        Raises:
            The last retryable exception once ``max_retries`` retries have
            failed; any other exception immediately
        """
        kwargs = kwargs or {}
        for attempt in range(self.max_retries + 1):
            try:
                return func(*args, **kwargs)
            except retryable_exceptions as e:
                if attempt == self.max_retries:
                    raise
                delay = self.delay_for(attempt, e)
                logger.debug(f"Retry {attempt + 1}/{self.max_retries} after {delay:.2f}s: {e}")
                time.sleep(delay)
