#!/usr/bin/env python3
"""
KASI Lunar Calendar Client
==========================
Year, month and day pillars from the Korea Astronomy and Space Science
Institute (한국천문연구원) lunar calendar service on data.go.kr.

Requires KASI_API_KEY in .env (the decoded data.go.kr service key).
Without a key, or when the service fails, the pillars are computed
locally.

Usage:
    saju = get_saju('1990-05-15', 14)
    print(saju.source, saju.day.name)
"""

import http.client
import json
import logging
import ssl
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union
from urllib.parse import urlencode

from jakmyeong.config import config
from jakmyeong.saju import (
    SOURCE_FALLBACK, SOURCE_KASI, Pillar, SajuResult, calculate_saju,
    hour_pillar, month_pillar, parse_birth_date, validate_hour,
)
from jakmyeong.settings import get_setting

logger = logging.getLogger(__name__)


class KasiError(Exception):
    """The KASI service could not be reached or answered unexpectedly."""


@dataclass
class LunarInfo:
    """One day as reported by KASI."""
    solar_date: date
    lunar_year: int
    lunar_month: int
    lunar_day: int
    is_leap_month: bool
    year_ganji: str
    month_ganji: Optional[str]
    day_ganji: str


class KasiClient:
    """
    Client for the getLunCalInfo operation.

    Usage:
        client = KasiClient(api_key="...")
        info = client.get_lunar_info(date(1990, 5, 15))
    """

    def __init__(self, api_key: Optional[str] = None):
        cfg = get_setting("kasi", {}) or {}
        self.api_key = api_key or config().kasi_api_key
        self.host = cfg.get("host")
        self.path = cfg.get("path")
        self.request_timeout_seconds = cfg.get("request_timeout_seconds")

        if not self.host:
            raise ValueError("kasi.host must be set in app.yaml")
        if not self.path:
            raise ValueError("kasi.path must be set in app.yaml")
        if self.request_timeout_seconds is None:
            raise ValueError("kasi.request_timeout_seconds must be set in app.yaml")

    @property
    def has_api_access(self) -> bool:
        return bool(self.api_key)

    def _request(self, day: date) -> dict:
        query = urlencode({
            'serviceKey': self.api_key,
            'solYear': str(day.year),
            'solMonth': f"{day.month:02d}",
            'solDay': f"{day.day:02d}",
            '_type': 'json',
        })
        try:
            conn = http.client.HTTPSConnection(
                self.host,
                context=ssl.create_default_context(),
                timeout=self.request_timeout_seconds
            )
            conn.request("GET", f"{self.path}?{query}", headers={'Accept': 'application/json'})
            response = conn.getresponse()
            body = response.read().decode()
        except Exception as e:
            raise KasiError(f"Request failed: {e}") from e

        if response.status == 401 or response.status == 403:
            raise KasiError("Invalid KASI service key.")
        if response.status != 200:
            raise KasiError(f"API error {response.status}: {body[:200]}")

        try:
            return json.loads(body)
        except json.JSONDecodeError as e:
            # data.go.kr answers key errors with an XML envelope even for _type=json
            raise KasiError(f"Unexpected response: {body[:200]}") from e

    def get_lunar_info(self, day: Union[str, date]) -> LunarInfo:
        """
        Lunar date and ganji of a solar date.

        Raises:
            KasiError: on missing key, HTTP failure or unparseable payload
        """
        if not self.has_api_access:
            raise KasiError("No KASI key. Set KASI_API_KEY in .env.")
        day = parse_birth_date(day)
        return parse_lunar_info(day, self._request(day))


def _ganji(value: Optional[str]) -> Optional[str]:
    """'갑진(甲辰)' -> '갑진'."""
    if not value:
        return None
    return str(value)[:2]


def parse_lunar_info(day: date, data: dict) -> LunarInfo:
    try:
        item = data['response']['body']['items']['item']
        if isinstance(item, list):
            item = item[0]
        year_ganji = _ganji(item.get('lunSecha'))
        day_ganji = _ganji(item.get('lunIljin'))
        if not year_ganji or not day_ganji:
            raise KasiError(f"Missing ganji for {day.isoformat()}")
        return LunarInfo(
            solar_date=day,
            lunar_year=int(item.get('lunYear', 0)),
            lunar_month=int(item.get('lunMonth', 0)),
            lunar_day=int(item.get('lunDay', 0)),
            is_leap_month=item.get('lunLeapmonth') == '윤',
            year_ganji=year_ganji,
            month_ganji=_ganji(item.get('lunWolgeon')),
            day_ganji=day_ganji,
        )
    except (KeyError, TypeError, ValueError, IndexError) as e:
        raise KasiError(f"Unexpected payload: {e}") from e


def saju_from_lunar_info(info: LunarInfo, birth_hour: Optional[int] = None) -> SajuResult:
    """Pillars from KASI ganji; the month pillar is computed when absent."""
    day = Pillar.from_name(info.day_ganji)
    month = Pillar.from_name(info.month_ganji) if info.month_ganji else month_pillar(info.solar_date)
    return SajuResult(
        year=Pillar.from_name(info.year_ganji),
        month=month,
        day=day,
        hour=hour_pillar(day, birth_hour) if birth_hour is not None else None,
        source=SOURCE_KASI,
        birth_date=info.solar_date,
        birth_hour=birth_hour,
    )


def get_saju(birth_date: Union[str, date, datetime],
             birth_hour: Optional[int] = None,
             client: Optional[KasiClient] = None) -> SajuResult:
    """
    Saju from KASI when a key is configured, otherwise computed locally.

    A KASI failure is logged and answered with the local calculation,
    tagged ``local_fallback``.
    """
    birth = parse_birth_date(birth_date)
    hour = validate_hour(birth_hour)
    client = client or KasiClient()

    if not client.has_api_access:
        return calculate_saju(birth, hour)

    try:
        return saju_from_lunar_info(client.get_lunar_info(birth), hour)
    except (KasiError, ValueError) as e:
        logger.warning(f"KASI lookup failed for {birth.isoformat()}, using local calculation: {e}")
        result = calculate_saju(birth, hour)
        result.source = SOURCE_FALLBACK
        return result
