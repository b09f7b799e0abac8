#!/usr/bin/env python3
"""
Configuration Management
========================
Loads API keys and endpoints from a .env file.

Recognised keys:
    KASI_API_KEY          - data.go.kr service key for the lunar calendar API
    JAKMYEONG_LLM_ENDPOINT - URL of the LLM evaluation proxy
    JAKMYEONG_LLM_API_KEY  - optional bearer token sent to the proxy
"""

import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional


@dataclass
class Config:
    """Application configuration"""
    kasi_api_key: Optional[str] = None
    llm_endpoint: Optional[str] = None
    llm_api_key: Optional[str] = None

    @property
    def has_kasi(self) -> bool:
        return bool(self.kasi_api_key)

    @property
    def has_llm(self) -> bool:
        return bool(self.llm_endpoint)


def load_env(env_path: Path = None) -> dict:
    """Load environment variables from .env file."""
    if env_path is None:
        # Look for .env in package parent directory
        env_path = Path(__file__).parent.parent / '.env'

    env_vars = {}
    if env_path.exists():
        for line in env_path.read_text(encoding='utf-8').splitlines():
            line = line.strip()
            if '=' in line and not line.startswith('#'):
                key, value = line.split('=', 1)
                env_vars[key.strip()] = value.strip()
                os.environ.setdefault(key.strip(), value.strip())

    return env_vars


def get_config(env_path: Path = None) -> Config:
    """Get configuration from environment."""
    env = load_env(env_path)

    return Config(
        kasi_api_key=env.get('KASI_API_KEY') or os.environ.get('KASI_API_KEY'),
        llm_endpoint=env.get('JAKMYEONG_LLM_ENDPOINT') or os.environ.get('JAKMYEONG_LLM_ENDPOINT'),
        llm_api_key=env.get('JAKMYEONG_LLM_API_KEY') or os.environ.get('JAKMYEONG_LLM_API_KEY'),
    )


# Singleton config
_config = None

def config() -> Config:
    """Get the singleton config instance."""
    global _config
    if _config is None:
        _config = get_config()
    return _config
