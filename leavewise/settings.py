from __future__ import annotations

import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel


class Settings(BaseModel):
    APP_ENV: str = 'dev'
    LOG_LEVEL: str = 'INFO'
    DEBUG_STEPS: bool = False

    ANTHROPIC_API_KEY: str = ''
    ANTHROPIC_MODEL: str = 'claude-sonnet-4-6'
    ANTHROPIC_HTTP_TIMEOUT_S: int = 60
    ANTHROPIC_MAX_RETRIES: int = 0

    NOTIFY_TIMEOUT_S: int = 45
    NOTIFY_MAX_TOKENS: int = 1024

    DEFAULT_YEARS_TO_PROJECT: int = 5
    MAX_YEARS_TO_PROJECT: int = 50

    @property
    def notify_enabled(self) -> bool:
        return bool(self.ANTHROPIC_API_KEY)


def _env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return str(v).strip().lower() in {'1', 'true', 'yes', 'on'}


def _env_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or str(v).strip() == '':
        return default
    try:
        return int(v)
    except ValueError:
        return default


def _env_int_min(name: str, default: int, minimum: int) -> int:
    return max(minimum, _env_int(name, default))


@lru_cache
def get_settings() -> Settings:
    load_dotenv(dotenv_path='.env')
    data = {
        'APP_ENV': os.getenv('APP_ENV', 'dev'),
        'LOG_LEVEL': os.getenv('LOG_LEVEL', 'INFO'),
        'DEBUG_STEPS': _env_bool('DEBUG_STEPS', False),
        'ANTHROPIC_API_KEY': os.getenv('ANTHROPIC_API_KEY', ''),
        'ANTHROPIC_MODEL': os.getenv('ANTHROPIC_MODEL', 'claude-sonnet-4-6'),
        'ANTHROPIC_HTTP_TIMEOUT_S': _env_int_min('ANTHROPIC_HTTP_TIMEOUT_S', 60, 5),
        'ANTHROPIC_MAX_RETRIES': _env_int_min('ANTHROPIC_MAX_RETRIES', 0, 0),
        'NOTIFY_TIMEOUT_S': _env_int_min('NOTIFY_TIMEOUT_S', 45, 1),
        'NOTIFY_MAX_TOKENS': _env_int_min('NOTIFY_MAX_TOKENS', 1024, 256),
        'DEFAULT_YEARS_TO_PROJECT': _env_int_min('DEFAULT_YEARS_TO_PROJECT', 5, 1),
        'MAX_YEARS_TO_PROJECT': _env_int_min('MAX_YEARS_TO_PROJECT', 50, 1),
    }
    return Settings(**data)
