import logging
import math
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv, find_dotenv


DEFAULT_BATCH_SIZE = 20
DEFAULT_BATCH_DELAY = 0.1
DEFAULT_PAGE_SIZE = 1000


def load_environment() -> None:
    # Variables already set in the process win over .env.
    load_dotenv(find_dotenv('.env', usecwd=True), override=False)


def _check_log_level(level: str) -> str:
    level = str(level).upper()
    # getLevelName maps known names to their numeric level.
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f'LOG_LEVEL must be a logging level name, got {level!r}')
    return level


def _get_number(environ, key: str, default, cast):
    value = environ.get(key)
    if value in (None, ''):
        return default
    try:
        number = cast(value)
    except ValueError:
        raise ValueError(f'{key} must be a number, got {value!r}')
    if not math.isfinite(number):
        raise ValueError(f'{key} must be a finite number, got {value!r}')
    if number < 0:
        raise ValueError(f'{key} must not be negative, got {value!r}')
    return number


@dataclass
class Config(object):
    slack_token: Optional[str] = None
    signing_secret: Optional[str] = None
    batch_size: int = DEFAULT_BATCH_SIZE
    batch_delay: float = DEFAULT_BATCH_DELAY
    page_size: int = DEFAULT_PAGE_SIZE
    log_level: str = 'INFO'

    def __post_init__(self):
        self.log_level = _check_log_level(self.log_level)

    @classmethod
    def from_env(cls, environ=None) -> 'Config':
        if environ is None:
            load_environment()
            environ = os.environ

        batch_size = _get_number(environ, 'MEMBER_DIFF_BATCH_SIZE', DEFAULT_BATCH_SIZE, int)
        if batch_size == 0:
            raise ValueError('MEMBER_DIFF_BATCH_SIZE must be at least 1')
        page_size = _get_number(environ, 'MEMBER_DIFF_PAGE_SIZE', DEFAULT_PAGE_SIZE, int)
        if page_size == 0:
            raise ValueError('MEMBER_DIFF_PAGE_SIZE must be at least 1')

        return cls(
            slack_token=environ.get('SLACK_TOKEN') or environ.get('SLACK_BOT_TOKEN'),
            signing_secret=environ.get('SLACK_SIGNING_SECRET'),
            batch_size=batch_size,
            batch_delay=_get_number(environ, 'MEMBER_DIFF_BATCH_DELAY', DEFAULT_BATCH_DELAY, float),
            page_size=page_size,
            log_level=environ.get('LOG_LEVEL') or 'INFO',
        )
