"""Settings read from environment variables and an optional .env file."""

import os
import logging
from dataclasses import dataclass
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from .stats import VALID_STATES

DEFAULT_MAX_PAGES = 1
DEFAULT_STATE_FILTER = 'closed'


@dataclass
class Settings:
    """Runtime settings for github-review-stats."""
    token: Optional[str] = None
    api_url: Optional[str] = None
    cache_dir: str = '.'
    max_pages: int = DEFAULT_MAX_PAGES
    state_filter: str = DEFAULT_STATE_FILTER
    log_level: str = 'INFO'

    @classmethod
    def from_env(cls, dotenv: bool = True) -> 'Settings':
        """Build settings from the environment, loading .env first if present."""
        if dotenv:
            load_dotenv(find_dotenv(usecwd=True))

        max_pages = DEFAULT_MAX_PAGES
        max_pages_env = os.environ.get('MAX_PAGES')
        if max_pages_env:
            try:
                max_pages = int(max_pages_env)
                if max_pages < 1:
                    raise ValueError(max_pages_env)
            except ValueError:
                logging.warning(f"Invalid MAX_PAGES value '{max_pages_env}', using default: {DEFAULT_MAX_PAGES}")
                max_pages = DEFAULT_MAX_PAGES

        state_filter = os.environ.get('STATE_FILTER', DEFAULT_STATE_FILTER).strip().lower()
        if state_filter not in VALID_STATES:
            logging.warning(f"Invalid STATE_FILTER value '{state_filter}', using default: {DEFAULT_STATE_FILTER}")
            state_filter = DEFAULT_STATE_FILTER

        return cls(
            token=os.environ.get('GITHUB_TOKEN') or None,
            api_url=os.environ.get('GITHUB_API_URL') or None,
            cache_dir=os.environ.get('CACHE_DIR') or '.',
            max_pages=max_pages,
            state_filter=state_filter,
            log_level=os.environ.get('LOG_LEVEL', 'INFO').upper(),
        )
