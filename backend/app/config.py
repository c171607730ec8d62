"""Configuration settings and environment variables.

This module loads values from environment variables (including a .env file)
and provides small helpers to safely parse integers, booleans and lists while
stripping inline comments. This avoids crashes when a .env value contains
an inline comment like:

    SURVEY_LOOKUP_WORKERS=4 # one per locality field

The helpers fall back to defaults and emit warnings when parsing fails.
"""

import os
import logging
from typing import List, Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

_logger = logging.getLogger(__name__)


def _strip_inline_comment(val: str) -> str:
    """Strip an inline comment from a string and trim whitespace/quotes.

    Example: "4 # one per locality field" -> "4"
    """
    if val is None:
        return ''
    # Split on first '#' to remove inline comments
    val = val.split('#', 1)[0]
    val = val.strip()
    # Remove surrounding single/double quotes if present
    if (val.startswith('"') and val.endswith('"')) or (
        val.startswith("'") and val.endswith("'")
    ):
        val = val[1:-1]
    return val


def _get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    raw = os.environ.get(name)
    if raw is None:
        return default
    stripped = _strip_inline_comment(raw)
    return stripped if stripped != '' else default


def _get_int_env(name: str, default: int) -> int:
    raw = _get_env(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except (ValueError, TypeError):
        _logger.warning("Invalid integer for %s: %r, falling back to %s", name, raw, default)
        return default


def _get_bool_env(name: str, default: bool) -> bool:
    raw = _get_env(name)
    if raw is None:
        return default
    return raw.lower() in ['true', '1', 'on', 'yes']


def _get_list_env(name: str, default: List[str]) -> List[str]:
    """Parse a comma separated value into a list of non-empty items."""
    raw = _get_env(name)
    if raw is None:
        return list(default)
    return [item.strip() for item in raw.split(',') if item.strip()]


class Config:
    """Base configuration class with default settings."""

    # Flask settings
    SECRET_KEY = _get_env('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # MongoDB settings
    MONGO_URI = _get_env('MONGO_URI') or 'mongodb://localhost:27017/'
    MONGO_DB = _get_env('MONGO_DB') or 'locality_surveys'
    MONGO_SERVER_SELECTION_TIMEOUT_MS = _get_int_env('MONGO_SERVER_SELECTION_TIMEOUT_MS', 5000)
    MONGO_MAX_POOL_SIZE = _get_int_env('MONGO_MAX_POOL_SIZE', 50)
    ENSURE_INDEXES_ON_STARTUP = _get_bool_env('ENSURE_INDEXES_ON_STARTUP', True)

    # Browser clients allowed to call the API. Use "*" to allow any origin.
    CORS_ALLOWED_ORIGINS = _get_list_env('CORS_ALLOWED_ORIGINS', ['https://tally-survey-app.netlify.app'])

    # Worker threads used for the per-field locality lookups and registry writes
    SURVEY_LOOKUP_WORKERS = _get_int_env('SURVEY_LOOKUP_WORKERS', 4)

    # Rate limiting (flask-limiter reads the RATELIMIT_* keys directly)
    RATELIMIT_ENABLED = _get_bool_env('RATELIMIT_ENABLED', True)
    RATELIMIT_STORAGE_URI = _get_env('RATELIMIT_STORAGE_URI') or 'memory://'
    RATELIMIT_DEFAULT = _get_env('RATELIMIT_DEFAULT') or '200 per day;50 per hour'
    SURVEY_SUBMIT_RATE_LIMIT = _get_env('SURVEY_SUBMIT_RATE_LIMIT') or '30 per hour'


class DevelopmentConfig(Config):
    """Development configuration with debug mode enabled."""
    DEBUG = True
    TESTING = False


class ProductionConfig(Config):
    """Production configuration with security settings."""
    DEBUG = False
    TESTING = False


class TestingConfig(Config):
    """Testing configuration with test database."""
    TESTING = True
    MONGO_DB = 'locality_surveys_test'
    RATELIMIT_ENABLED = False
    ENSURE_INDEXES_ON_STARTUP = False
    CORS_ALLOWED_ORIGINS = ['https://tally-survey-app.netlify.app']


# Configuration mapping
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
