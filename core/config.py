"""Application settings read from environment variables.

Values are resolved once at import time. Set the environment before the
application (or the test session) imports this module.
"""

import os

from core.exceptions import ConfigurationError


def _env_bool(key: str, default: bool) -> bool:
    raw = os.getenv(key)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "y", "on")


def _env_int(key: str, default: int) -> int:
    raw = os.getenv(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be an integer, got '{raw}'", config_key=key)


# Read/Write partitioning: point READ_DATABASE_URL at a replica in production.
WRITE_DATABASE_URL = os.getenv("WRITE_DATABASE_URL", "sqlite:///feedback.db")
READ_DATABASE_URL = os.getenv("READ_DATABASE_URL", WRITE_DATABASE_URL)

SEED_SAMPLE_DATA = _env_bool("SEED_SAMPLE_DATA", True)

# Statistics offload
STATS_EXECUTOR = os.getenv("STATS_EXECUTOR", "thread").strip().lower()
STATS_MAX_WORKERS = _env_int("STATS_MAX_WORKERS", 2)

if STATS_EXECUTOR not in ("thread", "process"):
    raise ConfigurationError(
        f"STATS_EXECUTOR must be 'thread' or 'process', got '{STATS_EXECUTOR}'",
        config_key="STATS_EXECUTOR",
    )
if STATS_MAX_WORKERS < 1:
    raise ConfigurationError("STATS_MAX_WORKERS must be at least 1", config_key="STATS_MAX_WORKERS")

DEFAULT_FEEDBACK_LIMIT = _env_int("DEFAULT_FEEDBACK_LIMIT", 100)
STATS_RECORD_LIMIT = _env_int("STATS_RECORD_LIMIT", 10000)
STATS_MAX_HOLDERS = _env_int("STATS_MAX_HOLDERS", 256)

if STATS_MAX_HOLDERS < 1:
    raise ConfigurationError("STATS_MAX_HOLDERS must be at least 1", config_key="STATS_MAX_HOLDERS")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_DIR = os.getenv("LOG_DIR", os.path.join(os.path.dirname(__file__), "..", "logs"))
