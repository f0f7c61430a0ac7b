"""
Runtime settings read from the environment.

Every value has a default except DATABASE_URL. Malformed numbers fall back to
the default instead of failing startup.
"""

from __future__ import annotations

import os
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

DEFAULT_CORS_ORIGINS = "http://localhost:5173 http://127.0.0.1:5173"


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    url = os.environ.get("DATABASE_URL", "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    return _sanitize_database_url(url)


def db_max_open_conns() -> int:
    return max(1, _env_int("DB_MAX_OPEN_CONNS", 25))


def db_max_idle_conns() -> int:
    # asyncpg keeps min_size connections open; it can never exceed max_size.
    return max(0, min(_env_int("DB_MAX_IDLE_CONNS", 25), db_max_open_conns()))


def db_max_idle_time_s() -> float:
    return _env_float("DB_MAX_IDLE_TIME_S", 15 * 60.0)


def db_query_timeout_s() -> float:
    timeout = _env_float("DB_QUERY_TIMEOUT_S", 3.0)
    return timeout if timeout > 0 else 3.0


def activation_token_ttl_hours() -> int:
    return _env_int("ACTIVATION_TOKEN_TTL_HOURS", 72)


def auth_token_ttl_hours() -> int:
    return _env_int("AUTH_TOKEN_TTL_HOURS", 24)


def app_env() -> str:
    return os.environ.get("APP_ENV", "development").strip() or "development"


def cors_trusted_origins() -> list[str]:
    raw = os.environ.get("CORS_TRUSTED_ORIGINS", DEFAULT_CORS_ORIGINS)
    return [origin for origin in raw.replace(",", " ").split() if origin]


def log_level() -> str:
    return os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"
