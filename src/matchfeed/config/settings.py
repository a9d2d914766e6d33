"""TOML config loading and profiles."""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

# Default config search path (project root or cwd)
_CONFIG_DIR = Path(__file__).resolve().parent.parent.parent.parent / "config"
_CWD_CONFIG = Path.cwd() / "config"

# Placeholder live-stats token. Its exp claim is in the past, so it never
# authenticates; deployments must set live_stats.token or MATCHFEED_LIVE_STATS_TOKEN.
PLACEHOLDER_LIVE_STATS_TOKEN = "exp=1763848591~acl=/*~data=placeholder~hmac=rotate-me"


def _load_toml(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base. Override values take precedence."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _find_config_dir() -> Path:
    if _CWD_CONFIG.exists():
        return _CWD_CONFIG
    return _CONFIG_DIR


def load_config(profile: str | None = None, config_dir: Path | None = None) -> dict[str, Any]:
    """Load merged config from default.toml and optional profile overlay."""
    config_dir = config_dir or _find_config_dir()
    default_path = config_dir / "default.toml"
    if not default_path.exists():
        return {}
    base = _load_toml(default_path)
    if profile:
        profile_path = config_dir / f"{profile}.toml"
        if profile_path.exists():
            overlay = _load_toml(profile_path)
            base = _deep_merge(base, overlay)
    return base


def get_settings(profile: str | None = None, config_dir: Path | None = None) -> Settings:
    """Return Settings instance from merged config."""
    raw = load_config(profile, config_dir)
    return Settings.from_dict(raw)


class Settings:
    """Application settings from TOML config."""

    def __init__(
        self,
        *,
        upstream: dict[str, Any] | None = None,
        cache: dict[str, Any] | None = None,
        pipeline: dict[str, Any] | None = None,
        live_stats: dict[str, Any] | None = None,
        auth: dict[str, Any] | None = None,
        api: dict[str, Any] | None = None,
        logging: dict[str, Any] | None = None,
    ):
        self.upstream = upstream or {}
        self.cache = cache or {}
        self.pipeline = pipeline or {}
        self.live_stats = live_stats or {}
        self.auth = auth or {}
        self.api = api or {}
        self.logging = logging or {}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Settings:
        return cls(
            upstream=raw.get("upstream"),
            cache=raw.get("cache"),
            pipeline=raw.get("pipeline"),
            live_stats=raw.get("live_stats"),
            auth=raw.get("auth"),
            api=raw.get("api"),
            logging=raw.get("logging"),
        )

    # Upstream endpoints
    @property
    def sportsbook_base(self) -> str:
        return self.upstream.get("sportsbook_base", "https://sportsbookv2.iddaa.com/sportsbook").rstrip("/")

    @property
    def statistics_base(self) -> str:
        return self.upstream.get("statistics_base", "https://statisticsv2.iddaa.com/statistics").rstrip("/")

    @property
    def live_stats_base(self) -> str:
        return self.upstream.get(
            "live_stats_base", "https://lmt.fn.sportradar.com/common/tr/Etc:UTC/gismo"
        ).rstrip("/")

    @property
    def origin(self) -> str:
        return self.upstream.get("origin", "https://www.iddaa.com").rstrip("/")

    @property
    def accept_language(self) -> str:
        return self.upstream.get("accept_language", "tr-TR,tr;q=0.9,en-US;q=0.8,en;q=0.7")

    @property
    def flag_url_template(self) -> str:
        return self.upstream.get(
            "flag_url_template", "https://www.iddaa.com/images/country-flags/{code}.png"
        )

    @property
    def timeout_sec(self) -> float:
        return float(self.upstream.get("timeout_sec", 10.0))

    @property
    def sport_id(self) -> int:
        return int(self.upstream.get("sport_id", 1))

    # Cache TTLs (seconds; 0 disables caching)
    @property
    def events_ttl_sec(self) -> float:
        return float(self.cache.get("events_ttl_sec", 0))

    @property
    def market_config_ttl_sec(self) -> float:
        return float(self.cache.get("market_config_ttl_sec", 600))

    @property
    def competitions_ttl_sec(self) -> float:
        return float(self.cache.get("competitions_ttl_sec", 3600))

    @property
    def percentages_ttl_sec(self) -> float:
        return float(self.cache.get("percentages_ttl_sec", 30))

    @property
    def cache_max_entries(self) -> int:
        return max(1, int(self.cache.get("max_entries", 4096)))

    # Pipeline tuning
    @property
    def batch_size(self) -> int:
        return max(1, int(self.pipeline.get("batch_size", 5)))

    @property
    def max_concurrency(self) -> int:
        return max(1, int(self.pipeline.get("max_concurrency", 45)))

    @property
    def history_limit(self) -> int:
        return int(self.pipeline.get("history_limit", 10))

    @property
    def half_time_status(self) -> int:
        return int(self.pipeline.get("half_time_status", 2))

    @property
    def main_market_type(self) -> int:
        return int(self.pipeline.get("main_market_type", 4))

    # Live stats
    @property
    def live_stats_token(self) -> str | None:
        return os.environ.get("MATCHFEED_LIVE_STATS_TOKEN") or self.live_stats.get("token") or None

    @property
    def live_stats_fallback_token(self) -> str | None:
        return self.live_stats.get("fallback_token", PLACEHOLDER_LIVE_STATS_TOKEN) or None

    # Basic auth
    @property
    def auth_username(self) -> str | None:
        return os.environ.get("MATCHFEED_BASIC_AUTH_USER") or self.auth.get("username") or None

    @property
    def auth_password(self) -> str | None:
        return os.environ.get("MATCHFEED_BASIC_AUTH_PASS") or self.auth.get("password") or None

    # API server
    @property
    def api_host(self) -> str:
        return self.api.get("host", "127.0.0.1")

    @property
    def api_port(self) -> int:
        return int(self.api.get("port", 8000))

    @property
    def logging_level(self) -> str:
        return self.logging.get("level", "INFO").upper()

    @property
    def logging_format(self) -> str:
        return self.logging.get("format", "console")

    @property
    def logging_level_num(self) -> int:
        return getattr(logging, self.logging_level, logging.INFO)


def configure_logging(settings: Settings) -> None:
    """Configure structlog with settings. Call once at application entry."""
    import structlog

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if settings.logging_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(settings.logging_level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
