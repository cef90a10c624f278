"""TOML config loading and profiles."""

from __future__ import annotations

import logging
import tomllib
from decimal import Decimal
from pathlib import Path
from typing import Any

# Default config search path (project root or cwd)
_CONFIG_DIR = Path(__file__).resolve().parent.parent.parent.parent / "config"
_CWD_CONFIG = Path.cwd() / "config"


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
        storage: dict[str, Any] | None = None,
        amm: dict[str, Any] | None = None,
        trading: dict[str, Any] | None = None,
        api: dict[str, Any] | None = None,
        logging: dict[str, Any] | None = None,
    ):
        self.storage = storage or {}
        self.amm = amm or {}
        self.trading = trading or {}
        self.api = api or {}
        self.logging = logging or {}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Settings:
        return cls(
            storage=raw.get("storage"),
            amm=raw.get("amm"),
            trading=raw.get("trading"),
            api=raw.get("api"),
            logging=raw.get("logging"),
        )

    # Convenience accessors with defaults
    @property
    def db_path(self) -> str:
        return self.storage.get("db_path", "data/predamm.duckdb")

    @property
    def pool_size(self) -> int:
        return int(self.storage.get("pool_size", 8))

    @property
    def transaction_max_wait_sec(self) -> float:
        return float(self.storage.get("transaction_max_wait_sec", 5.0))

    @property
    def transaction_timeout_sec(self) -> float:
        return float(self.storage.get("transaction_timeout_sec", 10.0))

    def _amm_decimal(self, key: str, default: str) -> Decimal:
        # str() first so TOML floats like 0.02 do not carry binary noise
        return Decimal(str(self.amm.get(key, default)))

    @property
    def fee_rate(self) -> Decimal:
        return self._amm_decimal("fee_rate", "0.02")

    @property
    def initial_liquidity(self) -> Decimal:
        return self._amm_decimal("initial_liquidity", "100")

    @property
    def min_shares(self) -> Decimal:
        return self._amm_decimal("min_shares", "1")

    @property
    def max_price_impact(self) -> Decimal:
        return self._amm_decimal("max_price_impact", "0.5")

    @property
    def min_price(self) -> Decimal:
        return self._amm_decimal("min_price", "0.001")

    @property
    def max_price(self) -> Decimal:
        return self._amm_decimal("max_price", "0.999")

    @property
    def retry_attempts(self) -> int:
        return int(self.trading.get("retry_attempts", 3))

    @property
    def retry_base_delay_sec(self) -> float:
        return float(self.trading.get("retry_base_delay_sec", 0.05))

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
    ]
    if settings.logging_format == "json":
        processors.append(structlog.processors.JSONRenderer(default=str))
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(settings.logging_level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
