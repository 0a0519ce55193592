"""Configuration loader: reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .models import AssetInfo

logger = logging.getLogger(__name__)

ORACLE_PROVIDERS = ("static", "pyth")

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EngineConfig:
    """Parameters fixed for the lifetime of one engine."""

    collateral: AssetInfo = field(default_factory=lambda: AssetInfo("COLL", 18))
    debt: AssetInfo = field(default_factory=lambda: AssetInfo("DEBT", 18))
    operator: str = ""
    price_precision: int = 18
    oracle_timeout_seconds: float = 5.0


@dataclass(frozen=True)
class StaticOracleConfig:
    price: int = 0


@dataclass(frozen=True)
class PythConfig:
    hermes_url: str = "https://hermes.pyth.network/v2/updates/price/latest"
    collateral_feed: str = ""
    debt_feed: str = ""


@dataclass(frozen=True)
class PriceOracleConfig:
    provider: str = "static"
    precision: int = 18
    timeout_seconds: float = 5.0
    static: StaticOracleConfig = field(default_factory=StaticOracleConfig)
    pyth: PythConfig = field(default_factory=PythConfig)


@dataclass(frozen=True)
class TelegramConfig:
    enabled: bool = False
    alert_bot_token: str = ""
    log_bot_token: str = ""
    chat_id: str = ""


@dataclass(frozen=True)
class NotificationsConfig:
    telegram: TelegramConfig = field(default_factory=TelegramConfig)


@dataclass(frozen=True)
class AppConfig:
    engine: EngineConfig = field(default_factory=EngineConfig)
    price_oracle: PriceOracleConfig = field(default_factory=PriceOracleConfig)
    notifications: NotificationsConfig = field(default_factory=NotificationsConfig)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_asset(raw: dict[str, Any], default_symbol: str) -> AssetInfo:
    return AssetInfo(
        symbol=str(raw.get("symbol", default_symbol)),
        decimals=int(raw.get("decimals", 18)),
    )


def _build_price_oracle(raw: dict[str, Any]) -> PriceOracleConfig:
    static_raw = raw.get("static") or {}
    pyth_raw = raw.get("pyth") or {}
    return PriceOracleConfig(
        provider=str(raw.get("provider", "static")),
        precision=int(raw.get("precision", 18)),
        timeout_seconds=float(raw.get("timeout_seconds", 5.0)),
        # Prices are quoted as strings in YAML so large integers survive intact.
        static=StaticOracleConfig(price=int(static_raw.get("price", 0))),
        pyth=PythConfig(
            hermes_url=pyth_raw.get("hermes_url", PythConfig.hermes_url),
            collateral_feed=pyth_raw.get("collateral_feed", ""),
            debt_feed=pyth_raw.get("debt_feed", ""),
        ),
    )


def _build_engine(raw: dict[str, Any], oracle: PriceOracleConfig) -> EngineConfig:
    return EngineConfig(
        collateral=_build_asset(raw.get("collateral", {}), "COLL"),
        debt=_build_asset(raw.get("debt", {}), "DEBT"),
        operator=str(raw.get("operator", "")),
        price_precision=oracle.precision,
        oracle_timeout_seconds=oracle.timeout_seconds,
    )


def _build_notifications(raw: dict[str, Any]) -> NotificationsConfig:
    tg = raw.get("telegram", {})
    return NotificationsConfig(
        telegram=TelegramConfig(
            enabled=bool(tg.get("enabled", False)),
            alert_bot_token=tg.get("alert_bot_token", ""),
            log_bot_token=tg.get("log_bot_token", ""),
            chat_id=str(tg.get("chat_id", "")),
        ),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    oracle = _build_price_oracle(raw.get("price_oracle", {}))
    cfg = AppConfig(
        engine=_build_engine(raw.get("engine", {}), oracle),
        price_oracle=oracle,
        notifications=_build_notifications(raw.get("notifications", {})),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    engine = cfg.engine
    for role, asset in (("collateral", engine.collateral), ("debt", engine.debt)):
        if asset.decimals < 0:
            raise ValueError(f"{role} asset '{asset.symbol}' has negative decimals")
    if engine.collateral.symbol == engine.debt.symbol:
        raise ValueError("Collateral and debt assets must differ")
    if not engine.operator:
        raise ValueError("An operator identity must be configured")

    oracle = cfg.price_oracle
    if oracle.provider not in ORACLE_PROVIDERS:
        raise ValueError(f"Unknown price oracle provider '{oracle.provider}'")
    if oracle.precision < 0:
        raise ValueError("Price precision must be non-negative")
    if oracle.timeout_seconds <= 0:
        raise ValueError("Oracle timeout must be positive")
    if oracle.provider == "static" and oracle.static.price <= 0:
        raise ValueError("Static oracle price must be positive")
    if oracle.provider == "pyth" and not (
        oracle.pyth.collateral_feed and oracle.pyth.debt_feed
    ):
        raise ValueError("Pyth oracle requires both collateral_feed and debt_feed")
