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

logger = logging.getLogger(__name__)

DATA_SOURCE_MODES = ("live", "demo")

SOL_MINT = "So11111111111111111111111111111111111111112"
USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
USDT_MINT = "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB"

DEFAULT_FALLBACK_PRICES: dict[str, float] = {
    SOL_MINT: 100.0,
    USDC_MINT: 1.0,
    USDT_MINT: 1.0,
}

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AccountConfig:
    address: str = ""


@dataclass(frozen=True)
class DataSourceConfig:
    mode: str = "demo"
    base_url: str = "https://api.saros.finance"
    timeout: int = 15
    page_size: int = 100
    pair_id: str = ""
    accept_demo_fallback: bool = True


@dataclass(frozen=True)
class PriceOracleConfig:
    provider: str = "birdeye"
    base_url: str = "https://public-api.birdeye.so"
    api_key: str = ""
    timeout: int = 10
    fallback_prices: dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_FALLBACK_PRICES)
    )


@dataclass(frozen=True)
class RefreshConfig:
    interval_seconds: float = 30.0
    retry_delay_seconds: float = 2.0
    initial_attempts: int = 3
    background_attempts: int = 1


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
    account: AccountConfig = field(default_factory=AccountConfig)
    data_source: DataSourceConfig = field(default_factory=DataSourceConfig)
    price_oracle: PriceOracleConfig = field(default_factory=PriceOracleConfig)
    refresh: RefreshConfig = field(default_factory=RefreshConfig)
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


def _build_account(raw: dict[str, Any]) -> AccountConfig:
    return AccountConfig(address=str(raw.get("address", "") or ""))


def _build_data_source(raw: dict[str, Any]) -> DataSourceConfig:
    return DataSourceConfig(
        mode=str(raw.get("mode", "demo")).lower(),
        base_url=raw.get("base_url", DataSourceConfig.base_url),
        timeout=int(raw.get("timeout", 15)),
        page_size=int(raw.get("page_size", 100)),
        pair_id=str(raw.get("pair_id", "") or ""),
        accept_demo_fallback=bool(raw.get("accept_demo_fallback", True)),
    )


def _build_price_oracle(raw: dict[str, Any]) -> PriceOracleConfig:
    fallback_raw = raw.get("fallback_prices")
    if fallback_raw is None:
        fallback = dict(DEFAULT_FALLBACK_PRICES)
    else:
        fallback = {str(k): float(v) for k, v in fallback_raw.items()}
    return PriceOracleConfig(
        provider=raw.get("provider", "birdeye"),
        base_url=raw.get("base_url", PriceOracleConfig.base_url),
        api_key=raw.get("api_key", "") or "",
        timeout=int(raw.get("timeout", 10)),
        fallback_prices=fallback,
    )


def _build_refresh(raw: dict[str, Any]) -> RefreshConfig:
    return RefreshConfig(
        interval_seconds=float(raw.get("interval_seconds", 30.0)),
        retry_delay_seconds=float(raw.get("retry_delay_seconds", 2.0)),
        initial_attempts=int(raw.get("initial_attempts", 3)),
        background_attempts=int(raw.get("background_attempts", 1)),
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
            project root (two levels up from this file).
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

    cfg = AppConfig(
        account=_build_account(raw.get("account", {})),
        data_source=_build_data_source(raw.get("data_source", {})),
        price_oracle=_build_price_oracle(raw.get("price_oracle", {})),
        refresh=_build_refresh(raw.get("refresh", {})),
        notifications=_build_notifications(raw.get("notifications", {})),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if cfg.data_source.mode not in DATA_SOURCE_MODES:
        raise ValueError(
            f"Unknown data source mode '{cfg.data_source.mode}' "
            f"(expected one of {', '.join(DATA_SOURCE_MODES)})"
        )

    refresh = cfg.refresh
    if refresh.initial_attempts < 1 or refresh.background_attempts < 1:
        raise ValueError("Refresh attempt budgets must be at least 1")
    if refresh.interval_seconds <= 0:
        raise ValueError("Refresh interval must be positive")
    if refresh.retry_delay_seconds < 0:
        raise ValueError("Retry delay cannot be negative")

    tg = cfg.notifications.telegram
    if tg.enabled:
        if not tg.chat_id:
            raise ValueError("Telegram notifications enabled but no chat_id set")
        if not (tg.alert_bot_token or tg.log_bot_token):
            raise ValueError("Telegram notifications enabled but no bot token set")
