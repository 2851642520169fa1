# src/surfer/core/settings.py
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from src.surfer.core.errors import ConfigError

log = logging.getLogger("surfer.settings")

INDICATORS = ("simple", "pump", "dump", "flat")

_INTERVAL_RE = re.compile(r"^(\d+)(s|m|h)$")
_UNIT_SEC = {"s": 1, "m": 60, "h": 60 * 60}


def parse_interval(interval: str) -> float:
    """
    "30s" / "5m" / "1h" -> seconds.
    Value must be 1..60 units.
    """
    s = str(interval or "").strip()
    m = _INTERVAL_RE.match(s)
    if not m:
        raise ConfigError(f"Invalid interval format: {interval!r}", operation="Parse Interval")

    value = int(m.group(1))
    unit = m.group(2)
    if value < 1 or value > 60:
        raise ConfigError(f"Invalid interval value: {value}", operation="Parse Interval")

    return float(value * _UNIT_SEC[unit])


# flat env names -> field names
_ENV_ALIASES: Dict[str, str] = {
    "SECONDARY_SYMBOL": "secondary_symbol",
    "PRIMARY_SYMBOL": "primary_symbol",
    "INDICATOR": "indicator",
    "HEARTBEAT_INTERVAL": "heartbeat_interval",
    "NEXT_TRADE_DELAY": "next_trade_delay",
    "USE_FIXED_TRADE_VALUE": "use_fixed_trade_value",
    "FIXED_TRADE_VALUE": "fixed_trade_value",
    "FIXED_TRADE_PERCENT": "fixed_trade_percent",
    "INDICATOR_CHANGE_PERCENT": "indicator_change_percent",
    "MIN_TRADE_USD_VALUE": "min_trade_usd_value",
    "TEST_COMISSION_PERCENT": "commission_percent",
    "COMMISSION_PERCENT": "commission_percent",
    "REPORT_FILE_DIR": "report_dir",
    "REPORT_FILE_NAME": "report_name",
    "MODE": "app_mode",
    "DELAY": "request_delay_ms",
    "SIMULATION": "simulation",
    "TEST_MODE": "simulation",
    "REFERENCE_SYMBOL": "reference_symbol",
    "TELEGRAM_ENABLED": "telegram_enabled",
    "CHART_ENABLED": "chart_enabled",
}


def _as_bool(x: Any, default: bool) -> bool:
    if x is None:
        return default
    if isinstance(x, bool):
        return x
    if isinstance(x, (int, float)):
        return bool(x)
    s = str(x).strip().lower()
    if s in {"1", "true", "yes", "y", "on"}:
        return True
    if s in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _as_float(x: Any, name: str) -> float:
    try:
        return float(x)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be a number, got {x!r}", operation="Load Config") from None


def _as_int(x: Any, name: str) -> int:
    try:
        return int(float(x))
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be an integer, got {x!r}", operation="Load Config") from None


@dataclass
class SurferParams:
    """Runtime configuration of the spot surfer bot."""

    # --- market
    secondary_symbol: str = "USDT"
    primary_symbol: Optional[str] = None  # target of the "simple" indicator
    reference_symbol: str = "BTC"

    # --- signal
    indicator: str = "simple"  # simple | pump | dump | flat
    indicator_change_percent: float = 0.0

    # --- pacing
    heartbeat_interval: str = "1m"  # while holding
    next_trade_delay: str = "1m"  # while flat
    request_delay_ms: int = 1000

    # --- sizing
    use_fixed_trade_value: bool = False
    fixed_trade_value: float = 0.0
    fixed_trade_percent: float = 100.0
    min_trade_usd_value: float = 0.0

    # --- ledger
    commission_percent: float = 0.0
    report_dir: str = "."
    report_name: str = "report"

    # --- mode
    simulation: bool = True
    paper_start_balance: float = 100.0
    app_mode: str = "DEVELOPMENT"  # DEVELOPMENT | PRODUCTION

    # --- Binance REST
    api_key_env: str = "BINANCE_APIKEY"
    api_secret_env: str = "BINANCE_APISECRET"
    base_url: str = "https://api.binance.com"
    recv_window_ms: int = 60000
    timeout_sec: float = 10.0
    max_retries: int = 5

    # --- notifications
    telegram_enabled: bool = True
    chart_enabled: bool = True
    chart_interval: str = "1d"
    chart_periods: int = 45

    extras: Dict[str, Any] = field(default_factory=dict, repr=False)

    # ------------------------------------------------------------------

    @property
    def heartbeat_interval_sec(self) -> float:
        return parse_interval(self.heartbeat_interval)

    @property
    def next_trade_delay_sec(self) -> float:
        return parse_interval(self.next_trade_delay)

    @property
    def report_path(self) -> Path:
        return Path(self.report_dir) / f"{self.report_name}.csv"

    @property
    def reference_ticker(self) -> str:
        return f"{self.reference_symbol}{self.secondary_symbol}"

    @property
    def log_level(self) -> int:
        return logging.WARNING if str(self.app_mode).upper() == "PRODUCTION" else logging.INFO

    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "SurferParams":
        raw: Dict[str, Any] = {}
        extras: Dict[str, Any] = {}

        fields = cls.__dataclass_fields__
        for k, v in (d or {}).items():
            key = _ENV_ALIASES.get(str(k), str(k))
            if key in fields and key != "extras":
                raw[key] = v
            else:
                extras[str(k)] = v

        params: Dict[str, Any] = {}
        for name, v in raw.items():
            default = getattr(cls, name, None)
            if isinstance(default, bool):
                params[name] = _as_bool(v, default)
            elif isinstance(default, int):
                params[name] = _as_int(v, name)
            elif isinstance(default, float):
                params[name] = _as_float(v, name)
            elif v is None:
                params[name] = None
            else:
                params[name] = str(v).strip()

        for sym in ("secondary_symbol", "primary_symbol", "reference_symbol"):
            if params.get(sym):
                params[sym] = params[sym].upper()
        if params.get("indicator"):
            params["indicator"] = params["indicator"].lower()

        return cls(**params, extras=extras)

    def validate(self) -> "SurferParams":
        if self.indicator not in INDICATORS:
            raise ConfigError(
                f"Unknown indicator {self.indicator!r} (expected one of {', '.join(INDICATORS)})",
                operation="Load Config",
            )
        if self.indicator == "simple" and not self.primary_symbol:
            raise ConfigError("indicator=simple requires primary_symbol", operation="Load Config")

        if self.use_fixed_trade_value and self.fixed_trade_value <= 0:
            raise ConfigError("fixed_trade_value must be > 0", operation="Load Config")
        if not self.use_fixed_trade_value and self.fixed_trade_percent <= 0:
            raise ConfigError("fixed_trade_percent must be > 0", operation="Load Config")

        # fail at startup, not in the loop
        parse_interval(self.heartbeat_interval)
        parse_interval(self.next_trade_delay)
        return self


def load_params(
    *,
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> SurferParams:
    """
    defaults -> YAML (optional) -> environment.
    """
    env = os.environ if environ is None else environ
    merged: Dict[str, Any] = {}

    if config_path is None:
        p = str(env.get("SURFER_CONFIG", "")).strip()
        config_path = Path(p) if p else Path("config") / "surfer.yaml"
        if not p and not config_path.exists():
            config_path = None

    if config_path is not None:
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}", operation="Load Config")
        data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config root must be a mapping: {config_path}", operation="Load Config")
        section = data.get("surfer", data)
        if not isinstance(section, dict):
            raise ConfigError("Config: surfer section must be a mapping", operation="Load Config")
        merged.update(section)
        log.info("Config loaded: %s", str(config_path))

    for k in _ENV_ALIASES:
        v = env.get(k)
        if v is not None and str(v).strip() != "":
            merged[k] = v

    return SurferParams.from_dict(merged).validate()
