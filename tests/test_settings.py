import logging

import pytest

from src.surfer.core.errors import ConfigError
from src.surfer.core.settings import SurferParams, load_params, parse_interval


@pytest.mark.parametrize(
    "text, seconds",
    [("1s", 1), ("30s", 30), ("5m", 300), ("60m", 3600), ("1h", 3600), ("60h", 216000)],
)
def test_parse_interval(text, seconds):
    assert parse_interval(text) == seconds


@pytest.mark.parametrize("text", ["0m", "61s", "5d", "m5", "", "1.5m", " 5 m"])
def test_parse_interval_rejects(text):
    with pytest.raises(ConfigError):
        parse_interval(text)


def test_defaults():
    p = SurferParams()
    assert p.secondary_symbol == "USDT"
    assert p.reference_ticker == "BTCUSDT"
    assert p.simulation is True
    assert p.heartbeat_interval_sec == 60
    assert p.report_path.name == "report.csv"
    assert p.log_level == logging.INFO


def test_production_mode_logs_warnings_only():
    assert SurferParams(app_mode="PRODUCTION").log_level == logging.WARNING


def test_from_dict_coerces_types_and_case():
    p = SurferParams.from_dict(
        {
            "indicator": "PUMP",
            "secondary_symbol": "usdt",
            "indicator_change_percent": "7.5",
            "use_fixed_trade_value": "yes",
            "fixed_trade_value": "25",
            "request_delay_ms": "250",
            "unknown_key": 1,
        }
    )
    assert p.indicator == "pump"
    assert p.secondary_symbol == "USDT"
    assert p.indicator_change_percent == 7.5
    assert p.use_fixed_trade_value is True
    assert p.fixed_trade_value == 25.0
    assert p.request_delay_ms == 250
    assert p.extras == {"unknown_key": 1}


def test_from_dict_rejects_non_numbers():
    with pytest.raises(ConfigError):
        SurferParams.from_dict({"fixed_trade_value": "a lot"})


def test_load_params_yaml_then_env(tmp_path):
    cfg = tmp_path / "surfer.yaml"
    cfg.write_text(
        "surfer:\n"
        "  indicator: dump\n"
        "  heartbeat_interval: 30s\n"
        "  commission_percent: 0.1\n",
        encoding="utf-8",
    )
    env = {
        "NEXT_TRADE_DELAY": "2m",
        "TEST_COMISSION_PERCENT": "0.075",
        "SIMULATION": "false",
        "PRIMARY_SYMBOL": "",
    }
    p = load_params(config_path=cfg, environ=env)

    assert p.indicator == "dump"
    assert p.heartbeat_interval_sec == 30
    assert p.next_trade_delay_sec == 120
    assert p.commission_percent == 0.075
    assert p.simulation is False
    assert p.primary_symbol is None


def test_load_params_empty_yaml_and_env(tmp_path):
    cfg = tmp_path / "empty.yaml"
    cfg.write_text("", encoding="utf-8")
    p = load_params(config_path=cfg, environ={"INDICATOR": "simple", "PRIMARY_SYMBOL": "bnb"})
    assert p.indicator == "simple"
    assert p.primary_symbol == "BNB"


def test_load_params_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        load_params(config_path=tmp_path / "nope.yaml", environ={})


def test_load_params_via_env_path(tmp_path):
    cfg = tmp_path / "c.yaml"
    cfg.write_text("indicator: flat\n", encoding="utf-8")
    p = load_params(environ={"SURFER_CONFIG": str(cfg)})
    assert p.indicator == "flat"


@pytest.mark.parametrize(
    "overrides",
    [
        {"indicator": "moon"},
        {"indicator": "simple"},
        {"indicator": "pump", "use_fixed_trade_value": True, "fixed_trade_value": 0},
        {"indicator": "pump", "fixed_trade_percent": 0},
        {"indicator": "pump", "heartbeat_interval": "90m"},
    ],
)
def test_validate_rejects(overrides):
    with pytest.raises(ConfigError):
        SurferParams(**overrides).validate()
