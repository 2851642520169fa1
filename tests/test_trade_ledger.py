import csv

import pytest

from src.surfer.core.models.enums import TradeKind
from src.surfer.ledger.trade_ledger import TradeLedger


@pytest.fixture
def ledger(tmp_path, fixed_clock):
    lg = TradeLedger(tmp_path / "reports" / "report.csv", commission_percent=0.1, clock=fixed_clock)
    lg.reset()
    return lg


def _row(ledger, trade, symbol="AAA", price=10.0):
    return ledger.record(
        trade,
        symbol=symbol,
        price=price,
        price_change_percent=12.345678,
        reference_price=42000.5,
        market_average=3.14159265,
    )


def test_reset_writes_header(ledger):
    with ledger.path.open(newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows == [ledger.headers]
    assert rows[0][2] == "BTC / USDT price"
    assert ledger.read_entries() == []


def test_reset_erases_previous_rows(ledger):
    _row(ledger, TradeKind.BUY)
    ledger.reset()
    assert ledger.read_entries() == []
    assert ledger.count == 0
    assert _row(ledger, TradeKind.PASS).count == 1


def test_buy_then_sell_at_same_price_costs_two_commissions(ledger):
    buy = _row(ledger, TradeKind.BUY, price=10.0)
    assert buy.profit_percent == pytest.approx(-0.1)
    assert buy.commission == pytest.approx(1.0)

    sell = _row(ledger, TradeKind.SELL, price=10.0)
    assert sell.profit_percent == pytest.approx(-0.1)
    assert sell.profit_total_percent == pytest.approx(-0.2)
    assert sell.count == 2


def test_sell_profit_relative_to_entry(ledger):
    _row(ledger, TradeKind.BUY, price=3.0)
    sell = _row(ledger, TradeKind.SELL, price=3.3)
    assert sell.profit_percent == pytest.approx(9.9)
    assert sell.profit_total_percent == pytest.approx(9.8)


def test_sell_without_entry_costs_commission(ledger):
    sell = _row(ledger, TradeKind.SELL, price=5.0)
    assert sell.profit_percent == pytest.approx(-0.1)


def test_pass_rows_are_zero_and_counted(ledger):
    _row(ledger, TradeKind.BUY, price=10.0)
    p = _row(ledger, TradeKind.PASS, price=11.0)
    assert p.count == 2
    assert p.profit_percent == 0.0
    assert p.commission == 0.0
    assert p.profit_total_percent == pytest.approx(-0.1)


def test_pass_without_symbol(ledger):
    p = ledger.record(
        TradeKind.PASS,
        symbol=None,
        price=None,
        price_change_percent=None,
        reference_price=100.0,
        market_average=0.0,
    )
    assert p.symbol == ""
    assert p.trade_price is None

    (back,) = ledger.read_entries()
    assert back.trade_price is None
    assert back.trade == TradeKind.PASS


def test_trade_rows_require_price(ledger):
    with pytest.raises(ValueError):
        _row(ledger, TradeKind.BUY, price=None)


def test_read_back_rounded_to_four_places(ledger, fixed_clock):
    _row(ledger, TradeKind.BUY, price=1.234567)

    (e,) = ledger.read_entries()
    assert e.count == 1
    assert e.date == fixed_clock()
    assert e.reference_price == 42000.5
    assert e.symbol == "AAA"
    assert e.price_change_percent == 12.3457
    assert e.trade == TradeKind.BUY
    assert e.trade_price == 1.2346
    assert e.market_average == 3.1416
