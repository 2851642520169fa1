import pytest

from src.surfer.core.position import PositionState, PositionStateError, PriceMark


def test_starts_flat_on_secondary():
    pos = PositionState("USDT")
    assert pos.is_flat
    assert not pos.is_holding
    assert pos.status == "FLAT"
    assert pos.last_trade == PriceMark("USDT")
    assert pos.last_check == PriceMark("USDT")


def test_buy_sell_cycle():
    pos = PositionState("USDT")
    pos.on_buy("AAA", 10)
    assert pos.current_symbol == "AAA"
    assert pos.status == "HOLDING(AAA)"
    assert pos.last_trade == PriceMark("AAA", 10.0)
    assert pos.last_check == PriceMark("AAA", 10.0)

    pos.on_pass("AAA", 11)
    assert pos.last_check == PriceMark("AAA", 11.0)
    assert pos.last_trade == PriceMark("AAA", 10.0)

    pos.on_sell()
    assert pos.is_flat
    assert pos.last_check == PriceMark("USDT", 1.0)
    assert pos.last_trade.symbol == "AAA"


def test_double_buy_is_rejected():
    pos = PositionState("USDT")
    pos.on_buy("AAA", 10)
    with pytest.raises(PositionStateError):
        pos.on_buy("BBB", 1)
    assert pos.current_symbol == "AAA"


def test_sell_while_flat_is_rejected():
    with pytest.raises(PositionStateError):
        PositionState("USDT").on_sell()


@pytest.mark.parametrize("symbol", ["", "USDT"])
def test_buy_of_invalid_symbol_is_rejected(symbol):
    with pytest.raises(PositionStateError):
        PositionState("USDT").on_buy(symbol, 1)


def test_pass_without_symbol():
    pos = PositionState("USDT")
    pos.on_pass(None, None)
    assert pos.last_check == PriceMark(None, None)
    assert pos.is_flat
