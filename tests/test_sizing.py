from decimal import Decimal

import pytest

from src.surfer.core.errors import ConstraintError
from src.surfer.core.models.market import TickerLimits
from src.surfer.core.oms.sizing import (
    buy_quantity,
    calculate_order_quantity,
    check_buy_balance,
    round_step,
    sell_quantity,
)


@pytest.fixture
def limits():
    return TickerLimits(min_order_quantity=0.1, min_order_value=10.0, step_size="0.10000000")


def test_round_step_truncates_to_multiple():
    assert round_step("1.23456", "0.001") == Decimal("1.234")
    assert round_step("0.0009", "0.001") == Decimal("0")
    assert round_step("-5", "0.1") == Decimal("0")


@pytest.mark.parametrize("step", ["0", "-1", "abc"])
def test_round_step_rejects_bad_step(step):
    with pytest.raises(ConstraintError):
        round_step("1", step)


def test_buy_quantity_percent_of_balance(limits):
    q = buy_quantity(limits=limits, price=2.0, secondary_balance=100.0, use_fixed_value=False, fixed_percent=50)
    assert q == 25.0


def test_buy_quantity_fixed_value_keeps_one_step_below(limits):
    # 20 / 3 = 6.666.. minus one step -> 6.566.. -> 6.5
    q = buy_quantity(limits=limits, price=3.0, secondary_balance=100.0, use_fixed_value=True, fixed_value=20)
    assert q == 6.5
    assert q * 3.0 <= 20


def test_buy_quantity_is_multiple_of_step(limits):
    q = buy_quantity(limits=limits, price=0.37, secondary_balance=77.7, use_fixed_value=False, fixed_percent=100)
    assert Decimal(str(q)) % Decimal("0.1") == 0


def test_buy_quantity_below_min_notional_is_zero(limits):
    q = buy_quantity(limits=limits, price=2.0, secondary_balance=15.0, use_fixed_value=False, fixed_percent=50)
    assert q == 0.0


def test_buy_quantity_below_min_qty_is_zero():
    lim = TickerLimits(min_order_quantity=1.0, min_order_value=0.0, step_size="0.01")
    q = buy_quantity(limits=lim, price=100.0, secondary_balance=50.0, use_fixed_value=False, fixed_percent=100)
    assert q == 0.0


def test_buy_quantity_invalid_price(limits):
    with pytest.raises(ConstraintError):
        buy_quantity(limits=limits, price=0, secondary_balance=100.0, use_fixed_value=False, fixed_percent=100)


def test_sell_quantity_whole_balance(limits):
    assert sell_quantity(limits=limits, price=5.0, primary_balance=12.345) == 12.3
    assert sell_quantity(limits=limits, price=5.0, primary_balance=0.05) == 0.0


def test_check_buy_balance_fixed_value():
    check_buy_balance(secondary_symbol="USDT", secondary_balance=20, use_fixed_value=True, fixed_value=20)
    with pytest.raises(ConstraintError) as ei:
        check_buy_balance(secondary_symbol="USDT", secondary_balance=19.9, use_fixed_value=True, fixed_value=20)
    assert "insufficient balance" in str(ei.value)
    assert ei.value.payload["required"] == 20


def test_check_buy_balance_percent():
    check_buy_balance(secondary_symbol="USDT", secondary_balance=50, use_fixed_value=False, fixed_percent=100)
    with pytest.raises(ConstraintError):
        check_buy_balance(secondary_symbol="USDT", secondary_balance=50, use_fixed_value=False, fixed_percent=150)


def test_calculate_order_quantity(limits):
    q = calculate_order_quantity(
        ticker_name="AAAUSDT",
        limits=limits,
        price=2.0,
        secondary_balance=100.0,
        primary_balance=7.77,
        use_fixed_value=False,
        fixed_percent=100,
    )
    assert q.buy_quantity == 50.0
    assert q.sell_quantity == 7.7
