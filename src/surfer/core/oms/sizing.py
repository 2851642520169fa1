# src/surfer/core/oms/sizing.py
from __future__ import annotations

import logging
from decimal import ROUND_DOWN, Decimal, InvalidOperation
from typing import Optional

from src.surfer.core.errors import ConstraintError
from src.surfer.core.models.market import OrderQuantity, TickerLimits

log = logging.getLogger("surfer.oms.sizing")


def _dec(x: object) -> Decimal:
    try:
        if isinstance(x, Decimal):
            return x
        return Decimal(str(x))
    except (InvalidOperation, ValueError, TypeError):
        raise ConstraintError(f"not a number: {x!r}", operation="Round Step") from None


def round_step(value: object, step: object) -> Decimal:
    """
    Truncate `value` toward zero to a multiple of the exchange `step`.
    Never rounds up past an allowed step.
    """
    v = _dec(value)
    s = _dec(step)
    if s <= 0:
        raise ConstraintError(f"invalid step size: {step!r}", operation="Round Step")
    q = (v / s).to_integral_value(rounding=ROUND_DOWN) * s
    if q <= 0:
        return Decimal("0")
    return q


def _as_float_clean(d: Decimal) -> float:
    # avoid floats like 55.300000000000004 by going through str
    return float(format(d.normalize(), "f"))


def _feasible(qty: Decimal, price: Decimal, limits: TickerLimits) -> bool:
    if qty <= 0:
        return False
    if qty < _dec(limits.min_order_quantity):
        return False
    if qty * price < _dec(limits.min_order_value):
        return False
    return True


def buy_quantity(
    *,
    limits: TickerLimits,
    price: float,
    secondary_balance: float,
    use_fixed_value: bool,
    fixed_value: float = 0.0,
    fixed_percent: float = 0.0,
) -> float:
    """
    fixed notional: (fixed_value / price - step) truncated to step
    fixed percent:  (balance / price) * percent / 100 truncated to step

    Returns 0.0 when the order would break LOT_SIZE / MIN_NOTIONAL.
    0.0 means "do not trade".
    """
    p = _dec(price)
    if p <= 0:
        raise ConstraintError(f"invalid price: {price!r}", operation="Calculate Order Quantity")

    step = _dec(limits.step_size)
    if use_fixed_value:
        raw = _dec(fixed_value) / p - step
    else:
        raw = _dec(secondary_balance) / p / Decimal(100) * _dec(fixed_percent)

    qty = round_step(raw, step)
    if not _feasible(qty, p, limits):
        return 0.0
    return _as_float_clean(qty)


def sell_quantity(*, limits: TickerLimits, price: float, primary_balance: float) -> float:
    """Whole available primary balance truncated to step; 0.0 if below exchange minimums."""
    p = _dec(price)
    if p <= 0:
        raise ConstraintError(f"invalid price: {price!r}", operation="Calculate Order Quantity")

    qty = round_step(primary_balance, limits.step_size)
    if not _feasible(qty, p, limits):
        return 0.0
    return _as_float_clean(qty)


def check_buy_balance(
    *,
    secondary_symbol: str,
    secondary_balance: float,
    use_fixed_value: bool,
    fixed_value: float = 0.0,
    fixed_percent: float = 0.0,
) -> None:
    """Raise ConstraintError if the balance cannot fund the configured trade size."""
    if use_fixed_value:
        if secondary_balance < fixed_value:
            raise ConstraintError(
                f"insufficient balance: {secondary_symbol} balance must be >= {fixed_value}",
                operation="Market Buy",
                payload={"balance": secondary_balance, "required": fixed_value},
            )
        return

    required = secondary_balance / 100.0 * fixed_percent
    if secondary_balance < required:
        raise ConstraintError(
            f"insufficient balance: {secondary_symbol} balance must be >= {required}",
            operation="Market Buy",
            payload={"balance": secondary_balance, "required": required},
        )


def calculate_order_quantity(
    *,
    ticker_name: str,
    limits: TickerLimits,
    price: float,
    secondary_balance: float,
    primary_balance: float,
    use_fixed_value: bool,
    fixed_value: float = 0.0,
    fixed_percent: float = 0.0,
    logger: Optional[logging.Logger] = None,
) -> OrderQuantity:
    lg = logger or log

    buy = buy_quantity(
        limits=limits,
        price=price,
        secondary_balance=secondary_balance,
        use_fixed_value=use_fixed_value,
        fixed_value=fixed_value,
        fixed_percent=fixed_percent,
    )
    sell = sell_quantity(limits=limits, price=price, primary_balance=primary_balance)

    lg.info(
        "[SIZING] %s price=%s step=%s min_qty=%s min_notional=%s "
        "primary=%s secondary=%s -> buy=%s sell=%s (%s)",
        ticker_name,
        price,
        limits.step_size,
        limits.min_order_quantity,
        limits.min_order_value,
        primary_balance,
        secondary_balance,
        buy,
        sell,
        f"fixed value {fixed_value}" if use_fixed_value else f"fixed percent {fixed_percent}",
    )
    return OrderQuantity(buy_quantity=buy, sell_quantity=sell)
