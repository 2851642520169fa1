# src/surfer/exchanges/binance/filters.py
from __future__ import annotations

from typing import Any

from src.surfer.core.errors import DataError
from src.surfer.core.models.market import TickerLimits


def parse_symbol_filters(sym: dict[str, Any]) -> TickerLimits:
    """
    Parse Binance Spot exchangeInfo symbol filters.

    LOT_SIZE     -> minQty, stepSize (step kept as text)
    MIN_NOTIONAL -> minNotional (older symbols)
    NOTIONAL     -> minNotional (current spot filter)
    """
    step_size = None
    min_qty = None
    min_notional = 0.0

    try:
        for f in sym.get("filters", []) or []:
            t = f.get("filterType")

            if t == "LOT_SIZE":
                step_size = str(f["stepSize"]).strip()
                min_qty = float(f["minQty"])
                if float(step_size) <= 0:
                    step_size = None

            elif t in ("MIN_NOTIONAL", "NOTIONAL"):
                min_notional = float(f.get("minNotional", f.get("notional", 0)) or 0)
    except (KeyError, TypeError, ValueError) as e:
        raise DataError(
            f"bad filters for symbol {sym.get('symbol')}: {e!r}",
            operation="Get Exchange Info",
            payload=sym.get("filters"),
        ) from None

    if step_size is None or min_qty is None:
        raise DataError(
            f"Incomplete filters for symbol {sym.get('symbol')}",
            operation="Get Exchange Info",
            payload=sym.get("filters"),
        )

    return TickerLimits(
        min_order_quantity=min_qty,
        min_order_value=min_notional,
        step_size=step_size,
    )


def is_spot_tradable(sym: dict[str, Any]) -> bool:
    return sym.get("status") == "TRADING" and bool(sym.get("isSpotTradingAllowed"))
