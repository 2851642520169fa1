# src/surfer/core/models/market.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from src.surfer.core.models.enums import OrderStatus, Side


@dataclass(frozen=True, slots=True)
class TickerSnapshot:
    """One symbol's latest 24h window, already normalized."""

    primary_symbol: str
    secondary_symbol: str
    ticker_name: str
    last_price: float
    price_change_percent: float
    open_time: Optional[int] = None
    close_time: Optional[int] = None


@dataclass(frozen=True, slots=True)
class SymbolBalance:
    symbol: str
    available: float
    usdt_rate: float = 0.0  # valuation in USDT


@dataclass(frozen=True, slots=True)
class TickerLimits:
    """Exchange quantity constraints for one ticker (LOT_SIZE + MIN_NOTIONAL)."""

    min_order_quantity: float
    min_order_value: float
    step_size: str  # kept as exchange text, e.g. "0.00100000"


@dataclass(frozen=True, slots=True)
class OrderQuantity:
    buy_quantity: float
    sell_quantity: float


@dataclass(slots=True)
class OrderResult:
    side: Side
    ticker_name: str
    status: str
    executed_quantity: float
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def is_filled(self) -> bool:
        return str(self.status).upper() == OrderStatus.FILLED.value and self.executed_quantity > 0
