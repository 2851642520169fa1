from .enums import OrderStatus, Side, TradeKind
from .market import (
    OrderQuantity,
    OrderResult,
    SymbolBalance,
    TickerLimits,
    TickerSnapshot,
)

__all__ = [
    "OrderStatus",
    "Side",
    "TradeKind",
    "OrderQuantity",
    "OrderResult",
    "SymbolBalance",
    "TickerLimits",
    "TickerSnapshot",
]
