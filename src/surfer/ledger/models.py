from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from src.surfer.core.models.enums import TradeKind


@dataclass(frozen=True)
class LedgerEntry:
    count: int
    date: datetime
    reference_price: float
    symbol: str
    price_change_percent: float
    trade: TradeKind
    trade_price: Optional[float]   # empty on PASS without a held symbol
    commission: float
    profit_percent: float
    profit_total_percent: float
    market_average: float
