# src/surfer/core/strategy/pump.py
from __future__ import annotations

from typing import List, Optional

from src.surfer.core.market.normalize import MarketSnapshot
from src.surfer.core.models.market import TickerSnapshot
from src.surfer.core.strategy.base import SignalStrategy


class PumpStrategy(SignalStrategy):
    """
    Buys a mover above the change threshold.

    Among qualifying tickers the LEAST extreme one is taken (descending list,
    reversed, first element).
    """

    strategy_id = "pump"

    def __init__(self, *, secondary_symbol: str, change_percent: float):
        super().__init__(secondary_symbol=secondary_symbol)
        self.change_percent = float(change_percent)

    def pick_buy_candidate(
        self,
        candidates: List[TickerSnapshot],
        snapshot: MarketSnapshot,
    ) -> Optional[TickerSnapshot]:
        qualifying = [t for t in candidates if t.price_change_percent > self.change_percent]
        if not qualifying:
            return None
        return list(reversed(qualifying))[0]
