# src/surfer/core/strategy/flat.py
from __future__ import annotations

from typing import List, Optional

from src.surfer.core.market.normalize import MarketSnapshot
from src.surfer.core.models.market import TickerSnapshot
from src.surfer.core.strategy.base import SignalStrategy


class FlatStrategy(SignalStrategy):
    """Mean reversion: the smallest loser among tickers with a negative 24h change."""

    strategy_id = "flat"

    def pick_buy_candidate(
        self,
        candidates: List[TickerSnapshot],
        snapshot: MarketSnapshot,
    ) -> Optional[TickerSnapshot]:
        negative = [t for t in candidates if t.price_change_percent < 0]
        return negative[0] if negative else None
