# src/surfer/core/strategy/dump.py
from __future__ import annotations

from typing import List, Optional

from src.surfer.core.market.normalize import MarketSnapshot
from src.surfer.core.models.market import TickerSnapshot
from src.surfer.core.strategy.base import SignalStrategy


class DumpStrategy(SignalStrategy):
    """Buys the biggest 24h loser (no threshold)."""

    strategy_id = "dump"

    def pick_buy_candidate(
        self,
        candidates: List[TickerSnapshot],
        snapshot: MarketSnapshot,
    ) -> Optional[TickerSnapshot]:
        return candidates[-1] if candidates else None
