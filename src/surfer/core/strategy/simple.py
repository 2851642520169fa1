# src/surfer/core/strategy/simple.py
from __future__ import annotations

from typing import List, Optional

from src.surfer.core.errors import DataError
from src.surfer.core.market.normalize import MarketSnapshot
from src.surfer.core.models.market import TickerSnapshot
from src.surfer.core.position.position_state import PositionState
from src.surfer.core.strategy.base import SignalStrategy


class SimpleStrategy(SignalStrategy):
    """
    Pass-through strategy for smoke runs:
      • always targets one configured symbol (re-entry allowed)
      • sells on every cycle once holding
    """

    strategy_id = "simple"

    def __init__(self, *, secondary_symbol: str, primary_symbol: str):
        super().__init__(secondary_symbol=secondary_symbol)
        self.primary_symbol = primary_symbol

    def pick_buy_candidate(
        self,
        candidates: List[TickerSnapshot],
        snapshot: MarketSnapshot,
    ) -> Optional[TickerSnapshot]:
        t = snapshot.find(self.primary_symbol)
        if t is None:
            raise DataError(
                f"target symbol {self.primary_symbol}{self.secondary_symbol} is missing from market data",
                operation="Get Trade Signals (simple)",
                payload={"primary_symbol": self.primary_symbol},
            )
        return t

    def sell_condition(self, position: PositionState, sell: TickerSnapshot) -> bool:
        return True
