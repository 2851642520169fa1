# src/surfer/core/strategy/base.py
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from src.surfer.core.errors import DataError
from src.surfer.core.market.normalize import MarketSnapshot, market_average_price
from src.surfer.core.models.market import TickerSnapshot
from src.surfer.core.position.position_state import PositionState

log = logging.getLogger("surfer.strategy")


@dataclass(frozen=True, slots=True)
class SignalResult:
    buy_candidate: Optional[TickerSnapshot]
    sell_candidate: Optional[TickerSnapshot]
    is_buy_signal: bool
    is_sell_signal: bool
    reference_price: float
    market_average_price: float

    # --- convenience ---

    @property
    def buy_symbol(self) -> Optional[str]:
        return self.buy_candidate.primary_symbol if self.buy_candidate else None

    @property
    def buy_price(self) -> Optional[float]:
        return self.buy_candidate.last_price if self.buy_candidate else None

    @property
    def sell_symbol(self) -> Optional[str]:
        return self.sell_candidate.primary_symbol if self.sell_candidate else None

    @property
    def sell_price(self) -> Optional[float]:
        return self.sell_candidate.last_price if self.sell_candidate else None


class SignalStrategy(ABC):
    """
    Base signal strategy.

    Strategy:
      • receives the normalized market snapshot + position state
      • picks one buy candidate among eligible tickers
      • decides whether the held symbol should be sold
      • never mutates the position state
    """

    strategy_id: str = "base"

    def __init__(self, *, secondary_symbol: str):
        self.secondary_symbol = secondary_symbol

    # ------------------------------------------------------------------
    # hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def pick_buy_candidate(
        self,
        candidates: List[TickerSnapshot],
        snapshot: MarketSnapshot,
    ) -> Optional[TickerSnapshot]:
        """
        candidates: eligible tickers sorted by 24h change, descending.
        """
        raise NotImplementedError

    def sell_condition(self, position: PositionState, sell: TickerSnapshot) -> bool:
        """Price dropped since the last check of the held symbol."""
        last = position.last_check
        if last.symbol != position.current_symbol or last.price is None:
            return False
        return sell.last_price < last.price

    # ------------------------------------------------------------------
    # evaluate
    # ------------------------------------------------------------------

    def eligible(self, snapshot: MarketSnapshot, position: PositionState) -> List[TickerSnapshot]:
        """Tradable, not the last traded symbol, not the held symbol; by change desc."""
        rows = [
            t
            for t in snapshot.tradable()
            if t.primary_symbol != position.last_trade.symbol
            and t.primary_symbol != position.current_symbol
        ]
        # stable: equal changes keep snapshot order
        return sorted(rows, key=lambda t: t.price_change_percent, reverse=True)

    def evaluate(self, snapshot: MarketSnapshot, position: PositionState) -> SignalResult:
        buy = self.pick_buy_candidate(self.eligible(snapshot, position), snapshot)

        sell: Optional[TickerSnapshot] = None
        is_sell = False
        if position.is_holding:
            sell = snapshot.find(position.current_symbol)
            if sell is None:
                raise DataError(
                    f"held symbol {position.current_symbol} is missing from market data",
                    operation=f"Get Trade Signals ({self.strategy_id})",
                    payload={"current_symbol": position.current_symbol},
                )
            is_sell = self.sell_condition(position, sell)

        result = SignalResult(
            buy_candidate=buy,
            sell_candidate=sell,
            is_buy_signal=position.is_flat and buy is not None,
            is_sell_signal=is_sell,
            reference_price=float(snapshot.reference_price),
            market_average_price=market_average_price(snapshot.tradable(), snapshot.reference_price),
        )

        log.info(
            "[SIGNAL] %s buy=%s@%s (%s%%) is_buy=%s | sell=%s@%s is_sell=%s | avg=%.4f",
            self.strategy_id,
            result.buy_symbol,
            result.buy_price,
            buy.price_change_percent if buy else None,
            result.is_buy_signal,
            result.sell_symbol,
            result.sell_price,
            result.is_sell_signal,
            result.market_average_price,
        )
        return result
