# src/surfer/core/position/position_state.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

log = logging.getLogger("surfer.position")


@dataclass(frozen=True, slots=True)
class PriceMark:
    """{symbol, price} pair remembered between cycles."""

    symbol: Optional[str]
    price: Optional[float] = None


class PositionStateError(RuntimeError):
    pass


class PositionState:
    """
    Single-position state machine: FLAT <-> HOLDING(symbol).

      FLAT --buy(s, p)--> HOLDING(s)   last_trade=last_check={s, p}
      HOLDING --sell--> FLAT           last_check={secondary, 1}
      any --pass(s, p)--> same state   last_check={s, p}

    Advanced once per heartbeat, only after the order outcome is known.
    """

    def __init__(self, secondary_symbol: str):
        self.secondary_symbol = secondary_symbol
        self.current_symbol: Optional[str] = None
        self.last_trade = PriceMark(symbol=secondary_symbol)
        self.last_check = PriceMark(symbol=secondary_symbol)

    # ------------------------------------------------------------------

    @property
    def is_flat(self) -> bool:
        return not self.current_symbol

    @property
    def is_holding(self) -> bool:
        return bool(self.current_symbol)

    @property
    def status(self) -> str:
        return f"HOLDING({self.current_symbol})" if self.current_symbol else "FLAT"

    # ------------------------------------------------------------------
    # transitions
    # ------------------------------------------------------------------

    def on_buy(self, symbol: str, price: float) -> None:
        if self.current_symbol:
            raise PositionStateError(
                f"buy {symbol} rejected: already holding {self.current_symbol}"
            )
        if not symbol or symbol == self.secondary_symbol:
            raise PositionStateError(f"buy rejected: invalid symbol {symbol!r}")

        self.current_symbol = symbol
        self.last_trade = PriceMark(symbol=symbol, price=float(price))
        self.last_check = self.last_trade
        log.info("[POSITION] FLAT -> HOLDING(%s) @ %s", symbol, price)

    def on_sell(self) -> None:
        if not self.current_symbol:
            raise PositionStateError("sell rejected: nothing is held")

        sold = self.current_symbol
        self.current_symbol = None
        self.last_check = PriceMark(symbol=self.secondary_symbol, price=1.0)
        log.info("[POSITION] HOLDING(%s) -> FLAT", sold)

    def on_pass(self, symbol: Optional[str], price: Optional[float]) -> None:
        self.last_check = PriceMark(
            symbol=symbol,
            price=float(price) if price is not None else None,
        )

    def __repr__(self) -> str:
        return (
            f"PositionState({self.status} "
            f"last_trade={self.last_trade} last_check={self.last_check})"
        )
