# src/surfer/core/engine/session.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from src.surfer.core.models.market import SymbolBalance
from src.surfer.core.position.position_state import PositionState
from src.surfer.core.settings import SurferParams
from src.surfer.ledger.trade_ledger import TradeLedger

log = logging.getLogger("surfer.engine.session")

VALUATION_SYMBOL = "USDT"


def value_balances(
    balances: Mapping[str, float],
    prices: Mapping[str, float],
    *,
    quote: str = VALUATION_SYMBOL,
) -> List[SymbolBalance]:
    """
    Value every non-zero balance in `quote`, biggest first.
    Assets without a <ASSET><quote> market are skipped.
    """
    out: List[SymbolBalance] = []
    for symbol, available in balances.items():
        available = float(available)
        if available <= 0:
            continue
        if symbol == quote:
            out.append(SymbolBalance(symbol=symbol, available=available, usdt_rate=available))
            continue
        price = prices.get(f"{symbol}{quote}")
        if not price:
            continue
        out.append(SymbolBalance(symbol=symbol, available=available, usdt_rate=available * float(price)))

    return sorted(out, key=lambda b: b.usdt_rate, reverse=True)


def total_valuation(balances: List[SymbolBalance]) -> float:
    return sum(b.usdt_rate for b in balances)


@dataclass
class TradingSession:
    """
    Process-wide mutable state threaded through every cycle.
    Only the scheduler's cycle mutates it.
    """

    params: SurferParams
    position: PositionState
    ledger: TradeLedger
    loop_count: int = 0
    balances: List[SymbolBalance] = field(default_factory=list)

    @classmethod
    def create(cls, params: SurferParams, *, ledger: Optional[TradeLedger] = None) -> "TradingSession":
        if ledger is None:
            ledger = TradeLedger(
                params.report_path,
                commission_percent=params.commission_percent,
                reference_label=f"{params.reference_symbol} / {params.secondary_symbol}",
            )
        return cls(
            params=params,
            position=PositionState(params.secondary_symbol),
            ledger=ledger,
        )

    @property
    def total_balance(self) -> float:
        return total_valuation(self.balances)
