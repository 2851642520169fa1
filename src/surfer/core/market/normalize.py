# src/surfer/core/market/normalize.py
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from src.surfer.core.errors import DataError
from src.surfer.core.models.market import TickerSnapshot

# leveraged tokens (BTCUP, ETHDOWN, ...)
LEVERAGED_SUFFIXES = ("UP", "DOWN")


def parse_decimal_field(raw: Mapping[str, Any], name: str) -> float:
    """
    Exchange numbers come as text. Missing / malformed values fail fast:
    a silent 0.0 here would look like a real price to the strategies.
    """
    v = raw.get(name)
    if v is None or (isinstance(v, str) and not v.strip()):
        raise DataError(
            f"missing {name} for {raw.get('symbol')!r}",
            operation="Normalize Ticker Stats",
            payload=dict(raw),
        )
    try:
        x = float(v)
    except (TypeError, ValueError):
        raise DataError(
            f"malformed {name}={v!r} for {raw.get('symbol')!r}",
            operation="Normalize Ticker Stats",
            payload=dict(raw),
        ) from None
    if not math.isfinite(x):
        raise DataError(
            f"non-finite {name}={v!r} for {raw.get('symbol')!r}",
            operation="Normalize Ticker Stats",
            payload=dict(raw),
        )
    return x


def _ts(v: Any) -> Optional[int]:
    if v is None or v == "":
        return None
    try:
        return int(v)
    except (TypeError, ValueError):
        return None


def is_leveraged_symbol(primary_symbol: str) -> bool:
    return primary_symbol.endswith(LEVERAGED_SUFFIXES)


def normalize_ticker_stats(
    raw_stats: Iterable[Mapping[str, Any]],
    secondary_symbol: str,
) -> List[TickerSnapshot]:
    """
    Raw 24h ticker stats -> TickerSnapshot list (input order kept).

    Keeps only "<PRIMARY><SECONDARY>" tickers whose primary symbol is not a
    leveraged token. Numeric fields are parsed only for kept tickers.
    """
    secondary = str(secondary_symbol).upper()
    out: List[TickerSnapshot] = []

    for raw in raw_stats:
        sym = str(raw.get("symbol") or "").upper()
        if not sym.endswith(secondary) or len(sym) <= len(secondary):
            continue

        primary = sym[: -len(secondary)]
        if is_leveraged_symbol(primary):
            continue

        out.append(
            TickerSnapshot(
                primary_symbol=primary,
                secondary_symbol=secondary,
                ticker_name=sym,
                last_price=parse_decimal_field(raw, "lastPrice"),
                price_change_percent=parse_decimal_field(raw, "priceChangePercent"),
                open_time=_ts(raw.get("openTime")),
                close_time=_ts(raw.get("closeTime")),
            )
        )

    return out


def market_average_price(tickers: Sequence[TickerSnapshot], reference_price: float) -> float:
    """
    (sum of last prices - reference price) / count.

    The reference (BTC) price is subtracted from the sum while BTC itself stays
    in the sum and in the count. Ledger history depends on this exact value.
    """
    if not tickers:
        return 0.0
    total = sum(t.last_price for t in tickers)
    return (total - float(reference_price)) / len(tickers)


@dataclass(frozen=True, slots=True)
class MarketSnapshot:
    """Everything a strategy sees in one cycle."""

    tickers: Sequence[TickerSnapshot]
    tradable_symbols: frozenset = field(default_factory=frozenset)
    reference_price: float = 0.0

    def find(self, primary_symbol: Optional[str]) -> Optional[TickerSnapshot]:
        if not primary_symbol:
            return None
        for t in self.tickers:
            if t.primary_symbol == primary_symbol:
                return t
        return None

    def tradable(self) -> List[TickerSnapshot]:
        return [t for t in self.tickers if t.ticker_name in self.tradable_symbols]
