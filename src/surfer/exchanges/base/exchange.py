# src/surfer/exchanges/base/exchange.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from src.surfer.core.models.enums import Side
from src.surfer.core.models.market import OrderResult, TickerLimits


class ExchangeAdapter(ABC):
    """
    Boundary between the trading core and an exchange.

    Every method either returns parsed data or raises CollaboratorError
    (DataError for malformed exchange metadata). Implementations keep no
    trading state of their own.
    """

    name: str

    # ---- market data ----

    @abstractmethod
    def get_ticker_stats(self) -> list[dict[str, Any]]:
        """24h stats for all symbols: symbol, lastPrice, priceChangePercent, openTime, closeTime."""
        ...

    @abstractmethod
    def get_tradable_symbols(self) -> list[str]:
        """Symbols in TRADING status with spot trading allowed."""
        ...

    @abstractmethod
    def get_last_price(self, ticker_name: str) -> float:
        ...

    @abstractmethod
    def get_prices(self) -> dict[str, float]:
        """Last price of every ticker."""
        ...

    @abstractmethod
    def get_candles(self, ticker_name: str, *, interval: str, limit: int) -> list[tuple[int, float]]:
        """[(open_time_ms, close), ...] oldest first."""
        ...

    @abstractmethod
    def get_exchange_constraints(self, ticker_name: str) -> TickerLimits:
        ...

    # ---- account ----

    @abstractmethod
    def get_balance(self, symbol: str) -> float:
        """Available (free) quantity, 0.0 if the asset is not held."""
        ...

    @abstractmethod
    def get_balances(self) -> dict[str, float]:
        """Non-zero available balances."""
        ...

    # ---- trading ----

    @abstractmethod
    def execute_market_order(self, side: Side, ticker_name: str, quantity: float) -> OrderResult:
        ...
