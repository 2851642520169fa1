from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest

from src.surfer.core.errors import CollaboratorError
from src.surfer.core.models.enums import OrderStatus, Side
from src.surfer.core.models.market import OrderResult, TickerLimits, TickerSnapshot
from src.surfer.core.settings import SurferParams
from src.surfer.exchanges.base.exchange import ExchangeAdapter
from src.surfer.notifications.telegram import Notifier


def stat(symbol: str, last_price: Any, change: Any) -> Dict[str, Any]:
    """Raw 24hr ticker row as the exchange returns it (numbers as text)."""
    return {
        "symbol": symbol,
        "lastPrice": str(last_price),
        "priceChangePercent": str(change),
        "openTime": 1700000000000,
        "closeTime": 1700086399999,
    }


def snap(primary: str, price: float, change: float, secondary: str = "USDT") -> TickerSnapshot:
    return TickerSnapshot(
        primary_symbol=primary,
        secondary_symbol=secondary,
        ticker_name=f"{primary}{secondary}",
        last_price=price,
        price_change_percent=change,
    )


class FakeMarket(ExchangeAdapter):
    """In-memory market: every listed ticker is tradable, fills are immediate."""

    name = "fake"

    def __init__(self, rows: List[Dict[str, Any]], *, limits: Optional[TickerLimits] = None):
        self.rows = [dict(r) for r in rows]
        self.limits = limits or TickerLimits(min_order_quantity=0.01, min_order_value=1.0, step_size="0.01")
        self.balances: Dict[str, float] = {}
        self.fail_stats = False

    def set_price(self, ticker_name: str, price: float) -> None:
        for r in self.rows:
            if r["symbol"] == ticker_name:
                r["lastPrice"] = str(price)

    def get_ticker_stats(self) -> List[Dict[str, Any]]:
        if self.fail_stats:
            raise CollaboratorError("exchange down", operation="Get Prev Day Data")
        return [dict(r) for r in self.rows]

    def get_tradable_symbols(self) -> List[str]:
        return [r["symbol"] for r in self.rows]

    def get_last_price(self, ticker_name: str) -> float:
        for r in self.rows:
            if r["symbol"] == ticker_name:
                return float(r["lastPrice"])
        raise CollaboratorError(f"no price for {ticker_name}", operation="Get Last Price")

    def get_prices(self) -> Dict[str, float]:
        return {r["symbol"]: float(r["lastPrice"]) for r in self.rows}

    def get_candles(self, ticker_name: str, *, interval: str, limit: int):
        price = self.get_last_price(ticker_name)
        return [(1700000000000 + i * 86400000, price) for i in range(limit)]

    def get_exchange_constraints(self, ticker_name: str) -> TickerLimits:
        return self.limits

    def get_balances(self) -> Dict[str, float]:
        return dict(self.balances)

    def get_balance(self, symbol: str) -> float:
        return self.balances.get(symbol, 0.0)

    def execute_market_order(self, side: Side, ticker_name: str, quantity: float) -> OrderResult:
        return OrderResult(
            side=side,
            ticker_name=ticker_name,
            status=OrderStatus.FILLED.value,
            executed_quantity=float(quantity),
        )


class RecordingNotifier(Notifier):
    def __init__(self):
        super().__init__(None, enabled=False)
        self.messages: List[str] = []

    def notify(self, text: str) -> bool:
        self.messages.append(text)
        return False


@pytest.fixture
def fixed_clock():
    ts = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    return lambda: ts


@pytest.fixture
def market_rows():
    return [
        stat("BTCUSDT", 100, 1),
        stat("AAAUSDT", 10, 12),
        stat("BBBUSDT", 2, 8),
        stat("CCCUSDT", 5, -3),
        stat("BTCUPUSDT", 50, 30),
        stat("ETHBTC", 0.05, 40),
    ]


@pytest.fixture
def params(tmp_path):
    return SurferParams(
        indicator="pump",
        indicator_change_percent=5.0,
        commission_percent=0.1,
        report_dir=str(tmp_path),
        report_name="report",
        simulation=True,
        paper_start_balance=100.0,
        telegram_enabled=False,
        chart_enabled=False,
    )
