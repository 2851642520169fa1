# src/surfer/exchanges/binance/exchange.py
from __future__ import annotations

import logging
import os
from decimal import Decimal
from typing import Any, Callable, TypeVar

import requests

from src.surfer.core.errors import CollaboratorError, DataError
from src.surfer.core.models.enums import Side
from src.surfer.core.models.market import OrderResult, TickerLimits
from src.surfer.core.settings import SurferParams
from src.surfer.exchanges.base.exchange import ExchangeAdapter
from src.surfer.exchanges.binance.filters import is_spot_tradable, parse_symbol_filters
from src.surfer.exchanges.binance.rest import BinanceAPIError, BinanceSpotREST

log = logging.getLogger("surfer.exchanges.binance")

T = TypeVar("T")


def _float(v: Any, default: float = 0.0) -> float:
    try:
        if v is None or v == "":
            return default
        return float(v)
    except (TypeError, ValueError):
        return default


class BinanceSpotExchange(ExchangeAdapter):
    """Binance spot account, live orders."""

    name = "binance"

    def __init__(self, rest: BinanceSpotREST):
        self.rest = rest

    @classmethod
    def from_params(cls, params: SurferParams) -> "BinanceSpotExchange":
        rest = BinanceSpotREST(
            api_key=os.getenv(params.api_key_env, ""),
            api_secret=os.getenv(params.api_secret_env, ""),
            base_url=params.base_url,
            timeout=params.timeout_sec,
            max_retries=params.max_retries,
            recv_window=params.recv_window_ms,
            request_delay=max(0, params.request_delay_ms) / 1000.0,
        )
        return cls(rest)

    # ------------------------------------------------------------------

    def _call(self, operation: str, fn: Callable[[], T]) -> T:
        try:
            return fn()
        except BinanceAPIError as e:
            raise CollaboratorError(str(e), operation=operation, payload=e.payload) from e
        except requests.RequestException as e:
            raise CollaboratorError(repr(e), operation=operation, payload=None) from e

    # ---- market data ----

    def get_ticker_stats(self) -> list[dict[str, Any]]:
        data = self._call("Get Prev Day Data", self.rest.ticker_24h)
        if not isinstance(data, list):
            raise CollaboratorError("unexpected 24hr ticker payload", operation="Get Prev Day Data", payload=data)
        return data

    def get_tradable_symbols(self) -> list[str]:
        info = self._call("Get Exchange Info", self.rest.exchange_info)
        return [str(s["symbol"]) for s in info.get("symbols", []) if is_spot_tradable(s)]

    def get_last_price(self, ticker_name: str) -> float:
        data = self._call("Get Last Price", lambda: self.rest.ticker_price(ticker_name))
        price = _float(data.get("price") if isinstance(data, dict) else None, float("nan"))
        if not price > 0:
            raise CollaboratorError(
                f"no price for {ticker_name}",
                operation="Get Last Price",
                payload=data,
            )
        return price

    def get_prices(self) -> dict[str, float]:
        data = self._call("Get Prices", self.rest.ticker_price)
        return {str(row["symbol"]): _float(row.get("price")) for row in data or []}

    def get_candles(self, ticker_name: str, *, interval: str, limit: int) -> list[tuple[int, float]]:
        rows = self._call(
            "Get Candlestick Data",
            lambda: self.rest.klines(symbol=ticker_name, interval=interval, limit=limit),
        )
        # [openTime, open, high, low, close, volume, ...]
        return [(int(r[0]), _float(r[4])) for r in rows or []]

    def get_exchange_constraints(self, ticker_name: str) -> TickerLimits:
        info = self._call("Get Exchange Info", self.rest.exchange_info)
        for s in info.get("symbols", []):
            if s.get("symbol") == ticker_name:
                return parse_symbol_filters(s)
        raise DataError(f"unknown ticker {ticker_name}", operation="Get Exchange Info")

    # ---- account ----

    def get_balances(self) -> dict[str, float]:
        acc = self._call("Get Account Balances", self.rest.account)
        out: dict[str, float] = {}
        for b in acc.get("balances", []):
            free = _float(b.get("free"))
            if free > 0:
                out[str(b.get("asset"))] = free
        return out

    def get_balance(self, symbol: str) -> float:
        return self.get_balances().get(symbol, 0.0)

    # ---- trading ----

    def execute_market_order(self, side: Side, ticker_name: str, quantity: float) -> OrderResult:
        op = "Market Buy" if side == Side.BUY else "Market Sell"
        log.info("[ORDER] %s %s qty=%s", side.value, ticker_name, quantity)

        resp = self._call(
            op,
            lambda: self.rest.new_order(
                symbol=ticker_name,
                side=side.value,
                type="MARKET",
                quantity=format(Decimal(str(quantity)), "f"),  # no rounding, no exponent
                newOrderRespType="RESULT",
            ),
        )
        return OrderResult(
            side=side,
            ticker_name=ticker_name,
            status=str(resp.get("status") or ""),
            executed_quantity=_float(resp.get("executedQty"), float("nan")),
            raw=dict(resp),
        )
