# src/surfer/exchanges/paper.py
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from src.surfer.core.models.enums import OrderStatus, Side
from src.surfer.core.models.market import OrderResult, TickerLimits
from src.surfer.exchanges.base.exchange import ExchangeAdapter

log = logging.getLogger("surfer.exchanges.paper")


class PaperExchange(ExchangeAdapter):
    """
    Paper trading: market data from `market`, balances and fills simulated.

    Fills are immediate at the last price, no fees (the ledger accounts
    commission separately).
    """

    name = "paper"

    def __init__(self, market: ExchangeAdapter, *, secondary_symbol: str, start_balance: float):
        self.market = market
        self.secondary_symbol = secondary_symbol
        self.balances: dict[str, float] = {secondary_symbol: float(start_balance)}

    # ---- market data (delegated) ----

    def get_ticker_stats(self) -> list[dict[str, Any]]:
        return self.market.get_ticker_stats()

    def get_tradable_symbols(self) -> list[str]:
        return self.market.get_tradable_symbols()

    def get_last_price(self, ticker_name: str) -> float:
        return self.market.get_last_price(ticker_name)

    def get_prices(self) -> dict[str, float]:
        return self.market.get_prices()

    def get_candles(self, ticker_name: str, *, interval: str, limit: int) -> list[tuple[int, float]]:
        return self.market.get_candles(ticker_name, interval=interval, limit=limit)

    def get_exchange_constraints(self, ticker_name: str) -> TickerLimits:
        return self.market.get_exchange_constraints(ticker_name)

    # ---- account (simulated) ----

    def get_balances(self) -> dict[str, float]:
        return {k: v for k, v in self.balances.items() if v > 0}

    def get_balance(self, symbol: str) -> float:
        return self.balances.get(symbol, 0.0)

    def _primary_of(self, ticker_name: str) -> str:
        if not ticker_name.endswith(self.secondary_symbol):
            raise ValueError(f"{ticker_name} is not quoted in {self.secondary_symbol}")
        return ticker_name[: -len(self.secondary_symbol)]

    def execute_market_order(self, side: Side, ticker_name: str, quantity: float) -> OrderResult:
        primary = self._primary_of(ticker_name)
        price = self.market.get_last_price(ticker_name)
        qty = float(quantity)
        # exact decimal arithmetic: a notional equal to the balance must fill
        d_qty = Decimal(str(qty))
        d_notional = d_qty * Decimal(str(price))
        d_primary = Decimal(str(self.get_balance(primary)))
        d_secondary = Decimal(str(self.get_balance(self.secondary_symbol)))

        if d_qty <= 0:
            status = OrderStatus.REJECTED
        elif side == Side.BUY and d_notional > d_secondary:
            status = OrderStatus.REJECTED
        elif side == Side.SELL and d_qty > d_primary:
            status = OrderStatus.REJECTED
        else:
            status = OrderStatus.FILLED

        if status != OrderStatus.FILLED:
            log.warning("[PAPER] %s %s qty=%s rejected", side.value, ticker_name, qty)
            return OrderResult(side=side, ticker_name=ticker_name, status=status.value, executed_quantity=0.0)

        sign = 1 if side == Side.BUY else -1
        self.balances[primary] = float(d_primary + sign * d_qty)
        self.balances[self.secondary_symbol] = float(d_secondary - sign * d_notional)

        log.info(
            "[PAPER] %s %s qty=%s @ %s | %s=%s %s=%s",
            side.value, ticker_name, qty, price,
            primary, self.balances[primary],
            self.secondary_symbol, self.balances[self.secondary_symbol],
        )
        return OrderResult(
            side=side,
            ticker_name=ticker_name,
            status=status.value,
            executed_quantity=qty,
            raw={"price": price, "executedQty": qty, "status": status.value},
        )
