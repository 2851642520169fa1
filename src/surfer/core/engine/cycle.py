# src/surfer/core/engine/cycle.py
from __future__ import annotations

import logging
import threading
from typing import Optional

from src.surfer.charts.plotting import render_price_chart
from src.surfer.core.engine.session import VALUATION_SYMBOL, TradingSession, value_balances
from src.surfer.core.errors import (
    CollaboratorError,
    ConstraintError,
    DataError,
    ExecutionError,
)
from src.surfer.core.market.normalize import MarketSnapshot, normalize_ticker_stats
from src.surfer.core.models.enums import Side, TradeKind
from src.surfer.core.models.market import OrderQuantity, OrderResult, TickerSnapshot
from src.surfer.core.oms.sizing import calculate_order_quantity, check_buy_balance
from src.surfer.core.strategy.base import SignalResult, SignalStrategy
from src.surfer.exchanges.base.exchange import ExchangeAdapter
from src.surfer.notifications.telegram import Notifier

log = logging.getLogger("surfer.engine.cycle")


class HeartbeatCycle:
    """
    One evaluation cycle:

      balances -> market snapshot -> strategy -> (sizing -> order) -> position -> ledger

    Outcome policy:
      • DataError / ConstraintError      -> PASS row
      • ExecutionError                   -> no state change, no row
      • CollaboratorError (propagates)   -> no state change, no row
    """

    def __init__(
        self,
        *,
        exchange: ExchangeAdapter,
        strategy: SignalStrategy,
        session: TradingSession,
        notifier: Optional[Notifier] = None,
    ):
        self.exchange = exchange
        self.strategy = strategy
        self.session = session
        self.notifier = notifier or Notifier(enabled=False)

        self.params = session.params
        self.secondary = self.params.secondary_symbol

        # cycles never overlap
        self._lock = threading.Lock()

    @property
    def position(self):
        return self.session.position

    @property
    def ledger(self):
        return self.session.ledger

    # ------------------------------------------------------------------

    def run_once(self) -> Optional[TradeKind]:
        """Returns the ledger row kind written, or None when no row was written."""
        with self._lock:
            return self._run()

    def _run(self) -> Optional[TradeKind]:
        self.refresh_balances()

        reference_price = self.exchange.get_last_price(self.params.reference_ticker)
        tradable = frozenset(self.exchange.get_tradable_symbols())
        raw_stats = self.exchange.get_ticker_stats()

        try:
            snapshot = MarketSnapshot(
                tickers=normalize_ticker_stats(raw_stats, self.secondary),
                tradable_symbols=tradable,
                reference_price=reference_price,
            )
            result = self.strategy.evaluate(snapshot, self.position)
        except DataError as e:
            log.error("[CYCLE] %s: %s | payload=%r", e.kind, e, e.payload)
            return self._record_data_pass(reference_price)

        try:
            if result.is_sell_signal and self.position.is_holding:
                return self._sell(result)
            if result.is_buy_signal and self.position.is_flat:
                return self._buy(result)
        except (DataError, ConstraintError) as e:
            log.warning("[CYCLE] trade skipped (%s): %s | payload=%r", e.kind, e, e.payload)
        except ExecutionError as e:
            log.error("[ORDER] %s: %s | payload=%r", e.kind, e, e.payload)
            self.notifier.notify(
                f"<b>{e.operation}</b>\n\nUnexpected result. Check server logs for details."
            )
            return None

        return self._pass(result)

    # ------------------------------------------------------------------
    # balances
    # ------------------------------------------------------------------

    def refresh_balances(self) -> None:
        raw = self.exchange.get_balances()
        prices = self.exchange.get_prices() if any(s != VALUATION_SYMBOL for s in raw) else {}
        self.session.balances = value_balances(raw, prices)
        log.info(
            "[CYCLE] balances: %s | total=%.2f USDT",
            ", ".join(f"{b.available} {b.symbol}" for b in self.session.balances) or "-",
            self.session.total_balance,
        )

    # ------------------------------------------------------------------
    # paths
    # ------------------------------------------------------------------

    def _order_quantity(self, t: TickerSnapshot, *, secondary_balance: float, primary_balance: float) -> OrderQuantity:
        limits = self.exchange.get_exchange_constraints(t.ticker_name)
        price = self.exchange.get_last_price(t.ticker_name)
        return calculate_order_quantity(
            ticker_name=t.ticker_name,
            limits=limits,
            price=price,
            secondary_balance=secondary_balance,
            primary_balance=primary_balance,
            use_fixed_value=self.params.use_fixed_trade_value,
            fixed_value=self.params.fixed_trade_value,
            fixed_percent=self.params.fixed_trade_percent,
        )

    def _execute(self, side: Side, t: TickerSnapshot, quantity: float) -> OrderResult:
        op = "Market Buy" if side == Side.BUY else "Market Sell"
        order = self.exchange.execute_market_order(side, t.ticker_name, quantity)
        log.info("[ORDER] %s %s status=%s executed=%s", side.value, t.ticker_name, order.status, order.executed_quantity)
        if not order.is_filled:
            raise ExecutionError(
                f"{t.ticker_name} status={order.status} executed={order.executed_quantity}",
                operation=op,
                payload=order.raw,
            )
        return order

    def _sell(self, result: SignalResult) -> TradeKind:
        t = result.sell_candidate
        log.info("[CYCLE] sell condition: %s", t.ticker_name)

        primary_balance = self.exchange.get_balance(t.primary_symbol)
        secondary_balance = self.exchange.get_balance(self.secondary)
        qty = self._order_quantity(
            t, secondary_balance=secondary_balance, primary_balance=primary_balance
        ).sell_quantity
        if qty <= 0:
            raise ConstraintError(
                f"no valid sell quantity for {t.ticker_name}",
                operation="Market Sell",
                payload={"primary_balance": primary_balance},
            )

        order = self._execute(Side.SELL, t, qty)

        self.position.on_sell()
        self.ledger.record(
            TradeKind.SELL,
            symbol=t.primary_symbol,
            price=t.last_price,
            price_change_percent=t.price_change_percent,
            reference_price=result.reference_price,
            market_average=result.market_average_price,
        )
        self._report_trade("Sold", t, order)
        return TradeKind.SELL

    def _buy(self, result: SignalResult) -> TradeKind:
        t = result.buy_candidate
        log.info("[CYCLE] buy condition: %s", t.ticker_name)

        secondary_balance = self.exchange.get_balance(self.secondary)
        check_buy_balance(
            secondary_symbol=self.secondary,
            secondary_balance=secondary_balance,
            use_fixed_value=self.params.use_fixed_trade_value,
            fixed_value=self.params.fixed_trade_value,
            fixed_percent=self.params.fixed_trade_percent,
        )

        primary_balance = self.exchange.get_balance(t.primary_symbol)
        qty = self._order_quantity(
            t, secondary_balance=secondary_balance, primary_balance=primary_balance
        ).buy_quantity
        if qty <= 0:
            raise ConstraintError(
                f"no valid buy quantity for {t.ticker_name}",
                operation="Market Buy",
                payload={"secondary_balance": secondary_balance},
            )

        order = self._execute(Side.BUY, t, qty)

        self.position.on_buy(t.primary_symbol, t.last_price)
        self.ledger.record(
            TradeKind.BUY,
            symbol=t.primary_symbol,
            price=t.last_price,
            price_change_percent=t.price_change_percent,
            reference_price=result.reference_price,
            market_average=result.market_average_price,
        )
        self._report_trade("Bought", t, order)
        return TradeKind.BUY

    def _pass(self, result: SignalResult) -> TradeKind:
        sell = result.sell_candidate
        self.position.on_pass(result.sell_symbol, result.sell_price)
        self.ledger.record(
            TradeKind.PASS,
            symbol=result.sell_symbol,
            price=result.sell_price,
            price_change_percent=sell.price_change_percent if sell else None,
            reference_price=result.reference_price,
            market_average=result.market_average_price,
        )
        return TradeKind.PASS

    def _record_data_pass(self, reference_price: float) -> TradeKind:
        self.ledger.record(
            TradeKind.PASS,
            symbol=None,
            price=None,
            price_change_percent=None,
            reference_price=reference_price,
            market_average=0.0,
        )
        return TradeKind.PASS

    # ------------------------------------------------------------------
    # notifications (after state + ledger are final)
    # ------------------------------------------------------------------

    def _report_trade(self, verb: str, t: TickerSnapshot, order: OrderResult) -> None:
        sym = t.primary_symbol
        sec = self.secondary
        try:
            self.refresh_balances()
            new_primary = self.exchange.get_balance(sym)
            new_secondary = self.exchange.get_balance(sec)
        except CollaboratorError as e:
            log.warning("[CYCLE] post-trade balance refresh failed: %s | payload=%r", e, e.payload)
            new_primary = new_secondary = None

        side = "Buy" if verb == "Bought" else "Sell"
        msg = f"<b>{side} signal</b>\n\n"
        msg += f"<b>{sym} price</b>: {t.last_price} {sec}\n"
        msg += f"<b>{verb}</b>: {order.executed_quantity} {sym}\n\n"
        if new_primary is not None:
            msg += f"<b>{sym} balance</b>: {new_primary}\n"
            msg += f"<b>{sec} balance</b>: {new_secondary}\n\n"
        msg += f"<b>USDT rate total balance</b>: {self.session.total_balance:.2f}"

        log.info("[CYCLE] trade accomplished: %s %s %s", verb.lower(), order.executed_quantity, sym)
        self.notifier.notify(msg)

        if self.params.chart_enabled and self.notifier.enabled:
            try:
                closes = self.exchange.get_candles(
                    t.ticker_name,
                    interval=self.params.chart_interval,
                    limit=self.params.chart_periods,
                )
            except CollaboratorError as e:
                log.warning("[CYCLE] chart data unavailable: %s", e)
                return
            # the trade is already committed: a chart failure must not surface
            try:
                png = render_price_chart(
                    primary_symbol=sym,
                    secondary_symbol=sec,
                    closes=closes[-self.params.chart_periods:],
                    price_change_percent=t.price_change_percent,
                )
                self.notifier.notify_photo(png, caption=f"{sym} / {sec}")
            except Exception:
                log.exception("[CYCLE] chart delivery failed for %s", t.ticker_name)
