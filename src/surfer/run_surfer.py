from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

from src.surfer.core.engine.cycle import HeartbeatCycle
from src.surfer.core.engine.scheduler import HeartbeatScheduler
from src.surfer.core.engine.session import TradingSession
from src.surfer.core.errors import CollaboratorError, ConfigError
from src.surfer.core.settings import SurferParams, load_params
from src.surfer.core.strategy import build_strategy
from src.surfer.exchanges.registry import build_exchange
from src.surfer.notifications.telegram import Notifier

log = logging.getLogger("surfer.run_surfer")


def _start_message(params: SurferParams) -> str:
    mode = "paper" if params.simulation else "live"
    msg = "<b>Surfer started</b>\n\n"
    msg += f"<b>Mode</b>: {mode}\n"
    msg += f"<b>Secondary symbol</b>: {params.secondary_symbol}\n"
    msg += f"<b>Indicator</b>: {params.indicator}"
    if params.indicator == "simple":
        msg += f" ({params.primary_symbol}{params.secondary_symbol})"
    elif params.indicator == "pump":
        msg += f" (> {params.indicator_change_percent}%)"
    msg += "\n"
    if params.use_fixed_trade_value:
        msg += f"<b>Trade value</b>: {params.fixed_trade_value} {params.secondary_symbol}\n"
    else:
        msg += f"<b>Trade value</b>: {params.fixed_trade_percent}% of {params.secondary_symbol}\n"
    msg += f"<b>Heartbeat</b>: {params.heartbeat_interval} | <b>next trade delay</b>: {params.next_trade_delay}"
    return msg


def _balances_message(session: TradingSession) -> str:
    min_usd = session.params.min_trade_usd_value
    rows = [b for b in session.balances if b.usdt_rate > min_usd]
    if not rows:
        return "<b>Balances</b>: empty"

    msg = "<b>Balances</b>\n\n"
    for b in rows:
        msg += f"<b>{b.symbol}</b>: {b.available} ({b.usdt_rate:.2f} USDT)\n"
    msg += f"\n<b>USDT rate total balance</b>: {session.total_balance:.2f}"
    return msg


def main() -> None:
    # .env never overrides explicit env vars
    load_dotenv(override=False)

    try:
        params = load_params()
    except ConfigError as e:
        raise SystemExit(str(e))

    logging.getLogger().setLevel(params.log_level)
    log.info("=== RUN SURFER START ===")
    log.info(
        "indicator=%s secondary=%s primary=%s simulation=%s report=%s",
        params.indicator,
        params.secondary_symbol,
        params.primary_symbol,
        params.simulation,
        str(params.report_path),
    )

    exchange = build_exchange(params)
    strategy = build_strategy(params)
    notifier = Notifier.from_env(enabled=params.telegram_enabled)

    session = TradingSession.create(params)
    session.ledger.reset()

    cycle = HeartbeatCycle(exchange=exchange, strategy=strategy, session=session, notifier=notifier)
    scheduler = HeartbeatScheduler(
        cycle,
        heartbeat_interval_sec=params.heartbeat_interval_sec,
        next_trade_delay_sec=params.next_trade_delay_sec,
    )

    notifier.notify(_start_message(params))
    try:
        cycle.refresh_balances()
        notifier.notify(_balances_message(session))
    except CollaboratorError as e:
        log.error("Startup balances unavailable: %s | payload=%r", e, e.payload)

    try:
        scheduler.run()
    except KeyboardInterrupt:
        log.info("Interrupted, stopping")
        scheduler.stop()

    log.info("=== RUN SURFER STOP === cycles=%d", session.loop_count)


if __name__ == "__main__":
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    main()
