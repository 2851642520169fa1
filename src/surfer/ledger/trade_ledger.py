# src/surfer/ledger/trade_ledger.py
from __future__ import annotations

import csv
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional

from src.surfer.core.models.enums import TradeKind
from src.surfer.ledger.models import LedgerEntry

log = logging.getLogger("surfer.ledger")

PRECISION = 4


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _r(x: float) -> float:
    return round(float(x), PRECISION)


def _opt_float(s: str) -> Optional[float]:
    s = (s or "").strip()
    return float(s) if s else None


class TradeLedger:
    """
    Append-only CSV trade report, one row per cycle outcome.

    Running totals (count, cumulative profit, entry price) live in memory and
    start from zero at process start; the file is recreated by reset().

      BUY:  profit = -commission%                (entry is charged, nothing realized)
      SELL: profit = (exit - entry) / (entry / 100) - commission%
      PASS: profit = 0
    """

    def __init__(
        self,
        path: Path,
        *,
        commission_percent: float,
        reference_label: str = "BTC / USDT",
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.path = Path(path)
        self.commission_percent = float(commission_percent)
        self.clock = clock

        self.headers: List[str] = [
            "Count",
            "Date",
            f"{reference_label} price",
            "Token name",
            "24h price change %",
            "Trade",
            "Trade price",
            "Commission",
            "Profit %",
            "Profit total %",
            "Market average",
        ]

        self.count = 0
        self.profit_total = 0.0
        self.last_price: Optional[float] = None

    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Erase the report file and write the header row."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if self.path.exists():
            self.path.unlink()
            log.info("[LEDGER] report file erased: %s", str(self.path))

        with self.path.open("w", newline="", encoding="utf-8") as f:
            csv.writer(f).writerow(self.headers)

        self.count = 0
        self.profit_total = 0.0
        self.last_price = None
        log.info("[LEDGER] report file created: %s", str(self.path))

    # ------------------------------------------------------------------

    def record(
        self,
        trade: TradeKind,
        *,
        symbol: Optional[str],
        price: Optional[float],
        price_change_percent: Optional[float],
        reference_price: float,
        market_average: float,
    ) -> LedgerEntry:
        trade = TradeKind(trade)
        c = self.commission_percent

        if trade in (TradeKind.BUY, TradeKind.SELL) and price is None:
            raise ValueError(f"{trade.value} row requires a trade price")

        if trade == TradeKind.SELL:
            if self.last_price is not None:
                one_percent = self.last_price / 100.0
                profit = (float(price) - self.last_price) / one_percent - c
            else:
                profit = -c
            self.profit_total += profit
            self.last_price = float(price)
            commission = float(price) * c
        elif trade == TradeKind.BUY:
            profit = -c
            self.profit_total -= c
            self.last_price = float(price)
            commission = float(price) * c
        else:
            profit = 0.0
            commission = 0.0

        self.count += 1

        entry = LedgerEntry(
            count=self.count,
            date=self.clock(),
            reference_price=float(reference_price),
            symbol=symbol or "",
            price_change_percent=_r(price_change_percent or 0.0),
            trade=trade,
            trade_price=_r(price) if price is not None else None,
            commission=_r(commission),
            profit_percent=_r(profit),
            profit_total_percent=_r(self.profit_total),
            market_average=_r(market_average),
        )
        self._append(entry)

        log.info(
            "[LEDGER] #%d %s %s price=%s profit=%.4f%% total=%.4f%%",
            entry.count,
            entry.trade.value,
            entry.symbol or "-",
            entry.trade_price,
            entry.profit_percent,
            entry.profit_total_percent,
        )
        return entry

    def _append(self, e: LedgerEntry) -> None:
        row = [
            e.count,
            e.date.isoformat(),
            e.reference_price,
            e.symbol,
            e.price_change_percent,
            e.trade.value,
            "" if e.trade_price is None else e.trade_price,
            e.commission,
            e.profit_percent,
            e.profit_total_percent,
            e.market_average,
        ]
        with self.path.open("a", newline="", encoding="utf-8") as f:
            csv.writer(f).writerow(row)

    # ------------------------------------------------------------------

    def read_entries(self) -> List[LedgerEntry]:
        if not self.path.exists():
            return []

        out: List[LedgerEntry] = []
        with self.path.open("r", newline="", encoding="utf-8") as f:
            reader = csv.reader(f)
            next(reader, None)  # header
            for row in reader:
                if not row:
                    continue
                out.append(
                    LedgerEntry(
                        count=int(row[0]),
                        date=datetime.fromisoformat(row[1]),
                        reference_price=float(row[2]),
                        symbol=row[3],
                        price_change_percent=float(row[4]),
                        trade=TradeKind(row[5]),
                        trade_price=_opt_float(row[6]),
                        commission=float(row[7]),
                        profit_percent=float(row[8]),
                        profit_total_percent=float(row[9]),
                        market_average=float(row[10]),
                    )
                )
        return out
