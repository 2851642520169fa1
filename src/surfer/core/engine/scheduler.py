# src/surfer/core/engine/scheduler.py
from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

from src.surfer.core.engine.cycle import HeartbeatCycle
from src.surfer.core.errors import SurferError
from src.surfer.core.models.enums import TradeKind

log = logging.getLogger("surfer.engine.scheduler")


class HeartbeatScheduler:
    """
    Runs cycles forever (or max_cycles times), one at a time.

    Delay between cycles depends on the position after the cycle:
      FLAT    -> next_trade_delay_sec
      HOLDING -> heartbeat_interval_sec

    A failing cycle is logged and the loop keeps going.
    """

    def __init__(
        self,
        cycle: HeartbeatCycle,
        *,
        heartbeat_interval_sec: float,
        next_trade_delay_sec: float,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.cycle = cycle
        self.session = cycle.session
        self.heartbeat_interval_sec = float(heartbeat_interval_sec)
        self.next_trade_delay_sec = float(next_trade_delay_sec)

        self._stop = threading.Event()
        # default sleep wakes up early on stop()
        self._sleep = sleep or self._stop.wait

    # ------------------------------------------------------------------

    def stop(self) -> None:
        self._stop.set()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def next_delay(self) -> float:
        if self.session.position.is_flat:
            return self.next_trade_delay_sec
        return self.heartbeat_interval_sec

    # ------------------------------------------------------------------

    def run_one(self) -> Optional[TradeKind]:
        self.session.loop_count += 1
        n = self.session.loop_count
        started = time.monotonic()
        log.info("[CYCLE] #%d start | %s", n, self.session.position.status)

        outcome: Optional[TradeKind] = None
        try:
            outcome = self.cycle.run_once()
        except SurferError as e:
            log.error("[CYCLE] #%d aborted (%s): %s | payload=%r", n, e.kind, e, e.payload)
        except Exception:
            log.exception("[CYCLE] #%d unexpected error", n)

        log.info(
            "[CYCLE] #%d end | outcome=%s | %s | %.2fs",
            n,
            outcome.value if outcome else "-",
            self.session.position.status,
            time.monotonic() - started,
        )
        return outcome

    def run(self, max_cycles: Optional[int] = None) -> int:
        """Returns the number of cycles run."""
        done = 0
        while not self._stop.is_set():
            self.run_one()
            done += 1
            if max_cycles is not None and done >= max_cycles:
                break

            delay = self.next_delay()
            log.debug("[CYCLE] sleeping %.1fs", delay)
            self._sleep(delay)

        log.info("[CYCLE] scheduler stopped after %d cycle(s)", done)
        return done
