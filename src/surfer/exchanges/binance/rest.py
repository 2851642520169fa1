# src/surfer/exchanges/binance/rest.py
from __future__ import annotations

import hashlib
import hmac
import logging
import time
from typing import Any, Callable
from urllib.parse import urlencode

import requests

SPOT_URL = "https://api.binance.com"

log = logging.getLogger("surfer.exchanges.binance.rest")

RETRYABLE_STATUS = frozenset({418, 429})  # rate limit / IP ban warning


class BinanceAPIError(RuntimeError):
    """Non-retryable Binance error (4xx, usually {"code":..., "msg":...})."""

    def __init__(self, message: str, *, status_code: int | None = None, code: Any = None, msg: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.msg = msg

    @property
    def payload(self) -> dict[str, Any]:
        return {"status_code": self.status_code, "code": self.code, "msg": self.msg}


def _client_error(r: requests.Response, method: str, path: str) -> BinanceAPIError:
    where = f"Binance HTTP {r.status_code} {method} {path}"
    try:
        body = r.json()
    except ValueError:
        return BinanceAPIError(f"{where}: {r.text[:500]}", status_code=r.status_code)

    code = body.get("code") if isinstance(body, dict) else None
    msg = body.get("msg") if isinstance(body, dict) else None
    return BinanceAPIError(f"{where}: code={code} msg={msg}", status_code=r.status_code, code=code, msg=msg)


class BinanceSpotREST:
    """
    Binance Spot REST (public + signed endpoints).

    GET requests are retried on 429/418, 5xx and network errors with linear
    backoff. Orders (POST) go out exactly once.
    """

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        *,
        base_url: str = SPOT_URL,
        timeout: float = 10.0,
        max_retries: int = 5,
        backoff_base: float = 1.5,
        recv_window: int = 60000,
        request_delay: float = 0.0,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key or ""
        self._secret = (api_secret or "").encode("utf-8")
        self.timeout = float(timeout)
        self.max_retries = max(1, int(max_retries))
        self.backoff_base = float(backoff_base)
        self.recv_window = int(recv_window)
        self.request_delay = float(request_delay)
        self._sleep = sleep

        self.sess = session or requests.Session()
        if self.api_key:
            self.sess.headers.update({"X-MBX-APIKEY": self.api_key})

    # ------------------------------------------------------------------
    # signing
    # ------------------------------------------------------------------

    def _signed(self, params: dict[str, Any]) -> dict[str, Any]:
        """Copy of params with recvWindow, a fresh timestamp and the HMAC-SHA256 signature."""
        if not self._secret:
            raise BinanceAPIError("Binance signed request requires api_secret")

        out = {**params, "recvWindow": params.get("recvWindow", self.recv_window)}
        out["timestamp"] = int(time.time() * 1000)
        query = urlencode(out, doseq=True).encode("utf-8")
        out["signature"] = hmac.new(self._secret, query, hashlib.sha256).hexdigest()
        return out

    # ------------------------------------------------------------------
    # transport
    # ------------------------------------------------------------------

    def _backoff(self, attempt: int, attempts: int, reason: str, method: str, path: str) -> None:
        delay = self.backoff_base * attempt
        log.warning(
            "Binance %s on %s %s, attempt %d/%d%s",
            reason, method, path, attempt, attempts,
            f", next in {delay:.1f}s" if attempt < attempts else "",
        )
        if attempt < attempts:
            self._sleep(delay)

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        signed: bool = False,
        retry: bool = True,
    ) -> Any:
        attempts = self.max_retries if retry else 1
        last_problem = ""

        if self.request_delay > 0:
            self._sleep(self.request_delay)

        for attempt in range(1, attempts + 1):
            # timestamp must stay inside recvWindow: sign per attempt
            query = self._signed(params or {}) if signed else dict(params or {})

            try:
                r = self.sess.request(
                    method=method,
                    url=self.base_url + path,
                    params=query,
                    timeout=self.timeout,
                )
            except requests.RequestException as e:
                last_problem = repr(e)
                self._backoff(attempt, attempts, "network error", method, path)
                continue

            if r.status_code in RETRYABLE_STATUS or r.status_code >= 500:
                last_problem = f"HTTP {r.status_code}: {r.text[:300]}"
                self._backoff(attempt, attempts, f"HTTP {r.status_code}", method, path)
                continue

            if r.status_code >= 400:
                raise _client_error(r, method, path)

            return r.json() if r.text else {}

        raise BinanceAPIError(
            f"Binance {method} {path} failed after {attempts} attempt(s): {last_problem}"
        )

    # ------------------------------------------------------------------
    # endpoints
    # ------------------------------------------------------------------

    def exchange_info(self) -> dict:
        return self._request("GET", "/api/v3/exchangeInfo")

    def ticker_24h(self, symbol: str | None = None):
        return self._request("GET", "/api/v3/ticker/24hr", params={"symbol": symbol} if symbol else None)

    def ticker_price(self, symbol: str | None = None):
        return self._request("GET", "/api/v3/ticker/price", params={"symbol": symbol} if symbol else None)

    def klines(self, *, symbol: str, interval: str, limit: int = 45, end_time: int | None = None):
        params: dict[str, Any] = {"symbol": symbol, "interval": interval, "limit": int(limit)}
        if end_time is not None:
            params["endTime"] = int(end_time)
        return self._request("GET", "/api/v3/klines", params=params)

    def account(self):
        return self._request("GET", "/api/v3/account", signed=True)

    def new_order(self, **order: Any):
        # market orders are not idempotent: never resubmitted
        return self._request("POST", "/api/v3/order", params=order, signed=True, retry=False)
