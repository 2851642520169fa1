# src/surfer/notifications/telegram.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

import requests

log = logging.getLogger("surfer.notifications.telegram")

API_URL = "https://api.telegram.org"
MESSAGE_LIMIT = 3900  # Bot API hard limit is 4096
CAPTION_LIMIT = 1000  # photo captions: 1024


@dataclass(frozen=True)
class TelegramTarget:
    name: str
    bot_token: str
    chat_id: str

    def method_url(self, method: str) -> str:
        return f"{API_URL}/bot{self.bot_token}/{method}"


def resolve_target_from_env() -> Optional[TelegramTarget]:
    """TELEGRAM_BOT_TOKEN + TELEGRAM_CHAT_ID, both required."""
    token = (os.getenv("TELEGRAM_BOT_TOKEN") or "").strip()
    chat = (os.getenv("TELEGRAM_CHAT_ID") or "").strip()
    if not token or not chat:
        return None
    return TelegramTarget(name="primary", bot_token=token, chat_id=chat)


# -------------------------
# splitting
# -------------------------

def _pack(pieces: Iterable[str], sep: str, max_len: int) -> List[str]:
    """Greedy join of pieces with sep, never exceeding max_len per part."""
    out: List[str] = []
    cur = ""
    for piece in pieces:
        joined = f"{cur}{sep}{piece}" if cur else piece
        if len(joined) <= max_len:
            cur = joined
            continue
        if cur:
            out.append(cur)
        cur = piece
    if cur:
        out.append(cur)
    return out


def split_long_message(text: str, max_len: int = MESSAGE_LIMIT) -> List[str]:
    """
    Cut a message into parts accepted by Telegram.

    Paragraphs (blank-line separated) are kept together when possible;
    an oversized paragraph is cut by lines, an oversized line is truncated.
    """
    body = (text or "").strip()
    if not body:
        return []
    if len(body) <= max_len:
        return [body]

    blocks: List[str] = []
    for para in body.split("\n\n"):
        para = para.strip()
        if not para:
            continue
        if len(para) <= max_len:
            blocks.append(para)
        else:
            lines = [ln[:max_len] for ln in para.splitlines()]
            blocks.extend(_pack(lines, "\n", max_len))

    return [p for p in _pack(blocks, "\n\n", max_len) if p.strip()]


# -------------------------
# delivery
# -------------------------

def _call(target: TelegramTarget, method: str, *, timeout: float, **kwargs: Any) -> bool:
    try:
        r = requests.post(target.method_url(method), timeout=timeout, **kwargs)
    except requests.RequestException:
        log.exception("Telegram %s failed (%s)", method, target.name)
        return False
    if r.status_code != 200:
        log.error("Telegram %s rejected: %s %s", method, r.status_code, r.text[:300])
        return False
    return True


def send_telegram_message(
    text: str,
    *,
    target: TelegramTarget,
    parse_mode: Optional[str] = "HTML",
    disable_preview: bool = True,
    timeout: float = 15.0,
) -> bool:
    """True when every part was accepted."""
    parts = split_long_message(text)
    if not parts:
        return False

    delivered = 0
    for part in parts:
        payload: Dict[str, Any] = {
            "chat_id": target.chat_id,
            "text": part,
            "disable_web_page_preview": bool(disable_preview),
        }
        if parse_mode:
            payload["parse_mode"] = parse_mode
        delivered += _call(target, "sendMessage", json=payload, timeout=timeout)
    return delivered == len(parts)


def send_telegram_photo(
    png: bytes,
    *,
    target: TelegramTarget,
    caption: str = "",
    parse_mode: Optional[str] = "HTML",
    timeout: float = 30.0,
) -> bool:
    if not png:
        return False

    data: Dict[str, Any] = {"chat_id": target.chat_id}
    if caption:
        data["caption"] = caption[:CAPTION_LIMIT]
        if parse_mode:
            data["parse_mode"] = parse_mode
    return _call(
        target,
        "sendPhoto",
        data=data,
        files={"photo": ("chart.png", png, "image/png")},
        timeout=timeout,
    )


class Notifier:
    """
    Fire-and-forget notifications. Never raises: delivery problems are logged.
    Without a target (or when disabled) messages only go to the log.
    """

    def __init__(self, target: Optional[TelegramTarget] = None, *, enabled: bool = True):
        self.target = target
        self.enabled = bool(enabled) and target is not None

    @classmethod
    def from_env(cls, *, enabled: bool = True) -> "Notifier":
        target = resolve_target_from_env()
        if enabled and target is None:
            log.warning("Telegram target not configured (TELEGRAM_BOT_TOKEN / TELEGRAM_CHAT_ID) -> log only")
        return cls(target, enabled=enabled)

    def notify(self, text: str) -> bool:
        log.info("[NOTIFY] %s", (text or "").replace("\n", " | "))
        if not self.enabled:
            return False
        try:
            return send_telegram_message(text, target=self.target)
        except Exception:
            log.exception("[NOTIFY] message delivery failed")
            return False

    def notify_photo(self, png: bytes, *, caption: str = "") -> bool:
        if not self.enabled:
            return False
        try:
            return send_telegram_photo(png, target=self.target, caption=caption)
        except Exception:
            log.exception("[NOTIFY] photo delivery failed")
            return False
