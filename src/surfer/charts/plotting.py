# src/surfer/charts/plotting.py
from __future__ import annotations

import io
import math
from datetime import datetime, timezone
from typing import Optional, Sequence, Tuple

# no GUI backend on servers; must be set BEFORE importing pyplot
import matplotlib
matplotlib.use("Agg")

import matplotlib.pyplot as plt

LINE_COLOR = "#598381"


def format_day(ts_ms: int) -> str:
    """dd.mm.yy"""
    return datetime.fromtimestamp(ts_ms / 1000.0, tz=timezone.utc).strftime("%d.%m.%y")


def chart_title(primary_symbol: str, secondary_symbol: str, price_change_percent: Optional[float]) -> str:
    title = f"{primary_symbol} / {secondary_symbol}"
    if price_change_percent:
        title += f" - 24H gain {math.floor(price_change_percent)}%"
    return title


def render_price_chart(
    *,
    primary_symbol: str,
    secondary_symbol: str,
    closes: Sequence[Tuple[int, float]],
    price_change_percent: Optional[float] = None,
    width_px: int = 500,
    height_px: int = 300,
    dpi: int = 100,
) -> bytes:
    """
    Close-price line chart as PNG bytes. Empty input -> b"".
    """
    if not closes:
        return b""

    x = [format_day(ts) for ts, _ in closes]
    y = [float(c) for _, c in closes]

    fig, ax = plt.subplots(figsize=(width_px / dpi, height_px / dpi), dpi=dpi)
    try:
        fig.patch.set_facecolor("white")
        ax.plot(x, y, color=LINE_COLOR, linewidth=2, marker="o", markersize=1)
        ax.set_title(chart_title(primary_symbol, secondary_symbol, price_change_percent), fontsize=9)

        # keep ~8 date labels
        step = max(1, len(x) // 8)
        ax.set_xticks(range(0, len(x), step))
        ax.set_xticklabels(x[::step], rotation=30, fontsize=7)
        ax.tick_params(axis="y", labelsize=7)
        ax.grid(True, alpha=0.3)
        fig.tight_layout()

        buf = io.BytesIO()
        fig.savefig(buf, format="png")
        return buf.getvalue()
    finally:
        plt.close(fig)
