from .normalize import (
    MarketSnapshot,
    market_average_price,
    normalize_ticker_stats,
)

__all__ = ["MarketSnapshot", "market_average_price", "normalize_ticker_stats"]
