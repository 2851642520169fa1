from __future__ import annotations

from src.surfer.core.settings import SurferParams
from src.surfer.exchanges.base.exchange import ExchangeAdapter
from src.surfer.exchanges.binance.exchange import BinanceSpotExchange
from src.surfer.exchanges.paper import PaperExchange


def build_exchange(params: SurferParams) -> ExchangeAdapter:
    live = BinanceSpotExchange.from_params(params)
    if params.simulation:
        return PaperExchange(
            live,
            secondary_symbol=params.secondary_symbol,
            start_balance=params.paper_start_balance,
        )
    return live
