from __future__ import annotations

from src.surfer.core.errors import ConfigError
from src.surfer.core.settings import SurferParams
from src.surfer.core.strategy.base import SignalStrategy
from src.surfer.core.strategy.dump import DumpStrategy
from src.surfer.core.strategy.flat import FlatStrategy
from src.surfer.core.strategy.pump import PumpStrategy
from src.surfer.core.strategy.simple import SimpleStrategy


def build_strategy(params: SurferParams) -> SignalStrategy:
    name = str(params.indicator or "").lower()
    secondary = params.secondary_symbol

    if name == "simple":
        if not params.primary_symbol:
            raise ConfigError("indicator=simple requires primary_symbol", operation="Build Strategy")
        return SimpleStrategy(secondary_symbol=secondary, primary_symbol=params.primary_symbol)
    if name == "pump":
        return PumpStrategy(secondary_symbol=secondary, change_percent=params.indicator_change_percent)
    if name == "dump":
        return DumpStrategy(secondary_symbol=secondary)
    if name == "flat":
        return FlatStrategy(secondary_symbol=secondary)
    raise ConfigError(f"Unknown indicator: {name!r}", operation="Build Strategy")
