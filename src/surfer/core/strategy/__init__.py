from .base import SignalResult, SignalStrategy
from .registry import build_strategy

__all__ = ["SignalResult", "SignalStrategy", "build_strategy"]
