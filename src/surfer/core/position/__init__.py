# src/surfer/core/position/__init__.py
from .position_state import PositionState, PositionStateError, PriceMark

__all__ = ["PositionState", "PositionStateError", "PriceMark"]
