from __future__ import annotations
from enum import Enum

class Side(str, Enum):
    BUY = "BUY"
    SELL = "SELL"

class TradeKind(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    PASS = "PASS"

class OrderStatus(str, Enum):
    NEW = "NEW"
    PARTIALLY_FILLED = "PARTIALLY_FILLED"
    FILLED = "FILLED"
    CANCELED = "CANCELED"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"
