"""Database model exports."""

from .instrument import Instrument, MarketData
from .portfolio import CapitalTransaction, Holding, SipEntry, Trade
from .settings import DailyActivity, Setting

__all__ = [
    "Instrument",
    "MarketData",
    "Holding",
    "Trade",
    "CapitalTransaction",
    "SipEntry",
    "Setting",
    "DailyActivity",
]
