'''
Domain dataclasses for the Tally accounting core.

Re-exports all domain types: enums, the Trade and Position
dataclasses, and the error taxonomy.
'''

from __future__ import annotations

from tally.core.domain.enums import Currency, TradeSide
from tally.core.domain.errors import (
    InvalidPositionError,
    InvalidPriceError,
    InvalidTradeError,
    PortfolioError,
    SnapshotError,
    TradeNotFoundError,
)
from tally.core.domain.position import Position
from tally.core.domain.trade import Trade

__all__ = [
    'Currency',
    'InvalidPositionError',
    'InvalidPriceError',
    'InvalidTradeError',
    'PortfolioError',
    'Position',
    'SnapshotError',
    'Trade',
    'TradeNotFoundError',
    'TradeSide',
]
