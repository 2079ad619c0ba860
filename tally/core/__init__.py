'''
Represent the accounting core of the Tally portfolio engine.

Re-exports the Portfolio session object and its components.
'''

from __future__ import annotations

from tally.core.aggregator import PortfolioSummary
from tally.core.ledger import TradeLedger
from tally.core.portfolio import Portfolio
from tally.core.position_reducer import PositionReducer, reduce_positions
from tally.core.price_feed import PriceListener, PriceSource

__all__ = [
    'Portfolio',
    'PortfolioSummary',
    'PositionReducer',
    'PriceListener',
    'PriceSource',
    'TradeLedger',
    'reduce_positions',
]
