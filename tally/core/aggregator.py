'''
Derive portfolio-wide totals from the current position set.

Pure read-only folds; nothing is cached because a portfolio holds
tens of positions at most.
'''

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from tally.core.domain.position import Position

__all__ = ['PortfolioSummary', 'summarize', 'total_pnl', 'total_pnl_percent', 'total_value']

_ZERO = Decimal(0)
_HUNDRED = Decimal(100)


@dataclass(frozen=True)
class PortfolioSummary:

    '''
    Point-in-time totals over a position set.

    Args:
        total_value (Decimal): Sum of position market values.
        total_pnl (Decimal): Sum of position unrealized P&L.
        total_pnl_percent (Decimal): total_pnl relative to total cost basis, in percent.
        position_count (int): Number of open positions.
    '''

    total_value: Decimal
    total_pnl: Decimal
    total_pnl_percent: Decimal
    position_count: int


def total_value(positions: Iterable[Position]) -> Decimal:

    '''Return the sum of total_value over all positions.'''

    return sum((p.total_value for p in positions), _ZERO)


def total_pnl(positions: Iterable[Position]) -> Decimal:

    '''Return the sum of unrealized_pnl over all positions.'''

    return sum((p.unrealized_pnl for p in positions), _ZERO)


def _pnl_percent(value: Decimal, pnl: Decimal) -> Decimal:

    invested = value - pnl
    if invested <= _ZERO:
        return _ZERO

    return pnl / invested * _HUNDRED


def total_pnl_percent(positions: Iterable[Position]) -> Decimal:

    '''
    Return total P&L as a percentage of total cost basis.

    The denominator is total_value minus total_pnl, which equals the
    summed signed cost basis. A non-positive denominator yields zero.

    Args:
        positions (Iterable[Position]): Current position set

    Returns:
        Decimal: Percentage, zero when nothing is invested
    '''

    snapshot = list(positions)

    return _pnl_percent(total_value(snapshot), total_pnl(snapshot))


def summarize(positions: Iterable[Position]) -> PortfolioSummary:

    '''Return all totals computed over one snapshot of the position set.'''

    snapshot = list(positions)
    value = total_value(snapshot)
    pnl = total_pnl(snapshot)

    return PortfolioSummary(
        total_value=value,
        total_pnl=pnl,
        total_pnl_percent=_pnl_percent(value, pnl),
        position_count=len(snapshot),
    )
