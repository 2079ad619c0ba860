'''
Position dataclass representing the net holding in one coin.

Positions are mutable derived state: quantity and average price change
as the ledger is folded, and the market fields change as quotes arrive.
Mutation logic belongs in the position reducer and price feed adapter,
not here.
'''

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from tally.core.domain._require_str import _require_str
from tally.core.domain.enums import Currency
from tally.core.domain.errors import InvalidPositionError


__all__ = ['Position']

_ZERO = Decimal(0)


@dataclass
class Position:

    '''
    Net holding in a single coin derived from the trade ledger.

    Args:
        coin_id (str): Asset identifier, unique within a position set.
        coin_name (str): Display name of the asset.
        coin_symbol (str): Ticker symbol of the asset.
        total_quantity (Decimal): Signed size, positive long and negative short, never zero.
        average_price (Decimal): Weighted-average cost per unit, must be non-negative.
        currency (Currency): Currency of the last contributing buy.
        current_price (Decimal): Last applied market price.
        unrealized_pnl (Decimal): total_value minus cost basis.
        unrealized_pnl_percent (Decimal): unrealized_pnl relative to signed cost basis, in percent.
        total_value (Decimal): total_quantity times current_price.
    '''

    coin_id: str
    coin_name: str
    coin_symbol: str
    total_quantity: Decimal
    average_price: Decimal
    currency: Currency
    current_price: Decimal
    unrealized_pnl: Decimal = _ZERO
    unrealized_pnl_percent: Decimal = _ZERO
    total_value: Decimal = _ZERO

    def __post_init__(self) -> None:

        '''Validate invariants at construction time.'''

        for field in ('coin_id', 'coin_name', 'coin_symbol'):
            _require_str('Position', field, getattr(self, field), error=InvalidPositionError)

        if self.total_quantity == _ZERO:
            msg = 'Position.total_quantity must be non-zero'
            raise InvalidPositionError(msg)

        if self.average_price < _ZERO:
            msg = 'Position.average_price must be non-negative'
            raise InvalidPositionError(msg)

    @property
    def cost_basis(self) -> Decimal:

        '''Return signed cost basis, total_quantity times average_price.'''

        return self.total_quantity * self.average_price

    @property
    def is_long(self) -> bool:

        return self.total_quantity > _ZERO

    @property
    def is_short(self) -> bool:

        return self.total_quantity < _ZERO
