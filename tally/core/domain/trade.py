'''
Trade dataclass representing a single recorded buy or sell.

Trades are immutable facts: once appended to the ledger no field
changes. A trade leaves the ledger only through explicit removal.
'''

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from tally.core.domain._require_str import _require_amount, _require_str
from tally.core.domain.enums import Currency, TradeSide
from tally.core.domain.errors import InvalidTradeError


__all__ = ['Trade']

_ZERO = Decimal(0)


@dataclass(frozen=True)
class Trade:

    '''
    A single user-recorded trade in one coin.

    Args:
        id (str): Ledger-assigned unique identifier.
        coin_id (str): Asset identifier, the position key.
        coin_name (str): Display name of the asset.
        coin_symbol (str): Ticker symbol of the asset.
        side (TradeSide): Trade direction.
        quantity (Decimal): Traded quantity, must be positive.
        price (Decimal): Price per unit, must be non-negative.
        currency (Currency): Currency the price was recorded in.
        timestamp (datetime): Ledger-assigned creation time, must be timezone-aware.
        notes (str | None): Free-form user annotation.
    '''

    id: str
    coin_id: str
    coin_name: str
    coin_symbol: str
    side: TradeSide
    quantity: Decimal
    price: Decimal
    currency: Currency
    timestamp: datetime
    notes: str | None = None

    def __post_init__(self) -> None:

        '''Validate invariants at construction time.'''

        for field in ('id', 'coin_id', 'coin_name', 'coin_symbol'):
            _require_str('Trade', field, getattr(self, field))

        if not isinstance(self.side, TradeSide):
            msg = f'Trade.side must be a TradeSide, got {self.side!r}'
            raise InvalidTradeError(msg)

        if not isinstance(self.currency, Currency):
            msg = f'Trade.currency must be a Currency, got {self.currency!r}'
            raise InvalidTradeError(msg)

        _require_amount('Trade', 'quantity', self.quantity)
        _require_amount('Trade', 'price', self.price)

        if self.quantity <= _ZERO:
            msg = 'Trade.quantity must be positive'
            raise InvalidTradeError(msg)

        if self.price < _ZERO:
            msg = 'Trade.price must be non-negative'
            raise InvalidTradeError(msg)

        if self.timestamp.tzinfo is None or self.timestamp.utcoffset() is None:
            msg = 'Trade.timestamp must be timezone-aware'
            raise InvalidTradeError(msg)

    @property
    def signed_quantity(self) -> Decimal:

        '''Return quantity with the side applied: positive for buys, negative for sells.'''

        return self.quantity * self.side.sign

    @property
    def notional(self) -> Decimal:

        '''Return quantity times price.'''

        return self.quantity * self.price
