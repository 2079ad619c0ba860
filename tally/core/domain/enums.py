'''
Enumerated types for the Tally accounting domain.

Defines trade side and quote currency enums used by the Trade and
Position dataclasses.
'''

from __future__ import annotations

from enum import Enum


__all__ = ['Currency', 'TradeSide']


class TradeSide(Enum):

    '''Buy or sell direction of a recorded trade.'''

    BUY = 'BUY'
    SELL = 'SELL'

    @classmethod
    def _missing_(cls, value: object) -> TradeSide | None:

        if isinstance(value, str):
            return cls.__members__.get(value.strip().upper())
        return None

    @property
    def sign(self) -> int:

        '''Return +1 for BUY and -1 for SELL.'''

        return 1 if self is TradeSide.BUY else -1


class Currency(Enum):

    '''
    Quote currencies a trade price can be recorded in.

    Prices are stored as raw numbers; no conversion between
    currencies is performed anywhere in the core.
    '''

    USD = 'USD'
    INR = 'INR'
    USDT = 'USDT'

    @classmethod
    def _missing_(cls, value: object) -> Currency | None:

        if isinstance(value, str):
            return cls.__members__.get(value.strip().upper())
        return None
