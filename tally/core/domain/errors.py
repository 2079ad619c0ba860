'''
Exception taxonomy for the Tally accounting core.

Every failure raised by the ledger, reducer, price feed adapter or
snapshot codec derives from PortfolioError. Validation failures also
derive from ValueError so callers catching the builtin keep working.
'''

from __future__ import annotations

__all__ = [
    'InvalidPositionError',
    'InvalidPriceError',
    'InvalidTradeError',
    'PortfolioError',
    'SnapshotError',
    'TradeNotFoundError',
]


class PortfolioError(Exception):

    '''
    Base exception for all accounting core failures.

    Args:
        message (str): Human-readable error description
    '''

    def __init__(self, message: str) -> None:

        '''
        Store the error message.

        Args:
            message (str): Human-readable error description
        '''

        self.message = message
        super().__init__(message)

    def __str__(self) -> str:

        return self.message


class InvalidTradeError(PortfolioError, ValueError):

    '''Raised when a trade record violates a ledger invariant.'''


class InvalidPositionError(PortfolioError, ValueError):

    '''Raised when a derived position would break a position invariant.'''


class InvalidPriceError(PortfolioError, ValueError):

    '''Raised when a market quote is negative or not a finite number.'''


class TradeNotFoundError(PortfolioError, KeyError):

    '''
    Raised when a trade id is not present in the ledger.

    Args:
        trade_id (str): Identifier that was looked up
    '''

    def __init__(self, trade_id: str) -> None:

        self.trade_id = trade_id
        super().__init__(f'trade not found: {trade_id}')


class SnapshotError(PortfolioError, ValueError):

    '''Raised when a serialized snapshot cannot be decoded.'''
