'''
Price feed adapter and the callback interface for live quotes.

Patch market fields of already derived positions from a mapping of
coin_id to price. Quantities, average prices, and the membership of
the position set are never touched here; the reducer owns those.
'''

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from decimal import Decimal, InvalidOperation
from typing import Protocol, TypeAlias, runtime_checkable

from tally.core.domain._require_str import MAX_AMOUNT
from tally.core.domain.errors import InvalidPriceError
from tally.core.domain.position import Position

__all__ = [
    'PriceListener',
    'PriceSource',
    'apply_prices',
    'reprice',
    'to_price',
    'validate_prices',
]

_log = logging.getLogger(__name__)

_ZERO = Decimal(0)
_HUNDRED = Decimal(100)

PriceListener: TypeAlias = Callable[[Mapping[str, Decimal]], None]


@runtime_checkable
class PriceSource(Protocol):

    '''
    Live quote provider that pushes price batches to subscribers.

    Implementations own their transport and scheduling. Each batch
    maps coin_id to the latest price and is delivered by calling
    every subscribed listener synchronously.
    '''

    def subscribe(self, listener: PriceListener) -> None:

        '''
        Register a listener for subsequent price batches.

        Args:
            listener (PriceListener): Callable receiving coin_id to price mappings
        '''

        ...

    def unsubscribe(self, listener: PriceListener) -> None:

        '''
        Stop delivering price batches to a listener.

        Args:
            listener (PriceListener): Previously subscribed callable
        '''

        ...


def to_price(coin_id: str, value: object) -> Decimal:

    '''
    Convert a raw quote to a non-negative finite Decimal.

    Args:
        coin_id (str): Coin the quote belongs to, for error context
        value (object): Quote as Decimal, int, float, or numeric string

    Returns:
        Decimal: Validated price
    '''

    if isinstance(value, bool):
        msg = f'price for {coin_id} must be numeric, got bool'
        raise InvalidPriceError(msg)

    try:
        price = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        msg = f'price for {coin_id} is not a number: {value!r}'
        raise InvalidPriceError(msg) from exc

    if not price.is_finite():
        msg = f'price for {coin_id} must be finite'
        raise InvalidPriceError(msg)

    if price < _ZERO:
        msg = f'price for {coin_id} must be non-negative'
        raise InvalidPriceError(msg)

    if price > MAX_AMOUNT:
        msg = f'price for {coin_id} must not exceed {MAX_AMOUNT}'
        raise InvalidPriceError(msg)

    return price


def validate_prices(prices: Mapping[str, object]) -> dict[str, Decimal]:

    '''
    Validate a whole quote batch before any position is touched.

    Args:
        prices (Mapping[str, object]): coin_id to raw quote

    Returns:
        dict[str, Decimal]: coin_id to validated price
    '''

    return {coin_id: to_price(coin_id, value) for coin_id, value in prices.items()}


def reprice(position: Position, price: Decimal) -> None:

    '''
    Set the market price of one position and recompute derived fields.

    Args:
        position (Position): Position to patch in place
        price (Decimal): Validated market price
    '''

    cost_basis = position.cost_basis
    position.current_price = price
    position.total_value = position.total_quantity * price
    position.unrealized_pnl = position.total_value - cost_basis
    if cost_basis == _ZERO:
        position.unrealized_pnl_percent = _ZERO
    else:
        position.unrealized_pnl_percent = position.unrealized_pnl / cost_basis * _HUNDRED


def apply_prices(positions: Iterable[Position], prices: Mapping[str, Decimal]) -> int:

    '''
    Patch every position that has an entry in the quote batch.

    Args:
        positions (Iterable[Position]): Current derived position set
        prices (Mapping[str, Decimal]): coin_id to validated price

    Returns:
        int: Number of positions repriced
    '''

    updated = 0
    for position in positions:
        price = prices.get(position.coin_id)
        if price is None:
            continue
        reprice(position, price)
        updated += 1

    _log.debug('prices applied: quotes=%d repriced=%d', len(prices), updated)

    return updated
