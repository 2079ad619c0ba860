'''
Represent the fold of the trade ledger into current positions.

Positions are rebuilt by replaying trades in ledger order. Each apply()
call updates one coin in O(1), so appending a trade never requires a
full refold. This is not an independent store: it is a derived view
of the ledger.
'''

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from decimal import Decimal

from tally.core.domain.enums import TradeSide
from tally.core.domain.position import Position
from tally.core.domain.trade import Trade
from tally.core.price_feed import reprice

__all__ = ['PositionReducer', 'reduce_positions']

_log = logging.getLogger(__name__)

_ZERO = Decimal(0)


class PositionReducer:

    '''
    Represent in-memory projection of positions from the trade ledger.

    Args:
        quotes (Mapping[str, Decimal] | None): Last known market price per coin_id,
            used as the opening current_price of newly derived positions.
    '''

    def __init__(self, quotes: Mapping[str, Decimal] | None = None) -> None:

        self.positions: dict[str, Position] = {}
        self._quotes = quotes if quotes is not None else {}

    def apply(self, trade: Trade) -> None:

        '''
        Fold a single trade onto the current positions.

        Args:
            trade (Trade): Next trade in ledger order.
        '''

        pos = self.positions.get(trade.coin_id)
        if pos is None:
            self._open(trade)
            return

        if trade.currency is not pos.currency:
            _log.warning(
                'mixed currency folded into position: coin_id=%s side=%s position=%s trade=%s',
                pos.coin_id,
                trade.side.value,
                pos.currency.value,
                trade.currency.value,
            )

        if trade.side is TradeSide.BUY:
            self._on_buy(pos, trade)
        else:
            self._on_sell(pos, trade)

        if pos.total_quantity == _ZERO:
            del self.positions[trade.coin_id]
            _log.debug('position closed: coin_id=%s trade_id=%s', trade.coin_id, trade.id)
            return

        reprice(pos, pos.current_price)

    def rebuild(self, trades: Iterable[Trade]) -> dict[str, Position]:

        '''
        Discard current positions and refold from the first trade.

        Args:
            trades (Iterable[Trade]): Full ledger in insertion order.

        Returns:
            dict[str, Position]: Rebuilt positions keyed by coin_id.
        '''

        self.positions = {}
        count = 0
        for trade in trades:
            self.apply(trade)
            count += 1

        _log.debug('positions rebuilt: trades=%d positions=%d', count, len(self.positions))

        return self.positions

    def reset(self) -> None:

        '''Drop every derived position.'''

        self.positions = {}

    def _open(self, trade: Trade) -> None:

        '''Create a position from the first trade of a coin, long or short.'''

        pos = Position(
            coin_id=trade.coin_id,
            coin_name=trade.coin_name,
            coin_symbol=trade.coin_symbol,
            total_quantity=trade.signed_quantity,
            average_price=trade.price,
            currency=trade.currency,
            current_price=self._quotes.get(trade.coin_id, trade.price),
        )
        reprice(pos, pos.current_price)
        self.positions[trade.coin_id] = pos

    def _on_buy(self, pos: Position, trade: Trade) -> None:

        '''Add to a long at the weighted average, or cover a short at unchanged basis.'''

        pos.currency = trade.currency

        was_short = pos.is_short
        new_qty = pos.total_quantity + trade.quantity

        if not was_short:
            pos.average_price = (pos.cost_basis + trade.notional) / new_qty
        elif new_qty > _ZERO:
            _log.debug(
                'position crossed short to long: coin_id=%s qty=%s avg_price=%s',
                pos.coin_id,
                new_qty,
                pos.average_price,
            )

        pos.total_quantity = new_qty

    def _on_sell(self, pos: Position, trade: Trade) -> None:

        '''Reduce or reverse the position; average price is left unchanged.'''

        was_long = pos.is_long
        pos.total_quantity -= trade.quantity

        if was_long and pos.total_quantity < _ZERO:
            _log.debug(
                'position crossed long to short: coin_id=%s qty=%s avg_price=%s',
                pos.coin_id,
                pos.total_quantity,
                pos.average_price,
            )


def reduce_positions(
    trades: Iterable[Trade],
    quotes: Mapping[str, Decimal] | None = None,
) -> dict[str, Position]:

    '''
    Fold a trade sequence into positions from scratch.

    Args:
        trades (Iterable[Trade]): Trades in ledger order.
        quotes (Mapping[str, Decimal] | None): Known market prices per coin_id.

    Returns:
        dict[str, Position]: Open positions keyed by coin_id in first-seen order.
    '''

    return PositionReducer(quotes).rebuild(trades)
