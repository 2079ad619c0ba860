'''
Represent the append-only trade ledger.

The ledger is the single source of truth for a portfolio. It assigns
trade identifiers and strictly monotonic UTC timestamps, keeps trades
in insertion order, and never mutates a recorded trade. Positions are
derived from it, never stored in it.
'''

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Iterable, Iterator
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from tally.core.domain.enums import Currency, TradeSide
from tally.core.domain.errors import InvalidTradeError, TradeNotFoundError
from tally.core.domain.trade import Trade

__all__ = ['TradeLedger']

_log = logging.getLogger(__name__)

_TICK = timedelta(microseconds=1)


def _utc_now() -> datetime:

    return datetime.now(timezone.utc)


class TradeLedger:

    '''
    Represent an ordered, append-only collection of trades.

    Args:
        clock (Callable[[], datetime] | None): Source of timezone-aware creation times.
    '''

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:

        self._clock = clock or _utc_now
        self._trades: dict[str, Trade] = {}
        self._last_timestamp: datetime | None = None

    def __len__(self) -> int:

        return len(self._trades)

    def __iter__(self) -> Iterator[Trade]:

        return iter(list(self._trades.values()))

    def __contains__(self, trade_id: object) -> bool:

        return trade_id in self._trades

    def append(
        self,
        coin_id: str,
        coin_name: str,
        coin_symbol: str,
        side: TradeSide,
        quantity: Decimal,
        price: Decimal,
        currency: Currency,
        notes: str | None = None,
    ) -> Trade:

        '''
        Record a new trade with a fresh id and creation time.

        Args:
            coin_id (str): Asset identifier.
            coin_name (str): Display name of the asset.
            coin_symbol (str): Ticker symbol of the asset.
            side (TradeSide): Trade direction.
            quantity (Decimal): Traded quantity, must be positive.
            price (Decimal): Price per unit, must be non-negative.
            currency (Currency): Currency the price was recorded in.
            notes (str | None): Free-form user annotation.

        Returns:
            Trade: The recorded trade.
        '''

        trade = Trade(
            id=str(uuid.uuid4()),
            coin_id=coin_id,
            coin_name=coin_name,
            coin_symbol=coin_symbol,
            side=side,
            quantity=quantity,
            price=price,
            currency=currency,
            timestamp=self._next_timestamp(),
            notes=notes,
        )
        self._store(trade)
        _log.debug(
            'trade appended: trade_id=%s coin_id=%s side=%s qty=%s price=%s',
            trade.id,
            trade.coin_id,
            trade.side.value,
            trade.quantity,
            trade.price,
        )

        return trade

    def extend(self, trades: Iterable[Trade]) -> None:

        '''
        Load previously recorded trades in order.

        The whole batch is checked before any trade is stored, so a
        rejected batch leaves the ledger unchanged.

        Args:
            trades (Iterable[Trade]): Trades in creation order.
        '''

        batch = list(trades)
        seen: set[str] = set()
        last = self._last_timestamp
        for trade in batch:
            if not isinstance(trade, Trade):
                msg = f'TradeLedger.extend expects Trade records, got {type(trade).__name__}'
                raise InvalidTradeError(msg)
            if trade.id in self._trades or trade.id in seen:
                msg = f'duplicate trade id: {trade.id}'
                raise InvalidTradeError(msg)
            if last is not None and trade.timestamp <= last:
                msg = f'trade {trade.id} is not newer than the trade before it'
                raise InvalidTradeError(msg)
            seen.add(trade.id)
            last = trade.timestamp

        for trade in batch:
            self._store(trade)

    def remove(self, trade_id: str) -> Trade | None:

        '''
        Delete a trade by id.

        Args:
            trade_id (str): Identifier of the trade to delete.

        Returns:
            Trade | None: The removed trade, or None if no trade had that id.
        '''

        trade = self._trades.pop(trade_id, None)
        if trade is None:
            _log.warning('unknown trade in remove: trade_id=%s', trade_id)

        return trade

    def get(self, trade_id: str) -> Trade:

        '''
        Return a trade by id.

        Args:
            trade_id (str): Identifier to look up.

        Returns:
            Trade: The recorded trade.
        '''

        trade = self._trades.get(trade_id)
        if trade is None:
            raise TradeNotFoundError(trade_id)

        return trade

    def trades(self) -> list[Trade]:

        '''Return all trades in insertion order.'''

        return list(self._trades.values())

    def clear(self) -> None:

        '''Remove every trade.'''

        self._trades.clear()
        self._last_timestamp = None

    def _store(self, trade: Trade) -> None:

        self._trades[trade.id] = trade
        if self._last_timestamp is None or trade.timestamp > self._last_timestamp:
            self._last_timestamp = trade.timestamp

    def _next_timestamp(self) -> datetime:

        now = self._clock()
        if self._last_timestamp is not None and now <= self._last_timestamp:
            now = self._last_timestamp + _TICK

        return now
