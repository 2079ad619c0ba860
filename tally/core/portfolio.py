'''
Represent one portfolio session: ledger, derived positions, and quotes.

Portfolio is the owned object that surrounding UI and feed code holds
a reference to. It wires the trade ledger, the position reducer, the
price feed adapter and the aggregator together, and serializes every
operation behind a single re-entrant lock so a reader never observes
a partially folded position set.
'''

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Callable, Iterable, Mapping
from dataclasses import replace
from datetime import datetime
from decimal import Decimal, InvalidOperation
from types import TracebackType

from tally.core import aggregator
from tally.core.aggregator import PortfolioSummary
from tally.core.domain.enums import Currency, TradeSide
from tally.core.domain.errors import InvalidTradeError
from tally.core.domain.position import Position
from tally.core.domain.trade import Trade
from tally.core.ledger import TradeLedger
from tally.core.position_reducer import PositionReducer
from tally.core.price_feed import PriceSource, apply_prices, validate_prices
from tally.infrastructure.observability import bind_context, clear_context, configure_logging, get_logger
from tally.infrastructure.settings import Settings

__all__ = ['Portfolio']

_log = logging.getLogger(__name__)


def _to_decimal(field: str, value: object) -> Decimal:

    '''
    Convert a caller-supplied amount to Decimal.

    Args:
        field (str): Field name for error context.
        value (object): Decimal, int, float, or numeric string.

    Returns:
        Decimal: Converted amount, range checks are left to Trade.
    '''

    if isinstance(value, bool):
        msg = f'Trade.{field} must be numeric, got bool'
        raise InvalidTradeError(msg)

    if isinstance(value, Decimal):
        return value

    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        msg = f'Trade.{field} is not a number: {value!r}'
        raise InvalidTradeError(msg) from exc


def _to_enum(field: str, enum_cls: type[TradeSide] | type[Currency], value: object) -> TradeSide | Currency:

    try:
        return enum_cls(value)
    except ValueError as exc:
        msg = f'Trade.{field} is not a valid {enum_cls.__name__}: {value!r}'
        raise InvalidTradeError(msg) from exc


class Portfolio:

    '''
    Represent a portfolio session over an append-only trade ledger.

    Args:
        settings (Settings | None): Session configuration, defaults when None.
        clock (Callable[[], datetime] | None): Source of trade creation times.
    '''

    def __init__(
        self,
        settings: Settings | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:

        self.settings = settings or Settings()
        self._clock = clock
        self._lock = threading.RLock()
        self._ledger = TradeLedger(clock)
        self._quotes: dict[str, Decimal] = {}
        self._reducer = PositionReducer(self._quotes)
        self._sources: list[PriceSource] = []
        self.session_id = uuid.uuid4().hex
        self._bound_context = False

    @classmethod
    def from_env(cls, *, setup_logging: bool = True) -> Portfolio:

        '''
        Start a session configured from TALLY_* environment variables.

        Args:
            setup_logging (bool): Call configure_logging with the configured level.

        Returns:
            Portfolio: Empty portfolio bound to the loaded settings.
        '''

        settings = Settings.from_env()
        if setup_logging:
            configure_logging(settings.log_level)

        portfolio = cls(settings)
        bind_context(session_id=portfolio.session_id)
        portfolio._bound_context = True
        get_logger(__name__).info(
            'portfolio session started',
            log_level=settings.log_level,
            allow_mixed_currency=settings.allow_mixed_currency,
        )

        return portfolio

    def __enter__(self) -> Portfolio:

        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:

        self.close()

    # --- ledger mutations ---

    def add_trade(
        self,
        coin_id: str,
        coin_name: str,
        coin_symbol: str,
        side: TradeSide | str,
        quantity: Decimal | int | float | str,
        price: Decimal | int | float | str,
        currency: Currency | str,
        notes: str | None = None,
    ) -> Trade:

        '''
        Record a trade and fold it onto the current positions.

        Args:
            coin_id (str): Asset identifier.
            coin_name (str): Display name of the asset.
            coin_symbol (str): Ticker symbol of the asset.
            side (TradeSide | str): Trade direction, enum or its name.
            quantity (Decimal | int | float | str): Traded quantity, must be positive.
            price (Decimal | int | float | str): Price per unit, must be non-negative.
            currency (Currency | str): Currency the price was recorded in.
            notes (str | None): Free-form user annotation.

        Returns:
            Trade: The recorded trade with its assigned id and timestamp.
        '''

        trade_side = _to_enum('side', TradeSide, side)
        trade_currency = _to_enum('currency', Currency, currency)
        qty = _to_decimal('quantity', quantity)
        px = _to_decimal('price', price)

        with self._lock:
            self._check_currency(self._reducer.positions, coin_id, trade_currency)
            trade = self._ledger.append(
                coin_id=coin_id,
                coin_name=coin_name,
                coin_symbol=coin_symbol,
                side=trade_side,
                quantity=qty,
                price=px,
                currency=trade_currency,
                notes=notes,
            )
            try:
                self._reducer.apply(trade)
            except ArithmeticError as exc:
                self._ledger.remove(trade.id)
                self._reducer.rebuild(self._ledger)
                msg = f'trade on {coin_id} cannot be folded: {type(exc).__name__}'
                raise InvalidTradeError(msg) from exc

        return trade

    def remove_trade(self, trade_id: str) -> bool:

        '''
        Delete a trade and refold the ledger.

        Args:
            trade_id (str): Identifier of the trade to delete.

        Returns:
            bool: True if a trade was removed, False if the id was unknown.
        '''

        with self._lock:
            if self._ledger.remove(trade_id) is None:
                return False
            self._reducer.rebuild(self._ledger)

        return True

    def clear(self) -> None:

        '''Empty the ledger and the derived positions together.'''

        with self._lock:
            self._ledger.clear()
            self._reducer.reset()

        _log.info('portfolio cleared')

    def restore(self, trades: Iterable[Trade]) -> None:

        '''
        Replace the ledger with previously recorded trades and refold.

        The replacement is validated in full first; on failure the
        current ledger and positions are left untouched.

        Args:
            trades (Iterable[Trade]): Trades in creation order.
        '''

        ledger = TradeLedger(self._clock)
        ledger.extend(trades)

        with self._lock:
            reducer = PositionReducer(self._quotes)
            for trade in ledger:
                self._check_currency(reducer.positions, trade.coin_id, trade.currency)
                reducer.apply(trade)
            self._ledger = ledger
            self._reducer = reducer

        _log.info('portfolio restored: trades=%d', len(ledger))

    # --- prices ---

    def apply_price_updates(self, prices: Mapping[str, Decimal | int | float | str]) -> None:

        '''
        Apply a batch of market prices to the open positions.

        Quotes for coins without a position are remembered and used
        when such a position is opened later.

        Args:
            prices (Mapping[str, Decimal | int | float | str]): coin_id to price.
        '''

        validated = validate_prices(prices)

        with self._lock:
            self._quotes.update(validated)
            apply_prices(self._reducer.positions.values(), validated)

    def on_prices(self, prices: Mapping[str, Decimal]) -> None:

        '''Listener bound to a PriceSource; same as apply_price_updates.'''

        self.apply_price_updates(prices)

    def attach(self, source: PriceSource) -> None:

        '''
        Subscribe this portfolio to a live price source.

        Args:
            source (PriceSource): Provider pushing coin_id to price batches.
        '''

        with self._lock:
            if any(s is source for s in self._sources):
                return
            source.subscribe(self.on_prices)
            self._sources.append(source)

    def close(self) -> None:

        '''Detach from every price source and drop the session log context.'''

        with self._lock:
            sources, self._sources = self._sources, []
            bound, self._bound_context = self._bound_context, False

        for source in sources:
            source.unsubscribe(self.on_prices)

        if bound:
            get_logger(__name__).info('portfolio session closed', sources=len(sources))
            clear_context()

    # --- queries ---

    def trades(self) -> list[Trade]:

        with self._lock:
            return self._ledger.trades()

    def positions(self) -> list[Position]:

        '''Return copies of the open positions in first-seen coin order.'''

        with self._lock:
            return [replace(p) for p in self._reducer.positions.values()]

    def position(self, coin_id: str) -> Position | None:

        with self._lock:
            pos = self._reducer.positions.get(coin_id)
            return replace(pos) if pos is not None else None

    def total_value(self) -> Decimal:

        with self._lock:
            return aggregator.total_value(self._reducer.positions.values())

    def total_pnl(self) -> Decimal:

        with self._lock:
            return aggregator.total_pnl(self._reducer.positions.values())

    def total_pnl_percent(self) -> Decimal:

        with self._lock:
            return aggregator.total_pnl_percent(self._reducer.positions.values())

    def summary(self) -> PortfolioSummary:

        with self._lock:
            return aggregator.summarize(self._reducer.positions.values())

    def _check_currency(self, positions: Mapping[str, Position], coin_id: str, currency: Currency) -> None:

        if self.settings.allow_mixed_currency:
            return

        pos = positions.get(coin_id)
        if pos is not None and pos.currency is not currency:
            msg = (
                f'trade currency {currency.value} does not match open position '
                f'{coin_id} in {pos.currency.value}'
            )
            raise InvalidTradeError(msg)
