'''
Tests for tally.core.domain dataclasses, enums, and errors.
'''

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from tally.core.domain import (
    Currency,
    InvalidPositionError,
    InvalidPriceError,
    InvalidTradeError,
    PortfolioError,
    Position,
    SnapshotError,
    Trade,
    TradeNotFoundError,
    TradeSide,
)
from tally.core.domain._require_str import MAX_AMOUNT

_TS = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _trade(
    side: TradeSide = TradeSide.BUY,
    quantity: Decimal = Decimal('0.5'),
    price: Decimal = Decimal('60000.00'),
    **overrides: object,
) -> Trade:
    fields: dict[str, object] = {
        'id': 't-001',
        'coin_id': 'bitcoin',
        'coin_name': 'Bitcoin',
        'coin_symbol': 'BTC',
        'side': side,
        'quantity': quantity,
        'price': price,
        'currency': Currency.USD,
        'timestamp': _TS,
    }
    fields.update(overrides)
    return Trade(**fields)  # type: ignore[arg-type]


def _position(
    total_quantity: Decimal = Decimal('1.0'),
    average_price: Decimal = Decimal('60000.00'),
) -> Position:
    return Position(
        coin_id='bitcoin',
        coin_name='Bitcoin',
        coin_symbol='BTC',
        total_quantity=total_quantity,
        average_price=average_price,
        currency=Currency.USD,
        current_price=average_price,
    )


# --- enums ---


def test_trade_side_members() -> None:
    assert set(TradeSide) == {TradeSide.BUY, TradeSide.SELL}


def test_currency_members() -> None:
    assert set(Currency) == {Currency.USD, Currency.INR, Currency.USDT}


def test_enum_values_are_strings() -> None:
    for enum_cls in (TradeSide, Currency):
        for member in enum_cls:
            assert isinstance(member.value, str)


def test_enums_accept_lowercase_names() -> None:
    assert TradeSide('buy') is TradeSide.BUY
    assert TradeSide(' Sell ') is TradeSide.SELL
    assert Currency('usdt') is Currency.USDT


def test_enums_reject_unknown_values() -> None:
    with pytest.raises(ValueError):
        TradeSide('hold')
    with pytest.raises(ValueError):
        Currency('eur')


def test_trade_side_sign() -> None:
    assert TradeSide.BUY.sign == 1
    assert TradeSide.SELL.sign == -1


# --- trade ---


def test_trade_creation() -> None:
    trade = _trade()
    assert trade.coin_id == 'bitcoin'
    assert trade.side == TradeSide.BUY
    assert trade.quantity == Decimal('0.5')
    assert trade.notes is None


def test_trade_frozen() -> None:
    trade = _trade()
    with pytest.raises(AttributeError):
        trade.quantity = Decimal('999')  # type: ignore[misc]


def test_trade_signed_quantity() -> None:
    assert _trade(side=TradeSide.BUY).signed_quantity == Decimal('0.5')
    assert _trade(side=TradeSide.SELL).signed_quantity == Decimal('-0.5')


def test_trade_notional() -> None:
    assert _trade(quantity=Decimal('2'), price=Decimal('1500')).notional == Decimal('3000')


def test_trade_accepts_zero_price() -> None:
    assert _trade(price=Decimal('0')).price == Decimal('0')


def test_trade_rejects_zero_quantity() -> None:
    with pytest.raises(InvalidTradeError, match='positive'):
        _trade(quantity=Decimal('0'))


def test_trade_rejects_negative_quantity() -> None:
    with pytest.raises(InvalidTradeError, match='positive'):
        _trade(quantity=Decimal('-1'))


def test_trade_rejects_negative_price() -> None:
    with pytest.raises(InvalidTradeError, match='non-negative'):
        _trade(price=Decimal('-0.01'))


def test_trade_rejects_nan_quantity() -> None:
    with pytest.raises(InvalidTradeError, match='finite'):
        _trade(quantity=Decimal('NaN'))


def test_trade_rejects_infinite_price() -> None:
    with pytest.raises(InvalidTradeError, match='finite'):
        _trade(price=Decimal('Infinity'))


def test_trade_rejects_quantity_beyond_max_amount() -> None:
    with pytest.raises(InvalidTradeError, match='magnitude'):
        _trade(quantity=Decimal('9e999990'))


def test_trade_rejects_price_beyond_max_amount() -> None:
    with pytest.raises(InvalidTradeError, match='magnitude'):
        _trade(price=MAX_AMOUNT + 1)


def test_trade_accepts_max_amount() -> None:
    trade = _trade(quantity=MAX_AMOUNT, price=MAX_AMOUNT)
    assert trade.notional == MAX_AMOUNT * MAX_AMOUNT


def test_trade_rejects_float_quantity() -> None:
    with pytest.raises(InvalidTradeError, match='Decimal'):
        _trade(quantity=0.5)  # type: ignore[arg-type]


def test_trade_rejects_empty_coin_id() -> None:
    with pytest.raises(InvalidTradeError, match='coin_id'):
        _trade(coin_id='')


def test_trade_rejects_blank_symbol() -> None:
    with pytest.raises(InvalidTradeError, match='coin_symbol'):
        _trade(coin_symbol='   ')


def test_trade_rejects_string_side() -> None:
    with pytest.raises(InvalidTradeError, match='TradeSide'):
        _trade(side='BUY')  # type: ignore[arg-type]


def test_trade_rejects_naive_timestamp() -> None:
    with pytest.raises(InvalidTradeError, match='timezone-aware'):
        _trade(timestamp=datetime(2026, 1, 1))


def test_invalid_trade_is_value_error() -> None:
    with pytest.raises(ValueError):
        _trade(quantity=Decimal('0'))


# --- position ---


def test_position_creation() -> None:
    pos = _position()
    assert pos.coin_id == 'bitcoin'
    assert pos.total_quantity == Decimal('1.0')
    assert pos.unrealized_pnl == Decimal('0')


def test_position_cost_basis_is_signed() -> None:
    assert _position(Decimal('2'), Decimal('100')).cost_basis == Decimal('200')
    assert _position(Decimal('-2'), Decimal('100')).cost_basis == Decimal('-200')


def test_position_long_short_flags() -> None:
    assert _position(Decimal('1')).is_long is True
    assert _position(Decimal('1')).is_short is False
    assert _position(Decimal('-1')).is_short is True
    assert _position(Decimal('-1')).is_long is False


def test_position_rejects_zero_quantity() -> None:
    with pytest.raises(InvalidPositionError, match='non-zero'):
        _position(total_quantity=Decimal('0'))


def test_position_rejects_negative_average_price() -> None:
    with pytest.raises(InvalidPositionError, match='non-negative'):
        _position(average_price=Decimal('-1'))


def test_position_rejects_blank_coin_id() -> None:
    with pytest.raises(InvalidPositionError, match='coin_id'):
        Position(
            coin_id=' ',
            coin_name='Bitcoin',
            coin_symbol='BTC',
            total_quantity=Decimal('1'),
            average_price=Decimal('1'),
            currency=Currency.USD,
            current_price=Decimal('1'),
        )


def test_position_fields_are_mutable() -> None:
    pos = _position()
    pos.current_price = Decimal('70000')
    assert pos.current_price == Decimal('70000')


# --- errors ---


def test_error_hierarchy() -> None:
    for exc_cls in (InvalidTradeError, InvalidPositionError, InvalidPriceError, SnapshotError, TradeNotFoundError):
        assert issubclass(exc_cls, PortfolioError)


def test_error_message_preserved() -> None:
    err = InvalidPriceError('bad quote')
    assert err.message == 'bad quote'
    assert str(err) == 'bad quote'


def test_trade_not_found_carries_id() -> None:
    err = TradeNotFoundError('t-404')
    assert err.trade_id == 't-404'
    assert 't-404' in str(err)
    assert isinstance(err, KeyError)
