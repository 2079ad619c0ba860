'''
Lossless byte snapshots of trades and positions.

Encode ledger trades and derived positions with orjson so an external
persistence layer can store and reload them. Decimals travel as
strings, datetimes as ISO 8601, and enums by value; decoding coerces
each field back by the dataclass type hints.
'''

from __future__ import annotations

import dataclasses
import enum
import types
from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, TypeVar, Union, get_args, get_origin, get_type_hints

import orjson

from tally.core.domain.errors import SnapshotError
from tally.core.domain.position import Position
from tally.core.domain.trade import Trade

__all__ = ['dumps_positions', 'dumps_trades', 'loads_positions', 'loads_trades']

_T = TypeVar('_T', Trade, Position)

SNAPSHOT_VERSION = 1


def _serialize_default(obj: Any) -> Any:

    '''
    Serialize Decimal to string for orjson.

    Args:
        obj (Any): Object that orjson cannot serialize natively

    Returns:
        Any: JSON-serializable representation
    '''

    if isinstance(obj, Decimal):
        return str(obj)
    msg = f"Object of type {type(obj).__name__} is not JSON serializable"
    raise TypeError(msg)


def _coerce(value: Any, target: Any) -> Any:

    '''
    Coerce a deserialized JSON value to the expected Python type.

    Args:
        value (Any): Raw value from orjson.loads
        target (Any): Expected Python type from dataclass field annotation

    Returns:
        Any: Value coerced to the target type
    '''

    if value is None:
        return None

    origin = get_origin(target)
    if origin is Union or origin is types.UnionType:
        args = [a for a in get_args(target) if a is not type(None)]
        return _coerce(value, args[0]) if args else value

    if target is Decimal:
        return Decimal(str(value))

    if target is datetime:
        return datetime.fromisoformat(str(value))

    if isinstance(target, type) and issubclass(target, enum.Enum):
        return target(value)

    return value


def _hydrate(cls: type[_T], raw: Any) -> _T:

    '''
    Rebuild one dataclass instance from its decoded mapping.

    Args:
        cls (type[_T]): Trade or Position
        raw (Any): Decoded JSON object

    Returns:
        _T: Validated dataclass instance
    '''

    if not isinstance(raw, dict):
        msg = f'{cls.__name__} record must be an object, got {type(raw).__name__}'
        raise SnapshotError(msg)

    hints = get_type_hints(cls)
    unknown = set(raw) - set(hints)
    if unknown:
        msg = f'{cls.__name__} record has unknown fields: {sorted(unknown)}'
        raise SnapshotError(msg)

    try:
        coerced = {k: _coerce(v, hints[k]) for k, v in raw.items()}
        return cls(**coerced)
    except (InvalidOperation, TypeError, ValueError) as exc:
        msg = f'invalid {cls.__name__} record: {exc}'
        raise SnapshotError(msg) from exc


def _dumps(kind: str, records: Iterable[Any]) -> bytes:

    return orjson.dumps(
        {
            'version': SNAPSHOT_VERSION,
            'kind': kind,
            'records': [dataclasses.asdict(r) for r in records],
        },
        default=_serialize_default,
    )


def _loads(kind: str, cls: type[_T], payload: bytes | str) -> list[_T]:

    try:
        doc = orjson.loads(payload)
    except orjson.JSONDecodeError as exc:
        msg = f'{kind} snapshot is not valid JSON: {exc}'
        raise SnapshotError(msg) from exc

    if not isinstance(doc, dict) or doc.get('kind') != kind:
        msg = f'payload is not a {kind} snapshot'
        raise SnapshotError(msg)

    if doc.get('version') != SNAPSHOT_VERSION:
        msg = f'unsupported {kind} snapshot version: {doc.get("version")!r}'
        raise SnapshotError(msg)

    records = doc.get('records')
    if not isinstance(records, list):
        msg = f'{kind} snapshot records must be a list'
        raise SnapshotError(msg)

    return [_hydrate(cls, raw) for raw in records]


def dumps_trades(trades: Iterable[Trade]) -> bytes:

    '''
    Encode trades in ledger order.

    Args:
        trades (Iterable[Trade]): Trades to encode

    Returns:
        bytes: orjson-encoded snapshot
    '''

    return _dumps('trades', trades)


def loads_trades(payload: bytes | str) -> list[Trade]:

    '''
    Decode a trade snapshot produced by dumps_trades.

    Args:
        payload (bytes | str): Encoded snapshot

    Returns:
        list[Trade]: Trades in their original order
    '''

    return _loads('trades', Trade, payload)


def dumps_positions(positions: Iterable[Position]) -> bytes:

    '''Encode a derived position set, including its market fields.'''

    return _dumps('positions', positions)


def loads_positions(payload: bytes | str) -> list[Position]:

    '''Decode a position snapshot produced by dumps_positions.'''

    return _loads('positions', Position, payload)
