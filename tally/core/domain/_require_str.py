'''
Validate string and numeric fields of domain dataclasses.

Shared validation helpers used by Trade and Position to enforce
non-empty identifiers and bounded decimal amounts at construction time.
'''

from __future__ import annotations

from decimal import Decimal

from tally.core.domain.errors import InvalidTradeError, PortfolioError

__all__ = ['MAX_AMOUNT', '_require_amount', '_require_str']

# Keeps quantity * price far inside the default Decimal context exponent range.
MAX_AMOUNT = Decimal('1e18')


def _require_str(
    cls: str,
    field: str,
    value: str | None,
    *,
    optional: bool = False,
    error: type[PortfolioError] = InvalidTradeError,
) -> None:

    '''
    Validate that a string field is non-empty.

    Args:
        cls (str): Class name for error context.
        field (str): Field name for error context.
        value (str | None): Value to validate.
        optional (bool): Allow None values when True.
        error (type[PortfolioError]): Exception raised on failure.
    '''

    if value is None and optional:
        return

    if not isinstance(value, str) or not value.strip():
        msg = f'{cls}.{field} must be a non-empty string'
        raise error(msg)


def _require_amount(
    cls: str,
    field: str,
    value: Decimal,
    *,
    error: type[PortfolioError] = InvalidTradeError,
) -> None:

    '''
    Validate that a numeric field is a finite Decimal within MAX_AMOUNT.

    Args:
        cls (str): Class name for error context.
        field (str): Field name for error context.
        value (Decimal): Value to validate.
        error (type[PortfolioError]): Exception raised on failure.
    '''

    if not isinstance(value, Decimal):
        msg = f'{cls}.{field} must be a Decimal, got {type(value).__name__}'
        raise error(msg)

    if not value.is_finite():
        msg = f'{cls}.{field} must be finite'
        raise error(msg)

    if abs(value) > MAX_AMOUNT:
        msg = f'{cls}.{field} must not exceed {MAX_AMOUNT} in magnitude'
        raise error(msg)
