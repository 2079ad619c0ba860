'''
Environment-driven settings for a Tally session.

Values come from process environment variables, optionally seeded
from a .env file in the working directory via python-dotenv.
'''

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

__all__ = ['Settings']

_LEVELS = frozenset({'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'})
_TRUE = frozenset({'1', 'true', 'yes', 'on'})
_FALSE = frozenset({'0', 'false', 'no', 'off'})


def _parse_bool(name: str, raw: str) -> bool:

    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    msg = f'{name} must be a boolean flag, got {raw!r}'
    raise ValueError(msg)


@dataclass(frozen=True)
class Settings:

    '''
    Runtime configuration for a portfolio session.

    Args:
        log_level (str): Minimum log level passed to configure_logging.
        allow_mixed_currency (bool): Blend trades recorded in a different currency
            than the open position instead of rejecting them.
    '''

    log_level: str = 'INFO'
    allow_mixed_currency: bool = True

    def __post_init__(self) -> None:

        if self.log_level.upper() not in _LEVELS:
            msg = f'Settings.log_level must be one of {sorted(_LEVELS)}'
            raise ValueError(msg)
        object.__setattr__(self, 'log_level', self.log_level.upper())

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, *, dotenv: bool = True) -> Settings:

        '''
        Build settings from TALLY_* environment variables.

        Args:
            environ (Mapping[str, str] | None): Variables to read, os.environ when None
            dotenv (bool): Load a .env file into os.environ first

        Returns:
            Settings: Parsed settings, defaults for unset variables
        '''

        if dotenv:
            load_dotenv(find_dotenv(usecwd=True))
        env = os.environ if environ is None else environ

        kwargs: dict[str, object] = {}
        if 'TALLY_LOG_LEVEL' in env:
            kwargs['log_level'] = env['TALLY_LOG_LEVEL']
        if 'TALLY_ALLOW_MIXED_CURRENCY' in env:
            kwargs['allow_mixed_currency'] = _parse_bool(
                'TALLY_ALLOW_MIXED_CURRENCY', env['TALLY_ALLOW_MIXED_CURRENCY']
            )

        return cls(**kwargs)  # type: ignore[arg-type]
