"""
Rudimentary type [re-]definitions for cross-versioned Python & mypy.

Some StdLib types are generics in the type-sheds, but not at runtime
in the older Pythons (e.g. `logging.LoggerAdapter`). This module defines
them in a reusable way, plus some common plain types used across the code.
"""
import logging
from typing import TYPE_CHECKING, Any, Callable, Dict, TypeVar, Union

if TYPE_CHECKING:
    LoggerAdapter = logging.LoggerAdapter[Any]
else:
    LoggerAdapter = logging.LoggerAdapter

# As publicly exposed: we only promise that it is based on one of the built-in loggable classes.
Logger = Union[logging.Logger, LoggerAdapter]

# Raw JSON values as received from the API, before they are decoded into anything typed.
RawJSON = Any
RawBody = Dict[str, Any]

T = TypeVar('T')

# A caller-supplied decoder from a raw JSON value into a typed value.
Decoder = Callable[[RawJSON], T]


def identity(value: RawJSON) -> RawJSON:
    return value
