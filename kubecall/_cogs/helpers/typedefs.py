"""
Rudimentary type definitions used across the codebase.

The library's own diagnostics go to the regular stdlib loggers, which can be
wrapped into adapters by the callers. The call logger is a separate thing:
it is a capability supplied by the users, and we only promise to call its
single printf-style method, so any ``logging.Logger`` fits, as does any
hand-made object with the same method.
"""
import logging
from typing import TYPE_CHECKING, Any, Union

from typing_extensions import Protocol

if TYPE_CHECKING:
    LoggerAdapter = logging.LoggerAdapter[Any]
else:
    LoggerAdapter = logging.LoggerAdapter

Logger = Union[logging.Logger, LoggerAdapter]


class CallLogger(Protocol):
    def info(self, msg: str, *args: Any) -> None: ...
