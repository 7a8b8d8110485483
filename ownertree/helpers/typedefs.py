"""
Type aliases for the standard library's classes which are generic only in mypy.

At runtime, ``asyncio.Task[...]`` & ``logging.LoggerAdapter[...]`` are not
subscriptable in the older Pythons, while mypy requires the type arguments.
"""
import asyncio
import logging
from typing import TYPE_CHECKING, Any, Union

if TYPE_CHECKING:
    LoggerAdapter = logging.LoggerAdapter[Any]
    Task = asyncio.Task[Any]
else:
    LoggerAdapter = logging.LoggerAdapter
    Task = asyncio.Task

# Anything that can log: the plain loggers or the per-resource adapters.
Logger = Union[logging.Logger, LoggerAdapter]
