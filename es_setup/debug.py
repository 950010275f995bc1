"""Tiered debug logging for es-setup

A single :py:class:`~.tiered_debug.TieredDebug` instance is shared by every module,
so the detail level only has to be set once, by :py:func:`set_level`.
"""

from functools import wraps
from time import monotonic
from typing import Any, Dict, Literal, Optional

from tiered_debug import TieredDebug

BEGIN_LEVEL = 2
"""Debug level for BEGIN CALL messages."""

END_LEVEL = 3
"""Debug level for END CALL messages, which carry the elapsed time."""

debug = TieredDebug(level=1, stacklevel=3)
"""Global TieredDebug instance"""


def set_level(level: int) -> None:
    """Set the detail level (1-5) of the global :py:data:`debug` instance"""
    debug.level = level


def begin_end(
    debug_obj: Optional[TieredDebug] = None,
    begin: Literal[1, 2, 3, 4, 5] = BEGIN_LEVEL,
    end: Literal[1, 2, 3, 4, 5] = END_LEVEL,
    stacklevel: int = 2,
    extra: Optional[Dict[str, Any]] = None,
):
    """Decorator that logs entry to and exit from the wrapped function.

    Reindex-driven calls can run for a long time, so the END message reports how
    many seconds the call took.

    Args:
        debug_obj: TieredDebug instance to use (default: the global ``debug``).
        begin: Debug level for the BEGIN message (1-5).
        end: Debug level for the END message (1-5).
        stacklevel: Stack level reported for the caller.
        extra: Extra metadata passed along to the log record.
    """
    debug_instance = debug_obj if debug_obj is not None else debug

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            level = stacklevel + 1
            debug_instance.log(
                begin, f"BEGIN CALL: {func.__qualname__}()", stacklevel=level, extra=extra
            )
            started = monotonic()
            result = func(*args, **kwargs)
            debug_instance.log(
                end,
                f"END CALL: {func.__qualname__}() after {monotonic() - started:.3f}s",
                stacklevel=level,
                extra=extra,
            )
            return result

        return wrapper

    return decorator
