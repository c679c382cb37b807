"""SQL toolkit factory.

:func:`get_sql_toolkit` is the only way consumer code obtains a toolkit.  The
instance is a process-wide singleton; the grammar backend behind it can be
replaced at startup with :func:`register_implementation`.
"""

from __future__ import annotations

import threading
from typing import Callable

from ._protocols import SqlToolkit

ToolkitFactory = Callable[[], SqlToolkit]

_lock = threading.Lock()
_instance: SqlToolkit | None = None
_factory_fn: ToolkitFactory | None = None


def _default_factory() -> SqlToolkit:
    from .impl.sqlglot_impl import SqlGlotToolkit

    return SqlGlotToolkit()


def register_implementation(factory_fn: ToolkitFactory) -> None:
    """Use *factory_fn* to build the toolkit from now on.

    Any previously created instance is discarded so the next
    :func:`get_sql_toolkit` call builds a fresh one.
    """
    global _factory_fn, _instance
    with _lock:
        _factory_fn = factory_fn
        _instance = None


def get_sql_toolkit() -> SqlToolkit:
    """Return the active :class:`SqlToolkit`, building it on first use."""
    global _instance
    instance = _instance
    if instance is not None:
        return instance

    with _lock:
        if _instance is None:
            _instance = (_factory_fn or _default_factory)()
        return _instance


def reset_toolkit() -> None:
    """Forget the instance and any registered factory.  **For testing only.**"""
    global _instance, _factory_fn
    with _lock:
        _instance = None
        _factory_fn = None
