"""Host-facing entry points and their registration table.

``ENTRY_POINTS`` mirrors a native routine table: each name maps to the
callable and the exact number of positional arguments it takes.  ``call``
dispatches through the table so callers that only know routine names get the
same argument checking as direct Python callers.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, NamedTuple

import numpy as np

from . import kernel as _kernel
from .backend import DeviceInfo, device_info as _device_info
from .errors import InvalidArgument

LOGGER = logging.getLogger(__name__)


def hello(msg: Any) -> str:
    """Return the greeting for ``msg`` instead of printing it."""

    if not isinstance(msg, str):
        raise InvalidArgument("msg must be a single string")
    return f"Hello, {msg}!"


def _as_scalar(value: Any, name: str) -> float:
    if isinstance(value, np.ndarray):
        if value.size != 1 or value.dtype.kind not in "iuf":
            raise InvalidArgument(f"{name} must be numeric")
        value = value.reshape(()).item()
    try:
        return _kernel.as_real_scalar(value, name)
    except InvalidArgument as exc:
        raise InvalidArgument(f"{name} must be numeric") from exc


def add(a: Any, b: Any) -> float:
    return _as_scalar(a, "a") + _as_scalar(b, "b")


def convolve(signal: Any, kernel: Any) -> np.ndarray:
    return _kernel.convolve(signal, kernel)


def device_info() -> DeviceInfo:
    return _device_info()


class EntryPoint(NamedTuple):
    func: Callable[..., Any]
    arity: int


ENTRY_POINTS: Dict[str, EntryPoint] = {
    "hello": EntryPoint(hello, 1),
    "add": EntryPoint(add, 2),
    "convolve": EntryPoint(convolve, 2),
    "device_info": EntryPoint(device_info, 0),
}


def call(name: str, *args: Any) -> Any:
    entry = ENTRY_POINTS.get(name)
    if entry is None:
        available = ", ".join(sorted(ENTRY_POINTS))
        raise InvalidArgument(f"Unknown entry point {name!r}. Available: {available}")
    if len(args) != entry.arity:
        raise InvalidArgument(f"{name} expects {entry.arity} argument(s), got {len(args)}")
    LOGGER.debug("Dispatching %s with %d argument(s)", name, len(args))
    return entry.func(*args)


__all__ = ["ENTRY_POINTS", "EntryPoint", "add", "call", "convolve", "device_info", "hello"]
