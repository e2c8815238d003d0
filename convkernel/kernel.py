"""Valid-mode 1-D convolution in correlation orientation.

``convolve(signal, kernel)`` slides ``kernel`` across ``signal`` without
reversing it and returns one dot product per full-overlap position::

    output[i] = sum(signal[i + j] * kernel[j] for j in range(len(kernel)))

All validation happens before the output buffer is allocated, so a call
either returns a complete, freshly allocated ``float64`` array or raises and
leaves nothing behind.
"""

from __future__ import annotations

import logging
import numbers
from typing import Any, Iterable, Optional

import numpy as np

from .backend import select_backend
from .config import KernelConfig
from .errors import InvalidArgument, ResourceExhausted

LOGGER = logging.getLogger(__name__)

# Every integer with magnitude up to 2**53 has an exact double representation.
_EXACT_INT_LIMIT = 2**53


def _is_real_scalar(value: Any) -> bool:
    if isinstance(value, (bool, np.bool_)):
        return False
    return isinstance(value, numbers.Real)


def as_real_scalar(value: Any, name: str) -> float:
    if not _is_real_scalar(value):
        raise InvalidArgument(f"{name} must contain only real numbers, got {type(value).__name__}")
    try:
        as_float = float(value)
    except OverflowError as exc:
        raise InvalidArgument(f"{name} contains an integer too large for a double") from exc
    if isinstance(value, numbers.Integral) and as_float != value:
        raise InvalidArgument(f"{name} contains an integer not exactly representable as a double")
    return as_float


def _check_integer_array(arr: np.ndarray, name: str) -> None:
    oversized = arr[(arr > _EXACT_INT_LIMIT) | (arr < -_EXACT_INT_LIMIT)]
    for value in oversized.tolist():
        if float(value) != value:
            raise InvalidArgument(f"{name} contains an integer not exactly representable as a double")


def as_real_vector(values: Any, name: str = "value") -> np.ndarray:
    """Convert ``values`` to a private one-dimensional ``float64`` array.

    Strings, booleans, complex numbers, mappings and nested sequences are
    rejected with :class:`InvalidArgument`.  The returned array never shares
    memory with ``values``.
    """

    if values is None or isinstance(values, (str, bytes, bytearray)):
        raise InvalidArgument(f"{name} must be a sequence of real numbers")
    if isinstance(values, np.ndarray):
        if values.ndim != 1:
            raise InvalidArgument(f"{name} must be one-dimensional, got {values.ndim} dimensions")
        kind = values.dtype.kind
        if kind == "f":
            return np.array(values, dtype=np.float64, copy=True)
        if kind in "iu":
            _check_integer_array(values, name)
            return values.astype(np.float64)
        if kind == "O":
            return np.fromiter((as_real_scalar(v, name) for v in values), dtype=np.float64, count=values.shape[0])
        raise InvalidArgument(f"{name} must have a real dtype, got {values.dtype}")
    if isinstance(values, dict) or not isinstance(values, Iterable):
        raise InvalidArgument(f"{name} must be a sequence of real numbers")
    return np.array([as_real_scalar(v, name) for v in values], dtype=np.float64)


def output_length(signal_len: int, kernel_len: int) -> int:
    """Return ``signal_len - kernel_len + 1`` after checking the length rules."""

    if kernel_len == 0:
        raise InvalidArgument("kernel must not be empty")
    if signal_len == 0:
        raise InvalidArgument("signal must not be empty")
    if signal_len < kernel_len:
        raise InvalidArgument("signal length must be >= kernel length")
    return signal_len - kernel_len + 1


def _allocate(n_out: int, max_output: Optional[int]) -> np.ndarray:
    if max_output is not None and n_out > max_output:
        raise ResourceExhausted(f"output length {n_out} exceeds the configured limit of {max_output}")
    try:
        return np.empty(n_out, dtype=np.float64)
    except MemoryError as exc:
        raise ResourceExhausted(f"unable to allocate output of length {n_out}") from exc


def convolve(
    signal: Any,
    kernel: Any,
    *,
    backend: Optional[str] = None,
    config: Optional[KernelConfig] = None,
) -> np.ndarray:
    """Slide ``kernel`` over ``signal`` and return the valid-mode dot products.

    Raises :class:`InvalidArgument` for non-numeric input, an empty signal or
    kernel, or a kernel longer than the signal, and
    :class:`ResourceExhausted` when the output cannot be allocated.
    """

    cfg = (config if config is not None else KernelConfig.from_env()).with_backend(backend)
    sig = as_real_vector(signal, "signal")
    ker = as_real_vector(kernel, "kernel")
    n_out = output_length(sig.shape[0], ker.shape[0])
    handle = select_backend(cfg)
    out = _allocate(n_out, cfg.max_output)
    LOGGER.debug(
        "convolve n=%d k=%d n_out=%d backend=%s", sig.shape[0], ker.shape[0], n_out, handle.name
    )
    return handle.correlate_valid(sig, ker, out)


__all__ = ["as_real_scalar", "as_real_vector", "convolve", "output_length"]
