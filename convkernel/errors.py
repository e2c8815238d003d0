"""Exception types raised by the convolution kernel and its entry points."""

from __future__ import annotations


class ConvKernelError(Exception):
    """Base class for every error raised by ``convkernel``."""


class InvalidArgument(ConvKernelError, ValueError):
    """Raised when an input has the wrong type or shape."""


class ResourceExhausted(ConvKernelError, MemoryError):
    """Raised when the output buffer cannot or may not be allocated."""


class BackendUnavailable(ConvKernelError, RuntimeError):
    """Raised when a requested numeric backend cannot be used."""


__all__ = [
    "ConvKernelError",
    "InvalidArgument",
    "ResourceExhausted",
    "BackendUnavailable",
]
