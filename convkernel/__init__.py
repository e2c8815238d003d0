"""Allocation-bounded 1-D valid-mode convolution with host entry points."""

from importlib.metadata import PackageNotFoundError, version

from .backend import DeviceInfo
from .config import KernelConfig
from .errors import BackendUnavailable, ConvKernelError, InvalidArgument, ResourceExhausted
from .kernel import convolve
from .ops import ENTRY_POINTS, add, call, device_info, hello


try:  # pragma: no cover - metadata is provided at build time
    __version__ = version("convkernel")
except PackageNotFoundError:  # pragma: no cover - fallback during development
    __version__ = "0.0.0.dev0"


__all__ = [
    "__version__",
    "BackendUnavailable",
    "ConvKernelError",
    "DeviceInfo",
    "ENTRY_POINTS",
    "InvalidArgument",
    "KernelConfig",
    "ResourceExhausted",
    "add",
    "call",
    "convolve",
    "device_info",
    "hello",
]
