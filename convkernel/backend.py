"""Numeric backend selection with strict and fallback semantics.

Backends are plain modules exposing ``NAME``, ``is_available()``,
``devices()`` and ``correlate_valid(signal, kernel, out)``.  The selector
resolves a preference (``auto`` tries NumPy first, then the pure-Python
reference loop) and wraps the chosen module in a :class:`BackendHandle` that
knows whether failures should propagate or fall back to the reference.
"""

from __future__ import annotations

import logging
import types
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from . import _python_backend, numpy_backend
from .config import KernelConfig
from .errors import BackendUnavailable, ConvKernelError, InvalidArgument, ResourceExhausted

LOGGER = logging.getLogger(__name__)

_AUTO_NAMES = {"auto", "default", "accelerated"}
_AUTO_ORDER = ("numpy", "python")


def _registry() -> Dict[str, Any]:
    return {_python_backend.NAME: _python_backend, numpy_backend.NAME: numpy_backend}


def known_backends() -> Tuple[str, ...]:
    return tuple(sorted(_registry()))


def _normalise_devices(candidate: Any) -> Tuple[str, ...]:
    """Return a tuple of device identifiers from a backend hint."""

    if candidate is None:
        return ("cpu",)
    if callable(candidate):
        candidate = candidate()
    if isinstance(candidate, str):
        items = [candidate]
    else:
        items = list(candidate)
    normalised: List[str] = []
    for item in items:
        if item is None:
            continue
        cleaned = str(item).strip()
        if cleaned:
            normalised.append(cleaned)
    return tuple(normalised or ("cpu",))


def _preferred_device(devices: Tuple[str, ...]) -> str:
    for candidate in devices:
        lowered = candidate.lower()
        if any(lowered.startswith(prefix) for prefix in ("cuda", "gpu", "metal")):
            return candidate
    return devices[0]


def _resolve_device(request: str, devices: Tuple[str, ...], *, strict: bool) -> str:
    cleaned = request.strip()
    if not cleaned or cleaned.lower() in {"auto", "default", "best"}:
        return _preferred_device(devices)
    token = cleaned.lower().split(":", 1)[0]
    for candidate in devices:
        if candidate.lower() == cleaned.lower() or candidate.lower() == token:
            return candidate
    if strict:
        available = ", ".join(devices)
        raise InvalidArgument(f"Unknown device {request!r}. Available: {available}")
    LOGGER.warning("Device %r not offered by backend; using %s", request, _preferred_device(devices))
    return _preferred_device(devices)


@dataclass(frozen=True)
class DeviceInfo:
    """Identifies where ``convolve`` runs."""

    backend: str
    device: str
    devices: Tuple[str, ...] = field(default_factory=lambda: ("cpu",))

    def as_dict(self) -> Dict[str, Any]:
        return {"backend": self.backend, "device": self.device, "devices": list(self.devices)}


@dataclass
class BackendHandle:
    """A selected backend module plus the policy for its failures."""

    module: types.ModuleType
    name: str
    strict: bool = False

    def correlate_valid(self, signal, kernel, out):
        try:
            return self.module.correlate_valid(signal, kernel, out)
        except ConvKernelError:
            raise
        except MemoryError as exc:
            raise ResourceExhausted(
                f"backend {self.name} could not allocate working memory for {len(out)} outputs"
            ) from exc
        except Exception:
            if self.strict or self.module is _python_backend:
                raise
            LOGGER.warning(
                "Backend %s failed; recomputing with the python reference loop",
                self.name,
                exc_info=True,
            )
            return _python_backend.correlate_valid(signal, kernel, out)

    def devices(self) -> Tuple[str, ...]:
        return _normalise_devices(getattr(self.module, "devices", None))


def select_backend(config: Optional[KernelConfig] = None) -> BackendHandle:
    """Resolve ``config.backend`` to a :class:`BackendHandle`."""

    cfg = config if config is not None else KernelConfig.from_env()
    preference = (cfg.backend or "auto").strip().lower()
    registry = _registry()
    explicit = preference not in _AUTO_NAMES
    strict = cfg.strict if cfg.strict is not None else explicit

    order = (preference,) if explicit else _AUTO_ORDER
    for name in order:
        module = registry.get(name)
        if module is None:
            continue
        if not module.is_available():
            continue
        LOGGER.debug("Selected %s backend (strict=%s)", name, strict)
        return BackendHandle(module=module, name=name, strict=strict)

    if explicit:
        available = ", ".join(known_backends())
        raise BackendUnavailable(f"Unknown or unavailable backend {cfg.backend!r}. Available: {available}")
    return BackendHandle(module=_python_backend, name=_python_backend.NAME, strict=strict)


def device_info(config: Optional[KernelConfig] = None) -> DeviceInfo:
    cfg = config if config is not None else KernelConfig.from_env()
    handle = select_backend(cfg)
    devices = handle.devices()
    device = _resolve_device(cfg.device, devices, strict=handle.strict)
    return DeviceInfo(backend=handle.name, device=device, devices=devices)


__all__ = [
    "BackendHandle",
    "DeviceInfo",
    "device_info",
    "known_backends",
    "select_backend",
]
