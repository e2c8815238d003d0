"""Environment driven configuration for backend selection and output bounds."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import InvalidArgument

BACKEND_ENV = "CONVKERNEL_BACKEND"
STRICT_ENV = "CONVKERNEL_STRICT"
MAX_OUTPUT_ENV = "CONVKERNEL_MAX_OUTPUT"
DEVICE_ENV = "CONVKERNEL_DEVICE"


def _parse_bool_env(value: str) -> bool | None:
    lowered = value.strip().lower()
    if lowered in {"1", "true", "yes", "on"}:
        return True
    if lowered in {"0", "false", "no", "off"}:
        return False
    return None


def _parse_max_output(value: str) -> Optional[int]:
    cleaned = value.strip()
    if not cleaned or cleaned.lower() in {"none", "unbounded"}:
        return None
    try:
        limit = int(cleaned)
    except ValueError as exc:
        raise InvalidArgument(f"{MAX_OUTPUT_ENV} must be a positive integer, got {value!r}") from exc
    if limit <= 0:
        raise InvalidArgument(f"{MAX_OUTPUT_ENV} must be a positive integer, got {value!r}")
    return limit


@dataclass(frozen=True)
class KernelConfig:
    """Settings consulted on every ``convolve`` call.

    ``strict`` is ``None`` when the caller left the decision to the backend
    selector, which then enables it only for explicitly requested backends.
    """

    backend: str = "auto"
    strict: Optional[bool] = None
    max_output: Optional[int] = None
    device: str = "auto"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "KernelConfig":
        env = os.environ if environ is None else environ
        backend = (env.get(BACKEND_ENV, "auto") or "auto").strip().lower()
        strict = _parse_bool_env(env.get(STRICT_ENV, "auto"))
        max_output = _parse_max_output(env.get(MAX_OUTPUT_ENV, ""))
        device = (env.get(DEVICE_ENV, "auto") or "auto").strip()
        return cls(backend=backend, strict=strict, max_output=max_output, device=device)

    def with_backend(self, backend: Optional[str]) -> "KernelConfig":
        if backend is None:
            return self
        return KernelConfig(
            backend=backend.strip().lower(),
            strict=self.strict,
            max_output=self.max_output,
            device=self.device,
        )


__all__ = [
    "BACKEND_ENV",
    "STRICT_ENV",
    "MAX_OUTPUT_ENV",
    "DEVICE_ENV",
    "KernelConfig",
]
