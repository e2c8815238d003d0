from __future__ import annotations

import logging
import tracemalloc
import types

import numpy as np
import pytest

from convkernel import _python_backend, backend, numpy_backend
from convkernel.config import KernelConfig
from convkernel.errors import BackendUnavailable, InvalidArgument, ResourceExhausted


def _failing_module():
    def correlate_valid(_signal, _kernel, _out):
        raise RuntimeError("backend failure")

    return types.SimpleNamespace(NAME="broken", correlate_valid=correlate_valid, devices=lambda: ("cpu",))


def test_auto_prefers_numpy():
    handle = backend.select_backend(KernelConfig())
    assert handle.name == "numpy"
    assert handle.module is numpy_backend
    assert handle.strict is False


def test_explicit_backend_is_strict_by_default():
    handle = backend.select_backend(KernelConfig(backend="python"))
    assert handle.module is _python_backend
    assert handle.strict is True


def test_strict_override_wins():
    assert backend.select_backend(KernelConfig(backend="numpy", strict=False)).strict is False
    assert backend.select_backend(KernelConfig(strict=True)).strict is True


def test_unknown_backend_raises_with_available_names():
    with pytest.raises(BackendUnavailable, match="numpy, python"):
        backend.select_backend(KernelConfig(backend="julia"))


def test_backend_from_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("CONVKERNEL_BACKEND", " Python ")
    assert backend.select_backend().name == "python"


def test_auto_skips_unavailable_backends(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(numpy_backend, "is_available", lambda: False)
    assert backend.select_backend(KernelConfig()).name == "python"


def test_known_backends():
    assert backend.known_backends() == ("numpy", "python")


def test_failure_propagates_in_strict_mode():
    handle = backend.BackendHandle(module=_failing_module(), name="broken", strict=True)
    with pytest.raises(RuntimeError, match="backend failure"):
        handle.correlate_valid(np.ones(3), np.ones(2), np.empty(2))


def test_failure_falls_back_when_not_strict(caplog: pytest.LogCaptureFixture):
    handle = backend.BackendHandle(module=_failing_module(), name="broken", strict=False)
    with caplog.at_level(logging.WARNING, logger="convkernel.backend"):
        result = handle.correlate_valid(np.array([1.0, 2.0, 3.0]), np.array([1.0, 1.0]), np.empty(2))
    assert result.tolist() == [3.0, 5.0]
    assert any("recomputing with the python reference loop" in rec.getMessage() for rec in caplog.records)


def test_reference_backend_failure_is_never_swallowed(monkeypatch: pytest.MonkeyPatch):
    def broken(_signal, _kernel, _out):
        raise RuntimeError("reference failure")

    monkeypatch.setattr(_python_backend, "correlate_valid", broken)
    handle = backend.BackendHandle(module=_python_backend, name="python", strict=False)
    with pytest.raises(RuntimeError, match="reference failure"):
        handle.correlate_valid(np.ones(2), np.ones(1), np.empty(2))


def test_normalise_devices_handles_hints():
    assert backend._normalise_devices(None) == ("cpu",)
    assert backend._normalise_devices("cuda:0") == ("cuda:0",)
    assert backend._normalise_devices(lambda: ["cpu", None, " metal "]) == ("cpu", "metal")
    assert backend._normalise_devices([]) == ("cpu",)


def test_preferred_device_picks_accelerator():
    assert backend._preferred_device(("cpu", "cuda:0")) == "cuda:0"
    assert backend._preferred_device(("cpu",)) == "cpu"


def test_device_info_defaults():
    info = backend.device_info(KernelConfig())
    assert info == backend.DeviceInfo(backend="numpy", device="cpu", devices=("cpu",))
    assert info.as_dict() == {"backend": "numpy", "device": "cpu", "devices": ["cpu"]}


def test_device_request_matches_indexed_identifier():
    info = backend.device_info(KernelConfig(backend="python", device="CPU:0"))
    assert info.device == "cpu"


def test_unknown_device_strict_raises():
    with pytest.raises(InvalidArgument, match="Unknown device 'cuda'"):
        backend.device_info(KernelConfig(backend="python", device="cuda"))


def test_unknown_device_non_strict_falls_back(caplog: pytest.LogCaptureFixture):
    with caplog.at_level(logging.WARNING, logger="convkernel.backend"):
        info = backend.device_info(KernelConfig(device="cuda"))
    assert info.device == "cpu"
    assert caplog.records


def test_numpy_backend_scratch_is_bounded_by_output():
    signal = np.ones(20000)
    kernel = np.ones(500)
    out = np.empty(signal.shape[0] - kernel.shape[0] + 1)
    tracemalloc.start()
    try:
        numpy_backend.correlate_valid(signal, kernel, out)
        _, peak = tracemalloc.get_traced_memory()
    finally:
        tracemalloc.stop()
    assert out.tolist() == [500.0] * out.shape[0]
    # A window matrix would need n_out * k doubles (about 78 MB here).
    assert peak < 3 * out.nbytes


def test_numpy_backend_matches_reference_bit_for_bit():
    rng = np.random.default_rng(99)
    signal = rng.normal(size=333) * 1e6
    kernel = rng.normal(size=17)
    n_out = signal.shape[0] - kernel.shape[0] + 1
    fast = numpy_backend.correlate_valid(signal, kernel, np.empty(n_out))
    reference = _python_backend.correlate_valid(signal, kernel, np.empty(n_out))
    assert fast.tobytes() == reference.tobytes()


@pytest.mark.parametrize("strict", [True, False])
def test_backend_memory_error_becomes_resource_exhausted(strict):
    def correlate_valid(_signal, _kernel, _out):
        raise MemoryError

    module = types.SimpleNamespace(NAME="greedy", correlate_valid=correlate_valid)
    handle = backend.BackendHandle(module=module, name="greedy", strict=strict)
    with pytest.raises(ResourceExhausted, match="backend greedy could not allocate working memory for 2 outputs"):
        handle.correlate_valid(np.ones(3), np.ones(2), np.empty(2))
