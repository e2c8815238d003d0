"""NumPy backend: one shifted multiply-add per kernel tap.

Scratch memory is a single buffer the size of ``out``, so the working set
stays O(n_out) regardless of the kernel length.  Taps are added in kernel
order, which reproduces the reference loop's accumulation exactly.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

NAME = "numpy"


def is_available() -> bool:
    return True


def devices() -> Tuple[str, ...]:
    return ("cpu",)


def correlate_valid(signal: np.ndarray, kernel: np.ndarray, out: np.ndarray) -> np.ndarray:
    n_out = out.shape[0]
    scratch = np.empty_like(out)
    out[:] = 0.0
    for j in range(kernel.shape[0]):
        np.multiply(signal[j : j + n_out], kernel[j], out=scratch)
        np.add(out, scratch, out=out)
    return out
