"""Pure-Python reference implementation of the sliding dot product.

The loop below is the literal semantics every other backend is measured
against: for each output position the accumulator starts at ``0.0`` and the
products are added in kernel order.  It reads the inputs through plain Python
floats so that results do not depend on any vectorised summation order.
"""

from __future__ import annotations

from typing import List, Tuple

NAME = "python"


def is_available() -> bool:
    return True


def devices() -> Tuple[str, ...]:
    return ("cpu",)


def _to_float_list(data) -> List[float]:
    if hasattr(data, "tolist"):
        data = data.tolist()
    return [float(v) for v in data]


def correlate_valid(signal, kernel, out):
    sig = _to_float_list(signal)
    ker = _to_float_list(kernel)
    k = len(ker)
    n_out = len(out)
    for i in range(n_out):
        acc = 0.0
        for j in range(k):
            acc += sig[i + j] * ker[j]
        out[i] = acc
    return out
