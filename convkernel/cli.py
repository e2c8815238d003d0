"""Command line front end for the convkernel entry points."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Sequence

from . import ops
from .errors import ConvKernelError, InvalidArgument
from .kernel import convolve

LOGGER = logging.getLogger(__name__)


def _parse_values(raw: str, name: str) -> List[float]:
    items = [item.strip() for item in raw.split(",")]
    if items == [""]:
        return []
    try:
        return [float(item) for item in items]
    except ValueError as exc:
        raise InvalidArgument(f"{name} must be a comma separated list of numbers") from exc


def _parse_number(raw: str, name: str) -> float:
    try:
        return float(raw)
    except ValueError as exc:
        raise InvalidArgument(f"{name} must be numeric") from exc


_VALUE_OPTIONS = ("--signal", "--kernel")


def _bind_value_options(argv: Sequence[str]) -> List[str]:
    """Rewrite ``--signal -1,2`` as ``--signal=-1,2``.

    argparse only recognises bare negative numbers as values, so a comma
    separated list with a leading minus would otherwise parse as a flag.
    """

    bound: List[str] = []
    tokens = list(argv)
    idx = 0
    while idx < len(tokens):
        token = tokens[idx]
        if token in _VALUE_OPTIONS and idx + 1 < len(tokens):
            bound.append(f"{token}={tokens[idx + 1]}")
            idx += 2
            continue
        bound.append(token)
        idx += 1
    return bound


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="convkernel", description=__doc__)
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    hello = sub.add_parser("hello", help="Print a greeting")
    hello.add_argument("msg")

    add = sub.add_parser("add", help="Add two numbers")
    add.add_argument("a")
    add.add_argument("b")

    conv = sub.add_parser("convolve", help="Valid-mode sliding dot product")
    conv.add_argument("--signal", required=True, help="Comma separated signal values")
    conv.add_argument("--kernel", required=True, help="Comma separated kernel values")
    conv.add_argument(
        "--backend",
        default=None,
        help="Numeric backend (auto, numpy, python); defaults to CONVKERNEL_BACKEND",
    )

    sub.add_parser("device-info", help="Show the selected backend and device")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(_bind_value_options(sys.argv[1:] if argv is None else argv))
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    try:
        if args.command == "hello":
            print(ops.hello(args.msg))
        elif args.command == "add":
            print(ops.add(_parse_number(args.a, "a"), _parse_number(args.b, "b")))
        elif args.command == "convolve":
            signal = _parse_values(args.signal, "signal")
            kernel = _parse_values(args.kernel, "kernel")
            result = convolve(signal, kernel, backend=args.backend)
            print(",".join(repr(float(v)) for v in result))
        else:
            print(json.dumps(ops.device_info().as_dict()))
    except ConvKernelError as exc:
        LOGGER.debug("Command %s failed", args.command, exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 2
    return 0


__all__ = ["build_parser", "main"]
