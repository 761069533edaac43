from __future__ import annotations
import argparse
import sys
import time
from typing import List, Optional

import torch

from .errors import ChecksumMismatch, InvalidSizeError
from .solvers.power import BACKENDS, SpectralNormEstimator

SPECTRAL_N = 1000
EXPECT_CKSUM = 1.2742241481294835914184204739285632967948913574218750
# torch backend sums in BLAS order; the scalar backend is compared exactly
DEFAULT_RTOL = 1e-13


def checksum_matches(value: float, expected: float = EXPECT_CKSUM, rtol: float = 0.0) -> bool:
    if rtol <= 0.0:
        return value == expected
    return abs(value - expected) <= rtol * abs(expected)


def inner_iter(
    n: int = SPECTRAL_N,
    backend: str = "scalar",
    device: Optional[torch.device] = None,
    rtol: Optional[float] = None,
    check: bool = True,
) -> float:
    """
    One estimator call. For n == SPECTRAL_N the result is validated against
    EXPECT_CKSUM (exactly for the scalar backend, within `rtol` otherwise)
    and ChecksumMismatch is raised on disagreement. Other sizes have no
    published checksum and are returned unchecked.
    """
    value = SpectralNormEstimator(backend=backend, device=device).approximate(n)
    if check and n == SPECTRAL_N:
        if rtol is None:
            rtol = 0.0 if backend == "scalar" else DEFAULT_RTOL
        if not checksum_matches(value, EXPECT_CKSUM, rtol):
            raise ChecksumMismatch(value, EXPECT_CKSUM)
    return value


def run_iter(repeats: int, n: int = SPECTRAL_N, **kwargs) -> Optional[float]:
    """Call inner_iter `repeats` times (timing amplification); returns the last value."""
    if repeats < 0:
        raise ValueError(f"repeats must be >= 0, got {repeats}")
    value = None
    for _ in range(repeats):
        value = inner_iter(n, **kwargs)
    return value


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="spectralnorm",
        description="Spectral norm of the implicit matrix A(i,j) = 1/((i+j)(i+j+1)/2 + i + 1) by the power method.",
    )
    p.add_argument("--repeats", type=int, default=1, help="number of estimator calls")
    p.add_argument("--n", type=int, default=SPECTRAL_N, help="problem size")
    p.add_argument("--backend", choices=BACKENDS, default="scalar")
    p.add_argument("--device", type=str, default=None, help="torch device for the torch backend")
    p.add_argument("--rtol", type=float, default=None,
                   help=f"checksum tolerance (default: exact for scalar, {DEFAULT_RTOL} for torch)")
    p.add_argument("--no-check", action="store_true", help="skip checksum validation")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)
    if args.repeats < 1:
        p.error("--repeats must be >= 1")

    device = torch.device(args.device) if args.device is not None else None
    t0 = time.perf_counter()
    try:
        value = run_iter(args.repeats, args.n, backend=args.backend, device=device,
                         rtol=args.rtol, check=not args.no_check)
    except InvalidSizeError as e:
        p.error(str(e))
    except ChecksumMismatch as e:
        print(e)
        return 1
    ms = (time.perf_counter() - t0) * 1000.0

    print(f"spectral norm: {value:.9f}")
    print(f"elapsed: {ms:.0f} ms ({args.repeats} x n={args.n}, {args.backend})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
