from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional
import math
import torch

from ..errors import check_size
from ..operators.dense import DenseA
from ..operators.implicit import ImplicitA, dot

ROUNDS = 10
BACKENDS = ("scalar", "torch")

RoundCallback = Callable[[int, Any, Any, Dict[str, Any]], None]


@dataclass
class SpectralNormEstimator:
    """
    Power method on B = A^T A for the leading n x n block of the implicit
    matrix A(i, j) = 1 / ((i+j)(i+j+1)/2 + i + 1).

    Starting from u = (1, ..., 1), each round applies B twice with the two
    buffers swapping roles (v = B u, then u = B v). After `rounds` rounds the
    estimate is

        ||A||_2 ~ sqrt( <u, v> / <v, v> ),

    the square root of the Rayleigh quotient of B at v.

    backend:
      "scalar" - Python floats, entries evaluated on demand, sums in index
                 order. Reproduces the reference checksum exactly.
      "torch"  - A materialised once as a float64 tensor, BLAS mat-vecs.
                 Same value up to summation-order rounding (~1e-15 rel).

    callback(k, u, v, info) is invoked after round k (0-based) with
    info = {"round": k, "estimate": <norm estimate after this round>}.
    """
    rounds: int = ROUNDS
    backend: str = "scalar"
    callback: Optional[RoundCallback] = None
    device: Optional[torch.device] = None
    dtype: torch.dtype = torch.float64

    def __post_init__(self) -> None:
        if self.backend not in BACKENDS:
            raise ValueError(f"unknown backend {self.backend!r}, expected one of {BACKENDS}")
        assert self.rounds >= 1, "rounds must be >= 1"

    def approximate(self, n: int) -> float:
        n = check_size(n)
        if self.backend == "scalar":
            return self._approximate_scalar(n)
        return self._approximate_torch(n)

    def __call__(self, n: int) -> float:
        return self.approximate(n)

    def _approximate_scalar(self, n: int) -> float:
        op = ImplicitA(n)
        u = [1.0] * n
        v = [0.0] * n
        estimate = None
        for k in range(self.rounds):
            op.ata_into(u, v)
            op.ata_into(v, u)
            if self.callback is not None:
                estimate = _norm_estimate(dot(u, v), dot(v, v))
                # copies: u and v are overwritten in place next round
                self.callback(k, list(u), list(v), {"round": k, "estimate": estimate})

        if estimate is None:
            estimate = _norm_estimate(dot(u, v), dot(v, v))
        return estimate

    @torch.no_grad()
    def _approximate_torch(self, n: int) -> float:
        op = DenseA(n, dtype=self.dtype, device=self.device)
        u = torch.ones(n, dtype=self.dtype, device=op.device)
        v = torch.zeros_like(u)
        estimate = None
        for k in range(self.rounds):
            v = op.ata(u)
            u = op.ata(v)
            if self.callback is not None:
                estimate = _norm_estimate(float(u @ v), float(v @ v))
                self.callback(k, u.clone(), v.clone(), {"round": k, "estimate": estimate})

        if estimate is None:
            estimate = _norm_estimate(float(u @ v), float(v @ v))
        return estimate


def _norm_estimate(vBv: float, vv: float) -> float:
    return math.sqrt(vBv / vv)


def approximate(n: int, backend: str = "scalar", device: Optional[torch.device] = None) -> float:
    """Spectral norm estimate of the leading n x n block of A (10 power-method rounds)."""
    return SpectralNormEstimator(backend=backend, device=device).approximate(n)
