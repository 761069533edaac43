from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional

from . import eval_a

Vector = List[float]


def multiply_av(n: int, v: Vector, av: Vector) -> None:
    """av <- A v, row sums accumulated in increasing column order."""
    for i in range(n):
        s = 0.0
        for j in range(n):
            s += eval_a(i, j) * v[j]
        av[i] = s


def multiply_atv(n: int, v: Vector, atv: Vector) -> None:
    """atv <- A^T v, row sums accumulated in increasing column order."""
    for i in range(n):
        s = 0.0
        for j in range(n):
            s += eval_a(j, i) * v[j]
        atv[i] = s


def multiply_atav(n: int, v: Vector, atav: Vector, scratch: Optional[Vector] = None) -> None:
    """atav <- A^T (A v). `scratch` holds A v and is allocated when not given."""
    if scratch is None:
        scratch = [0.0] * n
    multiply_av(n, v, scratch)
    multiply_atv(n, scratch, atav)


def dot(x: Vector, y: Vector) -> float:
    # plain running sum; builtin sum() compensates float rounding on 3.12+
    s = 0.0
    for a, b in zip(x, y):
        s += a * b
    return s


@dataclass
class ImplicitA:
    """
    Leading n x n block of A, never materialised. Every product evaluates the
    entries on demand and sums strictly left to right, which reproduces the
    reference checksum bit for bit.

    The scratch buffer is owned by the instance, so one ImplicitA must not be
    shared between concurrent computations.
    """
    n: int
    _scratch: Vector = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._scratch = [0.0] * self.n

    def forward(self, x: Vector) -> Vector:
        out = [0.0] * self.n
        multiply_av(self.n, x, out)
        return out

    def transpose(self, x: Vector) -> Vector:
        out = [0.0] * self.n
        multiply_atv(self.n, x, out)
        return out

    def ata(self, x: Vector) -> Vector:
        out = [0.0] * self.n
        self.ata_into(x, out)
        return out

    def ata_into(self, x: Vector, out: Vector) -> None:
        """In-place composite product, writes A^T A x into `out`."""
        assert x is not out, "source and destination must be distinct buffers"
        multiply_atav(self.n, x, out, self._scratch)
