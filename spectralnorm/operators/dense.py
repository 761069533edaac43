from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import torch

Tensor = torch.Tensor


def a_matrix(n: int, dtype: torch.dtype = torch.float64, device: Optional[torch.device] = None) -> Tensor:
    """
    Materialise the leading n x n block of A.
    Indices and the triangular term are int64; only the reciprocal is floating
    point, so each entry matches eval_a(i, j) exactly in float64.
    """
    idx = torch.arange(n, dtype=torch.int64, device=device)
    i = idx[:, None]
    j = idx[None, :]
    ij = i + j
    denom = torch.div(ij * (ij + 1), 2, rounding_mode="floor") + i + 1
    return 1.0 / denom.to(dtype)


@dataclass
class DenseA:
    """
    Dense torch operator for the leading n x n block of A.

    The matrix is built once in __post_init__; forward / transpose / ata are
    BLAS mat-vecs, so results agree with ImplicitA to within rounding of the
    summation order (about 1e-15 relative per product), not bit for bit.
    """
    n: int
    dtype: torch.dtype = torch.float64
    device: Optional[torch.device] = None

    def __post_init__(self) -> None:
        if self.device is None:
            self.device = torch.device("cuda" if torch.cuda.is_available() else "cpu")
        self._A = a_matrix(self.n, dtype=self.dtype, device=self.device)

    def A(self) -> Tensor:
        return self._A

    def forward(self, x: Tensor) -> Tensor:
        """A x."""
        return self._A @ x

    def transpose(self, x: Tensor) -> Tensor:
        """A^T x."""
        return self._A.transpose(0, 1) @ x

    def ata(self, x: Tensor) -> Tensor:
        """A^T (A x)."""
        return self.transpose(self.forward(x))

    def __call__(self, x: Tensor) -> Tensor:
        return self.ata(x)
