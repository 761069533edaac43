from __future__ import annotations
from typing import Optional, Sequence, Union
import torch

from ..errors import check_size
from ..operators.dense import DenseA
from ..operators.implicit import dot

VectorLike = Union[Sequence[float], torch.Tensor]

def rayleigh_quotient(u: VectorLike, v: VectorLike) -> float:
    """<u, v> / <v, v>; with u = A^T A v this is the Rayleigh quotient of A^T A at v."""
    if isinstance(u, torch.Tensor) or isinstance(v, torch.Tensor):
        u_t = torch.as_tensor(u, dtype=torch.float64)
        v_t = torch.as_tensor(v, dtype=torch.float64)
        return float((u_t @ v_t) / (v_t @ v_t))
    return dot(u, v) / dot(v, v)

@torch.no_grad()
def exact_spectral_norm(n: int, device: Optional[torch.device] = None) -> float:
    """||A_n||_2 of the leading n x n block via a full SVD (float64)."""
    n = check_size(n)
    A = DenseA(n, device=device).A()
    return torch.linalg.svdvals(A).max().real.item()

def relative_error(estimate: float, reference: float) -> float:
    return abs(estimate - reference) / (abs(reference) + 1e-300)
