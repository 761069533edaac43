from __future__ import annotations

def eval_a(i: int, j: int) -> float:
    """
    Element (i, j) of the infinite matrix A, zero-based:
        A(i, j) = 1 / ((i+j)(i+j+1)/2 + i + 1)
    The triangular term stays integer (floor division) and only the final
    reciprocal is taken in floating point.
    """
    ij = i + j
    return 1.0 / (ij * (ij + 1) // 2 + i + 1)
