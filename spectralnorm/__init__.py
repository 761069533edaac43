# spectralnorm/__init__.py
from .errors import InvalidSizeError, ChecksumMismatch
from .operators import eval_a
from .operators.dense import DenseA
from .operators.implicit import ImplicitA
from .solvers.power import ROUNDS, SpectralNormEstimator, approximate

__all__ = [
    "InvalidSizeError",
    "ChecksumMismatch",
    "eval_a",
    "DenseA",
    "ImplicitA",
    "ROUNDS",
    "SpectralNormEstimator",
    "approximate",
]
