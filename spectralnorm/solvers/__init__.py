from .power import ROUNDS, BACKENDS, SpectralNormEstimator, approximate

__all__ = ["ROUNDS", "BACKENDS", "SpectralNormEstimator", "approximate"]
