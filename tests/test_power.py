import math

import numpy as np
import pytest
import torch

from spectralnorm import InvalidSizeError, SpectralNormEstimator, approximate
from spectralnorm.harness import EXPECT_CKSUM
from spectralnorm.logging.spectra import exact_spectral_norm, rayleigh_quotient, relative_error
from spectralnorm.solvers.power import ROUNDS


def test_size_one_is_exactly_one():
    assert approximate(1) == 1.0
    assert approximate(1, backend="torch", device=torch.device("cpu")) == 1.0


def test_checksum_n1000_exact():
    assert approximate(1000) == EXPECT_CKSUM


def test_checksum_n1000_torch_tight():
    value = approximate(1000, backend="torch", device=torch.device("cpu"))
    assert relative_error(value, EXPECT_CKSUM) <= 1e-13


def test_deterministic():
    a = approximate(100)
    b = approximate(100)
    assert a == b
    assert math.isclose(a, 1.274219991, abs_tol=5e-10)


def test_torch_agrees_with_scalar():
    for n in (2, 3, 17, 64):
        s = approximate(n)
        t = approximate(n, backend="torch", device=torch.device("cpu"))
        assert relative_error(t, s) <= 1e-13, n


def test_converges_across_doublings():
    sizes = [2, 4, 8, 16, 32, 64, 128]
    values = [approximate(n) for n in sizes]
    diffs = [abs(b - a) for a, b in zip(values, values[1:])]
    for d0, d1 in zip(diffs, diffs[1:]):
        assert d1 <= d0
    assert abs(values[-1] - EXPECT_CKSUM) < diffs[0]


def test_estimate_bounded_by_exact_norm():
    n = 64
    est = approximate(n)
    sigma = exact_spectral_norm(n, device=torch.device("cpu"))
    assert est <= sigma * (1.0 + 1e-12)
    assert relative_error(est, sigma) < 1e-8


@pytest.mark.parametrize("bad", [0, -3, 2.5, True, "10", None])
def test_invalid_size_rejected(bad):
    with pytest.raises(InvalidSizeError):
        approximate(bad)
    with pytest.raises(InvalidSizeError):
        approximate(bad, backend="torch", device=torch.device("cpu"))


def test_unknown_backend():
    with pytest.raises(ValueError):
        SpectralNormEstimator(backend="numpy")


def test_callback_once_per_round():
    seen = []

    def cb(k, u, v, info):
        seen.append((k, info["estimate"], rayleigh_quotient(u, v)))

    est = SpectralNormEstimator(callback=cb)
    value = est.approximate(20)
    assert [k for k, _, _ in seen] == list(range(ROUNDS))
    assert seen[-1][1] == value
    assert math.isclose(math.sqrt(seen[-1][2]), value, rel_tol=1e-15)
    # Rayleigh quotients of A^T A increase monotonically under the power method
    for (_, e0, _), (_, e1, _) in zip(seen, seen[1:]):
        assert e1 >= e0 - 1e-15


def test_callback_torch_backend():
    calls = []
    est = SpectralNormEstimator(backend="torch", device=torch.device("cpu"),
                                callback=lambda k, u, v, info: calls.append(info["round"]))
    est(10)
    assert calls == list(range(ROUNDS))


def test_integer_like_sizes_accepted():
    assert approximate(np.int64(3)) == approximate(3)
    assert approximate(torch.tensor(5).item()) == approximate(5)
    est = SpectralNormEstimator(backend="torch", device=torch.device("cpu"))
    assert est(np.int32(4)) == est(4)
    with pytest.raises(InvalidSizeError):
        approximate(np.int64(0))
    with pytest.raises(InvalidSizeError):
        approximate(np.float64(3.0))


@pytest.mark.parametrize("backend", ["scalar", "torch"])
def test_callback_gets_per_round_snapshots(backend):
    snaps = []

    def cb(k, u, v, info):
        snaps.append(u)
        # scribbling on the arguments must not leak into the iteration
        if isinstance(u, list):
            u[:] = [0.0] * len(u)
            v[:] = [0.0] * len(v)
        else:
            u.zero_()
            v.zero_()

    n = 4
    value = SpectralNormEstimator(backend=backend, device=torch.device("cpu"), callback=cb).approximate(n)
    assert len(snaps) == ROUNDS
    assert all(a is not b for a, b in zip(snaps, snaps[1:]))
    reference = approximate(n, backend=backend, device=torch.device("cpu"))
    assert value == reference

    firsts = []
    SpectralNormEstimator(backend=backend, device=torch.device("cpu"),
                          callback=lambda k, u, v, info: firsts.append(float(u[0]))).approximate(n)
    # u grows by roughly ||A||^4 per round, so no two snapshots coincide
    assert len(set(firsts)) == ROUNDS
    assert firsts[0] < firsts[-1]
