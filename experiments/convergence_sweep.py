# experiments/convergence_sweep.py
from __future__ import annotations
import argparse
import csv
from pathlib import Path
from typing import Any, Dict, List

import numpy as np
import matplotlib.pyplot as plt
import torch

from spectralnorm.solvers.power import BACKENDS, SpectralNormEstimator
from spectralnorm.logging.spectra import exact_spectral_norm, relative_error
from spectralnorm.harness import EXPECT_CKSUM


def doubling_sizes(n_min: int, n_max: int) -> List[int]:
    sizes = []
    n = n_min
    while n <= n_max:
        sizes.append(n)
        n *= 2
    return sizes


def run(sizes: List[int], backend: str, with_exact: bool, device: torch.device | None) -> List[Dict[str, Any]]:
    est = SpectralNormEstimator(backend=backend, device=device)
    rows: List[Dict[str, Any]] = []
    prev = None
    for n in sizes:
        value = est.approximate(n)
        exact = exact_spectral_norm(n, device=device) if with_exact else float("nan")
        rows.append({
            "n": n,
            "estimate": value,
            "exact": exact,
            "rel_err_exact": relative_error(value, exact) if with_exact else float("nan"),
            "delta_prev": abs(value - prev) if prev is not None else float("nan"),
        })
        prev = value
        print(f"n={n:5d}  estimate={value:.16f}  exact={exact:.16f}")
    return rows


def main():
    p = argparse.ArgumentParser()
    p.add_argument("--n-min", type=int, default=2)
    p.add_argument("--n-max", type=int, default=512)
    p.add_argument("--backend", choices=BACKENDS, default="torch")
    p.add_argument("--device", type=str, default="cpu")
    p.add_argument("--no-exact", action="store_true", help="skip the SVD reference")
    p.add_argument("--outdir", type=str, default="figures/convergence")
    args = p.parse_args()

    outdir = Path(args.outdir)
    outdir.mkdir(parents=True, exist_ok=True)
    sizes = doubling_sizes(args.n_min, args.n_max)
    rows = run(sizes, args.backend, not args.no_exact, torch.device(args.device))

    csv_path = outdir / "convergence.csv"
    with open(csv_path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=list(rows[0].keys()))
        w.writeheader()
        for r in rows:
            w.writerow(r)

    ns = np.array([r["n"] for r in rows], dtype=np.float64)
    est = np.array([r["estimate"] for r in rows], dtype=np.float64)
    exact = np.array([r["exact"] for r in rows], dtype=np.float64)
    delta = np.array([r["delta_prev"] for r in rows], dtype=np.float64)

    # Estimate vs size, with the n=1000 checksum as the limit line
    plt.figure()
    plt.plot(ns, est, marker="o", label="power method (10 rounds)")
    if np.isfinite(exact).any():
        plt.plot(ns, exact, marker="x", linestyle="--", label=r"$\|A_n\|_2$ (SVD)")
    plt.axhline(EXPECT_CKSUM, linestyle=":", label="checksum (n=1000)")
    plt.xscale("log", base=2)
    plt.xlabel("n")
    plt.ylabel("spectral norm estimate")
    plt.title(f"Spectral norm vs n ({args.backend})")
    plt.legend()
    plt.grid(True, alpha=0.3)
    plt.tight_layout()
    fig1 = outdir / "estimate_vs_n.png"
    plt.savefig(fig1, dpi=180)

    # |result(2n) - result(n)|
    mask = np.isfinite(delta) & (delta > 0)
    plt.figure()
    plt.semilogy(ns[mask], delta[mask], marker="s")
    plt.xscale("log", base=2)
    plt.xlabel("n")
    plt.ylabel(r"$|\mathrm{est}(n) - \mathrm{est}(n/2)|$")
    plt.title("Successive differences across doublings")
    plt.grid(True, alpha=0.3)
    plt.tight_layout()
    fig2 = outdir / "delta_vs_n.png"
    plt.savefig(fig2, dpi=180)

    print(f"[saved] {csv_path}")
    print(f"[saved] {fig1}")
    print(f"[saved] {fig2}")


if __name__ == "__main__":
    main()
