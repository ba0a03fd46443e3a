from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from gravfft_app.adapters.fft_numpy.wavenumber import WavenumberGrid


@dataclass(frozen=True)
class RadialSpectra:
    """Radially binned auto/cross spectra of two co-registered grids.

    power_a: Σ|A|² (topography), power_b: Σ|B|² (gravity/geoid),
    co_spec: Σ Re(B·A*), quad: Σ Im(A·B*), n_samples: samples per bin.
    """

    power_a: np.ndarray
    power_b: np.ndarray
    co_spec: np.ndarray
    quad: np.ndarray
    n_samples: np.ndarray
    delta_k: float

    @property
    def n_bins(self) -> int:
        return int(self.n_samples.size)


def bin_cross_spectra(spec_a: np.ndarray, spec_b: np.ndarray, K: WavenumberGrid) -> RadialSpectra:
    """Sum spectral samples into bins of width Δk; bin i holds |k| ≈ (i+1)·Δk.

    The zero-wavenumber sample is skipped; samples with |k| < Δk/2 join the first bin and
    samples beyond the last bin are dropped.
    """
    if spec_a.shape != K.shape or spec_b.shape != K.shape:
        raise ValueError("spectra must match the wavenumber lattice")
    delta_k, nk = K.radial_layout()

    a = spec_a.ravel()[1:]
    b = spec_b.ravel()[1:]
    mk = K.magnitude().ravel()[1:]

    ifreq = np.rint(np.abs(mk) / delta_k).astype(np.int64)
    ifreq = np.where(ifreq > 0, ifreq - 1, 0)
    keep = ifreq < nk
    idx = ifreq[keep]
    a, b = a[keep], b[keep]

    def _sum(w: np.ndarray) -> np.ndarray:
        return np.bincount(idx, weights=w, minlength=nk)[:nk]

    return RadialSpectra(
        power_a=_sum(a.real * a.real + a.imag * a.imag),
        power_b=_sum(b.real * b.real + b.imag * b.imag),
        co_spec=_sum(b.real * a.real + b.imag * a.imag),
        quad=_sum(a.imag * b.real - b.imag * a.real),
        n_samples=np.bincount(idx, minlength=nk)[:nk],
        delta_k=float(delta_k),
    )


def coherence(r: RadialSpectra) -> np.ndarray:
    """(co² + quad²) / (P_a·P_b), clipped to [0, 1]; empty bins are NaN."""
    with np.errstate(divide="ignore", invalid="ignore"):
        coh = (r.co_spec**2 + r.quad**2) / (r.power_a * r.power_b)
    return np.clip(coh, 0.0, 1.0)


def admittance_estimate(r: RadialSpectra) -> tuple[np.ndarray, np.ndarray]:
    """(admittance, one-sigma error); admittance = co_spec / P_a."""
    coh = coherence(r)
    with np.errstate(divide="ignore", invalid="ignore"):
        value = r.co_spec / r.power_a
        error = value * np.abs(np.sqrt((1.0 - coh) / (2.0 * coh * r.n_samples)))
    return value, error


def coherence_estimate(r: RadialSpectra) -> tuple[np.ndarray, np.ndarray]:
    """(coherence, one-sigma error)."""
    coh = coherence(r)
    with np.errstate(divide="ignore", invalid="ignore"):
        error = coh * (1.0 - coh) * np.sqrt(2.0 / coh) / np.sqrt(r.n_samples)
    return coh, error
