from __future__ import annotations

from dataclasses import dataclass
from math import factorial, pi
from typing import Callable, Dict, Protocol

import numpy as np

from gravfft_app.adapters.fft_numpy.wavenumber import WavenumberGrid
from gravfft_app.domain.constants import (
    EOTVOS_PER_MGAL_PER_M,
    MGAL_PER_MS2,
    MICRORADIAN,
    NEWTON_G,
)

# A field strategy turns the free-air kernel (mGal per unit of term spectrum) into the
# multiplier for the requested field. Selected once per run; pure, branch-free per bin.
FieldStrategy = Callable[[np.ndarray, WavenumberGrid, float], np.ndarray]


def _safe_inverse_k(mk: np.ndarray) -> np.ndarray:
    """1/|k| with the zero-wavenumber bin mapped to 0 (the bin then contributes nothing)."""
    out = np.zeros_like(mk)
    np.divide(1.0, mk, out=out, where=mk > 0.0)
    return out


def free_air(kernel: np.ndarray, K: WavenumberGrid, g45_mgal: float) -> np.ndarray:
    return kernel


def geoid(kernel: np.ndarray, K: WavenumberGrid, g45_mgal: float) -> np.ndarray:
    """N = Δg / (g·|k|), metres."""
    return kernel * _safe_inverse_k(K.magnitude()) / g45_mgal


def vgg(kernel: np.ndarray, K: WavenumberGrid, g45_mgal: float) -> np.ndarray:
    """∂Δg/∂z = |k|·Δg; mGal/m → Eötvös."""
    return kernel * (EOTVOS_PER_MGAL_PER_M * K.magnitude())


def _deflection(kernel: np.ndarray, k_comp: np.ndarray, mk: np.ndarray, g45_mgal: float) -> np.ndarray:
    # -∂N/∂x ↔ -i·kx·N; microradians
    return kernel * (-1j * MICRORADIAN * k_comp * _safe_inverse_k(mk) / g45_mgal)


def deflection_east(kernel: np.ndarray, K: WavenumberGrid, g45_mgal: float) -> np.ndarray:
    return _deflection(kernel, K.kx(), K.magnitude(), g45_mgal)


def deflection_north(kernel: np.ndarray, K: WavenumberGrid, g45_mgal: float) -> np.ndarray:
    return _deflection(kernel, K.ky(), K.magnitude(), g45_mgal)


FIELD_STRATEGIES: Dict[str, FieldStrategy] = {
    "faa": free_air,
    "geoid": geoid,
    "vgg": vgg,
    "defl_east": deflection_east,
    "defl_north": deflection_north,
}


def field_strategy(field: str) -> FieldStrategy:
    try:
        return FIELD_STRATEGIES[field]
    except KeyError:
        raise KeyError(f"Unknown field '{field}'. Available: {', '.join(FIELD_STRATEGIES)}") from None


def wavenumber_power(mk: np.ndarray, n: int) -> np.ndarray:
    """|k|^(n-1) with n=1 → 1 and n=2 → |k| taken literally (no pow noise at k=0)."""
    if n < 1:
        raise ValueError("term index n starts at 1")
    if n == 1:
        return np.ones_like(mk)
    if n == 2:
        return mk.copy()
    return np.power(mk, n - 1)


class TermKernel(Protocol):
    def multiplier(self, n: int) -> np.ndarray:
        """Complex (ny2, nx2) multiplier applied to the spectrum of the n-th term."""


@dataclass(frozen=True)
class ParkerExpansion:
    """Parker (1973) series for an undulating density interface.

    Term n contributes  c · exp(-|k|·z_level) · |k|^(n-1) · F[h^n],
    c = 1e5 · 2πGρ / n!  (mGal), followed by the field strategy.
    """

    K: WavenumberGrid
    rho: float
    z_level: float
    field: str = "faa"
    g45_mgal: float = 980619.9203

    def kernel(self, n: int) -> np.ndarray:
        mk = self.K.magnitude()
        c = MGAL_PER_MS2 * 2.0 * pi * NEWTON_G * self.rho / factorial(n)
        return c * np.exp(-mk * self.z_level) * wavenumber_power(mk, n)

    def multiplier(self, n: int) -> np.ndarray:
        return field_strategy(self.field)(self.kernel(n), self.K, self.g45_mgal)


@dataclass(frozen=True)
class AdmittanceExpansion:
    """Field predicted from bathymetry through a theoretical admittance Z(k) (mGal/m).

    Term n contributes Z(k) · |k|^(n-1) / n! · F[h^n]; zero wavenumber contributes nothing.
    """

    K: WavenumberGrid
    admittance: Callable[[np.ndarray], np.ndarray]  # frequency (1/m) → FAA admittance
    field: str = "faa"
    g45_mgal: float = 980619.9203

    def multiplier(self, n: int) -> np.ndarray:
        mk = self.K.magnitude()
        freq = mk / (2.0 * pi)
        z = np.where(mk > 0.0, self.admittance(freq), 0.0)
        kernel = z * wavenumber_power(mk, n) / factorial(n)
        return field_strategy(self.field)(kernel, self.K, self.g45_mgal)


def accumulate_term(acc: np.ndarray, term_spectrum: np.ndarray, multiplier: np.ndarray) -> np.ndarray:
    """New spectrum acc + multiplier · term_spectrum (inputs untouched)."""
    if term_spectrum.shape != acc.shape or multiplier.shape != acc.shape:
        raise ValueError("term spectrum, multiplier and accumulator must share the lattice shape")
    return acc + multiplier * term_spectrum
