from __future__ import annotations

from math import pi

import numpy as np

from gravfft_app.adapters.solver_parker.isostasy import flexural_rigidity
from gravfft_app.domain.constants import EARTH_RADIUS_M, MGAL_PER_MS2, NEWTON_G
from gravfft_app.domain.models import FlexureConfig

TWO_PI = 2.0 * pi


def flexural_alpha(flexure: FlexureConfig, normal_gravity: float) -> float:
    """α = (2π)⁴·D / (g·Δρ_mc); multiplies f⁴ in the plate response."""
    return TWO_PI**4 * flexural_rigidity(flexure.te_m) / (normal_gravity * flexure.rho_mc)


def earth_curvature(freq: np.ndarray, spherical: bool = False) -> np.ndarray:
    """2Rf / (4πRf + 1) for spherical geometry; 1 for a flat earth."""
    freq = np.asarray(freq, dtype=float)
    if not spherical:
        return np.ones_like(freq)
    return 2.0 * EARTH_RADIUS_M * freq / (4.0 * pi * EARTH_RADIUS_M * freq + 1.0)


def load_from_top_faa(
    freq: np.ndarray,
    flexure: FlexureConfig,
    *,
    z_level: float,
    moho_m: float,
    normal_gravity: float,
    spherical: bool = False,
) -> np.ndarray:
    r"""
    McNutt & Shure (1986) admittance for a surface load on an elastic plate (mGal/m):

        Z(f) = 2πG·Δρ_cw · [ e^{-2πf z} − e^{-2πf zm} / (1 + α f⁴) ]
    """
    f = np.asarray(freq, dtype=float)
    alpha = flexural_alpha(flexure, normal_gravity)
    t1 = MGAL_PER_MS2 * TWO_PI * NEWTON_G * earth_curvature(f, spherical)
    t2 = np.exp(-TWO_PI * f * z_level) - np.exp(-TWO_PI * f * moho_m) / (1.0 + alpha * f**4)
    return t1 * flexure.rho_cw * t2


def load_from_below_faa(
    freq: np.ndarray,
    flexure: FlexureConfig,
    *,
    z_level: float,
    moho_m: float,
    swell_m: float,
    normal_gravity: float,
    spherical: bool = False,
) -> np.ndarray:
    r"""
    McNutt & Shure (1986) admittance for a load applied beneath the plate (mGal/m):

        Z(f) = 2πG · [ Δρ_cw e^{-2πf z} + Δρ_mc e^{-2πf zm}
                       − (Δρ_mw + Δρ_mc α f⁴) e^{-2πf zl} ]
    """
    f = np.asarray(freq, dtype=float)
    alpha = flexural_alpha(flexure, normal_gravity)
    t1 = MGAL_PER_MS2 * TWO_PI * NEWTON_G * earth_curvature(f, spherical)
    t2 = flexure.rho_cw * np.exp(-TWO_PI * f * z_level) + flexure.rho_mc * np.exp(-TWO_PI * f * moho_m)
    t3 = -(flexure.rho_mw + flexure.rho_mc * alpha * f**4) * np.exp(-TWO_PI * f * swell_m)
    return t1 * (t2 + t3)


def faa_to_geoid(z_faa: np.ndarray, freq: np.ndarray, g45_mgal: float) -> np.ndarray:
    """Geoid admittance (m/m) from the FAA one: divide by g·2πf."""
    freq = np.asarray(freq, dtype=float)
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.where(freq > 0.0, z_faa / (g45_mgal * TWO_PI * freq), np.nan)


def theoretical_admittance(
    direction: str,
    freq: np.ndarray,
    flexure: FlexureConfig,
    *,
    field: str,
    z_level: float,
    moho_m: float,
    swell_m: float,
    g45_mgal: float,
    spherical: bool = False,
) -> np.ndarray:
    """One admittance value per frequency for direction 'top' or 'below' and field 'faa'|'geoid'."""
    g = g45_mgal / MGAL_PER_MS2
    if direction == "top":
        z = load_from_top_faa(
            freq, flexure, z_level=z_level, moho_m=moho_m, normal_gravity=g, spherical=spherical
        )
    elif direction == "below":
        z = load_from_below_faa(
            freq,
            flexure,
            z_level=z_level,
            moho_m=moho_m,
            swell_m=swell_m,
            normal_gravity=g,
            spherical=spherical,
        )
    else:
        raise ValueError(f"Unknown load direction {direction!r}; expected 'top' or 'below'")
    if field == "faa":
        return z
    if field == "geoid":
        return faa_to_geoid(z, freq, g45_mgal)
    raise ValueError("Theoretical admittances are only defined for FAA or geoid")


def radial_frequencies(delta_k: float, n_bins: int) -> np.ndarray:
    """Bin-centre frequencies (1/m) for bins 1..n_bins of angular spacing Δk."""
    return np.arange(1, n_bins + 1, dtype=float) * (delta_k / TWO_PI)
