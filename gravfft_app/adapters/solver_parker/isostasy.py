from __future__ import annotations

import logging
from dataclasses import dataclass
from math import sqrt
from typing import Union

import numpy as np

from gravfft_app.adapters.fft_numpy.wavenumber import WavenumberGrid
from gravfft_app.domain.constants import POISSONS_RATIO, YOUNGS_MODULUS
from gravfft_app.domain.models import FlexureConfig

logger = logging.getLogger(__name__)


def flexural_rigidity(te_m: float) -> float:
    """D = E·Te³ / (12(1-ν²))."""
    return YOUNGS_MODULUS * te_m**3 / (12.0 * (1.0 - POISSONS_RATIO**2))


def te_from_rigidity(rigidity: float) -> float:
    return (12.0 * (1.0 - POISSONS_RATIO**2) * rigidity / YOUNGS_MODULUS) ** (1.0 / 3.0)


@dataclass(frozen=True)
class FlexureFiltered:
    """Spectrum of the compensating-interface deflection."""

    spectrum: np.ndarray


@dataclass(frozen=True)
class AiryScale:
    """Te = 0: the deflection is the load scaled by a wavenumber-independent factor."""

    factor: float


IsostaticOutcome = Union[FlexureFiltered, AiryScale]


@dataclass(frozen=True)
class IsostaticResponse:
    """Elastic-plate (or Airy) response of a compensating interface to a topographic load.

    With an infill density ρi ≠ ρl the approximate solution of Wessel (2001) is used: ρi sets the
    flexural wavelength and amplitudes, and the Airy ratio is boosted by
    A = sqrt((ρm-ρi)/(ρm-ρl)) to compensate for the lighter load.
    """

    flexure: FlexureConfig
    normal_gravity: float  # m/s²

    @property
    def load_density(self) -> float:
        f = self.flexure
        return f.rho_infill if f.approx and f.rho_infill is not None else f.rho_load

    @property
    def airy_boost(self) -> float:
        f = self.flexure
        if not f.approx or f.rho_infill is None:
            return 1.0
        return sqrt((f.rho_mantle - f.rho_infill) / (f.rho_mantle - f.rho_load))

    @property
    def airy_ratio(self) -> float:
        f = self.flexure
        rho_l = self.load_density
        return -self.airy_boost * (rho_l - f.rho_water) / (f.rho_mantle - rho_l)

    @property
    def restoring(self) -> float:
        """D / ((ρm-ρl)·g), the k⁴ coefficient of the plate response (m⁴)."""
        rho_l = self.load_density
        return flexural_rigidity(self.flexure.te_m) / ((self.flexure.rho_mantle - rho_l) * self.normal_gravity)

    def transfer(self, mk: np.ndarray) -> np.ndarray:
        """T(k) = airy_ratio / (restoring·k⁴ + 1)."""
        mk = np.asarray(mk, dtype=float)
        return self.airy_ratio / (self.restoring * mk**4 + 1.0)

    def apply(self, spectrum: np.ndarray, K: WavenumberGrid) -> IsostaticOutcome:
        f = self.flexure
        if f.approx:
            way = "<" if (f.rho_infill or 0.0) < f.rho_load else ">"
            logger.info(
                "Approximate FFT-solution to flexure since rho_i (%g) %s rho_l (%g)",
                f.rho_infill,
                way,
                f.rho_load,
            )
        logger.debug(
            "Using effective load density rho_l = %g and Airy boost factor A = %g",
            self.load_density,
            self.airy_boost,
        )
        if f.te_m == 0.0:
            return AiryScale(factor=self.airy_ratio)
        return FlexureFiltered(spectrum=spectrum * self.transfer(K.magnitude()))
