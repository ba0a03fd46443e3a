from __future__ import annotations

from dataclasses import dataclass
from math import pi

import numpy as np


@dataclass(frozen=True)
class WavenumberGrid:
    """Discrete-frequency → physical-wavenumber mapping for a padded (ny2, nx2) lattice.

    Wavenumbers are angular (rad/m): kx = 2π·fftfreq(nx2, dx), ky = 2π·fftfreq(ny2, dy),
    with rows running south → north so ky is positive northwards. Flat indices follow the
    row-major layout of the spectrum (index = row * nx2 + col).
    """

    nx2: int
    ny2: int
    dx: float
    dy: float

    def __post_init__(self) -> None:
        if self.nx2 < 1 or self.ny2 < 1:
            raise ValueError("lattice dimensions must be positive")
        if self.dx <= 0.0 or self.dy <= 0.0:
            raise ValueError("grid spacing must be positive")

    @property
    def shape(self) -> tuple[int, int]:
        return (self.ny2, self.nx2)

    @property
    def delta_kx(self) -> float:
        return 2.0 * pi / (self.nx2 * self.dx)

    @property
    def delta_ky(self) -> float:
        return 2.0 * pi / (self.ny2 * self.dy)

    def kx(self) -> np.ndarray:
        """(ny2, nx2) signed x-wavenumbers."""
        k = 2.0 * pi * np.fft.fftfreq(self.nx2, d=self.dx)
        return np.broadcast_to(k[None, :], self.shape)

    def ky(self) -> np.ndarray:
        """(ny2, nx2) signed y-wavenumbers."""
        k = 2.0 * pi * np.fft.fftfreq(self.ny2, d=self.dy)
        return np.broadcast_to(k[:, None], self.shape)

    def magnitude(self) -> np.ndarray:
        """(ny2, nx2) radial wavenumber |k|."""
        return np.hypot(self.kx(), self.ky())

    # --- flat-index access ---------------------------------------------------
    def _row_col(self, index: int) -> tuple[int, int]:
        if not 0 <= index < self.nx2 * self.ny2:
            raise IndexError(f"spectral index {index} outside lattice {self.shape}")
        return divmod(int(index), self.nx2)

    def components_at(self, index: int) -> tuple[float, float]:
        row, col = self._row_col(index)
        jx = col if col <= self.nx2 // 2 else col - self.nx2
        jy = row if row <= self.ny2 // 2 else row - self.ny2
        # fftfreq puts the even-length Nyquist on the negative side
        if self.nx2 % 2 == 0 and col == self.nx2 // 2:
            jx = -jx
        if self.ny2 % 2 == 0 and row == self.ny2 // 2:
            jy = -jy
        return jx * self.delta_kx, jy * self.delta_ky

    def wave_at(self, index: int) -> float:
        """Wavenumber magnitude |k| of a flat spectral index."""
        kx, ky = self.components_at(index)
        return float(np.hypot(kx, ky))

    # --- radial binning layout ----------------------------------------------
    def radial_layout(self) -> tuple[float, int]:
        """(Δk, n_bins): the finer axis spacing and half the padded size of that axis.

        On a non-square lattice the bin count follows the finer-spacing axis, not the
        shorter one: a 64×32 lattice with equal dx, dy gives 32 bins of width 2π/(64·dx).
        """
        if self.delta_kx < self.delta_ky:
            return self.delta_kx, self.nx2 // 2
        return self.delta_ky, self.ny2 // 2
