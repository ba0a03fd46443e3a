from __future__ import annotations

import logging
from dataclasses import dataclass
from math import ceil, log

import numpy as np

from gravfft_app.adapters.fft_numpy.wavenumber import WavenumberGrid
from gravfft_app.domain.ports import SpectralTransform

logger = logging.getLogger(__name__)


def smooth7(n: int) -> int:
    """Smallest 7-smooth integer (prime factors ≤ 7) that is ≥ n."""
    if n <= 1:
        return 1
    best = 2 ** int(ceil(log(n, 2)))
    p7 = 1
    while p7 < 2 * n:
        p5 = p7
        while p5 < 2 * n:
            p3 = p5
            while p3 < 2 * n:
                z = p3
                while z < n:
                    z *= 2
                best = min(best, z)
                p3 *= 3
            p5 *= 5
        p7 *= 7
    return best


def remove_trend(values: np.ndarray, mode: str) -> tuple[np.ndarray, float]:
    """Return (detrended copy, removed level).

    mode: 'none' | 'mean' | 'mid' (half-way between min and max) | 'plane' (least squares).
    For a plane the reported level is its value at the grid centre.
    """
    z = np.asarray(values, dtype=float)
    if mode == "none":
        return z.copy(), 0.0
    if mode == "mean":
        level = float(z.mean())
        return z - level, level
    if mode == "mid":
        level = 0.5 * float(z.min() + z.max())
        return z - level, level
    if mode == "plane":
        ny, nx = z.shape
        # normalized coordinates in [-1, 1] so the intercept is the centre value
        u = np.linspace(-1.0, 1.0, nx) if nx > 1 else np.zeros(1)
        v = np.linspace(-1.0, 1.0, ny) if ny > 1 else np.zeros(1)
        U, V = np.meshgrid(u, v)
        A = np.column_stack([np.ones(z.size), U.ravel(), V.ravel()])
        coeff, *_ = np.linalg.lstsq(A, z.ravel(), rcond=None)
        plane = (A @ coeff).reshape(z.shape)
        return z - plane, float(coeff[0])
    raise ValueError(f"Unknown trend mode {mode!r}")


def _ramp(first: np.ndarray, last: np.ndarray, gap: int) -> np.ndarray:
    """Linear values stepping from `last` back to `first` across `gap` cells (wrap-around)."""
    t = np.arange(1, gap + 1, dtype=float) / (gap + 1)
    return last[:, None] + (first - last)[:, None] * t[None, :]


def expand_periodic(values: np.ndarray, shape: tuple[int, int]) -> tuple[np.ndarray, int, int]:
    """Centre `values` in an array of `shape`; fill the margin so the lattice is periodic.

    Each row (then each column) is continued past its last sample by a linear ramp that
    reaches its first sample after wrapping. Returns (expanded, row_offset, col_offset).
    """
    ny, nx = values.shape
    Ny, Nx = shape
    oy, ox = (Ny - ny) // 2, (Nx - nx) // 2
    out = np.zeros(shape, dtype=float)
    out[oy : oy + ny, ox : ox + nx] = values

    gx = Nx - nx
    if gx:
        rows = slice(oy, oy + ny)
        ramp = _ramp(values[:, 0], values[:, -1], gx)
        right = Nx - (ox + nx)
        out[rows, ox + nx :] = ramp[:, :right]
        out[rows, :ox] = ramp[:, right:]
    gy = Ny - ny
    if gy:
        ramp = _ramp(out[oy, :], out[oy + ny - 1, :], gy).T
        top = Ny - (oy + ny)
        out[oy + ny :, :] = ramp[:top, :]
        out[:oy, :] = ramp[top:, :]
    return out, oy, ox


@dataclass(frozen=True)
class PreparedGrid:
    """Detrended, possibly padded lattice ready for the transform."""

    values: np.ndarray  # (ny2, nx2) real
    level: float  # removed trend level (signed)
    wavenumbers: WavenumberGrid
    row0: int
    col0: int
    n_rows: int
    n_columns: int

    @property
    def z_level(self) -> float:
        """Absolute removed level, used for upward continuation."""
        return abs(self.level)

    def interior(self, lattice: np.ndarray) -> np.ndarray:
        """Extract the unpadded (n_rows, n_columns) block from a padded lattice."""
        return lattice[self.row0 : self.row0 + self.n_rows, self.col0 : self.col0 + self.n_columns]

    def embed(self, values: np.ndarray) -> np.ndarray:
        """Place an undetrended companion grid (e.g. densities) on the same padded lattice."""
        if values.shape != (self.n_rows, self.n_columns):
            raise ValueError(f"companion grid shape {values.shape} != {(self.n_rows, self.n_columns)}")
        if self.wavenumbers.shape == values.shape:
            return np.asarray(values, dtype=float).copy()
        out, _, _ = expand_periodic(np.asarray(values, dtype=float), self.wavenumbers.shape)
        return out


class NumpyTransform(SpectralTransform):
    """numpy.fft implementation of the transform collaborator.

    padding='none' keeps the lattice as is (nx2 = n_columns); 'smooth7' grows each axis to the
    next 7-smooth size with at least a 10% margin filled periodically.
    """

    def __init__(self, padding: str = "none") -> None:
        if padding not in ("none", "smooth7"):
            raise ValueError(f"Unknown padding {padding!r}")
        self.padding = padding

    def padded_shape(self, shape: tuple[int, int]) -> tuple[int, int]:
        if self.padding == "none":
            return shape
        return tuple(smooth7(n + 2 * max(1, ceil(0.1 * n))) for n in shape)  # type: ignore[return-value]

    def prepare(self, values: np.ndarray, dx: float, dy: float, *, trend: str = "mid") -> PreparedGrid:
        z = np.asarray(values, dtype=float)
        if z.ndim != 2:
            raise ValueError("grid must be 2-D")
        detrended, level = remove_trend(z, trend)
        shape = self.padded_shape(z.shape)
        if shape == z.shape:
            padded, row0, col0 = detrended, 0, 0
        else:
            padded, row0, col0 = expand_periodic(detrended, shape)
        logger.debug("Prepared lattice %s → %s (trend=%s, level=%g)", z.shape, shape, trend, level)
        K = WavenumberGrid(nx2=shape[1], ny2=shape[0], dx=float(dx), dy=float(dy))
        return PreparedGrid(
            values=padded,
            level=level,
            wavenumbers=K,
            row0=row0,
            col0=col0,
            n_rows=z.shape[0],
            n_columns=z.shape[1],
        )

    def forward(self, values: np.ndarray) -> np.ndarray:
        return np.fft.fft2(np.asarray(values, dtype=float))

    def inverse(self, spectrum: np.ndarray) -> np.ndarray:
        return np.fft.ifft2(spectrum).real
