from __future__ import annotations

import logging
from typing import Literal

import numpy as np
import xarray as xr

from gravfft_app.domain.constants import METERS_PER_DEGREE
from gravfft_app.domain.errors import GridMismatchError

logger = logging.getLogger(__name__)

GRID_DIMS = ("y", "x")


def as_grid(obj: object, name: str = "grid") -> xr.DataArray:
    """Validate the grid container: a 2-D DataArray with ascending x/y coordinates."""
    if not isinstance(obj, xr.DataArray):
        raise TypeError(f"{name} must be an xarray.DataArray, got {type(obj).__name__}")
    if obj.dims != GRID_DIMS:
        raise ValueError(f"{name} must have dims {GRID_DIMS}, got {obj.dims}")
    for dim in GRID_DIMS:
        c = np.asarray(obj[dim].values, dtype=float)
        if c.size < 2:
            raise ValueError(f"{name} needs at least 2 samples along {dim!r}")
        if not np.all(np.diff(c) > 0):
            raise ValueError(f"{name} coordinate {dim!r} must be strictly increasing")
    return obj


def spacing(da: xr.DataArray) -> tuple[float, float]:
    """Cell spacing (dx, dy) in the grid's coordinate units."""
    x = np.asarray(da["x"].values, dtype=float)
    y = np.asarray(da["y"].values, dtype=float)
    return float((x[-1] - x[0]) / (x.size - 1)), float((y[-1] - y[0]) / (y.size - 1))


def spacing_m(da: xr.DataArray, *, geographic: bool = False) -> tuple[float, float]:
    """Cell spacing in metres; degrees are converted with a flat-earth approximation."""
    dx, dy = spacing(da)
    if not geographic:
        return dx, dy
    y = np.asarray(da["y"].values, dtype=float)
    mid_lat = np.deg2rad(0.5 * (y[0] + y[-1]))
    return dx * METERS_PER_DEGREE * float(np.cos(mid_lat)), dy * METERS_PER_DEGREE


def check_coregistered(a: xr.DataArray, b: xr.DataArray, what: str, rtol: float = 1e-9) -> None:
    """Raise GridMismatchError unless both grids share shape, spacing and coordinates."""
    if a.shape != b.shape:
        raise GridMismatchError(what, f"shapes {a.shape} vs {b.shape}")
    for dim in GRID_DIMS:
        ca = np.asarray(a[dim].values, dtype=float)
        cb = np.asarray(b[dim].values, dtype=float)
        step = abs(float(ca[1] - ca[0]))
        if not np.allclose(ca, cb, rtol=rtol, atol=rtol * step):
            raise GridMismatchError(what, f"coordinate {dim!r} differs")


def replace_nans(
    values: np.ndarray, *, fill: Literal["zero", "min"] = "zero"
) -> tuple[np.ndarray, int]:
    """Return (copy without NaNs, number replaced).

    fill='zero' for topography/anomaly grids; 'min' substitutes the grid minimum (densities).
    """
    z = np.array(values, dtype=float, copy=True)
    bad = ~np.isfinite(z)
    n_bad = int(bad.sum())
    if n_bad:
        if fill == "min":
            good = z[~bad]
            z[bad] = float(good.min()) if good.size else 0.0
        else:
            z[bad] = 0.0
    return z, n_bad


def clean_grid(
    da: xr.DataArray, label: str, nan_log: dict[str, int], *, fill: Literal["zero", "min"] = "zero"
) -> np.ndarray:
    """NaN-free float copy of a grid's samples; records the substitution count under `label`."""
    values, n_bad = replace_nans(da.values, fill=fill)
    if n_bad:
        what = "the minimum value %g" % float(values.min()) if fill == "min" else "0"
        logger.info("Grid %s had %d NaNs; these have been replaced with %s", label, n_bad, what)
    nan_log[label] = n_bad
    return values


def shift_observation_level(values: np.ndarray, water_depth_m: float) -> np.ndarray:
    """Refer topography to a new observation level (new array)."""
    if water_depth_m:
        logger.info("Remove %g m from topography grid", water_depth_m)
        return values - water_depth_m
    return values


def like_grid(values: np.ndarray, template: xr.DataArray, **attrs: object) -> xr.DataArray:
    """Wrap samples in a DataArray with the template's coordinates and the given attrs."""
    return xr.DataArray(
        values,
        dims=GRID_DIMS,
        coords={"y": template["y"].values, "x": template["x"].values},
        attrs=dict(attrs),
    )
