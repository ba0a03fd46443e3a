from __future__ import annotations

from typing import Any, Callable

import numpy as np
import pytest
import xarray as xr

from gravfft_app.domain.models import ModelConfig
from gravfft_app.orchestration.session import default_config

GridFactory = Callable[..., xr.DataArray]

FLEXURE = {"te_m": 10_000.0, "rho_load": 2670.0, "rho_mantle": 3300.0, "rho_water": 1030.0}


def _make_grid(
    values: Any, dx: float = 1000.0, dy: float | None = None, x0: float = 0.0, y0: float = 0.0
) -> xr.DataArray:
    z = np.asarray(values, dtype=float)
    ny, nx = z.shape
    dy = dx if dy is None else dy
    return xr.DataArray(
        z,
        dims=("y", "x"),
        coords={"y": y0 + dy * np.arange(ny), "x": x0 + dx * np.arange(nx)},
    )


@pytest.fixture(scope="session")
def grid_factory() -> GridFactory:
    """Build a (y, x) DataArray from a 2-D array; spacing in metres."""
    return _make_grid


@pytest.fixture(scope="session")
def flat_grid() -> xr.DataArray:
    """3×3 topography at 1000 m."""
    return _make_grid(np.full((3, 3), 1000.0))


@pytest.fixture(scope="session")
def random_grid() -> xr.DataArray:
    """32×32 seeded random topography (m) with 1 km spacing."""
    rng = np.random.default_rng(1234)
    return _make_grid(rng.normal(0.0, 500.0, size=(32, 32)))


@pytest.fixture(scope="session")
def config_factory() -> Callable[..., ModelConfig]:
    """ModelConfig from nested section dicts, e.g. config_factory(mode="moho", depths={...})."""

    def make(**sections: Any) -> ModelConfig:
        return ModelConfig.model_validate(sections)

    return make


@pytest.fixture(scope="session")
def flexure_params() -> dict[str, float]:
    return dict(FLEXURE)


@pytest.fixture()
def base_config() -> ModelConfig:
    return default_config()
