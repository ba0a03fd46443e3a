from __future__ import annotations

from math import pi

import numpy as np
import pytest
from pydantic import ValidationError

from gravfft_app.adapters.solver_admittance.engine import (
    CrossSpectralEngine,
    TheoreticalAdmittanceEngine,
)
from gravfft_app.adapters.solver_admittance.theory import theoretical_admittance
from gravfft_app.adapters.solver_parker.engine import ParkerForwardEngine
from gravfft_app.domain.errors import GridMismatchError
from gravfft_app.domain.models import AdmittanceRequest, ForwardRequest, TheoreticalRequest


def _estimate(cfg, topography, observed):
    return CrossSpectralEngine().run(
        AdmittanceRequest(config=cfg, topography=topography, observed=observed)
    )


def test_identical_grids(random_grid, config_factory) -> None:
    res = _estimate(config_factory(), random_grid, random_grid)
    ds = res.data
    assert res.scalars.kind == "admittance"
    assert res.scalars.n_bins == 16 and ds.sizes["bin"] == 16
    populated = ds["n_samples"].values > 0
    assert np.allclose(ds["admittance"].values[populated], 1.0)
    assert np.allclose(ds["error"].values[populated], 0.0)
    assert "theoretical" not in ds
    assert ds.attrs["axis"] == "frequency"
    assert np.isclose(ds["frequency"].values[0], 1.0 / 32_000.0)


def test_identical_grids_coherence(random_grid, config_factory) -> None:
    res = _estimate(config_factory(admittance={"coherence": True}), random_grid, random_grid)
    assert res.scalars.kind == "coherence"
    assert np.allclose(res.data["coherence"].values, 1.0)
    assert np.allclose(res.data["error"].values, 0.0)


def test_gravity_of_topography_is_coherent(random_grid, config_factory) -> None:
    cfg = config_factory(density={"rho": 1640.0}, numerics={"n_terms": 1})
    gravity = ParkerForwardEngine().run(ForwardRequest(config=cfg, topography=random_grid)).data
    coh = _estimate(config_factory(admittance={"coherence": True}), random_grid, gravity)
    # the upward-continuation filter varies slightly across each bin
    assert np.all(coh.data["coherence"].values > 0.99)


def test_wavelength_in_km(random_grid, config_factory) -> None:
    cfg = config_factory(admittance={"wavelength": True, "km": True})
    ds = _estimate(cfg, random_grid, random_grid).data
    assert ds.attrs["axis"] == "wavelength" and ds.attrs["axis_units"] == "km"
    assert np.isclose(ds["wavelength"].values[0], 32.0)
    assert np.all(np.diff(ds["wavelength"].values) < 0)


def test_theoretical_column(random_grid, config_factory, flexure_params) -> None:
    cfg = config_factory(
        flexure=flexure_params,
        depths={"moho_m": 12_000.0},
        admittance={"from_top": True},
    )
    res = _estimate(cfg, random_grid, random_grid)
    ds = res.data
    freq = np.arange(1, 17) / 32_000.0
    expected = theoretical_admittance(
        "top",
        freq,
        cfg.flexure,
        field="faa",
        z_level=res.scalars.z_level,
        moho_m=12_000.0,
        swell_m=0.0,
        g45_mgal=cfg.field.g45_mgal,
    )
    assert np.allclose(ds["theoretical"].values, expected)
    assert ds.attrs["direction"] == "top"


def test_nan_and_mismatch(random_grid, grid_factory, config_factory) -> None:
    observed = random_grid.copy()
    observed[0, 0] = np.nan
    res = _estimate(config_factory(), random_grid, observed)
    assert res.scalars.nan_replaced == {"topography": 0, "observed": 1}
    with pytest.raises(GridMismatchError):
        _estimate(config_factory(), random_grid, grid_factory(np.zeros((32, 31))))


def test_theoretical_engine(config_factory, flexure_params) -> None:
    cfg = config_factory(
        flexure=flexure_params,
        depths={"moho_m": 10_000.0, "swell_m": 40_000.0},
        admittance={"from_below": True},
    )
    req = TheoreticalRequest(config=cfg, n_points=100, spacing_m="1k", mean_depth_m=4000.0)
    res = TheoreticalAdmittanceEngine().run(req)
    ds = res.data
    assert res.scalars.kind == "theoretical" and res.scalars.n_bins == 100
    assert np.isclose(res.scalars.delta_k, 2 * pi / 100_000.0)
    freq = ds["frequency"].values
    assert np.allclose(freq, np.arange(1, 101) / 100_000.0)
    expected = theoretical_admittance(
        "below",
        freq,
        cfg.flexure,
        field="faa",
        z_level=4000.0,
        moho_m=10_000.0,
        swell_m=40_000.0,
        g45_mgal=cfg.field.g45_mgal,
    )
    assert np.allclose(ds["theoretical"].values, expected)


def test_theoretical_request_needs_direction(config_factory, flexure_params) -> None:
    with pytest.raises(ValidationError):
        TheoreticalRequest(
            config=config_factory(flexure=flexure_params), n_points=10, spacing_m=1000.0
        )


def test_km_also_rescales_frequencies(random_grid, config_factory) -> None:
    ds = _estimate(config_factory(admittance={"km": True}), random_grid, random_grid).data
    assert ds.attrs["axis"] == "frequency" and ds.attrs["axis_units"] == "1/km"
    assert np.isclose(ds["frequency"].values[0], 1.0 / 32.0)
