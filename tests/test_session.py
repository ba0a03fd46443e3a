from __future__ import annotations

import numpy as np
import pytest
from pydantic import ValidationError

from gravfft_app.domain.models import AdmittanceResult, ForwardResult
from gravfft_app.orchestration.session import (
    init_session,
    run_admittance,
    run_forward,
    run_theoretical,
    set_mode,
    update_admittance,
    update_depths,
    update_field,
    update_flexure,
    update_numerics,
)


def test_updates_revalidate_and_ignore_unknown_keys() -> None:
    s = init_session()
    update_depths(s, moho_m="12k", colour="red")
    assert s.config.depths.moho_m == 12_000.0
    update_flexure(s, te_m=25_000.0)
    assert s.config.flexure is not None and s.config.flexure.te_m == 25_000.0
    update_numerics(s, n_terms=5)
    assert s.config.numerics.n_terms == 5
    with pytest.raises(ValidationError):
        update_field(s, field="geoid", adjust="zero")


def test_set_mode_checks_requirements() -> None:
    s = init_session()
    with pytest.raises(ValidationError):
        set_mode(s, "moho")
    update_depths(s, moho_m=20_000.0)
    set_mode(s, "moho")
    assert s.config.mode == "moho"


def test_run_forward_records_last_result(random_grid) -> None:
    s = init_session()
    res = run_forward(s, random_grid)
    assert isinstance(res, ForwardResult)
    assert s.last_result is res
    assert res.data.shape == random_grid.shape
    assert res.scalars.n_terms_used == 3


def test_run_admittance_and_theoretical(random_grid) -> None:
    s = init_session()
    update_depths(s, moho_m=10_000.0)
    update_admittance(s, from_top=True)
    res = run_admittance(s, random_grid, random_grid)
    assert isinstance(res, AdmittanceResult)
    assert {"admittance", "error", "n_samples", "theoretical"} <= set(res.data.data_vars)

    curve = run_theoretical(s, n_points=50, spacing_m="2k")
    assert curve.data.sizes["bin"] == 50
    assert np.all(np.isfinite(curve.data["theoretical"].values))
    assert s.last_result is curve
