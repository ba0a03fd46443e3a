from __future__ import annotations

from typing import Any

import pytest
from pydantic import ValidationError

from gravfft_app.domain.models import ModelConfig, parse_length_m
from gravfft_app.orchestration.session import default_config


def test_default_config_is_valid() -> None:
    """
    default_config() must return a fully-populated Pydantic v2 root (ModelConfig)
    with the expected top-level sections present.
    """
    cfg: ModelConfig = default_config()
    assert isinstance(cfg, ModelConfig)

    dumped: dict[str, Any] = cfg.model_dump()
    for key in ("field", "density", "flexure", "depths", "numerics", "admittance"):
        assert key in dumped, f"missing required section: {key}"
    assert cfg.numerics.n_terms == 3 and cfg.effective_n_terms == 3


def test_model_copy_leaves_original_untouched() -> None:
    cfg = default_config()
    new_depths = cfg.depths.model_copy(update={"moho_m": 12_000.0})
    assert new_depths.moho_m == 12_000.0
    assert cfg.depths.moho_m == 0.0


def test_length_suffixes() -> None:
    assert parse_length_m("5k") == 5000.0
    assert parse_length_m("250m") == 250.0
    assert parse_length_m(" 7 ") == 7.0
    assert parse_length_m(3) == 3
    cfg = ModelConfig.model_validate({"depths": {"moho_m": "10k", "water_depth_m": "3.5k"}})
    assert cfg.depths.moho_m == 10_000.0 and cfg.depths.water_depth_m == 3500.0


def test_derived_density_contrasts(flexure_params) -> None:
    cfg = ModelConfig.model_validate({"flexure": flexure_params})
    assert cfg.flexure is not None
    assert cfg.flexure.rho_cw == 1640.0
    assert cfg.flexure.rho_mc == 630.0
    assert cfg.flexure.rho_mw == 2270.0
    assert not cfg.flexure.approx


@pytest.mark.parametrize(
    "sections",
    [
        {"numerics": {"n_terms": 0}},
        {"numerics": {"n_terms": 11}},
        {"admittance": {"from_top": True, "from_below": True}},
        {"field": {"field": "geoid", "adjust": "slab"}},
        {"mode": "flexure"},
        {"mode": "moho", "flexure": "FLEX"},
        {"mode": "load_from_below", "flexure": "FLEX", "depths": {"moho_m": 10_000.0}},
        {"admittance": {"from_top": True}},
        {"admittance": {"from_top": True}, "flexure": "FLEX"},
        {
            "admittance": {"from_top": True},
            "flexure": "FLEX",
            "depths": {"moho_m": 1.0},
            "field": {"field": "vgg"},
        },
        {"depths": {"water_depth_m": -1.0}},
        {"mode": "flexure", "flexure": {"te_m": 0.0, "rho_load": 3300.0, "rho_mantle": 3300.0}},
        {"mode": "flexure", "flexure": {"te_m": 0.0, "rho_load": 3400.0, "rho_mantle": 3300.0}},
        {
            "mode": "flexure",
            "flexure": {"te_m": 0.0, "rho_load": 2670.0, "rho_mantle": 3300.0, "rho_infill": 3300.0},
        },
    ],
)
def test_invalid_combinations_rejected(sections: dict[str, Any], flexure_params) -> None:
    data = {k: (flexure_params if v == "FLEX" else v) for k, v in sections.items()}
    with pytest.raises(ValidationError):
        ModelConfig.model_validate(data)


def test_single_term_modes(flexure_params) -> None:
    cfg = ModelConfig.model_validate(
        {"mode": "load_from_top", "flexure": flexure_params, "depths": {"moho_m": 10_000.0}}
    )
    assert cfg.numerics.n_terms == 3
    assert cfg.effective_n_terms == 1


def test_admittance_direction() -> None:
    assert ModelConfig().admittance.direction == "none"
    cfg = ModelConfig.model_validate(
        {
            "flexure": {"te_m": 0.0, "rho_load": 2670.0, "rho_mantle": 3300.0},
            "depths": {"moho_m": 10_000.0, "swell_m": 30_000.0},
            "admittance": {"from_below": True},
        }
    )
    assert cfg.admittance.direction == "below"


def test_density_contrast_unset_by_default() -> None:
    assert ModelConfig().density.rho is None
    assert ModelConfig.model_validate({"density": {"rho": 0.0}}).density.rho == 0.0
