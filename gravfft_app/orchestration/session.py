from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from gravfft_app.adapters.registry import make_engine
from gravfft_app.domain.models import (
    AdmittanceConfig,
    AdmittanceRequest,
    AdmittanceResult,
    DensityConfig,
    DepthConfig,
    FieldConfig,
    FlexureConfig,
    ForwardRequest,
    ForwardResult,
    ModelConfig,
    NumericsConfig,
    TheoreticalRequest,
)

__all__ = [
    "GravitySession",
    "default_config",
    "init_session",
    "update_flexure",
    "update_depths",
    "update_field",
    "update_numerics",
    "update_admittance",
    "set_mode",
    "build_forward_request",
    "build_admittance_request",
    "build_theoretical_request",
    "run_forward",
    "run_admittance",
    "run_theoretical",
]


@dataclass
class GravitySession:
    """
    Runtime container passed between callers, orchestration and engines.

    `config` is the validated ModelConfig; the last request/result are kept for
    exporting and report generation.
    """

    config: ModelConfig
    last_request: Any | None = None
    last_result: ForwardResult | AdmittanceResult | None = None


# -------------------------
# Session lifecycle helpers
# -------------------------


def default_config() -> ModelConfig:
    """
    Plain Parker run of a seafloor grid: 2670 kg/m³ crust against 1030 kg/m³ water,
    three terms, mid value removed. Flexure parameters are filled so that switching
    to an isostatic mode only needs the depths.
    """
    flexure = FlexureConfig(
        te_m=10_000.0,
        rho_load=2670.0,
        rho_mantle=3300.0,
        rho_water=1030.0,
    )
    return ModelConfig(
        mode="parker",
        field=FieldConfig(field="faa"),
        density=DensityConfig(rho=1640.0),
        flexure=flexure,
        depths=DepthConfig(),
        numerics=NumericsConfig(n_terms=3, trend="mid"),
        admittance=AdmittanceConfig(),
    )


def init_session(config: ModelConfig | None = None) -> GravitySession:
    """Create a fresh session (defaults unless a config is given)."""
    return GravitySession(config=config or default_config())


def _replace(session: GravitySession, section: str, **kwargs: Any) -> GravitySession:
    """Re-validate the whole bundle after updating one section; unknown keys are ignored."""
    current = getattr(session.config, section)
    allowed = set(type(current).model_fields)
    updates = {k: v for k, v in kwargs.items() if k in allowed}
    if updates:
        data = session.config.model_dump()
        data[section] = {**current.model_dump(), **updates}
        session.config = ModelConfig.model_validate(data)
    return session


def update_flexure(session: GravitySession, **kwargs: Any) -> GravitySession:
    """
    Update flexure parameters.

    Allowed keys: {"te_m","rho_load","rho_mantle","rho_water","rho_infill"}.
    """
    if session.config.flexure is None:
        data = session.config.model_dump()
        data["flexure"] = kwargs
        session.config = ModelConfig.model_validate(data)
        return session
    return _replace(session, "flexure", **kwargs)


def update_depths(session: GravitySession, **kwargs: Any) -> GravitySession:
    """Allowed keys: {"moho_m","swell_m","water_depth_m"} (numbers or "5k" strings)."""
    return _replace(session, "depths", **kwargs)


def update_field(session: GravitySession, **kwargs: Any) -> GravitySession:
    """Allowed keys: {"field","adjust","g45_mgal"}."""
    return _replace(session, "field", **kwargs)


def update_numerics(session: GravitySession, **kwargs: Any) -> GravitySession:
    return _replace(session, "numerics", **kwargs)


def update_admittance(session: GravitySession, **kwargs: Any) -> GravitySession:
    return _replace(session, "admittance", **kwargs)


def set_mode(session: GravitySession, mode: str) -> GravitySession:
    data = session.config.model_dump()
    data["mode"] = mode
    session.config = ModelConfig.model_validate(data)
    return session


# -------------------------
# Requests and runs
# -------------------------


def build_forward_request(
    session: GravitySession, topography: Any, density: Any | None = None
) -> ForwardRequest:
    return ForwardRequest(config=session.config, topography=topography, density=density)


def build_admittance_request(
    session: GravitySession, topography: Any, observed: Any
) -> AdmittanceRequest:
    return AdmittanceRequest(config=session.config, topography=topography, observed=observed)


def build_theoretical_request(
    session: GravitySession, *, n_points: int, spacing_m: float | str, mean_depth_m: float | str = 0.0
) -> TheoreticalRequest:
    return TheoreticalRequest(
        config=session.config, n_points=n_points, spacing_m=spacing_m, mean_depth_m=mean_depth_m
    )


def _run(session: GravitySession, engine: str, request: Any, **engine_kwargs: Any) -> Any:
    result = make_engine(engine, **engine_kwargs).run(request)
    session.last_request = request
    session.last_result = result
    return result


def run_forward(
    session: GravitySession, topography: Any, density: Any | None = None, **engine_kwargs: Any
) -> ForwardResult:
    """Grid → predicted field grid."""
    req = build_forward_request(session, topography, density)
    return _run(session, "Parker forward", req, **engine_kwargs)


def run_admittance(
    session: GravitySession, topography: Any, observed: Any, **engine_kwargs: Any
) -> AdmittanceResult:
    """Grid, grid → admittance or coherence table."""
    req = build_admittance_request(session, topography, observed)
    return _run(session, "Cross-spectral", req, **engine_kwargs)


def run_theoretical(
    session: GravitySession, *, n_points: int, spacing_m: float | str, mean_depth_m: float | str = 0.0
) -> AdmittanceResult:
    """Data-free theoretical admittance curve."""
    req = build_theoretical_request(
        session, n_points=n_points, spacing_m=spacing_m, mean_depth_m=mean_depth_m
    )
    return _run(session, "Theoretical admittance", req)
