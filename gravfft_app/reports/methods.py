from __future__ import annotations

from datetime import datetime, timezone
from textwrap import dedent

from gravfft_app.domain.models import AdmittanceScalars, ForwardScalars, ModelConfig

_FIELD_NAMES = {
    "faa": "free-air anomaly",
    "geoid": "geoid",
    "vgg": "vertical gravity gradient",
    "defl_east": "east deflection of the vertical",
    "defl_north": "north deflection of the vertical",
}


def methods_markdown(
    cfg: ModelConfig,
    *,
    engine: str,
    scalars: ForwardScalars | AdmittanceScalars | None = None,
) -> str:
    num = cfg.numerics
    dep = cfg.depths
    rho = "grid" if cfg.density.rho is None else f"{cfg.density.rho:.4g} kg/m³"
    md = dedent(f"""
    # Methods (Auto-generated)

    **Engine:** {engine}  
    **Parameters version:** {cfg.version}  
    **Generated:** {datetime.now(timezone.utc).isoformat()}

    ## Model
    Mode={cfg.mode}; field={_FIELD_NAMES[cfg.field.field]}; adjustment={cfg.field.adjust};
    g45={cfg.field.g45_mgal:.10g} mGal; density contrast={rho}.

    ## Depths
    Moho zm={dep.moho_m:.4g} m, swell zl={dep.swell_m:.4g} m, water depth={dep.water_depth_m:.4g} m.
    """)
    if cfg.flexure is not None:
        fl = cfg.flexure
        infill = "none" if fl.rho_infill is None else f"{fl.rho_infill:.4g} kg/m³"
        md += dedent(f"""
    ## Flexure
    Te={fl.te_m:.4g} m; ρ_load={fl.rho_load:.4g}, ρ_mantle={fl.rho_mantle:.4g}, ρ_water={fl.rho_water:.4g} kg/m³;
    infill={infill}{" (approximate solution)" if fl.approx else ""}.
    """)
    md += dedent(f"""
    ## Numerics
    Parker terms N={cfg.effective_n_terms} (requested {num.n_terms}); trend removal={num.trend};
    padding={num.padding}; geographic={num.geographic}; spherical={num.spherical}.
    """)
    adm = cfg.admittance
    if adm.direction != "none" or adm.coherence:
        kind = "coherence" if adm.coherence else "admittance"
        theory = "" if adm.direction == "none" else f", theoretical loading from {adm.direction}"
        md += f"\n**Spectral output:** {kind}{theory}.\n"
    if isinstance(scalars, ForwardScalars):
        md += f"\n**Run:** {scalars.n_terms_used} term(s), z_level={scalars.z_level:.4g} m"
        if scalars.slab_mgal is not None:
            md += f", slab={scalars.slab_mgal:.4g} mGal"
        if scalars.far_field is not None:
            md += f", far-field shift={scalars.far_field:.4g} mGal"
        if scalars.airy_scale is not None:
            md += f", Airy scale={scalars.airy_scale:.4g}"
        md += ".\n"
    elif isinstance(scalars, AdmittanceScalars):
        md += f"\n**Run:** {scalars.kind}, {scalars.n_bins} bins, Δk={scalars.delta_k:.4g} rad/m.\n"
    if scalars is not None and any(scalars.nan_replaced.values()):
        counts = ", ".join(f"{k}={v}" for k, v in scalars.nan_replaced.items())
        md += f"\n**NaNs replaced:** {counts}.\n"
    return md.strip() + "\n"
