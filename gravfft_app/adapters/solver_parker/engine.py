from __future__ import annotations

import logging
from functools import partial
from math import pi
from typing import Any, Mapping, cast

import numpy as np

from gravfft_app.adapters.fft_numpy.transform import NumpyTransform, PreparedGrid
from gravfft_app.adapters.grids.prepare import (
    as_grid,
    check_coregistered,
    clean_grid,
    like_grid,
    shift_observation_level,
    spacing_m,
)
from gravfft_app.adapters.solver_admittance.theory import load_from_below_faa, load_from_top_faa
from gravfft_app.adapters.solver_parker.isostasy import AiryScale, IsostaticResponse
from gravfft_app.adapters.solver_parker.parker import (
    AdmittanceExpansion,
    ParkerExpansion,
    TermKernel,
    accumulate_term,
)
from gravfft_app.domain.constants import MGAL_PER_MS2, NEWTON_G
from gravfft_app.domain.models import (
    ISOSTATIC_MODES,
    SINGLE_TERM_MODES,
    ForwardRequest,
    ForwardResult,
    ForwardScalars,
    ModelConfig,
)
from gravfft_app.domain.errors import MissingParameterError
from gravfft_app.domain.ports import ForwardEngine, SpectralTransform

logger = logging.getLogger(__name__)

FIELD_LABELS: dict[str, tuple[str, str]] = {
    "faa": ("Gravity anomalies", "mGal"),
    "geoid": ("Geoid anomalies", "meter"),
    "vgg": ("Vertical Gravity Gradient anomalies", "Eotvos"),
    "defl_east": ("Deflection of the vertical - East", "microradian"),
    "defl_north": ("Deflection of the vertical - North", "microradian"),
}


def slab_gravity(rho: float, water_depth_m: float, z_level: float) -> float:
    """Bouguer slab 2πGρ(w - z) in mGal."""
    return MGAL_PER_MS2 * 2.0 * pi * rho * NEWTON_G * (water_depth_m - z_level)


def corner_mean(values: np.ndarray) -> float:
    return 0.25 * float(values[0, 0] + values[-1, 0] + values[0, -1] + values[-1, -1])


class ParkerForwardEngine(ForwardEngine):
    """Topography → predicted gravity/geoid/VGG/deflection grid.

    Modes:
    - "parker": Parker's expansion with a constant density contrast or a density grid.
    - "flexure": the flexural (compensating) surface itself, z positive up about -zm.
    - "moho": Parker's expansion of that flexural surface at depth zm with ρ = ρm - ρl.
    - "load_from_top" / "load_from_below": field predicted through the theoretical
      McNutt & Shure admittance (single-term).
    """

    def __init__(self, transform: SpectralTransform | None = None) -> None:
        self.transform = transform

    def _transform(self, cfg: ModelConfig) -> SpectralTransform:
        return self.transform or NumpyTransform(padding=cfg.numerics.padding)

    # --- helpers -------------------------------------------------------------
    def _isostatic_surface(
        self, cfg: ModelConfig, fft: SpectralTransform, prep: PreparedGrid
    ) -> tuple[np.ndarray, float | None]:
        """Deflection of the compensating interface on the padded lattice (+ Airy scale if Te=0)."""
        assert cfg.flexure is not None
        iso = IsostaticResponse(flexure=cfg.flexure, normal_gravity=cfg.field.normal_gravity)
        logger.info("Forward FFT...")
        outcome = iso.apply(fft.forward(prep.values), prep.wavenumbers)
        if isinstance(outcome, AiryScale):
            return prep.values * outcome.factor, outcome.factor
        logger.info("Inverse FFT...")
        return fft.inverse(outcome.spectrum), None

    def _term_kernel(self, cfg: ModelConfig, prep: PreparedGrid, rho: float, z_level: float) -> TermKernel:
        field = cfg.field.field
        g45 = cfg.field.g45_mgal
        if cfg.mode in ("parker", "moho"):
            return ParkerExpansion(K=prep.wavenumbers, rho=rho, z_level=z_level, field=field, g45_mgal=g45)
        assert cfg.flexure is not None
        common = dict(
            flexure=cfg.flexure,
            z_level=z_level,
            moho_m=cfg.depths.moho_m,
            normal_gravity=cfg.field.normal_gravity,
            spherical=cfg.numerics.spherical,
        )
        if cfg.mode == "load_from_top":
            admittance = partial(load_from_top_faa, **common)
        else:
            admittance = partial(load_from_below_faa, swell_m=cfg.depths.swell_m, **common)
        return AdmittanceExpansion(K=prep.wavenumbers, admittance=admittance, field=field, g45_mgal=g45)

    # --- API -----------------------------------------------------------------
    def run(self, request: Mapping[str, Any] | ForwardRequest) -> ForwardResult:
        if isinstance(request, ForwardRequest):
            req = request
        else:
            req = ForwardRequest.model_validate(dict(cast(Mapping[str, Any], request)))
        cfg = req.config
        topo = as_grid(req.topography, "topography")
        rho_grid = as_grid(req.density, "density") if req.density is not None else None
        if rho_grid is not None:
            check_coregistered(topo, rho_grid, "surface and density")
        slab_rho = cfg.mode in SINGLE_TERM_MODES and cfg.field.adjust in ("slab", "bouguer")
        needs_rho = cfg.mode == "parker" or slab_rho
        if needs_rho and cfg.density.rho is None and rho_grid is None:
            raise MissingParameterError("density contrast (density.rho or a density grid)")

        n_requested = cfg.numerics.n_terms
        n_terms = cfg.effective_n_terms
        if n_terms != n_requested:
            logger.warning(
                "mode=%s is evaluated with a single Parker term (requested %d)", cfg.mode, n_requested
            )

        nan_log: dict[str, int] = {}
        values = clean_grid(topo, "topography", nan_log)
        values = shift_observation_level(values, cfg.depths.water_depth_m)
        rho_values = clean_grid(rho_grid, "density", nan_log, fill="min") if rho_grid is not None else None

        dx, dy = spacing_m(topo, geographic=cfg.numerics.geographic)
        fft = self._transform(cfg)
        prep = fft.prepare(values, dx, dy, trend=cfg.numerics.trend)
        z_level = prep.z_level
        logger.info("Level used for upward continuation: %g", z_level)

        rho = cfg.density.rho if cfg.density.rho is not None else 0.0
        base = prep.values
        airy_scale: float | None = None

        if cfg.mode in ISOSTATIC_MODES:
            assert cfg.flexure is not None
            base, airy_scale = self._isostatic_surface(cfg, fft, prep)
            if cfg.mode == "flexure":
                surface = prep.interior(base) - cfg.depths.moho_m
                data = like_grid(
                    surface,
                    topo,
                    title="Flexural surface",
                    z_units="meter",
                    remark=f"Te = {cfg.flexure.te_m:g} m",
                )
                scalars = ForwardScalars(
                    mode=cfg.mode,
                    field=cfg.field.field,
                    n_terms_requested=n_requested,
                    n_terms_used=0,
                    z_level=z_level,
                    nan_replaced=nan_log,
                    airy_scale=airy_scale,
                    notes="flexural surface",
                )
                return ForwardResult(data=data, scalars=scalars)
            z_level = cfg.depths.moho_m
            rho = cfg.flexure.rho_mc

        weights = prep.embed(rho_values) if rho_values is not None else None
        if weights is not None:
            rho = 1.0  # density enters through the raised terms
        kernel = self._term_kernel(cfg, prep, rho, z_level)

        acc = np.zeros(prep.wavenumbers.shape, dtype=np.complex128)
        for n in range(1, n_terms + 1):
            logger.info("Evaluating Parker for term = %d", n)
            raised = base if n == 1 else np.power(base, n)
            if weights is not None:
                raised = raised * weights
            acc = accumulate_term(acc, fft.forward(raised), kernel.multiplier(n))

        out = prep.interior(fft.inverse(acc)).copy()

        slab: float | None = None
        far_field: float | None = None
        adjust = cfg.field.adjust
        if adjust in ("slab", "bouguer"):
            rho_slab = float(rho_values.min()) if rho_values is not None else rho
            slab = slab_gravity(rho_slab, cfg.depths.water_depth_m, z_level)
            logger.info("Add %g mGal to predicted FAA grid to account for implied slab", slab)
            out = slab - out if adjust == "bouguer" else out + slab
        elif adjust == "zero":
            far_field = corner_mean(out)
            logger.info("Subtract %g mGal from predicted FAA grid to force far-field to be zero", far_field)
            out = out - far_field

        title, units = FIELD_LABELS[cfg.field.field]
        if adjust == "bouguer":
            title = "Bouguer anomalies"
        data = like_grid(
            out, topo, title=title, z_units=units, remark=f"Parker expansion of order {n_terms}"
        )
        scalars = ForwardScalars(
            mode=cfg.mode,
            field=cfg.field.field,
            n_terms_requested=n_requested,
            n_terms_used=n_terms,
            z_level=z_level,
            nan_replaced=nan_log,
            slab_mgal=slab,
            far_field=far_field,
            airy_scale=airy_scale,
            notes=f"{cfg.mode}/{cfg.field.field}",
        )
        return ForwardResult(data=data, scalars=scalars)
