from __future__ import annotations

import logging
from typing import Any, Mapping, cast

import numpy as np
import xarray as xr

from gravfft_app.adapters.fft_numpy.transform import NumpyTransform
from gravfft_app.adapters.grids.prepare import (
    as_grid,
    check_coregistered,
    clean_grid,
    shift_observation_level,
    spacing_m,
)
from gravfft_app.adapters.solver_admittance.estimator import (
    admittance_estimate,
    bin_cross_spectra,
    coherence_estimate,
)
from gravfft_app.adapters.solver_admittance.theory import (
    TWO_PI,
    radial_frequencies,
    theoretical_admittance,
)
from gravfft_app.domain.models import (
    AdmittanceConfig,
    AdmittanceRequest,
    AdmittanceResult,
    AdmittanceScalars,
    ModelConfig,
    TheoreticalRequest,
)
from gravfft_app.domain.ports import SpectralEstimator, SpectralTransform

logger = logging.getLogger(__name__)

ADMITTANCE_UNITS = {"faa": "mGal/m", "geoid": "m/m"}


def frequency_axis(freq: np.ndarray, opts: AdmittanceConfig) -> tuple[str, np.ndarray, str]:
    """(coordinate name, values, units) for the first table column.

    freq is in 1/m. km rescales wavelengths to km and, unlike a wavelength-only
    unit switch, also reports plain frequencies in 1/km so both columns share one unit.
    """
    f = np.asarray(freq, dtype=float) * (1000.0 if opts.km else 1.0)
    length = "km" if opts.km else "m"
    if opts.wavelength:
        return "wavelength", 1.0 / f, length
    return "frequency", f, f"1/{length}"


def _theoretical_column(cfg: ModelConfig, freq: np.ndarray, z_level: float) -> np.ndarray:
    assert cfg.flexure is not None
    return theoretical_admittance(
        cfg.admittance.direction,
        freq,
        cfg.flexure,
        field=cfg.field.field,
        z_level=z_level,
        moho_m=cfg.depths.moho_m,
        swell_m=cfg.depths.swell_m,
        g45_mgal=cfg.field.g45_mgal,
        spherical=cfg.numerics.spherical,
    )


class CrossSpectralEngine(SpectralEstimator):
    """Two co-registered grids → radially binned admittance or coherence table.

    The first grid is the topography (A), the second the observed gravity or geoid (B).
    A theoretical column is added when the configuration carries a load direction.
    """

    def __init__(self, transform: SpectralTransform | None = None) -> None:
        self.transform = transform

    def run(self, request: Mapping[str, Any] | AdmittanceRequest) -> AdmittanceResult:
        if isinstance(request, AdmittanceRequest):
            req = request
        else:
            req = AdmittanceRequest.model_validate(dict(cast(Mapping[str, Any], request)))
        cfg = req.config
        topo = as_grid(req.topography, "topography")
        observed = as_grid(req.observed, "observed")
        check_coregistered(topo, observed, "topography and observed")

        nan_log: dict[str, int] = {}
        a = shift_observation_level(clean_grid(topo, "topography", nan_log), cfg.depths.water_depth_m)
        b = clean_grid(observed, "observed", nan_log)

        dx, dy = spacing_m(topo, geographic=cfg.numerics.geographic)
        fft = self.transform or NumpyTransform(padding=cfg.numerics.padding)
        prep_a = fft.prepare(a, dx, dy, trend=cfg.numerics.trend)
        prep_b = fft.prepare(b, dx, dy, trend=cfg.numerics.trend)
        z_level = prep_a.z_level

        logger.info("Forward FFT...")
        spectra = bin_cross_spectra(fft.forward(prep_a.values), fft.forward(prep_b.values), prep_a.wavenumbers)

        opts = cfg.admittance
        kind = "coherence" if opts.coherence else "admittance"
        if opts.coherence:
            value, error = coherence_estimate(spectra)
        else:
            value, error = admittance_estimate(spectra)
        empty = int(np.count_nonzero(spectra.n_samples == 0))
        if empty:
            logger.warning("%d of %d radial bins hold no samples; reported as NaN", empty, spectra.n_bins)

        freq = radial_frequencies(spectra.delta_k, spectra.n_bins)
        name, axis, axis_units = frequency_axis(freq, opts)
        data_vars: dict[str, Any] = {
            kind: ("bin", value),
            "error": ("bin", error),
            "n_samples": ("bin", spectra.n_samples),
        }
        if opts.direction != "none":
            logger.info("Computing theoretical 'loading from %s' admittance", opts.direction)
            data_vars["theoretical"] = ("bin", _theoretical_column(cfg, freq, z_level))

        ds = xr.Dataset(
            data_vars=data_vars,
            coords={"bin": np.arange(spectra.n_bins), name: ("bin", axis)},
            attrs={
                "axis": name,
                "axis_units": axis_units,
                "value_units": "1" if opts.coherence else ADMITTANCE_UNITS.get(cfg.field.field, ""),
                "direction": opts.direction,
            },
        )
        scalars = AdmittanceScalars(
            kind=kind,
            n_bins=spectra.n_bins,
            delta_k=spectra.delta_k,
            z_level=z_level,
            nan_replaced=nan_log,
            notes=f"{kind} of {cfg.field.field} vs topography",
        )
        return AdmittanceResult(data=ds, scalars=scalars)


class TheoreticalAdmittanceEngine(SpectralEstimator):
    """Data-free McNutt & Shure curve over an equidistant axis.

    A profile of n_points samples at spacing_m has Δk = 2π / (n_points·spacing_m); the curve is
    evaluated at bins 1..n_points with the observation level at mean_depth_m.
    """

    def run(self, request: Mapping[str, Any] | TheoreticalRequest) -> AdmittanceResult:
        if isinstance(request, TheoreticalRequest):
            req = request
        else:
            req = TheoreticalRequest.model_validate(dict(cast(Mapping[str, Any], request)))
        cfg = req.config
        delta_k = TWO_PI / (req.n_points * req.spacing_m)
        freq = radial_frequencies(delta_k, req.n_points)
        curve = _theoretical_column(cfg, freq, req.mean_depth_m)

        name, axis, axis_units = frequency_axis(freq, cfg.admittance)
        ds = xr.Dataset(
            data_vars={"theoretical": ("bin", curve)},
            coords={"bin": np.arange(req.n_points), name: ("bin", axis)},
            attrs={
                "axis": name,
                "axis_units": axis_units,
                "value_units": ADMITTANCE_UNITS.get(cfg.field.field, ""),
                "direction": cfg.admittance.direction,
            },
        )
        scalars = AdmittanceScalars(
            kind="theoretical",
            n_bins=req.n_points,
            delta_k=delta_k,
            z_level=req.mean_depth_m,
            notes=f"loading from {cfg.admittance.direction}",
        )
        return AdmittanceResult(data=ds, scalars=scalars)
