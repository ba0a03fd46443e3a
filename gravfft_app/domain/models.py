#"""
#Domain models (v1.0.0)
#
#Pydantic v2 models define the validated parameter bundle and result containers.
#Grids travel as xarray.DataArray (dims "y", "x"); spectral tables as xarray.Dataset.
#"""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from .constants import (
    G45_MGAL,
    MGAL_PER_MS2,
    POISSONS_RATIO,
    RIGIDITY_THRESHOLD,
    YOUNGS_MODULUS,
)

# --- Basic enums/types ---
FieldType = Literal["faa", "geoid", "vgg", "defl_east", "defl_north"]
FaaAdjust = Literal["none", "slab", "zero", "bouguer"]
ForwardMode = Literal["parker", "flexure", "moho", "load_from_top", "load_from_below"]
TrendMode = Literal["none", "mean", "mid", "plane"]
PaddingMode = Literal["none", "smooth7"]
LoadDirection = Literal["none", "below", "top"]

# Admittance kernels are only exact for the first Parker term
SINGLE_TERM_MODES: frozenset[str] = frozenset({"load_from_top", "load_from_below"})
ISOSTATIC_MODES: frozenset[str] = frozenset({"flexure", "moho"})


def parse_length_m(value: object) -> object:
    """Accept metres as numbers, or strings with a trailing 'k' for kilometres ("5k" → 5000)."""
    if isinstance(value, str):
        text = value.strip().lower()
        if text.endswith("k"):
            return float(text[:-1]) * 1000.0
        if text.endswith("m"):
            return float(text[:-1])
        return float(text)
    return value


class FieldConfig(BaseModel):
    field: FieldType = "faa"
    adjust: FaaAdjust = "none"
    g45_mgal: float = Field(G45_MGAL, gt=0.0, description="Gravity at 45° latitude (mGal)")

    @property
    def normal_gravity(self) -> float:
        """Gravity at 45° in m/s²."""
        return self.g45_mgal / MGAL_PER_MS2

    @model_validator(mode="after")
    def _adjust_only_for_faa(self) -> FieldConfig:
        if self.adjust != "none" and self.field != "faa":
            raise ValueError(f"adjust={self.adjust!r} only applies to free-air anomalies")
        return self


class DensityConfig(BaseModel):
    rho: float | None = Field(
        None, description="Constant density contrast (kg/m³); leave unset only with a density grid"
    )


class FlexureConfig(BaseModel):
    te_m: float = Field(..., ge=0.0, description="Elastic thickness (m); > 1e10 is read as rigidity")
    rho_load: float = Field(..., ge=0.0)
    rho_mantle: float = Field(..., ge=0.0)
    rho_water: float = Field(0.0, ge=0.0)
    rho_infill: float | None = Field(None, ge=0.0)

    @field_validator("te_m", mode="before")
    @classmethod
    def _te_units(cls, v: object) -> object:
        return parse_length_m(v)

    @field_validator("te_m", mode="after")
    @classmethod
    def _rigidity_to_te(cls, v: float) -> float:
        if v > RIGIDITY_THRESHOLD:
            return float((12.0 * (1.0 - POISSONS_RATIO**2) * v / YOUNGS_MODULUS) ** (1.0 / 3.0))
        return v

    @model_validator(mode="after")
    def _mantle_is_densest(self) -> FlexureConfig:
        if self.rho_mantle <= self.rho_load:
            raise ValueError("rho_mantle must exceed rho_load")
        if self.rho_infill is not None and self.rho_mantle <= self.rho_infill:
            raise ValueError("rho_mantle must exceed rho_infill")
        return self

    @property
    def rho_cw(self) -> float:
        """Crust-water density contrast."""
        return self.rho_load - self.rho_water

    @property
    def rho_mc(self) -> float:
        """Mantle-crust density contrast."""
        return self.rho_mantle - self.rho_load

    @property
    def rho_mw(self) -> float:
        """Mantle-water density contrast."""
        return self.rho_mantle - self.rho_water

    @property
    def approx(self) -> bool:
        """True when the infill differs from the load (approximate flexure solution)."""
        return self.rho_infill is not None and self.rho_infill != self.rho_load


class DepthConfig(BaseModel):
    moho_m: float = Field(0.0, ge=0.0, description="Mean Moho depth zm (m)")
    swell_m: float = Field(0.0, ge=0.0, description="Mean swell-compensation depth zl (m)")
    water_depth_m: float = Field(0.0, ge=0.0, description="Water depth / observation level (m)")

    @field_validator("moho_m", "swell_m", "water_depth_m", mode="before")
    @classmethod
    def _length_units(cls, v: object) -> object:
        return parse_length_m(v)


class NumericsConfig(BaseModel):
    n_terms: int = Field(3, ge=1, le=10, description="Terms in Parker's expansion")
    trend: TrendMode = "mid"
    padding: PaddingMode = "none"
    geographic: bool = False
    spherical: bool = False


class AdmittanceConfig(BaseModel):
    coherence: bool = False
    from_below: bool = False
    from_top: bool = False
    wavelength: bool = False
    km: bool = False

    @model_validator(mode="after")
    def _one_direction(self) -> AdmittanceConfig:
        if self.from_below and self.from_top:
            raise ValueError("choose only one theoretical model: from_below or from_top")
        return self

    @property
    def direction(self) -> LoadDirection:
        if self.from_below:
            return "below"
        if self.from_top:
            return "top"
        return "none"


class ModelConfig(BaseModel):
    mode: ForwardMode = "parker"
    field: FieldConfig = FieldConfig()
    density: DensityConfig = DensityConfig()
    flexure: FlexureConfig | None = None
    depths: DepthConfig = DepthConfig()
    numerics: NumericsConfig = NumericsConfig()
    admittance: AdmittanceConfig = AdmittanceConfig()
    version: str = "1.0.0"

    @model_validator(mode="after")
    def _check_combinations(self) -> ModelConfig:
        needs_flexure = self.mode != "parker" or self.admittance.direction != "none"
        if needs_flexure and self.flexure is None:
            raise ValueError(f"mode={self.mode!r} / load direction requires flexure parameters")

        zm, zl = self.depths.moho_m, self.depths.swell_m
        if self.mode in ("moho", "load_from_top") and not zm:
            raise ValueError(f"mode={self.mode!r} needs the mean Moho depth (depths.moho_m)")
        if self.mode == "load_from_below" and not (zm and zl):
            raise ValueError("mode='load_from_below' needs Moho and swell depths")

        direction = self.admittance.direction
        if direction != "none":
            if self.field.field not in ("faa", "geoid"):
                raise ValueError("Theoretical admittances are only defined for FAA or geoid")
            if direction == "top" and not zm:
                raise ValueError("'loading from top' admittance needs depths.moho_m")
            if direction == "below" and not (zm and zl):
                raise ValueError("'loading from below' admittance needs Moho and swell depths")
        return self

    @property
    def effective_n_terms(self) -> int:
        """Expansion order actually evaluated; admittance-driven modes are single-term."""
        if self.mode in SINGLE_TERM_MODES:
            return 1
        return self.numerics.n_terms


# --- Requests and results ---
class ForwardRequest(BaseModel):
    config: ModelConfig
    topography: object  # xarray.DataArray expected at runtime
    density: object | None = None  # optional co-registered density-contrast grid


class AdmittanceRequest(BaseModel):
    config: ModelConfig
    topography: object
    observed: object  # gravity or geoid grid on the same lattice


class TheoreticalRequest(BaseModel):
    config: ModelConfig
    n_points: int = Field(..., ge=1)
    spacing_m: float = Field(..., gt=0.0, description="Sample spacing; profile length = n * spacing")
    mean_depth_m: float = Field(0.0, ge=0.0)

    @field_validator("spacing_m", "mean_depth_m", mode="before")
    @classmethod
    def _length_units(cls, v: object) -> object:
        return parse_length_m(v)

    @model_validator(mode="after")
    def _needs_direction(self) -> TheoreticalRequest:
        if self.config.admittance.direction == "none":
            raise ValueError("theoretical curves need from_below or from_top")
        return self


class ForwardScalars(BaseModel):
    mode: ForwardMode
    field: FieldType
    n_terms_requested: int
    n_terms_used: int
    z_level: float
    nan_replaced: dict[str, int] = {}
    slab_mgal: float | None = None
    far_field: float | None = None
    airy_scale: float | None = None
    notes: str = ""


class AdmittanceScalars(BaseModel):
    kind: Literal["admittance", "coherence", "theoretical"]
    n_bins: int
    delta_k: float
    z_level: float
    nan_replaced: dict[str, int] = {}
    notes: str = ""


# Results carry xarray objects at runtime, not validated here to avoid heavy import.
class ForwardResult(BaseModel):
    data: object  # xarray.DataArray
    scalars: ForwardScalars
    schema_version: str = "1.0.0"


class AdmittanceResult(BaseModel):
    data: object  # xarray.Dataset
    scalars: AdmittanceScalars
    schema_version: str = "1.0.0"
