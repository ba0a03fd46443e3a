from __future__ import annotations

import io

import pandas as pd
import xarray as xr

VALUE_COLUMNS = ("admittance", "coherence")


def admittance_table(ds: xr.Dataset) -> pd.DataFrame:
    """Return the 3- or 4-column spectral table of an admittance/coherence/theoretical result.

    Columns: frequency (or wavelength), value, error[, theoretical]. A data-free theoretical
    curve gives the two columns it has.
    """
    axis = ds.attrs.get("axis", "frequency")
    cols = [axis]
    value = next((v for v in VALUE_COLUMNS if v in ds.data_vars), None)
    if value is not None:
        cols += [value, "error"]
    if "theoretical" in ds.data_vars:
        cols.append("theoretical")
    df = ds.reset_coords()[cols].to_dataframe().reset_index(drop=True)
    return df[cols]


def grid_table(da: xr.DataArray, name: str = "z") -> pd.DataFrame:
    """Tidy x, y, z table of a grid (rows south → north, x fastest)."""
    df = da.rename(name).to_dataframe().reset_index()
    return df[["x", "y", name]]


def to_csv_bytes(df: pd.DataFrame) -> bytes:
    buf = io.StringIO()
    df.to_csv(buf, index=False)
    return buf.getvalue().encode("utf-8")
