from __future__ import annotations

import numpy as np
import pytest

from gravfft_app.adapters.fft_numpy.transform import (
    NumpyTransform,
    expand_periodic,
    remove_trend,
    smooth7,
)


def _is_7_smooth(n: int) -> bool:
    for p in (2, 3, 5, 7):
        while n % p == 0:
            n //= p
    return n == 1


def test_smooth7_known_values() -> None:
    assert smooth7(1) == 1
    assert smooth7(11) == 12
    assert smooth7(13) == 14
    assert smooth7(17) == 18
    assert smooth7(64) == 64
    assert smooth7(97) == 98


def test_smooth7_is_smallest_smooth_size() -> None:
    for n in range(2, 200):
        m = smooth7(n)
        assert m >= n and _is_7_smooth(m)
        assert not any(_is_7_smooth(j) for j in range(n, m))


def test_remove_trend_modes() -> None:
    z = np.array([[0.0, 2.0], [4.0, 10.0]])
    out, level = remove_trend(z, "none")
    assert level == 0.0 and np.array_equal(out, z) and out is not z
    out, level = remove_trend(z, "mean")
    assert level == 4.0 and np.isclose(out.mean(), 0.0)
    out, level = remove_trend(z, "mid")
    assert level == 5.0 and out.min() == -5.0 and out.max() == 5.0
    with pytest.raises(ValueError):
        remove_trend(z, "quadratic")


def test_remove_plane_reports_centre_level() -> None:
    u = np.linspace(-1.0, 1.0, 7)
    v = np.linspace(-1.0, 1.0, 5)
    U, V = np.meshgrid(u, v)
    z = 3.0 + 2.0 * U - 1.5 * V
    out, level = remove_trend(z, "plane")
    assert np.isclose(level, 3.0)
    assert np.allclose(out, 0.0, atol=1e-12)


def test_expand_periodic_keeps_interior_and_constants() -> None:
    rng = np.random.default_rng(7)
    z = rng.normal(size=(5, 6))
    out, oy, ox = expand_periodic(z, (8, 10))
    assert out.shape == (8, 10)
    assert np.array_equal(out[oy : oy + 5, ox : ox + 6], z)

    flat, _, _ = expand_periodic(np.full((4, 5), 7.0), (7, 9))
    assert np.allclose(flat, 7.0)


def test_expand_periodic_margin_bridges_opposite_edges() -> None:
    z = np.array([[0.0, 1.0, 2.0, 3.0]])
    out, oy, ox = expand_periodic(np.repeat(z, 2, axis=0), (2, 8))
    row = out[0]
    # margin walks from the last sample (3) back to the first (0)
    wrapped = np.concatenate([row[ox + 4 :], row[:ox]])
    assert np.all(np.diff(wrapped) < 0)
    assert np.all((wrapped > 0.0) & (wrapped < 3.0))


def test_prepare_without_padding_keeps_lattice() -> None:
    z = np.arange(12, dtype=float).reshape(3, 4)
    prep = NumpyTransform().prepare(z, 100.0, 200.0, trend="mid")
    assert prep.values.shape == (3, 4)
    assert prep.wavenumbers.shape == (3, 4)
    assert prep.level == 5.5 and prep.z_level == 5.5
    assert np.array_equal(prep.interior(prep.values), z - 5.5)


def test_prepare_with_smooth7_padding() -> None:
    z = np.random.default_rng(3).normal(size=(10, 13))
    fft = NumpyTransform(padding="smooth7")
    prep = fft.prepare(z, 1.0, 1.0, trend="none")
    assert prep.values.shape == (12, 18)
    assert np.array_equal(prep.interior(prep.values), z)
    assert prep.embed(z).shape == (12, 18)
    with pytest.raises(ValueError):
        prep.embed(np.zeros((3, 3)))


def test_forward_inverse_round_trip() -> None:
    z = np.random.default_rng(11).normal(size=(6, 8))
    fft = NumpyTransform()
    assert np.allclose(fft.inverse(fft.forward(z)), z)


def test_unknown_padding_rejected() -> None:
    with pytest.raises(ValueError):
        NumpyTransform(padding="pow2")
