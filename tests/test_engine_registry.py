from __future__ import annotations

import inspect

import pytest

from gravfft_app.adapters.fft_numpy.transform import NumpyTransform
from gravfft_app.adapters.registry import list_engines, make_engine
from gravfft_app.adapters.solver_parker.engine import ParkerForwardEngine


def test_registry_returns_callable_run() -> None:
    names = list_engines()
    assert names == ["Parker forward", "Cross-spectral", "Theoretical admittance"]
    for name in names:
        eng = make_engine(name)
        assert hasattr(eng, "run") and callable(getattr(eng, "run"))
        # signature is (request) -> result; we only assert it accepts 1 arg
        sig = inspect.signature(eng.run)
        assert len(sig.parameters) == 1


def test_kwargs_are_forwarded_or_dropped() -> None:
    fft = NumpyTransform(padding="smooth7")
    eng = make_engine("Parker forward", transform=fft)
    assert isinstance(eng, ParkerForwardEngine) and eng.transform is fft
    assert hasattr(make_engine("Theoretical admittance", transform=fft), "run")


def test_unknown_engine() -> None:
    with pytest.raises(KeyError, match="Available"):
        make_engine("Talwani")
