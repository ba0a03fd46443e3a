# gravfft_app/adapters/registry.py
from __future__ import annotations

from typing import Any, Dict, List, Type, Union

from gravfft_app.adapters.solver_admittance.engine import CrossSpectralEngine, TheoreticalAdmittanceEngine
from gravfft_app.adapters.solver_parker.engine import ParkerForwardEngine
from gravfft_app.domain.ports import ForwardEngine, SpectralEstimator

__all__ = ["list_engines", "make_engine"]

# Registry: human-readable name → engine class
_REGISTRY: Dict[str, Type[Any]] = {
    "Parker forward": ParkerForwardEngine,
    "Cross-spectral": CrossSpectralEngine,
    "Theoretical admittance": TheoreticalAdmittanceEngine,
}


def list_engines() -> List[str]:
    return list(_REGISTRY.keys())


def make_engine(name: str, **kwargs: Any) -> Union[ForwardEngine, SpectralEstimator]:
    """
    Instantiate the requested engine. Extra kwargs (e.g. transform=NumpyTransform("smooth7"))
    are forwarded to engines that accept them.
    """
    cls = _REGISTRY.get(name)
    if cls is None:
        raise KeyError(f"Unknown engine '{name}'. Available: {', '.join(_REGISTRY)}")
    try:
        return cls(**kwargs)
    except TypeError:
        # The theoretical engine takes no transform
        if kwargs:
            return cls()
        raise
