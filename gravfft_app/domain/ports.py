# """
# Ports (interfaces) for adapters. Orchestration depends ONLY on these.
# """
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import numpy as np

from .models import AdmittanceResult, ForwardResult


class SpectralTransform(ABC):
    """External 2-D FFT collaborator: detrending, padding and the transform pair."""

    @abstractmethod
    def prepare(self, values: np.ndarray, dx: float, dy: float, *, trend: str) -> Any:
        """Detrend and pad a real grid; return an object exposing values, level and wavenumbers."""

    @abstractmethod
    def forward(self, values: np.ndarray) -> np.ndarray:
        """Real (ny2, nx2) lattice → complex spectrum of the same shape."""

    @abstractmethod
    def inverse(self, spectrum: np.ndarray) -> np.ndarray:
        """Complex spectrum → real lattice (imaginary residue discarded)."""


class ForwardEngine(ABC):
    @abstractmethod
    def run(self, req: Any) -> ForwardResult:
        """Execute a forward-modelling request and return a grid result."""


class SpectralEstimator(ABC):
    @abstractmethod
    def run(self, req: Any) -> AdmittanceResult:
        """Return a radially binned admittance/coherence (or theoretical) table."""
