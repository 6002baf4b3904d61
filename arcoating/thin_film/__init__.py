"""Thin-film multilayer calculations (Transfer Matrix Method).

Public API:
- ``Layer``: one thin-film layer (material + thickness)
- ``ThinFilmStack``: stack structure (layers on a substrate)
- ``TransferMatrixEngine``: Rs, Rp, Rave, Ts, Tp, Tave of a stack
- ``SpectralAnalyzer``: wavelength and angle sweeps

Units: wavelength and physical thickness in µm, optical thickness in waves at
the stack reference wavelength, AOI in degrees, R/T in percent.
"""

from __future__ import annotations

from .analysis import SpectralAnalyzer
from .core import METRICS, OpticalResult, TransferMatrixEngine, fresnel_coefficients
from .layer import Layer, optical_to_physical, physical_to_optical
from .stack import ThinFilmStack

__all__ = [
    "Layer",
    "ThinFilmStack",
    "TransferMatrixEngine",
    "OpticalResult",
    "METRICS",
    "SpectralAnalyzer",
    "fresnel_coefficients",
    "optical_to_physical",
    "physical_to_optical",
]
