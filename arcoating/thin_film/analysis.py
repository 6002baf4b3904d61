"""Thin film analysis class.

Spectral and angular sweeps of a coating design's optical response.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import pandas as pd

from .core import METRICS

if TYPE_CHECKING:
    from .core import TransferMatrixEngine
    from .stack import ThinFilmStack


class SpectralAnalyzer:
    """Class for analyzing a coating design's optical response (R/T).

    Attributes:
        engine (TransferMatrixEngine): Engine used for every sweep point.
        stack (ThinFilmStack): The coating design to be analyzed.
    """

    def __init__(self, engine: TransferMatrixEngine, stack: ThinFilmStack) -> None:
        self.engine = engine
        self.stack = stack

    @staticmethod
    def _axis(start: float, stop: float, num_points: int) -> np.ndarray:
        if num_points < 2:
            raise ValueError(f"num_points must be at least 2, got {num_points}")
        return np.linspace(start, stop, num_points)

    def _sweep(self, axis_name: str, points) -> pd.DataFrame:
        rows = []
        for axis_value, wavelength_um, aoi_deg in points:
            result = self.engine.evaluate(self.stack, wavelength_um, aoi_deg)
            row = {axis_name: axis_value}
            row.update({metric: result.value(metric) for metric in METRICS})
            row["is_tir"] = result.is_tir
            rows.append(row)
        return pd.DataFrame(rows, columns=[axis_name, *METRICS, "is_tir"])

    def spectrum(
        self,
        wavelength_min_um: float,
        wavelength_max_um: float,
        num_points: int,
        aoi_deg: float = 0.0,
    ) -> pd.DataFrame:
        """R/T versus wavelength at a fixed angle of incidence.

        Args:
            wavelength_min_um: First wavelength (µm), included.
            wavelength_max_um: Last wavelength (µm), included.
            num_points: Number of evenly spaced wavelengths (>= 2).
            aoi_deg: Angle of incidence in degrees. Defaults to 0.

        Returns:
            DataFrame with columns 'wavelength_um', 'Rs', 'Rp', 'Rave', 'Ts',
            'Tp', 'Tave', 'is_tir'.
        """
        wavelengths = self._axis(wavelength_min_um, wavelength_max_um, num_points)
        return self._sweep(
            "wavelength_um", ((wl, wl, aoi_deg) for wl in wavelengths)
        )

    def angular_response(
        self,
        wavelength_um: float,
        aoi_min_deg: float,
        aoi_max_deg: float,
        num_points: int,
    ) -> pd.DataFrame:
        """R/T versus angle of incidence at a fixed wavelength.

        Returns:
            DataFrame with columns 'aoi_deg', 'Rs', 'Rp', 'Rave', 'Ts', 'Tp',
            'Tave', 'is_tir'.
        """
        angles = self._axis(aoi_min_deg, aoi_max_deg, num_points)
        return self._sweep("aoi_deg", ((aoi, wavelength_um, aoi) for aoi in angles))
