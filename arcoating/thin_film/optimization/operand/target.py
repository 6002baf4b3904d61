"""Merit Target Module

This module contains the MeritTarget class describing one weighted optical
performance target, and a helper generating targets on a wavelength/AOI grid.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

import numpy as np

from arcoating.thin_film.core import METRICS, Metric

# 'below' is a less-or-equal target, 'over' a greater-or-equal target
CompareType = Literal["equal", "below", "over"]
COMPARE_TYPES: tuple[str, ...] = ("equal", "below", "over")


@dataclass(frozen=True)
class MeritTarget:
    """Represents an optimization target.

    Args:
        metric: Optical quantity ('Rs', 'Rp', 'Rave', 'Ts', 'Tp', 'Tave').
        wavelength_um: Wavelength in µm.
        aoi_deg: Angle of incidence in degrees. Defaults to 0.
        compare: 'equal', 'below' (<=) or 'over' (>=). Defaults to 'equal'.
        value: Target value in percent. Defaults to 0.
        weight: Non-negative weight. Defaults to 1.
        enabled: Disabled targets are skipped entirely. Defaults to True.
    """

    metric: Metric
    wavelength_um: float
    aoi_deg: float = 0.0
    compare: CompareType = "equal"
    value: float = 0.0
    weight: float = 1.0
    enabled: bool = True

    def __post_init__(self):
        if self.metric not in METRICS:
            raise ValueError(
                f"Invalid metric '{self.metric}'. Must be one of {METRICS}."
            )
        if self.compare not in COMPARE_TYPES:
            raise ValueError(
                f"Invalid compare '{self.compare}'. Must be 'equal', 'below', 'over'"
            )
        if self.weight < 0:
            raise ValueError(f"weight must be non-negative, got {self.weight}")
        if self.wavelength_um <= 0:
            raise ValueError(
                f"wavelength_um must be positive, got {self.wavelength_um}"
            )

    def error(self, current_value: float) -> float:
        """Signed error of ``current_value`` against the target.

        One-sided targets have zero error when satisfied.
        """
        if self.compare == "equal":
            return current_value - self.value
        elif self.compare == "below":
            return max(0.0, current_value - self.value)
        else:
            return max(0.0, self.value - current_value)

    def merit(self, current_value: float) -> float:
        """Weighted squared error; zero for a disabled target."""
        if not self.enabled:
            return 0.0
        return self.weight * self.error(current_value) ** 2


def _inclusive_range(start: float, stop: float, step: float) -> np.ndarray:
    if stop < start:
        raise ValueError(f"Range end ({stop}) is below its start ({start})")
    if step <= 0 or stop == start:
        return np.array([start])
    count = int(np.floor((stop - start) / step + 1e-9)) + 1
    return start + step * np.arange(count)


def generate_targets(
    metric: Metric,
    compare: CompareType,
    value: float,
    wavelength_min_um: float,
    wavelength_max_um: float,
    wavelength_step_um: float,
    aoi_min_deg: float = 0.0,
    aoi_max_deg: float = 0.0,
    aoi_step_deg: float = 15.0,
    weight: float = 1.0,
) -> list[MeritTarget]:
    """Generate one target per node of a wavelength × AOI grid.

    Bounds are inclusive; wavelengths are rounded to 1 nm (1e-3 µm).

    Returns:
        Targets ordered by angle, then wavelength.

    Examples
    --------
    >>> targets = generate_targets("Rave", "below", 0.5, 0.45, 0.65, 0.05)
    >>> [t.wavelength_um for t in targets]
    [0.45, 0.5, 0.55, 0.6, 0.65]
    """
    wavelengths = _inclusive_range(
        wavelength_min_um, wavelength_max_um, wavelength_step_um
    )
    angles = _inclusive_range(aoi_min_deg, aoi_max_deg, aoi_step_deg)
    return [
        MeritTarget(
            metric=metric,
            wavelength_um=round(float(wl), 3),
            aoi_deg=float(aoi),
            compare=compare,
            value=value,
            weight=weight,
        )
        for aoi in angles
        for wl in wavelengths
    ]
