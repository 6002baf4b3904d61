from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

import numpy as np

if TYPE_CHECKING:
    from arcoating.materials import DispersionProvider

ThicknessKind = Literal["physical", "optical"]


def optical_to_physical(
    optical_thickness: float, refractive_index: float, reference_wl_um: float
) -> float:
    """Physical thickness (µm) of an optical thickness given in waves."""
    return optical_thickness * reference_wl_um / refractive_index


def physical_to_optical(
    physical_um: float, refractive_index: float, reference_wl_um: float
) -> float:
    """Optical thickness (waves) of a physical thickness given in µm."""
    return refractive_index * physical_um / reference_wl_um


@dataclass
class Layer:
    """Represents a thin-film layer of a coating design.

    Thickness and bounds share the layer's convention: microns (µm) for
    ``"physical"`` layers, waves at the stack reference wavelength for
    ``"optical"`` layers.

    Parameters
    ----------
    material_id : str
        Coating material identifier resolved by the dispersion provider.
    thickness : float
        Layer thickness.
    thickness_kind : {"physical", "optical"}
        Thickness convention, by default "physical".
    is_variable : bool
        Whether the optimizer may change the thickness, by default True.
    min_thickness, max_thickness : float
        Search bounds used during optimization.
    name : str | None
        Optional label for display.

    Examples
    --------
    >>> from arcoating.thin_film import Layer
    >>> layer = Layer("MgF2", 0.25, thickness_kind="optical", name="QWOT")
    """

    material_id: str
    thickness: float
    thickness_kind: ThicknessKind = "physical"
    is_variable: bool = True
    min_thickness: float = 0.01
    max_thickness: float = 1.0
    name: str | None = None

    def __post_init__(self):
        if self.thickness_kind not in ("physical", "optical"):
            raise ValueError(
                f"Invalid thickness_kind '{self.thickness_kind}'. "
                "Must be 'physical' or 'optical'."
            )
        if self.min_thickness > self.max_thickness:
            raise ValueError(
                f"min_thickness ({self.min_thickness}) must not exceed "
                f"max_thickness ({self.max_thickness})"
            )

    def physical_thickness_um(
        self, provider: DispersionProvider, reference_wl_um: float
    ) -> float:
        """Physical thickness in µm.

        Optical thicknesses are converted with the material index at the
        reference wavelength, not at the calculation wavelength.
        """
        if self.thickness_kind == "physical":
            return self.thickness
        n, _ = provider.material_index(self.material_id, reference_wl_um)
        return optical_to_physical(self.thickness, n, reference_wl_um)

    def phase_thickness(
        self,
        wavelength_um: float,
        thickness_um: float,
        cos_theta_l: complex,
        n_complex_l: complex,
    ) -> complex:
        """Phase δ = 2π/λ·n·d·cos(θ_l)"""
        k0 = 2 * np.pi / wavelength_um  # µm^-1
        return k0 * n_complex_l * thickness_um * cos_theta_l
