from __future__ import annotations

import copy
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

import numpy as np

from .layer import Layer, ThicknessKind

if TYPE_CHECKING:
    from arcoating.materials import DispersionProvider


@dataclass
class ThinFilmStack:
    """Multilayer coating design: ordered layers on a substrate.

    Layers are ordered from the incident side (index 0, air side) to the
    substrate side (last index). The stack only describes the structure;
    optical calculations are done by
    :class:`~arcoating.thin_film.core.TransferMatrixEngine`.

    Units and conventions:
    - Wavelength in microns (µm).
    - Physical thicknesses in µm, optical thicknesses in waves at
      ``reference_wl_um``.

    Parameters
    ----------
    substrate_id : str
        Substrate glass identifier, by default "N-BK7".
    layers : list[Layer], optional
        Ordered layers between incident medium and substrate, default empty.
    incident_index : float, optional
        Real index of the incident medium, by default 1.0 (air).
    reference_wl_um : float, optional
        Reference wavelength for optical thicknesses, by default 0.55 µm.
    name : str, optional
        Design name.

    Examples
    --------
    >>> from arcoating.thin_film import ThinFilmStack
    >>> stack = ThinFilmStack(substrate_id="N-BK7", reference_wl_um=0.55)
    >>> stack.add_layer("MgF2", 0.25, thickness_kind="optical")
    ThinFilmStack(1 layers: MgF2)
    """

    substrate_id: str = "N-BK7"
    layers: list[Layer] = field(default_factory=list)
    incident_index: float = 1.0
    reference_wl_um: float = 0.55
    name: str = "NewCoating"

    # ----- structure helpers -----
    def add_layer(
        self,
        material_id: str,
        thickness: float,
        thickness_kind: ThicknessKind = "physical",
        is_variable: bool = True,
        min_thickness: float | None = None,
        max_thickness: float | None = None,
        name: str | None = None,
    ) -> ThinFilmStack:
        """Append a layer on the substrate side of the stack.

        Args:
            material_id: Coating material identifier.
            thickness: Thickness in the layer's convention.
            thickness_kind: 'physical' (µm) or 'optical' (waves).
            is_variable: Whether the optimizer may change the thickness.
            min_thickness: Lower search bound. Defaults to ``thickness * 0.1``.
            max_thickness: Upper search bound. Defaults to ``thickness * 10``.
            name: Optional label.

        Returns:
            self for chaining.
        """
        if min_thickness is None:
            min_thickness = thickness * 0.1
        if max_thickness is None:
            max_thickness = thickness * 10.0

        self.layers.append(
            Layer(
                material_id=material_id,
                thickness=thickness,
                thickness_kind=thickness_kind,
                is_variable=is_variable,
                min_thickness=min_thickness,
                max_thickness=max_thickness,
                name=name,
            )
        )
        return self

    def remove_layer(self, index: int) -> ThinFilmStack:
        if 0 <= index < len(self.layers):
            del self.layers[index]
        return self

    def move_layer_up(self, index: int) -> ThinFilmStack:
        """Move a layer one position toward the incident side."""
        if 0 < index < len(self.layers):
            self.layers.insert(index - 1, self.layers.pop(index))
        return self

    def move_layer_down(self, index: int) -> ThinFilmStack:
        """Move a layer one position toward the substrate side."""
        if 0 <= index < len(self.layers) - 1:
            self.layers.insert(index + 1, self.layers.pop(index))
        return self

    def clone(self) -> ThinFilmStack:
        """Independent deep copy of the stack."""
        return copy.deepcopy(self)

    # ----- variable layers -----
    def variable_indices(self) -> list[int]:
        return [i for i, layer in enumerate(self.layers) if layer.is_variable]

    def variable_layers(self) -> list[Layer]:
        return [layer for layer in self.layers if layer.is_variable]

    def variable_thicknesses(self) -> np.ndarray:
        return np.array([layer.thickness for layer in self.variable_layers()], float)

    def lower_bounds(self) -> np.ndarray:
        return np.array([lay.min_thickness for lay in self.variable_layers()], float)

    def upper_bounds(self) -> np.ndarray:
        return np.array([lay.max_thickness for lay in self.variable_layers()], float)

    def _check_thickness_count(self, thicknesses: Sequence[float]) -> None:
        expected = len(self.variable_indices())
        if len(thicknesses) != expected:
            raise ValueError(
                f"Expected {expected} thicknesses, got {len(thicknesses)}"
            )

    def set_variable_thicknesses(self, thicknesses: Sequence[float]) -> ThinFilmStack:
        """Write thicknesses into the variable layers, in stack order."""
        self._check_thickness_count(thicknesses)
        for index, value in zip(self.variable_indices(), thicknesses, strict=True):
            self.layers[index].thickness = float(value)
        return self

    def with_variable_thicknesses(self, thicknesses: Sequence[float]) -> ThinFilmStack:
        """New stack with the variable thicknesses replaced.

        The source stack and its layers are left untouched.
        """
        self._check_thickness_count(thicknesses)
        values = iter(thicknesses)
        layers = [
            replace(lay, thickness=float(next(values))) if lay.is_variable else lay
            for lay in self.layers
        ]
        return replace(self, layers=layers)

    # ----- convenience -----
    def physical_thicknesses_um(self, provider: DispersionProvider) -> list[float]:
        return [
            layer.physical_thickness_um(provider, self.reference_wl_um)
            for layer in self.layers
        ]

    def __len__(self):
        return len(self.layers)

    def __repr__(self):
        parts = [
            layer.name or layer.material_id or f"Layer({i})"
            for i, layer in enumerate(self.layers)
        ]
        return f"ThinFilmStack({len(self.layers)} layers: " + " -> ".join(parts) + ")"
