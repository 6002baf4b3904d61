"""Layer Thickness Variable Module

This module contains the LayerThicknessVariable class, which represents the
thickness of one variable layer of a coating design, and ThicknessParameters,
which maps the variable layers of a stack to a bounded parameter vector.

The parameter vector is kept apart from the stack: evaluations use a view of
the stack built from the vector, and the caller's stack is only written when
an optimization run finishes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from arcoating.thin_film import ThinFilmStack


@dataclass(frozen=True)
class LayerThicknessVariable:
    """Thickness of one variable layer.

    Args:
        layer_index: Index of the layer in the stack (0-based).
        min_val: Lower bound, in the layer's thickness convention.
        max_val: Upper bound, in the layer's thickness convention.
    """

    layer_index: int
    min_val: float
    max_val: float

    def get_value(self, stack: ThinFilmStack) -> float:
        return stack.layers[self.layer_index].thickness

    def __repr__(self) -> str:
        return (
            f"LayerThicknessVariable(layer_index={self.layer_index}, "
            f"bounds=[{self.min_val:g}, {self.max_val:g}])"
        )


class ThicknessParameters:
    """Bounded parameter vector over the variable layers of a stack.

    Variables follow stack order.

    Args:
        variables: One entry per variable layer.
    """

    def __init__(self, variables: list[LayerThicknessVariable]):
        self.variables = variables
        self.lower = np.array([var.min_val for var in variables], dtype=float)
        self.upper = np.array([var.max_val for var in variables], dtype=float)

    @classmethod
    def from_stack(cls, stack: ThinFilmStack) -> ThicknessParameters:
        return cls(
            [
                LayerThicknessVariable(i, layer.min_thickness, layer.max_thickness)
                for i, layer in enumerate(stack.layers)
                if layer.is_variable
            ]
        )

    def __len__(self) -> int:
        return len(self.variables)

    def values(self, stack: ThinFilmStack) -> np.ndarray:
        """Current thicknesses of the variable layers."""
        return np.array([var.get_value(stack) for var in self.variables], float)

    def clip(self, x: np.ndarray) -> np.ndarray:
        return np.clip(x, self.lower, self.upper)

    def apply(self, stack: ThinFilmStack, x: np.ndarray) -> ThinFilmStack:
        """View of ``stack`` with the variable thicknesses set to ``x``."""
        return stack.with_variable_thicknesses(x)

    def write_back(self, stack: ThinFilmStack, x: np.ndarray) -> None:
        """Store ``x`` in the variable layers of ``stack``."""
        stack.set_variable_thicknesses(x)

    def __repr__(self) -> str:
        return f"ThicknessParameters({len(self.variables)} variables)"
