"""Preset coating designs.

Each preset returns a ``(stack, targets)`` pair ready for optimization. Layer
thicknesses are optical (waves at 0.55 µm) on an N-BK7 substrate.
"""

from __future__ import annotations

from arcoating.thin_film import ThinFilmStack
from arcoating.thin_film.optimization.operand import MeritTarget, generate_targets


def single_layer_ar() -> tuple[ThinFilmStack, list[MeritTarget]]:
    """Quarter-wave MgF2 anti-reflection coating on N-BK7.

    Targets Rave = 0 % from 0.45 to 0.65 µm every 5 nm at normal incidence.
    """
    stack = ThinFilmStack(substrate_id="N-BK7", reference_wl_um=0.55, name="SLAR")
    stack.add_layer("MgF2", 0.25, "optical")
    targets = generate_targets("Rave", "equal", 0.0, 0.45, 0.65, 0.005)
    return stack, targets


def v_coat() -> tuple[ThinFilmStack, list[MeritTarget]]:
    """Two-layer MgF2 / TiO2 V-coat on N-BK7, centered on 0.55 µm.

    Targets Rave = 0 % from 0.50 to 0.60 µm every 5 nm at normal incidence.
    """
    stack = ThinFilmStack(substrate_id="N-BK7", reference_wl_um=0.55, name="VCoat")
    stack.add_layer("MgF2", 0.3239, "optical").add_layer("TiO2", 0.0502, "optical")
    targets = generate_targets("Rave", "equal", 0.0, 0.50, 0.60, 0.005)
    return stack, targets
