"""Thin Film Optimization Report Module

This module contains the ThinFilmReport class, which summarizes an
optimization run: outcome, and before/after comparison of the variable layer
thicknesses.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pandas as pd
from tabulate import tabulate

if TYPE_CHECKING:
    from arcoating.thin_film import ThinFilmStack

    from .optimizer import OptimizationOutcome


class ThinFilmReport:
    """Generates reports for thin film optimization results.

    Args:
        initial_stack: Copy of the design taken before optimization.
        final_stack: The design after optimization.
        outcome: The optimization outcome.
    """

    def __init__(
        self,
        initial_stack: ThinFilmStack,
        final_stack: ThinFilmStack,
        outcome: OptimizationOutcome,
    ):
        if len(initial_stack) != len(final_stack):
            raise ValueError(
                "Initial and final stacks must have the same number of layers"
            )
        self.initial_stack = initial_stack
        self.final_stack = final_stack
        self.outcome = outcome

    def summary_table(self) -> pd.DataFrame:
        """Generate a summary table of the variable layers.

        Thicknesses are given in each layer's own convention (µm for physical
        layers, waves at the reference wavelength for optical ones).

        Returns:
            DataFrame with columns: Layer, Material, Initial, Final, Change,
            Unit
        """
        data = []
        for index in self.final_stack.variable_indices():
            initial_layer = self.initial_stack.layers[index]
            final_layer = self.final_stack.layers[index]
            initial = initial_layer.thickness
            final = final_layer.thickness
            change = final - initial
            change_pct = (change / initial) * 100 if initial != 0 else 0.0
            unit = "µm" if final_layer.thickness_kind == "physical" else "waves"

            data.append(
                {
                    "Layer": index + 1,
                    "Material": final_layer.material_id,
                    "Initial": round(initial, 6),
                    "Final": round(final, 6),
                    "Change": f"{change:+.4f} ({change_pct:+.1f}%)",
                    "Unit": unit,
                }
            )

        return pd.DataFrame(
            data, columns=["Layer", "Material", "Initial", "Final", "Change", "Unit"]
        )

    def info(self) -> None:
        """Display the optimization outcome and layer changes in tabular form."""
        outcome = self.outcome
        print(f"Thin Film Optimization Report: {self.final_stack.name}")
        print("=" * 50)

        result_data = [
            ["Success", "Yes" if outcome.success else "No"],
            ["Initial merit", f"{outcome.initial_merit:.6f}"],
            ["Final merit", f"{outcome.final_merit:.6f}"],
            ["Iterations", outcome.iterations],
        ]
        if outcome.trials:
            result_data.append(["Trials", outcome.trials])
        if outcome.cancelled:
            result_data.append(["Cancelled", "Yes"])
        print(tabulate(result_data, headers=["Metric", "Value"], tablefmt="grid"))
        print(outcome.message)
        print()

        table = self.summary_table()
        if not table.empty:
            print("Variables:")
            print(tabulate(table, headers="keys", tablefmt="grid", showindex=False))
            print()
