"""Thin Film Operand Module

This module contains the MeritEvaluator class computing target values,
residuals and the merit function of a coating design. These operands are
designed to work with the optimization framework.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np
import pandas as pd

if TYPE_CHECKING:
    from arcoating.thin_film import ThinFilmStack, TransferMatrixEngine

    from .target import MeritTarget


def active_targets(targets: Sequence[MeritTarget]) -> list[MeritTarget]:
    """Enabled targets, in order."""
    return [target for target in targets if target.enabled]


class MeritEvaluator:
    """Operand functions for coating optimization.

    The merit is the sum over enabled targets of ``weight * error**2``.
    Disabled targets never enter the residual vector.

    Args:
        engine: Optics engine used for every target evaluation.
    """

    def __init__(self, engine: TransferMatrixEngine):
        self.engine = engine

    def value(self, stack: ThinFilmStack, target: MeritTarget) -> float:
        """Current value of the target's metric, in percent."""
        result = self.engine.evaluate(stack, target.wavelength_um, target.aoi_deg)
        return result.value(target.metric)

    def residual(self, stack: ThinFilmStack, target: MeritTarget) -> float:
        """Unweighted error of the stack against one target."""
        return target.error(self.value(stack, target))

    def weighted_residuals(
        self, stack: ThinFilmStack, targets: Sequence[MeritTarget]
    ) -> np.ndarray:
        """Residual vector ``sqrt(weight) * error`` over enabled targets.

        Its squared norm is the merit.
        """
        return np.array(
            [
                np.sqrt(target.weight) * self.residual(stack, target)
                for target in active_targets(targets)
            ],
            dtype=float,
        )

    def merit(self, stack: ThinFilmStack, targets: Sequence[MeritTarget]) -> float:
        """Merit function value (sum of weighted squared errors)."""
        return float(
            sum(
                target.merit(self.value(stack, target))
                for target in active_targets(targets)
            )
        )

    def performance(
        self, stack: ThinFilmStack, targets: Sequence[MeritTarget]
    ) -> pd.DataFrame:
        """Current performance of every target.

        Returns:
            DataFrame with one row per target (disabled ones included, with a
            zero contribution).
        """
        rows = []
        for target in targets:
            current = self.value(stack, target)
            rows.append(
                {
                    "metric": target.metric,
                    "wavelength_um": target.wavelength_um,
                    "aoi_deg": target.aoi_deg,
                    "compare": target.compare,
                    "target": target.value,
                    "current": current,
                    "error": target.error(current),
                    "weight": target.weight,
                    "merit": target.merit(current),
                    "enabled": target.enabled,
                }
            )
        return pd.DataFrame(rows)
