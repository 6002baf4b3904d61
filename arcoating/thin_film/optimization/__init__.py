# flake8: noqa

from .global_search import MultiStartSearch
from .operand import MeritEvaluator, MeritTarget, generate_targets
from .optimizer import LevenbergMarquardtSolver, LMSettings, OptimizationOutcome
from .report import ThinFilmReport
from .variable import LayerThicknessVariable, ThicknessParameters

__all__ = [
    "LevenbergMarquardtSolver",
    "LMSettings",
    "MultiStartSearch",
    "OptimizationOutcome",
    "ThinFilmReport",
    "MeritTarget",
    "MeritEvaluator",
    "generate_targets",
    "LayerThicknessVariable",
    "ThicknessParameters",
]
