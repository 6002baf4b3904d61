from .target import COMPARE_TYPES, CompareType, MeritTarget, generate_targets
from .thin_film import MeritEvaluator, active_targets

__all__ = [
    "MeritTarget",
    "CompareType",
    "COMPARE_TYPES",
    "generate_targets",
    "MeritEvaluator",
    "active_targets",
]
