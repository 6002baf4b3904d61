"""Coating materials, substrate glasses and their dispersion formulas.

Public API:
- ``Constant``, ``Cauchy``, ``Sellmeier``, ``Tabulated``: dispersion formulas
- ``CoatingMaterial``, ``Glass``: named materials
- ``MaterialCatalog``: dispersion provider used by the optics engine
"""

from __future__ import annotations

from .catalog import DispersionProvider, MaterialCatalog, UnknownMaterialError
from .dispersion import Cauchy, Constant, Dispersion, Sellmeier, Tabulated
from .material import CoatingMaterial, Glass

__all__ = [
    "Constant",
    "Cauchy",
    "Sellmeier",
    "Tabulated",
    "Dispersion",
    "CoatingMaterial",
    "Glass",
    "MaterialCatalog",
    "DispersionProvider",
    "UnknownMaterialError",
]
