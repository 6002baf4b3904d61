"""Material catalog.

The catalog is the dispersion provider consumed by the optics engine: it maps
a coating material id and a wavelength to ``(n, k)`` and a substrate glass id
and a wavelength to ``n``.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from .material import STANDARD_GLASSES, STANDARD_MATERIALS, CoatingMaterial, Glass

logger = logging.getLogger(__name__)

# Substitutes used by a non-strict catalog for unknown ids
FALLBACK_MATERIAL_INDEX = 1.5
FALLBACK_SUBSTRATE_INDEX = 1.5168


class UnknownMaterialError(KeyError):
    """Raised when a material or glass id is not in the catalog."""

    def __str__(self):
        # KeyError quotes its message
        return str(self.args[0]) if self.args else ""


@runtime_checkable
class DispersionProvider(Protocol):
    """Index lookup used by the optics engine.

    Implementations must be deterministic for a fixed ``(id, wavelength)``.
    """

    def material_index(
        self, material_id: str, wavelength_um: float
    ) -> tuple[float, float]: ...

    def substrate_index(self, substrate_id: str, wavelength_um: float) -> float: ...


class MaterialCatalog:
    """In-memory catalog of coating materials and substrate glasses.

    Lookups are case-insensitive. A strict catalog raises
    :class:`UnknownMaterialError` for unknown ids; a non-strict catalog logs a
    warning and substitutes a constant index (n=1.5 for coatings, n=1.5168 for
    substrates).

    Args:
        materials: Initial coating materials.
        glasses: Initial substrate glasses.
        strict: Whether unknown ids are an error. Defaults to True.

    Examples
    --------
    >>> from arcoating.materials import MaterialCatalog
    >>> catalog = MaterialCatalog.standard()
    >>> n, k = catalog.material_index("MgF2", 0.55)
    >>> n_sub = catalog.substrate_index("N-BK7", 0.55)
    """

    def __init__(
        self,
        materials: list[CoatingMaterial] | None = None,
        glasses: list[Glass] | None = None,
        strict: bool = True,
    ):
        self.strict = strict
        self._materials: dict[str, CoatingMaterial] = {}
        self._glasses: dict[str, Glass] = {}
        for material in materials or []:
            self.add_material(material)
        for glass in glasses or []:
            self.add_glass(glass)

    @classmethod
    def standard(cls, strict: bool = True) -> MaterialCatalog:
        """Catalog holding the built-in coating materials and glasses."""
        return cls(
            materials=[factory() for factory in STANDARD_MATERIALS],
            glasses=[factory() for factory in STANDARD_GLASSES],
            strict=strict,
        )

    @staticmethod
    def _key(name: str) -> str:
        return name.strip().upper()

    # ----- catalog content -----
    def add_material(self, material: CoatingMaterial) -> MaterialCatalog:
        """Add or replace a coating material. Returns self for chaining."""
        self._materials[self._key(material.name)] = material
        return self

    def add_glass(self, glass: Glass) -> MaterialCatalog:
        """Add or replace a substrate glass. Returns self for chaining."""
        self._glasses[self._key(glass.name)] = glass
        return self

    def get_material(self, name: str) -> CoatingMaterial | None:
        return self._materials.get(self._key(name))

    def get_glass(self, name: str) -> Glass | None:
        return self._glasses.get(self._key(name))

    @property
    def material_names(self) -> list[str]:
        return sorted(material.name for material in self._materials.values())

    @property
    def glass_names(self) -> list[str]:
        return sorted(glass.name for glass in self._glasses.values())

    # ----- dispersion provider -----
    def material_index(
        self, material_id: str, wavelength_um: float
    ) -> tuple[float, float]:
        """Complex index ``(n, k)`` of a coating material."""
        material = self.get_material(material_id)
        if material is None:
            if self.strict:
                raise UnknownMaterialError(
                    f"Unknown coating material '{material_id}'"
                )
            logger.warning(
                "Unknown coating material %r, using n=%s",
                material_id,
                FALLBACK_MATERIAL_INDEX,
            )
            return FALLBACK_MATERIAL_INDEX, 0.0
        return material.nk(wavelength_um)

    def substrate_index(self, substrate_id: str, wavelength_um: float) -> float:
        """Real index ``n`` of a substrate glass."""
        glass = self.get_glass(substrate_id)
        if glass is None:
            if self.strict:
                raise UnknownMaterialError(f"Unknown substrate glass '{substrate_id}'")
            logger.warning(
                "Unknown substrate glass %r, using n=%s",
                substrate_id,
                FALLBACK_SUBSTRATE_INDEX,
            )
            return FALLBACK_SUBSTRATE_INDEX
        return glass.n(wavelength_um)

    def __repr__(self):
        return (
            f"MaterialCatalog({len(self._materials)} materials, "
            f"{len(self._glasses)} glasses, strict={self.strict})"
        )
