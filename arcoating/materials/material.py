"""Coating materials and substrate glasses.

A material is a name bound to a :data:`~arcoating.materials.dispersion.Dispersion`
formula. Coating materials resolve to a complex index ``(n, k)``; glasses are
used as substrates and resolve to a real index ``n``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from .dispersion import Cauchy, Constant, Dispersion, Sellmeier


@dataclass(frozen=True)
class CoatingMaterial:
    """Thin-film coating material.

    Args:
        name: Material identifier used by layers.
        dispersion: Dispersion formula providing ``(n, k)``.

    Examples
    --------
    >>> from arcoating.materials import CoatingMaterial
    >>> mgf2 = CoatingMaterial.MgF2()
    >>> n, k = mgf2.nk(0.55)
    """

    name: str
    dispersion: Dispersion

    def nk(self, wavelength_um: float) -> tuple[float, float]:
        return self.dispersion.nk(wavelength_um)

    def n(self, wavelength_um: float) -> float:
        return self.nk(wavelength_um)[0]

    def k(self, wavelength_um: float) -> float:
        return self.nk(wavelength_um)[1]

    # ----- custom materials -----
    @classmethod
    def custom(cls, name: str, n: float, k: float = 0.0) -> CoatingMaterial:
        """Constant-index material.

        Args:
            name: Material identifier.
            n: Real part of the refractive index.
            k: Extinction coefficient; negative for absorbing media, since
                the engine uses ñ = n + ik. Defaults to 0.
        """
        return cls(name, Constant(n, k))

    @classmethod
    def custom_cauchy(
        cls, name: str, a: float, b: float, c: float = 0.0
    ) -> CoatingMaterial:
        return cls(name, Cauchy(a, b, c))

    @classmethod
    def custom_sellmeier(
        cls, name: str, coefficients: Sellmeier, fallback_n: float = 1.5
    ) -> CoatingMaterial:
        return cls(name, replace(coefficients, fallback_n=fallback_n))

    # ----- built-in materials -----
    @classmethod
    def MgF2(cls) -> CoatingMaterial:
        return cls(
            "MgF2",
            Sellmeier.standard(
                0.48755108,
                0.001882178,
                0.39875031,
                0.008951888,
                2.3120353,
                566.13559,
                fallback_n=1.38,
            ),
        )

    @classmethod
    def SiO2(cls) -> CoatingMaterial:
        return cls(
            "SiO2",
            Sellmeier.standard(
                0.6961663,
                0.0046791,
                0.4079426,
                0.0135121,
                0.8974794,
                97.9340,
                fallback_n=1.46,
            ),
        )

    @classmethod
    def Al2O3(cls) -> CoatingMaterial:
        return cls(
            "Al2O3",
            Sellmeier.standard(
                1.4313493,
                0.0052799,
                0.65054713,
                0.0142383,
                5.3414021,
                325.01783,
                fallback_n=1.77,
            ),
        )

    @classmethod
    def ZrO2(cls) -> CoatingMaterial:
        return cls("ZrO2", Cauchy(1.92, 0.022, 0.002))

    @classmethod
    def Ta2O5(cls) -> CoatingMaterial:
        return cls("Ta2O5", Cauchy(1.97, 0.022, 0.002))

    @classmethod
    def TiO2(cls) -> CoatingMaterial:
        return cls("TiO2", Cauchy(2.20, 0.030, 0.003))

    @classmethod
    def HfO2(cls) -> CoatingMaterial:
        return cls("HfO2", Cauchy(1.84, 0.018, 0.002))


@dataclass(frozen=True)
class Glass:
    """Substrate glass with a real refractive index."""

    name: str
    dispersion: Dispersion

    def n(self, wavelength_um: float) -> float:
        return self.dispersion.nk(wavelength_um)[0]

    # Schott / Malitson Sellmeier coefficients
    @classmethod
    def N_BK7(cls) -> Glass:
        return cls(
            "N-BK7",
            Sellmeier.standard(
                1.03961212,
                0.00600069867,
                0.231792344,
                0.0200179144,
                1.01046945,
                103.560653,
                fallback_n=1.5168,
            ),
        )

    @classmethod
    def F_SILICA(cls) -> Glass:
        return cls(
            "F_SILICA",
            Sellmeier.standard(
                0.6961663,
                0.0046791,
                0.4079426,
                0.0135121,
                0.8974794,
                97.9340,
                fallback_n=1.4585,
            ),
        )

    @classmethod
    def N_SF11(cls) -> Glass:
        return cls(
            "N-SF11",
            Sellmeier.standard(
                1.73759695,
                0.013188707,
                0.313747346,
                0.0623068142,
                1.89878101,
                155.23629,
                fallback_n=1.7847,
            ),
        )


STANDARD_MATERIALS = (
    CoatingMaterial.MgF2,
    CoatingMaterial.SiO2,
    CoatingMaterial.Al2O3,
    CoatingMaterial.ZrO2,
    CoatingMaterial.Ta2O5,
    CoatingMaterial.TiO2,
    CoatingMaterial.HfO2,
)

STANDARD_GLASSES = (Glass.N_BK7, Glass.F_SILICA, Glass.N_SF11)
