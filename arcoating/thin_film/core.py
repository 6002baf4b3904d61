"""Thin film optics core functions.

This provides the transfer matrix method (TMM) used to compute the amplitude
and power reflection/transmission of a coating design at one wavelength and
one angle of incidence, for s and p polarizations.

Ref :
- Chap 2. Thin-Film Optical Filters, Fifth Edition, Macleod, Hugh Angus CRC Press
- F. Abelès, Researches sur la propagation des ondes électromagnétiques
    sinusoïdales dans les milieus stratifies.
    Applications aux couches minces, Ann. Phys. Paris,
    12ième Series 5 (1950): 596–640.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

import numpy as np

if TYPE_CHECKING:
    from arcoating.materials import DispersionProvider

    from .stack import ThinFilmStack

PolSP = Literal["s", "p"]
Metric = Literal["Rs", "Rp", "Rave", "Ts", "Tp", "Tave"]
METRICS: tuple[str, ...] = ("Rs", "Rp", "Rave", "Ts", "Tp", "Tave")

_IDENTITY = (1.0 + 0j, 0j, 0j, 1.0 + 0j)


@dataclass(frozen=True)
class OpticalResult:
    """Power reflectance and transmittance in percent (0..100)."""

    Rs: float
    Rp: float
    Rave: float
    Ts: float
    Tp: float
    Tave: float
    is_tir: bool = False

    @classmethod
    def total_internal_reflection(cls) -> OpticalResult:
        return cls(100.0, 100.0, 100.0, 0.0, 0.0, 0.0, is_tir=True)

    def value(self, metric: Metric) -> float:
        """Value of one of 'Rs', 'Rp', 'Rave', 'Ts', 'Tp', 'Tave'."""
        if metric not in METRICS:
            raise ValueError(f"Invalid metric '{metric}'. Must be one of {METRICS}")
        return getattr(self, metric)


@dataclass(frozen=True)
class AmplitudeCoefficients:
    """Complex amplitude coefficients for s and p polarizations.

    Amplitudes follow the admittance convention of the characteristic matrix
    (``t = 2η₀/(η₀B + C)``), so the same power factors apply to the bare
    interface and to coated stacks. Under total internal reflection the
    transmitted amplitudes are zero.
    """

    rs: complex
    rp: complex
    ts: complex
    tp: complex
    is_tir: bool = False


def _snell_cos(n0_sin0: float, n: complex) -> complex:
    """Angle cosine in a medium of complex index ``n`` with branch selection.

    The principal root of ``1 - sin²θ`` is negated when its real part is
    negative, or zero with a negative imaginary part.
    """
    sin_t = n0_sin0 / n
    cos_t = complex(np.sqrt(1.0 - sin_t * sin_t + 0j))
    if cos_t.real < 0 or (cos_t.real == 0 and cos_t.imag < 0):
        cos_t = -cos_t
    return cos_t


def _admittance(n: complex, cos_t: complex, pol: PolSP) -> complex:
    """Tilted optical admittance, in units of the free-space admittance.

    η_s = n·cos(θ), η_p = n/cos(θ)
    """
    if pol == "s":
        return n * cos_t
    elif pol == "p":
        return n / cos_t
    else:
        raise ValueError("Invalid polarization state")


def fresnel_coefficients(
    n1: float, n2: float, cos_theta_i: float
) -> AmplitudeCoefficients:
    """Amplitude coefficients of a bare interface between two real media.

    Args:
        n1: Index of the incident medium.
        n2: Index of the exit medium.
        cos_theta_i: Cosine of the angle of incidence.

    Returns:
        AmplitudeCoefficients. Under total internal reflection |r| = 1 and
        t = 0 for both polarizations.
    """
    cos_i = min(abs(cos_theta_i), 1.0)
    sin_i = np.sqrt(1.0 - cos_i * cos_i)
    sin_t = (n1 / n2) * sin_i

    if sin_t > 1.0:
        # Evanescent transmitted wave
        cos_t = 1j * np.sqrt(sin_t * sin_t - 1.0)
        rs = (n1 * cos_i - n2 * cos_t) / (n1 * cos_i + n2 * cos_t)
        rp = (n1 * cos_t - n2 * cos_i) / (n1 * cos_t + n2 * cos_i)
        return AmplitudeCoefficients(complex(rs), complex(rp), 0j, 0j, is_tir=True)

    cos_t = np.sqrt(1.0 - sin_t * sin_t)
    n1_cos_i = n1 * cos_i
    n2_cos_t = n2 * cos_t
    n1_cos_t = n1 * cos_t
    n2_cos_i = n2 * cos_i

    rs = (n1_cos_i - n2_cos_t) / (n1_cos_i + n2_cos_t)
    ts = 2.0 * n1_cos_i / (n1_cos_i + n2_cos_t)
    rp = (n1_cos_t - n2_cos_i) / (n1_cos_t + n2_cos_i)
    tp = 2.0 * n1_cos_t / (n1_cos_t + n2_cos_i)
    return AmplitudeCoefficients(complex(rs), complex(rp), complex(ts), complex(tp))


def _layer_product(M, eta: complex, delta: complex):
    """Right-multiply the running matrix ``M`` by one layer's matrix.

    Layer matrix: [[cos δ, i·sin δ/η], [i·η·sin δ, cos δ]]
    """
    A, B, C, D = M
    c = np.cos(delta)
    s = np.sin(delta)
    i = 1j
    mA = c
    mB = i * (s / eta)
    mC = i * (eta * s)
    mD = c
    return A * mA + B * mC, A * mB + B * mD, C * mA + D * mC, C * mB + D * mD


def _amplitudes(M, eta0: complex, etas: complex) -> tuple[complex, complex]:
    A, B, C, D = M
    b = A + B * etas
    c = C + D * etas
    denom = eta0 * b + c
    if denom == 0:
        raise ZeroDivisionError(
            "Degenerate characteristic matrix: zero amplitude denominator"
        )
    r = (eta0 * b - c) / denom
    t = (2 * eta0) / denom
    return complex(r), complex(t)


@dataclass(frozen=True)
class _Solution:
    coefficients: AmplitudeCoefficients
    n_substrate: float
    cos_incident: float
    cos_substrate: float


class TransferMatrixEngine:
    """Transfer matrix (characteristic matrix) solver for coating designs.

    The engine holds no state beyond its dispersion provider: it is safe to
    call concurrently on different stacks.

    Args:
        provider: Dispersion provider resolving material and substrate indices.

    Examples
    --------
    >>> from arcoating.materials import MaterialCatalog
    >>> from arcoating.thin_film import ThinFilmStack, TransferMatrixEngine
    >>> engine = TransferMatrixEngine(MaterialCatalog.standard())
    >>> stack = ThinFilmStack("N-BK7").add_layer("MgF2", 0.25, "optical")
    >>> result = engine.evaluate(stack, 0.55, 0.0)
    >>> result.Rave < 2.0
    True
    """

    def __init__(self, provider: DispersionProvider):
        self.provider = provider

    def _solve(
        self, stack: ThinFilmStack, wavelength_um: float, aoi_deg: float
    ) -> _Solution:
        n_inc = float(stack.incident_index)
        n_sub = float(self.provider.substrate_index(stack.substrate_id, wavelength_um))
        theta0 = np.deg2rad(aoi_deg)
        sin0 = float(np.sin(theta0))
        cos0 = float(np.cos(theta0))

        # TIR at the substrate is checked before any matrix work
        sin_sub = n_inc * sin0 / n_sub
        if sin_sub > 1.0:
            if stack.layers:
                coeffs = AmplitudeCoefficients(1 + 0j, 1 + 0j, 0j, 0j, is_tir=True)
            else:
                coeffs = fresnel_coefficients(n_inc, n_sub, cos0)
            return _Solution(coeffs, n_sub, cos0, 0.0)
        cos_sub = float(np.sqrt(1.0 - sin_sub * sin_sub))

        if not stack.layers:
            coeffs = fresnel_coefficients(n_inc, n_sub, cos0)
            return _Solution(coeffs, n_sub, cos0, cos_sub)

        # Walk from the substrate side when incident from the denser medium
        layers = stack.layers[::-1] if n_inc > n_sub else stack.layers

        n0_sin0 = n_inc * sin0
        M_s = _IDENTITY
        M_p = _IDENTITY
        for layer in layers:
            n, k = self.provider.material_index(layer.material_id, wavelength_um)
            n_l = complex(n, k)
            cos_l = _snell_cos(n0_sin0, n_l)
            d_um = layer.physical_thickness_um(self.provider, stack.reference_wl_um)
            delta = layer.phase_thickness(wavelength_um, d_um, cos_l, n_l)
            M_s = _layer_product(M_s, _admittance(n_l, cos_l, "s"), delta)
            M_p = _layer_product(M_p, _admittance(n_l, cos_l, "p"), delta)

        rs, ts = _amplitudes(M_s, n_inc * cos0, n_sub * cos_sub)
        rp, tp = _amplitudes(M_p, n_inc / cos0, n_sub / cos_sub)
        return _Solution(AmplitudeCoefficients(rs, rp, ts, tp), n_sub, cos0, cos_sub)

    def coefficients(
        self, stack: ThinFilmStack, wavelength_um: float, aoi_deg: float = 0.0
    ) -> AmplitudeCoefficients:
        """Complex amplitude coefficients (rs, rp, ts, tp).

        For a coated stack under substrate TIR the phase of r is not
        computed and r = 1 is reported.
        """
        return self._solve(stack, wavelength_um, aoi_deg).coefficients

    def evaluate(
        self, stack: ThinFilmStack, wavelength_um: float, aoi_deg: float = 0.0
    ) -> OpticalResult:
        """Reflectance and transmittance of a stack.

        Args:
            stack: Coating design.
            wavelength_um: Wavelength in µm.
            aoi_deg: Angle of incidence in the incident medium, in degrees.

        Returns:
            OpticalResult with R and T in percent.
        """
        solution = self._solve(stack, wavelength_um, aoi_deg)
        coeffs = solution.coefficients
        if coeffs.is_tir:
            return OpticalResult.total_internal_reflection()

        n_inc = float(stack.incident_index)
        n_sub = solution.n_substrate
        cos0 = solution.cos_incident
        cos_sub = solution.cos_substrate

        Rs = (coeffs.rs * coeffs.rs.conjugate()).real * 100.0
        Rp = (coeffs.rp * coeffs.rp.conjugate()).real * 100.0

        # η_sub/η_0 differs between s and p
        geo_s = (n_sub * cos_sub) / (n_inc * cos0)
        geo_p = (n_sub * cos0) / (n_inc * cos_sub)
        Ts = (coeffs.ts * coeffs.ts.conjugate()).real * geo_s * 100.0
        Tp = (coeffs.tp * coeffs.tp.conjugate()).real * geo_p * 100.0

        return OpticalResult(
            Rs=float(Rs),
            Rp=float(Rp),
            Rave=float((Rs + Rp) / 2.0),
            Ts=float(Ts),
            Tp=float(Tp),
            Tave=float((Ts + Tp) / 2.0),
        )
