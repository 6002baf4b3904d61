"""Dispersion formulas.

Each formula kind is a small frozen dataclass carrying only the coefficients it
needs. ``Dispersion`` is the closed union of the kinds; every kind exposes
``nk(wavelength_um) -> (n, k)``.

Wavelengths are in microns (µm).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

import numpy as np
from scipy.interpolate import interp1d


@dataclass(frozen=True)
class Constant:
    """Wavelength-independent index.

    Args:
        n: Real part of the refractive index.
        k: Extinction coefficient. The engine uses ñ = n + ik, so absorbing
            media take a negative k (e.g. n=1.37, k=-7.62 for aluminium).
            Defaults to 0.
    """

    n: float
    k: float = 0.0

    def nk(self, wavelength_um: float) -> tuple[float, float]:
        return float(self.n), float(self.k)


@dataclass(frozen=True)
class Cauchy:
    """Cauchy formula ``n = A + B/λ² + C/λ⁴``."""

    a: float
    b: float
    c: float = 0.0
    k: float = 0.0

    def n(self, wavelength_um: float) -> float:
        lambda2 = wavelength_um * wavelength_um
        return self.a + self.b / lambda2 + self.c / (lambda2 * lambda2)

    def nk(self, wavelength_um: float) -> tuple[float, float]:
        return float(self.n(wavelength_um)), float(self.k)


@dataclass(frozen=True)
class Sellmeier:
    """Sellmeier formula ``n² = A + Σ Bᵢλ²/(λ² − Cᵢ)`` with up to three terms.

    A term whose B and C are both zero is skipped. When ``n²`` is not positive
    the formula has no physical solution and ``fallback_n`` is returned.

    Use :meth:`standard` for the usual form (A = 1) and :meth:`modified` for an
    explicit constant term.
    """

    b1: float
    c1: float
    b2: float = 0.0
    c2: float = 0.0
    b3: float = 0.0
    c3: float = 0.0
    a: float = 1.0
    fallback_n: float = 1.5
    k: float = 0.0

    @classmethod
    def standard(
        cls,
        b1: float,
        c1: float,
        b2: float = 0.0,
        c2: float = 0.0,
        b3: float = 0.0,
        c3: float = 0.0,
        **kwargs,
    ) -> Sellmeier:
        return cls(b1, c1, b2, c2, b3, c3, a=1.0, **kwargs)

    @classmethod
    def modified(
        cls,
        a: float,
        b1: float,
        c1: float,
        b2: float = 0.0,
        c2: float = 0.0,
        b3: float = 0.0,
        c3: float = 0.0,
        **kwargs,
    ) -> Sellmeier:
        return cls(b1, c1, b2, c2, b3, c3, a=a, **kwargs)

    def n_squared(self, wavelength_um: float) -> float:
        lambda2 = wavelength_um * wavelength_um
        n2 = self.a
        for b, c in ((self.b1, self.c1), (self.b2, self.c2), (self.b3, self.c3)):
            if b != 0 or c != 0:
                n2 += b * lambda2 / (lambda2 - c)
        return n2

    def nk(self, wavelength_um: float) -> tuple[float, float]:
        n2 = self.n_squared(wavelength_um)
        n = float(np.sqrt(n2)) if n2 > 0 else float(self.fallback_n)
        return n, float(self.k)


@dataclass(frozen=True)
class Tabulated:
    """Tabulated (λ, n, k) samples with linear interpolation.

    Outside the table the first or last sample is returned. Samples are sorted
    by wavelength on construction.

    Args:
        wavelengths_um: Sample wavelengths in µm.
        n: Real index at each sample.
        k: Extinction coefficient at each sample, negative for absorbing
            media. Defaults to zeros.
    """

    wavelengths_um: tuple[float, ...]
    n: tuple[float, ...]
    k: tuple[float, ...] = ()
    _interp: interp1d = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        wl = np.asarray(self.wavelengths_um, dtype=float)
        n = np.asarray(self.n, dtype=float)
        k = np.zeros_like(n) if len(self.k) == 0 else np.asarray(self.k, dtype=float)
        if wl.size == 0:
            raise ValueError("Tabulated dispersion requires at least one sample")
        if not (wl.shape == n.shape == k.shape):
            raise ValueError(
                f"Sample arrays must have the same length, got {wl.size} "
                f"wavelengths, {n.size} n values and {k.size} k values"
            )

        order = np.argsort(wl, kind="stable")
        wl, n, k = wl[order], n[order], k[order]
        object.__setattr__(self, "wavelengths_um", tuple(wl))
        object.__setattr__(self, "n", tuple(n))
        object.__setattr__(self, "k", tuple(k))

        if wl.size > 1:
            nk = np.vstack([n, k])
            interp = interp1d(
                wl,
                nk,
                kind="linear",
                bounds_error=False,
                fill_value=(nk[:, 0], nk[:, -1]),
                assume_sorted=True,
            )
            object.__setattr__(self, "_interp", interp)
        else:
            object.__setattr__(self, "_interp", None)

    def nk(self, wavelength_um: float) -> tuple[float, float]:
        if self._interp is None:
            return self.n[0], self.k[0]
        n, k = self._interp(wavelength_um)
        return float(n), float(k)


Dispersion = Union[Constant, Cauchy, Sellmeier, Tabulated]
