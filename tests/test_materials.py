"""Tests for the materials module.

Dispersion formulas, built-in materials and glasses, and the material catalog
used as dispersion provider.
"""

import logging

import numpy as np
import pytest

from arcoating.materials import (
    Cauchy,
    CoatingMaterial,
    Constant,
    DispersionProvider,
    Glass,
    MaterialCatalog,
    Sellmeier,
    Tabulated,
    UnknownMaterialError,
)


class TestDispersionFormulas:
    """Test the dispersion formula kinds."""

    def test_constant_same_at_all_wavelengths(self):
        disp = Constant(1.75)
        assert disp.nk(0.4) == (1.75, 0.0)
        assert disp.nk(0.8) == (1.75, 0.0)

    def test_constant_keeps_extinction(self):
        assert Constant(1.37, -7.62).nk(0.633) == (1.37, -7.62)

    def test_cauchy_value(self):
        cauchy = Cauchy(2.20, 0.030, 0.003)
        wl = 0.55
        expected = 2.20 + 0.030 / wl**2 + 0.003 / wl**4
        assert cauchy.n(wl) == pytest.approx(expected, abs=1e-10)
        assert cauchy.nk(wl)[1] == 0.0

    def test_cauchy_normal_dispersion(self):
        cauchy = Cauchy(2.20, 0.030, 0.003)
        assert cauchy.n(0.4) > cauchy.n(0.7)

    def test_sellmeier_standard_has_unit_constant(self):
        s = Sellmeier.standard(1.0, 0.01)
        assert s.a == 1.0

    def test_sellmeier_modified_has_custom_constant(self):
        s = Sellmeier.modified(2.5, 1.0, 0.01)
        assert s.a == 2.5

    def test_sellmeier_normal_dispersion(self):
        mgf2 = CoatingMaterial.MgF2()
        n400, n550, n700 = mgf2.n(0.4), mgf2.n(0.55), mgf2.n(0.7)
        assert n400 > n550 > n700

    def test_sellmeier_skips_empty_terms(self):
        s = Sellmeier.modified(2.25, 0.0, 0.0)
        assert s.nk(0.55)[0] == pytest.approx(1.5)

    def test_sellmeier_fallback_when_n_squared_not_positive(self):
        # pole term drives n^2 negative just above the resonance
        s = Sellmeier.standard(10.0, 0.31, fallback_n=1.42)
        assert s.n_squared(0.55) < 0
        assert s.nk(0.55) == (1.42, 0.0)

    def test_tabulated_interpolates_linearly(self):
        table = Tabulated((0.4, 0.6), (1.5, 1.7), (0.0, 0.2))
        n, k = table.nk(0.5)
        assert n == pytest.approx(1.6)
        assert k == pytest.approx(0.1)

    def test_tabulated_clamps_outside_range(self):
        table = Tabulated((0.4, 0.6), (1.5, 1.7))
        assert table.nk(0.3) == (1.5, 0.0)
        assert table.nk(0.9) == (1.7, 0.0)

    def test_tabulated_sorts_samples(self):
        table = Tabulated((0.6, 0.4, 0.5), (1.7, 1.5, 1.6))
        assert table.wavelengths_um == (0.4, 0.5, 0.6)
        assert table.nk(0.45)[0] == pytest.approx(1.55)

    def test_tabulated_single_sample(self):
        table = Tabulated((0.55,), (1.9,), (0.01,))
        assert table.nk(1.0) == (1.9, 0.01)

    def test_tabulated_empty_rejected(self):
        with pytest.raises(ValueError, match="at least one sample"):
            Tabulated((), ())

    def test_tabulated_length_mismatch_rejected(self):
        with pytest.raises(ValueError, match="same length"):
            Tabulated((0.4, 0.6), (1.5,))


class TestBuiltInMaterials:
    """Test the built-in coating materials and glasses at 550 nm."""

    @pytest.mark.parametrize(
        "factory, low, high",
        [
            (CoatingMaterial.MgF2, 1.37, 1.39),
            (CoatingMaterial.SiO2, 1.45, 1.47),
            (CoatingMaterial.TiO2, 2.25, 2.45),
            (CoatingMaterial.Al2O3, 1.75, 1.80),
            (CoatingMaterial.ZrO2, 1.9, 2.1),
            (CoatingMaterial.Ta2O5, 2.0, 2.15),
            (CoatingMaterial.HfO2, 1.85, 2.0),
        ],
    )
    def test_coating_index_at_550nm(self, factory, low, high):
        n, k = factory().nk(0.55)
        assert low <= n <= high
        assert k == 0.0

    def test_n_bk7(self):
        assert Glass.N_BK7().n(0.5876) == pytest.approx(1.5168, abs=2e-4)

    def test_fused_silica(self):
        assert Glass.F_SILICA().n(0.5876) == pytest.approx(1.4585, abs=2e-4)

    def test_n_sf11(self):
        assert Glass.N_SF11().n(0.5876) == pytest.approx(1.7847, abs=2e-4)

    def test_custom_material(self):
        material = CoatingMaterial.custom("Absorber", 1.37, -7.62)
        assert material.n(0.633) == 1.37
        assert material.k(0.633) == -7.62

    def test_custom_sellmeier_fallback(self):
        material = CoatingMaterial.custom_sellmeier(
            "Odd", Sellmeier.standard(10.0, 0.31), fallback_n=1.33
        )
        assert material.n(0.55) == 1.33


class TestMaterialCatalog:
    """Test MaterialCatalog lookups and fallbacks."""

    def test_is_dispersion_provider(self, catalog):
        assert isinstance(catalog, DispersionProvider)

    def test_standard_content(self, catalog):
        assert "MgF2" in catalog.material_names
        assert "TiO2" in catalog.material_names
        assert "N-BK7" in catalog.glass_names

    def test_lookup_is_case_insensitive(self, catalog):
        expected = catalog.material_index("MgF2", 0.55)
        assert catalog.material_index("mgf2", 0.55) == expected
        n_sub = catalog.substrate_index("N-BK7", 0.55)
        assert catalog.substrate_index(" n-bk7 ", 0.55) == n_sub

    def test_deterministic(self, catalog):
        values = {catalog.material_index("SiO2", 0.5) for _ in range(5)}
        assert len(values) == 1

    def test_unknown_material_strict(self, catalog):
        with pytest.raises(UnknownMaterialError, match="Unobtainium"):
            catalog.material_index("Unobtainium", 0.55)

    def test_unknown_glass_strict(self, catalog):
        with pytest.raises(KeyError):
            catalog.substrate_index("NOPE", 0.55)

    def test_unknown_material_fallback(self, caplog):
        catalog = MaterialCatalog.standard(strict=False)
        with caplog.at_level(logging.WARNING):
            assert catalog.material_index("Unobtainium", 0.55) == (1.5, 0.0)
        assert "Unobtainium" in caplog.text

    def test_unknown_glass_fallback(self):
        catalog = MaterialCatalog.standard(strict=False)
        assert catalog.substrate_index("NOPE", 0.55) == 1.5168

    def test_add_material_and_glass(self):
        catalog = (
            MaterialCatalog()
            .add_material(CoatingMaterial.custom("LowN", 1.25))
            .add_glass(Glass("AIR", Constant(1.0)))
        )
        assert catalog.material_index("LowN", 0.55) == (1.25, 0.0)
        assert catalog.substrate_index("air", 0.55) == 1.0
        assert catalog.get_material("missing") is None

    def test_add_replaces_existing(self, catalog):
        catalog.add_material(CoatingMaterial.custom("MgF2", 1.30))
        assert catalog.material_index("MgF2", 0.55) == (1.30, 0.0)

    def test_repr(self, catalog):
        assert "strict=True" in repr(catalog)

    def test_index_decreases_with_wavelength(self, catalog):
        wavelengths = np.linspace(0.4, 0.8, 5)
        ns = [catalog.material_index("SiO2", wl)[0] for wl in wavelengths]
        assert np.all(np.diff(ns) < 0)
