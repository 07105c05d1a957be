"""Tests for nutation angles, obliquity, the equation of the equinoxes and pole offsets."""

import math
import threading

import jax
import jax.numpy as jnp
import pytest

from astroframes._types import Accuracy, EquinoxType, PoleOffsets, PoleOffsetType
from astroframes.config import set_dtype
from astroframes.constants import AS2RAD, JD_J2000
from astroframes.earth_orientation import (
    cel_pole,
    e_tilt,
    ee_ct,
    get_pole_offsets,
    ira_equinox,
    mean_obliq,
    nutation_angles,
    polar_dxdy_to_dpsideps,
    reset_pole_offsets,
    set_pole_offsets,
)
from astroframes.errors import InvalidAccuracyError, InvalidSelectorError
from astroframes.utils import TransformCache

# 2006 January 1, 0h TT
_JD_2006 = 2453736.5
_SIN_EPS0 = math.sin(84381.406 * AS2RAD)


class TestNutationAngles:
    def test_units_are_arcsec(self):
        """Nutation in longitude stays within +/- 20 arcsec."""
        for t in (-0.5, 0.0, 0.06, 0.3):
            dpsi, deps = nutation_angles(t, Accuracy.FULL)
            assert jnp.abs(dpsi) < 20.0
            assert jnp.abs(deps) < 10.0

    def test_reference_2006(self):
        """Matches the IAU 2000A reference value at MJD 53736, in arcsec."""
        dpsi, deps = nutation_angles((_JD_2006 - JD_J2000) / 36525.0, Accuracy.FULL)
        assert jnp.allclose(dpsi, -0.9630909107115518431e-5 / AS2RAD, atol=1e-6)
        assert jnp.allclose(deps, 0.4063239174001678710e-4 / AS2RAD, atol=1e-6)

    def test_reduced_close_to_full(self):
        for t in (0.0, 0.1, 0.25):
            full = nutation_angles(t, Accuracy.FULL)
            reduced = nutation_angles(t, Accuracy.REDUCED)
            assert jnp.abs(full[0] - reduced[0]) < 2e-3
            assert jnp.abs(full[1] - reduced[1]) < 2e-3

    def test_integer_accuracy(self):
        a = nutation_angles(0.1, 1)
        b = nutation_angles(0.1, Accuracy.REDUCED)
        assert jnp.allclose(a[0], b[0], atol=0.0)

    def test_invalid_accuracy(self):
        with pytest.raises(InvalidAccuracyError, match="invalid accuracy"):
            nutation_angles(0.0, 7)


class TestMeanObliq:
    def test_j2000(self):
        assert jnp.allclose(mean_obliq(JD_J2000), 84381.406, atol=1e-9)

    def test_decreasing(self):
        """The obliquity decreases by about 46.8 arcsec per century."""
        delta = mean_obliq(JD_J2000 + 36525.0) - mean_obliq(JD_J2000)
        assert jnp.allclose(delta, -46.836769, atol=1e-2)


class TestEeCt:
    def test_reference_2006(self):
        """Complementary terms at MJD 53736 (IERS 2003 series)."""
        value = ee_ct(_JD_2006, 0.0, Accuracy.FULL)
        assert jnp.abs(value - 0.2046085004885125264e-8) < 1e-13

    @pytest.mark.parametrize("jd", [JD_J2000, _JD_2006, 2460000.5, JD_J2000 + 10000.0])
    def test_reduced_close_to_full(self, jd):
        full = ee_ct(jd, 0.0, Accuracy.FULL)
        reduced = ee_ct(jd, 0.0, Accuracy.REDUCED)
        assert jnp.abs(full - reduced) < 10e-6 * AS2RAD

    def test_truncation_error_j2000_plus_10000_days(self):
        """The 9-term series is about 3 microarcseconds off at J2000.0 + 10000 d."""
        jd = JD_J2000 + 10000.0
        diff = jnp.abs(ee_ct(jd, 0.0, Accuracy.REDUCED) - ee_ct(jd, 0.0, Accuracy.FULL))
        assert diff < 4e-6 * AS2RAD
        assert diff > 1e-6 * AS2RAD

    def test_magnitude(self):
        assert jnp.abs(ee_ct(JD_J2000, 0.0, Accuracy.FULL)) < 3e-3 * AS2RAD

    def test_split_date(self):
        a = ee_ct(2460000.0, 0.5, Accuracy.FULL)
        b = ee_ct(2460000.5, 0.0, Accuracy.FULL)
        assert jnp.allclose(a, b, atol=1e-18)

    def test_invalid_accuracy(self):
        with pytest.raises(InvalidAccuracyError, match="ee_ct"):
            ee_ct(JD_J2000, 0.0, 2)

    def test_cached_value_is_identical(self):
        cache = TransformCache()
        first = ee_ct(_JD_2006, 0.25, Accuracy.FULL, cache)
        second = ee_ct(_JD_2006, 0.25, Accuracy.FULL, cache)
        cold = ee_ct(_JD_2006, 0.25, Accuracy.FULL)
        assert jnp.array_equal(first, second)
        assert jnp.array_equal(first, cold)
        assert cache.ee_ct.hits == 1
        assert cache.ee_ct.misses == 1

    def test_cache_keyed_by_accuracy(self):
        cache = TransformCache()
        full = ee_ct(_JD_2006, 0.0, Accuracy.FULL, cache)
        reduced = ee_ct(_JD_2006, 0.0, Accuracy.REDUCED, cache)
        assert cache.ee_ct.hits == 0
        assert jnp.array_equal(reduced, ee_ct(_JD_2006, 0.0, Accuracy.REDUCED))
        assert not jnp.array_equal(full, reduced)

    def test_cache_keyed_by_dtype(self):
        cache = TransformCache()
        set_dtype(jnp.float32)
        single = ee_ct(2460000.5, 0.0, Accuracy.FULL, cache)
        set_dtype(jnp.float64)
        double = ee_ct(2460000.5, 0.0, Accuracy.FULL, cache)
        assert single.dtype == jnp.float32
        assert double.dtype == jnp.float64
        assert jnp.array_equal(double, ee_ct(2460000.5, 0.0, Accuracy.FULL))
        assert cache.ee_ct.hits == 0
        assert cache.ee_ct.misses == 2

    def test_jit(self):
        f = jax.jit(lambda jd: ee_ct(jd, 0.0, Accuracy.FULL, TransformCache()))
        assert jnp.allclose(f(_JD_2006), ee_ct(_JD_2006, 0.0, Accuracy.FULL), atol=1e-18)


class TestETilt:
    def test_j2000_obliquities(self):
        tilt = e_tilt(JD_J2000, Accuracy.FULL)
        assert jnp.allclose(tilt.mobl, 84381.406 / 3600.0, atol=1e-12)
        assert jnp.allclose(tilt.tobl - tilt.mobl, tilt.deps / 3600.0, atol=1e-13)

    def test_equation_of_equinoxes(self):
        tilt = e_tilt(_JD_2006, Accuracy.FULL)
        expected = (
            tilt.dpsi * jnp.cos(tilt.mobl * jnp.pi / 180.0) + ee_ct(_JD_2006, 0.0, Accuracy.FULL) / AS2RAD
        ) / 15.0
        assert jnp.allclose(tilt.ee, expected, atol=1e-12)
        # Nutation dominates: about 1 s of time at most
        assert jnp.abs(tilt.ee) < 1.2

    def test_explicit_pole_offsets(self):
        base = e_tilt(_JD_2006, Accuracy.REDUCED, PoleOffsets())
        shifted = e_tilt(_JD_2006, Accuracy.REDUCED, PoleOffsets(0.1, -0.2))
        assert jnp.allclose(shifted.dpsi - base.dpsi, 0.1, atol=1e-12)
        assert jnp.allclose(shifted.deps - base.deps, -0.2, atol=1e-12)
        assert jnp.allclose(shifted.mobl, base.mobl, atol=0.0)

    def test_default_pole_offsets(self):
        explicit = e_tilt(_JD_2006, Accuracy.FULL, PoleOffsets(0.05, 0.02))
        set_pole_offsets(PoleOffsets(0.05, 0.02))
        implicit = e_tilt(_JD_2006, Accuracy.FULL)
        assert jnp.allclose(implicit.dpsi, explicit.dpsi, atol=0.0)
        assert jnp.allclose(implicit.deps, explicit.deps, atol=0.0)

    def test_full_vs_reduced(self):
        full = e_tilt(_JD_2006, Accuracy.FULL)
        reduced = e_tilt(_JD_2006, Accuracy.REDUCED)
        assert jnp.abs(full.ee - reduced.ee) < 2e-4

    def test_invalid_accuracy(self):
        with pytest.raises(InvalidAccuracyError, match="e_tilt"):
            e_tilt(_JD_2006, 7)

    def test_uses_cache(self):
        cache = TransformCache()
        e_tilt(_JD_2006, Accuracy.FULL, cache=cache)
        e_tilt(_JD_2006, Accuracy.FULL, cache=cache)
        assert cache.ee_ct.hits == 1


class TestIraEquinox:
    def test_mean_j2000(self):
        assert jnp.allclose(ira_equinox(JD_J2000, EquinoxType.MEAN, Accuracy.FULL), -0.014506 / 15.0 / 3600.0)

    def test_true_is_mean_minus_ee(self):
        mean = ira_equinox(_JD_2006, EquinoxType.MEAN, Accuracy.FULL)
        true = ira_equinox(_JD_2006, EquinoxType.TRUE, Accuracy.FULL)
        ee = e_tilt(_JD_2006, Accuracy.FULL).ee
        assert jnp.allclose(true, mean - ee / 3600.0, atol=1e-15)

    def test_precession_rate(self):
        """About 4612 arcsec (307 s of time) per century."""
        h = ira_equinox(JD_J2000 + 36525.0, EquinoxType.MEAN, Accuracy.FULL)
        assert jnp.allclose(-h * 3600.0, (0.014506 + 4612.156534 + 1.3915817) / 15.0, atol=1e-4)

    def test_invalid_equinox(self):
        with pytest.raises(InvalidSelectorError, match="equinox type"):
            ira_equinox(_JD_2006, 2, Accuracy.FULL)


class TestPoleOffsets:
    def test_default_is_zero(self):
        assert get_pole_offsets() == PoleOffsets(0.0, 0.0)

    def test_set_and_reset(self):
        set_pole_offsets(PoleOffsets(1.0, 2.0))
        assert get_pole_offsets() == PoleOffsets(1.0, 2.0)
        reset_pole_offsets()
        assert get_pole_offsets() == PoleOffsets(0.0, 0.0)

    def test_visible_from_other_threads(self):
        set_pole_offsets(PoleOffsets(0.3, 0.4))
        seen = []
        t = threading.Thread(target=lambda: seen.append(get_pole_offsets()))
        t.start()
        t.join()
        assert seen == [PoleOffsets(0.3, 0.4)]

    def test_cel_pole_dpsi_deps(self):
        pole = cel_pole(_JD_2006, PoleOffsetType.DPSI_DEPS, 100.0, 200.0)
        assert pole.dpsi == pytest.approx(0.1)
        assert pole.deps == pytest.approx(0.2)
        assert get_pole_offsets() == PoleOffsets(0.0, 0.0)

    def test_cel_pole_apply(self):
        pole = cel_pole(_JD_2006, 1, -50.0, 25.0, apply=True)
        assert get_pole_offsets() == pole

    def test_cel_pole_invalid_type(self):
        with pytest.raises(InvalidSelectorError, match="pole offset type") as excinfo:
            cel_pole(_JD_2006, 3, 1.0, 1.0)
        assert excinfo.value.code == 1

    def test_cel_pole_x_y(self):
        """At J2000.0, dx maps to dpsi * sin(eps0) and dy to deps."""
        pole = cel_pole(JD_J2000, PoleOffsetType.X_Y, 1.0, 2.0)
        assert jnp.allclose(pole.dpsi, 1e-3 / _SIN_EPS0, rtol=1e-6)
        assert jnp.allclose(pole.deps, 2e-3, rtol=1e-6)

    def test_dxdy_zero(self):
        dpsi, deps = polar_dxdy_to_dpsideps(_JD_2006, 0.0, 0.0)
        assert float(dpsi) == 0.0
        assert float(deps) == 0.0

    def test_dxdy_linear(self):
        a = polar_dxdy_to_dpsideps(_JD_2006, 0.2, -0.1)
        b = polar_dxdy_to_dpsideps(_JD_2006, 0.4, -0.2)
        assert jnp.allclose(2.0 * a[0], b[0], rtol=1e-12)
        assert jnp.allclose(2.0 * a[1], b[1], rtol=1e-12)
