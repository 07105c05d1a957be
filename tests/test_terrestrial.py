"""Tests for Earth rotation, sidereal time, polar motion and the terrestrial <-> celestial composers."""

import jax
import jax.numpy as jnp
import numpy as np
import pytest

from astroframes._types import (
    Accuracy,
    CioLocation,
    CioSystem,
    DynamicalSystem,
    EarthRotationMeasure,
    EquatorialClass,
    EquinoxType,
    WobbleDirection,
)
from astroframes.constants import AS2RAD, DAY, HOUR2RAD, RAD2DEG
from astroframes.earth_orientation import e_tilt
from astroframes.errors import (
    FrameError,
    InvalidAccuracyError,
    InvalidSelectorError,
    MissingVectorError,
    StageError,
)
from astroframes.frames import (
    EraRotation,
    GstRotation,
    Iau2006CioProvider,
    cel2ter,
    cirs_to_gcrs,
    cirs_to_itrs,
    earth_rotation_strategy,
    era,
    gcrs_to_itrs,
    itrs_to_cirs,
    itrs_to_gcrs,
    itrs_to_tod,
    sidereal_time,
    ter2cel,
    tod_to_gcrs,
    tod_to_itrs,
    wobble,
)
from astroframes.rotations import Rz
from astroframes.sofa import c2ixys, era00, pom00, sp00, xys06a
from astroframes.utils import TransformCache

# 2006 January 1, 0h UT1
_JD_2006 = 2453736.5
# 2020 January 1, 6h TT
_JD_HIGH = 2458849.5
_JD_LOW = 0.25
_DT = 69.184
_XP = 0.1
_YP = 0.3
_V = jnp.array([0.36, -0.48, 0.8])


class _BasisFailingProvider:
    def locate(self, jd_tdb, accuracy, pole=None, cache=None):
        return CioLocation(ra_cio=jnp.asarray(0.0), system=CioSystem.VS_GCRS)

    def basis(self, jd_tdb, location, accuracy, pole=None, cache=None):
        raise FrameError("cio_basis", "no basis", 2)


class _LocateFailingProvider(_BasisFailingProvider):
    def locate(self, jd_tdb, accuracy, pole=None, cache=None):
        raise FrameError("cio_location", "no CIO data", 3)


class TestEra:
    def test_reference(self):
        """SOFA reference value at MJD 54388, in degrees."""
        assert jnp.allclose(era(2400000.5, 54388.0), 0.4022837240028158102 * RAD2DEG, atol=1e-9)

    def test_split_invariance(self):
        a = era(2458849.5, 0.25)
        b = era(2458849.0, 0.75)
        assert jnp.allclose(a, b, atol=1e-9)

    def test_range(self):
        for low in (0.0, 0.1, 0.5, 0.9):
            value = float(era(_JD_HIGH, low))
            assert 0.0 <= value < 360.0


class TestSiderealTime:
    def test_gmst_reference(self):
        """IAU 2006 GMST at MJD 53736 with TT = UT1."""
        gmst = sidereal_time(_JD_2006, 0.0, 0.0, EquinoxType.MEAN, EarthRotationMeasure.GST, Accuracy.FULL)
        np.testing.assert_allclose(float(gmst) * HOUR2RAD, 1.754174972210740592, rtol=0.0, atol=1e-11)

    def test_gast_reference(self):
        """Apparent sidereal time agrees with the IAU 2006/2000A value to 1 mas."""
        gast = sidereal_time(_JD_2006, 0.0, 0.0, EquinoxType.TRUE, EarthRotationMeasure.GST, Accuracy.FULL)
        np.testing.assert_allclose(float(gast) * HOUR2RAD, 1.754166137675019159, rtol=0.0, atol=5e-9)

    @pytest.mark.parametrize("equinox", [EquinoxType.MEAN, EquinoxType.TRUE])
    @pytest.mark.parametrize("accuracy", [Accuracy.FULL, Accuracy.REDUCED])
    def test_methods_agree(self, equinox, accuracy):
        a = sidereal_time(_JD_HIGH, _JD_LOW, _DT, equinox, EarthRotationMeasure.ERA, accuracy)
        b = sidereal_time(_JD_HIGH, _JD_LOW, _DT, equinox, EarthRotationMeasure.GST, accuracy)
        assert jnp.allclose(a, b, atol=1e-10)

    def test_gast_minus_gmst_is_ee(self):
        gmst = sidereal_time(_JD_HIGH, _JD_LOW, _DT, 0, 1, Accuracy.FULL)
        gast = sidereal_time(_JD_HIGH, _JD_LOW, _DT, 1, 1, Accuracy.FULL)
        ee = e_tilt(_JD_HIGH + (_JD_LOW + _DT / DAY), Accuracy.FULL).ee
        assert jnp.allclose((gast - gmst) * 3600.0, ee, atol=1e-8)

    def test_range(self):
        for low in (0.0, 0.3, 0.6, 0.95):
            gst = float(sidereal_time(_JD_HIGH, low, _DT, 1, 0, Accuracy.REDUCED))
            assert 0.0 <= gst < 24.0

    def test_iau2006_provider(self):
        a = sidereal_time(_JD_HIGH, _JD_LOW, _DT, 1, 0, Accuracy.FULL, cio=Iau2006CioProvider())
        b = sidereal_time(_JD_HIGH, _JD_LOW, _DT, 1, 1, Accuracy.FULL)
        assert jnp.allclose(a, b, atol=2e-7)

    def test_invalid_accuracy(self):
        with pytest.raises(InvalidAccuracyError) as excinfo:
            sidereal_time(_JD_HIGH, 0.0, _DT, 0, 1, 4)
        assert excinfo.value.code == 1

    def test_invalid_method(self):
        with pytest.raises(InvalidSelectorError, match="Earth rotation measure") as excinfo:
            sidereal_time(_JD_HIGH, 0.0, _DT, 0, 2, Accuracy.FULL)
        assert excinfo.value.code == 2

    def test_provider_failure(self):
        with pytest.raises(StageError) as excinfo:
            sidereal_time(_JD_HIGH, 0.0, _DT, 1, 0, Accuracy.FULL, cio=_BasisFailingProvider())
        assert excinfo.value.code == 12


class TestWobble:
    def test_round_trip(self):
        itrs = wobble(_JD_HIGH, WobbleDirection.TIRS_TO_ITRS, _XP, _YP, _V)
        back = wobble(_JD_HIGH, WobbleDirection.ITRS_TO_TIRS, _XP, _YP, itrs)
        assert jnp.allclose(back, _V, atol=1e-15)

    def test_pef_round_trip(self):
        itrs = wobble(_JD_HIGH, WobbleDirection.PEF_TO_ITRS, _XP, _YP, _V)
        back = wobble(_JD_HIGH, WobbleDirection.ITRS_TO_PEF, _XP, _YP, itrs)
        assert jnp.allclose(back, _V, atol=1e-15)

    def test_zero_polar_motion_pef(self):
        out = wobble(_JD_HIGH, WobbleDirection.PEF_TO_ITRS, 0.0, 0.0, _V)
        assert jnp.allclose(out, _V, atol=0.0)

    def test_matches_pom00(self):
        w = pom00(_XP * AS2RAD, _YP * AS2RAD, sp00(jnp.float64(_JD_HIGH), 0.0))
        out = wobble(_JD_HIGH, WobbleDirection.TIRS_TO_ITRS, _XP, _YP, _V)
        assert jnp.allclose(out, w @ _V, atol=1e-15)

    def test_tirs_and_pef_differ_by_tio_locator(self):
        tirs = wobble(_JD_HIGH, WobbleDirection.ITRS_TO_TIRS, _XP, _YP, _V)
        pef = wobble(_JD_HIGH, WobbleDirection.ITRS_TO_PEF, _XP, _YP, _V)
        assert jnp.linalg.norm(tirs - pef) < 1e-10

    def test_displacement_size(self):
        out = wobble(_JD_HIGH, WobbleDirection.PEF_TO_ITRS, _XP, _YP, _V)
        diff = jnp.linalg.norm(out - _V)
        assert diff > 0.01 * AS2RAD
        assert diff < 0.5 * AS2RAD

    def test_invalid_direction(self):
        with pytest.raises(InvalidSelectorError, match="wobble direction"):
            wobble(_JD_HIGH, 7, _XP, _YP, _V)

    def test_missing_vector(self):
        with pytest.raises(MissingVectorError, match="wobble"):
            wobble(_JD_HIGH, 0, _XP, _YP, None)


class TestEarthRotationStrategy:
    def test_era(self):
        rotation = earth_rotation_strategy(EarthRotationMeasure.ERA)
        assert isinstance(rotation, EraRotation)
        assert rotation.dynamical_system == DynamicalSystem.CIRS

    def test_gst(self):
        rotation = earth_rotation_strategy(1)
        assert isinstance(rotation, GstRotation)
        assert rotation.dynamical_system == DynamicalSystem.TOD

    def test_invalid(self):
        with pytest.raises(InvalidSelectorError) as excinfo:
            earth_rotation_strategy(4)
        assert excinfo.value.code == 2

    def test_repr(self):
        assert repr(earth_rotation_strategy(0)) == "EraRotation()"

    def test_skips_zero_polar_motion(self):
        rotation = earth_rotation_strategy(0)
        assert rotation.wobble_in(_JD_HIGH, 0.0, 0.0, _V) is _V


class TestTer2Cel:
    @pytest.mark.parametrize("erot", [EarthRotationMeasure.ERA, EarthRotationMeasure.GST])
    @pytest.mark.parametrize("coord_class", [EquatorialClass.REFERENCE, EquatorialClass.DYNAMICAL])
    def test_round_trip(self, erot, coord_class):
        args = (_JD_HIGH, _JD_LOW, _DT, erot, Accuracy.FULL, coord_class, _XP, _YP)
        out = cel2ter(*args, ter2cel(*args, _V))
        assert jnp.allclose(out, _V, atol=1e-13)

    def test_methods_agree_in_gcrs(self):
        a = ter2cel(_JD_HIGH, _JD_LOW, _DT, 0, Accuracy.FULL, 0, _XP, _YP, _V)
        b = ter2cel(_JD_HIGH, _JD_LOW, _DT, 1, Accuracy.FULL, 0, _XP, _YP, _V)
        assert jnp.allclose(a, b, atol=1e-9)

    def test_matches_sofa_composition(self):
        """With the IAU 2006 CIO provider, ITRS -> GCRS is (POM @ R3(ERA) @ C2I)^T."""
        jd = _JD_HIGH + _JD_LOW
        c2i = c2ixys(*xys06a(jnp.float64(jd), 0.0))
        rpom = pom00(_XP * AS2RAD, _YP * AS2RAD, sp00(jnp.float64(jd), 0.0))
        c2t = rpom @ Rz(era00(jnp.float64(_JD_HIGH), jnp.float64(_JD_LOW))) @ c2i
        out = ter2cel(_JD_HIGH, _JD_LOW, 0.0, 0, Accuracy.FULL, 0, _XP, _YP, _V, cio=Iau2006CioProvider())
        np.testing.assert_allclose(np.asarray(out), np.asarray(c2t.T @ _V), rtol=0.0, atol=1e-13)

    def test_dynamical_class_is_cirs(self):
        cirs = ter2cel(_JD_HIGH, _JD_LOW, _DT, 0, Accuracy.FULL, 1, _XP, _YP, _V)
        gcrs = ter2cel(_JD_HIGH, _JD_LOW, _DT, 0, Accuracy.FULL, 0, _XP, _YP, _V)
        jd_tt = _JD_HIGH + (_JD_LOW + _DT / DAY)
        assert jnp.allclose(cirs_to_gcrs(jd_tt, Accuracy.FULL, cirs), gcrs, atol=1e-15)

    def test_dynamical_class_is_tod(self):
        tod = ter2cel(_JD_HIGH, _JD_LOW, _DT, 1, Accuracy.FULL, 1, _XP, _YP, _V)
        gcrs = ter2cel(_JD_HIGH, _JD_LOW, _DT, 1, Accuracy.FULL, 0, _XP, _YP, _V)
        jd_tt = _JD_HIGH + (_JD_LOW + _DT / DAY)
        assert jnp.allclose(tod_to_gcrs(jd_tt, Accuracy.FULL, tod), gcrs, atol=1e-15)

    def test_batch(self):
        batch = jnp.stack([_V, 3.0 * _V])
        out = ter2cel(_JD_HIGH, _JD_LOW, _DT, 0, Accuracy.REDUCED, 0, _XP, _YP, batch)
        assert out.shape == (2, 3)
        assert jnp.allclose(out[1], 3.0 * out[0], atol=1e-14)

    def test_cache(self):
        cache = TransformCache()
        a = ter2cel(_JD_HIGH, _JD_LOW, _DT, 1, Accuracy.FULL, 0, _XP, _YP, _V, cache=cache)
        b = ter2cel(_JD_HIGH, _JD_LOW, _DT, 1, Accuracy.FULL, 0, _XP, _YP, _V, cache=cache)
        assert jnp.array_equal(a, b)
        assert cache.ee_ct.hits > 0

    def test_missing_vector(self):
        with pytest.raises(MissingVectorError) as excinfo:
            ter2cel(_JD_HIGH, _JD_LOW, _DT, 0, Accuracy.FULL, 0, _XP, _YP, None)
        assert excinfo.value.code == -1

    def test_invalid_accuracy(self):
        with pytest.raises(InvalidAccuracyError) as excinfo:
            ter2cel(_JD_HIGH, _JD_LOW, _DT, 0, 9, 0, _XP, _YP, _V)
        assert excinfo.value.code == 1

    def test_invalid_method(self):
        with pytest.raises(InvalidSelectorError) as excinfo:
            ter2cel(_JD_HIGH, _JD_LOW, _DT, 5, Accuracy.FULL, 0, _XP, _YP, _V)
        assert excinfo.value.code == 2

    def test_invalid_class(self):
        with pytest.raises(InvalidSelectorError, match="equatorial class") as excinfo:
            cel2ter(_JD_HIGH, _JD_LOW, _DT, 0, Accuracy.FULL, 4, _XP, _YP, _V)
        assert excinfo.value.code == 3

    def test_to_gcrs_failure(self):
        with pytest.raises(StageError) as excinfo:
            ter2cel(_JD_HIGH, _JD_LOW, _DT, 0, Accuracy.FULL, 0, _XP, _YP, _V, cio=_BasisFailingProvider())
        assert excinfo.value.code == 22
        assert excinfo.value.function == "ter2cel"

    def test_from_gcrs_failure(self):
        with pytest.raises(StageError) as excinfo:
            cel2ter(_JD_HIGH, _JD_LOW, _DT, 0, Accuracy.FULL, 0, _XP, _YP, _V, cio=_LocateFailingProvider())
        assert excinfo.value.code == 13

    def test_dynamical_class_skips_provider(self):
        out = ter2cel(_JD_HIGH, _JD_LOW, _DT, 0, Accuracy.FULL, 1, _XP, _YP, _V, cio=_LocateFailingProvider())
        assert out.shape == (3,)


class TestTtWrappers:
    def test_itrs_to_cirs(self):
        a = itrs_to_cirs(_JD_HIGH, _JD_LOW, _DT, Accuracy.FULL, _XP, _YP, _V)
        b = ter2cel(_JD_HIGH, _JD_LOW - _DT / DAY, _DT, 0, Accuracy.FULL, 1, _XP, _YP, _V)
        assert jnp.array_equal(a, b)

    def test_cirs_round_trip(self):
        cirs = itrs_to_cirs(_JD_HIGH, _JD_LOW, _DT, Accuracy.FULL, _XP, _YP, _V)
        out = cirs_to_itrs(_JD_HIGH, _JD_LOW, _DT, Accuracy.FULL, _XP, _YP, cirs)
        assert jnp.allclose(out, _V, atol=1e-13)

    def test_tod_round_trip(self):
        tod = itrs_to_tod(_JD_HIGH, _JD_LOW, _DT, Accuracy.REDUCED, _XP, _YP, _V)
        out = tod_to_itrs(_JD_HIGH, _JD_LOW, _DT, Accuracy.REDUCED, _XP, _YP, tod)
        assert jnp.allclose(out, _V, atol=1e-13)

    def test_gcrs_round_trip(self):
        gcrs = itrs_to_gcrs(_JD_HIGH, _JD_LOW, _DT, Accuracy.FULL, _XP, _YP, _V)
        out = gcrs_to_itrs(_JD_HIGH, _JD_LOW, _DT, Accuracy.FULL, _XP, _YP, gcrs)
        assert jnp.allclose(out, _V, atol=1e-13)

    def test_cirs_then_gcrs(self):
        cirs = itrs_to_cirs(_JD_HIGH, _JD_LOW, _DT, Accuracy.FULL, _XP, _YP, _V)
        gcrs = itrs_to_gcrs(_JD_HIGH, _JD_LOW, _DT, Accuracy.FULL, _XP, _YP, _V)
        assert jnp.allclose(cirs_to_gcrs(_JD_HIGH + _JD_LOW, Accuracy.FULL, cirs), gcrs, atol=1e-12)

    def test_tod_then_gcrs(self):
        tod = itrs_to_tod(_JD_HIGH, _JD_LOW, _DT, Accuracy.FULL, _XP, _YP, _V)
        gcrs = itrs_to_gcrs(_JD_HIGH, _JD_LOW, _DT, Accuracy.FULL, _XP, _YP, _V)
        assert jnp.allclose(tod_to_gcrs(_JD_HIGH + _JD_LOW, Accuracy.FULL, tod), gcrs, atol=1e-9)

    def test_jit(self):
        f = jax.jit(lambda low: itrs_to_gcrs(_JD_HIGH, low, _DT, Accuracy.REDUCED, _XP, _YP, _V))
        expected = itrs_to_gcrs(_JD_HIGH, _JD_LOW, _DT, Accuracy.REDUCED, _XP, _YP, _V)
        assert jnp.allclose(f(_JD_LOW), expected, atol=1e-12)
