"""Tests for precession, nutation and the frame tie."""

import jax
import jax.numpy as jnp
import pytest

from astroframes._types import Accuracy, FrameTieDirection, NutationDirection, PoleOffsets
from astroframes.config import set_dtype
from astroframes.constants import AS2RAD, JD_J2000
from astroframes.earth_orientation import e_tilt
from astroframes.errors import InvalidAccuracyError, InvalidSelectorError, MissingVectorError
from astroframes.frame_tie import frame_tie, gcrs_to_j2000, j2000_to_gcrs
from astroframes.nutation import nutation, nutation_matrix
from astroframes.precession import precession, precession_matrix
from astroframes.sofa import MJD_ZERO, fw2m, pfw06
from astroframes.utils import TransformCache

_JD_2020 = 2458849.5
_JD_1970 = 2440587.5
_V = jnp.array([0.36, -0.48, 0.8])


class TestPrecessionMatrix:
    def test_identity_at_j2000(self):
        assert jnp.allclose(precession_matrix(0.0), jnp.eye(3), atol=1e-15)

    def test_orthonormal(self):
        m = precession_matrix(0.2)
        assert jnp.allclose(m @ m.T, jnp.eye(3), atol=1e-15)
        assert jnp.allclose(jnp.linalg.det(m), 1.0, atol=1e-15)

    def test_general_precession(self):
        """The pole moves by about 2004 arcsec per century in y."""
        m = precession_matrix(1.0)
        # Third row is the pole of date in J2000 coordinates
        assert jnp.allclose(m[2, 0], 2004.19 * AS2RAD, rtol=1e-3)


class TestPrecession:
    def test_same_epoch_returns_input(self):
        out = precession(_JD_2020, _V, _JD_2020)
        assert jnp.array_equal(out, _V)

    def test_j2000_to_j2000(self):
        assert jnp.array_equal(precession(JD_J2000, _V, JD_J2000), _V)

    def test_round_trip(self):
        out = precession(_JD_1970, precession(_JD_2020, _V, _JD_1970), _JD_2020)
        assert jnp.allclose(out, _V, atol=1e-12)

    def test_pivot_through_j2000(self):
        direct = precession(_JD_1970, _V, _JD_2020)
        pivot = precession(JD_J2000, precession(_JD_1970, _V, JD_J2000), _JD_2020)
        assert jnp.allclose(direct, pivot, atol=1e-15)

    def test_preserves_norm(self):
        out = precession(JD_J2000, _V, _JD_2020)
        assert jnp.allclose(jnp.linalg.norm(out), jnp.linalg.norm(_V), atol=1e-15)

    def test_batch(self):
        batch = jnp.stack([_V, 2.0 * _V, -_V])
        out = precession(JD_J2000, batch, _JD_2020)
        assert out.shape == (3, 3)
        assert jnp.allclose(out[1], 2.0 * precession(JD_J2000, _V, _JD_2020), atol=1e-15)

    def test_missing_vector(self):
        with pytest.raises(MissingVectorError, match="precession"):
            precession(JD_J2000, None, _JD_2020)

    def test_cache_slots(self):
        cache = TransformCache()
        a = precession(JD_J2000, _V, _JD_2020, cache)
        b = precession(JD_J2000, _V, _JD_2020, cache)
        assert jnp.array_equal(a, b)
        assert cache.precession.from_j2000.hits == 1
        assert cache.precession.to_j2000.misses == 0

        precession(_JD_2020, a, JD_J2000, cache)
        precession(JD_J2000, _V, _JD_2020, cache)
        assert cache.precession.to_j2000.misses == 1
        assert cache.precession.from_j2000.hits == 2

    def test_cache_keyed_by_dtype(self):
        cache = TransformCache()
        set_dtype(jnp.float32)
        precession(JD_J2000, _V, _JD_2020, cache)
        set_dtype(jnp.float64)
        out = precession(JD_J2000, _V, _JD_2020, cache)
        assert out.dtype == jnp.float64
        assert jnp.array_equal(out, precession(JD_J2000, _V, _JD_2020))
        assert cache.precession.from_j2000.hits == 0
        assert cache.precession.from_j2000.misses == 2

    def test_cached_matches_uncached(self):
        cache = TransformCache()
        precession(_JD_1970, _V, _JD_2020, cache)
        cached = precession(_JD_1970, _V, _JD_2020, cache)
        assert jnp.array_equal(cached, precession(_JD_1970, _V, _JD_2020))

    def test_jit(self):
        f = jax.jit(lambda jd: precession(JD_J2000, _V, jd))
        assert jnp.allclose(f(_JD_2020), precession(JD_J2000, _V, _JD_2020), atol=1e-14)

    def test_matches_fukushima_williams(self):
        """Frame tie plus precession agrees with the IAU 2006 F-W bias-precession matrix."""
        mjd = _JD_2020 - MJD_ZERO
        rbp = fw2m(*pfw06(jnp.float64(MJD_ZERO), jnp.float64(mjd)))
        ours = precession(JD_J2000, frame_tie(_V, FrameTieDirection.ICRS_TO_J2000), _JD_2020)
        assert jnp.allclose(ours, rbp @ _V, atol=1e-9)


class TestNutationMatrix:
    def test_zero_nutation_is_identity(self):
        mobl = 84381.406 / 3600.0
        assert jnp.allclose(nutation_matrix(mobl, mobl, 0.0), jnp.eye(3), atol=1e-15)

    def test_orthonormal(self):
        m = nutation_matrix(23.43, 23.431, 15.0)
        assert jnp.allclose(m @ m.T, jnp.eye(3), atol=1e-15)


class TestNutation:
    def test_round_trip(self):
        true = nutation(_JD_2020, NutationDirection.MEAN_TO_TRUE, Accuracy.FULL, _V)
        mean = nutation(_JD_2020, NutationDirection.TRUE_TO_MEAN, Accuracy.FULL, true)
        assert jnp.allclose(mean, _V, atol=1e-14)

    def test_matches_matrix(self):
        tilt = e_tilt(_JD_2020, Accuracy.REDUCED)
        m = nutation_matrix(tilt.mobl, tilt.tobl, tilt.dpsi)
        out = nutation(_JD_2020, 0, Accuracy.REDUCED, _V)
        assert jnp.allclose(out, m @ _V, atol=1e-15)

    def test_small_rotation(self):
        """Nutation moves a unit vector by less than 20 arcsec."""
        out = nutation(_JD_2020, NutationDirection.MEAN_TO_TRUE, Accuracy.FULL, _V)
        assert jnp.linalg.norm(out - _V) < 20.0 * AS2RAD
        assert jnp.linalg.norm(out - _V) > 0.0

    def test_explicit_zero_pole_matches_default(self):
        a = nutation(_JD_2020, 0, Accuracy.FULL, _V, pole=PoleOffsets())
        b = nutation(_JD_2020, 0, Accuracy.FULL, _V)
        assert jnp.array_equal(a, b)

    def test_pole_offsets_change_result(self):
        a = nutation(_JD_2020, 0, Accuracy.FULL, _V, pole=PoleOffsets(0.5, 0.5))
        b = nutation(_JD_2020, 0, Accuracy.FULL, _V)
        assert not jnp.allclose(a, b, atol=1e-9, rtol=0.0)

    def test_invalid_direction(self):
        with pytest.raises(InvalidSelectorError, match="nutation direction"):
            nutation(_JD_2020, 3, Accuracy.FULL, _V)

    def test_invalid_accuracy(self):
        with pytest.raises(InvalidAccuracyError):
            nutation(_JD_2020, 0, 5, _V)

    def test_missing_vector(self):
        with pytest.raises(MissingVectorError):
            nutation(_JD_2020, 0, Accuracy.FULL, None)


class TestFrameTie:
    def test_round_trip(self):
        there = frame_tie(_V, FrameTieDirection.ICRS_TO_J2000)
        back = frame_tie(there, FrameTieDirection.J2000_TO_ICRS)
        assert jnp.allclose(back, _V, atol=1e-13)

    def test_offset_size(self):
        """The bias is a few tens of milliarcseconds."""
        out = gcrs_to_j2000(_V)
        diff = jnp.linalg.norm(out - _V)
        assert diff > 1e-3 * AS2RAD
        assert diff < 0.1 * AS2RAD

    def test_aliases(self):
        assert jnp.array_equal(gcrs_to_j2000(_V), frame_tie(_V, 0))
        assert jnp.array_equal(j2000_to_gcrs(_V), frame_tie(_V, -1))

    def test_invalid_direction(self):
        with pytest.raises(InvalidSelectorError, match="frame tie direction"):
            frame_tie(_V, 1)

    def test_missing_vector(self):
        with pytest.raises(MissingVectorError, match="frame_tie"):
            frame_tie(None, FrameTieDirection.ICRS_TO_J2000)
