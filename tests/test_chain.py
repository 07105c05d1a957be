"""Tests for the equinox-based and CIO-based celestial frame chains."""

import jax
import jax.numpy as jnp
import pytest

from astroframes._types import Accuracy, CioLocation, CioSystem, DynamicalSystem, EquinoxType, PoleOffsets
from astroframes.earth_orientation import ira_equinox
from astroframes.errors import FrameError, InvalidSelectorError, MissingVectorError, StageError
from astroframes.frame_tie import gcrs_to_j2000
from astroframes.frames import (
    EquinoxCioProvider,
    Iau2006CioProvider,
    app_to_cirs_ra,
    cio_basis,
    cio_location,
    cio_ra,
    cirs_to_app_ra,
    cirs_to_gcrs,
    cirs_to_tod,
    gcrs2equ,
    gcrs_to_cirs,
    gcrs_to_mod,
    gcrs_to_tod,
    j2000_to_tod,
    mod_to_gcrs,
    radec2vector,
    tod_to_cirs,
    tod_to_gcrs,
    tod_to_j2000,
    vector2radec,
)
from astroframes.nutation import nutation
from astroframes.precession import precession
from astroframes.sofa import c2ixys, pnm06a, xys06a
from astroframes.utils import TransformCache

_JD_2020 = 2458849.5
_V = jnp.array([0.36, -0.48, 0.8])


class _FailingProvider:
    """CIO provider that fails in locate or in basis."""

    def __init__(self, fail_locate=False):
        self.fail_locate = fail_locate
        self.locate_calls = 0
        self.basis_calls = 0

    def locate(self, jd_tdb, accuracy, pole=None, cache=None):
        self.locate_calls += 1
        if self.fail_locate:
            raise FrameError("cio_location", "no CIO data", 3)
        return CioLocation(ra_cio=jnp.asarray(0.0), system=CioSystem.VS_GCRS)

    def basis(self, jd_tdb, location, accuracy, pole=None, cache=None):
        self.basis_calls += 1
        raise FrameError("cio_basis", "no basis", 2)


class TestEquinoxChain:
    def test_gcrs_mod_round_trip(self):
        out = mod_to_gcrs(_JD_2020, gcrs_to_mod(_JD_2020, _V))
        assert jnp.allclose(out, _V, atol=1e-13)

    def test_gcrs_to_mod_composition(self):
        expected = precession(2451545.0, gcrs_to_j2000(_V), _JD_2020)
        assert jnp.allclose(gcrs_to_mod(_JD_2020, _V), expected, atol=1e-15)

    def test_gcrs_tod_round_trip(self):
        out = tod_to_gcrs(_JD_2020, Accuracy.FULL, gcrs_to_tod(_JD_2020, Accuracy.FULL, _V))
        assert jnp.allclose(out, _V, atol=1e-13)

    def test_j2000_tod_round_trip(self):
        out = tod_to_j2000(_JD_2020, Accuracy.REDUCED, j2000_to_tod(_JD_2020, Accuracy.REDUCED, _V))
        assert jnp.allclose(out, _V, atol=1e-13)

    def test_gcrs_to_tod_composition(self):
        mod = gcrs_to_mod(_JD_2020, _V)
        expected = nutation(_JD_2020, 0, Accuracy.FULL, mod)
        assert jnp.allclose(gcrs_to_tod(_JD_2020, Accuracy.FULL, _V), expected, atol=1e-15)

    def test_matches_iau2006_bpn(self):
        """The equinox chain agrees with the IAU 2006/2000A BPN matrix."""
        rbpn = pnm06a(jnp.float64(_JD_2020), jnp.float64(0.0))
        assert jnp.allclose(gcrs_to_tod(_JD_2020, Accuracy.FULL, _V), rbpn @ _V, atol=1e-8)

    def test_cache_does_not_change_result(self):
        cache = TransformCache()
        a = gcrs_to_tod(_JD_2020, Accuracy.FULL, _V, cache=cache)
        b = gcrs_to_tod(_JD_2020, Accuracy.FULL, _V, cache=cache)
        assert jnp.array_equal(a, b)
        assert jnp.array_equal(a, gcrs_to_tod(_JD_2020, Accuracy.FULL, _V))

    def test_batch(self):
        batch = jnp.stack([_V, -_V])
        out = gcrs_to_tod(_JD_2020, Accuracy.FULL, batch)
        assert out.shape == (2, 3)
        assert jnp.allclose(out[1], -gcrs_to_tod(_JD_2020, Accuracy.FULL, _V), atol=1e-15)

    def test_invalid_accuracy_before_work(self):
        with pytest.raises(FrameError, match="j2000_to_tod"):
            j2000_to_tod(_JD_2020, 3, _V)

    def test_missing_vector(self):
        with pytest.raises(MissingVectorError, match="gcrs_to_mod"):
            gcrs_to_mod(_JD_2020, None)


class TestGcrsCirs:
    @pytest.mark.parametrize("years", [-50, -10, 0, 20, 50])
    def test_round_trip(self, years):
        jd = 2451545.0 + 365.25 * years
        out = cirs_to_gcrs(jd, Accuracy.FULL, gcrs_to_cirs(jd, Accuracy.FULL, _V))
        assert jnp.allclose(out, _V, atol=1e-12)

    def test_matches_iau2006_cio(self):
        """Equinox-based CIRS agrees with the IAU 2006 X, Y, s matrix."""
        m = c2ixys(*xys06a(jnp.float64(_JD_2020), 0.0))
        assert jnp.allclose(gcrs_to_cirs(_JD_2020, Accuracy.FULL, _V), m @ _V, atol=1e-8)

    def test_iau2006_provider_is_exact(self):
        m = c2ixys(*xys06a(jnp.float64(_JD_2020), 0.0))
        out = gcrs_to_cirs(_JD_2020, Accuracy.FULL, _V, cio=Iau2006CioProvider())
        assert jnp.allclose(out, m @ _V, atol=1e-14)

    def test_iau2006_round_trip(self):
        provider = Iau2006CioProvider()
        cirs = gcrs_to_cirs(_JD_2020, Accuracy.FULL, _V, cio=provider)
        assert jnp.allclose(cirs_to_gcrs(_JD_2020, Accuracy.FULL, cirs, cio=provider), _V, atol=1e-14)

    def test_batch(self):
        batch = jnp.stack([_V, 2.0 * _V, -_V, jnp.array([0.0, 0.0, 1.0])])
        out = gcrs_to_cirs(_JD_2020, Accuracy.REDUCED, batch)
        assert out.shape == (4, 3)
        assert jnp.allclose(out[1], 2.0 * out[0], atol=1e-15)

    def test_jit(self):
        f = jax.jit(lambda jd: gcrs_to_cirs(jd, Accuracy.REDUCED, _V))
        assert jnp.allclose(f(_JD_2020), gcrs_to_cirs(_JD_2020, Accuracy.REDUCED, _V), atol=1e-13)

    def test_missing_vector_before_provider(self):
        provider = _FailingProvider()
        with pytest.raises(MissingVectorError):
            gcrs_to_cirs(_JD_2020, Accuracy.FULL, None, cio=provider)
        assert provider.locate_calls == 0

    def test_locate_failure(self):
        provider = _FailingProvider(fail_locate=True)
        with pytest.raises(StageError) as excinfo:
            gcrs_to_cirs(_JD_2020, Accuracy.FULL, _V, cio=provider)
        assert excinfo.value.code == 3
        assert excinfo.value.stage == "cio_location"
        assert provider.basis_calls == 0

    def test_basis_failure(self):
        with pytest.raises(StageError) as excinfo:
            cirs_to_gcrs(_JD_2020, Accuracy.FULL, _V, cio=_FailingProvider())
        assert excinfo.value.code == 12
        assert excinfo.value.function == "cirs_to_gcrs"


class TestCioProviders:
    def test_equinox_location(self):
        loc = cio_location(_JD_2020, Accuracy.FULL)
        assert loc.system == CioSystem.VS_EQUINOX
        expected = -ira_equinox(_JD_2020, EquinoxType.TRUE, Accuracy.FULL)
        assert jnp.allclose(loc.ra_cio, expected, atol=0.0)

    def test_iau2006_location(self):
        loc = cio_location(_JD_2020, Accuracy.FULL, cio=Iau2006CioProvider())
        assert loc.system == CioSystem.VS_GCRS
        assert 0.0 <= float(loc.ra_cio) < 24.0

    def test_bases_agree(self):
        eq = EquinoxCioProvider()
        iau = Iau2006CioProvider()
        a = eq.basis(_JD_2020, eq.locate(_JD_2020, Accuracy.FULL), Accuracy.FULL)
        b = iau.basis(_JD_2020, iau.locate(_JD_2020, Accuracy.FULL), Accuracy.FULL)
        for u, v in zip(a, b):
            assert jnp.allclose(u, v, atol=5e-8)

    def test_basis_orthonormal(self):
        x, y, z = cio_basis(_JD_2020, 0.0123, CioSystem.VS_EQUINOX, Accuracy.FULL)
        m = jnp.stack([x, y, z])
        assert jnp.allclose(m @ m.T, jnp.eye(3), atol=1e-14)
        assert jnp.allclose(jnp.cross(x, y), z, atol=1e-14)

    def test_gcrs_system_basis(self):
        """A GCRS right ascension gives an x axis at that right ascension."""
        x, _, z = cio_basis(_JD_2020, 6.0, CioSystem.VS_GCRS, Accuracy.FULL)
        assert jnp.allclose(jnp.dot(x, z), 0.0, atol=1e-15)
        assert jnp.allclose(jnp.arctan2(x[1], x[0]), jnp.pi / 2.0, atol=1e-15)

    def test_invalid_system(self):
        with pytest.raises(InvalidSelectorError, match="CIO location system") as excinfo:
            cio_basis(_JD_2020, 0.0, 3, Accuracy.FULL)
        assert excinfo.value.code == 1

    def test_iau2006_delegates_equinox_location(self):
        loc = cio_location(_JD_2020, Accuracy.FULL)
        a = Iau2006CioProvider().basis(_JD_2020, loc, Accuracy.FULL)
        b = EquinoxCioProvider().basis(_JD_2020, loc, Accuracy.FULL)
        for u, v in zip(a, b):
            assert jnp.array_equal(u, v)


class TestCioRa:
    def test_equals_equation_of_origins(self):
        ra = cio_ra(_JD_2020, Accuracy.FULL)
        expected = -ira_equinox(_JD_2020, EquinoxType.TRUE, Accuracy.FULL)
        assert jnp.allclose(ra, expected, atol=1e-12)

    def test_iau2006_provider(self):
        ra = cio_ra(_JD_2020, Accuracy.FULL, cio=Iau2006CioProvider())
        expected = -ira_equinox(_JD_2020, EquinoxType.TRUE, Accuracy.FULL)
        assert jnp.allclose(ra, expected, atol=1e-7)

    def test_pole_offsets_propagate(self):
        a = cio_ra(_JD_2020, Accuracy.FULL, pole=PoleOffsets(1.0, 0.0))
        b = cio_ra(_JD_2020, Accuracy.FULL)
        assert not jnp.allclose(a, b, atol=1e-9, rtol=0.0)

    def test_locate_failure_code(self):
        with pytest.raises(StageError) as excinfo:
            cio_ra(_JD_2020, Accuracy.FULL, cio=_FailingProvider(fail_locate=True))
        assert excinfo.value.code == 3

    def test_basis_failure_code(self):
        with pytest.raises(StageError) as excinfo:
            cio_ra(_JD_2020, Accuracy.FULL, cio=_FailingProvider())
        assert excinfo.value.code == 12


class TestCirsTod:
    def test_round_trip(self):
        out = tod_to_cirs(_JD_2020, Accuracy.FULL, cirs_to_tod(_JD_2020, Accuracy.FULL, _V))
        assert jnp.allclose(out, _V, atol=1e-14)

    def test_consistent_with_gcrs_paths(self):
        via_cirs = cirs_to_tod(_JD_2020, Accuracy.FULL, gcrs_to_cirs(_JD_2020, Accuracy.FULL, _V))
        direct = gcrs_to_tod(_JD_2020, Accuracy.FULL, _V)
        assert jnp.allclose(via_cirs, direct, atol=1e-12)

    def test_consistent_with_iau2006_provider(self):
        provider = Iau2006CioProvider()
        cirs = gcrs_to_cirs(_JD_2020, Accuracy.FULL, _V, cio=provider)
        via_cirs = cirs_to_tod(_JD_2020, Accuracy.FULL, cirs, cio=provider)
        assert jnp.allclose(via_cirs, gcrs_to_tod(_JD_2020, Accuracy.FULL, _V), atol=1e-8)

    def test_shared_z(self):
        tod = cirs_to_tod(_JD_2020, Accuracy.FULL, _V)
        assert jnp.allclose(tod[2], _V[2], atol=1e-15)

    def test_failure_propagates(self):
        with pytest.raises(StageError) as excinfo:
            cirs_to_tod(_JD_2020, Accuracy.FULL, _V, cio=_FailingProvider())
        assert excinfo.value.code == 12


class TestRightAscension:
    def test_app_cirs_round_trip(self):
        ra = app_to_cirs_ra(_JD_2020, Accuracy.FULL, cirs_to_app_ra(_JD_2020, Accuracy.FULL, 3.25))
        assert jnp.allclose(ra, 3.25, atol=1e-12)

    def test_app_range(self):
        ra = cirs_to_app_ra(_JD_2020, Accuracy.FULL, 23.9999)
        assert 0.0 <= float(ra) < 24.0

    def test_offset_is_cio_ra(self):
        ra = cirs_to_app_ra(_JD_2020, Accuracy.FULL, 10.0)
        assert jnp.allclose(ra, 10.0 + cio_ra(_JD_2020, Accuracy.FULL), atol=1e-12)


class TestSpherical:
    def test_round_trip(self):
        ra, dec = vector2radec(radec2vector(5.5, -20.0, 2.0))
        assert jnp.allclose(ra, 5.5, atol=1e-12)
        assert jnp.allclose(dec, -20.0, atol=1e-12)

    def test_distance(self):
        assert jnp.allclose(jnp.linalg.norm(radec2vector(1.0, 2.0, 3.0)), 3.0, atol=1e-15)

    def test_pole(self):
        ra, dec = vector2radec([0.0, 0.0, 1.0])
        assert float(ra) == 0.0
        assert jnp.allclose(dec, 90.0)

    def test_negative_ra_wraps(self):
        ra, _ = vector2radec([1.0, -1.0, 0.0])
        assert jnp.allclose(ra, 21.0, atol=1e-12)

    def test_batch(self):
        out = radec2vector(jnp.array([0.0, 6.0]), jnp.array([0.0, 0.0]))
        assert jnp.allclose(out, jnp.array([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]]), atol=1e-15)

    def test_missing_vector(self):
        with pytest.raises(MissingVectorError, match="vector2radec"):
            vector2radec(None)


class TestGcrs2Equ:
    def test_mod(self):
        ra, dec = gcrs2equ(_JD_2020, DynamicalSystem.MOD, Accuracy.FULL, 5.5, 20.0)
        era, edec = vector2radec(gcrs_to_mod(_JD_2020, radec2vector(5.5, 20.0)))
        assert jnp.allclose(ra, era, atol=1e-14)
        assert jnp.allclose(dec, edec, atol=1e-13)

    def test_mod_at_j2000_is_frame_bias(self):
        ra, dec = gcrs2equ(2451545.0, DynamicalSystem.MOD, Accuracy.FULL, 5.5, 20.0)
        assert jnp.abs(ra - 5.5) < 1e-6
        assert jnp.abs(dec - 20.0) < 1e-5

    def test_cirs_vs_tod(self):
        """TOD and CIRS right ascensions differ by the CIO right ascension."""
        ra_tod, dec_tod = gcrs2equ(_JD_2020, DynamicalSystem.TOD, Accuracy.FULL, 5.5, 20.0)
        ra_cirs, dec_cirs = gcrs2equ(_JD_2020, DynamicalSystem.CIRS, Accuracy.FULL, 5.5, 20.0)
        assert jnp.allclose(cirs_to_app_ra(_JD_2020, Accuracy.FULL, ra_cirs), ra_tod, atol=1e-10)
        assert jnp.allclose(dec_cirs, dec_tod, atol=1e-10)

    def test_invalid_system(self):
        with pytest.raises(InvalidSelectorError, match="dynamical system"):
            gcrs2equ(_JD_2020, 5, Accuracy.FULL, 5.5, 20.0)

    def test_cirs_failure_offset(self):
        with pytest.raises(StageError) as excinfo:
            gcrs2equ(_JD_2020, DynamicalSystem.CIRS, Accuracy.FULL, 5.5, 20.0, cio=_FailingProvider())
        assert excinfo.value.code == 22
