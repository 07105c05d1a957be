"""Tests for SOFA routine JAX translations.

Tests individual SOFA functions against the reference values published
with the IAU SOFA test suite (t_sofa_c).
"""

import jax.numpy as jnp

from astroframes.sofa import (
    DJ00,
    MJD_ZERO,
    c2ixys,
    era00,
    fw2m,
    nut00a,
    nut00b,
    nut06a,
    obl06,
    pfw06,
    pnm06a,
    pom00,
    s06,
    sp00,
    xys06a,
)

# 2007 April 5, 12h UTC expressed in TT (TAI-UTC = 33 s)
_MJD_TT = 54195.5 + (33.0 + 32.184) / 86400.0


class TestERA00:
    """Test Earth Rotation Angle."""

    def test_era00_j2000(self):
        """ERA at J2000.0 (2000-01-01 12:00:00 UT1)."""
        era = era00(jnp.float64(DJ00), jnp.float64(0.0))
        assert jnp.abs(era - 4.894961212823058) < 1e-6

    def test_era00_reference(self):
        """SOFA reference value at MJD 54388."""
        era = era00(jnp.float64(MJD_ZERO), jnp.float64(54388.0))
        assert jnp.abs(era - 0.4022837240028158102) < 1e-11

    def test_era00_range(self):
        for mjd in (40000.25, 51544.5, 60000.75):
            era = era00(jnp.float64(MJD_ZERO), jnp.float64(mjd))
            assert 0.0 <= float(era) < 2.0 * jnp.pi


class TestObl06:
    """Test mean obliquity of the ecliptic."""

    def test_obl06_j2000(self):
        """Mean obliquity at J2000.0 is 84381.406 arcsec."""
        eps = obl06(jnp.float64(DJ00), jnp.float64(0.0))
        eps_deg = float(eps) * 180.0 / 3.141592653589793
        assert jnp.abs(eps_deg - 84381.406 / 3600.0) < 1e-12

    def test_obl06_reference(self):
        eps = obl06(jnp.float64(MJD_ZERO), jnp.float64(54388.0))
        assert jnp.abs(eps - 0.4090749229387258204) < 1e-14


class TestSp00:
    """Test TIO locator s'."""

    def test_sp00_j2000(self):
        """s' at J2000.0 is zero."""
        val = sp00(jnp.float64(DJ00), jnp.float64(0.0))
        assert jnp.abs(val) < 1e-20

    def test_sp00_reference(self):
        val = sp00(jnp.float64(MJD_ZERO), jnp.float64(52541.0))
        assert jnp.abs(val - (-0.6216698469981019309e-11)) < 1e-20


class TestNutation:
    """Test nutation routines."""

    def test_nut00a_reference(self):
        """IAU 2000A nutation at MJD 53736 (SOFA reference)."""
        dpsi, deps = nut00a(jnp.float64(MJD_ZERO), jnp.float64(53736.0))
        assert jnp.abs(dpsi - (-0.9630909107115518431e-5)) < 1e-12
        assert jnp.abs(deps - 0.4063239174001678710e-4) < 1e-12

    def test_nut00b_reference(self):
        """IAU 2000B nutation at MJD 53736 (SOFA reference)."""
        dpsi, deps = nut00b(jnp.float64(MJD_ZERO), jnp.float64(53736.0))
        assert jnp.abs(dpsi - (-0.9632552291148362783e-5)) < 1e-12
        assert jnp.abs(deps - 0.4063197106621159367e-4) < 1e-12

    def test_nut00b_close_to_nut00a(self):
        """IAU 2000B agrees with IAU 2000A to about 1 mas."""
        a = nut00a(jnp.float64(MJD_ZERO), jnp.float64(_MJD_TT))
        b = nut00b(jnp.float64(MJD_ZERO), jnp.float64(_MJD_TT))
        mas = 4.848136811095359935899141e-9
        assert jnp.abs(a[0] - b[0]) < 2.0 * mas
        assert jnp.abs(a[1] - b[1]) < 2.0 * mas

    def test_nut06a_returns_finite(self):
        """nut06a returns finite values."""
        dpsi, deps = nut06a(jnp.float64(MJD_ZERO), jnp.float64(_MJD_TT))
        assert jnp.isfinite(dpsi)
        assert jnp.isfinite(deps)

    def test_nut06a_magnitude(self):
        """Nutation in longitude stays below 20 arcsec."""
        dpsi, deps = nut06a(jnp.float64(MJD_ZERO), jnp.float64(_MJD_TT))
        assert jnp.abs(dpsi) < 20.0 * 4.848e-6
        assert jnp.abs(deps) < 10.0 * 4.848e-6


class TestPnm06a:
    """Test the full bias-precession-nutation matrix."""

    def test_pnm06a_orthogonal(self):
        """BPN matrix is orthogonal: R^T R = I."""
        rbpn = pnm06a(jnp.float64(MJD_ZERO), jnp.float64(_MJD_TT))
        assert jnp.allclose(rbpn.T @ rbpn, jnp.eye(3), atol=1e-14)

    def test_pnm06a_determinant(self):
        """BPN matrix has determinant +1 (proper rotation)."""
        rbpn = pnm06a(jnp.float64(MJD_ZERO), jnp.float64(_MJD_TT))
        assert jnp.abs(jnp.linalg.det(rbpn) - 1.0) < 1e-14

    def test_pnm06a_near_identity(self):
        """BPN matrix at J2000.0 is near identity (frame bias and nutation only)."""
        rbpn = pnm06a(jnp.float64(DJ00), jnp.float64(0.0))
        assert jnp.allclose(rbpn, jnp.eye(3), atol=1e-4)

    def test_fw2m_matches_pnm06a(self):
        """pnm06a is fw2m of the F-W angles with nutation added."""
        gamb, phib, psib, epsa = pfw06(jnp.float64(MJD_ZERO), jnp.float64(_MJD_TT))
        dpsi, deps = nut06a(jnp.float64(MJD_ZERO), jnp.float64(_MJD_TT))
        r = fw2m(gamb, phib, psib + dpsi, epsa + deps)
        assert jnp.allclose(r, pnm06a(jnp.float64(MJD_ZERO), jnp.float64(_MJD_TT)), atol=1e-15)


class TestCioLocator:
    def test_s06_reference(self):
        """CIO locator s at MJD 53736 (SOFA reference)."""
        s = s06(jnp.float64(MJD_ZERO), jnp.float64(53736.0), 0.5791308486706011000e-3, 0.4020579816732961219e-4)
        assert jnp.abs(s - (-0.1220032213076463117e-7)) < 1e-16

    def test_xys06a_reference(self):
        """CIP X, Y and s at MJD 53736 (SOFA reference)."""
        x, y, s = xys06a(jnp.float64(MJD_ZERO), jnp.float64(53736.0))
        assert jnp.abs(x - 0.5791308482835292617e-3) < 1e-12
        assert jnp.abs(y - 0.4020580099454020310e-4) < 1e-12
        assert jnp.abs(s - (-0.1220032294164579896e-7)) < 1e-15

    def test_xys06a_j2000(self):
        """At J2000.0, X and Y are small (frame bias and nutation only)."""
        x, y, s = xys06a(jnp.float64(DJ00), jnp.float64(0.0))
        assert jnp.abs(x) < 1e-3
        assert jnp.abs(y) < 1e-3
        assert jnp.abs(s) < 1e-3


class TestC2ixys:
    def test_c2ixys_identity(self):
        """Zero X, Y, s gives the identity."""
        m = c2ixys(jnp.float64(0.0), jnp.float64(0.0), jnp.float64(0.0))
        assert jnp.allclose(m, jnp.eye(3), atol=1e-15)

    def test_c2ixys_pole(self):
        """The third row of the matrix is the CIP unit vector (X, Y, Z)."""
        x, y, s = xys06a(jnp.float64(MJD_ZERO), jnp.float64(_MJD_TT))
        m = c2ixys(x, y, s)
        assert jnp.allclose(m[2, 0], x, atol=1e-15)
        assert jnp.allclose(m[2, 1], y, atol=1e-15)
        assert jnp.allclose(m @ m.T, jnp.eye(3), atol=1e-14)


class TestPom00:
    def test_pom00_identity(self):
        m = pom00(jnp.float64(0.0), jnp.float64(0.0), jnp.float64(0.0))
        assert jnp.allclose(m, jnp.eye(3), atol=0.0)

    def test_pom00_small_angles(self):
        """Off-diagonal terms carry the pole coordinates."""
        xp, yp = 1.0e-6, 2.0e-6
        m = pom00(jnp.float64(xp), jnp.float64(yp), jnp.float64(0.0))
        assert jnp.allclose(m[0, 2], xp, atol=1e-15)
        assert jnp.allclose(m[1, 2], -yp, atol=1e-15)
        assert jnp.allclose(m @ m.T, jnp.eye(3), atol=1e-15)
