"""Tests for the Julian date helpers."""

import jax.numpy as jnp

from astroframes.constants import JD_J2000
from astroframes.timescales import julian_centuries, tt2tdb


class TestJulianCenturies:
    def test_j2000(self):
        assert float(julian_centuries(JD_J2000)) == 0.0

    def test_one_century(self):
        assert jnp.allclose(julian_centuries(JD_J2000 + 36525.0), 1.0, atol=1e-15)

    def test_split_matches_combined(self):
        a = julian_centuries(2460000.5, 0.25)
        b = julian_centuries(2460000.75)
        assert jnp.allclose(a, b, atol=1e-15)


class TestTT2TDB:
    def test_magnitude(self):
        for jd in (2440000.5, JD_J2000, 2460000.5):
            assert jnp.abs(tt2tdb(jd)) < 0.002

    def test_annual_period(self):
        """Dominated by the annual term."""
        a = tt2tdb(2455000.5)
        b = tt2tdb(2455000.5 + 365.25)
        assert jnp.abs(a - b) < 5e-5
