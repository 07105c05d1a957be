"""JAX translations of IAU SOFA routines for Earth orientation modeling.

Provides the nutation series evaluators (IAU 2000A and its IAU 2000B
truncation) consumed by the Earth-orientation engine, and the IAU
2006/2000A CIO-based quantities (CIP X, Y, CIO locator s, Earth rotation
angle, TIO locator s', polar motion matrix) consumed by the CIO and
terrestrial frame modules.

Uses routines and computations derived from software provided by SOFA
under license to the user. Does not itself constitute software provided
by and/or endorsed by SOFA.

All functions respect :func:`~astroframes.config.get_dtype` for float
precision.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array

from astroframes._nutation_data import (
    CIO_LOCATOR_POLY,
    CIO_LOCATOR_TERMS,
    LUNI_SOLAR_COEFFS,
    PLANETARY_COEFFS,
)
from astroframes.config import get_dtype
from astroframes.constants import JD_J2000, JD_MJD_OFFSET, JULIAN_CENTURY_DAYS
from astroframes.fundamental import fund_args
from astroframes.rotations import Rx, Ry, Rz

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DJ00: float = JD_J2000
"""Julian Date of J2000.0."""

DJC: float = JULIAN_CENTURY_DAYS
"""Days per Julian century."""

DAS2R: float = 4.848136811095359935899141e-6
"""Arcseconds to radians."""

D2PI: float = 6.283185307179586476925287
"""2*pi."""

TURNAS: float = 1296000.0
"""Arcseconds in a full circle."""

MJD_ZERO: float = JD_MJD_OFFSET
"""Julian Date of MJD zero-point."""

# Units of 0.1 microarcsecond to radians
_U2R: float = DAS2R / 1e7

# IAU 2000B fixed offsets standing in for the planetary terms [rad]
_DPPLAN: float = -0.135e-3 * DAS2R
_DEPLAN: float = 0.388e-3 * DAS2R

# Number of luni-solar terms retained by IAU 2000B
_N_IAU2000B: int = 77

# MHB2000 linear fundamental arguments for the planetary nutation terms,
# (value at J2000.0 [rad], rate [rad/cy]).
# fmt: off
_MHB2000_ARGS = (
    (2.35555598,  8328.6914269554),  # l
    (1.627905234, 8433.466158131),   # F
    (5.198466741, 7771.3771468121),  # D
    (2.18243920,   -33.757045),      # Om
    (4.402608842, 2608.7903141574),  # Me
    (3.176146697, 1021.3285546211),  # Ve
    (1.753470314,  628.3075849991),  # E
    (6.203480913,  334.0612426700),  # Ma
    (0.599546497,   52.9690962641),  # Ju
    (0.874016757,   21.3299104960),  # Sa
    (5.481293872,    7.4781598567),  # Ur
    (5.321159000,    3.8127774000),  # Ne
)

# IAU 2000B Delaunay arguments, linear in t [arcsec, arcsec/cy]
_IAU2000B_ARGS = (
    (485868.249036, 1717915923.2178),  # l
    (1287104.79305,  129596581.0481),  # l'
    (335779.526232, 1739527262.8478),  # F
    (1072260.70369, 1602961601.2090),  # D
    (450160.398036,   -6962890.5431),  # Om
)
# fmt: on


def _centuries(date1: Array, date2: Array) -> Array:
    return ((date1 - DJ00) + date2) / DJC


def _planetary_arguments(t: Array) -> Array:
    """MHB2000 arguments ``l, F, D, Om, Me..Ne, pA`` [rad], shape (13,)."""
    linear = [jnp.fmod(c0 + c1 * t, D2PI) for c0, c1 in _MHB2000_ARGS]
    pa = (0.024381750 + 0.00000538691 * t) * t
    return jnp.stack([*linear, pa])


def _luni_solar_series(coeffs: Array, delaunay: Array, t: Array) -> tuple[Array, Array]:
    """Sum luni-solar terms, in units of 0.1 microarcsecond."""
    args = coeffs[:, :5] @ delaunay
    sin_a = jnp.sin(args)
    cos_a = jnp.cos(args)
    dpsi = jnp.sum((coeffs[:, 5] + coeffs[:, 6] * t) * sin_a + coeffs[:, 7] * cos_a)
    deps = jnp.sum((coeffs[:, 8] + coeffs[:, 9] * t) * cos_a + coeffs[:, 10] * sin_a)
    return dpsi, deps


# ---------------------------------------------------------------------------
# Nutation IAU 2000A
# ---------------------------------------------------------------------------


def nut00a(date1: Array, date2: Array) -> tuple[Array, Array]:
    """Nutation, IAU 2000A model (MHB2000 luni-solar and planetary).

    Vectorized implementation using matmul over all 678 luni-solar and
    687 planetary nutation terms.

    Args:
        date1: TT as 2-part Julian Date (part 1).
        date2: TT as 2-part Julian Date (part 2).

    Returns:
        Tuple of (dpsi, deps) nutation in longitude and obliquity [radians].
    """
    dtype = get_dtype()
    t = jnp.asarray(_centuries(date1, date2), dtype=dtype)

    delaunay = jnp.stack(fund_args(t))
    ls = jnp.array(LUNI_SOLAR_COEFFS, dtype=dtype)
    dpsi_ls, deps_ls = _luni_solar_series(ls, delaunay, t)

    # ---- Planetary nutation (687 terms) ----
    pl = jnp.array(PLANETARY_COEFFS, dtype=dtype)
    pl_args = pl[:, :13] @ _planetary_arguments(t)
    pl_sin = jnp.sin(pl_args)
    pl_cos = jnp.cos(pl_args)

    dpsi_pl = jnp.sum(pl[:, 13] * pl_sin + pl[:, 14] * pl_cos)
    deps_pl = jnp.sum(pl[:, 15] * pl_sin + pl[:, 16] * pl_cos)

    return (dpsi_ls + dpsi_pl) * _U2R, (deps_ls + deps_pl) * _U2R


# ---------------------------------------------------------------------------
# Nutation IAU 2000B
# ---------------------------------------------------------------------------


def nut00b(date1: Array, date2: Array) -> tuple[Array, Array]:
    """Nutation, IAU 2000B model.

    Truncation of IAU 2000A to the 77 largest luni-solar terms, with
    linear fundamental arguments and fixed offsets in place of the
    planetary terms. Agrees with IAU 2000A to about 1 mas between 1995
    and 2050.

    Args:
        date1: TT as 2-part Julian Date (part 1).
        date2: TT as 2-part Julian Date (part 2).

    Returns:
        Tuple of (dpsi, deps) nutation in longitude and obliquity [radians].

    References:

        1. McCarthy, D.D. & Luzum, B.J., "An abridged model of the
           precession-nutation of the celestial pole", Celestial Mechanics
           & Dynamical Astronomy, 85, 37-49 (2003)
    """
    dtype = get_dtype()
    t = jnp.asarray(_centuries(date1, date2), dtype=dtype)

    delaunay = jnp.stack([jnp.fmod(c0 + c1 * t, TURNAS) * DAS2R for c0, c1 in _IAU2000B_ARGS])
    ls = jnp.array(LUNI_SOLAR_COEFFS[:_N_IAU2000B], dtype=dtype)
    dpsi_ls, deps_ls = _luni_solar_series(ls, delaunay, t)

    return dpsi_ls * _U2R + _DPPLAN, deps_ls * _U2R + _DEPLAN


# ---------------------------------------------------------------------------
# Nutation IAU 2006/2000A (P03 corrected)
# ---------------------------------------------------------------------------


def nut06a(date1: Array, date2: Array) -> tuple[Array, Array]:
    """Nutation, IAU 2006/2000A (with P03 precession adjustment).

    Args:
        date1: TT as 2-part Julian Date (part 1).
        date2: TT as 2-part Julian Date (part 2).

    Returns:
        Tuple of (dpsi, deps) nutation in longitude and obliquity [radians].
    """
    # J2 correction factor for P03 precession
    fj2 = -2.7774e-6 * _centuries(date1, date2)

    dp, de = nut00a(date1, date2)
    return dp * (1.0 + 0.4697e-6 * fj2), de * (1.0 + fj2)


# ---------------------------------------------------------------------------
# Mean obliquity and Fukushima-Williams angles
# ---------------------------------------------------------------------------


def obl06(date1: Array, date2: Array) -> Array:
    """Mean obliquity of the ecliptic, IAU 2006 precession.

    Args:
        date1: TT as 2-part Julian Date (part 1).
        date2: TT as 2-part Julian Date (part 2).

    Returns:
        Obliquity of the ecliptic in radians.
    """
    t = _centuries(date1, date2)
    eps0 = 84381.406 + t * (
        -46.836769 + t * (-0.0001831 + t * (0.00200340 + t * (-0.000000576 + t * (-0.0000000434))))
    )
    return eps0 * DAS2R


def pfw06(date1: Array, date2: Array) -> tuple[Array, Array, Array, Array]:
    """Precession angles, IAU 2006, Fukushima-Williams 4-angle formulation.

    Args:
        date1: TT as 2-part Julian Date (part 1).
        date2: TT as 2-part Julian Date (part 2).

    Returns:
        Tuple of (gamb, phib, psib, epsa) in radians.
    """
    t = _centuries(date1, date2)

    gamb = (
        -0.052928
        + t * (10.556378 + t * (0.4932044 + t * (-0.00031238 + t * (-0.000002788 + t * 0.0000000260))))
    ) * DAS2R
    phib = (
        84381.412819
        + t * (-46.811016 + t * (0.0511268 + t * (0.00053289 + t * (-0.000000440 + t * -0.0000000176))))
    ) * DAS2R
    psib = (
        -0.041775
        + t * (5038.481484 + t * (1.5584175 + t * (-0.00018522 + t * (-0.000026452 + t * -0.0000000148))))
    ) * DAS2R

    return gamb, phib, psib, obl06(date1, date2)


def fw2m(gamb: Array, phib: Array, psi: Array, eps: Array) -> Array:
    """Fukushima-Williams angles to rotation matrix.

    ``NxPxB = R_1(-eps) . R_3(-psi) . R_1(phib) . R_3(gamb)``

    Args:
        gamb: F-W angle gamma_bar (radians).
        phib: F-W angle phi_bar (radians).
        psi: F-W angle psi (radians).
        eps: F-W angle epsilon (radians).

    Returns:
        3x3 rotation matrix (NPB matrix).
    """
    return Rx(-eps) @ Rz(-psi) @ Rx(phib) @ Rz(gamb)


def pnm06a(date1: Array, date2: Array) -> Array:
    """Bias-precession-nutation matrix, IAU 2006/2000A (GCRS to true of date).

    Args:
        date1: TT as 2-part Julian Date (part 1).
        date2: TT as 2-part Julian Date (part 2).

    Returns:
        3x3 bias-precession-nutation matrix.
    """
    gamb, phib, psib, epsa = pfw06(date1, date2)
    dpsi, deps = nut06a(date1, date2)
    return fw2m(gamb, phib, psib + dpsi, epsa + deps)


def bpn2xy(rbpn: Array) -> tuple[Array, Array]:
    """Extract CIP X, Y coordinates from the bias-precession-nutation matrix."""
    return rbpn[2, 0], rbpn[2, 1]


# ---------------------------------------------------------------------------
# CIO locator s
# ---------------------------------------------------------------------------


def s06(date1: Array, date2: Array, x: Array, y: Array) -> Array:
    """CIO locator s, positioning the Celestial Intermediate Origin on the
    equator of the CIP. Compatible with IAU 2006/2000A precession-nutation.

    The series is for s + XY/2; XY/2 is subtracted to return s itself.

    Args:
        date1: TT as 2-part Julian Date (part 1).
        date2: TT as 2-part Julian Date (part 2).
        x: CIP x coordinate.
        y: CIP y coordinate.

    Returns:
        CIO locator s in radians.
    """
    dtype = get_dtype()
    t = jnp.asarray(_centuries(date1, date2), dtype=dtype)

    # l, l', F, D, Om, LVe, LE, pA
    planetary = _planetary_arguments(t)
    fa = jnp.concatenate([jnp.stack(fund_args(t)), planetary[jnp.array([5, 6, 12])]])

    w = []
    for poly, terms in zip(CIO_LOCATOR_POLY, CIO_LOCATOR_TERMS):
        coeffs = jnp.array(terms, dtype=dtype)
        args = coeffs[:, :8] @ fa
        w.append(poly + jnp.sum(coeffs[:, 8] * jnp.sin(args) + coeffs[:, 9] * jnp.cos(args)))
    w.append(jnp.asarray(CIO_LOCATOR_POLY[5], dtype=dtype))

    acc = w[5]
    for wk in reversed(w[:5]):
        acc = acc * t + wk
    return acc * DAS2R - x * y / 2.0


def xys06a(date1: Array, date2: Array) -> tuple[Array, Array, Array]:
    """CIP X, Y coordinates and CIO locator s, IAU 2006/2000A.

    Args:
        date1: TT as 2-part Julian Date (part 1).
        date2: TT as 2-part Julian Date (part 2).

    Returns:
        Tuple of (x, y, s) in radians.
    """
    x, y = bpn2xy(pnm06a(date1, date2))
    return x, y, s06(date1, date2, x, y)


def c2ixys(x: Array, y: Array, s: Array) -> Array:
    """Form the celestial-to-intermediate matrix given CIP X, Y and CIO locator s.

    ``Rz(-(e+s)) @ Ry(d) @ Rz(e)`` with ``e = atan2(y, x)`` and
    ``d = arctan(sqrt((x^2 + y^2) / (1 - x^2 - y^2)))``.

    The rows of the result are the CIRS axes expressed in the GCRS.

    Args:
        x: CIP x coordinate.
        y: CIP y coordinate.
        s: CIO locator.

    Returns:
        3x3 celestial-to-intermediate matrix.
    """
    r2 = x * x + y * y
    e = jnp.where(r2 > 0.0, jnp.arctan2(y, x), 0.0)
    d = jnp.arctan(jnp.sqrt(r2 / (1.0 - r2)))

    return Rz(-(e + s)) @ Ry(d) @ Rz(e)


# ---------------------------------------------------------------------------
# Earth rotation and polar motion
# ---------------------------------------------------------------------------


def era00(dj1: Array, dj2: Array) -> Array:
    """Earth Rotation Angle (IAU 2000 model).

    Args:
        dj1: UT1 as 2-part Julian Date (part 1).
        dj2: UT1 as 2-part Julian Date (part 2).

    Returns:
        Earth Rotation Angle in radians, in [0, 2*pi).
    """
    # Days since J2000.0
    t = dj1 + dj2 - DJ00

    # Fractional part of dj1 + dj2
    f = jnp.fmod(dj1, 1.0) + jnp.fmod(dj2, 1.0)

    theta = jnp.fmod(f + 0.7790572732640 + 0.00273781191135448 * t, 1.0)
    return jnp.where(theta < 0.0, theta + 1.0, theta) * D2PI


def sp00(date1: Array, date2: Array) -> Array:
    """TIO locator s', positioning the Terrestrial Intermediate Origin.

    Args:
        date1: TT as 2-part Julian Date (part 1).
        date2: TT as 2-part Julian Date (part 2).

    Returns:
        TIO locator s' in radians.
    """
    return -47e-6 * _centuries(date1, date2) * DAS2R


def pom00(xp: Array, yp: Array, sp: Array) -> Array:
    """Form the polar motion matrix (TIRS -> ITRS).

    The matrix is ``Rx(-yp) @ Ry(-xp) @ Rz(sp)``.

    Args:
        xp: Polar motion x-component (radians, positive towards Greenwich).
        yp: Polar motion y-component (radians, positive towards 270E).
        sp: TIO locator s' (radians).

    Returns:
        3x3 polar motion matrix.
    """
    return Rx(-yp) @ Ry(-xp) @ Rz(sp)

