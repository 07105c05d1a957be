"""Orientation of the Earth's rotation axis.

Computes the quantities that tie the equator and equinox of date to the
mean equator: nutation angles, mean and true obliquity of the ecliptic,
and the equation of the equinoxes including its complementary terms.

Observed corrections to the modeled celestial pole (``PoleOffsets``) are
an explicit argument of :func:`e_tilt` and of everything built on it.
Passing ``pole=None`` falls back to a process-wide default, which is zero
unless changed with :func:`set_pole_offsets` or
``cel_pole(..., apply=True)``.  The default is guarded by a lock; prefer
passing offsets explicitly in concurrent code.
"""

from __future__ import annotations

import logging
import threading

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from astroframes._nutation_data import EECT_T0_ARGS, EECT_T0_COEFFS, EECT_T1_ARGS, EECT_T1_COEFFS
from astroframes._types import (
    Accuracy,
    EarthTilt,
    EquinoxType,
    FrameTieDirection,
    PoleOffsets,
    PoleOffsetType,
    coerce_enum,
)
from astroframes.config import get_dtype
from astroframes.constants import AS2RAD, DEG2RAD, JD_J2000, MAS2RAD
from astroframes.frame_tie import frame_tie
from astroframes.fundamental import fund_args, fundamental_arguments
from astroframes.precession import precession
from astroframes.sofa import DJ00, DJC, nut00a, nut00b, obl06
from astroframes.timescales import julian_centuries
from astroframes.utils.caching import TransformCache, cache_key, cached

logger = logging.getLogger(__name__)

_pole_lock = threading.Lock()
_default_pole = PoleOffsets()


# ---------------------------------------------------------------------------
# Pole offsets
# ---------------------------------------------------------------------------


def set_pole_offsets(pole: PoleOffsets) -> None:
    """Install *pole* as the process-wide default pole offsets.

    Affects every later call, on every thread, that passes ``pole=None``.

    Args:
        pole: Corrections to nutation in longitude and obliquity [arcsec].
    """
    global _default_pole
    pole = PoleOffsets(*pole)
    with _pole_lock:
        _default_pole = pole
    logger.debug("Default pole offsets set to dpsi=%s, deps=%s arcsec", pole.dpsi, pole.deps)


def get_pole_offsets() -> PoleOffsets:
    """Return the process-wide default pole offsets."""
    with _pole_lock:
        return _default_pole


def reset_pole_offsets() -> None:
    """Reset the process-wide default pole offsets to zero."""
    set_pole_offsets(PoleOffsets())


def resolve_pole(pole: PoleOffsets | None) -> PoleOffsets:
    """Return *pole*, or the process-wide default when it is ``None``."""
    return get_pole_offsets() if pole is None else pole


def polar_dxdy_to_dpsideps(jd_tt: ArrayLike, dx: ArrayLike, dy: ArrayLike) -> tuple[Array, Array]:
    """Convert GCRS pole offsets (dx, dy) to corrections (dpsi, deps).

    Uses a trivial model of the pole trajectory in the GCRS to estimate
    dz, then precesses the offset vector to the mean equator of date.

    Args:
        jd_tt: Terrestrial Time Julian date [days].
        dx: Pole offset in GCRS x [mas].
        dy: Pole offset in GCRS y [mas].

    Returns:
        Tuple of (dpsi, deps) [arcsec].

    References:

        1. G. H. Kaplan, *Another Look at Non-Rotating Origins*,
           Proceedings of IAU XXV Joint Discussion 16, 2003, eqs. (7)-(9)
    """
    t = julian_centuries(jd_tt)

    x = (2004.190 * t) * AS2RAD
    dz = -(x + 0.5 * x * x * x) * dx

    dp = jnp.stack(jnp.broadcast_arrays(dx, dy, dz)).astype(get_dtype()) * MAS2RAD
    dp = precession(JD_J2000, frame_tie(dp, FrameTieDirection.ICRS_TO_J2000), jd_tt)

    sin_e = jnp.sin(mean_obliq(jd_tt) * AS2RAD)
    return (dp[0] / sin_e) / AS2RAD, dp[1] / AS2RAD


def cel_pole(
    jd_tt: ArrayLike,
    offset_type: PoleOffsetType | int,
    dpole1: ArrayLike,
    dpole2: ArrayLike,
    apply: bool = False,
) -> PoleOffsets:
    """Build pole offsets from observed celestial pole corrections.

    Args:
        jd_tt: Terrestrial Time Julian date at which the corrections apply
            (only used for ``X_Y``) [days].
        offset_type: ``DPSI_DEPS`` (1) or ``X_Y`` (2).
        dpole1: Correction in longitude (dpsi) or GCRS x (dx) [mas].
        dpole2: Correction in obliquity (deps) or GCRS y (dy) [mas].
        apply: Also install the result as the process-wide default.

    Returns:
        The corrections as :class:`PoleOffsets` [arcsec].

    Raises:
        InvalidSelectorError: If *offset_type* is invalid (code 1).
    """
    offset_type = coerce_enum(PoleOffsetType, offset_type, "cel_pole", "pole offset type", code=1)

    if offset_type == PoleOffsetType.DPSI_DEPS:
        pole = PoleOffsets(1e-3 * dpole1, 1e-3 * dpole2)
    else:
        pole = PoleOffsets(*polar_dxdy_to_dpsideps(jd_tt, dpole1, dpole2))

    if apply:
        set_pole_offsets(pole)
    return pole


# ---------------------------------------------------------------------------
# Nutation angles and obliquity
# ---------------------------------------------------------------------------


def nutation_angles(t: ArrayLike, accuracy: Accuracy | int) -> tuple[Array, Array]:
    """Nutation in longitude and obliquity.

    ``FULL`` evaluates the IAU 2000A series, ``REDUCED`` the IAU 2000B
    truncation (about 1 mas).

    Args:
        t: TDB Julian centuries since J2000.0.
        accuracy: Accuracy tier.

    Returns:
        Tuple of (dpsi, deps) [arcsec].

    Raises:
        InvalidAccuracyError: If *accuracy* is invalid.
    """
    accuracy = Accuracy.validate(accuracy, "nutation_angles")
    series = nut00a if accuracy == Accuracy.FULL else nut00b
    dpsi, deps = series(DJ00, jnp.asarray(t) * DJC)
    return dpsi / AS2RAD, deps / AS2RAD


def mean_obliq(jd_tdb: ArrayLike) -> Array:
    """Mean obliquity of the ecliptic, IAU 2006.

    Args:
        jd_tdb: Barycentric Dynamical Time Julian date [days].

    Returns:
        Mean obliquity [arcsec].
    """
    return obl06(jnp.asarray(jd_tdb, dtype=get_dtype()), 0.0) / AS2RAD


# ---------------------------------------------------------------------------
# Equation of the equinoxes
# ---------------------------------------------------------------------------


def _ee_ct_full(t: Array) -> Array:
    dtype = get_dtype()
    fa = jnp.stack(fundamental_arguments(t))

    c0 = jnp.array(EECT_T0_COEFFS, dtype=dtype)
    a0 = jnp.array(EECT_T0_ARGS, dtype=dtype) @ fa
    s0 = jnp.sum(c0[:, 0] * jnp.sin(a0) + c0[:, 1] * jnp.cos(a0))

    c1 = jnp.array(EECT_T1_COEFFS, dtype=dtype)
    a1 = jnp.array(EECT_T1_ARGS, dtype=dtype) @ fa
    s1 = jnp.sum(c1[:, 0] * jnp.sin(a1) + c1[:, 1] * jnp.cos(a1))

    return (s0 + s1 * t) * AS2RAD


def _ee_ct_reduced(t: Array) -> Array:
    # Terms below 2 microarcseconds omitted
    fa = fund_args(t)
    om = fa.Omega
    ff = 2.0 * fa.F
    fd = 2.0 * fa.F - 2.0 * fa.D
    return (
        2640.96e-6 * jnp.sin(om)
        + 63.52e-6 * jnp.sin(2.0 * om)
        + 11.75e-6 * jnp.sin(fd + 3.0 * om)
        + 11.21e-6 * jnp.sin(fd + om)
        - 4.55e-6 * jnp.sin(fd + 2.0 * om)
        + 2.02e-6 * jnp.sin(ff + 3.0 * om)
        + 1.98e-6 * jnp.sin(ff + om)
        - 1.72e-6 * jnp.sin(3.0 * om)
        - 0.87e-6 * t * jnp.sin(om)
    ) * AS2RAD


def ee_ct(
    jd_high: ArrayLike,
    jd_low: ArrayLike,
    accuracy: Accuracy | int,
    cache: TransformCache | None = None,
) -> Array:
    """Complementary terms of the equation of the equinoxes.

    ``FULL`` sums the 33-term IERS 2003 series over the 14 fundamental
    quantities plus the term in t. ``REDUCED`` keeps the 9 terms above
    2 microarcseconds.

    With a *cache*, the result for the last ``(jd_high, jd_low,
    accuracy)`` and active dtype is memoized; a repeated call returns the identical value.

    Args:
        jd_high: High-order part of the TT (or TDB) Julian date [days].
        jd_low: Low-order part of the TT (or TDB) Julian date [days].
        accuracy: Accuracy tier.
        cache: Optional cache bundle.

    Returns:
        Complementary terms [rad].

    Raises:
        InvalidAccuracyError: If *accuracy* is invalid.

    References:

        1. D. D. McCarthy and G. Petit, *IERS Technical Note 32*, 2003,
           Chapter 5, Table 5.2e
    """
    accuracy = Accuracy.validate(accuracy, "ee_ct")

    def _compute():
        t = jnp.asarray(julian_centuries(jd_high, jd_low), dtype=get_dtype())
        return _ee_ct_full(t) if accuracy == Accuracy.FULL else _ee_ct_reduced(t)

    slot = cache.ee_ct if cache is not None else None
    return cached(slot, cache_key(jd_high, jd_low, accuracy, jnp.dtype(get_dtype()).name), _compute)


def e_tilt(
    jd_tdb: ArrayLike,
    accuracy: Accuracy | int,
    pole: PoleOffsets | None = None,
    cache: TransformCache | None = None,
) -> EarthTilt:
    """Orientation quantities of the Earth's rotation axis.

    Args:
        jd_tdb: Barycentric Dynamical Time Julian date [days].
        accuracy: Accuracy tier.
        pole: Pole offsets added to the nutation angles. ``None`` uses the
            process-wide default.
        cache: Optional cache bundle for the complementary terms.

    Returns:
        :class:`EarthTilt` with mean and true obliquity [deg], equation of
        the equinoxes [s of time], and nutation angles [arcsec].

    Raises:
        InvalidAccuracyError: If *accuracy* is invalid.
    """
    accuracy = Accuracy.validate(accuracy, "e_tilt")
    pole = resolve_pole(pole)

    dpsi, deps = nutation_angles(julian_centuries(jd_tdb), accuracy)
    dpsi = dpsi + pole.dpsi
    deps = deps + pole.deps

    mobl = mean_obliq(jd_tdb) / 3600.0
    ee = (dpsi * jnp.cos(mobl * DEG2RAD) + ee_ct(jd_tdb, 0.0, accuracy, cache) / AS2RAD) / 15.0
    tobl = mobl + deps / 3600.0

    return EarthTilt(mobl=mobl, tobl=tobl, ee=ee, dpsi=dpsi, deps=deps)


def ira_equinox(
    jd_tdb: ArrayLike,
    equinox: EquinoxType | int,
    accuracy: Accuracy | int,
    pole: PoleOffsets | None = None,
    cache: TransformCache | None = None,
) -> Array:
    """Intermediate right ascension of the equinox.

    Right ascension of the mean or true equinox of date in the celestial
    intermediate system. For the true equinox this is the equation of the
    origins.

    Args:
        jd_tdb: Barycentric Dynamical Time Julian date [days].
        equinox: ``MEAN`` (0) or ``TRUE`` (1).
        accuracy: Accuracy tier (used for the true equinox).
        pole: Pole offsets, see :func:`e_tilt`.
        cache: Optional cache bundle.

    Returns:
        Right ascension of the equinox [h].

    Raises:
        InvalidSelectorError: If *equinox* is invalid.
        InvalidAccuracyError: If *accuracy* is invalid.
    """
    equinox = coerce_enum(EquinoxType, equinox, "ira_equinox", "equinox type")
    accuracy = Accuracy.validate(accuracy, "ira_equinox")

    t = julian_centuries(jd_tdb)

    # Precession in RA [arcsec -> s of time]
    prec_ra = (
        0.014506
        + ((((-0.0000000368 * t - 0.000029956) * t - 0.00000044) * t + 1.3915817) * t + 4612.156534) * t
    ) / 15.0

    if equinox == EquinoxType.TRUE:
        prec_ra = prec_ra + e_tilt(jd_tdb, accuracy, pole, cache).ee

    return -prec_ra / 3600.0
