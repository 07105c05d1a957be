"""Fundamental arguments of the lunar, solar and planetary theories.

Provides the Delaunay arguments (Simon et al. 1994, IERS Conventions
2003), the mean longitudes of the eight major planets, and the general
accumulated precession in longitude.  These are the 14 quantities whose
integer combinations form the arguments of the nutation and
complementary-terms series.

All functions take ``t``, TDB Julian centuries since J2000.0, and are
pure: nothing is cached, every call recomputes from ``t``.
"""

from __future__ import annotations

import logging

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from astroframes._types import DelaunayArgs, FundamentalArguments, Planet
from astroframes.config import get_dtype
from astroframes.constants import AS2RAD, TWOPI
from astroframes.errors import MissingVectorError
from astroframes.utils import norm_ang, remainder

logger = logging.getLogger(__name__)

# Polynomial coefficients in arcseconds, constant term first.
# fmt: off
_DELAUNAY_COEFFS = (
    (485868.249036,  1717915923.2178,  31.8792,  0.051635, -0.00024470),  # l
    (1287104.793048, 129596581.0481,   -0.5532,  0.000136, -0.00001149),  # l'
    (335779.526232,  1739527262.8478, -12.7512, -0.001037,  0.00000417),  # F
    (1072260.703692, 1602961601.2090,  -6.3706,  0.006593, -0.00003169),  # D
    (450160.398036,  -6962890.5431,     7.4722,  0.007702, -0.00005939),  # Omega
)

# Mean longitude at J2000.0 [rad] and rate [rad/cy], Simon et al. 1994.
_PLANET_LONGITUDES = {
    Planet.MERCURY: (4.402608842461, 2608.790314157421),
    Planet.VENUS:   (3.176146696956, 1021.328554621099),
    Planet.EARTH:   (1.753470459496,  628.307584999142),
    Planet.MARS:    (6.203476112911,  334.061242669982),
    Planet.JUPITER: (0.599547105074,   52.969096264064),
    Planet.SATURN:  (0.874016284019,   21.329910496032),
    Planet.URANUS:  (5.481293871537,    7.478159856729),
    Planet.NEPTUNE: (5.311886286677,    3.813303563778),
}
# fmt: on


def _horner(coeffs: tuple[float, ...], t: Array) -> Array:
    acc = jnp.zeros_like(t) + coeffs[-1]
    for c in reversed(coeffs[:-1]):
        acc = acc * t + c
    return acc


def fund_args(t: ArrayLike) -> DelaunayArgs:
    """Delaunay fundamental arguments (IERS Conventions 2003).

    Args:
        t: TDB Julian centuries since J2000.0.

    Returns:
        The five arguments ``(l, l', F, D, Omega)`` in radians,
        normalized to [0, 2pi).

    Raises:
        MissingVectorError: If *t* is ``None``.

    References:

        1. J. L. Simon et al., *Numerical expressions for precession
           formulae and mean elements for the Moon and the planets*,
           Astronomy & Astrophysics 282, 1994
    """
    if t is None:
        raise MissingVectorError("fund_args", "time argument is missing")
    t = jnp.asarray(t, dtype=get_dtype())
    return DelaunayArgs(*(norm_ang(_horner(c, t) * AS2RAD) for c in _DELAUNAY_COEFFS))


def planet_lon(t: ArrayLike, planet: Planet | int) -> Array:
    """Mean longitude of a major planet.

    An unknown planet is reported with a warning on this module's logger
    and yields ``nan``, so the function can be used where a plain number
    is expected.

    Args:
        t: TDB Julian centuries since J2000.0.
        planet: Mercury (1) through Neptune (8).

    Returns:
        Mean longitude in radians, in [-pi, pi], or ``nan``.
    """
    try:
        planet = Planet(planet)
    except (ValueError, TypeError):
        logger.warning("planet_lon: invalid planet number: %r", planet)
        return jnp.asarray(jnp.nan, dtype=get_dtype())
    c0, c1 = _PLANET_LONGITUDES[planet]
    t = jnp.asarray(t, dtype=get_dtype())
    return remainder(c0 + c1 * t, TWOPI)


def accum_prec(t: ArrayLike) -> Array:
    """General accumulated precession in longitude (Simon et al. 1994).

    Equivalent to 5028.8200 arcsec/cy at J2000.

    Args:
        t: TDB Julian centuries since J2000.0.

    Returns:
        Precession angle in radians, in [-pi, pi].
    """
    t = jnp.asarray(t, dtype=get_dtype())
    return remainder((0.024380407358 + 0.000005391235 * t) * t, TWOPI)


def fundamental_arguments(t: ArrayLike) -> FundamentalArguments:
    """All 14 fundamental quantities of the complementary-terms series.

    Args:
        t: TDB Julian centuries since J2000.0.

    Returns:
        Delaunay arguments, planetary mean longitudes (Mercury to
        Neptune) and general precession, in radians.
    """
    return FundamentalArguments(
        *fund_args(t),
        *(planet_lon(t, planet) for planet in Planet),
        accum_prec(t),
    )
