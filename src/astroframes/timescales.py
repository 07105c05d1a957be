"""Julian date helpers for the transformation engines.

Epochs are Julian dates in the TT, TDB or UT1 scale.  Where precision
matters they are passed as a two-part ``(high, low)`` split, typically
the integer (or half-integer) day and the day fraction, so that the
fraction keeps its full float64 resolution.  The helpers here keep the
split intact until the last possible operation.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from astroframes.constants import JD_J2000, JULIAN_CENTURY_DAYS


def julian_centuries(jd_high: ArrayLike, jd_low: ArrayLike = 0.0) -> Array:
    """Julian centuries elapsed since J2000.0.

    Args:
        jd_high: High-order part of the Julian date [days].
        jd_low: Low-order part of the Julian date [days].

    Returns:
        Elapsed time in Julian centuries.
    """
    return ((jnp.asarray(jd_high) - JD_J2000) + jd_low) / JULIAN_CENTURY_DAYS


def tt2tdb(jd_tt: ArrayLike) -> Array:
    """Difference TDB - TT at a TT date.

    Periodic terms of the Fairhead & Bretagnon series, accurate to about
    10 microseconds. The transformation engines treat TDB as TT (the
    difference stays below 2 ms), this helper is for callers that need
    the distinction.

    Args:
        jd_tt: Terrestrial Time Julian date [days].

    Returns:
        TDB - TT [s].

    References:

        1. L. Fairhead and P. Bretagnon, *An analytical formula for the
           time transformation TB-TT*, Astronomy & Astrophysics 229, 1990
    """
    t = julian_centuries(jd_tt)
    return (
        0.001657 * jnp.sin(628.3076 * t + 6.2401)
        + 0.000022 * jnp.sin(575.3385 * t + 4.2970)
        + 0.000014 * jnp.sin(1256.6152 * t + 6.1969)
        + 0.000005 * jnp.sin(606.9777 * t + 4.0212)
        + 0.000005 * jnp.sin(52.9691 * t + 0.4444)
        + 0.000002 * jnp.sin(21.3299 * t + 5.5431)
        + 0.000010 * t * jnp.sin(628.3076 * t + 4.2490)
    )
