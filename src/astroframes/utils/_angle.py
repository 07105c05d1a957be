"""Angle and unit conversion helpers.

These helpers wrap the ``use_degrees`` convention of the rotation
matrices, and the range reductions used throughout astroframes. All are
JAX-traceable.
"""

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from astroframes.constants import TWOPI


def to_radians(angle: ArrayLike, use_degrees: bool) -> Array:
    """Convert angle to radians if ``use_degrees`` is True.

    Args:
        angle (ArrayLike): Angle value.
        use_degrees (bool): If ``True``, treat ``angle`` as degrees and convert.

    Returns:
        Angle in radians.
    """
    return jnp.where(use_degrees, jnp.deg2rad(angle), angle)


def remainder(x: ArrayLike, period: float) -> Array:
    """Symmetric remainder of *x* with respect to *period*.

    Equivalent to C ``remainder()``: the result lies in
    ``[-period/2, period/2]``, so values near zero stay near zero instead
    of wrapping to just below *period* as floor-based modulo would.

    Args:
        x (ArrayLike): Dividend.
        period (float): Divisor.

    Returns:
        ``x - n * period`` with ``n`` the integer nearest to ``x / period``.
    """
    x = jnp.asarray(x)
    return x - period * jnp.round(x / period)


def wrap_positive(x: ArrayLike, period: float) -> Array:
    """Reduce *x* into ``[0, period)`` via the symmetric remainder.

    Args:
        x (ArrayLike): Value to reduce.
        period (float): Range width.

    Returns:
        Reduced value.
    """
    r = remainder(x, period)
    return jnp.where(r < 0.0, r + period, r)


def norm_ang(angle: ArrayLike) -> Array:
    """Normalize an angle into ``[0, 2pi)``.

    Args:
        angle (ArrayLike): Angle in radians.

    Returns:
        Normalized angle in radians.
    """
    return wrap_positive(angle, TWOPI)
