"""Precession between the J2000.0 mean equator and the mean equator of date.

Implements the IAU 2006 precession model in the 4-angle formulation of
Capitaine et al. (2003): the precession matrix from J2000.0 to an epoch is
``R3(chi_a) R1(-omega_a) R3(-psi_a) R1(eps_0)``.

J2000.0 is the hub epoch.  A precession between two arbitrary epochs
pivots through J2000.0, and the matrix of each leg may be memoized in a
caller-owned :class:`~astroframes.utils.caching.PrecessionCache`, one slot
per direction.
"""

from __future__ import annotations

import logging

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from astroframes.config import get_dtype, get_time_eq_tolerance
from astroframes.constants import AS2RAD, EPS0_J2000, JD_J2000, JULIAN_CENTURY_DAYS
from astroframes.rotations import Rx, Rz, as_vector, rotate
from astroframes.utils.caching import TransformCache, cache_key, cached

logger = logging.getLogger(__name__)


def precession_angles(t: ArrayLike) -> tuple[Array, Array, Array]:
    """IAU 2006 precession angles psi_a, omega_a and chi_a.

    Args:
        t: TDB Julian centuries since J2000.0.

    Returns:
        Tuple of (psi_a, omega_a, chi_a) in arcseconds.
    """
    t = jnp.asarray(t, dtype=get_dtype())
    psia = ((((-0.0000000951 * t + 0.000132851) * t - 0.00114045) * t - 1.0790069) * t + 5038.481507) * t
    omegaa = (
        (((+0.0000003337 * t - 0.000000467) * t - 0.00772503) * t + 0.0512623) * t - 0.025754
    ) * t + EPS0_J2000
    chia = ((((-0.0000000560 * t + 0.000170663) * t - 0.00121197) * t - 2.3814292) * t + 10.556403) * t
    return psia, omegaa, chia


def precession_matrix(t: ArrayLike) -> Array:
    """Precession matrix from the J2000.0 mean frame to the mean frame of date.

    Args:
        t: TDB Julian centuries since J2000.0.

    Returns:
        3x3 rotation matrix (J2000 -> MOD).

    References:

        1. N. Capitaine, P. T. Wallace, and J. Chapront, *Expressions for
           IAU 2000 precession quantities*, Astronomy & Astrophysics 412, 2003
    """
    psia, omegaa, chia = precession_angles(t)
    return Rz(chia * AS2RAD) @ Rx(-omegaa * AS2RAD) @ Rz(-psia * AS2RAD) @ Rx(EPS0_J2000 * AS2RAD)


def _is_j2000(jd: float) -> bool:
    return abs(jd - JD_J2000) <= get_time_eq_tolerance()


def precession(
    jd_tdb_in: ArrayLike,
    vec: ArrayLike,
    jd_tdb_out: ArrayLike,
    cache: TransformCache | None = None,
) -> Array:
    """Precess equatorial vector(s) from one epoch to another.

    If the epochs are equal the input is returned unchanged. If neither
    epoch is J2000.0 the precession is done in two legs through J2000.0.

    With a *cache*, the matrix of each leg is memoized per direction
    (toward or away from J2000.0), keyed by the elapsed interval and the
    active dtype.

    Epochs may be JAX tracers; the single-matrix form
    ``P(out) @ P(in)^T`` is then used and no caching takes place.

    Args:
        jd_tdb_in: TDB Julian date of the input equator and equinox [days].
        vec: Position or velocity vector(s), shape ``(..., 3)``.
        jd_tdb_out: TDB Julian date of the output equator and equinox [days].
        cache: Optional cache bundle for the precession matrices.

    Returns:
        The precessed vector(s).

    Raises:
        MissingVectorError: If *vec* is ``None``.
    """
    vec = as_vector(vec, "precession")

    key = cache_key(jd_tdb_in, jd_tdb_out)
    if key is None:
        m = precession_matrix((jnp.asarray(jd_tdb_out) - JD_J2000) / JULIAN_CENTURY_DAYS) @ precession_matrix(
            (jnp.asarray(jd_tdb_in) - JD_J2000) / JULIAN_CENTURY_DAYS
        ).T
        return jnp.where(jnp.asarray(jd_tdb_in) == jnp.asarray(jd_tdb_out), vec, rotate(m, vec))

    jd_in, jd_out = key
    if jd_in == jd_out:
        return jnp.array(vec)

    if not _is_j2000(jd_in) and not _is_j2000(jd_out):
        logger.debug("Precessing %.6f -> %.6f through J2000", jd_in, jd_out)
        return precession(JD_J2000, precession(jd_in, vec, JD_J2000, cache), jd_out, cache)

    # Days from J2000.0 to the non-J2000 epoch
    toward_j2000 = _is_j2000(jd_out)
    t = jd_in - jd_out if toward_j2000 else jd_out - jd_in

    def _compute():
        m = precession_matrix(t / JULIAN_CENTURY_DAYS)
        return m.T if toward_j2000 else m

    slot = cache.precession.slot(toward_j2000) if cache is not None else None
    return rotate(cached(slot, cache_key(t, jnp.dtype(get_dtype()).name), _compute), vec)
