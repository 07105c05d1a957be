"""Nutation between the mean and true equator and equinox of date."""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from astroframes._types import Accuracy, NutationDirection, PoleOffsets, coerce_enum
from astroframes.constants import AS2RAD
from astroframes.earth_orientation import e_tilt
from astroframes.rotations import Rx, Rz, as_vector, rotate, rotate_transpose
from astroframes.utils.caching import TransformCache


def nutation_matrix(mobl: ArrayLike, tobl: ArrayLike, dpsi: ArrayLike) -> Array:
    """Nutation matrix from the mean to the true frame of date.

    Args:
        mobl: Mean obliquity of the ecliptic [deg].
        tobl: True obliquity of the ecliptic [deg].
        dpsi: Nutation in longitude [arcsec].

    Returns:
        3x3 rotation matrix (MOD -> TOD).
    """
    return Rx(-jnp.asarray(tobl), use_degrees=True) @ Rz(-jnp.asarray(dpsi) * AS2RAD) @ Rx(mobl, use_degrees=True)


def nutation(
    jd_tdb: ArrayLike,
    direction: NutationDirection | int,
    accuracy: Accuracy | int,
    vec: ArrayLike,
    pole: PoleOffsets | None = None,
    cache: TransformCache | None = None,
) -> Array:
    """Rotate vector(s) between the mean and true equator of date.

    Args:
        jd_tdb: Barycentric Dynamical Time Julian date [days].
        direction: ``MEAN_TO_TRUE`` (0) or ``TRUE_TO_MEAN`` (-1).
        accuracy: Accuracy tier of the nutation model.
        vec: Position or velocity vector(s), shape ``(..., 3)``.
        pole: Pole offsets, ``None`` for the process-wide default.
        cache: Optional cache bundle.

    Returns:
        The rotated vector(s).

    Raises:
        MissingVectorError: If *vec* is ``None``.
        InvalidSelectorError: If *direction* is invalid.
        InvalidAccuracyError: If *accuracy* is invalid.
    """
    vec = as_vector(vec, "nutation")
    direction = coerce_enum(NutationDirection, direction, "nutation", "nutation direction")

    tilt = e_tilt(jd_tdb, accuracy, pole, cache)
    m = nutation_matrix(tilt.mobl, tilt.tobl, tilt.dpsi)

    if direction == NutationDirection.MEAN_TO_TRUE:
        return rotate(m, vec)
    return rotate_transpose(m, vec)
