"""Derived conversions between the celestial frames of date.

The only way to reach a frame other than the GCRS or J2000 hubs is
through the compositions below:

| From -> To  | Steps                                                    |
|-------------|----------------------------------------------------------|
| GCRS -> MOD | frame tie (ICRS -> J2000), precession (J2000 -> date)    |
| GCRS -> TOD | GCRS -> MOD, nutation (mean -> true)                     |
| GCRS -> CIRS| projection on the CIRS basis of a CIO provider           |
| CIRS -> TOD | spin by the CIO right ascension                          |
| TOD -> CIRS | spin by minus the CIO right ascension                    |

Each composition applies its steps in that order and stops at the first
failure.  Collaborator failures of the CIRS conversions are re-raised as
:class:`~astroframes.errors.StageError` with the stage offset added to
the status code.

Every function accepts a single ``(3,)`` vector or a batch ``(..., 3)``.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from astroframes._types import Accuracy, DynamicalSystem, PoleOffsets, coerce_enum
from astroframes.config import get_dtype
from astroframes.constants import DAY_HOURS, DEG2RAD, HOUR2RAD, RAD2DEG
from astroframes.errors import stage
from astroframes.frames.cio import CioProvider, cio_ra, resolve_provider
from astroframes.frames.equinox import (
    gcrs_to_mod,
    gcrs_to_tod,
    j2000_to_tod,
    mod_to_gcrs,
    tod_to_gcrs,
    tod_to_j2000,
)
from astroframes.rotations import as_vector, spin, vdot
from astroframes.utils import wrap_positive
from astroframes.utils.caching import TransformCache

__all__ = [
    "app_to_cirs_ra",
    "cirs_to_app_ra",
    "cirs_to_gcrs",
    "cirs_to_tod",
    "gcrs2equ",
    "gcrs_to_cirs",
    "gcrs_to_mod",
    "gcrs_to_tod",
    "j2000_to_tod",
    "mod_to_gcrs",
    "radec2vector",
    "tod_to_cirs",
    "tod_to_gcrs",
    "tod_to_j2000",
    "vector2radec",
]


# ---------------------------------------------------------------------------
# GCRS <-> CIRS
# ---------------------------------------------------------------------------


def gcrs_to_cirs(
    jd_tdb: ArrayLike,
    accuracy: Accuracy | int,
    vec: ArrayLike,
    pole: PoleOffsets | None = None,
    cache: TransformCache | None = None,
    cio: CioProvider | None = None,
) -> Array:
    """Convert GCRS vector(s) to the Celestial Intermediate Reference System.

    Args:
        jd_tdb: Barycentric Dynamical Time Julian date [days].
        accuracy: Accuracy tier.
        vec: GCRS position or velocity vector(s), shape ``(..., 3)``.
        pole: Pole offsets, ``None`` for the process-wide default.
        cache: Optional cache bundle.
        cio: CIO provider, ``None`` for the equinox-based default.

    Returns:
        CIRS vector(s).

    Raises:
        MissingVectorError: If *vec* is ``None``.
        InvalidAccuracyError: If *accuracy* is invalid.
        StageError: If the CIO location (offset 0) or the CIO basis
            (offset 10) fails.
    """
    vec = as_vector(vec, "gcrs_to_cirs")
    accuracy = Accuracy.validate(accuracy, "gcrs_to_cirs")
    provider = resolve_provider(cio)

    with stage("gcrs_to_cirs", 0):
        location = provider.locate(jd_tdb, accuracy, pole, cache)
    with stage("gcrs_to_cirs", 10):
        x, y, z = provider.basis(jd_tdb, location, accuracy, pole, cache)

    return jnp.stack([vdot(x, vec), vdot(y, vec), vdot(z, vec)], axis=-1)


def cirs_to_gcrs(
    jd_tdb: ArrayLike,
    accuracy: Accuracy | int,
    vec: ArrayLike,
    pole: PoleOffsets | None = None,
    cache: TransformCache | None = None,
    cio: CioProvider | None = None,
) -> Array:
    """Convert CIRS vector(s) to the GCRS.

    Args:
        jd_tdb: Barycentric Dynamical Time Julian date [days].
        accuracy: Accuracy tier.
        vec: CIRS position or velocity vector(s), shape ``(..., 3)``.
        pole: Pole offsets, ``None`` for the process-wide default.
        cache: Optional cache bundle.
        cio: CIO provider, ``None`` for the equinox-based default.

    Returns:
        GCRS vector(s).

    Raises:
        MissingVectorError: If *vec* is ``None``.
        InvalidAccuracyError: If *accuracy* is invalid.
        StageError: If the CIO location (offset 0) or the CIO basis
            (offset 10) fails.
    """
    vec = as_vector(vec, "cirs_to_gcrs")
    accuracy = Accuracy.validate(accuracy, "cirs_to_gcrs")
    provider = resolve_provider(cio)

    with stage("cirs_to_gcrs", 0):
        location = provider.locate(jd_tdb, accuracy, pole, cache)
    with stage("cirs_to_gcrs", 10):
        x, y, z = provider.basis(jd_tdb, location, accuracy, pole, cache)

    return vec[..., 0:1] * x + vec[..., 1:2] * y + vec[..., 2:3] * z


# ---------------------------------------------------------------------------
# CIRS <-> TOD
# ---------------------------------------------------------------------------


def cirs_to_tod(
    jd_tt: ArrayLike,
    accuracy: Accuracy | int,
    vec: ArrayLike,
    pole: PoleOffsets | None = None,
    cache: TransformCache | None = None,
    cio: CioProvider | None = None,
) -> Array:
    """Convert CIRS vector(s) to the true equator and equinox of date.

    Both frames share the true equator; they differ only in the origin of
    right ascension.

    Args:
        jd_tt: Terrestrial Time Julian date [days].
        accuracy: Accuracy tier.
        vec: CIRS position or velocity vector(s), shape ``(..., 3)``.
        pole: Pole offsets, ``None`` for the process-wide default.
        cache: Optional cache bundle.
        cio: CIO provider, ``None`` for the equinox-based default.

    Returns:
        TOD vector(s).
    """
    vec = as_vector(vec, "cirs_to_tod")
    ra_cio = cio_ra(jd_tt, accuracy, pole, cache, cio)
    return spin(-15.0 * ra_cio, vec)


def tod_to_cirs(
    jd_tt: ArrayLike,
    accuracy: Accuracy | int,
    vec: ArrayLike,
    pole: PoleOffsets | None = None,
    cache: TransformCache | None = None,
    cio: CioProvider | None = None,
) -> Array:
    """Convert true-of-date vector(s) to the CIRS. Inverse of :func:`cirs_to_tod`."""
    vec = as_vector(vec, "tod_to_cirs")
    ra_cio = cio_ra(jd_tt, accuracy, pole, cache, cio)
    return spin(15.0 * ra_cio, vec)


def cirs_to_app_ra(
    jd_tt: ArrayLike,
    accuracy: Accuracy | int,
    ra: ArrayLike,
    pole: PoleOffsets | None = None,
    cache: TransformCache | None = None,
    cio: CioProvider | None = None,
) -> Array:
    """Convert a CIRS right ascension to an apparent one (from the true equinox).

    Args:
        jd_tt: Terrestrial Time Julian date [days].
        accuracy: Accuracy tier.
        ra: Right ascension measured from the CIO [h].

    Returns:
        Right ascension measured from the true equinox of date [h], in [0, 24).
    """
    return wrap_positive(ra + cio_ra(jd_tt, accuracy, pole, cache, cio), DAY_HOURS)


def app_to_cirs_ra(
    jd_tt: ArrayLike,
    accuracy: Accuracy | int,
    ra: ArrayLike,
    pole: PoleOffsets | None = None,
    cache: TransformCache | None = None,
    cio: CioProvider | None = None,
) -> Array:
    """Convert an apparent right ascension to a CIRS one. Inverse of :func:`cirs_to_app_ra`."""
    return wrap_positive(ra - cio_ra(jd_tt, accuracy, pole, cache, cio), DAY_HOURS)


# ---------------------------------------------------------------------------
# Spherical coordinates
# ---------------------------------------------------------------------------


def radec2vector(ra: ArrayLike, dec: ArrayLike, dist: ArrayLike = 1.0) -> Array:
    """Rectangular vector from right ascension, declination and distance.

    Args:
        ra: Right ascension [h].
        dec: Declination [deg].
        dist: Distance, in any unit.

    Returns:
        Vector(s) of shape ``(..., 3)`` in the unit of *dist*.
    """
    dtype = get_dtype()
    r = jnp.asarray(ra, dtype=dtype) * HOUR2RAD
    d = jnp.asarray(dec, dtype=dtype) * DEG2RAD
    cd = jnp.cos(d)
    return jnp.asarray(dist, dtype=dtype)[..., None] * jnp.stack(
        jnp.broadcast_arrays(cd * jnp.cos(r), cd * jnp.sin(r), jnp.sin(d)), axis=-1
    )


def vector2radec(vec: ArrayLike) -> tuple[Array, Array]:
    """Right ascension and declination of rectangular vector(s).

    A vector along the pole gets a right ascension of 0.

    Args:
        vec: Vector(s) of shape ``(..., 3)``.

    Returns:
        Tuple of (ra [h] in [0, 24), dec [deg]).

    Raises:
        MissingVectorError: If *vec* is ``None``.
    """
    vec = as_vector(vec, "vector2radec")
    x = vec[..., 0]
    y = vec[..., 1]
    xyproj = jnp.sqrt(x * x + y * y)

    ra = jnp.where(xyproj > 0.0, jnp.arctan2(y, x) / HOUR2RAD, 0.0)
    ra = jnp.where(ra < 0.0, ra + DAY_HOURS, ra)
    dec = jnp.arctan2(vec[..., 2], xyproj) * RAD2DEG
    return ra, dec


def gcrs2equ(
    jd_tt: ArrayLike,
    sys: DynamicalSystem | int,
    accuracy: Accuracy | int,
    rag: ArrayLike,
    decg: ArrayLike,
    pole: PoleOffsets | None = None,
    cache: TransformCache | None = None,
    cio: CioProvider | None = None,
) -> tuple[Array, Array]:
    """Convert GCRS right ascension and declination to an equatorial system of date.

    TDB is taken equal to TT.

    Args:
        jd_tt: Terrestrial Time Julian date [days].
        sys: ``MOD`` (0), ``TOD`` (1) or ``CIRS`` (2).
        accuracy: Accuracy tier.
        rag: GCRS right ascension [h].
        decg: GCRS declination [deg].
        pole: Pole offsets, ``None`` for the process-wide default.
        cache: Optional cache bundle.
        cio: CIO provider, ``None`` for the equinox-based default.

    Returns:
        Tuple of (ra [h], dec [deg]) in the requested system.

    Raises:
        InvalidSelectorError: If *sys* is invalid.
        StageError: If the CIRS conversion fails (offset 10).
    """
    sys = coerce_enum(DynamicalSystem, sys, "gcrs2equ", "dynamical system")
    pos = radec2vector(rag, decg)

    if sys == DynamicalSystem.TOD:
        pos = gcrs_to_tod(jd_tt, accuracy, pos, pole, cache)
    elif sys == DynamicalSystem.MOD:
        pos = gcrs_to_mod(jd_tt, pos, cache)
    else:
        with stage("gcrs2equ", 10):
            pos = gcrs_to_cirs(jd_tt, accuracy, pos, pole, cache, cio)

    return vector2radec(pos)
