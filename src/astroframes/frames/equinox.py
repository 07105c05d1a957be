"""Equinox-based celestial frames: GCRS, J2000, MOD and TOD.

Each conversion is a fixed composition of the frame tie, precession and
nutation engines, applied in order:

- GCRS -> MOD: frame tie (ICRS -> J2000), then precession (J2000 -> date)
- J2000 -> TOD: precession (J2000 -> date), then nutation (mean -> true)
- GCRS -> TOD: frame tie, then J2000 -> TOD

and the reverse compositions for the opposite directions.  The first
failing step raises; later steps are never evaluated.
"""

from __future__ import annotations

from jax import Array
from jax.typing import ArrayLike

from astroframes._types import Accuracy, FrameTieDirection, NutationDirection, PoleOffsets
from astroframes.constants import JD_J2000
from astroframes.frame_tie import frame_tie
from astroframes.nutation import nutation
from astroframes.precession import precession
from astroframes.rotations import as_vector
from astroframes.utils.caching import TransformCache


def gcrs_to_mod(jd_tdb: ArrayLike, vec: ArrayLike, cache: TransformCache | None = None) -> Array:
    """Convert GCRS vector(s) to the mean equator and equinox of date.

    Args:
        jd_tdb: Barycentric Dynamical Time Julian date [days].
        vec: GCRS position or velocity vector(s), shape ``(..., 3)``.
        cache: Optional cache bundle.

    Returns:
        MOD vector(s).
    """
    v = frame_tie(as_vector(vec, "gcrs_to_mod"), FrameTieDirection.ICRS_TO_J2000)
    return precession(JD_J2000, v, jd_tdb, cache)


def mod_to_gcrs(jd_tdb: ArrayLike, vec: ArrayLike, cache: TransformCache | None = None) -> Array:
    """Convert mean-of-date vector(s) to the GCRS.

    Args:
        jd_tdb: Barycentric Dynamical Time Julian date [days].
        vec: MOD position or velocity vector(s), shape ``(..., 3)``.
        cache: Optional cache bundle.

    Returns:
        GCRS vector(s).
    """
    v = precession(jd_tdb, as_vector(vec, "mod_to_gcrs"), JD_J2000, cache)
    return frame_tie(v, FrameTieDirection.J2000_TO_ICRS)


def j2000_to_tod(
    jd_tdb: ArrayLike,
    accuracy: Accuracy | int,
    vec: ArrayLike,
    pole: PoleOffsets | None = None,
    cache: TransformCache | None = None,
) -> Array:
    """Convert J2000 dynamical vector(s) to the true equator and equinox of date.

    Args:
        jd_tdb: Barycentric Dynamical Time Julian date [days].
        accuracy: Accuracy tier of the nutation model.
        vec: J2000 position or velocity vector(s), shape ``(..., 3)``.
        pole: Pole offsets, ``None`` for the process-wide default.
        cache: Optional cache bundle.

    Returns:
        TOD vector(s).

    Raises:
        InvalidAccuracyError: If *accuracy* is invalid.
        MissingVectorError: If *vec* is ``None``.
    """
    accuracy = Accuracy.validate(accuracy, "j2000_to_tod")
    v = precession(JD_J2000, as_vector(vec, "j2000_to_tod"), jd_tdb, cache)
    return nutation(jd_tdb, NutationDirection.MEAN_TO_TRUE, accuracy, v, pole, cache)


def tod_to_j2000(
    jd_tdb: ArrayLike,
    accuracy: Accuracy | int,
    vec: ArrayLike,
    pole: PoleOffsets | None = None,
    cache: TransformCache | None = None,
) -> Array:
    """Convert true-of-date vector(s) to the J2000 dynamical frame.

    Args:
        jd_tdb: Barycentric Dynamical Time Julian date [days].
        accuracy: Accuracy tier of the nutation model.
        vec: TOD position or velocity vector(s), shape ``(..., 3)``.
        pole: Pole offsets, ``None`` for the process-wide default.
        cache: Optional cache bundle.

    Returns:
        J2000 vector(s).

    Raises:
        InvalidAccuracyError: If *accuracy* is invalid.
        MissingVectorError: If *vec* is ``None``.
    """
    accuracy = Accuracy.validate(accuracy, "tod_to_j2000")
    v = nutation(jd_tdb, NutationDirection.TRUE_TO_MEAN, accuracy, as_vector(vec, "tod_to_j2000"), pole, cache)
    return precession(jd_tdb, v, JD_J2000, cache)


def gcrs_to_tod(
    jd_tdb: ArrayLike,
    accuracy: Accuracy | int,
    vec: ArrayLike,
    pole: PoleOffsets | None = None,
    cache: TransformCache | None = None,
) -> Array:
    """Convert GCRS vector(s) to the true equator and equinox of date."""
    accuracy = Accuracy.validate(accuracy, "gcrs_to_tod")
    v = frame_tie(as_vector(vec, "gcrs_to_tod"), FrameTieDirection.ICRS_TO_J2000)
    return j2000_to_tod(jd_tdb, accuracy, v, pole, cache)


def tod_to_gcrs(
    jd_tdb: ArrayLike,
    accuracy: Accuracy | int,
    vec: ArrayLike,
    pole: PoleOffsets | None = None,
    cache: TransformCache | None = None,
) -> Array:
    """Convert true-of-date vector(s) to the GCRS."""
    v = tod_to_j2000(jd_tdb, accuracy, vec, pole, cache)
    return frame_tie(v, FrameTieDirection.J2000_TO_ICRS)
