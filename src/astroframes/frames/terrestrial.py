"""Terrestrial <-> celestial transformations.

The Earth-fixed ITRS is connected to the celestial frames by polar motion
and the Earth's rotation.  Two methodologies measure the rotation:

- **ERA** (IAU 2006): Earth Rotation Angle from the CIO.  The dynamical
  frame of date is the CIRS, and the terrestrial intermediate frame is
  the TIRS.
- **GST** (pre IAU 2006): Greenwich apparent sidereal time from the true
  equinox.  The dynamical frame of date is TOD, and the terrestrial
  intermediate frame is the PEF.

Each is an :class:`EarthRotation` strategy with the same interface;
:func:`ter2cel` and :func:`cel2ter` pick one by
:class:`~astroframes._types.EarthRotationMeasure` and never branch on the
methodology themselves.

Polar motion is skipped when both ``xp`` and ``yp`` are zero.
"""

from __future__ import annotations

import logging

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from astroframes._types import (
    Accuracy,
    DynamicalSystem,
    EarthRotationMeasure,
    EquatorialClass,
    EquinoxType,
    PoleOffsets,
    WobbleDirection,
    coerce_enum,
)
from astroframes.config import get_dtype
from astroframes.constants import AS2RAD, DAY, DAY_HOURS, RAD2DEG
from astroframes.earth_orientation import e_tilt
from astroframes.errors import stage
from astroframes.frames.chain import cirs_to_gcrs, gcrs_to_cirs, gcrs_to_tod, tod_to_gcrs
from astroframes.frames.cio import CioProvider, resolve_provider
from astroframes.rotations import as_vector, rotate, rotate_transpose, spin, vdot
from astroframes.sofa import era00, pom00, sp00
from astroframes.timescales import julian_centuries
from astroframes.utils import wrap_positive
from astroframes.utils.caching import TransformCache

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Earth rotation primitives
# ---------------------------------------------------------------------------


def era(jd_ut1_high: ArrayLike, jd_ut1_low: ArrayLike = 0.0) -> Array:
    """Earth Rotation Angle.

    Args:
        jd_ut1_high: High-order part of the UT1 Julian date [days].
        jd_ut1_low: Low-order part of the UT1 Julian date [days].

    Returns:
        Earth Rotation Angle [deg], in [0, 360).
    """
    return era00(jnp.asarray(jd_ut1_high), jnp.asarray(jd_ut1_low)) * RAD2DEG


def sidereal_time(
    jd_ut1_high: ArrayLike,
    jd_ut1_low: ArrayLike,
    ut1_to_tt: ArrayLike,
    equinox: EquinoxType | int,
    erot: EarthRotationMeasure | int,
    accuracy: Accuracy | int,
    pole: PoleOffsets | None = None,
    cache: TransformCache | None = None,
    cio: CioProvider | None = None,
) -> Array:
    """Greenwich mean or apparent sidereal time.

    ``GST`` evaluates the IAU 2006 equinox-based polynomial plus the
    equation of the equinoxes. ``ERA`` measures the hour angle of the true
    equinox in the CIRS from the Earth Rotation Angle. Both agree to
    floating-point precision.

    Args:
        jd_ut1_high: High-order part of the UT1 Julian date [days].
        jd_ut1_low: Low-order part of the UT1 Julian date [days].
        ut1_to_tt: TT - UT1 [s].
        equinox: ``MEAN`` (0) for mean or ``TRUE`` (1) for apparent sidereal time.
        erot: Method, ``ERA`` (0) or ``GST`` (1).
        accuracy: Accuracy tier.
        pole: Pole offsets, ``None`` for the process-wide default.
        cache: Optional cache bundle.
        cio: CIO provider for the ``ERA`` method.

    Returns:
        Greenwich sidereal time [h], in [0, 24).

    Raises:
        InvalidAccuracyError: If *accuracy* is invalid (code 1).
        InvalidSelectorError: If *erot* (code 2) or *equinox* is invalid.
        StageError: If the CIO collaborators fail (offset 10).
    """
    accuracy = Accuracy.validate(accuracy, "sidereal_time", code=1)
    erot = coerce_enum(EarthRotationMeasure, erot, "sidereal_time", "Earth rotation measure", code=2)
    equinox = coerce_enum(EquinoxType, equinox, "sidereal_time", "equinox type")

    jd_tt_low = jnp.asarray(jd_ut1_low) + jnp.asarray(ut1_to_tt) / DAY
    jd_tdb = jnp.asarray(jd_ut1_high) + jd_tt_low
    t = julian_centuries(jd_ut1_high, jd_tt_low)
    theta = era(jd_ut1_high, jd_ut1_low)

    if erot == EarthRotationMeasure.ERA or equinox == EquinoxType.TRUE:
        ee = e_tilt(jd_tdb, accuracy, pole, cache).ee
    else:
        ee = 0.0

    if erot == EarthRotationMeasure.GST:
        # Equinox-based polynomial [arcsec]
        st = (
            ee * 15.0
            + 0.014506
            + ((((-0.0000000368 * t - 0.000029956) * t - 0.00000044) * t + 1.3915817) * t + 4612.156534) * t
        )
        return wrap_positive((st / 3600.0 + theta) / 15.0, DAY_HOURS)

    provider = resolve_provider(cio)
    with stage("sidereal_time", 10):
        location = provider.locate(jd_tdb, accuracy, pole, cache)
        x, y, _ = provider.basis(jd_tdb, location, accuracy, pole, cache)
        eq = tod_to_gcrs(jd_tdb, accuracy, jnp.array([1.0, 0.0, 0.0], dtype=get_dtype()), pole, cache)

    # Hour angle of the true equinox [deg]
    ha_eq = theta - jnp.arctan2(vdot(eq, y), vdot(eq, x)) * RAD2DEG
    gst = wrap_positive(ha_eq / 15.0, DAY_HOURS)

    if equinox == EquinoxType.MEAN:
        gst = wrap_positive(gst - ee / 3600.0, DAY_HOURS)
    return gst


def _has_polar_motion(xp: ArrayLike, yp: ArrayLike) -> bool:
    try:
        return float(xp) != 0.0 or float(yp) != 0.0
    except TypeError:
        # Traced or batched values, always apply
        return True


def wobble(
    jd_tt: ArrayLike,
    direction: WobbleDirection | int,
    xp: ArrayLike,
    yp: ArrayLike,
    vec: ArrayLike,
) -> Array:
    """Apply polar motion between the ITRS and TIRS or PEF.

    The TIRS directions include the TIO locator s', the PEF directions do
    not.

    Args:
        jd_tt: Terrestrial Time Julian date [days].
        direction: One of :class:`~astroframes._types.WobbleDirection`.
        xp: x coordinate of the CIP with respect to the ITRS pole [arcsec].
        yp: y coordinate of the CIP with respect to the ITRS pole [arcsec].
        vec: Position or velocity vector(s), shape ``(..., 3)``.

    Returns:
        The rotated vector(s).

    Raises:
        MissingVectorError: If *vec* is ``None``.
        InvalidSelectorError: If *direction* is invalid.
    """
    vec = as_vector(vec, "wobble")
    direction = coerce_enum(WobbleDirection, direction, "wobble", "wobble direction")

    if direction in (WobbleDirection.ITRS_TO_TIRS, WobbleDirection.TIRS_TO_ITRS):
        sp = sp00(jnp.asarray(jd_tt, dtype=vec.dtype), 0.0)
    else:
        sp = 0.0

    # TIRS/PEF -> ITRS
    w = pom00(jnp.asarray(xp, dtype=vec.dtype) * AS2RAD, jnp.asarray(yp, dtype=vec.dtype) * AS2RAD, sp)

    if direction in (WobbleDirection.TIRS_TO_ITRS, WobbleDirection.PEF_TO_ITRS):
        return rotate(w, vec)
    return rotate_transpose(w, vec)


# ---------------------------------------------------------------------------
# Earth rotation strategies
# ---------------------------------------------------------------------------


class EarthRotation:
    """Earth rotation methodology used by :func:`ter2cel` and :func:`cel2ter`.

    Attributes:
        measure: The rotation measure this strategy implements.
        dynamical_system: The celestial frame of date it rotates into.
    """

    measure: EarthRotationMeasure
    dynamical_system: DynamicalSystem

    def angle(self, jd_ut1_high, jd_ut1_low, ut1_to_tt, accuracy, pole=None, cache=None, cio=None) -> Array:
        """Rotation angle from the terrestrial to the dynamical frame [deg]."""
        raise NotImplementedError

    def wobble_in(self, jd_tt, xp, yp, vec) -> Array:
        """Polar motion from the ITRS to the intermediate terrestrial frame."""
        raise NotImplementedError

    def wobble_out(self, jd_tt, xp, yp, vec) -> Array:
        """Polar motion from the intermediate terrestrial frame to the ITRS."""
        raise NotImplementedError

    def to_gcrs(self, jd_tdb, accuracy, vec, pole=None, cache=None, cio=None) -> Array:
        """Convert from the dynamical frame of date to the GCRS."""
        raise NotImplementedError

    def from_gcrs(self, jd_tdb, accuracy, vec, pole=None, cache=None, cio=None) -> Array:
        """Convert from the GCRS to the dynamical frame of date."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class EraRotation(EarthRotation):
    """IAU 2006 method: Earth Rotation Angle, TIRS and CIRS."""

    measure = EarthRotationMeasure.ERA
    dynamical_system = DynamicalSystem.CIRS

    def angle(self, jd_ut1_high, jd_ut1_low, ut1_to_tt, accuracy, pole=None, cache=None, cio=None):
        return era(jd_ut1_high, jd_ut1_low)

    def wobble_in(self, jd_tt, xp, yp, vec):
        if not _has_polar_motion(xp, yp):
            return vec
        return wobble(jd_tt, WobbleDirection.ITRS_TO_TIRS, xp, yp, vec)

    def wobble_out(self, jd_tt, xp, yp, vec):
        if not _has_polar_motion(xp, yp):
            return vec
        return wobble(jd_tt, WobbleDirection.TIRS_TO_ITRS, xp, yp, vec)

    def to_gcrs(self, jd_tdb, accuracy, vec, pole=None, cache=None, cio=None):
        return cirs_to_gcrs(jd_tdb, accuracy, vec, pole, cache, cio)

    def from_gcrs(self, jd_tdb, accuracy, vec, pole=None, cache=None, cio=None):
        return gcrs_to_cirs(jd_tdb, accuracy, vec, pole, cache, cio)


class GstRotation(EarthRotation):
    """Pre IAU 2006 method: apparent sidereal time, PEF and TOD."""

    measure = EarthRotationMeasure.GST
    dynamical_system = DynamicalSystem.TOD

    def angle(self, jd_ut1_high, jd_ut1_low, ut1_to_tt, accuracy, pole=None, cache=None, cio=None):
        gast = sidereal_time(
            jd_ut1_high, jd_ut1_low, ut1_to_tt, EquinoxType.TRUE, EarthRotationMeasure.GST, accuracy, pole, cache
        )
        return 15.0 * gast

    def wobble_in(self, jd_tt, xp, yp, vec):
        if not _has_polar_motion(xp, yp):
            return vec
        return wobble(jd_tt, WobbleDirection.ITRS_TO_PEF, xp, yp, vec)

    def wobble_out(self, jd_tt, xp, yp, vec):
        if not _has_polar_motion(xp, yp):
            return vec
        return wobble(jd_tt, WobbleDirection.PEF_TO_ITRS, xp, yp, vec)

    def to_gcrs(self, jd_tdb, accuracy, vec, pole=None, cache=None, cio=None):
        return tod_to_gcrs(jd_tdb, accuracy, vec, pole, cache)

    def from_gcrs(self, jd_tdb, accuracy, vec, pole=None, cache=None, cio=None):
        return gcrs_to_tod(jd_tdb, accuracy, vec, pole, cache)


_STRATEGIES = {
    EarthRotationMeasure.ERA: EraRotation(),
    EarthRotationMeasure.GST: GstRotation(),
}


def earth_rotation_strategy(
    erot: EarthRotationMeasure | int, function: str = "earth_rotation_strategy", code: int = 2
) -> EarthRotation:
    """Return the :class:`EarthRotation` strategy for a rotation measure.

    Raises:
        InvalidSelectorError: If *erot* is invalid.
    """
    rotation = _STRATEGIES[coerce_enum(EarthRotationMeasure, erot, function, "Earth rotation measure", code)]
    logger.debug("%s using %r", function, rotation)
    return rotation


# ---------------------------------------------------------------------------
# Composers
# ---------------------------------------------------------------------------


def ter2cel(
    jd_ut1_high: ArrayLike,
    jd_ut1_low: ArrayLike,
    ut1_to_tt: ArrayLike,
    erot: EarthRotationMeasure | int,
    accuracy: Accuracy | int,
    coord_class: EquatorialClass | int,
    xp: ArrayLike,
    yp: ArrayLike,
    vec: ArrayLike,
    pole: PoleOffsets | None = None,
    cache: TransformCache | None = None,
    cio: CioProvider | None = None,
) -> Array:
    """Rotate ITRS vector(s) to a celestial frame.

    Applies polar motion, then the Earth rotation of the selected method,
    then (for the reference class) the conversion of the dynamical frame
    to the GCRS. TDB is taken equal to TT.

    Args:
        jd_ut1_high: High-order part of the UT1 Julian date [days].
        jd_ut1_low: Low-order part of the UT1 Julian date [days].
        ut1_to_tt: TT - UT1 [s].
        erot: ``ERA`` (0) or ``GST`` (1).
        accuracy: Accuracy tier.
        coord_class: ``REFERENCE`` (0) for GCRS output, ``DYNAMICAL`` (1)
            for CIRS (ERA) or TOD (GST) output.
        xp: x coordinate of the CIP with respect to the ITRS pole [arcsec].
        yp: y coordinate of the CIP with respect to the ITRS pole [arcsec].
        vec: ITRS position or velocity vector(s), shape ``(..., 3)``.
        pole: Pole offsets, ``None`` for the process-wide default.
        cache: Optional cache bundle.
        cio: CIO provider for the ERA method.

    Returns:
        Vector(s) in the GCRS, CIRS or TOD.

    Raises:
        MissingVectorError: If *vec* is ``None`` (code -1).
        InvalidAccuracyError: If *accuracy* is invalid (code 1).
        InvalidSelectorError: If *erot* (code 2) or *coord_class* (code 3)
            is invalid.
        StageError: If the dynamical to GCRS conversion fails (offset 10).
    """
    vec = as_vector(vec, "ter2cel")
    accuracy = Accuracy.validate(accuracy, "ter2cel", code=1)
    rotation = earth_rotation_strategy(erot, "ter2cel", code=2)
    coord_class = coerce_enum(EquatorialClass, coord_class, "ter2cel", "equatorial class", code=3)

    jd_tt = jnp.asarray(jd_ut1_high) + (jnp.asarray(jd_ut1_low) + jnp.asarray(ut1_to_tt) / DAY)

    v = rotation.wobble_in(jd_tt, xp, yp, vec)
    v = spin(-rotation.angle(jd_ut1_high, jd_ut1_low, ut1_to_tt, accuracy, pole, cache, cio), v)

    if coord_class == EquatorialClass.REFERENCE:
        with stage("ter2cel", 10):
            v = rotation.to_gcrs(jd_tt, accuracy, v, pole, cache, cio)
    return v


def cel2ter(
    jd_ut1_high: ArrayLike,
    jd_ut1_low: ArrayLike,
    ut1_to_tt: ArrayLike,
    erot: EarthRotationMeasure | int,
    accuracy: Accuracy | int,
    coord_class: EquatorialClass | int,
    xp: ArrayLike,
    yp: ArrayLike,
    vec: ArrayLike,
    pole: PoleOffsets | None = None,
    cache: TransformCache | None = None,
    cio: CioProvider | None = None,
) -> Array:
    """Rotate celestial vector(s) to the ITRS. Inverse of :func:`ter2cel`.

    Args:
        jd_ut1_high: High-order part of the UT1 Julian date [days].
        jd_ut1_low: Low-order part of the UT1 Julian date [days].
        ut1_to_tt: TT - UT1 [s].
        erot: ``ERA`` (0) or ``GST`` (1).
        accuracy: Accuracy tier.
        coord_class: ``REFERENCE`` (0) for GCRS input, ``DYNAMICAL`` (1)
            for CIRS (ERA) or TOD (GST) input.
        xp: x coordinate of the CIP with respect to the ITRS pole [arcsec].
        yp: y coordinate of the CIP with respect to the ITRS pole [arcsec].
        vec: Celestial position or velocity vector(s), shape ``(..., 3)``.
        pole: Pole offsets, ``None`` for the process-wide default.
        cache: Optional cache bundle.
        cio: CIO provider for the ERA method.

    Returns:
        ITRS vector(s).

    Raises:
        MissingVectorError: If *vec* is ``None`` (code -1).
        InvalidAccuracyError: If *accuracy* is invalid (code 1).
        InvalidSelectorError: If *erot* (code 2) or *coord_class* (code 3)
            is invalid.
        StageError: If the GCRS to dynamical conversion fails (offset 10).
    """
    vec = as_vector(vec, "cel2ter")
    accuracy = Accuracy.validate(accuracy, "cel2ter", code=1)
    rotation = earth_rotation_strategy(erot, "cel2ter", code=2)
    coord_class = coerce_enum(EquatorialClass, coord_class, "cel2ter", "equatorial class", code=3)

    jd_tt = jnp.asarray(jd_ut1_high) + (jnp.asarray(jd_ut1_low) + jnp.asarray(ut1_to_tt) / DAY)

    v = vec
    if coord_class == EquatorialClass.REFERENCE:
        with stage("cel2ter", 10):
            v = rotation.from_gcrs(jd_tt, accuracy, v, pole, cache, cio)

    v = spin(rotation.angle(jd_ut1_high, jd_ut1_low, ut1_to_tt, accuracy, pole, cache, cio), v)
    return rotation.wobble_out(jd_tt, xp, yp, v)


def itrs_to_cirs(
    jd_tt_high: ArrayLike,
    jd_tt_low: ArrayLike,
    ut1_to_tt: ArrayLike,
    accuracy: Accuracy | int,
    xp: ArrayLike,
    yp: ArrayLike,
    vec: ArrayLike,
    pole: PoleOffsets | None = None,
    cache: TransformCache | None = None,
    cio: CioProvider | None = None,
) -> Array:
    """Rotate ITRS vector(s) to the CIRS (IAU 2006 method).

    Args:
        jd_tt_high: High-order part of the TT Julian date [days].
        jd_tt_low: Low-order part of the TT Julian date [days].
        ut1_to_tt: TT - UT1 [s].
        accuracy: Accuracy tier.
        xp: x coordinate of the CIP with respect to the ITRS pole [arcsec].
        yp: y coordinate of the CIP with respect to the ITRS pole [arcsec].
        vec: ITRS vector(s), shape ``(..., 3)``.

    Returns:
        CIRS vector(s).
    """
    return ter2cel(
        jd_tt_high, jd_tt_low - ut1_to_tt / DAY, ut1_to_tt, EarthRotationMeasure.ERA, accuracy,
        EquatorialClass.DYNAMICAL, xp, yp, vec, pole, cache, cio,
    )


def itrs_to_tod(
    jd_tt_high: ArrayLike,
    jd_tt_low: ArrayLike,
    ut1_to_tt: ArrayLike,
    accuracy: Accuracy | int,
    xp: ArrayLike,
    yp: ArrayLike,
    vec: ArrayLike,
    pole: PoleOffsets | None = None,
    cache: TransformCache | None = None,
) -> Array:
    """Rotate ITRS vector(s) to the true equator and equinox of date (GST method)."""
    return ter2cel(
        jd_tt_high, jd_tt_low - ut1_to_tt / DAY, ut1_to_tt, EarthRotationMeasure.GST, accuracy,
        EquatorialClass.DYNAMICAL, xp, yp, vec, pole, cache,
    )


def cirs_to_itrs(
    jd_tt_high: ArrayLike,
    jd_tt_low: ArrayLike,
    ut1_to_tt: ArrayLike,
    accuracy: Accuracy | int,
    xp: ArrayLike,
    yp: ArrayLike,
    vec: ArrayLike,
    pole: PoleOffsets | None = None,
    cache: TransformCache | None = None,
    cio: CioProvider | None = None,
) -> Array:
    """Rotate CIRS vector(s) to the ITRS. Inverse of :func:`itrs_to_cirs`."""
    return cel2ter(
        jd_tt_high, jd_tt_low - ut1_to_tt / DAY, ut1_to_tt, EarthRotationMeasure.ERA, accuracy,
        EquatorialClass.DYNAMICAL, xp, yp, vec, pole, cache, cio,
    )


def tod_to_itrs(
    jd_tt_high: ArrayLike,
    jd_tt_low: ArrayLike,
    ut1_to_tt: ArrayLike,
    accuracy: Accuracy | int,
    xp: ArrayLike,
    yp: ArrayLike,
    vec: ArrayLike,
    pole: PoleOffsets | None = None,
    cache: TransformCache | None = None,
) -> Array:
    """Rotate true-of-date vector(s) to the ITRS. Inverse of :func:`itrs_to_tod`."""
    return cel2ter(
        jd_tt_high, jd_tt_low - ut1_to_tt / DAY, ut1_to_tt, EarthRotationMeasure.GST, accuracy,
        EquatorialClass.DYNAMICAL, xp, yp, vec, pole, cache,
    )


def itrs_to_gcrs(
    jd_tt_high: ArrayLike,
    jd_tt_low: ArrayLike,
    ut1_to_tt: ArrayLike,
    accuracy: Accuracy | int,
    xp: ArrayLike,
    yp: ArrayLike,
    vec: ArrayLike,
    pole: PoleOffsets | None = None,
    cache: TransformCache | None = None,
    cio: CioProvider | None = None,
) -> Array:
    """Rotate ITRS vector(s) to the GCRS with the IAU 2006 method.

    Args:
        jd_tt_high: High-order part of the TT Julian date [days].
        jd_tt_low: Low-order part of the TT Julian date [days].
        ut1_to_tt: TT - UT1 [s].
        accuracy: Accuracy tier.
        xp: x coordinate of the CIP with respect to the ITRS pole [arcsec].
        yp: y coordinate of the CIP with respect to the ITRS pole [arcsec].
        vec: ITRS vector(s), shape ``(..., 3)``.

    Returns:
        GCRS vector(s).
    """
    return ter2cel(
        jd_tt_high, jd_tt_low - ut1_to_tt / DAY, ut1_to_tt, EarthRotationMeasure.ERA, accuracy,
        EquatorialClass.REFERENCE, xp, yp, vec, pole, cache, cio,
    )


def gcrs_to_itrs(
    jd_tt_high: ArrayLike,
    jd_tt_low: ArrayLike,
    ut1_to_tt: ArrayLike,
    accuracy: Accuracy | int,
    xp: ArrayLike,
    yp: ArrayLike,
    vec: ArrayLike,
    pole: PoleOffsets | None = None,
    cache: TransformCache | None = None,
    cio: CioProvider | None = None,
) -> Array:
    """Rotate GCRS vector(s) to the ITRS. Inverse of :func:`itrs_to_gcrs`."""
    return cel2ter(
        jd_tt_high, jd_tt_low - ut1_to_tt / DAY, ut1_to_tt, EarthRotationMeasure.ERA, accuracy,
        EquatorialClass.REFERENCE, xp, yp, vec, pole, cache, cio,
    )
