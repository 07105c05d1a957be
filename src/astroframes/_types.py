"""Type definitions shared by the transformation engines.

Enumerations select the model variant or direction of a transformation.
They are plain Python values, resolved at trace time, so functions stay
``jax.jit`` compatible as long as enumerations are passed as static
arguments.  Integer values are fixed, so integer selectors coming from
other software can be passed directly.

Result containers are :class:`~typing.NamedTuple` subclasses, which JAX
treats as pytrees.
"""

from __future__ import annotations

import enum
from typing import NamedTuple

from jax import Array

from astroframes.errors import InvalidAccuracyError, InvalidSelectorError


def coerce_enum(enum_cls: type[enum.Enum], value, function: str, name: str, code: int = -1):
    """Convert *value* to a member of *enum_cls*.

    Args:
        enum_cls: Target enumeration class.
        value: Enumeration member or its integer value.
        function: Name of the calling operation, used in the error.
        name: Name of the argument, used in the error.
        code: Status code of the error.

    Returns:
        The enumeration member.

    Raises:
        InvalidSelectorError: If *value* is not a valid member.
    """
    try:
        return enum_cls(value)
    except (ValueError, TypeError):
        raise InvalidSelectorError(function, name, value, code) from None


class Accuracy(enum.IntEnum):
    """Accuracy tier of the Earth orientation models.

    Attributes:
        FULL: Full IAU 2000A nutation and all complementary terms.
        REDUCED: IAU 2000B nutation and truncated complementary terms,
            accurate to about 1 mas.
    """

    FULL = 0
    REDUCED = 1

    @classmethod
    def validate(cls, value, function: str, code: int = -1) -> Accuracy:
        """Return *value* as an :class:`Accuracy` or raise.

        Raises:
            InvalidAccuracyError: If *value* is not 0 or 1.
        """
        try:
            return cls(value)
        except (ValueError, TypeError):
            raise InvalidAccuracyError(function, value, code) from None


class NutationDirection(enum.IntEnum):
    """Direction of the nutation rotation."""

    TRUE_TO_MEAN = -1
    MEAN_TO_TRUE = 0


class FrameTieDirection(enum.IntEnum):
    """Direction of the ICRS / dynamical J2000 frame tie."""

    J2000_TO_ICRS = -1
    ICRS_TO_J2000 = 0


class EarthRotationMeasure(enum.IntEnum):
    """Measure of the Earth's rotational phase.

    Attributes:
        ERA: Earth Rotation Angle relative to the CIO (IAU 2006). The
            intermediate dynamical frame is CIRS.
        GST: Greenwich apparent sidereal time relative to the true equinox
            of date (pre IAU 2006). The intermediate dynamical frame is TOD.
    """

    ERA = 0
    GST = 1


class EquatorialClass(enum.IntEnum):
    """Class of celestial output coordinates.

    Attributes:
        REFERENCE: Geocentric reference system (GCRS).
        DYNAMICAL: Dynamical system of date (CIRS or TOD, depending on the
            Earth rotation measure).
    """

    REFERENCE = 0
    DYNAMICAL = 1


class WobbleDirection(enum.IntEnum):
    """Direction of the polar-motion rotation."""

    ITRS_TO_TIRS = 0
    TIRS_TO_ITRS = 1
    ITRS_TO_PEF = 2
    PEF_TO_ITRS = 3


class PoleOffsetType(enum.IntEnum):
    """Representation of observed celestial pole offsets.

    Attributes:
        DPSI_DEPS: Offsets in longitude and obliquity (dpsi, deps).
        X_Y: Offsets of the pole in the GCRS (dx, dy).
    """

    DPSI_DEPS = 1
    X_Y = 2


class EquinoxType(enum.IntEnum):
    """Mean or true equinox of date."""

    MEAN = 0
    TRUE = 1


class DynamicalSystem(enum.IntEnum):
    """Equatorial system of date."""

    MOD = 0
    TOD = 1
    CIRS = 2


class CioSystem(enum.IntEnum):
    """Reference system in which a CIO right ascension is expressed.

    Attributes:
        VS_GCRS: Right ascension measured in the GCRS.
        VS_EQUINOX: Right ascension measured from the true equinox of date.
    """

    VS_GCRS = 1
    VS_EQUINOX = 2


class Planet(enum.IntEnum):
    """Major planets with analytical mean longitudes."""

    MERCURY = 1
    VENUS = 2
    EARTH = 3
    MARS = 4
    JUPITER = 5
    SATURN = 6
    URANUS = 7
    NEPTUNE = 8


class EarthTilt(NamedTuple):
    """Orientation quantities of the Earth's rotation axis.

    Attributes:
        mobl: Mean obliquity of the ecliptic [deg].
        tobl: True obliquity of the ecliptic [deg].
        ee: Equation of the equinoxes [s of time].
        dpsi: Nutation in longitude, including pole offsets [arcsec].
        deps: Nutation in obliquity, including pole offsets [arcsec].
    """

    mobl: Array
    tobl: Array
    ee: Array
    dpsi: Array
    deps: Array


class DelaunayArgs(NamedTuple):
    """Delaunay fundamental arguments [rad], normalized to [0, 2pi).

    Attributes:
        l: Mean anomaly of the Moon.
        l1: Mean anomaly of the Sun.
        F: Mean argument of latitude of the Moon.
        D: Mean elongation of the Moon from the Sun.
        Omega: Mean longitude of the Moon's ascending node.
    """

    l: Array
    l1: Array
    F: Array
    D: Array
    Omega: Array


class FundamentalArguments(NamedTuple):
    """The 14 fundamental quantities of the complementary-terms series [rad]."""

    l: Array
    l1: Array
    F: Array
    D: Array
    Omega: Array
    mercury: Array
    venus: Array
    earth: Array
    mars: Array
    jupiter: Array
    saturn: Array
    uranus: Array
    neptune: Array
    pa: Array


class PoleOffsets(NamedTuple):
    """Observed corrections to the modeled celestial pole.

    Attributes:
        dpsi: Correction to the nutation in longitude [arcsec].
        deps: Correction to the nutation in obliquity [arcsec].
    """

    dpsi: float = 0.0
    deps: float = 0.0


class CioLocation(NamedTuple):
    """Right ascension of the Celestial Intermediate Origin.

    Attributes:
        ra_cio: Right ascension of the CIO [h].
        system: Reference system of ``ra_cio``.
    """

    ra_cio: Array
    system: CioSystem
