"""Celestial Intermediate Origin (CIO) location and basis providers.

The Celestial Intermediate Reference System (CIRS) has its pole at the
CIP and its origin at the CIO.  Converting to or from it needs two
things at an epoch:

- the right ascension of the CIO, either measured in the GCRS or from the
  true equinox of date (:class:`~astroframes._types.CioLocation`);
- the CIRS axes expressed in the GCRS, as three orthonormal vectors.

A :class:`CioProvider` supplies both.  Two are available:

- :class:`EquinoxCioProvider` (default) derives the CIO from the equation
  of the origins and the equinox-based TOD chain.  CIRS and TOD built
  from it are exactly consistent with each other.
- :class:`Iau2006CioProvider` uses the IAU 2006/2000A X, Y, s model of
  the SOFA routines ``xys06a`` and ``c2ixys``.
"""

from __future__ import annotations

from typing import Protocol

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from astroframes._types import Accuracy, CioLocation, CioSystem, EquinoxType, PoleOffsets, coerce_enum
from astroframes.config import get_dtype
from astroframes.constants import DAY_HOURS, HOUR2RAD
from astroframes.earth_orientation import ira_equinox
from astroframes.errors import stage
from astroframes.frames.equinox import tod_to_gcrs
from astroframes.rotations import vdot
from astroframes.sofa import c2ixys, xys06a
from astroframes.utils import wrap_positive
from astroframes.utils.caching import TransformCache

Basis = tuple[Array, Array, Array]


class CioProvider(Protocol):
    """Source of the CIO location and the CIRS basis vectors."""

    def locate(
        self,
        jd_tdb: ArrayLike,
        accuracy: Accuracy | int,
        pole: PoleOffsets | None = None,
        cache: TransformCache | None = None,
    ) -> CioLocation:
        """Return the right ascension of the CIO at *jd_tdb*."""
        ...

    def basis(
        self,
        jd_tdb: ArrayLike,
        location: CioLocation,
        accuracy: Accuracy | int,
        pole: PoleOffsets | None = None,
        cache: TransformCache | None = None,
    ) -> Basis:
        """Return the CIRS x, y and z axes expressed in the GCRS."""
        ...


def _unit_z(dtype) -> Array:
    return jnp.array([0.0, 0.0, 1.0], dtype=dtype)


def _gcrs_basis(z: Array, ra_cio: ArrayLike) -> Basis:
    """Basis from the CIP *z* and the GCRS right ascension of the CIO [h]."""
    ra = jnp.asarray(ra_cio) * HOUR2RAD
    c = jnp.cos(ra)
    s = jnp.sin(ra)

    # Vector on the CIP equator at GCRS right ascension ra
    x = jnp.stack([z[2] * c, z[2] * s, -z[0] * c - z[1] * s])
    x = x / jnp.linalg.norm(x)
    return x, jnp.cross(z, x), z


def cio_basis(
    jd_tdb: ArrayLike,
    ra_cio: ArrayLike,
    system: CioSystem | int,
    accuracy: Accuracy | int,
    pole: PoleOffsets | None = None,
    cache: TransformCache | None = None,
) -> Basis:
    """CIRS basis vectors in the GCRS, from a CIO right ascension.

    The z axis is the true celestial pole of date, taken to the GCRS
    through the equinox-based chain.

    Args:
        jd_tdb: Barycentric Dynamical Time Julian date [days].
        ra_cio: Right ascension of the CIO [h].
        system: Reference system of *ra_cio*: ``VS_GCRS`` (1) or
            ``VS_EQUINOX`` (2).
        accuracy: Accuracy tier.
        pole: Pole offsets, ``None`` for the process-wide default.
        cache: Optional cache bundle.

    Returns:
        Tuple of unit vectors (x, y, z) in the GCRS.

    Raises:
        InvalidAccuracyError: If *accuracy* is invalid.
        InvalidSelectorError: If *system* is invalid (code 1).
    """
    accuracy = Accuracy.validate(accuracy, "cio_basis")
    system = coerce_enum(CioSystem, system, "cio_basis", "CIO location system", code=1)

    dtype = get_dtype()
    z = tod_to_gcrs(jd_tdb, accuracy, _unit_z(dtype), pole, cache)

    if system == CioSystem.VS_GCRS:
        return _gcrs_basis(z, ra_cio)

    # CIO as seen from the true equinox, taken to the GCRS
    ra = jnp.asarray(ra_cio, dtype=dtype) * HOUR2RAD
    x = tod_to_gcrs(jd_tdb, accuracy, jnp.stack([jnp.cos(ra), jnp.sin(ra), jnp.zeros_like(ra)]), pole, cache)
    return x, jnp.cross(z, x), z


class EquinoxCioProvider:
    """CIO from the equation of the origins and the equinox-based chain.

    The CIO right ascension is measured from the true equinox of date,
    ``ra_cio = -ira_equinox(TRUE)``.
    """

    def locate(
        self,
        jd_tdb: ArrayLike,
        accuracy: Accuracy | int,
        pole: PoleOffsets | None = None,
        cache: TransformCache | None = None,
    ) -> CioLocation:
        accuracy = Accuracy.validate(accuracy, "cio_location")
        ra_cio = -ira_equinox(jd_tdb, EquinoxType.TRUE, accuracy, pole, cache)
        return CioLocation(ra_cio=ra_cio, system=CioSystem.VS_EQUINOX)

    def basis(
        self,
        jd_tdb: ArrayLike,
        location: CioLocation,
        accuracy: Accuracy | int,
        pole: PoleOffsets | None = None,
        cache: TransformCache | None = None,
    ) -> Basis:
        return cio_basis(jd_tdb, location.ra_cio, location.system, accuracy, pole, cache)


class Iau2006CioProvider:
    """CIO from the IAU 2006/2000A CIP X, Y and CIO locator s.

    Always evaluates the full model; the accuracy tier is validated but
    otherwise unused. Pole offsets are not applied.
    """

    def _matrix(self, jd_tdb: ArrayLike) -> Array:
        x, y, s = xys06a(jnp.asarray(jd_tdb, dtype=get_dtype()), 0.0)
        return c2ixys(x, y, s)

    def locate(
        self,
        jd_tdb: ArrayLike,
        accuracy: Accuracy | int,
        pole: PoleOffsets | None = None,
        cache: TransformCache | None = None,
    ) -> CioLocation:
        Accuracy.validate(accuracy, "cio_location")
        m = self._matrix(jd_tdb)
        ra_cio = wrap_positive(jnp.arctan2(m[0, 1], m[0, 0]) / HOUR2RAD, DAY_HOURS)
        return CioLocation(ra_cio=ra_cio, system=CioSystem.VS_GCRS)

    def basis(
        self,
        jd_tdb: ArrayLike,
        location: CioLocation,
        accuracy: Accuracy | int,
        pole: PoleOffsets | None = None,
        cache: TransformCache | None = None,
    ) -> Basis:
        Accuracy.validate(accuracy, "cio_basis")
        system = coerce_enum(CioSystem, location.system, "cio_basis", "CIO location system", code=1)
        if system == CioSystem.VS_EQUINOX:
            return cio_basis(jd_tdb, location.ra_cio, system, accuracy, pole, cache)
        return _gcrs_basis(self._matrix(jd_tdb)[2], location.ra_cio)


DEFAULT_CIO_PROVIDER = EquinoxCioProvider()


def resolve_provider(cio: CioProvider | None) -> CioProvider:
    """Return *cio*, or the default provider when it is ``None``."""
    return DEFAULT_CIO_PROVIDER if cio is None else cio


def cio_location(
    jd_tdb: ArrayLike,
    accuracy: Accuracy | int,
    pole: PoleOffsets | None = None,
    cache: TransformCache | None = None,
    cio: CioProvider | None = None,
) -> CioLocation:
    """Right ascension of the CIO at an epoch, from a provider.

    Args:
        jd_tdb: Barycentric Dynamical Time Julian date [days].
        accuracy: Accuracy tier.
        pole: Pole offsets, ``None`` for the process-wide default.
        cache: Optional cache bundle.
        cio: CIO provider, ``None`` for :class:`EquinoxCioProvider`.

    Returns:
        The :class:`CioLocation`.
    """
    return resolve_provider(cio).locate(jd_tdb, accuracy, pole, cache)


def cio_ra(
    jd_tt: ArrayLike,
    accuracy: Accuracy | int,
    pole: PoleOffsets | None = None,
    cache: TransformCache | None = None,
    cio: CioProvider | None = None,
) -> Array:
    """Right ascension of the CIO measured from the true equinox of date.

    Locates the true equinox in the CIRS basis, whatever system the
    provider reports its location in.

    Args:
        jd_tt: Terrestrial Time Julian date [days].
        accuracy: Accuracy tier.
        pole: Pole offsets, ``None`` for the process-wide default.
        cache: Optional cache bundle.
        cio: CIO provider, ``None`` for :class:`EquinoxCioProvider`.

    Returns:
        Right ascension of the CIO [h], in (-12, 12].

    Raises:
        InvalidAccuracyError: If *accuracy* is invalid.
        StageError: If the CIO location (offset 0), the CIO basis
            (offset 10) or the equinox direction (offset 20) fails.
    """
    accuracy = Accuracy.validate(accuracy, "cio_ra")
    provider = resolve_provider(cio)

    with stage("cio_ra", 0):
        location = provider.locate(jd_tt, accuracy, pole, cache)
    with stage("cio_ra", 10):
        x, y, _ = provider.basis(jd_tt, location, accuracy, pole, cache)
    with stage("cio_ra", 20):
        eq = tod_to_gcrs(jd_tt, accuracy, jnp.array([1.0, 0.0, 0.0], dtype=get_dtype()), pole, cache)

    return -jnp.arctan2(vdot(eq, y), vdot(eq, x)) / HOUR2RAD
