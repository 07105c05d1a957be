"""Frame transformations.

This sub-module provides the conversions between the celestial and
terrestrial reference frames:

- **Equinox-based chain**: GCRS, J2000, mean-of-date (MOD) and
  true-of-date (TOD), by frame tie, precession and nutation.
- **CIO-based chain**: GCRS and the Celestial Intermediate Reference
  System (CIRS), through a pluggable CIO provider, and CIRS <-> TOD.
- **Terrestrial <-> celestial**: ITRS to CIRS, TOD or GCRS with either
  the Earth Rotation Angle (IAU 2006) or sidereal time (pre IAU 2006).
- **Typed vectors**: frame-tagged vectors converted by automatic routing.
"""

from .chain import (
    app_to_cirs_ra,
    cirs_to_app_ra,
    cirs_to_gcrs,
    cirs_to_tod,
    gcrs2equ,
    gcrs_to_cirs,
    gcrs_to_mod,
    gcrs_to_tod,
    j2000_to_tod,
    mod_to_gcrs,
    radec2vector,
    tod_to_cirs,
    tod_to_gcrs,
    tod_to_j2000,
    vector2radec,
)
from .cio import (
    CioProvider,
    EquinoxCioProvider,
    Iau2006CioProvider,
    cio_basis,
    cio_location,
    cio_ra,
)
from .terrestrial import (
    EarthRotation,
    EraRotation,
    GstRotation,
    cel2ter,
    cirs_to_itrs,
    earth_rotation_strategy,
    era,
    gcrs_to_itrs,
    itrs_to_cirs,
    itrs_to_gcrs,
    itrs_to_tod,
    sidereal_time,
    ter2cel,
    tod_to_itrs,
    wobble,
)
from .typed import Frame, FrameVector, TransformContext, convert, expect_frame, route

__all__ = [
    # Equinox-based chain
    "gcrs_to_mod",
    "mod_to_gcrs",
    "j2000_to_tod",
    "tod_to_j2000",
    "gcrs_to_tod",
    "tod_to_gcrs",
    # CIO-based chain
    "gcrs_to_cirs",
    "cirs_to_gcrs",
    "cirs_to_tod",
    "tod_to_cirs",
    "cirs_to_app_ra",
    "app_to_cirs_ra",
    "gcrs2equ",
    "radec2vector",
    "vector2radec",
    # CIO providers
    "CioProvider",
    "EquinoxCioProvider",
    "Iau2006CioProvider",
    "cio_basis",
    "cio_location",
    "cio_ra",
    # Terrestrial <-> celestial
    "EarthRotation",
    "EraRotation",
    "GstRotation",
    "earth_rotation_strategy",
    "era",
    "sidereal_time",
    "wobble",
    "ter2cel",
    "cel2ter",
    "itrs_to_cirs",
    "itrs_to_tod",
    "cirs_to_itrs",
    "tod_to_itrs",
    "itrs_to_gcrs",
    "gcrs_to_itrs",
    # Typed vectors
    "Frame",
    "FrameVector",
    "TransformContext",
    "convert",
    "expect_frame",
    "route",
]
