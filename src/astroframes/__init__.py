"""
astroframes computes transformations of position and velocity vectors between
celestial and terrestrial reference frames, implemented in JAX.
"""

from .config import set_dtype, get_dtype

from .constants import (
    DEG2RAD,
    RAD2DEG,
    AS2RAD,
    RAD2AS,
    MAS2RAD,
    HOUR2RAD,
    JD_J2000,
    JD_MJD_OFFSET,
    JULIAN_CENTURY_DAYS,
)

from ._types import (
    Accuracy,
    CioLocation,
    CioSystem,
    DynamicalSystem,
    EarthRotationMeasure,
    EarthTilt,
    EquatorialClass,
    EquinoxType,
    FrameTieDirection,
    NutationDirection,
    Planet,
    PoleOffsets,
    PoleOffsetType,
    WobbleDirection,
)

from .errors import (
    FrameError,
    FrameMismatchError,
    InvalidAccuracyError,
    InvalidSelectorError,
    MissingVectorError,
    StageError,
)

from .rotations import Rx, Ry, Rz, spin, tiny_rotate

from .timescales import julian_centuries

from .fundamental import accum_prec, fund_args, fundamental_arguments, planet_lon

from .earth_orientation import (
    cel_pole,
    e_tilt,
    ee_ct,
    get_pole_offsets,
    ira_equinox,
    mean_obliq,
    nutation_angles,
    polar_dxdy_to_dpsideps,
    reset_pole_offsets,
    set_pole_offsets,
)

from .precession import precession, precession_matrix
from .nutation import nutation, nutation_matrix
from .frame_tie import frame_tie, gcrs_to_j2000, j2000_to_gcrs

from .frames import (
    cel2ter,
    cirs_to_gcrs,
    cirs_to_itrs,
    cirs_to_tod,
    gcrs_to_cirs,
    gcrs_to_mod,
    gcrs_to_tod,
    itrs_to_cirs,
    itrs_to_tod,
    itrs_to_gcrs,
    gcrs_to_itrs,
    era,
    sidereal_time,
    wobble,
    j2000_to_tod,
    mod_to_gcrs,
    ter2cel,
    tod_to_cirs,
    tod_to_gcrs,
    tod_to_itrs,
    tod_to_j2000,
    Frame,
    FrameVector,
    TransformContext,
    convert,
)

from .utils import TransformCache, thread_local_cache

__all__ = [
    # Config
    "set_dtype",
    "get_dtype",
    # Constants
    "DEG2RAD",
    "RAD2DEG",
    "AS2RAD",
    "RAD2AS",
    "MAS2RAD",
    "HOUR2RAD",
    "JD_J2000",
    "JD_MJD_OFFSET",
    "JULIAN_CENTURY_DAYS",
    # Types
    "Accuracy",
    "CioLocation",
    "CioSystem",
    "DynamicalSystem",
    "EarthRotationMeasure",
    "EarthTilt",
    "EquatorialClass",
    "EquinoxType",
    "FrameTieDirection",
    "NutationDirection",
    "Planet",
    "PoleOffsets",
    "PoleOffsetType",
    "WobbleDirection",
    # Errors
    "FrameError",
    "FrameMismatchError",
    "InvalidAccuracyError",
    "InvalidSelectorError",
    "MissingVectorError",
    "StageError",
    # Rotations
    "Rx",
    "Ry",
    "Rz",
    "spin",
    "tiny_rotate",
    # Time
    "julian_centuries",
    # Fundamental arguments
    "accum_prec",
    "fund_args",
    "fundamental_arguments",
    "planet_lon",
    # Earth orientation
    "cel_pole",
    "e_tilt",
    "ee_ct",
    "get_pole_offsets",
    "ira_equinox",
    "mean_obliq",
    "nutation_angles",
    "polar_dxdy_to_dpsideps",
    "reset_pole_offsets",
    "set_pole_offsets",
    # Engines
    "precession",
    "precession_matrix",
    "nutation",
    "nutation_matrix",
    "frame_tie",
    "gcrs_to_j2000",
    "j2000_to_gcrs",
    # Frames
    "gcrs_to_mod",
    "mod_to_gcrs",
    "j2000_to_tod",
    "tod_to_j2000",
    "gcrs_to_tod",
    "tod_to_gcrs",
    "gcrs_to_cirs",
    "cirs_to_gcrs",
    "cirs_to_tod",
    "tod_to_cirs",
    "ter2cel",
    "cel2ter",
    "itrs_to_cirs",
    "itrs_to_tod",
    "cirs_to_itrs",
    "tod_to_itrs",
    "itrs_to_gcrs",
    "gcrs_to_itrs",
    "era",
    "sidereal_time",
    "wobble",
    "Frame",
    "FrameVector",
    "TransformContext",
    "convert",
    # Caching
    "TransformCache",
    "thread_local_cache",
]
