"""Frame tie between the ICRS/GCRS axes and the dynamical J2000 mean frame.

The ICRS axes are offset from the mean equator and equinox of J2000.0 by
three constant bias angles of a few milliarcseconds (IERS Conventions
2003, Chapter 5).  At that size a second-order small-angle rotation is
exact to better than 1e-14, and it is its own inverse under a sign flip
of the angles, so no matrix is ever built.
"""

from __future__ import annotations

from jax import Array
from jax.typing import ArrayLike

from astroframes._types import FrameTieDirection, coerce_enum
from astroframes.constants import AS2RAD, FRAME_BIAS_DA0, FRAME_BIAS_ETA0, FRAME_BIAS_XI0
from astroframes.rotations import as_vector, tiny_rotate

_XI0 = FRAME_BIAS_XI0 * AS2RAD
_ETA0 = FRAME_BIAS_ETA0 * AS2RAD
_DA0 = FRAME_BIAS_DA0 * AS2RAD


def frame_tie(vec: ArrayLike, direction: FrameTieDirection | int) -> Array:
    """Rotate between the ICRS/GCRS and the dynamical J2000 frame.

    Args:
        vec: Position or velocity vector(s), shape ``(..., 3)``.
        direction: ``ICRS_TO_J2000`` (0) or ``J2000_TO_ICRS`` (-1).

    Returns:
        The vector(s) in the target frame.

    Raises:
        MissingVectorError: If *vec* is ``None``.
        InvalidSelectorError: If *direction* is not a valid direction.
    """
    vec = as_vector(vec, "frame_tie")
    direction = coerce_enum(FrameTieDirection, direction, "frame_tie", "frame tie direction")

    if direction == FrameTieDirection.J2000_TO_ICRS:
        return tiny_rotate(vec, -_ETA0, _XI0, _DA0)
    return tiny_rotate(vec, _ETA0, -_XI0, -_DA0)


def gcrs_to_j2000(vec: ArrayLike) -> Array:
    """Rotate a GCRS vector to the dynamical J2000 frame."""
    return frame_tie(vec, FrameTieDirection.ICRS_TO_J2000)


def j2000_to_gcrs(vec: ArrayLike) -> Array:
    """Rotate a dynamical J2000 vector to the GCRS."""
    return frame_tie(vec, FrameTieDirection.J2000_TO_ICRS)
