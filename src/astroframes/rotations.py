"""Elementary rotations and vector helpers.

The rotation matrices follow the SOFA/ERFA convention: ``Rz(a) @ v``
expresses *v* in axes rotated counter-clockwise by *a* about z, so the
longitude of *v* decreases by *a*.

Every vector helper accepts a single ``(3,)`` vector or a batch of shape
``(..., 3)`` and returns an array of the same shape.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from astroframes.config import get_dtype
from astroframes.errors import MissingVectorError
from astroframes.utils import to_radians


def Rx(angle: float, use_degrees: bool = False) -> Array:
    """Rotation matrix, for a rotation about the x-axis.

    Args:
        angle (float): Counter-clockwise angle of rotation as viewed
            looking back along the postive direction of the rotation axis.
        use_degrees (bool): Handle input and output in degrees. Default: ``False``

    Returns:
        jnp.ndarray: Rotation matrix.

    References:

        1. O. Montenbruck, and E. Gill, *Satellite Orbits: Models, Methods and Applications*, 2012, p.27.
    """
    angle = to_radians(angle, use_degrees)

    c = jnp.cos(angle)
    s = jnp.sin(angle)

    return jnp.array([[1.0,  0.0,  0.0],
                      [0.0,   +c,   +s],
                      [0.0,   -s,   +c]])


def Ry(angle: float, use_degrees: bool = False) -> Array:
    """Rotation matrix, for a rotation about the y-axis.

    Args:
        angle (float): Counter-clockwise angle of rotation as viewed
            looking back along the postive direction of the rotation axis.
        use_degrees (bool): Handle input and output in degrees. Default: ``False``

    Returns:
        jnp.ndarray: Rotation matrix.
    """
    angle = to_radians(angle, use_degrees)

    c = jnp.cos(angle)
    s = jnp.sin(angle)

    return jnp.array([[ +c,  0.0,   -s],
                      [0.0, +1.0,  0.0],
                      [ +s,  0.0,   +c]])


def Rz(angle: float, use_degrees: bool = False) -> Array:
    """Rotation matrix, for a rotation about the z-axis.

    Args:
        angle (float): Counter-clockwise angle of rotation as viewed
            looking back along the postive direction of the rotation axis.
        use_degrees (bool): Handle input and output in degrees. Default: ``False``

    Returns:
        jnp.ndarray: Rotation matrix.
    """
    angle = to_radians(angle, use_degrees)

    c = jnp.cos(angle)
    s = jnp.sin(angle)

    return jnp.array([[ +c,   +s,  0.0],
                      [ -s,   +c,  0.0],
                      [0.0,  0.0,  1.0]])


def as_vector(vec: ArrayLike | None, function: str) -> Array:
    """Validate and convert a position or velocity argument.

    Args:
        vec: Vector of shape ``(3,)`` or ``(..., 3)``, or ``None``.
        function: Name of the calling operation, used in the error.

    Returns:
        The vector as an array of the configured dtype.

    Raises:
        MissingVectorError: If *vec* is ``None`` or its last axis is not 3.
    """
    if vec is None:
        raise MissingVectorError(function)
    v = jnp.asarray(vec, dtype=get_dtype())
    if v.ndim == 0 or v.shape[-1] != 3:
        raise MissingVectorError(function, f"expected a vector of shape (..., 3), got {v.shape}")
    return v


def rotate(matrix: ArrayLike, vec: ArrayLike) -> Array:
    """Apply a 3x3 matrix to a vector or a batch of vectors."""
    return jnp.einsum("ij,...j->...i", matrix, vec)


def rotate_transpose(matrix: ArrayLike, vec: ArrayLike) -> Array:
    """Apply the transpose of a 3x3 matrix to a vector or a batch of vectors."""
    return jnp.einsum("ji,...j->...i", matrix, vec)


def spin(angle: ArrayLike, vec: ArrayLike) -> Array:
    """Rotate the axes about z by *angle* degrees.

    Args:
        angle: Rotation angle [deg].
        vec: Input vector(s).

    Returns:
        Vector(s) expressed in the rotated axes.
    """
    return rotate(Rz(angle, use_degrees=True), vec)


def tiny_rotate(vec: ArrayLike, ax: ArrayLike, ay: ArrayLike, az: ArrayLike) -> Array:
    """Rotate by small angles about the three axes.

    Second-order expansion of the rotation ``Rz(az) Ry(ay) Rx(ax)`` for
    angles small enough that their products can be neglected. Applying
    the negated angles undoes the rotation to second order.

    Args:
        vec: Input vector(s).
        ax: Rotation about x [rad].
        ay: Rotation about y [rad].
        az: Rotation about z [rad].

    Returns:
        Rotated vector(s).
    """
    vec = jnp.asarray(vec)
    x = vec[..., 0]
    y = vec[..., 1]
    z = vec[..., 2]

    a2x = ax * ax
    a2y = ay * ay
    a2z = az * az

    return jnp.stack(
        [
            x - 0.5 * (a2y + a2z) * x - az * y + ay * z,
            y - 0.5 * (a2x + a2z) * y + az * x - ax * z,
            z - 0.5 * (a2x + a2y) * z - ay * x + ax * y,
        ],
        axis=-1,
    )


def vdot(a: ArrayLike, b: ArrayLike) -> Array:
    """Dot product over the last axis."""
    return jnp.sum(jnp.asarray(a) * jnp.asarray(b), axis=-1)
