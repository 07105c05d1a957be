"""Frame-tagged vectors and automatic routing between frames.

A bare ``(3,)`` array says nothing about the frame it is expressed in.
:class:`FrameVector` carries its :class:`Frame` along with the
components, and :func:`convert` moves it to another frame by the
shortest chain of single-step transformations:

```
ICRS - GCRS - J2000 - MOD - TOD - PEF - ITRS
              |              |           |
              +---- CIRS ----+--- TIRS --+
```

(GCRS connects to CIRS, CIRS to TOD and TIRS, TIRS to ITRS.)

Functions that require a given frame call :func:`expect_frame`, which
raises :class:`~astroframes.errors.FrameMismatchError` instead of
silently computing with a vector in the wrong frame.

``FrameVector`` is a JAX pytree.  The components are the only leaf, the
frame is static auxiliary data, so a vector in another frame retraces a
jitted function rather than reusing the wrong compiled program.
"""

from __future__ import annotations

import enum
import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from astroframes._types import Accuracy, EarthRotationMeasure, FrameTieDirection, NutationDirection, PoleOffsets
from astroframes.config import get_dtype
from astroframes.constants import DAY, JD_J2000
from astroframes.errors import FrameError, FrameMismatchError
from astroframes.frame_tie import frame_tie
from astroframes.frames.chain import cirs_to_gcrs, cirs_to_tod, gcrs_to_cirs, tod_to_cirs
from astroframes.frames.cio import CioProvider
from astroframes.frames.terrestrial import earth_rotation_strategy
from astroframes.nutation import nutation
from astroframes.precession import precession
from astroframes.rotations import spin
from astroframes.utils.caching import TransformCache

logger = logging.getLogger(__name__)


class Frame(enum.Enum):
    """Reference frames reachable by :func:`convert`."""

    ICRS = "ICRS"
    GCRS = "GCRS"
    J2000 = "J2000"
    MOD = "MOD"
    TOD = "TOD"
    CIRS = "CIRS"
    TIRS = "TIRS"
    PEF = "PEF"
    ITRS = "ITRS"


class FrameVector:
    """Position or velocity vector(s) tagged with their reference frame.

    This class is registered as a JAX pytree with ``xyz`` as the only
    leaf and the frame as auxiliary data.

    Args:
        xyz (ArrayLike): Components, shape ``(3,)`` or ``(..., 3)``.
        frame (Frame): Frame the components are expressed in.
    """

    __slots__ = ("_xyz", "_frame")

    def __init__(self, xyz: ArrayLike, frame: Frame) -> None:
        self._xyz = jnp.asarray(xyz, dtype=get_dtype())
        self._frame = Frame(frame)

    @classmethod
    def _from_internal(cls, xyz: Array, frame: Frame) -> FrameVector:
        """Create from a raw array without conversion.

        Used by pytree unflatten and conversion outputs.
        """
        obj = object.__new__(cls)
        obj._xyz = xyz
        obj._frame = frame
        return obj

    @property
    def xyz(self) -> Array:
        """Components of shape ``(..., 3)``."""
        return self._xyz

    @property
    def frame(self) -> Frame:
        """Reference frame of the components."""
        return self._frame

    def __repr__(self) -> str:
        return f"FrameVector({self._frame.value}, xyz={self._xyz})"


jax.tree_util.register_pytree_node(
    FrameVector,
    lambda v: ((v._xyz,), v._frame),
    lambda frame, children: FrameVector._from_internal(children[0], frame),
)


@dataclass(frozen=True)
class TransformContext:
    """Everything a conversion between frames needs besides the vector.

    Args:
        jd_tt_high: High-order part of the TT Julian date [days].
        jd_tt_low: Low-order part of the TT Julian date [days].
        ut1_to_tt: TT - UT1 [s].
        accuracy: Accuracy tier.
        xp: x coordinate of the CIP with respect to the ITRS pole [arcsec].
        yp: y coordinate of the CIP with respect to the ITRS pole [arcsec].
        pole: Pole offsets, ``None`` for the process-wide default.
        cache: Optional cache bundle.
        cio: CIO provider, ``None`` for the equinox-based default.
    """

    jd_tt_high: float = JD_J2000
    jd_tt_low: float = 0.0
    ut1_to_tt: float = 0.0
    accuracy: Accuracy = Accuracy.FULL
    xp: float = 0.0
    yp: float = 0.0
    pole: PoleOffsets | None = None
    cache: TransformCache | None = None
    cio: CioProvider | None = None

    @property
    def jd_tt(self):
        """TT Julian date, also used as TDB [days]."""
        return self.jd_tt_high + self.jd_tt_low

    @property
    def jd_ut1_low(self):
        """Low-order part of the UT1 Julian date [days]."""
        return self.jd_tt_low - self.ut1_to_tt / DAY


Step = Callable[[Array, TransformContext], Array]


def _earth_angle(measure: EarthRotationMeasure, ctx: TransformContext) -> Array:
    rotation = earth_rotation_strategy(measure, "convert")
    return rotation.angle(ctx.jd_tt_high, ctx.jd_ut1_low, ctx.ut1_to_tt, ctx.accuracy, ctx.pole, ctx.cache, ctx.cio)


def _wobble_in(measure: EarthRotationMeasure) -> Step:
    def step(v, ctx):
        return earth_rotation_strategy(measure, "convert").wobble_in(ctx.jd_tt, ctx.xp, ctx.yp, v)

    return step


def _wobble_out(measure: EarthRotationMeasure) -> Step:
    def step(v, ctx):
        return earth_rotation_strategy(measure, "convert").wobble_out(ctx.jd_tt, ctx.xp, ctx.yp, v)

    return step


# Single-step transformations, in the order BFS explores them.
_EDGES: dict[tuple[Frame, Frame], Step] = {
    (Frame.ICRS, Frame.GCRS): lambda v, ctx: v,
    (Frame.GCRS, Frame.ICRS): lambda v, ctx: v,
    (Frame.GCRS, Frame.J2000): lambda v, ctx: frame_tie(v, FrameTieDirection.ICRS_TO_J2000),
    (Frame.J2000, Frame.GCRS): lambda v, ctx: frame_tie(v, FrameTieDirection.J2000_TO_ICRS),
    (Frame.GCRS, Frame.CIRS): lambda v, ctx: gcrs_to_cirs(ctx.jd_tt, ctx.accuracy, v, ctx.pole, ctx.cache, ctx.cio),
    (Frame.CIRS, Frame.GCRS): lambda v, ctx: cirs_to_gcrs(ctx.jd_tt, ctx.accuracy, v, ctx.pole, ctx.cache, ctx.cio),
    (Frame.J2000, Frame.MOD): lambda v, ctx: precession(JD_J2000, v, ctx.jd_tt, ctx.cache),
    (Frame.MOD, Frame.J2000): lambda v, ctx: precession(ctx.jd_tt, v, JD_J2000, ctx.cache),
    (Frame.MOD, Frame.TOD): lambda v, ctx: nutation(
        ctx.jd_tt, NutationDirection.MEAN_TO_TRUE, ctx.accuracy, v, ctx.pole, ctx.cache
    ),
    (Frame.TOD, Frame.MOD): lambda v, ctx: nutation(
        ctx.jd_tt, NutationDirection.TRUE_TO_MEAN, ctx.accuracy, v, ctx.pole, ctx.cache
    ),
    (Frame.CIRS, Frame.TOD): lambda v, ctx: cirs_to_tod(ctx.jd_tt, ctx.accuracy, v, ctx.pole, ctx.cache, ctx.cio),
    (Frame.TOD, Frame.CIRS): lambda v, ctx: tod_to_cirs(ctx.jd_tt, ctx.accuracy, v, ctx.pole, ctx.cache, ctx.cio),
    (Frame.CIRS, Frame.TIRS): lambda v, ctx: spin(_earth_angle(EarthRotationMeasure.ERA, ctx), v),
    (Frame.TIRS, Frame.CIRS): lambda v, ctx: spin(-_earth_angle(EarthRotationMeasure.ERA, ctx), v),
    (Frame.TOD, Frame.PEF): lambda v, ctx: spin(_earth_angle(EarthRotationMeasure.GST, ctx), v),
    (Frame.PEF, Frame.TOD): lambda v, ctx: spin(-_earth_angle(EarthRotationMeasure.GST, ctx), v),
    (Frame.TIRS, Frame.ITRS): _wobble_out(EarthRotationMeasure.ERA),
    (Frame.ITRS, Frame.TIRS): _wobble_in(EarthRotationMeasure.ERA),
    (Frame.PEF, Frame.ITRS): _wobble_out(EarthRotationMeasure.GST),
    (Frame.ITRS, Frame.PEF): _wobble_in(EarthRotationMeasure.GST),
}


def route(source: Frame, target: Frame) -> list[Frame]:
    """Shortest sequence of frames from *source* to *target*, both included.

    Args:
        source: Starting frame.
        target: Destination frame.

    Returns:
        List of frames, ``[source]`` when both are the same.
    """
    source = Frame(source)
    target = Frame(target)

    previous: dict[Frame, Frame | None] = {source: None}
    queue = deque([source])
    while queue:
        frame = queue.popleft()
        if frame == target:
            break
        for a, b in _EDGES:
            if a == frame and b not in previous:
                previous[b] = frame
                queue.append(b)

    if target not in previous:
        raise FrameError("route", f"no route from {source.value} to {target.value}")

    path = [target]
    while previous[path[-1]] is not None:
        path.append(previous[path[-1]])
    return path[::-1]


def convert(vec: FrameVector, target: Frame, ctx: TransformContext | None = None) -> FrameVector:
    """Convert a frame-tagged vector to another frame.

    Args:
        vec: Vector(s) to convert.
        target: Destination frame.
        ctx: Epoch, Earth orientation and model settings. ``None`` uses a
            default :class:`TransformContext` (J2000.0, full accuracy, no
            polar motion).

    Returns:
        The vector(s) expressed in *target*.
    """
    ctx = TransformContext() if ctx is None else ctx
    path = route(vec.frame, target)
    logger.debug("Converting %s via %s", vec.frame.value, " -> ".join(f.value for f in path))

    xyz = vec.xyz
    for a, b in zip(path[:-1], path[1:]):
        xyz = _EDGES[(a, b)](xyz, ctx)
    return FrameVector._from_internal(xyz, path[-1])


def expect_frame(vec: FrameVector, frame: Frame, function: str = "expect_frame") -> Array:
    """Return the components of *vec* after checking its frame.

    Args:
        vec: Frame-tagged vector.
        frame: Required frame.
        function: Name of the calling operation, used in the error.

    Returns:
        The components of *vec*.

    Raises:
        FrameMismatchError: If *vec* is not expressed in *frame*.
    """
    frame = Frame(frame)
    if vec.frame != frame:
        raise FrameMismatchError(function, frame.value, vec.frame.value)
    return vec.xyz
