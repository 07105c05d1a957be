"""Exception hierarchy for reference-frame transformations.

Every failure raised by astroframes is a :class:`FrameError`, which is a
:class:`ValueError` subclass so callers that already guard against bad
arguments with ``except ValueError`` keep working.  Each error carries:

- ``function``: name of the operation that rejected the call.
- ``code``: integer status, stable across releases.  Codes are local to
  the operation (the same condition can have a different code in two
  operations), and composite operations add a stage offset to the code of
  the collaborator that failed, see :class:`StageError`.

Errors are raised before any computation takes place, so no partially
transformed output is ever returned.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator


class FrameError(ValueError):
    """Base class for reference-frame transformation errors.

    Args:
        function: Name of the operation that raised the error.
        message: Human-readable description.
        code: Integer status code for the failing condition.
    """

    def __init__(self, function: str, message: str, code: int = -1):
        super().__init__(f"{function}: {message}")
        self.function = function
        self.code = code


class MissingVectorError(FrameError):
    """A required input vector is ``None`` or has the wrong shape."""

    def __init__(self, function: str, message: str = "input 3-vector is missing", code: int = -1):
        super().__init__(function, message, code)


class InvalidAccuracyError(FrameError):
    """The accuracy tier is neither FULL (0) nor REDUCED (1)."""

    def __init__(self, function: str, accuracy, code: int = -1):
        super().__init__(function, f"invalid accuracy: {accuracy!r}", code)
        self.accuracy = accuracy


class InvalidSelectorError(FrameError):
    """An enumerated selector argument has an unsupported value.

    Covers transformation directions, Earth rotation measures, coordinate
    classes, pole-offset types, equinox types and dynamical systems.
    """

    def __init__(self, function: str, name: str, value, code: int = -1):
        super().__init__(function, f"invalid {name}: {value!r}", code)
        self.name = name
        self.value = value


class FrameMismatchError(FrameError):
    """A frame-tagged vector was supplied where a different frame is required."""

    def __init__(self, function: str, expected, actual):
        super().__init__(function, f"expected a {expected} vector, got {actual}", -1)
        self.expected = expected
        self.actual = actual


class StageError(FrameError):
    """A collaborator of a composite operation failed.

    The status code is ``offset + cause.code`` so the caller can tell which
    stage of the composite failed.  The original error is chained as
    ``__cause__`` and also available as :attr:`cause`.

    Args:
        function: Name of the composite operation.
        offset: Stage offset added to the collaborator's code.
        cause: The collaborator's error.
    """

    def __init__(self, function: str, offset: int, cause: FrameError):
        super().__init__(function, f"stage failed ({cause})", offset + cause.code)
        self.offset = offset
        self.cause = cause
        self.stage = cause.function


@contextmanager
def stage(function: str, offset: int) -> Iterator[None]:
    """Re-raise collaborator failures as :class:`StageError` with *offset*.

    Args:
        function: Name of the composite operation.
        offset: Stage offset added to the collaborator's error code.

    Raises:
        StageError: If the wrapped block raises a :class:`FrameError`.
    """
    try:
        yield
    except FrameError as err:
        raise StageError(function, offset, err) from err
