"""Caller-owned memoization for repeated-epoch computations.

Building a precession matrix or summing the complementary terms of the
equation of the equinoxes dominates the cost of a transformation, and
batch workloads often transform many vectors at the same epoch.  The
engines therefore accept an optional cache object that remembers the last
value computed for a given key.

There is no module-level cache.  A cache belongs to whoever creates it:

- pass ``cache=None`` (the default everywhere) for no memoization;
- create a :class:`TransformCache` and pass it to every call of a batch;
- or call :func:`thread_local_cache` to get one instance per thread.

Keys are built from concrete Python floats.  The engines add the name of
the active dtype to their keys, so a value computed before
:func:`~astroframes.config.set_dtype` is never returned after it.  When
an argument is a JAX tracer (inside ``jax.jit``) or a non-scalar array,
:func:`cache_key` returns ``None`` and the cache is bypassed, so cached
engines remain safe to trace.
"""

from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Hashable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_thread_state = threading.local()


def cache_key(*values) -> tuple | None:
    """Build a hashable cache key from scalar arguments.

    Enumeration members contribute their integer value, strings (such as
    a dtype name) are kept as they are, everything else is converted with
    ``float()``.

    Args:
        *values: Scalars making up the key.

    Returns:
        Tuple of Python numbers, or ``None`` if any value is not a
        concrete scalar (for example a tracer under ``jax.jit``).
    """
    key = []
    for value in values:
        if isinstance(value, enum.Enum):
            key.append(int(value.value))
            continue
        if isinstance(value, str):
            key.append(value)
            continue
        try:
            key.append(float(value))
        except (TypeError, ValueError):
            return None
    return tuple(key)


class LastValueCache:
    """Single-slot memo holding the most recently computed value.

    Args:
        name: Label used in log messages.
    """

    def __init__(self, name: str = "cache"):
        self.name = name
        self._key: Hashable | None = None
        self._value = None
        self.hits = 0
        self.misses = 0

    def lookup(self, key: Hashable | None):
        """Return the stored value if *key* matches the stored key, else ``None``."""
        if key is not None and key == self._key:
            self.hits += 1
            logger.debug("%s hit for key %s", self.name, key)
            return self._value
        self.misses += 1
        return None

    def store(self, key: Hashable | None, value: T) -> T:
        """Remember *value* under *key* and return it. ``None`` keys are not stored."""
        if key is not None:
            self._key = key
            self._value = value
        return value

    def get_or_compute(self, key: Hashable | None, compute: Callable[[], T]) -> T:
        """Return the cached value for *key*, calling *compute* on a miss.

        Args:
            key: Cache key from :func:`cache_key`, or ``None`` to bypass.
            compute: Zero-argument function producing the value.

        Returns:
            The cached or freshly computed value.
        """
        value = self.lookup(key)
        if value is not None:
            return value
        logger.debug("%s miss for key %s", self.name, key)
        return self.store(key, compute())

    def clear(self) -> None:
        """Forget the stored value and reset the counters."""
        self._key = None
        self._value = None
        self.hits = 0
        self.misses = 0


class PrecessionCache:
    """Two-slot memo for precession matrices, one slot per direction.

    The matrix for epoch -> J2000 is the transpose of J2000 -> epoch at the
    same interval, but each direction keeps its own slot so that
    alternating requests do not evict each other.

    Attributes:
        to_j2000: Slot for rotations from an epoch to J2000.
        from_j2000: Slot for rotations from J2000 to an epoch.
    """

    def __init__(self):
        self.to_j2000 = LastValueCache("precession[to_j2000]")
        self.from_j2000 = LastValueCache("precession[from_j2000]")

    def slot(self, toward_j2000: bool) -> LastValueCache:
        """Return the slot for the requested direction."""
        return self.to_j2000 if toward_j2000 else self.from_j2000

    def clear(self) -> None:
        """Clear both slots."""
        self.to_j2000.clear()
        self.from_j2000.clear()


@dataclass
class TransformCache:
    """Bundle of all caches consumed by the transformation engines.

    Attributes:
        precession: Precession matrices, keyed by elapsed interval.
        ee_ct: Complementary terms of the equation of the equinoxes,
            keyed by epoch and accuracy tier.
    """

    precession: PrecessionCache = field(default_factory=PrecessionCache)
    ee_ct: LastValueCache = field(default_factory=lambda: LastValueCache("ee_ct"))

    def clear(self) -> None:
        """Clear every cache in the bundle."""
        self.precession.clear()
        self.ee_ct.clear()


def cached(cache: LastValueCache | None, key: Hashable | None, compute: Callable[[], T]) -> T:
    """Evaluate *compute* through *cache* when one is supplied.

    Args:
        cache: Cache slot, or ``None`` for no memoization.
        key: Cache key, or ``None`` to bypass the cache.
        compute: Zero-argument function producing the value.

    Returns:
        The cached or freshly computed value.
    """
    if cache is None:
        return compute()
    return cache.get_or_compute(key, compute)


def thread_local_cache() -> TransformCache:
    """Return the calling thread's own :class:`TransformCache`.

    The instance is created on first use and reused by later calls from
    the same thread. Other threads never see it.

    Returns:
        The per-thread cache bundle.
    """
    cache = getattr(_thread_state, "cache", None)
    if cache is None:
        cache = TransformCache()
        _thread_state.cache = cache
        logger.debug("Created thread-local transform cache for %s", threading.current_thread().name)
    return cache
