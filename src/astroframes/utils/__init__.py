"""Shared utility functions for astroframes.

Provides angle conversion and range-reduction helpers, and the
caller-owned memoization caches used by the transformation engines.
"""

from astroframes.utils._angle import norm_ang, remainder, to_radians, wrap_positive
from astroframes.utils.caching import (
    LastValueCache,
    PrecessionCache,
    TransformCache,
    cache_key,
    cached,
    thread_local_cache,
)

__all__ = [
    "LastValueCache",
    "PrecessionCache",
    "TransformCache",
    "cache_key",
    "cached",
    "norm_ang",
    "remainder",
    "thread_local_cache",
    "to_radians",
    "wrap_positive",
]
