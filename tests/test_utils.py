"""Tests for the angle helpers and the memoization caches."""

import threading

import jax
import jax.numpy as jnp
import pytest

from astroframes._types import Accuracy
from astroframes.constants import TWOPI
from astroframes.utils import (
    LastValueCache,
    PrecessionCache,
    TransformCache,
    cache_key,
    cached,
    norm_ang,
    remainder,
    thread_local_cache,
    wrap_positive,
)


class TestAngleHelpers:
    def test_remainder_above(self):
        assert jnp.allclose(remainder(25.0, 24.0), 1.0)

    def test_remainder_below(self):
        assert jnp.allclose(remainder(23.0, 24.0), -1.0)

    def test_remainder_keeps_small(self):
        assert jnp.allclose(remainder(-0.25, 24.0), -0.25)

    def test_wrap_positive_negative(self):
        assert jnp.allclose(wrap_positive(-1.0, 24.0), 23.0)

    def test_wrap_positive_large(self):
        assert jnp.allclose(wrap_positive(370.0, 360.0), 10.0)

    def test_wrap_positive_range(self):
        x = jnp.linspace(-1000.0, 1000.0, 101)
        r = wrap_positive(x, 24.0)
        assert jnp.all(r >= 0.0)
        assert jnp.all(r < 24.0)

    def test_norm_ang(self):
        assert jnp.allclose(norm_ang(-0.5), TWOPI - 0.5)
        assert jnp.allclose(norm_ang(TWOPI + 0.5), 0.5)


class TestCacheKey:
    def test_floats(self):
        assert cache_key(2451545.0, 0.5) == (2451545.0, 0.5)

    def test_enum_contributes_value(self):
        assert cache_key(1.0, Accuracy.REDUCED) == (1.0, 1)

    def test_string_kept(self):
        assert cache_key(1.0, "float32") == (1.0, "float32")

    def test_scalar_array(self):
        assert cache_key(jnp.asarray(3.0)) == (3.0,)

    def test_non_scalar_bypasses(self):
        assert cache_key(jnp.ones(3)) is None

    def test_tracer_bypasses(self):
        keys = []

        @jax.jit
        def f(x):
            keys.append(cache_key(x))
            return x

        f(1.0)
        assert keys == [None]


class TestLastValueCache:
    def test_hit_and_miss(self):
        cache = LastValueCache("test")
        calls = []

        def compute():
            calls.append(1)
            return 42

        assert cache.get_or_compute((1.0,), compute) == 42
        assert cache.get_or_compute((1.0,), compute) == 42
        assert len(calls) == 1
        assert cache.hits == 1
        assert cache.misses == 1

    def test_new_key_evicts(self):
        cache = LastValueCache()
        cache.get_or_compute((1.0,), lambda: "a")
        assert cache.get_or_compute((2.0,), lambda: "b") == "b"
        assert cache.get_or_compute((1.0,), lambda: "c") == "c"
        assert cache.misses == 3

    def test_none_key_not_stored(self):
        cache = LastValueCache()
        cache.get_or_compute(None, lambda: 1)
        assert cache.lookup(None) is None
        assert cache.hits == 0

    def test_clear(self):
        cache = LastValueCache()
        cache.get_or_compute((1.0,), lambda: 1)
        cache.clear()
        assert cache.hits == 0
        assert cache.misses == 0
        assert cache.lookup((1.0,)) is None

    def test_cached_without_cache(self):
        assert cached(None, (1.0,), lambda: 7) == 7


class TestTransformCache:
    def test_precession_slots_are_separate(self):
        cache = PrecessionCache()
        assert cache.slot(True) is cache.to_j2000
        assert cache.slot(False) is cache.from_j2000
        assert cache.to_j2000 is not cache.from_j2000

    def test_clear_bundle(self):
        cache = TransformCache()
        cache.ee_ct.get_or_compute((1.0,), lambda: 1)
        cache.precession.to_j2000.get_or_compute((1.0,), lambda: 1)
        cache.clear()
        assert cache.ee_ct.misses == 0
        assert cache.precession.to_j2000.misses == 0

    def test_instances_do_not_share(self):
        a = TransformCache()
        b = TransformCache()
        a.ee_ct.get_or_compute((1.0,), lambda: 1)
        assert b.ee_ct.lookup((1.0,)) is None


class TestThreadLocalCache:
    def test_same_thread_same_instance(self):
        assert thread_local_cache() is thread_local_cache()

    def test_threads_get_distinct_instances(self):
        seen = []

        def worker():
            seen.append(thread_local_cache())

        threads = [threading.Thread(target=worker) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(seen) == 2
        assert seen[0] is not seen[1]
        mine = thread_local_cache()
        assert all(c is not mine for c in seen)

    def test_is_transform_cache(self):
        assert isinstance(thread_local_cache(), TransformCache)


@pytest.mark.parametrize("period", [24.0, 360.0, TWOPI])
def test_wrap_positive_idempotent(period):
    x = jnp.array([-5.5, 0.25, 7.75, 1000.125])
    once = wrap_positive(x, period)
    assert jnp.allclose(wrap_positive(once, period), once, atol=1e-12)
