import jax.numpy as jnp
import pytest

from astroframes.config import set_dtype
from astroframes.earth_orientation import reset_pole_offsets


@pytest.fixture(autouse=True)
def _ensure_float64():
    """Set float64 precision before every test.

    With pytest-xdist, each worker process may have had its dtype changed
    by an earlier test. This fixture ensures all tests get float64 unless
    they explicitly override it (e.g. test_config.py has its own autouse
    fixture that sets float32).
    """
    set_dtype(jnp.float64)


@pytest.fixture(autouse=True)
def _reset_pole_offsets():
    """Restore the process-wide default pole offsets after every test."""
    yield
    reset_pole_offsets()
