"""Module-wide floating-point precision configuration.

Provides ``set_dtype`` and ``get_dtype`` to control the float dtype used
throughout astroframes.  The default is ``jnp.float64``: rotations between
celestial frames are built from angles of a few milliarcseconds, which
single precision cannot resolve.  JAX's 64-bit mode (``jax_enable_x64``)
is enabled when this module is imported.

Call ``set_dtype`` **before** any JIT compilation, just like JAX's own
``jax.config.update("jax_enable_x64", True)``.  Under JIT, ``get_dtype()``
runs during tracing and its result is baked into the compiled program.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp

_VALID_DTYPES = (jnp.float16, jnp.bfloat16, jnp.float32, jnp.float64)

jax.config.update("jax_enable_x64", True)
_dtype = jnp.float64


def set_dtype(dtype) -> None:
    """Set the module-wide float dtype for astroframes.

    Must be called **before** any ``jax.jit`` compilation.  In eager mode
    the change takes effect immediately.

    If *dtype* is ``jnp.float64``, JAX's 64-bit mode is (re-)enabled via
    ``jax.config.update("jax_enable_x64", True)``.

    Args:
        dtype: One of ``jnp.float16``, ``jnp.bfloat16``, ``jnp.float32``,
            or ``jnp.float64``.

    Raises:
        ValueError: If *dtype* is not a supported float type.
    """
    global _dtype
    if dtype not in _VALID_DTYPES:
        raise ValueError(
            f"Unsupported dtype {dtype}. Must be one of: "
            f"jnp.float16, jnp.bfloat16, jnp.float32, jnp.float64"
        )
    if dtype == jnp.float64:
        jax.config.update("jax_enable_x64", True)
    _dtype = dtype


def get_dtype():
    """Return the current module-wide float dtype.

    Returns:
        The active float dtype (default ``jnp.float64``).
    """
    return _dtype


def get_time_eq_tolerance() -> float:
    """Return the dtype-adaptive tolerance for Julian date equality tests.

    Used wherever an epoch is compared against a reference epoch, e.g.
    when deciding whether a precession request starts or ends at J2000.

    - ``float16``:  1 day
    - ``bfloat16``: 1 day
    - ``float32``:  0.5 day
    - ``float64``:  1e-8 day (about 1 ms)

    Returns:
        float: Tolerance in days.
    """
    if _dtype == jnp.float64:
        return 1e-8
    if _dtype == jnp.float32:
        return 0.5
    # float16 and bfloat16
    return 1.0
