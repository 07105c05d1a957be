"""Tests for the names exported at the package root."""

import importlib

import jax.numpy as jnp
import pytest

import astroframes
from astroframes.constants import JD_J2000

_V = jnp.array([0.36, -0.48, 0.8])


class TestRootExports:
    @pytest.mark.parametrize(
        "name, module",
        [
            ("precession", "astroframes.precession"),
            ("nutation", "astroframes.nutation"),
            ("frame_tie", "astroframes.frame_tie"),
            ("itrs_to_gcrs", "astroframes.frames.terrestrial"),
            ("gcrs_to_itrs", "astroframes.frames.terrestrial"),
            ("era", "astroframes.frames.terrestrial"),
            ("sidereal_time", "astroframes.frames.terrestrial"),
            ("wobble", "astroframes.frames.terrestrial"),
        ],
    )
    def test_same_object_as_submodule(self, name, module):
        assert getattr(astroframes, name) is getattr(importlib.import_module(module), name)
        assert name in astroframes.__all__

    def test_all_names_resolve(self):
        for name in astroframes.__all__:
            assert hasattr(astroframes, name), name

    def test_submodule_still_importable(self):
        # The root function shadows the module attribute, not the module
        mod = importlib.import_module("astroframes.precession")
        assert callable(mod.precession_matrix)

    def test_root_precession_identity_at_same_epoch(self):
        out = astroframes.precession(JD_J2000, _V, JD_J2000)
        assert jnp.array_equal(out, _V)

    def test_root_era_at_j2000(self):
        # ERA at J2000.0 UT1 is 0.7790572732640 of a turn
        assert jnp.allclose(astroframes.era(JD_J2000), 0.7790572732640 * 360.0, atol=1e-9)
