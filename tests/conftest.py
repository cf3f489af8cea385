"""Pytest configuration for raygeom tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls, which would
    destroy fields allocated by modules imported earlier in the session.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_triangle_storage():
    """Clear the kernel-side triangle storage before and after each test."""
    # Import here so the fields are allocated after Taichi is initialized
    from raygeom.scene.intersection import clear_triangles

    clear_triangles()
    yield
    clear_triangles()


@pytest.fixture
def rng():
    """A seeded generator so beam tests are reproducible."""
    from raygeom.core.sampling import make_rng

    return make_rng(seed=1234)


@pytest.fixture(autouse=True)
def reset_beam_generator():
    """Start every test without a cached per-thread beam generator."""
    from raygeom.core.sampling import reset_thread_rng

    reset_thread_rng()
    yield
    reset_thread_rng()
