"""Pytest configuration for tiletrace tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts. All fields are owned
    by Scene, Camera and TiledRenderer instances, so tests are isolated by
    creating their own.
    """
    ti.init(arch=ti.cpu, default_fp=ti.f64, random_seed=42)
    yield
