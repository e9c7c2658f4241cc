"""Shared pytest fixtures for the ray tracer tests.

Taichi is initialized once for the whole session, and every field-backed
registry (elements, lights, materials, textures) is emptied around each test.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once on the CPU backend with f64 as default float.

    Repeated ti.init() calls within one process reset the runtime and can
    crash tests that still hold field references, so there is exactly one.
    """
    ti.init(arch=ti.cpu, default_fp=ti.f64)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Empty every registry before and after each test."""
    # Deferred so field declarations happen after ti.init()
    from src.whitted.lighting.lights import clear_lights
    from src.whitted.materials.coloration import clear_textures
    from src.whitted.materials.material import clear_materials
    from src.whitted.scene.intersection import clear_scene

    def _clear_all():
        clear_scene()
        clear_lights()
        clear_materials()
        clear_textures()

    _clear_all()
    yield
    _clear_all()
