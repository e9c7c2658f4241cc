"""Unit tests for texture storage and sampling.

Tests cover:
- Coordinate wrapping (negative, periodic, in range)
- Texture upload from uint8, float, grayscale and RGBA arrays
- Texel lookup by texture coordinates
- Registry validation
- Color clamping
"""

import numpy as np
import pytest
import taichi as ti


def _wrap(values, bound):
    from src.whitted.materials.coloration import wrap_coordinate

    n = len(values)
    inputs = ti.field(dtype=ti.f64, shape=n)
    outputs = ti.field(dtype=ti.i32, shape=n)
    for i, v in enumerate(values):
        inputs[i] = v

    @ti.kernel
    def test_kernel():
        for i in range(n):
            outputs[i] = wrap_coordinate(inputs[i], bound)

    test_kernel()
    return [outputs[i] for i in range(n)]


def _sample(texture_id, u, v):
    from src.whitted.core.ray import vec2
    from src.whitted.materials.coloration import sample_texture

    result = ti.Vector.field(3, dtype=ti.f32, shape=())

    @ti.kernel
    def test_kernel(tid: ti.i32, cu: ti.f64, cv: ti.f64):
        result[None] = sample_texture(tid, vec2(cu, cv))

    test_kernel(texture_id, u, v)
    return tuple(result[None])


def _gradient_texture(width=4, height=2):
    """RGB image whose red channel encodes x and green encodes y."""
    image = np.zeros((height, width, 3), dtype=np.uint8)
    for y in range(height):
        for x in range(width):
            image[y, x] = (x * 50, y * 100, 7)
    return image


class TestWrapCoordinate:
    """Tests for texture coordinate wrapping."""

    def test_in_range(self):
        assert _wrap([0.0, 0.26, 0.5, 0.99], 4) == [0, 1, 2, 3]

    def test_negative_wraps_to_end(self):
        # -0.25 * 4 = -1 -> 3
        assert _wrap([-0.25, -0.01, -1.0], 4) == [3, 3, 0]

    def test_periodic(self):
        base = _wrap([0.125, 0.375, 0.875], 4)
        shifted = _wrap([1.125, -2.625, 3.875], 4)
        assert base == shifted == [0, 1, 3]

    def test_large_coordinates_stay_periodic(self):
        # Scaled values far outside the 32-bit integer range
        offset = 3.5 / 256
        values = [offset, 1e7 + offset, -1e7 + offset, 1e12 + offset]
        assert _wrap(values, 256) == [3, 3, 3, 3]

    def test_always_in_bounds(self):
        values = list(np.linspace(-7.3, 9.1, 41))
        for index in _wrap(values, 3):
            assert 0 <= index < 3


class TestTextureRegistry:
    """Tests for texture upload and validation."""

    def test_add_texture_returns_sequential_ids(self):
        from src.whitted.materials.coloration import add_texture, get_texture_count

        assert add_texture(_gradient_texture()) == 0
        assert add_texture(_gradient_texture(2, 2)) == 1
        assert get_texture_count() == 2

    def test_texture_size(self):
        from src.whitted.materials.coloration import add_texture, get_texture_size

        tid = add_texture(_gradient_texture(4, 2))
        assert get_texture_size(tid) == (4, 2)

    def test_invalid_texture_id(self):
        from src.whitted.materials.coloration import get_texture_size

        with pytest.raises(ValueError):
            get_texture_size(0)

    def test_bad_shape_rejected(self):
        from src.whitted.materials.coloration import add_texture

        with pytest.raises(ValueError):
            add_texture(np.zeros((4, 4, 2), dtype=np.uint8))
        with pytest.raises(ValueError):
            add_texture(np.zeros((0, 4, 3), dtype=np.uint8))

    def test_clear_textures(self):
        from src.whitted.materials.coloration import add_texture, clear_textures, get_texture_count

        add_texture(_gradient_texture())
        clear_textures()
        assert get_texture_count() == 0
        assert add_texture(_gradient_texture()) == 0


class TestTextureSampling:
    """Tests for texel lookup."""

    def test_sample_uint8_texture(self):
        from src.whitted.materials.coloration import add_texture

        tid = add_texture(_gradient_texture(4, 2))
        r, g, b = _sample(tid, 0.6, 0.75)  # x = 2, y = 1
        assert r == pytest.approx(100 / 255, abs=1e-6)
        assert g == pytest.approx(100 / 255, abs=1e-6)
        assert b == pytest.approx(7 / 255, abs=1e-6)

    def test_sample_wraps(self):
        from src.whitted.materials.coloration import add_texture

        tid = add_texture(_gradient_texture(4, 2))
        assert _sample(tid, -0.1, -0.1) == pytest.approx(_sample(tid, 0.9, 0.9))
        assert _sample(tid, 5.3, 2.2) == pytest.approx(_sample(tid, 0.3, 0.2))

    def test_second_texture_uses_own_texels(self):
        from src.whitted.materials.coloration import add_texture

        add_texture(_gradient_texture(4, 2))
        tid = add_texture(np.full((3, 3, 3), 255, dtype=np.uint8))
        assert _sample(tid, 0.0, 0.0) == pytest.approx((1.0, 1.0, 1.0))

    def test_float_grayscale_and_rgba(self):
        from src.whitted.materials.coloration import add_texture

        gray = add_texture(np.full((2, 2), 0.25, dtype=np.float32))
        rgba = np.zeros((2, 2, 4), dtype=np.uint8)
        rgba[..., 0] = 255
        rgba[..., 3] = 0
        red = add_texture(rgba)

        assert _sample(gray, 0.5, 0.5) == pytest.approx((0.25, 0.25, 0.25))
        # Alpha is ignored
        assert _sample(red, 0.5, 0.5) == pytest.approx((1.0, 0.0, 0.0))


class TestClampColor:
    """Tests for color clamping."""

    def test_clamp(self):
        from src.whitted.core.ray import color3
        from src.whitted.materials.coloration import clamp_color

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = clamp_color(color3(-0.5, 0.25, 3.0))

        test_kernel()
        assert tuple(result[None]) == pytest.approx((0.0, 0.25, 1.0))
