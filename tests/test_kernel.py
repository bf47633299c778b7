"""
Tests for kernels and the neighbourhood filter.
"""

import numpy as np
import pytest

from imagemacro.models.errors import ValidationError
from imagemacro.models.image import Image
from imagemacro.models.kernel import BLUR, IDENTITY, SHARPEN, EdgePolicy, Kernel
from imagemacro.models.pixel import Pixel


class TestKernelConstruction:
    def test_named_kernels_sum_to_one(self) -> None:
        for kernel in (IDENTITY, BLUR, SHARPEN):
            assert kernel.weights.sum() == pytest.approx(1.0)

    def test_sharpen_is_five_by_five(self) -> None:
        assert SHARPEN.size == 5
        assert SHARPEN.radius == 2

    @pytest.mark.parametrize("weights", [
        [],
        [[1, 0], [0, 1]],
        [[1, 0, 0], [0, 1, 0]],
        [1, 2, 3],
    ])
    def test_invalid_shapes_rejected(self, weights) -> None:
        with pytest.raises(ValidationError):
            Kernel(weights)

    def test_weights_are_read_only(self) -> None:
        with pytest.raises(ValueError):
            BLUR.weights[0, 0] = 5

    def test_equality_by_weights(self) -> None:
        assert Kernel([[0, 0, 0], [0, 1, 0], [0, 0, 0]]) == IDENTITY
        assert BLUR != IDENTITY

    @pytest.mark.parametrize("bad", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_weights_rejected(self, bad) -> None:
        with pytest.raises(ValidationError, match="finite"):
            Kernel([[0, 0, 0], [0, bad, 0], [0, 0, 0]])

    def test_negative_zero_hashes_like_zero(self) -> None:
        kernel = Kernel([[-0.0, 0, 0], [0, 1, 0], [0, 0, -0.0]])

        assert kernel == IDENTITY
        assert hash(kernel) == hash(IDENTITY)
        assert len({kernel, IDENTITY}) == 1


class TestConvolution:
    def test_identity_kernel_returns_input(self, random_image) -> None:
        assert random_image.apply_kernel(IDENTITY) == random_image

    @pytest.mark.parametrize("policy", list(EdgePolicy))
    def test_identity_kernel_any_edge_policy(self, random_image, policy) -> None:
        assert random_image.apply_kernel(IDENTITY, policy) == random_image

    def test_single_weight_kernel_scales(self, small_image) -> None:
        doubled = small_image.apply_kernel(Kernel([[2]]))
        assert doubled.pixel_at(0, 0) == Pixel(20, 40, 60)
        assert doubled.pixel_at(1, 1) == Pixel(200, 220, 240)

    def test_result_is_clamped(self, small_image) -> None:
        out = small_image.apply_kernel(Kernel([[10]]))
        assert out.pixels.max() == 255

        out = small_image.apply_kernel(Kernel([[-1]]))
        assert out.pixels.max() == 0

    def test_blur_keeps_uniform_interior(self, uniform_image) -> None:
        blurred = uniform_image.apply_kernel(BLUR)
        assert (blurred.pixels[1:-1, 1:-1] == 100).all()

    def test_zero_padding_darkens_borders(self, uniform_image) -> None:
        blurred = uniform_image.apply_kernel(BLUR, EdgePolicy.ZERO)

        # corner keeps 9/16 of the weight, edge 12/16
        assert blurred.pixel_at(0, 0) == Pixel(56, 56, 56)
        assert blurred.pixel_at(0, 3) == Pixel(75, 75, 75)

    def test_clamp_padding_keeps_uniform_borders(self, uniform_image) -> None:
        assert uniform_image.apply_kernel(BLUR, EdgePolicy.CLAMP) == uniform_image

    def test_wrap_padding_keeps_uniform_borders(self, uniform_image) -> None:
        assert uniform_image.apply_kernel(SHARPEN, EdgePolicy.WRAP) == uniform_image

    def test_sharpen_interior_of_uniform_image(self, uniform_image) -> None:
        sharpened = uniform_image.apply_kernel(SHARPEN)
        assert (sharpened.pixels[2:-2, 2:-2] == 100).all()

    def test_indexing_is_not_flipped(self) -> None:
        # weight on the right-hand neighbour pulls values leftwards
        img = Image(np.array([[[0, 0, 0], [90, 90, 90], [0, 0, 0]]]))
        shift = Kernel([[0, 0, 0], [0, 0, 1], [0, 0, 0]])

        out = img.apply_kernel(shift)
        assert out.pixel_at(0, 0) == Pixel(90, 90, 90)
        assert out.pixel_at(0, 1) == Pixel(0, 0, 0)

    def test_channels_are_independent(self) -> None:
        img = Image(np.array([[[255, 0, 0]]]))
        assert img.apply_kernel(BLUR).pixel_at(0, 0) == Pixel(64, 0, 0)

    def test_keeps_shape_and_max_value(self, random_image) -> None:
        out = random_image.apply_kernel(SHARPEN)
        assert (out.height, out.width, out.max_value) == (7, 5, 255)

    def test_kernel_larger_than_image(self) -> None:
        img = Image(np.full((1, 1, 3), 40))
        assert img.apply_kernel(SHARPEN).pixel_at(0, 0) == Pixel(40, 40, 40)
