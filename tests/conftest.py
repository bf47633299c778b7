"""Shared fixtures for the imagemacro test-suite."""

import numpy as np
import pytest

from imagemacro.models.image import Image


@pytest.fixture()
def small_image() -> Image:
    """2x2 image used throughout the docs."""
    return Image.from_grid(
        [[(10, 20, 30), (40, 50, 60)],
         [(70, 80, 90), (100, 110, 120)]],
        height=2, width=2, max_value=255,
    )


@pytest.fixture()
def random_image() -> Image:
    rng = np.random.default_rng(1234)
    return Image(rng.integers(0, 256, size=(7, 5, 3)), max_value=255)


@pytest.fixture()
def uniform_image() -> Image:
    return Image(np.full((6, 6, 3), 100), max_value=255)
