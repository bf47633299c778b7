from __future__ import annotations
from enum import Enum
from typing import Sequence

import numpy as np

from .errors import ValidationError


class EdgePolicy(str, Enum):
    """How neighbours that fall outside the image are sampled during convolution."""
    ZERO = "zero"      # out-of-range samples read as 0
    CLAMP = "clamp"    # nearest in-bounds pixel
    WRAP = "wrap"      # opposite edge

    @property
    def pad_mode(self) -> str:
        return {"zero": "constant", "clamp": "edge", "wrap": "wrap"}[self.value]


class Kernel:
    """
    Odd-sized square weight matrix for the neighbourhood filter.
    Weights are used as given; nothing is normalised.
    """

    def __init__(self, weights: Sequence[Sequence[float]] | np.ndarray, name: str = "custom"):
        arr = np.array(weights, dtype=np.float64)
        if arr.ndim != 2 or arr.size == 0:
            raise ValidationError(f"kernel must be a non-empty 2-D matrix, got shape {arr.shape}")
        rows, cols = arr.shape
        if rows != cols:
            raise ValidationError(f"kernel must be square, got {rows}x{cols}")
        if rows % 2 == 0:
            raise ValidationError(f"kernel size must be odd, got {rows}")
        if not np.isfinite(arr).all():
            raise ValidationError("kernel weights must be finite numbers")
        arr.setflags(write=False)
        self._weights = arr
        self.name = name

    @property
    def weights(self) -> np.ndarray:
        return self._weights

    @property
    def size(self) -> int:
        return self._weights.shape[0]

    @property
    def radius(self) -> int:
        return self.size // 2

    def __eq__(self, other) -> bool:
        if not isinstance(other, Kernel):
            return NotImplemented
        return np.array_equal(self._weights, other._weights)

    def __hash__(self) -> int:
        return hash((self._weights + 0.0).tobytes())  # -0.0 hashes like 0.0

    def __repr__(self) -> str:
        return f"Kernel(name={self.name!r}, size={self.size})"

    # ─── Core math ────────────────────────────────────────────────
    def convolve(
        self,
        pixels: np.ndarray,
        max_value: int,
        edge_policy: EdgePolicy = EdgePolicy.ZERO,
    ) -> np.ndarray:
        """
        Filter an (H, W, 3) grid and return a fresh (H, W, 3) int64 grid.

        out[i, j, c] = clamp(sum K[dy, dx] * in[i+dy-r, j+dx-r, c], 0, max_value)
        Each channel is filtered on its own; the sum is rounded to the nearest
        integer before clamping.
        """
        r = self.radius
        height, width = pixels.shape[:2]
        padded = np.pad(
            pixels.astype(np.float64),
            ((r, r), (r, r), (0, 0)),
            mode=EdgePolicy(edge_policy).pad_mode,
        )
        acc = np.zeros((height, width, pixels.shape[2]), dtype=np.float64)
        for dy in range(self.size):
            for dx in range(self.size):
                weight = self._weights[dy, dx]
                if weight == 0.0:
                    continue
                acc += weight * padded[dy:dy + height, dx:dx + width]
        return np.clip(np.rint(acc), 0, max_value).astype(np.int64)


IDENTITY = Kernel([[0, 0, 0],
                   [0, 1, 0],
                   [0, 0, 0]], name="identity")

BLUR = Kernel([[1 / 16, 1 / 8, 1 / 16],
               [1 / 8,  1 / 4, 1 / 8],
               [1 / 16, 1 / 8, 1 / 16]], name="blur")

SHARPEN = Kernel([[-1 / 8, -1 / 8, -1 / 8, -1 / 8, -1 / 8],
                  [-1 / 8,  1 / 4,  1 / 4,  1 / 4, -1 / 8],
                  [-1 / 8,  1 / 4,  1.0,    1 / 4, -1 / 8],
                  [-1 / 8,  1 / 4,  1 / 4,  1 / 4, -1 / 8],
                  [-1 / 8, -1 / 8, -1 / 8, -1 / 8, -1 / 8]], name="sharpen")
