from __future__ import annotations
from typing import TYPE_CHECKING, Callable, Iterable, Sequence, Tuple, Union

import numpy as np

from .channel_selector import BLUE, GREEN, RED, ChannelSelector
from .errors import ConstructionError, ValidationError
from .kernel import EdgePolicy, Kernel
from .pixel import Pixel

if TYPE_CHECKING:
    from .macro import Macro

Selector = Union[ChannelSelector, Callable[[Pixel], int]]


class Image:
    """
    Immutable RGB raster: (height, width, 3) integer samples plus the
    declared ceiling `max_value` shared by every component.

    The grid is copied on the way in and locked read-only, and every
    transform below allocates a new grid, so an Image never changes after
    construction and never shares storage with another Image.
    """

    __slots__ = ("_pixels", "_max_value")

    def __init__(self, pixels: np.ndarray, max_value: int = 255):
        arr = np.array(pixels, copy=True)
        if arr.ndim != 3 or arr.shape[2] != 3:
            raise ConstructionError(f"expected an (H, W, 3) grid, got shape {arr.shape}")
        if arr.shape[0] < 1 or arr.shape[1] < 1:
            raise ConstructionError(f"image must be at least 1x1, got {arr.shape[0]}x{arr.shape[1]}")
        if not np.issubdtype(arr.dtype, np.integer):
            raise ConstructionError(f"pixel components must be integers, got dtype {arr.dtype}")
        if int(max_value) < 1:
            raise ConstructionError(f"max_value must be positive, got {max_value}")
        arr = arr.astype(np.int64)
        lo, hi = int(arr.min()), int(arr.max())
        if lo < 0 or hi > max_value:
            raise ConstructionError(
                f"pixel components must lie in [0, {max_value}], found [{lo}, {hi}]"
            )
        arr.setflags(write=False)
        self._pixels = arr
        self._max_value = int(max_value)

    @classmethod
    def from_grid(
        cls,
        grid: Sequence[Sequence[Union[Pixel, Iterable[int]]]],
        height: int,
        width: int,
        max_value: int = 255,
    ) -> "Image":
        """
        Build an Image from nested rows of Pixels (or RGB triples), checking
        the rows against the declared height and width.
        """
        if len(grid) != height:
            raise ConstructionError(f"declared height {height} but grid has {len(grid)} rows")
        rows = []
        for i, row in enumerate(grid):
            if len(row) != width:
                raise ConstructionError(
                    f"declared width {width} but row {i} has {len(row)} pixels"
                )
            rows.append([tuple(px) for px in row])
        try:
            arr = np.array(rows, dtype=np.int64).reshape(height, width, 3)
        except ValueError as err:
            raise ConstructionError(f"grid is not made of RGB triples: {err}") from err
        return cls(arr, max_value)

    # ─── Accessors ────────────────────────────────────────────────
    @property
    def pixels(self) -> np.ndarray:
        """Read-only (H, W, 3) int64 array."""
        return self._pixels

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def max_value(self) -> int:
        return self._max_value

    @property
    def grid(self) -> Tuple[Tuple[Pixel, ...], ...]:
        return tuple(
            tuple(Pixel(int(r), int(g), int(b)) for r, g, b in row)
            for row in self._pixels.tolist()
        )

    def pixel_at(self, row: int, col: int) -> Pixel:
        r, g, b = self._pixels[row, col].tolist()
        return Pixel(r, g, b)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Image):
            return NotImplemented
        return (self._max_value == other._max_value
                and np.array_equal(self._pixels, other._pixels))

    __hash__ = None

    def __repr__(self) -> str:
        return f"Image(height={self.height}, width={self.width}, max_value={self.max_value})"

    def _derive(self, pixels: np.ndarray) -> "Image":
        return Image(pixels, self._max_value)

    # ─── Geometric transforms ─────────────────────────────────────
    def horizontal_flip(self) -> "Image":
        return self._derive(self._pixels[:, ::-1])

    def vertical_flip(self) -> "Image":
        return self._derive(self._pixels[::-1, :])

    # ─── Tonal transforms ─────────────────────────────────────────
    def alter_brightness(self, delta: int) -> "Image":
        """Add `delta` to every component, saturating at 0 and max_value."""
        # beyond +-max_value every component saturates anyway; keeps the int64 sum in range
        delta = max(-self._max_value, min(self._max_value, int(delta)))
        return self._derive(np.clip(self._pixels + delta, 0, self._max_value))

    def convert_to_greyscale(self, selector: Selector) -> "Image":
        """Every output pixel is (v, v, v) with v = selector(source pixel)."""
        if isinstance(selector, ChannelSelector):
            values = selector.select(self._pixels)
        else:
            values = np.array(
                [[selector(Pixel(*px)) for px in row] for row in self._pixels.tolist()],
                dtype=np.int64,
            )
        return self._derive(np.repeat(values[:, :, np.newaxis], 3, axis=2))

    def split_channels(self) -> Tuple["Image", "Image", "Image"]:
        return (
            self.convert_to_greyscale(RED),
            self.convert_to_greyscale(GREEN),
            self.convert_to_greyscale(BLUE),
        )

    def combine_channels(self, green_source: "Image", blue_source: "Image") -> "Image":
        """
        Red from self, green from `green_source`, blue from `blue_source`.
        All three images must share height and width.
        """
        shapes = {img.pixels.shape[:2] for img in (self, green_source, blue_source)}
        if len(shapes) != 1:
            raise ValidationError(
                "cannot combine images of different sizes: "
                + ", ".join(f"{img.height}x{img.width}" for img in (self, green_source, blue_source))
            )
        combined = np.stack(
            (self._pixels[..., 0], green_source.pixels[..., 1], blue_source.pixels[..., 2]),
            axis=-1,
        )
        return self._derive(combined)

    # ─── Neighbourhood filter ─────────────────────────────────────
    def apply_kernel(self, kernel: Kernel, edge_policy: EdgePolicy = EdgePolicy.ZERO) -> "Image":
        return self._derive(kernel.convolve(self._pixels, self._max_value, edge_policy))

    # ─── Macros ───────────────────────────────────────────────────
    def apply_macro(self, macro: "Macro") -> "Image":
        return macro.apply(self)
