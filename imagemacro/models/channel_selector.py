from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, Dict

import numpy as np

from .errors import ValidationError
from .pixel import Pixel


@dataclass(frozen=True)
class ChannelSelector:
    """
    Picks one scalar out of an RGB sample.

    `reduce` works on any array whose last axis holds (R, G, B) and returns
    the selected value per sample, so the same selector drives both the
    single-pixel call and the whole-grid greyscale/split traversal.
    """
    name: str
    reduce: Callable[[np.ndarray], np.ndarray] = field(repr=False, compare=False)

    def __call__(self, pixel: Pixel) -> int:
        return int(self.reduce(np.asarray(pixel.as_tuple(), dtype=np.int64)))

    def select(self, pixels: np.ndarray) -> np.ndarray:
        """(H, W, 3) int array -> (H, W) int64 array."""
        return np.asarray(self.reduce(pixels), dtype=np.int64)


# Rec. 709 weights
_LUMA_WEIGHTS = (0.2126, 0.7152, 0.0722)


def _luma(px: np.ndarray) -> np.ndarray:
    wr, wg, wb = _LUMA_WEIGHTS
    return np.rint(px[..., 0] * wr + px[..., 1] * wg + px[..., 2] * wb)


RED = ChannelSelector("red", lambda px: px[..., 0])
GREEN = ChannelSelector("green", lambda px: px[..., 1])
BLUE = ChannelSelector("blue", lambda px: px[..., 2])
VALUE = ChannelSelector("value", lambda px: px.max(axis=-1))
INTENSITY = ChannelSelector("intensity", lambda px: np.rint(px.mean(axis=-1)))
LUMA = ChannelSelector("luma", _luma)

SELECTORS: Dict[str, ChannelSelector] = {
    s.name: s for s in (RED, GREEN, BLUE, VALUE, INTENSITY, LUMA)
}


def get_selector(name: str) -> ChannelSelector:
    try:
        return SELECTORS[name.lower()]
    except KeyError:
        raise ValidationError(
            f"unknown channel '{name}', expected one of {sorted(SELECTORS)}"
        ) from None
