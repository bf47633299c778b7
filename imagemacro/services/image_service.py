from pathlib import Path
from typing import Dict, Iterator, List, Union
import logging

from ..models.image import Image
from ..models.errors import UnknownImageError
from ..models.channel_selector import LUMA, get_selector
from ..models.kernel import EdgePolicy
from ..models.macro import (
    Macro,
    BrightnessMacro,
    GreyscaleMacro,
    HorizontalFlipMacro,
    VerticalFlipMacro,
    blur_macro,
    sharpen_macro,
)
from ..repositories.image_repository import ImageRepository

logger = logging.getLogger(__name__)


class ImageService:
    """
    Named-image registry.  Resolves names to Image values, runs a transform
    and stores the result under the destination name.
    No pixel math here; that lives on Image and the macros.
    """
    def __init__(self, image_repository: ImageRepository | None = None):
        self.image_repository = image_repository or ImageRepository()
        self._images: Dict[str, Image] = {}

    # ─── Registry ──────────────────────────────────────────────────
    def get(self, name: str) -> Image:
        try:
            return self._images[name]
        except KeyError:
            raise UnknownImageError(name) from None

    def put(self, name: str, image: Image) -> None:
        self._images[name] = image

    def names(self) -> List[str]:
        return sorted(self._images)

    def __contains__(self, name: str) -> bool:
        return name in self._images

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    # ─── I/O ───────────────────────────────────────────────────────
    def load(self, path: Union[str, Path], name: str) -> Image:
        """Load a single image from disk and register it under *name*."""
        image = self.image_repository.load(path)
        self.put(name, image)
        logger.info(f"Loaded {path} as '{name}' ({image.height}x{image.width})")
        return image

    def save(self, path: Union[str, Path], name: str) -> None:
        self.image_repository.save(path, self.get(name))
        logger.info(f"Saved '{name}' to {path}")

    # ─── Transforms ───────────────────────────────────────────────
    def apply_macro(self, macro: Macro, source: str, destination: str) -> Image:
        result = self.get(source).apply_macro(macro)
        self.put(destination, result)
        logger.info(f"{macro!r}: '{source}' -> '{destination}'")
        return result

    def horizontal_flip(self, source: str, destination: str) -> Image:
        return self.apply_macro(HorizontalFlipMacro(), source, destination)

    def vertical_flip(self, source: str, destination: str) -> Image:
        return self.apply_macro(VerticalFlipMacro(), source, destination)

    def brighten(self, delta: int, source: str, destination: str) -> Image:
        return self.apply_macro(BrightnessMacro(delta), source, destination)

    def greyscale(self, source: str, destination: str, channel: str | None = None) -> Image:
        selector = get_selector(channel) if channel else LUMA
        return self.apply_macro(GreyscaleMacro(selector), source, destination)

    def blur(self, source: str, destination: str,
             edge_policy: EdgePolicy = EdgePolicy.ZERO) -> Image:
        return self.apply_macro(blur_macro(edge_policy), source, destination)

    def sharpen(self, source: str, destination: str,
                edge_policy: EdgePolicy = EdgePolicy.ZERO) -> Image:
        return self.apply_macro(sharpen_macro(edge_policy), source, destination)

    def rgb_split(self, source: str, red: str, green: str, blue: str) -> None:
        red_img, green_img, blue_img = self.get(source).split_channels()
        self.put(red, red_img)
        self.put(green, green_img)
        self.put(blue, blue_img)
        logger.info(f"Split '{source}' into '{red}', '{green}', '{blue}'")

    def rgb_combine(self, destination: str, red: str, green: str, blue: str) -> Image:
        red_img, green_img, blue_img = self.get(red), self.get(green), self.get(blue)
        result = red_img.combine_channels(green_img, blue_img)
        self.put(destination, result)
        logger.info(f"Combined '{red}', '{green}', '{blue}' into '{destination}'")
        return result
