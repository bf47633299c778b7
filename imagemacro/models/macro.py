from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Tuple, Union

from .channel_selector import ChannelSelector, LUMA
from .image import Image
from .kernel import BLUR, SHARPEN, EdgePolicy, Kernel
from .pixel import Pixel


class Macro(ABC):
    """
    A stored transform: takes an Image, returns a new Image.
    Concrete macros hold only their own parameters, never an Image.
    """

    @abstractmethod
    def apply(self, image: Image) -> Image:
        ...

    def then(self, other: "Macro") -> "SequenceMacro":
        """Compose: run self, then `other` on the result."""
        return SequenceMacro((self, other))

    def __call__(self, image: Image) -> Image:
        return self.apply(image)


@dataclass(frozen=True)
class HorizontalFlipMacro(Macro):
    def apply(self, image: Image) -> Image:
        return image.horizontal_flip()


@dataclass(frozen=True)
class VerticalFlipMacro(Macro):
    def apply(self, image: Image) -> Image:
        return image.vertical_flip()


@dataclass(frozen=True)
class BrightnessMacro(Macro):
    delta: int

    def apply(self, image: Image) -> Image:
        return image.alter_brightness(self.delta)


@dataclass(frozen=True)
class GreyscaleMacro(Macro):
    selector: Union[ChannelSelector, Callable[[Pixel], int]] = LUMA

    def apply(self, image: Image) -> Image:
        return image.convert_to_greyscale(self.selector)


@dataclass(frozen=True)
class KernelMacro(Macro):
    kernel: Kernel
    edge_policy: EdgePolicy = EdgePolicy.ZERO

    def apply(self, image: Image) -> Image:
        return image.apply_kernel(self.kernel, self.edge_policy)


def blur_macro(edge_policy: EdgePolicy = EdgePolicy.ZERO) -> KernelMacro:
    return KernelMacro(BLUR, edge_policy)


def sharpen_macro(edge_policy: EdgePolicy = EdgePolicy.ZERO) -> KernelMacro:
    return KernelMacro(SHARPEN, edge_policy)


@dataclass(frozen=True)
class SequenceMacro(Macro):
    """Runs its steps left to right. No steps means identity."""
    steps: Tuple[Macro, ...] = field(default_factory=tuple)

    def __post_init__(self):
        # accept any iterable but store it immutably
        object.__setattr__(self, "steps", tuple(self.steps))

    def apply(self, image: Image) -> Image:
        if not self.steps:
            return Image(image.pixels, image.max_value)
        for step in self.steps:
            image = step.apply(image)
        return image

    def then(self, other: Macro) -> "SequenceMacro":
        return SequenceMacro(self.steps + (other,))

    def __len__(self) -> int:
        return len(self.steps)
