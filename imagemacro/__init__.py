"""Immutable RGB images, pixel/neighbourhood transforms and reusable macros."""

from .models.pixel import Pixel
from .models.image import Image
from .models.channel_selector import ChannelSelector, RED, GREEN, BLUE, VALUE, INTENSITY, LUMA
from .models.kernel import Kernel, EdgePolicy, IDENTITY, BLUR, SHARPEN
from .models.macro import (
    Macro,
    HorizontalFlipMacro,
    VerticalFlipMacro,
    BrightnessMacro,
    GreyscaleMacro,
    KernelMacro,
    SequenceMacro,
)
from .models.errors import (
    ImageMacroError,
    ConstructionError,
    ValidationError,
    UnsupportedFormatError,
    UnknownImageError,
    CommandError,
)

__version__ = "1.0.0"
