"""
Exception types raised by the image engine and the layers around it.

Everything inherits from ImageMacroError so callers can handle the whole
family in one place.
"""


class ImageMacroError(Exception):
    """Base class for all imagemacro errors."""


class ConstructionError(ImageMacroError):
    """An Image was built from a grid that disagrees with its declared shape or bounds."""


class ValidationError(ImageMacroError):
    """An operation received arguments it cannot work with (mismatched sizes, bad kernel)."""


class UnsupportedFormatError(ImageMacroError):
    """The file extension is not one the repository can read or write."""

    def __init__(self, path, message: str = "unsupported image format"):
        self.path = path
        super().__init__(f"{message}: {path}")


class UnknownImageError(ImageMacroError, KeyError):
    """No image is registered under the requested name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"no image named '{name}'")

    def __str__(self) -> str:
        return self.args[0]


class CommandError(ImageMacroError):
    """A script line could not be parsed or dispatched."""

    def __init__(self, message: str, line_number: int | None = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
