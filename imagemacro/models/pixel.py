from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator


@dataclass(frozen=True)
class Pixel:
    """
    Value object: one RGB sample.
    Bounds are owned by the Image holding the pixel, not by the pixel itself.
    """
    red: int
    green: int
    blue: int

    def __iter__(self) -> Iterator[int]:
        return iter((self.red, self.green, self.blue))

    def as_tuple(self) -> tuple[int, int, int]:
        return self.red, self.green, self.blue
