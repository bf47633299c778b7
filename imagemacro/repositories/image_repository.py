from pathlib import Path
from typing import Union, Iterable, List, Iterator, Tuple
import logging
import os

import numpy as np
import cv2
from PIL import Image as PILImage
from dotenv import load_dotenv

from ..models.image import Image
from ..models.errors import ConstructionError, UnsupportedFormatError

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_EXTS = ".ppm,.png,.jpg,.jpeg,.bmp"
PPM_EXTS = {".ppm"}
PIL_FORMATS = {".png": "PNG", ".jpg": "JPEG", ".jpeg": "JPEG", ".bmp": "BMP"}
SUPPORTED_EXTS = PPM_EXTS | set(PIL_FORMATS)
PPM_MAX_VALUE = 65535


def _ppm_header(data: bytes, path: Path) -> Tuple[List[bytes], int]:
    """
    Split the four header tokens (magic, width, height, maxval) off a PPM file.
    Returns them with the offset of the byte right after maxval.
    """
    tokens, pos = [], 0
    while len(tokens) < 4:
        while pos < len(data) and (data[pos:pos + 1].isspace() or data[pos:pos + 1] == b"#"):
            if data[pos:pos + 1] == b"#":
                end = data.find(b"\n", pos)
                pos = len(data) if end < 0 else end + 1
            else:
                pos += 1
        start = pos
        while pos < len(data) and not data[pos:pos + 1].isspace() and data[pos:pos + 1] != b"#":
            pos += 1
        if start == pos:
            raise UnsupportedFormatError(path, "truncated PPM header")
        tokens.append(data[start:pos])
    return tokens, pos


class ImageRepository:
    """
    Handles file I/O for Image values.
    PPM files are parsed and written here so the header maxval survives;
    other formats are decoded through OpenCV and encoded through Pillow.
    """
    def __init__(self, exts: Iterable[str] | None = None):
        raw = exts or os.getenv("VALID_IMAGE_EXTENSIONS", DEFAULT_EXTS).split(",")
        self.VALID_EXTS = {e.strip().lower() for e in raw if e.strip()}

    def _check_ext(self, path: Path) -> str:
        ext = path.suffix.lower()
        if ext not in self.VALID_EXTS or ext not in SUPPORTED_EXTS:
            raise UnsupportedFormatError(path)
        return ext

    # ─── Decode ───────────────────────────────────────────────────
    def load(self, path: Union[str, Path]) -> Image:
        path = Path(path)
        ext = self._check_ext(path)

        if ext in PPM_EXTS:
            image = self._read_ppm(path)
        else:
            arr_bgr = cv2.imread(str(path), cv2.IMREAD_COLOR | cv2.IMREAD_ANYDEPTH)
            if arr_bgr is None:
                raise FileNotFoundError(f"Image not found or unreadable: {path}")
            max_value = 65535 if arr_bgr.dtype == np.uint16 else 255
            image = Image(arr_bgr[:, :, ::-1], max_value)

        logger.debug(f"Loaded {path} ({image.height}x{image.width}, max {image.max_value})")
        return image

    @staticmethod
    def _read_ppm(path: Path) -> Image:
        """Plain (P3) or binary (P6) PPM, keeping the samples and maxval as stored."""
        data = path.read_bytes()
        (magic, *dims), pos = _ppm_header(data, path)
        if magic not in (b"P3", b"P6"):
            raise UnsupportedFormatError(path, f"not a P3/P6 PPM file (magic {magic!r})")
        try:
            width, height, max_value = (int(t) for t in dims)
        except ValueError:
            raise UnsupportedFormatError(path, "malformed PPM header") from None
        if width < 1 or height < 1 or not 0 < max_value <= PPM_MAX_VALUE:
            raise UnsupportedFormatError(
                path, f"bad PPM dimensions {width}x{height} or maxval {max_value}"
            )

        count = width * height * 3
        if magic == b"P6":
            # one whitespace byte separates maxval from the raster
            dtype = np.uint8 if max_value < 256 else np.dtype(">u2")
            try:
                samples = np.frombuffer(data, dtype=dtype, count=count, offset=pos + 1)
            except ValueError:
                raise UnsupportedFormatError(path, "truncated PPM raster") from None
        else:
            body = b"\n".join(line.split(b"#", 1)[0] for line in data[pos:].splitlines())
            try:
                samples = np.array([int(t) for t in body.split()], dtype=np.int64)
            except ValueError:
                raise UnsupportedFormatError(path, "non-numeric PPM sample") from None
            if samples.size != count:
                raise UnsupportedFormatError(
                    path, f"expected {count} PPM samples, found {samples.size}"
                )
        return Image(samples.reshape(height, width, 3), max_value)

    # ─── Encode ───────────────────────────────────────────────────
    @staticmethod
    def _rescale(image: Image, target_max: int, dtype) -> np.ndarray:
        """Map [0, image.max_value] onto [0, target_max] (no-op when they match)."""
        px = image.pixels
        if image.max_value != target_max:
            px = np.rint(px * (target_max / image.max_value))
        return px.astype(dtype)

    def save(self, path: Union[str, Path], image: Image) -> None:
        path = Path(path)
        ext = self._check_ext(path)

        if ext in PPM_EXTS:
            self._write_ppm(path, image)
        else:
            arr = np.ascontiguousarray(self._rescale(image, 255, np.uint8))
            PILImage.fromarray(arr).save(path, format=PIL_FORMATS[ext])
        logger.debug(f"Saved {path}")

    def _write_ppm(self, path: Path, image: Image) -> None:
        """Plain-text P3 under the image's own maxval (capped at the format's 65535)."""
        max_value = min(image.max_value, PPM_MAX_VALUE)
        arr = self._rescale(image, max_value, np.int64)
        with path.open("w", encoding="ascii") as fh:
            fh.write(f"P3\n{image.width} {image.height}\n{max_value}\n")
            np.savetxt(fh, arr.reshape(image.height, image.width * 3), fmt="%d")

    # ─── Folders ──────────────────────────────────────────────────
    def iter_dir(
        self,
        folder: Union[str, Path],
        *,
        recursive: bool = False,
        exts: Iterable[str] | None = None,
    ) -> Iterator[Tuple[Path, Image]]:
        """
        Yield (path, Image) pairs one at a time.  Nothing accumulates in memory.
        """
        folder = Path(folder)
        if not folder.is_dir():
            raise NotADirectoryError(folder)

        allowed = {e.lower() for e in (exts or self.VALID_EXTS)}
        pattern = "**/*" if recursive else "*"

        for p in sorted(folder.glob(pattern)):
            if p.suffix.lower() not in allowed:
                logger.debug(f"Skipping due to extension: {p}")
                continue
            if not p.is_file():
                continue
            try:
                image = self.load(p)
            except (FileNotFoundError, UnsupportedFormatError, ConstructionError) as err:
                logger.warning(f"Skipping {p.name}: {err}")
                continue
            yield p, image

    def load_dir(
        self, folder: Union[str, Path], *, recursive=False, exts=None
    ) -> List[Tuple[Path, Image]]:
        return list(self.iter_dir(folder, recursive=recursive, exts=exts))
