"""
Batch Macro Pipeline
Streams every image of a folder through one macro and writes the results
to an output folder, one file per input.
"""

import os
import logging
from pathlib import Path
from typing import List

from dotenv import load_dotenv
from tqdm import tqdm

from ..models.macro import Macro
from ..repositories.image_repository import ImageRepository

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

OUTPUT_DIR = os.getenv("BATCH_OUTPUT_DIR", "data/macro_output")
OUTPUT_EXT = os.getenv("OUTPUT_IMG_EXT", ".png")


def apply_macro_to_gallery(
    folder: str | Path,
    macro: Macro,
    *,
    image_repository: ImageRepository | None = None,
    output_dir: str | Path = OUTPUT_DIR,
    ext: str = OUTPUT_EXT,
    recursive: bool = False,
) -> List[Path]:
    """
    Apply *macro* to every readable image under *folder*.

    Args:
        folder: Directory to read images from
        macro: Transform applied to each image
        image_repository: Repository used for both loading and saving
        output_dir: Directory the results are written to (created if missing)
        ext: File extension (and therefore format) of the results
        recursive: Also descend into sub-directories

    Returns:
        List[Path]: Paths of the written images, in input order
    """
    repo = image_repository or ImageRepository()
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    ext = ext if ext.startswith(".") else f".{ext}"

    written = []
    for src_path, image in tqdm(repo.iter_dir(folder, recursive=recursive),
                                desc="macro", ncols=70, unit="img"):
        result = macro.apply(image)
        dst_path = output_dir / f"{src_path.stem}{ext}"
        repo.save(dst_path, result)
        written.append(dst_path)

    logger.info(f"Applied {macro!r} to {len(written)} images -> {output_dir}")
    return written
