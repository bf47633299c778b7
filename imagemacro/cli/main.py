#!/usr/bin/env python3
"""
imagemacro command line.

    imagemacro script edits.txt
    imagemacro batch photos/ --macro "sharpen; brighten 10" --output out/
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from dotenv import load_dotenv

from ..models.errors import ImageMacroError
from ..pipeline.batch_macro import OUTPUT_DIR, OUTPUT_EXT, apply_macro_to_gallery
from ..services.command_service import CommandService, parse_macro

# Load environment variables first
load_dotenv()

logger = logging.getLogger("imagemacro")


def _configure_logging(level: str) -> None:
    # --- Centralized Logging Configuration ---
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
        datefmt='%H:%M:%S'
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="imagemacro", description="Apply image macros and scripts")
    parser.add_argument("--log-level", default=os.getenv("LOG_LEVEL", "INFO"),
                        help="DEBUG, INFO, WARNING, ERROR (default: $LOG_LEVEL or INFO)")
    sub = parser.add_subparsers(dest="command", required=True)

    script = sub.add_parser("script", help="run a command script ('-' reads stdin)")
    script.add_argument("file")

    batch = sub.add_parser("batch", help="apply one macro to every image in a folder")
    batch.add_argument("folder")
    batch.add_argument("--macro", required=True, help='e.g. "sharpen; brighten 10"')
    batch.add_argument("--output", default=OUTPUT_DIR)
    batch.add_argument("--ext", default=OUTPUT_EXT)
    batch.add_argument("--recursive", action="store_true")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.log_level)

    try:
        if args.command == "script":
            commands = CommandService()
            if args.file == "-":
                commands.run_lines(sys.stdin)
            else:
                commands.run_script(args.file)
        else:
            written = apply_macro_to_gallery(
                args.folder,
                parse_macro(args.macro),
                output_dir=args.output,
                ext=args.ext,
                recursive=args.recursive,
            )
            print(f"Wrote {len(written)} images to {args.output}")
    except (ImageMacroError, OSError) as err:
        logger.error(str(err))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
