from __future__ import annotations

import logging
import shlex
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Tuple, Union

from ..models.channel_selector import SELECTORS, get_selector
from ..models.errors import CommandError, ImageMacroError, ValidationError
from ..models.kernel import EdgePolicy
from ..models.macro import (
    Macro,
    BrightnessMacro,
    GreyscaleMacro,
    HorizontalFlipMacro,
    SequenceMacro,
    VerticalFlipMacro,
    blur_macro,
    sharpen_macro,
)
from .image_service import ImageService

logger = logging.getLogger(__name__)


# ─── Macro specs ("sharpen; brighten 10; horizontal-flip") ─────────
def _parse_int(token: str, what: str) -> int:
    try:
        return int(token)
    except ValueError:
        raise CommandError(f"{what} must be an integer, got '{token}'") from None


def _parse_edge(args: List[str]) -> EdgePolicy:
    if not args:
        return EdgePolicy.ZERO
    try:
        return EdgePolicy(args[0].lower())
    except ValueError:
        raise CommandError(
            f"unknown edge policy '{args[0]}', expected one of {[p.value for p in EdgePolicy]}"
        ) from None


def _parse_step(step: str) -> Macro:
    tokens = step.split()
    name, args = tokens[0].lower(), tokens[1:]

    if name == "horizontal-flip" and not args:
        return HorizontalFlipMacro()
    if name == "vertical-flip" and not args:
        return VerticalFlipMacro()
    if name in ("brighten", "darken") and len(args) == 1:
        delta = _parse_int(args[0], "brightness delta")
        return BrightnessMacro(-delta if name == "darken" else delta)
    if name == "greyscale" and len(args) <= 1:
        try:
            return GreyscaleMacro(get_selector(args[0])) if args else GreyscaleMacro()
        except ValidationError as err:
            raise CommandError(str(err)) from err
    if name.endswith("-component") and not args:
        channel = name[: -len("-component")]
        if channel in SELECTORS:
            return GreyscaleMacro(SELECTORS[channel])
    if name == "blur" and len(args) <= 1:
        return blur_macro(_parse_edge(args))
    if name == "sharpen" and len(args) <= 1:
        return sharpen_macro(_parse_edge(args))
    raise CommandError(f"invalid macro step '{step}'")


def parse_macro(spec: str) -> SequenceMacro:
    """Parse ';'-separated steps into one SequenceMacro."""
    steps = [s.strip() for s in spec.split(";") if s.strip()]
    if not steps:
        raise CommandError("macro spec is empty")
    return SequenceMacro(tuple(_parse_step(s) for s in steps))


# ─── Scripts ───────────────────────────────────────────────────────
Handler = Callable[[ImageService, List[str]], object]


def _component_handler(channel: str) -> Handler:
    return lambda svc, a: svc.greyscale(a[0], a[1], channel=channel)


class CommandService:
    """
    Interprets text scripts, one command per line, against an ImageService.
    The first failing line stops the script and its error propagates.
    """

    def __init__(self, image_service: ImageService | None = None):
        self.image_service = image_service or ImageService()
        # name -> (arity, handler)
        self.commands: Dict[str, Tuple[int, Handler]] = {
            "load": (2, lambda svc, a: svc.load(a[0], a[1])),
            "save": (2, lambda svc, a: svc.save(a[0], a[1])),
            "horizontal-flip": (2, lambda svc, a: svc.horizontal_flip(a[0], a[1])),
            "vertical-flip": (2, lambda svc, a: svc.vertical_flip(a[0], a[1])),
            "brighten": (3, lambda svc, a: svc.brighten(
                _parse_int(a[0], "brightness delta"), a[1], a[2])),
            "greyscale": (2, lambda svc, a: svc.greyscale(a[0], a[1])),
            "rgb-split": (4, lambda svc, a: svc.rgb_split(a[0], a[1], a[2], a[3])),
            "rgb-combine": (4, lambda svc, a: svc.rgb_combine(a[0], a[1], a[2], a[3])),
            "blur": (2, lambda svc, a: svc.blur(a[0], a[1])),
            "sharpen": (2, lambda svc, a: svc.sharpen(a[0], a[1])),
            "run": (3, lambda svc, a: svc.apply_macro(parse_macro(a[0]), a[1], a[2])),
        }
        for channel in SELECTORS:
            self.commands[f"{channel}-component"] = (2, _component_handler(channel))

    def execute(self, line: str, line_number: int | None = None) -> None:
        """Run one script line. Blank lines and '#' comments are ignored."""
        try:
            tokens = shlex.split(line, comments=True)
        except ValueError as err:
            raise CommandError(f"cannot parse '{line.strip()}': {err}", line_number) from err
        if not tokens:
            return

        name, args = tokens[0].lower(), tokens[1:]
        if name not in self.commands:
            raise CommandError(f"unknown command '{name}'", line_number)
        arity, handler = self.commands[name]
        if len(args) != arity:
            raise CommandError(
                f"'{name}' takes {arity} arguments, got {len(args)}", line_number
            )

        logger.debug(f"Executing {name} {args}")
        try:
            handler(self.image_service, args)
        except ImageMacroError as err:
            if line_number is None or getattr(err, "line_number", None) is not None:
                raise
            raise CommandError(str(err), line_number) from err

    def run_lines(self, lines: Iterable[str]) -> int:
        """Execute lines in order; returns the number of commands run."""
        executed = 0
        for number, line in enumerate(lines, 1):
            if not line.strip() or line.lstrip().startswith("#"):
                continue
            self.execute(line, number)
            executed += 1
        logger.info(f"Script finished: {executed} commands")
        return executed

    def run_script(self, script: Union[str, Path]) -> int:
        path = Path(script)
        with path.open("r", encoding="utf-8") as fh:
            return self.run_lines(fh)
