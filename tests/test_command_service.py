"""
Tests for the script interpreter and the macro spec parser.
"""

import pytest

from imagemacro.models.channel_selector import LUMA, VALUE
from imagemacro.models.errors import CommandError, UnknownImageError, ValidationError
from imagemacro.models.kernel import EdgePolicy
from imagemacro.models.macro import (
    BrightnessMacro,
    GreyscaleMacro,
    HorizontalFlipMacro,
    SequenceMacro,
    VerticalFlipMacro,
    blur_macro,
    sharpen_macro,
)
from imagemacro.services.command_service import CommandService, parse_macro
from imagemacro.services.image_service import ImageService


@pytest.fixture()
def commands(small_image) -> CommandService:
    svc = ImageService()
    svc.put("koala", small_image)
    return CommandService(svc)


class TestParseMacro:
    def test_single_step(self) -> None:
        assert parse_macro("horizontal-flip") == SequenceMacro((HorizontalFlipMacro(),))

    def test_many_steps(self) -> None:
        macro = parse_macro("sharpen; brighten 10 ;vertical-flip; darken 4; blur wrap")

        assert macro.steps == (
            sharpen_macro(),
            BrightnessMacro(10),
            VerticalFlipMacro(),
            BrightnessMacro(-4),
            blur_macro(EdgePolicy.WRAP),
        )

    def test_greyscale_steps(self) -> None:
        macro = parse_macro("greyscale; greyscale value; value-component")
        assert macro.steps == (GreyscaleMacro(LUMA), GreyscaleMacro(VALUE), GreyscaleMacro(VALUE))

    @pytest.mark.parametrize("spec", [
        "",
        " ; ",
        "rotate",
        "brighten",
        "brighten ten",
        "horizontal-flip now",
        "alpha-component",
        "greyscale alpha",
        "blur sideways",
    ])
    def test_invalid_specs(self, spec) -> None:
        with pytest.raises(CommandError):
            parse_macro(spec)


class TestCommandService:
    def test_runs_script_lines(self, commands, small_image) -> None:
        count = commands.run_lines([
            "# flip then brighten",
            "horizontal-flip koala k1",
            "",
            "brighten 10 k1 k2   # trailing comment",
            "red-component koala red",
        ])

        svc = commands.image_service
        assert count == 3
        assert svc.get("k2") == small_image.horizontal_flip().alter_brightness(10)
        assert svc.get("red").pixel_at(0, 0).as_tuple() == (10, 10, 10)

    def test_split_combine_commands(self, commands, small_image) -> None:
        commands.run_lines([
            "rgb-split koala r g b",
            "rgb-combine back r g b",
        ])
        assert commands.image_service.get("back") == small_image

    def test_run_command_with_quoted_macro(self, commands, small_image) -> None:
        commands.execute('run "vertical-flip; brighten -20" koala out')
        expected = small_image.vertical_flip().alter_brightness(-20)
        assert commands.image_service.get("out") == expected

    def test_every_channel_has_a_component_command(self, commands) -> None:
        for name in ("red", "green", "blue", "value", "intensity", "luma"):
            assert f"{name}-component" in commands.commands

    def test_unknown_command_reports_line(self, commands) -> None:
        with pytest.raises(CommandError, match="line 2: unknown command 'rotate'"):
            commands.run_lines(["blur koala soft", "rotate koala out"])

    def test_wrong_arity(self, commands) -> None:
        with pytest.raises(CommandError, match="takes 2 arguments, got 1"):
            commands.execute("sharpen koala")

    def test_bad_delta_reports_line(self, commands) -> None:
        with pytest.raises(CommandError, match="line 1: brightness delta"):
            commands.run_lines(["brighten lots koala out"])

    def test_bad_macro_reports_line(self, commands) -> None:
        with pytest.raises(CommandError, match="line 3"):
            commands.run_lines(["", "# c", 'run "spin" koala out'])

    def test_unbalanced_quotes(self, commands) -> None:
        with pytest.raises(CommandError, match="cannot parse"):
            commands.execute('run "sharpen koala out')

    def test_script_stops_at_first_error(self, commands) -> None:
        with pytest.raises(CommandError, match="line 1: no image named 'panda'") as excinfo:
            commands.run_lines(["sharpen panda out", "blur koala soft"])
        assert isinstance(excinfo.value.__cause__, UnknownImageError)
        assert "soft" not in commands.image_service

    def test_size_mismatch_reports_line(self, commands, random_image) -> None:
        commands.image_service.put("big", random_image)

        with pytest.raises(CommandError, match="line 2: cannot combine images") as excinfo:
            commands.run_lines(["rgb-split koala r g b", "rgb-combine out r big b"])
        assert isinstance(excinfo.value.__cause__, ValidationError)

    def test_single_line_keeps_original_error(self, commands) -> None:
        with pytest.raises(UnknownImageError):
            commands.execute("sharpen panda out")

    def test_run_script_file(self, commands, small_image, tmp_path) -> None:
        src = tmp_path / "koala.ppm"
        dst = tmp_path / "koala-flip.png"
        commands.image_service.save(src, "koala")

        script = tmp_path / "edit.txt"
        script.write_text(
            f"load {src} k\n"
            f"horizontal-flip k kf\n"
            f"save {dst} kf\n",
            encoding="utf-8",
        )

        assert commands.run_script(script) == 3
        assert commands.image_service.image_repository.load(dst) == small_image.horizontal_flip()
