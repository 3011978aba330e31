import sys

import pytest

from stickerbot.domain.exceptions import ToolCheckException
from stickerbot.utils import module_checker
from stickerbot.utils.module_checker import Modules


def test_working_tool_passes():
    Modules.check_command(sys.executable, "--version")


def test_non_zero_exit_only_warns():
    # `python -c` without a program exits with status 2.
    Modules.check_command(sys.executable, "-c")


def test_missing_tool_raises():
    with pytest.raises(ToolCheckException):
        Modules.check_command("definitely-not-a-real-binary-xyz", "-v")


def test_ffmpeg_from_configured_dir(monkeypatch, tmp_path):
    exe = tmp_path / ("ffmpeg.exe" if sys.platform == "win32" else "ffmpeg")
    exe.write_text("")
    monkeypatch.setattr(module_checker, "MODULE_PATH", tmp_path)

    assert Modules.get_ffmpeg_path() == str(exe)
    assert Modules.required_tools()[0] == (str(exe), "-version")


def test_ffmpeg_falls_back_to_path(monkeypatch, tmp_path):
    monkeypatch.setattr(module_checker, "MODULE_PATH", tmp_path)

    assert Modules.get_ffmpeg_path() == "ffmpeg"


def test_run_all_checks_every_tool(monkeypatch):
    checked = []
    monkeypatch.setattr(Modules, "check_command", staticmethod(lambda binary, arg: checked.append((binary, arg))))
    monkeypatch.setattr(module_checker, "MODULE_PATH", None)

    Modules.run_all()

    assert [binary for binary, _ in checked] == ["ffmpeg", "lottie_to_gif.sh", "gifski", "gunzip", "lottie_to_png"]
