"""
This module provides the Modules class to locate and verify the external tools
the converters rely on: ffmpeg and the lottie converter with its helpers.
"""
import subprocess
import sys

from loguru import logger

from ..config.common import FFMPEG, LOTTIE_TO_GIF, MODULE_PATH, REQUIRED_TOOLS
from ..domain.exceptions import ToolCheckException


class Modules:
    """
    Static helpers for external executables.

    Paths come from `config.user.yaml` where configured, otherwise the tools
    are expected in the system's PATH.
    """

    @staticmethod
    def get_ffmpeg_path() -> str:
        """
        Determines the FFmpeg executable to use.

        Prioritizes `ffmpeg_dir` from the user config and falls back to 'ffmpeg'
        from the system PATH when it is unset or does not contain the binary.
        """
        ffmpeg_exe_name = "ffmpeg.exe" if sys.platform == "win32" else "ffmpeg"

        if MODULE_PATH and MODULE_PATH.is_dir():
            configured_ffmpeg_path = MODULE_PATH / ffmpeg_exe_name
            if configured_ffmpeg_path.is_file():
                logger.debug(f"Using FFmpeg from configured path: '{configured_ffmpeg_path}'")
                return str(configured_ffmpeg_path)
            logger.warning(f"`ffmpeg_dir` is configured, but '{ffmpeg_exe_name}' was not found there. Falling back to system PATH.")

        return FFMPEG

    @staticmethod
    def get_lottie_to_gif_path() -> str:
        return LOTTIE_TO_GIF

    @staticmethod
    def check_command(binary: str, arg: str):
        """
        Runs `binary arg` once, discarding stdout.

        A non-zero exit is only logged as a warning, since some tools return
        non-zero for their version flag.

        Raises:
            ToolCheckException: If the binary cannot be executed at all.
        """
        try:
            result = subprocess.run([binary, arg], stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL, check=False)
        except OSError as e:
            logger.error(f"{binary} {arg}: {e}")
            raise ToolCheckException(f"Required tool '{binary}' cannot be executed: {e}") from e
        if result.returncode != 0:
            logger.warning(f"{binary} {arg} failed: exit status {result.returncode}")
        else:
            logger.debug(f"{binary} {arg}: ok")

    @staticmethod
    def required_tools() -> tuple[tuple[str, str], ...]:
        """`REQUIRED_TOOLS` with ffmpeg resolved through `get_ffmpeg_path`."""
        ffmpeg_path = Modules.get_ffmpeg_path()
        return tuple((ffmpeg_path if binary == FFMPEG else binary, arg) for binary, arg in REQUIRED_TOOLS)

    @staticmethod
    def run_all():
        """Checks every required tool in sequence. Called once at startup."""
        for binary, arg in Modules.required_tools():
            Modules.check_command(binary, arg)
        logger.info("External tool check passed.")
