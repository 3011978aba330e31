"""
This module defines the VideoConverter, which drives external transcoders for
video-like media: GIFs and clips to webm, and animated or video stickers to gif.

Inputs are always staged in a file rather than piped, because ffmpeg sometimes
misdetects streamed containers and piping into it can deadlock.
"""
from pathlib import Path

from loguru import logger

from ..config.media import (
    EXT_GIF,
    EXT_WEBM,
    FFMPEG_CLIP_ARGS,
    FFMPEG_LOSSLESS_ARGS,
    FFMPEG_WEBM_TO_GIF_ARGS,
    LOTTIE_TO_GIF_ARGS,
    MAX_OUTPUT_WEBM_SIZE,
)
from ..domain.blob import Blob
from ..domain.exceptions import TranscodeFailedException
from ..domain.temp_models import temp_file
from ..utils.format_utils import formatted_size
from ..utils.module_checker import Modules
from ..utils.process_utils import ProcessResult, ProcessRunner


class VideoConverter:
    """
    Converts video-like media by running ffmpeg or the lottie converter.

    Key behaviour:
    - `convert_clip` encodes the first seconds of a clip to VP9 webm. The first
      pass is lossless; if that output is over the size limit it runs exactly
      one more, lossy, pass and returns that result whatever its size.
    - `convert_animation` turns tgs (lottie) stickers into gif.
    - `convert_video_to_gif` turns webm video stickers into gif.
    Any non-zero exit raises `TranscodeFailedException` without retrying.
    """

    def __init__(
        self,
        runner: ProcessRunner | None = None,
        ffmpeg: str | None = None,
        lottie_to_gif: str | None = None,
        max_webm_size: int = MAX_OUTPUT_WEBM_SIZE,
    ):
        self.runner = runner or ProcessRunner()
        self.ffmpeg = ffmpeg or Modules.get_ffmpeg_path()
        self.lottie_to_gif = lottie_to_gif or Modules.get_lottie_to_gif_path()
        self.max_webm_size = max_webm_size

    @staticmethod
    def build_clip_args(path: Path, lossless: bool) -> list[str]:
        before_input, after_input = FFMPEG_CLIP_ARGS
        args = [*before_input, str(path)]
        if lossless:
            args += FFMPEG_LOSSLESS_ARGS
        return args + after_input

    @staticmethod
    def _check(result: ProcessResult, tool: str):
        if not result.success:
            logger.error(f"{tool} failed: exit status {result.returncode}\n{result.stderr_tail()}")
            raise TranscodeFailedException(f"{tool} exited with status {result.returncode}", result.returncode, result.stderr)

    async def convert_clip(self, path: Path) -> Blob:
        """
        Transcodes a staged clip to a sticker-sized webm.

        Args:
            path: The staged input file.

        Returns:
            A `Blob` tagged `webm`.

        Raises:
            TranscodeFailedException: If ffmpeg exits with a non-zero status.
            ProcessTimeoutException, ProcessSpawnException: From the process runner.
        """
        lossy = False
        while True:
            result = await self.runner.run(self.ffmpeg, self.build_clip_args(path, lossless=not lossy))
            self._check(result, "ffmpeg")
            size = len(result.stdout)
            if not lossy and size > self.max_webm_size:
                lossy = True
                logger.info(f"lossless webm is {formatted_size(size)}, retrying with lossy")
                continue
            if size > self.max_webm_size:
                logger.warning(f"lossy webm is still {formatted_size(size)}, sending it anyway")
            return Blob(result.stdout, EXT_WEBM)

    async def convert_animation_file(self, path: Path) -> Blob:
        """Converts a staged tgs sticker to gif with the lottie converter script."""
        result = await self.runner.run(self.lottie_to_gif, [str(path), *LOTTIE_TO_GIF_ARGS])
        self._check(result, "tgs_to_gif")
        return Blob(result.stdout, EXT_GIF)

    async def convert_animation(self, data: bytes) -> Blob:
        """Stages tgs sticker bytes in a temp file and converts them to gif."""
        async with temp_file() as tmp:
            await tmp.write(data)
            tmp.close()
            return await self.convert_animation_file(tmp.path)

    async def convert_video_to_gif(self, data: bytes) -> Blob:
        """Stages webm sticker bytes in a temp file and converts them to gif with ffmpeg."""
        before_input, after_input = FFMPEG_WEBM_TO_GIF_ARGS
        async with temp_file() as tmp:
            await tmp.write(data)
            tmp.close()
            result = await self.runner.run(self.ffmpeg, [*before_input, str(tmp.path), *after_input])
        self._check(result, "ffmpeg")
        return Blob(result.stdout, EXT_GIF)
