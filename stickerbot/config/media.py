"""
Configuration settings related to media conversion.

This module defines the size limits, the sticker geometry, the process timeout,
and the exact argument shapes used to invoke ffmpeg and the lottie converter.
"""

# --- Limits ---
# Largest input accepted, checked against the size Telegram reports before download.
MAX_INPUT_SIZE = 10 << 20
# A lossless webm larger than this is re-encoded lossy (once).
MAX_OUTPUT_WEBM_SIZE = 256 * 1000
# Outputs fit within a STICKER_SIZE x STICKER_SIZE box.
STICKER_SIZE = 512
# Video inputs are trimmed to this many leading seconds.
CLIP_SECONDS = 3
# Wall-clock limit for every external process.
PROCESS_TIMEOUT_SECONDS = 60

# --- Output extensions ---
EXT_WEBP = "webp"
EXT_PNG = "png"
EXT_WEBM = "webm"
EXT_GIF = "gif"
KNOWN_EXTENSIONS = frozenset({EXT_WEBP, EXT_PNG, EXT_WEBM, EXT_GIF})

# --- ffmpeg argument shapes ---
# Each pair is (arguments before the input path, arguments after it).
FFMPEG_CLIP_ARGS = (
    ["-hide_banner", "-t", str(CLIP_SECONDS), "-i"],
    [
        "-vf",
        f"scale=w={STICKER_SIZE}:h={STICKER_SIZE}:force_original_aspect_ratio=decrease",
        "-c:v",
        "libvpx-vp9",
        "-f",
        "webm",
        "-an",
        "-",
    ],
)
# Inserted right after the input path on the first (lossless) pass.
FFMPEG_LOSSLESS_ARGS = ["-lossless", "1"]

FFMPEG_WEBM_TO_GIF_ARGS = (
    ["-hide_banner", "-i"],
    ["-c:v", "gif", "-f", "gif", "-"],
)

# --- lottie converter ---
LOTTIE_TO_GIF_ARGS = ["--output", "-"]
