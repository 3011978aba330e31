"""
Command-Line Interface (CLI) setup for the Sticker Bot.
"""
import argparse

from .config.common import BOT_TOKEN_ENV, DEFAULT_LOG_LEVEL


def get_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parses command-line arguments for the Sticker Bot.

    Args:
        argv: Arguments to parse; defaults to `sys.argv[1:]`.

    Returns:
        argparse.Namespace: The parsed arguments.
    """
    parser = argparse.ArgumentParser(description="Telegram bot converting images, GIFs and stickers for sticker packs.")
    parser.add_argument(
        "--token",
        type=str,
        default=None,
        help=f"Telegram bot token. Defaults to ${BOT_TOKEN_ENV}, then bot.token in config.user.yaml.",
    )
    parser.add_argument(
        "--log-level", type=str, default=DEFAULT_LOG_LEVEL,
        choices=["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set the logging level."
    )
    parser.add_argument(
        "--skip-checks", action="store_true", help="Do not verify external tools (ffmpeg, lottie converter) at startup."
    )
    return parser.parse_args(argv)
