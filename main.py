"""
Main entry point for the Sticker Bot.

This script configures logging, parses command-line arguments, verifies that the
external conversion tools are available, and starts polling Telegram.
"""

import asyncio
import sys

from loguru import logger

from stickerbot.cli import get_args
from stickerbot.config.common import DEFAULT_LOG_LEVEL, LOGGER_FORMAT, resolve_bot_token
from stickerbot.domain.exceptions import ToolCheckException
from stickerbot.pipeline.bot_pipeline import StickerBotPipeline
from stickerbot.utils.module_checker import Modules


# Configure the logger for initial setup.
# The level is overridden once the command-line arguments are parsed.
logger.remove()
logger.add(sys.stderr, level=DEFAULT_LOG_LEVEL, format=LOGGER_FORMAT)


def main():
    """
    Main function to start the bot.

    1. Parses command-line arguments and re-configures the logger.
    2. Verifies the external tools unless `--skip-checks` is given.
    3. Resolves the bot token and runs the polling pipeline until interrupted.
    """
    args = get_args()

    logger.remove()
    logger.add(sys.stderr, level=args.log_level, format=LOGGER_FORMAT)
    logger.debug(f"Parsed arguments: {args}")

    if not args.skip_checks:
        try:
            Modules.run_all()
        except ToolCheckException as e:
            logger.error(f"{e}")
            sys.exit(1)

    token = resolve_bot_token(args.token)
    if not token:
        logger.error("No bot token given. Use --token, set BOT_TOKEN, or add bot.token to config.user.yaml.")
        sys.exit(1)

    pipeline = StickerBotPipeline.from_token(token)
    try:
        asyncio.run(pipeline.run())
    except KeyboardInterrupt:
        logger.info("Interrupted.")

    logger.success("Sticker Bot stopped.")


if __name__ == "__main__":
    main()
