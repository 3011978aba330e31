"""
Common configuration settings used throughout the application.

This module contains globally shared settings: the logger format, the names of
external executables, and values loaded from an optional `config.user.yaml`
file at the project root, allowing local customization without modifying the
source code.
"""
import os
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

# --- User-Defined Configuration ---
# This block loads user-specific settings from a 'config.user.yaml' file located
# at the project root. Example:
#
#   paths:
#     ffmpeg_dir: /opt/ffmpeg/bin
#     lottie_to_gif: /usr/local/bin/lottie_to_gif.sh
#     temp_dir: /var/tmp/stickerbot
#   bot:
#     token: "123456:ABC..."

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
USER_CONFIG_PATH = PROJECT_ROOT / "config.user.yaml"


def load_user_config(config_path: Path) -> dict[str, Any]:
    """
    Reads the user YAML config, returning an empty dict when it is missing or broken.

    Args:
        config_path: Location of the YAML file.

    Returns:
        The parsed mapping. Anything that is not a mapping is treated as empty.
    """
    if not config_path.is_file():
        logger.debug(f"User config '{config_path}' not found. Using defaults and system PATH.")
        return {}
    try:
        with config_path.open("r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Could not load or parse '{config_path}': {e}")
        return {}
    if not isinstance(user_config, dict):
        logger.warning(f"Ignoring '{config_path}': top level must be a mapping.")
        return {}
    return user_config


_user_config = load_user_config(USER_CONFIG_PATH)
_paths_config: dict[str, Any] = _user_config.get("paths") or {}
_bot_config: dict[str, Any] = _user_config.get("bot") or {}

# The directory containing the ffmpeg executable. If not provided, ffmpeg is
# looked up in the system's PATH.
MODULE_PATH: Path | None = Path(_paths_config["ffmpeg_dir"]) if _paths_config.get("ffmpeg_dir") else None

# The lottie (tgs) to gif converter script. It must accept `<input> --output -`
# and write the gif to stdout.
LOTTIE_TO_GIF: str = str(_paths_config.get("lottie_to_gif") or "lottie_to_gif.sh")

# Where temporary files for downloads and transcoder inputs are created.
# None means the platform default temp directory.
TEMP_DIR: Path | None = Path(_paths_config["temp_dir"]) if _paths_config.get("temp_dir") else None

# Prefix for temporary files, making leftovers easy to spot.
TEMP_FILE_PREFIX = "stickerbot_"

# Environment variable holding the Telegram bot token.
BOT_TOKEN_ENV = "BOT_TOKEN"
CONFIG_BOT_TOKEN: str | None = _bot_config.get("token")


def resolve_bot_token(cli_token: str | None = None) -> str | None:
    """Returns the first token found on the command line, in the environment, or in the user config."""
    return cli_token or os.environ.get(BOT_TOKEN_ENV) or CONFIG_BOT_TOKEN


# --- External Tools ---
# Binaries verified at startup, with the argument used to probe each one.
# lottie_to_gif.sh drives gunzip, lottie_to_png and gifski internally.
FFMPEG = "ffmpeg"
REQUIRED_TOOLS = (
    (FFMPEG, "-version"),
    (LOTTIE_TO_GIF, "-v"),
    ("gifski", "-V"),
    ("gunzip", "--version"),
    ("lottie_to_png", "-v"),
)


# --- Logging Configuration ---
# The format string for the Loguru logger.
LOGGER_FORMAT = (
    "<green>{time:MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)
DEFAULT_LOG_LEVEL = "INFO"
