"""
Defines custom exception types for the Sticker Bot application.

Each exception may carry a `user_message`: a short text that can be shown to
the user as-is. The dispatcher replies with that text, or with a generic
failure message when it is None. The exception's own string is the detailed
internal cause and only goes to the log.

All custom exceptions inherit from the base `StickerBotException`.
"""

from ..config.messages import MSG_NOT_AN_IMAGE


class StickerBotException(Exception):
    """Base class for all custom exceptions in the Sticker Bot application."""

    default_user_message: str | None = None

    def __init__(self, message: str = "", user_message: str | None = None):
        super().__init__(message or self.__class__.__name__)
        self.user_message = user_message if user_message is not None else self.default_user_message


# --- Policy ---
class FileTooLargeException(StickerBotException):
    """
    Raised when the size reported by Telegram exceeds the input limit.

    Detected before any download, so it is cheap. The raise site decides the
    user message.
    """

    pass


# --- Conversion ---
class ConversionException(StickerBotException):
    """Base class for failures while converting media."""

    pass


class NotAnImageException(ConversionException):
    """Raised when the input bytes cannot be decoded as an image."""

    default_user_message = MSG_NOT_AN_IMAGE


class TranscodeFailedException(ConversionException):
    """
    Raised when an external transcoder exits with a non-zero status.

    This is fatal for the request. The exit status and stderr tail are kept for
    the log; the user only sees the generic message.
    """

    def __init__(self, message: str = "", returncode: int | None = None, stderr: bytes = b""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


# --- External processes ---
class ProcessException(StickerBotException):
    """Base class for failures to run an external process to completion."""

    pass


class ProcessTimeoutException(ProcessException):
    """Raised when an external process exceeds its deadline and has been killed."""

    pass


class ProcessSpawnException(ProcessException):
    """Raised when an external process cannot be started (missing binary, permissions)."""

    pass


# --- Transport ---
class DeliveryException(StickerBotException):
    """Raised by the messaging transport when sending a file or fetching/downloading one fails."""

    pass


# --- Startup ---
class ToolCheckException(StickerBotException):
    """Raised at startup when a required external tool cannot be executed."""

    pass
