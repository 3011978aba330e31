"""
The messaging collaborator used by the dispatcher.

The dispatcher only depends on this interface, so conversions can be exercised
without Telegram. `stickerbot.pipeline.telegram_transport` provides the
aiogram implementation.
"""
from abc import ABC, abstractmethod
from pathlib import Path

from ..domain.blob import NamedOutput
from ..domain.request import FileRef, ReplyContext


class Transport(ABC):
    """
    Resolves, downloads and delivers files for one bot.

    Implementations raise `DeliveryException` for transport failures.
    """

    @abstractmethod
    async def fetch_file_ref(self, file_id: str) -> FileRef:
        """Resolves a file id to a downloadable reference with its reported size."""

    @abstractmethod
    async def download_to_memory(self, ref: FileRef) -> bytes:
        """Downloads the whole file into memory."""

    @abstractmethod
    async def download_to_path(self, ref: FileRef, path: Path):
        """Downloads the file to `path`, overwriting it."""

    @abstractmethod
    async def deliver(
        self,
        output: NamedOutput,
        context: ReplyContext,
        caption: str | None = None,
        detect_content_type: bool = True,
    ) -> int:
        """
        Sends `output` as a document replying to the request message.

        Returns:
            The id of the sent message.
        """

    @abstractmethod
    async def send_text(self, context: ReplyContext, text: str) -> int:
        """Sends a plain-text reply. Returns the id of the sent message."""
