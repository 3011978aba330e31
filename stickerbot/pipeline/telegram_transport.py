"""
aiogram implementation of the `Transport` the dispatcher talks to.
"""
import asyncio
import io
from pathlib import Path

from aiogram import Bot
from aiogram.exceptions import TelegramAPIError
from aiogram.types import BufferedInputFile, ReplyParameters
from loguru import logger

from ..domain.blob import NamedOutput
from ..domain.exceptions import DeliveryException
from ..domain.request import FileRef, ReplyContext
from ..services.transport import Transport

# Errors the Bot API client surfaces for failed requests and downloads.
TRANSPORT_ERRORS = (TelegramAPIError, OSError, asyncio.TimeoutError)


class TelegramTransport(Transport):
    """Resolves, downloads and sends files through an aiogram `Bot`."""

    def __init__(self, bot: Bot):
        self.bot = bot

    async def fetch_file_ref(self, file_id: str) -> FileRef:
        try:
            tg_file = await self.bot.get_file(file_id)
        except TRANSPORT_ERRORS as e:
            raise DeliveryException(f"get_file {file_id}: {e}") from e
        if not tg_file.file_path:
            raise DeliveryException(f"get_file {file_id}: no downloadable path")
        return FileRef(file_id=file_id, path=tg_file.file_path, size=tg_file.file_size or 0)

    async def download_to_memory(self, ref: FileRef) -> bytes:
        buf = io.BytesIO()
        try:
            await self.bot.download_file(ref.path, destination=buf)
        except TRANSPORT_ERRORS as e:
            raise DeliveryException(f"download {ref.path}: {e}") from e
        return buf.getvalue()

    async def download_to_path(self, ref: FileRef, path: Path):
        try:
            await self.bot.download_file(ref.path, destination=path)
        except TRANSPORT_ERRORS as e:
            raise DeliveryException(f"download {ref.path} to {path}: {e}") from e

    async def deliver(
        self,
        output: NamedOutput,
        context: ReplyContext,
        caption: str | None = None,
        detect_content_type: bool = True,
    ) -> int:
        try:
            message = await self.bot.send_document(
                context.chat_id,
                BufferedInputFile(output.data, filename=output.filename),
                caption=caption,
                reply_parameters=ReplyParameters(
                    message_id=context.message_id,
                    allow_sending_without_reply=True,
                ),
                disable_content_type_detection=None if detect_content_type else True,
            )
        except TRANSPORT_ERRORS as e:
            logger.error(f"send: {e}")
            raise DeliveryException(f"send_document {output.filename}: {e}") from e
        return message.message_id

    async def send_text(self, context: ReplyContext, text: str) -> int:
        try:
            message = await self.bot.send_message(
                context.chat_id,
                text,
                reply_parameters=ReplyParameters(message_id=context.message_id),
            )
        except TRANSPORT_ERRORS as e:
            raise DeliveryException(f"send_message: {e}") from e
        return message.message_id
