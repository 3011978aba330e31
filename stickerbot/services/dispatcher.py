"""
This module defines the RequestDispatcher, which turns one `MediaRequest` into
delivered files or a single short text reply.

Routing by operation:
- Image: download to memory, convert in a worker thread, deliver.
- Video: download to a temp file, transcode to webm, deliver.
- Sticker(static): deliver the downloaded webp unchanged.
- Sticker(animated): download to a temp file, convert to gif, deliver.
- Sticker(video): deliver the webm unchanged and, concurrently, a gif
  conversion of it. Both paths always run to completion; if either fails the
  request fails, and when both fail the webm path's error is reported.
"""
import asyncio
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Sequence

from loguru import logger

from ..config.media import EXT_WEBM, EXT_WEBP, MAX_INPUT_SIZE
from ..config.messages import MSG_GENERIC_FAILURE, MSG_TOO_BIG, MSG_TOO_LARGE
from ..domain.blob import Blob
from ..domain.exceptions import FileTooLargeException, StickerBotException
from ..domain.request import FileRef, MediaRequest, OperationKind, ReplyContext, StickerFormat
from ..domain.temp_models import temp_file
from ..utils.format_utils import formatted_size
from .image_converter import ImageConverter
from .transport import Transport
from .video_converter import VideoConverter


class RequestDispatcher:
    """
    Routes media requests to the converters and the transport.

    Holds no per-request state, so one instance serves every concurrent request.
    """

    def __init__(
        self,
        transport: Transport,
        image_converter: ImageConverter | None = None,
        video_converter: VideoConverter | None = None,
        max_input_size: int = MAX_INPUT_SIZE,
    ):
        self.transport = transport
        self.image_converter = image_converter or ImageConverter()
        self.video_converter = video_converter or VideoConverter()
        self.max_input_size = max_input_size

    async def handle(self, request: MediaRequest, context: ReplyContext) -> str | None:
        """
        Processes a request and reports its outcome.

        Returns:
            None when every output was delivered, otherwise the text to reply with:
            the error's user message, or the generic failure message.
        """
        try:
            await self.process(request, context)
        except StickerBotException as e:
            logger.error(f"handle {request.operation}: {type(e).__name__}: {e}")
            return e.user_message or MSG_GENERIC_FAILURE
        except Exception:
            logger.exception(f"handle {request.operation}: unexpected error")
            return MSG_GENERIC_FAILURE
        return None

    async def process(self, request: MediaRequest, context: ReplyContext):
        """
        Runs the conversion and delivery for `request`, raising on failure.

        The size limit is enforced twice before anything is downloaded: on the
        size declared with the message, and on the size reported when the file
        is resolved.
        """
        if request.declared_size > self.max_input_size:
            raise FileTooLargeException(
                f"declared size {request.declared_size} exceeds {self.max_input_size}",
                user_message=MSG_TOO_LARGE,
            )
        ref = await self.transport.fetch_file_ref(request.file_id)
        if ref.size > self.max_input_size:
            raise FileTooLargeException(
                f"resolved size {ref.size} exceeds {self.max_input_size}",
                user_message=MSG_TOO_BIG,
            )

        kind = request.operation.kind
        if kind is OperationKind.IMAGE:
            await self._send(await self._handle_image(ref), request, context)
        elif kind is OperationKind.VIDEO:
            await self._send(await self._handle_video(ref), request, context)
        else:
            await self._handle_sticker(ref, request.operation.sticker_format, request, context)

    # --- Downloads ---

    async def _download_mem(self, ref: FileRef) -> bytes:
        data = await self.transport.download_to_memory(ref)
        logger.info(f"download_mem: {len(data)} B")
        return data

    @asynccontextmanager
    async def _download_tmp(self, ref: FileRef) -> AsyncIterator[Path]:
        """Downloads into a temp file that lives until the block exits."""
        async with temp_file() as tmp:
            tmp.close()
            await self.transport.download_to_path(ref, tmp.path)
            logger.info(f"download_tmp: {formatted_size(ref.size)}")
            yield tmp.path

    # --- Routing ---

    async def _handle_image(self, ref: FileRef) -> Blob:
        data = await self._download_mem(ref)
        return await asyncio.to_thread(self.image_converter.convert, data)

    async def _handle_video(self, ref: FileRef) -> Blob:
        async with self._download_tmp(ref) as path:
            return await self.video_converter.convert_clip(path)

    async def _handle_sticker(
        self,
        ref: FileRef,
        fmt: StickerFormat,
        request: MediaRequest,
        context: ReplyContext,
    ):
        if fmt is StickerFormat.STATIC:
            await self._send(Blob(await self._download_mem(ref), EXT_WEBP), request, context, raw=True)
        elif fmt is StickerFormat.ANIMATED:
            async with self._download_tmp(ref) as path:
                blob = await self.video_converter.convert_animation_file(path)
            await self._send(blob, request, context, raw=True)
        else:
            data = await self._download_mem(ref)
            results = await asyncio.gather(
                self._send(Blob(data, EXT_WEBM), request, context, raw=True),
                self._send_as_gif(data, request, context),
                return_exceptions=True,
            )
            self._raise_first_failure(results, ("webm", "gif"))

    async def _send_as_gif(self, data: bytes, request: MediaRequest, context: ReplyContext):
        blob = await self.video_converter.convert_video_to_gif(data)
        await self._send(blob, request, context, raw=True)

    @staticmethod
    def _raise_first_failure(results: Sequence[object], labels: Sequence[str]):
        """Logs every failed path and re-raises the first one in path order."""
        failures = [(label, r) for label, r in zip(labels, results) if isinstance(r, BaseException)]
        for label, error in failures:
            logger.error(f"{label} path failed: {type(error).__name__}: {error}")
        if failures:
            raise failures[0][1]

    # --- Delivery ---

    async def _send(self, blob: Blob, request: MediaRequest, context: ReplyContext, raw: bool = False):
        """
        Delivers one blob and records the sent message id.

        Args:
            raw: Disable content type detection, so sticker outputs arrive as plain files.
        """
        output = blob.into_named_output(request.base_name)
        message_id = await self.transport.deliver(
            output,
            context,
            caption=request.caption,
            detect_content_type=not raw,
        )
        context.responses.append(message_id)
