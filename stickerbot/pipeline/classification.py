"""
Maps an incoming Telegram message to the work the dispatcher should do.

Only attribute access is used, so any object shaped like an aiogram `Message`
can be classified.
"""
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Any, Sequence

from loguru import logger

from ..config.media import EXT_GIF, STICKER_SIZE
from ..config.messages import MSG_HELP, MSG_UNSUPPORTED, START_COMMAND
from ..domain.blob import safe_base_name
from ..domain.request import MediaRequest, Operation, StickerFormat


@dataclass(frozen=True)
class Classification:
    """Exactly one of `request` (media to convert) or `reply` (text to send) is set."""

    request: MediaRequest | None = None
    reply: str | None = None


def sticker_format(sticker: Any) -> StickerFormat:
    if sticker.is_video:
        return StickerFormat.VIDEO
    if sticker.is_animated:
        return StickerFormat.ANIMATED
    return StickerFormat.STATIC


def pick_photo(sizes: Sequence[Any]) -> Any:
    """The smallest size reaching the sticker size on either side, else the largest available."""
    return next((ph for ph in sizes if ph.width >= STICKER_SIZE or ph.height >= STICKER_SIZE), sizes[-1])


def is_gif_name(file_name: str | None) -> bool:
    return bool(file_name) and PurePosixPath(file_name).suffix.lower() == f".{EXT_GIF}"


def classify_message(message: Any) -> Classification:
    """
    Decides how to handle `message`.

    - animation: video. Telegram also fills `document` for animations, so
      this is checked first.
    - document: image, or video when named `*.gif`
    - photo: image
    - sticker: sticker in its format, captioned with its emoji
    - `/start`: help text; anything else: a nudge to send media
    """
    if message.animation:
        ani = message.animation
        logger.info(
            f"got animation {ani.file_name or ''} of {ani.width} x {ani.height}, {ani.duration} s, {ani.file_size} B"
        )
        return Classification(
            request=MediaRequest(ani.file_id, ani.file_size or 0, Operation.video(), safe_base_name(ani.file_name))
        )

    if message.document:
        doc = message.document
        logger.info(f"got document {doc.file_name or ''} of {doc.file_size} bytes")
        operation = Operation.video() if is_gif_name(doc.file_name) else Operation.image()
        return Classification(
            request=MediaRequest(doc.file_id, doc.file_size or 0, operation, safe_base_name(doc.file_name))
        )

    if message.photo:
        ph = pick_photo(message.photo)
        logger.info(f"got photo of {ph.width} x {ph.height}, {ph.file_size} B")
        return Classification(request=MediaRequest(ph.file_id, ph.file_size or 0, Operation.image()))

    if message.sticker:
        sti = message.sticker
        fmt = sticker_format(sti)
        logger.info(
            f"got {fmt.value} sticker in {sti.set_name or ''} {sti.emoji or ''} "
            f"of {sti.width} x {sti.height}, {sti.file_size} B"
        )
        return Classification(
            request=MediaRequest(
                sti.file_id,
                sti.file_size or 0,
                Operation.sticker(fmt),
                safe_base_name(sti.set_name),
                sti.emoji or None,
            )
        )

    if message.text == START_COMMAND:
        return Classification(reply=MSG_HELP)

    logger.info(f"invalid message {message.message_id} in chat {message.chat.id}")
    return Classification(reply=MSG_UNSUPPORTED)
