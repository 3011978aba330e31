"""
Request-side domain models: what to convert and where to send the result.
"""
from dataclasses import dataclass, field
from enum import Enum


class OperationKind(Enum):
    IMAGE = "image"
    VIDEO = "video"
    STICKER = "sticker"


class StickerFormat(Enum):
    STATIC = "static"
    ANIMATED = "animated"
    VIDEO = "video"


@dataclass(frozen=True)
class Operation:
    """
    The conversion selected for a request: Image, Video, or Sticker(format).

    Use the `image()`, `video()` and `sticker(fmt)` constructors.
    """

    kind: OperationKind
    sticker_format: StickerFormat | None = None

    def __post_init__(self):
        if (self.kind is OperationKind.STICKER) != (self.sticker_format is not None):
            raise ValueError("sticker_format must be set exactly for sticker operations")

    @classmethod
    def image(cls) -> "Operation":
        return cls(OperationKind.IMAGE)

    @classmethod
    def video(cls) -> "Operation":
        return cls(OperationKind.VIDEO)

    @classmethod
    def sticker(cls, fmt: StickerFormat) -> "Operation":
        return cls(OperationKind.STICKER, fmt)

    def __str__(self) -> str:
        if self.sticker_format is not None:
            return f"{self.kind.value}({self.sticker_format.value})"
        return self.kind.value


@dataclass(frozen=True)
class FileRef:
    """A downloadable file as resolved by the transport: remote path and reported size."""

    file_id: str
    path: str
    size: int


@dataclass(frozen=True)
class MediaRequest:
    """
    One unit of work for the dispatcher.

    Attributes:
        file_id: Transport identifier of the media to fetch.
        declared_size: Size reported with the incoming message, in bytes.
        operation: The conversion to perform.
        base_name: Optional hint used only to name the output file.
        caption: Optional caption attached to every delivered file.
    """

    file_id: str
    declared_size: int
    operation: Operation
    base_name: str | None = None
    caption: str | None = None


@dataclass
class ReplyContext:
    """
    Where replies go, plus the ids of every message sent in response.

    Owned by the single task handling the request.
    """

    chat_id: int | str
    message_id: int
    responses: list[int] = field(default_factory=list)
