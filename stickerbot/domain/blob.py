"""
Defines `Blob`, the unit of output handed from converters to the transport.
"""
from dataclasses import dataclass
from pathlib import PurePosixPath, PureWindowsPath

from loguru import logger

from ..config.media import KNOWN_EXTENSIONS

DEFAULT_OUTPUT_BASE = "out"


@dataclass(frozen=True)
class NamedOutput:
    """File contents together with the file name it should be sent under."""

    filename: str
    data: bytes


def safe_base_name(base: str | None) -> str | None:
    """
    Reduces a user-controlled name hint to a bare file name.

    Directory components of either path flavour are dropped, so the result can
    never point outside the name it is used for. Empty results become None.
    """
    if not base:
        return None
    name = PureWindowsPath(PurePosixPath(base).name).name.strip()
    if name in ("", ".", ".."):
        return None
    return name


@dataclass(frozen=True)
class Blob:
    """
    Immutable converted media: raw bytes plus the extension of their format.

    Attributes:
        data: Encoded file contents.
        ext: One of the known output extensions (webp, png, webm, gif).
    """

    data: bytes
    ext: str

    def __post_init__(self):
        if self.ext not in KNOWN_EXTENSIONS:
            raise ValueError(f"Unknown output extension: {self.ext!r}")

    def __len__(self) -> int:
        return len(self.data)

    def into_named_output(self, base: str | None = None) -> NamedOutput:
        """
        Names the blob `<base>.<ext>`, or `out.<ext>` without a usable base.

        Args:
            base: Optional name hint, e.g. the original document name or sticker set.

        Returns:
            A `NamedOutput` ready for the transport.
        """
        out_name = f"{safe_base_name(base) or DEFAULT_OUTPUT_BASE}.{self.ext}"
        logger.info(f"sending {len(self.data)} B as {out_name}")
        return NamedOutput(filename=out_name, data=self.data)
