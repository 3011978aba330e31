"""
Temporary files for staging media on disk.

Some transcoders misdetect container formats when fed through a pipe, so video
and sticker bytes are written to a real file first. `temp_file()` is an async
context manager that guarantees the file is gone when the block exits, on
success, early return or error, and even if it was never written to.
"""
import asyncio
import os
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, BinaryIO

from loguru import logger

from ..config.common import TEMP_DIR, TEMP_FILE_PREFIX


class TempMediaFile:
    """
    A uniquely named file plus an open binary write handle.

    Attributes:
        path (Path): Location of the file. Unique at creation time.
        handle (BinaryIO): Write handle owned by the creator until `close()`.
    """

    def __init__(self, directory: Path | None = None, suffix: str = ""):
        if directory is not None:
            directory.mkdir(parents=True, exist_ok=True)
        fd, name = tempfile.mkstemp(prefix=TEMP_FILE_PREFIX, suffix=suffix, dir=directory)
        self.path: Path = Path(name)
        self.handle: BinaryIO = os.fdopen(fd, "wb")

    async def write(self, data: bytes):
        """Writes and flushes `data` without blocking the event loop."""
        await asyncio.to_thread(self._write_sync, data)

    def _write_sync(self, data: bytes):
        self.handle.write(data)
        self.handle.flush()

    def close(self):
        """Closes the write handle. The file itself stays until `remove()`."""
        if not self.handle.closed:
            self.handle.close()

    def remove(self):
        self.close()
        try:
            self.path.unlink()
        except FileNotFoundError:
            logger.debug(f"Temp file {self.path} was already removed.")


@asynccontextmanager
async def temp_file(suffix: str = "", directory: Path | None = None) -> AsyncIterator[TempMediaFile]:
    """
    Acquires a `TempMediaFile` and removes it when the block exits.

    Args:
        suffix: Optional file name suffix.
        directory: Where to create the file; defaults to the configured temp dir.
    """
    tmp = TempMediaFile(directory if directory is not None else TEMP_DIR, suffix)
    try:
        yield tmp
    finally:
        tmp.remove()
