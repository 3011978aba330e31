from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable

from PIL import Image

from stickerbot.domain.blob import NamedOutput
from stickerbot.domain.exceptions import DeliveryException
from stickerbot.domain.request import FileRef, ReplyContext
from stickerbot.services.transport import Transport
from stickerbot.utils.process_utils import ProcessResult


def make_image_bytes(size=(64, 48), fmt="PNG", mode="RGB", color=(200, 30, 30)) -> bytes:
    buf = io.BytesIO()
    Image.new(mode, size, color).save(buf, format=fmt)
    return buf.getvalue()


def ok(stdout: bytes = b"", stderr: bytes = b"") -> ProcessResult:
    return ProcessResult(stdout=stdout, stderr=stderr, returncode=0)


def failed(returncode: int = 1, stderr: bytes = b"boom") -> ProcessResult:
    return ProcessResult(stdout=b"", stderr=stderr, returncode=returncode)


class FakeRunner:
    """Returns queued results in order and records every call.

    A queued item may be a ProcessResult, an exception to raise, or a callable
    `(command, args) -> ProcessResult` that runs while the call is in flight.
    """

    def __init__(self, *results):
        self.results = list(results)
        self.calls: list[tuple[str, list[str]]] = []

    async def run(self, command, args, stdin=None) -> ProcessResult:
        args = [str(a) for a in args]
        self.calls.append((command, args))
        result = self.results.pop(0)
        if callable(result):
            result = result(command, args)
        if isinstance(result, BaseException):
            raise result
        return result


@dataclass
class Delivered:
    filename: str
    data: bytes
    caption: str | None
    detect_content_type: bool


class FakeTransport(Transport):
    def __init__(
        self,
        files: dict[str, bytes] | None = None,
        resolved_sizes: dict[str, int] | None = None,
        fail_deliver: dict[str, DeliveryException] | None = None,
        deliver_hook: Callable[[NamedOutput], Awaitable[None]] | None = None,
        fail_text: bool = False,
    ):
        self.files = files or {}
        self.resolved_sizes = resolved_sizes or {}
        self.fail_deliver = fail_deliver or {}
        self.deliver_hook = deliver_hook
        self.fail_text = fail_text
        self.fetched: list[str] = []
        self.downloads: list[tuple[str, str]] = []
        self.delivered: list[Delivered] = []
        self.texts: list[str] = []
        self._next_id = 100

    def _new_id(self) -> int:
        self._next_id += 1
        return self._next_id

    async def fetch_file_ref(self, file_id: str) -> FileRef:
        self.fetched.append(file_id)
        data = self.files[file_id]
        return FileRef(file_id, f"files/{file_id}", self.resolved_sizes.get(file_id, len(data)))

    async def download_to_memory(self, ref: FileRef) -> bytes:
        self.downloads.append(("mem", ref.file_id))
        return self.files[ref.file_id]

    async def download_to_path(self, ref: FileRef, path: Path):
        self.downloads.append(("path", ref.file_id))
        Path(path).write_bytes(self.files[ref.file_id])

    async def deliver(self, output, context, caption=None, detect_content_type=True) -> int:
        if self.deliver_hook is not None:
            await self.deliver_hook(output)
        ext = output.filename.rsplit(".", 1)[-1]
        if ext in self.fail_deliver:
            raise self.fail_deliver[ext]
        self.delivered.append(Delivered(output.filename, output.data, caption, detect_content_type))
        return self._new_id()

    async def send_text(self, context: ReplyContext, text: str) -> int:
        if self.fail_text:
            raise DeliveryException("send_message failed")
        self.texts.append(text)
        return self._new_id()

    def extensions(self) -> list[str]:
        return [d.filename.rsplit(".", 1)[-1] for d in self.delivered]
