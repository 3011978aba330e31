import asyncio
import os
import sys
import time

import pytest

from stickerbot.domain.exceptions import ProcessSpawnException, ProcessTimeoutException
from stickerbot.utils import process_utils
from stickerbot.utils.process_utils import ProcessRunner, format_command


@pytest.mark.asyncio
async def test_run_feeds_stdin_and_captures_stdout():
    result = await ProcessRunner().run(
        sys.executable,
        ["-c", "import sys; sys.stdout.write(sys.stdin.read().upper())"],
        stdin=b"sticker",
    )

    assert result.success
    assert result.stdout == b"STICKER"


@pytest.mark.asyncio
async def test_non_zero_exit_is_reported_not_raised():
    result = await ProcessRunner().run(
        sys.executable,
        ["-c", "import sys; sys.stderr.write('bad input'); sys.exit(3)"],
    )

    assert not result.success
    assert result.returncode == 3
    assert "bad input" in result.stderr_tail()


@pytest.mark.asyncio
async def test_missing_binary_raises_spawn_error():
    with pytest.raises(ProcessSpawnException):
        await ProcessRunner().run("definitely-not-a-real-binary-xyz", ["-v"])


@pytest.mark.asyncio
async def test_timeout_raises_quickly():
    started = time.monotonic()
    with pytest.raises(ProcessTimeoutException):
        await ProcessRunner(timeout=0.5).run(sys.executable, ["-c", "import time; time.sleep(30)"])

    assert time.monotonic() - started < 10


@pytest.mark.skipif(os.name != "posix", reason="process table check uses POSIX signals")
@pytest.mark.asyncio
async def test_timed_out_process_is_gone_afterwards(tmp_path):
    pid_file = tmp_path / "pid"
    script = f"import os, time; open({str(pid_file)!r}, 'w').write(str(os.getpid())); time.sleep(30)"

    with pytest.raises(ProcessTimeoutException):
        await ProcessRunner(timeout=1).run(sys.executable, ["-c", script])

    pid = int(pid_file.read_text())
    with pytest.raises(ProcessLookupError):
        os.kill(pid, 0)


class _HangingProcess:
    def __init__(self):
        self.pid = 424242
        self.returncode = None
        self.killed = False
        self.waited = False

    async def communicate(self, _input=None):
        await asyncio.sleep(3600)

    async def wait(self):
        self.waited = True
        return self.returncode

    def kill(self):
        self.killed = True
        self.returncode = -9


@pytest.mark.asyncio
async def test_timeout_kills_and_reaps_child(monkeypatch):
    process = _HangingProcess()

    async def _fake_exec(*_args, **_kwargs):
        return process

    def _fake_killpg(pid, _sig):
        assert pid == process.pid
        process.kill()

    monkeypatch.setattr(process_utils.asyncio, "create_subprocess_exec", _fake_exec)
    monkeypatch.setattr(process_utils.os, "killpg", _fake_killpg, raising=False)

    with pytest.raises(ProcessTimeoutException):
        await ProcessRunner(timeout=0.05).run("ffmpeg", ["-i", "in"])

    assert process.killed
    assert process.waited
    assert process.returncode == -9


@pytest.mark.asyncio
async def test_cancellation_kills_child(monkeypatch):
    process = _HangingProcess()

    async def _fake_exec(*_args, **_kwargs):
        return process

    monkeypatch.setattr(process_utils.asyncio, "create_subprocess_exec", _fake_exec)
    monkeypatch.setattr(process_utils.os, "killpg", lambda _pid, _sig: process.kill(), raising=False)

    task = asyncio.create_task(ProcessRunner(timeout=60).run("ffmpeg", ["-i", "in"]))
    await asyncio.sleep(0.05)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert process.killed
    assert process.waited


def test_format_command_quotes_arguments():
    if os.name == "nt":
        pytest.skip("POSIX quoting only")
    assert format_command(["ffmpeg", "-i", "my file.mp4"]) == "ffmpeg -i 'my file.mp4'"
