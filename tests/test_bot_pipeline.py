import asyncio
from types import SimpleNamespace

import pytest
from loguru import logger

from stickerbot.domain.request import ReplyContext
from stickerbot.pipeline.bot_pipeline import StickerBotPipeline
from stickerbot.services.dispatcher import RequestDispatcher
from tests.fakes import FakeTransport, make_image_bytes


def _message(message_id=5, **kwargs):
    fields = dict(
        document=None,
        photo=None,
        animation=None,
        sticker=None,
        text=None,
        message_id=message_id,
        chat=SimpleNamespace(id=1, first_name="A", last_name=None, username="a"),
        from_user=SimpleNamespace(id=1, first_name="A", last_name=None, username="a"),
    )
    fields.update(kwargs)
    return SimpleNamespace(**fields)


def _pipeline(transport, dispatcher=None) -> StickerBotPipeline:
    return StickerBotPipeline(bot=SimpleNamespace(), transport=transport, dispatcher=dispatcher)


@pytest.mark.asyncio
async def test_start_command_replies_with_help():
    transport = FakeTransport()

    context = await _pipeline(transport).process_message(_message(text="/start"))

    assert transport.texts == ["Send an image, GIF, or sticker to convert."]
    assert context.responses == [101]


@pytest.mark.asyncio
async def test_converted_image_needs_no_text_reply():
    transport = FakeTransport(files={"d": make_image_bytes()})
    doc = SimpleNamespace(file_id="d", file_name="a.png", file_size=100)

    context = await _pipeline(transport).process_message(_message(document=doc))

    assert transport.texts == []
    assert [d.filename for d in transport.delivered] == ["a.png.webp"]
    assert context.responses == [101]


@pytest.mark.asyncio
async def test_failure_is_answered_with_one_text():
    transport = FakeTransport(files={"d": b"nope"})
    doc = SimpleNamespace(file_id="d", file_name="a.png", file_size=4)

    await _pipeline(transport).process_message(_message(document=doc))

    assert transport.texts == ["File is not an image."]


@pytest.mark.asyncio
async def test_text_reply_failure_is_not_raised():
    transport = FakeTransport(fail_text=True)

    context = await _pipeline(transport).process_message(_message(text="hi"))

    assert context.responses == []


class SlowDispatcher(RequestDispatcher):
    def __init__(self, transport, release: asyncio.Event):
        super().__init__(transport)
        self.release = release
        self.handled = []

    async def handle(self, request, context: ReplyContext):
        await self.release.wait()
        self.handled.append(request.file_id)
        return None


@pytest.mark.asyncio
async def test_messages_run_as_tasks_and_drain_waits():
    release = asyncio.Event()
    transport = FakeTransport()
    dispatcher = SlowDispatcher(transport, release)
    pipeline = _pipeline(transport, dispatcher)
    photo = [SimpleNamespace(file_id="p1", width=600, height=600, file_size=10)]
    photo2 = [SimpleNamespace(file_id="p2", width=600, height=600, file_size=10)]

    await pipeline.on_message(_message(photo=photo))
    await pipeline.on_message(_message(photo=photo2, message_id=6))

    assert len(pipeline._tasks) == 2
    assert dispatcher.handled == []

    release.set()
    await asyncio.wait_for(pipeline.drain(), timeout=2)

    assert sorted(dispatcher.handled) == ["p1", "p2"]
    assert not pipeline._tasks


class ExplodingDispatcher(RequestDispatcher):
    async def handle(self, request, context: ReplyContext):
        raise RuntimeError("handler exploded")


@pytest.mark.asyncio
async def test_task_failure_is_logged():
    records = []
    sink_id = logger.add(records.append, level="ERROR", format="{message}")
    transport = FakeTransport()
    pipeline = _pipeline(transport, ExplodingDispatcher(transport))
    photo = [SimpleNamespace(file_id="p1", width=600, height=600, file_size=10)]
    try:
        await pipeline.on_message(_message(photo=photo))
        await asyncio.wait_for(pipeline.drain(), timeout=2)
    finally:
        logger.remove(sink_id)

    assert not pipeline._tasks
    assert any("handler exploded" in str(record) for record in records)
