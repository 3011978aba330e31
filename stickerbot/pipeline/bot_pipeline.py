"""
The long-running bot: polls Telegram, spawns one task per message, and waits
for in-flight requests on shutdown.
"""
import asyncio
from typing import Any

from aiogram import Bot, Dispatcher
from aiogram.types import Message
from loguru import logger

from ..domain.exceptions import DeliveryException
from ..domain.request import ReplyContext
from ..services.dispatcher import RequestDispatcher
from ..services.transport import Transport
from .classification import classify_message
from .telegram_transport import TelegramTransport


class StickerBotPipeline:
    """
    Wires an aiogram `Dispatcher` to the `RequestDispatcher`.

    Every message becomes its own asyncio task. Tasks are referenced in
    `_tasks` until done so that shutdown can wait for them.
    """

    def __init__(
        self,
        bot: Bot,
        dp: Dispatcher | None = None,
        transport: Transport | None = None,
        dispatcher: RequestDispatcher | None = None,
    ):
        self.bot = bot
        self.dp = dp or Dispatcher()
        self.transport = transport or TelegramTransport(bot)
        self.dispatcher = dispatcher or RequestDispatcher(self.transport)
        self._tasks: set[asyncio.Task] = set()

        self.dp.message.register(self.on_message)
        self.dp.shutdown.register(self.drain)

    @classmethod
    def from_token(cls, token: str) -> "StickerBotPipeline":
        return cls(Bot(token=token))

    async def on_message(self, message: Message):
        self._log_sender(message)
        task = asyncio.create_task(self.process_message(message))
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task):
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.opt(exception=exc).error(f"request task {task.get_name()} failed: {exc}")

    async def process_message(self, message: Any) -> ReplyContext:
        """
        Handles one message end to end: converted file(s), or exactly one text reply.

        Returns:
            The reply context, holding the ids of every message sent in response.
        """
        context = ReplyContext(chat_id=message.chat.id, message_id=message.message_id)
        classification = classify_message(message)
        reply = classification.reply
        if classification.request is not None:
            reply = await self.dispatcher.handle(classification.request, context)
        if reply:
            await self._reply_text(context, reply)
        logger.debug(f"responded: {context.responses}")
        return context

    async def _reply_text(self, context: ReplyContext, text: str):
        try:
            context.responses.append(await self.transport.send_text(context, text))
        except DeliveryException as e:
            logger.error(f"send_message: {e}")

    @staticmethod
    def _log_sender(message: Any):
        user = message.from_user
        if user is None:
            logger.info("from unknown user")
            return
        logger.info(f"from {user.first_name} {user.last_name or ''} (@{user.username or ''} {user.id})")
        chat = message.chat
        if chat.id != user.id:
            logger.info(f"chat {chat.first_name or ''} {chat.last_name or ''} (@{chat.username or ''} {chat.id})")

    async def drain(self):
        """Waits for every in-flight request task."""
        if not self._tasks:
            return
        logger.info(f"Waiting for {len(self._tasks)} in-flight request(s) to finish.")
        await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def run(self):
        me = await self.bot.get_me()
        logger.info(f"bot started: {me.full_name} (@{me.username})")
        try:
            await self.dp.start_polling(self.bot, handle_as_tasks=False)
        finally:
            await self.bot.session.close()
