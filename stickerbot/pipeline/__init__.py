"""
This package contains the Telegram front end of the Sticker Bot.

The pipeline receives messages, classifies them into a `MediaRequest` (or a
direct text reply), and runs each request as its own asyncio task so that a
slow conversion never blocks new messages.
"""
