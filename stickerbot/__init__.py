"""
This file marks the 'stickerbot' directory as a Python package.

The package turns images, GIFs and stickers sent to a Telegram bot into files
that can be fed to a sticker-creation bot. It is organised in layers:

- `config`: static settings, user overrides from `config.user.yaml`, and the
  user-visible reply texts.
- `domain`: value types (`Blob`, `MediaRequest`, ...), the error taxonomy and
  temporary file handling.
- `utils`: running external processes, startup tool checks, formatting.
- `services`: the image and video converters and the request dispatcher.
- `pipeline`: the Telegram front end that classifies incoming messages and
  feeds them to the dispatcher.
"""
