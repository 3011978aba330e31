"""
Configuration Package for the Sticker Bot.

This package centralizes the static configuration settings for the application,
so that limits, external command shapes and reply texts can be adjusted without
touching the conversion logic.

This package includes settings for:
- Logging format, user-overridable tool paths, temp directory and bot token.
- Size limits and the exact argument shapes passed to ffmpeg and the lottie
  converter script.
- The short text replies shown to users.
"""
