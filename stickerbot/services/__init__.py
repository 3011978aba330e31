"""
Services Package for the Sticker Bot.

- **Converters (`ImageConverter`, `VideoConverter`):** turn downloaded bytes
  into a size-bounded `Blob`. Images are handled in-process with Pillow;
  video-like media are handed to ffmpeg or the lottie converter script.

- **Transport (`Transport`):** the abstract messaging collaborator that
  resolves, downloads and delivers files.

- **Dispatcher (`RequestDispatcher`):** routes one `MediaRequest` to the
  right converter(s), delivers the result(s) and maps failures to a single
  short reply.
"""
