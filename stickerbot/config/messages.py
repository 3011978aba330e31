"""User-visible reply texts."""

MSG_HELP = "Send an image, GIF, or sticker to convert."
MSG_UNSUPPORTED = "Please send an image, GIF, or sticker."
MSG_TOO_LARGE = "File is too large."
MSG_TOO_BIG = "File too big"
MSG_NOT_AN_IMAGE = "File is not an image."
MSG_GENERIC_FAILURE = "Something went wrong."

START_COMMAND = "/start"
