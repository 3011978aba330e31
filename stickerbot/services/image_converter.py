"""
In-process image conversion: decode anything Pillow understands, fit it into
the sticker box, and encode it as lossless WebP with a PNG fallback.
"""
import io

from loguru import logger
from PIL import Image

from ..config.media import EXT_PNG, EXT_WEBP, STICKER_SIZE
from ..domain.blob import Blob
from ..domain.exceptions import NotAnImageException

# Errors Pillow raises for data it cannot identify or decode.
DECODE_ERRORS = (OSError, ValueError, SyntaxError, Image.DecompressionBombError)


def fit_within(size: tuple[int, int], bound: int) -> tuple[int, int]:
    """
    Scales `size` to the largest size fitting a `bound` x `bound` box, keeping the aspect ratio.

    Small images are scaled up, so the long edge always ends up equal to `bound`.
    """
    width, height = size
    ratio = min(bound / width, bound / height)
    return max(1, round(width * ratio)), max(1, round(height * ratio))


def _encode_webp(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="WEBP", lossless=True)
    return buf.getvalue()


def _encode_png(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


class ImageConverter:
    """
    Converts arbitrary image bytes to a sticker-sized WebP (or PNG) `Blob`.

    The work is CPU-bound and synchronous; async callers should run `convert`
    in a worker thread.
    """

    def __init__(self, max_dimension: int = STICKER_SIZE):
        self.max_dimension = max_dimension

    @staticmethod
    def decode(data: bytes) -> Image.Image:
        """
        Decodes `data`, detecting the format from its content.

        Raises:
            NotAnImageException: If the bytes are not a decodable image.
        """
        try:
            img = Image.open(io.BytesIO(data))
            img.load()
        except DECODE_ERRORS as e:
            logger.info(f"decode failed: {e}")
            raise NotAnImageException(f"decode failed: {e}") from e
        if img.mode not in ("RGB", "RGBA"):
            img = img.convert("RGBA")
        return img

    def resize(self, img: Image.Image) -> Image.Image:
        return img.resize(fit_within(img.size, self.max_dimension), Image.Resampling.LANCZOS)

    def convert(self, data: bytes) -> Blob:
        """
        Decodes, resizes and encodes one image.

        Lossless WebP is tried first. Encoders can reject some inputs (very small
        images in particular), in which case the same pixels are written as PNG.

        Returns:
            A `Blob` tagged `webp`, or `png` when the fallback was used.

        Raises:
            NotAnImageException: If `data` is not an image.
        """
        img = self.decode(data)
        logger.info(f"got img of {img.size}")
        img = self.resize(img)
        try:
            return Blob(_encode_webp(img), EXT_WEBP)
        except (OSError, ValueError, KeyError) as e:
            logger.warning(f"webp: {e}, falling back to png")
            return Blob(_encode_png(img), EXT_PNG)
