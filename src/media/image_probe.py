import io

from PIL import Image, UnidentifiedImageError

from src.specs.common.errors import ValidationError
from src.specs.media.upload_events import ImageInfo


def probe_image(data: bytes) -> ImageInfo:
    """Check that `data` decodes as an image and report its type and size.

    Raises ValidationError for anything Pillow cannot identify.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            fmt = img.format
            width, height = img.size
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as exc:
        raise ValidationError(
            "Only image files can be used as a cover image.",
            details={"error": str(exc)},
        ) from exc
    mime = Image.MIME.get(fmt or "", "application/octet-stream")
    return ImageInfo(mimeType=mime, width=width, height=height)
