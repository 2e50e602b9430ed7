"""
Image upload processing with Pillow.

The manage forms post images as base64 ``data:`` URLs. They are decoded
here, cropped and resized, and saved as WebP in default storage. Cover
images are at most 1200x630. Icons, logos and avatars are 256x256 squares.
"""

import base64
import binascii
import io
import uuid
from dataclasses import dataclass
from typing import Optional

from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from loguru import logger
from PIL import Image, ImageOps, UnidentifiedImageError

COVER_SIZE = (1200, 630)
ICON_SIZE = (256, 256)
WEBP_QUALITY = 85
MAX_UPLOAD_BYTES = 10 * 1024 * 1024

COVER = "cover"
ICON = "icon"


class ImageUploadError(ValueError):
    """Raised when an uploaded image cannot be decoded or read."""


@dataclass(frozen=True)
class CropArea:
    x: float
    y: float
    width: float
    height: float

    def box(self):
        left, top = round(self.x), round(self.y)
        return (left, top, left + round(self.width), top + round(self.height))

    @property
    def is_empty(self) -> bool:
        return round(self.width) < 1 or round(self.height) < 1


def decode_data_url(data_url: str) -> bytes:
    """Decode ``data:image/png;base64,....`` into raw bytes."""
    if not data_url or "," not in data_url:
        raise ImageUploadError("Image data is not a valid data URL")
    header, payload = data_url.split(",", 1)
    if not header.startswith("data:image/") or ";base64" not in header:
        raise ImageUploadError("Only base64 encoded images can be uploaded")
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise ImageUploadError("Image data could not be decoded") from None
    if len(data) > MAX_UPLOAD_BYTES:
        raise ImageUploadError("Image is larger than 10 MB")
    return data


def open_image(data: bytes) -> Image.Image:
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError) as e:
        raise ImageUploadError("Uploaded file is not a readable image") from e
    image = ImageOps.exif_transpose(image)
    if image.mode not in ("RGB", "RGBA"):
        image = image.convert("RGBA" if "A" in image.getbands() else "RGB")
    return image


def process_image(data: bytes, kind: str = COVER, crop: Optional[CropArea] = None) -> bytes:
    """
    Crop, resize and re-encode an image as WebP.

    Covers fill 1200x630 when the source is big enough and are never
    enlarged. Icons are always cropped and scaled to 256x256.
    """
    image = open_image(data)
    if crop is not None:
        if crop.is_empty:
            raise ImageUploadError("Image crop area is invalid")
        image = image.crop(crop.box())

    if kind == ICON:
        image = ImageOps.fit(image, ICON_SIZE, Image.LANCZOS)
    elif image.width >= COVER_SIZE[0] and image.height >= COVER_SIZE[1]:
        image = ImageOps.fit(image, COVER_SIZE, Image.LANCZOS)
    else:
        image.thumbnail(COVER_SIZE, Image.LANCZOS)

    out = io.BytesIO()
    image.save(out, format="WEBP", quality=WEBP_QUALITY)
    return out.getvalue()


def save_image(data_url: str, kind: str = COVER, crop: Optional[CropArea] = None) -> str:
    """Decode, process and store an uploaded image. Returns the stored filename."""
    processed = process_image(decode_data_url(data_url), kind=kind, crop=crop)
    filename = default_storage.save(f"{kind}-{uuid.uuid4()}.webp", ContentFile(processed))
    logger.info("Saved uploaded image", filename=filename, kind=kind, size=len(processed))
    return filename


def delete_image(filename: Optional[str]):
    if not filename:
        return
    if default_storage.exists(filename):
        default_storage.delete(filename)
        logger.debug("Deleted image", filename=filename)


def image_url(filename: Optional[str]) -> Optional[str]:
    if not filename:
        return None
    return default_storage.url(filename)


def resolve_updated_image(
    current: Optional[str],
    upload: Optional[str],
    existing: Optional[str],
    kind: str = COVER,
    crop: Optional[CropArea] = None,
) -> Optional[str]:
    """
    Work out the image filename after an edit.

    A new upload replaces (and deletes) the current file. A posted
    ``existing`` filename keeps the image. With neither, the current image
    is removed.
    """
    if upload:
        filename = save_image(upload, kind=kind, crop=crop)
        if current and current != filename:
            delete_image(current)
        return filename
    if existing:
        return existing
    if current:
        delete_image(current)
    return None
