"""Image decoding and cropping for image elements.

Images arrive as data URIs. Only PNG and JPEG payloads are embedded;
everything else is rejected with an ImageEmbedError so the page renderer
can skip the element and carry on.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, Union

from PIL import Image, UnidentifiedImageError

from ..schemas.layout import Element, ImageElement

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = {
    "image/png": "PNG",
    "image/jpeg": "JPEG",
    "image/jpg": "JPEG",
}

# Pillow format name -> payload family; cameras often save JPEGs as MPO
EMBEDDABLE_FORMATS = {
    "PNG": "PNG",
    "JPEG": "JPEG",
    "MPO": "JPEG",
}


class ImageEmbedError(ValueError):
    """Raised when an image element cannot be embedded."""


class UnsupportedImageError(ImageEmbedError):
    """Data URI carries a MIME type other than PNG or JPEG."""


class CorruptImageError(ImageEmbedError):
    """Payload is not valid base64 or not a decodable image."""


class MalformedCropError(ImageEmbedError):
    """Crop window is empty after clamping to the source bounds."""


@dataclass(frozen=True)
class DataUri:
    """Parsed data URI.

    Attributes:
        mime_type: Lower-cased MIME type (e.g. "image/png")
        payload: Decoded bytes
    """
    mime_type: str
    payload: bytes


@dataclass(frozen=True)
class CropBox:
    """Clamped crop window in source pixels (PIL box order)."""
    left: int
    top: int
    right: int
    bottom: int

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top

    def as_tuple(self) -> Tuple[int, int, int, int]:
        return (self.left, self.top, self.right, self.bottom)


@dataclass(frozen=True)
class PreparedImage:
    """Image bytes ready for embedding.

    Attributes:
        data: PNG or JPEG bytes (already cropped)
        width_px: Pixel width of data
        height_px: Pixel height of data
    """
    data: bytes
    width_px: int
    height_px: int


def parse_data_uri(src: str) -> DataUri:
    """Parse a base64 data URI holding a PNG or JPEG image.

    Args:
        src: data:<mime>;base64,<payload>

    Returns:
        DataUri with decoded payload

    Raises:
        UnsupportedImageError: If the MIME type is not PNG or JPEG
        CorruptImageError: If the URI or its base64 payload is malformed
    """
    if not src or not src.startswith("data:"):
        raise CorruptImageError("Image source is not a data URI")

    header, sep, encoded = src[len("data:"):].partition(",")
    if not sep:
        raise CorruptImageError("Data URI has no payload separator")

    params = [part.strip() for part in header.split(";")]
    mime_type = params[0].lower()
    if mime_type not in ALLOWED_MIME_TYPES:
        raise UnsupportedImageError(f"Unsupported image type '{mime_type or 'unknown'}'")
    if "base64" not in (p.lower() for p in params[1:]):
        raise CorruptImageError("Data URI payload is not base64 encoded")

    try:
        payload = base64.b64decode("".join(encoded.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise CorruptImageError(f"Invalid base64 payload: {e}") from e

    if not payload:
        raise CorruptImageError("Empty image payload")

    return DataUri(mime_type=mime_type, payload=payload)


def clamp_crop(
    crop_x: Optional[float],
    crop_y: Optional[float],
    crop_width: Optional[float],
    crop_height: Optional[float],
    bound_width: float,
    bound_height: float,
) -> CropBox:
    """Clamp a crop window into [0, bound_width] x [0, bound_height].

    Missing values default to the full source. Values outside the bounds
    are clamped, never raised on.

    Raises:
        MalformedCropError: If nothing of the window remains inside the bounds
    """
    values = (crop_x, crop_y, crop_width, crop_height)
    if any(v is not None and not math.isfinite(v) for v in values):
        raise MalformedCropError(f"Non-finite crop window {values}")

    left = _clamp(crop_x or 0.0, 0.0, bound_width)
    top = _clamp(crop_y or 0.0, 0.0, bound_height)
    width = bound_width if crop_width is None else crop_width
    height = bound_height if crop_height is None else crop_height
    right = _clamp(left + min(width, bound_width), left, bound_width)
    bottom = _clamp(top + min(height, bound_height), top, bound_height)

    box = CropBox(
        left=int(round(left)),
        top=int(round(top)),
        right=int(round(right)),
        bottom=int(round(bottom)),
    )
    if box.width <= 0 or box.height <= 0:
        raise MalformedCropError(f"Empty crop window {values} within {bound_width}x{bound_height}")
    return box


def prepare_image(element: ImageElement) -> PreparedImage:
    """Decode, validate and crop an image element's source.

    Raises:
        ImageEmbedError: If the image cannot be embedded
    """
    uri = parse_data_uri(element.src)
    expected_format = ALLOWED_MIME_TYPES[uri.mime_type]

    try:
        with Image.open(io.BytesIO(uri.payload)) as img:
            img.load()
            if img.format not in EMBEDDABLE_FORMATS:
                raise CorruptImageError(f"Payload is {img.format}, not PNG or JPEG")
            if EMBEDDABLE_FORMATS[img.format] != expected_format:
                logger.debug(
                    f"Image '{element.id}' declared {uri.mime_type} but holds {img.format}"
                )

            if not element.has_crop:
                if img.format == "MPO":
                    # Multi-picture JPEG: embed the primary frame only
                    buf = io.BytesIO()
                    img.convert("RGB").save(buf, format="JPEG")
                    return PreparedImage(data=buf.getvalue(), width_px=img.width, height_px=img.height)
                return PreparedImage(data=uri.payload, width_px=img.width, height_px=img.height)

            bound_width = min(element.original_width or img.width, img.width)
            bound_height = min(element.original_height or img.height, img.height)
            box = clamp_crop(
                element.crop_x,
                element.crop_y,
                element.crop_width,
                element.crop_height,
                bound_width,
                bound_height,
            )
            cropped = img.crop(box.as_tuple())
            if cropped.mode not in ("1", "L", "LA", "P", "RGB", "RGBA"):
                cropped = cropped.convert("RGB")

            buf = io.BytesIO()
            cropped.save(buf, format="PNG")
            return PreparedImage(data=buf.getvalue(), width_px=box.width, height_px=box.height)

    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError) as e:
        raise CorruptImageError(f"Cannot decode image: {e}") from e


PreparedResult = Union[PreparedImage, ImageEmbedError]


class ImageDecoder:
    """Decodes all image elements of a page before it is drawn."""

    def __init__(self, max_workers: int = 1) -> None:
        """Initialize decoder.

        Args:
            max_workers: Parallel decoding threads (1 = sequential)
        """
        self.max_workers = max_workers

    def decode_page(self, elements: Sequence[Element]) -> Dict[int, PreparedResult]:
        """Decode every image element of a page.

        Failures are returned in place of the image rather than raised.

        Returns:
            Mapping of element position to PreparedImage or the ImageEmbedError
        """
        images: List[Tuple[int, ImageElement]] = [
            (index, e) for index, e in enumerate(elements) if isinstance(e, ImageElement)
        ]
        if not images:
            return {}

        def run_one(item: Tuple[int, ImageElement]) -> Tuple[int, PreparedResult]:
            index, element = item
            try:
                return index, prepare_image(element)
            except ImageEmbedError as e:
                return index, e
            except Exception as e:
                logger.debug(f"Unexpected error decoding image '{element.id}'", exc_info=True)
                return index, CorruptImageError(f"Cannot decode image: {e}")

        if self.max_workers <= 1 or len(images) == 1:
            return dict(run_one(item) for item in images)

        logger.debug(f"Decoding {len(images)} images with {self.max_workers} workers")
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            return dict(pool.map(run_one, images))


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))
