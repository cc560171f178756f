"""Shared fixtures: sample images, layouts and record data."""

import base64
import io
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest
from PIL import Image

from jobcard_pdf.core.styles import FontResolver
from jobcard_pdf.schemas.record import RecordData


def image_bytes(size: Tuple[int, int] = (40, 20), fmt: str = "PNG", color: str = "red") -> bytes:
    """Encode a solid-color image with Pillow."""
    img = Image.new("RGB", size, color)
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


def data_uri(payload: bytes, mime_type: str = "image/png") -> str:
    """Wrap bytes into a base64 data URI."""
    return f"data:{mime_type};base64,{base64.b64encode(payload).decode('ascii')}"


class StubFont:
    """Font stand-in whose glyphs are all half the font size wide."""

    def text_length(self, text: str, fontsize: float = 11) -> float:
        return len(text) * fontsize * 0.5


class RecordingSurface:
    """PageSurface that records draw calls instead of drawing."""

    def __init__(self, height: float = 841.89) -> None:
        self.height = height
        self.texts: List[Dict[str, Any]] = []
        self.lines: List[Tuple[float, float, float, float]] = []
        self.line_styles: List[Dict[str, Any]] = []
        self.images: List[Dict[str, Any]] = []
        self.calls: List[str] = []

    def draw_text(self, text, x, baseline, font, size, color) -> None:
        self.calls.append("text")
        self.texts.append(
            {"text": text, "x": x, "baseline": baseline, "font": font, "size": size, "color": color}
        )

    def draw_line(self, x1, y1, x2, y2, color, width=1.0) -> None:
        self.calls.append("line")
        self.lines.append((x1, y1, x2, y2))
        self.line_styles.append({"color": color, "width": width})

    def draw_image(self, data, x, y, width, height) -> None:
        self.calls.append("image")
        self.images.append({"data": data, "x": x, "y": y, "width": width, "height": height})


@pytest.fixture
def png_uri() -> str:
    """40x20 red PNG as a data URI."""
    return data_uri(image_bytes())


@pytest.fixture
def jpeg_uri() -> str:
    """40x20 blue JPEG as a data URI."""
    return data_uri(image_bytes(fmt="JPEG", color="blue"), "image/jpeg")


@pytest.fixture
def mpo_uri() -> str:
    """Two-frame multi-picture JPEG (40x20 green primary frame) as a data URI."""
    primary = Image.new("RGB", (40, 20), "green")
    secondary = Image.new("RGB", (40, 20), "blue")
    buf = io.BytesIO()
    primary.save(buf, format="MPO", save_all=True, append_images=[secondary])
    return data_uri(buf.getvalue(), "image/jpeg")


@pytest.fixture
def make_image_uri() -> Callable[..., str]:
    """Factory: make_image_uri(size, fmt, color, mime_type) -> data URI."""

    def build(
        size: Tuple[int, int] = (40, 20),
        fmt: str = "PNG",
        color: str = "red",
        mime_type: Optional[str] = None,
    ) -> str:
        mime = mime_type or ("image/jpeg" if fmt == "JPEG" else f"image/{fmt.lower()}")
        return data_uri(image_bytes(size, fmt, color), mime)

    return build


@pytest.fixture
def record() -> RecordData:
    """Job card record with two custom fields."""
    return RecordData(
        title="Paint Job",
        description="Two coats, matte finish",
        fields={"name": "Bob", "colour": "Teal"},
    )


@pytest.fixture
def surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture
def stub_fonts() -> FontResolver:
    """FontResolver loading StubFont instead of real Base-14 fonts."""
    return FontResolver(loader=lambda fontname: StubFont())


@pytest.fixture
def make_layout() -> Callable[..., Dict[str, Any]]:
    """Factory building a paged layout dict from element lists."""

    def build(*pages: List[Dict[str, Any]], legacy: Optional[bool] = False) -> Dict[str, Any]:
        if legacy:
            return {"elements": list(pages[0])}
        return {
            "pages": [
                {"id": f"page-{i + 1}", "elements": list(elements)}
                for i, elements in enumerate(pages)
            ],
            "canvasWidth": 595.28,
            "canvasHeight": 841.89,
        }

    return build
