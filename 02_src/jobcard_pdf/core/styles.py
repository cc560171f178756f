"""Font and color resolution for rendered elements."""

import logging
import re
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, NamedTuple, Optional, Tuple

import fitz  # pymupdf

logger = logging.getLogger(__name__)

DEFAULT_FAMILY = "Helvetica"

# PyMuPDF Base-14 font codes: family -> (regular, bold, italic, bold-italic)
BASE14_FONTS: Dict[str, Tuple[str, str, str, str]] = {
    "Helvetica": ("helv", "hebo", "heit", "hebi"),
    "Times-Roman": ("tiro", "tibo", "tiit", "tibi"),
    "Courier": ("cour", "cobo", "coit", "cobi"),
}

HEX_COLOR_PATTERN = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")

Color = Tuple[float, float, float]
BLACK: Color = (0.0, 0.0, 0.0)


class FontKey(NamedTuple):
    """Style triple a font is resolved from."""
    family: str
    bold: bool
    italic: bool


@dataclass(frozen=True)
class ResolvedFont:
    """Base-14 font handle shared by every element with the same style.

    Attributes:
        key: Normalized style triple
        fontname: PyMuPDF Base-14 code used when drawing (e.g. "hebo")
        font: Loaded font object used for text measurement
    """
    key: FontKey
    fontname: str
    font: Any

    def text_length(self, text: str, size: float) -> float:
        """Rendered width of text in points at the given size."""
        return self.font.text_length(text, fontsize=size)


def normalize_family(family: Optional[str]) -> str:
    """Map a family name onto a supported family, Helvetica otherwise."""
    name = (family or "").strip()
    if name in BASE14_FONTS:
        return name
    if name:
        logger.debug(f"Unknown font family '{name}', falling back to {DEFAULT_FAMILY}")
    return DEFAULT_FAMILY


def base14_fontname(key: FontKey) -> str:
    """PyMuPDF Base-14 code for a normalized style triple."""
    regular, bold, italic, bold_italic = BASE14_FONTS[key.family]
    if key.bold and key.italic:
        return bold_italic
    if key.bold:
        return bold
    if key.italic:
        return italic
    return regular


def load_base14_font(fontname: str) -> Any:
    """Load a PyMuPDF Base-14 font by its short code."""
    return fitz.Font(fontname)


class FontResolver:
    """Resolves style triples to fonts, loading each variant at most once.

    One resolver lives for exactly one document render. Lookups are safe
    from several threads: the cache is filled under a lock with a second
    check after acquiring it.
    """

    def __init__(self, loader: Callable[[str], Any] = load_base14_font) -> None:
        """Initialize resolver.

        Args:
            loader: Callable loading a font object from a Base-14 code
        """
        self._loader = loader
        self._cache: Dict[FontKey, ResolvedFont] = {}
        self._lock = threading.Lock()
        self.loads = 0

    def resolve(self, family: Optional[str], bold: bool = False, italic: bool = False) -> ResolvedFont:
        """Return the cached font for a style, loading it on first use."""
        key = FontKey(normalize_family(family), bool(bold), bool(italic))

        resolved = self._cache.get(key)
        if resolved is not None:
            return resolved

        with self._lock:
            resolved = self._cache.get(key)
            if resolved is None:
                fontname = base14_fontname(key)
                resolved = ResolvedFont(key=key, fontname=fontname, font=self._loader(fontname))
                self._cache[key] = resolved
                self.loads += 1
                logger.debug(f"Loaded font {fontname} for {key}")
        return resolved

    def __len__(self) -> int:
        return len(self._cache)


def parse_hex_color(value: Optional[str]) -> Color:
    """Parse #RRGGBB (or #RGB) into an RGB triple in [0, 1].

    Malformed values resolve to black instead of failing.

    Examples:
        >>> parse_hex_color("#ff0000")
        (1.0, 0.0, 0.0)
        >>> parse_hex_color("not-a-color")
        (0.0, 0.0, 0.0)
    """
    if not isinstance(value, str):
        return BLACK

    match = HEX_COLOR_PATTERN.match(value.strip())
    if match is None:
        logger.debug(f"Malformed color {value!r}, using black")
        return BLACK

    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return tuple(int(digits[i:i + 2], 16) / 255 for i in (0, 2, 4))
