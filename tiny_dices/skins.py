"""Allow-list validators for untrusted style values, and the skin slots they guard.

Skins end up inside inline ``style`` attributes, so anything that could smuggle
in a URL, a script scheme or markup is rejected outright. These are predicates,
not a CSS parser: a value either matches a small known-safe shape or it is
refused, and a refused value always falls back to the built-in default.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, fields

from pydantic_extra_types.color import Color

from tiny_dices.config import settings

logger = logging.getLogger(__name__)

MAX_GRADIENT_COLORS = 50

BORDER_STYLES: frozenset[str] = frozenset(
    {
        "none",
        "solid",
        "dashed",
        "dotted",
        "double",
        "groove",
        "ridge",
        "inset",
        "outset",
        "hidden",
    }
)

# Keywords that are valid CSS colors but unknown to pydantic's Color.
_COLOR_KEYWORDS = frozenset({"transparent", "currentcolor"})

# Color also accepts "fff" or "0xfff"; CSS requires the leading "#".
_BARE_HEX_RE = re.compile(r"(?:0x)?[0-9a-f]+", re.IGNORECASE)

_UNSAFE_RE = re.compile(r"(url\s*\(|expression\s*\(|javascript:|<|>|data:)", re.IGNORECASE)
# Characters that could end the declaration or open a string inside a style attribute.
_DECLARATION_BREAK_RE = re.compile(r"[;{}\"'\\]")
_DIRECTION_RE = re.compile(r"^(to\s+\w+|\d+deg|[+-]?\d+rad|[+-]?\d+turn)$", re.IGNORECASE)
_BORDER_WIDTH_RE = re.compile(r"^(\d+(\.\d+)?)(px|em|rem|%)$")
_DATA_IMAGE_RE = re.compile(
    r"^data:image/(png|jpeg|jpg|gif|webp);base64,[a-z0-9+/=]+$",
    re.IGNORECASE,
)


# ---------------------------------------------------------------------------
# Validators
# ---------------------------------------------------------------------------


def is_valid_color(value: object) -> bool:
    """Return True if value is a single CSS color (name, hex, rgb[a], hsl[a])."""
    if not isinstance(value, str):
        return False
    candidate = value.strip()
    if not candidate:
        return False
    if candidate.lower() in _COLOR_KEYWORDS:
        return True
    if _BARE_HEX_RE.fullmatch(candidate):
        return False
    try:
        Color(candidate)
    except ValueError:
        return False
    return True


def _split_top_level(content: str) -> list[str] | None:
    """Split on commas that are not nested inside parentheses.

    Returns None if the parentheses don't balance, including a ``)`` that
    closes more than was opened.
    """
    parts: list[str] = []
    buffer = ""
    depth = 0
    for char in content:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                return None
        if char == "," and depth == 0:
            parts.append(buffer.strip())
            buffer = ""
        else:
            buffer += char
    if depth != 0:
        return None
    if buffer.strip():
        parts.append(buffer.strip())
    return parts


def is_valid_linear_gradient(value: object) -> bool:
    """Return True if value is a plain ``linear-gradient(...)`` of safe colors.

    The first argument may be a direction (``to right``) or a whole-number
    angle (``135deg``, ``2rad``, ``1turn``).
    Every other argument must be a color, optionally followed by a stop
    position. Between 1 and ``MAX_GRADIENT_COLORS`` colors are allowed.
    The parentheses must balance so the value ends where the function does,
    and ``;``, braces, quotes and backslashes are refused outright.
    """
    if not isinstance(value, str):
        return False
    normalized = value.strip()
    lowered = normalized.lower()
    if not lowered.startswith("linear-gradient(") or not lowered.endswith(")"):
        return False
    if _UNSAFE_RE.search(normalized) or _DECLARATION_BREAK_RE.search(normalized):
        return False

    content = normalized[normalized.index("(") + 1 : -1].strip()
    if not content:
        return False

    parts = _split_top_level(content)
    if parts is None:
        return False
    color_count = 0
    for i, part in enumerate(parts):
        if i == 0 and _DIRECTION_RE.match(part):
            continue
        tokens = part.split()
        if is_valid_color(part) or (tokens and is_valid_color(tokens[0])):
            color_count += 1
        else:
            return False

    return 1 <= color_count <= MAX_GRADIENT_COLORS


def is_valid_css_border(value: object) -> bool:
    """Return True for a ``<width> <style> <color-or-gradient>`` border shorthand."""
    if not isinstance(value, str):
        return False
    parts = value.split()
    if len(parts) < 3:
        return False

    width, style, *color_parts = parts
    if not _BORDER_WIDTH_RE.match(width):
        return False
    if style not in BORDER_STYLES:
        return False

    color = " ".join(color_parts)
    return is_valid_color(color) or is_valid_linear_gradient(color)


def is_valid_data_image(value: object) -> bool:
    """Return True only for base64 ``data:image/...`` URIs of common raster types."""
    if not isinstance(value, str):
        return False
    return _DATA_IMAGE_RE.match(value.strip()) is not None


def sanitize_background(value: object) -> str | None:
    """Return the stripped value if it is a color or gradient, else None."""
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    if is_valid_linear_gradient(trimmed) or is_valid_color(trimmed):
        return trimmed
    return None


def sanitize_color(value: object) -> str | None:
    """Return the stripped value if it is a single color, else None."""
    if not isinstance(value, str) or not is_valid_color(value):
        return None
    return value.strip()


def sanitize_border(value: object) -> str | None:
    """Return the stripped value if it is a valid border shorthand, else None."""
    if not isinstance(value, str) or not is_valid_css_border(value):
        return None
    return value.strip()


def sanitize_image(value: object, *, force_unsafe: bool = False) -> str | None:
    """Return the stripped value if it is a safe data image, else None.

    ``force_unsafe`` accepts any string, including remote URLs. Only pass it
    for values that come from a trusted source.
    """
    if not isinstance(value, str):
        return None
    if force_unsafe or is_valid_data_image(value):
        return value.strip()
    return None


# ---------------------------------------------------------------------------
# Skin slots
# ---------------------------------------------------------------------------


@dataclass
class SkinState:
    """Style slots for a dice table. ``None`` means "use the default"."""

    bg: str | None = None
    text: str | None = None
    border: str | None = None
    bg_img: str | None = None
    selection_bg: str | None = None
    selection_text: str | None = None

    def reset(self) -> None:
        for f in fields(self):
            setattr(self, f.name, None)


@dataclass(frozen=True)
class SkinSnapshot:
    """Effective style values handed to a renderer."""

    bg: str | None
    text: str | None
    border: str | None
    bg_img: str | None
    selection_bg: str | None
    selection_text: str | None


def default_skin() -> SkinState:
    """Build the built-in defaults from settings, dropping any that fail validation."""
    skin = SkinState(
        bg=sanitize_background(settings.default_bg_skin),
        text=sanitize_color(settings.default_text_skin),
        border=sanitize_border(settings.default_border_skin),
        selection_bg=sanitize_background(settings.default_selection_bg_skin),
        selection_text=sanitize_color(settings.default_selection_text_skin),
    )
    for f in fields(skin):
        configured = getattr(settings, f"default_{f.name}_skin", None)
        if configured and getattr(skin, f.name) is None:
            logger.warning("Ignoring invalid default %s skin: %r", f.name, configured)
    return skin
