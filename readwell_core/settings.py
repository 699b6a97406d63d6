"""
Reading Settings - the user's presentation preferences

Immutable snapshot of every preference the engine reads. Persisted form
uses the camelCase keys of the stored settings blob; snake_case keys are
accepted as well.

Usage:
    from readwell_core.settings import ReadingSettings

    settings = ReadingSettings.from_mapping(raw_blob)
    darker = settings.with_preset("dark")
"""

import logging
import math
import re
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Mapping, Optional

from .errors import SettingsError

logger = logging.getLogger(__name__)

_COLOR_RE = re.compile(
    r"^(#[0-9a-fA-F]{3,8}|rgba?\([\d\s.,%]+\)|hsla?\([\d\s.,%deg]+\)|[a-zA-Z]+)$"
)
ALIGNMENTS = ("left", "center", "right", "justify")


def _setting(default, key: str, kind: str, **extra):
    return field(default=default, metadata={"key": key, "kind": kind, **extra})


@dataclass(frozen=True)
class ReadingSettings:
    """User reading preferences with the documented defaults"""

    # Font
    font_family: str = _setting("system-ui, -apple-system, sans-serif", "fontFamily", "text")
    font_size: float = _setting(16, "fontSize", "number", minimum=1)
    font_weight: int = _setting(400, "fontWeight", "number", minimum=1, maximum=1000)
    letter_spacing: float = _setting(0, "letterSpacing", "number")
    word_spacing: float = _setting(0, "wordSpacing", "number")
    line_height: float = _setting(1.6, "lineHeight", "number", minimum=0)
    paragraph_spacing: float = _setting(16, "paragraphSpacing", "number", minimum=0)

    # Colors
    background_color: str = _setting("#ffffff", "backgroundColor", "color")
    text_color: str = _setting("#333333", "textColor", "color")
    link_color: str = _setting("#0066cc", "linkColor", "color")
    selection_color: str = _setting("#b3d4fc", "selectionColor", "color")
    opacity: float = _setting(1, "opacity", "number", minimum=0, maximum=1)

    # Layout
    max_width: float = _setting(800, "maxWidth", "number", minimum=0)
    content_align: str = _setting("center", "contentAlign", "enum", choices=ALIGNMENTS)
    left_margin: float = _setting(20, "leftMargin", "number", minimum=0)
    right_margin: float = _setting(20, "rightMargin", "number", minimum=0)

    # Reading modes
    dark_mode: bool = _setting(False, "darkMode", "bool")
    eye_care_mode: bool = _setting(False, "eyeCareMode", "bool")
    focus_mode: bool = _setting(False, "focusMode", "bool")
    auto_night_mode: bool = _setting(False, "autoNightMode", "bool")

    # Feature toggles
    enable_bookmarks: bool = _setting(True, "enableBookmarks", "bool")
    enable_notes: bool = _setting(True, "enableNotes", "bool")
    enable_ad_block: bool = _setting(True, "enableAdBlock", "bool")
    enable_lazy_load: bool = _setting(True, "enableLazyLoad", "bool")
    enable_animations: bool = _setting(True, "enableAnimations", "bool")
    enable_auto_scroll: bool = _setting(False, "enableAutoScroll", "bool")
    scroll_speed: float = _setting(1, "scrollSpeed", "number", minimum=0)

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]], strict: bool = False) -> 'ReadingSettings':
        """
        Build settings from a stored blob.

        Missing keys take their default. An invalid value takes its
        default too (logged), unless `strict` is set, in which case
        SettingsError is raised instead.
        """
        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            if strict:
                raise SettingsError("<root>", data, "settings must be a mapping")
            logger.warning(f"Settings blob is {type(data).__name__}, using defaults")
            return cls()

        values = {}
        for f in fields(cls):
            key = f.metadata["key"]
            if key in data:
                raw = data[key]
            elif f.name in data:
                raw = data[f.name]
            else:
                continue
            try:
                values[f.name] = _coerce(f, raw)
            except SettingsError:
                if strict:
                    raise
                logger.warning(f"Invalid setting {key}={raw!r}, using default {f.default!r}")
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {f.metadata["key"]: getattr(self, f.name) for f in fields(self)}

    def replace(self, **changes) -> 'ReadingSettings':
        """Copy with changes; values are validated like a strict parse."""
        by_name = {f.name: f for f in fields(self)}
        for name, value in changes.items():
            if name not in by_name:
                raise SettingsError(name, value, "unknown setting")
            changes[name] = _coerce(by_name[name], value)
        return replace(self, **changes)

    def with_preset(self, name: str) -> 'ReadingSettings':
        try:
            preset = PRESETS[name]
        except KeyError:
            raise SettingsError("preset", name, f"unknown preset, expected one of {sorted(PRESETS)}")
        return self.replace(**preset)

    def resolve_auto_night(self, hour: int) -> 'ReadingSettings':
        """Apply auto night mode for the given local hour, if enabled."""
        if not self.auto_night_mode:
            return self
        dark = is_night_hour(hour)
        if dark == self.dark_mode:
            return self
        return replace(self, dark_mode=dark)


def _coerce(f, raw):
    kind = f.metadata["kind"]
    key = f.metadata["key"]

    if kind == "bool":
        if isinstance(raw, bool):
            return raw
        raise SettingsError(key, raw, "expected a boolean")

    if kind == "number":
        if isinstance(raw, bool):
            raise SettingsError(key, raw, "expected a number")
        if isinstance(raw, str):
            try:
                raw = float(raw.strip().removesuffix("px"))
            except ValueError:
                raise SettingsError(key, raw, "expected a number")
        if not isinstance(raw, (int, float)) or not math.isfinite(raw):
            raise SettingsError(key, raw, "expected a finite number")
        minimum = f.metadata.get("minimum")
        maximum = f.metadata.get("maximum")
        if minimum is not None and raw < minimum:
            raise SettingsError(key, raw, f"below minimum {minimum}")
        if maximum is not None and raw > maximum:
            raise SettingsError(key, raw, f"above maximum {maximum}")
        if isinstance(raw, float) and raw.is_integer() and isinstance(f.default, int):
            return int(raw)
        return raw

    if kind == "color":
        if isinstance(raw, str) and _COLOR_RE.match(raw.strip()):
            return raw.strip()
        raise SettingsError(key, raw, "expected a CSS color")

    if kind == "enum":
        if isinstance(raw, str) and raw.strip().lower() in f.metadata["choices"]:
            return raw.strip().lower()
        raise SettingsError(key, raw, f"expected one of {f.metadata['choices']}")

    # text: no characters that could close the declaration or the block
    if isinstance(raw, str) and raw.strip() and not any(ch in raw for ch in ";{}<>"):
        return raw.strip()
    raise SettingsError(key, raw, "expected a non-empty string")


def is_night_hour(hour: int) -> bool:
    """Night runs from 18:00 to 06:00 local time."""
    return hour >= 18 or hour < 6


DEFAULT_SETTINGS = ReadingSettings()

PRESETS: Dict[str, Dict[str, Any]] = {
    "light": {
        "background_color": "#ffffff",
        "text_color": "#333333",
        "link_color": "#0066cc",
        "dark_mode": False,
        "eye_care_mode": False,
    },
    "dark": {
        "background_color": "#1a1a1a",
        "text_color": "#e0e0e0",
        "link_color": "#4dabf7",
        "dark_mode": True,
        "eye_care_mode": False,
    },
    "sepia": {
        "background_color": "#f4f1e8",
        "text_color": "#5c4b37",
        "link_color": "#8b4513",
        "dark_mode": False,
        "eye_care_mode": True,
    },
}
