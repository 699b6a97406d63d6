"""
Style Synthesizer - reading settings to a presentation ruleset

synthesize() is pure: the same settings always render to the same text.
Every declaration is emitted with !important so it wins over the page's
own styling. Pixel values carry units; line-height, opacity and
font-weight stay unitless.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional, Tuple, Union

from .dom.node import HIDDEN_CLASS, Node, iter_tree
from .settings import ReadingSettings

logger = logging.getLogger(__name__)

STYLE_ELEMENT_ID = "readwell-styles"
CONTENT_AREA_CLASS = "readwell-content-area"

MODE_CLASSES = {
    "dark_mode": "readwell-dark-mode",
    "eye_care_mode": "readwell-eye-care",
    "focus_mode": "readwell-focus-mode",
}
NO_ANIMATIONS_CLASS = "readwell-no-animations"

BASE_STYLESHEET = f"""\
.{HIDDEN_CLASS} {{
  display: none !important;
}}
.{CONTENT_AREA_CLASS} {{
  transition: all 0.3s ease;
}}
.readwell-dark-mode {{
  filter: invert(1) hue-rotate(180deg);
}}
.readwell-dark-mode img,
.readwell-dark-mode video,
.readwell-dark-mode iframe,
.readwell-dark-mode svg {{
  filter: invert(1) hue-rotate(180deg);
}}
.readwell-eye-care {{
  filter: sepia(10%) saturate(120%) brightness(110%);
}}
.readwell-focus-mode {{
  background: #000000 !important;
}}
.readwell-focus-mode * {{
  max-width: none !important;
}}
.{NO_ANIMATIONS_CLASS} * {{
  transition: none !important;
  animation: none !important;
}}
"""


@dataclass(frozen=True)
class Rule:
    selector: str
    declarations: Tuple[Tuple[str, str], ...]

    @property
    def css(self) -> str:
        body = "".join(f"  {prop}: {value} !important;\n" for prop, value in self.declarations)
        return f"{self.selector} {{\n{body}}}\n"


@dataclass(frozen=True)
class Ruleset:
    rules: Tuple[Rule, ...]

    @property
    def css(self) -> str:
        return "".join(rule.css for rule in self.rules)

    def declaration(self, selector: str, prop: str) -> Optional[str]:
        for rule in self.rules:
            if rule.selector == selector:
                for name, value in rule.declarations:
                    if name == prop:
                        return value
        return None


def _num(value: Union[int, float]) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return f"{value:g}" if isinstance(value, float) else str(value)


def _px(value: Union[int, float]) -> str:
    return f"{_num(value)}px"


def synthesize(settings: Union[ReadingSettings, Mapping[str, Any], None]) -> Ruleset:
    """
    Render settings into a ruleset.

    A raw mapping is parsed leniently: a missing or invalid field falls
    back to its default without affecting the others.
    """
    if not isinstance(settings, ReadingSettings):
        settings = ReadingSettings.from_mapping(settings)
    s = settings
    return Ruleset((
        Rule("body", (
            ("font-family", s.font_family),
            ("font-size", _px(s.font_size)),
            ("font-weight", _num(s.font_weight)),
            ("letter-spacing", _px(s.letter_spacing)),
            ("word-spacing", _px(s.word_spacing)),
            ("line-height", _num(s.line_height)),
            ("background-color", s.background_color),
            ("color", s.text_color),
            ("opacity", _num(s.opacity)),
        )),
        Rule(f".{CONTENT_AREA_CLASS}", (
            ("max-width", _px(s.max_width)),
            ("margin", "0 auto"),
            ("padding-left", _px(s.left_margin)),
            ("padding-right", _px(s.right_margin)),
            ("text-align", s.content_align),
        )),
        Rule("p", (
            ("margin-bottom", _px(s.paragraph_spacing)),
        )),
        Rule("a", (
            ("color", s.link_color),
        )),
        Rule("::selection", (
            ("background-color", s.selection_color),
        )),
    ))


def render_stylesheet(settings: Union[ReadingSettings, Mapping[str, Any], None]) -> str:
    """Full text written to the style sink: base rules plus synthesized rules."""
    return BASE_STYLESHEET + synthesize(settings).css


def mode_classes(settings: ReadingSettings) -> List[str]:
    """Body classes for the reading modes that are switched on."""
    classes = [cls for name, cls in MODE_CLASSES.items() if getattr(settings, name)]
    if not settings.enable_animations:
        classes.append(NO_ANIMATIONS_CLASS)
    return classes


def apply_mode_classes(body: Node, settings: ReadingSettings) -> None:
    wanted = set(mode_classes(settings))
    for cls in list(MODE_CLASSES.values()) + [NO_ANIMATIONS_CLASS]:
        if cls in wanted:
            body.add_class(cls)
        else:
            body.remove_class(cls)


def find_body(root: Node) -> Node:
    for node in iter_tree(root):
        if node.tag == "body":
            return node
    return root


class StyleSink:
    """The single surface the stylesheet text is written to"""

    def apply(self, css: str) -> None:
        raise NotImplementedError


class MemoryStyleSink(StyleSink):
    def __init__(self):
        self.css: Optional[str] = None
        self.writes = 0

    def apply(self, css: str) -> None:
        self.css = css
        self.writes += 1


class SoupStyleSink(StyleSink):
    """Writes into one <style> element of a BeautifulSoup document"""

    def __init__(self, root, element_id: str = STYLE_ELEMENT_ID):
        self.root = root
        self.element_id = element_id

    def _style_element(self):
        soup = self.root.document
        style = soup.find("style", id=self.element_id)
        if style is None:
            style = soup.new_tag("style", id=self.element_id)
            head = soup.find("head")
            if head is None:
                head = soup.new_tag("head")
                html = soup.find("html")
                if html is not None:
                    html.insert(0, head)
                else:
                    soup.insert(0, head)
            head.append(style)
        return style

    def apply(self, css: str) -> None:
        self._style_element().string = css

    @property
    def css(self) -> Optional[str]:
        style = self.root.document.find("style", id=self.element_id)
        return style.string if style is not None else None


class Debouncer:
    """
    Collapse bursts of calls into one call after a quiet window.

    Uses the running asyncio loop. Without one, the latest call stays
    pending until flush().
    """

    def __init__(self, callback: Callable[..., Any], wait: float):
        self.callback = callback
        self.wait = wait
        self._handle: Optional[asyncio.TimerHandle] = None
        self._pending: Optional[Tuple[tuple, dict]] = None

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def trigger(self, *args, **kwargs) -> None:
        self._pending = (args, kwargs)
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, call deferred until flush()")
            return
        self._handle = loop.call_later(self.wait, self.flush)

    def flush(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if self._pending is None:
            return
        args, kwargs = self._pending
        self._pending = None
        self.callback(*args, **kwargs)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._pending = None
