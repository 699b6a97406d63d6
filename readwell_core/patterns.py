"""
Pattern Matcher - declarative structural predicates over nodes

Supported selector subset:
    tag                 exact tag match (case-insensitive)
    .name               class membership
    #name               id equality
    [attr]              attribute presence
    [attr="v"]          attribute equality
    [attr*="v"]         attribute substring containment
    [attr^="v"]         attribute prefix
    [attr$="v"]         attribute suffix
    a b                 descendant relation

Compilation happens once, from the static rule lists below, and raises
PatternSyntaxError on anything outside the subset. Matching only reads
the node; an absent attribute makes its predicate false.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from .dom.node import Node
from .errors import PatternSyntaxError

logger = logging.getLogger(__name__)


AD_SELECTORS = (
    '[class*="ad-"]',
    '[class*="ads-"]',
    '[id*="ad-"]',
    '[id*="ads-"]',
    '.advertisement',
    '.google-ads',
    '.banner-ad',
    '.popup-ad',
    '[data-ad]',
    'iframe[src*="googlesyndication"]',
    'iframe[src*="doubleclick"]',
    '.ad-container',
    '.ads-container',
)

POPUP_SELECTORS = (
    '.modal',
    '.popup',
    '.overlay',
    '[class*="popup"]',
    '[class*="modal"]',
    '[id*="popup"]',
    '[id*="modal"]',
)

# Popup-shaped nodes are only hidden when their text mentions one of these
AD_KEYWORDS = ("ad", "advertisement")

CONTENT_HINTS = ("content", "article", "post", "main")


_IDENT = r"-?[_a-zA-Z][_a-zA-Z0-9-]*"
_TOKEN_RE = re.compile(
    r"""
    (?P<tag>\*|""" + _IDENT + r""")
    | \.(?P<cls>""" + _IDENT + r""")
    | \#(?P<id>[_a-zA-Z0-9-]+)
    | \[\s*(?P<attr>""" + _IDENT + r""")\s*
        (?:(?P<op>[*^$]?=)\s*(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<bare>[_a-zA-Z0-9-]+))\s*)?
      \]
    """,
    re.VERBOSE,
)
_PART_RE = re.compile(r'(?:\[[^\]]*\]|[^\s\[\]])+')


@dataclass(frozen=True)
class AttributePredicate:
    name: str
    op: Optional[str] = None
    value: Optional[str] = None

    def test(self, node: Node) -> bool:
        actual = node.get_attribute(self.name)
        if actual is None:
            return False
        if self.op is None:
            return True
        if self.op == "=":
            return actual == self.value
        if self.op == "*=":
            return bool(self.value) and self.value in actual
        if self.op == "^=":
            return bool(self.value) and actual.startswith(self.value)
        if self.op == "$=":
            return bool(self.value) and actual.endswith(self.value)
        return False


@dataclass(frozen=True)
class CompoundStep:
    """One whitespace-free part of a selector, e.g. iframe[src*="ads"].x"""
    tag: Optional[str] = None
    classes: Tuple[str, ...] = ()
    ident: Optional[str] = None
    attributes: Tuple[AttributePredicate, ...] = ()

    def test(self, node: Node) -> bool:
        if not node.is_element:
            return False
        if self.tag is not None and node.tag != self.tag:
            return False
        if self.ident is not None and node.get_attribute("id") != self.ident:
            return False
        for name in self.classes:
            if not node.has_class(name):
                return False
        return all(predicate.test(node) for predicate in self.attributes)


@dataclass(frozen=True)
class Pattern:
    selector: str
    steps: Tuple[CompoundStep, ...]

    def match(self, node: Node) -> bool:
        if not self.steps[-1].test(node):
            return False
        # Remaining steps must match ancestors, right to left
        ancestor = node.parent
        for step in reversed(self.steps[:-1]):
            while ancestor is not None and not step.test(ancestor):
                ancestor = ancestor.parent
            if ancestor is None:
                return False
            ancestor = ancestor.parent
        return True


def _compile_step(selector: str, part: str) -> CompoundStep:
    tag = None
    classes = []
    ident = None
    attributes = []
    pos = 0
    while pos < len(part):
        m = _TOKEN_RE.match(part, pos)
        if not m or m.end() == pos:
            raise PatternSyntaxError(selector, f"unexpected input at {part[pos:]!r}")
        if m.group("tag") is not None:
            if pos != 0:
                raise PatternSyntaxError(selector, "tag name must come first in a compound")
            tag = None if m.group("tag") == "*" else m.group("tag").lower()
        elif m.group("cls") is not None:
            classes.append(m.group("cls"))
        elif m.group("id") is not None:
            if ident is not None:
                raise PatternSyntaxError(selector, "more than one id")
            ident = m.group("id")
        else:
            op = m.group("op")
            value = next((v for v in (m.group("dq"), m.group("sq"), m.group("bare")) if v is not None), None)
            attributes.append(AttributePredicate(m.group("attr").lower(), op, value))
        pos = m.end()
    return CompoundStep(tag, tuple(classes), ident, tuple(attributes))


def compile_pattern(selector: str) -> Pattern:
    """Compile one selector. Raises PatternSyntaxError when malformed."""
    if not isinstance(selector, str) or not selector.strip():
        raise PatternSyntaxError(str(selector), "empty selector")
    if any(ch in selector for ch in ",>+~:"):
        raise PatternSyntaxError(selector, "only the descendant combinator is supported")
    # Whitespace inside [...] is not a combinator
    parts = _PART_RE.findall(selector.strip())
    if _PART_RE.sub('', selector).strip():
        raise PatternSyntaxError(selector, "unbalanced brackets")
    return Pattern(selector, tuple(_compile_step(selector, part) for part in parts))


@dataclass(frozen=True)
class PatternSet:
    """Named, ordered set of compiled patterns"""
    name: str
    patterns: Tuple[Pattern, ...]

    @classmethod
    def compile(cls, name: str, selectors: Iterable[str]) -> 'PatternSet':
        return cls(name, tuple(compile_pattern(s) for s in selectors))

    def __len__(self) -> int:
        return len(self.patterns)

    def matches(self, node: Node) -> bool:
        return matches(node, self)


def matches(node: Node, pattern_set: PatternSet) -> bool:
    """
    True if any pattern in the set matches `node`.

    A pattern that fails on this particular node is skipped for it; the
    remaining patterns are still tried.
    """
    for pattern in pattern_set.patterns:
        try:
            if pattern.match(node):
                return True
        except Exception as e:
            logger.debug(f"Pattern {pattern.selector!r} skipped for a {type(node).__name__}: {e}")
    return False


def contains_keyword(text: str, keywords: Iterable[str] = AD_KEYWORDS) -> bool:
    lowered = (text or "").lower()
    return any(keyword in lowered for keyword in keywords)


def default_ad_patterns() -> PatternSet:
    return PatternSet.compile("ads", AD_SELECTORS)


def default_popup_patterns() -> PatternSet:
    return PatternSet.compile("popups", POPUP_SELECTORS)
