"""
Content Locator - find the primary reading region of a page

Scores every element that directly holds a paragraph and keeps the best.
No learning, no page-specific rules:

    score = min(text_length / 100, 50)
          + 2 * paragraph_count
          - 20 * (link_text_length / max(text_length, 1))
          + 10 if class/id mentions content|article|post|main

Ties go to the candidate that comes first in document order.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterator, List, Optional

from .dom.node import Node, iter_descendants, iter_tree
from .patterns import CONTENT_HINTS
from .style import CONTENT_AREA_CLASS, find_body

logger = logging.getLogger(__name__)

TEXT_SCORE_CAP = 50
PARAGRAPH_WEIGHT = 2
LINK_DENSITY_PENALTY = 20
HINT_BONUS = 10

PARAGRAPH_TAGS = ("p",)
_HINT_RE = re.compile("|".join(CONTENT_HINTS), re.IGNORECASE)


@dataclass(frozen=True)
class ScoredCandidate:
    node: Node
    score: float


def score(container: Node) -> float:
    text_length = len(container.text)
    paragraphs = 0
    link_text_length = 0
    for node in iter_descendants(container):
        if node.tag in PARAGRAPH_TAGS:
            paragraphs += 1
        elif node.tag == "a":
            link_text_length += len(node.text)

    value = min(text_length / 100, TEXT_SCORE_CAP)
    value += PARAGRAPH_WEIGHT * paragraphs
    value -= LINK_DENSITY_PENALTY * (link_text_length / max(text_length, 1))

    hint = " ".join(container.classes) + " " + (container.get_attribute("id") or "")
    if _HINT_RE.search(hint):
        value += HINT_BONUS
    return value


def candidates(root: Node) -> Iterator[Node]:
    """Elements with at least one paragraph child, in document order."""
    for node in iter_tree(root):
        if node.is_element and any(child.tag in PARAGRAPH_TAGS for child in node.children):
            yield node


def rank(root: Node) -> List[ScoredCandidate]:
    """All candidates, best first; equal scores keep document order."""
    scored = [ScoredCandidate(node, score(node)) for node in candidates(root)]
    return sorted(scored, key=lambda c: -c.score)


def locate(root: Node) -> Optional[Node]:
    best: Optional[ScoredCandidate] = None
    for node in candidates(root):
        try:
            candidate = ScoredCandidate(node, score(node))
        except Exception as e:
            logger.debug(f"Skipping content candidate {node!r}: {e}")
            continue
        if best is None or candidate.score > best.score:
            best = candidate
    if best is not None:
        logger.debug(f"Content region {best.node!r} scored {best.score:.2f}")
    return best.node if best is not None else None


def mark_content_region(root: Node) -> Node:
    """Tag the located region (or the body as fallback) as the content area."""
    region = locate(root)
    if region is None:
        region = find_body(root)
        logger.info("No paragraph container found, using document body as content region")
    region.add_class(CONTENT_AREA_CLASS)
    return region
