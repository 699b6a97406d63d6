"""
Viewport Loader - defer off-screen images until they scroll into view

At startup every image below the visible region has its real
source parked and a tiny placeholder swapped in. The first time the image
enters the region the real source comes back and the image is no longer
watched. Images already in view are never touched.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Hashable, Iterable, List, Optional, Sequence, Set

from .dom.node import Node, iter_tree
from .events import MutationRecord

logger = logging.getLogger(__name__)

# 1x1 light grey SVG
PLACEHOLDER_SRC = (
    "data:image/svg+xml;base64,PHN2ZyB3aWR0aD0iMSIgaGVpZ2h0PSIxIiB4bWxucz0iaHR0cDovL3d3dy53"
    "My5vcmcvMjAwMC9zdmciPjxyZWN0IHdpZHRoPSIxIiBoZWlnaHQ9IjEiIGZpbGw9IiNjY2MiLz48L3N2Zz4="
)
ORIGINAL_SRC_ATTR = "data-original-src"
OFFSET_ATTR = "data-readwell-top"
MEDIA_TAGS = ("img",)

Geometry = Callable[[Node], Optional[float]]


def attribute_geometry(node: Node) -> Optional[float]:
    """Document offset recorded on the node by the page capture, if any."""
    raw = node.get_attribute(OFFSET_ATTR)
    if raw is None:
        return None
    try:
        return float(raw)
    except ValueError:
        return None


@dataclass(frozen=True)
class VisibilityRegion:
    top: float
    height: float

    @property
    def bottom(self) -> float:
        return self.top + self.height

    def contains(self, offset: float) -> bool:
        return self.top <= offset <= self.bottom

    def scrolled_to(self, top: float) -> 'VisibilityRegion':
        return VisibilityRegion(top, self.height)


class ViewportWatcher:
    """
    Visibility-region collaborator: tracks observed nodes and reports the
    ones inside the region whenever it moves.
    """

    def __init__(self, region: VisibilityRegion, geometry: Geometry = attribute_geometry):
        self.region = region
        self.geometry = geometry
        self._observed: Dict[Hashable, Node] = {}
        self._callback: Optional[Callable[[List[Node]], None]] = None

    def connect(self, callback: Callable[[List[Node]], None]) -> None:
        self._callback = callback

    def observe(self, node: Node) -> None:
        self._observed[node.key] = node

    def unobserve(self, node: Node) -> None:
        self._observed.pop(node.key, None)

    def is_observed(self, node: Node) -> bool:
        return node.key in self._observed

    @property
    def observed_count(self) -> int:
        return len(self._observed)

    def disconnect(self) -> None:
        self._observed.clear()
        self._callback = None

    def offset_of(self, node: Node) -> Optional[float]:
        try:
            return self.geometry(node)
        except Exception as e:
            logger.debug(f"No geometry for {node!r}: {e}")
            return None

    def scroll_to(self, top: float) -> List[Node]:
        """Move the region and deliver the observed nodes now inside it."""
        self.region = self.region.scrolled_to(top)
        entered = []
        for node in list(self._observed.values()):
            offset = self.offset_of(node)
            if offset is not None and self.region.contains(offset):
                entered.append(node)
        if entered and self._callback is not None:
            try:
                self._callback(entered)
            except Exception as e:
                logger.warning(f"Viewport entry handler failed: {e}")
        return entered


class WatchState(Enum):
    PENDING = "pending"
    RESOLVED = "resolved"


@dataclass
class WatchRecord:
    node: Node
    original_src: str


class ViewportLoader:
    """
    Defers images below the visible region at startup and restores each one
    the first time it enters the region.

    The startup pass runs once per loader. A restored image leaves only its
    key behind, and keys of removed subtrees are forgotten.
    """

    def __init__(self, watcher: ViewportWatcher, placeholder: str = PLACEHOLDER_SRC):
        self.watcher = watcher
        self.placeholder = placeholder
        self._pending: Dict[Hashable, WatchRecord] = {}
        self._resolved: Set[Hashable] = set()
        self._initialized = False
        watcher.connect(self.on_enter)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def resolved_count(self) -> int:
        return len(self._resolved)

    def state_of(self, node: Node) -> Optional[WatchState]:
        if node.key in self._pending:
            return WatchState.PENDING
        if node.key in self._resolved:
            return WatchState.RESOLVED
        return None

    def is_eligible(self, node: Node) -> bool:
        if node.tag not in MEDIA_TAGS or not node.get_attribute("src"):
            return False
        if node.key in self._pending or node.key in self._resolved:
            return False
        if node.get_attribute(ORIGINAL_SRC_ATTR) is not None:
            return False
        offset = self.watcher.offset_of(node)
        return offset is not None and offset > self.watcher.region.bottom

    def init(self, root: Node) -> int:
        if self._initialized:
            logger.debug("Lazy loading already initialized, skipping")
            return 0
        self._initialized = True
        deferred = 0
        for node in iter_tree(root):
            try:
                if not self.is_eligible(node):
                    continue
                original = node.get_attribute("src")
                node.set_attribute(ORIGINAL_SRC_ATTR, original)
                node.set_attribute("src", self.placeholder)
                self._pending[node.key] = WatchRecord(node, original)
                self.watcher.observe(node)
                deferred += 1
            except Exception as e:
                logger.warning(f"Could not defer {node!r}: {e}")
        logger.info(f"Deferred {deferred} off-screen image(s)")
        return deferred

    def _forget(self, node: Node) -> None:
        self._pending.pop(node.key, None)
        self.watcher.unobserve(node)

    def on_enter(self, nodes: Iterable[Node]) -> int:
        resolved = 0
        for node in nodes:
            record = self._pending.get(node.key)
            if record is None:
                continue
            try:
                if not node.is_attached():
                    logger.debug(f"Dropping watch on detached {node!r}")
                    self._forget(node)
                    continue
                node.set_attribute("src", record.original_src)
                node.remove_attribute(ORIGINAL_SRC_ATTR)
            except Exception as e:
                # Stays pending; the next entry retries the swap
                logger.warning(f"Could not restore {node!r}: {e}")
                continue
            self._forget(node)
            self._resolved.add(node.key)
            resolved += 1
        return resolved

    def on_removed(self, nodes: Iterable[Node]) -> None:
        for removed in nodes:
            try:
                for node in iter_tree(removed):
                    self._forget(node)
                    self._resolved.discard(node.key)
            except Exception as e:
                logger.warning(f"Could not release watches under {removed!r}: {e}")

    def on_mutation(self, records: Sequence[MutationRecord]) -> None:
        for record in records:
            self.on_removed(record.removed)

    def teardown(self) -> None:
        for record in self._pending.values():
            self.watcher.unobserve(record.node)
        self._pending.clear()
        self._resolved.clear()


def optimize_images(root: Node) -> int:
    """Ask the host to lazy-load and async-decode every image."""
    count = 0
    for node in iter_tree(root):
        if node.tag == "img":
            node.set_attribute("loading", "lazy")
            node.set_attribute("decoding", "async")
            count += 1
    return count


def disable_autoplay(root: Node) -> int:
    count = 0
    for node in iter_tree(root):
        if node.tag in ("video", "audio") and node.get_attribute("autoplay") is not None:
            node.remove_attribute("autoplay")
            count += 1
    return count
