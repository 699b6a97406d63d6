"""
Mutation Filter - hide advertising and ad popups as the page changes

Every element goes from unseen to either kept or hidden. Hidden is
terminal: this component never shows a node again, and re-processing a
hidden node only re-asserts the hidden state.

Popup-shaped elements (modal, overlay, ...) are hidden only when their
text also mentions an advertising keyword, so ordinary dialogs survive.
"""

import logging
from typing import Dict, Hashable, Iterable, Optional, Sequence

from .dom.node import Node, iter_tree
from .events import MutationChannel, MutationRecord, Subscription
from .patterns import (
    AD_KEYWORDS,
    PatternSet,
    contains_keyword,
    default_ad_patterns,
    default_popup_patterns,
    matches,
)

logger = logging.getLogger(__name__)


class MutationFilter:
    """
    Hides nodes matching the ad pattern set, or the popup pattern set
    plus an ad keyword.

    Usage:
        flt = MutationFilter()
        flt.scan_initial(root)
        flt.attach(mutation_channel)
    """

    def __init__(
        self,
        ad_patterns: Optional[PatternSet] = None,
        popup_patterns: Optional[PatternSet] = None,
        keywords: Sequence[str] = AD_KEYWORDS,
    ):
        self.ad_patterns = ad_patterns if ad_patterns is not None else default_ad_patterns()
        self.popup_patterns = popup_patterns if popup_patterns is not None else default_popup_patterns()
        self.keywords = tuple(k.lower() for k in keywords)
        # Handles keep keys valid while tracked; removed subtrees are dropped
        self._hidden: Dict[Hashable, Node] = {}
        self._subscription: Optional[Subscription] = None
        self.skipped = 0

    @property
    def hidden_count(self) -> int:
        return len(self._hidden)

    def is_hidden(self, node: Node) -> bool:
        return node.key in self._hidden

    def should_hide(self, node: Node) -> bool:
        if matches(node, self.ad_patterns):
            return True
        return matches(node, self.popup_patterns) and contains_keyword(node.text, self.keywords)

    def process(self, node: Node) -> bool:
        """Classify one node; returns True if this call newly hid it."""
        if not node.is_element:
            return False
        if node.key in self._hidden:
            if node.visible:
                node.visible = False
            return False
        if not self.should_hide(node):
            return False
        node.visible = False
        self._hidden[node.key] = node
        logger.debug(f"Hidden {node!r}")
        return True

    def _process_subtree(self, root: Node) -> int:
        newly_hidden = 0
        try:
            for node in iter_tree(root):
                try:
                    if self.process(node):
                        newly_hidden += 1
                except Exception as e:
                    self.skipped += 1
                    logger.warning(f"Skipping unclassifiable node {node!r}: {e}")
        except Exception as e:
            self.skipped += 1
            logger.warning(f"Could not walk subtree of {root!r}: {e}")
        return newly_hidden

    def scan_initial(self, root: Node) -> int:
        newly_hidden = self._process_subtree(root)
        logger.info(f"Initial scan hid {newly_hidden} node(s), {self.hidden_count} hidden in total")
        return newly_hidden

    def on_added(self, nodes: Iterable[Node]) -> int:
        return sum(self._process_subtree(node) for node in nodes)

    def on_removed(self, nodes: Iterable[Node]) -> int:
        """Forget hidden nodes under removed subtrees; returns how many."""
        released = 0
        for removed in nodes:
            try:
                for node in iter_tree(removed):
                    if self._hidden.pop(node.key, None) is not None:
                        released += 1
            except Exception as e:
                logger.warning(f"Could not release hidden nodes under {removed!r}: {e}")
        return released

    def on_mutation(self, records: Sequence[MutationRecord]) -> int:
        newly_hidden = 0
        for record in records:
            self.on_removed(record.removed)
            newly_hidden += self.on_added(record.added)
        if newly_hidden:
            logger.debug(f"Mutation batch hid {newly_hidden} node(s)")
        return newly_hidden

    def attach(self, channel: MutationChannel) -> None:
        """Register the single mutation handler; re-attaching replaces it."""
        self.detach()
        self._subscription = channel.subscribe(self.on_mutation)

    def detach(self) -> None:
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None

    @property
    def attached(self) -> bool:
        return self._subscription is not None and self._subscription.active
