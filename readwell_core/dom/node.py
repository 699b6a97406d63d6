"""
Node Handle - the only view of the live tree the engine relies on.

The tree is owned by the host. Components read it, toggle visibility and
swap resource attributes on nodes they tag; they never restructure it.
"""

from abc import ABC, abstractmethod
from typing import Hashable, Iterator, List, Optional

HIDDEN_CLASS = "readwell-hidden"


class Node(ABC):
    """Opaque handle into the host tree"""

    @property
    @abstractmethod
    def tag(self) -> str:
        """Lower-case tag name, '#text' style names for non-elements"""

    @property
    @abstractmethod
    def is_element(self) -> bool:
        ...

    @property
    @abstractmethod
    def key(self) -> Hashable:
        """Stable identity of the underlying node, used for bookkeeping"""

    @abstractmethod
    def get_attribute(self, name: str) -> Optional[str]:
        ...

    @abstractmethod
    def set_attribute(self, name: str, value: str) -> None:
        ...

    @abstractmethod
    def remove_attribute(self, name: str) -> None:
        ...

    @property
    @abstractmethod
    def classes(self) -> List[str]:
        ...

    @abstractmethod
    def add_class(self, name: str) -> None:
        ...

    @abstractmethod
    def remove_class(self, name: str) -> None:
        ...

    @property
    @abstractmethod
    def text(self) -> str:
        """Aggregate text content of the subtree"""

    @property
    @abstractmethod
    def children(self) -> List['Node']:
        """Element children in document order"""

    @property
    @abstractmethod
    def parent(self) -> Optional['Node']:
        """Lookup only, never used to mutate upward"""

    @property
    @abstractmethod
    def visible(self) -> bool:
        ...

    @visible.setter
    @abstractmethod
    def visible(self, value: bool) -> None:
        ...

    @abstractmethod
    def is_attached(self) -> bool:
        """True while the node is still reachable from the document root"""

    def has_class(self, name: str) -> bool:
        return name in self.classes

    def __eq__(self, other) -> bool:
        return isinstance(other, Node) and self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)


def iter_tree(node: Node) -> Iterator[Node]:
    """Depth-first pre-order walk starting with `node` itself."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        # reversed so children come out in document order
        stack.extend(reversed(current.children))


def iter_descendants(node: Node) -> Iterator[Node]:
    """Like iter_tree, without the starting node."""
    walker = iter_tree(node)
    next(walker, None)
    yield from walker
