"""
BeautifulSoup adapter for the node-handle abstraction.

Hidden state is written inline (`display: none !important`) plus a marker
class, so it survives serialisation and wins over page styles.
"""

from typing import Hashable, List, Optional

from bs4 import BeautifulSoup, Tag

from .node import HIDDEN_CLASS, Node

HIDE_DECLARATION = "display: none !important;"


class SoupNode(Node):
    """Node handle backed by a bs4 element"""

    __slots__ = ("_el",)

    def __init__(self, element):
        self._el = element

    @property
    def element(self):
        return self._el

    @property
    def document(self) -> Optional[BeautifulSoup]:
        current = self._el
        while current is not None and not isinstance(current, BeautifulSoup):
            current = current.parent
        return current

    @property
    def tag(self) -> str:
        if isinstance(self._el, BeautifulSoup):
            return "#document"
        if isinstance(self._el, Tag):
            return (self._el.name or "").lower()
        return "#text"

    @property
    def is_element(self) -> bool:
        return isinstance(self._el, Tag)

    @property
    def key(self) -> Hashable:
        return id(self._el)

    def get_attribute(self, name: str) -> Optional[str]:
        if not isinstance(self._el, Tag):
            return None
        value = self._el.get(name)
        if value is None:
            return None
        if isinstance(value, (list, tuple)):
            return " ".join(value)
        return str(value)

    def set_attribute(self, name: str, value: str) -> None:
        self._el[name] = value

    def remove_attribute(self, name: str) -> None:
        if isinstance(self._el, Tag) and name in self._el.attrs:
            del self._el[name]

    @property
    def classes(self) -> List[str]:
        if not isinstance(self._el, Tag):
            return []
        value = self._el.get("class") or []
        if isinstance(value, str):
            return value.split()
        return list(value)

    def add_class(self, name: str) -> None:
        current = self.classes
        if name not in current:
            self._el["class"] = current + [name]

    def remove_class(self, name: str) -> None:
        current = [c for c in self.classes if c != name]
        if current:
            self._el["class"] = current
        else:
            self.remove_attribute("class")

    @property
    def text(self) -> str:
        if isinstance(self._el, Tag):
            return self._el.get_text()
        return str(self._el)

    @property
    def children(self) -> List['SoupNode']:
        if not isinstance(self._el, Tag):
            return []
        return [SoupNode(child) for child in self._el.children if isinstance(child, Tag)]

    @property
    def parent(self) -> Optional['SoupNode']:
        parent = self._el.parent
        return SoupNode(parent) if parent is not None else None

    @property
    def visible(self) -> bool:
        return HIDDEN_CLASS not in self.classes

    @visible.setter
    def visible(self, value: bool) -> None:
        style = (self.get_attribute("style") or "").replace(HIDE_DECLARATION, "").strip()
        if value:
            self.remove_class(HIDDEN_CLASS)
            if style:
                self.set_attribute("style", style)
            else:
                self.remove_attribute("style")
        else:
            self.add_class(HIDDEN_CLASS)
            if style and not style.endswith(";"):
                style += ";"
            self.set_attribute("style", f"{style} {HIDE_DECLARATION}".strip())

    def is_attached(self) -> bool:
        return self.document is not None

    def find_first(self, tag: str) -> Optional['SoupNode']:
        if not isinstance(self._el, Tag):
            return None
        found = self._el.find(tag)
        return SoupNode(found) if found is not None else None

    def append_fragment(self, html: str) -> List['SoupNode']:
        """
        Parse `html` and append its top-level elements to this node.

        Returns the attached nodes, which is what a host would report
        as the added nodes of a mutation record.
        """
        fragment = BeautifulSoup(html, "html.parser")
        added = []
        for child in list(fragment.contents):
            node = child.extract()
            self._el.append(node)
            if isinstance(node, Tag):
                added.append(SoupNode(node))
        return added

    def detach(self) -> None:
        """Remove this node from its tree (host-side mutation)."""
        self._el.extract()

    def __repr__(self) -> str:
        ident = self.get_attribute("id")
        classes = ".".join(self.classes)
        label = self.tag + (f"#{ident}" if ident else "") + (f".{classes}" if classes else "")
        return f"SoupNode<{label}>"


def parse_document(html: str) -> SoupNode:
    """Parse an HTML document and return its root handle."""
    return SoupNode(BeautifulSoup(html, "lxml"))


def to_html(root: SoupNode) -> str:
    return str(root.element)
