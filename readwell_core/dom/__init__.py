"""
Node-handle abstraction over a live document tree.

The engine only talks to `Node`; adapters bind a concrete tree type to it.
"""

from .node import Node, iter_tree, iter_descendants, HIDDEN_CLASS
from .soup import SoupNode, parse_document, to_html

__all__ = [
    'Node',
    'iter_tree',
    'iter_descendants',
    'HIDDEN_CLASS',
    'SoupNode',
    'parse_document',
    'to_html',
]
