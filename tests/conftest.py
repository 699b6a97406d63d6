"""
Shared fixtures for readwell tests
"""

import os

import pytest

from readwell_core.dom.soup import SoupNode, parse_document


ARTICLE_PAGE = """<html><head><title>Sample</title></head><body>
<div id="nav"><a href="/">Home</a><a href="/about">About</a></div>
<div id="story" class="post-body"><p>First paragraph of a long story about reading.</p><p>Second paragraph keeps going.</p><p>Third paragraph ends it.</p></div>
<div class="advertisement">Buy things</div>
<div class="modal" id="login">Subscribe to our newsletter</div>
<div class="popup" id="promo">Advertisement: win a prize</div>
<img id="hero" src="hero.jpg" data-readwell-top="120">
<img id="footer-img" src="footer.jpg" data-readwell-top="2400">
<video id="clip" autoplay src="clip.mp4"></video>
</body></html>"""


@pytest.fixture
def article_page():
    """Parsed sample article with ads, popups and images"""
    return parse_document(ARTICLE_PAGE)


@pytest.fixture
def by_id():
    """Look up a node handle by element id"""
    def _find(root: SoupNode, ident: str) -> SoupNode:
        element = root.element.find(id=ident)
        assert element is not None, f"no element with id {ident!r}"
        return SoupNode(element)
    return _find


def pytest_configure(config):
    """Configure pytest"""
    # Keep CLI tests from attaching console handlers to captured streams
    os.environ['READWELL_LOG_CONSOLE'] = 'false'
    os.environ.setdefault('READWELL_LOG_LEVEL', 'DEBUG')
