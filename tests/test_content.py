"""Tests for subtree scoring and content location."""

import pytest

from readwell_core.content import candidates, locate, mark_content_region, rank, score
from readwell_core.dom.soup import SoupNode, parse_document
from readwell_core.style import CONTENT_AREA_CLASS

# 600 chars, 5 paragraphs, no links, content hint
CONTAINER_A = '<div id="a" class="content">' + "".join("<p>" + "a" * 120 + "</p>" for _ in range(5)) + "</div>"
# 200 chars, 1 paragraph, 150 chars of link text, no hint
CONTAINER_B = '<div id="b" class="sidebar"><p>' + "b" * 50 + '<a href="#">' + "c" * 150 + "</a></p></div>"


def _by_id(root, ident):
    return SoupNode(root.element.find(id=ident))


class TestScore:
    """Test the scoring formula."""

    def test_content_container(self):
        root = parse_document(CONTAINER_A)
        assert score(_by_id(root, "a")) == pytest.approx(6 + 10 + 10)

    def test_link_heavy_container(self):
        root = parse_document(CONTAINER_B)
        assert score(_by_id(root, "b")) == pytest.approx(2 + 2 - 20 * 0.75)

    def test_text_component_is_capped(self):
        root = parse_document('<div id="long"><p>' + "x" * 10000 + "</p></div>")
        assert score(_by_id(root, "long")) == pytest.approx(50 + 2)

    def test_hint_is_case_insensitive(self):
        root = parse_document('<div id="x" class="MainColumn"><p>' + "x" * 100 + "</p></div>")
        assert score(_by_id(root, "x")) == pytest.approx(1 + 2 + 10)

    def test_hint_from_id(self):
        root = parse_document('<div id="article-body"><p>' + "x" * 100 + "</p></div>")
        assert score(_by_id(root, "article-body")) == pytest.approx(1 + 2 + 10)

    def test_class_and_id_do_not_run_together(self):
        root = parse_document('<div id="tent" class="con"><p>' + "x" * 100 + "</p></div>")
        assert score(_by_id(root, "tent")) == pytest.approx(1 + 2)

    def test_empty_container(self):
        root = parse_document('<div id="e"><p></p></div>')
        assert score(_by_id(root, "e")) == pytest.approx(2)


class TestLocate:
    """Test content region selection."""

    @pytest.mark.parametrize("html", [
        CONTAINER_A + CONTAINER_B,
        CONTAINER_B + CONTAINER_A,
    ])
    def test_best_container_wins_in_any_order(self, html):
        root = parse_document(html)
        assert locate(root) == _by_id(root, "a")

    def test_tie_goes_to_first_in_document_order(self):
        body = "<p>" + "t" * 300 + "</p><p>more</p>"
        root = parse_document(f'<div id="first">{body}</div><div id="second">{body}</div>')
        assert score(_by_id(root, "first")) == score(_by_id(root, "second"))
        assert locate(root) == _by_id(root, "first")

    def test_negative_best_is_still_returned(self):
        root = parse_document(CONTAINER_B)
        assert locate(root) == _by_id(root, "b")

    def test_no_paragraph_container(self):
        root = parse_document("<div><span>no paragraphs here</span></div>")
        assert list(candidates(root)) == []
        assert locate(root) is None

    def test_candidates_in_document_order(self):
        root = parse_document(CONTAINER_B + CONTAINER_A)
        ids = [c.get_attribute("id") for c in candidates(root)]
        assert ids == ["b", "a"]

    def test_rank_orders_best_first(self):
        root = parse_document(CONTAINER_B + CONTAINER_A)
        ranked = rank(root)
        assert [c.node.get_attribute("id") for c in ranked] == ["a", "b"]
        assert ranked[0].score > ranked[1].score


class TestMarkContentRegion:
    def test_marks_located_node(self):
        root = parse_document(CONTAINER_A + CONTAINER_B)
        region = mark_content_region(root)
        assert region == _by_id(root, "a")
        assert region.has_class(CONTENT_AREA_CLASS)

    def test_falls_back_to_body(self):
        root = parse_document("<div>nothing to read</div>")
        region = mark_content_region(root)
        assert region.tag == "body"
        assert SoupNode(root.element.body).has_class(CONTENT_AREA_CLASS)
