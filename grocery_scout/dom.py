from __future__ import annotations

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

# Attributes the renderer stamps with each element's rendered size.
WIDTH_ATTR = "data-gs-w"
HEIGHT_ATTR = "data-gs-h"

_STRIP_TAGS = ["script", "style", "noscript", "template"]


def parse_snapshot(html: str) -> "Node":
    """Parse a page snapshot into the document root node."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup.find_all(_STRIP_TAGS):
        tag.decompose()
    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()
    return Node(soup)


def _size(tag: Tag, attr: str) -> float | None:
    raw = tag.get(attr)
    if raw is None:
        return None
    try:
        return float(raw)
    except (TypeError, ValueError):
        return None


class Node:
    """Read-only view of one element of a page snapshot.

    Equality is identity of the underlying element: two cards with the same
    markup are still different cards.
    """

    __slots__ = ("tag",)

    def __init__(self, tag: Tag):
        self.tag = tag

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Node) and other.tag is self.tag

    def __hash__(self) -> int:
        return id(self.tag)

    def __repr__(self) -> str:
        return f"<Node {self.tag.name} {self.text()[:40]!r}>"

    @property
    def name(self) -> str:
        return self.tag.name

    def text(self) -> str:
        """All text below this element, whitespace collapsed."""
        return " ".join(self.tag.get_text().split())

    def own_text(self) -> str:
        """Text of this element's direct text children only."""
        parts = [str(c) for c in self.tag.children if type(c) is NavigableString]
        return " ".join(" ".join(parts).split())

    @property
    def width(self) -> float | None:
        return _size(self.tag, WIDTH_ATTR)

    @property
    def height(self) -> float | None:
        return _size(self.tag, HEIGHT_ATTR)

    def has_min_size(self, size: tuple[int, int]) -> bool:
        # Unknown sizes (plain HTML without stamps) pass.
        min_w, min_h = size
        w, h = self.width, self.height
        if w is not None and w < min_w:
            return False
        if h is not None and h < min_h:
            return False
        return True

    def select(self, selector: str) -> list["Node"]:
        return [Node(t) for t in self.tag.select(selector)]

    def select_one(self, selector: str) -> "Node | None":
        found = self.tag.select_one(selector)
        return Node(found) if found is not None else None

    def descendants(self) -> list["Node"]:
        """Descendant elements in document order."""
        return [Node(t) for t in self.tag.find_all(True)]

    def parent(self) -> "Node | None":
        p = self.tag.parent
        if p is None or isinstance(p, BeautifulSoup):
            return None
        return Node(p)
