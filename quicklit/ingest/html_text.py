"""DOM helpers shared by the HTML and EPUB loaders."""

from __future__ import annotations

import re
import warnings
from typing import Iterable, List

from bs4 import BeautifulSoup, CData, NavigableString, Tag, XMLParsedAsHTMLWarning
from bs4.exceptions import ParserRejectedMarkup

from . import BadArchive

# Block elements that should start on a new line when collapsing to text.
BLOCK_LEVEL_TAGS = {
    "address",
    "article",
    "aside",
    "blockquote",
    "dd",
    "div",
    "dl",
    "dt",
    "figcaption",
    "figure",
    "footer",
    "form",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "header",
    "hgroup",
    "hr",
    "li",
    "main",
    "nav",
    "ol",
    "p",
    "pre",
    "section",
    "table",
    "td",
    "th",
    "tr",
    "ul",
}
HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")

_INLINE_SPACE = re.compile(r"[^\S\n]+")


def parse_document(markup: bytes | str) -> BeautifulSoup:
    """Parse (X)HTML markup into a DOM, tolerating XML declarations."""

    with warnings.catch_warnings():
        warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)
        try:
            return BeautifulSoup(markup, "html.parser")
        except ParserRejectedMarkup as exc:
            raise BadArchive(f"Unparseable markup: {exc}") from exc


def remove_elements(soup: BeautifulSoup, names: Iterable[str]) -> None:
    for element in soup.find_all(list(names)):
        element.decompose()


def _text_nodes(node: Tag) -> Iterable[str]:
    for child in node.children:
        if isinstance(child, Tag):
            if child.name == "br":
                yield "\n"
                continue
            block = child.name in BLOCK_LEVEL_TAGS
            if block:
                yield "\n"
            yield from _text_nodes(child)
            if block:
                yield "\n"
        elif type(child) in (NavigableString, CData):
            yield str(child)


def element_text(node: Tag) -> str:
    """Text of *node* with all whitespace collapsed to single spaces."""

    return " ".join("".join(_text_nodes(node)).split())


def visible_text(soup: BeautifulSoup) -> str:
    """Readable text of a document, one line per block element."""

    root = soup.body or soup
    lines: List[str] = []
    for line in "".join(_text_nodes(root)).split("\n"):
        line = _INLINE_SPACE.sub(" ", line).strip()
        if line:
            lines.append(line)
    return "\n".join(lines)


def document_title(soup: BeautifulSoup) -> str:
    title = soup.find("title")
    return element_text(title) if title is not None else ""


__all__ = [
    "BLOCK_LEVEL_TAGS",
    "HEADING_TAGS",
    "document_title",
    "element_text",
    "parse_document",
    "remove_elements",
    "visible_text",
]
