import pytest

from conftest import xhtml
from quicklit.ingest.classifier import (
    ChapterClassifier,
    Verdict,
    clean_title_text,
    detect_title,
    fallback_title,
    is_chapter_number,
    is_likely_book_title,
    is_navigation_item,
    should_skip_chapter,
    title_from_chapter_number,
)
from quicklit.ingest.html_text import parse_document


def _classify(body, href="ch1.xhtml", seen=None):
    return ChapterClassifier().classify(href, xhtml(body), seen or set())


def test_heading_becomes_title_and_is_removed_from_body():
    decision = _classify("<h1>The Beginning</h1><p>Hello world</p>")

    assert decision.verdict is Verdict.NEW_CHAPTER
    assert decision.title == "The Beginning"
    assert decision.body == "Hello world"


def test_chapter_number_heading_defers_to_following_title():
    decision = _classify(
        '<h1 class="chapter-number">CHAPTER 1</h1><h2>The Storm Rises</h2><p>Rain fell</p>'
    )

    assert decision.title == "The Storm Rises"
    assert decision.body == "CHAPTER 1\nRain fell"


def test_prologue_heading():
    decision = _classify("<h1>Prologue</h1><p>Long ago</p>")

    assert decision.title == "Prologue"
    assert decision.body == "Long ago"


def test_chapter_title_class_wins_over_earlier_heading():
    decision = _classify(
        '<h1>Part One</h1><h2 class="chapter-title">A Quiet Place</h2><p>Silence</p>'
    )

    assert decision.title == "A Quiet Place"
    assert decision.body == "Part One\nSilence"


def test_title_tag_used_when_no_heading():
    classifier = ChapterClassifier()
    decision = classifier.classify(
        "ch1.xhtml", xhtml("<p>Just text</p>", title="Midnight Garden"), set()
    )

    assert decision.title == "Midnight Garden"
    assert decision.body == "Just text"


def test_filename_used_when_nothing_else_qualifies():
    soup = parse_document(xhtml("<p>Just text</p>", title="1"))

    assert detect_title(soup, "chapters/ch07.xhtml") == "ch07"


def test_fallback_title():
    assert fallback_title("OEBPS/Text/part_3.xhtml#frag") == "part_3"
    assert fallback_title("") == "Chapter"


def test_scripts_and_styles_are_not_body_text():
    decision = _classify(
        "<h1>Scripted</h1><script>var x = 1;</script><style>p {}</style><p>Shown</p>"
    )

    assert decision.body == "Shown"


def test_empty_body_is_skipped():
    assert _classify("<h1>Lonely Heading</h1>").verdict is Verdict.SKIP


def test_navigation_href_is_skipped_before_parsing():
    classifier = ChapterClassifier()

    decision = classifier.classify("toc.xhtml", b"<not really markup", set())

    assert decision.verdict is Verdict.SKIP


def test_front_matter_title_is_skipped():
    assert _classify("<h1>Newsletter</h1><p>Sign up</p>").verdict is Verdict.SKIP


def test_seen_title_is_continuation():
    decision = _classify("<h1>Storm</h1><p>more rain</p>", seen={"Storm"})

    assert decision.verdict is Verdict.CONTINUATION
    assert decision.body == "more rain"


@pytest.mark.parametrize(
    "title, href, expected",
    [
        ("Anything", "Text/p2.xhtml", True),
        ("Anything", "text/p2.xhtml", True),
        ("Storm", "a.xhtml", True),
        ("Storm - Image", "a.xhtml", True),
        ("Calm", "a.xhtml", False),
        ("Text", "a.xhtml", False),
    ],
)
def test_is_continuation(title, href, expected):
    assert ChapterClassifier().is_continuation(title, href, {"Storm"}) is expected


def test_custom_continuation_patterns():
    classifier = ChapterClassifier([r"_split\d+"])

    assert classifier.is_continuation("New", "ch1_split001.xhtml", set())
    assert not classifier.is_continuation("New", "Text/ch1.xhtml", set())


def test_clean_title_text():
    assert clean_title_text("  “Hello,&nbsp;World!”  ") == "Hello, World"
    assert clean_title_text("A  \xa0 B") == "A B"
    assert clean_title_text("...") == ""


@pytest.mark.parametrize(
    "text", ["Foreword", "Copyright 2020", "12", "Chapter", "part", "ab", "x" * 101]
)
def test_book_metadata_titles(text):
    assert is_likely_book_title(text)


def test_regular_title_is_not_book_metadata():
    assert not is_likely_book_title("The Long Road")


@pytest.mark.parametrize(
    "text, expected",
    [
        ("CHAPTER 12", True),
        ("Chapter 3:", True),
        ("Part 2", True),
        ("7", True),
        ("Chapter Seven", False),
        ("The Road", False),
    ],
)
def test_is_chapter_number(text, expected):
    assert is_chapter_number(text) is expected


def test_navigation_and_skip_patterns():
    assert is_navigation_item("OEBPS/toc.xhtml")
    assert is_navigation_item("OEBPS/chapter1.xhtml", "Cover")
    assert not is_navigation_item("OEBPS/chapter1.xhtml", "The Road")
    assert should_skip_chapter("Table of Contents", "x.xhtml")
    assert should_skip_chapter("Anything", "title page.xhtml")
    assert not should_skip_chapter("The Road", "chapter1.xhtml")


def test_book_title_heading_is_passed_over():
    decision = _classify("<h1>Foreword</h1><h2>Real Title</h2><p>Body text</p>")

    assert decision.title == "Real Title"
    assert decision.body == "Foreword\nBody text"


def test_numeric_title_tag_falls_back_to_filename():
    decision = ChapterClassifier().classify(
        "chapters/intro-notes.xhtml", xhtml("<p>Just text</p>", title="2024"), set()
    )

    assert decision.title == "intro-notes"
    assert decision.body == "Just text"


def test_epub_chapter_section_heading_wins_over_earlier_heading():
    decision = _classify(
        "<h1>Book Name Here</h1>"
        '<section epub:type="chapter"><h2>Into the Woods</h2><p>Trees</p></section>'
    )

    assert decision.title == "Into the Woods"
    assert decision.body == "Book Name Here\nTrees"


def test_chapter_number_without_heading_sibling_uses_chapter_title():
    soup = parse_document(
        '<body><div class="chapter-number">3</div><p>Epigraph</p>'
        '<h1 class="chapter-title">The Far Shore</h1></body>'
    )

    assert title_from_chapter_number(soup) == "The Far Shore"


def test_declared_navigation_title_is_skipped():
    decision = ChapterClassifier().classify(
        "part1.xhtml", xhtml("<h1>Anything</h1><p>text</p>"), set(), declared_title="Cover"
    )

    assert decision.verdict is Verdict.SKIP
