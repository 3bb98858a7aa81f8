import json

import pytest

from quicklit.ingest import Chapter
from quicklit.library import ReadingMaterial, deserialize_chapters, serialize_chapters
from quicklit.text.filenames import sanitize_file_name
from quicklit.text.words import WordPositionAccumulator, count_words, split_words


def test_chapter_blob_uses_camel_case_keys():
    blob = serialize_chapters([Chapter("Storm", 0, "ch1.xhtml")])

    assert json.loads(blob) == [{"title": "Storm", "startPosition": 0, "href": "ch1.xhtml"}]
    assert deserialize_chapters(blob) == [Chapter("Storm", 0, "ch1.xhtml")]


def test_deserialize_drops_malformed_records():
    blob = json.dumps(
        [
            {"title": "Good", "startPosition": 3, "href": "a.xhtml"},
            {"title": "No start", "href": "b.xhtml"},
            {"title": "Bool start", "startPosition": True, "href": "c.xhtml"},
            "not a record",
        ]
    ).encode("utf-8")

    assert deserialize_chapters(blob) == [Chapter("Good", 3, "a.xhtml")]


@pytest.mark.parametrize("blob", [None, b"{not json", b'{"title": "x"}'])
def test_deserialize_unreadable_blobs(blob):
    assert deserialize_chapters(blob) is None


def test_serialize_none():
    assert serialize_chapters(None) is None


def test_reading_material_counts_words_and_keeps_chapters():
    chapters = [Chapter("One", 0, "a.xhtml"), Chapter("Two", 2, "b.xhtml")]

    material = ReadingMaterial.create("Book", "alpha beta\n\ngamma", chapters=chapters)

    assert material.word_count == 3
    assert material.current_position == 0
    assert material.chapters == chapters
    assert material.id

    material.set_chapters(None)
    assert material.chapters is None


def test_reading_material_rejects_negative_position():
    with pytest.raises(ValueError):
        ReadingMaterial("Book", "text", current_position=-1)


def test_split_words_treats_all_whitespace_alike():
    assert split_words("  one\ttwo\n\nthree  ") == ["one", "two", "three"]
    assert count_words("") == 0


def test_accumulator_positions():
    accumulator = WordPositionAccumulator()
    accumulator.add_chapter("One", "a b c", "one.xhtml")
    accumulator.add_continuation("d")
    chapter = accumulator.add_chapter("Two", "e f", "two.xhtml")

    assert chapter.start_position == 4
    assert accumulator.word_count == 6
    assert accumulator.seen_titles == {"One", "Two"}
    result = accumulator.result(book_title="Book")
    assert result.full_text == "a b c\n\nd\n\ne f"
    assert result.book_title == "Book"


def test_sanitize_file_name():
    assert sanitize_file_name('a/b\\c?d%e*f|g"h<i>j') == "a_b_c_d_e_f_g_h_i_j"
    assert sanitize_file_name("Plain Title.txt") == "Plain Title.txt"
