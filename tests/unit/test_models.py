"""Tests for item and category models: tags, touch policy, searchable text."""

from datetime import datetime, timedelta

import pytest
from pydantic import ValidationError

from studylib.models import (
    ITEM_CLASSES,
    Category,
    ItemType,
    MediaLink,
    MediaType,
    Note,
    PdfDocument,
    TextSnippet,
)


class TestCategory:
    """Category identity and defaults."""

    def test_defaults(self):
        """New categories get an id and the default color."""
        category = Category(name="Math")
        assert category.id
        assert category.color == "#3498db"
        assert category.description is None

    def test_equality_is_by_id(self):
        """Same id means equal, regardless of other fields."""
        a = Category(id="c1", name="Math", color="#000000")
        b = Category(id="c1", name="Mathematics", color="#ffffff")
        c = Category(id="c2", name="Math")
        assert a == b
        assert hash(a) == hash(b)
        assert a != c
        assert a != "c1"

    def test_id_is_immutable(self):
        """The id backs equality and hashing, so it cannot be reassigned."""
        category = Category(id="c1", name="Math")
        with pytest.raises(ValidationError):
            category.id = "other"
        assert category.id == "c1"
        category.name = "Mathematics"
        assert category.name == "Mathematics"

    def test_str(self):
        """str() is the name, with a fallback for unnamed categories."""
        assert str(Category(name="Math")) == "Math"
        assert str(Category()) == "Unnamed Category"


class TestItemBasics:
    """Construction, ids, item types and timestamps."""

    def test_item_types(self):
        """Each variant carries its fixed discriminant."""
        assert Note().item_type is ItemType.NOTE
        assert PdfDocument().item_type is ItemType.PDF
        assert MediaLink().item_type is ItemType.MEDIA_LINK
        assert TextSnippet().item_type is ItemType.TEXT_SNIPPET
        assert {cls().item_type: cls for cls in ITEM_CLASSES.values()} == ITEM_CLASSES

    def test_mismatched_item_type_rejected(self):
        """A payload cannot claim another variant's type."""
        with pytest.raises(ValidationError):
            Note(item_type="PDF")

    def test_unique_ids(self):
        """Every item gets its own id."""
        assert Note().id != Note().id

    def test_id_and_date_added_are_immutable(self):
        """id and date_added cannot be reassigned."""
        note = Note()
        with pytest.raises(ValidationError):
            note.id = "other"
        with pytest.raises(ValidationError):
            note.date_added = datetime(2020, 1, 1)

    def test_timestamps_second_precision(self):
        """Timestamps are truncated to whole seconds."""
        note = Note()
        assert note.date_added.microsecond == 0
        assert note.last_modified.microsecond == 0
        assert note.last_modified >= note.date_added

    def test_variant_defaults(self):
        """Variant fields have the documented defaults."""
        assert Note().content == ""
        assert Note().is_markdown is False
        assert PdfDocument().file_size == 0
        assert PdfDocument().page_count == 0
        assert MediaLink().media_type is MediaType.VIDEO
        assert MediaLink().duration_minutes == 0
        assert TextSnippet().language == "text"
        assert TextSnippet().source_url is None

    def test_str_falls_back_to_type(self):
        """Untitled items describe their type."""
        assert str(Note(title="Hello")) == "Hello"
        assert str(PdfDocument()) == "Untitled PDF Document"
        assert str(MediaLink()) == "Untitled Media Link"

    def test_display_names(self):
        """Enums expose human-readable labels."""
        assert ItemType.PDF.display_name == "PDF Document"
        assert ItemType.TEXT_SNIPPET.display_name == "Text Snippet"
        assert MediaType.PODCAST.display_name == "Podcast"


class TestTags:
    """Tag normalization on items."""

    def test_add_tag_normalizes(self, clock):
        """Added tags are trimmed and lowercased."""
        note = Note()
        note.add_tag("  Java ")
        assert note.tags == {"java"}
        assert note.has_tag("JAVA")

    def test_add_tag_idempotent(self):
        """Repeated tags (any case) are stored once."""
        note = Note()
        note.add_tag("java")
        note.add_tag("Java")
        note.add_tag(" JAVA")
        assert note.tags == {"java"}

    @pytest.mark.parametrize("raw", ["Python", "  sql  ", "Machine Learning", "x"])
    def test_add_then_has(self, raw):
        """add_tag(t) makes has_tag(t) true for any non-blank t."""
        note = Note()
        note.add_tag(raw)
        assert note.has_tag(raw)
        assert note.has_tag(raw.strip().lower())

    @pytest.mark.parametrize("raw", ["", "   ", "\t\n", None])
    def test_blank_tag_is_noop(self, clock, raw):
        """Blank tags change nothing and do not touch."""
        note = Note(tags=["keep"])
        before = note.last_modified
        clock.advance(60)
        note.add_tag(raw)
        assert note.tags == {"keep"}
        assert note.last_modified == before

    def test_remove_tag(self):
        """Tags are removed case-insensitively."""
        note = Note(tags=["java", "sql"])
        note.remove_tag(" JAVA ")
        assert note.tags == {"sql"}

    def test_remove_missing_tag_still_touches(self, clock):
        """Removing an absent tag leaves tags alone but touches the item."""
        note = Note(tags=["sql"])
        later = clock.advance(60)
        note.remove_tag("java")
        assert note.tags == {"sql"}
        assert note.last_modified == later

    def test_remove_none_is_noop(self, clock):
        """None is ignored entirely."""
        note = Note(tags=["sql"])
        before = note.last_modified
        clock.advance(60)
        note.remove_tag(None)
        assert note.last_modified == before

    def test_has_tag_none(self):
        """has_tag(None) is False."""
        assert Note(tags=["java"]).has_tag(None) is False

    def test_assigned_tags_are_normalized(self):
        """Direct assignment and construction normalize too."""
        note = Note(tags=["Java", "  ", " SQL"])
        assert note.tags == {"java", "sql"}
        note.tags = {"Python", ""}
        assert note.tags == {"python"}

    def test_tags_are_immutable_snapshot(self):
        """The tag collection cannot be mutated in place."""
        note = Note(tags=["java"])
        assert isinstance(note.tags, frozenset)
        with pytest.raises(AttributeError):
            note.tags.add("sql")  # type: ignore[attr-defined]


class TestTouchPolicy:
    """Which field writes refresh last_modified."""

    @pytest.mark.parametrize(
        "item_cls,field,value,touches",
        [
            (Note, "title", "New", True),
            (Note, "description", "New", True),
            (Note, "category", Category(name="C"), True),
            (Note, "tags", {"a"}, True),
            (Note, "content", "Body", True),
            (Note, "is_markdown", True, True),
            (PdfDocument, "file_path", "/tmp/a.pdf", True),
            (PdfDocument, "author", "Knuth", True),
            (PdfDocument, "file_size", 2048, False),
            (PdfDocument, "page_count", 12, False),
            (MediaLink, "url", "https://example.com", True),
            (MediaLink, "media_type", MediaType.AUDIO, True),
            (MediaLink, "source", "YouTube", True),
            (MediaLink, "duration_minutes", 30, False),
            (TextSnippet, "content", "print()", True),
            (TextSnippet, "language", "python", True),
            (TextSnippet, "source_url", "https://example.com", True),
        ],
    )
    def test_field_write(self, clock, item_cls, field, value, touches):
        """Content-bearing fields touch; metadata-only fields do not."""
        item = item_cls()
        created = item.last_modified
        later = clock.advance(60)

        setattr(item, field, value)

        assert getattr(item, field) == value
        assert item.last_modified == (later if touches else created)
        assert item.date_added == created

    def test_touch(self, clock):
        """touch() sets last_modified to now."""
        note = Note()
        later = clock.advance(5)
        note.touch()
        assert note.last_modified == later

    def test_last_modified_never_before_date_added(self, clock):
        """A clock that goes backwards cannot break the ordering."""
        note = Note()
        clock.now = note.date_added - timedelta(hours=1)
        note.touch()
        assert note.last_modified == note.date_added

    def test_construction_does_not_touch(self, clock):
        """Fields given at construction keep the creation timestamp."""
        note = Note(title="T", content="C", tags=["x"])
        assert note.last_modified == note.date_added == clock.now


class TestSearchableText:
    """Derived free-text search content."""

    def test_common_fields(self):
        """Title, description, tags and category name are included, lowercased."""
        note = Note(
            title="Java Basics",
            description="Intro COURSE",
            tags=["oop"],
            category=Category(name="Programming"),
        )
        text = note.searchable_text()
        assert "java basics" in text
        assert "intro course" in text
        assert "oop" in text
        assert "programming" in text
        assert text == text.lower()

    def test_note_content(self):
        """Notes include their content."""
        assert "hidden word" in Note(content="Hidden Word").searchable_text()

    def test_snippet_content_and_language(self):
        """Snippets include content and language."""
        text = TextSnippet(content="SELECT 1", language="SQL").searchable_text()
        assert "select 1" in text
        assert "sql" in text

    def test_pdf_author_and_file_name(self):
        """PDFs include author and the base file name, not the directory."""
        pdf = PdfDocument(author="Donald Knuth", file_path="/books/secret-dir/taocp.pdf")
        text = pdf.searchable_text()
        assert "donald knuth" in text
        assert "taocp.pdf" in text
        assert "secret-dir" not in text

    def test_pdf_windows_path(self):
        """Backslash paths yield their base name too."""
        pdf = PdfDocument(file_path="C:\\Books\\sicp.pdf")
        assert pdf.file_name == "sicp.pdf"
        assert "sicp.pdf" in pdf.searchable_text()

    def test_media_fields(self):
        """Media links include url, source and media type label."""
        media = MediaLink(url="https://Example.com/v", source="YouTube", media_type=MediaType.LECTURE)
        text = media.searchable_text()
        assert "https://example.com/v" in text
        assert "youtube" in text
        assert "lecture" in text

    def test_pure_and_repeatable(self):
        """Calling it twice gives the same text and changes nothing."""
        note = Note(title="Same", tags=["b", "a"])
        before = note.model_dump()
        assert note.searchable_text() == note.searchable_text()
        assert note.model_dump() == before


class TestVariantHelpers:
    """Small helpers carried by the variants."""

    def test_content_preview(self):
        """Previews collapse whitespace and truncate to 100 characters."""
        assert Note().content_preview == "Empty note"
        assert TextSnippet().content_preview == "Empty snippet"
        assert Note(content="a\n\n  b").content_preview == "a b"
        preview = Note(content="x" * 150).content_preview
        assert len(preview) == 100
        assert preview.endswith("...")

    def test_line_count(self):
        """Trailing newlines do not add lines."""
        assert TextSnippet().line_count == 0
        assert TextSnippet(content="a\nb\n").line_count == 2
        assert TextSnippet(content="one").line_count == 1

    def test_file_name_unknown(self):
        """PDFs without a path report an unknown file name."""
        assert PdfDocument().file_name == "Unknown"

    def test_file_exists(self, tmp_path):
        """file_exists checks the filesystem."""
        path = tmp_path / "doc.pdf"
        assert PdfDocument(file_path=str(path)).file_exists() is False
        path.write_bytes(b"%PDF")
        assert PdfDocument(file_path=str(path)).file_exists() is True
        assert PdfDocument().file_exists() is False

    def test_is_valid_url(self):
        """Only http(s) URLs are valid."""
        assert MediaLink(url="HTTPS://example.com").is_valid_url()
        assert MediaLink(url="http://example.com").is_valid_url()
        assert not MediaLink(url="ftp://example.com").is_valid_url()
        assert not MediaLink().is_valid_url()

    def test_negative_metadata_rejected(self):
        """Sizes and durations cannot be negative."""
        with pytest.raises(ValidationError):
            PdfDocument(file_size=-1)
        with pytest.raises(ValidationError):
            MediaLink(duration_minutes=-5)
