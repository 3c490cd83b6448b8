"""
Tests for the Paragraph block.
"""

import pytest
from lxml import etree

from python_docx_blocks import NumberingReference, Paragraph
from python_docx_blocks.errors import NotAttachedError
from python_docx_blocks.models.block import UnknownBlock, wrap_block

WORD_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"


def w(tag: str) -> str:
    return f"{{{WORD_NS}}}{tag}"


class TestCreate:
    """Tests for Paragraph.create()."""

    def test_empty(self):
        paragraph = Paragraph.create()

        assert paragraph.text == ""
        assert paragraph.is_empty
        assert paragraph.id is None
        assert not paragraph.is_attached

    def test_with_style(self):
        paragraph = Paragraph.create("Title", style="Heading1")

        assert paragraph.style == "Heading1"
        assert paragraph.properties[0].tag == w("pStyle")

    def test_preserve_space(self):
        paragraph = Paragraph.create(" padded ")

        t = paragraph.element.find(f"{w('r')}/{w('t')}")
        assert t.get("{http://www.w3.org/XML/1998/namespace}space") == "preserve"

    def test_carriage_return_newline_is_one_break(self):
        paragraph = Paragraph.create("a\r\nb")

        assert paragraph.text == "a\nb"
        assert len(paragraph.element.findall(f".//{w('br')}")) == 1

    def test_wrong_element(self):
        with pytest.raises(ValueError, match="Expected w:p"):
            Paragraph(etree.Element(w("tbl")))


class TestStyle:
    """Tests for reading and writing the paragraph style."""

    def test_change_style(self):
        paragraph = Paragraph.create("x", style="Normal")

        paragraph.style = "Quote"

        assert paragraph.style == "Quote"
        assert len(paragraph.properties.findall(w("pStyle"))) == 1

    def test_remove_style(self):
        paragraph = Paragraph.create("x", style="Normal")

        paragraph.style = None

        assert paragraph.style is None

    def test_remove_missing_style(self):
        paragraph = Paragraph.create("x")

        paragraph.style = None

        assert paragraph.properties is None


class TestNumbering:
    """Tests for the paragraph's own numbering properties."""

    def test_set_numbering(self):
        paragraph = Paragraph.create("item", style="ListParagraph")

        paragraph.set_numbering(4, 1)

        assert paragraph.numbering == NumberingReference(4, 1)
        # numPr follows pStyle
        assert [child.tag for child in paragraph.properties] == [w("pStyle"), w("numPr")]

    def test_set_numbering_replaces(self):
        paragraph = Paragraph.create("item")
        paragraph.set_numbering(4, 1)

        paragraph.set_numbering(5)

        assert paragraph.numbering == NumberingReference(5, 0)
        assert len(paragraph.properties.findall(w("numPr"))) == 1

    def test_is_list_item(self):
        assert Paragraph.create("x", style="ListParagraph").is_list_item()
        assert not Paragraph.create("x", style="Normal").is_list_item()

        numbered = Paragraph.create("x")
        numbered.set_numbering(1)
        assert numbered.is_list_item()

    def test_numbering_in_tracked_property_change_ignored(self):
        element = etree.fromstring(
            f'<w:p xmlns:w="{WORD_NS}"><w:pPr>'
            '<w:pPrChange w:id="1" w:author="A"><w:pPr>'
            '<w:numPr><w:ilvl w:val="0"/><w:numId w:val="2"/></w:numPr>'
            "</w:pPr></w:pPrChange>"
            "</w:pPr><w:r><w:t>x</w:t></w:r></w:p>"
        )

        assert not Paragraph(element).is_list_item()

    def test_level_only_numbering(self):
        element = etree.fromstring(
            f'<w:p xmlns:w="{WORD_NS}"><w:pPr><w:numPr><w:ilvl w:val="2"/></w:numPr></w:pPr></w:p>'
        )

        assert Paragraph(element).numbering is None


class TestBlockBehaviour:
    """Tests for block-level behaviour shared through Block."""

    def test_detached_navigation_fails(self):
        paragraph = Paragraph.create("x")

        with pytest.raises(NotAttachedError):
            paragraph.next_block()
        with pytest.raises(NotAttachedError):
            paragraph.remove()

    def test_wrap_block_dispatch(self):
        assert isinstance(wrap_block(etree.Element(w("p"))), Paragraph)

        unknown = wrap_block(etree.Element(w("sdt")))
        assert isinstance(unknown, UnknownBlock)
        assert unknown.name == "sdt"
        assert b"sdt" in unknown.payload

    def test_repr(self):
        paragraph = Paragraph.create("x" * 60, style="Normal")

        assert repr(paragraph) == f"<Paragraph style=Normal: {'x' * 50 + '...'!r}>"
