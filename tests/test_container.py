"""
Tests for block containers: enumeration, insertion, removal and offsets.
"""

import io
import zipfile

import pytest

from python_docx_blocks import Document, Paragraph, Table
from python_docx_blocks.errors import (
    AlreadyAttachedError,
    BlockNotFoundError,
    ConcurrentModificationError,
    OffsetOutOfRangeError,
)
from python_docx_blocks.identity import SequentialIdSource
from python_docx_blocks.models.block import UnknownBlock

WORD_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"


def create_docx(body: str) -> bytes:
    """Build a minimal .docx whose body holds the given XML."""
    document_xml = f"""<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<w:document xmlns:w="{WORD_NS}">
  <w:body>{body}</w:body>
</w:document>"""
    content_types = """<?xml version="1.0" encoding="UTF-8"?>
<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">
<Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>
<Default Extension="xml" ContentType="application/xml"/>
<Override PartName="/word/document.xml" ContentType="application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"/>
</Types>"""
    rels = """<?xml version="1.0" encoding="UTF-8"?>
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
<Relationship Id="rId1" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/officeDocument" Target="word/document.xml"/>
</Relationships>"""

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        zf.writestr("[Content_Types].xml", content_types)
        zf.writestr("_rels/.rels", rels)
        zf.writestr("word/document.xml", document_xml)
    return buffer.getvalue()


HELLO_WORLD = (
    "<w:p><w:r><w:t>Hello</w:t></w:r></w:p>"
    "<w:p><w:r><w:t>World</w:t></w:r></w:p>"
    '<w:sectPr><w:pgSz w:w="12240" w:h="15840"/></w:sectPr>'
)


def body_tags(doc: Document) -> list[str]:
    """Local names of the body's children, in order."""
    return [child.tag.split("}")[1] for child in doc.body.element]


class TestEnumeration:
    """Tests for reading the block sequence."""

    def test_blocks_in_document_order(self):
        body = (
            "<w:p><w:r><w:t>Intro</w:t></w:r></w:p>"
            "<w:tbl><w:tblGrid><w:gridCol w:w=\"100\"/></w:tblGrid>"
            "<w:tr><w:tc><w:p/></w:tc></w:tr></w:tbl>"
            "<w:sdt><w:sdtContent><w:p/></w:sdtContent></w:sdt>"
            "<w:sectPr/>"
        )
        doc = Document(create_docx(body))

        blocks = doc.blocks

        assert len(blocks) == 3
        assert isinstance(blocks[0], Paragraph)
        assert isinstance(blocks[1], Table)
        assert isinstance(blocks[2], UnknownBlock)
        assert blocks[2].name == "sdt"

    def test_section_properties_not_a_block(self):
        doc = Document(create_docx(HELLO_WORLD))

        assert len(doc.body) == 2
        assert doc.body.section_properties is not None

    def test_same_wrapper_returned(self):
        doc = Document(create_docx(HELLO_WORLD))

        assert doc.body[0] is doc.body[0]

    def test_block_before_and_after(self):
        doc = Document(create_docx(HELLO_WORLD))
        hello, world = doc.paragraphs

        assert hello.previous_block() is None
        assert hello.next_block() is world
        assert world.previous_block() is hello
        assert world.next_block() is None

    def test_index_of(self):
        doc = Document(create_docx(HELLO_WORLD))
        world = doc.paragraphs[1]

        assert doc.body.index_of(world) == 1

    def test_mutation_during_iteration_raises(self):
        doc = Document(create_docx(HELLO_WORLD))

        with pytest.raises(ConcurrentModificationError):
            for _ in doc.body.blocks():
                doc.add_paragraph("More")

    def test_snapshot_allows_mutation(self):
        doc = Document(create_docx(HELLO_WORLD))

        for paragraph in doc.paragraphs:
            doc.add_paragraph(paragraph.text.upper())

        assert [p.text for p in doc.paragraphs] == ["Hello", "World", "HELLO", "WORLD"]


class TestMutation:
    """Tests for adding, inserting and removing blocks."""

    def test_add_keeps_section_properties_last(self):
        doc = Document(create_docx(HELLO_WORLD))

        doc.add_paragraph("Appended")
        doc.add_table(1, 1)

        assert body_tags(doc)[-1] == "sectPr"
        assert body_tags(doc)[-2] == "tbl"

    def test_adjacent_tables_get_separator(self):
        doc = Document(create_docx(HELLO_WORLD))

        first = doc.add_table(1, 2)
        second = doc.add_table(1, 2)

        assert body_tags(doc) == ["p", "p", "tbl", "p", "tbl", "sectPr"]
        separator = first.next_block()
        assert isinstance(separator, Paragraph)
        assert separator.is_empty
        assert separator.next_block() is second

    def test_table_inserted_before_table_gets_separator(self):
        doc = Document(create_docx(HELLO_WORLD))
        existing = doc.add_table(1, 1)

        doc.body.insert_before(existing, Table.create(1, 1))

        assert body_tags(doc) == ["p", "p", "tbl", "p", "tbl", "sectPr"]

    def test_cells_do_not_separate_tables(self):
        doc = Document()
        cell = doc.add_table(1, 1).get_cell(0, 0)
        cell.remove(next(cell.blocks()))

        cell.add(Table.create(1, 1))
        cell.add(Table.create(1, 1))

        assert [child.tag.split("}")[1] for child in cell.element] == ["tcPr", "tbl", "tbl"]

    def test_insert_by_index(self):
        doc = Document(create_docx(HELLO_WORLD))

        doc.body.insert(1, Paragraph.create("Middle"))
        doc.body.insert(99, Paragraph.create("End"))

        assert [p.text for p in doc.paragraphs] == ["Hello", "Middle", "World", "End"]

    def test_insert_after(self):
        doc = Document(create_docx(HELLO_WORLD))
        hello = doc.paragraphs[0]

        doc.body.insert_after(hello, Paragraph.create("After"))

        assert [p.text for p in doc.paragraphs] == ["Hello", "After", "World"]

    def test_insert_before_foreign_anchor_raises(self):
        doc = Document(create_docx(HELLO_WORLD))
        other = Document(create_docx(HELLO_WORLD))

        with pytest.raises(BlockNotFoundError):
            doc.body.insert_before(other.paragraphs[0], Paragraph.create("X"))

    def test_remove_foreign_block_raises(self):
        doc = Document(create_docx(HELLO_WORLD))

        with pytest.raises(BlockNotFoundError):
            doc.body.remove(Paragraph.create("Never attached"))

    def test_remove(self):
        doc = Document(create_docx(HELLO_WORLD))
        hello = doc.paragraphs[0]

        hello.remove()

        assert [p.text for p in doc.paragraphs] == ["World"]
        assert hello.container is None
        assert hello.element.getparent() is None

    def test_clear_keeps_section_properties(self):
        doc = Document(create_docx(HELLO_WORLD))

        doc.body.clear()

        assert body_tags(doc) == ["sectPr"]

    def test_add_attached_block_raises(self):
        doc = Document(create_docx(HELLO_WORLD))

        with pytest.raises(AlreadyAttachedError):
            doc.body.add(doc.paragraphs[0])


class TestInsertAt:
    """Tests for inserting blocks at character offsets."""

    def test_start_indexes(self):
        doc = Document(create_docx(HELLO_WORLD))
        hello, world = doc.paragraphs

        assert hello.start_index() == 0
        assert world.start_index() == 5

    def test_insert_inside_paragraph_splits_it(self):
        doc = Document(create_docx(HELLO_WORLD), id_source=SequentialIdSource())
        new = Paragraph.create("New")

        doc.insert_at(3, new)

        assert [p.text for p in doc.paragraphs] == ["Hel", "New", "lo", "World"]
        assert doc.paragraphs[1] is new
        assert body_tags(doc)[-1] == "sectPr"

    def test_split_halves_get_distinct_ids(self):
        body = (
            '<w:p xmlns:w14="http://schemas.microsoft.com/office/word/2010/wordml" '
            'w14:paraId="0000AAAA"><w:r><w:t>Hello</w:t></w:r></w:p>'
        )
        doc = Document(create_docx(body), id_source=SequentialIdSource(start=0x100))

        doc.insert_paragraph_at(2, "X")

        left, middle, right = doc.paragraphs
        assert left.id == "0000AAAA"
        assert {middle.id, right.id} == {"00000100", "00000101"}
        doc.validate_ids()

    def test_insert_on_boundary_does_not_split(self):
        doc = Document(create_docx(HELLO_WORLD))
        hello, world = doc.paragraphs

        doc.insert_paragraph_at(5, "Between")

        assert [p.text for p in doc.paragraphs] == ["Hello", "Between", "World"]
        assert doc.paragraphs[0] is hello
        assert doc.paragraphs[2] is world

    def test_insert_at_start(self):
        doc = Document(create_docx(HELLO_WORLD))

        doc.insert_paragraph_at(0, "First")

        assert [p.text for p in doc.paragraphs] == ["First", "Hello", "World"]

    def test_insert_at_end(self):
        doc = Document(create_docx(HELLO_WORLD))

        doc.insert_paragraph_at(10, "Last")

        assert [p.text for p in doc.paragraphs] == ["Hello", "World", "Last"]

    def test_insert_into_empty_body(self):
        doc = Document()

        doc.insert_paragraph_at(0, "Only")

        assert [p.text for p in doc.paragraphs] == ["Only"]

    @pytest.mark.parametrize("offset", [-1, 11])
    def test_offset_out_of_range(self, offset):
        doc = Document(create_docx(HELLO_WORLD))

        with pytest.raises(OffsetOutOfRangeError):
            doc.insert_paragraph_at(offset, "Nope")

        assert [p.text for p in doc.paragraphs] == ["Hello", "World"]

    def test_insert_table_inside_paragraph(self):
        doc = Document(create_docx(HELLO_WORLD))

        table = doc.insert_at(7, Table.create(2, 2))

        assert [p.text for p in doc.paragraphs] == ["Hello", "Wo", "rld"]
        assert table.previous_block().text == "Wo"
        assert table.next_block().text == "rld"

    def test_paragraph_properties_copied_to_both_halves(self):
        body = (
            '<w:p><w:pPr><w:pStyle w:val="Heading1"/></w:pPr>'
            "<w:r><w:t>Heading</w:t></w:r></w:p>"
        )
        doc = Document(create_docx(body))

        doc.insert_paragraph_at(4, "X")

        assert [p.style for p in doc.paragraphs] == ["Heading1", None, "Heading1"]

    def test_tables_do_not_count_towards_body_offsets(self):
        doc = Document(create_docx(HELLO_WORLD))
        table = doc.insert_at(5, Table.create(1, 1))
        table.get_cell(0, 0).add_paragraph("Cell text")

        assert doc.paragraphs[1].start_index() == 5
        assert doc.body.text_length() == 10

    def test_cell_offsets_are_local(self):
        doc = Document()
        cell = doc.add_table(1, 1).get_cell(0, 0)
        cell.add_paragraph("abc")

        cell.insert_paragraph_at(2, "X")

        assert [p.text for p in cell.paragraphs()] == ["", "ab", "X", "c"]
