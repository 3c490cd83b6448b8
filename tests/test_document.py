"""
Tests for opening, viewing and saving a Document.
"""

import io
import tempfile
import zipfile
from pathlib import Path

import pytest

from python_docx_blocks import Document, Paragraph, Table, UnknownBlock
from python_docx_blocks.errors import DuplicateIdError, MalformedContainerError, ValidationError

WORD_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
W14_NS = "http://schemas.microsoft.com/office/word/2010/wordml"


def create_test_docx(body: str) -> bytes:
    """Create a minimal .docx with the given body content."""
    document_xml = f"""<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<w:document xmlns:w="{WORD_NS}" xmlns:w14="{W14_NS}">
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


MIXED_BODY = (
    "<w:p><w:r><w:t>Intro</w:t></w:r></w:p>"
    "<w:sdt><w:sdtContent><w:p><w:r><w:t>Control</w:t></w:r></w:p></w:sdtContent></w:sdt>"
    "<w:tbl><w:tblGrid><w:gridCol w:w=\"500\"/></w:tblGrid>"
    "<w:tr><w:tc><w:p><w:r><w:t>Cell</w:t></w:r></w:p></w:tc></w:tr></w:tbl>"
    "<w:p><w:r><w:t>Outro</w:t></w:r></w:p>"
    "<w:sectPr/>"
)


class TestOpen:
    """Tests for the supported document sources."""

    def test_from_bytes(self):
        doc = Document(create_test_docx(MIXED_BODY))

        assert doc.path is None
        assert len(doc.paragraphs) == 2

    def test_from_stream(self):
        doc = Document(io.BytesIO(create_test_docx(MIXED_BODY)))

        assert doc.text == "Intro\nOutro"

    def test_from_path(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "in.docx"
            path.write_bytes(create_test_docx(MIXED_BODY))

            doc = Document(str(path))

            assert doc.path == path

    def test_missing_path(self):
        with pytest.raises(ValidationError, match="Document not found"):
            Document("/nonexistent/in.docx")

    def test_missing_body(self):
        data = create_test_docx("")
        buffer = io.BytesIO()
        with zipfile.ZipFile(io.BytesIO(data)) as source, zipfile.ZipFile(buffer, "w") as target:
            for item in source.infolist():
                content = source.read(item)
                if item.filename == "word/document.xml":
                    content = f'<w:document xmlns:w="{WORD_NS}"/>'.encode()
                target.writestr(item, content)

        with pytest.raises(MalformedContainerError) as exc_info:
            Document(buffer.getvalue())

        assert exc_info.value.missing == "w:body"

    def test_duplicate_ids_rejected(self):
        body = (
            '<w:p w14:paraId="00000001"/>'
            '<w:tbl><w:tr><w:tc><w:p w14:paraId="00000001"/></w:tc></w:tr></w:tbl>'
        )

        with pytest.raises(DuplicateIdError) as exc_info:
            Document(create_test_docx(body))

        assert exc_info.value.duplicates == {"00000001": 2}

    def test_duplicate_ids_allowed_without_validation(self):
        body = '<w:p w14:paraId="00000001"/><w:p w14:paraId="00000001"/>'

        doc = Document(create_test_docx(body), validate_ids=False)

        assert len(doc.paragraphs) == 2

    def test_new_document(self):
        doc = Document()

        assert doc.blocks == []
        assert doc.styles.has_style("Normal")
        assert doc.body.section_properties is not None


class TestViews:
    """Tests for the block snapshots."""

    def test_block_kinds(self):
        doc = Document(create_test_docx(MIXED_BODY))

        kinds = [type(block) for block in doc.blocks]

        assert kinds == [Paragraph, UnknownBlock, Table, Paragraph]

    def test_unknown_block_text_not_counted(self):
        doc = Document(create_test_docx(MIXED_BODY))

        assert doc.body.text_length() == len("IntroOutro")

    def test_snapshots_are_lists(self):
        doc = Document(create_test_docx(MIXED_BODY))

        blocks = doc.blocks
        doc.add_paragraph("More")

        assert len(blocks) == 4
        assert len(doc.blocks) == 5

    def test_repr(self):
        doc = Document(create_test_docx(MIXED_BODY))

        assert repr(doc) == "<Document <in-memory>: 2 paragraphs>"


class TestSave:
    """Tests for saving documents."""

    def test_unknown_blocks_preserved(self):
        doc = Document(create_test_docx(MIXED_BODY))
        doc.add_paragraph("Added")

        reopened = Document(doc.save_to_bytes())

        sdt = reopened.blocks[1]
        assert isinstance(sdt, UnknownBlock)
        assert b"Control" in sdt.payload
        assert reopened.paragraphs[-1].text == "Added"

    def test_appended_before_section_properties(self):
        doc = Document(create_test_docx(MIXED_BODY))

        doc.add_paragraph("Last")

        assert doc.body.element[-1].tag == f"{{{WORD_NS}}}sectPr"

    def test_save_in_place(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "doc.docx"
            path.write_bytes(create_test_docx(MIXED_BODY))

            doc = Document(path)
            doc.add_paragraph("Saved")
            doc.save()

            assert Document(path).paragraphs[-1].text == "Saved"

    def test_save_in_memory_requires_path(self):
        doc = Document()

        with pytest.raises(ValueError, match="output_path is required"):
            doc.save()

    def test_new_document_saves_valid_package(self):
        doc = Document()
        doc.add_paragraph("Hello")

        with zipfile.ZipFile(io.BytesIO(doc.save_to_bytes())) as zf:
            names = zf.namelist()

        assert names[0] == "[Content_Types].xml"
        assert "word/document.xml" in names
        assert "word/styles.xml" in names
