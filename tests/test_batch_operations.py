"""
Tests for batch edit operations and edit files.
"""

import json
import tempfile
from pathlib import Path

import pytest

from python_docx_blocks import Document, EditResult, Paragraph, Table
from python_docx_blocks.errors import ValidationError
from python_docx_blocks.identity import SequentialIdSource


@pytest.fixture
def doc():
    document = Document(id_source=SequentialIdSource())
    document.add_paragraph("Hello world")
    document.add_table(2, 3, widths=[1000, 1000, 1000])
    document.add_paragraph("Closing")
    return document


class TestApplyEdits:
    """Tests for apply_edits() handlers."""

    def test_insert_paragraph(self, doc):
        results = doc.apply_edits([{"type": "insert_paragraph", "offset": 5, "text": "Mid"}])

        assert results[0].success
        assert isinstance(results[0].block, Paragraph)
        assert [p.text for p in doc.paragraphs] == ["Hello", "Mid", " world", "Closing"]

    def test_add_paragraph_with_style(self, doc):
        results = doc.apply_edits([{"type": "add_paragraph", "text": "End", "style": "Quote"}])

        assert results[0].success
        assert doc.paragraphs[-1].text == "End"
        assert doc.paragraphs[-1].style == "Quote"

    def test_add_table(self, doc):
        results = doc.apply_edits([{"type": "add_table", "rows": 1, "cols": 2}])

        assert results[0].success
        assert isinstance(results[0].block, Table)
        assert len(doc.tables) == 2
        assert doc.tables[1].col_count == 2

    def test_merge_cells(self, doc):
        results = doc.apply_edits(
            [{"type": "merge_cells", "table": 0, "row": 0, "start": 0, "count": 2}]
        )

        assert results[0].success
        assert len(doc.tables[0].get_row(0).cells) == 2

    def test_set_column_widths(self, doc):
        results = doc.apply_edits([{"type": "set_column_widths", "widths": [500, 1500, 2500]}])

        assert results[0].success
        assert doc.tables[0].grid == [500, 1500, 2500]

    def test_remove_block(self, doc):
        results = doc.apply_edits([{"type": "remove_block", "index": 1}])

        assert results[0].success
        assert doc.tables == []
        assert len(doc.blocks) == 2

    def test_sequence_of_edits(self, doc):
        results = doc.apply_edits(
            [
                {"type": "add_paragraph", "text": "One"},
                {"type": "add_paragraph", "text": "Two"},
            ]
        )

        assert all(r.success for r in results)
        assert [p.text for p in doc.paragraphs][-2:] == ["One", "Two"]


class TestApplyEditsErrors:
    """Tests for failures recorded in EditResult."""

    def test_missing_type(self, doc):
        results = doc.apply_edits([{"text": "no type"}])

        assert not results[0].success
        assert results[0].edit_type == "unknown"
        assert "Missing 'type' field" in results[0].message
        assert isinstance(results[0].error, ValidationError)

    def test_unknown_type(self, doc):
        results = doc.apply_edits([{"type": "explode"}])

        assert not results[0].success
        assert results[0].message == "Unknown edit type: explode"

    def test_missing_parameter(self, doc):
        results = doc.apply_edits([{"type": "add_table", "rows": 2}])

        assert not results[0].success
        assert "Missing required parameter" in results[0].message

    def test_offset_out_of_range(self, doc):
        results = doc.apply_edits([{"type": "insert_paragraph", "offset": 999, "text": "x"}])

        assert not results[0].success
        assert results[0].message.startswith("Out of range")

    def test_table_index_out_of_range(self, doc):
        results = doc.apply_edits([{"type": "set_column_widths", "table": 4, "widths": [1]}])

        assert not results[0].success
        assert "Table index 4 out of range" in results[0].message

    def test_grid_error_recorded(self, doc):
        results = doc.apply_edits(
            [{"type": "merge_cells", "table": 0, "row": 0, "start": 1, "count": 5}]
        )

        assert not results[0].success
        assert results[0].error is not None

    def test_continue_after_error(self, doc):
        results = doc.apply_edits(
            [
                {"type": "explode"},
                {"type": "add_paragraph", "text": "Still added"},
            ]
        )

        assert [r.success for r in results] == [False, True]
        assert doc.paragraphs[-1].text == "Still added"

    def test_stop_on_error(self, doc):
        results = doc.apply_edits(
            [
                {"type": "explode"},
                {"type": "add_paragraph", "text": "Never added"},
            ],
            stop_on_error=True,
        )

        assert len(results) == 1
        assert doc.paragraphs[-1].text == "Closing"

    def test_result_str(self):
        result = EditResult(success=True, edit_type="add_paragraph", message="Added")

        assert str(result) == "✓ add_paragraph: Added"


class TestApplyEditFile:
    """Tests for apply_edit_file() with YAML and JSON."""

    def test_yaml_file(self, doc):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "edits.yaml"
            path.write_text(
                "edits:\n"
                "  - type: insert_paragraph\n"
                "    offset: 0\n"
                "    text: First\n"
                "  - type: set_column_widths\n"
                "    table: 0\n"
                "    widths: [100, 200, 300]\n"
            )

            results = doc.apply_edit_file(path)

        assert all(r.success for r in results)
        assert doc.paragraphs[0].text == "First"
        assert doc.tables[0].grid == [100, 200, 300]

    def test_json_file(self, doc):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "edits.json"
            path.write_text(json.dumps({"edits": [{"type": "add_paragraph", "text": "J"}]}))

            results = doc.apply_edit_file(path, format="json")

        assert results[0].success
        assert doc.paragraphs[-1].text == "J"

    def test_missing_file(self, doc):
        with pytest.raises(FileNotFoundError):
            doc.apply_edit_file("/nonexistent/edits.yaml")

    def test_unsupported_format(self, doc):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "edits.toml"
            path.write_text("edits = []")

            with pytest.raises(ValidationError, match="Unsupported format"):
                doc.apply_edit_file(path, format="toml")

    def test_invalid_yaml(self, doc):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "edits.yaml"
            path.write_text("edits: [unclosed\n")

            with pytest.raises(ValidationError, match="Failed to parse YAML"):
                doc.apply_edit_file(path)

    def test_invalid_json(self, doc):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "edits.json"
            path.write_text("{not json")

            with pytest.raises(ValidationError, match="Failed to parse JSON"):
                doc.apply_edit_file(path, format="json")

    def test_missing_edits_key(self, doc):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "edits.yaml"
            path.write_text("changes: []\n")

            with pytest.raises(ValidationError, match="'edits' key"):
                doc.apply_edit_file(path)

    def test_edits_not_a_list(self, doc):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "edits.yaml"
            path.write_text("edits: nope\n")

            with pytest.raises(ValidationError, match="must be a list"):
                doc.apply_edit_file(path)
