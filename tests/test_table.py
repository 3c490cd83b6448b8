"""
Tests for table wrapper classes and table grid operations.
"""

import io
import zipfile

import pytest

from python_docx_blocks import Document, Paragraph
from python_docx_blocks.errors import IndexOutOfRangeError, TableGridError, ValidationError
from python_docx_blocks.identity import SequentialIdSource
from python_docx_blocks.models.table import Table, TableCell, TableRow

WORD_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"

# 3x3 table whose first row has a cell spanning the first two columns
DOCUMENT_WITH_TABLE = f"""<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<w:document xmlns:w="{WORD_NS}">
  <w:body>
    <w:p><w:r><w:t>Text before table</w:t></w:r></w:p>
    <w:tbl>
      <w:tblPr><w:tblW w:w="0" w:type="auto"/></w:tblPr>
      <w:tblGrid>
        <w:gridCol w:w="1000"/>
        <w:gridCol w:w="2000"/>
        <w:gridCol w:w="3000"/>
      </w:tblGrid>
      <w:tr>
        <w:tc>
          <w:tcPr><w:tcW w:w="3000" w:type="dxa"/><w:gridSpan w:val="2"/></w:tcPr>
          <w:p><w:r><w:t>Wide</w:t></w:r></w:p>
        </w:tc>
        <w:tc><w:tcPr><w:tcW w:w="3000" w:type="dxa"/></w:tcPr><w:p><w:r><w:t>R1C3</w:t></w:r></w:p></w:tc>
      </w:tr>
      <w:tr>
        <w:tc><w:tcPr><w:tcW w:w="1000" w:type="dxa"/></w:tcPr><w:p><w:r><w:t>R2C1</w:t></w:r></w:p></w:tc>
        <w:tc><w:tcPr><w:tcW w:w="2000" w:type="dxa"/></w:tcPr><w:p><w:r><w:t>R2C2</w:t></w:r></w:p></w:tc>
        <w:tc><w:tcPr><w:tcW w:w="3000" w:type="dxa"/></w:tcPr><w:p><w:r><w:t>R2C3</w:t></w:r></w:p></w:tc>
      </w:tr>
      <w:tr>
        <w:trPr><w:gridBefore w:val="1"/></w:trPr>
        <w:tc><w:tcPr><w:tcW w:w="2000" w:type="dxa"/></w:tcPr><w:p><w:r><w:t>R3C2</w:t></w:r></w:p></w:tc>
        <w:tc><w:tcPr><w:tcW w:w="3000" w:type="dxa"/></w:tcPr><w:p><w:r><w:t>R3C3</w:t></w:r></w:p></w:tc>
      </w:tr>
    </w:tbl>
    <w:p><w:r><w:t>Text after table</w:t></w:r></w:p>
    <w:sectPr/>
  </w:body>
</w:document>"""


def create_test_docx(content: str = DOCUMENT_WITH_TABLE) -> bytes:
    """Create a test .docx in memory with proper OOXML structure.

    Args:
        content: The document.xml content

    Returns:
        The .docx file as bytes
    """
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
        zf.writestr("word/document.xml", content)
    return buffer.getvalue()


@pytest.fixture
def table():
    doc = Document(create_test_docx())
    # The generator frame keeps the document alive while the table is used
    yield doc.tables[0]


def spans(row: TableRow) -> list[int]:
    return [cell.grid_span for cell in row.cells]


class TestTableStructure:
    """Tests for reading table structure."""

    def test_tables_found(self):
        doc = Document(create_test_docx())

        assert len(doc.tables) == 1
        assert isinstance(doc.tables[0], Table)

    def test_grid(self, table):
        assert table.grid == [1000, 2000, 3000]
        assert table.col_count == 3
        assert table.row_count == 3

    def test_rows_and_cells(self, table):
        assert all(isinstance(row, TableRow) for row in table.rows)
        assert all(isinstance(cell, TableCell) for cell in table.rows[1].cells)
        assert [cell.text() for cell in table.rows[1].cells] == ["R2C1", "R2C2", "R2C3"]

    def test_cell_grid_positions(self, table):
        assert [cell.col_index for cell in table.rows[0].cells] == [0, 2]
        assert [cell.col_index for cell in table.rows[2].cells] == [1, 2]
        assert table.get_cell(2, 1).row_index == 2

    def test_cell_at_column(self, table):
        row = table.rows[0]

        assert row.cell_at_column(1).text() == "Wide"
        assert table.rows[2].cell_at_column(0) is None

    def test_grid_before(self, table):
        assert table.rows[2].grid_before == 1
        assert table.rows[2].grid_width == 3

    def test_validate_grid(self, table):
        table.validate_grid()

    def test_validate_grid_reports_row(self, table):
        table.rows[1].cells[0].grid_span = 2

        with pytest.raises(TableGridError) as exc_info:
            table.validate_grid()

        assert exc_info.value.row_index == 1

    def test_get_row_out_of_range(self, table):
        with pytest.raises(IndexOutOfRangeError) as exc_info:
            table.get_row(3)

        assert exc_info.value.index == 3
        assert exc_info.value.count == 3

    def test_get_cell_out_of_range(self, table):
        with pytest.raises(IndexOutOfRangeError):
            table.get_cell(0, 2)

    def test_cell_is_a_container(self, table):
        cell = table.get_cell(1, 1)
        assert table.text.splitlines()[1] == "R2C1\tR2C2\tR2C3"

        cell.add_paragraph("Second line")

        assert cell.text() == "R2C2\nSecond line"

    def test_cell_tcpr_is_not_a_block(self, table):
        cell = table.get_cell(1, 0)

        assert [type(block) for block in cell.blocks()] == [Paragraph]


class TestCreate:
    """Tests for building new tables."""

    def test_create_even_widths(self):
        table = Table.create(2, 3)

        assert table.grid == [3000, 3000, 3000]
        assert [spans(row) for row in table.rows] == [[1, 1, 1], [1, 1, 1]]
        table.validate_grid()

    def test_create_with_widths(self):
        table = Table.create(1, 2, widths=[1500, 4500])

        assert table.grid == [1500, 4500]
        assert [cell.width for cell in table.rows[0].cells] == [1500, 4500]

    def test_every_cell_has_a_paragraph(self):
        table = Table.create(2, 2)

        for row in table.rows:
            for cell in row.cells:
                assert len(list(cell.paragraphs())) == 1

    @pytest.mark.parametrize("rows,cols", [(0, 2), (2, 0)])
    def test_create_rejects_empty_shape(self, rows, cols):
        with pytest.raises(ValidationError):
            Table.create(rows, cols)

    def test_create_rejects_width_count(self):
        with pytest.raises(ValidationError):
            Table.create(1, 2, widths=[100])

    def test_cell_paragraphs_get_ids_on_attach(self):
        doc = Document(id_source=SequentialIdSource())

        table = doc.add_table(2, 2)

        ids = [p.id for row in table.rows for cell in row.cells for p in cell.paragraphs()]
        assert ids == ["00000001", "00000002", "00000003", "00000004"]


class TestMergeCells:
    """Tests for horizontal merges."""

    def test_merge_three_of_four(self):
        doc = Document()
        table = doc.add_table(1, 4)

        merged = table.merge_cells(0, 0, 3)

        assert merged.grid_span == 3
        assert spans(table.rows[0]) == [3, 1]
        table.validate_grid()

    def test_merge_moves_content(self):
        doc = Document()
        table = doc.add_table(1, 3)
        for index, cell in enumerate(table.rows[0].cells):
            next(cell.paragraphs()).text = f"C{index}"

        merged = table.merge_cells(0, 0, 3)

        assert [p.text for p in merged.paragraphs()] == ["C0", "C1", "C2"]

    def test_merge_drops_empty_paragraphs(self):
        doc = Document()
        table = doc.add_table(1, 2)

        merged = table.merge_cells(0, 0, 2)

        assert [p.text for p in merged.paragraphs()] == [""]

    def test_merge_sums_spans_and_widths(self, table):
        merged = table.merge_cells(0, 0, 2)

        assert merged.grid_span == 3
        assert merged.width == 6000
        assert merged.text() == "Wide\nR1C3"
        table.validate_grid()

    def test_merge_after_grid_before(self, table):
        merged = table.merge_cells(2, 0, 2)

        assert merged.col_index == 1
        assert merged.grid_span == 2
        table.validate_grid()

    @pytest.mark.parametrize(
        "start,count",
        [(-1, 2), (0, 1), (0, 0), (1, 3), (2, 2)],
    )
    def test_invalid_range(self, table, start, count):
        with pytest.raises(IndexOutOfRangeError):
            table.merge_cells(1, start, count)

        assert spans(table.rows[1]) == [1, 1, 1]

    def test_merged_cell_keeps_tcpr_order(self):
        table = Table.create(1, 2)
        cell = table.rows[0].cells[0]
        cell.vertical_merge = "restart"

        table.merge_cells(0, 0, 2)

        tags = [child.tag.split("}")[1] for child in cell.properties]
        assert tags == ["tcW", "gridSpan", "vMerge"]


class TestVerticalMerge:
    """Tests for merging down a column."""

    def test_merge_column(self):
        doc = Document()
        table = doc.add_table(3, 2)
        for index, row in enumerate(table.rows):
            next(row.cells[1].paragraphs()).text = f"R{index}"

        first = table.merge_cells_in_column(1, 0, 3)

        assert [row.cells[1].vertical_merge for row in table.rows] == [
            "restart",
            "continue",
            "continue",
        ]
        assert [p.text for p in first.paragraphs()] == ["R0", "R1", "R2"]
        assert all(len(list(row.cells[1].paragraphs())) == 1 for row in table.rows[1:])
        table.validate_grid()

    def test_merge_column_requires_cell_start(self, table):
        # Column 1 is in the middle of the spanning cell of row 0
        with pytest.raises(TableGridError):
            table.merge_cells_in_column(1, 0, 2)

    def test_merge_column_requires_equal_spans(self, table):
        with pytest.raises(TableGridError):
            table.merge_cells_in_column(0, 0, 2)

    def test_merge_column_out_of_range(self, table):
        with pytest.raises(IndexOutOfRangeError):
            table.merge_cells_in_column(3, 0, 2)
        with pytest.raises(IndexOutOfRangeError):
            table.merge_cells_in_column(2, 1, 5)


class TestColumnWidths:
    """Tests for setting column widths."""

    def test_fold_widths_over_spans(self, table):
        table.set_column_widths([100, 200, 300])

        assert table.grid == [100, 200, 300]
        assert [cell.width for cell in table.rows[0].cells] == [300, 300]
        assert [cell.width for cell in table.rows[1].cells] == [100, 200, 300]
        assert [cell.width for cell in table.rows[2].cells] == [200, 300]
        table.validate_grid()

    def test_table_width_and_layout(self, table):
        table.set_column_widths([100, 200, 300])

        tbl_w = table.properties.find(f"{{{WORD_NS}}}tblW")
        layout = table.properties.find(f"{{{WORD_NS}}}tblLayout")
        assert tbl_w.get(f"{{{WORD_NS}}}w") == "600"
        assert tbl_w.get(f"{{{WORD_NS}}}type") == "dxa"
        assert layout.get(f"{{{WORD_NS}}}type") == "fixed"

    def test_length_mismatch(self, table):
        with pytest.raises(TableGridError, match="Must supply widths for each column"):
            table.set_column_widths([100, 200])

    def test_negative_width(self, table):
        with pytest.raises(TableGridError):
            table.set_column_widths([100, -1, 300])

    def test_fold_failure_leaves_table_unchanged(self, table):
        # Row 1 now covers four grid columns
        table.rows[1].cells[2].grid_span = 2
        widths_before = [[cell.width for cell in row.cells] for row in table.rows]

        with pytest.raises(TableGridError) as exc_info:
            table.set_column_widths([1, 2, 3])

        assert exc_info.value.row_index == 1
        assert table.grid == [1000, 2000, 3000]
        assert [[cell.width for cell in row.cells] for row in table.rows] == widths_before

    def test_row_fold_widths(self, table):
        assert table.rows[0].fold_widths([1, 2, 3]) == [3, 3]
        assert table.rows[2].fold_widths([1, 2, 3]) == [2, 3]


class TestRowsAndColumns:
    """Tests for inserting and removing rows and columns."""

    def test_insert_row(self, table):
        row = table.insert_row(1)

        assert table.row_count == 4
        assert row.index == 1
        assert spans(row) == [1, 1, 1]
        assert [cell.width for cell in row.cells] == [1000, 2000, 3000]
        table.validate_grid()

    def test_add_row(self, table):
        row = table.add_row()

        assert row.index == 3
        assert row.cells[0].text() == ""

    def test_insert_row_out_of_range(self, table):
        with pytest.raises(IndexOutOfRangeError):
            table.insert_row(5)

    def test_new_row_paragraphs_get_ids(self):
        doc = Document(id_source=SequentialIdSource())
        table = doc.add_table(1, 2)

        row = table.add_row()

        assert [next(cell.paragraphs()).id for cell in row.cells] == ["00000003", "00000004"]
        doc.validate_ids()

    def test_remove_row(self, table):
        table.remove_row(0)

        assert table.row_count == 2
        assert table.rows[0].cells[0].text() == "R2C1"

    def test_remove_last_row_refused(self):
        table = Table.create(1, 2)

        with pytest.raises(TableGridError):
            table.remove_row(0)

    def test_insert_column_between_cells(self, table):
        table.insert_column(2, width=500)

        assert table.grid == [1000, 2000, 500, 3000]
        assert spans(table.rows[0]) == [2, 1, 1]
        assert spans(table.rows[1]) == [1, 1, 1, 1]
        table.validate_grid()

    def test_insert_column_inside_span_widens_cell(self, table):
        table.insert_column(1, width=500)

        assert spans(table.rows[0]) == [3, 1]
        assert table.rows[0].cells[0].width == 3500
        assert spans(table.rows[1]) == [1, 1, 1, 1]
        table.validate_grid()

    def test_insert_column_before_placeholder(self, table):
        table.insert_column(0, width=500)

        assert table.rows[2].grid_before == 2
        table.validate_grid()

    def test_add_column_default_width(self, table):
        table.add_column()

        assert table.grid == [1000, 2000, 3000, 2000]
        assert len(table.rows[1].cells) == 4
        table.validate_grid()

    def test_remove_column_shrinks_span(self, table):
        table.remove_column(0)

        assert table.grid == [2000, 3000]
        assert spans(table.rows[0]) == [1, 1]
        assert table.rows[0].cells[0].width == 2000
        assert [cell.text() for cell in table.rows[1].cells] == ["R2C2", "R2C3"]
        assert table.rows[2].grid_before == 0
        table.validate_grid()

    def test_remove_column_removes_cells(self, table):
        table.remove_column(2)

        assert table.grid == [1000, 2000]
        assert [len(row.cells) for row in table.rows] == [1, 2, 1]
        table.validate_grid()

    def test_remove_last_column_refused(self):
        table = Table.create(2, 1)

        with pytest.raises(TableGridError):
            table.remove_column(0)

    def test_remove_column_out_of_range(self, table):
        with pytest.raises(IndexOutOfRangeError):
            table.remove_column(3)


class TestTableInDocument:
    """Tests for tables round-tripping through a saved document."""

    def test_edits_survive_save(self):
        doc = Document(create_test_docx())
        doc.tables[0].merge_cells(1, 1, 2)
        doc.tables[0].set_column_widths([500, 500, 500])

        reopened = Document(doc.save_to_bytes())

        table = reopened.tables[0]
        assert spans(table.rows[1]) == [1, 2]
        assert table.grid == [500, 500, 500]
        table.validate_grid()
