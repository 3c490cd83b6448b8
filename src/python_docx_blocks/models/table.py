"""
Table wrapper classes and grid bookkeeping.

A table declares its columns once in w:tblGrid (one w:gridCol per grid
column, widths in dxa). Every row must cover the whole grid: the sum of its
cells' w:gridSpan values, plus any w:gridBefore / w:gridAfter placeholders,
equals the number of grid columns. Every operation here that changes the
shape of the table restores that invariant before returning.

Rows and cells are cached wrappers owned by their table; they hold only weak
references back to their owner.
"""

from __future__ import annotations

import logging
import weakref
from typing import TYPE_CHECKING

from lxml import etree

from ..constants import DEFAULT_TABLE_WIDTH, NSMAP_FULL, WORD_NAMESPACE, w
from ..container import BlockContainer
from ..errors import IndexOutOfRangeError, TableGridError, ValidationError
from ..identity import assign_ids
from .block import Block, register_block
from .paragraph import Paragraph

if TYPE_CHECKING:
    from ..document import Document
    from ..identity import IdSource

logger = logging.getLogger(__name__)

# Schema order of the children we write into w:tblPr and w:tcPr
TBL_PR_ORDER = [
    "tblStyle", "tblpPr", "tblOverlap", "bidiVisual", "tblStyleRowBandSize",
    "tblStyleColBandSize", "tblW", "jc", "tblCellSpacing", "tblInd", "tblBorders",
    "shd", "tblLayout", "tblCellMar", "tblLook", "tblCaption", "tblDescription",
]
TC_PR_ORDER = [
    "cnfStyle", "tcW", "gridSpan", "hMerge", "vMerge", "tcBorders", "shd",
    "noWrap", "tcMar", "textDirection", "tcFitText", "vAlign", "hideMark",
]


def get_or_add_ordered(parent: etree._Element, local: str, order: list[str]) -> etree._Element:
    """Get a property child, inserting it at its schema position if missing."""
    existing = parent.find(w(local))
    if existing is not None:
        return existing

    element = etree.Element(w(local))
    rank = order.index(local)
    for child in parent:
        tag = child.tag
        if isinstance(tag, str) and tag.startswith(f"{{{WORD_NAMESPACE}}}"):
            name = tag.split("}", 1)[1]
            if name in order and order.index(name) > rank:
                child.addprevious(element)
                return element
    parent.append(element)
    return element


def _int_attr(element: etree._Element | None, attr: str = "val", default: int = 0) -> int:
    if element is None:
        return default
    value = element.get(w(attr))
    try:
        return int(value) if value is not None else default
    except ValueError:
        return default


def _new_cell(width: int | None = None) -> etree._Element:
    """Create a w:tc with an optional dxa width and one empty paragraph."""
    tc = etree.Element(w("tc"))
    tc_pr = etree.SubElement(tc, w("tcPr"))
    if width is not None:
        tc_w = etree.SubElement(tc_pr, w("tcW"))
        tc_w.set(w("w"), str(width))
        tc_w.set(w("type"), "dxa")
    etree.SubElement(tc, w("p"))
    return tc


class TableCell(BlockContainer):
    """A table cell: a block container inside a row."""

    kind = "cell"
    property_tags = frozenset({w("tcPr")})

    def __init__(self, element: etree._Element, row: TableRow) -> None:
        """Initialize TableCell wrapper.

        Args:
            element: The w:tc XML element to wrap
            row: The row owning the cell
        """
        if element.tag != w("tc"):
            raise ValueError(f"Expected w:tc element, got {element.tag}")
        super().__init__(element)
        self._row_ref = weakref.ref(row)

    @property
    def row(self) -> TableRow | None:
        return self._row_ref()

    @property
    def table(self) -> Table | None:
        row = self.row
        return row.table if row is not None else None

    @property
    def document(self) -> Document | None:
        table = self.table
        return table.document if table is not None else None

    @property
    def id_source(self) -> IdSource:
        table = self.table
        container = table.container if table is not None else None
        if container is not None:
            return container.id_source
        return super().id_source

    @property
    def row_index(self) -> int:
        row = self.row
        return row.index if row is not None else -1

    @property
    def col_index(self) -> int:
        """Grid column at which this cell starts."""
        row = self.row
        if row is None:
            return -1
        column = row.grid_before
        for cell in row.cells:
            if cell.element is self._element:
                return column
            column += cell.grid_span
        return -1

    @property
    def properties(self) -> etree._Element:
        """The w:tcPr element, created as the first child if needed."""
        tc_pr = self._element.find(w("tcPr"))
        if tc_pr is None:
            tc_pr = etree.Element(w("tcPr"))
            self._element.insert(0, tc_pr)
        return tc_pr

    @property
    def grid_span(self) -> int:
        """Number of grid columns this cell occupies (default 1)."""
        tc_pr = self._element.find(w("tcPr"))
        span = tc_pr.find(w("gridSpan")) if tc_pr is not None else None
        return max(_int_attr(span, default=1), 1)

    @grid_span.setter
    def grid_span(self, value: int) -> None:
        if value < 1:
            raise TableGridError(f"gridSpan must be at least 1, got {value}")
        if value == 1:
            tc_pr = self._element.find(w("tcPr"))
            span = tc_pr.find(w("gridSpan")) if tc_pr is not None else None
            if span is not None:
                tc_pr.remove(span)
            return
        span = get_or_add_ordered(self.properties, "gridSpan", TC_PR_ORDER)
        span.set(w("val"), str(value))

    @property
    def width(self) -> int | None:
        """Cell width in dxa, if declared as dxa."""
        tc_pr = self._element.find(w("tcPr"))
        tc_w = tc_pr.find(w("tcW")) if tc_pr is not None else None
        if tc_w is None or tc_w.get(w("type"), "dxa") != "dxa":
            return None
        return _int_attr(tc_w, "w")

    @width.setter
    def width(self, value: int) -> None:
        tc_w = get_or_add_ordered(self.properties, "tcW", TC_PR_ORDER)
        tc_w.set(w("w"), str(int(value)))
        tc_w.set(w("type"), "dxa")

    @property
    def vertical_merge(self) -> str | None:
        """"restart", "continue" or None."""
        tc_pr = self._element.find(w("tcPr"))
        v_merge = tc_pr.find(w("vMerge")) if tc_pr is not None else None
        if v_merge is None:
            return None
        return v_merge.get(w("val"), "continue")

    @vertical_merge.setter
    def vertical_merge(self, value: str | None) -> None:
        if value is None:
            tc_pr = self._element.find(w("tcPr"))
            v_merge = tc_pr.find(w("vMerge")) if tc_pr is not None else None
            if v_merge is not None:
                tc_pr.remove(v_merge)
            return
        v_merge = get_or_add_ordered(self.properties, "vMerge", TC_PR_ORDER)
        if value == "restart":
            v_merge.set(w("val"), "restart")
        else:
            v_merge.attrib.pop(w("val"), None)

    def ensure_paragraph(self) -> None:
        """Give the cell an empty paragraph if it has none, as OOXML requires."""
        if next(self.paragraphs(), None) is None:
            self.add(Paragraph.create())

    def take_content_from(self, other: TableCell) -> None:
        """Move other's non-empty blocks to the end of this cell."""
        for block in list(other.blocks()):
            if isinstance(block, Paragraph) and block.is_empty:
                continue
            other.remove(block)
            self.add(block)

    def __repr__(self) -> str:
        """String representation of the cell."""
        text = self.text()
        preview = text[:30] + "..." if len(text) > 30 else text
        return f"<TableCell [{self.row_index},{self.col_index}]: {preview!r}>"


class TableRow:
    """Wrapper around a w:tr element."""

    def __init__(self, element: etree._Element, table: Table) -> None:
        """Initialize TableRow wrapper.

        Args:
            element: The w:tr XML element to wrap
            table: The table owning the row
        """
        if element.tag != w("tr"):
            raise ValueError(f"Expected w:tr element, got {element.tag}")
        self._element = element
        self._table_ref = weakref.ref(table)
        self._cells: dict[etree._Element, TableCell] = {}

    @property
    def element(self) -> etree._Element:
        """Get the underlying XML element."""
        return self._element

    @property
    def table(self) -> Table | None:
        return self._table_ref()

    @property
    def index(self) -> int:
        table = self.table
        if table is None:
            return -1
        for index, row in enumerate(table.element.findall(w("tr"))):
            if row is self._element:
                return index
        return -1

    @property
    def cells(self) -> list[TableCell]:
        """The row's cells, in order."""
        cells = []
        current = {}
        for tc in self._element.findall(w("tc")):
            cell = self._cells.get(tc)
            if cell is None:
                cell = TableCell(tc, self)
            current[tc] = cell
            cells.append(cell)
        self._cells = current
        return cells

    def _tr_pr_value(self, local: str) -> int:
        tr_pr = self._element.find(w("trPr"))
        return _int_attr(tr_pr.find(w(local)) if tr_pr is not None else None)

    @property
    def grid_before(self) -> int:
        """Grid columns skipped before the first cell (w:gridBefore)."""
        return self._tr_pr_value("gridBefore")

    @property
    def grid_after(self) -> int:
        """Grid columns left empty after the last cell (w:gridAfter)."""
        return self._tr_pr_value("gridAfter")

    def _set_tr_pr_value(self, local: str, value: int) -> None:
        tr_pr = self._element.find(w("trPr"))
        if value <= 0:
            existing = tr_pr.find(w(local)) if tr_pr is not None else None
            if existing is not None:
                tr_pr.remove(existing)
            return
        if tr_pr is None:
            tr_pr = etree.Element(w("trPr"))
            tbl_pr_ex = self._element.find(w("tblPrEx"))
            if tbl_pr_ex is not None:
                tbl_pr_ex.addnext(tr_pr)
            else:
                self._element.insert(0, tr_pr)
        element = tr_pr.find(w(local))
        if element is None:
            element = etree.SubElement(tr_pr, w(local))
        element.set(w("val"), str(value))

    @property
    def grid_width(self) -> int:
        """Grid columns covered by this row: placeholders plus cell spans."""
        return self.grid_before + sum(cell.grid_span for cell in self.cells) + self.grid_after

    def fold_widths(self, widths: list[int]) -> list[int]:
        """Map per-grid-column widths to per-cell widths.

        Consecutive grid widths are summed over each cell's gridSpan.

        Raises:
            TableGridError: If the spans do not consume the array exactly
        """
        result = []
        column = self.grid_before
        for cell in self.cells:
            span = cell.grid_span
            if column + span > len(widths):
                raise TableGridError(
                    f"Row {self.index} spans more columns than the {len(widths)} widths given",
                    row_index=self.index,
                )
            result.append(sum(widths[column : column + span]))
            column += span
        if column + self.grid_after != len(widths):
            raise TableGridError(
                f"Row {self.index} covers {column + self.grid_after} columns, "
                f"but {len(widths)} widths were given",
                row_index=self.index,
            )
        return result

    def set_column_widths(self, widths: list[int]) -> None:
        """Assign cell widths from per-grid-column widths (folding spans)."""
        for cell, width in zip(self.cells, self.fold_widths(widths)):
            cell.width = width

    def cell_at_column(self, column: int) -> TableCell | None:
        """The cell covering a grid column, or None for a placeholder column."""
        position = self.grid_before
        for cell in self.cells:
            if position <= column < position + cell.grid_span:
                return cell
            position += cell.grid_span
        return None

    def merge_cells(self, start_index: int, count: int) -> TableCell:
        """Merge count cells starting at start_index into one spanning cell.

        The non-empty content of every merged cell is appended to the first
        cell; the others are removed. The result's gridSpan is the sum of the
        merged spans, so the row still covers the grid.

        Args:
            start_index: Index of the first cell to merge
            count: Number of cells to merge (at least 2)

        Returns:
            The merged cell

        Raises:
            IndexOutOfRangeError: If the range is invalid for this row
        """
        cells = self.cells
        end_index = start_index + count - 1
        if start_index < 0 or start_index >= end_index:
            raise IndexOutOfRangeError(
                f"Invalid merge start {start_index} for count {count}", start_index, len(cells)
            )
        if end_index >= len(cells):
            raise IndexOutOfRangeError(
                f"Cannot merge {count} cells from {start_index}; row has {len(cells)} cells",
                end_index,
                len(cells),
            )

        merged = cells[start_index : end_index + 1]
        destination = merged[0]
        total_span = sum(cell.grid_span for cell in merged)
        widths = [cell.width for cell in merged]

        for cell in merged[1:]:
            destination.take_content_from(cell)
            self._element.remove(cell.element)
            self._cells.pop(cell.element, None)

        destination.ensure_paragraph()
        destination.grid_span = total_span
        if all(width is not None for width in widths):
            destination.width = sum(width for width in widths if width is not None)

        logger.debug(f"Merged cells {start_index}..{end_index} of row {self.index}")
        return destination

    def __repr__(self) -> str:
        """String representation of the row."""
        return f"<TableRow {self.index} ({len(self.cells)} cells)>"


@register_block(w("tbl"))
class Table(Block):
    """Wrapper around a w:tbl element.

    Example:
        >>> table = Table.create(2, 4, widths=[2000, 2000, 2000, 3000])
        >>> doc.body.add(table)
        >>> table.merge_cells(0, 0, 3)
        >>> table.rows[0].cells[0].grid_span
        3
    """

    def __init__(self, element: etree._Element) -> None:
        """Initialize Table wrapper.

        Args:
            element: The w:tbl XML element to wrap
        """
        if element.tag != w("tbl"):
            raise ValueError(f"Expected w:tbl element, got {element.tag}")
        super().__init__(element)
        self._rows: dict[etree._Element, TableRow] = {}

    @classmethod
    def create(cls, rows: int, cols: int, widths: list[int] | None = None) -> Table:
        """Create a new detached table with a consistent grid.

        Args:
            rows: Number of rows
            cols: Number of columns
            widths: Column widths in dxa; defaults to an even split of 9000

        Raises:
            ValidationError: If the shape or widths are invalid
        """
        if rows < 1 or cols < 1:
            raise ValidationError(f"A table needs at least one row and column, got {rows}x{cols}")
        if widths is None:
            widths = [DEFAULT_TABLE_WIDTH // cols] * cols
        if len(widths) != cols:
            raise ValidationError(f"Expected {cols} column widths, got {len(widths)}")

        tbl = etree.Element(w("tbl"), nsmap=NSMAP_FULL)
        tbl_pr = etree.SubElement(tbl, w("tblPr"))
        tbl_w = etree.SubElement(tbl_pr, w("tblW"))
        tbl_w.set(w("w"), str(sum(widths)))
        tbl_w.set(w("type"), "dxa")
        tbl_grid = etree.SubElement(tbl, w("tblGrid"))
        for width in widths:
            etree.SubElement(tbl_grid, w("gridCol")).set(w("w"), str(int(width)))
        for _ in range(rows):
            tr = etree.SubElement(tbl, w("tr"))
            for width in widths:
                tr.append(_new_cell(int(width)))
        return cls(tbl)

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    @property
    def properties(self) -> etree._Element:
        """The w:tblPr element, created if needed."""
        tbl_pr = self._element.find(w("tblPr"))
        if tbl_pr is None:
            tbl_pr = etree.Element(w("tblPr"))
            self._element.insert(0, tbl_pr)
        return tbl_pr

    def _grid_element(self) -> etree._Element:
        tbl_grid = self._element.find(w("tblGrid"))
        if tbl_grid is None:
            tbl_grid = etree.Element(w("tblGrid"))
            self.properties.addnext(tbl_grid)
        return tbl_grid

    @property
    def grid(self) -> list[int]:
        """Declared grid column widths (dxa), one per grid column."""
        tbl_grid = self._element.find(w("tblGrid"))
        if tbl_grid is None:
            return []
        return [_int_attr(col, "w") for col in tbl_grid.findall(w("gridCol"))]

    @property
    def column_widths(self) -> list[int]:
        return self.grid

    @property
    def col_count(self) -> int:
        """Number of grid columns."""
        return len(self.grid)

    def _write_grid(self, widths: list[int]) -> None:
        tbl_grid = self._grid_element()
        for col in list(tbl_grid):
            tbl_grid.remove(col)
        for width in widths:
            etree.SubElement(tbl_grid, w("gridCol")).set(w("w"), str(int(width)))

    @property
    def rows(self) -> list[TableRow]:
        """The table's rows, in order."""
        rows = []
        current = {}
        for tr in self._element.findall(w("tr")):
            row = self._rows.get(tr)
            if row is None:
                row = TableRow(tr, self)
            current[tr] = row
            rows.append(row)
        self._rows = current
        return rows

    @property
    def row_count(self) -> int:
        return len(self._element.findall(w("tr")))

    def get_row(self, index: int) -> TableRow:
        """Get a row by index.

        Raises:
            IndexOutOfRangeError: If the index is out of range
        """
        rows = self.rows
        if not 0 <= index < len(rows):
            raise IndexOutOfRangeError(
                f"Row index {index} out of range (0-{len(rows) - 1})", index, len(rows)
            )
        return rows[index]

    def get_cell(self, row: int, col: int) -> TableCell:
        """Get a cell by row index and cell index within the row.

        Raises:
            IndexOutOfRangeError: If either index is out of range
        """
        cells = self.get_row(row).cells
        if not 0 <= col < len(cells):
            raise IndexOutOfRangeError(
                f"Cell index {col} out of range (0-{len(cells) - 1}) in row {row}", col, len(cells)
            )
        return cells[col]

    def validate_grid(self) -> None:
        """Check that every row covers exactly the declared grid.

        Raises:
            TableGridError: Naming the first row that does not
        """
        expected = self.col_count
        for row in self.rows:
            if row.grid_width != expected:
                raise TableGridError(
                    f"Row {row.index} covers {row.grid_width} grid columns, expected {expected}",
                    row_index=row.index,
                )

    def _id_source(self) -> IdSource | None:
        container = self.container
        return container.id_source if container is not None else None

    def _assign_ids(self, element: etree._Element) -> None:
        id_source = self._id_source()
        if id_source is not None:
            assign_ids(element, id_source)

    @property
    def text(self) -> str:
        """Cell texts, tab-separated per row and newline-separated per row."""
        return "\n".join("\t".join(cell.text() for cell in row.cells) for row in self.rows)

    # ------------------------------------------------------------------
    # Merging and widths
    # ------------------------------------------------------------------

    def merge_cells(self, row_index: int, start_index: int, count: int) -> TableCell:
        """Merge cells horizontally within one row (see TableRow.merge_cells)."""
        return self.get_row(row_index).merge_cells(start_index, count)

    def merge_cells_in_column(self, column: int, start_row: int, count: int) -> TableCell:
        """Merge cells vertically, starting at a grid column, across count rows.

        The first cell gets vMerge="restart", the others vMerge continue; their
        non-empty content moves to the first cell and each keeps one empty
        paragraph.

        Raises:
            IndexOutOfRangeError: If the column or row range is invalid
            TableGridError: If a row has no cell starting at that column, or
                the cells span different widths
        """
        rows = self.rows
        if not 0 <= column < self.col_count:
            raise IndexOutOfRangeError(f"Column {column} out of range", column, self.col_count)
        end_row = start_row + count - 1
        if start_row < 0 or start_row >= end_row:
            raise IndexOutOfRangeError(
                f"Invalid merge start row {start_row} for count {count}", start_row, len(rows)
            )
        if end_row >= len(rows):
            raise IndexOutOfRangeError(
                f"Cannot merge {count} rows from {start_row}; table has {len(rows)} rows",
                end_row,
                len(rows),
            )

        cells = []
        for row in rows[start_row : end_row + 1]:
            cell = row.cell_at_column(column)
            if cell is None or cell.col_index != column:
                raise TableGridError(
                    f"Row {row.index} has no cell starting at column {column}", row.index
                )
            cells.append(cell)
        if len({cell.grid_span for cell in cells}) != 1:
            raise TableGridError(f"Cells in column {column} span different widths")

        first = cells[0]
        first.vertical_merge = "restart"
        for cell in cells[1:]:
            first.take_content_from(cell)
            cell.ensure_paragraph()
            cell.vertical_merge = "continue"
        first.ensure_paragraph()
        logger.debug(f"Merged column {column} rows {start_row}..{end_row}")
        return first

    def set_column_widths(self, widths: list[int]) -> None:
        """Rewrite the grid widths and propagate them to every row.

        Widths are per grid column; a cell spanning several columns gets the
        sum of their widths. Every row is validated before anything changes.
        The table switches to a fixed layout with the summed total width.

        Args:
            widths: One width in dxa per grid column

        Raises:
            TableGridError: If the count does not match the grid, a width is
                negative, or a row's spans cannot fold the widths exactly
        """
        widths = [int(width) for width in widths]
        if len(widths) != self.col_count:
            raise TableGridError(
                f"Must supply widths for each column: expected {self.col_count}, got {len(widths)}"
            )
        if any(width < 0 for width in widths):
            raise TableGridError(f"Column widths must not be negative: {widths}")

        rows = self.rows
        folded = [row.fold_widths(widths) for row in rows]

        self._write_grid(widths)
        for row, row_widths in zip(rows, folded):
            for cell, width in zip(row.cells, row_widths):
                cell.width = width

        tbl_pr = self.properties
        tbl_w = get_or_add_ordered(tbl_pr, "tblW", TBL_PR_ORDER)
        tbl_w.set(w("w"), str(sum(widths)))
        tbl_w.set(w("type"), "dxa")
        get_or_add_ordered(tbl_pr, "tblLayout", TBL_PR_ORDER).set(w("type"), "fixed")
        logger.debug(f"Set column widths {widths}")

    # ------------------------------------------------------------------
    # Rows and columns
    # ------------------------------------------------------------------

    def insert_row(self, index: int) -> TableRow:
        """Insert a blank row (one cell per grid column) before row index.

        Args:
            index: Position of the new row; row_count appends

        Raises:
            IndexOutOfRangeError: If index is outside 0..row_count
        """
        rows = self.rows
        if not 0 <= index <= len(rows):
            raise IndexOutOfRangeError(f"Row index {index} out of range", index, len(rows))

        tr = etree.Element(w("tr"))
        for width in self.grid:
            tr.append(_new_cell(width))
        self._assign_ids(tr)

        if index < len(rows):
            rows[index].element.addprevious(tr)
        elif rows:
            rows[-1].element.addnext(tr)
        else:
            self._grid_element().addnext(tr)
        return next(row for row in self.rows if row.element is tr)

    def add_row(self) -> TableRow:
        """Append a blank row."""
        return self.insert_row(self.row_count)

    def remove_row(self, index: int) -> None:
        """Remove a row.

        Raises:
            IndexOutOfRangeError: If index is out of range
            TableGridError: If it is the last row; remove the table instead
        """
        row = self.get_row(index)
        if self.row_count == 1:
            raise TableGridError("Cannot remove the final row of a table; remove the table instead")
        self._element.remove(row.element)
        self._rows.pop(row.element, None)

    def insert_column(self, index: int, width: int | None = None) -> None:
        """Insert a grid column before grid column index.

        A cell spanning across the insertion point widens instead of being
        split; otherwise each row gets a new empty cell.

        Args:
            index: Grid position of the new column; col_count appends
            width: Width in dxa, defaults to the average existing width

        Raises:
            IndexOutOfRangeError: If index is outside 0..col_count
        """
        grid = self.grid
        if not 0 <= index <= len(grid):
            raise IndexOutOfRangeError(f"Column index {index} out of range", index, len(grid))
        if width is None:
            width = sum(grid) // len(grid) if grid else DEFAULT_TABLE_WIDTH

        for row in self.rows:
            if index < row.grid_before:
                row._set_tr_pr_value("gridBefore", row.grid_before + 1)
                continue
            position = row.grid_before
            placed = False
            for cell in row.cells:
                if index == position:
                    tc = _new_cell(width)
                    self._assign_ids(tc)
                    cell.element.addprevious(tc)
                    placed = True
                    break
                if position < index < position + cell.grid_span:
                    cell.grid_span = cell.grid_span + 1
                    if cell.width is not None:
                        cell.width = cell.width + width
                    placed = True
                    break
                position += cell.grid_span
            if placed:
                continue
            if index == position:
                tc = _new_cell(width)
                self._assign_ids(tc)
                cells = row.cells
                if cells:
                    cells[-1].element.addnext(tc)
                else:
                    row.element.append(tc)
            else:
                row._set_tr_pr_value("gridAfter", row.grid_after + 1)

        grid.insert(index, width)
        self._write_grid(grid)
        logger.debug(f"Inserted column at {index}")

    def add_column(self, width: int | None = None) -> None:
        """Append a grid column."""
        self.insert_column(self.col_count, width)

    def remove_column(self, index: int) -> None:
        """Remove a grid column.

        Cells spanning the column shrink by one; single-column cells are
        removed.

        Raises:
            IndexOutOfRangeError: If index is out of range
            TableGridError: If it is the last column; remove the table instead
        """
        grid = self.grid
        if not 0 <= index < len(grid):
            raise IndexOutOfRangeError(f"Column index {index} out of range", index, len(grid))
        if len(grid) == 1:
            raise TableGridError("Cannot remove the final column of a table; remove the table instead")

        removed_width = grid[index]
        for row in self.rows:
            if index < row.grid_before:
                row._set_tr_pr_value("gridBefore", row.grid_before - 1)
                continue
            cell = row.cell_at_column(index)
            if cell is None:
                row._set_tr_pr_value("gridAfter", row.grid_after - 1)
            elif cell.grid_span > 1:
                cell.grid_span = cell.grid_span - 1
                if cell.width is not None:
                    cell.width = max(cell.width - removed_width, 0)
            else:
                row.element.remove(cell.element)

        del grid[index]
        self._write_grid(grid)
        logger.debug(f"Removed column {index}")

    def __repr__(self) -> str:
        """String representation of the table."""
        return f"<Table {self.row_count}x{self.col_count}>"
