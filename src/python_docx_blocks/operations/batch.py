"""
BatchOperations class for handling batch edit operations.

This module provides a dedicated class for all batch edit operations,
extracted from the main Document class to improve separation of concerns.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from ..errors import DocxBlocksError, IndexOutOfRangeError, ValidationError
from ..results import EditResult

if TYPE_CHECKING:
    from ..document import Document
    from ..models.table import Table

logger = logging.getLogger(__name__)


class BatchOperations:
    """Handles batch edit operations.

    This class encapsulates all batch edit functionality, including:
    - Applying multiple edits from a list
    - Applying edits from YAML or JSON files
    - Dispatching edits to appropriate handlers

    Example:
        >>> # Usually accessed through Document
        >>> doc = Document("report.docx")
        >>> edits = [
        ...     {"type": "insert_paragraph", "offset": 12, "text": "New"},
        ...     {"type": "merge_cells", "table": 0, "row": 0, "start": 0, "count": 2},
        ... ]
        >>> results = doc.apply_edits(edits)
    """

    def __init__(self, document: Document) -> None:
        """Initialize BatchOperations with a Document reference.

        Args:
            document: The Document instance to operate on
        """
        self._document = document

    def apply_edits(
        self, edits: list[dict[str, Any]], stop_on_error: bool = False
    ) -> list[EditResult]:
        """Apply multiple edits in sequence.

        Args:
            edits: List of edit dictionaries with keys:
                - type: Edit operation ("insert_paragraph", "add_paragraph",
                  "add_table", "merge_cells", "set_column_widths", "remove_block")
                - Other parameters specific to the edit type
            stop_on_error: If True, stop processing on first error

        Returns:
            List of EditResult objects, one per edit

        Example:
            >>> results = doc.apply_edits([{"type": "add_paragraph", "text": "Done"}])
            >>> print(f"Applied {sum(r.success for r in results)}/{len(results)} edits")
        """
        results = []

        for i, edit in enumerate(edits):
            edit_type = edit.get("type") if isinstance(edit, dict) else None
            if not edit_type:
                results.append(
                    EditResult(
                        success=False,
                        edit_type="unknown",
                        message=f"Edit {i}: Missing 'type' field",
                        error=ValidationError("Missing 'type' field"),
                    )
                )
                if stop_on_error:
                    break
                continue

            result = self._apply_single_edit(edit_type, edit)
            results.append(result)
            logger.debug(f"Edit {i}: {result}")
            if not result.success and stop_on_error:
                break

        return results

    def _apply_single_edit(self, edit_type: str, edit: dict[str, Any]) -> EditResult:
        """Apply a single edit operation.

        Args:
            edit_type: The type of edit to perform
            edit: Dictionary with edit parameters

        Returns:
            EditResult indicating success or failure
        """
        # Dispatch table mapping edit types to handler methods
        handlers = {
            "insert_paragraph": self._handle_insert_paragraph,
            "add_paragraph": self._handle_add_paragraph,
            "add_table": self._handle_add_table,
            "merge_cells": self._handle_merge_cells,
            "set_column_widths": self._handle_set_column_widths,
            "remove_block": self._handle_remove_block,
        }

        handler = handlers.get(edit_type)
        if handler is None:
            return EditResult(
                success=False,
                edit_type=edit_type,
                message=f"Unknown edit type: {edit_type}",
                error=ValidationError(f"Unknown edit type: {edit_type}"),
            )

        try:
            return handler(edit_type, edit)
        except IndexError as e:
            return EditResult(
                success=False,
                edit_type=edit_type,
                message=f"Out of range: {e}",
                error=e,
            )
        except (DocxBlocksError, ValueError, TypeError) as e:
            return EditResult(
                success=False, edit_type=edit_type, message=f"Error: {str(e)}", error=e
            )

    def _missing(self, edit_type: str, *names: str) -> EditResult:
        joined = "', '".join(names)
        return EditResult(
            success=False,
            edit_type=edit_type,
            message=f"Missing required parameter: '{joined}'",
            error=ValidationError("Missing required parameter"),
        )

    def _table(self, index: int) -> Table:
        tables = self._document.tables
        if not 0 <= index < len(tables):
            raise IndexOutOfRangeError(
                f"Table index {index} out of range ({len(tables)} tables)", index, len(tables)
            )
        return tables[index]

    def _handle_insert_paragraph(self, edit_type: str, edit: dict[str, Any]) -> EditResult:
        """Handle insert_paragraph edit type."""
        offset = edit.get("offset")
        if offset is None:
            return self._missing(edit_type, "offset")
        text = edit.get("text", "")
        paragraph = self._document.insert_paragraph_at(int(offset), text, edit.get("style"))
        return EditResult(
            success=True,
            edit_type=edit_type,
            message=f"Inserted paragraph '{text}' at offset {offset}",
            block=paragraph,
        )

    def _handle_add_paragraph(self, edit_type: str, edit: dict[str, Any]) -> EditResult:
        """Handle add_paragraph edit type."""
        text = edit.get("text", "")
        paragraph = self._document.add_paragraph(text, edit.get("style"))
        return EditResult(
            success=True,
            edit_type=edit_type,
            message=f"Added paragraph '{text}'",
            block=paragraph,
        )

    def _handle_add_table(self, edit_type: str, edit: dict[str, Any]) -> EditResult:
        """Handle add_table edit type."""
        rows = edit.get("rows")
        cols = edit.get("cols")
        if rows is None or cols is None:
            return self._missing(edit_type, "rows", "cols")
        table = self._document.add_table(int(rows), int(cols), edit.get("widths"))
        return EditResult(
            success=True,
            edit_type=edit_type,
            message=f"Added {rows}x{cols} table",
            block=table,
        )

    def _handle_merge_cells(self, edit_type: str, edit: dict[str, Any]) -> EditResult:
        """Handle merge_cells edit type."""
        if "count" not in edit:
            return self._missing(edit_type, "count")
        table = self._table(int(edit.get("table", 0)))
        row = int(edit.get("row", 0))
        start = int(edit.get("start", 0))
        table.merge_cells(row, start, int(edit["count"]))
        return EditResult(
            success=True,
            edit_type=edit_type,
            message=f"Merged {edit['count']} cells from {start} in row {row}",
            block=table,
        )

    def _handle_set_column_widths(self, edit_type: str, edit: dict[str, Any]) -> EditResult:
        """Handle set_column_widths edit type."""
        widths = edit.get("widths")
        if not widths:
            return self._missing(edit_type, "widths")
        table = self._table(int(edit.get("table", 0)))
        table.set_column_widths(widths)
        return EditResult(
            success=True,
            edit_type=edit_type,
            message=f"Set column widths {widths}",
            block=table,
        )

    def _handle_remove_block(self, edit_type: str, edit: dict[str, Any]) -> EditResult:
        """Handle remove_block edit type."""
        index = edit.get("index")
        if index is None:
            return self._missing(edit_type, "index")
        blocks = self._document.blocks
        index = int(index)
        if not 0 <= index < len(blocks):
            raise IndexOutOfRangeError(
                f"Block index {index} out of range ({len(blocks)} blocks)", index, len(blocks)
            )
        block = blocks[index]
        block.remove()
        return EditResult(
            success=True,
            edit_type=edit_type,
            message=f"Removed block {index}",
            block=block,
        )

    def apply_edit_file(
        self, path: str | Path, format: str = "yaml", stop_on_error: bool = False
    ) -> list[EditResult]:
        """Apply edits from a YAML or JSON file.

        The file should contain an 'edits' key with a list of edit dictionaries.

        Args:
            path: Path to the YAML or JSON edit file
            format: File format - "yaml" or "json" (default: "yaml")
            stop_on_error: If True, stop processing on first error

        Returns:
            List of EditResult objects, one per edit

        Raises:
            ValidationError: If file cannot be parsed or has invalid format
            FileNotFoundError: If file does not exist

        Example YAML file:
            ```yaml
            edits:
              - type: insert_paragraph
                offset: 12
                text: "New paragraph"
              - type: set_column_widths
                table: 0
                widths: [2000, 3000, 4000]
            ```
        """
        file_path = Path(path)

        if not file_path.exists():
            raise FileNotFoundError(f"Edit file not found: {path}")

        try:
            with open(file_path, encoding="utf-8") as f:
                if format == "yaml":
                    data = yaml.safe_load(f)
                elif format == "json":
                    data = json.load(f)
                else:
                    raise ValidationError(f"Unsupported format: {format}")
        except yaml.YAMLError as e:
            raise ValidationError(f"Failed to parse YAML file: {e}") from e
        except json.JSONDecodeError as e:
            raise ValidationError(f"Failed to parse JSON file: {e}") from e

        if not isinstance(data, dict):
            raise ValidationError("Edit file must contain a dictionary/object")
        if "edits" not in data:
            raise ValidationError("Edit file must contain an 'edits' key")

        edits = data["edits"]
        if not isinstance(edits, list):
            raise ValidationError("'edits' must be a list")

        return self.apply_edits(edits, stop_on_error=stop_on_error)
