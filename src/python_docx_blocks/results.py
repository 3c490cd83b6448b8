"""
Result classes for document operations.

This module provides result types that track the success/failure of
batch editing operations.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models.block import Block


@dataclass
class EditResult:
    """Result of applying a single edit operation.

    Attributes:
        success: Whether the edit was applied successfully
        edit_type: Type of edit (e.g., "insert_paragraph", "merge_cells")
        message: Human-readable message about the result
        block: The block created or changed by the edit, if any
        error: Optional exception that occurred during the edit
    """

    success: bool
    edit_type: str
    message: str
    block: "Block | None" = None
    error: Exception | None = None

    def __str__(self) -> str:
        """Get string representation of the result."""
        status = "✓" if self.success else "✗"
        return f"{status} {self.edit_type}: {self.message}"
