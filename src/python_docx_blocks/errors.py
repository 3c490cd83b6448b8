"""
Custom exception classes for the python_docx_blocks package.

The hierarchy separates three families of failure:

- loading failures (``MalformedContainerError``), which abort ``open``
- tree contract violations (attach/detach/remove misuse, bad offsets
  and indexes), which are programming errors in the caller
- document format errors (dangling numbering references, duplicate
  paragraph ids), which describe a corrupt document rather than a bug
"""

from __future__ import annotations


class DocxBlocksError(Exception):
    """Base exception for all python_docx_blocks errors."""

    pass


class ValidationError(DocxBlocksError):
    """Raised when a document or an input value is invalid.

    Attributes:
        errors: List of specific validation error messages (optional)
    """

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        self.errors = errors or []
        super().__init__(message)


class MalformedContainerError(ValidationError):
    """Raised when a package cannot be opened as a word-processing document.

    Attributes:
        missing: Name of the mandatory entry that is absent, if any
    """

    def __init__(self, message: str, missing: str | None = None) -> None:
        self.missing = missing
        super().__init__(message, [missing] if missing else None)


class TreeContractError(DocxBlocksError):
    """Base class for misuse of the block tree API."""

    pass


class AlreadyAttachedError(TreeContractError):
    """Raised when attaching a block whose node already has a parent.

    The tree never reparents or copies implicitly; detach the block first
    or attach a copy.
    """

    def __init__(self, block: object) -> None:
        self.block = block
        super().__init__(f"{block!r} is already attached to a container")


class NotAttachedError(TreeContractError):
    """Raised when detaching or locating a block that has no parent."""

    def __init__(self, block: object) -> None:
        self.block = block
        super().__init__(f"{block!r} is not attached to a container")


class BlockNotFoundError(TreeContractError):
    """Raised when removing a block from a container that does not own it."""

    def __init__(self, block: object, container: object) -> None:
        self.block = block
        self.container = container
        super().__init__(f"{block!r} is not a child of {container!r}")


class OffsetOutOfRangeError(DocxBlocksError, IndexError):
    """Raised when a character offset falls outside the addressed text.

    Attributes:
        offset: The offset that was requested
        length: The length of the text it was applied to
    """

    def __init__(self, offset: int, length: int, context: str = "text") -> None:
        self.offset = offset
        self.length = length
        super().__init__(f"Offset {offset} is out of range for {context} of length {length}")


class IndexOutOfRangeError(DocxBlocksError, IndexError):
    """Raised when a row, cell or column index is outside its collection.

    Attributes:
        index: The index that was requested
        count: The number of items available
    """

    def __init__(self, message: str, index: int, count: int) -> None:
        self.index = index
        self.count = count
        super().__init__(message)


class DocumentFormatError(DocxBlocksError):
    """Base class for broken cross-references inside a document."""

    pass


class UndefinedNumberingError(DocumentFormatError):
    """Raised when a paragraph references a numbering id that does not exist."""

    def __init__(self, num_id: int) -> None:
        self.num_id = num_id
        super().__init__(
            f"Number reference w:numId('{num_id}') used in document "
            f"but not defined in /word/numbering.xml"
        )


class DuplicateIdError(DocumentFormatError):
    """Raised when two paragraphs in one document share a w14:paraId.

    Attributes:
        duplicates: Mapping of each repeated id to its occurrence count
    """

    def __init__(self, duplicates: dict[str, int]) -> None:
        self.duplicates = duplicates
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format a message listing every repeated id."""
        msg = f"Found {len(self.duplicates)} duplicated paragraph id(s):\n"
        for para_id, count in sorted(self.duplicates.items()):
            msg += f"  • w14:paraId {para_id} used {count} times\n"
        return msg


class ConcurrentModificationError(DocxBlocksError, RuntimeError):
    """Raised when a container is mutated while one of its iterators is live."""

    def __init__(self, container: object) -> None:
        self.container = container
        super().__init__(f"{container!r} was modified during iteration")


class TableGridError(DocxBlocksError):
    """Raised when a table operation would break the column grid.

    Attributes:
        row_index: Index of the offending row, if the error is row specific
    """

    def __init__(self, message: str, row_index: int | None = None) -> None:
        self.row_index = row_index
        super().__init__(message)


class BookmarkNotFoundError(DocxBlocksError, KeyError):
    """Raised when no w:bookmarkStart carries the requested name.

    Attributes:
        name: The bookmark name that was looked up
    """

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"No bookmark named {name!r}")

    def __str__(self) -> str:
        return str(self.args[0])
