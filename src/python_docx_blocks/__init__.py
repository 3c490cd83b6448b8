"""
python_docx_blocks - A structural engine for Word documents.

This package reads a .docx package into a tree of block containers (body,
table cells, headers, footers, comments), lets you insert blocks at any
character offset, keeps table grids and list numbering consistent, and writes
the package back without disturbing parts it does not understand.

Example:
    >>> from python_docx_blocks import Document, Paragraph
    >>> doc = Document("report.docx")
    >>> doc.insert_at(120, Paragraph.create("Inserted here"))
    >>> doc.add_table(2, 3).merge_cells(0, 0, 2)
    >>> doc.save("report_edited.docx")
"""

__version__ = "0.1.0"
__all__ = [
    "Document",
    "OOXMLPackage",
    "Part",
    "PartKind",
    "PartKinds",
    "from_python_docx",
    "to_python_docx",
    "Block",
    "UnknownBlock",
    "Paragraph",
    "Table",
    "TableRow",
    "TableCell",
    "Header",
    "Footer",
    "HeaderFooterType",
    "Comment",
    "Section",
    "SectionBreakType",
    "Bookmark",
    "NumberingDefinition",
    "NumberingReference",
    "NumberingStyle",
    "BlockContainer",
    "Body",
    "IdSource",
    "RandomHexIdSource",
    "SequentialIdSource",
    "NumberingManager",
    "StyleManager",
    "EditResult",
    "DocxBlocksError",
    "ValidationError",
    "MalformedContainerError",
    "AlreadyAttachedError",
    "NotAttachedError",
    "BlockNotFoundError",
    "BookmarkNotFoundError",
    "OffsetOutOfRangeError",
    "IndexOutOfRangeError",
    "DocumentFormatError",
    "UndefinedNumberingError",
    "DuplicateIdError",
    "ConcurrentModificationError",
    "TableGridError",
]

# Import model classes first: they register the block variants the
# containers dispatch on
from .models import (
    Block,
    Bookmark,
    Comment,
    Footer,
    Header,
    HeaderFooterType,
    NumberingDefinition,
    NumberingReference,
    NumberingStyle,
    Paragraph,
    Section,
    SectionBreakType,
    Table,
    TableCell,
    TableRow,
    UnknownBlock,
)

# Import compatibility helpers (python-docx integration)
from .compat import from_python_docx, to_python_docx
from .container import BlockContainer, Body

# Import document class
from .document import Document
from .errors import (
    AlreadyAttachedError,
    BlockNotFoundError,
    BookmarkNotFoundError,
    ConcurrentModificationError,
    DocumentFormatError,
    DocxBlocksError,
    DuplicateIdError,
    IndexOutOfRangeError,
    MalformedContainerError,
    NotAttachedError,
    OffsetOutOfRangeError,
    TableGridError,
    UndefinedNumberingError,
    ValidationError,
)
from .identity import IdSource, RandomHexIdSource, SequentialIdSource
from .numbering import NumberingManager

# Import package class
from .package import OOXMLPackage, Part, PartKind, PartKinds

# Import result types
from .results import EditResult
from .styles import StyleManager
