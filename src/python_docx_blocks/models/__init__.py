"""
Document model classes for python_docx_blocks.

These classes provide convenient wrappers around OOXML elements. Importing
this package registers the Paragraph and Table block variants.
"""

from python_docx_blocks.models.block import Block, UnknownBlock
from python_docx_blocks.models.numbering import (
    LevelOverride,
    NumberingDefinition,
    NumberingLevel,
    NumberingReference,
    NumberingStyle,
)
from python_docx_blocks.models.paragraph import Paragraph
from python_docx_blocks.models.table import Table, TableCell, TableRow
from python_docx_blocks.models.header_footer import Footer, Header, HeaderFooterType
from python_docx_blocks.models.comment import Comment
from python_docx_blocks.models.section import Section, SectionBreakType
from python_docx_blocks.models.bookmark import Bookmark

__all__ = [
    "Block",
    "UnknownBlock",
    "Paragraph",
    "Table",
    "TableRow",
    "TableCell",
    "NumberingLevel",
    "NumberingStyle",
    "LevelOverride",
    "NumberingDefinition",
    "NumberingReference",
    "Header",
    "Footer",
    "HeaderFooterType",
    "Comment",
    "Section",
    "SectionBreakType",
    "Bookmark",
]
