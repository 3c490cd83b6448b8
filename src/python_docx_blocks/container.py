"""
Block containers: ordered sequences of paragraphs, tables and passthrough blocks.

A container wraps one XML element (w:body, w:tc, w:hdr, w:ftr, w:comment) and
exposes its children as Block objects. Property children (w:sectPr, w:tcPr)
are not blocks and keep their required position when blocks are added.

Enumeration is live: blocks() and paragraphs() walk the element as it is when
each item is requested. Structural changes made through the container while
one of its iterators is suspended raise ConcurrentModificationError on the
iterator's next step.
"""

from __future__ import annotations

import copy
import logging
import weakref
from collections.abc import Iterator
from typing import TYPE_CHECKING

from lxml import etree

from .constants import local_name, w
from .errors import (
    AlreadyAttachedError,
    BlockNotFoundError,
    BookmarkNotFoundError,
    ConcurrentModificationError,
    OffsetOutOfRangeError,
)
from .identity import (
    Attachment,
    IdSource,
    RandomHexIdSource,
    attach,
    detach,
    is_attached,
)
from .models.block import Block, wrap_block
from .models.bookmark import Bookmark, iter_bookmarks
from .models.paragraph import Paragraph
from .models.section import Section, SectionBreakType, section_properties_of
from .splitting import split_paragraph
from .text_index import iter_paragraph_offsets, paragraph_containing

if TYPE_CHECKING:
    from .document import Document
    from .models.table import Table
    from .package import Part

logger = logging.getLogger(__name__)

# Fallback for containers that are not owned by a Document
_DEFAULT_ID_SOURCE = RandomHexIdSource()


class BlockContainer:
    """An ordered sequence of blocks stored as the children of one element.

    Attributes:
        element: The XML element whose children are the blocks
        part: The package part holding the element, if known
        document: The owning Document, if any
    """

    kind = "container"

    # Children that are properties of the container rather than blocks
    property_tags: frozenset[str] = frozenset()

    # Whether adjacent tables are kept apart by an empty paragraph
    separates_tables = False

    def __init__(
        self,
        element: etree._Element,
        part: Part | None = None,
        document: Document | None = None,
        id_source: IdSource | None = None,
    ) -> None:
        self._element = element
        self._part = part
        self._document_ref = weakref.ref(document) if document is not None else None
        self._id_source = id_source
        self._wrappers: dict[etree._Element, Block] = {}
        self._version = 0

    @property
    def element(self) -> etree._Element:
        """Get the underlying XML element."""
        return self._element

    @property
    def part(self) -> Part | None:
        return self._part

    @property
    def document(self) -> Document | None:
        return self._document_ref() if self._document_ref is not None else None

    @property
    def id_source(self) -> IdSource:
        """The identifier strategy used for paragraphs attached here."""
        if self._id_source is not None:
            return self._id_source
        document = self.document
        if document is not None:
            return document.id_source
        return _DEFAULT_ID_SOURCE

    # ------------------------------------------------------------------
    # Wrapper bookkeeping
    # ------------------------------------------------------------------

    def _is_block_element(self, child: etree._Element) -> bool:
        return isinstance(child.tag, str) and child.tag not in self.property_tags

    def _wrap(self, child: etree._Element) -> Block:
        block = self._wrappers.get(child)
        if block is None or block.container is not self:
            block = self._make_block(child)
            block._attachment = Attachment.attached_to(self)
            self._wrappers[child] = block
        return block

    def _make_block(self, child: etree._Element) -> Block:
        """Create the wrapper for a child element."""
        return wrap_block(child)

    def _register(self, block: Block) -> None:
        """Record a block attached by identity.attach()."""
        self._wrappers[block.element] = block
        self._version += 1

    def _unregister(self, block: Block) -> None:
        """Forget a block detached by identity.detach()."""
        self._wrappers.pop(block.element, None)
        self._version += 1

    # ------------------------------------------------------------------
    # Enumeration
    # ------------------------------------------------------------------

    def blocks(self) -> Iterator[Block]:
        """Iterate over the blocks of this container, in document order.

        Raises:
            ConcurrentModificationError: If the container is structurally
                modified while the iteration is suspended
        """
        version = self._version
        for child in self._element.iterchildren():
            if self._version != version:
                raise ConcurrentModificationError(self)
            if not self._is_block_element(child):
                continue
            yield self._wrap(child)
            if self._version != version:
                raise ConcurrentModificationError(self)

    def paragraphs(self) -> Iterator[Paragraph]:
        """Iterate over the paragraphs of this container (tables are skipped)."""
        for block in self.blocks():
            if isinstance(block, Paragraph):
                yield block

    def tables(self) -> Iterator[Block]:
        """Iterate over the tables of this container."""
        for block in self.blocks():
            if block.element.tag == w("tbl"):
                yield block

    def __iter__(self) -> Iterator[Block]:
        return self.blocks()

    def __len__(self) -> int:
        return sum(1 for _ in self.blocks())

    def __getitem__(self, index: int) -> Block:
        blocks = list(self.blocks())
        return blocks[index]

    def index_of(self, block: Block) -> int:
        """Position of a block among this container's blocks.

        Raises:
            BlockNotFoundError: If the block is not in this container
        """
        for index, candidate in enumerate(self.blocks()):
            if candidate.element is block.element:
                return index
        raise BlockNotFoundError(block, self)

    def block_before(self, block: Block) -> Block | None:
        """The block immediately preceding block, or None."""
        self._require_child(block)
        sibling = block.element.getprevious()
        while sibling is not None and not self._is_block_element(sibling):
            sibling = sibling.getprevious()
        return self._wrap(sibling) if sibling is not None else None

    def block_after(self, block: Block) -> Block | None:
        """The block immediately following block, or None."""
        self._require_child(block)
        sibling = block.element.getnext()
        while sibling is not None and not self._is_block_element(sibling):
            sibling = sibling.getnext()
        return self._wrap(sibling) if sibling is not None else None

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    def text_length(self) -> int:
        """Total text length of the container's paragraphs. O(n)."""
        return sum(length for _, _, length in iter_paragraph_offsets(self))

    def text(self) -> str:
        """Paragraph texts joined with newlines."""
        return "\n".join(paragraph.text for paragraph in self.paragraphs())

    def paragraph_containing(self, offset: int) -> Paragraph | None:
        """Find the paragraph containing a container offset (see text_index)."""
        return paragraph_containing(self, offset)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def _require_child(self, block: Block) -> None:
        if block.container is not self or block.element.getparent() is not self._element:
            raise BlockNotFoundError(block, self)

    def _end_index(self) -> int:
        """Child index at which appended blocks are inserted."""
        return len(self._element)

    def _attach_at(self, block: Block, index: int) -> Block:
        """Attach block at a child index, separating it from adjacent tables."""
        if is_attached(block):
            raise AlreadyAttachedError(block)

        if self.separates_tables and block.element.tag == w("tbl"):
            if self._table_adjacent(index, before=True):
                attach(Paragraph.create(), self, index)
                index += 1
                logger.debug("Inserted empty paragraph between adjacent tables")
            attach(block, self, index)
            if self._table_adjacent(index + 1, before=False):
                attach(Paragraph.create(), self, index + 1)
                logger.debug("Inserted empty paragraph between adjacent tables")
            return block

        return attach(block, self, index)

    def _table_adjacent(self, index: int, before: bool) -> bool:
        """Check whether the nearest block before/at index is a table."""
        children = list(self._element)
        candidates = reversed(children[:index]) if before else iter(children[index:])
        for child in candidates:
            if self._is_block_element(child):
                return child.tag == w("tbl")
        return False

    def add(self, block: Block) -> Block:
        """Append a block at the end of the container.

        Trailing property elements such as the body's final w:sectPr stay last.

        Raises:
            AlreadyAttachedError: If the block is already attached
        """
        return self._attach_at(block, self._end_index())

    def add_paragraph(self, text: str = "", style: str | None = None) -> Paragraph:
        """Create a paragraph and append it."""
        paragraph = Paragraph.create(text, style)
        self.add(paragraph)
        return paragraph

    def add_table(self, rows: int, cols: int, widths: list[int] | None = None) -> Table:
        """Create a rows x cols table and append it."""
        from .models.table import Table

        table = Table.create(rows, cols, widths)
        self.add(table)
        return table

    def insert(self, index: int, block: Block) -> Block:
        """Insert a block so that it ends up at a block index."""
        blocks = list(self.blocks())
        if index >= len(blocks):
            return self.add(block)
        return self.insert_before(blocks[max(index, 0)], block)

    def insert_before(self, anchor: Block, block: Block) -> Block:
        """Insert block immediately before anchor.

        Raises:
            BlockNotFoundError: If anchor is not in this container
        """
        self._require_child(anchor)
        return self._attach_at(block, self._element.index(anchor.element))

    def insert_after(self, anchor: Block, block: Block) -> Block:
        """Insert block immediately after anchor.

        Raises:
            BlockNotFoundError: If anchor is not in this container
        """
        self._require_child(anchor)
        return self._attach_at(block, self._element.index(anchor.element) + 1)

    def insert_at(self, offset: int, block: Block) -> Block:
        """Insert a block at a character offset of the container's text.

        On a paragraph boundary the block goes in between without touching any
        paragraph. Inside a paragraph, the paragraph is split and replaced by
        its two halves with the block between them.

        Args:
            offset: Offset into the container's text, 0 <= offset <= length
            block: Detached block to insert

        Returns:
            The inserted block

        Raises:
            AlreadyAttachedError: If the block is already attached
            OffsetOutOfRangeError: If offset is outside the container's text
        """
        if is_attached(block):
            raise AlreadyAttachedError(block)

        paragraph = paragraph_containing(self, offset)
        if paragraph is None:
            return self.add(block)

        self._insert_within(paragraph, offset - paragraph.start_index(), block)
        logger.debug(f"Inserted {block!r} at offset {offset}")
        return block

    def _insert_within(self, paragraph: Paragraph, local: int, block: Block) -> Block:
        """Insert block at an offset of one of this container's paragraphs."""
        length = paragraph.text_length()
        if local <= 0:
            return self.insert_before(paragraph, block)
        if local >= length:
            return self.insert_after(paragraph, block)

        left, right = split_paragraph(paragraph, local)
        if left is None or right is None:
            raise OffsetOutOfRangeError(local, length, "paragraph")

        index = self._element.index(paragraph.element)
        detach(paragraph)
        attach(left, self, index)
        self._attach_at(block, index + 1)
        attach(right, self, self._element.index(block.element) + 1)
        logger.debug(f"Split {left.id} at {local} to insert {block!r}")
        return block

    def insert_paragraph_at(self, offset: int, text: str = "", style: str | None = None) -> Paragraph:
        """Create a paragraph and insert it at a character offset."""
        paragraph = Paragraph.create(text, style)
        self.insert_at(offset, paragraph)
        return paragraph

    # ------------------------------------------------------------------
    # Bookmarks
    # ------------------------------------------------------------------

    def bookmarks(self, include_hidden: bool = False) -> list[Bookmark]:
        """Bookmarks starting in this container's paragraphs, in document order.

        Args:
            include_hidden: Also list Word's own bookmarks (names starting with "_")
        """
        return [
            bookmark
            for bookmark in iter_bookmarks(self)
            if include_hidden or not bookmark.is_hidden
        ]

    def find_bookmark(self, name: str) -> Bookmark | None:
        """The first bookmark with a name, or None."""
        for bookmark in iter_bookmarks(self):
            if bookmark.name == name:
                return bookmark
        return None

    def insert_at_bookmark(self, name: str, block: Block) -> Block:
        """Insert a block where a bookmark starts.

        The bookmark's paragraph is split at the marker as for insert_at();
        the marker itself stays at the start of the right half.

        Raises:
            BookmarkNotFoundError: If no bookmark has the name
            AlreadyAttachedError: If the block is already attached
        """
        if is_attached(block):
            raise AlreadyAttachedError(block)
        bookmark = self.find_bookmark(name)
        if bookmark is None:
            raise BookmarkNotFoundError(name)
        self._insert_within(bookmark.paragraph, bookmark.local_offset, block)
        logger.debug(f"Inserted {block!r} at bookmark {name!r}")
        return block

    def remove(self, block: Block) -> None:
        """Detach a block from this container.

        Raises:
            BlockNotFoundError: If the block is not a child of this container
        """
        if block.container is not self:
            raise BlockNotFoundError(block, self)
        detach(block)

    def clear(self) -> None:
        """Remove every block."""
        for block in list(self.blocks()):
            detach(block)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {local_name(self._element.tag)}>"


class Body(BlockContainer):
    """The document body (w:body)."""

    kind = "body"
    property_tags = frozenset({w("sectPr")})
    separates_tables = True

    def _end_index(self) -> int:
        sect_pr = self._element.find(w("sectPr"))
        if sect_pr is not None:
            return self._element.index(sect_pr)
        return len(self._element)

    @property
    def section_properties(self) -> etree._Element | None:
        """The final w:sectPr of the document, if present."""
        return self._element.find(w("sectPr"))

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def sections(self) -> list[Section]:
        """The document's sections in order, the final one last."""
        sections = []
        for paragraph in self.paragraphs():
            sect_pr = section_properties_of(paragraph)
            if sect_pr is not None:
                sections.append(Section(sect_pr, self, paragraph))
        final = self.section_properties
        if final is not None:
            sections.append(Section(final, self))
        return sections

    def add_section(self, break_type: SectionBreakType = SectionBreakType.NEXT_PAGE) -> Section:
        """Close the current last section with a break and start a new one.

        The break paragraph receives a copy of the final w:sectPr, so the
        content before it keeps its page setup and header/footer references.
        The final w:sectPr then governs the new, empty section and records
        how it starts.

        Args:
            break_type: Where the new section starts

        Returns:
            The new final section
        """
        final = self.section_properties
        if final is None:
            final = etree.SubElement(self._element, w("sectPr"))

        paragraph = Paragraph.create()
        paragraph.get_or_add_properties().append(copy.deepcopy(final))
        self.add(paragraph)

        section = Section(final, self)
        section.break_type = break_type
        logger.debug(f"Added {break_type.value} section break {paragraph.id}")
        return section

    def add_page_break(self) -> Paragraph:
        """Append a paragraph holding a single page break (w:br w:type="page")."""
        paragraph = Paragraph.create()
        run = etree.SubElement(paragraph.element, w("r"))
        etree.SubElement(run, w("br")).set(w("type"), "page")
        self.add(paragraph)
        return paragraph
