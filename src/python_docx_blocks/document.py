"""
Document class: the entry point tying the package, the body and the part
managers together.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, BinaryIO

from lxml import etree

from .constants import w
from .container import BlockContainer, Body
from .errors import BookmarkNotFoundError, MalformedContainerError
from .identity import IdSource, RandomHexIdSource, validate_unique_ids
from .models.block import Block
from .models.header_footer import Footer, Header, HeaderFooterType
from .models.paragraph import Paragraph
from .models.section import Section, SectionBreakType
from .models.table import Table
from .numbering import NumberingManager, effective_numbering, effective_start_number
from .operations.batch import BatchOperations
from .operations.comments import CommentOperations
from .operations.header_footer import HeaderFooterOperations
from .package import OOXMLPackage, PartKinds
from .styles import StyleManager

if TYPE_CHECKING:
    from .models.bookmark import Bookmark
    from .models.comment import Comment
    from .models.numbering import NumberingReference
    from .results import EditResult

logger = logging.getLogger(__name__)


class Document:
    """A word-processing document: one package, one body container tree.

    Example:
        >>> doc = Document("report.docx")
        >>> doc.insert_paragraph_at(3, "Inserted")
        >>> table = doc.add_table(2, 4)
        >>> table.merge_cells(0, 0, 3)
        >>> doc.save("report_edited.docx")
    """

    def __init__(
        self,
        source: str | Path | bytes | BinaryIO | None = None,
        *,
        id_source: IdSource | None = None,
        validate_ids: bool = True,
    ) -> None:
        """Initialize a Document from a .docx file, in-memory data, or a blank template.

        Args:
            source: Document source - can be:
                    - Path to a .docx file (str or Path)
                    - Raw bytes of a .docx file
                    - BytesIO object or binary file object
                    - None for a new, blank document
            id_source: Strategy generating paragraph ids (default: random hex)
            validate_ids: Check paragraph id uniqueness after loading

        Raises:
            ValidationError: If a path does not exist
            MalformedContainerError: If the package or its body is missing or
                its main part is not well-formed XML
            DuplicateIdError: If validate_ids is set and paragraph ids repeat
        """
        if source is None:
            self.path: Path | None = None
            self._package = OOXMLPackage.new()
        else:
            self.path = Path(source) if isinstance(source, str | Path) else None
            self._package = OOXMLPackage.open(source)

        self._id_source: IdSource = id_source or RandomHexIdSource()

        main_part = self._package.main_part
        body_element = main_part.element.find(w("body"))
        if body_element is None:
            raise MalformedContainerError(
                f"{main_part.partname} has no w:body element", missing="w:body"
            )
        self._body = Body(body_element, part=main_part, document=self)

        self._styles = StyleManager(self._package)
        self._numbering = NumberingManager(self._package)
        self._header_footer_ops = HeaderFooterOperations(self)
        self._comment_ops = CommentOperations(self)
        self._batch_ops = BatchOperations(self)

        if validate_ids:
            self.validate_ids()
        logger.debug(f"Loaded document {self.path or '<in-memory>'}")

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    @property
    def package(self) -> OOXMLPackage:
        return self._package

    @property
    def id_source(self) -> IdSource:
        """The identifier strategy used when paragraphs are attached."""
        return self._id_source

    @property
    def body(self) -> Body:
        return self._body

    @property
    def styles(self) -> StyleManager:
        return self._styles

    @property
    def numbering(self) -> NumberingManager:
        """The numbering part manager (empty until a list is created)."""
        return self._numbering

    def get_or_create_numbering(self) -> NumberingManager:
        """Get the numbering manager, creating numbering.xml if needed."""
        self._numbering.ensure_part()
        return self._numbering

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def blocks(self) -> list[Block]:
        """Snapshot of the body's blocks. Use body.blocks() for a live view."""
        return list(self._body.blocks())

    @property
    def paragraphs(self) -> list[Paragraph]:
        """Snapshot of the body's top-level paragraphs."""
        return list(self._body.paragraphs())

    @property
    def tables(self) -> list[Table]:
        """Snapshot of the body's top-level tables."""
        return [block for block in self._body.blocks() if isinstance(block, Table)]

    @property
    def text(self) -> str:
        """Body paragraph texts joined with newlines."""
        return self._body.text()

    @property
    def headers(self) -> list[Header]:
        return self._header_footer_ops.headers

    @property
    def footers(self) -> list[Footer]:
        return self._header_footer_ops.footers

    @property
    def comments(self) -> list[Comment]:
        return self._comment_ops.all()

    # ------------------------------------------------------------------
    # Body editing
    # ------------------------------------------------------------------

    def add_paragraph(self, text: str = "", style: str | None = None) -> Paragraph:
        return self._body.add_paragraph(text, style)

    def add_table(self, rows: int, cols: int, widths: list[int] | None = None) -> Table:
        return self._body.add_table(rows, cols, widths)

    def insert_at(self, offset: int, block: Block) -> Block:
        """Insert a block at a character offset of the body text."""
        return self._body.insert_at(offset, block)

    def insert_paragraph_at(self, offset: int, text: str = "", style: str | None = None) -> Paragraph:
        return self._body.insert_paragraph_at(offset, text, style)

    def add_page_break(self) -> Paragraph:
        return self._body.add_page_break()

    # ------------------------------------------------------------------
    # Sections and bookmarks
    # ------------------------------------------------------------------

    @property
    def sections(self) -> list[Section]:
        return self._body.sections()

    def add_section(self, break_type: SectionBreakType = SectionBreakType.NEXT_PAGE) -> Section:
        """End the last section with a break; see Body.add_section()."""
        return self._body.add_section(break_type)

    def bookmarks(self, include_hidden: bool = False) -> list[Bookmark]:
        """Bookmarks in the body, headers and footers."""
        return [
            bookmark
            for container in self._bookmark_containers()
            for bookmark in container.bookmarks(include_hidden)
        ]

    def insert_at_bookmark(self, name: str, block: Block) -> Block:
        """Insert a block where a named bookmark starts.

        Headers are searched first, then the body, then footers; the first
        container holding the bookmark receives the block.

        Raises:
            BookmarkNotFoundError: If no container has the bookmark
        """
        for container in self._bookmark_containers():
            if container.find_bookmark(name) is not None:
                return container.insert_at_bookmark(name, block)
        raise BookmarkNotFoundError(name)

    def _bookmark_containers(self) -> list[BlockContainer]:
        return [*self.headers, self._body, *self.footers]

    # ------------------------------------------------------------------
    # Numbering
    # ------------------------------------------------------------------

    def effective_numbering(self, paragraph: Paragraph) -> NumberingReference | None:
        """Resolve a paragraph's list numbering (see numbering.effective_numbering)."""
        return effective_numbering(paragraph, self._styles)

    def effective_start_number(self, num_id: int, level: int = 0) -> int:
        """Start number of a list level (see numbering.effective_start_number)."""
        return effective_start_number(self._numbering, num_id, level)

    # ------------------------------------------------------------------
    # Headers, footers, comments
    # ------------------------------------------------------------------

    def add_header(
        self,
        header_type: HeaderFooterType = HeaderFooterType.DEFAULT,
        section: Section | None = None,
    ) -> Header:
        return self._header_footer_ops.add_header(header_type, section)

    def add_footer(
        self,
        footer_type: HeaderFooterType = HeaderFooterType.DEFAULT,
        section: Section | None = None,
    ) -> Footer:
        return self._header_footer_ops.add_footer(footer_type, section)

    def remove_header(
        self,
        header_type: HeaderFooterType = HeaderFooterType.DEFAULT,
        section: Section | None = None,
    ) -> bool:
        return self._header_footer_ops.remove_header(header_type, section)

    def remove_footer(
        self,
        footer_type: HeaderFooterType = HeaderFooterType.DEFAULT,
        section: Section | None = None,
    ) -> bool:
        return self._header_footer_ops.remove_footer(footer_type, section)

    def get_header(
        self,
        header_type: HeaderFooterType = HeaderFooterType.DEFAULT,
        section: Section | None = None,
    ) -> Header | None:
        return self._header_footer_ops.get_header(header_type, section)

    def get_footer(
        self,
        footer_type: HeaderFooterType = HeaderFooterType.DEFAULT,
        section: Section | None = None,
    ) -> Footer | None:
        return self._header_footer_ops.get_footer(footer_type, section)

    def add_comment(
        self,
        paragraph: Paragraph,
        text: str,
        author: str = "Author",
        initials: str | None = None,
    ) -> Comment:
        return self._comment_ops.add(paragraph, text, author=author, initials=initials)

    def remove_comment(self, comment: Comment | str | int) -> None:
        self._comment_ops.delete(comment)

    # ------------------------------------------------------------------
    # Integrity
    # ------------------------------------------------------------------

    def _id_roots(self) -> list[etree._Element]:
        roots = [self._package.main_part.element]
        for kind in (PartKinds.HEADER, PartKinds.FOOTER, PartKinds.COMMENTS):
            for part in self._package.related_parts(self._package.main_part, kind.rel_type):
                roots.append(part.element)
        return roots

    def validate_ids(self) -> None:
        """Check that no w14:paraId repeats across body, headers, footers and comments.

        Raises:
            DuplicateIdError: Listing every repeated id
        """
        validate_unique_ids(self._id_roots())

    # ------------------------------------------------------------------
    # Batch editing
    # ------------------------------------------------------------------

    def apply_edits(
        self, edits: list[dict[str, Any]], stop_on_error: bool = False
    ) -> list[EditResult]:
        """Apply multiple edits in sequence.

        Args:
            edits: List of edit dictionaries, each with a "type" key
            stop_on_error: If True, stop processing on first error

        Returns:
            List of EditResult objects, one per edit
        """
        return self._batch_ops.apply_edits(edits, stop_on_error=stop_on_error)

    def apply_edit_file(
        self, path: str | Path, format: str = "yaml", stop_on_error: bool = False
    ) -> list[EditResult]:
        """Apply edits from a YAML or JSON file."""
        return self._batch_ops.apply_edit_file(path, format=format, stop_on_error=stop_on_error)

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------

    def save(self, output_path: str | Path | None = None) -> None:
        """Save the document to a file.

        Args:
            output_path: Where to write; defaults to the path it was opened from

        Raises:
            ValueError: If output_path is omitted for an in-memory document
        """
        if output_path is None:
            if self.path is None:
                raise ValueError(
                    "output_path is required for in-memory documents. "
                    "Use doc.save(path) or doc.save_to_bytes() instead."
                )
            output_path = self.path
        self._package.save(output_path)

    def save_to_bytes(self) -> bytes:
        """Save the document to bytes (in-memory)."""
        return self._package.save_to_bytes()

    def __repr__(self) -> str:
        return f"<Document {self.path or '<in-memory>'}: {len(self.paragraphs)} paragraphs>"
