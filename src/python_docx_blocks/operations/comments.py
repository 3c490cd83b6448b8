"""
CommentOperations class for handling document comments.

Comments live in word/comments.xml, which is created on the first comment and
deleted with the last one. Each comment marks a paragraph of the body with a
w:commentRangeStart / w:commentRangeEnd pair and a w:commentReference run.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from lxml import etree

from ..constants import w
from ..errors import NotAttachedError, ValidationError
from ..models.comment import Comment
from ..models.paragraph import Paragraph
from ..package import PartKinds

if TYPE_CHECKING:
    from ..document import Document
    from ..package import Part

logger = logging.getLogger(__name__)

_MARKER_TAGS = (w("commentRangeStart"), w("commentRangeEnd"), w("commentReference"))


class CommentOperations:
    """Handles comment operations.

    Example:
        >>> # Usually accessed through Document
        >>> doc = Document("contract.docx")
        >>> comment = doc.add_comment(doc.paragraphs[0], "Please review", author="Reviewer")
        >>> doc.remove_comment(comment)
    """

    def __init__(self, document: Document) -> None:
        """Initialize CommentOperations with a Document reference.

        Args:
            document: The Document instance to operate on
        """
        self._document = document
        self._wrappers: dict[etree._Element, Comment] = {}

    def _part(self) -> Part | None:
        package = self._document.package
        related = package.related_parts(package.main_part, PartKinds.COMMENTS.rel_type)
        return related[0] if related else None

    def all(self) -> list[Comment]:
        """Get all comments in the document.

        Returns:
            List of Comment objects, in comments.xml order
        """
        part = self._part()
        if part is None:
            return []
        comments = []
        current = {}
        for element in part.element.findall(w("comment")):
            comment = self._wrappers.get(element)
            if comment is None:
                comment = Comment(element, part=part, document=self._document)
            current[element] = comment
            comments.append(comment)
        self._wrappers = current
        return comments

    def get(self, comment_id: str | int) -> Comment:
        """Get a comment by id.

        Raises:
            ValidationError: If no comment has that id
        """
        wanted = str(comment_id)
        for comment in self.all():
            if comment.id == wanted:
                return comment
        raise ValidationError(f"No comment with id {wanted}")

    def add(
        self,
        paragraph: Paragraph,
        text: str,
        author: str = "Author",
        initials: str | None = None,
    ) -> Comment:
        """Add a comment covering a whole paragraph.

        Args:
            paragraph: An attached paragraph of this document
            text: Comment text
            author: Author name
            initials: Author initials, derived from the name if omitted

        Returns:
            The new Comment

        Raises:
            NotAttachedError: If the paragraph is not in a container
        """
        if paragraph.container is None:
            raise NotAttachedError(paragraph)

        package = self._document.package
        part = package.get_or_create_part(PartKinds.COMMENTS, package.main_part)
        root = part.element

        comment_id = str(self._next_comment_id(root))
        if initials is None:
            initials = "".join(word[0] for word in author.split() if word).upper()
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")

        element = etree.SubElement(root, w("comment"))
        element.set(w("id"), comment_id)
        element.set(w("author"), author)
        element.set(w("initials"), initials)
        element.set(w("date"), timestamp)

        comment = Comment(element, part=part, document=self._document)
        self._wrappers[element] = comment
        comment.add_paragraph(text)

        self._insert_markers(paragraph.element, comment_id)
        logger.debug(f"Added comment {comment_id} by {author}")
        return comment

    def delete(self, comment: Comment | str | int) -> None:
        """Delete a comment and its markers.

        The comments part is deleted along with the last comment.
        """
        if not isinstance(comment, Comment):
            comment = self.get(comment)
        comment_id = comment.id

        self._remove_markers(comment_id)
        parent = comment.element.getparent()
        if parent is not None:
            parent.remove(comment.element)
        self._wrappers.pop(comment.element, None)

        part = self._part()
        if part is not None and part.element.find(w("comment")) is None:
            self._document.package.delete_part(part)
            logger.debug("Deleted empty comments part")
        logger.debug(f"Deleted comment {comment_id}")

    def delete_all(self) -> None:
        for comment in self.all():
            self.delete(comment)

    def _next_comment_id(self, root: etree._Element) -> int:
        max_id = -1
        for element in root.findall(w("comment")):
            try:
                max_id = max(max_id, int(element.get(w("id"), "0")))
            except ValueError:
                pass
        return max_id + 1

    def _insert_markers(self, paragraph: etree._Element, comment_id: str) -> None:
        """Wrap a paragraph's content in a comment range and append the reference run."""
        range_start = etree.Element(w("commentRangeStart"))
        range_start.set(w("id"), comment_id)
        range_end = etree.Element(w("commentRangeEnd"))
        range_end.set(w("id"), comment_id)
        ref_run = etree.Element(w("r"))
        etree.SubElement(ref_run, w("commentReference")).set(w("id"), comment_id)

        ppr = paragraph.find(w("pPr"))
        paragraph.insert(paragraph.index(ppr) + 1 if ppr is not None else 0, range_start)
        paragraph.append(range_end)
        paragraph.append(ref_run)

    def _remove_markers(self, comment_id: str) -> None:
        body = self._document.body.element
        for element in list(body.iter(*_MARKER_TAGS)):
            if element.get(w("id")) != comment_id:
                continue
            parent = element.getparent()
            if parent is None:
                continue
            if element.tag == w("commentReference") and parent.tag == w("r"):
                grandparent = parent.getparent()
                only_reference = all(
                    child.tag in (w("rPr"), w("commentReference")) for child in parent
                )
                if grandparent is not None and only_reference:
                    grandparent.remove(parent)
                    continue
            parent.remove(element)
