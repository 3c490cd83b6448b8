"""
Comment container.

A w:comment in comments.xml holds ordinary block content (paragraphs, and in
principle tables) plus the author metadata. The body marks the commented
range with w:commentRangeStart / w:commentRangeEnd and a w:commentReference
run carrying the same w:id.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from lxml import etree

from ..constants import w
from ..container import BlockContainer
from ..text_index import CHAR_TAGS, OPAQUE_TAGS, SKIP_TAGS, TEXT_TAGS

if TYPE_CHECKING:
    from ..document import Document
    from ..package import Part


class Comment(BlockContainer):
    """Wrapper around a w:comment element.

    Example:
        >>> for comment in doc.comments:
        ...     print(f"{comment.author}: {comment.text()}")
        ...     print(f"  On: {comment.marked_text!r}")
    """

    kind = "comment"

    def __init__(
        self,
        element: etree._Element,
        part: Part | None = None,
        document: Document | None = None,
    ) -> None:
        """Initialize Comment wrapper.

        Args:
            element: The w:comment XML element
            part: The comments part
            document: The owning Document, used to find the marked text
        """
        if element.tag != w("comment"):
            raise ValueError(f"Expected w:comment element, got {element.tag}")
        super().__init__(element, part=part, document=document)

    @property
    def id(self) -> str:
        """Get the comment ID."""
        return self._element.get(w("id"), "")

    @property
    def author(self) -> str:
        """Get the comment author, or empty string if not set."""
        return self._element.get(w("author"), "")

    @property
    def initials(self) -> str | None:
        return self._element.get(w("initials"))

    @property
    def date(self) -> datetime | None:
        """Get the comment date/time, or None if not present/parseable."""
        date_str = self._element.get(w("date"))
        if not date_str:
            return None
        try:
            # OOXML uses ISO 8601, with Z or an explicit offset
            return datetime.fromisoformat(date_str.replace("Z", "+00:00"))
        except ValueError:
            return None

    @property
    def marked_text(self) -> str | None:
        """The body text between this comment's range markers.

        Returns:
            The text, or None when the document has no range for this comment
        """
        document = self.document
        if document is None:
            return None
        root = document.body.element
        start = None
        for marker in root.iter(w("commentRangeStart")):
            if marker.get(w("id")) == self.id:
                start = marker
                break
        if start is None:
            return None

        pieces = []
        inside = False
        for element in root.iter():
            if element is start:
                inside = True
                continue
            if not inside:
                continue
            if element.tag == w("commentRangeEnd") and element.get(w("id")) == self.id:
                break
            if any(
                ancestor.tag in SKIP_TAGS or ancestor.tag in OPAQUE_TAGS
                for ancestor in element.iterancestors()
            ):
                continue
            if element.tag in TEXT_TAGS:
                pieces.append(element.text or "")
            elif element.tag in CHAR_TAGS and element.getparent().tag == w("r"):
                pieces.append(CHAR_TAGS[element.tag])
            elif element.tag == w("p") and pieces:
                pieces.append("\n")
        return "".join(pieces)

    def __repr__(self) -> str:
        """String representation of the comment."""
        text = self.text()
        preview = text[:40] + "..." if len(text) > 40 else text
        return f"<Comment id={self.id} author={self.author!r}: {preview!r}>"
