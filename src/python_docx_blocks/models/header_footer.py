"""
Header and Footer containers.

Headers and footers in OOXML are stored in separate XML parts (header1.xml,
footer1.xml, etc.) and are linked from w:sectPr elements by relationship id.
Each one is a block container over the part's root element (w:hdr / w:ftr).
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from lxml import etree

from ..container import BlockContainer

if TYPE_CHECKING:
    from ..document import Document
    from ..package import Part


class HeaderFooterType(Enum):
    """Types of headers and footers in Word documents.

    Word supports three types of headers/footers per section:
    - DEFAULT: Used on all pages except first (if first is different) and even pages
    - FIRST: Used on the first page of the section (if w:titlePg is set)
    - EVEN: Used on even-numbered pages (if w:evenAndOddHeaders is set)
    """

    DEFAULT = "default"
    FIRST = "first"
    EVEN = "even"


class HeaderFooter(BlockContainer):
    """Common base of Header and Footer.

    Attributes:
        element: The part's root element (w:hdr or w:ftr)
        part: The header/footer part
        hf_type: Which pages of the section it applies to
        rel_id: The relationship id referenced from w:sectPr
    """

    def __init__(
        self,
        element: etree._Element,
        part: Part,
        document: Document | None,
        hf_type: HeaderFooterType,
        rel_id: str,
    ) -> None:
        super().__init__(element, part=part, document=document)
        self.hf_type = hf_type
        self.rel_id = rel_id

    @property
    def type(self) -> str:
        """Get the type as a string: 'default', 'first', or 'even'."""
        return self.hf_type.value

    @property
    def partname(self) -> str:
        return self.part.partname if self.part is not None else ""

    def contains(self, text: str, case_sensitive: bool = True) -> bool:
        """Check if the container's text contains a string."""
        haystack = self.text()
        if not case_sensitive:
            return text.lower() in haystack.lower()
        return text in haystack

    def __repr__(self) -> str:
        """Return string representation of the header or footer."""
        text = self.text()
        preview = text[:50].replace("\n", " ")
        if len(text) > 50:
            preview += "..."
        return f'<{type(self).__name__} type="{self.type}": "{preview}">'


class Header(HeaderFooter):
    """A header part (w:hdr)."""

    kind = "header"


class Footer(HeaderFooter):
    """A footer part (w:ftr)."""

    kind = "footer"
