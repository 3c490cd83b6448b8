"""
Section wrapper class for document sections.

A section is a run of body blocks sharing one w:sectPr. Every section but
the last ends with a section-break paragraph that carries its w:sectPr in
w:pPr; the last section's w:sectPr is the final child of w:body. Headers and
footers are referenced per section.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from lxml import etree

from ..constants import local_name, w
from .paragraph import Paragraph

if TYPE_CHECKING:
    from ..container import Body
    from .block import Block


class SectionBreakType(Enum):
    """How a section starts relative to the previous one (w:type/@w:val)."""

    NEXT_PAGE = "nextPage"
    EVEN_PAGE = "evenPage"
    ODD_PAGE = "oddPage"
    CONTINUOUS = "continuous"
    NEXT_COLUMN = "nextColumn"


# w:sectPr children that follow w:type
_AFTER_TYPE = frozenset(
    {
        "pgSz", "pgMar", "paperSrc", "pgBorders", "lnNumType", "pgNumType", "cols",
        "formProt", "vAlign", "noEndnote", "titlePg", "textDirection", "bidi",
        "rtlGutter", "docGrid", "printerSettings", "sectPrChange",
    }
)


def insert_before_any(parent: etree._Element, element: etree._Element, following: frozenset[str]) -> None:
    """Insert element before the first child whose local name is in following."""
    for child in parent:
        if local_name(child.tag) in following:
            child.addprevious(element)
            return
    parent.append(element)


def section_properties_of(paragraph: Paragraph) -> etree._Element | None:
    """The w:sectPr a section-break paragraph carries, if any."""
    ppr = paragraph.properties
    return ppr.find(w("sectPr")) if ppr is not None else None


class Section:
    """One section of the document body.

    Attributes:
        properties: The section's w:sectPr element
        paragraph: The section-break paragraph, or None for the final section
    """

    def __init__(self, properties: etree._Element, body: Body, paragraph: Paragraph | None = None):
        self.properties = properties
        self.paragraph = paragraph
        self._body = body

    @property
    def is_final(self) -> bool:
        return self.paragraph is None

    @property
    def break_type(self) -> SectionBreakType:
        """How this section starts; Word's default is a new page."""
        type_el = self.properties.find(w("type"))
        value = type_el.get(w("val")) if type_el is not None else None
        return SectionBreakType(value) if value else SectionBreakType.NEXT_PAGE

    @break_type.setter
    def break_type(self, value: SectionBreakType) -> None:
        type_el = self.properties.find(w("type"))
        if type_el is None:
            type_el = etree.Element(w("type"))
            insert_before_any(self.properties, type_el, _AFTER_TYPE)
        type_el.set(w("val"), value.value)

    def blocks(self) -> list[Block]:
        """The body blocks of this section, including its break paragraph."""
        result: list[Block] = []
        for block in self._body.blocks():
            if self.paragraph is not None and block.element is self.paragraph.element:
                result.append(block)
                return result
            if isinstance(block, Paragraph) and section_properties_of(block) is not None:
                result = []
            else:
                result.append(block)
        return result if self.paragraph is None else []

    def paragraphs(self) -> list[Paragraph]:
        """The paragraphs of this section, including its break paragraph."""
        return [block for block in self.blocks() if isinstance(block, Paragraph)]

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Section) and other.properties is self.properties

    def __hash__(self) -> int:
        return hash(id(self.properties))

    def __repr__(self) -> str:
        where = "final" if self.paragraph is None else f"break at {self.paragraph.id}"
        return f"<Section {self.break_type.value} ({where})>"
