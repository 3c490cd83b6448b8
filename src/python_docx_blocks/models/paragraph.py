"""
Paragraph wrapper class for convenient access to paragraph elements.
"""

from __future__ import annotations

import re

from lxml import etree

from ..constants import (
    LIST_PARAGRAPH_STYLE,
    NSMAP_FULL,
    WORD_NAMESPACE,
    XML_NAMESPACE,
    w,
)
from ..identity import PARA_ID
from ..text_index import element_text, element_text_length, start_index_of
from .block import Block, register_block
from .numbering import NumberingReference

# Splits text into plain chunks and the control characters that become elements
_CONTROL_CHARS = re.compile(r"(\t|\r\n|\n|\r)")


def build_runs(text: str) -> list[etree._Element]:
    """Build w:r elements for text, turning tabs and newlines into w:tab/w:br."""
    runs = []
    for chunk in _CONTROL_CHARS.split(text):
        if not chunk:
            continue
        run = etree.Element(w("r"))
        if chunk == "\t":
            etree.SubElement(run, w("tab"))
        elif chunk in ("\n", "\r", "\r\n"):
            etree.SubElement(run, w("br"))
        else:
            t = etree.SubElement(run, w("t"))
            t.text = chunk
            if chunk != chunk.strip():
                t.set(f"{{{XML_NAMESPACE}}}space", "preserve")
        runs.append(run)
    return runs


@register_block(w("p"))
class Paragraph(Block):
    """Wrapper around a w:p (paragraph) element.

    Example:
        >>> paragraph = Paragraph.create("Hello", style="Heading1")
        >>> doc.body.add(paragraph)
        >>> paragraph.start_index()
        0
    """

    def __init__(self, element: etree._Element):
        """Initialize Paragraph wrapper.

        Args:
            element: The w:p XML element to wrap
        """
        if element.tag != f"{{{WORD_NAMESPACE}}}p":
            raise ValueError(f"Expected w:p element, got {element.tag}")
        super().__init__(element)

    @classmethod
    def create(cls, text: str = "", style: str | None = None) -> Paragraph:
        """Create a new detached paragraph.

        Args:
            text: Initial text; tabs and line breaks become w:tab / w:br
            style: Optional paragraph style id

        Returns:
            The new paragraph, ready to be added to a container
        """
        paragraph = cls(etree.Element(w("p"), nsmap=NSMAP_FULL))
        if style:
            paragraph.style = style
        if text:
            paragraph.text = text
        return paragraph

    @property
    def id(self) -> str | None:
        """The w14:paraId, assigned when the paragraph is first attached."""
        return self._element.get(PARA_ID)

    @property
    def text(self) -> str:
        """Get the plain text of the paragraph.

        Includes tracked deletions (w:delText); tabs and breaks appear as
        "\\t" and "\\n".
        """
        return element_text(self._element)

    @text.setter
    def text(self, value: str) -> None:
        """Replace all content with plain runs, keeping paragraph properties."""
        for child in list(self._element):
            if child.tag != w("pPr"):
                self._element.remove(child)
        for run in build_runs(value):
            self._element.append(run)

    def text_length(self) -> int:
        """Length of the paragraph's plain text. Walks the whole paragraph."""
        return element_text_length(self._element)

    def start_index(self) -> int:
        """Offset of this paragraph's first character within its container.

        Recomputed on every call by scanning all earlier paragraphs.

        Raises:
            NotAttachedError: If the paragraph is not in a container
        """
        return start_index_of(self)

    @property
    def properties(self) -> etree._Element | None:
        """The w:pPr element, if present."""
        return self._element.find(w("pPr"))

    def get_or_add_properties(self) -> etree._Element:
        """Get the w:pPr element, creating it as the first child if needed."""
        ppr = self._element.find(w("pPr"))
        if ppr is None:
            ppr = etree.Element(w("pPr"))
            self._element.insert(0, ppr)
        return ppr

    @property
    def style(self) -> str | None:
        """Get the paragraph style (e.g., 'Heading1', 'Normal')."""
        ppr = self.properties
        if ppr is None:
            return None
        pstyle = ppr.find(w("pStyle"))
        return pstyle.get(w("val")) if pstyle is not None else None

    @style.setter
    def style(self, value: str | None) -> None:
        """Set the paragraph style; None removes it."""
        if value is None:
            ppr = self.properties
            pstyle = ppr.find(w("pStyle")) if ppr is not None else None
            if pstyle is not None:
                ppr.remove(pstyle)
            return
        ppr = self.get_or_add_properties()
        pstyle = ppr.find(w("pStyle"))
        if pstyle is None:
            pstyle = etree.Element(w("pStyle"))
            ppr.insert(0, pstyle)
        pstyle.set(w("val"), value)

    @property
    def runs(self) -> list[etree._Element]:
        """All w:r elements, including those nested in hyperlinks and tracked changes."""
        return list(self._element.iter(w("r")))

    @property
    def num_properties(self) -> etree._Element | None:
        """The paragraph's own w:numPr element, if any."""
        ppr = self.properties
        return ppr.find(w("numPr")) if ppr is not None else None

    @property
    def numbering(self) -> NumberingReference | None:
        """The paragraph's own numbering reference, ignoring siblings and styles."""
        num_pr = self.num_properties
        return NumberingReference.from_num_pr(num_pr) if num_pr is not None else None

    def is_list_item(self) -> bool:
        """True if the paragraph has list numbering or the list paragraph style."""
        return self.style == LIST_PARAGRAPH_STYLE or self.num_properties is not None

    def set_numbering(self, num_id: int, level: int = 0) -> None:
        """Write w:numPr (w:ilvl + w:numId) into the paragraph properties."""
        ppr = self.get_or_add_properties()
        num_pr = ppr.find(w("numPr"))
        if num_pr is None:
            num_pr = etree.Element(w("numPr"))
            pstyle = ppr.find(w("pStyle"))
            if pstyle is not None:
                pstyle.addnext(num_pr)
            else:
                ppr.insert(0, num_pr)
        for child in list(num_pr):
            num_pr.remove(child)
        etree.SubElement(num_pr, w("ilvl")).set(w("val"), str(level))
        etree.SubElement(num_pr, w("numId")).set(w("val"), str(num_id))

    @property
    def is_empty(self) -> bool:
        """True if the paragraph has no content besides its properties."""
        return all(child.tag == w("pPr") for child in self._element)

    def __repr__(self) -> str:
        """String representation of the paragraph."""
        text_preview = self.text[:50] + "..." if len(self.text) > 50 else self.text
        style_info = f" style={self.style}" if self.style else ""
        return f"<Paragraph{style_info}: {text_preview!r}>"
