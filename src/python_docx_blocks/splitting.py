"""
Splitting paragraphs at a character offset.

split_paragraph() cuts a paragraph into a left and right half so that a new
block can be inserted between them. The cut descends through whichever child
contains the offset:

- a plain run (w:r) is cut at the character, its w:rPr copied to both halves
- a tracked insertion or deletion (w:ins / w:del, also w:moveFrom / w:moveTo)
  is cut the same way, both halves keeping its w:id, w:author and w:date
- hyperlinks, smart tags, fields and content controls are cut like wrappers
- drawings, pictures and embedded objects have no length and are never cut;
  they move whole to one half

Wrappers may nest (a w:del inside a w:ins); the cut recurses to any depth.
Siblings before the cut go to the left half, siblings after it to the right.
The original paragraph is never modified; both halves are new elements.
"""

from __future__ import annotations

import copy
import logging

from lxml import etree

from .constants import XML_NAMESPACE, w
from .errors import OffsetOutOfRangeError
from .identity import clear_ids
from .models.paragraph import Paragraph
from .text_index import TEXT_TAGS, element_text_length

logger = logging.getLogger(__name__)

# Children copied to both halves instead of being distributed
PROPERTY_TAGS = frozenset(
    {
        w("pPr"),
        w("rPr"),
        w("sdtPr"),
        w("sdtEndPr"),
        w("smartTagPr"),
        w("customXmlPr"),
    }
)

_XML_SPACE = f"{{{XML_NAMESPACE}}}space"


def _shallow_copy(element: etree._Element) -> etree._Element:
    """Copy an element's tag and attributes without children or text."""
    return etree.Element(element.tag, attrib=dict(element.attrib), nsmap=element.nsmap)


def _detached_copy(element: etree._Element) -> etree._Element:
    clone = copy.deepcopy(element)
    clone.tail = None
    return clone


def _set_text(element: etree._Element, text: str) -> None:
    element.text = text
    if text != text.strip():
        element.set(_XML_SPACE, "preserve")


def has_content(element: etree._Element) -> bool:
    """True if element has any child besides property elements."""
    return any(
        isinstance(child.tag, str) and child.tag not in PROPERTY_TAGS for child in element
    )


def split_element(element: etree._Element, offset: int) -> tuple[etree._Element, etree._Element]:
    """Split any paragraph-level element at a text offset.

    The child whose text range strictly contains the offset is split
    recursively. A child ending exactly at the offset goes left; a zero-length
    child sitting at the offset goes right.

    Args:
        element: A paragraph, run, wrapper or text element
        offset: Offset relative to the element's own text, 0 < offset < length

    Returns:
        Tuple of (left, right) new elements
    """
    if element.tag in TEXT_TAGS:
        text = element.text or ""
        left = _shallow_copy(element)
        right = _shallow_copy(element)
        _set_text(left, text[:offset])
        _set_text(right, text[offset:])
        return left, right

    left = _shallow_copy(element)
    right = _shallow_copy(element)
    position = 0
    for child in element:
        if isinstance(child.tag, str) and child.tag in PROPERTY_TAGS:
            left.append(_detached_copy(child))
            right.append(_detached_copy(child))
            continue

        size = element_text_length(child) if isinstance(child.tag, str) else 0
        if position < offset < position + size:
            child_left, child_right = split_element(child, offset - position)
            left.append(child_left)
            right.append(child_right)
        elif position + size <= offset and not (size == 0 and position == offset):
            left.append(_detached_copy(child))
        else:
            right.append(_detached_copy(child))
        position += size

    return left, right


def _finish_left(element: etree._Element) -> None:
    # The section break belongs to the end of the original paragraph
    ppr = element.find(w("pPr"))
    if ppr is not None:
        for sect_pr in ppr.findall(w("sectPr")):
            ppr.remove(sect_pr)


def split_paragraph(
    paragraph: Paragraph, offset: int
) -> tuple[Paragraph | None, Paragraph | None]:
    """Split a paragraph into two at an offset relative to its own text.

    Splitting at either end does not cut anything: offset 0 returns
    (None, paragraph) and offset == length returns (paragraph, None), so the
    caller inserts next to the unchanged paragraph. Otherwise both halves are
    new, detached paragraphs; the left one keeps the original w14:paraId, the
    right one gets a fresh id when attached. Paragraph properties are copied
    to both halves.

    Args:
        paragraph: The paragraph to split
        offset: Offset within the paragraph, 0 <= offset <= text length

    Returns:
        Tuple of (left, right); a half with no content is None

    Raises:
        OffsetOutOfRangeError: If offset is outside the paragraph's text
    """
    length = paragraph.text_length()
    if offset < 0 or offset > length:
        raise OffsetOutOfRangeError(offset, length, "paragraph")
    if offset == 0:
        return None, paragraph
    if offset == length:
        return paragraph, None

    left_el, right_el = split_element(paragraph.element, offset)
    _finish_left(left_el)
    clear_ids(right_el)

    left = Paragraph(left_el) if has_content(left_el) else None
    right = Paragraph(right_el) if has_content(right_el) else None
    logger.debug(f"Split paragraph {paragraph.id} at {offset} of {length}")
    return left, right
