"""
Character offsets over containers.

A paragraph's text is the concatenation of its text leaves in document order:
w:t and w:delText contribute their text, w:tab, w:br and w:cr count as one
character each, w:noBreakHyphen as "-". Property subtrees (w:pPr, w:rPr),
embedded objects (w:drawing, w:pict, w:object, mc:AlternateContent) and the
remaining markup (field codes, bookmarks) contribute nothing.

Offsets are never stored. Each call walks the container from the start, so
results always reflect the current tree at O(n) cost per query.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

from lxml import etree

from .constants import MC_NAMESPACE, w
from .errors import BlockNotFoundError, NotAttachedError, OffsetOutOfRangeError

if TYPE_CHECKING:
    from .container import BlockContainer
    from .models.paragraph import Paragraph

TEXT_TAGS = frozenset({w("t"), w("delText")})

CHAR_TAGS = {
    w("tab"): "\t",
    w("br"): "\n",
    w("cr"): "\n",
    w("noBreakHyphen"): "-",
}

SKIP_TAGS = frozenset({w("pPr"), w("rPr")})

# Embedded objects are zero-length leaves; their textbox content is never
# counted or split.
OPAQUE_TAGS = frozenset(
    {w("drawing"), w("pict"), w("object"), f"{{{MC_NAMESPACE}}}AlternateContent"}
)


def iter_text(element: etree._Element) -> Iterator[str]:
    """Yield the text fragments of an element in document order."""
    tag = element.tag
    if tag in TEXT_TAGS:
        yield element.text or ""
    elif tag in CHAR_TAGS:
        yield CHAR_TAGS[tag]
    elif tag in SKIP_TAGS or tag in OPAQUE_TAGS or not isinstance(tag, str):
        return
    else:
        for child in element:
            yield from iter_text(child)


def element_text(element: etree._Element) -> str:
    """Get the plain text of any element (paragraph, run, wrapper or leaf)."""
    return "".join(iter_text(element))


def element_text_length(element: etree._Element) -> int:
    """Get the plain-text length of any element."""
    return sum(len(fragment) for fragment in iter_text(element))


def _text_before(element: etree._Element, target: etree._Element) -> tuple[int, bool]:
    if element is target:
        return 0, True
    tag = element.tag
    if tag in TEXT_TAGS or tag in CHAR_TAGS or tag in SKIP_TAGS or tag in OPAQUE_TAGS:
        return element_text_length(element), False
    if not isinstance(tag, str):
        return 0, False
    total = 0
    for child in element:
        size, found = _text_before(child, target)
        total += size
        if found:
            return total, True
    return total, False


def offset_within(element: etree._Element, target: etree._Element) -> int:
    """Get the text offset, relative to element, at which a descendant sits.

    Used for zero-length markers such as w:bookmarkStart.

    Raises:
        ValueError: If target is not inside element
    """
    offset, found = _text_before(element, target)
    if not found:
        raise ValueError(f"{target.tag} is not a descendant of {element.tag}")
    return offset


def text_length(paragraph: Paragraph) -> int:
    """Get the plain-text length of a paragraph."""
    return element_text_length(paragraph.element)


def iter_paragraph_offsets(container: BlockContainer) -> Iterator[tuple[Paragraph, int, int]]:
    """Yield (paragraph, start index, text length) for each paragraph of a container."""
    start = 0
    for paragraph in container.paragraphs():
        length = text_length(paragraph)
        yield paragraph, start, length
        start += length


def start_index_of(paragraph: Paragraph) -> int:
    """Get the offset at which a paragraph's text starts within its container.

    Raises:
        NotAttachedError: If the paragraph is not in a container
    """
    container = paragraph.container
    if container is None:
        raise NotAttachedError(paragraph)
    for candidate, start, _ in iter_paragraph_offsets(container):
        if candidate.element is paragraph.element:
            return start
    raise BlockNotFoundError(paragraph, container)


def paragraph_containing(container: BlockContainer, offset: int) -> Paragraph | None:
    """Find the paragraph whose text range contains an offset.

    The range of a paragraph is [start, start + length). An empty paragraph
    owns its start offset, taking it over from a non-empty paragraph that
    starts at the same offset; that paragraph is then found from its second
    character on. An offset equal to the container's total text length
    resolves to the last paragraph (its tail position).

    Returns:
        The paragraph, or None if the container has no paragraphs

    Raises:
        OffsetOutOfRangeError: If offset is negative or past the end
    """
    if offset < 0:
        raise OffsetOutOfRangeError(offset, container.text_length(), "container")

    last: Paragraph | None = None
    end = 0
    for paragraph, start, length in iter_paragraph_offsets(container):
        if start <= offset < start + length or (length == 0 and offset == start):
            return paragraph
        last = paragraph
        end = start + length

    if last is None and offset == 0:
        return None
    if last is not None and offset == end:
        return last
    raise OffsetOutOfRangeError(offset, end, "container")
