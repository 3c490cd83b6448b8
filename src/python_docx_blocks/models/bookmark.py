"""
Bookmark locations.

A bookmark is a w:bookmarkStart / w:bookmarkEnd pair sharing a w:id. Only
the start marker matters for positioning: it is zero-length, so its place in
the text is the offset of the text that precedes it in its paragraph.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..constants import w
from ..text_index import OPAQUE_TAGS, iter_paragraph_offsets, offset_within
from .paragraph import Paragraph

if TYPE_CHECKING:
    from ..container import BlockContainer


@dataclass
class Bookmark:
    """A named bookmark found in a container.

    Attributes:
        name: The w:name of the bookmark
        bookmark_id: The w:id shared by the start and end markers
        paragraph: The paragraph holding w:bookmarkStart
        offset: Container offset of the start marker
        local_offset: Offset of the start marker within its paragraph
    """

    name: str
    bookmark_id: str
    paragraph: Paragraph
    offset: int
    local_offset: int

    @property
    def is_hidden(self) -> bool:
        """Word's own bookmarks (_GoBack, _Toc..., _Ref...) start with an underscore."""
        return self.name.startswith("_")


def iter_bookmarks(container: BlockContainer) -> Iterator[Bookmark]:
    """Yield the bookmarks that start in a container's own paragraphs.

    Markers inside tables belong to the cell containers; markers inside
    textboxes are not reachable by offset and are skipped.
    """
    for paragraph, start, _ in iter_paragraph_offsets(container):
        for marker in paragraph.element.iter(w("bookmarkStart")):
            name = marker.get(w("name"))
            if not name or any(a.tag in OPAQUE_TAGS for a in marker.iterancestors()):
                continue
            local = offset_within(paragraph.element, marker)
            yield Bookmark(
                name=name,
                bookmark_id=marker.get(w("id"), ""),
                paragraph=paragraph,
                offset=start + local,
                local_offset=local,
            )
