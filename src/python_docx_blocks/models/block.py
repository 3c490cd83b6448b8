"""
Block base class and the tag-to-variant dispatch.

A block is a top-level node of a container: a paragraph, a table, or any
other element the engine passes through untouched. The variant is chosen
once, when the element is wrapped, from BLOCK_TYPES.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, TypeVar

from lxml import etree

from ..constants import local_name
from ..errors import NotAttachedError
from ..identity import Attachment, AttachmentState

if TYPE_CHECKING:
    from ..container import BlockContainer

BlockT = TypeVar("BlockT", bound="type[Block]")

# Filled in by register_block() as the model modules are imported
BLOCK_TYPES: dict[str, type[Block]] = {}


def register_block(tag: str) -> Callable[[BlockT], BlockT]:
    """Class decorator registering a Block variant for an element tag."""

    def decorator(cls: BlockT) -> BlockT:
        BLOCK_TYPES[tag] = cls
        return cls

    return decorator


def wrap_block(element: etree._Element) -> Block:
    """Wrap an element in the Block variant registered for its tag."""
    block_type = BLOCK_TYPES.get(element.tag, UnknownBlock)
    return block_type(element)


class Block:
    """Base wrapper for block-level elements.

    Attributes:
        element: The wrapped XML element
        attachment: Explicit attachment state (detached, or attached to a container)
    """

    def __init__(self, element: etree._Element) -> None:
        self._element = element
        self._attachment = Attachment.detached()

    @property
    def element(self) -> etree._Element:
        """Get the underlying XML element."""
        return self._element

    @property
    def attachment(self) -> Attachment:
        return self._attachment

    @property
    def is_attached(self) -> bool:
        return self._attachment.state is AttachmentState.ATTACHED

    @property
    def container(self) -> BlockContainer | None:
        """The container holding this block, or None if detached."""
        return self._attachment.container

    @property
    def document(self):
        """The Document owning this block's container, if any."""
        container = self.container
        return container.document if container is not None else None

    def previous_block(self) -> Block | None:
        """The previous block sibling in the same container."""
        container = self.container
        if container is None:
            raise NotAttachedError(self)
        return container.block_before(self)

    def next_block(self) -> Block | None:
        """The next block sibling in the same container."""
        container = self.container
        if container is None:
            raise NotAttachedError(self)
        return container.block_after(self)

    def remove(self) -> None:
        """Remove this block from its container.

        Raises:
            NotAttachedError: If the block is not attached
        """
        container = self.container
        if container is None:
            raise NotAttachedError(self)
        container.remove(self)


class UnknownBlock(Block):
    """A block the engine does not interpret (sdt, customXml, bookmarks...).

    Its XML is carried through unchanged.
    """

    @property
    def name(self) -> str:
        """Local name of the wrapped element (e.g., "sdt")."""
        return local_name(self._element.tag)

    @property
    def payload(self) -> bytes:
        """Serialized XML of the wrapped element."""
        return etree.tostring(self._element)

    def __repr__(self) -> str:
        return f"<UnknownBlock {self.name}>"
