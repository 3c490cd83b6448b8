"""
Paragraph identity and block attachment.

Paragraphs are identified by their w14:paraId attribute, an 8 hex digit value
assigned the first time the paragraph is attached to a container. Ids come
from an injectable IdSource; the default draws them at random with no
document-wide counter, so uniqueness is checked after load by
validate_unique_ids() rather than guaranteed by construction.

Every Block also records whether it is attached, and to which container. The
state is explicit (AttachmentState) instead of being inferred from the lxml
parent pointer, and attach()/detach() are the only functions that change it.
"""

from __future__ import annotations

import logging
import random
import weakref
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from lxml import etree

from .constants import PARA_ID_WIDTH, w, w14
from .errors import AlreadyAttachedError, DuplicateIdError, NotAttachedError

if TYPE_CHECKING:
    from .container import BlockContainer
    from .models.block import Block

logger = logging.getLogger(__name__)

PARA_ID = w14("paraId")
TEXT_ID = w14("textId")

# w14:paraId values must stay below 0x80000000
_MAX_PARA_ID_BITS = 31


class IdSource(Protocol):
    """Strategy producing paragraph identifiers."""

    def next_id(self) -> str:
        """Return a new identifier as fixed-width uppercase hex."""
        ...


class RandomHexIdSource:
    """Uniformly distributed random ids of a fixed width.

    Args:
        width: Number of hex digits in each id
        rng: Random generator, defaults to a private random.Random()
    """

    def __init__(self, width: int = PARA_ID_WIDTH, rng: random.Random | None = None) -> None:
        self.width = width
        self._bits = min(width * 4, _MAX_PARA_ID_BITS)
        self._rng = rng or random.Random()

    def next_id(self) -> str:
        value = 0
        while value == 0:
            value = self._rng.getrandbits(self._bits)
        return f"{value:0{self.width}X}"


class SequentialIdSource:
    """Deterministic ids counting up from start, for tests and reproducible output."""

    def __init__(self, start: int = 1, width: int = PARA_ID_WIDTH) -> None:
        self.width = width
        self._next = start

    def next_id(self) -> str:
        value = self._next
        self._next += 1
        return f"{value:0{self.width}X}"


class AttachmentState(Enum):
    """Whether a block currently sits in a container."""

    DETACHED = "detached"
    ATTACHED = "attached"


@dataclass(frozen=True)
class Attachment:
    """Attachment state of a block, with a weak handle to its container."""

    state: AttachmentState = AttachmentState.DETACHED
    _container: weakref.ReferenceType | None = field(default=None, repr=False, compare=False)

    @classmethod
    def detached(cls) -> Attachment:
        return cls()

    @classmethod
    def attached_to(cls, container: BlockContainer) -> Attachment:
        return cls(AttachmentState.ATTACHED, weakref.ref(container))

    @property
    def container(self) -> BlockContainer | None:
        """The owning container, or None when detached or collected."""
        if self.state is AttachmentState.DETACHED or self._container is None:
            return None
        return self._container()


def get_para_id(element: etree._Element) -> str | None:
    """Get the w14:paraId of a paragraph element."""
    return element.get(PARA_ID)


def assign_ids(element: etree._Element, id_source: IdSource) -> int:
    """Give every paragraph under element (itself included) a paraId if it lacks one.

    Returns:
        Number of ids assigned
    """
    assigned = 0
    for paragraph in element.iter(w("p")):
        if paragraph.get(PARA_ID) is None:
            paragraph.set(PARA_ID, id_source.next_id())
            assigned += 1
    return assigned


def clear_ids(element: etree._Element) -> None:
    """Remove paraId/textId from every paragraph under element."""
    for paragraph in element.iter(w("p")):
        paragraph.attrib.pop(PARA_ID, None)
        paragraph.attrib.pop(TEXT_ID, None)


def is_attached(block: Block) -> bool:
    """True if the block is attached or its node already has a parent."""
    if block.attachment.state is AttachmentState.ATTACHED:
        return True
    return block.element.getparent() is not None


def attach(block: Block, container: BlockContainer, position: int) -> Block:
    """Splice a detached block into a container.

    Args:
        block: The block to attach
        container: Target container
        position: Child index within the container's XML element

    Returns:
        The attached block

    Raises:
        AlreadyAttachedError: If the block is attached or its node has a parent
    """
    if is_attached(block):
        raise AlreadyAttachedError(block)

    assign_ids(block.element, container.id_source)
    container.element.insert(position, block.element)
    block._attachment = Attachment.attached_to(container)
    container._register(block)
    logger.debug(f"Attached {block!r} to {container!r} at child {position}")
    return block


def detach(block: Block) -> Block:
    """Remove a block's node from its parent.

    Raises:
        NotAttachedError: If the block is not attached anywhere
    """
    parent = block.element.getparent()
    if block.attachment.state is AttachmentState.DETACHED and parent is None:
        raise NotAttachedError(block)

    container = block.attachment.container
    if parent is not None:
        parent.remove(block.element)
    block._attachment = Attachment.detached()
    if container is not None:
        container._unregister(block)
    logger.debug(f"Detached {block!r}")
    return block


def find_duplicate_ids(roots: Iterable[etree._Element]) -> dict[str, int]:
    """Count paraIds used more than once across the given trees."""
    counts: Counter[str] = Counter()
    for root in roots:
        for paragraph in root.iter(w("p")):
            para_id = paragraph.get(PARA_ID)
            if para_id is not None:
                counts[para_id.upper()] += 1
    return {para_id: count for para_id, count in counts.items() if count > 1}


def validate_unique_ids(roots: Iterable[etree._Element]) -> None:
    """Check that no paraId is used twice across the given trees.

    Raises:
        DuplicateIdError: If any id repeats
    """
    duplicates = find_duplicate_ids(roots)
    if duplicates:
        raise DuplicateIdError(duplicates)
