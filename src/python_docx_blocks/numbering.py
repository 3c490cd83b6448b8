"""
List numbering: the numbering part and paragraph numbering resolution.

NumberingManager is a live view over numbering.xml. The resolution functions
are pure functions of the current tree; nothing is cached between calls.

A paragraph's numbering is found in this order:

1. its own w:pPr/w:numPr
2. the nearest preceding paragraph with a w:numPr, walking back only while
   the siblings are list items (ListParagraph style or a w:numPr)
3. the numbering of its paragraph style, following w:basedOn

A w:numId of 0 anywhere along the way means numbering was removed, and the
paragraph is not in a list.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from lxml import etree

from .constants import LIST_PARAGRAPH_STYLE, w
from .errors import DocumentFormatError, UndefinedNumberingError
from .models.numbering import (
    NumberingDefinition,
    NumberingReference,
    NumberingStyle,
    _int_val,
)
from .models.paragraph import Paragraph
from .package import PartKinds
from .templates import get_element

if TYPE_CHECKING:
    from .package import OOXMLPackage, Part
    from .styles import StyleManager

logger = logging.getLogger(__name__)


class NumberingManager:
    """Manages word/numbering.xml.

    Example:
        >>> numbering = NumberingManager(package)
        >>> bullets = numbering.add_bullet_definition()
        >>> apply_list_style(paragraph, bullets, level=1)
        >>> numbering.get_definition(bullets.num_id).starting_number(1)
        1

    Attributes:
        package: The package whose main part relates to the numbering part
    """

    def __init__(self, package: OOXMLPackage) -> None:
        self._package = package

    @property
    def part(self) -> Part | None:
        """The numbering part, if the document has one."""
        related = self._package.related_parts(
            self._package.main_part, PartKinds.NUMBERING.rel_type
        )
        return related[0] if related else None

    @property
    def exists(self) -> bool:
        return self.part is not None

    def ensure_part(self) -> Part:
        """Get the numbering part, creating an empty one if missing."""
        return self._package.get_or_create_part(PartKinds.NUMBERING, self._package.main_part)

    def _root(self) -> etree._Element | None:
        part = self.part
        return part.element if part is not None else None

    @property
    def styles(self) -> list[NumberingStyle]:
        """All w:abstractNum templates, in document order."""
        root = self._root()
        if root is None:
            return []
        return [NumberingStyle(el) for el in root.findall(w("abstractNum"))]

    @property
    def definitions(self) -> list[NumberingDefinition]:
        """All w:num definitions, in document order."""
        root = self._root()
        if root is None:
            return []
        return [NumberingDefinition(el, self) for el in root.findall(w("num"))]

    def get_style(self, abstract_id: int) -> NumberingStyle | None:
        for style in self.styles:
            if style.abstract_id == abstract_id:
                return style
        return None

    def get_definition(self, num_id: int) -> NumberingDefinition:
        """Get the w:num with a given numId.

        Raises:
            UndefinedNumberingError: If no definition has that id
        """
        for definition in self.definitions:
            if definition.num_id == num_id:
                return definition
        raise UndefinedNumberingError(num_id)

    def has_definition(self, num_id: int) -> bool:
        return any(definition.num_id == num_id for definition in self.definitions)

    # ------------------------------------------------------------------
    # Creating definitions
    # ------------------------------------------------------------------

    def add_bullet_definition(self) -> NumberingDefinition:
        """Create a bullet list definition.

        An existing template with a bullet first level is reused; otherwise a
        new nine-level bullet template is added.
        """
        style = self._find_style(lambda lvl: lvl.is_bullet) or self._add_style("numbering_bullet")
        return self._add_definition(style, 1)

    def add_numbered_definition(self, start: int = 1) -> NumberingDefinition:
        """Create a numbered list definition.

        Args:
            start: First number of level 0; other values than 1 are written
                as a w:startOverride

        Raises:
            ValueError: If start is below 1
        """
        if start < 1:
            raise ValueError(f"start must be at least 1, got {start}")
        style = self._find_style(lambda lvl: not lvl.is_bullet) or self._add_style("numbering_decimal")
        return self._add_definition(style, start)

    def _find_style(self, predicate) -> NumberingStyle | None:
        for style in self.styles:
            first = style.get_level(0)
            if first is not None and predicate(first):
                return style
        return None

    def _add_style(self, template: str) -> NumberingStyle:
        root = self.ensure_part().element
        existing = root.findall(w("abstractNum"))
        abstract_id = max((NumberingStyle(el).abstract_id for el in existing), default=-1) + 1

        element = get_element(template)
        element.set(w("abstractNumId"), str(abstract_id))
        if existing:
            existing[-1].addnext(element)
        else:
            root.insert(0, element)
        logger.debug(f"Added abstract numbering {abstract_id} from {template}")
        return NumberingStyle(element)

    def _add_definition(self, style: NumberingStyle, start: int) -> NumberingDefinition:
        root = self.ensure_part().element
        num_id = max((d.num_id for d in self.definitions), default=0) + 1

        element = etree.SubElement(root, w("num"))
        element.set(w("numId"), str(num_id))
        etree.SubElement(element, w("abstractNumId")).set(w("val"), str(style.abstract_id))
        definition = NumberingDefinition(element, self)
        if start != 1:
            definition.set_start_override(0, start)
        logger.debug(f"Added numbering definition {num_id} -> abstract {style.abstract_id}")
        return definition

    def remove_definition(self, num_id: int) -> None:
        """Remove a w:num; its abstract template stays.

        Raises:
            UndefinedNumberingError: If no definition has that id
        """
        definition = self.get_definition(num_id)
        definition.element.getparent().remove(definition.element)
        logger.debug(f"Removed numbering definition {num_id}")

    def __repr__(self) -> str:
        return f"<NumberingManager {len(self.styles)} styles, {len(self.definitions)} definitions>"


def _own_num_pr(paragraph: Paragraph) -> tuple[int | None, int | None] | None:
    """(numId, ilvl) from a paragraph's own w:numPr, or None without one."""
    num_pr = paragraph.num_properties
    if num_pr is None:
        return None
    return _int_val(num_pr.find(w("numId"))), _int_val(num_pr.find(w("ilvl")))


def effective_numbering(
    paragraph: Paragraph, styles: StyleManager | None = None
) -> NumberingReference | None:
    """Resolve the (numId, level) a paragraph is numbered with.

    Args:
        paragraph: The paragraph to resolve
        styles: Style lookup for the style fallback; defaults to the styles of
            the paragraph's document

    Returns:
        The NumberingReference, or None if the paragraph is not in a list
    """
    level: int | None = None
    own = _own_num_pr(paragraph)
    if own is not None:
        num_id, level = own
        if num_id is not None:
            return None if num_id == 0 else NumberingReference(num_id, level or 0)

    if paragraph.container is not None:
        sibling = paragraph.previous_block()
        while isinstance(sibling, Paragraph) and sibling.is_list_item():
            found = _own_num_pr(sibling)
            if found is not None and found[0] is not None:
                num_id, sibling_level = found
                if num_id == 0:
                    return None
                return NumberingReference(num_id, level if level is not None else sibling_level or 0)
            sibling = sibling.previous_block()

    if styles is None:
        document = paragraph.document
        styles = document.styles if document is not None else None
    if styles is None:
        return None

    style_id = paragraph.style or styles.default_paragraph_style()
    if style_id is None:
        return None
    inherited = styles.numbering_properties(style_id)
    if inherited is None or inherited.removed:
        return None
    if level is not None:
        return NumberingReference(inherited.num_id, level)
    return inherited


def effective_start_number(numbering: NumberingManager, num_id: int, level: int = 0) -> int:
    """The number a list level starts counting from.

    A w:startOverride for the level in the definition wins over the template's
    w:start. A level declaring neither starts at 0.

    Raises:
        UndefinedNumberingError: If num_id is not defined
        DocumentFormatError: If the definition points at a missing template
    """
    definition = numbering.get_definition(num_id)
    override = definition.get_override(level)
    if override is not None and override.start is not None:
        return override.start
    if definition.style is None:
        raise DocumentFormatError(
            f"Numbering definition {num_id} references undefined "
            f"w:abstractNumId('{definition.abstract_id}')"
        )
    return definition.starting_number(level)


def apply_list_style(
    paragraph: Paragraph, definition: NumberingDefinition, level: int = 0
) -> Paragraph:
    """Make a paragraph a list item of a numbering definition.

    Sets the ListParagraph style and writes w:numPr. When the paragraph
    belongs to a document, the ListParagraph style is added to styles.xml if
    missing.

    Raises:
        ValueError: If level is negative
    """
    if level < 0:
        raise ValueError(f"level must not be negative, got {level}")
    paragraph.style = LIST_PARAGRAPH_STYLE
    paragraph.set_numbering(definition.num_id, level)

    document = paragraph.document
    if document is not None:
        document.styles.ensure_list_paragraph_style()
    return paragraph
