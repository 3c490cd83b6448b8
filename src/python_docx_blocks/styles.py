"""
StyleManager class for reading word/styles.xml.

The engine only needs a narrow slice of the styles part: looking a paragraph
style up by id, following its w:basedOn chain, and reading the numbering
properties a style contributes to the paragraphs that use it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING

from lxml import etree

from .constants import LIST_PARAGRAPH_STYLE, w
from .models.numbering import NumberingReference, _int_val
from .package import PartKinds
from .templates import get_element

if TYPE_CHECKING:
    from .package import OOXMLPackage, Part

logger = logging.getLogger(__name__)


class StyleManager:
    """Manages the styles part of a package.

    Example:
        >>> styles = StyleManager(package)
        >>> styles.based_on("Heading1")
        'Normal'
        >>> styles.numbering_properties("ListBullet")
        NumberingReference(num_id=3, level=0)

    Attributes:
        package: The OOXMLPackage containing the styles part
    """

    def __init__(self, package: OOXMLPackage) -> None:
        """Initialize a StyleManager for a package.

        Args:
            package: The package whose main part relates to the styles part
        """
        self._package = package

    @property
    def part(self) -> Part | None:
        """The styles part, if the document has one."""
        related = self._package.related_parts(self._package.main_part, PartKinds.STYLES.rel_type)
        return related[0] if related else None

    def _root(self) -> etree._Element | None:
        part = self.part
        return part.element if part is not None else None

    def ensure_part(self) -> Part:
        """Get the styles part, creating it from the template if missing."""
        return self._package.get_or_create_part(PartKinds.STYLES, self._package.main_part)

    def __iter__(self) -> Iterator[etree._Element]:
        root = self._root()
        if root is None:
            return iter(())
        return iter(root.findall(w("style")))

    @property
    def style_ids(self) -> list[str]:
        return [style.get(w("styleId"), "") for style in self]

    def get_style_element(self, style_id: str) -> etree._Element | None:
        """Get the w:style element with a given styleId."""
        for style in self:
            if style.get(w("styleId")) == style_id:
                return style
        return None

    def has_style(self, style_id: str) -> bool:
        return self.get_style_element(style_id) is not None

    def default_paragraph_style(self) -> str | None:
        """The styleId of the default paragraph style (w:default="1")."""
        for style in self:
            if style.get(w("type")) == "paragraph" and style.get(w("default")) in ("1", "true"):
                return style.get(w("styleId"))
        return None

    def based_on(self, style_id: str) -> str | None:
        """The parent style id of a style, if any."""
        style = self.get_style_element(style_id)
        if style is None:
            return None
        parent = style.find(w("basedOn"))
        return parent.get(w("val")) if parent is not None else None

    def numbering_properties(self, style_id: str) -> NumberingReference | None:
        """Numbering a paragraph style applies, following w:basedOn.

        The first style in the chain declaring a w:numId wins. A w:ilvl found
        earlier in the chain than the numId takes precedence over the one
        next to it.

        Args:
            style_id: The paragraph style to start from

        Returns:
            The NumberingReference, or None if no style in the chain numbers
        """
        seen: set[str] = set()
        level: int | None = None
        current: str | None = style_id
        while current is not None:
            if current in seen:
                logger.warning(f"Style inheritance cycle at {current!r}, ignoring the rest")
                return None
            seen.add(current)

            style = self.get_style_element(current)
            if style is None:
                return None
            ppr = style.find(w("pPr"))
            num_pr = ppr.find(w("numPr")) if ppr is not None else None
            if num_pr is not None:
                if level is None:
                    level = _int_val(num_pr.find(w("ilvl")))
                num_id = _int_val(num_pr.find(w("numId")))
                if num_id is not None:
                    return NumberingReference(num_id, level or 0)
            parent = style.find(w("basedOn"))
            current = parent.get(w("val")) if parent is not None else None
        return None

    def ensure_list_paragraph_style(self) -> bool:
        """Add the ListParagraph style to styles.xml if it is missing.

        Returns:
            True if the style was added
        """
        if self.has_style(LIST_PARAGRAPH_STYLE):
            return False
        root = self.ensure_part().element
        root.append(get_element("list_paragraph_style"))
        logger.debug(f"Added {LIST_PARAGRAPH_STYLE} style")
        return True
