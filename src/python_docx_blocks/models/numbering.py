"""
Numbering model classes.

numbering.xml holds two layers:

- w:abstractNum: a reusable list template (NumberingStyle) with one w:lvl per
  indent level, each declaring its start number, number format and label.
- w:num: a document-bound instance (NumberingDefinition) with an integer
  numId, a reference to its abstractNum and optional per-level overrides.

Paragraphs point at a w:num through w:pPr/w:numPr (w:numId + w:ilvl).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from lxml import etree

from ..constants import w

if TYPE_CHECKING:
    from ..numbering import NumberingManager


def _int_val(element: etree._Element | None, default: int | None = None) -> int | None:
    """Read an integer w:val attribute from an optional element."""
    if element is None:
        return default
    value = element.get(w("val"))
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class NumberingReference:
    """The (numId, ilvl) pair a paragraph resolves to.

    Attributes:
        num_id: The w:num id; 0 means numbering was explicitly removed
        level: 0-based indent level
    """

    num_id: int
    level: int = 0

    @property
    def removed(self) -> bool:
        """True when numId 0 switches numbering off for the paragraph."""
        return self.num_id == 0

    @classmethod
    def from_num_pr(cls, num_pr: etree._Element) -> NumberingReference | None:
        """Build a reference from a w:numPr element; None if it has no numId."""
        num_id = _int_val(num_pr.find(w("numId")))
        if num_id is None:
            return None
        return cls(num_id, _int_val(num_pr.find(w("ilvl")), 0) or 0)

    def __iter__(self):
        yield self.num_id
        yield self.level


class NumberingLevel:
    """One w:lvl of an abstract numbering template."""

    def __init__(self, element: etree._Element) -> None:
        self.element = element

    @property
    def level(self) -> int:
        return int(self.element.get(w("ilvl"), "0"))

    @property
    def start(self) -> int:
        """Declared start number; a level with no w:start starts at 0."""
        return _int_val(self.element.find(w("start")), 0) or 0

    @property
    def number_format(self) -> str:
        num_fmt = self.element.find(w("numFmt"))
        return num_fmt.get(w("val"), "decimal") if num_fmt is not None else "decimal"

    @property
    def text(self) -> str | None:
        """The level label template (e.g., "%1." or a bullet glyph)."""
        lvl_text = self.element.find(w("lvlText"))
        return lvl_text.get(w("val")) if lvl_text is not None else None

    @property
    def is_bullet(self) -> bool:
        return self.number_format == "bullet"

    def __repr__(self) -> str:
        return f"<NumberingLevel {self.level}: {self.number_format} start={self.start}>"


class NumberingStyle:
    """A w:abstractNum list template."""

    def __init__(self, element: etree._Element) -> None:
        self.element = element

    @property
    def abstract_id(self) -> int:
        return int(self.element.get(w("abstractNumId"), "0"))

    @property
    def levels(self) -> list[NumberingLevel]:
        return [NumberingLevel(lvl) for lvl in self.element.findall(w("lvl"))]

    def get_level(self, level: int) -> NumberingLevel | None:
        for candidate in self.levels:
            if candidate.level == level:
                return candidate
        return None

    def __repr__(self) -> str:
        return f"<NumberingStyle {self.abstract_id} ({len(self.levels)} levels)>"


class LevelOverride:
    """A w:lvlOverride inside a w:num."""

    def __init__(self, element: etree._Element) -> None:
        self.element = element

    @property
    def level(self) -> int:
        return int(self.element.get(w("ilvl"), "0"))

    @property
    def start(self) -> int | None:
        """The w:startOverride value, if declared."""
        return _int_val(self.element.find(w("startOverride")))

    def __repr__(self) -> str:
        return f"<LevelOverride {self.level}: start={self.start}>"


class NumberingDefinition:
    """A w:num: a document-unique id bound to one NumberingStyle."""

    def __init__(self, element: etree._Element, manager: NumberingManager | None = None) -> None:
        self.element = element
        self._manager = manager

    @property
    def num_id(self) -> int:
        return int(self.element.get(w("numId"), "0"))

    @property
    def abstract_id(self) -> int | None:
        return _int_val(self.element.find(w("abstractNumId")))

    @property
    def style(self) -> NumberingStyle | None:
        """The abstract template this definition points at."""
        if self._manager is None or self.abstract_id is None:
            return None
        return self._manager.get_style(self.abstract_id)

    @property
    def overrides(self) -> list[LevelOverride]:
        return [LevelOverride(el) for el in self.element.findall(w("lvlOverride"))]

    def get_override(self, level: int) -> LevelOverride | None:
        for override in self.overrides:
            if override.level == level:
                return override
        return None

    def starting_number(self, level: int) -> int:
        """The start number for a level: the override if declared, else the style's.

        Levels missing from both start at 0.
        """
        override = self.get_override(level)
        if override is not None and override.start is not None:
            return override.start
        style = self.style
        lvl = style.get_level(level) if style is not None else None
        return lvl.start if lvl is not None else 0

    def set_start_override(self, level: int, start: int) -> None:
        """Add or update the w:startOverride for a level."""
        override = self.get_override(level)
        if override is None:
            element = etree.SubElement(self.element, w("lvlOverride"))
            element.set(w("ilvl"), str(level))
        else:
            element = override.element
        start_override = element.find(w("startOverride"))
        if start_override is None:
            start_override = etree.Element(w("startOverride"))
            element.insert(0, start_override)
        start_override.set(w("val"), str(start))

    def __repr__(self) -> str:
        return f"<NumberingDefinition {self.num_id} -> abstract {self.abstract_id}>"
