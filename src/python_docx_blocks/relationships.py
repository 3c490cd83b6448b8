"""
RelationshipManager class for managing .rels parts in OOXML packages.

A relationship links one part to another (or to an external URI) using an
id that is unique within the source part, a relationship type URI and a
target path relative to the source part's directory. XML inside a part never
names another part directly; it stores the relationship id (e.g. the
``r:id`` of a ``w:headerReference``) and resolves it through this table.
"""

from __future__ import annotations

import logging
import posixpath
from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from lxml import etree

from .constants import PACKAGE_RELATIONSHIPS_NAMESPACE

if TYPE_CHECKING:
    from .package import OOXMLPackage

logger = logging.getLogger(__name__)

# OOXML relationship namespace
RELS_NAMESPACE = PACKAGE_RELATIONSHIPS_NAMESPACE

RELS_CONTENT_TYPE = "application/vnd.openxmlformats-package.relationships+xml"

# Source name used for the package-level relationships (_rels/.rels)
PACKAGE_SOURCE = "/"


def rels_partname_for(source_partname: str) -> str:
    """Compute the .rels partname for a given source part.

    For example:
    - "/word/document.xml" -> "/word/_rels/document.xml.rels"
    - "/" -> "/_rels/.rels"

    Args:
        source_partname: Absolute partname of the source part

    Returns:
        Absolute partname of the relationships part
    """
    if source_partname == PACKAGE_SOURCE:
        return "/_rels/.rels"
    directory, filename = posixpath.split(source_partname)
    return posixpath.join(directory, "_rels", f"{filename}.rels")


def source_partname_for(rels_partname: str) -> str | None:
    """Invert rels_partname_for().

    Returns:
        The source partname, or None if rels_partname is not a .rels part
    """
    directory, filename = posixpath.split(rels_partname)
    if posixpath.basename(directory) != "_rels" or not filename.endswith(".rels"):
        return None
    if rels_partname == "/_rels/.rels":
        return PACKAGE_SOURCE
    parent = posixpath.dirname(directory)
    return posixpath.join(parent, filename[: -len(".rels")])


def resolve_target(source_partname: str, target: str) -> str:
    """Resolve a relationship target to an absolute partname.

    Args:
        source_partname: Absolute partname of the part owning the relationship
        target: Target as stored in the Relationship element

    Returns:
        Normalized absolute partname (e.g., "/word/header1.xml")
    """
    if target.startswith("/"):
        return posixpath.normpath(target)
    base = "/" if source_partname == PACKAGE_SOURCE else posixpath.dirname(source_partname)
    return posixpath.normpath(posixpath.join(base, target))


def relative_target(source_partname: str, partname: str) -> str:
    """Express an absolute partname relative to a source part's directory."""
    base = "/" if source_partname == PACKAGE_SOURCE else posixpath.dirname(source_partname)
    return posixpath.relpath(partname, base)


@dataclass(frozen=True)
class Relationship:
    """A single entry of a .rels part.

    Attributes:
        rel_id: Identifier unique within the source part (e.g., "rId3")
        rel_type: Relationship type URI
        target: Target as written in the .rels part
        external: True for TargetMode="External" (URIs, not parts)
    """

    rel_id: str
    rel_type: str
    target: str
    external: bool = False


class RelationshipManager:
    """Manages the relationships of one source part.

    The manager is a live view over the source part's .rels part inside the
    package: every change is made directly on the parsed XML and is written
    out when the package is saved. The .rels part is created on the first
    added relationship.

    Example:
        >>> rel_mgr = package.relationships("/word/document.xml")
        >>> rel_id = rel_mgr.add_relationship(
        ...     "http://schemas.openxmlformats.org/officeDocument/2006/relationships/numbering",
        ...     "numbering.xml"
        ... )
        >>> rel_mgr.resolve(rel_id)
        '/word/numbering.xml'

    Attributes:
        package: The OOXMLPackage containing the relationship part
        part_name: The source part the relationships belong to
    """

    def __init__(self, package: OOXMLPackage, part_name: str) -> None:
        """Initialize a RelationshipManager for a specific part.

        Args:
            package: The OOXMLPackage containing the relationship part
            part_name: Absolute partname of the source part, or "/" for the
                package-level relationships
        """
        self._package = package
        self._part_name = part_name
        self._rels_path = rels_partname_for(part_name)

    @property
    def part_name(self) -> str:
        """The source partname."""
        return self._part_name

    @property
    def rels_path(self) -> str:
        """The partname of the .rels part backing this manager."""
        return self._rels_path

    def _root(self, create: bool = False) -> etree._Element | None:
        """Get the Relationships root element, optionally creating the part."""
        part = self._package.part(self._rels_path)
        if part is None:
            if not create:
                return None
            root = etree.Element(
                f"{{{RELS_NAMESPACE}}}Relationships",
                nsmap={None: RELS_NAMESPACE},
            )
            part = self._package.add_part(self._rels_path, RELS_CONTENT_TYPE, element=root)
            logger.debug(f"Created relationship part: {self._rels_path}")
        return part.element

    def __iter__(self) -> Iterator[Relationship]:
        root = self._root()
        if root is None:
            return
        for rel in root:
            if rel.tag != f"{{{RELS_NAMESPACE}}}Relationship":
                continue
            yield Relationship(
                rel_id=rel.get("Id", ""),
                rel_type=rel.get("Type", ""),
                target=rel.get("Target", ""),
                external=rel.get("TargetMode") == "External",
            )

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def get_by_id(self, rel_id: str) -> Relationship | None:
        """Get the relationship with the given id, or None."""
        for rel in self:
            if rel.rel_id == rel_id:
                return rel
        return None

    def get_relationship(self, rel_type: str) -> str | None:
        """Get the relationship ID for a given type.

        Args:
            rel_type: The relationship type URI to search for

        Returns:
            The relationship ID (e.g., "rId3") if found, None otherwise
        """
        for rel in self:
            if rel.rel_type == rel_type:
                return rel.rel_id
        return None

    def get_relationship_target(self, rel_type: str) -> str | None:
        """Get the target path for a relationship type.

        Args:
            rel_type: The relationship type URI to search for

        Returns:
            The target path if found, None otherwise
        """
        for rel in self:
            if rel.rel_type == rel_type:
                return rel.target
        return None

    def has_relationship(self, rel_type: str) -> bool:
        """Check if a relationship of the given type exists."""
        return self.get_relationship(rel_type) is not None

    def of_type(self, rel_type: str) -> list[Relationship]:
        """Get every relationship of the given type, in document order."""
        return [rel for rel in self if rel.rel_type == rel_type]

    def resolve(self, rel_id: str) -> str | None:
        """Resolve a relationship id to the absolute partname it targets.

        Returns:
            The partname, or None if the id is unknown or external
        """
        rel = self.get_by_id(rel_id)
        if rel is None or rel.external:
            return None
        return resolve_target(self._part_name, rel.target)

    def add_relationship(self, rel_type: str, target: str) -> str:
        """Add a new relationship or return existing one.

        If a relationship of the given type already exists, returns its ID.
        Otherwise, creates a new relationship with an auto-generated ID.

        Args:
            rel_type: The relationship type URI
            target: The target path (relative to the part's directory)

        Returns:
            The relationship ID (e.g., "rId3")
        """
        existing_id = self.get_relationship(rel_type)
        if existing_id is not None:
            logger.debug(f"Relationship {rel_type} already exists: {existing_id}")
            return existing_id
        return self.add_unique_relationship(rel_type, target)

    def add_unique_relationship(self, rel_type: str, target: str, external: bool = False) -> str:
        """Add a new relationship, always creating a new ID.

        Use this for relationship types that can have multiple instances
        from one source part, like headers, footers and hyperlinks.

        Args:
            rel_type: The relationship type URI
            target: The target path (relative to the part's directory) or URI
            external: Mark the target as an external resource

        Returns:
            The new relationship ID (e.g., "rId3")
        """
        root = self._root(create=True)
        assert root is not None

        rel_id = f"rId{self._next_available_id(root)}"
        rel_elem = etree.SubElement(root, f"{{{RELS_NAMESPACE}}}Relationship")
        rel_elem.set("Id", rel_id)
        rel_elem.set("Type", rel_type)
        rel_elem.set("Target", target)
        if external:
            rel_elem.set("TargetMode", "External")

        logger.debug(f"Added relationship {rel_id} on {self._part_name}: {rel_type} -> {target}")
        return rel_id

    def remove_by_id(self, rel_id: str) -> bool:
        """Remove a relationship by id.

        Returns:
            True if a relationship was removed, False if not found
        """
        root = self._root()
        if root is None:
            return False
        for rel in list(root):
            if rel.get("Id") == rel_id:
                root.remove(rel)
                logger.debug(f"Removed relationship {rel_id} from {self._part_name}")
                return True
        return False

    def remove_relationship(self, rel_type: str) -> bool:
        """Remove the first relationship of a type.

        Returns:
            True if a relationship was removed, False if not found
        """
        rel_id = self.get_relationship(rel_type)
        if rel_id is None:
            return False
        return self.remove_by_id(rel_id)

    def remove_relationships(self, rel_types: list[str]) -> int:
        """Remove every relationship whose type is in rel_types.

        Returns:
            Number of relationships removed
        """
        rel_types_set = set(rel_types)
        removed = 0
        for rel in list(self):
            if rel.rel_type in rel_types_set and self.remove_by_id(rel.rel_id):
                removed += 1
        return removed

    def remove_targeting(self, partname: str) -> int:
        """Remove every internal relationship whose target resolves to partname.

        Returns:
            Number of relationships removed
        """
        removed = 0
        for rel in list(self):
            if rel.external:
                continue
            if resolve_target(self._part_name, rel.target) == partname:
                self.remove_by_id(rel.rel_id)
                removed += 1
        return removed

    def _next_available_id(self, root: etree._Element) -> int:
        """Find the next available relationship ID number.

        Returns:
            The smallest unused N such that "rIdN" is free
        """
        existing_ids: set[int] = set()
        for rel in root:
            rel_id = rel.get("Id", "")
            if rel_id.startswith("rId") and rel_id[3:].isdigit():
                existing_ids.add(int(rel_id[3:]))

        next_id = 1
        while next_id in existing_ids:
            next_id += 1
        return next_id


class RelationshipTypes:
    """Common OOXML relationship type URIs."""

    OFFICE_DOCUMENT = (
        "http://schemas.openxmlformats.org/officeDocument/2006/relationships/officeDocument"
    )
    COMMENTS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/comments"
    STYLES = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/styles"
    SETTINGS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/settings"
    NUMBERING = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/numbering"
    HEADER = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/header"
    FOOTER = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/footer"
    HYPERLINK = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/hyperlink"
    PEOPLE = "http://schemas.microsoft.com/office/2011/relationships/people"
