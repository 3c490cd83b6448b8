"""
OOXMLPackage class: the part store behind every document.

A .docx file is a zip container of named parts. This module keeps every part
in memory as a Part (partname, content type, payload), exposes the per-part
relationship tables and the content-type manifest, and writes the container
back out. XML parts are parsed lazily; a part that was never parsed is written
back byte-for-byte, so parts the engine does not understand survive a
round-trip untouched.
"""

from __future__ import annotations

import io
import logging
import posixpath
import zipfile
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO

from lxml import etree

from .constants import CONTENT_TYPES_PART, DEFAULT_DOCUMENT_PART, PACKAGE_RELS_PART
from .content_types import ContentTypeManager, ContentTypes
from .errors import MalformedContainerError, ValidationError
from .relationships import (
    PACKAGE_SOURCE,
    RelationshipManager,
    RelationshipTypes,
    relative_target,
    rels_partname_for,
    resolve_target,
    source_partname_for,
)
from .templates import get_template

logger = logging.getLogger(__name__)


def normalize_partname(name: str) -> str:
    """Normalize a partname to its absolute form ("word/x.xml" -> "/word/x.xml")."""
    if not name.startswith("/"):
        name = "/" + name
    return posixpath.normpath(name)


class Part:
    """A named, typed unit of the package.

    The payload is kept as bytes until the element is first requested; from
    then on the parsed element is authoritative and is re-serialized on save.

    Attributes:
        partname: Absolute partname (e.g., "/word/document.xml")
        content_type: Content type string from the manifest
    """

    def __init__(
        self,
        partname: str,
        content_type: str | None,
        blob: bytes | None = None,
        element: etree._Element | None = None,
    ) -> None:
        self.partname = partname
        self.content_type = content_type
        self._blob = blob
        self._element = element

    @property
    def is_xml(self) -> bool:
        """True if the part holds XML (including .rels parts)."""
        if self._element is not None:
            return True
        if self.content_type and self.content_type.endswith("xml"):
            return True
        return self.partname.endswith((".xml", ".rels"))

    @property
    def is_loaded(self) -> bool:
        """True once the XML payload has been parsed."""
        return self._element is not None

    @property
    def element(self) -> etree._Element:
        """Get the parsed root element, parsing the payload on first access.

        Raises:
            ValidationError: If the part is binary or not well-formed XML
        """
        if self._element is None:
            if not self.is_xml:
                raise ValidationError(f"Part {self.partname} is not an XML part")
            parser = etree.XMLParser(remove_blank_text=False, resolve_entities=False)
            try:
                self._element = etree.fromstring(self._blob or b"", parser)
            except etree.XMLSyntaxError as e:
                raise ValidationError(f"Part {self.partname} is not well-formed: {e}") from e
            logger.debug(f"Parsed part {self.partname}")
        return self._element

    @element.setter
    def element(self, value: etree._Element) -> None:
        self._element = value

    @property
    def blob(self) -> bytes:
        """Get the serialized payload."""
        if self._element is not None:
            return etree.tostring(
                self._element.getroottree(),
                encoding="UTF-8",
                xml_declaration=True,
                standalone=True,
            )
        return self._blob or b""

    def __repr__(self) -> str:
        return f"<Part {self.partname} ({self.content_type})>"


@dataclass(frozen=True)
class PartKind:
    """Describes a kind of part the engine knows how to create.

    Attributes:
        name: Short name (e.g., "header")
        rel_type: Relationship type linking the part to its parent
        content_type: Content type registered in the manifest
        partname_pattern: Partname, with "{n}" for numbered kinds
        template: Name of the built-in template used for new parts
        singleton: True if a parent relates to at most one part of this kind
    """

    name: str
    rel_type: str
    content_type: str
    partname_pattern: str
    template: str
    singleton: bool = True

    def partname(self, n: int = 1) -> str:
        """Get the partname for the n-th part of this kind."""
        return self.partname_pattern.format(n=n)


class PartKinds:
    """Built-in part kinds."""

    HEADER = PartKind(
        "header", RelationshipTypes.HEADER, ContentTypes.HEADER,
        "/word/header{n}.xml", "header", singleton=False,
    )
    FOOTER = PartKind(
        "footer", RelationshipTypes.FOOTER, ContentTypes.FOOTER,
        "/word/footer{n}.xml", "footer", singleton=False,
    )
    NUMBERING = PartKind(
        "numbering", RelationshipTypes.NUMBERING, ContentTypes.NUMBERING,
        "/word/numbering.xml", "numbering",
    )
    STYLES = PartKind(
        "styles", RelationshipTypes.STYLES, ContentTypes.STYLES,
        "/word/styles.xml", "styles",
    )
    SETTINGS = PartKind(
        "settings", RelationshipTypes.SETTINGS, ContentTypes.SETTINGS,
        "/word/settings.xml", "settings",
    )
    COMMENTS = PartKind(
        "comments", RelationshipTypes.COMMENTS, ContentTypes.COMMENTS,
        "/word/comments.xml", "comments",
    )
    PEOPLE = PartKind(
        "people", RelationshipTypes.PEOPLE, ContentTypes.PEOPLE,
        "/word/people.xml", "people",
    )


class OOXMLPackage:
    """Manages the OOXML ZIP package structure in memory.

    Example:
        >>> with OOXMLPackage.open("document.docx") as pkg:
        ...     doc_xml = pkg.get_part("word/document.xml")
        ...     numbering = pkg.get_or_create_part(PartKinds.NUMBERING, pkg.main_part)
        ...     pkg.save("modified.docx")
    """

    def __init__(
        self,
        parts: list[Part],
        main_partname: str = DEFAULT_DOCUMENT_PART,
        source_path: Path | None = None,
    ) -> None:
        """Initialize package from already-loaded parts.

        Use the class methods `open()`, `from_bytes()` or `new()` instead of
        calling this constructor directly.

        Args:
            parts: Parts in container order, including the manifest
            main_partname: Partname of the main document part
            source_path: Original source file path, if opened from disk
        """
        self._parts: dict[str, Part] = {part.partname: part for part in parts}
        self._main_partname = main_partname
        self._source_path = source_path
        self._rel_managers: dict[str, RelationshipManager] = {}
        self._content_types = ContentTypeManager(self)
        self._closed = False

    @classmethod
    def open(cls, source: str | Path | BinaryIO | bytes) -> OOXMLPackage:
        """Open an OOXML package from a file path, file-like object or bytes.

        Args:
            source: Path to .docx file, binary stream or raw bytes

        Returns:
            OOXMLPackage with every part loaded

        Raises:
            ValidationError: If the path does not exist
            MalformedContainerError: If the source is not a zip file or the
                manifest or main document part is missing or not well-formed
        """
        source_path: Path | None = None

        if isinstance(source, bytes):
            zip_source: Path | BinaryIO = io.BytesIO(source)
        elif isinstance(source, str | Path):
            source_path = Path(source)
            if not source_path.exists():
                raise ValidationError(f"Document not found: {source_path}")
            zip_source = source_path
        else:
            zip_source = source

        try:
            with zipfile.ZipFile(zip_source, "r") as zip_ref:
                entries = [
                    (info.filename, zip_ref.read(info))
                    for info in zip_ref.infolist()
                    if not info.is_dir()
                ]
        except zipfile.BadZipFile as e:
            raise MalformedContainerError(
                f"Source must be a valid .docx (ZIP) file: {e}"
            ) from e

        return cls._from_entries(entries, source_path)

    @classmethod
    def from_bytes(cls, data: bytes) -> OOXMLPackage:
        """Open an OOXML package from bytes."""
        return cls.open(io.BytesIO(data))

    @classmethod
    def new(cls) -> OOXMLPackage:
        """Create a blank word-processing package from the built-in templates."""
        entries = [
            ("[Content_Types].xml", get_template("content_types")),
            ("_rels/.rels", get_template("package_rels")),
            ("word/document.xml", get_template("document")),
            ("word/_rels/document.xml.rels", get_template("document_rels")),
            ("word/styles.xml", get_template("styles")),
            ("word/settings.xml", get_template("settings")),
        ]
        return cls._from_entries(entries)

    @classmethod
    def _from_entries(
        cls, entries: list[tuple[str, bytes]], source_path: Path | None = None
    ) -> OOXMLPackage:
        parts = [Part(normalize_partname(name), None, blob) for name, blob in entries]
        names = {part.partname for part in parts}
        if CONTENT_TYPES_PART not in names:
            raise MalformedContainerError(
                "Package has no content-type manifest", missing=CONTENT_TYPES_PART
            )

        package = cls(parts, source_path=source_path)
        package._require_xml(CONTENT_TYPES_PART)

        for part in package:
            if part.partname != CONTENT_TYPES_PART:
                part.content_type = package.content_types.get_content_type(part.partname)

        main_partname = DEFAULT_DOCUMENT_PART
        if PACKAGE_RELS_PART in names:
            package._require_xml(PACKAGE_RELS_PART)
            package_rels = package.relationships(PACKAGE_SOURCE)
            main_rel = package_rels.get_relationship(RelationshipTypes.OFFICE_DOCUMENT)
            if main_rel is not None:
                main_partname = package_rels.resolve(main_rel) or main_partname
        if main_partname not in names:
            raise MalformedContainerError(
                f"Package has no main document part ({main_partname})", missing=main_partname
            )
        package._main_partname = main_partname
        package._require_xml(main_partname)
        main_rels_partname = rels_partname_for(main_partname)
        if main_rels_partname in names:
            package._require_xml(main_rels_partname)

        logger.debug(f"Opened package with {len(parts)} parts, main part {main_partname}")
        return package

    def _require_xml(self, partname: str) -> None:
        # Parts every document needs are parsed at open time
        part = self.part(partname)
        assert part is not None
        try:
            part.element
        except ValidationError as e:
            raise MalformedContainerError(str(e), missing=partname) from e

    # ------------------------------------------------------------------
    # Part access
    # ------------------------------------------------------------------

    @property
    def source_path(self) -> Path | None:
        """Get the original source file path, if available."""
        return self._source_path

    @property
    def main_partname(self) -> str:
        """Partname of the main document part."""
        return self._main_partname

    @property
    def main_part(self) -> Part:
        """The main document part."""
        part = self.part(self._main_partname)
        assert part is not None
        return part

    @property
    def content_types(self) -> ContentTypeManager:
        """The content-type manifest manager."""
        return self._content_types

    def __iter__(self) -> Iterator[Part]:
        return iter(list(self._parts.values()))

    def __len__(self) -> int:
        return len(self._parts)

    def __contains__(self, partname: object) -> bool:
        return isinstance(partname, str) and normalize_partname(partname) in self._parts

    @property
    def partnames(self) -> list[str]:
        """Every partname, in container order."""
        return list(self._parts)

    def part(self, part_name: str) -> Part | None:
        """Get a Part by name, or None if it does not exist."""
        return self._parts.get(normalize_partname(part_name))

    def get_part(self, part_name: str) -> etree._Element | None:
        """Get a package part as a parsed XML element.

        Args:
            part_name: Partname with or without leading slash

        Returns:
            Parsed root element, or None if the part doesn't exist
        """
        part = self.part(part_name)
        return part.element if part is not None else None

    def set_part(
        self, part_name: str, element: etree._Element, content_type: str | None = None
    ) -> Part:
        """Replace (or add) an XML part.

        Args:
            part_name: Partname with or without leading slash
            element: New root element
            content_type: Content type to register when the part is new

        Returns:
            The stored Part
        """
        part = self.part(part_name)
        if part is None:
            return self.add_part(part_name, content_type or ContentTypes.XML, element=element)
        part.element = element
        return part

    def part_exists(self, part_name: str) -> bool:
        """Check if a package part exists."""
        return self.part(part_name) is not None

    def add_part(
        self,
        part_name: str,
        content_type: str,
        blob: bytes | None = None,
        element: etree._Element | None = None,
    ) -> Part:
        """Add a new part and register its content type.

        An Override entry is only written when the manifest's Default for the
        extension does not already produce the same content type.

        Raises:
            ValidationError: If a part with that name already exists
        """
        partname = normalize_partname(part_name)
        if partname in self._parts:
            raise ValidationError(f"Part {partname} already exists")

        part = Part(partname, content_type, blob=blob, element=element)
        self._parts[partname] = part
        if self._content_types.get_content_type(partname) != content_type:
            self._content_types.add_override(partname, content_type)
        logger.debug(f"Added part {partname} ({content_type})")
        return part

    # ------------------------------------------------------------------
    # Relationship graph
    # ------------------------------------------------------------------

    def relationships(self, part_name: str | Part) -> RelationshipManager:
        """Get the relationship manager for a source part ("/" for the package)."""
        partname = self._partname_of(part_name)
        if partname not in self._rel_managers:
            self._rel_managers[partname] = RelationshipManager(self, partname)
        return self._rel_managers[partname]

    def related_parts(self, source: str | Part, rel_type: str) -> list[Part]:
        """Get the parts targeted from source by relationships of rel_type."""
        manager = self.relationships(source)
        related = []
        for rel in manager.of_type(rel_type):
            target = manager.resolve(rel.rel_id)
            part = self._parts.get(target) if target else None
            if part is not None:
                related.append(part)
        return related

    def get_or_create_part(self, kind: PartKind, parent: str | Part) -> Part:
        """Get the part of a kind related to parent, creating it if needed.

        A new part is built from the kind's template, registered in the
        manifest and linked from parent with a fresh relationship id.

        Args:
            kind: The kind of part to look up
            parent: Source part (or its partname) owning the relationship

        Returns:
            The existing or newly created Part
        """
        existing = self.related_parts(parent, kind.rel_type)
        if existing:
            return existing[0]
        part, _ = self.create_part(kind, parent)
        return part

    def create_part(self, kind: PartKind, parent: str | Part) -> tuple[Part, str]:
        """Create a new part of a kind and relate it to parent.

        Numbered kinds take the first free number; a singleton whose partname
        exists but is not related to parent is linked rather than recreated.

        Returns:
            Tuple of (part, relationship id on parent)
        """
        parent_name = self._partname_of(parent)
        if kind.singleton:
            partname = kind.partname()
        else:
            n = 1
            while kind.partname(n) in self._parts:
                n += 1
            partname = kind.partname(n)

        part = self._parts.get(partname)
        if part is None:
            part = self.add_part(partname, kind.content_type, blob=get_template(kind.template))

        rel_id = self.relationships(parent_name).add_unique_relationship(
            kind.rel_type, relative_target(parent_name, partname)
        )
        logger.debug(f"Created {kind.name} part {partname} as {rel_id} of {parent_name}")
        return part, rel_id

    def delete_part(self, part: str | Part) -> None:
        """Delete a part together with every relationship pointing at it.

        Also drops the part's own .rels part and its manifest override.
        Deleting a part that is already gone is a no-op.
        """
        partname = self._partname_of(part)
        removed = self._parts.pop(partname, None)
        self._content_types.remove_override(partname)

        rels_partname = rels_partname_for(partname)
        self._parts.pop(rels_partname, None)
        self._rel_managers.pop(partname, None)

        dangling = 0
        for name in list(self._parts):
            source = source_partname_for(name)
            if source is None:
                continue
            dangling += self.relationships(source).remove_targeting(partname)

        if removed is not None or dangling:
            logger.debug(f"Deleted part {partname} and {dangling} relationship(s) to it")

    def resolve_relationship(self, source: str | Part, rel_id: str) -> Part | None:
        """Resolve a relationship id on source to the Part it targets."""
        target = self.relationships(source).resolve(rel_id)
        return self._parts.get(target) if target else None

    def _partname_of(self, part: str | Part) -> str:
        if isinstance(part, Part):
            return part.partname
        if part == PACKAGE_SOURCE:
            return part
        return normalize_partname(part)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def _write(self, target: str | Path | BinaryIO) -> None:
        with zipfile.ZipFile(target, "w", zipfile.ZIP_DEFLATED) as zip_ref:
            manifest = self._parts[CONTENT_TYPES_PART]
            zip_ref.writestr(CONTENT_TYPES_PART.lstrip("/"), manifest.blob)
            for part in self._parts.values():
                if part is manifest:
                    continue
                zip_ref.writestr(part.partname.lstrip("/"), part.blob)

    def save(self, output_path: str | Path) -> None:
        """Save the package to a .docx file."""
        self._write(Path(output_path))
        logger.debug(f"Saved package to {output_path}")

    def save_to_bytes(self) -> bytes:
        """Save the package to bytes.

        Returns:
            The complete .docx file as bytes
        """
        buffer = io.BytesIO()
        self._write(buffer)
        return buffer.getvalue()

    def close(self) -> None:
        """Release the in-memory parts."""
        if not self._closed:
            self._parts.clear()
            self._rel_managers.clear()
            self._closed = True

    def __enter__(self) -> OOXMLPackage:
        """Context manager support."""
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager cleanup."""
        self.close()
