"""
ContentTypeManager class for managing [Content_Types].xml in OOXML packages.

Content types in OOXML use two mechanisms:
- Default: Maps file extensions to content types (e.g., .xml -> application/xml)
- Override: Maps specific part names to content types (e.g., /word/header1.xml)
"""

from __future__ import annotations

import logging
import posixpath
from typing import TYPE_CHECKING

from lxml import etree

from .constants import CONTENT_TYPES_NAMESPACE, CONTENT_TYPES_PART

if TYPE_CHECKING:
    from .package import OOXMLPackage

logger = logging.getLogger(__name__)

_OVERRIDE = f"{{{CONTENT_TYPES_NAMESPACE}}}Override"
_DEFAULT = f"{{{CONTENT_TYPES_NAMESPACE}}}Default"


class ContentTypeManager:
    """Manages [Content_Types].xml in OOXML packages.

    The manager is a live view over the manifest part held by the package;
    changes are serialized when the package is saved.

    Example:
        >>> ct_mgr = package.content_types
        >>> ct_mgr.add_override(
        ...     "/word/numbering.xml",
        ...     "application/vnd.openxmlformats-officedocument.wordprocessingml.numbering+xml"
        ... )
        True

    Attributes:
        package: The OOXMLPackage containing this content types file
    """

    def __init__(self, package: OOXMLPackage) -> None:
        """Initialize a ContentTypeManager for a package.

        Args:
            package: The OOXMLPackage containing the [Content_Types].xml part
        """
        self._package = package

    @property
    def _root(self) -> etree._Element:
        part = self._package.part(CONTENT_TYPES_PART)
        assert part is not None, "package has no content-type manifest"
        return part.element

    def get_content_type(self, part_name: str) -> str | None:
        """Get the content type for a specific part.

        Override entries win over Default entries matched by extension.

        Args:
            part_name: The part name to look up (e.g., "/word/header1.xml")

        Returns:
            The content type string if found, None otherwise
        """
        override = self.get_override(part_name)
        if override is not None:
            return override

        basename = posixpath.basename(part_name)
        # "/_rels/.rels" has extension "rels"
        extension = basename.rpartition(".")[2].lower() if "." in basename else ""
        for default in self._root.iter(_DEFAULT):
            if (default.get("Extension") or "").lower() == extension:
                return default.get("ContentType")
        return None

    def get_override(self, part_name: str) -> str | None:
        """Get the Override content type for a part, ignoring Defaults."""
        for override in self._root.iter(_OVERRIDE):
            if override.get("PartName") == part_name:
                return override.get("ContentType")
        return None

    def has_override(self, part_name: str) -> bool:
        """Check if an override exists for the given part name."""
        return self.get_override(part_name) is not None

    def overrides(self) -> dict[str, str]:
        """Get every Override entry as a partname -> content type mapping."""
        return {
            override.get("PartName", ""): override.get("ContentType", "")
            for override in self._root.iter(_OVERRIDE)
        }

    def add_override(self, part_name: str, content_type: str) -> bool:
        """Add a content type override for a part.

        If an override already exists for the part, this is a no-op.

        Args:
            part_name: The part name (e.g., "/word/header1.xml")
            content_type: The content type (e.g., "application/...header+xml")

        Returns:
            True if a new override was added, False if it already existed
        """
        if self.has_override(part_name):
            logger.debug(f"Override for {part_name} already exists")
            return False

        override = etree.SubElement(self._root, _OVERRIDE)
        override.set("PartName", part_name)
        override.set("ContentType", content_type)
        logger.debug(f"Added content type override: {part_name} -> {content_type}")
        return True

    def add_default(self, extension: str, content_type: str) -> bool:
        """Add a Default mapping for a file extension.

        Returns:
            True if a new Default was added, False if the extension was mapped
        """
        extension = extension.lstrip(".").lower()
        for default in self._root.iter(_DEFAULT):
            if (default.get("Extension") or "").lower() == extension:
                return False

        default = etree.Element(_DEFAULT)
        default.set("Extension", extension)
        default.set("ContentType", content_type)
        # Defaults are conventionally listed before Overrides
        first_override = self._root.find(_OVERRIDE)
        if first_override is not None:
            first_override.addprevious(default)
        else:
            self._root.append(default)
        logger.debug(f"Added content type default: .{extension} -> {content_type}")
        return True

    def remove_override(self, part_name: str) -> bool:
        """Remove the content type override for a part.

        Returns:
            True if an override was removed, False if not found
        """
        for override in list(self._root.iter(_OVERRIDE)):
            if override.get("PartName") == part_name:
                self._root.remove(override)
                logger.debug(f"Removed content type override: {part_name}")
                return True
        return False

    def remove_overrides(self, part_names: list[str]) -> int:
        """Remove the content type overrides for several parts.

        Returns:
            Number of overrides removed
        """
        return sum(1 for name in part_names if self.remove_override(name))


class ContentTypes:
    """Common OOXML content type strings."""

    DOCUMENT = "application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"
    TEMPLATE = "application/vnd.openxmlformats-officedocument.wordprocessingml.template.main+xml"
    DOCUMENT_MACRO = "application/vnd.ms-word.document.macroEnabled.main+xml"
    STYLES = "application/vnd.openxmlformats-officedocument.wordprocessingml.styles+xml"
    SETTINGS = "application/vnd.openxmlformats-officedocument.wordprocessingml.settings+xml"
    NUMBERING = "application/vnd.openxmlformats-officedocument.wordprocessingml.numbering+xml"
    HEADER = "application/vnd.openxmlformats-officedocument.wordprocessingml.header+xml"
    FOOTER = "application/vnd.openxmlformats-officedocument.wordprocessingml.footer+xml"
    COMMENTS = "application/vnd.openxmlformats-officedocument.wordprocessingml.comments+xml"
    PEOPLE = "application/vnd.openxmlformats-officedocument.wordprocessingml.people+xml"
    RELATIONSHIPS = "application/vnd.openxmlformats-package.relationships+xml"
    XML = "application/xml"
