"""
HeaderFooterOperations class for handling headers and footers.

Headers and footers are linked from w:sectPr elements through
w:headerReference / w:footerReference (w:type + r:id). Adding one to a
section always replaces the part of that type: the old part is deleted and a
fresh one created from the template, so deleting first must be idempotent.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from lxml import etree

from ..constants import local_name, r, w
from ..identity import assign_ids
from ..models.header_footer import Footer, Header, HeaderFooter, HeaderFooterType
from ..models.section import Section, insert_before_any
from ..package import PartKind, PartKinds

if TYPE_CHECKING:
    from ..document import Document

logger = logging.getLogger(__name__)

# w:sectPr children that follow w:titlePg
_AFTER_TITLE_PG = frozenset(
    {"textDirection", "bidi", "rtlGutter", "docGrid", "printerSettings", "sectPrChange"}
)

# w:settings children that follow w:evenAndOddHeaders
_AFTER_EVEN_AND_ODD = frozenset(
    {
        "bookFoldRevPrinting", "bookFoldPrinting", "bookFoldPrintingSheets",
        "drawingGridHorizontalSpacing", "drawingGridVerticalSpacing",
        "displayHorizontalDrawingGridEvery", "displayVerticalDrawingGridEvery",
        "doNotUseMarginsForDrawingGridOrigin", "drawingGridHorizontalOrigin",
        "drawingGridVerticalOrigin", "doNotShadeFormData", "noPunctuationKerning",
        "characterSpacingControl", "printTwoOnOne", "strictFirstAndLastChars",
        "noLineBreaksAfter", "noLineBreaksBefore", "savePreviewPicture",
        "doNotValidateAgainstSchema", "saveInvalidXml", "ignoreMixedContent",
        "alwaysShowPlaceholderText", "doNotDemarcateInvalidXml", "saveXmlDataOnly",
        "useXSLTWhenSaving", "saveThroughXslt", "showXMLTags",
        "alwaysMergeEmptyNamespace", "updateFields", "hdrShapeDefaults",
        "footnotePr", "endnotePr", "compat", "docVars", "rsids", "mathPr",
        "attachedSchema", "themeFontLang", "clrSchemeMapping",
        "doNotIncludeSubdocsInStats", "doNotAutoCompressPictures", "forceUpgrade",
        "captions", "readModeInkLockDown", "smartTagType", "schemaLibrary",
        "shapeDefaults", "doNotEmbedSmartTags", "decimalSymbol", "listSeparator",
    }
)


class HeaderFooterOperations:
    """Handles header and footer operations.

    Example:
        >>> # Usually accessed through Document
        >>> doc = Document("contract.docx")
        >>> header = doc.add_header(HeaderFooterType.FIRST)
        >>> header.add_paragraph("Confidential", style="Header")
        >>> for footer in doc.footers:
        ...     print(f"{footer.type}: {footer.text()}")
    """

    def __init__(self, document: Document) -> None:
        """Initialize HeaderFooterOperations with a Document reference.

        Args:
            document: The Document instance to operate on
        """
        self._document = document
        self._containers: dict[tuple[str, str, str], HeaderFooter] = {}

    @property
    def headers(self) -> list[Header]:
        """All headers referenced from any section, in document order."""
        return [hf for hf in self._collect("header") if isinstance(hf, Header)]

    @property
    def footers(self) -> list[Footer]:
        """All footers referenced from any section, in document order."""
        return [hf for hf in self._collect("footer") if isinstance(hf, Footer)]

    def get_header(
        self,
        header_type: HeaderFooterType = HeaderFooterType.DEFAULT,
        section: Section | None = None,
    ) -> Header | None:
        """The header of a type in a section (the final one by default), if any."""
        found = self._find_in_section("header", header_type, section)
        return found if isinstance(found, Header) else None

    def get_footer(
        self,
        footer_type: HeaderFooterType = HeaderFooterType.DEFAULT,
        section: Section | None = None,
    ) -> Footer | None:
        """The footer of a type in a section (the final one by default), if any."""
        found = self._find_in_section("footer", footer_type, section)
        return found if isinstance(found, Footer) else None

    def add_header(
        self,
        header_type: HeaderFooterType = HeaderFooterType.DEFAULT,
        section: Section | None = None,
    ) -> Header:
        """Create a header of a type for a section, replacing any existing one.

        Args:
            header_type: Which pages of the section the header applies to
            section: Target section; the final section if omitted
        """
        header = self._add("header", PartKinds.HEADER, header_type, section)
        assert isinstance(header, Header)
        return header

    def add_footer(
        self,
        footer_type: HeaderFooterType = HeaderFooterType.DEFAULT,
        section: Section | None = None,
    ) -> Footer:
        """Create a footer of a type for a section, replacing any existing one.

        Args:
            footer_type: Which pages of the section the footer applies to
            section: Target section; the final section if omitted
        """
        footer = self._add("footer", PartKinds.FOOTER, footer_type, section)
        assert isinstance(footer, Footer)
        return footer

    def remove_header(
        self,
        header_type: HeaderFooterType = HeaderFooterType.DEFAULT,
        section: Section | None = None,
    ) -> bool:
        """Remove a section's header of a type (the final section by default).

        Returns:
            True if a header was removed
        """
        return self._remove("header", header_type, section)

    def remove_footer(
        self,
        footer_type: HeaderFooterType = HeaderFooterType.DEFAULT,
        section: Section | None = None,
    ) -> bool:
        """Remove a section's footer of a type (the final section by default).

        Returns:
            True if a footer was removed
        """
        return self._remove("footer", footer_type, section)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _section_properties(self) -> list[etree._Element]:
        return list(self._document.body.element.iter(w("sectPr")))

    def _target(self, section: Section | None, create: bool = False) -> etree._Element | None:
        if section is not None:
            return section.properties
        body = self._document.body
        sect_pr = body.section_properties
        if sect_pr is None and create:
            sect_pr = etree.SubElement(body.element, w("sectPr"))
        return sect_pr

    def _container_for(self, which: str, ref: etree._Element) -> HeaderFooter | None:
        package = self._document.package
        rel_id = ref.get(r("id"), "")
        hf_type = HeaderFooterType(ref.get(w("type"), "default"))
        part = package.resolve_relationship(package.main_part, rel_id)
        if part is None:
            logger.warning(f"{which} reference {rel_id!r} has no target part, skipping")
            return None

        key = (which, part.partname, hf_type.value)
        cached = self._containers.get(key)
        if cached is not None and cached.element is part.element and cached.rel_id == rel_id:
            return cached

        cls = Header if which == "header" else Footer
        container = cls(part.element, part, self._document, hf_type, rel_id)
        self._containers[key] = container
        return container

    def _collect(self, which: str) -> list[HeaderFooter]:
        found = []
        seen: set[tuple[str, str]] = set()
        for sect_pr in self._section_properties():
            for ref in sect_pr.findall(w(f"{which}Reference")):
                key = (ref.get(r("id"), ""), ref.get(w("type"), "default"))
                if key in seen:
                    continue
                seen.add(key)
                container = self._container_for(which, ref)
                if container is not None:
                    found.append(container)
        return found

    def _reference(
        self, which: str, hf_type: HeaderFooterType, section: Section | None
    ) -> etree._Element | None:
        sect_pr = self._target(section)
        if sect_pr is None:
            return None
        for ref in sect_pr.findall(w(f"{which}Reference")):
            if ref.get(w("type"), "default") == hf_type.value:
                return ref
        return None

    def _find_in_section(
        self, which: str, hf_type: HeaderFooterType, section: Section | None
    ) -> HeaderFooter | None:
        ref = self._reference(which, hf_type, section)
        return self._container_for(which, ref) if ref is not None else None

    def _is_referenced(self, rel_id: str) -> bool:
        for sect_pr in self._section_properties():
            for ref in sect_pr:
                if local_name(ref.tag) in ("headerReference", "footerReference") and ref.get(
                    r("id")
                ) == rel_id:
                    return True
        return False

    def _drop_reference(self, which: str, ref: etree._Element) -> None:
        package = self._document.package
        rel_id = ref.get(r("id"), "")
        ref.getparent().remove(ref)
        if self._is_referenced(rel_id):
            return
        part = package.resolve_relationship(package.main_part, rel_id)
        if part is not None:
            package.delete_part(part)
            self._containers = {
                key: value for key, value in self._containers.items() if key[1] != part.partname
            }
        else:
            package.relationships(package.main_part).remove_by_id(rel_id)
        logger.debug(f"Removed {which} reference {rel_id}")

    def _add(
        self, which: str, kind: PartKind, hf_type: HeaderFooterType, section: Section | None
    ) -> HeaderFooter:
        document = self._document
        package = document.package

        existing = self._reference(which, hf_type, section)
        if existing is not None:
            self._drop_reference(which, existing)

        part, rel_id = package.create_part(kind, package.main_part)
        assign_ids(part.element, document.id_source)

        sect_pr = self._target(section, create=True)
        assert sect_pr is not None
        ref = etree.Element(w(f"{which}Reference"))
        ref.set(w("type"), hf_type.value)
        ref.set(r("id"), rel_id)
        references = [
            child
            for child in sect_pr
            if local_name(child.tag) in ("headerReference", "footerReference")
        ]
        if references:
            references[-1].addnext(ref)
        else:
            sect_pr.insert(0, ref)

        if hf_type is HeaderFooterType.FIRST:
            self._set_title_page(sect_pr)
        elif hf_type is HeaderFooterType.EVEN:
            self._set_even_and_odd_headers()

        logger.debug(f"Added {hf_type.value} {which} {part.partname} as {rel_id}")
        container = self._container_for(which, ref)
        assert container is not None
        return container

    def _remove(self, which: str, hf_type: HeaderFooterType, section: Section | None) -> bool:
        ref = self._reference(which, hf_type, section)
        if ref is None:
            return False
        self._drop_reference(which, ref)

        if hf_type is HeaderFooterType.FIRST:
            sect_pr = self._target(section)
            if sect_pr is not None and not any(
                child.get(w("type")) == "first"
                for child in sect_pr
                if local_name(child.tag) in ("headerReference", "footerReference")
            ):
                title_pg = sect_pr.find(w("titlePg"))
                if title_pg is not None:
                    sect_pr.remove(title_pg)
        return True

    def _set_title_page(self, sect_pr: etree._Element) -> None:
        if sect_pr.find(w("titlePg")) is None:
            insert_before_any(sect_pr, etree.Element(w("titlePg")), _AFTER_TITLE_PG)

    def _set_even_and_odd_headers(self) -> None:
        package = self._document.package
        settings = package.get_or_create_part(PartKinds.SETTINGS, package.main_part).element
        if settings.find(w("evenAndOddHeaders")) is None:
            insert_before_any(settings, etree.Element(w("evenAndOddHeaders")), _AFTER_EVEN_AND_ODD)
