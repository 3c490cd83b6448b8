"""
Tests for ContentTypeManager.
"""

import pytest

from python_docx_blocks.content_types import ContentTypes
from python_docx_blocks.package import OOXMLPackage


@pytest.fixture
def manager():
    return OOXMLPackage.new().content_types


class TestLookup:
    """Tests for content type resolution."""

    def test_override_wins(self, manager):
        assert manager.get_content_type("/word/document.xml") == ContentTypes.DOCUMENT
        assert manager.get_content_type("/word/styles.xml") == ContentTypes.STYLES

    def test_default_by_extension(self, manager):
        assert manager.get_content_type("/customXml/item1.xml") == ContentTypes.XML
        assert manager.get_content_type("/_rels/.rels") == ContentTypes.RELATIONSHIPS

    def test_default_extension_case_insensitive(self, manager):
        assert manager.get_content_type("/customXml/ITEM1.XML") == ContentTypes.XML

    def test_unknown_extension(self, manager):
        assert manager.get_content_type("/word/media/image1.png") is None

    def test_no_extension(self, manager):
        assert manager.get_content_type("/customXml/item1") is None

    def test_get_override_ignores_defaults(self, manager):
        assert manager.get_override("/customXml/item1.xml") is None
        assert manager.has_override("/word/settings.xml")

    def test_overrides_mapping(self, manager):
        overrides = manager.overrides()

        assert overrides["/word/document.xml"] == ContentTypes.DOCUMENT
        assert set(overrides) == {"/word/document.xml", "/word/styles.xml", "/word/settings.xml"}


class TestEdit:
    """Tests for adding and removing entries."""

    def test_add_override(self, manager):
        assert manager.add_override("/word/header1.xml", ContentTypes.HEADER)

        assert manager.get_content_type("/word/header1.xml") == ContentTypes.HEADER

    def test_add_existing_override_is_noop(self, manager):
        assert not manager.add_override("/word/document.xml", ContentTypes.TEMPLATE)

        assert manager.get_content_type("/word/document.xml") == ContentTypes.DOCUMENT

    def test_add_default(self, manager):
        assert manager.add_default(".png", "image/png")
        assert not manager.add_default("PNG", "image/x-png")

        assert manager.get_content_type("/word/media/image1.png") == "image/png"

    def test_remove_override(self, manager):
        assert manager.remove_override("/word/settings.xml")
        assert not manager.remove_override("/word/settings.xml")

        # Falls back to the extension default
        assert manager.get_content_type("/word/settings.xml") == ContentTypes.XML

    def test_remove_overrides(self, manager):
        removed = manager.remove_overrides(["/word/styles.xml", "/word/missing.xml"])

        assert removed == 1

    def test_part_without_override_when_default_matches(self):
        package = OOXMLPackage.new()

        package.add_part("/customXml/item1.xml", ContentTypes.XML, blob=b"<root/>")

        assert not package.content_types.has_override("/customXml/item1.xml")
