"""
Centralized constants for OOXML namespaces, relationship types and content types.

Import from here rather than repeating namespace URLs in each module.
"""

# =============================================================================
# Word Processing Namespaces
# =============================================================================

# Main WordprocessingML namespace (Word 2007+)
WORD_NAMESPACE = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"

# Word 2010 namespace, home of w14:paraId / w14:textId
W14_NAMESPACE = "http://schemas.microsoft.com/office/word/2010/wordml"


# =============================================================================
# Package and Relationship Namespaces
# =============================================================================

# Open Packaging Convention namespaces
PACKAGE_RELATIONSHIPS_NAMESPACE = "http://schemas.openxmlformats.org/package/2006/relationships"
CONTENT_TYPES_NAMESPACE = "http://schemas.openxmlformats.org/package/2006/content-types"

# Office Document relationships (r:id attributes)
OFFICE_RELATIONSHIPS_NAMESPACE = (
    "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
)

# Markup Compatibility namespace
MC_NAMESPACE = "http://schemas.openxmlformats.org/markup-compatibility/2006"

# XML namespace
XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"


# =============================================================================
# Namespace Maps
# =============================================================================

# Basic namespace map with just the main Word namespace
NSMAP = {"w": WORD_NAMESPACE}

# Namespace map for new part roots and XPath queries touching ids or r:id
NSMAP_FULL = {
    "w": WORD_NAMESPACE,
    "w14": W14_NAMESPACE,
    "r": OFFICE_RELATIONSHIPS_NAMESPACE,
    "mc": MC_NAMESPACE,
}


# =============================================================================
# Package Part Names
# =============================================================================

CONTENT_TYPES_PART = "/[Content_Types].xml"
PACKAGE_RELS_PART = "/_rels/.rels"
DEFAULT_DOCUMENT_PART = "/word/document.xml"


# =============================================================================
# Default/Magic Numbers
# =============================================================================

# Width of generated paragraph identifiers, in hex digits
PARA_ID_WIDTH = 8

# Total table width used by Table.create() when no widths are given (dxa)
DEFAULT_TABLE_WIDTH = 9000

# Style applied to paragraphs that carry list numbering
LIST_PARAGRAPH_STYLE = "ListParagraph"


# =============================================================================
# Helper Functions
# =============================================================================


def w(tag: str) -> str:
    """Create a fully qualified Word namespace tag.

    Args:
        tag: Tag name without namespace prefix (e.g., "p", "r", "t")

    Returns:
        Fully qualified tag (e.g., "{http://...wordprocessingml/2006/main}p")

    Example:
        >>> w("p")
        '{http://schemas.openxmlformats.org/wordprocessingml/2006/main}p'
    """
    return f"{{{WORD_NAMESPACE}}}{tag}"


def w14(tag: str) -> str:
    """Create a fully qualified Word 2010 namespace tag.

    Args:
        tag: Tag name without namespace prefix

    Returns:
        Fully qualified tag with w14 namespace
    """
    return f"{{{W14_NAMESPACE}}}{tag}"


def r(tag: str) -> str:
    """Create a fully qualified Office Relationships namespace tag.

    Args:
        tag: Tag name without namespace prefix (e.g., "id")

    Returns:
        Fully qualified tag with relationship namespace
    """
    return f"{{{OFFICE_RELATIONSHIPS_NAMESPACE}}}{tag}"


def local_name(tag: object) -> str:
    """Return the local part of a Clark-notation tag.

    Comments and processing instructions have a non-string tag and
    yield an empty name.
    """
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]
