"""
Built-in XML skeletons for parts the engine creates on demand.

Every new part (a header, the numbering definitions, the comments store,
a blank document) starts life as one of these templates. Templates are
looked up by name through get_template(), which returns UTF-8 bytes ready to
be stored as a part payload, or through get_element() for a parsed copy.

Example:
    >>> from python_docx_blocks.templates import get_template
    >>> blob = get_template("header")
    >>> blob.startswith(b"<?xml")
    True
"""

from __future__ import annotations

from collections.abc import Callable

from lxml import etree

from .constants import (
    CONTENT_TYPES_NAMESPACE,
    MC_NAMESPACE,
    OFFICE_RELATIONSHIPS_NAMESPACE,
    PACKAGE_RELATIONSHIPS_NAMESPACE,
    W14_NAMESPACE,
    WORD_NAMESPACE,
)

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'

# Namespace declarations shared by every WordprocessingML part root
_WORD_ROOT_NS = (
    f'xmlns:w="{WORD_NAMESPACE}" '
    f'xmlns:r="{OFFICE_RELATIONSHIPS_NAMESPACE}" '
    f'xmlns:w14="{W14_NAMESPACE}" '
    f'xmlns:mc="{MC_NAMESPACE}" '
    'mc:Ignorable="w14"'
)

# Bullet glyphs cycle every three levels, as Word does
_BULLET_GLYPHS = ("●", "o", "▪")
_BULLET_FONTS = ("Symbol", "Courier New", "Wingdings")
_DECIMAL_FORMATS = ("decimal", "lowerLetter", "lowerRoman")

# Number of levels in a list template (ilvl 0..8)
LIST_LEVEL_COUNT = 9


def _content_types() -> str:
    return (
        f'<Types xmlns="{CONTENT_TYPES_NAMESPACE}">'
        '<Default Extension="rels" '
        'ContentType="application/vnd.openxmlformats-package.relationships+xml"/>'
        '<Default Extension="xml" ContentType="application/xml"/>'
        '<Override PartName="/word/document.xml" '
        'ContentType="application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"/>'
        '<Override PartName="/word/styles.xml" '
        'ContentType="application/vnd.openxmlformats-officedocument.wordprocessingml.styles+xml"/>'
        '<Override PartName="/word/settings.xml" '
        'ContentType="application/vnd.openxmlformats-officedocument.wordprocessingml.settings+xml"/>'
        "</Types>"
    )


def _package_rels() -> str:
    return (
        f'<Relationships xmlns="{PACKAGE_RELATIONSHIPS_NAMESPACE}">'
        '<Relationship Id="rId1" '
        'Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/officeDocument" '
        'Target="word/document.xml"/>'
        "</Relationships>"
    )


def _document_rels() -> str:
    return (
        f'<Relationships xmlns="{PACKAGE_RELATIONSHIPS_NAMESPACE}">'
        '<Relationship Id="rId1" '
        'Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/styles" '
        'Target="styles.xml"/>'
        '<Relationship Id="rId2" '
        'Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/settings" '
        'Target="settings.xml"/>'
        "</Relationships>"
    )


def _document() -> str:
    return (
        f"<w:document {_WORD_ROOT_NS}>"
        "<w:body>"
        "<w:sectPr>"
        '<w:pgSz w:w="12240" w:h="15840"/>'
        '<w:pgMar w:top="1440" w:right="1440" w:bottom="1440" w:left="1440" '
        'w:header="720" w:footer="720" w:gutter="0"/>'
        '<w:cols w:space="720"/>'
        "</w:sectPr>"
        "</w:body>"
        "</w:document>"
    )


def _styles() -> str:
    return (
        f"<w:styles {_WORD_ROOT_NS}>"
        "<w:docDefaults>"
        "<w:rPrDefault><w:rPr>"
        '<w:sz w:val="22"/><w:szCs w:val="22"/>'
        "</w:rPr></w:rPrDefault>"
        "<w:pPrDefault><w:pPr>"
        '<w:spacing w:after="160" w:line="259" w:lineRule="auto"/>'
        "</w:pPr></w:pPrDefault>"
        "</w:docDefaults>"
        '<w:style w:type="paragraph" w:default="1" w:styleId="Normal">'
        '<w:name w:val="Normal"/><w:qFormat/>'
        "</w:style>"
        '<w:style w:type="paragraph" w:styleId="Header">'
        '<w:name w:val="header"/><w:basedOn w:val="Normal"/>'
        '<w:pPr><w:tabs><w:tab w:val="center" w:pos="4680"/>'
        '<w:tab w:val="right" w:pos="9360"/></w:tabs>'
        '<w:spacing w:after="0" w:line="240" w:lineRule="auto"/></w:pPr>'
        "</w:style>"
        '<w:style w:type="paragraph" w:styleId="Footer">'
        '<w:name w:val="footer"/><w:basedOn w:val="Normal"/>'
        '<w:pPr><w:tabs><w:tab w:val="center" w:pos="4680"/>'
        '<w:tab w:val="right" w:pos="9360"/></w:tabs>'
        '<w:spacing w:after="0" w:line="240" w:lineRule="auto"/></w:pPr>'
        "</w:style>"
        '<w:style w:type="table" w:default="1" w:styleId="TableNormal">'
        '<w:name w:val="Normal Table"/>'
        '<w:tblPr><w:tblInd w:w="0" w:type="dxa"/>'
        '<w:tblCellMar><w:top w:w="0" w:type="dxa"/>'
        '<w:left w:w="108" w:type="dxa"/><w:bottom w:w="0" w:type="dxa"/>'
        '<w:right w:w="108" w:type="dxa"/></w:tblCellMar></w:tblPr>'
        "</w:style>"
        "</w:styles>"
    )


def _list_paragraph_style() -> str:
    return (
        f'<w:style xmlns:w="{WORD_NAMESPACE}" w:type="paragraph" w:styleId="ListParagraph">'
        '<w:name w:val="List Paragraph"/><w:basedOn w:val="Normal"/>'
        "<w:uiPriority w:val=\"34\"/><w:qFormat/>"
        '<w:pPr><w:ind w:left="720"/><w:contextualSpacing/></w:pPr>'
        "</w:style>"
    )


def _settings() -> str:
    return (
        f"<w:settings {_WORD_ROOT_NS}>"
        '<w:defaultTabStop w:val="720"/>'
        '<w:characterSpacingControl w:val="doNotCompress"/>'
        '<w:compat><w:compatSetting w:name="compatibilityMode" '
        'w:uri="http://schemas.microsoft.com/office/word" w:val="15"/></w:compat>'
        "</w:settings>"
    )


def _numbering() -> str:
    return f"<w:numbering {_WORD_ROOT_NS}/>"


def _header() -> str:
    return (
        f"<w:hdr {_WORD_ROOT_NS}>"
        '<w:p><w:pPr><w:pStyle w:val="Header"/></w:pPr></w:p>'
        "</w:hdr>"
    )


def _footer() -> str:
    return (
        f"<w:ftr {_WORD_ROOT_NS}>"
        '<w:p><w:pPr><w:pStyle w:val="Footer"/></w:pPr></w:p>'
        "</w:ftr>"
    )


def _comments() -> str:
    return f"<w:comments {_WORD_ROOT_NS}/>"


def _people() -> str:
    return (
        '<w15:people xmlns:w15="http://schemas.microsoft.com/office/word/2012/wordml" '
        f'xmlns:mc="{MC_NAMESPACE}" mc:Ignorable="w15"/>'
    )


def _bullet_numbering_style() -> str:
    levels = []
    for ilvl in range(LIST_LEVEL_COUNT):
        glyph = _BULLET_GLYPHS[ilvl % 3]
        font = _BULLET_FONTS[ilvl % 3]
        levels.append(
            f'<w:lvl w:ilvl="{ilvl}">'
            '<w:start w:val="1"/>'
            '<w:numFmt w:val="bullet"/>'
            f'<w:lvlText w:val="{glyph}"/>'
            '<w:lvlJc w:val="left"/>'
            f'<w:pPr><w:ind w:left="{720 * (ilvl + 1)}" w:hanging="360"/></w:pPr>'
            f'<w:rPr><w:rFonts w:ascii="{font}" w:hAnsi="{font}" w:hint="default"/></w:rPr>'
            "</w:lvl>"
        )
    return (
        f'<w:abstractNum xmlns:w="{WORD_NAMESPACE}" w:abstractNumId="0">'
        '<w:multiLevelType w:val="hybridMultilevel"/>'
        + "".join(levels)
        + "</w:abstractNum>"
    )


def _decimal_numbering_style() -> str:
    levels = []
    for ilvl in range(LIST_LEVEL_COUNT):
        num_fmt = _DECIMAL_FORMATS[ilvl % 3]
        levels.append(
            f'<w:lvl w:ilvl="{ilvl}">'
            '<w:start w:val="1"/>'
            f'<w:numFmt w:val="{num_fmt}"/>'
            f'<w:lvlText w:val="%{ilvl + 1}."/>'
            '<w:lvlJc w:val="left"/>'
            f'<w:pPr><w:ind w:left="{720 * (ilvl + 1)}" w:hanging="360"/></w:pPr>'
            "</w:lvl>"
        )
    return (
        f'<w:abstractNum xmlns:w="{WORD_NAMESPACE}" w:abstractNumId="0">'
        '<w:multiLevelType w:val="hybridMultilevel"/>'
        + "".join(levels)
        + "</w:abstractNum>"
    )


TEMPLATES: dict[str, Callable[[], str]] = {
    "content_types": _content_types,
    "package_rels": _package_rels,
    "document_rels": _document_rels,
    "document": _document,
    "styles": _styles,
    "settings": _settings,
    "numbering": _numbering,
    "header": _header,
    "footer": _footer,
    "comments": _comments,
    "people": _people,
    # Fragments rather than whole parts
    "list_paragraph_style": _list_paragraph_style,
    "numbering_bullet": _bullet_numbering_style,
    "numbering_decimal": _decimal_numbering_style,
}


def get_template(name: str) -> bytes:
    """Get the serialized skeleton for a named template.

    Args:
        name: Template name (e.g., "header", "numbering", "document")

    Returns:
        UTF-8 encoded XML including the XML declaration

    Raises:
        ValueError: If no template is registered under the name
    """
    if name not in TEMPLATES:
        available = ", ".join(sorted(TEMPLATES))
        raise ValueError(f"Unknown template: '{name}'. Available templates: {available}")
    return (XML_DECLARATION + TEMPLATES[name]()).encode("utf-8")


def get_element(name: str) -> etree._Element:
    """Get a freshly parsed copy of a named template."""
    return etree.fromstring(get_template(name))
