"""
Compatibility helpers for integrating with python-docx.

Documents cross between the two libraries through an in-memory .docx, so no
file is written to disk.
"""

from __future__ import annotations

import io
from typing import Any

from .document import Document
from .identity import IdSource


def from_python_docx(python_docx_doc: Any, id_source: IdSource | None = None) -> Document:
    """Create a python_docx_blocks Document from a python-docx Document.

    Args:
        python_docx_doc: A python-docx Document object
        id_source: Optional paragraph id strategy for the new Document

    Returns:
        A python_docx_blocks Document

    Raises:
        ImportError: If python-docx is not installed (with helpful message)
        TypeError: If the input is not a python-docx Document

    Example:
        >>> from docx import Document as PythonDocxDocument
        >>> from python_docx_blocks.compat import from_python_docx
        >>>
        >>> py_doc = PythonDocxDocument()
        >>> py_doc.add_paragraph("Payment terms: 30 days")
        >>> doc = from_python_docx(py_doc)
        >>> doc.insert_paragraph_at(7, "Inserted")
    """
    try:
        from docx.document import Document as PythonDocxDocType
    except ImportError as e:
        raise ImportError(
            "python-docx is required for from_python_docx(). "
            "Install it with: pip install python-docx"
        ) from e

    if not isinstance(python_docx_doc, PythonDocxDocType):
        raise TypeError(
            f"Expected python-docx Document, got {type(python_docx_doc).__name__}. "
            "Pass a Document object created with: from docx import Document"
        )

    buffer = io.BytesIO()
    python_docx_doc.save(buffer)
    buffer.seek(0)
    return Document(buffer, id_source=id_source)


def to_python_docx(doc: Document) -> Any:
    """Convert a python_docx_blocks Document to a python-docx Document.

    Example:
        >>> doc = Document("report.docx")
        >>> doc.add_table(2, 3)
        >>> py_doc = to_python_docx(doc)
        >>> py_doc.add_paragraph("Added with python-docx")
    """
    try:
        from docx import Document as PythonDocxDoc
    except ImportError as e:
        raise ImportError(
            "python-docx is required for to_python_docx(). Install it with: pip install python-docx"
        ) from e

    return PythonDocxDoc(io.BytesIO(doc.save_to_bytes()))
