"""
Operations package for Document manipulation.

This package contains classes that handle specific operations on Word documents,
extracted from the main Document class to improve separation of concerns.
"""

from .batch import BatchOperations
from .comments import CommentOperations
from .header_footer import HeaderFooterOperations

__all__ = [
    "BatchOperations",
    "CommentOperations",
    "HeaderFooterOperations",
]
