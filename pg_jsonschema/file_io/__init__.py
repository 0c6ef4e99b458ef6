"""File I/O related utilities.

This package groups the modules that read schema and instance documents
from disk and map JSON pointers back to file locations for diagnostics.
"""

from .document_loader import DocumentLoader, LoadedDocument, document_loader
from .source_location import SourceLocation, format_source, lookup_source, source_for_document

__all__ = [
    "DocumentLoader",
    "LoadedDocument",
    "document_loader",
    "SourceLocation",
    "format_source",
    "lookup_source",
    "source_for_document",
]
