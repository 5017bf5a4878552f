"""Exceptions raised by md2docx.

Configuration defects, failed image fetches and unknown node kinds are
absorbed where they occur and only logged. Parsing and packaging
failures abort a conversion and reach the caller as a
:class:`GenerationError`.
"""

from __future__ import annotations


class Md2DocxError(Exception):
    """Base class for md2docx errors."""


class GenerationError(Md2DocxError):
    """A conversion failed; no document was produced."""


class ParserError(GenerationError):
    """The Markdown source could not be parsed."""


class PackagingError(GenerationError):
    """The document model could not be encoded as DOCX."""
