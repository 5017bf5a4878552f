"""md2docx: convert Markdown to styled DOCX documents."""

from loguru import logger

from md2docx.converter import Converter, generate
from md2docx.exceptions import GenerationError, Md2DocxError, PackagingError, ParserError
from md2docx.style_manager import StyleConfig, resolve_style_config

__version__ = "0.1.0"

logger.disable("md2docx")

__all__ = [
    "Converter",
    "GenerationError",
    "Md2DocxError",
    "PackagingError",
    "ParserError",
    "StyleConfig",
    "__version__",
    "generate",
    "resolve_style_config",
]
