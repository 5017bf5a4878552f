"""High-level Markdown-to-DOCX conversion orchestrator.

Ties together the parser, style resolver, image resolver, transformers,
assembler and packager into a single public API for converting Markdown
text or files to DOCX output.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Optional

import httpx
from loguru import logger

from md2docx.assembler import assemble_document
from md2docx.blocks import transform_document
from md2docx.exceptions import GenerationError, ParserError
from md2docx.images import EMPTY_IMAGE_CACHE, ImageCache, resolve_images
from md2docx.model import DocumentModel
from md2docx.packager import encode
from md2docx.parser import MarkdownParser
from md2docx.style_manager import StyleManager


def _title_from(output_name: str) -> str:
    name = Path(output_name).name
    if name.lower().endswith(".docx"):
        name = name[: -len(".docx")]
    return name


class Converter:
    """Convert Markdown content to DOCX format.

    Usage::

        converter = Converter({"typography": {"heading1": "1D4ED8"}}, preset="business")
        converter.convert_file("input.md", "output.docx")

        # or from string
        docx_bytes = converter.convert_text("# Hello")

        # or inside a running event loop
        docx_bytes = await converter.generate("# Hello", "hello.docx")
    """

    STYLE_PRESETS = StyleManager.PRESETS

    def __init__(
        self,
        style_config: Any = None,
        preset: str = "default",
        *,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.style_manager = StyleManager(style_config, preset)
        self.parser = MarkdownParser()
        self.client = client

    def build_model(
        self,
        markdown_text: str,
        images: ImageCache = EMPTY_IMAGE_CACHE,
        *,
        title: str = "",
    ) -> DocumentModel:
        """Parse and transform *markdown_text* without packaging it."""
        doc = self.parser.parse(markdown_text)
        config = self.style_manager.config
        return assemble_document(transform_document(doc, config, images), config, title=title)

    async def generate(self, markdown_text: str, output_name: str = "document.docx") -> bytes:
        """Convert Markdown text to DOCX bytes.

        Images are fetched concurrently and all fetches complete before the
        tree is transformed.

        Raises:
            GenerationError: If parsing or packaging fails.
        """
        try:
            doc = self.parser.parse(markdown_text)
        except Exception as e:
            raise ParserError(f"Failed to parse Markdown: {e!r}") from e

        images = await resolve_images(doc, client=self.client)

        config = self.style_manager.config
        blocks = transform_document(doc, config, images)
        model = assemble_document(blocks, config, title=_title_from(output_name))
        logger.debug(f"Assembled {len(model.blocks)} top-level blocks for {output_name!r}")

        return encode(model)

    def convert_text(self, markdown_text: str, output_name: str = "document.docx") -> bytes:
        """Convert Markdown text to DOCX bytes (blocking).

        Args:
            markdown_text: Markdown source string.
            output_name: Output file name, used as the document title.

        Returns:
            DOCX file content as bytes.
        """
        return asyncio.run(self.generate(markdown_text, output_name))

    def convert_file(
        self,
        input_path: str | Path,
        output_path: str | Path,
        *,
        encoding: str = "utf-8",
    ) -> None:
        """Read a Markdown file and write the DOCX output.

        Args:
            input_path: Path to the input ``.md`` file.
            output_path: Path for the output ``.docx`` file.
            encoding: Text encoding of the source file.
        """
        input_path = Path(input_path)
        output_path = Path(output_path)

        md_text = input_path.read_text(encoding=encoding)
        docx_bytes = self.convert_text(md_text, output_path.name)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(docx_bytes)


async def generate(
    markdown_text: str,
    output_name: str = "document.docx",
    style_config: Any = None,
    *,
    preset: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> bytes:
    """Convert *markdown_text* to DOCX bytes using a partial *style_config*.

    Raises:
        GenerationError: If parsing or packaging fails. Bad style values,
            unreachable images and unsupported nodes never raise.
    """
    converter = Converter(style_config, preset or "default", client=client)
    return await converter.generate(markdown_text, output_name)


__all__ = ["Converter", "GenerationError", "generate"]
