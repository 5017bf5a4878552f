"""FastAPI web service for Markdown to DOCX conversion.

Endpoints::

    POST /convert       Upload a .md file and receive .docx back.
    POST /convert/text  Send raw Markdown text, receive .docx bytes.
    GET  /health        Health check.
    GET  /styles        List style presets and the default style config.

Run::

    uvicorn md2docx.server:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import json
from pathlib import PurePath
from typing import Any, Optional
from urllib.parse import quote

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import Response
from loguru import logger

from md2docx import __version__
from md2docx.converter import Converter
from md2docx.exceptions import GenerationError
from md2docx.style_manager import DEFAULT_STYLE_CONFIG, StyleManager

app = FastAPI(
    title="md2docx",
    description="Markdown to DOCX conversion service",
    version=__version__,
)

DOCX_MEDIA_TYPE = (
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
)
GENERATION_FAILED = "Failed to generate document."


def _content_disposition(filename: str) -> str:
    """Build Content-Disposition header, RFC 5987 for non-ASCII names."""
    try:
        filename.encode("ascii")
        return f'attachment; filename="{filename}"'
    except UnicodeEncodeError:
        encoded = quote(filename)
        return f"attachment; filename*=UTF-8''{encoded}"


def _docx_name(name: Optional[str]) -> str:
    stem = PurePath(name or "document").stem or "document"
    return f"{stem}.docx"


def _parse_config(raw: Optional[str]) -> Any:
    if not raw:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise HTTPException(status_code=422, detail=f"Invalid style config JSON: {exc.msg}") from exc


def _make_converter(style: str, config: Optional[str]) -> Converter:
    if style not in StyleManager.PRESETS:
        raise HTTPException(
            status_code=422,
            detail=f"Unknown style preset {style!r}. Choose from: {', '.join(StyleManager.PRESETS)}",
        )
    return Converter(_parse_config(config), preset=style)


async def _render(converter: Converter, markdown: str, filename: str) -> Response:
    try:
        docx_bytes = await converter.generate(markdown, filename)
    except GenerationError:
        logger.exception(f"Generation failed for {filename!r}")
        raise HTTPException(status_code=500, detail=GENERATION_FAILED)

    return Response(
        content=docx_bytes,
        media_type=DOCX_MEDIA_TYPE,
        headers={"Content-Disposition": _content_disposition(filename)},
    )


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


@app.get("/styles")
async def list_styles() -> dict[str, Any]:
    """List style presets and the full default style configuration."""
    return {"presets": StyleManager.PRESETS, "default": DEFAULT_STYLE_CONFIG.to_dict()}


@app.post("/convert")
async def convert_file(
    file: UploadFile = File(...),
    style: str = Form("default"),
    config: Optional[str] = Form(None),
    encoding: str = Form("utf-8"),
) -> Response:
    """Upload a Markdown file and receive DOCX back.

    - **file**: Markdown file (.md)
    - **style**: Style preset name (default, academic, business, minimal)
    - **config**: JSON object with style overrides
    - **encoding**: Source file encoding
    """
    converter = _make_converter(style, config)
    raw = await file.read()
    try:
        md_text = raw.decode(encoding)
    except (LookupError, UnicodeDecodeError) as exc:
        raise HTTPException(status_code=422, detail=f"Cannot decode upload as {encoding}") from exc

    return await _render(converter, md_text, _docx_name(file.filename))


@app.post("/convert/text")
async def convert_text(
    markdown: str = Form(...),
    style: str = Form("default"),
    config: Optional[str] = Form(None),
    filename: str = Form("document.docx"),
) -> Response:
    """Send raw Markdown text and receive DOCX bytes.

    - **markdown**: Markdown source text
    - **style**: Style preset name
    - **config**: JSON object with style overrides
    - **filename**: Name of the produced document
    """
    converter = _make_converter(style, config)
    return await _render(converter, markdown, _docx_name(filename))
