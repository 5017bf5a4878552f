"""Concurrent image resolution for Markdown image references.

Collects every distinct image URL in an AST, fetches them all at once
and returns a read-only URL -> bytes mapping. Failed fetches are simply
absent from the mapping, as are payloads python-docx cannot embed; the
transformers render a placeholder instead.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
from collections.abc import Mapping
from types import MappingProxyType
from typing import Optional

import httpx
from docx.image.exceptions import (
    InvalidImageStreamError,
    UnexpectedEndOfFileError,
    UnrecognizedImageError,
)
from docx.image.image import Image
from loguru import logger

from md2docx.parser import ASTNode, NodeType

ImageCache = Mapping[str, bytes]

DEFAULT_TIMEOUT = 30.0
USER_AGENT = "Mozilla/5.0 (compatible; md2docx)"

EMPTY_IMAGE_CACHE: ImageCache = MappingProxyType({})

# Raised by python-docx for payloads it cannot embed.
IMAGE_ERRORS = (InvalidImageStreamError, UnexpectedEndOfFileError, UnrecognizedImageError)


def collect_image_urls(node: ASTNode) -> list[str]:
    """Return the distinct image URLs under *node* in first-seen order."""
    seen: dict[str, None] = {}
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == NodeType.IMAGE and current.url:
            seen.setdefault(current.url, None)
        stack.extend(reversed(current.children))
    return list(seen)


def _decode_data_uri(url: str) -> Optional[bytes]:
    header, _, payload = url.partition(",")
    if not header.endswith(";base64") or not payload:
        return None
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        return None


def _is_embeddable(url: str, data: bytes) -> bool:
    try:
        Image.from_blob(data)
    except IMAGE_ERRORS as e:
        logger.warning(f"Unusable image data from {url[:80]}: {e!r}")
        return False
    return True


async def _fetch_one(
    client: httpx.AsyncClient,
    url: str,
    cache: dict[str, bytes],
    timeout: float,
) -> None:
    if url.startswith("data:"):
        data = _decode_data_uri(url)
        if not data:
            logger.warning(f"Undecodable data URI image: {url[:60]}...")
        elif _is_embeddable(url[:60], data):
            cache[url] = data
        return

    try:
        response = await client.get(url, timeout=timeout)
        response.raise_for_status()
    except httpx.TimeoutException:
        logger.warning(f"Timeout downloading image: {url[:80]}")
        return
    except httpx.HTTPStatusError as e:
        logger.warning(f"HTTP {e.response.status_code} downloading image: {url[:80]}")
        return
    except httpx.HTTPError as e:
        logger.warning(f"Failed to download image: {url[:80]} - {e}")
        return

    if not response.content:
        logger.warning(f"Empty response body for image: {url[:80]}")
        return

    if not _is_embeddable(url, response.content):
        return

    cache[url] = response.content
    logger.debug(f"Downloaded image: {url[:60]} ({len(response.content)} bytes)")


async def resolve_images(
    doc: ASTNode,
    *,
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> ImageCache:
    """Fetch every image referenced in *doc* concurrently.

    All fetches are awaited before returning, so the resulting cache is
    complete when the transformers start reading it. Each URL is fetched
    at most once and never retried.

    Args:
        doc: Root of the parsed Markdown tree.
        client: Optional pre-configured client (e.g. with a mock transport).
            When omitted a short-lived client is created and closed here.
        timeout: Per-request timeout in seconds.

    Returns:
        Read-only mapping of URL to image bytes for the successful fetches.
    """
    urls = collect_image_urls(doc)
    if not urls:
        return EMPTY_IMAGE_CACHE

    cache: dict[str, bytes] = {}

    if client is None:
        async with httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
        ) as own_client:
            await asyncio.gather(*(_fetch_one(own_client, url, cache, timeout) for url in urls))
    else:
        await asyncio.gather(*(_fetch_one(client, url, cache, timeout) for url in urls))

    failed = len(urls) - len(cache)
    if failed:
        logger.info(f"Resolved {len(cache)}/{len(urls)} images ({failed} failed)")
    else:
        logger.info(f"Resolved {len(cache)} images")

    return MappingProxyType(cache)
