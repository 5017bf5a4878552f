"""Inline transformer: inline AST nodes -> runs, hyperlinks and images.

Style state (bold/italic/strike flags and color/font overrides) is passed
down as immutable values, so sibling subtrees never see each other's
formatting.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from loguru import logger

from md2docx.images import EMPTY_IMAGE_CACHE, ImageCache
from md2docx.model import (
    PLACEHOLDER_COLOR,
    Hyperlink,
    ImageRun,
    InlineNode,
    Run,
    Shading,
    image_placeholder,
)
from md2docx.parser import ASTNode, NodeType
from md2docx.style_manager import StyleConfig

# Images are inserted at a fixed display size in pixels; the real aspect
# ratio is not measured.
IMAGE_WIDTH_PX = 400
IMAGE_HEIGHT_PX = 300


@dataclass(frozen=True)
class StyleAccumulator:
    """Formatting flags accumulated from enclosing emphasis nodes."""

    bold: bool = False
    italic: bool = False
    strike: bool = False

    def merge(self, *, bold: bool = False, italic: bool = False, strike: bool = False) -> StyleAccumulator:
        return StyleAccumulator(
            bold=self.bold or bold,
            italic=self.italic or italic,
            strike=self.strike or strike,
        )


@dataclass(frozen=True)
class InlineOverride:
    """Color/font/size imposed by the enclosing block (heading, quote, cell, link)."""

    color: Optional[str] = None
    font: Optional[str] = None
    size: Optional[int] = None
    underline: bool = False


def _text_run(
    text: str,
    config: StyleConfig,
    style: StyleAccumulator,
    override: Optional[InlineOverride],
) -> Run:
    override = override or InlineOverride()
    return Run(
        text=text,
        bold=style.bold,
        italic=style.italic,
        strike=style.strike,
        underline=override.underline,
        font=override.font or config.font.body,
        color=override.color or config.typography.body,
        size=override.size or config.sizes.body,
    )


def _transform_children(
    node: ASTNode,
    config: StyleConfig,
    images: ImageCache,
    style: StyleAccumulator,
    override: Optional[InlineOverride],
) -> list[InlineNode]:
    result: list[InlineNode] = []
    for child in node.children:
        result.extend(transform_inline(child, config, images, style, override))
    return result


def transform_inline(
    node: ASTNode,
    config: StyleConfig,
    images: ImageCache = EMPTY_IMAGE_CACHE,
    style: StyleAccumulator = StyleAccumulator(),
    override: Optional[InlineOverride] = None,
) -> list[InlineNode]:
    """Convert one inline node into an ordered list of document leaves.

    Args:
        node: Inline AST node.
        config: Resolved style configuration.
        images: Pre-fetched image payloads keyed by URL.
        style: Bold/italic/strike flags inherited from enclosing nodes.
        override: Color/font/size imposed by the enclosing context.

    Returns:
        Runs, hyperlinks and images in source order. Unknown node kinds
        produce a single empty run.
    """
    nt = node.type

    if nt == NodeType.TEXT:
        return [_text_run(node.text, config, style, override)]

    if nt == NodeType.EMPHASIS:
        return _transform_children(node, config, images, style.merge(italic=True), override)

    if nt == NodeType.STRONG:
        return _transform_children(node, config, images, style.merge(bold=True), override)

    if nt == NodeType.DELETE:
        return _transform_children(node, config, images, style.merge(strike=True), override)

    if nt == NodeType.INLINE_CODE:
        return [Run(
            text=node.text,
            font=config.font.code,
            color=config.inline_code.color,
            size=config.sizes.code,
            shading=Shading(fill=config.inline_code.background),
        )]

    if nt == NodeType.LINK:
        # The link styling replaces any enclosing override.
        link_override = InlineOverride(color=config.typography.link, underline=True)
        children = _transform_children(node, config, images, style, link_override)
        # Nested links cannot be expressed; their contents join the outer link.
        leaves: list[Run | ImageRun] = []
        for child in children:
            if isinstance(child, Hyperlink):
                leaves.extend(child.children)
            else:
                leaves.append(child)
        if not leaves:
            leaves = [_text_run(node.url, config, style, link_override)]
        return [Hyperlink(url=node.url, children=tuple(leaves))]

    if nt == NodeType.IMAGE:
        data = images.get(node.url)
        if data is not None:
            return [ImageRun(data=data, width=IMAGE_WIDTH_PX, height=IMAGE_HEIGHT_PX, alt=node.alt)]
        return [Run(
            text=image_placeholder(node.alt),
            italic=True,
            font=config.font.body,
            color=PLACEHOLDER_COLOR,
            size=config.sizes.body,
        )]

    logger.warning(f"Unsupported inline node {nt.value!r}; emitting empty run")
    return [Run()]


def transform_inlines(
    nodes: list[ASTNode],
    config: StyleConfig,
    images: ImageCache = EMPTY_IMAGE_CACHE,
    style: StyleAccumulator = StyleAccumulator(),
    override: Optional[InlineOverride] = None,
) -> list[InlineNode]:
    """Apply :func:`transform_inline` to a sequence of sibling nodes."""
    result: list[InlineNode] = []
    for node in nodes:
        result.extend(transform_inline(node, config, images, style, override))
    return result
