"""Block transformer: block AST nodes -> paragraphs and tables.

Each handler returns the document nodes for one AST block in source
order. List nesting travels as an explicit :class:`ListContext`
argument; nothing here keeps state between calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from loguru import logger

from md2docx.images import EMPTY_IMAGE_CACHE, ImageCache
from md2docx.inline import InlineOverride, StyleAccumulator, transform_inlines
from md2docx.model import (
    BULLET_REFERENCE,
    MAX_LIST_LEVEL,
    ORDERED_REFERENCE,
    Alignment,
    BlockNode,
    Border,
    Borders,
    Indent,
    NumberingRef,
    Paragraph,
    Run,
    Shading,
    Spacing,
    Table,
    TableCell,
    TableRow,
    list_indent,
)
from md2docx.parser import ASTNode, NodeType
from md2docx.style_manager import StyleConfig

CHECKED_GLYPH = "\u2611 "
UNCHECKED_GLYPH = "\u2610 "

CODE_BORDER_COLOR = "E5E7EB"
HEADING2_RULE_COLOR = "E5E7EB"

_HEADING_SPACING = {
    1: Spacing(before=240, after=120),
    2: Spacing(before=240, after=120),
}
_MINOR_HEADING_SPACING = Spacing(before=200, after=100)
_PARAGRAPH_SPACING = Spacing(after=120)
_LIST_SPACING = Spacing(after=60)
_BLOCK_SPACING = Spacing(before=200, after=200)
_RULE_SPACING = Spacing(before=240, after=240)


@dataclass(frozen=True)
class ListContext:
    """Nesting level and kind of the immediately enclosing list."""

    level: int
    ordered: bool


# ---------------------------------------------------------------------------
# Per-NodeType handlers
# ---------------------------------------------------------------------------

def _heading(node: ASTNode, config: StyleConfig, images: ImageCache,
             _ctx: Optional[ListContext]) -> list[BlockNode]:
    level = max(1, min(6, node.level))
    color = config.heading_color(level)
    override = InlineOverride(
        color=color,
        font=config.font.heading,
        size=config.heading_size(level),
    )
    children = transform_inlines(node.children, config, images, StyleAccumulator(bold=True), override)

    borders = None
    if level == 1:
        borders = Borders(bottom=Border(color=color, size=12, space=4))
    elif level == 2:
        borders = Borders(bottom=Border(color=HEADING2_RULE_COLOR, size=6, space=4))

    return [Paragraph(
        children=tuple(children),
        heading_level=level,
        borders=borders,
        spacing=_HEADING_SPACING.get(level, _MINOR_HEADING_SPACING),
    )]


def _paragraph(node: ASTNode, config: StyleConfig, images: ImageCache,
               _ctx: Optional[ListContext]) -> list[BlockNode]:
    children = transform_inlines(node.children, config, images)
    return [Paragraph(children=tuple(children), spacing=_PARAGRAPH_SPACING)]


def _blockquote(node: ASTNode, config: StyleConfig, images: ImageCache,
                ctx: Optional[ListContext]) -> list[BlockNode]:
    quote = config.blockquote
    override = InlineOverride(color=quote.text_color)
    result: list[BlockNode] = []
    for child in node.children:
        if child.type != NodeType.PARAGRAPH:
            # Nested structures keep their own styling.
            result.extend(transform_block(child, config, images, ctx))
            continue
        children = transform_inlines(child.children, config, images, StyleAccumulator(), override)
        result.append(Paragraph(
            children=tuple(children),
            indent=Indent(left=720),
            borders=Borders(left=Border(color=quote.border, size=24, space=12)),
            shading=Shading(fill=quote.background),
            spacing=_PARAGRAPH_SPACING,
        ))
    return result


def _code(node: ASTNode, config: StyleConfig, _images: ImageCache,
          _ctx: Optional[ListContext]) -> list[BlockNode]:
    run = Run(
        text=node.text,
        font=config.font.code,
        color=config.code_block.text,
        size=config.sizes.code,
    )
    return [Paragraph(
        children=(run,),
        shading=Shading(fill=config.code_block.background),
        borders=Borders.box(Border(color=CODE_BORDER_COLOR, size=4)),
        indent=Indent(left=200, right=200),
        spacing=_BLOCK_SPACING,
    )]


def _thematic_break(_node: ASTNode, config: StyleConfig, _images: ImageCache,
                    _ctx: Optional[ListContext]) -> list[BlockNode]:
    return [Paragraph(
        borders=Borders(bottom=Border(color=config.thematic_break.color, size=6, space=1)),
        spacing=_RULE_SPACING,
    )]


def _list_item_paragraph(item: ASTNode, first: Optional[ASTNode], level: int, ordered: bool,
                         config: StyleConfig, images: ImageCache,
                         start: Optional[int] = None) -> Paragraph:
    children = transform_inlines(first.children, config, images) if first is not None else []

    if item.checked is not None:
        glyph = Run(
            text=CHECKED_GLYPH if item.checked else UNCHECKED_GLYPH,
            font=config.font.body,
            color=config.list.marker_color,
            size=config.sizes.body,
        )
        return Paragraph(
            children=(glyph, *children),
            indent=Indent(left=list_indent(level)),
            spacing=_LIST_SPACING,
        )

    if level > MAX_LIST_LEVEL:
        logger.debug(f"List level {level} exceeds deepest defined level; clamping to {MAX_LIST_LEVEL}")
    return Paragraph(
        children=tuple(children),
        numbering=NumberingRef(
            reference=ORDERED_REFERENCE if ordered else BULLET_REFERENCE,
            level=min(level, MAX_LIST_LEVEL),
            start=start,
        ),
        spacing=_LIST_SPACING,
    )


def _list(node: ASTNode, config: StyleConfig, images: ImageCache,
          ctx: Optional[ListContext]) -> list[BlockNode]:
    level = (ctx.level if ctx is not None else -1) + 1
    item_ctx = ListContext(level=level, ordered=node.ordered)
    # An ordered list outside any ordered list opens its own counter on its
    # first numbered item; inside one, the word processor restarts the level.
    start = node.start if node.ordered and (ctx is None or not ctx.ordered) else None
    result: list[BlockNode] = []

    for item in node.children:
        if item.type != NodeType.LIST_ITEM:
            result.extend(transform_block(item, config, images, item_ctx))
            continue

        rest = item.children
        if not rest or rest[0].type == NodeType.PARAGRAPH:
            first = rest[0] if rest else None
            para = _list_item_paragraph(item, first, level, node.ordered, config, images, start)
            if para.numbering is not None:
                start = None
            result.append(para)
            rest = rest[1:]

        for child in rest:
            result.extend(transform_block(child, config, images, item_ctx))

    return result


def _table(node: ASTNode, config: StyleConfig, images: ImageCache,
           _ctx: Optional[ListContext]) -> list[BlockNode]:
    if not node.children:
        logger.debug("Skipping table without rows")
        return []

    table_cfg = config.table
    cell_borders = Borders.box(Border(color=table_cfg.border_color, size=4))
    header_style = StyleAccumulator(bold=table_cfg.bold_header)
    header_override = InlineOverride(color=table_cfg.header_text, size=config.sizes.table_header)
    body_override = InlineOverride(color=config.typography.body, size=config.sizes.table_body)

    rows: list[TableRow] = []
    for row_idx, row in enumerate(node.children):
        is_header = row_idx == 0
        width = 100 / len(row.children) if row.children else 100.0
        alignment = Alignment.CENTER if is_header else Alignment.LEFT

        cells: list[TableCell] = []
        for cell in row.children:
            children = transform_inlines(
                cell.children,
                config,
                images,
                header_style if is_header else StyleAccumulator(),
                header_override if is_header else body_override,
            )
            cells.append(TableCell(
                paragraphs=(Paragraph(children=tuple(children), alignment=alignment),),
                width_percent=width,
                shading=Shading(fill=table_cfg.header_background) if is_header else None,
                borders=cell_borders,
                alignment=alignment,
            ))
        rows.append(TableRow(cells=tuple(cells), is_header=is_header))

    return [Table(rows=tuple(rows))]


def _document(node: ASTNode, config: StyleConfig, images: ImageCache,
              ctx: Optional[ListContext]) -> list[BlockNode]:
    result: list[BlockNode] = []
    for child in node.children:
        result.extend(transform_block(child, config, images, ctx))
    return result


_Handler = Callable[[ASTNode, StyleConfig, ImageCache, Optional[ListContext]], list[BlockNode]]

_BLOCK_HANDLERS: dict[NodeType, _Handler] = {
    NodeType.DOCUMENT: _document,
    NodeType.HEADING: _heading,
    NodeType.PARAGRAPH: _paragraph,
    NodeType.BLOCKQUOTE: _blockquote,
    NodeType.CODE: _code,
    NodeType.THEMATIC_BREAK: _thematic_break,
    NodeType.LIST: _list,
    NodeType.TABLE: _table,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def transform_block(
    node: ASTNode,
    config: StyleConfig,
    images: ImageCache = EMPTY_IMAGE_CACHE,
    list_context: Optional[ListContext] = None,
) -> list[BlockNode]:
    """Convert one block node into paragraphs/tables.

    Args:
        node: Block AST node.
        config: Resolved style configuration.
        images: Pre-fetched image payloads keyed by URL.
        list_context: Enclosing list level/kind, ``None`` outside lists.

    Returns:
        Document nodes in depth-first source order. Unknown node kinds
        yield an empty list.
    """
    handler = _BLOCK_HANDLERS.get(node.type)
    if handler is None:
        logger.warning(f"Unsupported block node {node.type.value!r}; skipping")
        return []
    return handler(node, config, images, list_context)


def transform_document(
    doc: ASTNode,
    config: StyleConfig,
    images: ImageCache = EMPTY_IMAGE_CACHE,
) -> list[BlockNode]:
    """Transform every top-level block of *doc* in order."""
    return _document(doc, config, images, None)
