"""Markdown parser that produces an intermediate AST for DOCX conversion.

Uses mistune v3 to parse Markdown (with the GFM table, strikethrough,
task list and autolink plugins) and converts the token stream into a
normalised AST made of :class:`ASTNode` values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

import mistune


# ---------------------------------------------------------------------------
# AST node definitions
# ---------------------------------------------------------------------------

class NodeType(Enum):
    DOCUMENT = "document"
    TEXT = "text"
    EMPHASIS = "emphasis"
    STRONG = "strong"
    DELETE = "delete"
    INLINE_CODE = "inline_code"
    LINK = "link"
    IMAGE = "image"
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    BLOCKQUOTE = "blockquote"
    CODE = "code"
    THEMATIC_BREAK = "thematic_break"
    LIST = "list"
    LIST_ITEM = "list_item"
    TABLE = "table"
    TABLE_ROW = "table_row"
    TABLE_CELL = "table_cell"


INLINE_TYPES = frozenset({
    NodeType.TEXT,
    NodeType.EMPHASIS,
    NodeType.STRONG,
    NodeType.DELETE,
    NodeType.INLINE_CODE,
    NodeType.LINK,
    NodeType.IMAGE,
})


@dataclass
class ASTNode:
    type: NodeType
    children: list[ASTNode] = field(default_factory=list)
    text: str = ""
    # Heading
    level: int = 0
    # Code block info string
    language: str = ""
    # Link / Image
    url: str = ""
    title: str = ""
    alt: str = ""
    # List
    ordered: bool = False
    start: int = 1
    # Task list item: None when the item is not a task
    checked: Optional[bool] = None
    # Table cell
    align: str = ""


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

class MarkdownParser:
    """Parse Markdown text into an :class:`ASTNode` tree."""

    def __init__(self) -> None:
        self._md = mistune.create_markdown(
            renderer=None,  # AST mode
            plugins=["table", "strikethrough", "task_lists", "url"],
        )

    # -- public API ---------------------------------------------------------

    def parse(self, markdown_text: str) -> ASTNode:
        """Return a *DOCUMENT* ``ASTNode`` for *markdown_text*."""
        tokens: list[dict[str, Any]] = self._md(markdown_text)  # type: ignore[assignment]
        children = self._convert_tokens(tokens)
        return ASTNode(type=NodeType.DOCUMENT, children=children)

    # -- token conversion ---------------------------------------------------

    def _convert_tokens(self, tokens: list[dict[str, Any]]) -> list[ASTNode]:
        nodes: list[ASTNode] = []
        for tok in tokens:
            node = self._convert_token(tok)
            if node is not None:
                nodes.append(node)
        return nodes

    def _convert_token(self, tok: dict[str, Any]) -> Optional[ASTNode]:
        ttype = tok.get("type", "")
        handler = getattr(self, f"_handle_{ttype}", None)
        if handler:
            return handler(tok)
        # Fallback – keep the raw text of tokens we have no node kind for.
        raw = tok.get("raw", tok.get("text", ""))
        if raw:
            return ASTNode(type=NodeType.TEXT, text=str(raw))
        return None

    def _convert_inline(self, children: Any) -> list[ASTNode]:
        if children is None:
            return []
        if isinstance(children, str):
            return [ASTNode(type=NodeType.TEXT, text=children)]
        if isinstance(children, list):
            return self._convert_tokens(children)
        return []

    def _convert_blocks(self, children: Any) -> list[ASTNode]:
        if isinstance(children, list):
            return self._convert_tokens(children)
        return self._convert_inline(children)

    # -- block handlers -----------------------------------------------------

    def _handle_heading(self, tok: dict) -> ASTNode:
        children_raw = tok.get("children") or tok.get("text", "")
        return ASTNode(
            type=NodeType.HEADING,
            level=tok.get("attrs", {}).get("level", tok.get("level", 1)),
            children=self._convert_inline(children_raw),
        )

    def _handle_paragraph(self, tok: dict) -> ASTNode:
        children_raw = tok.get("children") or tok.get("text", "")
        return ASTNode(
            type=NodeType.PARAGRAPH,
            children=self._convert_inline(children_raw),
        )

    def _handle_block_text(self, tok: dict) -> ASTNode:
        """Tight list items carry their text as ``block_text``."""
        return self._handle_paragraph(tok)

    def _handle_thematic_break(self, _tok: dict) -> ASTNode:
        return ASTNode(type=NodeType.THEMATIC_BREAK)

    def _handle_block_code(self, tok: dict) -> ASTNode:
        attrs = tok.get("attrs", {})
        raw = tok.get("raw", tok.get("text", ""))
        text = raw if isinstance(raw, str) else str(raw)
        if text.endswith("\n"):
            text = text[:-1]
        return ASTNode(
            type=NodeType.CODE,
            text=text,
            language=attrs.get("info", tok.get("info", "")) or "",
        )

    def _handle_block_quote(self, tok: dict) -> ASTNode:
        children = self._convert_blocks(tok.get("children", []))
        return ASTNode(type=NodeType.BLOCKQUOTE, children=children)

    def _handle_block_html(self, tok: dict) -> Optional[ASTNode]:
        raw = str(tok.get("raw", "")).strip()
        if not raw:
            return None
        return ASTNode(type=NodeType.PARAGRAPH, children=[ASTNode(type=NodeType.TEXT, text=raw)])

    def _handle_blank_line(self, _tok: dict) -> Optional[ASTNode]:
        return None

    # -- inline handlers ----------------------------------------------------

    def _handle_text(self, tok: dict) -> ASTNode:
        raw = tok.get("raw", tok.get("text", tok.get("children", "")))
        if isinstance(raw, str):
            return ASTNode(type=NodeType.TEXT, text=raw)
        return ASTNode(type=NodeType.TEXT, text=self._extract_text(raw))

    def _handle_strong(self, tok: dict) -> ASTNode:
        children_raw = tok.get("children") or tok.get("text", "")
        return ASTNode(type=NodeType.STRONG, children=self._convert_inline(children_raw))

    def _handle_emphasis(self, tok: dict) -> ASTNode:
        children_raw = tok.get("children") or tok.get("text", "")
        return ASTNode(type=NodeType.EMPHASIS, children=self._convert_inline(children_raw))

    def _handle_strikethrough(self, tok: dict) -> ASTNode:
        children_raw = tok.get("children") or tok.get("text", "")
        return ASTNode(type=NodeType.DELETE, children=self._convert_inline(children_raw))

    def _handle_codespan(self, tok: dict) -> ASTNode:
        raw = tok.get("raw", tok.get("text", tok.get("children", "")))
        return ASTNode(type=NodeType.INLINE_CODE, text=raw if isinstance(raw, str) else str(raw))

    def _handle_linebreak(self, _tok: dict) -> ASTNode:
        return ASTNode(type=NodeType.TEXT, text="\n")

    def _handle_softbreak(self, _tok: dict) -> ASTNode:
        return ASTNode(type=NodeType.TEXT, text=" ")

    def _handle_inline_html(self, tok: dict) -> ASTNode:
        return ASTNode(type=NodeType.TEXT, text=str(tok.get("raw", "")))

    # -- link / image -------------------------------------------------------

    def _handle_link(self, tok: dict) -> ASTNode:
        attrs = tok.get("attrs", {})
        children_raw = tok.get("children") or tok.get("text", "")
        return ASTNode(
            type=NodeType.LINK,
            url=attrs.get("url", tok.get("link", "")),
            title=attrs.get("title", "") or "",
            children=self._convert_inline(children_raw),
        )

    def _handle_image(self, tok: dict) -> ASTNode:
        attrs = tok.get("attrs", {})
        alt = attrs.get("alt", tok.get("alt", ""))
        children_raw = tok.get("children")
        if not alt and children_raw:
            alt = self._extract_text(children_raw)
        return ASTNode(
            type=NodeType.IMAGE,
            url=attrs.get("url", tok.get("src", "")),
            title=attrs.get("title", "") or "",
            alt=alt,
        )

    # -- lists --------------------------------------------------------------

    def _handle_list(self, tok: dict) -> ASTNode:
        attrs = tok.get("attrs", {})
        children_raw = tok.get("children", [])
        items = self._convert_tokens(children_raw) if isinstance(children_raw, list) else []
        return ASTNode(
            type=NodeType.LIST,
            ordered=bool(attrs.get("ordered", False)),
            start=attrs.get("start", 1) or 1,
            children=items,
        )

    def _handle_list_item(self, tok: dict) -> ASTNode:
        return ASTNode(
            type=NodeType.LIST_ITEM,
            children=self._convert_blocks(tok.get("children", [])),
        )

    def _handle_task_list_item(self, tok: dict) -> ASTNode:
        attrs = tok.get("attrs", {})
        return ASTNode(
            type=NodeType.LIST_ITEM,
            children=self._convert_blocks(tok.get("children", [])),
            checked=bool(attrs.get("checked", False)),
        )

    # -- table --------------------------------------------------------------

    def _handle_table(self, tok: dict) -> ASTNode:
        rows: list[ASTNode] = []
        for child in tok.get("children", []):
            ctype = child.get("type", "")
            if ctype == "table_head":
                rows.extend(self._handle_table_section(child))
            elif ctype == "table_body":
                rows.extend(self._handle_table_section(child))
            elif ctype == "table_row":
                rows.append(self._make_table_row(child.get("children", [])))
        return ASTNode(type=NodeType.TABLE, children=rows)

    def _handle_table_section(self, tok: dict) -> list[ASTNode]:
        children = tok.get("children", [])
        if not children:
            return []

        # table_head holds its cells directly (one implicit row);
        # table_body holds table_row children.
        if children[0].get("type", "") == "table_cell":
            return [self._make_table_row(children)]
        return [self._make_table_row(child.get("children", [])) for child in children]

    def _make_table_row(self, cell_tokens: list[dict]) -> ASTNode:
        cells: list[ASTNode] = []
        for cell_tok in cell_tokens:
            cell_attrs = cell_tok.get("attrs", {})
            cells.append(ASTNode(
                type=NodeType.TABLE_CELL,
                children=self._convert_inline(cell_tok.get("children", [])),
                align=cell_attrs.get("align") or "",
            ))
        return ASTNode(type=NodeType.TABLE_ROW, children=cells)

    # -- helpers ------------------------------------------------------------

    def _extract_text(self, children: Any) -> str:
        if isinstance(children, str):
            return children
        if isinstance(children, list):
            parts: list[str] = []
            for c in children:
                if isinstance(c, dict):
                    if "raw" in c or "text" in c:
                        parts.append(str(c.get("raw", c.get("text", ""))))
                    else:
                        parts.append(self._extract_text(c.get("children")))
                elif isinstance(c, str):
                    parts.append(c)
            return "".join(parts)
        return ""


def extract_plain_text(node: ASTNode) -> str:
    """Recursively extract plain text from an AST subtree."""
    parts: list[str] = []
    if node.text:
        parts.append(node.text)
    for child in node.children:
        parts.append(extract_plain_text(child))
    return "".join(parts)
