"""Document assembler: wrap transformed blocks into a :class:`DocumentModel`.

Adds the bullet/ordered numbering families and the named paragraph
styles ("Normal", "Heading1".."Heading6"), all derived from the resolved
style configuration.
"""

from __future__ import annotations

from collections.abc import Iterable

from md2docx.model import (
    BULLET_REFERENCE,
    LIST_HANGING,
    MAX_LIST_LEVEL,
    ORDERED_REFERENCE,
    BlockNode,
    DocumentModel,
    NumberingDefinition,
    NumberingLevel,
    ParagraphStyle,
    Spacing,
    list_indent,
)
from md2docx.style_manager import StyleConfig

_BULLET_GLYPHS = ("\u2022", "\u25e6", "\u25aa")
_ORDERED_FORMATS = ("decimal", "lowerLetter", "lowerRoman")


def _bullet_definition(config: StyleConfig) -> NumberingDefinition:
    return NumberingDefinition(
        reference=BULLET_REFERENCE,
        levels=tuple(
            NumberingLevel(
                level=level,
                format="bullet",
                text=_BULLET_GLYPHS[level],
                indent_left=list_indent(level),
                hanging=LIST_HANGING,
                font=config.font.body,
                color=config.list.marker_color,
            )
            for level in range(MAX_LIST_LEVEL + 1)
        ),
    )


def _ordered_definition(config: StyleConfig) -> NumberingDefinition:
    return NumberingDefinition(
        reference=ORDERED_REFERENCE,
        levels=tuple(
            NumberingLevel(
                level=level,
                format=_ORDERED_FORMATS[level],
                text=f"%{level + 1}.",
                indent_left=list_indent(level),
                hanging=LIST_HANGING,
                font=config.font.body,
                color=config.list.marker_color,
            )
            for level in range(MAX_LIST_LEVEL + 1)
        ),
    )


def build_numbering(config: StyleConfig) -> tuple[NumberingDefinition, ...]:
    """Return the bullet and ordered numbering families."""
    return (_bullet_definition(config), _ordered_definition(config))


def build_styles(config: StyleConfig) -> tuple[ParagraphStyle, ...]:
    """Return the "Normal" style followed by "Heading1".."Heading6"."""
    styles = [
        ParagraphStyle(
            id="Normal",
            name="Normal",
            font=config.font.body,
            size=config.sizes.body,
            color=config.typography.body,
            spacing=Spacing(after=120),
        )
    ]
    for level in range(1, 7):
        styles.append(ParagraphStyle(
            id=f"Heading{level}",
            name=f"Heading {level}",
            font=config.font.heading,
            size=config.heading_size(level),
            color=config.heading_color(level),
            bold=True,
            based_on="Normal",
            next_style="Normal",
        ))
    return tuple(styles)


def assemble_document(
    blocks: Iterable[BlockNode],
    config: StyleConfig,
    *,
    title: str = "",
) -> DocumentModel:
    """Wrap *blocks* with the numbering and style tables for *config*."""
    return DocumentModel(
        blocks=tuple(blocks),
        numbering=build_numbering(config),
        styles=build_styles(config),
        title=title,
    )
