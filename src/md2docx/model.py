"""Serialization-ready document model produced by the transformers.

Every node is a frozen dataclass: nodes are built once during
transformation and only read afterwards by the assembler and packager.
Measurements follow OOXML conventions: indents and spacing in twips
(1/20 pt), border widths in eighths of a point, run sizes in points.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class Alignment(Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    JUSTIFY = "both"


class BorderStyle(Enum):
    SINGLE = "single"
    THICK = "thick"


# ---------------------------------------------------------------------------
# Decorations
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Border:
    color: str
    size: int = 4
    style: BorderStyle = BorderStyle.SINGLE
    space: int = 1


@dataclass(frozen=True)
class Borders:
    top: Optional[Border] = None
    bottom: Optional[Border] = None
    left: Optional[Border] = None
    right: Optional[Border] = None

    @classmethod
    def box(cls, border: Border) -> Borders:
        return cls(top=border, bottom=border, left=border, right=border)

    def is_empty(self) -> bool:
        return not (self.top or self.bottom or self.left or self.right)


@dataclass(frozen=True)
class Shading:
    fill: str


@dataclass(frozen=True)
class Indent:
    left: int = 0
    right: int = 0
    hanging: int = 0


@dataclass(frozen=True)
class Spacing:
    before: int = 0
    after: int = 0


@dataclass(frozen=True)
class NumberingRef:
    """Reference from a paragraph to a numbering family at one level.

    A non-None *start* begins a fresh counter for the family at that value.
    """

    reference: str
    level: int
    start: Optional[int] = None


# ---------------------------------------------------------------------------
# Inline leaves
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Run:
    text: str = ""
    bold: bool = False
    italic: bool = False
    strike: bool = False
    underline: bool = False
    font: str = ""
    color: str = ""
    size: int = 0
    shading: Optional[Shading] = None


@dataclass(frozen=True)
class ImageRun:
    data: bytes
    width: int
    height: int
    alt: str = ""


@dataclass(frozen=True)
class Hyperlink:
    url: str
    children: tuple[Union[Run, ImageRun], ...] = ()


InlineNode = Union[Run, Hyperlink, ImageRun]

# Muted color of the text shown in place of an image that could not be used.
PLACEHOLDER_COLOR = "888888"


def image_placeholder(alt: str) -> str:
    return f"[Image: {alt or 'No Alt'}]"


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Paragraph:
    children: tuple[InlineNode, ...] = ()
    heading_level: Optional[int] = None
    indent: Optional[Indent] = None
    borders: Optional[Borders] = None
    shading: Optional[Shading] = None
    numbering: Optional[NumberingRef] = None
    alignment: Optional[Alignment] = None
    spacing: Optional[Spacing] = None

    @property
    def text(self) -> str:
        """Concatenated text of the paragraph's runs."""
        parts: list[str] = []
        for child in self.children:
            if isinstance(child, Run):
                parts.append(child.text)
            elif isinstance(child, Hyperlink):
                parts.extend(run.text for run in child.children if isinstance(run, Run))
        return "".join(parts)


@dataclass(frozen=True)
class TableCell:
    paragraphs: tuple[Paragraph, ...]
    width_percent: float
    shading: Optional[Shading] = None
    borders: Optional[Borders] = None
    alignment: Alignment = Alignment.LEFT


@dataclass(frozen=True)
class TableRow:
    cells: tuple[TableCell, ...]
    is_header: bool = False


@dataclass(frozen=True)
class Table:
    rows: tuple[TableRow, ...]
    width_percent: float = 100.0


BlockNode = Union[Paragraph, Table]


# ---------------------------------------------------------------------------
# Document-level definitions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NumberingLevel:
    level: int
    format: str
    text: str
    indent_left: int
    hanging: int
    font: str
    color: str
    start: int = 1


@dataclass(frozen=True)
class NumberingDefinition:
    reference: str
    levels: tuple[NumberingLevel, ...]


@dataclass(frozen=True)
class ParagraphStyle:
    id: str
    name: str
    font: str
    size: int
    color: str
    bold: bool = False
    based_on: Optional[str] = None
    next_style: Optional[str] = None
    spacing: Optional[Spacing] = None


@dataclass(frozen=True)
class DocumentModel:
    blocks: tuple[BlockNode, ...]
    numbering: tuple[NumberingDefinition, ...] = ()
    styles: tuple[ParagraphStyle, ...] = ()
    title: str = ""
    creator: str = "md2docx"

    def numbering_for(self, reference: str) -> Optional[NumberingDefinition]:
        for definition in self.numbering:
            if definition.reference == reference:
                return definition
        return None

    def style(self, style_id: str) -> Optional[ParagraphStyle]:
        for style in self.styles:
            if style.id == style_id:
                return style
        return None


# ---------------------------------------------------------------------------
# Numbering families
# ---------------------------------------------------------------------------

BULLET_REFERENCE = "bullet"
ORDERED_REFERENCE = "ordered"

# Levels 0..MAX_LIST_LEVEL are defined for each family; deeper lists are
# clamped to the last one.
MAX_LIST_LEVEL = 2

LIST_INDENT_STEP = 720
LIST_HANGING = 360


def list_indent(level: int) -> int:
    """Left indent in twips for list level *level*."""
    return LIST_INDENT_STEP * (min(level, MAX_LIST_LEVEL) + 1)
