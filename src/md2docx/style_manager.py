"""DOCX style configuration and preset manager.

Holds the immutable :class:`StyleConfig` consumed by every transformer,
the built-in presets (default, academic, business, minimal) and the
field-by-field resolver that merges a partial, possibly malformed user
configuration over them.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from typing import Any, Optional

from loguru import logger


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------

def _font(default: str) -> Any:
    return field(default=default, metadata={"kind": "font"})


def _color(default: str) -> Any:
    return field(default=default, metadata={"kind": "color"})


def _size(default: int) -> Any:
    return field(default=default, metadata={"kind": "size"})


def _flag(default: bool) -> Any:
    return field(default=default, metadata={"kind": "flag"})


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FontConfig:
    heading: str = _font("Calibri")
    body: str = _font("Calibri")
    code: str = _font("Courier New")


@dataclass(frozen=True)
class SizeConfig:
    """Font sizes in points."""

    heading1: int = _size(24)
    heading2: int = _size(20)
    heading3: int = _size(16)
    heading4: int = _size(14)
    heading5: int = _size(12)
    heading6: int = _size(11)
    body: int = _size(11)
    code: int = _size(10)
    table_header: int = _size(11)
    table_body: int = _size(10)


@dataclass(frozen=True)
class TypographyConfig:
    heading1: str = _color("111827")
    heading2: str = _color("1F2937")
    heading3: str = _color("374151")
    heading4: str = _color("374151")
    heading5: str = _color("4B5563")
    heading6: str = _color("4B5563")
    body: str = _color("334155")
    link: str = _color("2563EB")


@dataclass(frozen=True)
class CodeBlockConfig:
    background: str = _color("F3F4F6")
    text: str = _color("1F2937")


@dataclass(frozen=True)
class InlineCodeConfig:
    color: str = _color("DB2777")
    background: str = _color("F3F4F6")


@dataclass(frozen=True)
class ListConfig:
    marker_color: str = _color("64748B")


@dataclass(frozen=True)
class TableConfig:
    header_background: str = _color("F1F5F9")
    header_text: str = _color("0F172A")
    border_color: str = _color("CBD5E1")
    bold_header: bool = _flag(True)


@dataclass(frozen=True)
class BlockquoteConfig:
    background: str = _color("F8FAFC")
    border: str = _color("3B82F6")
    text_color: str = _color("475569")


@dataclass(frozen=True)
class ThematicBreakConfig:
    color: str = _color("CBD5E1")


@dataclass(frozen=True)
class StyleConfig:
    """Complete, immutable visual configuration grouped by role."""

    font: FontConfig = field(default_factory=FontConfig)
    sizes: SizeConfig = field(default_factory=SizeConfig)
    typography: TypographyConfig = field(default_factory=TypographyConfig)
    code_block: CodeBlockConfig = field(default_factory=CodeBlockConfig)
    inline_code: InlineCodeConfig = field(default_factory=InlineCodeConfig)
    list: ListConfig = field(default_factory=ListConfig)
    table: TableConfig = field(default_factory=TableConfig)
    blockquote: BlockquoteConfig = field(default_factory=BlockquoteConfig)
    thematic_break: ThematicBreakConfig = field(default_factory=ThematicBreakConfig)

    # -- convenience helpers ------------------------------------------------

    def heading_color(self, level: int) -> str:
        level = max(1, min(6, level))
        return getattr(self.typography, f"heading{level}")

    def heading_size(self, level: int) -> int:
        level = max(1, min(6, level))
        return getattr(self.sizes, f"heading{level}")

    def to_dict(self) -> dict[str, dict[str, Any]]:
        """Return the camelCase shape shared with settings editors."""
        return {
            _camel(group.name): {
                _camel(leaf.name): getattr(getattr(self, group.name), leaf.name)
                for leaf in fields(getattr(self, group.name))
            }
            for group in fields(self)
        }


DEFAULT_STYLE_CONFIG = StyleConfig()


# ---------------------------------------------------------------------------
# Leaf validation
# ---------------------------------------------------------------------------

_MISSING = object()
_HEX_RE = re.compile(r"^#?([0-9A-Fa-f]{6})$")

# Word rejects run sizes above 1638pt.
_MAX_SIZE_PT = 1638


def _coerce_color(value: Any) -> Any:
    if isinstance(value, str):
        match = _HEX_RE.match(value.strip())
        if match:
            return match.group(1).upper()
    return _MISSING


def _coerce_size(value: Any) -> Any:
    if isinstance(value, bool):
        return _MISSING
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int) and 0 < value <= _MAX_SIZE_PT:
        return value
    return _MISSING


def _coerce_font(value: Any) -> Any:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return _MISSING


def _coerce_flag(value: Any) -> Any:
    return value if isinstance(value, bool) else _MISSING


_COERCERS = {
    "color": _coerce_color,
    "size": _coerce_size,
    "font": _coerce_font,
    "flag": _coerce_flag,
}


def _lookup(source: Mapping, name: str) -> Any:
    if name in source:
        return source[name]
    return source.get(_camel(name), _MISSING)


# ---------------------------------------------------------------------------
# Merge
# ---------------------------------------------------------------------------

def _merge_group(base: Any, raw: Mapping, section: str) -> Any:
    changes: dict[str, Any] = {}
    for leaf in fields(base):
        value = _lookup(raw, leaf.name)
        if value is _MISSING:
            continue
        coerced = _COERCERS[leaf.metadata["kind"]](value)
        if coerced is _MISSING:
            logger.debug(
                f"Ignoring invalid style value {section}.{leaf.name}={value!r}; "
                f"using {getattr(base, leaf.name)!r}"
            )
            continue
        changes[leaf.name] = coerced
    return replace(base, **changes) if changes else base


def _merge(base: StyleConfig, partial: Any) -> StyleConfig:
    if partial is None:
        return base
    if isinstance(partial, StyleConfig):
        partial = partial.to_dict()
    if not isinstance(partial, Mapping):
        logger.debug(f"Ignoring style configuration of type {type(partial).__name__}")
        return base

    changes: dict[str, Any] = {}
    for group in fields(base):
        raw = _lookup(partial, group.name)
        if raw is _MISSING:
            continue
        if not isinstance(raw, Mapping):
            logger.debug(f"Ignoring style section {group.name!r}: expected a mapping")
            continue
        changes[group.name] = _merge_group(getattr(base, group.name), raw, group.name)
    return replace(base, **changes) if changes else base


# ---------------------------------------------------------------------------
# Preset definitions (partial configurations over the defaults)
# ---------------------------------------------------------------------------

_PRESETS: dict[str, dict[str, Any]] = {
    "default": {},
    "academic": {
        "font": {"heading": "Times New Roman", "body": "Times New Roman", "code": "Courier New"},
        "sizes": {"heading1": 22, "heading2": 18, "heading3": 15, "body": 12, "code": 10},
        "typography": {
            "heading1": "000000",
            "heading2": "000000",
            "heading3": "1A1A1A",
            "body": "1A1A1A",
            "link": "1F4E79",
        },
        "table": {"headerBackground": "E7E6E6", "borderColor": "808080"},
        "blockquote": {"border": "808080", "textColor": "404040"},
    },
    "business": {
        "font": {"heading": "Arial", "body": "Arial", "code": "Consolas"},
        "sizes": {"heading1": 20, "heading2": 16, "heading3": 13, "body": 10, "code": 9},
        "typography": {"heading1": "1F3864", "heading2": "2F5496", "heading3": "2F5496", "link": "0563C1"},
        "table": {"headerBackground": "1F3864", "headerText": "FFFFFF", "borderColor": "8EAADB"},
        "blockquote": {"background": "EDF2F9", "border": "2F5496"},
        "list": {"markerColor": "2F5496"},
    },
    "minimal": {
        "font": {"heading": "Helvetica Neue", "body": "Helvetica Neue", "code": "Menlo"},
        "sizes": {"heading1": 18, "heading2": 15, "heading3": 13, "heading4": 11, "body": 10, "code": 9},
        "typography": {h: "000000" for h in ("heading1", "heading2", "heading3", "heading4", "heading5", "heading6")},
        "codeBlock": {"background": "FAFAFA"},
        "inlineCode": {"color": "333333", "background": "F0F0F0"},
        "table": {"headerBackground": "FFFFFF", "boldHeader": True, "borderColor": "DDDDDD"},
        "blockquote": {"background": "FFFFFF", "border": "DDDDDD", "textColor": "666666"},
        "thematicBreak": {"color": "DDDDDD"},
    },
}

PRESETS = list(_PRESETS.keys())


def get_preset(name: str) -> dict[str, Any]:
    """Return the partial configuration of preset *name*."""
    if name not in _PRESETS:
        raise ValueError(
            f"Unknown preset {name!r}. Choose from: {', '.join(_PRESETS)}"
        )
    return _PRESETS[name]


def resolve_style_config(partial: Any = None, preset: Optional[str] = None) -> StyleConfig:
    """Merge *partial* over *preset* over the defaults, field by field.

    Missing or malformed values fall back to the preset/default value for
    that single field; this function never raises for bad configuration
    (only for an unknown *preset* name).
    """
    base = DEFAULT_STYLE_CONFIG
    if preset:
        base = _merge(base, get_preset(preset))
    return _merge(base, partial)


# ---------------------------------------------------------------------------
# StyleManager
# ---------------------------------------------------------------------------

class StyleManager:
    """Resolve and hold the style configuration for one conversion.

    Usage::

        sm = StyleManager({"typography": {"heading1": "#FF0000"}}, preset="business")
        sm.config.heading_color(1)   # 'FF0000'
    """

    PRESETS = PRESETS

    def __init__(self, style_config: Any = None, preset: str = "default") -> None:
        get_preset(preset)
        self.preset = preset
        self.config: StyleConfig = resolve_style_config(style_config, preset=preset)
