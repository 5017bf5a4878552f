"""Tests for style configuration resolution and presets."""

from __future__ import annotations

import pytest

from md2docx.style_manager import (
    DEFAULT_STYLE_CONFIG,
    PRESETS,
    StyleConfig,
    StyleManager,
    get_preset,
    resolve_style_config,
)


class TestDefaults:
    @pytest.mark.parametrize("partial", [None, {}, {"typography": {}}])
    def test_empty_partial_is_default(self, partial) -> None:
        assert resolve_style_config(partial) == DEFAULT_STYLE_CONFIG

    def test_default_values(self) -> None:
        cfg = DEFAULT_STYLE_CONFIG
        assert cfg.font.code == "Courier New"
        assert cfg.code_block.background == "F3F4F6"
        assert cfg.table.border_color == "CBD5E1"
        assert cfg.table.bold_header is True

    def test_heading_helpers_clamp(self) -> None:
        cfg = DEFAULT_STYLE_CONFIG
        assert cfg.heading_color(0) == cfg.typography.heading1
        assert cfg.heading_size(9) == cfg.sizes.heading6


class TestMerge:
    def test_single_field_override(self) -> None:
        cfg = resolve_style_config({"typography": {"heading1": "ff0000"}})
        assert cfg.typography.heading1 == "FF0000"
        assert cfg.typography.heading2 == DEFAULT_STYLE_CONFIG.typography.heading2
        assert cfg.font == DEFAULT_STYLE_CONFIG.font

    def test_camel_case_keys(self) -> None:
        cfg = resolve_style_config({"codeBlock": {"background": "#000000"}, "table": {"boldHeader": False}})
        assert cfg.code_block.background == "000000"
        assert cfg.table.bold_header is False

    def test_snake_case_keys(self) -> None:
        cfg = resolve_style_config({"inline_code": {"color": "123456"}})
        assert cfg.inline_code.color == "123456"

    @pytest.mark.parametrize("bad", ["red", "#12345", 123456, None, "GGGGGG"])
    def test_invalid_color_falls_back(self, bad) -> None:
        cfg = resolve_style_config({"typography": {"link": bad, "body": "000000"}})
        assert cfg.typography.link == DEFAULT_STYLE_CONFIG.typography.link
        assert cfg.typography.body == "000000"

    @pytest.mark.parametrize("bad", [0, -4, "12", True, 12.5, 5000])
    def test_invalid_size_falls_back(self, bad) -> None:
        cfg = resolve_style_config({"sizes": {"body": bad}})
        assert cfg.sizes.body == DEFAULT_STYLE_CONFIG.sizes.body

    def test_integral_float_size_accepted(self) -> None:
        assert resolve_style_config({"sizes": {"body": 14.0}}).sizes.body == 14

    def test_blank_font_falls_back(self) -> None:
        cfg = resolve_style_config({"font": {"body": "   ", "heading": " Georgia "}})
        assert cfg.font.body == DEFAULT_STYLE_CONFIG.font.body
        assert cfg.font.heading == "Georgia"

    def test_non_mapping_inputs_ignored(self) -> None:
        assert resolve_style_config(["not", "a", "mapping"]) == DEFAULT_STYLE_CONFIG
        assert resolve_style_config({"typography": "blue"}) == DEFAULT_STYLE_CONFIG

    def test_unknown_keys_ignored(self) -> None:
        assert resolve_style_config({"colours": {"x": 1}, "font": {"serif": "X"}}) == DEFAULT_STYLE_CONFIG

    def test_full_config_round_trip(self) -> None:
        cfg = resolve_style_config(None, preset="business")
        assert resolve_style_config(cfg) == cfg
        assert resolve_style_config(cfg.to_dict()) == cfg

    def test_idempotent(self) -> None:
        partial = {"typography": {"heading1": "abcdef"}, "sizes": {"body": "x"}}
        assert resolve_style_config(partial) == resolve_style_config(partial)


class TestToDict:
    def test_camel_case_shape(self) -> None:
        data = DEFAULT_STYLE_CONFIG.to_dict()
        assert set(data) == {
            "font", "sizes", "typography", "codeBlock", "inlineCode",
            "list", "table", "blockquote", "thematicBreak",
        }
        assert data["table"]["headerBackground"] == "F1F5F9"
        assert data["sizes"]["tableHeader"] == 11


class TestPresets:
    def test_preset_names(self) -> None:
        assert PRESETS == ["default", "academic", "business", "minimal"]

    def test_unknown_preset_raises(self) -> None:
        with pytest.raises(ValueError):
            get_preset("nonexistent")

    def test_partial_applies_over_preset(self) -> None:
        cfg = resolve_style_config({"font": {"body": "Georgia"}}, preset="academic")
        assert cfg.font.body == "Georgia"
        assert cfg.font.heading == "Times New Roman"

    @pytest.mark.parametrize("preset", PRESETS)
    def test_every_preset_resolves(self, preset: str) -> None:
        assert isinstance(resolve_style_config(preset=preset), StyleConfig)


class TestStyleManager:
    def test_default(self) -> None:
        sm = StyleManager()
        assert sm.preset == "default"
        assert sm.config == DEFAULT_STYLE_CONFIG

    def test_invalid_preset_raises(self) -> None:
        with pytest.raises(ValueError):
            StyleManager(preset="nonexistent")

    def test_overrides(self) -> None:
        sm = StyleManager({"typography": {"heading1": "#FF0000"}}, preset="business")
        assert sm.config.heading_color(1) == "FF0000"
        assert sm.config.font.body == "Arial"
