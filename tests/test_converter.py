"""Integration tests for the Converter orchestrator and ``generate``."""

from __future__ import annotations

import base64
import io
import zipfile
from pathlib import Path

import docx
import httpx
import pytest

from md2docx import generate
from md2docx.converter import Converter
from md2docx.exceptions import GenerationError, ParserError
from md2docx.model import Paragraph, Table
from md2docx.style_manager import StyleManager

FIXTURE_DIR = Path(__file__).parent / "fixtures"
SAMPLE_MD = FIXTURE_DIR / "sample.md"

PNG = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)
TRUNCATED_PNG = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"


def reopen(data: bytes):
    return docx.Document(io.BytesIO(data))


class TestConverterInit:
    def test_default_preset(self):
        assert Converter().style_manager.preset == "default"

    def test_custom_preset(self):
        assert Converter(preset="academic").style_manager.preset == "academic"

    def test_invalid_preset_raises(self):
        with pytest.raises(ValueError):
            Converter(preset="nonexistent")

    def test_all_presets_valid(self):
        for preset in StyleManager.PRESETS:
            assert Converter(preset=preset).style_manager.preset == preset


class TestBuildModel:
    def test_top_level_blocks(self):
        model = Converter().build_model("# T\n\ntext\n\n| a |\n|---|\n| b |\n", title="x")
        assert [type(b) for b in model.blocks] == [Paragraph, Paragraph, Table]
        assert model.title == "x"

    def test_missing_image_placeholder(self):
        model = Converter().build_model("![chart](https://example.com/c.png)")
        assert model.blocks[0].text == "[Image: chart]"


class TestConvertText:
    def test_output_is_zip(self):
        data = Converter().convert_text("Some text")
        assert zipfile.is_zipfile(io.BytesIO(data))

    def test_zip_contains_required_parts(self):
        data = Converter().convert_text("# Test\n\n- item")
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            names = zf.namelist()
        assert "[Content_Types].xml" in names
        assert "word/document.xml" in names
        assert "word/styles.xml" in names
        assert "word/numbering.xml" in names

    def test_text_preserved(self):
        doc = reopen(Converter().convert_text("# 한글 제목\n\nÜnïcödé body."))
        texts = [p.text for p in doc.paragraphs]
        assert "한글 제목" in texts
        assert "Ünïcödé body." in texts

    def test_title_from_output_name(self):
        doc = reopen(Converter().convert_text("x", "report.docx"))
        assert doc.core_properties.title == "report"

    def test_style_override_applied(self):
        data = Converter({"typography": {"heading1": "123456"}}).convert_text("# H")
        assert str(reopen(data).styles["Heading 1"].font.color.rgb) == "123456"

    def test_empty_input(self):
        assert reopen(Converter().convert_text("")).paragraphs == []


class TestConvertFile:
    def test_convert_sample(self, tmp_path: Path):
        out = tmp_path / "nested" / "sample.docx"
        Converter().convert_file(SAMPLE_MD, out)
        doc = reopen(out.read_bytes())
        assert len(doc.tables) == 1
        assert len(doc.inline_shapes) == 1
        assert doc.core_properties.title == "sample"

    def test_encoding(self, tmp_path: Path):
        src = tmp_path / "latin.md"
        src.write_bytes("café".encode("latin-1"))
        out = tmp_path / "latin.docx"
        Converter().convert_file(src, out, encoding="latin-1")
        assert reopen(out.read_bytes()).paragraphs[0].text == "café"


@pytest.mark.asyncio
class TestGenerate:

    async def test_generate_with_fetched_image(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, content=PNG))
        async with httpx.AsyncClient(transport=transport) as client:
            data = await generate("![a](https://img.test/a.png)", "img.docx", client=client)
        assert len(reopen(data).inline_shapes) == 1

    async def test_generate_unreachable_image(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(404))
        async with httpx.AsyncClient(transport=transport) as client:
            data = await generate("![a](https://img.test/a.png)", client=client)
        assert reopen(data).paragraphs[0].text == "[Image: a]"

    async def test_generate_truncated_image_placeholder(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, content=TRUNCATED_PNG))
        async with httpx.AsyncClient(transport=transport) as client:
            data = await generate("![t](https://e.test/a.png)", client=client)
        doc = reopen(data)
        assert doc.paragraphs[0].text == "[Image: t]"
        assert len(doc.inline_shapes) == 0

    async def test_generate_linked_image_inside_hyperlink(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, content=PNG))
        async with httpx.AsyncClient(transport=transport) as client:
            data = await generate("[![a](https://img.test/a.png)](https://site.test)", client=client)
        p = reopen(data).paragraphs[0]._p
        assert len(p.xpath("./w:hyperlink/w:r/w:drawing")) == 1

    async def test_generate_bad_config_never_raises(self):
        data = await generate("# H", style_config={"sizes": {"heading1": "huge"}, "font": 3})
        assert reopen(data).paragraphs[0].text == "H"

    async def test_parser_failure_is_generation_error(self, monkeypatch):
        converter = Converter()

        def boom(_text):
            raise RuntimeError("boom")

        monkeypatch.setattr(converter.parser, "parse", boom)
        with pytest.raises(GenerationError) as excinfo:
            await converter.generate("x")
        assert isinstance(excinfo.value, ParserError)
