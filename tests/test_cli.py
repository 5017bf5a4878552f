"""Tests for the CLI module."""

from __future__ import annotations

import io
import json
from pathlib import Path

import docx
import pytest

from md2docx.cli import main

FIXTURE_DIR = Path(__file__).parent / "fixtures"
SAMPLE_MD = FIXTURE_DIR / "sample.md"


class TestCLIMain:
    """Test the main() entry point."""

    def test_list_styles(self, capsys):
        ret = main(["--list-styles"])
        assert ret == 0
        out = capsys.readouterr().out
        for preset in ("default", "academic", "business", "minimal"):
            assert preset in out

    def test_missing_input(self):
        with pytest.raises(SystemExit):
            main([])

    def test_unknown_style_rejected(self):
        with pytest.raises(SystemExit):
            main([str(SAMPLE_MD), "-s", "fancy"])

    def test_file_not_found(self, capsys):
        ret = main(["nonexistent.md"])
        assert ret == 1
        assert "not found" in capsys.readouterr().err

    def test_convert_sample(self, tmp_path, capsys):
        out = tmp_path / "output.docx"
        ret = main([str(SAMPLE_MD), "-o", str(out)])
        assert ret == 0
        assert out.stat().st_size > 0
        assert "Converted:" in capsys.readouterr().out

    def test_verbose_logs_to_stderr(self, tmp_path, capsys):
        out = tmp_path / "output.docx"
        ret = main([str(SAMPLE_MD), "-o", str(out), "-v"])
        assert ret == 0
        err = capsys.readouterr().err
        assert "Input:" in err
        assert "bytes written" in err

    def test_default_output_name(self, tmp_path):
        md_file = tmp_path / "myfile.md"
        md_file.write_text("# Test", encoding="utf-8")
        assert main([str(md_file)]) == 0
        assert (tmp_path / "myfile.docx").exists()

    def test_style_presets(self, tmp_path):
        for preset in ["default", "academic", "business", "minimal"]:
            out = tmp_path / f"output_{preset}.docx"
            ret = main([str(SAMPLE_MD), "-o", str(out), "-s", preset])
            assert ret == 0, f"Failed for preset: {preset}"
            assert out.exists()

    def test_config_file(self, tmp_path):
        config = tmp_path / "style.json"
        config.write_text(json.dumps({"typography": {"heading1": "#00AA00"}}), encoding="utf-8")
        out = tmp_path / "styled.docx"
        ret = main([str(SAMPLE_MD), "-o", str(out), "-c", str(config)])
        assert ret == 0
        doc = docx.Document(io.BytesIO(out.read_bytes()))
        assert str(doc.styles["Heading 1"].font.color.rgb) == "00AA00"

    def test_bad_config_file(self, tmp_path, capsys):
        config = tmp_path / "style.json"
        config.write_text("{not json", encoding="utf-8")
        ret = main([str(SAMPLE_MD), "-o", str(tmp_path / "x.docx"), "-c", str(config)])
        assert ret == 1
        assert "style config" in capsys.readouterr().err

    def test_wrong_encoding(self, tmp_path, capsys):
        md_file = tmp_path / "latin.md"
        md_file.write_bytes("caf\xe9".encode("latin-1"))
        ret = main([str(md_file), "-e", "utf-8"])
        assert ret == 1
        assert "Error:" in capsys.readouterr().err
