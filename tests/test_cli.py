"""
Tests for the command-line interface.
"""

import json

import pytest
from typer.testing import CliRunner

from kyujitai import __version__
from kyujitai.cli import app

runner = CliRunner()


@pytest.fixture
def settings_file(tmp_path):
    return tmp_path / "settings.json"


class TestConvert:

    def test_convert_text(self, settings_file):
        result = runner.invoke(app, ["convert", "--text", "国語の学習", "--settings-file", str(settings_file)])
        assert result.exit_code == 0
        assert "國語の學習" in result.output

    def test_convert_text_old_to_new(self, settings_file):
        result = runner.invoke(
            app, ["convert", "--old-to-new", "--text", "國語", "--settings-file", str(settings_file)]
        )
        assert result.exit_code == 0
        assert "国語" in result.output

    def test_convert_uses_stored_settings(self, settings_file):
        settings_file.write_text(json.dumps({"convertOldToNew": True}), encoding="utf-8")
        result = runner.invoke(app, ["convert", "--text", "國", "--settings-file", str(settings_file)])
        assert "国" in result.output

    def test_convert_requires_input(self):
        result = runner.invoke(app, ["convert"])
        assert result.exit_code == 1

    def test_convert_empty_text(self, tmp_path, settings_file):
        """An empty --text is valid input and converts to an empty string."""
        output = tmp_path / "out.txt"
        result = runner.invoke(app, [
            "convert", "--text", "", "--output", str(output),
            "--settings-file", str(settings_file),
        ])
        assert result.exit_code == 0
        assert output.read_text(encoding="utf-8") == ""

    def test_convert_html_file(self, tmp_path, settings_file):
        source = tmp_path / "page.html"
        source.write_text("<html><body><p>弁護士会</p></body></html>", encoding="utf-8")
        output = tmp_path / "out.html"
        result = runner.invoke(app, [
            "convert", "--input", str(source), "--output", str(output),
            "--settings-file", str(settings_file),
        ])
        assert result.exit_code == 0
        assert "<p>辯護士會</p>" in output.read_text(encoding="utf-8")

    def test_convert_text_file(self, tmp_path, settings_file):
        source = tmp_path / "note.txt"
        source.write_text("台風の予報", encoding="utf-8")
        result = runner.invoke(app, ["convert", "--input", str(source), "--settings-file", str(settings_file)])
        assert result.exit_code == 0
        assert "颱風の豫報" in result.output

    def test_missing_input_file(self, tmp_path, settings_file):
        result = runner.invoke(app, [
            "convert", "--input", str(tmp_path / "nope.txt"), "--settings-file", str(settings_file),
        ])
        assert result.exit_code == 1

    def test_custom_dictionary(self, tmp_path, settings_file):
        bundle = tmp_path / "bundle.json"
        bundle.write_text(json.dumps({"characters": {"辨": "弁"}}, ensure_ascii=False), encoding="utf-8")
        result = runner.invoke(app, [
            "convert", "--text", "辨護士", "--dictionary", str(bundle),
            "--settings-file", str(settings_file),
        ])
        assert result.exit_code == 0
        assert "弁護士" in result.output

    def test_bad_dictionary(self, tmp_path, settings_file):
        bundle = tmp_path / "bundle.json"
        bundle.write_text("{oops", encoding="utf-8")
        result = runner.invoke(app, [
            "convert", "--text", "国", "--dictionary", str(bundle),
            "--settings-file", str(settings_file),
        ])
        assert result.exit_code == 1


class TestOtherCommands:

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_revert(self):
        result = runner.invoke(app, ["revert", "--text", "國學"])
        assert result.exit_code == 0
        assert "国学" in result.output

    def test_lookup(self):
        result = runner.invoke(app, ["lookup", "国"])
        assert result.exit_code == 0
        assert "國" in result.output

    def test_dictionary_search(self):
        result = runner.invoke(app, ["dictionary", "--search", "弁護士"])
        assert result.exit_code == 0
        assert "辯護士" in result.output

    def test_dictionary_summary(self):
        result = runner.invoke(app, ["dictionary"])
        assert result.exit_code == 0
        assert "idioms" in result.output

    def test_settings_set(self, settings_file):
        result = runner.invoke(app, [
            "settings", "--set", "avoidCompatibility=true", "--settings-file", str(settings_file),
        ])
        assert result.exit_code == 0
        data = json.loads(settings_file.read_text(encoding="utf-8"))
        assert data["avoidCompatibility"] is True
        assert data["convertOldToNew"] is False

    def test_settings_unknown_key(self, settings_file):
        result = runner.invoke(app, ["settings", "--set", "bogus=true", "--settings-file", str(settings_file)])
        assert result.exit_code == 1

    def test_settings_bad_value(self, settings_file):
        result = runner.invoke(app, [
            "settings", "--set", "convertOldToNew=maybe", "--settings-file", str(settings_file),
        ])
        assert result.exit_code == 1

    def test_toggle(self, settings_file):
        result = runner.invoke(app, ["toggle", "--settings-file", str(settings_file)])
        assert result.exit_code == 0
        assert "disabled" in result.output
        data = json.loads(settings_file.read_text(encoding="utf-8"))
        assert data["enabled"] is False
