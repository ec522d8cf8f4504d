"""
Tests for content script start-up and the settings store.

Tests cover:
- Start-up sequencing and switch-gated registration
- The enable switch
- The async start-up path
- Store reads, writes and failure handling
"""

import asyncio
import dataclasses
import json

import pytest
from kyujitai.config import Settings
from kyujitai.content import ContentScript, start_content_script, start_content_script_async
from kyujitai.dictionary import DictionaryStore, get_default_dictionary
from kyujitai.page import Event, Page, get_field_value, set_field_value
from kyujitai.store import SettingsStore

PAGE_HTML = (
    "<html><head><title>国語</title></head>"
    "<body><p>学校</p><input type='text' id='q' placeholder='検索'></body></html>"
)


def dictionary():
    return DictionaryStore({"国": "國", "学": "學", "検": "檢", "会": "會"})


class TestContentScript:
    """Sequenced start-up on one page."""

    def test_default_start(self):
        page = Page.from_html(PAGE_HTML)
        report = ContentScript(page, dictionary(), Settings()).start()
        assert page.soup.title.string == "國語"
        assert page.soup.p.string == "學校"
        assert page.soup.input["placeholder"] == "檢索"
        assert report.scan.converted == 2
        assert report.placeholders == 1
        assert report.fields == 0
        assert not report.clipboard

    def test_interceptors_off_by_default(self):
        page = Page.from_html(PAGE_HTML)
        ContentScript(page, dictionary(), Settings()).start()
        assert page.listener_count(page, "copy") == 0
        assert page.listener_count(page.soup.input, "input") == 0

    def test_interceptors_registered_by_switches(self):
        page = Page.from_html(PAGE_HTML)
        settings = Settings(convert_form_to_old=True, convert_copy_to_new=True)
        report = ContentScript(page, dictionary(), settings).start()
        assert report.fields == 1
        assert report.clipboard

        field = page.soup.input
        set_field_value(field, "会")
        page.dispatch(field, Event("input"))
        assert get_field_value(field) == "會"

        page.selection = "國學"
        assert page.copy().clipboard_data.get_data("text/plain") == "国学"

    def test_watcher_active_after_start(self):
        page = Page.from_html(PAGE_HTML)
        script = ContentScript(page, dictionary(), Settings())
        script.start()
        page.insert_html(page.body, "<p>会</p>")
        page.flush_mutations()
        assert page.body.find_all("p")[-1].string == "會"
        assert script.watcher.batches == 1

    def test_start_once(self):
        """A second start does not convert again."""
        page = Page.from_html(PAGE_HTML)
        script = ContentScript(page, dictionary(), Settings(convert_old_to_new=True))
        first = script.start()
        second = script.start()
        assert first is second
        assert page.soup.p.string == "學校"

    def test_settings_are_immutable(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            Settings().convert_old_to_new = True

    def test_default_dictionary_page(self):
        page = Page.from_html("<body><p>弁護士会と台風</p></body>")
        ContentScript(page, get_default_dictionary(), Settings()).start()
        assert page.soup.p.string == "辯護士會と颱風"


class TestStartFromStore:
    """Start-up driven by the persistent store."""

    def test_disabled_leaves_page_untouched(self, tmp_path):
        store = SettingsStore(tmp_path / "settings.json")
        store.write({"enabled": False})
        page = Page.from_html(PAGE_HTML)
        assert start_content_script(page, dictionary(), store) is None
        assert page.soup.p.string == "学校"

    def test_enabled_uses_stored_settings(self, tmp_path):
        store = SettingsStore(tmp_path / "settings.json")
        store.save_settings(Settings(convert_old_to_new=True))
        page = Page.from_html("<body><p>國学</p></body>")
        script = start_content_script(page, dictionary(), store)
        assert script.settings.convert_old_to_new
        assert page.soup.p.string == "国學"

    def test_async_start(self, tmp_path):
        store = SettingsStore(tmp_path / "settings.json")
        page = Page.from_html(PAGE_HTML)
        script = asyncio.run(start_content_script_async(page, dictionary(), store))
        assert script is not None
        assert page.soup.p.string == "學校"

    def test_async_disabled(self, tmp_path):
        store = SettingsStore(tmp_path / "settings.json")
        store.toggle_enabled()
        page = Page.from_html(PAGE_HTML)
        assert asyncio.run(start_content_script_async(page, dictionary(), store)) is None


class TestSettingsStore:
    """JSON-file store behaviour."""

    def test_missing_file_defaults(self, tmp_path):
        store = SettingsStore(tmp_path / "missing.json")
        assert store.load_settings() == Settings()
        assert store.is_enabled()

    def test_save_and_load(self, tmp_path):
        store = SettingsStore(tmp_path / "nested" / "settings.json")
        settings = Settings(convert_form_to_old=True, avoid_compatibility=True)
        assert store.save_settings(settings)
        assert store.load_settings() == settings
        data = json.loads(store.path.read_text(encoding="utf-8"))
        assert data["convertFormToOld"] is True
        assert data["convertCopyToNew"] is False

    def test_write_merges_keys(self, tmp_path):
        store = SettingsStore(tmp_path / "settings.json")
        store.write({"enabled": False})
        store.save_settings(Settings(convert_copy_to_new=True))
        assert not store.is_enabled()
        assert store.load_settings().convert_copy_to_new

    def test_corrupt_file_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{broken", encoding="utf-8")
        assert SettingsStore(path).load_settings() == Settings()

    def test_non_boolean_values_read_false(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"convertOldToNew": "yes", "avoidCompatibility": 1}))
        assert SettingsStore(path).load_settings() == Settings()

    def test_toggle_enabled(self, tmp_path):
        store = SettingsStore(tmp_path / "settings.json")
        assert store.toggle_enabled() is False
        assert store.toggle_enabled() is True
        assert store.is_enabled()

    def test_write_failure_reported(self, tmp_path):
        """A path that cannot be written returns False instead of raising."""
        store = SettingsStore(tmp_path)
        assert store.save_settings(Settings()) is False
