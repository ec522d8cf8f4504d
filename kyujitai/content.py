"""
Content script: wires the engine into one page load.

Start-up order:
1. Settings are loaded (nothing runs before this completes)
2. Head, then body, are scanned
3. Clipboard and form interceptors register if their switches are on
4. Placeholder attributes are converted
5. The mutation watcher subscribes, so it only ever sees later changes

Usage:
    page = Page.from_html(html)
    script = start_content_script(page, get_default_dictionary(), SettingsStore())
    page.to_html()
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from kyujitai.config import Settings
from kyujitai.dictionary import DictionaryStore
from kyujitai.engine import ConversionEngine
from kyujitai.interceptors import AttributeLocalizer, ClipboardInterceptor, FormInterceptor
from kyujitai.page import Page
from kyujitai.scanner import ScanStats, TextScanner
from kyujitai.store import SettingsStore
from kyujitai.watcher import MutationWatcher

logger = logging.getLogger("kyujitai-content")


@dataclass
class StartupReport:
    """What one start-up did (useful for the CLI and debugging)."""
    scan: ScanStats = field(default_factory=ScanStats)
    fields: int = 0
    placeholders: int = 0
    clipboard: bool = False


class ContentScript:
    """All components for one page, sharing one engine and one settings value."""

    def __init__(self, page: Page, dictionary: DictionaryStore, settings: Settings):
        self.page = page
        self.settings = settings
        self.engine = ConversionEngine(dictionary, settings)
        self.scanner = TextScanner(self.engine)
        self.watcher = MutationWatcher(self.scanner)
        self.forms = FormInterceptor(self.engine)
        self.clipboard = ClipboardInterceptor(self.engine)
        self.attributes = AttributeLocalizer(self.engine)
        self.report: StartupReport | None = None

    def start(self) -> StartupReport:
        if self.report is not None:
            return self.report
        report = StartupReport()
        report.scan = self.scanner.scan_page(self.page)
        if self.settings.convert_copy_to_new:
            self.clipboard.register(self.page)
            report.clipboard = True
        if self.settings.convert_form_to_old:
            report.fields = self.forms.register(self.page)
        report.placeholders = self.attributes.localize(self.page)
        self.watcher.observe(self.page)
        self.report = report
        logger.info(
            "Content script started: %d leaves converted, %d fields, %d placeholders",
            report.scan.converted, report.fields, report.placeholders,
        )
        return report


def start_content_script(
    page: Page,
    dictionary: DictionaryStore,
    store: SettingsStore,
) -> ContentScript | None:
    """Load settings, then start; returns None when the engine is disabled."""
    if not store.is_enabled():
        logger.info("Engine disabled; page left untouched")
        return None
    settings = store.load_settings()
    script = ContentScript(page, dictionary, settings)
    script.start()
    return script


async def start_content_script_async(
    page: Page,
    dictionary: DictionaryStore,
    store: SettingsStore,
) -> ContentScript | None:
    """Same as start_content_script, with the store read off the event loop."""
    enabled = await asyncio.to_thread(store.is_enabled)
    if not enabled:
        logger.info("Engine disabled; page left untouched")
        return None
    settings = await asyncio.to_thread(store.load_settings)
    script = ContentScript(page, dictionary, settings)
    script.start()
    return script
