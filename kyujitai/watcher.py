"""
Mutation watcher: re-runs the text scanner on nodes added after start-up.
"""

from __future__ import annotations

import logging

from kyujitai.page import MutationRecord, Page
from kyujitai.scanner import TextScanner

logger = logging.getLogger("kyujitai-watcher")


class MutationWatcher:
    """Subscribes once to the body's structural changes for the page's lifetime."""

    def __init__(self, scanner: TextScanner):
        self.scanner = scanner
        self.batches = 0
        self.active = False

    def observe(self, page: Page) -> None:
        if self.active:
            return
        page.subscribe_mutations(self.handle_batch)
        self.active = True

    def handle_batch(self, records: list[MutationRecord]) -> None:
        self.batches += 1
        added = 0
        for record in records:
            for node in record.added_nodes:
                self.scanner.walk(node)
                added += 1
        logger.debug("Mutation batch %d: scanned %d added nodes", self.batches, added)
