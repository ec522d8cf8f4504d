"""
Text scanner: walks the content tree and converts text leaves in place.

Traversal is depth-first and pre-order. The next sibling is captured
before a child is visited, since converting a leaf replaces it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from bs4 import NavigableString, PageElement

from kyujitai.engine import ConversionEngine, has_cjk
from kyujitai.page import NodeKind, Page, node_kind, set_text

logger = logging.getLogger("kyujitai-scanner")


@dataclass
class ScanStats:
    """Counts from one or more walks."""
    visited: int = 0
    skipped: int = 0
    converted: int = 0


class TextScanner:
    """Runs the idiom pre-pass and character pass over every text leaf."""

    def __init__(self, engine: ConversionEngine):
        self.engine = engine
        self.stats = ScanStats()

    def walk(self, node: PageElement | None) -> None:
        if node is None:
            return
        kind = node_kind(node)
        if kind is NodeKind.CONTAINER:
            child = node.contents[0] if node.contents else None
            while child is not None:
                next_sibling = child.next_sibling
                self.walk(child)
                child = next_sibling
        elif kind is NodeKind.TEXT:
            self.handle_text(node)

    def handle_text(self, node: NavigableString) -> NavigableString:
        """Convert one text leaf; leaves without CJK ideographs are untouched."""
        self.stats.visited += 1
        text = str(node)
        if not has_cjk(text):
            self.stats.skipped += 1
            return node
        converted = self.engine.convert_text(text)
        if converted != text:
            self.stats.converted += 1
        return set_text(node, converted)

    def scan_page(self, page: Page) -> ScanStats:
        """Initial pass over head then body."""
        body = page.body
        # A document without <body> is walked whole, head included
        if body is not page.soup:
            self.walk(page.head)
        self.walk(body)
        logger.debug(
            "Initial scan: %d text leaves, %d converted, %d without ideographs",
            self.stats.visited, self.stats.converted, self.stats.skipped,
        )
        return self.stats
