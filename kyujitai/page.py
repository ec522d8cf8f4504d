"""
Content tree and event surface over an HTML document.

The conversion components only see this module's surface:
- Node classification (container, text leaf, or neither) following the DOM
- Structural mutations that queue "added node" notifications
- Per-target event listeners with synchronous dispatch
- The current text selection and a plain-text clipboard payload

The tree itself is a BeautifulSoup document parsed with ``html.parser``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from bs4 import BeautifulSoup, NavigableString, PageElement, Tag
from bs4.element import PreformattedString

logger = logging.getLogger("kyujitai-page")

EventHandler = Callable[["Event"], None]


class NodeKind(Enum):
    """How the scanner treats a node."""
    CONTAINER = "container"
    TEXT = "text"
    OTHER = "other"


def node_kind(node: PageElement) -> NodeKind:
    """Classify a node: tags and documents contain, plain strings are text.

    Comments, CDATA, doctypes, declarations and processing instructions
    are neither.
    """
    if isinstance(node, Tag):
        return NodeKind.CONTAINER
    if isinstance(node, NavigableString) and not isinstance(node, PreformattedString):
        return NodeKind.TEXT
    return NodeKind.OTHER


def set_text(node: NavigableString, text: str) -> NavigableString:
    """Replace a text leaf's content in place; returns the new leaf."""
    if text == str(node):
        return node
    replacement = type(node)(text)
    if node.parent is None:
        # Detached leaves have no tree position to write back into
        logger.debug("Skipping write-back for detached text node")
        return replacement
    node.replace_with(replacement)
    return replacement


# ============================================================================
# Events
# ============================================================================

@dataclass
class Event:
    """A dispatched event.

    Attributes:
        type: Event name (e.g. "input", "compositionend", "copy")
        target: Element or page the event was dispatched on
        data: Optional payload (composition text, etc.)
    """
    type: str
    target: Any = None
    data: str | None = None
    default_prevented: bool = False

    def prevent_default(self) -> None:
        self.default_prevented = True


@dataclass
class DataTransfer:
    """Clipboard payload keyed by MIME type."""
    items: dict[str, str] = field(default_factory=dict)

    def set_data(self, mime: str, text: str) -> None:
        self.items[mime] = text

    def get_data(self, mime: str) -> str:
        return self.items.get(mime, "")


@dataclass
class CopyEvent(Event):
    """A copy action carrying the clipboard payload being built."""
    clipboard_data: DataTransfer = field(default_factory=DataTransfer)


@dataclass
class MutationRecord:
    """One structural change: nodes added under ``target``."""
    target: Tag
    added_nodes: list[PageElement] = field(default_factory=list)


MutationCallback = Callable[[list[MutationRecord]], None]


# ============================================================================
# Page
# ============================================================================

class Page:
    """An HTML document plus the host services the engine consumes.

    Usage:
        page = Page.from_html("<body><p>国語</p></body>")
        page.subscribe_mutations(lambda batch: ...)
        page.insert_html(page.body, "<p>学校</p>")
        page.flush_mutations()
    """

    def __init__(self, soup: BeautifulSoup):
        self.soup = soup
        self.selection = ""
        self._listeners: dict[tuple[int, str], list[EventHandler]] = {}
        # Keeps listener targets alive so their ids stay unique
        self._targets: dict[int, Any] = {}
        self._subscribers: list[MutationCallback] = []
        self._pending: list[MutationRecord] = []

    @classmethod
    def from_html(cls, markup: str) -> "Page":
        return cls(BeautifulSoup(markup, "html.parser"))

    @property
    def head(self) -> Tag | None:
        return self.soup.head

    @property
    def body(self) -> Tag:
        """The body element; a fragment without one uses the whole document."""
        return self.soup.body or self.soup

    def select(self, selector: str) -> list[Tag]:
        return self.soup.select(selector)

    def to_html(self) -> str:
        return str(self.soup)

    # ------------------------------------------------------------------
    # Structural mutations
    # ------------------------------------------------------------------

    def _in_body(self, node: Tag) -> bool:
        body = self.body
        return node is body or any(parent is body for parent in node.parents)

    def _record(self, parent: Tag, nodes: list[PageElement]) -> None:
        if nodes and self._subscribers and self._in_body(parent):
            self._pending.append(MutationRecord(parent, nodes))

    def append_child(self, parent: Tag, node: PageElement | str) -> PageElement:
        """Append a node (or a plain string) and queue a notification."""
        if isinstance(node, str) and not isinstance(node, NavigableString):
            node = NavigableString(node)
        parent.append(node)
        self._record(parent, [node])
        return node

    def insert_html(self, parent: Tag, markup: str) -> list[PageElement]:
        """Parse markup and append its top-level nodes as one notification."""
        fragment = BeautifulSoup(markup, "html.parser")
        nodes = list(fragment.contents)
        for node in nodes:
            parent.append(node.extract())
        self._record(parent, nodes)
        return nodes

    def subscribe_mutations(self, callback: MutationCallback) -> None:
        """Receive batches of additions in the body subtree."""
        self._subscribers.append(callback)

    def flush_mutations(self) -> int:
        """Deliver the pending batch to every subscriber; returns its size."""
        batch, self._pending = self._pending, []
        if batch:
            for callback in list(self._subscribers):
                callback(batch)
        return len(batch)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def add_event_listener(self, target: Any, event_type: str, handler: EventHandler) -> None:
        key = (id(target), event_type)
        self._targets[id(target)] = target
        self._listeners.setdefault(key, []).append(handler)

    def listener_count(self, target: Any, event_type: str) -> int:
        return len(self._listeners.get((id(target), event_type), []))

    def dispatch(self, target: Any, event: Event) -> Event:
        """Run every handler for ``event.type`` on ``target`` synchronously."""
        event.target = target
        for handler in list(self._listeners.get((id(target), event.type), [])):
            handler(event)
        return event

    def copy(self) -> CopyEvent:
        """Simulate a copy action on the current selection.

        Without a handler that prevents the default, the payload is the
        selection as-is.
        """
        event = self.dispatch(self, CopyEvent("copy"))
        if not event.default_prevented:
            event.clipboard_data.set_data("text/plain", self.selection)
        return event


# ============================================================================
# Form fields
# ============================================================================

def get_field_value(element: Tag) -> str:
    if element.name == "textarea":
        return element.get_text()
    return element.get("value", "")


def set_field_value(element: Tag, value: str) -> None:
    if element.name == "textarea":
        element.string = value
    else:
        element["value"] = value
