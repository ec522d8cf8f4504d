"""
Interceptors for editable fields, copy actions and placeholder attributes.

FormInterceptor:
    Converts typed text to old forms, waiting for IME composition to end.
ClipboardInterceptor:
    Copies the selection back in new forms.
AttributeLocalizer:
    Converts placeholder text once at start-up.
"""

from __future__ import annotations

import logging
from enum import Enum

from bs4 import Tag

from kyujitai.engine import ConversionEngine
from kyujitai.page import CopyEvent, Event, Page, get_field_value, set_field_value

logger = logging.getLogger("kyujitai-interceptors")

TEXT_FIELD_SELECTOR = "input[type='text'], textarea"
PLACEHOLDER_SELECTOR = "[placeholder]"


class CompositionState(Enum):
    IDLE = "idle"
    COMPOSING = "composing"


class FieldWatcher:
    """Composition state machine for one editable field.

    IDLE -> COMPOSING on compositionstart
    COMPOSING -> IDLE on compositionend, converting the whole value
    input events convert only while IDLE
    """

    def __init__(self, element: Tag, engine: ConversionEngine):
        self.element = element
        self.engine = engine
        self.state = CompositionState.IDLE

    def on_composition_start(self, event: Event) -> None:
        self.state = CompositionState.COMPOSING

    def on_composition_end(self, event: Event) -> None:
        self.state = CompositionState.IDLE
        self.convert()

    def on_input(self, event: Event) -> None:
        if self.state is CompositionState.IDLE:
            self.convert()

    def convert(self) -> None:
        value = get_field_value(self.element)
        converted = self.engine.convert_field_value(value)
        if converted != value:
            set_field_value(self.element, converted)


class FormInterceptor:
    """Attaches a FieldWatcher to every text field present at start-up."""

    def __init__(self, engine: ConversionEngine):
        self.engine = engine
        self.fields: list[FieldWatcher] = []

    def register(self, page: Page) -> int:
        for element in page.select(TEXT_FIELD_SELECTOR):
            watcher = FieldWatcher(element, self.engine)
            page.add_event_listener(element, "compositionstart", watcher.on_composition_start)
            page.add_event_listener(element, "compositionend", watcher.on_composition_end)
            page.add_event_listener(element, "input", watcher.on_input)
            self.fields.append(watcher)
        logger.debug("Form interceptor watching %d fields", len(self.fields))
        return len(self.fields)


class ClipboardInterceptor:
    """Replaces the plain-text copy payload with new forms."""

    def __init__(self, engine: ConversionEngine):
        self.engine = engine

    def register(self, page: Page) -> None:
        def on_copy(event: CopyEvent) -> None:
            converted = self.engine.revert_to_new(page.selection)
            event.clipboard_data.set_data("text/plain", converted)
            event.prevent_default()

        page.add_event_listener(page, "copy", on_copy)
        logger.debug("Clipboard interceptor registered")


class AttributeLocalizer:
    """Converts placeholder attributes once; later elements are not revisited."""

    attribute = "placeholder"

    def __init__(self, engine: ConversionEngine):
        self.engine = engine

    def localize(self, page: Page) -> int:
        changed = 0
        for element in page.select(PLACEHOLDER_SELECTOR):
            value = element.get(self.attribute, "")
            converted = self.engine.convert_field_value(value)
            if converted != value:
                element[self.attribute] = converted
                changed += 1
        logger.debug("Localized %d placeholder attributes", changed)
        return changed
