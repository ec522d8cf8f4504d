"""
Conversion engine: per-character decisions and the idiom pre-pass.

Steps for a text segment:
1. Idiom pre-pass: whole-string replacement of dictionary idioms,
   longest idiom first
2. Character pass: each character not written by an idiom is decided
   from itself and its neighbours in the idiom-substituted text

Two directions, chosen by ``Settings.convert_old_to_new``:
- Default: conditional rules, then the character map (new -> old)
- Toggle: reverse map first (old -> new), then the character map

With ``avoid_compatibility`` set, any candidate that falls in a
compatibility or extension ideograph block is discarded.
"""

from __future__ import annotations

import re

from kyujitai.config import Settings
from kyujitai.dictionary import DictionaryStore

# Code point ranges never emitted when avoid_compatibility is on
SUPPRESSED_RANGES = (
    (0x3400, 0x4DBF),    # CJK Unified Ideographs Extension A
    (0x20000, 0x2A6DF),  # Extension B
    (0x2A700, 0x2B73F),  # Extension C
    (0x2B740, 0x2B81F),  # Extension D
    (0x2B820, 0x2CEAF),  # Extension E
    (0xF900, 0xFAFF),    # CJK Compatibility Ideographs
)

# Text without a character in this block is never touched
CJK_UNIFIED_PATTERN = re.compile(r"[\u4e00-\u9fff]")


def is_suppressed(char: str) -> bool:
    """True if the character's code point lies in a suppressed block."""
    if not char:
        return False
    cp = ord(char[0])
    return any(lo <= cp <= hi for lo, hi in SUPPRESSED_RANGES)


def has_cjk(text: str) -> bool:
    return CJK_UNIFIED_PATTERN.search(text) is not None


class ConversionEngine:
    """Dictionary-driven glyph conversion bound to one page's settings.

    Usage:
        engine = ConversionEngine(get_default_dictionary(), Settings())
        engine.convert_text("弁護士会")   # "辯護士會"
    """

    def __init__(self, dictionary: DictionaryStore, settings: Settings | None = None):
        self.dictionary = dictionary
        self.settings = settings or Settings()

    def _filter(self, char: str, candidate: str) -> str:
        if self.settings.avoid_compatibility and is_suppressed(candidate):
            return char
        return candidate

    def decide(self, char: str, prev: str = "", next_: str = "") -> str:
        """Character to emit for ``char`` between ``prev`` and ``next_``."""
        if self.settings.convert_old_to_new:
            return self._decide_toggle(char)
        return self.decide_to_old(char, prev, next_)

    def _decide_toggle(self, char: str) -> str:
        swapped = self.dictionary.to_new(char)
        if swapped is None:
            swapped = self.dictionary.to_old(char)
        if swapped is None:
            return char
        return self._filter(char, swapped)

    def decide_to_old(self, char: str, prev: str = "", next_: str = "") -> str:
        """New -> old decision, ignoring the toggle switch."""
        for rule in self.dictionary.rules_for(char):
            if rule.matches(prev, next_):
                return self._filter(char, rule.replacement)
        old = self.dictionary.to_old(char)
        if old is None:
            return char
        return self._filter(char, old)

    def _idiom_segments(self, text: str) -> list[tuple[str, bool]]:
        """Split ``text`` into pieces, flagging those produced by an idiom.

        Idioms are tried longest first. An idiom's output is never searched
        again by a later idiom.
        """
        segments = [(text, False)]
        for source, replacement in self.dictionary.idiom_items():
            # Only the leading code point of the replacement is checked
            if self.settings.avoid_compatibility and is_suppressed(replacement):
                continue
            expanded = []
            for piece, from_idiom in segments:
                if from_idiom or source not in piece:
                    expanded.append((piece, from_idiom))
                    continue
                for i, part in enumerate(piece.split(source)):
                    if i:
                        expanded.append((replacement, True))
                    if part:
                        expanded.append((part, False))
            segments = expanded
        return segments

    def apply_idioms(self, text: str) -> str:
        """Replace every dictionary idiom in ``text``, longest idioms first."""
        return "".join(piece for piece, _ in self._idiom_segments(text))

    def _convert_chars(self, text: str, decide, keep=None) -> str:
        last = len(text) - 1
        return "".join(
            ch if keep and keep[i] else decide(
                ch,
                text[i - 1] if i > 0 else "",
                text[i + 1] if i < last else "",
            )
            for i, ch in enumerate(text)
        )

    def convert_chars(self, text: str) -> str:
        """Character pass only, in the configured direction."""
        return self._convert_chars(text, self.decide)

    def convert_text(self, text: str) -> str:
        """Idiom pre-pass followed by the character pass.

        Characters written by an idiom are left as they are; neighbours
        are still read from the idiom-substituted text.
        """
        segments = self._idiom_segments(text)
        keep = [from_idiom for piece, from_idiom in segments for _ in piece]
        return self._convert_chars("".join(piece for piece, _ in segments), self.decide, keep)

    def convert_field_value(self, text: str) -> str:
        """Full-value conversion for form fields and placeholders.

        Always new -> old, character by character, whatever the toggle says.
        """
        return self._convert_chars(text, self.decide_to_old)

    def revert_to_new(self, text: str) -> str:
        """Old forms back to new forms via the reverse map only.

        No conditional rules, idioms or compatibility filter apply.
        """
        reverse = self.dictionary.reverse
        return "".join(reverse.get(ch, ch) for ch in text)
