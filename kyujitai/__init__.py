"""
Kyujitai: rewrite Japanese kanji between new and old glyph forms.

Dictionary-driven, context-sensitive conversion of shinjitai (new forms)
and kyūjitai (old forms) in page text, form input, copied text and
placeholder attributes.

License: MIT
"""

__version__ = "0.1.0"

from kyujitai.config import Settings
from kyujitai.dictionary import DictionaryStore, get_default_dictionary
from kyujitai.engine import ConversionEngine
from kyujitai.content import ContentScript, start_content_script
from kyujitai.page import Page

__all__ = [
    "Settings",
    "DictionaryStore",
    "get_default_dictionary",
    "ConversionEngine",
    "ContentScript",
    "start_content_script",
    "Page",
]
