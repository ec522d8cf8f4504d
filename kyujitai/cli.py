"""
Command-line interface for Kyujitai.

Provides commands for:
- Converting text or HTML files between new and old kanji forms
- Reverting old forms to new forms (what a copy action produces)
- Inspecting the dictionary
- Viewing and changing the stored settings and the enable switch

Usage:
    kyujitai convert --text "国語の学習"
    kyujitai convert --input page.html --output page.kyuji.html
    kyujitai revert --text "國語"
    kyujitai lookup 国 弁
    kyujitai settings --set avoidCompatibility=true
"""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from kyujitai import __version__
from kyujitai.config import SETTING_KEYS, Settings
from kyujitai.content import ContentScript
from kyujitai.dictionary import (
    DictionaryFormatError,
    DictionaryStore,
    get_default_dictionary,
    load_dictionary,
    load_dictionary_bundle,
)
from kyujitai.engine import ConversionEngine
from kyujitai.page import Page
from kyujitai.store import SettingsStore

app = typer.Typer(
    name="kyujitai",
    help="Kyujitai: convert Japanese kanji between new (shinjitai) and old (kyūjitai) forms",
    add_completion=False,
)
console = Console()

HTML_SUFFIXES = {".html", ".htm", ".xhtml"}
TRUE_WORDS = {"1", "true", "yes", "on"}
FALSE_WORDS = {"0", "false", "no", "off"}


def version_callback(value: bool):
    if value:
        console.print(f"Kyujitai v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-V",
        help="Enable debug logging",
    ),
):
    """Kyujitai: dictionary-driven kanji form conversion."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load_dictionary(path: Optional[Path]) -> DictionaryStore:
    if path is None:
        return get_default_dictionary()
    if not path.exists():
        console.print(f"[red]Error:[/] Dictionary not found: {path}", style="bold")
        raise typer.Exit(1)
    try:
        if path.suffix.lower() == ".json":
            return load_dictionary_bundle(path)
        return load_dictionary(path)
    except DictionaryFormatError as e:
        console.print(f"[red]Error:[/] {e}", style="bold")
        raise typer.Exit(1)


def _store(settings_file: Optional[Path]) -> SettingsStore:
    return SettingsStore(settings_file) if settings_file else SettingsStore()


def _parse_bool(raw: str) -> bool:
    word = raw.strip().lower()
    if word in TRUE_WORDS:
        return True
    if word in FALSE_WORDS:
        return False
    raise ValueError(raw)


def _emit(result: str, output_file: Optional[Path]) -> None:
    if output_file:
        output_file.write_text(result, encoding="utf-8")
        console.print(f"[green]Saved to:[/] {output_file}")
    else:
        console.print(result, markup=False, highlight=False, soft_wrap=True)


@app.command()
def convert(
    input_text: Optional[str] = typer.Option(
        None, "--text", "-t",
        help="Text to convert",
    ),
    input_file: Optional[Path] = typer.Option(
        None, "--input", "-i",
        help="Input file (HTML or plain text)",
    ),
    output_file: Optional[Path] = typer.Option(
        None, "--output", "-o",
        help="Output file path",
    ),
    old_to_new: Optional[bool] = typer.Option(
        None, "--old-to-new/--new-to-old",
        help="Toggle mode (swap whichever form is present); defaults to the stored setting",
    ),
    avoid_compat: Optional[bool] = typer.Option(
        None, "--avoid-compat/--allow-compat",
        help="Never emit compatibility/extension ideographs; defaults to the stored setting",
    ),
    dictionary_file: Optional[Path] = typer.Option(
        None, "--dictionary", "-d",
        help="Dictionary JSON bundle or character map CSV/TSV",
    ),
    settings_file: Optional[Path] = typer.Option(
        None, "--settings-file",
        help="Settings store to read (default: ~/.kyujitai/settings.json)",
    ),
):
    """Convert text or an HTML page."""
    if input_text is None and input_file is None:
        console.print("[red]Error:[/] Provide either --text or --input", style="bold")
        raise typer.Exit(1)

    dictionary = _load_dictionary(dictionary_file)
    settings = _store(settings_file).load_settings()
    if old_to_new is not None:
        settings = replace(settings, convert_old_to_new=old_to_new)
    if avoid_compat is not None:
        settings = replace(settings, avoid_compatibility=avoid_compat)

    if input_text is not None:
        _emit(ConversionEngine(dictionary, settings).convert_text(input_text), output_file)
        return

    if not input_file.exists():
        console.print(f"[red]Error:[/] Input not found: {input_file}", style="bold")
        raise typer.Exit(1)
    source = input_file.read_text(encoding="utf-8")

    if input_file.suffix.lower() in HTML_SUFFIXES:
        page = Page.from_html(source)
        report = ContentScript(page, dictionary, settings).start()
        console.print(
            f"[dim]Converted {report.scan.converted} text nodes, "
            f"{report.placeholders} placeholders[/]"
        )
        _emit(page.to_html(), output_file)
    else:
        _emit(ConversionEngine(dictionary, settings).convert_text(source), output_file)


@app.command()
def revert(
    input_text: str = typer.Option(
        ..., "--text", "-t",
        help="Text to turn back into new forms",
    ),
    dictionary_file: Optional[Path] = typer.Option(
        None, "--dictionary", "-d",
        help="Dictionary JSON bundle or character map CSV/TSV",
    ),
):
    """Turn old forms back into new forms, as a copy action would."""
    dictionary = _load_dictionary(dictionary_file)
    _emit(ConversionEngine(dictionary).revert_to_new(input_text), None)


@app.command()
def lookup(
    chars: List[str] = typer.Argument(..., help="Characters to look up"),
    dictionary_file: Optional[Path] = typer.Option(
        None, "--dictionary", "-d",
        help="Dictionary JSON bundle or character map CSV/TSV",
    ),
):
    """Show how each character is mapped."""
    dictionary = _load_dictionary(dictionary_file)
    table = Table(title=f"Lookup ({dictionary.name})")
    table.add_column("Char", style="cyan")
    table.add_column("U+", style="dim")
    table.add_column("Old form", style="green")
    table.add_column("New form", style="green")
    table.add_column("Rules", justify="right")

    for char in "".join(chars):
        table.add_row(
            char,
            f"{ord(char):04X}",
            dictionary.to_old(char) or "-",
            dictionary.to_new(char) or "-",
            str(len(dictionary.rules_for(char))),
        )
    console.print(table)


@app.command()
def dictionary(
    search: Optional[str] = typer.Option(
        None, "--search", "-s",
        help="Search for a character or idiom",
    ),
    list_idioms: bool = typer.Option(
        False, "--idioms",
        help="List all idioms",
    ),
    dictionary_file: Optional[Path] = typer.Option(
        None, "--dictionary", "-d",
        help="Dictionary JSON bundle or character map CSV/TSV",
    ),
):
    """View dictionary contents."""
    store = _load_dictionary(dictionary_file)

    if search:
        target = store.idioms.get(search) or store.to_old(search)
        if target:
            console.print(f"[green]{search}[/] → [cyan]{target}[/]")
        elif store.to_new(search):
            console.print(f"[green]{search}[/] ← [cyan]{store.to_new(search)}[/] (old form)")
        else:
            console.print(f"[yellow]Not found:[/] {search}")
        return

    if list_idioms:
        table = Table(title=f"Idioms: {store.name} ({len(store.idioms)})")
        table.add_column("New", style="cyan")
        table.add_column("Old", style="green")
        for source, target in store.idiom_items():
            table.add_row(source, target)
        console.print(table)
        return

    table = Table(title=f"Dictionary: {store.name}")
    table.add_column("Table", style="cyan")
    table.add_column("Entries", justify="right")
    for key, value in store.summary().items():
        if key != "name":
            table.add_row(key, str(value))
    console.print(table)


@app.command()
def settings(
    assignments: Optional[List[str]] = typer.Option(
        None, "--set",
        help="Set a switch, e.g. --set avoidCompatibility=true",
    ),
    settings_file: Optional[Path] = typer.Option(
        None, "--settings-file",
        help="Settings store (default: ~/.kyujitai/settings.json)",
    ),
):
    """Show or change the stored conversion settings."""
    store = _store(settings_file)

    if assignments:
        values = {}
        for item in assignments:
            key, _, raw = item.partition("=")
            if key not in SETTING_KEYS:
                console.print(f"[red]Error:[/] Unknown setting: {key}", style="bold")
                raise typer.Exit(1)
            try:
                values[key] = _parse_bool(raw)
            except ValueError:
                console.print(f"[red]Error:[/] Not a boolean: {raw!r}", style="bold")
                raise typer.Exit(1)
        merged = {**store.load_settings().to_dict(), **values}
        if not store.save_settings(Settings.from_mapping(merged)):
            console.print(f"[red]Error:[/] Could not save {store.path}", style="bold")
            raise typer.Exit(1)

    current = store.load_settings().to_dict()
    table = Table(title="Settings")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key in SETTING_KEYS:
        table.add_row(key, "[green]on[/]" if current[key] else "[dim]off[/]")
    table.add_row("enabled", "[green]on[/]" if store.is_enabled() else "[dim]off[/]")
    console.print(table)


@app.command()
def toggle(
    settings_file: Optional[Path] = typer.Option(
        None, "--settings-file",
        help="Settings store (default: ~/.kyujitai/settings.json)",
    ),
):
    """Enable or disable conversion."""
    enabled = _store(settings_file).toggle_enabled()
    if enabled:
        console.print("[green]Conversion enabled[/] (run again to disable)")
    else:
        console.print("[yellow]Conversion disabled[/] (run again to enable)")


if __name__ == "__main__":
    app()
