from typing import Iterable, List, Tuple

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..models import PhraseBlock
from ..settings import Language, SettingsConfiguration, level_description
from ..state import StorySnapshot


def create_console() -> Console:
    return Console()


def phrase_table(blocks: Iterable[PhraseBlock], language: Language) -> Table:
    table = Table(title="Story", show_lines=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Sent.", justify="right", style="dim")
    table.add_column(language.name, style="bold")
    table.add_column(language.romanization_system, style="cyan")
    table.add_column("English", style="green")

    for block in blocks:
        table.add_row(
            str(block.index),
            str(block.parent_sentence),
            escape(block.language),
            escape(block.romanization) or "-",
            escape(block.english) or "-",
        )
    return table


def sentence_panel(view: PhraseBlock, language: Language) -> Panel:
    body = (
        f"[bold]{language.name}:[/bold] {escape(view.language)}\n"
        f"[bold]{language.romanization_system}:[/bold] {escape(view.romanization)}\n"
        f"[bold]English:[/bold] {escape(view.english)}\n"
        f"[bold]English (Contextual):[/bold] {escape(view.english_contextual)}"
    )
    return Panel(body, title=f"Sentence {view.parent_sentence}", expand=False)


def click_table(ranked: List[Tuple[str, int]]) -> Table:
    table = Table(title="Character Clicks")
    table.add_column("Character", style="bold")
    table.add_column("Clicks", justify="right")
    for ch, clicks in ranked:
        table.add_row(ch, str(clicks))
    return table


def settings_panel(settings: SettingsConfiguration) -> Panel:
    lang = settings.selected_language
    lines = [
        f"[bold]Language:[/bold] {lang.name} ({lang.id}, {lang.script_name})",
        f"[bold]Level:[/bold] {settings.language_level}",
        f"  [dim]{level_description(settings.language_level)}[/dim]",
        f"[bold]Genres:[/bold] {', '.join(settings.selected_genres) or '-'}",
        f"[bold]Tone:[/bold] {settings.selected_tone or '-'}",
        f"[bold]Conflict:[/bold] {settings.selected_conflict or '-'}",
        f"[bold]Time period:[/bold] {settings.selected_time_period or '-'}",
        f"[bold]Custom request:[/bold] {settings.custom_request or '-'}",
    ]
    return Panel("\n".join(lines), title="Settings", expand=False)


def status_line(snapshot: StorySnapshot) -> str:
    line = f"[bold]{snapshot.phase.value}[/bold]"
    if snapshot.diagnostic:
        line += f" [red]{snapshot.diagnostic}[/red]"
    return line
