"""
Rich renderings of errors, URL information, rename plans and run summaries.
"""

import json
from pathlib import Path

from rich import box
from rich.console import Console, Group
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from tagbatch.cli.progress_monitor import MonitorReport
from tagbatch.core.engines import UrlInfo
from tagbatch.core.renamer import ApplyResult
from tagbatch.exceptions import (
    AuthError,
    AuthTimeoutError,
    ConfigError,
    EngineUnavailable,
    ExternalProcessFailure,
    InputPathError,
    InvalidInvocation,
    PlaylistError,
    ScriptNotFound,
    TemplateError,
)
from tagbatch.models.events import EventStatus


def _format_elapsed(seconds: float) -> str:
    minutes, secs = divmod(round(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes:02}m {secs:02}s"
    if minutes:
        return f"{minutes}m {secs:02}s"
    return f"{seconds:.1f}s"


_SUGGESTIONS: dict[type[Exception], list[str]] = {
    ConfigError: [
        "Check the path passed with --config.",
        "Print a valid default with --autotagger-config or --audiofeatures-config.",
    ],
    PlaylistError: ["Pass a directory, or an .m3u, .m3u8 or .pls playlist."],
    InputPathError: ["Check the path passed with --path."],
    AuthTimeoutError: [
        "The browser redirect never reached the callback server.",
        "Use --prompt to paste the redirected URL manually.",
        "Use --expose when authorizing from another machine.",
    ],
    AuthError: [
        "Verify the Spotify client ID and secret.",
        "Run authorize-spotify again to refresh the cached token.",
        "Make sure the redirect URI is registered for your Spotify app.",
    ],
    InvalidInvocation: [
        "--enable-audio-features needs both --client-id and --client-secret.",
    ],
    ScriptNotFound: [
        "Run the command from the directory containing 'YoutubeToSpotify/'.",
    ],
    ExternalProcessFailure: ["See the downloader's error output above."],
    TemplateError: ["Use only the documented fields, e.g. {artist} - {title}."],
    EngineUnavailable: ["Install the package that provides this engine."],
}


def _suggestions_for(error: Exception) -> list[str]:
    for cls in type(error).__mro__:
        if cls in _SUGGESTIONS:
            return _SUGGESTIONS[cls]
    return ["Run the command with -vv for detailed logs."]


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """
    Builds the panel shown for an error that ended the run.

    Suggestions are looked up along the exception's class hierarchy, so a
    subclass without its own entry inherits its parent's advice.
    """
    parts: list[Text] = [
        Text.assemble((f"{type(error).__name__}: ", "bold red"), str(error))
    ]
    if isinstance(error, ExternalProcessFailure) and error.stderr.strip():
        parts.append(Text(error.stderr.strip(), style="dim"))

    parts.append(Text("\nWhat you can try", style="bold yellow"))
    parts.extend(Text(f"  - {hint}") for hint in _suggestions_for(error))
    if context:
        parts.append(Text(f"\n{context}", style="dim"))

    return Panel(
        Group(*parts),
        title="[bold red]tagbatch failed[/bold red]",
        border_style="red",
        expand=False,
    )


def print_url_info(console: Console, info: UrlInfo) -> None:
    """Displays the information gathered about a URL."""
    console.print("\n[bold]URL Information:[/bold]")
    console.print(f"Platform:     {escape(info.platform)}")
    console.print(f"Content Type: {escape(info.content_type)}")
    console.print(f"Title:        {escape(info.title)}")
    if info.description:
        console.print(f"Description:  {escape(info.description)}")

    if info.video_tracklists:
        console.print("\n[bold]Extracted Tracklists:[/bold]")
        output = {"Youtube Channel": info.title}
        output.update(info.video_tracklists)
        console.print(json.dumps(output, indent=2, ensure_ascii=False), markup=False)


def print_rename_preview(console: Console, mapping: list[tuple[Path, Path]]) -> None:
    """Prints the numbered list of planned renames."""
    if not mapping:
        console.print("[yellow]No audio files found.[/yellow]")
        return
    for i, (source, destination) in enumerate(mapping, start=1):
        console.print(
            f"{i}. [dim]{escape(str(source))}[/dim] -> [cyan]{escape(str(destination))}[/cyan]"
        )


def print_apply_summary(console: Console, result: ApplyResult, copy: bool) -> None:
    """Displays the outcome of a rename run, listing every failed entry."""
    verb = "Copied" if copy else "Moved"
    console.print(f"[green]✓ {verb} {len(result.succeeded)} file(s).[/green]")
    if result.skipped:
        console.print(f"[dim]{len(result.skipped)} file(s) already had their name.[/dim]")
    if not result.failures:
        return

    table = Table(title="Failed Entries", box=box.SIMPLE_HEAVY)
    table.add_column("Source", style="dim")
    table.add_column("Destination", style="cyan")
    table.add_column("Error", style="red")
    for failure in result.failures:
        table.add_row(
            str(failure.source), str(failure.destination), type(failure.error).__name__
        )
    console.print(table)


def print_report_summary(console: Console, report: MonitorReport) -> None:
    """Displays a summary panel for a drained tagging run."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()
    table.add_row("Tagged:", f"[green]{report.count(EventStatus.OK)}[/green]")
    table.add_row("Skipped:", f"[yellow]{report.count(EventStatus.SKIPPED)}[/yellow]")
    table.add_row("Failed:", f"[red]{report.count(EventStatus.ERROR)}[/red]")
    table.add_row("Duration:", _format_elapsed(report.elapsed))
    console.print(
        Panel(table, title="[bold]Session Summary[/bold]", border_style="blue", expand=False)
    )
