"""context-resume CLI - pick up where a previous AI coding session left off."""

import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from contextresume import __version__, config
from contextresume.logging import configure_logging

app = typer.Typer(
    name="context-resume",
    help="Resume context from Claude Code, Codex, Cursor and Gemini sessions.",
    no_args_is_help=True,
)

console = Console()

RESUME_PROMPT_EN = (
    "Here's a context file {path} from the user's previous operations. "
    "Analyze what the user was doing. Then use TodoWrite to list what might be incomplete, "
    "and what needs to be done next (if mentioned in the context), "
    "otherwise wait for user instructions."
)
RESUME_PROMPT_ZH = (
    "这里有份上下文 {path} ，是用户曾经的操作。你分析下用户在做什么。"
    "然后用TodoWrite列出可能没做完的事情，和接下来要的事情（如果上下文中有提到），"
    "如果没有就等待用户指令。"
)

SOURCE_STYLES = {
    "claude": "orange3",
    "codex": "green",
    "cursor": "cyan",
    "gemini": "blue",
}

PathOption = Annotated[Path, typer.Option("--path", "-p", help="Project directory")]
HomeOption = Annotated[
    Optional[Path],
    typer.Option("--home", help="Home directory holding the agents' data", resolve_path=True),
]
SourceOption = Annotated[
    Optional[list[str]],
    typer.Option("--source", "-s", help="Only these sources (claude, codex, cursor, gemini)"),
]


def version_callback(value: bool) -> None:
    if value:
        console.print(f"context-resume {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", help="Log skipped files")] = False,
) -> None:
    """context-resume - list recent agent sessions for a project."""
    configure_logging("DEBUG" if verbose else "WARNING")


def format_resume_prompt(path: str) -> str:
    """The bilingual instruction that hands a transcript to the next agent."""
    return f"\n\n{RESUME_PROMPT_EN.format(path=path)}\n\n{RESUME_PROMPT_ZH.format(path=path)}\n\n"


def _check_sources(sources: list[str] | None) -> list[str] | None:
    if not sources:
        return None
    unknown = [s for s in sources if s not in config.SOURCES]
    if unknown:
        console.print(f"[red]Unknown source:[/red] {', '.join(unknown)}")
        raise typer.Exit(1)
    return sources


def _session_table(title: str, summaries) -> Table:
    table = Table(title=title)
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Source")
    table.add_column("Title", style="green")
    table.add_column("Prompts", justify="right")
    table.add_column("Updated")
    for s in summaries:
        updated = datetime.fromtimestamp(s.timestamp / 1000).strftime("%Y-%m-%d %H:%M")
        style = SOURCE_STYLES[s.source]
        table.add_row(
            escape(s.id),
            f"[{style}]{s.source}[/{style}]",
            escape(s.title),
            str(len(s.user_prompts)),
            updated,
        )
    return table


@app.command("list")
def list_command(
    project_path: PathOption = Path("."),
    number: Annotated[
        int, typer.Option("--number", "-n", help="Sessions to show per source")
    ] = config.DEFAULT_LIMIT,
    source: SourceOption = None,
    merged: Annotated[bool, typer.Option("--merged", help="One list ranked across sources")] = False,
    as_json: Annotated[bool, typer.Option("--json", help="Print summaries as JSON")] = False,
    home: HomeOption = None,
    sqlite_cli: Annotated[
        bool, typer.Option("--sqlite-cli", help="Query Cursor stores with the sqlite3 binary")
    ] = False,
) -> None:
    """List recent sessions for a project, per source or merged."""
    from contextresume.sessions import build_sources, load_sessions, merge_sessions
    from contextresume.sessions.store import make_store_query

    sources = build_sources(
        home=home, names=_check_sources(source), store_query=make_store_query(sqlite_cli)
    )
    grouped = load_sessions(project_path, number, sources)

    if merged:
        summaries = merge_sessions(grouped.values(), number * max(len(grouped), 1))
        if as_json:
            _print_json(summaries)
            return
        if not summaries:
            console.print("[dim]No sessions found for this project.[/dim]")
            return
        console.print(_session_table("Recent sessions", summaries))
        return

    if as_json:
        _print_json([s for group in grouped.values() for s in group])
        return

    if not any(grouped.values()):
        console.print("[dim]No sessions found for this project.[/dim]")
        return
    for name, summaries in grouped.items():
        if summaries:
            console.print(_session_table(name, summaries))


def _print_json(summaries) -> None:
    sys.stdout.write(
        json.dumps([s.model_dump(by_alias=True) for s in summaries], ensure_ascii=False, indent=2)
    )
    sys.stdout.write("\n")


@app.command("prompt")
def prompt_command(
    session_id: Annotated[str, typer.Argument(help="Session ID as shown by `list`")],
    project_path: PathOption = Path("."),
    source: SourceOption = None,
    home: HomeOption = None,
) -> None:
    """Print the resume prompt for a session."""
    from contextresume.sessions import build_sources, load_sessions

    sources = build_sources(home=home, names=_check_sources(source))
    # IDs only come from the newest files, so scan with a generous cap
    grouped = load_sessions(project_path, config.DEFAULT_LIMIT * 10, sources)
    for summaries in grouped.values():
        for s in summaries:
            if s.id == session_id:
                sys.stdout.write(format_resume_prompt(s.path))
                return

    console.print(f"[red]Session not found:[/red] {session_id}")
    raise typer.Exit(1)


@app.command("sources")
def sources_command(home: HomeOption = None) -> None:
    """Show which supported agents have data on this machine."""
    detected = config.detect_sources(home)
    for name in config.SOURCES:
        icon = "[green]✓[/green]" if name in detected else "[red]✗[/red]"
        console.print(f"  {icon} {name}  [dim]{config.source_root(name, home)}[/dim]")


@app.command("mcp")
def mcp_serve() -> None:
    """Start the MCP server (stdio transport)."""
    from contextresume.mcp.server import mcp

    mcp.run()
