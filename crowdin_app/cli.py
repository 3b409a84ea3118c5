"""Crowdin app CLI - serve the app and run file jobs locally."""

from __future__ import annotations

import asyncio
import base64
import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from .config import AppSettings
from .errors import AppError

app = typer.Typer(
    name="crowdin-app",
    help="Crowdin custom file format app - server and local file tools",
    no_args_is_help=True,
)
console = Console()


def _load_json(path: Path):
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]Could not read {path}: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def serve(
    port: int = typer.Option(8000, "--port", "-p", help="Port to run on"),
    host: str = typer.Option("127.0.0.1", "--host", help="Host to bind to"),
    log_level: str = typer.Option("info", "--log-level", help="Uvicorn log level"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Launch the app server."""
    import uvicorn

    console.print(f"[bold cyan]Starting Crowdin app at http://{host}:{port}[/bold cyan]")
    uvicorn.run(
        "crowdin_app.app:create_app",
        factory=True,
        host=host,
        port=port,
        log_level=log_level,
        reload=reload,
    )


@app.command("init-db")
def init_db():
    """Create database tables for the configured database URL."""
    from .database import Database

    settings = AppSettings()

    async def _run():
        database = Database.from_settings(settings)
        try:
            await database.create_all()
        finally:
            await database.dispose()

    asyncio.run(_run())
    console.print(f"[green]Tables created[/green] ({settings.database_url})")


@app.command()
def parse(
    file: Path = typer.Argument(..., help="Flat JSON file to extract strings from"),
    language: str = typer.Option(None, "--language", "-l", help="Seed translations for this language"),
    output: Path = typer.Option(None, "--output", "-o", help="Write entries as JSON here"),
):
    """Extract translatable strings from a JSON file."""
    from .files.processing import extract_strings

    entries, _preview = extract_strings(_load_json(file), language)

    if output:
        output.write_text(
            json.dumps([e.to_api() for e in entries], ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        console.print(f"[green]Wrote {len(entries)} strings to {output}[/green]")
        return

    table = Table(title=f"Strings in {file.name}")
    table.add_column("#", style="dim")
    table.add_column("Identifier", style="cyan")
    table.add_column("Text")
    for entry in entries:
        table.add_row(str(entry.preview_id), entry.identifier, entry.text)
    console.print(table)


@app.command()
def build(
    file: Path = typer.Argument(..., help="Source JSON file"),
    strings: Path = typer.Argument(..., help="JSON array of string entries with translations"),
    language: str = typer.Option(..., "--language", "-l", help="Target language ID"),
    output: Path = typer.Option(None, "--output", "-o", help="Write translated JSON here"),
):
    """Build a translated JSON file from a string table."""
    from pydantic import TypeAdapter, ValidationError

    from .files.processing import translate_document
    from .schemas.files import TranslationEntry

    try:
        entries = TypeAdapter(list[TranslationEntry]).validate_python(_load_json(strings))
    except ValidationError as e:
        console.print(f"[red]Invalid strings file: {e.error_count()} errors[/red]")
        raise typer.Exit(1)

    try:
        translated = translate_document(_load_json(file), entries, language)
    except AppError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(1)

    content = json.dumps(translated, ensure_ascii=False, indent=2)
    if output:
        output.write_text(content, encoding="utf-8")
        console.print(f"[green]Wrote {output}[/green]")
    else:
        console.print_json(content)


@app.command()
def decode(
    payload: str = typer.Argument(..., help="Base64 payload from a job response"),
):
    """Decode a base64 ``content``/``preview`` value from a job response."""
    try:
        console.print(base64.b64decode(payload).decode("utf-8"), markup=False)
    except ValueError as e:
        console.print(f"[red]Not a base64 UTF-8 payload: {e}[/red]")
        raise typer.Exit(1)


def main():
    app()


if __name__ == "__main__":
    main()
