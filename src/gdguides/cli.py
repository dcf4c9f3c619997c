import logging
from pathlib import Path

import orjson
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from gdguides.codec import read_save
from gdguides.config import Settings, default_save_path, load_settings
from gdguides.errors import GuidelineError
from gdguides.labels import create_guidelines, read_labels
from gdguides.pipeline import apply_guidelines_to_level, list_levels

app = typer.Typer(help="Add Audacity label guidelines to Geometry Dash levels.")
console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _resolve_save_file(save_file: Path | None) -> Path:
    path = save_file or default_save_path()
    if path is None:
        raise typer.BadParameter("No default save location on this platform; pass --save-file.")
    return path


def _fail(exc: GuidelineError) -> typer.Exit:
    console.print(f"[bold red]Error ({exc.stage}):[/] {escape(str(exc))}", soft_wrap=True)
    return typer.Exit(code=1)


def _print_levels(names: list[str]) -> None:
    console.print("[bold]Level names:[/]")
    for i, name in enumerate(names):
        console.print(f"{i}: {name}", markup=False, highlight=False, soft_wrap=True)


@app.command()
def levels(
    save_file: Path | None = typer.Option(
        None, "--save-file", "-s", help="Save file (defaults to the game's location)."
    ),
    as_json: bool = typer.Option(False, "--json", help="Emit the level list as JSON."),
) -> None:
    """List the levels in a save file, numbered for --level-index."""
    path = _resolve_save_file(save_file)
    try:
        names = list_levels(path)
    except GuidelineError as exc:
        raise _fail(exc) from exc
    if as_json:
        payload = [{"index": i, "name": name} for i, name in enumerate(names)]
        console.print(
            orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode(),
            markup=False,
            highlight=False,
            soft_wrap=True,
        )
    else:
        _print_levels(names)


@app.command()
def apply(
    labels_file: Path | None = typer.Option(
        None, "--labels-file", "-l", help="Audacity label export (.txt)."
    ),
    level_name: str | None = typer.Option(
        None, "--level-name", "-n", help="Level to modify. Asked for at runtime if unset."
    ),
    level_index: int | None = typer.Option(
        None, "--level-index", "-i", help="Level to modify, by number from `levels`."
    ),
    save_file: Path | None = typer.Option(
        None, "--save-file", "-s", help="Save file (defaults to the game's location)."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Print the modified save data instead of writing it."
    ),
    config: Path | None = typer.Option(
        None, "--config", "-c", help="YAML/JSON settings file; options given here win."
    ),
) -> None:
    """Replace a level's guidelines with ones built from a label file."""
    try:
        settings = load_settings(config) if config else Settings()
    except GuidelineError as exc:
        raise _fail(exc) from exc

    labels_path = labels_file or settings.labels_file
    if labels_path is None:
        raise typer.BadParameter("A labels file is required (--labels-file or config).")
    if not labels_path.is_file():
        raise typer.BadParameter(f"Labels file not found: {labels_path}")
    if level_name is not None and level_index is not None:
        raise typer.BadParameter("Pass either --level-name or --level-index, not both.")

    path = _resolve_save_file(save_file or settings.save_file)
    dry_run = dry_run or settings.dry_run
    target: int | str | None = level_name if level_name is not None else level_index
    if target is None:
        target = settings.level_name

    try:
        labels_text = read_labels(labels_path)
        if target is None:
            names = list_levels(path)
            _print_levels(names)
            target = typer.prompt("Select a level #", type=int)
            if not 0 <= target < len(names):
                raise typer.BadParameter("Invalid level #")
        result = apply_guidelines_to_level(path, target, labels_text, dry_run=dry_run)
    except GuidelineError as exc:
        raise _fail(exc) from exc

    label = result.level_name or f"#{result.level_index}"
    if dry_run:
        console.print(
            f"---New guideline string---\n{result.guidelines}\n", markup=False, soft_wrap=True
        )
        console.print(
            f"---{path.name}---\n{result.text}", markup=False, highlight=False, soft_wrap=True
        )
    else:
        console.print(
            f"[bold green]Applied guidelines[/] to {escape(label)} in {path}", soft_wrap=True
        )


@app.command()
def decode(
    save_file: Path = typer.Argument(..., help="Save file to decode."),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Write the decoded text here instead of printing it."
    ),
) -> None:
    """Decode a save file into its plain text form."""
    if not save_file.is_file():
        raise typer.BadParameter(f"Save file not found: {save_file}")
    try:
        text = read_save(save_file)
    except GuidelineError as exc:
        raise _fail(exc) from exc
    if output:
        output.write_text(text, encoding="utf-8")
        console.print(f"[bold green]Wrote decoded save[/] ({len(text)} chars) to {output}")
    else:
        console.print(text, markup=False, highlight=False, soft_wrap=True)


@app.command()
def guidelines(
    labels_file: Path = typer.Argument(..., help="Audacity label export (.txt)."),
) -> None:
    """Print the guideline string a label file turns into."""
    if not labels_file.is_file():
        raise typer.BadParameter(f"Labels file not found: {labels_file}")
    try:
        text = create_guidelines(read_labels(labels_file))
    except GuidelineError as exc:
        raise _fail(exc) from exc
    console.print(text, markup=False, highlight=False, soft_wrap=True)


if __name__ == "__main__":
    app()
