from __future__ import annotations

import logging
import sys
from pathlib import Path

import typer

from .config import Settings
from .detectors import registry
from .engine import Engine
from .errors import ErrorCategory, ScrubError
from .logging import configure_logging
from .models import PipelineConfig
from .recipes import EXAMPLE_RECIPES, get_recipe
from .sidecar import generate_mapping_sidecar

app = typer.Typer(help="Redact sensitive values from text")

recipes_app = typer.Typer(help="Inspect built-in pipeline recipes")
app.add_typer(recipes_app, name="recipes")

log = logging.getLogger(__name__)


def _load_pipeline(settings: Settings, recipe: str | None) -> PipelineConfig | str:
    if recipe is None and settings.pipeline_file is not None:
        return settings.pipeline_file.read_text(encoding=settings.encoding)
    return get_recipe(recipe or settings.default_recipe)


def _read_input(source: str, encoding: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding=encoding)


@app.command()
def run(
    source: str = typer.Argument("-", help="File to redact, or '-' for stdin"),
    pipeline: Path | None = typer.Option(None, help="Pipeline configuration JSON file"),
    recipe: str | None = typer.Option(None, help="Name of a built-in recipe"),
    output: Path | None = typer.Option(None, help="Write redacted text here instead of stdout"),
    map_file: Path | None = typer.Option(None, "--map", help="Write the canonical map JSON here"),
    sidecar: Path | None = typer.Option(None, help="Write the HTML mapping sidecar here"),
    encoding: str | None = typer.Option(None, help="Text encoding for files"),
    verbose: bool = typer.Option(False, help="Print effective settings"),
) -> None:
    """Run a redaction pipeline over SOURCE."""
    configure_logging()
    if pipeline is not None and recipe is not None:
        typer.echo("Use either --pipeline or --recipe, not both", err=True)
        raise typer.Exit(code=2)
    overrides: dict[str, object] = {}
    if pipeline is not None:
        overrides["pipeline_file"] = pipeline
    if encoding is not None:
        overrides["encoding"] = encoding
    settings = Settings(**overrides)
    if verbose:
        typer.echo(settings.model_dump_json(indent=2), err=True)

    try:
        config = _load_pipeline(settings, recipe)
        text = _read_input(source, settings.encoding)
    except KeyError:
        typer.echo(f"Unknown recipe: {recipe or settings.default_recipe}", err=True)
        raise typer.Exit(code=2)
    except (OSError, UnicodeDecodeError) as exc:
        log.error(
            "read_failed",
            extra={"event_type": "read_failed", "error_category": ErrorCategory.IO.value},
        )
        typer.echo(f"Cannot read input: {exc}", err=True)
        raise typer.Exit(code=2)

    engine = Engine(settings=settings)
    try:
        redacted = engine.run(text, config)
    except ScrubError as exc:
        log.error(
            "run_failed",
            extra={"event_type": "run_failed", "error_category": exc.category.value},
        )
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2)

    if output is not None:
        output.write_text(redacted, encoding=settings.encoding)
    else:
        typer.echo(redacted, nl=False)
    if map_file is not None:
        map_file.write_text(engine.canonical_map_json(indent=2), encoding="utf-8")
    if sidecar is not None:
        name = "stdin" if source == "-" else Path(source).name
        sidecar.write_text(
            generate_mapping_sidecar(engine.canonical_map(), name), encoding="utf-8"
        )


@app.command()
def detectors() -> None:
    """List the step types the engine understands."""
    for detector in registry.detectors():
        tags = ", ".join((detector.kind, *detector.aliases))
        typer.echo(f"{tags}: {detector.prefix} - {detector.description}")


@recipes_app.command("list")
def list_recipes() -> None:
    """Print the built-in recipes."""
    for recipe in EXAMPLE_RECIPES:
        steps = " -> ".join(step.type for step in recipe.steps)
        typer.echo(f"{recipe.name}: {steps}")


@recipes_app.command("show")
def show_recipe(name: str) -> None:
    """Print a built-in recipe as pipeline JSON."""
    try:
        recipe = get_recipe(name)
    except KeyError:
        typer.echo(f"Unknown recipe: {name}", err=True)
        raise typer.Exit(code=2)
    typer.echo(recipe.model_dump_json(indent=2, exclude_none=True))


if __name__ == "__main__":  # pragma: no cover
    app()
