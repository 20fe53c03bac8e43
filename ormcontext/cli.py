"""CLI for ormcontext metamodel operations."""

import logging
from pathlib import Path

import typer

from ormcontext import __version__
from ormcontext.config import OrmContextConfig, build_type_lookup, find_config, load_config
from ormcontext.core.naming import NamingStrategy
from ormcontext.core.session import ResolutionSession
from ormcontext.loaders import load_metamodel
from ormcontext.validation import validate_metamodel


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"ormcontext {__version__}")
        raise typer.Exit()


app = typer.Typer(
    help="ormcontext: schema and domain descriptions from ORM mapping metadata",
    no_args_is_help=True,
)

# Global state for config (set in callback, used in commands)
_loaded_config: OrmContextConfig | None = None


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True, help="Show version"
    ),
    config: Path = typer.Option(None, "--config", "-c", help="Path to config file (ormcontext.yaml)"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
):
    """ormcontext CLI.

    You can use a config file (ormcontext.yaml or ormcontext.json) to set default values.
    CLI arguments override config file values.
    """
    global _loaded_config

    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    config_path = config if config else find_config()

    _loaded_config = None
    if config_path:
        try:
            _loaded_config = load_config(config_path)
            typer.echo(f"Loaded config from: {config_path}", err=True)
        except Exception as e:
            typer.echo(f"Warning: Failed to load config: {e}", err=True)


def _metamodel_path(path: Path | None) -> Path:
    if path is not None:
        return path
    if _loaded_config is not None:
        return Path(_loaded_config.metamodel_path)
    return Path(".")


def _naming() -> NamingStrategy | None:
    return _loaded_config.naming() if _loaded_config else None


def _open_session(path: Path | None) -> ResolutionSession:
    path = _metamodel_path(path)
    if not path.exists():
        typer.echo(f"Error: {path} does not exist", err=True)
        raise typer.Exit(1)

    try:
        metamodel = load_metamodel(path)
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    lookup = build_type_lookup(_loaded_config)
    try:
        return ResolutionSession(metamodel, lookup, _naming())
    except Exception as e:
        lookup.close()
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def entities(
    path: Path = typer.Argument(None, help="Metamodel file or directory (defaults to config or current dir)"),
):
    """
    List the entity types of a metamodel.

    Examples:
      ormcontext entities
      ormcontext entities ./mappings
    """
    with _open_session(path) as session:
        names = session.entity_names()
        if not names:
            typer.echo("No entities found")
            return
        for name in names:
            typer.echo(name)


@app.command()
def schema(
    path: Path = typer.Argument(None, help="Metamodel file or directory (defaults to config or current dir)"),
    entity: list[str] = typer.Option(None, "--entity", "-e", help="Entity to include (repeatable, default: all)"),
):
    """
    Print the table schema relevant to a set of entities as JSON.

    Examples:
      ormcontext schema ./mappings
      ormcontext schema ./mappings -e Student -e Course
    """
    with _open_session(path) as session:
        try:
            result = session.schema(entity or session.entity_names())
        except Exception as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(1)
        typer.echo(result.model_dump_json(indent=2))


@app.command()
def domain(
    path: Path = typer.Argument(None, help="Metamodel file or directory (defaults to config or current dir)"),
    entity: list[str] = typer.Option(None, "--entity", "-e", help="Entity to include (repeatable, default: all)"),
):
    """
    Print the domain description of a set of entities as JSON.

    Examples:
      ormcontext domain ./mappings -e Order
    """
    with _open_session(path) as session:
        try:
            result = session.domain(entity or session.entity_names())
        except Exception as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(1)
        typer.echo(result.model_dump_json(indent=2))


@app.command()
def validate(
    path: Path = typer.Argument(None, help="Metamodel file or directory (defaults to config or current dir)"),
):
    """
    Validate a metamodel.

    Examples:
      ormcontext validate ./mappings
    """
    path = _metamodel_path(path)
    if not path.exists():
        typer.echo(f"Error: {path} does not exist", err=True)
        raise typer.Exit(1)

    try:
        metamodel = load_metamodel(path)
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    errors = validate_metamodel(metamodel, _naming())
    if errors:
        for error in errors:
            typer.echo(f"  - {error}", err=True)
        typer.echo(f"✗ {len(errors)} validation error(s)", err=True)
        raise typer.Exit(1)

    typer.echo(f"✓ {len(metamodel)} classes, {len(metamodel.entity_names)} entities")


if __name__ == "__main__":
    app()
