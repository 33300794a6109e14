"""CLI entry point."""

import json
import sys
from pathlib import Path
from typing import Optional

import click
from loguru import logger

from hsdef import __version__
from hsdef.config import ENGINE_NAMES, Config
from hsdef.dump import collect_definitions, render_dump
from hsdef.engines import RipgrepEngine, create_engine
from hsdef.errors import LocatorError, ToolExecutionError, ToolUnavailableError
from hsdef.identifiers import word_at
from hsdef.locator import DefinitionLocator
from hsdef.style import dim, format_location, green, red
from hsdef.workspace import Workspace, WorkspaceError


HELP_EPILOG = """
\b
CONFIG
======

Global:  ~/.hsdef/config.toml
Local:   .hsdef/config.toml (in the project root)
Env:     HSDEF_ENGINE, HSDEF_RG_PATH, HSDEF_SEARCH_TIMEOUT,
         HSDEF_MAX_WORKERS, HSDEF_DEBUG
"""


def setup_logging(verbose: bool = False) -> None:
    """Configure loguru for the CLI.

    Args:
        verbose: Whether to enable debug logging
    """
    logger.remove()

    if verbose:
        logger.add(
            sys.stderr,
            level="DEBUG",
            format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
        )
    else:
        logger.add(
            sys.stderr,
            level="WARNING",
            format="<level>{level: <8}</level> | <level>{message}</level>"
        )


def _parse_position(value: str) -> tuple[int, int]:
    """Parse a 1-based LINE:COL into a 0-based (line, column)."""
    try:
        line, column = value.split(":", 1)
        line_number, column_number = int(line), int(column)
    except ValueError:
        raise click.BadParameter(f"expected LINE:COL, got '{value}'", param_hint="--at")
    if line_number < 1 or column_number < 1:
        raise click.BadParameter("LINE and COL start at 1", param_hint="--at")
    return line_number - 1, column_number - 1


def _open_workspace(root: Optional[Path], file_path: Optional[Path]) -> Workspace:
    if root:
        return Workspace(root=root)
    workspace = Workspace(start=file_path.parent if file_path else None)
    if not workspace.is_initialized:
        # No project marker: search from the current directory
        workspace = Workspace(root=Path.cwd())
    return workspace


def _load_config(workspace: Optional[Workspace], debug: bool) -> Config:
    """Load config with logging already set up, then honor `debug = true`."""
    setup_logging(debug)
    config = Config.load(workspace=workspace, logger=logger)
    if config.debug and not debug:
        setup_logging(True)
    return config


def _build_locator(config: Config) -> DefinitionLocator:
    engine = create_engine(
        config.engine,
        timeout=config.search_timeout,
        ripgrep_path=config.ripgrep_path,
        logger=logger,
    )
    return DefinitionLocator(
        engine=engine,
        max_workers=config.max_workers,
        skip_dirs=config.skip_dirs,
        logger=logger,
    )


@click.group(epilog=HELP_EPILOG)
@click.version_option(__version__, "--version", "-v", prog_name="hsdef")
def cli():
    """hsdef: jump to the definition of a Haskell identifier.

    \b
    USAGE:
      hsdef find NAME [--file F]     Locate a definition
      hsdef find --file F --at L:C   Locate the name under a position
      hsdef dump FILE                Resolve every identifier in a file
      hsdef init [PATH]              Create .hsdef/config.toml
      hsdef config                   Show current configuration
    """


@cli.command("find")
@click.argument("identifier", required=False)
@click.option("--file", "-f", "file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="File being edited; searched before the rest of the workspace")
@click.option("--at", "position", type=str, help="LINE:COL in --file to take the identifier from")
@click.option("--root", "-r", type=click.Path(exists=True, file_okay=False, path_type=Path),
              help="Workspace root (default: nearest project root)")
@click.option("--language", "-l", default="haskell", show_default=True,
              help="Language id used to pick file extensions")
@click.option("--engine", "-e", type=click.Choice(ENGINE_NAMES), help="Search engine")
@click.option("--timeout", type=float, help="Per-search timeout in seconds")
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def find_cmd(ctx, identifier, file_path, position, root, language, engine, timeout, as_json, debug):
    """Locate the definition of IDENTIFIER.

    \b
    The file given with --file is searched first; a hit there is the only
    result. Otherwise every matching file in the workspace is searched and
    the best definition in each file is printed.

    \b
    EXAMPLES:
      hsdef find foldMap
      hsdef find --file src/Main.hs --at 12:7
      hsdef find MyCon --root . --engine python --json
    """
    if position:
        if not file_path:
            raise click.UsageError("--at requires --file")
        line, column = _parse_position(position)
        text = file_path.read_text(encoding="utf-8", errors="ignore")
        identifier = word_at(text, line, column)
        if not identifier:
            raise click.UsageError(f"No identifier at {position} in {file_path}")
    if not identifier:
        raise click.UsageError("Give an IDENTIFIER or --file with --at")

    workspace = _open_workspace(root, file_path)
    config = _load_config(workspace, debug)
    if engine:
        config.engine = engine
    if timeout is not None:
        config.search_timeout = timeout

    locator = _build_locator(config)
    buffer_text = file_path.read_text(encoding="utf-8", errors="ignore") if file_path else None
    try:
        locations = locator.locate(
            identifier,
            buffer_text=buffer_text,
            workspace_root=workspace.root,
            file_extensions=config.extensions_for(language),
            current_file=file_path.resolve() if file_path else None,
        )
    except LocatorError as e:
        click.echo(red(str(e)), err=True)
        ctx.exit(2)

    if as_json:
        click.echo(json.dumps([loc.to_dict() for loc in locations], indent=2))
    else:
        for loc in locations:
            path = workspace.relative_path(Path(loc.file_path))
            click.echo(format_location(path, loc.line_index + 1, loc.line_text))
        if not locations:
            click.echo(dim(f"No definition found for '{identifier}'"), err=True)

    if not locations:
        ctx.exit(1)


@cli.command("dump")
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--root", "-r", type=click.Path(exists=True, file_okay=False, path_type=Path),
              help="Workspace root (default: nearest project root)")
@click.option("--language", "-l", default="haskell", show_default=True)
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path),
              help="Write the report here instead of stdout")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def dump_cmd(file_path, root, language, output, debug):
    """Resolve every lower-case identifier in FILE_PATH.

    \b
    Prints a Markdown report of the definition found for each identifier
    and lists the identifiers that have none.
    """
    workspace = _open_workspace(root, file_path)
    config = _load_config(workspace, debug)

    logger.info(f"Starting definition dump for {file_path}")
    found, missing = collect_definitions(
        _build_locator(config),
        file_path.resolve(),
        workspace.root,
        file_extensions=config.extensions_for(language),
        logger=logger,
    )
    report = render_dump(file_path, found, missing)

    if output:
        output.write_text(report, encoding="utf-8")
        click.echo(green(f"Definition dump written to {output}"))
    else:
        click.echo(report)


@cli.command("init")
@click.argument("path", required=False, type=click.Path(file_okay=False, path_type=Path))
def init_cmd(path):
    """Create .hsdef/config.toml in PATH (default: current directory).

    \b
    The local config overrides the global one for searches inside this
    project.
    """
    workspace = Workspace(root=path or Path.cwd())
    if workspace.local_config_path and workspace.local_config_path.exists():
        click.echo(f"Workspace already initialized at: {workspace.root}")
        return
    try:
        root = workspace.init(path)
    except WorkspaceError as e:
        raise click.ClickException(str(e))
    click.echo(f"Workspace initialized at: {root}")
    click.echo(f"Edit {workspace.local_config_path} to configure searches.")


@cli.command("config")
@click.option("--global", "global_", is_flag=True, help="Show only the global config")
def config_cmd(global_):
    """Show the effective configuration and where it came from."""
    workspace = Workspace(root=None) if not global_ else None
    config = _load_config(workspace, debug=False)
    click.echo(config.show_config_info())

    if config.engine == RipgrepEngine.name:
        try:
            version = RipgrepEngine(executable=config.ripgrep_path).version()
            click.echo(f"\nripgrep: {version}")
        except (ToolUnavailableError, ToolExecutionError) as e:
            click.echo(dim(f"\nripgrep unavailable ({e}); the fallback line scan will be used"))


def main():
    """Entry point for hsdef CLI."""
    cli()


if __name__ == "__main__":
    main()
