"""CLI command implementations"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer

from ivpub.config import Settings, load_config
from ivpub.core.pipeline import run_build, run_query_dir, run_render
from ivpub.dataview.execute import as_text
from ivpub.dataview.models import ListResult, QueryError


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling, then configure logging."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    logging.basicConfig(
        level=settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return settings


def build_cmd(
    path: Annotated[str, typer.Argument(help="Vault file or directory to publish")],
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    parser: Annotated[Optional[str], typer.Option("--parser-config", help="MarkdownIt preset name")] = None,
    ):
    """Render every journal page under PATH to an HTML fragment."""
    settings = _settings(overrides={"output_dir": out, "parser_config": parser})
    output_dir = Path(settings.output_dir)
    try:
        results = run_build(
            path, output_dir, settings.parser_config,
            settings.mechanics_fence, settings.query_fence,
        )
    except RuntimeError as e:
        _fail(str(e))
    for src, out_file in results:
        typer.echo(f"  {src} -> {out_file}")
    typer.echo(f"Rendered {len(results)} document(s) to {output_dir}/")


def render_cmd(
    file: Annotated[str, typer.Argument(help="Markdown file to render")],
    vault: Annotated[Optional[str], typer.Option("--vault", help="Vault root for link and query resolution")] = None,
    parser: Annotated[Optional[str], typer.Option("--parser-config", help="MarkdownIt preset name")] = None,
    ):
    """Render a single file and print the HTML fragment to stdout."""
    settings = _settings(overrides={"parser_config": parser})
    try:
        html = run_render(
            Path(file), Path(vault) if vault else None, settings.parser_config,
            settings.mechanics_fence, settings.query_fence,
        )
    except RuntimeError as e:
        _fail(str(e))
    typer.echo(html, nl=False)


def query_cmd(
    path: Annotated[str, typer.Argument(help="Vault file or directory to query")],
    query: Annotated[str, typer.Argument(help='Query text, e.g. \'TABLE rank FROM "Progress"\'')],
    ):
    """Run a TABLE or LIST query against the vault and print the rows."""
    _settings()
    try:
        result = run_query_dir(path, query)
    except QueryError as e:
        _fail("Query failed", e)
    except RuntimeError as e:
        _fail(str(e))

    if isinstance(result, ListResult):
        for item in result.items:
            typer.echo(item)
        return
    typer.echo("\t".join(result.headers))
    for row in result.rows:
        cells = [row.link.title] if result.with_id else []
        cells += ["" if v is None else as_text(v) for v in row.values]
        typer.echo("\t".join(cells))
