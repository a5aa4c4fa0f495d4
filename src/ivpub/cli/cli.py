"""CLI entrypoint: Typer app definition and command registration"""

import typer

from ivpub.cli.commands import build_cmd, query_cmd, render_cmd


app = typer.Typer(name="ivpub", no_args_is_help=True, help="Publish Iron Vault journals as HTML")

app.command(name="build")(build_cmd)
app.command(name="render")(render_cmd)
app.command(name="query")(query_cmd)
