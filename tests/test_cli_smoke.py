from typer.testing import CliRunner
from ivpub.cli.cli import app

def test_cli_smoke():
    runner = CliRunner()
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for command in ("build", "render", "query"):
        assert command in result.output
