from typer.testing import CliRunner

import dotlive
from dotlive.ui.cli import app


def test_get_version_matches_public_api() -> None:
    assert dotlive.get_version() == dotlive.__version__
    assert isinstance(dotlive.__version__, str)


def test_cli_version_flag() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0, result.stdout
    assert result.stdout.strip() == f"dotlive {dotlive.get_version()}"
