from click.testing import CliRunner

from maintenance_engine.cli import cli


def _db_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}"


def test_init_db_then_sweep_empty_tenant(tmp_path):
    runner = CliRunner()

    init = runner.invoke(cli, ["--database-url", _db_url(tmp_path), "init-db"])
    assert init.exit_code == 0, init.output
    assert "Maintenance tables ready" in init.output

    sweep = runner.invoke(
        cli, ["--database-url", _db_url(tmp_path), "sla-sweep", "--tenant-id", "tenant-acme"]
    )
    assert sweep.exit_code == 0, sweep.output
    assert "Scanned 0 open work order(s)" in sweep.output
    assert "Breached: 0" in sweep.output


def test_sweep_without_tables_fails(tmp_path):
    runner = CliRunner()

    result = runner.invoke(
        cli, ["--database-url", _db_url(tmp_path), "sla-sweep", "--tenant-id", "tenant-acme"]
    )

    assert result.exit_code == 1
    assert "Error" in result.output


def test_sweep_requires_tenant(tmp_path):
    result = CliRunner().invoke(cli, ["--database-url", _db_url(tmp_path), "sla-sweep"])

    assert result.exit_code == 2
    assert "--tenant-id" in result.output
