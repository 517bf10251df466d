"""CLI tests via click's CliRunner.

Each command builds its own Database from --database-url, so these run
against a throwaway SQLite file.
"""

import pytest
from click.testing import CliRunner

from estatehub.cli.main import main

from conftest import register_account


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}"


def test_version():
    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert "estatehub" in result.output


def test_init_db_creates_tables(db_url, tmp_path):
    result = CliRunner().invoke(main, ["--database-url", db_url, "init-db"])
    assert result.exit_code == 0, result.output
    assert "Database tables created." in result.output
    assert (tmp_path / "cli.db").exists()


def test_set_role_unknown_email(db_url):
    runner = CliRunner()
    runner.invoke(main, ["--database-url", db_url, "init-db"])
    result = runner.invoke(main, ["--database-url", db_url, "set-role", "ghost@test.com", "agent"])
    assert result.exit_code == 1
    assert "No user with email ghost@test.com" in result.output


def test_set_role_rejects_unknown_role(db_url):
    result = CliRunner().invoke(
        main, ["--database-url", db_url, "set-role", "a@test.com", "superuser"]
    )
    assert result.exit_code == 2


@pytest.mark.asyncio
async def test_set_role_promotes_user(client, settings):
    account = await register_account(client, role="user")

    result = CliRunner().invoke(
        main, ["--database-url", settings.database_url, "set-role", account.email, "admin"]
    )
    assert result.exit_code == 0, result.output
    assert f"{account.email} is now admin." in result.output

    r = await client.post(
        "/api/auth/login", json={"email": account.email, "password": account.password}
    )
    assert r.json()["user"]["role"] == "admin"
