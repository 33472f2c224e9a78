"""Tests for inkwell CLI commands."""

from collections.abc import Generator
from pathlib import Path

import pytest
from typer.testing import CliRunner

from inkwell import __version__
from inkwell.cli.main import app
from inkwell.config import get_settings
from inkwell.core.permissions.catalog import built_in_role_id
from inkwell.core.permissions.enums import SystemRole


runner = CliRunner()


@pytest.fixture
def cli_database(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[str, None, None]:
    """Point the CLI at an empty SQLite database with tables created."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}")
    get_settings.cache_clear()

    result = runner.invoke(app, ["init-db"])
    assert result.exit_code == 0, result.stdout

    yield str(tmp_path / "cli.db")

    get_settings.cache_clear()


class TestVersion:
    """Tests for the version option."""

    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"inkwell version {__version__}" in result.stdout


class TestSeedCommand:
    """Tests for inkwell seed."""

    def test_seed_reports_counts(self, cli_database: str) -> None:
        result = runner.invoke(app, ["seed"])

        assert result.exit_code == 0, result.stdout
        assert "31" in result.stdout

    def test_seed_is_idempotent(self, cli_database: str) -> None:
        runner.invoke(app, ["seed"])

        result = runner.invoke(app, ["seed"])

        assert result.exit_code == 0
        assert "31" not in result.stdout


class TestTenantCommands:
    """Tests for inkwell provision-tenant."""

    def test_provision_new_tenant(self, cli_database: str) -> None:
        result = runner.invoke(app, ["provision-tenant", "night-owl", "Night Owl Press"])

        assert result.exit_code == 0, result.stdout
        assert "Created tenant" in result.stdout
        assert "Built-in roles added: 8" in result.stdout

    def test_provision_existing_tenant(self, cli_database: str) -> None:
        runner.invoke(app, ["provision-tenant", "night-owl", "Night Owl Press"])

        result = runner.invoke(app, ["provision-tenant", "night-owl", "Night Owl Press"])

        assert result.exit_code == 0
        assert "already exists" in result.stdout
        assert "Built-in roles added: 0" in result.stdout

    def test_invalid_tenant_code(self, cli_database: str) -> None:
        result = runner.invoke(app, ["provision-tenant", "no spaces", "Broken"])

        assert result.exit_code == 1
        assert "Invalid tenant" in result.stdout


class TestUserCommands:
    """Tests for inkwell bootstrap-admin and assign-role."""

    def test_bootstrap_admin(self, cli_database: str) -> None:
        result = runner.invoke(app, ["bootstrap-admin", "root"])

        assert result.exit_code == 0, result.stdout
        assert "super_admin" in result.stdout

    def test_bootstrap_admin_twice_changes_role(self, cli_database: str) -> None:
        runner.invoke(app, ["bootstrap-admin", "root"])

        result = runner.invoke(app, ["bootstrap-admin", "root", "--role", "support"])

        assert result.exit_code == 0, result.stdout
        assert "support" in result.stdout

    def test_assign_tenant_role(self, cli_database: str) -> None:
        runner.invoke(app, ["provision-tenant", "night-owl", "Night Owl Press"])
        runner.invoke(app, ["bootstrap-admin", "editor-jane"])

        result = runner.invoke(
            app, ["assign-role", "editor-jane", "--tenant", "night-owl", "--role", "editor"]
        )

        assert result.exit_code == 0, result.stdout
        assert "Assigned tenant role" in result.stdout

    def test_assign_role_unknown_user(self, cli_database: str) -> None:
        runner.invoke(app, ["provision-tenant", "night-owl", "Night Owl Press"])

        result = runner.invoke(
            app, ["assign-role", "ghost", "--tenant", "night-owl", "--role", "reader"]
        )

        assert result.exit_code == 1
        assert "User not found" in result.stdout


class TestRoleCommands:
    """Tests for inkwell resolve and audit."""

    def test_resolve_system_role(self, cli_database: str) -> None:
        runner.invoke(app, ["seed"])
        role_id = built_in_role_id(SystemRole.SUPPORT.value)

        result = runner.invoke(app, ["resolve", str(role_id)])

        assert result.exit_code == 0, result.stdout
        assert "view_system_analytics" in result.stdout

    def test_resolve_unknown_role(self, cli_database: str) -> None:
        result = runner.invoke(app, ["resolve", "00000000-0000-0000-0000-000000000000"])

        assert result.exit_code == 1
        assert "Error" in result.stdout

    def test_audit_clean_catalog(self, cli_database: str) -> None:
        runner.invoke(app, ["provision-tenant", "night-owl", "Night Owl Press"])

        result = runner.invoke(app, ["audit"])

        assert result.exit_code == 0, result.stdout
        assert "All 12 roles resolve cleanly" in result.stdout
