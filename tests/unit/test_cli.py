"""Unit tests for secret_lover/main.py - command line interface."""

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from secret_lover.credentials import AuthenticationGate
from secret_lover.main import cli


@pytest.fixture
def cli_runner():
    """Create CLI runner for testing Click commands."""
    return CliRunner()


@pytest.fixture(autouse=True)
def no_default_config(tmp_path):
    """Keep the user's real config file out of the tests."""
    with patch("secret_lover.config.settings.DEFAULT_CONFIG_PATH", tmp_path / "missing.yaml"):
        yield


@pytest.fixture(autouse=True)
def memory_keyring(backend):
    """Route the CLI's keyring backend to the in-memory fake."""
    with patch("secret_lover.main.KeyringBackend", return_value=backend) as mock_class:
        yield mock_class


class TestAddGet:
    """Tests for the add, get and get-auth commands."""

    def test_add_and_get(self, cli_runner, backend):
        result = cli_runner.invoke(cli, ["add", "API_KEY", "sk-123"])

        assert result.exit_code == 0
        assert result.output.strip() == "OK"
        assert backend.data == {("secret-lover", "API_KEY"): "sk-123"}

        result = cli_runner.invoke(cli, ["get", "API_KEY"])

        assert result.exit_code == 0
        assert result.output == "sk-123\n"

    def test_add_prompts_for_value(self, cli_runner, backend):
        result = cli_runner.invoke(cli, ["add", "API_KEY", "--project", "webapp"], input="hidden-value\n")

        assert result.exit_code == 0
        assert backend.data == {("secret-lover/webapp", "API_KEY"): "hidden-value"}
        assert "hidden-value" not in result.output

    def test_get_falls_back_to_global(self, cli_runner):
        cli_runner.invoke(cli, ["add", "API_KEY", "global-value"])

        result = cli_runner.invoke(cli, ["get", "API_KEY", "-p", "webapp"])

        assert result.exit_code == 0
        assert result.output == "global-value\n"

    def test_get_missing(self, cli_runner):
        result = cli_runner.invoke(cli, ["get", "MISSING"])

        assert result.exit_code == 1
        assert "Secret not found: MISSING" in result.output
        assert "Suggestion:" in result.output

    def test_invalid_project(self, cli_runner):
        result = cli_runner.invoke(cli, ["add", "API_KEY", "v", "--project", "a/b"])

        assert result.exit_code == 1
        assert "cannot contain '/'" in result.output

    def test_get_auth_approved_when_gate_unavailable(self, cli_runner):
        cli_runner.invoke(cli, ["add", "API_KEY", "sk-123"])

        result = cli_runner.invoke(cli, ["get-auth", "API_KEY"])

        assert result.exit_code == 0
        assert result.output == "sk-123\n"

    def test_get_auth_denied(self, cli_runner, backend, denying_authenticator):
        backend.data[("secret-lover", "API_KEY")] = "sk-123"

        with patch("secret_lover.main.build_gate", return_value=AuthenticationGate(denying_authenticator)):
            result = cli_runner.invoke(cli, ["get-auth", "API_KEY"])

        assert result.exit_code == 1
        assert "Authentication failed" in result.output
        assert backend.calls == []
        assert denying_authenticator.reasons == ["Access secret: API_KEY"]


class TestDelete:
    """Tests for the delete command."""

    def test_delete_existing(self, cli_runner, backend):
        backend.data[("secret-lover", "API_KEY")] = "v"

        result = cli_runner.invoke(cli, ["delete", "API_KEY", "--project", "webapp"])

        assert result.exit_code == 0
        assert result.output.strip() == "OK"
        assert backend.data == {}

    def test_delete_missing_succeeds(self, cli_runner):
        result = cli_runner.invoke(cli, ["delete", "MISSING"])

        assert result.exit_code == 0
        assert result.output.strip() == "OK"

    def test_delete_backend_failure(self, cli_runner, backend):
        backend.fail_on["delete"] = "keychain locked"

        result = cli_runner.invoke(cli, ["delete", "API_KEY"])

        assert result.exit_code == 1
        assert "keychain locked" in result.output


class TestListing:
    """Tests for list and list-all."""

    @pytest.fixture
    def populated(self, backend):
        backend.data = {
            ("secret-lover", "DATABASE_URL"): "v",
            ("secret-lover/webapp", "OPENAI_API_KEY"): "v",
            ("secret-lover/webapp", "STRIPE_KEY"): "v",
            ("other-app", "UNRELATED"): "v",
        }
        return backend

    def test_list_global(self, cli_runner, populated):
        result = cli_runner.invoke(cli, ["list"])

        assert result.output.splitlines() == ["DATABASE_URL"]

    def test_list_project(self, cli_runner, populated):
        result = cli_runner.invoke(cli, ["list", "--project", "webapp"])

        assert result.output.splitlines() == ["OPENAI_API_KEY", "STRIPE_KEY"]

    def test_list_all(self, cli_runner, populated):
        result = cli_runner.invoke(cli, ["list-all"])

        assert result.exit_code == 0
        assert result.output.splitlines() == [
            "DATABASE_URL\tglobal",
            "OPENAI_API_KEY\twebapp",
            "STRIPE_KEY\twebapp",
        ]


class TestConfiguration:
    """Tests for config and logging options."""

    def test_namespace_from_config(self, cli_runner, backend, tmp_path, memory_keyring):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("namespace: work-secrets\n")

        result = cli_runner.invoke(cli, ["--config", str(config_file), "add", "API_KEY", "v"])

        assert result.exit_code == 0
        assert backend.data == {("work-secrets", "API_KEY"): "v"}
        memory_keyring.assert_called_once_with(index_service="work-secrets.index")

    def test_missing_config_file(self, cli_runner, tmp_path):
        result = cli_runner.invoke(cli, ["--config", str(tmp_path / "nope.yaml"), "list"])

        assert result.exit_code == 1
        assert "Configuration file not found" in result.output

    def test_invalid_log_level(self, cli_runner):
        result = cli_runner.invoke(cli, ["--log-level", "LOUD", "list"])

        assert result.exit_code == 1
        assert "Unknown log level" in result.output
