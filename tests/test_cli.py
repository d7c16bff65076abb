"""Tests for the disclack CLI commands (database calls patched out)."""

from unittest.mock import AsyncMock, patch

from click.testing import CliRunner

from disclack import __version__
from disclack.bridge import Bridge
from disclack.cli import cli
from disclack.config import DisclackSettings
from disclack.errors import UpstreamError

from conftest import FakeDirectory, FakeStore


def _invoke(args, store):
    runner = CliRunner()
    with patch("disclack.cli.cmd_mappings._open_db", AsyncMock()), \
         patch("disclack.db.connection.close_db", AsyncMock()), \
         patch("disclack.db.models.PostgresMappingStore", return_value=store):
        return runner.invoke(cli, args)


class TestCLI:
    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self):
        result = CliRunner().invoke(cli, [])
        assert result.exit_code == 0
        assert "disclack link" in result.output
        assert "convert slack" in result.output

    def test_link_and_list(self):
        store = FakeStore()
        result = _invoke(["link", "U222", "900222"], store)
        assert result.exit_code == 0, result.output
        assert "Linked" in result.output
        assert store.users[0].discord_id == "900222"

        result = _invoke(["mappings"], store)
        assert "U222" in result.output

    def test_link_invalid_id_exits_nonzero(self):
        store = FakeStore()
        result = _invoke(["link", "not-a-slack-id", "900222"], store)
        assert result.exit_code == 1
        assert "invalid" in result.output
        assert store.users == []

    def test_disconnect_unknown_channel(self):
        result = _invoke(["disconnect", "800999"], FakeStore())
        assert result.exit_code == 0
        assert "not connected" in result.output

    def test_convert_reports_lookup_failure(self, store):
        broken = FakeDirectory("discord", error=UpstreamError("discord", "GET /users/900222", "HTTP 429", 429))
        bridge = Bridge(store, FakeDirectory("slack"), broken)
        with patch("disclack.cli.cmd_convert._open_db", AsyncMock(return_value=DisclackSettings())), \
             patch("disclack.db.connection.close_db", AsyncMock()), \
             patch("disclack.bridge.Bridge.from_settings", return_value=bridge):
            result = CliRunner().invoke(cli, ["convert", "discord", "hi <@900222>"])

        assert result.exit_code == 1
        assert "rate limited" in result.output
        assert "Traceback" not in result.output
