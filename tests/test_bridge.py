"""Tests for relay wiring between Slack and Discord events."""

import logging
from unittest.mock import AsyncMock

import asyncpg
import pytest

from disclack.bridge import Bridge
from disclack.config import DisclackSettings
from disclack.directory.discord import DiscordDirectory
from disclack.directory.slack import SlackDirectory
from disclack.errors import UpstreamError

from conftest import FakeDirectory


@pytest.fixture
def bridge(store, slack_directory, discord_directory):
    return Bridge(store, slack_directory, discord_directory)


def _slack_message(**overrides):
    message = {
        "type": "message",
        "channel": "C111",
        "user": "U222",
        "text": "hi <@U333>",
        "ts": "1700000000.000100",
    }
    message.update(overrides)
    return message


class TestRelayFromSlack:
    @pytest.mark.asyncio
    async def test_relays_text_with_author_fields(self, bridge):
        relayed = await bridge.relay_from_slack(_slack_message())

        assert relayed.platform == "discord"
        assert relayed.channel == "800111"
        assert relayed.webhook == "700111"
        assert relayed.content == "hi @bob"
        assert relayed.username == "alice"
        assert relayed.avatar_url == "https://img/U222.png"

    @pytest.mark.asyncio
    async def test_author_lookup_shares_resolver_cache(self, bridge, slack_directory):
        await bridge.relay_from_slack(_slack_message(text="<@U222> says hi"))
        assert slack_directory.calls["user"] == 1

    @pytest.mark.asyncio
    async def test_relays_blocks(self, bridge):
        message = _slack_message(blocks=[{"type": "rich_text", "elements": [
            {"type": "rich_text_section", "elements": [
                {"type": "text", "text": "bold", "style": {"bold": True}},
            ]},
        ]}])
        relayed = await bridge.relay_from_slack(message)
        assert relayed.content == "**bold**"

    @pytest.mark.asyncio
    async def test_unmapped_channel_is_ignored(self, bridge):
        assert await bridge.relay_from_slack(_slack_message(channel="C999")) is None

    @pytest.mark.asyncio
    async def test_ignored_subtypes_and_bots(self, bridge):
        assert await bridge.relay_from_slack(_slack_message(subtype="channel_join")) is None
        assert await bridge.relay_from_slack(_slack_message(bot_id="B1")) is None
        assert await bridge.relay_from_slack(_slack_message(subtype="file_share")) is not None

    @pytest.mark.asyncio
    async def test_unknown_author_relays_without_display_fields(self, bridge):
        relayed = await bridge.relay_from_slack(_slack_message(user="U999", text="yo"))
        assert relayed.content == "yo"
        assert relayed.username is None

    @pytest.mark.asyncio
    async def test_upstream_failure_drops_whole_message(self, store, discord_directory, caplog):
        broken = FakeDirectory("slack", error=UpstreamError("slack", "users.info", "ratelimited", 429))
        bridge = Bridge(store, broken, discord_directory)

        with caplog.at_level(logging.ERROR, logger="disclack.bridge"):
            assert await bridge.relay_from_slack(_slack_message()) is None
        assert "rate limited" in caplog.text

    @pytest.mark.asyncio
    async def test_store_outage_on_mapping_lookup_drops_message(self, bridge, caplog):
        bridge.store.get_mapping_by_slack = AsyncMock(side_effect=asyncpg.InterfaceError("pool is closed"))

        with caplog.at_level(logging.ERROR, logger="disclack.bridge"):
            assert await bridge.relay_from_slack(_slack_message()) is None
        assert "Dropping Slack message in C111" in caplog.text


class TestRelayFromDiscord:
    @pytest.mark.asyncio
    async def test_relays_to_slack_channel(self, bridge):
        relayed = await bridge.relay_from_discord(
            "800111", "hey <@900111> and <@900222>", author_name="carol", avatar_url="https://a",
        )
        assert relayed.platform == "slack"
        assert relayed.channel == "C111"
        assert relayed.content == "hey <@U111> and @carol"
        assert relayed.username == "carol"
        assert relayed.webhook is None

    @pytest.mark.asyncio
    async def test_bots_and_unmapped_are_ignored(self, bridge):
        assert await bridge.relay_from_discord("800111", "hi", is_bot=True) is None
        assert await bridge.relay_from_discord("800999", "hi") is None

    @pytest.mark.asyncio
    async def test_upstream_failure_drops_message(self, store, slack_directory):
        broken = FakeDirectory("discord", error=UpstreamError("discord", "GET /users/1", "HTTP 500", 500))
        bridge = Bridge(store, slack_directory, broken)
        assert await bridge.relay_from_discord("800111", "<@900222>") is None

    @pytest.mark.asyncio
    async def test_store_outage_on_mapping_lookup_drops_message(self, bridge):
        bridge.store.get_mapping_by_discord = AsyncMock(side_effect=asyncpg.InterfaceError("pool is closed"))
        assert await bridge.relay_from_discord("800111", "hi") is None


class TestFromSettings:
    def test_wiring(self, store):
        settings = DisclackSettings(
            slack_bot_token="xoxb-1",
            discord_token="tok",
            discord_guild_id="42",
            cache_ttl_seconds=5,
        )
        bridge = Bridge.from_settings(settings, store=store)

        assert isinstance(bridge.slack_directory, SlackDirectory)
        assert isinstance(bridge.discord_directory, DiscordDirectory)
        assert bridge.discord_directory.guild_id == "42"
        assert bridge.slack_users.ttl == 5
        assert bridge.slack_to_discord.resolver.users is bridge.slack_users
