"""Pytest configuration and shared fixtures."""

import asyncio
from collections import Counter
from typing import Optional

import pytest

from disclack.db.models import ChannelMapping, MappingStore, UserMapping
from disclack.directory.base import ChannelInfo, Directory, UserInfo, Usergroup
from disclack.errors import NotFoundError


class FakeStore(MappingStore):
    """In-memory mapping store."""

    def __init__(self, users=None, mappings=None):
        self.users: list[UserMapping] = list(users or [])
        self.mappings: list[ChannelMapping] = list(mappings or [])
        self.queries = Counter()

    async def get_user_by_slack(self, slack_id):
        self.queries["user_by_slack"] += 1
        return next((u for u in self.users if u.slack_id == slack_id), None)

    async def get_user_by_discord(self, discord_id):
        self.queries["user_by_discord"] += 1
        return next((u for u in self.users if u.discord_id == discord_id), None)

    async def get_mapping_by_slack(self, slack_channel):
        self.queries["mapping_by_slack"] += 1
        return next((m for m in self.mappings if m.slack_channel == slack_channel), None)

    async def get_mapping_by_discord(self, discord_channel):
        self.queries["mapping_by_discord"] += 1
        return next((m for m in self.mappings if m.discord_channel == discord_channel), None)

    async def insert_user(self, mapping):
        self.users.append(mapping)
        return mapping

    async def delete_user_by_discord(self, discord_id):
        before = len(self.users)
        self.users = [u for u in self.users if u.discord_id != discord_id]
        return len(self.users) < before

    async def insert_mapping(self, mapping):
        mapping = ChannelMapping(
            id=len(self.mappings) + 1,
            slack_channel=mapping.slack_channel,
            discord_channel=mapping.discord_channel,
            discord_webhook=mapping.discord_webhook,
        )
        self.mappings.append(mapping)
        return mapping

    async def delete_mapping_by_discord(self, discord_channel):
        before = len(self.mappings)
        self.mappings = [m for m in self.mappings if m.discord_channel != discord_channel]
        return len(self.mappings) < before

    async def list_users(self):
        return list(self.users)

    async def list_mappings(self):
        return list(self.mappings)


class FakeDirectory(Directory):
    """Directory answering from dicts and counting every call."""

    def __init__(
        self,
        platform: str,
        users: Optional[dict] = None,
        channels: Optional[dict] = None,
        usergroups: Optional[list] = None,
        error: Optional[Exception] = None,
    ):
        self._platform = platform
        self.users = users or {}
        self.channels = channels or {}
        self.groups = usergroups or []
        self.error = error
        self.calls = Counter()

    @property
    def platform(self):
        return self._platform

    async def get_user_info(self, user_id):
        self.calls["user"] += 1
        await asyncio.sleep(0)
        if self.error:
            raise self.error
        if user_id not in self.users:
            raise NotFoundError(self._platform, "user", user_id)
        return UserInfo(id=user_id, display_name=self.users[user_id], avatar_url=f"https://img/{user_id}.png")

    async def get_channel_info(self, channel_id):
        self.calls["channel"] += 1
        await asyncio.sleep(0)
        if self.error:
            raise self.error
        if channel_id not in self.channels:
            raise NotFoundError(self._platform, "channel", channel_id)
        return ChannelInfo(id=channel_id, name=self.channels[channel_id])

    async def list_usergroups(self):
        self.calls["usergroups"] += 1
        await asyncio.sleep(0)
        if self.error:
            raise self.error
        return [Usergroup(id=i, handle=h) for i, h in self.groups]


@pytest.fixture
def store():
    return FakeStore(
        users=[UserMapping(slack_id="U111", discord_id="900111")],
        mappings=[ChannelMapping(
            id=1, slack_channel="C111", discord_channel="800111", discord_webhook="700111",
        )],
    )


@pytest.fixture
def slack_directory():
    return FakeDirectory(
        "slack",
        users={"U222": "alice", "U333": "bob"},
        channels={"C222": "general"},
        usergroups=[("S111", "devs"), ("S222", "ops")],
    )


@pytest.fixture
def discord_directory():
    return FakeDirectory(
        "discord",
        users={"900222": "carol"},
        channels={"800222": "random"},
        usergroups=[("500111", "moderators")],
    )
