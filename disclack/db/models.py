"""Mapping store: verified Slack ⇄ Discord user and channel correspondences."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import asyncpg

from ..errors import MappingConflictError
from .connection import get_connection

logger = logging.getLogger("disclack.db")

SLACK = "slack"
DISCORD = "discord"


@dataclass(frozen=True)
class UserMapping:
    slack_id: str
    discord_id: str

    def counterpart(self, source: str) -> str:
        """Return the id on the other platform than ``source``."""
        return self.discord_id if source == SLACK else self.slack_id


@dataclass(frozen=True)
class ChannelMapping:
    slack_channel: str
    discord_channel: str
    discord_webhook: str
    id: Optional[int] = None

    def counterpart(self, source: str) -> str:
        return self.discord_channel if source == SLACK else self.slack_channel


class MappingStore(ABC):
    """Read/write contract of the mapping store.

    Every operation is a single-row read or write; there is no update.
    """

    @abstractmethod
    async def get_user_by_slack(self, slack_id: str) -> Optional[UserMapping]: ...

    @abstractmethod
    async def get_user_by_discord(self, discord_id: str) -> Optional[UserMapping]: ...

    @abstractmethod
    async def get_mapping_by_slack(self, slack_channel: str) -> Optional[ChannelMapping]: ...

    @abstractmethod
    async def get_mapping_by_discord(self, discord_channel: str) -> Optional[ChannelMapping]: ...

    @abstractmethod
    async def insert_user(self, mapping: UserMapping) -> UserMapping: ...

    @abstractmethod
    async def delete_user_by_discord(self, discord_id: str) -> bool: ...

    @abstractmethod
    async def insert_mapping(self, mapping: ChannelMapping) -> ChannelMapping: ...

    @abstractmethod
    async def delete_mapping_by_discord(self, discord_channel: str) -> bool: ...

    @abstractmethod
    async def list_users(self) -> list[UserMapping]: ...

    @abstractmethod
    async def list_mappings(self) -> list[ChannelMapping]: ...

    async def get_user(self, source: str, user_id: str) -> Optional[UserMapping]:
        """Look a user up by its id on ``source``."""
        if source == SLACK:
            return await self.get_user_by_slack(user_id)
        return await self.get_user_by_discord(user_id)

    async def get_mapping(self, source: str, channel_id: str) -> Optional[ChannelMapping]:
        """Look a channel mapping up by its id on ``source``."""
        if source == SLACK:
            return await self.get_mapping_by_slack(channel_id)
        return await self.get_mapping_by_discord(channel_id)


def _user(row) -> Optional[UserMapping]:
    if not row:
        return None
    return UserMapping(slack_id=row["slack_id"], discord_id=row["discord_id"])


def _mapping(row) -> Optional[ChannelMapping]:
    if not row:
        return None
    return ChannelMapping(
        id=row["id"],
        slack_channel=row["slack_channel"],
        discord_channel=row["discord_channel"],
        discord_webhook=row["discord_webhook"],
    )


class PostgresMappingStore(MappingStore):
    """Mapping store backed by the shared asyncpg pool."""

    # ============================================================
    # USERS
    # ============================================================

    async def get_user_by_slack(self, slack_id: str) -> Optional[UserMapping]:
        async with get_connection() as conn:
            row = await conn.fetchrow(
                "SELECT slack_id, discord_id FROM users WHERE slack_id = $1", slack_id
            )
            return _user(row)

    async def get_user_by_discord(self, discord_id: str) -> Optional[UserMapping]:
        async with get_connection() as conn:
            row = await conn.fetchrow(
                "SELECT slack_id, discord_id FROM users WHERE discord_id = $1", discord_id
            )
            return _user(row)

    async def insert_user(self, mapping: UserMapping) -> UserMapping:
        try:
            async with get_connection() as conn:
                await conn.execute(
                    "INSERT INTO users (slack_id, discord_id) VALUES ($1, $2)",
                    mapping.slack_id, mapping.discord_id,
                )
        except asyncpg.UniqueViolationError as e:
            raise MappingConflictError(
                f"Slack user {mapping.slack_id} or Discord user {mapping.discord_id} is already linked"
            ) from e
        logger.info(f"Linked Slack user {mapping.slack_id} <-> Discord user {mapping.discord_id}")
        return mapping

    async def delete_user_by_discord(self, discord_id: str) -> bool:
        async with get_connection() as conn:
            result = await conn.execute("DELETE FROM users WHERE discord_id = $1", discord_id)
        deleted = result == "DELETE 1"
        if deleted:
            logger.info(f"Unlinked Discord user {discord_id}")
        return deleted

    async def list_users(self) -> list[UserMapping]:
        async with get_connection() as conn:
            rows = await conn.fetch("SELECT slack_id, discord_id FROM users ORDER BY created_at")
            return [_user(row) for row in rows]

    # ============================================================
    # CHANNEL MAPPINGS
    # ============================================================

    async def get_mapping_by_slack(self, slack_channel: str) -> Optional[ChannelMapping]:
        async with get_connection() as conn:
            row = await conn.fetchrow("""
                SELECT id, slack_channel, discord_channel, discord_webhook
                FROM mappings WHERE slack_channel = $1
            """, slack_channel)
            return _mapping(row)

    async def get_mapping_by_discord(self, discord_channel: str) -> Optional[ChannelMapping]:
        async with get_connection() as conn:
            row = await conn.fetchrow("""
                SELECT id, slack_channel, discord_channel, discord_webhook
                FROM mappings WHERE discord_channel = $1
            """, discord_channel)
            return _mapping(row)

    async def insert_mapping(self, mapping: ChannelMapping) -> ChannelMapping:
        try:
            async with get_connection() as conn:
                row = await conn.fetchrow("""
                    INSERT INTO mappings (slack_channel, discord_channel, discord_webhook)
                    VALUES ($1, $2, $3)
                    RETURNING id, slack_channel, discord_channel, discord_webhook
                """, mapping.slack_channel, mapping.discord_channel, mapping.discord_webhook)
        except asyncpg.UniqueViolationError as e:
            raise MappingConflictError(
                f"Slack channel {mapping.slack_channel} or Discord channel "
                f"{mapping.discord_channel} is already connected"
            ) from e
        logger.info(f"Connected Slack channel {mapping.slack_channel} <-> Discord channel {mapping.discord_channel}")
        return _mapping(row)

    async def delete_mapping_by_discord(self, discord_channel: str) -> bool:
        async with get_connection() as conn:
            result = await conn.execute(
                "DELETE FROM mappings WHERE discord_channel = $1", discord_channel
            )
        deleted = result == "DELETE 1"
        if deleted:
            logger.info(f"Disconnected Discord channel {discord_channel}")
        return deleted

    async def list_mappings(self) -> list[ChannelMapping]:
        async with get_connection() as conn:
            rows = await conn.fetch("""
                SELECT id, slack_channel, discord_channel, discord_webhook
                FROM mappings ORDER BY id
            """)
            return [_mapping(row) for row in rows]
