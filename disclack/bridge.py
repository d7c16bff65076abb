"""Relay wiring: turns platform message events into converted outbound messages.

Delivery itself (Discord webhook execution, Slack chat.postMessage) is done by
the embedding application with the returned ``RelayedMessage``. A message whose
conversion fails is logged and dropped as a whole, never sent half-converted.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import asyncpg

from .cache import TTLCache
from .config import DisclackSettings
from .convert.discord import DiscordToSlack
from .convert.resolver import DISCORD_MENTIONS, SLACK_MENTIONS, IdentityResolver
from .convert.slack import SlackToDiscord
from .db.models import DISCORD, SLACK, MappingStore, PostgresMappingStore
from .directory.base import Directory, UserInfo
from .directory.discord import DiscordDirectory
from .directory.slack import SlackDirectory
from .errors import DisclackError, NotFoundError, classify_error

logger = logging.getLogger("disclack.bridge")

# Slack message subtypes that carry user content worth relaying
RELAYED_SUBTYPES = {None, "file_share"}


@dataclass
class RelayedMessage:
    """A converted message ready for delivery on the destination platform."""
    platform: str
    channel: str
    content: str
    username: Optional[str] = None
    avatar_url: Optional[str] = None
    webhook: Optional[str] = None


class Bridge:
    """Both conversion directions over one mapping store."""

    def __init__(
        self,
        store: MappingStore,
        slack_directory: Directory,
        discord_directory: Directory,
        ttl: float = 60.0,
        evict_on_failure: bool = False,
    ):
        self.store = store
        self.slack_directory = slack_directory
        self.discord_directory = discord_directory

        # Shared by mention resolution and author display lookups
        self.slack_users: TTLCache[str, UserInfo] = TTLCache(
            ttl, name="slack.users", evict_on_failure=evict_on_failure
        )
        self.slack_to_discord = SlackToDiscord(IdentityResolver(
            store, slack_directory, DISCORD_MENTIONS,
            ttl=ttl, evict_on_failure=evict_on_failure, users_cache=self.slack_users,
        ))
        self.discord_to_slack = DiscordToSlack(IdentityResolver(
            store, discord_directory, SLACK_MENTIONS,
            ttl=ttl, evict_on_failure=evict_on_failure,
        ))

    @classmethod
    def from_settings(cls, settings: DisclackSettings, store: Optional[MappingStore] = None) -> "Bridge":
        """Production wiring: Postgres store and HTTP directories."""
        return cls(
            store=store or PostgresMappingStore(),
            slack_directory=SlackDirectory(
                token=settings.slack_bot_token or "",
                api_url=settings.slack_api_url,
                timeout=settings.http_timeout,
            ),
            discord_directory=DiscordDirectory(
                token=settings.discord_token or "",
                api_url=settings.discord_api_url,
                guild_id=settings.discord_guild_id,
                timeout=settings.http_timeout,
            ),
            ttl=settings.cache_ttl_seconds,
            evict_on_failure=settings.cache_evict_on_failure,
        )

    async def relay_from_slack(self, message: dict) -> Optional[RelayedMessage]:
        """Convert a Slack message event for its connected Discord channel."""
        if message.get("subtype") not in RELAYED_SUBTYPES:
            return None
        if message.get("bot_id"):
            return None

        channel = message.get("channel")
        if not channel:
            return None

        try:
            mapping = await self.store.get_mapping_by_slack(channel)
            if not mapping:
                return None

            logger.debug(f"slack message {channel}: {message.get('text')!r}")
            content, author = await asyncio.gather(
                self.slack_to_discord.render_message(message),
                self._slack_author(message.get("user")),
                return_exceptions=True,
            )
            for result in (content, author):
                if isinstance(result, BaseException):
                    raise result
        except (DisclackError, asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            logger.error(f"Dropping Slack message in {channel}: {classify_error(e)}", exc_info=e)
            return None

        return RelayedMessage(
            platform=DISCORD,
            channel=mapping.discord_channel,
            content=content or "",
            username=author.display_name if author else None,
            avatar_url=author.avatar_url if author else None,
            webhook=mapping.discord_webhook,
        )

    async def relay_from_discord(
        self,
        channel_id: str,
        content: str,
        author_name: Optional[str] = None,
        avatar_url: Optional[str] = None,
        is_bot: bool = False,
    ) -> Optional[RelayedMessage]:
        """Convert a Discord message for its connected Slack channel."""
        if is_bot:
            return None

        try:
            mapping = await self.store.get_mapping_by_discord(channel_id)
            if not mapping:
                return None

            logger.debug(f"discord message {channel_id}: {content!r}")
            text = await self.discord_to_slack.render_text(content)
        except (DisclackError, asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            logger.error(f"Dropping Discord message in {channel_id}: {classify_error(e)}", exc_info=e)
            return None

        return RelayedMessage(
            platform=SLACK,
            channel=mapping.slack_channel,
            content=text,
            username=author_name,
            avatar_url=avatar_url,
        )

    async def _slack_author(self, user_id: Optional[str]) -> Optional[UserInfo]:
        if not user_id:
            return None
        try:
            return await self.slack_users.get(user_id, self.slack_directory.get_user_info)
        except NotFoundError:
            logger.info(f"Slack author {user_id} not found, relaying without display fields")
            return None
