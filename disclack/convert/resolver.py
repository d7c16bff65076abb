"""Cross-platform identity resolution.

Order of precedence for users and channels:
  1. mapping store: verified counterpart, rendered as a real mention
  2. live directory lookup (through the TTL cache): plain ``@name`` / ``#name``
  3. literal placeholder: ``@{id}`` / ``#{id}`` when the directory says NotFound

Usergroups have no persisted mapping and always go to the directory.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from ..cache import TTLCache
from ..db.models import MappingStore
from ..directory.base import ChannelInfo, Directory, UserInfo, Usergroup
from ..errors import NotFoundError

logger = logging.getLogger("disclack.convert.resolver")

USERGROUPS_KEY = "*"


@dataclass(frozen=True)
class MentionSyntax:
    """Canonical mention tokens of a target platform."""
    user: str
    channel: str
    here: str
    everyone: str


DISCORD_MENTIONS = MentionSyntax(user="<@{}>", channel="<#{}>", here="@here", everyone="@everyone")
SLACK_MENTIONS = MentionSyntax(user="<@{}>", channel="<#{}>", here="<!here>", everyone="<!everyone>")


class IdentityResolver:
    """Resolve ids from the ``directory``'s platform into ``target`` mentions."""

    def __init__(
        self,
        store: MappingStore,
        directory: Directory,
        target: MentionSyntax,
        ttl: float = 60.0,
        evict_on_failure: bool = False,
        users_cache: Optional[TTLCache[str, UserInfo]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.store = store
        self.directory = directory
        self.target = target
        self.source = directory.platform

        self.users: TTLCache[str, UserInfo] = users_cache if users_cache is not None else TTLCache(
            ttl, name=f"{self.source}.users", evict_on_failure=evict_on_failure, clock=clock
        )
        self.channels: TTLCache[str, ChannelInfo] = TTLCache(
            ttl, name=f"{self.source}.channels", evict_on_failure=evict_on_failure, clock=clock
        )
        self.usergroups: TTLCache[str, list[Usergroup]] = TTLCache(
            ttl, name=f"{self.source}.usergroups", evict_on_failure=evict_on_failure, clock=clock
        )

    async def resolve_user(self, user_id: str) -> str:
        mapping = await self.store.get_user(self.source, user_id)
        if mapping:
            return self.target.user.format(mapping.counterpart(self.source))

        try:
            info = await self.users.get(user_id, self.directory.get_user_info)
        except NotFoundError:
            logger.info(f"{self.source} user {user_id} not found, using literal id")
            return f"@{user_id}"
        return f"@{info.display_name or user_id}"

    async def resolve_channel(self, channel_id: str) -> str:
        mapping = await self.store.get_mapping(self.source, channel_id)
        if mapping:
            return self.target.channel.format(mapping.counterpart(self.source))

        try:
            info = await self.channels.get(channel_id, self.directory.get_channel_info)
        except NotFoundError:
            logger.info(f"{self.source} channel {channel_id} not found, using literal id")
            return f"#{channel_id}"
        return f"#{info.name or channel_id}"

    async def resolve_usergroup(self, usergroup_id: str) -> str:
        groups = await self.usergroups.get(USERGROUPS_KEY, self._list_usergroups)
        for group in groups:
            if group.id == usergroup_id:
                return f"@{group.handle}"
        return f"@&{usergroup_id}"

    def resolve_broadcast(self, scope: str) -> str:
        # Slack's 'channel' range pings everyone in the channel
        return self.target.here if scope == "here" else self.target.everyone

    async def _list_usergroups(self, _key: str) -> list[Usergroup]:
        return await self.directory.list_usergroups()
