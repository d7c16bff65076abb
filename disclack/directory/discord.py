"""Discord REST directory (users, channels, guild roles)."""

import logging
from typing import Optional

import httpx

from ..errors import NotFoundError, UpstreamError
from .base import ChannelInfo, Directory, UserInfo, Usergroup

logger = logging.getLogger("disclack.directory.discord")

CDN_URL = "https://cdn.discordapp.com"


class DiscordDirectory(Directory):
    """Directory lookups against the Discord REST API.

    Roles of ``guild_id`` stand in for Slack usergroups; without a guild
    the group list is empty.
    """

    def __init__(
        self,
        token: str,
        api_url: str = "https://discord.com/api/v10",
        guild_id: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.guild_id = guild_id
        self.timeout = timeout

    @property
    def platform(self) -> str:
        return "discord"

    async def _get(self, path: str, not_found: Optional[tuple[str, str]] = None):
        logger.debug(f"Discord GET {path}")
        method = f"GET {path}"
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                resp = await client.get(
                    f"{self.api_url}{path}",
                    headers={"Authorization": f"Bot {self.token}"},
                )
            except httpx.HTTPError as e:
                raise UpstreamError("discord", method, str(e) or type(e).__name__) from e

        if resp.status_code == 404 and not_found:
            raise NotFoundError("discord", *not_found)
        if resp.status_code >= 400:
            raise UpstreamError("discord", method, f"HTTP {resp.status_code}", status_code=resp.status_code)
        return resp.json()

    async def get_user_info(self, user_id: str) -> UserInfo:
        user = await self._get(f"/users/{user_id}", not_found=("user", user_id))
        avatar = user.get("avatar")
        return UserInfo(
            id=user_id,
            display_name=user.get("global_name") or user.get("username") or user_id,
            avatar_url=f"{CDN_URL}/avatars/{user_id}/{avatar}.png" if avatar else None,
        )

    async def get_channel_info(self, channel_id: str) -> ChannelInfo:
        channel = await self._get(f"/channels/{channel_id}", not_found=("channel", channel_id))
        # DM channels carry no name
        return ChannelInfo(id=channel_id, name=channel.get("name"))

    async def list_usergroups(self) -> list[Usergroup]:
        if not self.guild_id:
            return []
        roles = await self._get(f"/guilds/{self.guild_id}/roles")
        return [Usergroup(id=r["id"], handle=r.get("name") or r["id"]) for r in roles if r.get("id")]
