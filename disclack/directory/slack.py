"""Slack Web API directory (users.info, conversations.info, usergroups.list)."""

import logging
from typing import Optional

import httpx

from ..errors import NotFoundError, UpstreamError
from .base import ChannelInfo, Directory, UserInfo, Usergroup

logger = logging.getLogger("disclack.directory.slack")

# Slack reports missing objects as ok=false with one of these error codes
NOT_FOUND_ERRORS = {"user_not_found", "users_not_found", "channel_not_found"}


def slack_display_name(user: dict) -> str:
    """Best human-readable name of a Slack user object."""
    profile = user.get("profile") or {}
    return (
        profile.get("display_name")
        or profile.get("real_name")
        or user.get("name")
        or user.get("id", "")
    )


def slack_avatar_url(user: dict) -> Optional[str]:
    """Largest available avatar of a Slack user object."""
    profile = user.get("profile") or {}
    return (
        profile.get("image_original")
        or profile.get("image_1024")
        or profile.get("image_512")
        or profile.get("image_192")
    )


class SlackDirectory(Directory):
    """Directory lookups against the Slack Web API."""

    def __init__(
        self,
        token: str,
        api_url: str = "https://slack.com/api",
        timeout: Optional[float] = None,
    ):
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

    @property
    def platform(self) -> str:
        return "slack"

    async def _call(
        self,
        method: str,
        params: Optional[dict] = None,
        not_found: Optional[tuple[str, str]] = None,
    ) -> dict:
        """Call a Web API method and return its JSON body (ok=true only)."""
        logger.debug(f"Slack {method} {params or {}}")
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                resp = await client.get(
                    f"{self.api_url}/{method}",
                    params=params or {},
                    headers={"Authorization": f"Bearer {self.token}"},
                )
            except httpx.HTTPError as e:
                raise UpstreamError("slack", method, str(e) or type(e).__name__) from e

        if resp.status_code != 200:
            raise UpstreamError("slack", method, f"HTTP {resp.status_code}", status_code=resp.status_code)

        data = resp.json()
        if not data.get("ok"):
            error = data.get("error", "unknown_error")
            if not_found and error in NOT_FOUND_ERRORS:
                raise NotFoundError("slack", *not_found)
            raise UpstreamError("slack", method, error)
        return data

    async def get_user(self, user_id: str) -> dict:
        """Raw Slack user object (profile included)."""
        data = await self._call(
            "users.info", {"user": user_id, "include_locale": "true"}, not_found=("user", user_id)
        )
        return data.get("user") or {}

    async def get_user_info(self, user_id: str) -> UserInfo:
        user = await self.get_user(user_id)
        return UserInfo(
            id=user_id,
            display_name=slack_display_name(user) or user_id,
            avatar_url=slack_avatar_url(user),
        )

    async def get_channel_info(self, channel_id: str) -> ChannelInfo:
        data = await self._call(
            "conversations.info", {"channel": channel_id}, not_found=("channel", channel_id)
        )
        channel = data.get("channel") or {}
        return ChannelInfo(id=channel_id, name=channel.get("name"))

    async def list_usergroups(self) -> list[Usergroup]:
        data = await self._call("usergroups.list")
        return [
            Usergroup(id=g["id"], handle=g.get("handle") or g["id"])
            for g in data.get("usergroups") or []
            if g.get("id")
        ]
