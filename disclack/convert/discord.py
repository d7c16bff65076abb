"""Discord → Slack conversion.

The output is still markdown (Slack's ``markdown`` block renders it), not
mrkdwn; only inline references are rewritten into Slack syntax.
"""

import re

from .resolver import IdentityResolver
from .substitute import ReferenceRule, ReferenceSubstituter

USER_RE = re.compile(r"<@!?([0-9]+)>")
ROLE_RE = re.compile(r"<@&([0-9]+)>")
CHANNEL_RE = re.compile(r"<#([0-9]+)>")
BROADCAST_RE = re.compile(r"(?<![\w@.])@(here|everyone)\b")
CUSTOM_EMOJI_RE = re.compile(r"<a?:(\w+):[0-9]+>")


def discord_rules(resolver: IdentityResolver) -> list[ReferenceRule]:
    """Reference rules for Discord markdown text."""

    async def user(m: re.Match) -> str:
        return await resolver.resolve_user(m.group(1))

    async def role(m: re.Match) -> str:
        return await resolver.resolve_usergroup(m.group(1))

    async def channel(m: re.Match) -> str:
        return await resolver.resolve_channel(m.group(1))

    async def broadcast(m: re.Match) -> str:
        return resolver.resolve_broadcast(m.group(1))

    async def custom_emoji(m: re.Match) -> str:
        return f":{m.group(1)}:"

    return [
        ReferenceRule("user", USER_RE, user),
        ReferenceRule("usergroup", ROLE_RE, role),
        ReferenceRule("channel", CHANNEL_RE, channel),
        ReferenceRule("broadcast", BROADCAST_RE, broadcast),
        ReferenceRule("emoji", CUSTOM_EMOJI_RE, custom_emoji),
    ]


class DiscordToSlack:
    """Convert Discord message content into Slack markdown."""

    def __init__(self, resolver: IdentityResolver):
        self.resolver = resolver
        self.substituter = ReferenceSubstituter(discord_rules(resolver))

    async def render_text(self, markdown: str) -> str:
        return await self.substituter.substitute(markdown)
