"""Slack → Discord conversion.

Messages with ``blocks`` are rendered from the rich-text tree; messages with
only ``text`` (plain mrkdwn) get their references, links and entities
rewritten by the substituter. Mrkdwn styling is left as-is.
"""

import re
from typing import Optional, Union

from ..blocks import Block, parse_blocks
from .render import BlockRenderer
from .resolver import IdentityResolver
from .substitute import ReferenceRule, ReferenceSubstituter

USER_RE = re.compile(r"<@([UW][A-Z0-9]+)(?:\|[^>]*)?>")
CHANNEL_RE = re.compile(r"<#([CGD][A-Z0-9]+)(?:\|[^>]*)?>")
USERGROUP_RE = re.compile(r"<!subteam\^([A-Z0-9]+)(?:\|[^>]*)?>")
BROADCAST_RE = re.compile(r"<!(here|channel|everyone)(?:\|[^>]*)?>")
LINK_RE = re.compile(r"<((?:https?|mailto|tel):[^|>]+)(?:\|([^>]+))?>")
ENTITY_RE = re.compile(r"&(amp|lt|gt);")

ENTITIES = {"amp": "&", "lt": "<", "gt": ">"}


def unescape_mrkdwn(text: str) -> str:
    """Decode the three entities Slack escapes in message text."""
    return ENTITY_RE.sub(lambda m: ENTITIES[m.group(1)], text)


def slack_rules(resolver: IdentityResolver) -> list[ReferenceRule]:
    """Reference rules for Slack mrkdwn text."""

    async def user(m: re.Match) -> str:
        return await resolver.resolve_user(m.group(1))

    async def channel(m: re.Match) -> str:
        return await resolver.resolve_channel(m.group(1))

    async def usergroup(m: re.Match) -> str:
        return await resolver.resolve_usergroup(m.group(1))

    async def broadcast(m: re.Match) -> str:
        return resolver.resolve_broadcast(m.group(1))

    async def link(m: re.Match) -> str:
        url, label = m.group(1), m.group(2)
        if not label or label.strip() == "":
            return url
        return f"[{unescape_mrkdwn(label)}]({url})"

    async def entity(m: re.Match) -> str:
        return ENTITIES[m.group(1)]

    return [
        ReferenceRule("user", USER_RE, user),
        ReferenceRule("channel", CHANNEL_RE, channel),
        ReferenceRule("usergroup", USERGROUP_RE, usergroup),
        ReferenceRule("broadcast", BROADCAST_RE, broadcast),
        ReferenceRule("link", LINK_RE, link),
        ReferenceRule("entity", ENTITY_RE, entity),
    ]


class SlackToDiscord:
    """Convert Slack message content into Discord markdown."""

    def __init__(self, resolver: IdentityResolver):
        self.resolver = resolver
        self.renderer = BlockRenderer(resolver)
        self.substituter = ReferenceSubstituter(slack_rules(resolver))

    async def render_blocks(self, blocks: Union[list[Block], list[dict]]) -> str:
        """Render a structured document; raw Slack block dicts are parsed first."""
        if blocks and isinstance(blocks[0], dict):
            blocks = parse_blocks(blocks)
        return await self.renderer.render(blocks)

    async def render_text(self, mrkdwn: str) -> str:
        return await self.substituter.substitute(mrkdwn)

    async def render_message(self, message: dict) -> Optional[str]:
        """Render a Slack message event: blocks when present, else text."""
        if message.get("blocks"):
            return await self.render_blocks(message["blocks"])
        text = message.get("text")
        if text:
            return await self.render_text(text)
        return None
