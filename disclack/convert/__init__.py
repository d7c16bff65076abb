"""Message content conversion between Slack and Discord."""

from .discord import DiscordToSlack
from .render import BlockRenderer, wrap_styled
from .resolver import DISCORD_MENTIONS, SLACK_MENTIONS, IdentityResolver, MentionSyntax
from .slack import SlackToDiscord
from .substitute import ReferenceRule, ReferenceSubstituter

__all__ = [
    "BlockRenderer",
    "DiscordToSlack",
    "IdentityResolver",
    "MentionSyntax",
    "ReferenceRule",
    "ReferenceSubstituter",
    "SlackToDiscord",
    "DISCORD_MENTIONS",
    "SLACK_MENTIONS",
    "wrap_styled",
]
