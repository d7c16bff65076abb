"""Live directory lookups (user / channel / group metadata) per platform."""

from .base import ChannelInfo, Directory, UserInfo, Usergroup
from .discord import DiscordDirectory
from .slack import SlackDirectory

__all__ = [
    "ChannelInfo",
    "Directory",
    "UserInfo",
    "Usergroup",
    "DiscordDirectory",
    "SlackDirectory",
]
