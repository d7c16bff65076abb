"""Platform-agnostic directory interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class UserInfo:
    id: str
    display_name: str
    avatar_url: Optional[str] = None


@dataclass
class ChannelInfo:
    id: str
    name: Optional[str] = None


@dataclass
class Usergroup:
    id: str
    handle: str


class Directory(ABC):
    """Live lookup API of one chat platform.

    ``get_user_info`` and ``get_channel_info`` raise ``NotFoundError`` when
    the id does not exist and ``UpstreamError`` for any other failure.
    """

    @property
    @abstractmethod
    def platform(self) -> str:
        """Platform name, e.g. 'slack'."""
        ...

    @abstractmethod
    async def get_user_info(self, user_id: str) -> UserInfo:
        ...

    @abstractmethod
    async def get_channel_info(self, channel_id: str) -> ChannelInfo:
        ...

    @abstractmethod
    async def list_usergroups(self) -> list[Usergroup]:
        """All groups (Slack usergroups / Discord roles), in API order."""
        ...
