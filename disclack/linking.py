"""Validated mapping mutations: link/unlink users, connect/disconnect channels.

Verification (the Slack DM approval flow, channel-creator checks) happens
before these are called; here only id shape and uniqueness are enforced.
"""

import logging
import re

from .db.models import ChannelMapping, MappingStore, UserMapping
from .errors import InvalidIdentifierError, MappingConflictError

logger = logging.getLogger("disclack.linking")

SLACK_USER_RE = re.compile(r"^U[A-Z0-9]+$")
SLACK_CHANNEL_RE = re.compile(r"^C[0-9A-Z]+$")
DISCORD_ID_RE = re.compile(r"^[0-9]+$")


def _check_discord_id(value: str, what: str):
    if not DISCORD_ID_RE.match(value or ""):
        raise InvalidIdentifierError(f"The Discord {what} ID '{value}' is invalid.")


async def link_user(store: MappingStore, slack_id: str, discord_id: str) -> UserMapping:
    """Link a Discord user with a Slack user."""
    if not SLACK_USER_RE.match(slack_id or ""):
        raise InvalidIdentifierError(f"The Slack user ID '{slack_id}' is invalid.")
    _check_discord_id(discord_id, "user")

    existing = await store.get_user_by_discord(discord_id)
    if existing:
        raise MappingConflictError(
            f"Discord user {discord_id} is already linked to Slack user {existing.slack_id}."
        )
    existing = await store.get_user_by_slack(slack_id)
    if existing:
        raise MappingConflictError(
            f"Slack user {slack_id} is already linked to Discord user {existing.discord_id}."
        )

    return await store.insert_user(UserMapping(slack_id=slack_id, discord_id=discord_id))


async def unlink_user(store: MappingStore, discord_id: str) -> bool:
    """Remove the link of a Discord user. False if it was not linked."""
    deleted = await store.delete_user_by_discord(discord_id)
    if not deleted:
        logger.info(f"Unlink requested for Discord user {discord_id}, but it is not linked")
    return deleted


async def connect_channel(
    store: MappingStore,
    slack_channel: str,
    discord_channel: str,
    discord_webhook: str,
) -> ChannelMapping:
    """Connect a Discord text channel (and its relay webhook) with a Slack channel."""
    if not SLACK_CHANNEL_RE.match(slack_channel or ""):
        raise InvalidIdentifierError(f"The Slack channel ID '{slack_channel}' is invalid.")
    _check_discord_id(discord_channel, "channel")
    _check_discord_id(discord_webhook, "webhook")

    existing = await store.get_mapping_by_discord(discord_channel)
    if existing:
        raise MappingConflictError(
            f"The Discord channel is already linked to the Slack channel {existing.slack_channel}."
        )
    existing = await store.get_mapping_by_slack(slack_channel)
    if existing:
        raise MappingConflictError(
            f"The Slack channel is already linked to a Discord channel ({existing.discord_channel})."
        )

    return await store.insert_mapping(ChannelMapping(
        slack_channel=slack_channel,
        discord_channel=discord_channel,
        discord_webhook=discord_webhook,
    ))


async def disconnect_channel(store: MappingStore, discord_channel: str) -> bool:
    """Remove a channel connection. False if the channel was not connected."""
    deleted = await store.delete_mapping_by_discord(discord_channel)
    if not deleted:
        logger.info(f"Disconnect requested for Discord channel {discord_channel}, but it is not connected")
    return deleted
