"""Rich-text block tree → Discord markdown.

Depth-first walk over the document model. Reference leaves go through the
``IdentityResolver``; every leaf is then wrapped with its style delimiters.
Sibling nodes are rendered concurrently and concatenated in order.

Styles are flattened: one prefix per run built from the active flags in the
order bold → italic → strike → code, closed by the character-reverse of that
prefix. This works for Discord's symmetric delimiters only.
"""

import asyncio
import logging

from ..blocks import (
    Block,
    Broadcast,
    ChannelRef,
    Emoji,
    Link,
    PlainMarkup,
    Preformatted,
    Quote,
    RichList,
    RichText,
    RichTextBlockElement,
    RichTextElement,
    Section,
    Style,
    Text,
    UserRef,
    UsergroupRef,
)
from .resolver import IdentityResolver

logger = logging.getLogger("disclack.convert.render")

FENCE = "```"
QUOTE_MARKER = "> "
BULLET = "- "
CONTINUATION = "  "

# Priority order matters: the first token is the outermost delimiter
STYLE_TOKENS = (
    ("bold", "**"),
    ("italic", "*"),
    ("strike", "~~"),
    ("code", "`"),
)

UNSUPPORTED_BLOCK = "<?unsupported_block?>"
UNSUPPORTED_RICH_BLOCK = "<?unsupported_rich_block?>"
UNSUPPORTED_ELEMENT = "<?unsupported_element?>"


def wrap_styled(text: str, style: Style) -> str:
    """Surround ``text`` with the combined delimiters of ``style``."""
    prefix = "".join(token for flag, token in STYLE_TOKENS if getattr(style, flag))
    return prefix + text + prefix[::-1]


def prepend_each_line(text: str, prefix: str) -> str:
    return "\n".join(prefix + line for line in text.split("\n"))


def emoji_glyph(emoji: Emoji) -> str:
    """Unicode glyph for a Slack emoji, or ``:name:`` for custom ones."""
    if emoji.unicode:
        try:
            return "".join(chr(int(cp, 16)) for cp in emoji.unicode.split("-"))
        except (ValueError, OverflowError):
            logger.debug(f"Bad emoji code points {emoji.unicode!r} for :{emoji.name}:")
    return f":{emoji.name}:"


class BlockRenderer:
    """Render a list of blocks into target markup."""

    def __init__(self, resolver: IdentityResolver):
        self.resolver = resolver

    async def render(self, blocks: list[Block]) -> str:
        rendered = await asyncio.gather(*(self.render_block(b) for b in blocks))
        return "\n".join(rendered)

    async def render_block(self, block: Block) -> str:
        if isinstance(block, RichText):
            parts = await asyncio.gather(*(self.render_block_element(e) for e in block.elements))
            return "\n".join(parts).strip("\n")
        if isinstance(block, PlainMarkup):
            return block.text
        logger.debug(f"Unsupported block: {getattr(block, 'raw', block)!r}")
        return UNSUPPORTED_BLOCK

    async def render_block_element(self, element: RichTextBlockElement) -> str:
        if isinstance(element, Preformatted):
            body = "\n".join(await self._render_children(element.children))
            return f"{FENCE}\n{body}\n{FENCE}"
        if isinstance(element, Section):
            return "".join(await self._render_children(element.children)).strip()
        if isinstance(element, Quote):
            body = "".join(await self._render_children(element.children)).strip()
            return prepend_each_line(body, QUOTE_MARKER)
        if isinstance(element, RichList):
            return await self._render_list(element)
        logger.debug(f"Unsupported rich text element: {getattr(element, 'raw', element)!r}")
        return UNSUPPORTED_RICH_BLOCK

    async def _render_list(self, rich_list: RichList) -> str:
        items = await asyncio.gather(*(self.render_block_element(i) for i in rich_list.items))
        lines = []
        for index, item in enumerate(items):
            if not item:
                continue
            first, *rest = item.split("\n")
            marker = f"{rich_list.offset + index + 1}. " if rich_list.ordered else BULLET
            line = marker + first
            if rest:
                line += "\n" + prepend_each_line("\n".join(rest), CONTINUATION)
            lines.append(line)

        text = "\n".join(lines)
        if rich_list.indent > 0 and text:
            text = prepend_each_line(text, CONTINUATION * rich_list.indent)
        return text

    async def _render_children(self, children: list[RichTextElement]) -> list[str]:
        return list(await asyncio.gather(*(self.render_element(c) for c in children)))

    async def render_element(self, element: RichTextElement) -> str:
        if isinstance(element, Text):
            return wrap_styled(element.content, element.style)
        if isinstance(element, Link):
            return wrap_styled(f"[{element.label or element.url}]({element.url})", element.style)
        if isinstance(element, Broadcast):
            return wrap_styled(self.resolver.resolve_broadcast(element.scope), element.style)
        if isinstance(element, Emoji):
            return wrap_styled(emoji_glyph(element), element.style)
        if isinstance(element, ChannelRef):
            return wrap_styled(await self.resolver.resolve_channel(element.channel_id), element.style)
        if isinstance(element, UserRef):
            return wrap_styled(await self.resolver.resolve_user(element.user_id), element.style)
        if isinstance(element, UsergroupRef):
            return wrap_styled(await self.resolver.resolve_usergroup(element.usergroup_id), element.style)
        logger.debug(f"Unsupported inline element: {getattr(element, 'raw', element)!r}")
        return UNSUPPORTED_ELEMENT
