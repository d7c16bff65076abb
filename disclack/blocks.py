"""Rich-text document model and the Slack block payload parser.

The model is a tagged-union tree of plain dataclasses:

    Block               RichText | PlainMarkup | UnknownBlock
    RichTextBlockElement Preformatted | Section | Quote | RichList | UnknownBlockElement
    RichTextElement     Text | Link | Broadcast | Emoji | ChannelRef | UserRef
                        | UsergroupRef | UnknownElement

Anything the parser does not recognise becomes an ``Unknown*`` node carrying
the raw payload, so the renderer can emit a visible placeholder for it.
"""

from dataclasses import dataclass, field
from typing import Optional, Union


@dataclass(frozen=True)
class Style:
    """Independent style flags applied to a whole leaf run."""
    bold: bool = False
    italic: bool = False
    strike: bool = False
    code: bool = False

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "Style":
        if not data:
            return PLAIN
        return cls(
            bold=bool(data.get("bold")),
            italic=bool(data.get("italic")),
            strike=bool(data.get("strike")),
            code=bool(data.get("code")),
        )


PLAIN = Style()


# ============================================================
# INLINE ELEMENTS
# ============================================================

@dataclass
class Text:
    content: str
    style: Style = PLAIN


@dataclass
class Link:
    url: str
    label: Optional[str] = None
    style: Style = PLAIN


@dataclass
class Broadcast:
    scope: str              # 'here' | 'channel' | 'everyone'
    style: Style = PLAIN


@dataclass
class Emoji:
    name: str
    unicode: Optional[str] = None   # Slack sends hex code points, e.g. '1f44d-1f3fb'
    style: Style = PLAIN


@dataclass
class ChannelRef:
    channel_id: str
    style: Style = PLAIN


@dataclass
class UserRef:
    user_id: str
    style: Style = PLAIN


@dataclass
class UsergroupRef:
    usergroup_id: str
    style: Style = PLAIN


@dataclass
class UnknownElement:
    raw: dict = field(default_factory=dict)


RichTextElement = Union[
    Text, Link, Broadcast, Emoji, ChannelRef, UserRef, UsergroupRef, UnknownElement
]


# ============================================================
# BLOCK ELEMENTS
# ============================================================

@dataclass
class Preformatted:
    children: list[RichTextElement] = field(default_factory=list)


@dataclass
class Section:
    children: list[RichTextElement] = field(default_factory=list)


@dataclass
class Quote:
    children: list[RichTextElement] = field(default_factory=list)


@dataclass
class RichList:
    ordered: bool
    items: list["RichTextBlockElement"] = field(default_factory=list)
    indent: int = 0
    offset: int = 0


@dataclass
class UnknownBlockElement:
    raw: dict = field(default_factory=dict)


RichTextBlockElement = Union[Preformatted, Section, Quote, RichList, UnknownBlockElement]


# ============================================================
# TOP-LEVEL BLOCKS
# ============================================================

@dataclass
class RichText:
    elements: list[RichTextBlockElement] = field(default_factory=list)


@dataclass
class PlainMarkup:
    text: str


@dataclass
class UnknownBlock:
    raw: dict = field(default_factory=dict)


Block = Union[RichText, PlainMarkup, UnknownBlock]


# ============================================================
# SLACK PAYLOAD PARSER
# ============================================================

def parse_blocks(raw_blocks: Optional[list]) -> list[Block]:
    """Parse a Slack ``blocks`` array into the document model."""
    return [parse_block(b) for b in raw_blocks or []]


def parse_block(raw: dict) -> Block:
    if not isinstance(raw, dict):
        return UnknownBlock(raw={"value": raw})

    kind = raw.get("type")
    if kind == "rich_text":
        return RichText(elements=[parse_block_element(e) for e in raw.get("elements") or []])
    if kind == "markdown" and isinstance(raw.get("text"), str):
        return PlainMarkup(text=raw["text"])
    return UnknownBlock(raw=raw)


def parse_block_element(raw: dict) -> RichTextBlockElement:
    if not isinstance(raw, dict):
        return UnknownBlockElement(raw={"value": raw})

    kind = raw.get("type")
    elements = raw.get("elements") or []
    if kind == "rich_text_preformatted":
        return Preformatted(children=[parse_element(e) for e in elements])
    if kind == "rich_text_section":
        return Section(children=[parse_element(e) for e in elements])
    if kind == "rich_text_quote":
        return Quote(children=[parse_element(e) for e in elements])
    if kind == "rich_text_list":
        return RichList(
            ordered=raw.get("style") == "ordered",
            items=[parse_block_element(e) for e in elements],
            indent=int(raw.get("indent") or 0),
            offset=int(raw.get("offset") or 0),
        )
    return UnknownBlockElement(raw=raw)


def parse_element(raw: dict) -> RichTextElement:
    if not isinstance(raw, dict):
        return UnknownElement(raw={"value": raw})

    kind = raw.get("type")
    style = Style.from_dict(raw.get("style"))
    try:
        if kind == "text":
            return Text(content=raw["text"], style=style)
        if kind == "link":
            return Link(url=raw["url"], label=raw.get("text") or None, style=style)
        if kind == "broadcast":
            return Broadcast(scope=raw["range"], style=style)
        if kind == "emoji":
            return Emoji(name=raw["name"], unicode=raw.get("unicode") or None, style=style)
        if kind == "channel":
            return ChannelRef(channel_id=raw["channel_id"], style=style)
        if kind == "user":
            return UserRef(user_id=raw["user_id"], style=style)
        if kind == "usergroup":
            return UsergroupRef(usergroup_id=raw["usergroup_id"], style=style)
    except KeyError:
        # Known type with a missing field is still unrenderable content
        return UnknownElement(raw=raw)
    return UnknownElement(raw=raw)
