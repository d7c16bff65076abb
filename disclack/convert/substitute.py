"""Two-pass inline reference substitution for plain markup text.

1. Scan the text with every rule's pattern and collect the distinct matched
   segments (overlaps resolved in favour of the earliest match, then rule order).
2. Compute one replacement per distinct segment.
3. Rebuild the text in a single pass over the original match positions.

Step 3 never re-scans replacement text, so a resolved value that happens to
look like reference syntax is left alone.
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Awaitable, Callable

logger = logging.getLogger("disclack.convert.substitute")


@dataclass(frozen=True)
class ReferenceRule:
    """One inline reference kind: a pattern plus how to replace a match."""
    kind: str
    pattern: re.Pattern
    replace: Callable[[re.Match], Awaitable[str]]


class ReferenceSubstituter:
    def __init__(self, rules: list[ReferenceRule]):
        self.rules = rules

    def scan(self, text: str) -> list[tuple[re.Match, ReferenceRule]]:
        """All non-overlapping reference matches, in text order."""
        found = []
        for priority, rule in enumerate(self.rules):
            for m in rule.pattern.finditer(text):
                if m.end() > m.start():
                    found.append((m.start(), priority, m, rule))
        found.sort(key=lambda item: (item[0], item[1]))

        matches = []
        last_end = 0
        for start, _priority, m, rule in found:
            if start < last_end:
                continue
            matches.append((m, rule))
            last_end = m.end()
        return matches

    async def substitute(self, text: str) -> str:
        if not text:
            return text

        matches = self.scan(text)
        if not matches:
            return text

        distinct: dict[str, tuple[re.Match, ReferenceRule]] = {}
        for m, rule in matches:
            distinct.setdefault(m.group(0), (m, rule))

        segments = list(distinct)
        values = await asyncio.gather(*(rule.replace(m) for m, rule in distinct.values()))
        replacements = dict(zip(segments, values))
        logger.debug(f"Substituting {len(matches)} references ({len(segments)} distinct)")

        parts = []
        pos = 0
        for m, _rule in matches:
            parts.append(text[pos:m.start()])
            parts.append(replacements[m.group(0)])
            pos = m.end()
        parts.append(text[pos:])
        return "".join(parts)
