"""
Heuristic parser for pasted idea lists.

Turns loosely formatted text (numbered lists, bullets, "title - details"
lines) into (title, description) pairs. Lines that do not yield a title are
skipped rather than failing the whole batch.
"""
import re
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple

# "12. ", "3) ", "- ", "• ", "★ ", "→ " and similar prefixes
LIST_MARKER = re.compile(r"^[\d\s]*[.)\-•★→]*\s*")

# Tried in order, first match wins. A bare hyphen needs spaces around it so
# words like "e-mail" stay intact.
SEPARATORS: Tuple[Tuple[str, "re.Pattern[str]"], ...] = (
    ("hyphen", re.compile(r"^(.+?)\s+-\s+(.+)$")),
    ("colon", re.compile(r"^(.+?)\s*:\s*(.+)$")),
    ("arrow", re.compile(r"^(.+?)\s*→\s*(.+)$")),
    ("pipe", re.compile(r"^(.+?)\s*\|\s*(.+)$")),
)


@dataclass(frozen=True)
class ParsedIdea:
    title: str
    description: Optional[str] = None


def strip_list_marker(line: str) -> str:
    return LIST_MARKER.sub("", line.strip(), count=1).strip()


def split_title_description(line: str) -> ParsedIdea:
    for _name, pattern in SEPARATORS:
        match = pattern.match(line)
        if not match:
            continue
        title, description = match.group(1).strip(), match.group(2).strip()
        if title and description:
            return ParsedIdea(title=title, description=description)
    return ParsedIdea(title=line)


def parse_import_text(text: str) -> List[ParsedIdea]:
    """Parse free text, one idea per line, preserving line order."""
    parsed = []
    for raw_line in (text or "").splitlines():
        if not raw_line.strip():
            continue
        cleaned = strip_list_marker(raw_line)
        if not cleaned:
            continue
        idea = split_title_description(cleaned)
        if idea.title:
            parsed.append(idea)
    return parsed


def assign_sort_orders(base: int, parsed: Iterable[ParsedIdea]) -> Iterator[Tuple[int, ParsedIdea]]:
    """Pair each accepted idea with `base + position`."""
    for index, idea in enumerate(parsed):
        yield base + index, idea
