import json
from dataclasses import dataclass, field

from pydantic import ValidationError

from app.core.errors import FeedParseFailed
from app.core.models import NewHire

# HCM Atom entries embed each new hire as `"Context" : [ {...} ]` inside <content>.
ENTRY_START = ": ["
ENTRY_END = " ]"
UPDATED_MARKER = "<updated>"
TIMESTAMP_WIDTH = 24


@dataclass(frozen=True)
class ParsedFeed:
    new_hires: list[NewHire] = field(default_factory=list)
    latest_updated: str | None = None


def extract_latest_updated(raw: str) -> str | None:
    start = raw.find(UPDATED_MARKER)
    if start < 0:
        return None
    start += len(UPDATED_MARKER)
    return raw[start : start + TIMESTAMP_WIDTH]


def extract_entry_fragments(raw: str) -> list[str]:
    fragments = []
    for chunk in raw.split(ENTRY_START)[1:]:
        end = chunk.find(ENTRY_END)
        fragments.append(chunk if end < 0 else chunk[:end])
    return fragments


def parse_new_hire(fragment: str, *, index: int) -> NewHire:
    try:
        payload = json.loads(fragment)
    except json.JSONDecodeError as exc:
        raise FeedParseFailed(f"Feed entry {index} is not valid JSON: {exc.msg}") from exc
    if not isinstance(payload, dict):
        raise FeedParseFailed(f"Feed entry {index} is not a JSON object")
    try:
        return NewHire.model_validate(payload)
    except ValidationError as exc:
        raise FeedParseFailed(f"Feed entry {index} has no usable PersonNumber") from exc


def parse_feed(raw: str) -> ParsedFeed:
    new_hires = [
        parse_new_hire(fragment, index=idx)
        for idx, fragment in enumerate(extract_entry_fragments(raw))
    ]
    return ParsedFeed(new_hires=new_hires, latest_updated=extract_latest_updated(raw))
