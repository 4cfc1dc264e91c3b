"""
Itinerary extraction from free-form assistant replies.

The assistant answers with a friendly summary followed by a fenced JSON
block. Models are not always disciplined about the fence, so extraction is
tolerant:

1. a ```json / ~~~json fence, then an untagged fence;
2. otherwise everything between the first ``{`` and the last ``}``;
3. ``json.loads`` on the slice;
4. an ordered list of shape matchers turns the parsed value into the
   canonical ``[{"day", "date", "items": [...]}]`` day list.

Nothing here raises on bad input: ``extract`` returns ``None`` when the text
carries no usable itinerary.
"""

import json
import logging
import re
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

RawDay = dict[str, Any]
RawItinerary = list[RawDay]

# The closing fence must repeat the opening marker (``` or ~~~)
_TAGGED_FENCE = re.compile(
    r"^[ \t]*(`{3}|~{3})[ \t]*json[ \t]*\n(.*?)\n[ \t]*\1",
    re.MULTILINE | re.DOTALL | re.IGNORECASE,
)
_BARE_FENCE = re.compile(
    r"^[ \t]*(`{3}|~{3})[ \t]*\n(.*?)\n[ \t]*\1",
    re.MULTILINE | re.DOTALL,
)

_COMPLETE_FENCE = re.compile(r"[`~]{3}.*?[`~]{3}", re.DOTALL)
_OPEN_FENCE = re.compile(r"[`~]{3}")
_BARE_ITINERARY_JSON = re.compile(r"\{.*?\"itinerary\"", re.DOTALL | re.IGNORECASE)
_TRIP_TITLE = re.compile(r"Your trip to ([^\n]+?) from", re.IGNORECASE)


def find_json_block(raw_text: str) -> str | None:
    """Return the text most likely to hold the itinerary JSON."""
    if not raw_text:
        return None

    for pattern in (_TAGGED_FENCE, _BARE_FENCE):
        match = pattern.search(raw_text)
        if match:
            return match.group(2)

    start = raw_text.find("{")
    end = raw_text.rfind("}")
    if start != -1 and end > start:
        return raw_text[start : end + 1]
    return None


# ============ Shape Matchers ============


def _as_items(value: Any) -> list[dict]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _as_day(value: dict) -> RawDay:
    day = {k: v for k, v in value.items() if k != "items"}
    day["items"] = _as_items(value.get("items"))
    return day


def _looks_like_item(value: Any) -> bool:
    return isinstance(value, dict) and "title" in value and "items" not in value


def _match_itinerary(data: Any) -> RawItinerary | None:
    if isinstance(data, dict) and isinstance(data.get("itinerary"), list):
        return [_as_day(d) for d in data["itinerary"] if isinstance(d, dict)]
    return None


def _match_day_list(data: Any) -> RawItinerary | None:
    if not isinstance(data, list):
        return None
    entries = [d for d in data if isinstance(d, dict)]
    if not entries:
        return None
    if all(_looks_like_item(d) for d in entries):
        # A flat list of items is one day
        return [{"items": entries}]
    return [_as_day(d) for d in entries]


def _match_single_day(data: Any) -> RawItinerary | None:
    if isinstance(data, dict) and isinstance(data.get("items"), list):
        return [_as_day(data)]
    return None


def _match_single_item(data: Any) -> RawItinerary | None:
    if isinstance(data, dict) and "title" in data:
        return [{"items": [data]}]
    return None


# Tried in order, first match wins
SHAPE_MATCHERS: list[tuple[str, Callable[[Any], RawItinerary | None]]] = [
    ("itinerary", _match_itinerary),
    ("day_list", _match_day_list),
    ("single_day", _match_single_day),
    ("single_item", _match_single_item),
]


def match_shape(data: Any) -> RawItinerary | None:
    """Normalize any accepted JSON shape to the canonical day list."""
    for name, matcher in SHAPE_MATCHERS:
        days = matcher(data)
        if days is not None:
            logger.debug(f"Itinerary shape matched: {name} ({len(days)} days)")
            return days
    return None


def extract(raw_text: str) -> RawItinerary | None:
    """
    Extract the raw itinerary tree from an assistant reply.

    Args:
        raw_text: Complete assistant reply.

    Returns:
        Canonical list of raw days, or None when no itinerary is present.
    """
    block = find_json_block(raw_text)
    if block is None:
        logger.info("No itinerary JSON found in reply")
        return None

    try:
        data = json.loads(block)
    except json.JSONDecodeError as e:
        logger.warning(f"Itinerary JSON parsing failed: {e}")
        return None

    days = match_shape(data)
    if days is None:
        logger.info("Parsed JSON does not contain an itinerary")
    return days


# ============ Conversational Text ============


def summarize_reply(raw_text: str) -> str:
    """Strip the machine-readable part of a reply, keeping the prose."""
    summary = _COMPLETE_FENCE.sub("", raw_text or "")

    # Unterminated fence: everything after it is JSON
    fence = _OPEN_FENCE.search(summary)
    if fence:
        summary = summary[: fence.start()]

    bare_json = _BARE_ITINERARY_JSON.search(summary)
    if bare_json:
        summary = summary[: bare_json.start()]

    return summary.strip()


def extract_trip_title(summary: str) -> str | None:
    """Pull the destination out of "Your trip to <X> from ..."."""
    match = _TRIP_TITLE.search(summary or "")
    if match:
        return match.group(1).strip()
    return None
