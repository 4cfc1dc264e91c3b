"""
Itinerary normalization.

Turns the extractor's raw day list into validated ``DailyPlan`` objects:
stable item ids, ISO start/end instants derived from human time ranges,
synthesized day numbers and dates, and hotel-first ordering within a day.
Malformed pieces get best-effort defaults instead of failing the itinerary.
"""

import logging
import re
import secrets
from datetime import date, datetime, time, timedelta
from typing import Any

from pydantic import ValidationError

from tripweaver.domains.itinerary.models import DEFAULT_ITEM_TITLE, ItemType
from tripweaver.domains.itinerary.schemas import DailyPlan, ItineraryItem

logger = logging.getLogger(__name__)

# "9:00-12:30", "09:00 – 17:00", "18:00—21:00"
_TIME_RANGE = re.compile(
    r"^\s*(\d{1,2}):(\d{2})\s*[-–—]\s*(\d{1,2}):(\d{2})\s*$"
)
_SLUG_STRIP = re.compile(r"[^a-z0-9]+")

SLUG_LENGTH = 8
SUFFIX_BYTES = 3

# Fields the normalizer owns; raw values for these never pass through as-is
_MANAGED_FIELDS = {"id", "title", "type", "timeRange", "time_range", "start", "end"}


def slugify(title: str) -> str:
    """Lowercase ASCII slug of a title."""
    return _SLUG_STRIP.sub("-", title.lower()).strip("-")


def make_item_id(day_idx: int, item_idx: int, title: str) -> str:
    """Composite id: position, short title slug and a random suffix."""
    slug = slugify(title)[:SLUG_LENGTH].strip("-") or "item"
    return f"d{day_idx}-i{item_idx}-{slug}-{secrets.token_hex(SUFFIX_BYTES)}"


def parse_time_range(
    time_range: str | None, day_date: str
) -> tuple[str | None, str | None]:
    """
    Derive ISO instants from a "HH:MM-HH:MM" range on a given day.

    Instants are naive local time (``YYYY-MM-DDTHH:MM:00``). Anything that
    does not match the pattern, or names an impossible clock time, yields
    ``(None, None)``. An end earlier than the start is taken to be after
    midnight.
    """
    if not isinstance(time_range, str):
        return None, None
    match = _TIME_RANGE.match(time_range)
    if not match:
        return None, None

    try:
        base = date.fromisoformat(day_date)
        start_t = time(int(match.group(1)), int(match.group(2)))
        end_t = time(int(match.group(3)), int(match.group(4)))
    except ValueError:
        return None, None

    start = datetime.combine(base, start_t)
    end = datetime.combine(base, end_t)
    if end < start:
        end += timedelta(days=1)
    return start.isoformat(), end.isoformat()


def hotel_first(items: list[ItineraryItem]) -> list[ItineraryItem]:
    """Stable partition: hotels first, everything else after, order kept."""
    hotels: list[ItineraryItem] = []
    others: list[ItineraryItem] = []
    for item in items:
        (hotels if item.type == ItemType.HOTEL else others).append(item)
    return hotels + others


def _coerce_day_number(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str) and value.strip().isdigit():
        number = int(value.strip())
        return number if number > 0 else None
    return None


def _coerce_date(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value.strip()).isoformat()
    except ValueError:
        return None


def _coerce_title(value: Any) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return DEFAULT_ITEM_TITLE


def _build_item(raw: dict, day_idx: int, item_idx: int, day_date: str) -> ItineraryItem:
    title = _coerce_title(raw.get("title"))
    time_range = raw.get("timeRange", raw.get("time_range"))
    start = raw.get("start") if isinstance(raw.get("start"), str) else None
    end = raw.get("end") if isinstance(raw.get("end"), str) else None

    if not start and not end and time_range is not None:
        start, end = parse_time_range(time_range, day_date)

    data = {k: v for k, v in raw.items() if k not in _MANAGED_FIELDS}
    data.update(
        id=make_item_id(day_idx, item_idx, title),
        title=title,
        type=ItemType.parse(raw.get("type")),
        time_range=time_range if isinstance(time_range, str) else None,
        start=start,
        end=end,
    )

    # Drop optional fields that fail validation rather than the whole item
    for _ in range(len(data)):
        try:
            return ItineraryItem.model_validate(data)
        except ValidationError as e:
            bad = {err["loc"][0] for err in e.errors() if err["loc"]}
            bad -= {"id", "title", "type"}
            if not bad:
                raise
            logger.warning(f"Dropping invalid fields {sorted(map(str, bad))} from '{title}'")
            for field in bad:
                data.pop(field, None)
                data.pop(_alias_of(field), None)
    return ItineraryItem.model_validate(data)


def _alias_of(field: str | int) -> str:
    info = ItineraryItem.model_fields.get(str(field))
    return info.alias if info and info.alias else str(field)


def normalize(raw_days: list[dict], today: date | None = None) -> list[DailyPlan]:
    """
    Convert a raw day list into the canonical itinerary.

    Args:
        raw_days: Output of ``extractor.extract``.
        today: Anchor for synthesized dates (defaults to the local date).

    Returns:
        One DailyPlan per raw day, in input order. Days sharing a ``day``
        number are kept apart; empty days are kept.
    """
    today = today or date.today()
    plans: list[DailyPlan] = []

    for idx, raw_day in enumerate(raw_days):
        if not isinstance(raw_day, dict):
            raw_day = {}

        day_number = _coerce_day_number(raw_day.get("day")) or idx + 1
        day_date = _coerce_date(raw_day.get("date")) or (
            today + timedelta(days=idx)
        ).isoformat()

        raw_items = raw_day.get("items")
        if not isinstance(raw_items, list):
            raw_items = []

        items = [
            _build_item(raw_item, idx, j, day_date)
            for j, raw_item in enumerate(raw_items)
            if isinstance(raw_item, dict)
        ]

        plans.append(DailyPlan(day=day_number, date=day_date, items=hotel_first(items)))

    logger.info(
        f"Normalized itinerary: {len(plans)} days, "
        f"{sum(len(p.items) for p in plans)} items"
    )
    return plans
