"""
Background enrichment of a normalized itinerary.

One task per item that still lacks a real image. Each task resolves the
place, then the photo, and returns an ItemPatch. Patches are applied by id to
whatever itinerary is attached when they complete, so results for a replaced
itinerary are dropped instead of landing on the wrong item.
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from tripweaver.domains.itinerary.schemas import (
    DailyPlan,
    ItemPatch,
    ItineraryItem,
    PhotoResult,
    PlaceHints,
    ResolvedPlace,
    find_item,
    is_placeholder_url,
    iter_items,
)
from tripweaver.domains.itinerary.services.photo_resolver import PhotoResolver
from tripweaver.domains.itinerary.services.place_resolver import (
    PlaceResolver,
    clean_title,
)
from tripweaver.infra.cache import normalize_key

logger = logging.getLogger(__name__)

PROTECTED_FIELDS = frozenset({"id", "title"})
IMAGE_FIELDS = frozenset({"image_url", "thumb_url"})


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == []


def should_replace(field: str, current: Any, new: Any) -> bool:
    """Monotonic update rule for one enrichment field."""
    if field in PROTECTED_FIELDS or _is_empty(new) or current == new:
        return False
    if field in IMAGE_FIELDS and is_placeholder_url(new):
        # A placeholder only fills a gap
        return _is_empty(current)
    return True


def build_patch(
    item: ItineraryItem,
    place: ResolvedPlace | None,
    photo: PhotoResult | None,
) -> ItemPatch:
    """Patch carrying only the fields the item does not already have."""
    fields: dict[str, Any] = {}

    if photo is not None and (not photo.is_placeholder or not item.has_real_image):
        fields["thumb_url"] = photo.thumb
        fields["image_url"] = photo.url

    if place is not None:
        candidates = {
            "place_id": place.place_id,
            "rating": place.rating,
            "description": place.description,
            "reviews": place.reviews or None,
            "booking_url": place.booking_url,
        }
        for name, value in candidates.items():
            if not _is_empty(value) and _is_empty(getattr(item, name, None)):
                fields[name] = value

    return ItemPatch(item_id=item.id, fields=fields)


class EnrichmentOrchestrator:
    """
    Schedules and applies per-item enrichment.

    Args:
        place_resolver: Geocoder waterfall.
        photo_resolver: Photo waterfall; its cache is shared for place results.
        on_update: Called with the item after each applied patch.
    """

    def __init__(
        self,
        place_resolver: PlaceResolver | None = None,
        photo_resolver: PhotoResolver | None = None,
        on_update: Callable[[ItineraryItem], None] | None = None,
    ) -> None:
        self.place_resolver = place_resolver or PlaceResolver()
        self.photo_resolver = photo_resolver or PhotoResolver()
        self.cache = self.photo_resolver.cache
        self.on_update = on_update
        self.plans: list[DailyPlan] = []
        self._tasks: dict[str, asyncio.Task] = {}
        self._place_inflight: dict[str, asyncio.Future] = {}

    @property
    def in_flight(self) -> set[str]:
        return set(self._tasks)

    def attach(self, plans: list[DailyPlan]) -> None:
        """Make ``plans`` the current itinerary, cancelling work for the old one."""
        if plans is self.plans:
            return
        self.cancel()
        self.plans = plans

    def cancel(self) -> None:
        for task in self._tasks.values():
            task.cancel()
        if self._tasks:
            logger.info(f"Cancelled {len(self._tasks)} enrichment task(s)")
        self._tasks.clear()

    def enrich(self, plans: list[DailyPlan] | None = None) -> list[asyncio.Task]:
        """
        Start enrichment for every item still lacking a real image.

        Returns immediately with the scheduled tasks; must be called from a
        running event loop.
        """
        if plans is not None:
            self.attach(plans)

        scheduled = []
        for item in iter_items(self.plans):
            if item.has_real_image or item.id in self._tasks:
                continue
            task = asyncio.create_task(self._run(item), name=f"enrich:{item.id}")
            self._tasks[item.id] = task
            scheduled.append(task)

        if scheduled:
            logger.info(f"Scheduled enrichment for {len(scheduled)} item(s)")
        return scheduled

    async def enrich_and_wait(
        self, plans: list[DailyPlan] | None = None
    ) -> list[ItemPatch | None]:
        tasks = self.enrich(plans)
        if not tasks:
            return []
        results = await asyncio.gather(*tasks, return_exceptions=True)
        return [r if isinstance(r, ItemPatch) else None for r in results]

    async def drain(self) -> None:
        """Wait for every task in flight to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)

    async def _run(self, item: ItineraryItem) -> ItemPatch | None:
        try:
            patch = await self.enrich_item(item)
        except asyncio.CancelledError:
            logger.debug(f"Enrichment cancelled for {item.id}")
            raise
        except Exception:
            logger.exception(f"Enrichment failed for {item.id} ('{item.title}')")
            return None
        finally:
            if self._tasks.get(item.id) is asyncio.current_task():
                del self._tasks[item.id]

        if patch is not None:
            self.apply_patch(patch)
        return patch

    async def enrich_item(self, item: ItineraryItem) -> ItemPatch | None:
        """Resolve place and photo for one item. Cache hits skip the network."""
        query = clean_title(item.title) or item.title
        place_key = normalize_key("place", query)

        cached_photo = self.photo_resolver.cached(query, seed=item.title)
        if cached_photo is not None:
            logger.debug(f"Enriching {item.id} from cache")
            return build_patch(item, self.cache.get(place_key), cached_photo)

        hints = item.hints()
        place = self.cache.get(place_key)
        if place is None:
            place = await self._resolve_place(place_key, query, hints)

        photo = await self.photo_resolver.resolve_photo(
            query,
            resolved_place=place,
            hints=hints,
            seed=item.title,
            item_type=item.type,
        )
        return build_patch(item, place, photo)

    async def _resolve_place(
        self, place_key: str, query: str, hints: PlaceHints
    ) -> ResolvedPlace | None:
        # Items sharing a cleaned title share one geocoder run
        future = self._place_inflight.get(place_key)
        if future is None:
            future = asyncio.ensure_future(self.place_resolver.resolve_place(query, hints))
            self._place_inflight[place_key] = future
            future.add_done_callback(lambda _: self._place_inflight.pop(place_key, None))
        place = await asyncio.shield(future)
        if place is not None:
            self.cache.set(place_key, place)
        return place

    def apply_patch(self, patch: ItemPatch) -> ItineraryItem | None:
        """
        Apply a patch to the current itinerary.

        Returns:
            The updated item, or None when the patch was stale or changed
            nothing.
        """
        item = find_item(self.plans, patch.item_id)
        if item is None:
            logger.debug(f"Discarding stale patch for {patch.item_id}")
            return None

        changed = []
        for name, value in patch.fields.items():
            if should_replace(name, getattr(item, name, None), value):
                setattr(item, name, value)
                changed.append(name)

        if not changed:
            return None

        logger.debug(f"Patched {item.id}: {', '.join(changed)}")
        if self.on_update is not None:
            try:
                self.on_update(item)
            except Exception:
                logger.exception(f"on_update callback failed for {item.id}")
        return item
