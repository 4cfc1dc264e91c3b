"""
Photo resolution for itinerary items.

Waterfall, each tier tried only when the previous one produced nothing:

1. venue photo near the resolved coordinates (Google Places);
2. stock photos (Unsplash, then Pexels) over derived search terms ordered by
   specificity: "<venue-type> <city>", "<venue-type> <country>", "<city>",
   "<raw query>";
3. a seeded placeholder, which cannot fail.

Results are memoized in the EnrichmentCache (and the optional Redis photo
store) under the normalized query, so a repeat lookup makes no provider call.
"""

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from tripweaver.core.config import settings
from tripweaver.domains.itinerary.models import ItemType
from tripweaver.domains.itinerary.schemas import PhotoResult, PlaceHints, ResolvedPlace
from tripweaver.domains.itinerary.services.place_resolver import clean_title
from tripweaver.domains.itinerary.tools.fallback import (
    ToolHealthStatus,
    classify_error,
    placeholder_photo,
    tool_health,
)
from tripweaver.domains.itinerary.tools.google_places import google_venue_photo
from tripweaver.domains.itinerary.tools.pexels import pexels_photo
from tripweaver.domains.itinerary.tools.unsplash import unsplash_photo
from tripweaver.infra.cache import EnrichmentCache, normalize_key
from tripweaver.infra.redis import PhotoCacheStore

logger = logging.getLogger(__name__)

# Checked in order; the first venue type whose keywords appear wins
VENUE_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("hotel", ("hotel", "resort", "hostel", "inn", "ryokan", "check-in", "check in")),
    ("restaurant", ("restaurant", "bistro", "trattoria", "brasserie", "dinner", "lunch", "sushi", "ramen", "tapas", "taverna")),
    ("cafe", ("cafe", "café", "coffee", "bakery", "breakfast", "brunch")),
    ("bar", ("bar", "pub", "cocktail", "wine", "drinks")),
    ("museum", ("museum", "musée", "museo", "louvre", "exhibition")),
    ("gallery", ("gallery", "galleria")),
    ("beach", ("beach", "playa", "plage", "coast")),
    ("park", ("park", "garden", "gardens", "jardin")),
    ("temple", ("temple", "shrine", "pagoda")),
    ("church", ("church", "cathedral", "basilica", "chapel", "abbey")),
    ("market", ("market", "bazaar", "souk")),
    ("landmark", ("tower", "palace", "castle", "bridge", "monument", "square", "fort", "colosseum", "acropolis", "eiffel")),
]

ITEM_TYPE_VENUES = {
    ItemType.HOTEL: "hotel",
    ItemType.LODGING: "hotel",
    ItemType.RESTAURANT: "restaurant",
    ItemType.FLIGHT: "airport",
    ItemType.TRANSPORT: "station",
}

# Landmarks whose city is obvious from the name
LANDMARK_LOCATIONS = {
    "eiffel": ("Paris", "France"),
    "louvre": ("Paris", "France"),
    "notre-dame": ("Paris", "France"),
    "notre dame": ("Paris", "France"),
    "colosseum": ("Rome", "Italy"),
    "trevi": ("Rome", "Italy"),
    "sagrada": ("Barcelona", "Spain"),
    "big ben": ("London", "United Kingdom"),
    "tower bridge": ("London", "United Kingdom"),
    "acropolis": ("Athens", "Greece"),
    "brandenburg": ("Berlin", "Germany"),
    "senso-ji": ("Tokyo", "Japan"),
    "fushimi inari": ("Kyoto", "Japan"),
}

_DIGITS = re.compile(r"\d")


def infer_venue_type(query: str, item_type: ItemType | None = None) -> str | None:
    """Venue type by keyword match on the query, else from the item type."""
    lowered = (query or "").lower()
    for venue_type, keywords in VENUE_KEYWORDS:
        for keyword in keywords:
            if re.search(rf"(?<!\w){re.escape(keyword)}(?!\w)", lowered):
                return venue_type
    if item_type is not None:
        return ITEM_TYPE_VENUES.get(item_type)
    return None


def locate_from_description(description: str | None) -> tuple[str | None, str | None]:
    """(city, country) from a "Name, Street, City, Postcode, Country" string."""
    if not description:
        return None, None
    parts = [p.strip() for p in description.split(",") if p.strip()]
    if len(parts) < 2:
        return None, None
    country = parts[-1]
    city = None
    for part in reversed(parts[1:-1]):
        if not _DIGITS.search(part):
            city = part
            break
    return city, country


def locate(
    query: str,
    place: ResolvedPlace | None = None,
    hints: PlaceHints | None = None,
) -> tuple[str | None, str | None]:
    """Best-known (city, country) for a query."""
    city = hints.city if hints else None
    country = hints.country if hints else None

    if place and (not city or not country):
        place_city, place_country = locate_from_description(place.description)
        city = city or place_city
        country = country or place_country

    if not city or not country:
        lowered = (query or "").lower()
        for keyword, (landmark_city, landmark_country) in LANDMARK_LOCATIONS.items():
            if keyword in lowered:
                city = city or landmark_city
                country = country or landmark_country
                break
    return city, country


def derive_search_terms(
    query: str,
    venue_type: str | None,
    city: str | None,
    country: str | None,
) -> list[str]:
    """Stock photo search terms, most specific first, without duplicates."""
    candidates = [
        f"{venue_type} {city}" if venue_type and city else None,
        f"{venue_type} {country}" if venue_type and country else None,
        city,
        query,
    ]
    terms: list[str] = []
    for term in candidates:
        if term and term.strip() and term.strip().lower() not in (t.lower() for t in terms):
            terms.append(term.strip())
    return terms


@dataclass
class PhotoRequest:
    """Everything a photo tier may use."""

    query: str
    place: ResolvedPlace | None = None
    venue_type: str | None = None
    city: str | None = None
    country: str | None = None
    terms: list[str] = field(default_factory=list)


PhotoTier = Callable[[PhotoRequest], Awaitable[PhotoResult | None]]
StockSearch = Callable[[str], Awaitable[PhotoResult | None]]


async def venue_tier(request: PhotoRequest) -> PhotoResult | None:
    """Venue photo scoped to the resolved coordinates plus the query text."""
    place = request.place
    if place is None or not place.has_coordinates:
        return None
    return await google_venue_photo(request.query, place.lat, place.lng)


def stock_tier(search: StockSearch) -> PhotoTier:
    """Wrap a single-term stock search so it walks the derived terms."""

    async def tier(request: PhotoRequest) -> PhotoResult | None:
        errors: list[Exception] = []
        for term in request.terms:
            try:
                result = await search(term)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.debug(f"Stock search failed for term '{term}': {e!r}")
                errors.append(e)
                continue
            if result:
                logger.debug(f"Stock photo hit for term '{term}'")
                return result
        # Only a provider that failed on every term counts as down
        if errors and len(errors) == len(request.terms):
            raise errors[-1]
        return None

    return tier


def default_tiers() -> list[tuple[str, PhotoTier]]:
    return [
        ("google_places_photos", venue_tier),
        ("unsplash", stock_tier(unsplash_photo)),
        ("pexels", stock_tier(pexels_photo)),
    ]


def reseed(photo: PhotoResult, seed: str) -> PhotoResult:
    """Placeholders are per-seed; a shared one is rebuilt for this seed."""
    if photo.is_placeholder:
        return placeholder_photo(seed)
    return photo


class PhotoResolver:
    """
    Resolves a photo for a query through the provider waterfall.

    Args:
        cache: In-process cache consulted before any provider.
        tiers: Ordered ``(name, tier)`` pairs; the placeholder tier is
            always appended implicitly.
        store: Optional persistent photo store behind the cache.
        timeout: Time budget for one tier.
        health: Provider health tracker.
    """

    def __init__(
        self,
        cache: EnrichmentCache | None = None,
        tiers: list[tuple[str, PhotoTier]] | None = None,
        store: PhotoCacheStore | None = None,
        timeout: float | None = None,
        health: ToolHealthStatus | None = None,
    ) -> None:
        self.cache = cache if cache is not None else EnrichmentCache()
        self.tiers = tiers if tiers is not None else default_tiers()
        self.store = store
        self.timeout = timeout or settings.PROVIDER_TIMEOUT_SECONDS
        self.health = health or tool_health
        self._inflight: dict[str, asyncio.Future] = {}

    def cached(self, query: str, seed: str | None = None) -> PhotoResult | None:
        """Cache-only lookup. Never touches the network."""
        result = self.cache.get(normalize_key(query))
        return reseed(result, seed or query) if result is not None else None

    async def resolve_photo(
        self,
        query: str,
        resolved_place: ResolvedPlace | None = None,
        hints: PlaceHints | None = None,
        seed: str | None = None,
        item_type: ItemType | None = None,
    ) -> PhotoResult:
        """
        Return a photo for ``query``. Always returns a result.

        Args:
            query: Place text (typically an item's cleaned title).
            resolved_place: Geocoder answer, enables the venue tier.
            hints: City/country context for stock searches.
            seed: Placeholder seed, defaults to the query.
            item_type: Sharpens venue-type inference.
        """
        key = normalize_key(query)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Photo cache hit for '{key}'")
            return reseed(cached, seed or query)

        # Concurrent lookups of one key share a single waterfall run
        future = self._inflight.get(key)
        if future is None:
            future = asyncio.ensure_future(
                self._resolve_uncached(key, query, resolved_place, hints, seed, item_type)
            )
            self._inflight[key] = future
            future.add_done_callback(lambda _: self._inflight.pop(key, None))
        return reseed(await asyncio.shield(future), seed or query)

    async def _resolve_uncached(
        self,
        key: str,
        query: str,
        resolved_place: ResolvedPlace | None,
        hints: PlaceHints | None,
        seed: str | None,
        item_type: ItemType | None,
    ) -> PhotoResult:
        if self.store is not None:
            stored = await self.store.get_photo(key)
            if stored is not None:
                self.cache.set(key, stored)
                return stored

        request = self.build_request(query, resolved_place, hints, item_type)
        result = await self._run_tiers(request)
        if result is None:
            logger.info(f"Using placeholder photo for '{query}'")
            result = placeholder_photo(seed or query)

        self.cache.set(key, result)
        if self.store is not None and not result.is_placeholder:
            await self.store.set_photo(key, result)
        return result

    def build_request(
        self,
        query: str,
        resolved_place: ResolvedPlace | None = None,
        hints: PlaceHints | None = None,
        item_type: ItemType | None = None,
    ) -> PhotoRequest:
        cleaned = clean_title(query) or query
        venue_type = infer_venue_type(query, item_type)
        city, country = locate(cleaned, resolved_place, hints)
        return PhotoRequest(
            query=cleaned,
            place=resolved_place,
            venue_type=venue_type,
            city=city,
            country=country,
            terms=derive_search_terms(cleaned, venue_type, city, country),
        )

    async def _run_tiers(self, request: PhotoRequest) -> PhotoResult | None:
        """First non-null result across the tiers wins."""
        for name, tier in self.tiers:
            if self.health.should_skip(name):
                logger.info(f"Skipping photo tier {name}: too many consecutive failures")
                continue
            try:
                result = await asyncio.wait_for(tier(request), timeout=self.timeout)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self.health.record_failure(name, e)
                logger.warning(
                    f"Photo tier {name} failed for '{request.query}' "
                    f"[{classify_error(e)}]: {e!r}"
                )
                continue
            self.health.record_success(name)
            if result is not None:
                logger.info(f"Photo for '{request.query}' from {name}")
                return result
        return None
