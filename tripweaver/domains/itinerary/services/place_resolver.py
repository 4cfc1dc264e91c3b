"""
Place resolution for itinerary items.

Cleans an item title into a search query, asks an ordered list of geocoders
(first non-empty answer wins), then prefers a candidate in the expected
country. Provider failures are absorbed here: the caller gets ``None``.
"""

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable

from tripweaver.core.config import settings
from tripweaver.domains.itinerary.schemas import PlaceHints, ResolvedPlace
from tripweaver.domains.itinerary.tools.fallback import (
    ToolHealthStatus,
    classify_error,
    tool_health,
)
from tripweaver.domains.itinerary.tools.google_places import google_places_geocode
from tripweaver.domains.itinerary.tools.mapbox import mapbox_geocode

logger = logging.getLogger(__name__)

Geocoder = Callable[[str, str | None], Awaitable[list[ResolvedPlace]]]

ACTION_PREFIXES = (
    "check-in at",
    "check in at",
    "check-out from",
    "check out from",
    "visit",
    "explore",
    "dinner at",
    "lunch at",
    "breakfast at",
    "brunch at",
    "drinks at",
    "shopping in",
    "shopping at",
    "relax at",
    "depart from",
    "arrive in",
    "arrive at",
    "tour of",
    "stay at",
)
_ACTION_PREFIX = re.compile(
    r"^\s*(?:" + "|".join(re.escape(p) for p in ACTION_PREFIXES) + r")\s+",
    re.IGNORECASE,
)

# Queries naming these imply a country even without hints
KEYWORD_COUNTRY = {
    "paris": "fr",
    "eiffel": "fr",
    "louvre": "fr",
    "rome": "it",
    "colosseum": "it",
    "venice": "it",
    "florence": "it",
    "milan": "it",
    "madrid": "es",
    "barcelona": "es",
    "sagrada familia": "es",
    "london": "gb",
    "big ben": "gb",
    "berlin": "de",
    "athens": "gr",
    "acropolis": "gr",
    "santorini": "gr",
    "mykonos": "gr",
    "lisbon": "pt",
    "tokyo": "jp",
    "kyoto": "jp",
    "osaka": "jp",
}


def clean_title(text: str) -> str:
    """Strip a leading action phrase ("Visit ", "Dinner at ", ...)."""
    return _ACTION_PREFIX.sub("", text or "", count=1).strip()


def build_search_query(query: str, hints: PlaceHints | None = None) -> str:
    """Cleaned query with city then country appended when not already present."""
    parts = [clean_title(query)]
    if hints:
        for extra in (hints.city, hints.country):
            if extra and extra.strip().lower() not in ", ".join(parts).lower():
                parts.append(extra.strip())
    return ", ".join(p for p in parts if p)


def infer_country_code(query: str, hints: PlaceHints | None = None) -> str | None:
    """Country code from hints, else from well-known names in the query."""
    if hints and hints.country_code:
        return hints.country_code
    lowered = (query or "").lower()
    for keyword, code in KEYWORD_COUNTRY.items():
        if keyword in lowered:
            return code
    return None


def prefer_country(
    candidates: list[ResolvedPlace], country_code: str | None
) -> ResolvedPlace:
    """Top candidate, unless another one sits in the expected country."""
    top = candidates[0]
    if not country_code or top.country_code in (None, country_code):
        return top
    for candidate in candidates[1:]:
        if candidate.country_code == country_code:
            logger.debug(
                f"Preferring '{candidate.name}' ({country_code}) over "
                f"'{top.name}' ({top.country_code})"
            )
            return candidate
    return top


class PlaceResolver:
    """
    Resolves free-text place descriptions via a geocoder waterfall.

    Args:
        geocoders: Ordered ``(name, geocoder)`` pairs. Defaults to Mapbox
            then Google Places.
        timeout: Per-call bound in seconds.
        health: Provider health tracker shared with the photo resolver.
    """

    def __init__(
        self,
        geocoders: list[tuple[str, Geocoder]] | None = None,
        timeout: float | None = None,
        health: ToolHealthStatus | None = None,
    ) -> None:
        self.geocoders = geocoders if geocoders is not None else [
            ("mapbox", mapbox_geocode),
            ("google_places", google_places_geocode),
        ]
        self.timeout = timeout or settings.PROVIDER_TIMEOUT_SECONDS
        self.health = health or tool_health

    async def _call(
        self, name: str, geocoder: Geocoder, query: str, country_code: str | None
    ) -> list[ResolvedPlace]:
        if self.health.should_skip(name):
            logger.info(f"Skipping geocoder {name}: too many consecutive failures")
            return []
        try:
            candidates = await asyncio.wait_for(
                geocoder(query, country_code), timeout=self.timeout
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.health.record_failure(name, e)
            logger.warning(
                f"Geocoder {name} failed for '{query}' "
                f"[{classify_error(e)}]: {e!r}"
            )
            return []
        self.health.record_success(name)
        return list(candidates or [])

    async def resolve_place(
        self, query: str, hints: PlaceHints | None = None
    ) -> ResolvedPlace | None:
        """
        Resolve a place description to a canonical place record.

        Returns:
            The chosen ResolvedPlace, or None when every geocoder came up
            empty. Never raises for provider failures.
        """
        search_query = build_search_query(query, hints)
        if not search_query:
            return None
        country_code = infer_country_code(query, hints)

        for name, geocoder in self.geocoders:
            candidates = await self._call(name, geocoder, search_query, country_code)
            if candidates:
                place = prefer_country(candidates, country_code)
                logger.info(f"Resolved '{search_query}' via {name}: {place.name}")
                return place
            logger.debug(f"Geocoder {name} had no match for '{search_query}'")

        logger.info(f"No place found for '{search_query}'")
        return None
