"""
Tests for place resolution.

Geocoders are injected as AsyncMocks; no network is touched.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from tripweaver.domains.itinerary.schemas import PlaceHints, ResolvedPlace
from tripweaver.domains.itinerary.services.place_resolver import (
    PlaceResolver,
    build_search_query,
    clean_title,
    infer_country_code,
    prefer_country,
)
from tripweaver.domains.itinerary.tools.base import APIClientError
from tripweaver.domains.itinerary.tools.fallback import ToolHealthStatus


def make_place(name: str, country_code: str | None = "fr", **kwargs) -> ResolvedPlace:
    return ResolvedPlace(
        place_id=f"id-{name.lower().replace(' ', '-')}-{country_code}",
        name=name,
        lat=48.86,
        lng=2.33,
        country_code=country_code,
        **kwargs,
    )


class TestCleanTitle:
    """Tests for action phrase stripping."""

    @pytest.mark.parametrize(
        "title,expected",
        [
            ("Visit Louvre", "Louvre"),
            ("Check-in at Hotel Lutetia", "Hotel Lutetia"),
            ("check in at Hotel Lutetia", "Hotel Lutetia"),
            ("Dinner at Le Jules Verne", "Le Jules Verne"),
            ("Shopping in Le Marais", "Le Marais"),
            ("Explore Montmartre", "Montmartre"),
            ("Tour of the Vatican", "the Vatican"),
            ("Louvre", "Louvre"),
            ("Visitors Center", "Visitors Center"),
        ],
    )
    def test_clean_title(self, title, expected):
        """Test leading action phrases are removed case-insensitively."""
        assert clean_title(title) == expected


class TestSearchQuery:
    """Tests for query construction and country inference."""

    def test_hints_appended(self):
        """Test city then country are appended."""
        hints = PlaceHints(city="Paris", country="France")
        assert build_search_query("Visit Louvre", hints) == "Louvre, Paris, France"

    def test_hint_already_present_skipped(self):
        """Test that a hint already in the query is not repeated."""
        hints = PlaceHints(city="Paris", country="France")
        assert build_search_query("Louvre Paris", hints) == "Louvre Paris, France"

    def test_no_hints(self):
        """Test the cleaned title alone."""
        assert build_search_query("Visit Louvre") == "Louvre"

    def test_country_code_from_hints(self):
        """Test that an explicit hint wins and is lowercased."""
        hints = PlaceHints(countryCode="IT")
        assert infer_country_code("Eiffel Tower", hints) == "it"

    def test_country_code_from_keywords(self):
        """Test the landmark keyword map."""
        assert infer_country_code("Eiffel Tower") == "fr"
        assert infer_country_code("Fushimi Shrine Kyoto") == "jp"
        assert infer_country_code("Somewhere unknown") is None


class TestPreferCountry:
    """Tests for same-country candidate preference."""

    def test_same_country_preferred(self):
        """Test that a lower-ranked same-country candidate wins."""
        candidates = [make_place("Paris", "us"), make_place("Paris", "fr")]
        assert prefer_country(candidates, "fr").country_code == "fr"

    def test_top_kept_without_match(self):
        """Test that the top candidate stays when nothing matches."""
        candidates = [make_place("Paris", "us"), make_place("Paris", "ca")]
        assert prefer_country(candidates, "fr").country_code == "us"

    def test_top_kept_without_hint(self):
        """Test that no hint means no reordering."""
        candidates = [make_place("Paris", "us"), make_place("Paris", "fr")]
        assert prefer_country(candidates, None).country_code == "us"


class TestPlaceResolver:
    """Tests for the geocoder waterfall."""

    @pytest.mark.asyncio
    async def test_primary_hit_skips_secondary(self):
        """Test that the secondary geocoder is not called on a primary hit."""
        primary = AsyncMock(return_value=[make_place("Louvre Museum")])
        secondary = AsyncMock(return_value=[make_place("Other")])
        resolver = PlaceResolver(
            geocoders=[("primary", primary), ("secondary", secondary)],
            health=ToolHealthStatus(),
        )

        place = await resolver.resolve_place("Visit Louvre", PlaceHints(city="Paris"))

        assert place.name == "Louvre Museum"
        primary.assert_awaited_once_with("Louvre, Paris", "fr")
        secondary.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_primary_miss_falls_back_once(self):
        """Test that an empty primary answer tries the secondary once."""
        primary = AsyncMock(return_value=[])
        secondary = AsyncMock(return_value=[make_place("Louvre Museum")])
        resolver = PlaceResolver(
            geocoders=[("primary", primary), ("secondary", secondary)],
            health=ToolHealthStatus(),
        )

        place = await resolver.resolve_place("Louvre")

        assert place.name == "Louvre Museum"
        secondary.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_primary_error_falls_back(self):
        """Test that a provider error is treated as a miss."""
        primary = AsyncMock(side_effect=APIClientError("HTTP error: 500", tool_name="primary"))
        secondary = AsyncMock(return_value=[make_place("Louvre Museum")])
        health = ToolHealthStatus()
        resolver = PlaceResolver(
            geocoders=[("primary", primary), ("secondary", secondary)],
            health=health,
        )

        place = await resolver.resolve_place("Louvre")

        assert place.name == "Louvre Museum"
        assert health.get_status("primary")["failures"] == 1
        assert health.get_status("secondary")["successes"] == 1

    @pytest.mark.asyncio
    async def test_timeout_falls_back(self):
        """Test that a slow provider is abandoned after the timeout."""

        async def slow(query, country_code):
            await asyncio.sleep(5)
            return [make_place("Too late")]

        secondary = AsyncMock(return_value=[make_place("Louvre Museum")])
        resolver = PlaceResolver(
            geocoders=[("slow", slow), ("secondary", secondary)],
            timeout=0.01,
            health=ToolHealthStatus(),
        )

        place = await resolver.resolve_place("Louvre")

        assert place.name == "Louvre Museum"

    @pytest.mark.asyncio
    async def test_all_fail_returns_none(self):
        """Test that exhausting every geocoder yields None without raising."""
        primary = AsyncMock(side_effect=RuntimeError("boom"))
        secondary = AsyncMock(return_value=[])
        resolver = PlaceResolver(
            geocoders=[("primary", primary), ("secondary", secondary)],
            health=ToolHealthStatus(),
        )

        assert await resolver.resolve_place("Nowhere") is None

    @pytest.mark.asyncio
    async def test_blank_query_returns_none(self):
        """Test that nothing is asked for an empty query."""
        primary = AsyncMock(return_value=[make_place("X")])
        resolver = PlaceResolver(geocoders=[("primary", primary)], health=ToolHealthStatus())

        assert await resolver.resolve_place("   ") is None
        primary.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_country_preference(self):
        """Test that the hinted country reorders candidates."""
        primary = AsyncMock(
            return_value=[make_place("Paris", "us"), make_place("Paris", "fr")]
        )
        resolver = PlaceResolver(geocoders=[("primary", primary)], health=ToolHealthStatus())

        place = await resolver.resolve_place("Paris", PlaceHints(countryCode="FR"))

        assert place.country_code == "fr"

    @pytest.mark.asyncio
    async def test_open_breaker_skips_provider(self):
        """Test that a provider over the failure threshold is skipped."""
        primary = AsyncMock(side_effect=RuntimeError("down"))
        secondary = AsyncMock(return_value=[make_place("Louvre Museum")])
        resolver = PlaceResolver(
            geocoders=[("primary", primary), ("secondary", secondary)],
            health=ToolHealthStatus(threshold=1),
        )

        await resolver.resolve_place("Louvre")
        await resolver.resolve_place("Louvre")

        assert primary.await_count == 1
        assert secondary.await_count == 2
