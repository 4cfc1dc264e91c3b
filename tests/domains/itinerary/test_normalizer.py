"""
Tests for itinerary normalization.

Tests day/date synthesis, time range parsing, id assignment and
hotel-first ordering.
"""

import re
from datetime import date

import pytest

from tripweaver.domains.itinerary.models import ItemType
from tripweaver.domains.itinerary.schemas import ItineraryItem
from tripweaver.domains.itinerary.services.extractor import extract
from tripweaver.domains.itinerary.services.normalizer import (
    hotel_first,
    make_item_id,
    normalize,
    parse_time_range,
    slugify,
)

TODAY = date(2025, 3, 10)
ID_PATTERN = re.compile(r"^d\d+-i\d+-[a-z0-9-]*-[0-9a-f]{6}$")


class TestParseTimeRange:
    """Tests for human time range parsing."""

    @pytest.mark.parametrize(
        "time_range,expected",
        [
            ("09:00-12:00", ("2025-03-10T09:00:00", "2025-03-10T12:00:00")),
            ("9:00 - 17:30", ("2025-03-10T09:00:00", "2025-03-10T17:30:00")),
            ("18:00–21:00", ("2025-03-10T18:00:00", "2025-03-10T21:00:00")),
            ("07:15 — 08:45", ("2025-03-10T07:15:00", "2025-03-10T08:45:00")),
        ],
    )
    def test_valid_ranges(self, time_range, expected):
        """Test accepted separators and hour formats."""
        assert parse_time_range(time_range, "2025-03-10") == expected

    @pytest.mark.parametrize("time_range", ["TBD", "", "morning", "25:00-26:00", "9-12", None])
    def test_unparseable_ranges(self, time_range):
        """Test that anything else yields no instants."""
        assert parse_time_range(time_range, "2025-03-10") == (None, None)

    def test_end_before_start_rolls_over(self):
        """Test that an overnight range ends on the next day."""
        assert parse_time_range("22:00-01:30", "2025-03-10") == (
            "2025-03-10T22:00:00",
            "2025-03-11T01:30:00",
        )


class TestItemIds:
    """Tests for item id generation."""

    def test_slugify(self):
        """Test slug generation."""
        assert slugify("Visit Louvre!") == "visit-louvre"
        assert slugify("  Café  ") == "caf"

    def test_id_format(self):
        """Test the composite id layout."""
        item_id = make_item_id(0, 2, "Visit Louvre")
        assert item_id.startswith("d0-i2-visit-lo-")
        assert ID_PATTERN.match(item_id)

    def test_ids_differ_for_same_position_and_title(self):
        """Test that the random suffix keeps ids apart."""
        ids = {make_item_id(0, 0, "Same") for _ in range(20)}
        assert len(ids) > 1


class TestHotelFirst:
    """Tests for the hotel-first partition."""

    def test_stable_partition(self):
        """Test that hotels lead and relative order is kept."""
        items = [
            ItineraryItem(id="1", title="A", type="ACTIVITY"),
            ItineraryItem(id="2", title="B", type="HOTEL"),
            ItineraryItem(id="3", title="C", type="HOTEL"),
            ItineraryItem(id="4", title="D", type="RESTAURANT"),
        ]
        assert [i.title for i in hotel_first(items)] == ["B", "C", "A", "D"]


class TestNormalize:
    """Tests for the normalize entry point."""

    def test_louvre_reply(self):
        """Test the full extract + normalize path for a single item."""
        raw = extract(
            "Here's your trip! ```json\n"
            '{"itinerary":[{"day":1,"items":[{"title":"Visit Louvre",'
            '"timeRange":"09:00-12:00","type":"ACTIVITY"}]}]}'
            "\n```"
        )
        plans = normalize(raw, today=TODAY)

        assert len(plans) == 1
        plan = plans[0]
        assert plan.day == 1
        assert plan.date == "2025-03-10"
        assert len(plan.items) == 1
        item = plan.items[0]
        assert item.title == "Visit Louvre"
        assert item.type == ItemType.ACTIVITY
        assert item.start == "2025-03-10T09:00:00"
        assert item.end == "2025-03-10T12:00:00"
        assert ID_PATTERN.match(item.id)

    def test_hotels_moved_first(self):
        """Test hotel-first ordering within a day."""
        raw = [
            {
                "items": [
                    {"type": "ACTIVITY", "title": "A"},
                    {"type": "HOTEL", "title": "B"},
                    {"type": "HOTEL", "title": "C"},
                    {"type": "RESTAURANT", "title": "D"},
                ]
            }
        ]
        plans = normalize(raw, today=TODAY)
        assert [i.title for i in plans[0].items] == ["B", "C", "A", "D"]

    def test_day_numbers(self):
        """Test that invalid day numbers fall back to position."""
        raw = [{"day": True}, {"day": "5"}, {"day": -1}, {}, {"day": 2.5}]
        plans = normalize(raw, today=TODAY)
        assert [p.day for p in plans] == [1, 5, 3, 4, 5]

    def test_dates(self):
        """Test that invalid dates are synthesized from today + index."""
        raw = [{"date": "2025-06-01"}, {"date": "tomorrow"}, {}]
        plans = normalize(raw, today=TODAY)
        assert [p.date for p in plans] == ["2025-06-01", "2025-03-11", "2025-03-12"]

    def test_time_range_uses_day_date(self):
        """Test that instants are anchored to the day's own date."""
        raw = [{"date": "2025-06-01", "items": [{"title": "A", "timeRange": "10:00-11:00"}]}]
        item = normalize(raw, today=TODAY)[0].items[0]
        assert item.start == "2025-06-01T10:00:00"
        assert item.end == "2025-06-01T11:00:00"
        assert item.time_range == "10:00-11:00"

    def test_explicit_start_end_kept(self):
        """Test that given instants are not recomputed."""
        raw = [
            {
                "items": [
                    {
                        "title": "A",
                        "timeRange": "10:00-11:00",
                        "start": "2025-03-10T08:00:00",
                        "end": "2025-03-10T09:00:00",
                    }
                ]
            }
        ]
        item = normalize(raw, today=TODAY)[0].items[0]
        assert item.start == "2025-03-10T08:00:00"
        assert item.end == "2025-03-10T09:00:00"

    def test_unparseable_time_range(self):
        """Test that "TBD" leaves start and end empty."""
        raw = [{"items": [{"title": "A", "timeRange": "TBD"}]}]
        item = normalize(raw, today=TODAY)[0].items[0]
        assert item.start is None
        assert item.end is None
        assert item.time_range == "TBD"

    def test_missing_title(self):
        """Test that a missing or blank title gets a default."""
        raw = [{"items": [{"type": "ACTIVITY"}, {"title": "   "}]}]
        items = normalize(raw, today=TODAY)[0].items
        assert [i.title for i in items] == ["Untitled", "Untitled"]

    def test_type_parsing(self):
        """Test case-insensitive types with ACTIVITY as default."""
        raw = [{"items": [{"title": "A", "type": "hotel"}, {"title": "B", "type": "spa"}, {"title": "C"}]}]
        items = normalize(raw, today=TODAY)[0].items
        assert [i.type for i in items] == [ItemType.HOTEL, ItemType.ACTIVITY, ItemType.ACTIVITY]

    def test_unknown_fields_pass_through(self):
        """Test that raw fields survive normalization."""
        raw = [
            {
                "items": [
                    {
                        "title": "A",
                        "notes": "bring cash",
                        "imageUrl": "https://images.example.com/a.jpg",
                        "city": "Paris",
                    }
                ]
            }
        ]
        item = normalize(raw, today=TODAY)[0].items[0]
        assert item.model_extra["notes"] == "bring cash"
        assert item.image_url == "https://images.example.com/a.jpg"
        assert item.city == "Paris"

        data = item.to_json()
        assert data["notes"] == "bring cash"
        assert data["imageUrl"] == "https://images.example.com/a.jpg"

    def test_invalid_optional_field_dropped(self):
        """Test that a bad optional field does not cost the item."""
        raw = [{"items": [{"title": "A", "rating": "great", "city": "Rome"}]}]
        item = normalize(raw, today=TODAY)[0].items[0]
        assert item.title == "A"
        assert item.rating is None
        assert item.city == "Rome"

    def test_empty_and_duplicate_days_kept(self):
        """Test that empty days stay and duplicate day numbers are not merged."""
        raw = [{"day": 1, "items": []}, {"day": 1, "items": [{"title": "A"}]}]
        plans = normalize(raw, today=TODAY)
        assert [p.day for p in plans] == [1, 1]
        assert plans[0].items == []
        assert len(plans[1].items) == 1

    def test_ids_unique(self):
        """Test that every item gets a distinct id."""
        raw = [
            {"items": [{"title": "Louvre"}, {"title": "Louvre"}]},
            {"items": [{"title": "Louvre"}]},
        ]
        plans = normalize(raw, today=TODAY)
        ids = [i.id for p in plans for i in p.items]
        assert len(set(ids)) == 3
        assert ids[0].startswith("d0-i0-")
        assert ids[2].startswith("d1-i0-")

    def test_id_and_title_immutable(self):
        """Test that id and title cannot be reassigned."""
        item = normalize([{"items": [{"title": "A"}]}], today=TODAY)[0].items[0]
        with pytest.raises(ValueError):
            item.title = "B"
        with pytest.raises(ValueError):
            item.id = "other"
