"""Enums and constants for the Itinerary domain."""

import enum


class ItemType(str, enum.Enum):
    """Closed set of itinerary item types."""

    FLIGHT = "FLIGHT"
    HOTEL = "HOTEL"
    ACTIVITY = "ACTIVITY"
    RESTAURANT = "RESTAURANT"
    LODGING = "LODGING"
    TRANSPORT = "TRANSPORT"

    @classmethod
    def parse(cls, value: object) -> "ItemType":
        """Case-insensitive lookup; anything unrecognized is an ACTIVITY."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        return cls.ACTIVITY


class PhotoSource(str, enum.Enum):
    """Which waterfall tier produced a photo."""

    VENUE = "venue"
    UNSPLASH = "unsplash"
    PEXELS = "pexels"
    PLACEHOLDER = "placeholder"


# URL fragments that mark an image as a stand-in rather than real imagery
PLACEHOLDER_MARKERS = ("picsum.photos", "placeholder", "placehold.co")

DEFAULT_ITEM_TITLE = "Untitled"
