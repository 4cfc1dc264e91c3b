"""Pydantic schemas for the Itinerary domain.

Field names are snake_case in Python; the camelCase aliases are the JSON
contract shared with the upstream LLM prompt and the mobile client.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tripweaver.domains.itinerary.models import (
    PLACEHOLDER_MARKERS,
    ItemType,
    PhotoSource,
)


def is_placeholder_url(url: str | None) -> bool:
    """True for empty URLs and seeded/stand-in images."""
    if not url:
        return True
    lowered = url.lower()
    return any(marker in lowered for marker in PLACEHOLDER_MARKERS)


# ============ Place Schemas ============


class Review(BaseModel):
    """A single user review attached to a place."""

    author_name: str
    rating: float
    text: str
    relative_time_description: str | None = None


class PlaceHints(BaseModel):
    """Optional context used to disambiguate a free-text place query."""

    city: str | None = None
    country: str | None = None
    country_code: str | None = Field(None, alias="countryCode")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("country_code")
    @classmethod
    def lower_country_code(cls, v: str | None) -> str | None:
        if not v or not v.strip():
            return None
        return v.strip().lower()


class ResolvedPlace(BaseModel):
    """Geocoder answer for a text query. Ephemeral, safe to recompute."""

    place_id: str
    name: str
    lat: float | None = Field(None, ge=-90, le=90)
    lng: float | None = Field(None, ge=-180, le=180)
    description: str | None = None
    country_code: str | None = None
    category: str | None = None
    rating: float | None = None
    reviews: list[Review] = Field(default_factory=list)
    booking_url: str | None = None
    provider: str | None = None

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lng is not None


class PhotoResult(BaseModel):
    """Photo chosen by the photo waterfall."""

    url: str
    thumb: str
    source: PhotoSource
    attribution: str | None = None
    attribution_url: str | None = None

    @property
    def is_placeholder(self) -> bool:
        return self.source == PhotoSource.PLACEHOLDER


# ============ Itinerary Schemas ============


class ItineraryItem(BaseModel):
    """One bookable or visitable unit of a day plan."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="allow",
        validate_assignment=True,
    )

    id: str = Field(..., min_length=1, frozen=True)
    title: str = Field(..., min_length=1, frozen=True)
    type: ItemType = ItemType.ACTIVITY

    # Time
    time_range: str | None = Field(None, alias="timeRange")
    start: str | None = None
    end: str | None = None

    # Enrichment outputs
    image_url: str | None = Field(None, alias="imageUrl")
    thumb_url: str | None = Field(None, alias="thumbUrl")
    photo_reference: str | None = Field(None, alias="photoReference")
    rating: float | None = None
    reviews: list[Review] | None = None
    description: str | None = None
    booking_url: str | None = Field(None, alias="bookingUrl")
    place_id: str | None = None

    # Location hints
    city: str | None = None
    country: str | None = None
    country_code: str | None = Field(None, alias="countryCode")
    neighborhood: str | None = None

    @field_validator("type", mode="before")
    @classmethod
    def coerce_type(cls, v: object) -> ItemType:
        return ItemType.parse(v)

    @property
    def display_image(self) -> str | None:
        """Image to render: thumb/image URLs win over the provider reference."""
        return self.thumb_url or self.image_url

    @property
    def has_real_image(self) -> bool:
        return not (
            is_placeholder_url(self.thumb_url) and is_placeholder_url(self.image_url)
        )

    def hints(self) -> PlaceHints:
        return PlaceHints(
            city=self.city,
            country=self.country,
            country_code=self.country_code,
        )

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class DailyPlan(BaseModel):
    """One day's schedule. Hotels always lead the item list."""

    day: int = Field(..., ge=1)
    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    items: list[ItineraryItem] = Field(default_factory=list)

    def to_json(self) -> dict:
        return {
            "day": self.day,
            "date": self.date,
            "items": [item.to_json() for item in self.items],
        }


def iter_items(plans: list[DailyPlan]):
    """Yield every item of an itinerary in day order."""
    for plan in plans:
        yield from plan.items


def find_item(plans: list[DailyPlan], item_id: str) -> ItineraryItem | None:
    """Locate an item by id in an itinerary."""
    for item in iter_items(plans):
        if item.id == item_id:
            return item
    return None


class ItemPatch(BaseModel):
    """Enrichment result addressed to an item by id."""

    item_id: str
    fields: dict = Field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.fields


# ============ Service / API Schemas ============


class ParseReplyRequest(BaseModel):
    """Raw assistant text to parse."""

    text: str = Field(..., description="Assistant reply, possibly with a JSON fence")


class ParsedReply(BaseModel):
    """Outcome of processing one assistant reply."""

    model_config = ConfigDict(populate_by_name=True)

    summary: str = ""
    trip_title: str | None = Field(None, alias="tripTitle")
    plans: list[DailyPlan] | None = None

    @property
    def has_itinerary(self) -> bool:
        return self.plans is not None

    def to_json(self) -> dict:
        return {
            "summary": self.summary,
            "tripTitle": self.trip_title,
            "plans": [p.to_json() for p in self.plans] if self.plans is not None else None,
        }


class PlaceLookupResponse(BaseModel):
    """Place plus photo for a free-text query."""

    model_config = ConfigDict(populate_by_name=True)

    query: str
    place_id: str | None = None
    name: str | None = None
    lat: float | None = None
    lng: float | None = None
    description: str | None = None
    rating: float | None = None
    reviews: list[Review] = Field(default_factory=list)
    booking_url: str | None = Field(None, alias="bookingUrl")
    photo_url: str = Field(..., alias="photoUrl")
    thumb_url: str = Field(..., alias="thumbUrl")
    photo_source: PhotoSource = Field(..., alias="photoSource")
    photo_attribution: str | None = Field(None, alias="photoAttribution")
