"""Pydantic record schemas for catalog entities."""

from enum import Enum
from typing import Annotated, Any, ClassVar

import pydantic
from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictFloat, StrictInt

from cinestore.errors import ValidationError


class EntityKind(str, Enum):
    """Catalog entity kinds, listed in foreign key dependency order."""

    CITY = "city"
    CINEMA = "cinema"
    RATING = "rating"
    SHOW = "show"
    POSTER = "poster"
    GENRE = "genre"
    SHOWTIME = "showtime"


# Parents are always written before their children
UPSERT_ORDER: tuple[EntityKind, ...] = tuple(EntityKind)

SlugStr = Annotated[str, Field(min_length=1)]

class CatalogRecord(BaseModel):
    """
    Base for validated catalog records.

    Subclasses declare their kind, the fields forming the primary key, and
    the (field, parent kind) pairs that must resolve before a write.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: ClassVar[EntityKind]
    key_fields: ClassVar[tuple[str, ...]]
    references: ClassVar[tuple[tuple[str, EntityKind], ...]] = ()

    def key(self) -> tuple[Any, ...]:
        """Primary key values in column order."""
        return tuple(getattr(self, name) for name in self.key_fields)

    def row(self) -> dict[str, Any]:
        """Column values for an INSERT statement."""
        return self.model_dump()


class City(CatalogRecord):
    kind = EntityKind.CITY
    key_fields = ("slug",)

    slug: SlugStr
    name: str


class Cinema(CatalogRecord):
    kind = EntityKind.CINEMA
    key_fields = ("slug",)
    references = (("city_slug", EntityKind.CITY),)

    slug: SlugStr
    city_slug: SlugStr
    name: str


class Rating(CatalogRecord):
    """Review scores; audience and critics scores are percentages."""

    kind = EntityKind.RATING
    key_fields = ("slug",)

    slug: SlugStr
    title: str
    description: str | None = None
    release_year: StrictInt | None = Field(default=None, ge=0)
    audience_score: StrictInt | None = Field(default=None, ge=0, le=100)
    score_sentiment: str | None = None
    want_to_see_count: StrictInt | None = Field(default=None, ge=0)
    critics_score: StrictInt | None = Field(default=None, ge=0, le=100)
    certified_fresh: StrictBool | None = None
    new_adjusted_tm_score: StrictInt | None = Field(default=None, ge=0)


class Show(CatalogRecord):
    """
    A listed film or event.

    rating_match_score is the distance reported by the rating matcher,
    0.0 meaning an exact title and year match.
    """

    kind = EntityKind.SHOW
    key_fields = ("slug",)
    references = (("rating_slug", EntityKind.RATING),)

    slug: SlugStr
    title: str
    release_at: str | None = None
    movie_type: SlugStr
    duration: StrictInt = Field(ge=0)
    rating_slug: str | None = Field(default=None, min_length=1)
    rating_match_score: StrictFloat | None = Field(default=None, ge=0, allow_inf_nan=False)


class Poster(CatalogRecord):
    kind = EntityKind.POSTER
    key_fields = ("show_slug",)
    references = (("show_slug", EntityKind.SHOW),)

    show_slug: SlugStr
    lg: str | None = None
    md: str | None = None


class Genre(CatalogRecord):
    kind = EntityKind.GENRE
    key_fields = ("show_slug", "genre")
    references = (("show_slug", EntityKind.SHOW),)

    show_slug: SlugStr
    genre: SlugStr


class Showtime(CatalogRecord):
    """A screening. time and end_time are display strings, stored as given."""

    kind = EntityKind.SHOWTIME
    key_fields = ("show_slug", "cinema_slug", "time", "auditorium_name")
    references = (
        ("show_slug", EntityKind.SHOW),
        ("cinema_slug", EntityKind.CINEMA),
    )

    show_slug: SlugStr
    cinema_slug: SlugStr
    time: SlugStr
    reservation_url: str | None = None
    auditorium_name: str
    auditorium_capacity: str | None = None
    end_time: str | None = None


RECORD_TYPES: dict[EntityKind, type[CatalogRecord]] = {
    record_type.kind: record_type
    for record_type in (City, Cinema, Rating, Show, Poster, Genre, Showtime)
}


def record_type_for(kind: EntityKind | str) -> type[CatalogRecord]:
    """Look up the record schema for a kind given as enum or string."""
    try:
        return RECORD_TYPES[EntityKind(kind)]
    except ValueError as exc:
        raise ValidationError("kind", kind, "unknown entity kind") from exc


def validate_record(kind: EntityKind | str, data: Any) -> CatalogRecord:
    """
    Validate raw data (a mapping or a record) into the record type for a kind.

    Records that were already built are re-validated, so instances created
    with model_construct() cannot bypass the field constraints.

    Raises:
        ValidationError: On the first failing field
    """
    record_type = record_type_for(kind)
    if isinstance(data, CatalogRecord):
        if data.kind is not record_type.kind:
            raise ValidationError("kind", data.kind.value, f"expected {record_type.kind.value}")
        data = data.model_dump()

    try:
        return record_type.model_validate(data)
    except pydantic.ValidationError as exc:
        error = exc.errors()[0]
        location = ".".join(str(part) for part in error["loc"])
        field = f"{record_type.kind.value}.{location}" if location else record_type.kind.value
        raise ValidationError(field, error.get("input"), error["msg"]) from exc
