"""Rating model for review-aggregator scores matched to shows."""

from sqlalchemy import Boolean, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from cinestore.models.base import Base


class Rating(Base):
    """
    Review scores for a film.

    Ratings are independent of the catalog hierarchy; shows point at them
    through an optional rating_slug.
    """

    __tablename__ = "ratings"

    slug: Mapped[str] = mapped_column(Text, primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    release_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    audience_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    score_sentiment: Mapped[str | None] = mapped_column(Text, nullable=True)
    want_to_see_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    critics_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    certified_fresh: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    new_adjusted_tm_score: Mapped[int | None] = mapped_column(Integer, nullable=True)

    def __repr__(self) -> str:
        return f"<Rating(slug={self.slug!r}, title={self.title!r}, release_year={self.release_year})>"
