"""Cinema model for storing cinema venues."""

from sqlalchemy import ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column

from cinestore.models.base import Base


class Cinema(Base):
    """
    Cinema venue model.

    Every cinema belongs to exactly one city.
    """

    __tablename__ = "cinemas"

    slug: Mapped[str] = mapped_column(Text, primary_key=True)
    city_slug: Mapped[str] = mapped_column(Text, ForeignKey("cities.slug"), nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<Cinema(slug={self.slug!r}, name={self.name!r}, city_slug={self.city_slug!r})>"
