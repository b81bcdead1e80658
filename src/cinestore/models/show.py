"""Show model plus its one-to-one poster and one-to-many genres."""

from sqlalchemy import Float, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from cinestore.models.base import Base


class Show(Base):
    """
    A film (or event) as listed by the cinema chain.

    rating_slug and rating_match_score were added by a later migration and
    stay NULL until a rating has been matched.
    """

    __tablename__ = "shows"

    slug: Mapped[str] = mapped_column(Text, primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    release_at: Mapped[str | None] = mapped_column(Text, nullable=True)
    movie_type: Mapped[str] = mapped_column(Text, nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    rating_slug: Mapped[str | None] = mapped_column(
        Text, ForeignKey("ratings.slug"), nullable=True
    )
    rating_match_score: Mapped[float | None] = mapped_column(Float, nullable=True)

    def __repr__(self) -> str:
        return f"<Show(slug={self.slug!r}, title={self.title!r}, movie_type={self.movie_type!r})>"


class Poster(Base):
    __tablename__ = "posters"

    show_slug: Mapped[str] = mapped_column(Text, ForeignKey("shows.slug"), primary_key=True)
    lg: Mapped[str | None] = mapped_column(Text, nullable=True)
    md: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Poster(show_slug={self.show_slug!r})>"


class Genre(Base):
    __tablename__ = "genres"

    show_slug: Mapped[str] = mapped_column(Text, ForeignKey("shows.slug"), primary_key=True)
    genre: Mapped[str] = mapped_column(Text, primary_key=True)

    def __repr__(self) -> str:
        return f"<Genre(show_slug={self.show_slug!r}, genre={self.genre!r})>"
