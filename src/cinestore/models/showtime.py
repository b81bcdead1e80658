"""Showtime model for screenings of a show at a cinema."""

from sqlalchemy import ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column

from cinestore.models.base import Base


class Showtime(Base):
    """
    A single screening.

    time and end_time are display strings as published by the chain; they are
    stored verbatim and never parsed.
    """

    __tablename__ = "showtimes"

    show_slug: Mapped[str] = mapped_column(Text, ForeignKey("shows.slug"), primary_key=True)
    cinema_slug: Mapped[str] = mapped_column(Text, ForeignKey("cinemas.slug"), primary_key=True)
    time: Mapped[str] = mapped_column(Text, primary_key=True)
    reservation_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    auditorium_name: Mapped[str] = mapped_column(Text, primary_key=True)
    auditorium_capacity: Mapped[str | None] = mapped_column(Text, nullable=True)
    end_time: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<Showtime(show_slug={self.show_slug!r}, "
            f"cinema_slug={self.cinema_slug!r}, "
            f"time={self.time!r})>"
        )
