"""City model, the root of the cinema hierarchy."""

from sqlalchemy import Text
from sqlalchemy.orm import Mapped, mapped_column

from cinestore.models.base import Base


class City(Base):
    __tablename__ = "cities"

    slug: Mapped[str] = mapped_column(Text, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<City(slug={self.slug!r}, name={self.name!r})>"
