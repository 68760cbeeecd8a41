"""Station model."""

import uuid
from typing import Self

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from subway.models.base import BaseModel


class Station(BaseModel):
    """A named stop that lines can reference. Station records outlive the lines using them."""

    __tablename__ = "stations"

    name: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )

    @classmethod
    def create(cls, name: str) -> Self:
        """
        Create a station with its identifier assigned up front.

        Assigning the id eagerly lets a line reference the station by id
        before the session is flushed.

        Raises:
            ValueError: If the name is blank
        """
        if not name or not name.strip():
            msg = "Station name must not be empty"
            raise ValueError(msg)
        return cls(id=uuid.uuid4(), name=name.strip())

    def __repr__(self) -> str:
        """String representation of the station."""
        return f"<Station(id={self.id}, name={self.name})>"
