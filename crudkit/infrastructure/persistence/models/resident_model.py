"""Resident ORM model - infrastructure layer SQLAlchemy mapping."""

from datetime import datetime

from sqlalchemy import String, func
from sqlalchemy.orm import Mapped, mapped_column

from crudkit.infrastructure.persistence.database import Base


class ResidentModel(Base):
    """
    SQLAlchemy ORM model for residents table.

    Attribute names match the Resident dataclass fields one to one; the
    generic repository maps between the two by name.
    """

    __tablename__ = "residents"

    # Primary key
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # Resident information
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    room: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    age: Mapped[int | None] = mapped_column(nullable=True)
    phone: Mapped[str | None] = mapped_column(String(32), unique=True, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        insert_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation of ResidentModel."""
        return f"ResidentModel(id={self.id!r}, name={self.name!r}, room={self.room!r})"
