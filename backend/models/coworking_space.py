"""Co-working space model definitions."""

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, Float, Integer, String
from sqlalchemy.orm import relationship

from backend.database import Base


class CoworkingSpace(Base):
    """Represents a bookable co-working space."""
    __tablename__ = "coworking_spaces"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)
    location = Column(String, nullable=False)
    latitude = Column(Float)
    longitude = Column(Float)
    available_seats = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    reservations = relationship(
        "Reservation",
        back_populates="coworking_space",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint("available_seats > 0", name="check_space_available_seats_positive"),
    )
