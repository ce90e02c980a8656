"""Reservation model definitions."""

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import relationship

from backend.database import Base

STATUS_ACTIVE = "active"
STATUS_CANCELLED = "cancelled"
STATUSES = (STATUS_ACTIVE, STATUS_CANCELLED)


class Reservation(Base):
    """Represents a user's booking of one time slot at a space."""
    __tablename__ = "reservations"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    coworking_space_id = Column(
        Integer,
        ForeignKey("coworking_spaces.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date = Column(Date, nullable=False)
    time_slot = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False, default=STATUS_ACTIVE)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    user = relationship("User", back_populates="reservations")
    coworking_space = relationship("CoworkingSpace", back_populates="reservations")

    __table_args__ = (
        # At most one active reservation per space, day and slot.
        Index(
            "uq_reservations_active_slot",
            "coworking_space_id",
            "date",
            "time_slot",
            unique=True,
            sqlite_where=text("status = 'active'"),
            postgresql_where=text("status = 'active'"),
        ),
        Index("idx_reservations_user_date", "user_id", "date"),
        CheckConstraint("status IN ('active', 'cancelled')", name="check_reservation_status"),
    )

    def __repr__(self) -> str:
        return (
            f"<Reservation(id={self.id}, space={self.coworking_space_id}, "
            f"date={self.date}, slot={self.time_slot!r}, status={self.status})>"
        )
