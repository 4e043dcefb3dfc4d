"""SQLAlchemy ORM models."""
import uuid
from sqlalchemy import Column, DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from grouptrips.infrastructure.database.base import Base


def generate_uuid() -> str:
    return str(uuid.uuid4())


class Trip(Base):
    __tablename__ = "trips"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(200), nullable=False)
    group_name = Column(String(200))
    description = Column(Text)
    join_code = Column(String(16), unique=True, nullable=False, index=True)
    admin_id = Column(String(36), nullable=False, index=True)
    departure_time = Column(DateTime(timezone=True), nullable=False)
    return_time = Column(DateTime(timezone=True))
    status = Column(String(20), nullable=False, default="planning")
    # session id or staged intent id the trip was paid for
    checkout_token = Column(String(255), unique=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    members = relationship("TripMember", back_populates="trip", cascade="all, delete-orphan")


class TripMember(Base):
    __tablename__ = "trip_members"
    __table_args__ = (UniqueConstraint("trip_id", "user_id", name="uq_trip_members_trip_user"),)

    id = Column(String(36), primary_key=True, default=generate_uuid)
    trip_id = Column(String(36), ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), nullable=False, index=True)
    role = Column(String(20), nullable=False, default="member")
    joined_at = Column(DateTime(timezone=True), server_default=func.now())

    trip = relationship("Trip", back_populates="members")


class PendingTrip(Base):
    """Server-side staging record for a trip awaiting payment, one per user."""

    __tablename__ = "pending_trips"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), unique=True, nullable=False, index=True)
    intent_id = Column(String(36), nullable=False)
    name = Column(String(200), nullable=False)
    group_name = Column(String(200))
    description = Column(Text)
    departure_time = Column(String(64), nullable=False)
    return_time = Column(String(64))
    staged_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
