from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Index, text
from sqlalchemy.orm import validates

from database import Base
from dates import calendar_day


class BookingStatus:
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"

    ALL = (PENDING, CONFIRMED, CANCELLED)


ACTIVE_ONLY = text("status != 'CANCELLED'")


def utc_now():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        # one seating per evening: at most one non-cancelled booking per day
        Index(
            "uq_bookings_active_day",
            "day",
            unique=True,
            sqlite_where=ACTIVE_ONLY,
            postgresql_where=ACTIVE_ONLY,
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    date = Column(DateTime, nullable=False)
    day = Column(Date, nullable=False, index=True)
    guests = Column(Integer, nullable=False)
    name = Column(String(100), nullable=False)
    email = Column(String(100), nullable=False)
    phone = Column(String(20), nullable=False)
    allergies = Column(Text)
    preferences = Column(Text)
    notes = Column(Text)
    special_event_id = Column(Integer)
    status = Column(String(12), nullable=False, default=BookingStatus.PENDING)
    cancel_token = Column(String, unique=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)

    @validates("date")
    def _sync_day(self, key, value):
        self.day = calendar_day(value)
        return value

    def __repr__(self):
        return f"<Booking id={self.id} day={self.day} status={self.status}>"


class DisabledDay(Base):
    __tablename__ = "disabled_days"

    id = Column(Integer, primary_key=True, index=True)
    day = Column(Date, nullable=False, index=True)
    reason = Column(String(200))
    created_at = Column(DateTime, nullable=False, default=utc_now)

    def __repr__(self):
        return f"<DisabledDay id={self.id} day={self.day}>"
