"""Storage ports used by the availability engine."""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models import Booking, DisabledDay

ACTIVE_DAY_INDEX = "uq_bookings_active_day"


class DayTaken(Exception):
    """The storage engine refused a second active booking for the same day."""


@dataclass
class BookingFilter:
    status: Optional[str] = None
    status_not: Optional[str] = None
    date_from: Optional[datetime] = None
    date_before: Optional[datetime] = None
    id_not: Optional[int] = None

    def matches(self, booking):
        if self.status is not None and booking.status != self.status:
            return False
        if self.status_not is not None and booking.status == self.status_not:
            return False
        if self.date_from is not None and booking.date < self.date_from:
            return False
        if self.date_before is not None and booking.date >= self.date_before:
            return False
        if self.id_not is not None and booking.id == self.id_not:
            return False
        return True

    def clauses(self):
        where = []
        if self.status is not None:
            where.append(Booking.status == self.status)
        if self.status_not is not None:
            where.append(Booking.status != self.status_not)
        if self.date_from is not None:
            where.append(Booking.date >= self.date_from)
        if self.date_before is not None:
            where.append(Booking.date < self.date_before)
        if self.id_not is not None:
            where.append(Booking.id != self.id_not)
        return where


def _is_active_day_violation(exc):
    message = str(exc.orig)
    return ACTIVE_DAY_INDEX in message or "bookings.day" in message


class SqlBookingStore:
    def __init__(self, db: Session):
        self.db = db

    def _query(self, filter):
        query = self.db.query(Booking)
        if filter is not None:
            query = query.filter(*filter.clauses())
        return query

    def find_many(self, filter=None, offset=0, limit=None):
        query = self._query(filter).order_by(Booking.date.asc(), Booking.id.asc())
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def find_first(self, filter=None):
        return self._query(filter).order_by(Booking.date.asc(), Booking.id.asc()).first()

    def get(self, booking_id):
        return self.db.get(Booking, booking_id)

    def get_by_cancel_token(self, token):
        return self.db.query(Booking).filter(Booking.cancel_token == token).first()

    def count(self, filter=None):
        return self._query(filter).count()

    def _commit(self):
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            if _is_active_day_violation(exc):
                raise DayTaken(str(exc.orig)) from exc
            raise

    def create(self, **fields):
        booking = Booking(**fields)
        self.db.add(booking)
        self._commit()
        self.db.refresh(booking)
        return booking

    def update(self, booking_id, **fields):
        booking = self.get(booking_id)
        if booking is None:
            return None
        for key, value in fields.items():
            setattr(booking, key, value)
        self._commit()
        self.db.refresh(booking)
        return booking

    def delete(self, booking_id):
        booking = self.get(booking_id)
        if booking is None:
            return False
        self.db.delete(booking)
        self.db.commit()
        return True


class SqlDisabledDayStore:
    def __init__(self, db: Session):
        self.db = db

    def find_many(self):
        return self.db.query(DisabledDay).order_by(DisabledDay.day.asc(), DisabledDay.id.asc()).all()

    def create(self, **fields):
        item = DisabledDay(**fields)
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)
        return item

    def delete(self, day_id):
        item = self.db.get(DisabledDay, day_id)
        if item is None:
            return False
        self.db.delete(item)
        self.db.commit()
        return True
