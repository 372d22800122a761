"""Booking availability: one seating per evening, blackout days on top."""
import logging
import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Set

from dates import apply_reschedule, calendar_day, calendar_day_bounds
from models import BookingStatus
from stores import BookingFilter, DayTaken

logger = logging.getLogger(__name__)


class AvailabilityError(Exception):
    pass


class DateUnavailable(AvailabilityError):
    def __init__(self, day):
        super().__init__(f"{day.isoformat()} is not available")
        self.day = day


class BookingNotFound(AvailabilityError):
    def __init__(self, booking_id):
        super().__init__(f"Booking {booking_id} not found")
        self.booking_id = booking_id


@dataclass
class DateStatuses:
    confirmed: Set[date] = field(default_factory=set)
    pending: Set[date] = field(default_factory=set)


class AvailabilityService:
    def __init__(self, bookings, disabled_days):
        self.bookings = bookings
        self.disabled_days = disabled_days

    # ---------------- read side ----------------

    def _active_bookings(self):
        return self.bookings.find_many(BookingFilter(status_not=BookingStatus.CANCELLED))

    def booked_dates(self):
        return {calendar_day(b.date) for b in self._active_bookings()}

    def disabled_dates(self):
        return {calendar_day(d.day) for d in self.disabled_days.find_many()}

    def unavailable_dates(self):
        return self.booked_dates() | self.disabled_dates()

    def date_statuses(self):
        statuses = DateStatuses()
        for booking in self._active_bookings():
            day = calendar_day(booking.date)
            if booking.status == BookingStatus.CONFIRMED:
                statuses.confirmed.add(day)
            elif booking.status == BookingStatus.PENDING:
                statuses.pending.add(day)
        return statuses

    # ---------------- conflict check ----------------

    def find_conflict(self, candidate, exclude_booking_id=None):
        day_start, day_end = calendar_day_bounds(candidate)
        return self.bookings.find_first(BookingFilter(
            status_not=BookingStatus.CANCELLED,
            date_from=day_start,
            date_before=day_end,
            id_not=exclude_booking_id,
        ))

    def is_disabled(self, candidate):
        return calendar_day(candidate) in self.disabled_dates()

    def check(self, candidate, exclude_booking_id=None):
        day = calendar_day(candidate)
        if self.find_conflict(candidate, exclude_booking_id) is not None:
            logger.info("Day %s already holds an active booking", day)
            raise DateUnavailable(day)
        if self.is_disabled(candidate):
            logger.info("Day %s is disabled", day)
            raise DateUnavailable(day)

    # ---------------- bookings ----------------

    def reserve(self, candidate, **fields):
        # the unique active-day index settles requests that pass the check concurrently
        self.check(candidate)
        fields.setdefault("cancel_token", uuid.uuid4().hex)
        try:
            booking = self.bookings.create(
                date=candidate,
                status=BookingStatus.PENDING,
                **fields,
            )
        except DayTaken:
            logger.warning("Concurrent booking won the race for %s", calendar_day(candidate))
            raise DateUnavailable(calendar_day(candidate)) from None
        logger.info("Booking %s created for %s", booking.id, booking.day)
        return booking

    def get_booking(self, booking_id):
        booking = self.bookings.get(booking_id)
        if booking is None:
            raise BookingNotFound(booking_id)
        return booking

    def reschedule(self, booking_id, new_value, has_time):
        booking = self.get_booking(booking_id)
        new_date = apply_reschedule(booking.date, new_value, has_time)
        if booking.status != BookingStatus.CANCELLED:
            if calendar_day(new_date) != booking.day:
                self.check(new_date, exclude_booking_id=booking_id)
            elif self.find_conflict(new_date, exclude_booking_id=booking_id) is not None:
                # time change only: a blackout added after the booking is left to the admin
                raise DateUnavailable(booking.day)
        try:
            updated = self.bookings.update(booking_id, date=new_date)
        except DayTaken:
            raise DateUnavailable(calendar_day(new_date)) from None
        if updated is None:
            raise BookingNotFound(booking_id)
        logger.info("Booking %s moved to %s", booking_id, new_date.isoformat())
        return updated

    def set_status(self, booking_id, status):
        if status not in BookingStatus.ALL:
            raise ValueError(f"Unknown booking status {status!r}")
        booking = self.get_booking(booking_id)
        if booking.status == BookingStatus.CANCELLED and status != BookingStatus.CANCELLED:
            # reactivation must not create a second active booking on the day
            if self.find_conflict(booking.date, exclude_booking_id=booking_id) is not None:
                raise DateUnavailable(calendar_day(booking.date))
        try:
            updated = self.bookings.update(booking_id, status=status)
        except DayTaken:
            raise DateUnavailable(calendar_day(booking.date)) from None
        if updated is None:
            raise BookingNotFound(booking_id)
        logger.info("Booking %s is now %s", booking_id, status)
        return updated

    def cancel_by_token(self, token):
        booking = self.bookings.get_by_cancel_token(token)
        if booking is None or booking.status == BookingStatus.CANCELLED:
            return None
        return self.bookings.update(booking.id, status=BookingStatus.CANCELLED)

    def delete_booking(self, booking_id):
        if not self.bookings.delete(booking_id):
            raise BookingNotFound(booking_id)
        logger.info("Booking %s deleted", booking_id)

    def list_bookings(self, status=None, page=1, take=10):
        filter = BookingFilter(status=status)
        items = self.bookings.find_many(filter, offset=(page - 1) * take, limit=take)
        return items, self.bookings.count(filter)

    # ---------------- blackout registry ----------------

    def list_disabled_days(self):
        return self.disabled_days.find_many()

    def add_disabled_day(self, day, reason=None):
        # existing bookings on the day are left for the administrator to reconcile
        item = self.disabled_days.create(day=calendar_day(day), reason=reason or None)
        logger.info("Day %s disabled (%s)", item.day, reason or "no reason")
        return item

    def remove_disabled_day(self, day_id):
        if self.disabled_days.delete(day_id):
            logger.info("Disabled day %s removed", day_id)
