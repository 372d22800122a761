import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Form, Depends, Query, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session
from anyio import from_thread

from auth import SESSION_COOKIE, check_password, issue_session_token, require_admin
from availability import AvailabilityService, BookingNotFound, DateUnavailable
from config import settings
from database import get_db, init_db
from dates import TIME_SLOTS, calendar_day, parse_booking_date, parse_day, today
from email_service import send_booking_emails, send_confirmation_email
from models import Booking, BookingStatus, DisabledDay
from schemas import BookingCreate, BookingDateUpdate, BookingStatusUpdate, DisabledDayCreate, StatusName
from stores import SqlBookingStore, SqlDisabledDayStore
from whatsapp_service import notify_new_booking

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

DATE_UNAVAILABLE = "Data non disponibile"
BOOKING_NOT_FOUND = "Prenotazione non trovata"


# ================== APP ==================
@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(title="Restaurant bookings", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_service(db: Session = Depends(get_db)) -> AvailabilityService:
    return AvailabilityService(SqlBookingStore(db), SqlDisabledDayStore(db))


def serialize_booking(b: Booking) -> dict:
    return {
        "id": b.id,
        "date": b.date.isoformat(),
        "day": b.day.isoformat(),
        "time": b.date.strftime("%H:%M"),
        "guests": b.guests,
        "name": b.name,
        "email": b.email,
        "phone": b.phone,
        "allergies": b.allergies,
        "preferences": b.preferences,
        "notes": b.notes,
        "special_event_id": b.special_event_id,
        "status": b.status,
        "created_at": b.created_at.isoformat() if b.created_at else None,
    }


def serialize_disabled_day(d: DisabledDay) -> dict:
    return {"id": d.id, "day": d.day.isoformat(), "reason": d.reason}


def iso_days(days) -> list:
    return [d.isoformat() for d in sorted(days)]


# ================== PUBLIC API ==================
@app.get("/api/time-slots")
def get_time_slots():
    return TIME_SLOTS


@app.get("/api/availability")
def availability(service: AvailabilityService = Depends(get_service)):
    statuses = service.date_statuses()
    return {
        "unavailable": iso_days(service.unavailable_dates()),
        "disabled": iso_days(service.disabled_dates()),
        "confirmed": iso_days(statuses.confirmed),
        "pending": iso_days(statuses.pending),
    }


@app.post("/api/bookings", status_code=201)
def book(data: BookingCreate, service: AvailabilityService = Depends(get_service)):
    start, _ = parse_booking_date(data.date)
    if calendar_day(start) < today():
        raise HTTPException(400, "La data è nel passato")

    fields = data.model_dump(exclude={"date"})
    for key in ("allergies", "preferences", "notes"):
        fields[key] = fields[key] or None

    try:
        booking = service.reserve(start, **fields)
    except DateUnavailable:
        raise HTTPException(409, DATE_UNAVAILABLE)

    from_thread.run(send_booking_emails, booking)
    notify_new_booking(booking)

    return {"ok": True, "booking": serialize_booking(booking)}


# ================== CANCEL ==================
@app.get("/cancel/{token}", response_class=HTMLResponse)
def cancel_booking(token: str, service: AvailabilityService = Depends(get_service)):
    booking = service.cancel_by_token(token)
    if not booking:
        return "<h3>Prenotazione non trovata o già annullata.</h3>"

    logger.info("Booking %s cancelled by guest", booking.id)
    return f"""
    <h3>La tua prenotazione del {booking.date.strftime('%d/%m/%Y alle %H:%M')}
    è stata annullata.</h3>
    """


# ================== ADMIN ==================
@app.post("/admin/login")
def admin_login(response: Response, password: str = Form(...)):
    if not check_password(password):
        logger.warning("Rejected admin login")
        raise HTTPException(401, "Password non valida")
    response.set_cookie(
        SESSION_COOKIE,
        issue_session_token(),
        max_age=settings.SESSION_MAX_AGE,
        httponly=True,
        secure=settings.DOMAIN.startswith("https"),
        samesite="lax",
        path="/",
    )
    return {"ok": True}


@app.post("/admin/logout")
def admin_logout(response: Response):
    response.delete_cookie(SESSION_COOKIE, path="/")
    return {"ok": True}


@app.get("/api/admin/bookings", dependencies=[Depends(require_admin)])
def admin_bookings(
    page: int = Query(1, ge=1),
    take: int = Query(10, ge=1, le=100),
    status: Optional[StatusName] = None,
    service: AvailabilityService = Depends(get_service),
):
    items, total = service.list_bookings(status=status, page=page, take=take)
    return {
        "ok": True,
        "items": [serialize_booking(b) for b in items],
        "total": total,
        "page": page,
        "take": take,
    }


@app.patch("/api/admin/bookings/{booking_id}/status", dependencies=[Depends(require_admin)])
def admin_update_status(
    booking_id: int,
    data: BookingStatusUpdate,
    service: AvailabilityService = Depends(get_service),
):
    try:
        previous = service.get_booking(booking_id).status
        booking = service.set_status(booking_id, data.status)
    except BookingNotFound:
        raise HTTPException(404, BOOKING_NOT_FOUND)
    except DateUnavailable:
        raise HTTPException(409, DATE_UNAVAILABLE)

    if booking.status == BookingStatus.CONFIRMED and previous != BookingStatus.CONFIRMED:
        from_thread.run(send_confirmation_email, booking)
    return {"ok": True, "booking": serialize_booking(booking)}


@app.patch("/api/admin/bookings/{booking_id}/date", dependencies=[Depends(require_admin)])
def admin_reschedule(
    booking_id: int,
    data: BookingDateUpdate,
    service: AvailabilityService = Depends(get_service),
):
    new_value, has_time = parse_booking_date(data.date)
    try:
        booking = service.reschedule(booking_id, new_value, has_time)
    except BookingNotFound:
        raise HTTPException(404, BOOKING_NOT_FOUND)
    except DateUnavailable:
        raise HTTPException(409, DATE_UNAVAILABLE)
    return {"ok": True, "booking": serialize_booking(booking)}


@app.delete("/api/admin/bookings/{booking_id}", dependencies=[Depends(require_admin)])
def admin_delete_booking(booking_id: int, service: AvailabilityService = Depends(get_service)):
    try:
        service.delete_booking(booking_id)
    except BookingNotFound:
        raise HTTPException(404, BOOKING_NOT_FOUND)
    return {"ok": True}


@app.get("/api/admin/disabled-days", dependencies=[Depends(require_admin)])
def admin_disabled_days(service: AvailabilityService = Depends(get_service)):
    return {"ok": True, "items": [serialize_disabled_day(d) for d in service.list_disabled_days()]}


@app.post("/api/admin/disabled-days", status_code=201, dependencies=[Depends(require_admin)])
def admin_add_disabled_day(data: DisabledDayCreate, service: AvailabilityService = Depends(get_service)):
    item = service.add_disabled_day(parse_day(data.day), data.reason)
    return {"ok": True, "item": serialize_disabled_day(item)}


@app.delete("/api/admin/disabled-days/{day_id}", dependencies=[Depends(require_admin)])
def admin_remove_disabled_day(day_id: int, service: AvailabilityService = Depends(get_service)):
    service.remove_disabled_day(day_id)
    return {"ok": True}
