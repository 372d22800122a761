import logging
from typing import List, Optional

from fastapi_mail import FastMail, MessageSchema, ConnectionConfig

from config import Settings, settings as default_settings
from models import Booking

logger = logging.getLogger(__name__)


def build_mail_config(settings: Settings) -> Optional[ConnectionConfig]:
    if not settings.mail_enabled:
        return None
    return ConnectionConfig(
        MAIL_USERNAME=settings.MAIL_USERNAME,
        MAIL_PASSWORD=settings.MAIL_PASSWORD,
        MAIL_FROM=settings.MAIL_FROM or settings.MAIL_USERNAME,
        MAIL_PORT=settings.MAIL_PORT,
        MAIL_SERVER=settings.MAIL_SERVER,
        MAIL_STARTTLS=True,
        MAIL_SSL_TLS=False,
        USE_CREDENTIALS=True,
    )


def cancel_url(booking: Booking, settings: Settings) -> str:
    return f"{settings.DOMAIN}/cancel/{booking.cancel_token}"


def render_request_email(booking: Booking, settings: Settings) -> str:
    return f"""
    <html>
    <body>
        <h2>Ciao {booking.name},</h2>
        <p>Abbiamo ricevuto la tua richiesta di prenotazione per <b>{booking.guests}</b> persone
        il <b>{booking.date.strftime('%d/%m/%Y alle %H:%M')}</b>.</p>
        <p>Ti scriveremo appena la prenotazione sarà confermata.</p>
        <p>Se vuoi annullare la richiesta, clicca qui:</p>
        <a href="{cancel_url(booking, settings)}" style="display:inline-block;padding:10px 15px;background-color:#ff4c4c;color:white;text-decoration:none;border-radius:5px;">Annulla prenotazione</a>
        <hr>
        <p>Grazie!</p>
    </body>
    </html>
    """


def render_confirmed_email(booking: Booking, settings: Settings) -> str:
    return f"""
    <html>
    <body>
        <h2>Ciao {booking.name},</h2>
        <p>La tua prenotazione del <b>{booking.date.strftime('%d/%m/%Y alle %H:%M')}</b> è confermata.</p>
        <p>Per annullarla: <a href="{cancel_url(booking, settings)}">annulla prenotazione</a></p>
    </body>
    </html>
    """


def render_admin_email(booking: Booking) -> str:
    return f"""
    <html>
    <body>
        <h2>Nuova prenotazione</h2>
        <p>Nome: {booking.name}</p>
        <p>Telefono: {booking.phone}</p>
        <p>Email: {booking.email}</p>
        <p>Ospiti: {booking.guests}</p>
        <p>Data e ora: {booking.date.strftime('%d/%m/%Y alle %H:%M')}</p>
        <p>Allergie: {booking.allergies or '–'}</p>
        <p>Note: {booking.notes or '–'}</p>
    </body>
    </html>
    """


async def _send(conf: ConnectionConfig, subject: str, recipients: List[str], body: str) -> bool:
    message = MessageSchema(
        subject=subject,
        recipients=recipients,
        body=body,
        subtype="html"
    )
    try:
        await FastMail(conf).send_message(message)
    except Exception:
        # a failed e-mail never undoes the booking
        logger.exception("Failed to send %r to %s", subject, recipients)
        return False
    return True


async def send_booking_emails(booking: Booking, settings: Optional[Settings] = None) -> int:
    """Mail the guest and the restaurant about a new request. Returns the number sent."""
    settings = settings or default_settings
    conf = build_mail_config(settings)
    if conf is None:
        logger.debug("Mail not configured, skipping notifications for booking %s", booking.id)
        return 0

    sent = 0
    if await _send(conf, "Richiesta di prenotazione ricevuta", [booking.email],
                   render_request_email(booking, settings)):
        sent += 1
    admin_email = settings.ADMIN_EMAIL or settings.MAIL_USERNAME
    if await _send(conf, "Nuova prenotazione", [admin_email], render_admin_email(booking)):
        sent += 1
    return sent


async def send_confirmation_email(booking: Booking, settings: Optional[Settings] = None) -> bool:
    settings = settings or default_settings
    conf = build_mail_config(settings)
    if conf is None:
        return False
    return await _send(conf, "Prenotazione confermata", [booking.email],
                       render_confirmed_email(booking, settings))
