import logging
from typing import Optional

from twilio.rest import Client

from config import Settings, settings as default_settings
from models import Booking

logger = logging.getLogger(__name__)


def send_whatsapp(message: str, settings: Optional[Settings] = None) -> bool:
    settings = settings or default_settings
    if not settings.whatsapp_enabled:
        return False

    client = Client(settings.TWILIO_SID, settings.TWILIO_AUTH_TOKEN)
    try:
        client.messages.create(
            body=message,
            from_=f'whatsapp:{settings.TWILIO_WHATSAPP_FROM}',
            to=f'whatsapp:{settings.ADMIN_WHATSAPP_TO}'
        )
    except Exception:
        logger.exception("Failed to send WhatsApp alert")
        return False
    return True


def notify_new_booking(booking: Booking, settings: Optional[Settings] = None) -> bool:
    text = (
        f"Nuova prenotazione: {booking.name}, {booking.guests} ospiti, "
        f"{booking.date.strftime('%d/%m/%Y %H:%M')}, tel. {booking.phone}"
    )
    return send_whatsapp(text, settings)
