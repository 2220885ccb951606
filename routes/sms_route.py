import logging
import os

import httpx
from fastapi import APIRouter, HTTPException

from models import Sms

logger = logging.getLogger(__name__)

sms_router = APIRouter(
    tags=["Sms"]
)

TWILIO_API_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"

SMS_TEMPLATES = {
    "en": {
        "confirmation": "Dear {name}, your table is confirmed for {day} at {service}. See you soon!",
        "reminder": "Reminder: Your table is booked for {day} at {service}. We look forward to seeing you!",
    },
    "fr": {
        "confirmation": "Cher(e) {name}, votre table est confirmee pour {day} a {service}. A bientot!",
        "reminder": "Rappel: Votre table est reservee pour {day} a {service}. Nous vous attendons avec impatience!",
    },
    "de": {
        "confirmation": "Liebe(r) {name}, Ihr Tisch ist fur {day} um {service} bestatigt. Bis bald!",
        "reminder": "Erinnerung: Ihr Tisch ist fur {day} um {service} reserviert. Wir freuen uns auf Sie!",
    },
}


def _twilio_config():
    return (
        os.getenv("TWILIO_ACCOUNT_SID"),
        os.getenv("TWILIO_AUTH_TOKEN"),
        os.getenv("TWILIO_PHONE_NUMBER"),
    )


def format_message(sms: Sms) -> str:
    """Fills the template for the requested language and type, English confirmation as fallback."""
    templates = SMS_TEMPLATES.get(sms.language, SMS_TEMPLATES["en"])
    template = templates.get(sms.message_type, templates["confirmation"])
    return template.format(
        name=sms.guest_name,
        day=sms.day or "your reserved day",
        service=sms.service or "your scheduled time",
    )


@sms_router.get("/sms", tags=["Sms"])
def get_sms_status():
    return {
        "configured": all(_twilio_config()),
        "templates": {
            "languages": list(SMS_TEMPLATES),
            "types": ["confirmation", "reminder"]
        }
    }


@sms_router.post("/sms", tags=["Sms"])
def send_sms(sms: Sms):
    """
    Sends a confirmation or reminder text through Twilio. Without Twilio
    credentials nothing is sent and a mock success is returned.
    """
    if not sms.phone_number:
        raise HTTPException(status_code=400, detail="Phone number is required")
    if not sms.guest_name:
        raise HTTPException(status_code=400, detail="Guest name is required")

    message = format_message(sms)
    account_sid, auth_token, from_number = _twilio_config()
    if not (account_sid and auth_token and from_number):
        logger.info("Twilio not configured, mock SMS to %s: %s", sms.phone_number, message)
        return {"success": True, "message": "SMS would be sent (Twilio not configured)", "mock": True}

    try:
        response = httpx.post(
            TWILIO_API_URL.format(sid=account_sid),
            auth=(account_sid, auth_token),
            data={"To": sms.phone_number, "From": from_number, "Body": message},
            timeout=10.0,
        )
    except httpx.HTTPError as e:
        logger.exception("SMS sending failed")
        raise HTTPException(status_code=500, detail="Failed to send SMS") from e

    if response.is_error:
        try:
            reason = response.json().get("message", "Unknown error")
        except ValueError:
            reason = "Unknown error"
        logger.error("Twilio error %s: %s", response.status_code, response.text)
        raise HTTPException(status_code=500, detail=f"Failed to send SMS: {reason}")

    result = response.json()
    return {"success": True, "message_sid": result.get("sid"), "message": "SMS sent successfully"}
