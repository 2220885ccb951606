from typing import Optional
from pydantic import BaseModel

class Sms(BaseModel):
    phone_number: Optional[str] = None
    guest_name: Optional[str] = None
    day: Optional[str] = None
    service: Optional[str] = None
    language: str = "en"
    message_type: str = "confirmation"
