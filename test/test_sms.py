import os
import httpx
import pytest
from fastapi.testclient import TestClient

# Test-Umgebung setzen
os.environ["TESTING"] = "1"
os.environ["DATABASE_URL"] = "sqlite://"

from app import app
from models import Sms
from routes.sms_route import format_message

client = TestClient(app)

# ---------------------------------------------------------
# Helper: Twilio-Umgebung
# ---------------------------------------------------------
@pytest.fixture(autouse=True)
def no_twilio(monkeypatch):
    for name in ("TWILIO_ACCOUNT_SID", "TWILIO_AUTH_TOKEN", "TWILIO_PHONE_NUMBER"):
        monkeypatch.delenv(name, raising=False)

@pytest.fixture
def twilio(monkeypatch):
    monkeypatch.setenv("TWILIO_ACCOUNT_SID", "AC123")
    monkeypatch.setenv("TWILIO_AUTH_TOKEN", "secret")
    monkeypatch.setenv("TWILIO_PHONE_NUMBER", "+15550000")

# =========================================================
# TEST: format_message
# =========================================================
def test_format_message_german_reminder():
    sms = Sms(phone_number="+491", guest_name="Anna", day="Monday", service="19:00", language="de", message_type="reminder")
    assert format_message(sms) == "Erinnerung: Ihr Tisch ist fur Monday um 19:00 reserviert. Wir freuen uns auf Sie!"

def test_format_message_fallbacks():
    sms = Sms(phone_number="+1", guest_name="Bob", language="xx", message_type="unknown")
    message = format_message(sms)
    assert message.startswith("Dear Bob, your table is confirmed for your reserved day")
    assert "your scheduled time" in message

# =========================================================
# TEST: GET /sms
# =========================================================
def test_sms_status_unconfigured():
    response = client.get("/sms")
    assert response.status_code == 200

    data = response.json()
    assert data["configured"] is False
    assert data["templates"]["languages"] == ["en", "fr", "de"]

def test_sms_status_configured(twilio):
    assert client.get("/sms").json()["configured"] is True

# =========================================================
# TEST: POST /sms
# =========================================================
def test_send_sms_mock():
    response = client.post("/sms", json={"phone_number": "+1555", "guest_name": "Carol"})
    assert response.status_code == 200

    data = response.json()
    assert data["success"] is True
    assert data["mock"] is True

def test_send_sms_requires_phone():
    response = client.post("/sms", json={"guest_name": "Carol"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Phone number is required"

def test_send_sms_requires_name():
    response = client.post("/sms", json={"phone_number": "+1555"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Guest name is required"

def test_send_sms_through_twilio(twilio, monkeypatch):
    sent = {}

    def fake_post(url, auth=None, data=None, timeout=None):
        sent.update(url=url, auth=auth, data=data)
        return httpx.Response(201, json={"sid": "SM1"}, request=httpx.Request("POST", url))

    monkeypatch.setattr("routes.sms_route.httpx.post", fake_post)

    response = client.post("/sms", json={"phone_number": "+1555", "guest_name": "Dan", "day": "Friday"})
    assert response.status_code == 200
    assert response.json()["message_sid"] == "SM1"
    assert "AC123" in sent["url"]
    assert sent["data"]["To"] == "+1555"
    assert "Friday" in sent["data"]["Body"]

def test_send_sms_twilio_error(twilio, monkeypatch):
    def fake_post(url, **kwargs):
        return httpx.Response(400, json={"message": "Invalid number"}, request=httpx.Request("POST", url))

    monkeypatch.setattr("routes.sms_route.httpx.post", fake_post)

    response = client.post("/sms", json={"phone_number": "+1", "guest_name": "Eve"})
    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to send SMS: Invalid number"

def test_send_sms_twilio_error_without_json(twilio, monkeypatch):
    def fake_post(url, **kwargs):
        return httpx.Response(502, text="<html>Bad gateway</html>", request=httpx.Request("POST", url))

    monkeypatch.setattr("routes.sms_route.httpx.post", fake_post)

    response = client.post("/sms", json={"phone_number": "+1", "guest_name": "Eve"})
    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to send SMS: Unknown error"
