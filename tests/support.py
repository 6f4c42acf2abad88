"""
Shared fixtures for the API tests: a fresh app on an in-memory database per
test, with the notifier swapped for one that only records calls.
"""
import unittest

from fastapi.testclient import TestClient

from repair_crm.config import Settings
from repair_crm.main import create_app
from repair_crm.services.notifications import get_notifier

API = "/api/v1"


class RecordingNotifier:
    """Stands in for StatusNotifier and remembers what it was asked to send."""

    def __init__(self):
        self.sent = []

    async def notify_status_change(self, work_order):
        self.sent.append((work_order.id, work_order.status.value))
        return "sms"


def make_settings(**overrides) -> Settings:
    values = {
        "database_url": "sqlite+aiosqlite:///:memory:",
        "log_level": "WARNING",
    }
    values.update(overrides)
    return Settings(**values)


class APITestCase(unittest.TestCase):
    """Base class giving each test its own app, database and client."""

    settings_overrides = {}
    record_notifications = True

    def setUp(self):
        self.app = create_app(make_settings(**self.settings_overrides))
        self.notifier = RecordingNotifier()
        if self.record_notifications:
            self.app.dependency_overrides[get_notifier] = lambda: self.notifier

        self.client = TestClient(self.app)
        self.client.__enter__()
        self.addCleanup(self.client.__exit__, None, None, None)

    # Helpers

    def create_customer(self, **overrides):
        payload = {
            "name": "Jane Doe",
            "phone": "555-123-4567",
            "email": "jane@example.com",
            "address": {"street": "12 Main St", "city": "Springfield", "state": "IL", "zip": "62701"},
            "communication_preference": "SMS",
        }
        payload.update(overrides)
        response = self.client.post(f"{API}/customers/", json=payload)
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()

    def create_vehicle(self, customer_id, **overrides):
        payload = {
            "customer_id": customer_id,
            "year": 2018,
            "make": "Toyota",
            "model": "Camry",
            "vin": "4T1B11HK5JU000001",
            "license_plate": "ABC1234",
        }
        payload.update(overrides)
        response = self.client.post(f"{API}/vehicles/", json=payload)
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()

    def create_technician(self, **overrides):
        payload = {"name": "Sam Wrench", "specialization": "Brakes", "hourly_rate": 80}
        payload.update(overrides)
        response = self.client.post(f"{API}/technicians/", json=payload)
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()

    def create_work_order(self, customer_id, vehicle_id, **overrides):
        payload = {
            "customer_id": customer_id,
            "vehicle_id": vehicle_id,
            "service_requested": "Oil change",
        }
        payload.update(overrides)
        response = self.client.post(f"{API}/work-orders/", json=payload)
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()
