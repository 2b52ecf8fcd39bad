import uuid
from datetime import date, timedelta

from locust import HttpUser, between, task


def _booking_payload() -> dict:
    check_in = date.today() + timedelta(days=45)
    return {
        "hotel_id": "load_test_hotel",
        "hotel_name": "Load Test Hotel",
        "hotel_city": "Cancun",
        "hotel_country": "Mexico",
        "check_in": check_in.isoformat(),
        "check_out": (check_in + timedelta(days=3)).isoformat(),
        "selected_rate": {
            "match_hash": f"m-{uuid.uuid4().hex}",
            "price": "120.00",
            "currency": "USD",
            "room_name": "Standard Double Room",
        },
        "total_price": "360.00",
        "currency": "USD",
    }


class APIUser(HttpUser):
    # Wait between 1 and 3 seconds between tasks
    wait_time = between(1, 3)

    def on_start(self):
        """Every simulated user books as its own authenticated user."""
        self.user_id = f"load-{uuid.uuid4().hex[:8]}"
        self.headers = {
            "X-User-Id": self.user_id,
            "X-User-Name": "Load Tester",
            "X-User-Email": f"{self.user_id}@example.com",
            "X-User-Phone": "+15550000000",
            "Content-Type": "application/json",
        }

    @task(3)
    def create_booking_async(self):
        """Async path: returns 202 immediately, the saga runs in the background."""
        self.client.post(
            "/api/v1/bookings/create-async",
            json=_booking_payload(),
            headers=self.headers,
            name="/api/v1/bookings/create-async",
        )

    @task(1)
    def list_bookings(self):
        self.client.get(
            f"/api/v1/bookings/user/{self.user_id}",
            headers=self.headers,
            name="/api/v1/bookings/user/[id]",
        )
