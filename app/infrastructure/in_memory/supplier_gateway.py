from datetime import date, datetime, time, timedelta, timezone
from typing import Any

from app.application.interfaces.supplier_gateway import (
    BookingFormResult,
    BookingStatusResult,
    HotelSupplierGateway,
    PrebookResult,
    StartBookingRequest,
)

BOOK_HASH_PREFIX = "book-"


class SandboxSupplierGateway(HotelSupplierGateway):
    """
    Scriptable stand-in for the hotel supplier, used in dev mode and tests.

    By default every prebook succeeds, every form succeeds and each order is
    confirmed on its second status check. Behaviour can be scripted per
    match hash or per order id through the public attributes.
    """

    def __init__(
        self,
        status_script: list[str] | None = None,
        sandbox_mode: bool = False,
        rates: list[dict[str, Any]] | None = None,
    ) -> None:
        self.status_script = list(status_script or ["processing", "ok"])
        self.status_scripts: dict[str, list[str]] = {}
        self.sandbox_mode = sandbox_mode
        self.rates = rates

        # match_hash -> behaviour
        self.expired_hashes: set[str] = set()
        self.prebook_errors: dict[str, Exception] = {}
        self.form_errors: dict[str, Exception] = {}
        self.rejected_forms: dict[str, str] = {}

        # Call log
        self.prebook_calls: list[str] = []
        self.form_calls: list[dict[str, str]] = []
        self.start_calls: list[tuple[str, StartBookingRequest]] = []
        self.status_calls: list[str] = []
        self.search_calls: list[dict[str, Any]] = []

    async def prebook(self, match_hash: str, language: str = "en") -> PrebookResult:
        self.prebook_calls.append(match_hash)
        if match_hash in self.prebook_errors:
            raise self.prebook_errors[match_hash]
        if match_hash in self.expired_hashes:
            return PrebookResult(success=False, error="no_available_rates")
        return PrebookResult(success=True, book_hash=f"{BOOK_HASH_PREFIX}{match_hash}")

    async def create_booking_form(
        self,
        book_hash: str,
        partner_order_id: str,
        user_ip: str = "0.0.0.0",
        language: str = "en",
    ) -> BookingFormResult:
        self.form_calls.append(
            {"book_hash": book_hash, "partner_order_id": partner_order_id, "user_ip": user_ip}
        )
        match_hash = book_hash.removeprefix(BOOK_HASH_PREFIX)
        if match_hash in self.form_errors:
            raise self.form_errors[match_hash]
        if self.sandbox_mode:
            return BookingFormResult(success=False, sandbox_mode=True)
        if match_hash in self.rejected_forms:
            return BookingFormResult(success=False, error=self.rejected_forms[match_hash])
        return BookingFormResult(
            success=True,
            order_id=str(100000 + len(self.form_calls)),
            item_id=str(200000 + len(self.form_calls)),
        )

    async def start_booking(
        self, partner_order_id: str, request: StartBookingRequest
    ) -> dict[str, Any]:
        self.start_calls.append((partner_order_id, request))
        return {"status": "ok", "data": None, "error": None}

    async def check_booking_status(self, partner_order_id: str) -> BookingStatusResult:
        self.status_calls.append(partner_order_id)
        script = self.status_scripts.get(partner_order_id, self.status_script)
        checks = self.status_calls.count(partner_order_id)
        status = script[min(checks, len(script)) - 1]
        return BookingStatusResult(
            status=status,
            order_id=f"RH-{partner_order_id}" if status == "ok" else None,
            partner_order_id=partner_order_id,
            percent=100 if status in ("ok", "error") else 50,
            error="booking_failed" if status == "error" else None,
        )

    async def search_hotel_rates(
        self,
        hid: str,
        checkin: date,
        checkout: date,
        adults: int = 2,
        currency: str = "USD",
        residency: str = "gb",
        language: str = "en",
    ) -> list[dict[str, Any]]:
        self.search_calls.append(
            {"hid": hid, "checkin": checkin, "checkout": checkout, "adults": adults, "currency": currency}
        )
        if self.rates is not None:
            return list(self.rates)
        return [sample_rate(checkin, currency=currency)]


def sample_rate(
    checkin: date,
    currency: str = "USD",
    amount: str = "180.00",
    refundable: bool = True,
    match_hash: str = "m-sandbox-refundable",
) -> dict[str, Any]:
    """Rate shaped like a `/search/hp/` entry."""
    checkin_at = datetime.combine(checkin, time.min, tzinfo=timezone.utc)
    if refundable:
        deadline = checkin_at - timedelta(days=1)
    else:
        deadline = datetime(2000, 1, 1, tzinfo=timezone.utc)
    return {
        "match_hash": match_hash,
        "room_name": "Standard Double Room",
        "meal": "nomeal",
        "payment_options": {
            "payment_types": [
                {
                    "amount": amount,
                    "show_amount": amount,
                    "currency_code": currency,
                    "show_currency_code": currency,
                    "type": "deposit",
                    "cancellation_penalties": {
                        "free_cancellation_before": deadline.strftime("%Y-%m-%dT%H:%M:%S"),
                    },
                }
            ]
        },
    }
