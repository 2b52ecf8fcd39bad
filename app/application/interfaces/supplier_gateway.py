from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import Any


@dataclass
class PrebookResult:
    success: bool
    book_hash: str | None = None
    error: str | None = None
    payload: dict[str, Any] | None = None


@dataclass
class BookingFormResult:
    success: bool
    sandbox_mode: bool = False
    order_id: str | None = None
    item_id: str | None = None
    error: str | None = None
    payload: dict[str, Any] | None = None


@dataclass
class StartBookingRequest:
    user: dict[str, str]  # email, phone, comment
    supplier_data: dict[str, str]  # first_name_original, last_name_original, phone, email
    rooms: list[dict[str, Any]]  # [{"guests": [{"first_name": ..., "last_name": ...}]}]
    payment_type: dict[str, str]  # type, amount, currency_code
    language: str = "en"


@dataclass
class BookingStatusResult:
    status: str  # ok, processing, error, ...
    order_id: str | None = None
    partner_order_id: str | None = None
    percent: int | None = None
    error: str | None = None
    payload: dict[str, Any] | None = field(default=None, repr=False)


class HotelSupplierGateway(ABC):
    """
    Port for the hotel supplier booking API.

    Transport failures (network, non-2xx without a business error, open
    circuit) are raised as SupplierUnavailableError.
    """

    @abstractmethod
    async def prebook(self, match_hash: str, language: str = "en") -> PrebookResult:
        """
        Exchanges a volatile match hash for a stable book hash.
        """
        pass

    @abstractmethod
    async def create_booking_form(
        self,
        book_hash: str,
        partner_order_id: str,
        user_ip: str = "0.0.0.0",
        language: str = "en",
    ) -> BookingFormResult:
        """
        Creates the remote booking transaction for a partner order id.
        """
        pass

    @abstractmethod
    async def start_booking(
        self, partner_order_id: str, request: StartBookingRequest
    ) -> dict[str, Any]:
        """
        Submits guest and payment details; the supplier confirms asynchronously.
        """
        pass

    @abstractmethod
    async def check_booking_status(self, partner_order_id: str) -> BookingStatusResult:
        pass

    @abstractmethod
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
        """
        Returns the raw rates of a single hotel page for the given stay.
        """
        pass
