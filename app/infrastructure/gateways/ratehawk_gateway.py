import asyncio
import json
import logging
from datetime import date
from typing import Any, Awaitable, Callable

import httpx
from pybreaker import CircuitBreaker

from app.application.interfaces.supplier_gateway import (
    BookingFormResult,
    BookingStatusResult,
    HotelSupplierGateway,
    PrebookResult,
    StartBookingRequest,
)
from app.domain.errors import SupplierUnavailableError
from app.infrastructure.circuit_breaker import (
    CircuitBreakerError,
    call_with_breaker,
    supplier_breaker,
)

DEFAULT_BASE_URL = "https://api.worldota.net/api/b2b/v3"

SANDBOX_RESTRICTION = "sandbox_restriction"
NO_AVAILABLE_RATES = "no_available_rates"
PREBOOK_MAX_ATTEMPTS = 2
PREBOOK_RETRY_DELAY_SECONDS = 0.8
RATE_LIMIT_BACKOFF_SECONDS = 3.0


class RateHawkGateway(HotelSupplierGateway):
    """
    Gateway for the RateHawk / Emerging Travel Group B2B v3 API.

    - Auth: HTTP Basic (key id, API key).
    - Protocol: JSON over POST.
    - Transport failures, 5xx responses and an open circuit raise
      SupplierUnavailableError. Business errors come back in the body
      (`error` field) and are returned as results.
    """

    def __init__(
        self,
        key_id: str,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 30.0,
        rate_limit_retries: int = 3,
        breaker: CircuitBreaker | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._auth = (key_id, api_key)
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._rate_limit_retries = rate_limit_retries
        self._breaker = breaker or supplier_breaker
        self._sleep = sleep
        self._logger = logging.getLogger(__name__)

    @property
    def circuit_state(self) -> str:
        """pybreaker state name: closed, open or half-open."""
        return self._breaker.current_state

    # === Booking flow ===

    async def prebook(self, match_hash: str, language: str = "en") -> PrebookResult:
        """
        Exchanges a match hash for a book hash.

        Retries once after a short pause when the supplier answers
        `no_available_rates`, which is often a transient supplier timeout.
        """
        payload = {"hash": match_hash, "language": language}
        body: dict[str, Any] = {}
        for attempt in range(1, PREBOOK_MAX_ATTEMPTS + 1):
            _, body = await self._post("/hotel/prebook", payload, operation="prebook")
            if body.get("error") == NO_AVAILABLE_RATES and attempt < PREBOOK_MAX_ATTEMPTS:
                self._logger.warning(
                    "Prebook returned no_available_rates, retrying",
                    extra={"attempt": attempt, "retry_delay": PREBOOK_RETRY_DELAY_SECONDS},
                )
                await self._sleep(PREBOOK_RETRY_DELAY_SECONDS)
                continue
            break

        data = body.get("data") or {}
        hotels = data.get("hotels") or []
        rates = (hotels[0].get("rates") or []) if hotels else []
        book_hash = rates[0].get("book_hash") if rates else None
        if not book_hash:
            self._logger.warning(
                "No book_hash in prebook response",
                extra={"error": body.get("error")},
            )
            return PrebookResult(
                success=False,
                error=body.get("error") or "No book_hash returned",
                payload=data or None,
            )
        return PrebookResult(success=True, book_hash=book_hash, payload=data)

    async def create_booking_form(
        self,
        book_hash: str,
        partner_order_id: str,
        user_ip: str = "0.0.0.0",
        language: str = "en",
    ) -> BookingFormResult:
        payload = {
            "partner_order_id": partner_order_id,
            "book_hash": book_hash,
            "language": language,
            "user_ip": user_ip,
        }
        status_code, body = await self._post(
            "/hotel/order/booking/form/", payload, operation="create_booking_form"
        )

        if body.get("error") == SANDBOX_RESTRICTION:
            self._logger.warning(
                "Sandbox restriction: booking not created",
                extra={"partner_order_id": partner_order_id},
            )
            return BookingFormResult(success=False, sandbox_mode=True, payload=body)

        if status_code >= 400 or body.get("error"):
            return BookingFormResult(
                success=False,
                error=body.get("error") or f"HTTP {status_code}",
                payload=body,
            )

        data = body.get("data") or {}
        return BookingFormResult(
            success=True,
            order_id=_as_str(data.get("order_id")),
            item_id=_as_str(data.get("item_id")),
            payload=data,
        )

    async def start_booking(
        self, partner_order_id: str, request: StartBookingRequest
    ) -> dict[str, Any]:
        comment = request.user.get("comment", "")
        payload = {
            "partner": {
                "partner_order_id": partner_order_id,
                "comment": comment,
                "amount_sell_b2b2c": "0",
            },
            "user": {
                "email": request.user.get("email", ""),
                "phone": request.user.get("phone", ""),
                "comment": comment,
            },
            "supplier_data": request.supplier_data,
            "language": request.language,
            "rooms": request.rooms,
            "payment_type": request.payment_type,
        }
        status_code, body = await self._post(
            "/hotel/order/booking/finish/", payload, operation="start_booking"
        )
        if status_code >= 400:
            raise SupplierUnavailableError(
                "start_booking", body.get("error") or f"HTTP {status_code}"
            )
        return body

    async def check_booking_status(self, partner_order_id: str) -> BookingStatusResult:
        status_code, body = await self._post(
            "/hotel/order/booking/finish/status/",
            {"partner_order_id": partner_order_id},
            operation="check_booking_status",
        )
        if status_code >= 400 and not body.get("status"):
            raise SupplierUnavailableError(
                "check_booking_status", body.get("error") or f"HTTP {status_code}"
            )
        data = body.get("data") or {}
        return BookingStatusResult(
            status=body.get("status") or "unknown",
            order_id=_as_str(data.get("order_id")),
            partner_order_id=data.get("partner_order_id"),
            percent=data.get("percent"),
            error=body.get("error"),
            payload=data,
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
        payload = {
            "hid": int(hid) if str(hid).isdigit() else hid,
            "checkin": checkin.isoformat(),
            "checkout": checkout.isoformat(),
            "residency": residency,
            "language": language,
            "guests": [{"adults": adults, "children": []}],
            "currency": currency,
        }
        status_code, body = await self._post("/search/hp/", payload, operation="search_hotel_rates")
        if status_code >= 400:
            raise SupplierUnavailableError(
                "search_hotel_rates", body.get("error") or f"HTTP {status_code}"
            )
        hotels = (body.get("data") or {}).get("hotels") or []
        return list(hotels[0].get("rates") or []) if hotels else []

    # === Transport ===

    async def _send(self, url: str, payload: dict[str, Any]) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.post(
                url,
                json=payload,
                auth=self._auth,
                headers={"Content-Type": "application/json"},
            )
        if response.status_code >= 500:
            # Counted as a breaker failure
            raise httpx.HTTPStatusError(
                f"Supplier returned HTTP {response.status_code}",
                request=response.request,
                response=response,
            )
        return response

    async def _post(
        self, endpoint: str, payload: dict[str, Any], operation: str
    ) -> tuple[int, dict[str, Any]]:
        url = f"{self._base_url}{endpoint}"
        response: httpx.Response | None = None
        for attempt in range(self._rate_limit_retries + 1):
            try:
                response = await call_with_breaker(self._breaker, self._send, url, payload)
            except CircuitBreakerError as exc:
                self._logger.error(
                    "Supplier circuit breaker is open - service unavailable",
                    extra={"operation": operation, "circuit_state": str(exc)},
                )
                raise SupplierUnavailableError(operation, "circuit breaker open") from exc
            except httpx.TimeoutException as exc:
                self._logger.warning(
                    "Supplier request timeout",
                    extra={"operation": operation, "timeout": self._timeout},
                )
                raise SupplierUnavailableError(operation, f"timeout after {self._timeout}s") from exc
            except httpx.HTTPError as exc:
                self._logger.error(
                    "Supplier HTTP error",
                    extra={"operation": operation, "error": str(exc)},
                )
                raise SupplierUnavailableError(operation, str(exc)) from exc

            if response.status_code != 429:
                break
            if attempt < self._rate_limit_retries:
                delay = RATE_LIMIT_BACKOFF_SECONDS * (attempt + 1)
                self._logger.warning(
                    "Supplier rate limit hit, retrying",
                    extra={"operation": operation, "attempt": attempt + 1, "retry_delay": delay},
                )
                await self._sleep(delay)

        if response is None or response.status_code == 429:
            raise SupplierUnavailableError(operation, "rate limit exceeded")

        return response.status_code, _json_body(response)


def _json_body(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except (json.JSONDecodeError, ValueError):
        return {}
    return body if isinstance(body, dict) else {}


def _as_str(value: Any) -> str | None:
    return None if value is None else str(value)
