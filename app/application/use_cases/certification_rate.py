import logging
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable

from app.application.dtos.booking_dto import CreateBookingDTO, HashResolution, RateSelection
from app.application.interfaces.clock import Clock
from app.application.interfaces.supplier_gateway import HotelSupplierGateway
from app.application.use_cases.resolve_rate_hash import RateHashResolver
from app.domain.errors import NoRefundableRateError
from app.domain.value_objects.stay_dates import StayDates

DEFAULT_CERTIFICATION_HOTEL_IDS = ("test_hotel_do_not_book", "8473727")
DEFAULT_CERTIFICATION_HID = 8473727


def _first_payment_type(rate: dict[str, Any]) -> dict[str, Any]:
    payment_types = (rate.get("payment_options") or {}).get("payment_types") or []
    return payment_types[0] if payment_types else {}


def _parse_deadline(value: Any) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_refundable(rate: dict[str, Any], now: datetime) -> bool:
    """La tarifa es reembolsable si su límite de cancelación gratuita es futuro."""
    penalties = _first_payment_type(rate).get("cancellation_penalties") or {}
    deadline = _parse_deadline(penalties.get("free_cancellation_before"))
    return deadline is not None and deadline > now


def select_refundable_rate(rates: Iterable[dict[str, Any]], now: datetime) -> dict[str, Any] | None:
    for rate in rates:
        if is_refundable(rate, now):
            return rate
    return None


class CertificationRateAdapter:
    """
    Flujo especial para el hotel de certificación del proveedor.

    El entorno de certificación sólo acepta tarifas reembolsables, así que
    se re-fechan las noches, se buscan tarifas frescas y se elige la primera
    con cancelación gratuita vigente. Si no hay ninguna, falla cerrado.
    """

    def __init__(
        self,
        supplier_gateway: HotelSupplierGateway,
        resolver: RateHashResolver,
        clock: Clock,
        hotel_ids: Iterable[str] = DEFAULT_CERTIFICATION_HOTEL_IDS,
        search_hid: int = DEFAULT_CERTIFICATION_HID,
        days_ahead: int = 30,
        nights: int = 2,
    ) -> None:
        self._supplier_gateway = supplier_gateway
        self._resolver = resolver
        self._clock = clock
        self._hotel_ids = {str(h) for h in hotel_ids}
        self._search_hid = search_hid
        self._days_ahead = days_ahead
        self._nights = nights
        self._logger = logging.getLogger(__name__)

    def applies_to(self, hotel_id: str) -> bool:
        return str(hotel_id) in self._hotel_ids

    async def prepare(self, dto: CreateBookingDTO) -> tuple[CreateBookingDTO, HashResolution]:
        """
        Re-fecha la estancia y sustituye la tarifa por una reembolsable fresca.

        Returns:
            El DTO ajustado (fechas, tarifa, precio y moneda autoritativos)
            y la resolución del hash de la tarifa elegida.

        Raises:
            NoRefundableRateError: si ninguna tarifa es reembolsable.
        """
        stay = StayDates.starting_in(self._clock.today(), self._days_ahead, self._nights)
        rates = await self._supplier_gateway.search_hotel_rates(
            hid=str(self._search_hid),
            checkin=stay.check_in,
            checkout=stay.check_out,
            adults=2,
            currency=dto.currency,
            residency="gb",
            language=dto.language,
        )
        rate = select_refundable_rate(rates, self._clock.now())
        if rate is None:
            self._logger.error(
                "No refundable rate for certification hotel",
                extra={"hotel_id": dto.hotel.hotel_id, "rates_seen": len(rates)},
            )
            raise NoRefundableRateError(hotel_id=dto.hotel.hotel_id, rates_seen=len(rates))

        payment_type = _first_payment_type(rate)
        price = self._authoritative_price(payment_type, fallback=dto.total_price)
        currency = payment_type.get("show_currency_code") or dto.currency
        selection = RateSelection(
            match_hash=rate.get("match_hash") or rate.get("book_hash") or "",
            price=price,
            currency=currency,
            room_name=rate.get("room_name") or dto.selected_rate.room_name,
            meal=rate.get("meal") or dto.selected_rate.meal,
        )
        self._logger.info(
            "Certification rate selected",
            extra={
                "hotel_id": dto.hotel.hotel_id,
                "check_in": stay.check_in.isoformat(),
                "check_out": stay.check_out.isoformat(),
                "price": str(price),
                "currency": currency,
            },
        )

        if rate.get("book_hash") and not rate.get("match_hash"):
            resolution = HashResolution(book_hash=rate["book_hash"])
        else:
            resolution = await self._resolver.resolve(selection.match_hash, language=dto.language)
        selection.book_hash = resolution.book_hash

        adjusted = replace(
            dto,
            check_in=stay.check_in,
            check_out=stay.check_out,
            selected_rate=selection,
            total_price=price,
            currency=currency,
        )
        return adjusted, resolution

    @staticmethod
    def _authoritative_price(payment_type: dict[str, Any], fallback: Decimal) -> Decimal:
        raw = payment_type.get("show_amount") or payment_type.get("amount")
        if raw is None:
            return fallback
        try:
            return Decimal(str(raw))
        except InvalidOperation:
            return fallback
