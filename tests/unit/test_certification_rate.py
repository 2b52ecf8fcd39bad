from dataclasses import replace
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from app.application.dtos.booking_dto import HotelDTO
from app.application.use_cases.certification_rate import (
    CertificationRateAdapter,
    is_refundable,
    select_refundable_rate,
)
from app.application.use_cases.resolve_rate_hash import RateHashResolver
from app.domain.errors import NoRefundableRateError
from app.infrastructure.in_memory.supplier_gateway import SandboxSupplierGateway, sample_rate

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _adapter(gateway, fake_clock) -> CertificationRateAdapter:
    return CertificationRateAdapter(
        supplier_gateway=gateway,
        resolver=RateHashResolver(gateway),
        clock=fake_clock,
    )


class TestRefundability:
    def test_future_deadline_is_refundable(self):
        assert is_refundable(sample_rate(date(2026, 4, 1)), NOW)

    def test_past_deadline_is_not_refundable(self):
        assert not is_refundable(sample_rate(date(2026, 4, 1), refundable=False), NOW)

    def test_missing_deadline_is_not_refundable(self):
        assert not is_refundable({"payment_options": {"payment_types": [{}]}}, NOW)
        assert not is_refundable({}, NOW)

    def test_naive_deadline_is_read_as_utc(self):
        rate = sample_rate(date(2026, 4, 1))
        rate["payment_options"]["payment_types"][0]["cancellation_penalties"][
            "free_cancellation_before"
        ] = (NOW + timedelta(minutes=5)).replace(tzinfo=None).isoformat()
        assert is_refundable(rate, NOW)

    def test_first_refundable_rate_wins(self):
        rates = [
            sample_rate(date(2026, 4, 1), refundable=False, match_hash="m-nonref"),
            sample_rate(date(2026, 4, 1), match_hash="m-ref-1"),
            sample_rate(date(2026, 4, 1), match_hash="m-ref-2"),
        ]
        assert select_refundable_rate(rates, NOW)["match_hash"] == "m-ref-1"


class TestCertificationRateAdapter:
    def test_applies_to_sentinel_hotels(self, fake_clock):
        adapter = _adapter(SandboxSupplierGateway(), fake_clock)

        assert adapter.applies_to("test_hotel_do_not_book")
        assert adapter.applies_to("8473727")
        assert not adapter.applies_to("hotel_cancun_01")

    async def test_redates_stay_and_adopts_rate_price(self, fake_clock, booking_dto):
        gateway = SandboxSupplierGateway(
            rates=[sample_rate(date(2026, 3, 31), currency="EUR", amount="212.40", match_hash="m-cert")]
        )
        dto = replace(booking_dto, hotel=HotelDTO(hotel_id="test_hotel_do_not_book", name="Test Hotel"))

        adjusted, resolution = await _adapter(gateway, fake_clock).prepare(dto)

        assert adjusted.check_in == date(2026, 3, 31)
        assert adjusted.check_out == date(2026, 4, 2)
        assert adjusted.total_price == Decimal("212.40")
        assert adjusted.currency == "EUR"
        assert adjusted.selected_rate.match_hash == "m-cert"
        assert resolution.book_hash == "book-m-cert"
        [search] = gateway.search_calls
        assert search["hid"] == "8473727"
        assert search["adults"] == 2

    async def test_no_refundable_rate_fails_closed(self, fake_clock, booking_dto):
        gateway = SandboxSupplierGateway(rates=[sample_rate(date(2026, 3, 31), refundable=False)])
        dto = replace(booking_dto, hotel=HotelDTO(hotel_id="8473727", name="Test Hotel"))

        with pytest.raises(NoRefundableRateError):
            await _adapter(gateway, fake_clock).prepare(dto)

        assert gateway.prebook_calls == []
