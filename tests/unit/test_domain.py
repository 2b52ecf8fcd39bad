from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from app.domain.entities.booking_session import BookingSession, sanitize_room_type
from app.domain.entities.invoice import Invoice
from app.domain.entities.reservation import HotelSnapshot, Reservation, ReservationStatus
from app.domain.errors import InvalidDateRangeError, InvalidMoneyError, InvalidReservationStatusError
from app.domain.value_objects.money import Money
from app.domain.value_objects.stay_dates import StayDates

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _reservation(**overrides) -> Reservation:
    values = dict(
        id="a1b2c3d4e5f6",
        user_id="user-1",
        guest_name="Ana Lopez",
        guest_email="ana@example.com",
        hotel=HotelSnapshot(hotel_id="h1", name="Grand Cancun Resort"),
        check_in=date(2026, 4, 10),
        check_out=date(2026, 4, 13),
        number_of_nights=3,
        total_price=Decimal("450.00"),
        currency="USD",
    )
    values.update(overrides)
    return Reservation(**values)


class TestStayDates:
    def test_nights(self):
        assert StayDates(date(2026, 4, 10), date(2026, 4, 13)).nights == 3

    def test_check_out_must_follow_check_in(self):
        with pytest.raises(InvalidDateRangeError):
            StayDates(date(2026, 4, 10), date(2026, 4, 10))

    def test_starting_in(self):
        stay = StayDates.starting_in(date(2026, 3, 1), days_ahead=30, nights=2)
        assert stay.check_in == date(2026, 3, 31)
        assert stay.check_out == date(2026, 4, 2)


class TestMoney:
    def test_total_of_same_currency(self):
        total = Money.total_of([Money(Decimal("10.50"), "USD"), Money(Decimal("4.50"), "USD")])
        assert total == Money(Decimal("15.00"), "USD")

    def test_cannot_mix_currencies(self):
        with pytest.raises(InvalidMoneyError):
            Money(Decimal("1"), "USD") + Money(Decimal("1"), "EUR")

    def test_divided_by_rounds_to_cents(self):
        assert Money(Decimal("100"), "USD").divided_by(3).amount == Decimal("33.33")


class TestReservation:
    def test_cancel_appends_note_once(self):
        reservation = _reservation()

        assert reservation.cancel("first", at=NOW) is True
        assert reservation.cancel("second", at=NOW) is False
        assert reservation.status == ReservationStatus.CANCELLED
        assert reservation.notes == ["first"]

    def test_cancelled_cannot_be_confirmed(self):
        reservation = _reservation(status=ReservationStatus.CANCELLED)

        with pytest.raises(InvalidReservationStatusError):
            reservation.confirm_with_supplier("RH-1", "ok", at=NOW)

    def test_ownership(self):
        reservation = _reservation()
        assert reservation.is_owned_by("user-1")
        assert not reservation.is_owned_by("user-2")
        assert not reservation.is_owned_by(None)


class TestInvoice:
    def test_single_line_matching_reservation_total(self):
        invoice = Invoice.for_reservation(
            invoice_id="inv-1",
            reservation=_reservation(),
            room_name="Deluxe King Room",
            unit_price=Decimal("150.00"),
            now=NOW,
        )

        assert invoice.total == Decimal("450.00")
        assert invoice.subtotal == invoice.total
        assert invoice.tax == Decimal("0") and invoice.discount == Decimal("0")
        assert invoice.invoice_number == f"INV-{int(NOW.timestamp() * 1000)}-D4E5F6"
        assert invoice.status == "pending"
        assert (invoice.due_date - NOW).days == 7
        [item] = invoice.items
        assert item.description == "Grand Cancun Resort - Deluxe King Room"
        assert item.quantity == 3
        assert item.unit_price == Decimal("150.00")

    def test_unit_price_falls_back_to_total_per_night(self):
        invoice = Invoice.for_reservation(
            invoice_id="inv-1",
            reservation=_reservation(),
            room_name=None,
            unit_price=None,
            now=NOW,
        )

        assert invoice.items[0].unit_price == Decimal("150.00")
        assert invoice.items[0].description.endswith(" - Room")


class TestBookingSession:
    def test_sanitize_room_type(self):
        assert sanitize_room_type("Deluxe King (Sea View)") == "deluxe-king-sea-view"
        assert sanitize_room_type("!!!") == "room"
        assert len(sanitize_room_type("x" * 80)) == 40

    def test_order_id_for_room_type(self):
        session = BookingSession(
            session_id="sess-1",
            user_id="user-1",
            hotel_id="h1",
            check_in=date(2026, 4, 10),
            check_out=date(2026, 4, 13),
            guest_email="ana@example.com",
            created_at=NOW,
        )
        assert session.order_id_for("Family Suite") == "sess-1-family-suite"
