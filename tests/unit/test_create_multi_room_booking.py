"""
Reserva multi-habitación: una saga por tipo de habitación.
"""

import asyncio
from decimal import Decimal

import pytest

from app.application.dtos.booking_dto import (
    CreateMultiRoomBookingDTO,
    RateSelection,
    RoomSelectionDTO,
)
from app.application.use_cases.create_multi_room_booking import (
    CreateMultiRoomBookingUseCase,
    group_by_room_type,
)
from app.domain.entities.booking_session import SubBookingOutcome
from app.domain.errors import ValidationError
from tests.conftest import make_booking_dto


def room(room_type: str, match_hash: str, total: str, currency: str = "USD") -> RoomSelectionDTO:
    return RoomSelectionDTO(
        room_type=room_type,
        selected_rate=RateSelection(
            match_hash=match_hash,
            price=Decimal(total) / 3,
            currency=currency,
            room_name=room_type,
        ),
        total_price=Decimal(total),
    )


@pytest.fixture
def multi_dto() -> CreateMultiRoomBookingDTO:
    return CreateMultiRoomBookingDTO(
        base=make_booking_dto(),
        rooms=[
            room("Deluxe King", "m-deluxe-001", "450.00"),
            room("Deluxe King", "m-deluxe-002", "450.00"),
            room("Family Suite", "m-suite-001", "900.00"),
        ],
    )


def test_group_by_room_type_keeps_arrival_order():
    rooms = [room("Suite", "a", "1"), room("Double", "b", "1"), room("Suite", "c", "1")]

    groups = group_by_room_type(rooms)

    assert list(groups) == ["Suite", "Double"]
    assert [r.selected_rate.match_hash for r in groups["Suite"]] == ["a", "c"]


class TestAllGroupsBooked:
    async def test_one_reservation_per_room_type(self, kit, multi_dto):
        result = await kit.create_multi_room.execute(multi_dto)

        assert result.is_partial is False
        assert result.failed == []
        assert [r.reservation.room_type for r in result.completed] == ["Deluxe King", "Family Suite"]

        deluxe, suite = (r.reservation for r in result.completed)
        assert deluxe.number_of_rooms == 2
        assert deluxe.total_price == Decimal("900.00")
        assert len(deluxe.guests) == 2
        assert suite.number_of_rooms == 1
        assert {deluxe.session_id, suite.session_id} == {"test-session-0001"}

    async def test_order_ids_derive_from_session_and_room_type(self, kit, multi_dto):
        await kit.create_multi_room.execute(multi_dto)

        order_ids = [call["partner_order_id"] for call in kit.gateway.form_calls]
        assert order_ids == ["test-session-0001-deluxe-king", "test-session-0001-family-suite"]
        assert kit.gateway.prebook_calls == ["m-deluxe-001", "m-suite-001"]

    async def test_session_aggregate_is_saved(self, kit, multi_dto):
        result = await kit.create_multi_room.execute(multi_dto)

        session = await kit.session_repo.get(result.session.session_id)
        assert session.hotel_id == "hotel_cancun_01"
        assert session.guest_email == "ana@example.com"
        assert [(s.room_type, s.room_count, s.outcome) for s in session.sub_bookings] == [
            ("Deluxe King", 2, SubBookingOutcome.COMPLETED),
            ("Family Suite", 1, SubBookingOutcome.COMPLETED),
        ]
        assert session.sub_bookings[0].reservation_id == result.completed[0].reservation.id

    async def test_colliding_labels_get_distinct_order_ids(self, kit):
        dto = CreateMultiRoomBookingDTO(
            base=make_booking_dto(),
            rooms=[room("Deluxe King", "m-1", "300.00"), room("deluxe-king", "m-2", "300.00")],
        )

        result = await kit.create_multi_room.execute(dto)

        assert [s.order_id for s in result.session.sub_bookings] == [
            "test-session-0001-deluxe-king",
            "test-session-0001-deluxe-king-2",
        ]


class TestPartialFailure:
    async def test_failed_group_does_not_abort_the_others(self, kit, multi_dto):
        kit.gateway.status_scripts["test-session-0001-deluxe-king"] = ["error"]

        result = await kit.create_multi_room.execute(multi_dto)

        assert result.is_partial is True
        assert len(result.completed) + len(result.failed) == 2
        assert [r.reservation.room_type for r in result.completed] == ["Family Suite"]

        [failed] = result.failed
        assert failed.room_type == "Deluxe King"
        assert failed.order_id == "test-session-0001-deluxe-king"
        assert failed.room_count == 2
        assert failed.error_code == "SUPPLIER_REJECTED"

        session = await kit.session_repo.get("test-session-0001")
        assert [s.outcome for s in session.sub_bookings] == [
            SubBookingOutcome.FAILED,
            SubBookingOutcome.COMPLETED,
        ]
        assert "test-session-0001-deluxe-king" in session.sub_bookings[0].error

    async def test_unexpected_error_is_collected(self, kit, multi_dto):
        kit.gateway.form_errors["m-suite-001"] = RuntimeError("connection reset")

        result = await kit.create_multi_room.execute(multi_dto)

        [failed] = result.failed
        assert failed.error == "connection reset"
        assert failed.error_code == "INTERNAL_ERROR"
        assert len(result.completed) == 1

    async def test_session_save_failure_keeps_the_result(self, kit, multi_dto):
        async def broken_save(session):
            raise RuntimeError("sessions table missing")

        kit.session_repo.save = broken_save

        result = await kit.create_multi_room.execute(multi_dto)

        assert len(result.completed) == 2
        assert len(kit.reservation_repo.reservations) == 2


class TestConcurrency:
    async def test_groups_run_in_parallel_up_to_the_limit(self, kit, fake_ids, fake_clock):
        running = 0
        peak = 0
        original = kit.create_booking.execute

        async def tracked(dto):
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0)
            try:
                return await original(dto)
            finally:
                running -= 1

        kit.create_booking.execute = tracked
        use_case = CreateMultiRoomBookingUseCase(
            create_booking=kit.create_booking,
            session_repo=kit.session_repo,
            uuid_generator=fake_ids,
            clock=fake_clock,
            max_concurrency=2,
        )
        dto = CreateMultiRoomBookingDTO(
            base=make_booking_dto(),
            rooms=[room(name, f"m-{i}", "300.00") for i, name in enumerate(["A", "B", "C"])],
        )

        result = await use_case.execute(dto)

        assert peak == 2
        assert [r.reservation.room_type for r in result.completed] == ["A", "B", "C"]

    async def test_sequential_by_default(self, kit, multi_dto):
        await kit.create_multi_room.execute(multi_dto)

        # Cada grupo termina su sondeo antes de que empiece el siguiente
        assert kit.gateway.status_calls == [
            "test-session-0001-deluxe-king",
            "test-session-0001-deluxe-king",
            "test-session-0001-family-suite",
            "test-session-0001-family-suite",
        ]


async def test_empty_room_list_is_rejected(kit):
    with pytest.raises(ValidationError):
        await kit.create_multi_room.execute(CreateMultiRoomBookingDTO(base=make_booking_dto(), rooms=[]))
