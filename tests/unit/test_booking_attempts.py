"""
Intentos de reserva en segundo plano (create-async).
"""

import pytest

from app.application.dtos.booking_dto import RequesterDTO
from app.application.interfaces.attempt_registry import AttemptStatus
from app.application.use_cases.booking_attempts import BookingAttemptRunner
from app.domain.errors import (
    AuthenticationRequiredError,
    BookingAttemptNotFoundError,
    NotAuthorizedError,
    SupplierTimeoutError,
)
from app.infrastructure.in_memory.attempt_registry import InMemoryBookingAttemptRegistry

GUEST = RequesterDTO()


def render(outcome):
    return 201, {"success": True, "data": outcome}


@pytest.fixture
def runner(fake_ids, fake_clock) -> BookingAttemptRunner:
    return BookingAttemptRunner(
        registry=InMemoryBookingAttemptRegistry(),
        uuid_generator=fake_ids,
        clock=fake_clock,
    )


async def test_submit_returns_processing_attempt(runner):
    async def work():
        return {"reservation_id": "res-1"}

    attempt = await runner.submit("single", work, render)

    assert attempt.attempt_id == "att_test_0001"
    assert attempt.status == AttemptStatus.PROCESSING
    await runner.drain()


async def test_successful_attempt_stores_rendered_result(runner):
    async def work():
        return {"reservation_id": "res-1"}

    attempt = await runner.submit("single", work, render)
    await runner.drain()

    stored = await runner.get(attempt.attempt_id, GUEST)
    assert stored.status == AttemptStatus.SUCCEEDED
    assert stored.http_status == 201
    assert stored.result == {"success": True, "data": {"reservation_id": "res-1"}}
    assert stored.finished_at is not None


async def test_domain_error_is_recorded(runner):
    async def work():
        raise SupplierTimeoutError(order_id="ord-1", attempts=10, last_status="processing")

    attempt = await runner.submit("multi", work, render)
    await runner.drain()

    stored = await runner.get(attempt.attempt_id, GUEST)
    assert stored.status == AttemptStatus.FAILED
    assert stored.http_status == 504
    assert stored.error_code == "SUPPLIER_TIMEOUT"
    assert "ord-1" in stored.error


async def test_unexpected_error_is_recorded_as_internal(runner):
    async def work():
        raise KeyError("rooms")

    attempt = await runner.submit("single", work, render)
    await runner.drain()

    stored = await runner.get(attempt.attempt_id, GUEST)
    assert stored.status == AttemptStatus.FAILED
    assert stored.http_status == 500
    assert stored.error_code == "INTERNAL_ERROR"


async def test_unknown_attempt(runner):
    with pytest.raises(BookingAttemptNotFoundError):
        await runner.get("att_missing", GUEST)


async def test_drain_with_nothing_running(runner):
    await runner.drain()


async def test_owned_attempt_is_visible_to_owner_and_admin(runner):
    async def work():
        return {"reservation_id": "res-1"}

    attempt = await runner.submit("single", work, render, user_id="user-1")
    await runner.drain()

    owner = await runner.get(attempt.attempt_id, RequesterDTO(user_id="user-1"))
    admin = await runner.get(attempt.attempt_id, RequesterDTO(user_id="admin-1", role="admin"))

    assert owner.user_id == "user-1"
    assert admin.attempt_id == attempt.attempt_id


async def test_owned_attempt_rejects_other_callers(runner):
    async def work():
        return {"reservation_id": "res-1"}

    attempt = await runner.submit("single", work, render, user_id="user-1")
    await runner.drain()

    with pytest.raises(AuthenticationRequiredError):
        await runner.get(attempt.attempt_id, GUEST)
    with pytest.raises(NotAuthorizedError):
        await runner.get(attempt.attempt_id, RequesterDTO(user_id="user-2"))


async def test_guest_attempt_is_readable_by_id(runner):
    async def work():
        return {"reservation_id": "res-1"}

    attempt = await runner.submit("single", work, render)
    await runner.drain()

    stored = await runner.get(attempt.attempt_id, GUEST)
    assert stored.user_id is None
