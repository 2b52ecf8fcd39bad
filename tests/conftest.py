"""
Pytest configuration and shared fixtures.

Este módulo provee fixtures reutilizables para:
- Saga de reserva armada con repos in-memory, reloj y ids deterministas
- Base de datos SQLite in-memory para los repositorios SQL
- Cliente HTTP de prueba (FastAPI TestClient)
- Payloads de ejemplo
"""

import os
from datetime import date, datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
from typing import AsyncGenerator, Generator

# Settings are cached on first import: pin test values before importing the app
os.environ["USE_IN_MEMORY"] = "true"
os.environ["BOOKING_POLL_INTERVAL_SECONDS"] = "0"
os.environ.pop("RATEHAWK_KEY_ID", None)
os.environ.pop("RATEHAWK_API_KEY", None)

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.api.dependencies import _in_memory_bundle, _shared_bundle  # noqa: E402
from app.application.dtos.booking_dto import CreateBookingDTO, HotelDTO, RateSelection  # noqa: E402
from app.application.interfaces.clock import FakeClock  # noqa: E402
from app.application.interfaces.uuid_generator import FakeUUIDGenerator  # noqa: E402
from app.application.use_cases.booking_session import (  # noqa: E402
    CancelBookingSessionUseCase,
    GetBookingSessionUseCase,
)
from app.application.use_cases.certification_rate import CertificationRateAdapter  # noqa: E402
from app.application.use_cases.confirmation_poller import ConfirmationPoller  # noqa: E402
from app.application.use_cases.create_booking import CreateBookingUseCase  # noqa: E402
from app.application.use_cases.create_multi_room_booking import (  # noqa: E402
    CreateMultiRoomBookingUseCase,
)
from app.application.use_cases.persist_booking import PersistBookingUseCase  # noqa: E402
from app.application.use_cases.resolve_rate_hash import RateHashResolver  # noqa: E402
from app.infrastructure.circuit_breaker import supplier_breaker  # noqa: E402
from app.infrastructure.db.tables import metadata  # noqa: E402
from app.infrastructure.in_memory import (  # noqa: E402
    InMemoryBookingSessionRepo,
    InMemoryInvoiceRepo,
    InMemoryReservationRepo,
    NoopTransactionManager,
    SandboxSupplierGateway,
)
from app.main import app  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


async def _no_sleep(_seconds: float) -> None:
    return None


# ============================================================================
# SAGA DE RESERVA (unit)
# ============================================================================


class RecordingNotifier:
    def __init__(self) -> None:
        self.confirmed: list[str] = []
        self.pending: list[tuple[str, str]] = []
        self.cancelled: list[str] = []

    async def booking_confirmed(self, reservation, invoice) -> None:
        self.confirmed.append(reservation.id)

    async def booking_pending(self, reservation, reason) -> None:
        self.pending.append((reservation.id, reason))

    async def booking_cancelled(self, reservation) -> None:
        self.cancelled.append(reservation.id)


class BrokenNotifier:
    """Notifier whose delivery channel is down."""

    async def booking_confirmed(self, reservation, invoice) -> None:
        raise ConnectionError("SMTP relay unreachable")

    async def booking_pending(self, reservation, reason) -> None:
        raise ConnectionError("SMTP relay unreachable")

    async def booking_cancelled(self, reservation) -> None:
        raise ConnectionError("SMTP relay unreachable")


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock(FIXED_NOW)


@pytest.fixture
def fake_ids() -> FakeUUIDGenerator:
    return FakeUUIDGenerator()


@pytest.fixture
def kit(fake_clock, fake_ids):
    """
    CreateBookingUseCase y compañía conectados a dobles in-memory.

    El gateway sandbox confirma cada orden en el segundo chequeo; el
    sondeo no duerme.
    """
    gateway = SandboxSupplierGateway()
    reservation_repo = InMemoryReservationRepo()
    invoice_repo = InMemoryInvoiceRepo()
    session_repo = InMemoryBookingSessionRepo()
    tx_manager = NoopTransactionManager()
    notifier = RecordingNotifier()

    resolver = RateHashResolver(supplier_gateway=gateway)
    poller = ConfirmationPoller(
        supplier_gateway=gateway, interval_seconds=2.0, max_attempts=10, sleep=_no_sleep
    )
    writer = PersistBookingUseCase(
        reservation_repo=reservation_repo,
        invoice_repo=invoice_repo,
        transaction_manager=tx_manager,
        uuid_generator=fake_ids,
        clock=fake_clock,
    )
    create_booking = CreateBookingUseCase(
        supplier_gateway=gateway,
        resolver=resolver,
        certification=CertificationRateAdapter(
            supplier_gateway=gateway, resolver=resolver, clock=fake_clock
        ),
        poller=poller,
        writer=writer,
        uuid_generator=fake_ids,
        clock=fake_clock,
        notifier=notifier,
    )
    return SimpleNamespace(
        gateway=gateway,
        reservation_repo=reservation_repo,
        invoice_repo=invoice_repo,
        session_repo=session_repo,
        tx_manager=tx_manager,
        notifier=notifier,
        resolver=resolver,
        poller=poller,
        writer=writer,
        create_booking=create_booking,
        create_multi_room=CreateMultiRoomBookingUseCase(
            create_booking=create_booking,
            session_repo=session_repo,
            uuid_generator=fake_ids,
            clock=fake_clock,
        ),
        get_session=GetBookingSessionUseCase(
            reservation_repo=reservation_repo, session_repo=session_repo
        ),
        cancel_session=CancelBookingSessionUseCase(
            reservation_repo=reservation_repo,
            session_repo=session_repo,
            clock=fake_clock,
            notifier=notifier,
        ),
        clock=fake_clock,
        ids=fake_ids,
    )


def make_booking_dto(**overrides) -> CreateBookingDTO:
    values = dict(
        hotel=HotelDTO(
            hotel_id="hotel_cancun_01",
            name="Grand Cancun Resort",
            address="Blvd. Kukulcan km 9",
            city="Cancun",
            country="Mexico",
            rating=4.5,
        ),
        check_in=date(2026, 4, 10),
        check_out=date(2026, 4, 13),
        selected_rate=RateSelection(
            match_hash="m-deluxe-001",
            price=Decimal("150.00"),
            currency="USD",
            room_name="Deluxe King Room",
            meal="breakfast",
        ),
        total_price=Decimal("450.00"),
        currency="USD",
        user_id="user-1",
        guest_name="Ana Maria Lopez",
        guest_email="ana@example.com",
        guest_phone="+52 998 123 4567",
        nationality="MX",
    )
    values.update(overrides)
    return CreateBookingDTO(**values)


@pytest.fixture
def booking_dto() -> CreateBookingDTO:
    return make_booking_dto()


# ============================================================================
# FIXTURES DE BASE DE DATOS
# ============================================================================


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    session_maker = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield session


# ============================================================================
# FIXTURES DE CLIENTE HTTP
# ============================================================================


@pytest.fixture(autouse=True)
def reset_app_state():
    """Fresh in-memory repos, sandbox gateway and attempt registry per test."""
    _shared_bundle.cache_clear()
    _in_memory_bundle.cache_clear()
    yield
    _shared_bundle.cache_clear()
    _in_memory_bundle.cache_clear()


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def sandbox_supplier() -> SandboxSupplierGateway:
    """The gateway wired into the app for the current test."""
    return _shared_bundle()["supplier_gateway"]


@pytest.fixture
def user_headers():
    return {
        "X-User-Id": "user-1",
        "X-User-Role": "user",
        "X-User-Name": "Ana Maria Lopez",
        "X-User-Email": "ana@example.com",
        "X-User-Phone": "+529981234567",
    }


@pytest.fixture
def admin_headers():
    return {"X-User-Id": "admin-1", "X-User-Role": "admin"}


@pytest.fixture
def booking_payload():
    return {
        "hotel_id": "hotel_cancun_01",
        "hotel_name": "Grand Cancun Resort",
        "hotel_city": "Cancun",
        "hotel_country": "Mexico",
        "check_in": "2026-04-10",
        "check_out": "2026-04-13",
        "selected_rate": {
            "match_hash": "m-deluxe-001",
            "price": "150.00",
            "currency": "USD",
            "room_name": "Deluxe King Room",
            "meal": "breakfast",
        },
        "total_price": "450.00",
        "currency": "USD",
    }


@pytest.fixture
def multi_room_payload(booking_payload):
    payload = {k: v for k, v in booking_payload.items() if k not in ("selected_rate", "total_price")}
    payload["rooms"] = [
        {
            "room_type": "Deluxe King",
            "selected_rate": {"match_hash": "m-deluxe-001", "price": "150.00", "room_name": "Deluxe King"},
            "total_price": "450.00",
        },
        {
            "room_type": "Deluxe King",
            "selected_rate": {"match_hash": "m-deluxe-002", "price": "150.00", "room_name": "Deluxe King"},
            "total_price": "450.00",
        },
        {
            "room_type": "Family Suite",
            "selected_rate": {"match_hash": "m-suite-001", "price": "300.00", "room_name": "Family Suite"},
            "total_price": "900.00",
        },
    ]
    return payload


# ============================================================================
# HOOKS DE PYTEST
# ============================================================================


@pytest.fixture(autouse=True)
def reset_circuit_breakers():
    """
    Reset circuit breakers antes de cada test.
    Evita que tests fallen por breakers abiertos de tests anteriores.
    """
    supplier_breaker.close()
    yield
    supplier_breaker.close()
