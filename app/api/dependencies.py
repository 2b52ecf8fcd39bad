from collections.abc import Awaitable, Callable
from functools import lru_cache
from typing import Any

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import AsyncSessionLocal
from app.application.interfaces.booking_session_repo import BookingSessionRepo
from app.application.interfaces.invoice_repo import InvoiceRepo
from app.application.interfaces.reservation_repo import ReservationRepo
from app.application.interfaces.supplier_gateway import HotelSupplierGateway
from app.application.interfaces.transaction_manager import TransactionManager
from app.application.use_cases.booking_attempts import BookingAttemptRunner
from app.application.use_cases.booking_session import (
    CancelBookingSessionUseCase,
    GetBookingSessionUseCase,
)
from app.application.use_cases.certification_rate import CertificationRateAdapter
from app.application.use_cases.confirmation_poller import ConfirmationPoller
from app.application.use_cases.create_booking import CreateBookingUseCase
from app.application.use_cases.create_multi_room_booking import CreateMultiRoomBookingUseCase
from app.application.use_cases.get_bookings import GetBookingUseCase, ListUserBookingsUseCase
from app.application.use_cases.persist_booking import PersistBookingUseCase
from app.application.use_cases.resolve_rate_hash import RateHashResolver
from app.config import Settings, get_settings
from app.infrastructure.circuit_breaker import build_supplier_breaker
from app.infrastructure.db.mysql_engine import session_scope
from app.infrastructure.db.repositories.booking_session_repo_sql import BookingSessionRepoSQL
from app.infrastructure.db.repositories.invoice_repo_sql import InvoiceRepoSQL
from app.infrastructure.db.repositories.reservation_repo_sql import ReservationRepoSQL
from app.infrastructure.db.transaction_manager import SQLAlchemyTransactionManager
from app.infrastructure.gateways.ratehawk_gateway import RateHawkGateway
from app.infrastructure.in_memory.attempt_registry import InMemoryBookingAttemptRegistry
from app.infrastructure.in_memory.booking_session_repo import InMemoryBookingSessionRepo
from app.infrastructure.in_memory.invoice_repo import InMemoryInvoiceRepo
from app.infrastructure.in_memory.reservation_repo import InMemoryReservationRepo
from app.infrastructure.in_memory.supplier_gateway import SandboxSupplierGateway
from app.infrastructure.in_memory.transaction_manager import NoopTransactionManager
from app.infrastructure.notifications.logging_notifier import LoggingBookingNotifier
from app.infrastructure.services.clock_impl import ClockImpl
from app.infrastructure.services.uuid_generator_impl import UUIDGeneratorImpl


async def get_session(settings: Settings = Depends(get_settings)) -> AsyncSession | None:
    if settings.use_in_memory:
        yield None
        return
    async with session_scope(AsyncSessionLocal) as session:
        yield session


def _build_supplier_gateway(settings: Settings) -> HotelSupplierGateway:
    """
    RateHawk when credentials are configured.

    The scriptable sandbox gateway is only allowed with in-memory storage; a
    database-backed deploy without credentials fails at startup.
    """
    if settings.ratehawk_key_id and settings.ratehawk_api_key:
        return RateHawkGateway(
            key_id=settings.ratehawk_key_id,
            api_key=settings.ratehawk_api_key,
            base_url=settings.ratehawk_base_url,
            timeout_seconds=settings.ratehawk_timeout_seconds,
            rate_limit_retries=settings.ratehawk_rate_limit_retries,
            breaker=build_supplier_breaker(
                fail_max=settings.ratehawk_breaker_fail_max,
                reset_timeout=settings.ratehawk_breaker_reset_timeout,
            ),
        )
    if not settings.use_in_memory:
        raise RuntimeError(
            "RATEHAWK_KEY_ID and RATEHAWK_API_KEY are required when USE_IN_MEMORY is false"
        )
    return SandboxSupplierGateway()


@lru_cache(maxsize=1)
def _shared_bundle():
    """Process-wide collaborators, independent of the persistence mode."""
    settings = get_settings()
    clock = ClockImpl()
    uuid_generator = UUIDGeneratorImpl()
    return {
        "supplier_gateway": _build_supplier_gateway(settings),
        "clock": clock,
        "uuid_generator": uuid_generator,
        "notifier": LoggingBookingNotifier(),
        "attempt_runner": BookingAttemptRunner(
            registry=InMemoryBookingAttemptRegistry(),
            uuid_generator=uuid_generator,
            clock=clock,
        ),
    }


@lru_cache(maxsize=1)
def _in_memory_bundle():
    return {
        "reservation_repo": InMemoryReservationRepo(),
        "invoice_repo": InMemoryInvoiceRepo(),
        "session_repo": InMemoryBookingSessionRepo(),
        "tx_manager": NoopTransactionManager(),
    }


def build_use_cases(
    settings: Settings,
    reservation_repo: ReservationRepo,
    invoice_repo: InvoiceRepo,
    session_repo: BookingSessionRepo,
    tx_manager: TransactionManager,
    max_concurrency: int,
) -> dict[str, Any]:
    shared = _shared_bundle()
    gateway = shared["supplier_gateway"]
    clock = shared["clock"]
    uuid_generator = shared["uuid_generator"]
    notifier = shared["notifier"]

    resolver = RateHashResolver(supplier_gateway=gateway)
    create_booking = CreateBookingUseCase(
        supplier_gateway=gateway,
        resolver=resolver,
        certification=CertificationRateAdapter(
            supplier_gateway=gateway,
            resolver=resolver,
            clock=clock,
            hotel_ids=settings.certification_hotel_ids,
            search_hid=settings.certification_search_hid,
            days_ahead=settings.certification_days_ahead,
            nights=settings.certification_nights,
        ),
        poller=ConfirmationPoller(
            supplier_gateway=gateway,
            interval_seconds=settings.booking_poll_interval_seconds,
            max_attempts=settings.booking_poll_max_attempts,
        ),
        writer=PersistBookingUseCase(
            reservation_repo=reservation_repo,
            invoice_repo=invoice_repo,
            transaction_manager=tx_manager,
            uuid_generator=uuid_generator,
            clock=clock,
            invoice_due_days=settings.invoice_due_days,
        ),
        uuid_generator=uuid_generator,
        clock=clock,
        notifier=notifier,
    )
    return {
        "create_booking": create_booking,
        "create_multi_room": CreateMultiRoomBookingUseCase(
            create_booking=create_booking,
            session_repo=session_repo,
            uuid_generator=uuid_generator,
            clock=clock,
            max_concurrency=max_concurrency,
        ),
        "get_booking": GetBookingUseCase(
            reservation_repo=reservation_repo, invoice_repo=invoice_repo
        ),
        "list_user_bookings": ListUserBookingsUseCase(
            reservation_repo=reservation_repo, invoice_repo=invoice_repo
        ),
        "get_session": GetBookingSessionUseCase(
            reservation_repo=reservation_repo,
            session_repo=session_repo,
            default_currency=settings.default_currency,
        ),
        "cancel_session": CancelBookingSessionUseCase(
            reservation_repo=reservation_repo,
            session_repo=session_repo,
            clock=clock,
            notifier=notifier,
        ),
    }


def _use_cases_for(settings: Settings, session: AsyncSession | None) -> dict[str, Any]:
    if settings.use_in_memory:
        bundle = _in_memory_bundle()
        return build_use_cases(
            settings,
            reservation_repo=bundle["reservation_repo"],
            invoice_repo=bundle["invoice_repo"],
            session_repo=bundle["session_repo"],
            tx_manager=bundle["tx_manager"],
            max_concurrency=settings.multi_room_max_concurrency,
        )

    if not session:
        raise RuntimeError("DB session not available")

    # An AsyncSession is not safe for concurrent use: groups run one at a time
    return build_use_cases(
        settings,
        reservation_repo=ReservationRepoSQL(session),
        invoice_repo=InvoiceRepoSQL(session),
        session_repo=BookingSessionRepoSQL(session),
        tx_manager=SQLAlchemyTransactionManager(session),
        max_concurrency=1,
    )


async def get_use_cases(
    settings: Settings = Depends(get_settings),
    session: AsyncSession | None = Depends(get_session),
) -> dict[str, Any]:
    return _use_cases_for(settings, session)


def get_attempt_runner() -> BookingAttemptRunner:
    return _shared_bundle()["attempt_runner"]


def get_supplier_gateway() -> HotelSupplierGateway:
    return _shared_bundle()["supplier_gateway"]


BackgroundExecutor = Callable[..., Awaitable[Any]]


def get_background_executor(settings: Settings = Depends(get_settings)) -> BackgroundExecutor:
    """
    Runs a use case outside the request scope.

    The request's DB session is closed once the 202 is sent, so SQL mode
    opens a dedicated session per background attempt.
    """

    async def execute(name: str, *args: Any) -> Any:
        if settings.use_in_memory:
            return await _use_cases_for(settings, None)[name].execute(*args)
        async with session_scope(AsyncSessionLocal) as session:
            return await _use_cases_for(settings, session)[name].execute(*args)

    return execute
