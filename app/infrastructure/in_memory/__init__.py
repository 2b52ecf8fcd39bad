"""Implementaciones in-memory para desarrollo y testing."""

from app.infrastructure.in_memory.attempt_registry import InMemoryBookingAttemptRegistry
from app.infrastructure.in_memory.booking_session_repo import InMemoryBookingSessionRepo
from app.infrastructure.in_memory.invoice_repo import InMemoryInvoiceRepo
from app.infrastructure.in_memory.reservation_repo import InMemoryReservationRepo
from app.infrastructure.in_memory.supplier_gateway import SandboxSupplierGateway
from app.infrastructure.in_memory.transaction_manager import NoopTransactionManager

__all__ = [
    # Repositories
    "InMemoryReservationRepo",
    "InMemoryInvoiceRepo",
    "InMemoryBookingSessionRepo",
    "InMemoryBookingAttemptRegistry",
    # Gateways
    "SandboxSupplierGateway",
    # Infrastructure
    "NoopTransactionManager",
]
