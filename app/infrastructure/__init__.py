"""
Capa de Infraestructura - Orquestación de reservas de hotel.

Implementaciones concretas de los puertos (interfaces) de la aplicación.

Estructura:
- db/: Tablas, repositorios SQL y manejo de transacciones
- gateways/: Adaptador del proveedor hotelero (RateHawk / ETG)
- in_memory/: Implementaciones in-memory para desarrollo y testing
- notifications/: Avisos de reservas confirmadas, pendientes y canceladas
- services/: Servicios de infraestructura (Clock, UUID)
"""

# Services
from app.infrastructure.services.clock_impl import ClockImpl
from app.infrastructure.services.uuid_generator_impl import UUIDGeneratorImpl

# Database
from app.infrastructure.db.repositories.booking_session_repo_sql import BookingSessionRepoSQL
from app.infrastructure.db.repositories.invoice_repo_sql import InvoiceRepoSQL
from app.infrastructure.db.repositories.reservation_repo_sql import ReservationRepoSQL
from app.infrastructure.db.transaction_manager import SQLAlchemyTransactionManager

# Gateways
from app.infrastructure.gateways.ratehawk_gateway import RateHawkGateway

# In-Memory
from app.infrastructure.in_memory import (
    InMemoryBookingAttemptRegistry,
    InMemoryBookingSessionRepo,
    InMemoryInvoiceRepo,
    InMemoryReservationRepo,
    NoopTransactionManager,
    SandboxSupplierGateway,
)

# Notifications
from app.infrastructure.notifications.logging_notifier import LoggingBookingNotifier

__all__ = [
    # Database - Repositories SQL
    "ReservationRepoSQL",
    "InvoiceRepoSQL",
    "BookingSessionRepoSQL",
    "SQLAlchemyTransactionManager",
    # Gateways
    "RateHawkGateway",
    # In-Memory
    "InMemoryReservationRepo",
    "InMemoryInvoiceRepo",
    "InMemoryBookingSessionRepo",
    "InMemoryBookingAttemptRegistry",
    "NoopTransactionManager",
    "SandboxSupplierGateway",
    # Notifications
    "LoggingBookingNotifier",
    # Services
    "ClockImpl",
    "UUIDGeneratorImpl",
]
