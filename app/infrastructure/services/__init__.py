"""Servicios de infraestructura."""

from app.infrastructure.services.clock_impl import ClockImpl
from app.infrastructure.services.uuid_generator_impl import UUIDGeneratorImpl

__all__ = [
    "ClockImpl",
    "UUIDGeneratorImpl",
]
