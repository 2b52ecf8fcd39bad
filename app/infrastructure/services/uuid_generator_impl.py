"""Implementación real del generador de identificadores."""

import uuid

from app.application.interfaces.uuid_generator import UUIDGenerator


class UUIDGeneratorImpl(UUIDGenerator):
    """
    Implementación real del UUIDGenerator.

    Para testing, usar FakeUUIDGenerator de application.interfaces.uuid_generator.
    """

    ATTEMPT_PREFIX = "att_"

    def generate_order_id(self) -> str:
        """UUID v4, formato que espera el proveedor como partner_order_id."""
        return str(uuid.uuid4())

    def generate_session_id(self) -> str:
        return str(uuid.uuid4())

    def generate_entity_id(self) -> str:
        """
        Id de reservación o factura.

        32 caracteres hex; los últimos 6 forman parte del número de factura.
        """
        return uuid.uuid4().hex

    def generate_attempt_id(self) -> str:
        return f"{self.ATTEMPT_PREFIX}{uuid.uuid4().hex}"
