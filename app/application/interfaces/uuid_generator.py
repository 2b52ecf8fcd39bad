"""Interface UUIDGenerator - Puerto para generación de identificadores únicos."""

from abc import ABC, abstractmethod


class UUIDGenerator(ABC):
    """
    Puerto para generación de identificadores únicos.

    Permite inyectar implementaciones fake para testing determinista.
    """

    @abstractmethod
    def generate_order_id(self) -> str:
        """
        Genera el partner_order_id de un intento de reserva.

        Nunca se reutiliza, ni siquiera al reintentar.
        """
        raise NotImplementedError

    @abstractmethod
    def generate_session_id(self) -> str:
        """Genera el id de una sesión multi-habitación."""
        raise NotImplementedError

    @abstractmethod
    def generate_entity_id(self) -> str:
        """Genera el id de una reservación o factura."""
        raise NotImplementedError

    @abstractmethod
    def generate_attempt_id(self) -> str:
        """Genera el id de un intento de reserva en segundo plano."""
        raise NotImplementedError


class FakeUUIDGenerator(UUIDGenerator):
    """
    Implementación fake para testing.

    Genera valores predecibles para pruebas deterministas.
    """

    def __init__(self, prefix: str = "test"):
        self._prefix = prefix
        self._order_counter = 0
        self._session_counter = 0
        self._entity_counter = 0
        self._attempt_counter = 0

    def generate_order_id(self) -> str:
        self._order_counter += 1
        return f"{self._prefix}-order-{self._order_counter:04d}"

    def generate_session_id(self) -> str:
        self._session_counter += 1
        return f"{self._prefix}-session-{self._session_counter:04d}"

    def generate_entity_id(self) -> str:
        self._entity_counter += 1
        return f"{self._prefix}{self._entity_counter:08x}"

    def generate_attempt_id(self) -> str:
        self._attempt_counter += 1
        return f"att_{self._prefix}_{self._attempt_counter:04d}"

    def reset(self) -> None:
        """Reinicia todos los contadores."""
        self._order_counter = 0
        self._session_counter = 0
        self._entity_counter = 0
        self._attempt_counter = 0
