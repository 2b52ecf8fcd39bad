import asyncio
import logging
from typing import Awaitable, Callable

from app.application.interfaces.supplier_gateway import (
    BookingStatusResult,
    HotelSupplierGateway,
    StartBookingRequest,
)
from app.domain.constants import SUPPLIER_STATUS_ERROR, SUPPLIER_STATUS_OK
from app.domain.errors import SupplierRejectedError, SupplierTimeoutError

DEFAULT_INTERVAL_SECONDS = 2.0
DEFAULT_MAX_ATTEMPTS = 10


class ConfirmationPoller:
    """
    Inicia la reserva en el proveedor y sondea su confirmación asíncrona.

    Espera `interval_seconds` antes de cada consulta, hasta `max_attempts`.
    Estados terminales: 'ok' (éxito) y 'error' (detiene el sondeo de inmediato).
    Cualquier otro estado sigue sondeando; agotar los intentos equivale a 'error'.
    """

    def __init__(
        self,
        supplier_gateway: HotelSupplierGateway,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._supplier_gateway = supplier_gateway
        self._interval_seconds = interval_seconds
        self._max_attempts = max_attempts
        self._sleep = sleep
        self._logger = logging.getLogger(__name__)

    async def confirm(self, order_id: str, request: StartBookingRequest) -> BookingStatusResult:
        """
        Raises:
            SupplierRejectedError: el proveedor respondió 'error'.
            SupplierTimeoutError: se agotaron los intentos sin estado terminal.
        """
        await self._supplier_gateway.start_booking(order_id, request)
        self._logger.info("Booking started, waiting for confirmation", extra={"order_id": order_id})

        last_status: str | None = None
        for attempt in range(1, self._max_attempts + 1):
            await self._sleep(self._interval_seconds)
            result = await self._supplier_gateway.check_booking_status(order_id)
            last_status = result.status
            self._logger.info(
                "Booking status check",
                extra={
                    "order_id": order_id,
                    "attempt": attempt,
                    "max_attempts": self._max_attempts,
                    "status": result.status,
                },
            )

            if result.status == SUPPLIER_STATUS_OK:
                return result
            if result.status == SUPPLIER_STATUS_ERROR:
                self._logger.error(
                    "Supplier rejected booking",
                    extra={"order_id": order_id, "attempt": attempt, "error": result.error},
                )
                raise SupplierRejectedError(
                    order_id=order_id, supplier_status=result.status, detail=result.error
                )

        self._logger.error(
            "Booking confirmation polling exhausted",
            extra={"order_id": order_id, "attempts": self._max_attempts, "status": last_status},
        )
        raise SupplierTimeoutError(
            order_id=order_id, attempts=self._max_attempts, last_status=last_status
        )
