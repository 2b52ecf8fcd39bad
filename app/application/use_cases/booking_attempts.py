import asyncio
import logging
from typing import Any, Awaitable, Callable

from app.application.dtos.booking_dto import RequesterDTO
from app.application.interfaces.attempt_registry import (
    AttemptStatus,
    BookingAttempt,
    BookingAttemptRegistry,
)
from app.application.interfaces.clock import Clock
from app.application.interfaces.uuid_generator import UUIDGenerator
from app.domain.errors import (
    AuthenticationRequiredError,
    BookingAttemptNotFoundError,
    DomainError,
    NotAuthorizedError,
)

Renderer = Callable[[Any], tuple[int, dict[str, Any]]]


class BookingAttemptRunner:
    """
    Ejecuta sagas de reserva como tareas asyncio en segundo plano.

    La solicitud HTTP recibe de inmediato un attempt id; el resultado
    (o el error) queda en el registro para consultarlo después.
    """

    def __init__(
        self,
        registry: BookingAttemptRegistry,
        uuid_generator: UUIDGenerator,
        clock: Clock,
    ) -> None:
        self._registry = registry
        self._uuid_generator = uuid_generator
        self._clock = clock
        self._tasks: set[asyncio.Task] = set()
        self._logger = logging.getLogger(__name__)

    async def submit(
        self,
        kind: str,
        work: Callable[[], Awaitable[Any]],
        render: Renderer,
        user_id: str | None = None,
    ) -> BookingAttempt:
        """
        Registra el intento y programa `work` en segundo plano.

        Args:
            kind: 'single' o 'multi'.
            work: Corrutina que ejecuta la saga y retorna su resultado.
            render: Convierte el resultado en (http_status, payload).
            user_id: Dueño del intento; None para reservas de invitado.
        """
        attempt = BookingAttempt(
            attempt_id=self._uuid_generator.generate_attempt_id(),
            kind=kind,
            status=AttemptStatus.PROCESSING,
            created_at=self._clock.now(),
            user_id=user_id,
        )
        await self._registry.add(attempt)

        task = asyncio.create_task(self._run(attempt, work, render))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        self._logger.info(
            "Booking attempt scheduled",
            extra={"attempt_id": attempt.attempt_id, "kind": kind},
        )
        return attempt

    async def get(self, attempt_id: str, requester: RequesterDTO) -> BookingAttempt:
        """
        Consulta un intento.

        Los intentos de un usuario sólo los ve su dueño o un administrador;
        los de invitado se consultan únicamente con el attempt id.
        """
        attempt = await self._registry.get(attempt_id)
        if attempt is None:
            raise BookingAttemptNotFoundError(attempt_id)
        if attempt.user_id is None or requester.is_admin:
            return attempt
        if not requester.is_authenticated:
            raise AuthenticationRequiredError()
        if str(requester.user_id) != str(attempt.user_id):
            raise NotAuthorizedError("Not authorized to view this booking attempt")
        return attempt

    async def drain(self) -> None:
        """Espera a que terminen todas las tareas en curso."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _run(
        self,
        attempt: BookingAttempt,
        work: Callable[[], Awaitable[Any]],
        render: Renderer,
    ) -> None:
        try:
            outcome = await work()
            attempt.http_status, attempt.result = render(outcome)
            attempt.status = AttemptStatus.SUCCEEDED
        except DomainError as exc:
            self._logger.warning(
                "Booking attempt failed",
                extra={"attempt_id": attempt.attempt_id, "error_code": exc.code, "error": exc.message},
            )
            attempt.status = AttemptStatus.FAILED
            attempt.http_status = exc.http_status
            attempt.error = exc.message
            attempt.error_code = exc.code
        except Exception as exc:
            self._logger.exception(
                "Booking attempt crashed",
                extra={"attempt_id": attempt.attempt_id},
            )
            attempt.status = AttemptStatus.FAILED
            attempt.http_status = 500
            attempt.error = str(exc) or exc.__class__.__name__
            attempt.error_code = "INTERNAL_ERROR"

        attempt.finished_at = self._clock.now()
        await self._registry.update(attempt)
        self._logger.info(
            "Booking attempt finished",
            extra={
                "attempt_id": attempt.attempt_id,
                "status": attempt.status.value,
                "http_status": attempt.http_status,
            },
        )
