"""Excepciones de dominio para el sistema de reservas de hotel."""


class DomainError(Exception):
    """Clase base para todos los errores de dominio."""

    http_status: int = 400

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


# === Errores de Reservación ===


class ReservationNotFoundError(DomainError):
    """La reservación no existe."""

    http_status = 404

    def __init__(self, reservation_id: str):
        super().__init__(
            message=f"Booking not found: {reservation_id}",
            code="RESERVATION_NOT_FOUND",
        )
        self.reservation_id = reservation_id


class InvalidReservationStatusError(DomainError):
    """El estado de la reservación no permite la operación."""

    http_status = 409

    def __init__(self, current_status: str, expected_status: str | list[str], operation: str):
        expected = expected_status if isinstance(expected_status, str) else ", ".join(expected_status)
        super().__init__(
            message=f"Cannot {operation}: current status '{current_status}', expected '{expected}'",
            code="INVALID_RESERVATION_STATUS",
        )
        self.current_status = current_status
        self.expected_status = expected_status
        self.operation = operation


class OptimisticLockError(DomainError):
    """Conflicto de concurrencia al actualizar la reservación."""

    http_status = 409

    def __init__(self, reservation_id: str, expected_version: int, actual_version: int | None):
        super().__init__(
            message=f"Concurrent update on booking {reservation_id}: "
            f"expected version {expected_version}, actual version {actual_version}",
            code="OPTIMISTIC_LOCK_ERROR",
        )
        self.reservation_id = reservation_id
        self.expected_version = expected_version
        self.actual_version = actual_version


# === Errores de Sesión multi-habitación ===


class BookingSessionNotFoundError(DomainError):
    """No existen reservaciones para la sesión."""

    http_status = 404

    def __init__(self, session_id: str):
        super().__init__(
            message=f"No bookings found for session: {session_id}",
            code="BOOKING_SESSION_NOT_FOUND",
        )
        self.session_id = session_id


class BookingAttemptNotFoundError(DomainError):
    """El intento de reserva en segundo plano no existe."""

    http_status = 404

    def __init__(self, attempt_id: str):
        super().__init__(
            message=f"Booking attempt not found: {attempt_id}",
            code="BOOKING_ATTEMPT_NOT_FOUND",
        )
        self.attempt_id = attempt_id


# === Errores de Supplier ===


class SupplierError(DomainError):
    """Base para fallos en la comunicación con el proveedor de hoteles."""

    http_status = 502


class SupplierRejectedError(SupplierError):
    """El proveedor rechazó la reserva (estado terminal 'error')."""

    def __init__(self, order_id: str, supplier_status: str | None = None, detail: str | None = None):
        status_text = supplier_status or "error"
        message = f"Booking failed: {status_text} (order id: {order_id})"
        if detail:
            message = f"{message} - {detail}"
        super().__init__(message=message, code="SUPPLIER_REJECTED")
        self.order_id = order_id
        self.supplier_status = supplier_status
        self.detail = detail


class SupplierTimeoutError(SupplierError):
    """El sondeo de confirmación agotó los intentos sin estado terminal."""

    http_status = 504

    def __init__(self, order_id: str, attempts: int, last_status: str | None = None):
        super().__init__(
            message=f"Booking failed: {last_status or 'timeout'} after {attempts} status checks "
            f"(order id: {order_id})",
            code="SUPPLIER_TIMEOUT",
        )
        self.order_id = order_id
        self.attempts = attempts
        self.last_status = last_status


class SupplierUnavailableError(SupplierError):
    """Error de red, HTTP o circuit breaker abierto frente al proveedor."""

    http_status = 503

    def __init__(self, operation: str, detail: str | None = None):
        super().__init__(
            message=f"Hotel supplier unavailable during {operation}: {detail or 'unknown error'}",
            code="SUPPLIER_UNAVAILABLE",
        )
        self.operation = operation
        self.detail = detail


class NoRefundableRateError(DomainError):
    """El hotel de certificación no ofrece tarifas reembolsables vigentes."""

    http_status = 422

    def __init__(self, hotel_id: str, rates_seen: int):
        super().__init__(
            message=f"No refundable rate available for certification hotel {hotel_id} "
            f"({rates_seen} rates inspected); the supplier test environment only accepts "
            f"rates with a future free-cancellation deadline",
            code="NO_REFUNDABLE_RATE",
        )
        self.hotel_id = hotel_id
        self.rates_seen = rates_seen


# === Errores de Persistencia ===


class BookingPersistenceError(DomainError):
    """
    El proveedor confirmó la reserva pero no se pudo guardar localmente.

    Requiere conciliación manual: existe un compromiso en el proveedor
    sin registro local completo.
    """

    http_status = 500

    def __init__(self, order_id: str, detail: str):
        super().__init__(
            message=f"Booking confirmed by supplier but could not be saved locally "
            f"(order id: {order_id}). Support has been notified.",
            code="BOOKING_PERSISTENCE_FAILED",
        )
        self.order_id = order_id
        self.detail = detail


# === Errores de Autorización ===


class AuthenticationRequiredError(DomainError):
    """Se requiere identidad del usuario."""

    http_status = 401

    def __init__(self) -> None:
        super().__init__(message="Not authorized, no user identity", code="AUTHENTICATION_REQUIRED")


class NotAuthorizedError(DomainError):
    """El usuario no es dueño del recurso ni administrador."""

    http_status = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message=message, code="NOT_AUTHORIZED")


# === Errores de Validación ===


class ValidationError(DomainError):
    """Error de validación de datos de entrada."""

    def __init__(self, field: str, message: str):
        super().__init__(
            message=f"Validation failed on '{field}': {message}",
            code="VALIDATION_ERROR",
        )
        self.field = field


class InvalidDateRangeError(DomainError):
    """Rango de fechas inválido."""

    def __init__(self, message: str):
        super().__init__(message=message, code="INVALID_DATE_RANGE")


class InvalidMoneyError(DomainError):
    """Monto monetario inválido."""

    def __init__(self, message: str):
        super().__init__(message=message, code="INVALID_MONEY")
