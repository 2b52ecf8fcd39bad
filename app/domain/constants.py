"""Constantes del dominio de reservas de hotel."""

RESERVATION_STATUS_PENDING = "pending"
RESERVATION_STATUS_CONFIRMED = "confirmed"
RESERVATION_STATUS_CANCELLED = "cancelled"

# Etiquetas de estado del proveedor (supplier_status)
SUPPLIER_STATUS_OK = "ok"
SUPPLIER_STATUS_ERROR = "error"
SUPPLIER_STATUS_HASH_EXPIRED = "hash_expired"
SUPPLIER_STATUS_SANDBOX = "sandbox"

INVOICE_STATUS_PENDING = "pending"

ROLE_ADMIN = "admin"
ROLE_USER = "user"

DEFAULT_GUEST_FIRST_NAME = "Guest"
DEFAULT_GUEST_LAST_NAME = "User"
DEFAULT_ROOM_TYPE = "Standard Room"
DEFAULT_STAY_TYPE = "Leisure"
DEFAULT_MEAL = "nomeal"
DEFAULT_PAYMENT_METHOD = "pending"

HASH_EXPIRED_WARNING = (
    "Rate availability expired. Reservation created in pending status for manual confirmation."
)
