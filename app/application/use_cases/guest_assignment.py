"""Normalización del huésped principal y asignación por habitación."""

import re

from app.domain.constants import DEFAULT_GUEST_FIRST_NAME, DEFAULT_GUEST_LAST_NAME

_DUPLICATE_PREFIX = re.compile(r"(\+\d+)\+\d+")
_NON_PHONE_CHARS = re.compile(r"[^\d+]")


def split_guest_name(full_name: str | None) -> tuple[str, str]:
    """
    Divide el nombre en la primera palabra y el resto.

    "Ana María López" -> ("Ana", "María López"). Vacío -> ("Guest", "User").
    Los espacios repetidos o en los extremos se colapsan, así que
    "Ana  María" -> ("Ana", "María") y nunca se envía un nombre vacío.
    """
    parts = (full_name or "").split()
    first_name = parts[0] if parts else DEFAULT_GUEST_FIRST_NAME
    last_name = " ".join(parts[1:]) or DEFAULT_GUEST_LAST_NAME
    return first_name, last_name


def normalize_phone(phone: str | None) -> str:
    """
    Limpia el teléfono del huésped.

    Colapsa prefijos duplicados ("+971+1234567" -> "+971") y elimina todo
    lo que no sea dígito o '+'.
    """
    if not phone:
        return ""
    cleaned = _DUPLICATE_PREFIX.sub(r"\1", phone, count=1)
    return _NON_PHONE_CHARS.sub("", cleaned)


def build_room_guests(first_name: str, last_name: str, room_count: int) -> list[dict]:
    """Una copia del huésped principal por habitación, en el formato del proveedor."""
    return [
        {"guests": [{"first_name": first_name, "last_name": last_name}]}
        for _ in range(max(room_count, 1))
    ]
