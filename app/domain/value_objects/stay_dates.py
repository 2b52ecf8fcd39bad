"""Value Object StayDates - rango de fechas de estancia en el hotel."""

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from app.domain.errors import InvalidDateRangeError


@dataclass(frozen=True)
class StayDates:
    """
    Value Object inmutable con las fechas de check-in y check-out.

    Attributes:
        check_in: Fecha de entrada.
        check_out: Fecha de salida.
    """

    check_in: date
    check_out: date

    def __post_init__(self) -> None:
        if self.check_in >= self.check_out:
            raise InvalidDateRangeError(
                f"check_out must be after check_in: {self.check_in} >= {self.check_out}"
            )

    @property
    def duration(self) -> timedelta:
        """Retorna la duración de la estancia."""
        return _as_datetime(self.check_out) - _as_datetime(self.check_in)

    @property
    def nights(self) -> int:
        """
        Calcula las noches de la estancia.

        Regla de negocio: cualquier fracción de día cuenta como noche completa.
        """
        return math.ceil(self.duration.total_seconds() / 86400)

    def __str__(self) -> str:
        return f"{self.check_in.isoformat()} -> {self.check_out.isoformat()}"

    @classmethod
    def starting_in(cls, today: date, days_ahead: int, nights: int) -> "StayDates":
        """Crea una estancia que empieza `days_ahead` días después de `today`."""
        check_in = today + timedelta(days=days_ahead)
        return cls(check_in=check_in, check_out=check_in + timedelta(days=nights))


def _as_datetime(value: date) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)
