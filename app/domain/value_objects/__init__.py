"""Value Objects del dominio de reservas de hotel."""

from app.domain.value_objects.money import Money
from app.domain.value_objects.stay_dates import StayDates

__all__ = [
    "Money",
    "StayDates",
]
