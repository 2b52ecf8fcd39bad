import copy
from datetime import datetime, timezone
from typing import Sequence

from app.application.interfaces.reservation_repo import ReservationRepo
from app.domain.entities.reservation import Reservation
from app.domain.errors import OptimisticLockError, ReservationNotFoundError

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class InMemoryReservationRepo(ReservationRepo):
    def __init__(self) -> None:
        self.reservations: dict[str, Reservation] = {}

    async def create(self, reservation: Reservation) -> None:
        if reservation.id in self.reservations:
            raise ValueError("Reservation id already exists")
        self.reservations[reservation.id] = copy.deepcopy(reservation)

    async def get_by_id(self, reservation_id: str) -> Reservation | None:
        stored = self.reservations.get(reservation_id)
        return copy.deepcopy(stored) if stored else None

    async def list_by_user(self, user_id: str) -> Sequence[Reservation]:
        owned = [r for r in self.reservations.values() if r.is_owned_by(user_id)]
        owned.sort(key=lambda r: r.created_at or _EPOCH, reverse=True)
        return [copy.deepcopy(r) for r in owned]

    async def list_by_session(self, session_id: str) -> Sequence[Reservation]:
        return [
            copy.deepcopy(r) for r in self.reservations.values() if r.session_id == session_id
        ]

    async def update(
        self,
        reservation: Reservation,
        expected_lock_version: int | None = None,
    ) -> None:
        stored = self.reservations.get(reservation.id)
        if stored is None:
            raise ReservationNotFoundError(reservation.id)
        if expected_lock_version is not None and stored.lock_version != expected_lock_version:
            raise OptimisticLockError(reservation.id, expected_lock_version, stored.lock_version)
        self.reservations[reservation.id] = copy.deepcopy(reservation)
