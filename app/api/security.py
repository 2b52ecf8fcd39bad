"""
Caller identity resolved from headers set by the upstream auth gateway.

Authentication itself happens outside this service; the gateway forwards
the verified user through `X-User-*` headers.
"""

from dataclasses import dataclass

from fastapi import Header

from app.application.dtos.booking_dto import RequesterDTO
from app.domain.constants import ROLE_ADMIN, ROLE_USER


@dataclass(frozen=True)
class CurrentUser:
    id: str | None = None
    role: str = ROLE_USER
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    nationality: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.id is not None

    def as_requester(self) -> RequesterDTO:
        return RequesterDTO(
            user_id=self.id,
            role=self.role,
            name=self.name,
            email=self.email,
            phone=self.phone,
            nationality=self.nationality,
        )


async def get_current_user_optional(
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
    x_user_role: str | None = Header(default=None, alias="X-User-Role"),
    x_user_name: str | None = Header(default=None, alias="X-User-Name"),
    x_user_email: str | None = Header(default=None, alias="X-User-Email"),
    x_user_phone: str | None = Header(default=None, alias="X-User-Phone"),
    x_user_nationality: str | None = Header(default=None, alias="X-User-Nationality"),
) -> CurrentUser:
    """
    Anonymous `CurrentUser` when no `X-User-Id` is present; use cases enforce access.

    Parameter names must not collide with route path parameters
    (`/bookings/user/{user_id}`).
    """
    user_id = (x_user_id or "").strip() or None
    normalized_role = (x_user_role or "").strip().lower()
    return CurrentUser(
        id=user_id,
        role=ROLE_ADMIN if normalized_role == ROLE_ADMIN else ROLE_USER,
        name=x_user_name,
        email=x_user_email,
        phone=x_user_phone,
        nationality=x_user_nationality,
    )
