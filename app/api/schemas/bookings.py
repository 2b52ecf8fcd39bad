from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, condecimal, constr, model_validator

Money = condecimal(max_digits=12, decimal_places=2, gt=0)


class SelectedRate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    match_hash: constr(strip_whitespace=True, min_length=1)
    price: condecimal(max_digits=12, decimal_places=2, ge=0) | None = None
    currency: constr(strip_whitespace=True, min_length=3, max_length=3) | None = None
    room_name: str | None = None
    meal: str | None = None


class BookingRequestBase(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # Hotel snapshot
    hotel_id: constr(strip_whitespace=True, min_length=1)
    hotel_name: constr(strip_whitespace=True, min_length=1)
    hotel_address: str = ""
    hotel_city: str = ""
    hotel_country: str = ""
    hotel_rating: float = Field(default=0.0, ge=0)
    hotel_image: str = ""

    check_in: date
    check_out: date
    currency: constr(strip_whitespace=True, min_length=3, max_length=3) = "USD"

    # Lead guest; required when no authenticated user is present
    guest_name: str | None = None
    guest_email: EmailStr | None = None
    guest_phone: str | None = None
    nationality: str | None = None

    number_of_adults: int = Field(default=2, ge=1)
    stay_type: str = "Leisure"
    payment_method: str = "pending"
    special_requests: str = ""

    @model_validator(mode="after")
    def check_dates(self):
        if self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        return self


class CreateBookingRequest(BookingRequestBase):
    selected_rate: SelectedRate
    total_price: Money
    room_type: str | None = None
    number_of_rooms: int = Field(default=1, ge=1)


class RoomSelection(BaseModel):
    model_config = ConfigDict(extra="ignore")

    room_type: constr(strip_whitespace=True, min_length=1)
    selected_rate: SelectedRate
    total_price: Money | None = None


class CreateMultiRoomBookingRequest(BookingRequestBase):
    rooms: list[RoomSelection] = Field(min_length=1)

    @model_validator(mode="after")
    def check_room_prices(self):
        for room in self.rooms:
            if room.total_price is None and room.selected_rate.price is None:
                raise ValueError(f"rooms[{room.room_type}]: total_price or selected_rate.price is required")
        return self


class CancelSessionRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    reason: str = Field(default="Cancelled by user", max_length=500)


def to_decimal(value: Decimal | None) -> Decimal | None:
    return None if value is None else Decimal(str(value))
