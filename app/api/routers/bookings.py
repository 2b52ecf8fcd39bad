from decimal import Decimal
from typing import Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from app.api.dependencies import (
    BackgroundExecutor,
    get_attempt_runner,
    get_background_executor,
    get_use_cases,
)
from app.api.responses import (
    attempt_view,
    booking_detail,
    render_booking_result,
    render_multi_room_result,
    session_cancellation,
    session_view,
    success_response,
)
from app.api.schemas.bookings import (
    BookingRequestBase,
    CancelSessionRequest,
    CreateBookingRequest,
    CreateMultiRoomBookingRequest,
    SelectedRate,
    to_decimal,
)
from app.api.security import CurrentUser, get_current_user_optional
from app.application.dtos.booking_dto import (
    CreateBookingDTO,
    CreateMultiRoomBookingDTO,
    HotelDTO,
    RateSelection,
    RoomSelectionDTO,
)
from app.application.use_cases.booking_attempts import BookingAttemptRunner
from app.config import Settings, get_settings
from app.domain.errors import ValidationError

router = APIRouter(prefix="/bookings")


def _rate_selection(rate: SelectedRate) -> RateSelection:
    return RateSelection(
        match_hash=rate.match_hash,
        price=to_decimal(rate.price),
        currency=rate.currency,
        room_name=rate.room_name,
        meal=rate.meal,
    )


def _base_dto(
    payload: BookingRequestBase,
    user: CurrentUser,
    request: Request,
    settings: Settings,
    selected_rate: RateSelection,
    total_price: Decimal,
    room_type: str | None = None,
    room_count: int = 1,
) -> CreateBookingDTO:
    guest_name = payload.guest_name or user.name
    guest_email = payload.guest_email or user.email
    guest_phone = payload.guest_phone or user.phone
    if not user.is_authenticated:
        missing = [
            name
            for name, value in (
                ("guest_name", guest_name),
                ("guest_email", guest_email),
                ("guest_phone", guest_phone),
            )
            if not value
        ]
        if missing:
            raise ValidationError(", ".join(missing), "required for guest bookings")

    return CreateBookingDTO(
        hotel=HotelDTO(
            hotel_id=payload.hotel_id,
            name=payload.hotel_name,
            address=payload.hotel_address,
            city=payload.hotel_city,
            country=payload.hotel_country,
            rating=payload.hotel_rating,
            image=payload.hotel_image,
        ),
        check_in=payload.check_in,
        check_out=payload.check_out,
        selected_rate=selected_rate,
        total_price=total_price,
        currency=payload.currency.upper(),
        user_id=user.id,
        guest_name=guest_name,
        guest_email=guest_email,
        guest_phone=guest_phone,
        nationality=payload.nationality or user.nationality,
        number_of_adults=payload.number_of_adults,
        room_type=room_type,
        room_count=room_count,
        stay_type=payload.stay_type,
        payment_method=payload.payment_method,
        special_requests=payload.special_requests,
        user_ip=request.client.host if request.client else "0.0.0.0",
        language=settings.booking_language,
    )


def _single_dto(
    payload: CreateBookingRequest,
    user: CurrentUser,
    request: Request,
    settings: Settings,
) -> CreateBookingDTO:
    return _base_dto(
        payload,
        user,
        request,
        settings,
        selected_rate=_rate_selection(payload.selected_rate),
        total_price=to_decimal(payload.total_price),
        room_type=payload.room_type,
        room_count=payload.number_of_rooms,
    )


def _multi_dto(
    payload: CreateMultiRoomBookingRequest,
    user: CurrentUser,
    request: Request,
    settings: Settings,
) -> CreateMultiRoomBookingDTO:
    rooms = [
        RoomSelectionDTO(
            room_type=room.room_type,
            selected_rate=_rate_selection(room.selected_rate),
            total_price=to_decimal(room.total_price),
        )
        for room in payload.rooms
    ]
    # Group totals are derived per room type by the orchestrator
    total = sum(
        (r.total_price if r.total_price is not None else r.selected_rate.price for r in rooms),
        Decimal("0"),
    )
    base = _base_dto(
        payload,
        user,
        request,
        settings,
        selected_rate=rooms[0].selected_rate,
        total_price=total,
    )
    return CreateMultiRoomBookingDTO(base=base, rooms=rooms)


def _envelope(rendered: tuple[int, dict[str, Any]]) -> JSONResponse:
    status_code, body = rendered
    return JSONResponse(status_code=status_code, content=body)


@router.post("/create", status_code=status.HTTP_201_CREATED)
async def create_booking(
    payload: CreateBookingRequest,
    request: Request,
    user: CurrentUser = Depends(get_current_user_optional),
    settings: Settings = Depends(get_settings),
    use_cases=Depends(get_use_cases),
) -> JSONResponse:
    dto = _single_dto(payload, user, request, settings)
    result = await use_cases["create_booking"].execute(dto)
    return _envelope(render_booking_result(result))


@router.post("/create-multi", status_code=status.HTTP_201_CREATED)
async def create_multi_room_booking(
    payload: CreateMultiRoomBookingRequest,
    request: Request,
    user: CurrentUser = Depends(get_current_user_optional),
    settings: Settings = Depends(get_settings),
    use_cases=Depends(get_use_cases),
) -> JSONResponse:
    dto = _multi_dto(payload, user, request, settings)
    result = await use_cases["create_multi_room"].execute(dto)
    return _envelope(render_multi_room_result(result))


@router.post("/create-async", status_code=status.HTTP_202_ACCEPTED)
async def create_booking_async(
    payload: CreateBookingRequest | CreateMultiRoomBookingRequest,
    request: Request,
    user: CurrentUser = Depends(get_current_user_optional),
    settings: Settings = Depends(get_settings),
    runner: BookingAttemptRunner = Depends(get_attempt_runner),
    execute: BackgroundExecutor = Depends(get_background_executor),
) -> JSONResponse:
    if isinstance(payload, CreateMultiRoomBookingRequest):
        multi_dto = _multi_dto(payload, user, request, settings)
        attempt = await runner.submit(
            kind="multi",
            work=lambda: execute("create_multi_room", multi_dto),
            render=render_multi_room_result,
            user_id=user.id,
        )
    else:
        dto = _single_dto(payload, user, request, settings)
        attempt = await runner.submit(
            kind="single",
            work=lambda: execute("create_booking", dto),
            render=render_booking_result,
            user_id=user.id,
        )
    return success_response(
        attempt_view(attempt),
        "Booking accepted for processing",
        status_code=status.HTTP_202_ACCEPTED,
    )


@router.get("/attempts/{attempt_id}")
async def get_booking_attempt(
    attempt_id: str,
    user: CurrentUser = Depends(get_current_user_optional),
    runner: BookingAttemptRunner = Depends(get_attempt_runner),
) -> JSONResponse:
    attempt = await runner.get(attempt_id, user.as_requester())
    return success_response(attempt_view(attempt), "Booking attempt retrieved successfully")


@router.get("/user/{user_id}")
async def list_user_bookings(
    user_id: str,
    user: CurrentUser = Depends(get_current_user_optional),
    use_cases=Depends(get_use_cases),
) -> JSONResponse:
    details = await use_cases["list_user_bookings"].execute(user_id, user.as_requester())
    return success_response(
        {"reservations": [booking_detail(d) for d in details]},
        "Booking history retrieved successfully",
    )


@router.get("/session/{session_id}")
async def get_booking_session(
    session_id: str,
    user: CurrentUser = Depends(get_current_user_optional),
    use_cases=Depends(get_use_cases),
) -> JSONResponse:
    view = await use_cases["get_session"].execute(session_id, user.as_requester())
    return success_response(session_view(view), "Booking session retrieved successfully")


@router.post("/session/{session_id}/cancel")
async def cancel_booking_session(
    session_id: str,
    payload: CancelSessionRequest | None = None,
    user: CurrentUser = Depends(get_current_user_optional),
    use_cases=Depends(get_use_cases),
) -> JSONResponse:
    reason = payload.reason if payload else None
    result = await use_cases["cancel_session"].execute(session_id, user.as_requester(), reason)
    return success_response(
        session_cancellation(result),
        f"{result.cancelled_count} reservation(s) cancelled",
    )


@router.get("/{reservation_id}")
async def get_booking(
    reservation_id: str,
    user: CurrentUser = Depends(get_current_user_optional),
    use_cases=Depends(get_use_cases),
) -> JSONResponse:
    detail = await use_cases["get_booking"].execute(reservation_id, user.as_requester())
    return success_response({"reservation": booking_detail(detail)}, "Booking retrieved successfully")
