"""
Response envelope and presenters.

Every endpoint answers with
`{"success": true, "message": ..., "data": {...}}` or
`{"success": false, "message": ..., "error_code": ..., "errors": [...]}`.
"""

from decimal import Decimal
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from app.application.dtos.booking_dto import (
    BookingDetailDTO,
    BookingResultDTO,
    MultiRoomResultDTO,
    SessionCancellationDTO,
    SessionViewDTO,
)
from app.application.interfaces.attempt_registry import BookingAttempt
from app.domain.entities.booking_session import BookingSession
from app.domain.entities.invoice import Invoice
from app.domain.entities.reservation import Reservation

HTTP_MULTI_STATUS = 207


def success_response(data: Any, message: str = "Success", status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=success_body(data, message),
    )


def success_body(data: Any, message: str = "Success") -> dict[str, Any]:
    return {"success": True, "message": message, "data": jsonable_encoder(data)}


def error_body(
    message: str,
    error_code: str,
    errors: list[Any] | None = None,
) -> dict[str, Any]:
    return {
        "success": False,
        "message": message,
        "error_code": error_code,
        "errors": jsonable_encoder(errors or []),
    }


def error_response(
    message: str,
    status_code: int,
    error_code: str,
    errors: list[Any] | None = None,
    **extra: Any,
) -> JSONResponse:
    body = error_body(message, error_code, errors)
    body.update(jsonable_encoder(extra))
    return JSONResponse(status_code=status_code, content=body)


def _amount(value: Decimal | None) -> float | None:
    return None if value is None else float(value)


# === Presenters ===


def reservation_summary(reservation: Reservation) -> dict[str, Any]:
    return {
        "id": reservation.id,
        "hotel_name": reservation.hotel.name if reservation.hotel else None,
        "check_in": reservation.check_in,
        "check_out": reservation.check_out,
        "nights": reservation.number_of_nights,
        "room_type": reservation.room_type,
        "number_of_rooms": reservation.number_of_rooms,
        "total_price": _amount(reservation.total_price),
        "currency": reservation.currency,
        "status": reservation.status.value,
        "supplier_order_id": reservation.supplier_order_id,
        "supplier_status": reservation.supplier_status,
        "session_id": reservation.session_id,
    }


def reservation_detail(reservation: Reservation) -> dict[str, Any]:
    hotel = reservation.hotel
    return {
        **reservation_summary(reservation),
        "user_id": reservation.user_id,
        "guest_name": reservation.guest_name,
        "guest_email": reservation.guest_email,
        "guest_phone": reservation.guest_phone,
        "nationality": reservation.nationality,
        "hotel": {
            "hotel_id": hotel.hotel_id,
            "name": hotel.name,
            "address": hotel.address,
            "city": hotel.city,
            "country": hotel.country,
            "rating": hotel.rating,
            "image": hotel.image,
        }
        if hotel
        else None,
        "number_of_adults": reservation.number_of_adults,
        "stay_type": reservation.stay_type,
        "meal": reservation.meal,
        "payment_method": reservation.payment_method,
        "special_requests": reservation.special_requests,
        "guests": [
            {"first_name": g.first_name, "last_name": g.last_name} for g in reservation.guests
        ],
        "invoice_id": reservation.invoice_id,
        "notes": list(reservation.notes),
        "created_at": reservation.created_at,
        "updated_at": reservation.updated_at,
    }


def invoice_summary(invoice: Invoice) -> dict[str, Any]:
    return {
        "id": invoice.id,
        "invoice_number": invoice.invoice_number,
        "total": _amount(invoice.total),
        "currency": invoice.currency,
        "status": invoice.status,
        "due_date": invoice.due_date,
    }


def invoice_detail(invoice: Invoice) -> dict[str, Any]:
    return {
        **invoice_summary(invoice),
        "reservation_id": invoice.reservation_id,
        "client_name": invoice.client_name,
        "client_email": invoice.client_email,
        "client_phone": invoice.client_phone,
        "items": [
            {
                "description": item.description,
                "quantity": item.quantity,
                "unit_price": _amount(item.unit_price),
                "total": _amount(item.total),
            }
            for item in invoice.items
        ],
        "subtotal": _amount(invoice.subtotal),
        "tax": _amount(invoice.tax),
        "discount": _amount(invoice.discount),
        "created_at": invoice.created_at,
    }


def booking_result(result: BookingResultDTO) -> dict[str, Any]:
    data: dict[str, Any] = {"reservation": reservation_summary(result.reservation)}
    if result.invoice:
        data["invoice"] = invoice_summary(result.invoice)
    if result.warning:
        data["warning"] = result.warning
    if result.sandbox_mode:
        data["sandbox_mode"] = True
    return data


def session_sub_bookings(session: BookingSession) -> list[dict[str, Any]]:
    return [
        {
            "room_type": sub.room_type,
            "order_id": sub.order_id,
            "room_count": sub.room_count,
            "outcome": sub.outcome.value,
            "reservation_id": sub.reservation_id,
            "error": sub.error,
        }
        for sub in session.sub_bookings
    ]


def multi_room_result(result: MultiRoomResultDTO) -> dict[str, Any]:
    return {
        "session_id": result.session.session_id,
        "completed": [booking_result(item) for item in result.completed],
        "failed": [
            {
                "room_type": item.room_type,
                "order_id": item.order_id,
                "room_count": item.room_count,
                "error": item.error,
                "error_code": item.error_code,
            }
            for item in result.failed
        ],
        "sub_bookings": session_sub_bookings(result.session),
    }


def render_booking_result(result: BookingResultDTO) -> tuple[int, dict[str, Any]]:
    return 201, success_body(booking_result(result), result.message)


def render_multi_room_result(result: MultiRoomResultDTO) -> tuple[int, dict[str, Any]]:
    data = multi_room_result(result)
    if result.is_partial:
        message = (
            f"{len(result.completed)} of "
            f"{len(result.completed) + len(result.failed)} room types booked"
        )
        return HTTP_MULTI_STATUS, {"success": False, "message": message, "data": jsonable_encoder(data)}
    return 201, success_body(data, "All rooms booked successfully")


def booking_detail(detail: BookingDetailDTO) -> dict[str, Any]:
    data = reservation_detail(detail.reservation)
    data["invoice"] = invoice_detail(detail.invoice) if detail.invoice else None
    return data


def session_view(view: SessionViewDTO) -> dict[str, Any]:
    summary = view.summary
    return {
        "session_id": view.session_id,
        "reservations": [reservation_detail(r) for r in view.reservations],
        "summary": {
            "total_rooms": summary.total_rooms,
            "total_price": _amount(summary.total_price),
            "currency": summary.currency,
            "all_confirmed": summary.all_confirmed,
        },
        "sub_bookings": session_sub_bookings(view.session) if view.session else [],
    }


def session_cancellation(result: SessionCancellationDTO) -> dict[str, Any]:
    return {
        "session_id": result.session_id,
        "cancelled_count": result.cancelled_count,
        "results": [
            {
                "reservation_id": item.reservation_id,
                "success": item.success,
                "status": item.status,
                "already_cancelled": item.already_cancelled,
                "error": item.error,
            }
            for item in result.results
        ],
    }


def attempt_view(attempt: BookingAttempt) -> dict[str, Any]:
    return {
        "attempt_id": attempt.attempt_id,
        "kind": attempt.kind,
        "status": attempt.status.value,
        "created_at": attempt.created_at,
        "finished_at": attempt.finished_at,
        "http_status": attempt.http_status,
        "result": attempt.result,
        "error": attempt.error,
        "error_code": attempt.error_code,
    }
