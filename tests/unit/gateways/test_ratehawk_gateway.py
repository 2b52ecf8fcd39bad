import unittest
from datetime import date
from unittest.mock import AsyncMock, MagicMock, patch

import httpx

from app.application.interfaces.supplier_gateway import StartBookingRequest
from app.domain.errors import SupplierUnavailableError
from app.infrastructure.circuit_breaker import build_supplier_breaker
from app.infrastructure.gateways.ratehawk_gateway import RateHawkGateway


def make_response(body, status_code=200):
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = body
    return resp


def make_client(mock_client_cls, *responses):
    mock_client = AsyncMock()
    mock_client.__aenter__.return_value = mock_client
    mock_client.post.side_effect = list(responses)
    mock_client_cls.return_value = mock_client
    return mock_client


PREBOOK_OK = {
    "status": "ok",
    "data": {"hotels": [{"id": "hotel_cancun_01", "rates": [{"book_hash": "h-book-42"}]}]},
    "error": None,
}


class TestRateHawkGateway(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.sleeps = []

        async def record_sleep(seconds):
            self.sleeps.append(seconds)

        self.breaker = build_supplier_breaker(name="test_supplier", fail_max=2, reset_timeout=60)
        self.gateway = RateHawkGateway(
            key_id="1234",
            api_key="secret-key",
            base_url="https://api.test.local/api/b2b/v3/",
            rate_limit_retries=2,
            breaker=self.breaker,
            sleep=record_sleep,
        )

    @patch("httpx.AsyncClient")
    async def test_prebook_success(self, mock_client_cls):
        mock_client = make_client(mock_client_cls, make_response(PREBOOK_OK))

        result = await self.gateway.prebook("m-deluxe-001", language="es")

        self.assertTrue(result.success)
        self.assertEqual(result.book_hash, "h-book-42")

        # Verify Auth, URL and payload
        args, kwargs = mock_client.post.call_args
        self.assertEqual(args[0], "https://api.test.local/api/b2b/v3/hotel/prebook")
        self.assertEqual(kwargs["auth"], ("1234", "secret-key"))
        self.assertEqual(kwargs["json"], {"hash": "m-deluxe-001", "language": "es"})

    @patch("httpx.AsyncClient")
    async def test_prebook_retries_once_on_no_available_rates(self, mock_client_cls):
        no_rates = {"status": "error", "data": None, "error": "no_available_rates"}
        mock_client = make_client(
            mock_client_cls, make_response(no_rates), make_response(PREBOOK_OK)
        )

        result = await self.gateway.prebook("m-deluxe-001")

        self.assertTrue(result.success)
        self.assertEqual(mock_client.post.call_count, 2)
        self.assertEqual(self.sleeps, [0.8])

    @patch("httpx.AsyncClient")
    async def test_prebook_gives_up_after_second_no_available_rates(self, mock_client_cls):
        no_rates = {"status": "error", "data": None, "error": "no_available_rates"}
        make_client(mock_client_cls, make_response(no_rates), make_response(no_rates))

        result = await self.gateway.prebook("m-deluxe-001")

        self.assertFalse(result.success)
        self.assertEqual(result.error, "no_available_rates")

    @patch("httpx.AsyncClient")
    async def test_booking_form_success(self, mock_client_cls):
        body = {"status": "ok", "data": {"order_id": 987654, "item_id": 111}, "error": None}
        mock_client = make_client(mock_client_cls, make_response(body))

        result = await self.gateway.create_booking_form("h-book-42", "ord-1", user_ip="10.0.0.1")

        self.assertTrue(result.success)
        self.assertEqual(result.order_id, "987654")
        self.assertEqual(result.item_id, "111")
        _, kwargs = mock_client.post.call_args
        self.assertEqual(kwargs["json"]["partner_order_id"], "ord-1")
        self.assertEqual(kwargs["json"]["user_ip"], "10.0.0.1")

    @patch("httpx.AsyncClient")
    async def test_booking_form_sandbox_restriction(self, mock_client_cls):
        body = {"status": "error", "data": None, "error": "sandbox_restriction"}
        make_client(mock_client_cls, make_response(body, status_code=400))

        result = await self.gateway.create_booking_form("h-book-42", "ord-1")

        self.assertFalse(result.success)
        self.assertTrue(result.sandbox_mode)

    @patch("httpx.AsyncClient")
    async def test_booking_form_business_error(self, mock_client_cls):
        body = {"status": "error", "data": None, "error": "duplicate_reservation"}
        make_client(mock_client_cls, make_response(body))

        result = await self.gateway.create_booking_form("h-book-42", "ord-1")

        self.assertFalse(result.success)
        self.assertFalse(result.sandbox_mode)
        self.assertEqual(result.error, "duplicate_reservation")

    @patch("httpx.AsyncClient")
    async def test_start_booking_payload(self, mock_client_cls):
        mock_client = make_client(
            mock_client_cls, make_response({"status": "ok", "data": None, "error": None})
        )
        request = StartBookingRequest(
            user={"email": "ana@example.com", "phone": "+529981234567", "comment": "late arrival"},
            supplier_data={"first_name_original": "Ana", "last_name_original": "Lopez"},
            rooms=[{"guests": [{"first_name": "Ana", "last_name": "Lopez"}]}],
            payment_type={"type": "deposit", "amount": "450.00", "currency_code": "USD"},
        )

        await self.gateway.start_booking("ord-1", request)

        args, kwargs = mock_client.post.call_args
        self.assertTrue(args[0].endswith("/hotel/order/booking/finish/"))
        payload = kwargs["json"]
        self.assertEqual(payload["partner"]["partner_order_id"], "ord-1")
        self.assertEqual(payload["user"]["comment"], "late arrival")
        self.assertEqual(payload["payment_type"]["amount"], "450.00")

    @patch("httpx.AsyncClient")
    async def test_check_status(self, mock_client_cls):
        body = {
            "status": "ok",
            "data": {"order_id": 555, "partner_order_id": "ord-1", "percent": 100},
            "error": None,
        }
        make_client(mock_client_cls, make_response(body))

        result = await self.gateway.check_booking_status("ord-1")

        self.assertEqual(result.status, "ok")
        self.assertEqual(result.order_id, "555")
        self.assertEqual(result.percent, 100)

    @patch("httpx.AsyncClient")
    async def test_search_hotel_rates(self, mock_client_cls):
        rate = {"match_hash": "m-1", "room_name": "Standard Double Room"}
        body = {"status": "ok", "data": {"hotels": [{"id": "test_hotel", "rates": [rate]}]}}
        mock_client = make_client(mock_client_cls, make_response(body))

        rates = await self.gateway.search_hotel_rates(
            "8473727", date(2026, 3, 31), date(2026, 4, 2)
        )

        self.assertEqual(rates, [rate])
        _, kwargs = mock_client.post.call_args
        self.assertEqual(kwargs["json"]["hid"], 8473727)
        self.assertEqual(kwargs["json"]["checkin"], "2026-03-31")
        self.assertEqual(kwargs["json"]["guests"], [{"adults": 2, "children": []}])

    @patch("httpx.AsyncClient")
    async def test_rate_limit_backoff(self, mock_client_cls):
        limited = make_response({"error": "rate_limit"}, status_code=429)
        make_client(mock_client_cls, limited, limited, make_response(PREBOOK_OK))

        result = await self.gateway.prebook("m-deluxe-001")

        self.assertTrue(result.success)
        self.assertEqual(self.sleeps, [3.0, 6.0])

    @patch("httpx.AsyncClient")
    async def test_rate_limit_exhausted(self, mock_client_cls):
        limited = make_response({"error": "rate_limit"}, status_code=429)
        make_client(mock_client_cls, limited, limited, limited)

        with self.assertRaises(SupplierUnavailableError) as ctx:
            await self.gateway.prebook("m-deluxe-001")

        self.assertIn("rate limit", ctx.exception.message)
        # 429 responses are not counted as breaker failures
        self.assertEqual(self.breaker.fail_counter, 0)

    @patch("httpx.AsyncClient")
    async def test_server_error_raises_unavailable(self, mock_client_cls):
        make_client(mock_client_cls, make_response({}, status_code=503))

        with self.assertRaises(SupplierUnavailableError) as ctx:
            await self.gateway.check_booking_status("ord-1")

        self.assertEqual(ctx.exception.operation, "check_booking_status")
        self.assertEqual(self.breaker.fail_counter, 1)

    @patch("httpx.AsyncClient")
    async def test_timeout_raises_unavailable(self, mock_client_cls):
        make_client(mock_client_cls, httpx.ReadTimeout("read timed out"))

        with self.assertRaises(SupplierUnavailableError) as ctx:
            await self.gateway.prebook("m-deluxe-001")

        self.assertIn("timeout", ctx.exception.message)

    @patch("httpx.AsyncClient")
    async def test_open_circuit_short_circuits(self, mock_client_cls):
        mock_client = make_client(
            mock_client_cls,
            make_response({}, status_code=502),
            make_response({}, status_code=502),
        )
        for _ in range(2):
            with self.assertRaises(SupplierUnavailableError):
                await self.gateway.check_booking_status("ord-1")
        self.assertEqual(self.breaker.current_state, "open")

        with self.assertRaises(SupplierUnavailableError) as ctx:
            await self.gateway.check_booking_status("ord-1")

        self.assertIn("circuit breaker open", ctx.exception.message)
        self.assertEqual(mock_client.post.call_count, 2)


if __name__ == "__main__":
    unittest.main()
