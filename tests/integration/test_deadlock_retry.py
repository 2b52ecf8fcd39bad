"""
Retry automático de conflictos de bloqueo en escrituras.

- Detecta errores MySQL 1213 (Deadlock), 1205 (Lock wait timeout) y
  "database is locked" de SQLite
- Reintenta con exponential backoff
- Logging en cada retry
- Se rinde después de max_attempts
"""

from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from app.infrastructure.db.retry import is_deadlock_error, retry_on_deadlock


def deadlock(code: str = "1213", text: str = "Deadlock found") -> OperationalError:
    return OperationalError(
        "statement",
        "params",
        f"(asyncmy.errors.OperationalError) ({code}, '{text}')",
        connection_invalidated=False,
    )


class TestDeadlockDetection:
    def test_detect_mysql_deadlock_error_1213(self):
        assert is_deadlock_error(deadlock("1213", "Deadlock found when trying to get lock"))

    def test_detect_mysql_lock_timeout_error_1205(self):
        assert is_deadlock_error(deadlock("1205", "Lock wait timeout exceeded"))

    def test_detect_sqlite_locked_database(self):
        error = OperationalError(
            "INSERT INTO booking_sessions", {}, "database is locked", connection_invalidated=False
        )
        assert is_deadlock_error(error)

    def test_ignore_non_deadlock_errors(self):
        assert not is_deadlock_error(Exception("Generic error"))
        assert not is_deadlock_error(deadlock("2013", "Lost connection to MySQL server"))
        # El marcador sólo cuenta en errores de base de datos
        assert not is_deadlock_error(ValueError("1213"))


class TestRetryLogic:
    async def test_retry_succeeds_on_first_attempt(self):
        call_count = 0

        async def successful_func():
            nonlocal call_count
            call_count += 1
            return "success"

        result = await retry_on_deadlock(successful_func, max_attempts=3)

        assert result == "success"
        assert call_count == 1

    async def test_retry_on_deadlock_until_success(self):
        call_count = 0

        async def func_fails_twice_then_succeeds():
            nonlocal call_count
            call_count += 1
            if call_count <= 2:
                raise deadlock()
            return "success_after_retries"

        result = await retry_on_deadlock(
            func_fails_twice_then_succeeds, max_attempts=3, base_delay=0.01
        )

        assert result == "success_after_retries"
        assert call_count == 3

    async def test_retry_fails_after_max_attempts(self):
        call_count = 0

        async def always_fails():
            nonlocal call_count
            call_count += 1
            raise deadlock()

        with pytest.raises(OperationalError):
            await retry_on_deadlock(always_fails, max_attempts=3, base_delay=0.01)

        assert call_count == 3

    async def test_non_deadlock_error_not_retried(self):
        call_count = 0

        async def raises_non_deadlock_error():
            nonlocal call_count
            call_count += 1
            raise ValueError("Not a deadlock")

        with pytest.raises(ValueError, match="Not a deadlock"):
            await retry_on_deadlock(raises_non_deadlock_error, max_attempts=3)

        assert call_count == 1

    async def test_exponential_backoff(self):
        delays = []

        async def record_sleep(seconds):
            delays.append(seconds)

        async def always_fails():
            raise deadlock()

        with patch("app.infrastructure.db.retry.asyncio.sleep", record_sleep):
            with pytest.raises(OperationalError):
                await retry_on_deadlock(always_fails, max_attempts=4, base_delay=0.1)

        assert delays == pytest.approx([0.1, 0.2, 0.4])

    async def test_logging_on_retry(self):
        with patch("app.infrastructure.db.retry.logger") as mock_logger:
            call_count = 0

            async def func_fails_once():
                nonlocal call_count
                call_count += 1
                if call_count == 1:
                    raise deadlock()
                return "success"

            await retry_on_deadlock(func_fails_once, max_attempts=3, base_delay=0.01)

            assert mock_logger.warning.called
            assert "deadlock" in mock_logger.warning.call_args[0][0].lower()
