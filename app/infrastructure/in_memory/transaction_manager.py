from contextlib import asynccontextmanager

from app.application.interfaces.transaction_manager import TransactionManager


class NoopTransactionManager(TransactionManager):
    """No real transaction; counts units of work so tests can assert on them."""

    def __init__(self) -> None:
        self.committed = 0
        self.rolled_back = 0

    @asynccontextmanager
    async def start(self):
        try:
            yield
        except Exception:
            self.rolled_back += 1
            raise
        self.committed += 1
