from app.domain.entities.invoice import Invoice


class InvoiceRepo:
    async def create(self, invoice: Invoice) -> None:
        raise NotImplementedError

    async def get_by_id(self, invoice_id: str) -> Invoice | None:
        raise NotImplementedError

    async def get_by_reservation(self, reservation_id: str) -> Invoice | None:
        raise NotImplementedError
