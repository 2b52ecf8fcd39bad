import copy

from app.application.interfaces.invoice_repo import InvoiceRepo
from app.domain.entities.invoice import Invoice


class InMemoryInvoiceRepo(InvoiceRepo):
    def __init__(self) -> None:
        self.invoices: dict[str, Invoice] = {}

    async def create(self, invoice: Invoice) -> None:
        if any(i.reservation_id == invoice.reservation_id for i in self.invoices.values()):
            raise ValueError("Reservation already has an invoice")
        self.invoices[invoice.id] = copy.deepcopy(invoice)

    async def get_by_id(self, invoice_id: str) -> Invoice | None:
        stored = self.invoices.get(invoice_id)
        return copy.deepcopy(stored) if stored else None

    async def get_by_reservation(self, reservation_id: str) -> Invoice | None:
        for invoice in self.invoices.values():
            if invoice.reservation_id == reservation_id:
                return copy.deepcopy(invoice)
        return None
