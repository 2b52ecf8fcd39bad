from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces.invoice_repo import InvoiceRepo
from app.domain.entities.invoice import Invoice, InvoiceItem
from app.infrastructure.db.tables import invoices


def _aware(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _from_row(row) -> Invoice:
    return Invoice(
        id=row["id"],
        invoice_number=row["invoice_number"],
        reservation_id=row["reservation_id"],
        user_id=row["user_id"],
        client_name=row["client_name"] or "",
        client_email=row["client_email"] or "",
        client_phone=row["client_phone"] or "",
        items=[
            InvoiceItem(
                description=item["description"],
                quantity=item["quantity"],
                unit_price=Decimal(item["unit_price"]),
                total=Decimal(item["total"]),
            )
            for item in row["items"] or []
        ],
        subtotal=Decimal(str(row["subtotal"])),
        tax=Decimal(str(row["tax"])),
        discount=Decimal(str(row["discount"])),
        total=Decimal(str(row["total"])),
        currency=row["currency"],
        status=row["status"],
        due_date=_aware(row["due_date"]),
        created_at=_aware(row["created_at"]),
    )


class InvoiceRepoSQL(InvoiceRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, invoice: Invoice) -> None:
        stmt = insert(invoices).values(
            id=invoice.id,
            invoice_number=invoice.invoice_number,
            reservation_id=invoice.reservation_id,
            user_id=invoice.user_id,
            client_name=invoice.client_name,
            client_email=invoice.client_email,
            client_phone=invoice.client_phone,
            # JSON column: amounts kept as strings to preserve cents
            items=[
                {
                    "description": item.description,
                    "quantity": item.quantity,
                    "unit_price": str(item.unit_price),
                    "total": str(item.total),
                }
                for item in invoice.items
            ],
            subtotal=invoice.subtotal,
            tax=invoice.tax,
            discount=invoice.discount,
            total=invoice.total,
            currency=invoice.currency,
            status=invoice.status,
            due_date=invoice.due_date,
            created_at=invoice.created_at,
        )
        await self._session.execute(stmt)

    async def get_by_id(self, invoice_id: str) -> Invoice | None:
        stmt = select(invoices).where(invoices.c.id == invoice_id).limit(1)
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        return _from_row(row) if row else None

    async def get_by_reservation(self, reservation_id: str) -> Invoice | None:
        stmt = select(invoices).where(invoices.c.reservation_id == reservation_id).limit(1)
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        return _from_row(row) if row else None
