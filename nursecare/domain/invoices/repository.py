"""Invoice repository - Database operations for invoices"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models_invoice import Invoice


class InvoiceRepository:
    """Repository for invoice database operations"""

    @staticmethod
    def get_invoices(db: Session, organization_id: int, status: Optional[str] = None) -> list[Invoice]:
        query = (
            db.query(Invoice)
            .options(joinedload(Invoice.client), joinedload(Invoice.line_items))
            .filter(Invoice.organization_id == organization_id)
        )
        if status:
            query = query.filter(Invoice.status == status)
        return query.order_by(Invoice.created_at.desc(), Invoice.id.desc()).all()

    @staticmethod
    def get_invoice_by_id(db: Session, invoice_id: int, organization_id: int) -> Optional[Invoice]:
        return (
            db.query(Invoice)
            .options(joinedload(Invoice.client), joinedload(Invoice.line_items))
            .filter(Invoice.id == invoice_id, Invoice.organization_id == organization_id)
            .first()
        )

    @staticmethod
    def invoice_number_exists(db: Session, invoice_number: str) -> bool:
        return db.query(Invoice.id).filter(Invoice.invoice_number == invoice_number).first() is not None
