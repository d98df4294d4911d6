"""Invoice router - FastAPI endpoints for invoices"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_organization, get_current_user, get_owned_organization
from ...database import get_db
from ...models import Organization, User
from .schemas import InvoiceDetailResponse, InvoiceGenerate, InvoiceListResponse, InvoiceStatusUpdate
from .service import InvoiceService, to_invoice_detail

router = APIRouter(prefix="/invoices", tags=["Invoices"])


def get_invoice_service(db: Session = Depends(get_db)) -> InvoiceService:
    """Dependency injection for InvoiceService"""
    return InvoiceService(db)


@router.get("", response_model=InvoiceListResponse)
async def list_invoices(
    status: Optional[str] = Query(None),
    organization: Organization = Depends(get_current_organization),
    service: InvoiceService = Depends(get_invoice_service),
):
    """Invoices newest first with pending, paid-this-month and overdue stats"""
    return service.get_invoices(organization, status)


@router.post("/generate", response_model=InvoiceDetailResponse)
async def generate_invoice(
    data: InvoiceGenerate,
    current_user: User = Depends(get_current_user),
    organization: Organization = Depends(get_owned_organization),
    service: InvoiceService = Depends(get_invoice_service),
):
    """Generate an invoice from the client's completed shifts in the billing period"""
    return to_invoice_detail(service.generate_invoice(data, organization, current_user))


@router.get("/{invoice_id}", response_model=InvoiceDetailResponse)
async def get_invoice(
    invoice_id: int,
    organization: Organization = Depends(get_current_organization),
    service: InvoiceService = Depends(get_invoice_service),
):
    return to_invoice_detail(service.get_invoice(invoice_id, organization))


@router.patch("/{invoice_id}/status", response_model=InvoiceDetailResponse)
async def update_invoice_status(
    invoice_id: int,
    data: InvoiceStatusUpdate,
    organization: Organization = Depends(get_owned_organization),
    service: InvoiceService = Depends(get_invoice_service),
):
    return to_invoice_detail(service.update_status(invoice_id, data.status, organization))


@router.post("/{invoice_id}/send", response_model=InvoiceDetailResponse)
async def send_invoice(
    invoice_id: int,
    organization: Organization = Depends(get_owned_organization),
    service: InvoiceService = Depends(get_invoice_service),
):
    """Email the invoice to the client and mark it as sent"""
    invoice = await service.send_invoice(invoice_id, organization)
    return to_invoice_detail(invoice)
