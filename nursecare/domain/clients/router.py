"""Client router - FastAPI endpoints for client operations"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_organization
from ...database import get_db
from ...models import Organization
from .schemas import ClientCreate, ClientResponse, ClientUpdate
from .service import ClientService

router = APIRouter(prefix="/clients", tags=["Clients"])


def get_client_service(db: Session = Depends(get_db)) -> ClientService:
    """Dependency injection for ClientService"""
    return ClientService(db)


@router.get("", response_model=list[ClientResponse])
async def get_clients(
    search: Optional[str] = Query(None),
    organization: Organization = Depends(get_current_organization),
    service: ClientService = Depends(get_client_service),
):
    """Get all clients of the organization, optionally filtered by name or email"""
    return service.get_clients(organization, search)


@router.get("/{client_id}", response_model=ClientResponse)
async def get_client(
    client_id: int,
    organization: Organization = Depends(get_current_organization),
    service: ClientService = Depends(get_client_service),
):
    return service.get_client(client_id, organization)


@router.post("", response_model=ClientResponse)
async def create_client(
    data: ClientCreate,
    organization: Organization = Depends(get_current_organization),
    service: ClientService = Depends(get_client_service),
):
    return service.create_client(data, organization)


@router.patch("/{client_id}", response_model=ClientResponse)
async def update_client(
    client_id: int,
    data: ClientUpdate,
    organization: Organization = Depends(get_current_organization),
    service: ClientService = Depends(get_client_service),
):
    return service.update_client(client_id, data, organization)
