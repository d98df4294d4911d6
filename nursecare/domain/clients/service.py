"""Client service - Business logic for client operations"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Client, Organization
from ...services.realtime import publish_change
from .repository import ClientRepository
from .schemas import ClientCreate, ClientResponse, ClientUpdate

logger = logging.getLogger(__name__)


class ClientService:
    """Service layer for client business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ClientRepository()

    def get_clients(self, organization: Organization, search: Optional[str] = None) -> list[ClientResponse]:
        """Clients of the organization with their shift counts"""
        clients = self.repo.get_clients(self.db, organization.id, search)
        counts = self.repo.get_shift_counts(self.db, [c.id for c in clients])
        return [
            ClientResponse.model_validate(c).model_copy(update={"shift_count": counts.get(c.id, 0)})
            for c in clients
        ]

    def get_client(self, client_id: int, organization: Organization) -> Client:
        """Get a specific client"""
        client = self.repo.get_client_by_id(self.db, client_id, organization.id)
        if not client:
            raise HTTPException(status_code=404, detail="Client not found")
        return client

    def create_client(self, data: ClientCreate, organization: Organization) -> Client:
        logger.info(f"📥 Creating client for organization {organization.id}")
        client_data = data.model_dump()
        client_data["status"] = client_data.get("status") or "active"
        client = self.repo.create_client(self.db, organization.id, **client_data)
        publish_change("clients", "INSERT", client.id, organization_id=organization.id)
        return client

    def update_client(self, client_id: int, data: ClientUpdate, organization: Organization) -> Client:
        client = self.get_client(client_id, organization)
        client = self.repo.update_client(self.db, client, **data.model_dump(exclude_unset=True))
        publish_change("clients", "UPDATE", client.id, organization_id=organization.id)
        return client
