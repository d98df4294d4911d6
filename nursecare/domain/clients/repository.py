"""Client repository - Database operations for clients"""

from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ...models import Client
from ...models_shift import StaffShift


class ClientRepository:
    """Repository for client database operations"""

    @staticmethod
    def get_clients(db: Session, organization_id: int, search: Optional[str] = None) -> list[Client]:
        """Get all clients for an organization, newest first"""
        query = db.query(Client).filter(Client.organization_id == organization_id)

        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(
                    Client.first_name.ilike(pattern),
                    Client.last_name.ilike(pattern),
                    Client.email.ilike(pattern),
                )
            )

        return query.order_by(Client.created_at.desc(), Client.id.desc()).all()

    @staticmethod
    def get_shift_counts(db: Session, client_ids: list[int]) -> dict[int, int]:
        """Number of non-cancelled shifts per client"""
        if not client_ids:
            return {}
        rows = (
            db.query(StaffShift.client_id, func.count(StaffShift.id))
            .filter(StaffShift.client_id.in_(client_ids), StaffShift.status != "cancelled")
            .group_by(StaffShift.client_id)
            .all()
        )
        return {client_id: count for client_id, count in rows}

    @staticmethod
    def get_client_by_id(db: Session, client_id: int, organization_id: int) -> Optional[Client]:
        """Get a specific client by ID"""
        return (
            db.query(Client)
            .filter(Client.id == client_id, Client.organization_id == organization_id)
            .first()
        )

    @staticmethod
    def get_client_by_invitation(db: Session, invitation_id: int) -> Optional[Client]:
        return db.query(Client).filter(Client.invitation_id == invitation_id).first()

    @staticmethod
    def create_client(db: Session, organization_id: int, commit: bool = True, **client_data) -> Client:
        """Create a new client; commit=False leaves the caller's transaction open"""
        client = Client(organization_id=organization_id, **client_data)
        db.add(client)
        if commit:
            db.commit()
            db.refresh(client)
        else:
            db.flush()
        return client

    @staticmethod
    def update_client(db: Session, client: Client, commit: bool = True, **updates) -> Client:
        """Update a client with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(client, key):
                setattr(client, key, value)

        if commit:
            db.commit()
            db.refresh(client)
        else:
            db.flush()
        return client
