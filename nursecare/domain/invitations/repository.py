"""Invitation repository - Database operations for client and staff invitations"""

from typing import Union

from sqlalchemy.orm import Session, joinedload

from ...models_invitation import ClientInvitation, StaffInvitation

InvitationModel = Union[type[ClientInvitation], type[StaffInvitation]]


class InvitationRepository:
    """Repository for invitation database operations"""

    @staticmethod
    def get_by_token(db: Session, model: InvitationModel, token: str):
        return (
            db.query(model)
            .options(joinedload(model.organization))
            .filter(model.token == token)
            .first()
        )

    @staticmethod
    def get_pending(db: Session, model: InvitationModel, organization_id: int) -> list:
        return (
            db.query(model)
            .filter(model.organization_id == organization_id, model.status == "pending")
            .order_by(model.created_at.desc(), model.id.desc())
            .all()
        )

