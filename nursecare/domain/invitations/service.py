"""Invitation service - issue, validate and redeem onboarding invitations"""

import logging
import uuid
from datetime import datetime, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...config import FRONTEND_URL, INVITATION_EXPIRY_DAYS
from ...email_service import (
    EmailDeliveryError,
    send_client_invitation_email,
    send_staff_invitation_email,
)
from ...models import Organization, StaffMember, User, UserRole
from ...models_invitation import ClientInvitation, StaffInvitation
from ...security_utils import check_password_strength, create_jwt_token, hash_password_bcrypt
from ...services.realtime import publish_change
from ..clients.repository import ClientRepository
from .repository import InvitationRepository
from .schemas import (
    ClientInvitationCreate,
    ClientOnboardingData,
    OnboardingResult,
    StaffInvitationCreate,
    StaffOnboardingData,
)

logger = logging.getLogger(__name__)

DEFAULT_INVITER_NAME = "Your care team"


def invitation_expiry(now: Optional[datetime] = None) -> datetime:
    return (now or datetime.utcnow()) + timedelta(days=INVITATION_EXPIRY_DAYS)


def is_expired(invitation, now: Optional[datetime] = None) -> bool:
    return invitation.expires_at < (now or datetime.utcnow())


class InvitationService:
    """Service layer for client and staff invitations"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = InvitationRepository()
        self.clients = ClientRepository()

    # ------------------------------------------------------------------
    # Shared token checks
    # ------------------------------------------------------------------

    def _load(self, model, token: str):
        invitation = self.repo.get_by_token(self.db, model, token)
        if not invitation:
            raise HTTPException(status_code=404, detail={"valid": False, "error": "Invitation not found"})
        return invitation

    def _check_usable(self, invitation, persist_expiry: bool = False) -> None:
        """Reject accepted or expired invitations"""
        if invitation.status == "accepted":
            raise HTTPException(
                status_code=400, detail={"valid": False, "error": "This invitation has already been used"}
            )
        if invitation.status == "expired" or is_expired(invitation):
            if persist_expiry and invitation.status != "expired":
                invitation.status = "expired"
                self.db.commit()
            raise HTTPException(status_code=400, detail={"valid": False, "error": "This invitation has expired"})

    @staticmethod
    def _mark_accepted(invitation) -> None:
        invitation.status = "accepted"
        invitation.accepted_at = datetime.utcnow()

    def list_pending(self, organization: Organization) -> dict:
        return {
            "client_invitations": self.repo.get_pending(self.db, ClientInvitation, organization.id),
            "staff_invitations": self.repo.get_pending(self.db, StaffInvitation, organization.id),
        }

    # ------------------------------------------------------------------
    # Client invitations
    # ------------------------------------------------------------------

    async def send_client_invitation(
        self, data: ClientInvitationCreate, organization: Organization, user: User
    ) -> tuple[ClientInvitation, str]:
        """Create a 7-day invitation and email the onboarding link; nothing is kept if the email fails"""
        invitation = ClientInvitation(
            organization_id=organization.id,
            email=data.email,
            first_name=data.first_name,
            last_name=data.last_name,
            token=str(uuid.uuid4()),
            status="pending",
            expires_at=invitation_expiry(),
            invited_by=user.id,
            invited_by_name=user.full_name or DEFAULT_INVITER_NAME,
        )
        self.db.add(invitation)
        self.db.flush()

        onboarding_url = f"{FRONTEND_URL}/client/onboard?token={invitation.token}"
        client_name = " ".join(p for p in (data.first_name, data.last_name) if p) or "there"
        try:
            await send_client_invitation_email(
                to=data.email,
                client_name=client_name,
                organization_name=organization.name,
                invited_by_name=invitation.invited_by_name,
                onboarding_url=onboarding_url,
            )
        except EmailDeliveryError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to send client invitation to {data.email}: {e}")
            raise HTTPException(status_code=502, detail="Failed to send invitation email") from e

        self.db.commit()
        self.db.refresh(invitation)
        publish_change("client_invitations", "INSERT", invitation.id, organization_id=organization.id)
        logger.info(f"📨 Client invitation {invitation.id} sent to {data.email}")
        return invitation, onboarding_url

    def validate_client_invitation(self, token: str) -> ClientInvitation:
        invitation = self._load(ClientInvitation, token)
        self._check_usable(invitation)
        return invitation

    def complete_client_onboarding(self, token: str, data: ClientOnboardingData) -> OnboardingResult:
        """Create the client record and accept the invitation in one transaction"""
        invitation = self._load(ClientInvitation, token)
        self._check_usable(invitation)

        client_data = data.model_dump(exclude_unset=True)
        client_data["first_name"] = client_data.get("first_name") or invitation.first_name or ""
        client_data["last_name"] = client_data.get("last_name") or invitation.last_name or ""
        client_data["email"] = client_data.get("email") or invitation.email
        client_data["status"] = client_data.get("status") or "active"
        if not client_data["first_name"] or not client_data["last_name"]:
            raise HTTPException(status_code=400, detail="First and last name are required")

        try:
            client = self.clients.create_client(
                self.db,
                invitation.organization_id,
                commit=False,
                invitation_id=invitation.id,
                **client_data,
            )
            self._mark_accepted(invitation)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Client onboarding failed for invitation {invitation.id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to complete onboarding") from e

        publish_change("clients", "INSERT", client.id, organization_id=invitation.organization_id)
        logger.info(f"✅ Client {client.id} onboarded from invitation {invitation.id}")
        return OnboardingResult(client_id=client.id)

    def update_client_profile(self, token: str, data: ClientOnboardingData) -> OnboardingResult:
        """Apply profile details to the client already created for this invitation"""
        invitation = self._load(ClientInvitation, token)
        self._check_usable(invitation)

        client = self.clients.get_client_by_invitation(self.db, invitation.id)
        if not client:
            raise HTTPException(status_code=404, detail="Client not found for this invitation")

        self.clients.update_client(self.db, client, commit=False, **data.model_dump(exclude_unset=True))
        self._mark_accepted(invitation)
        self.db.commit()

        publish_change("clients", "UPDATE", client.id, organization_id=invitation.organization_id)
        return OnboardingResult(client_id=client.id)

    # ------------------------------------------------------------------
    # Staff invitations
    # ------------------------------------------------------------------

    async def send_staff_invitation(
        self, data: StaffInvitationCreate, organization: Organization, user: User
    ) -> tuple[StaffInvitation, str]:
        invitation = StaffInvitation(
            organization_id=organization.id,
            email=data.email,
            first_name=data.first_name,
            last_name=data.last_name,
            job_title=data.job_title,
            token=str(uuid.uuid4()),
            status="pending",
            expires_at=invitation_expiry(),
            invited_by=user.id,
            invited_by_name=user.full_name or DEFAULT_INVITER_NAME,
        )
        self.db.add(invitation)
        self.db.flush()

        base_url = (data.redirect_base_url or FRONTEND_URL).rstrip("/")
        onboarding_url = f"{base_url}/staff/onboard?token={invitation.token}"
        try:
            await send_staff_invitation_email(
                to=data.email,
                staff_name=f"{data.first_name} {data.last_name}",
                organization_name=organization.name,
                invited_by_name=invitation.invited_by_name,
                job_title=data.job_title,
                onboarding_url=onboarding_url,
            )
        except EmailDeliveryError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to send staff invitation to {data.email}: {e}")
            raise HTTPException(status_code=502, detail="Failed to send invitation email") from e

        self.db.commit()
        self.db.refresh(invitation)
        publish_change("staff_invitations", "INSERT", invitation.id, organization_id=organization.id)
        logger.info(f"📨 Staff invitation {invitation.id} sent to {data.email}")
        return invitation, onboarding_url

    def validate_staff_invitation(self, token: str) -> StaffInvitation:
        """Expired staff invitations are persisted as expired on first validation"""
        invitation = self._load(StaffInvitation, token)
        self._check_usable(invitation, persist_expiry=True)
        return invitation

    def complete_staff_onboarding(
        self, token: str, password: str, data: StaffOnboardingData
    ) -> OnboardingResult:
        """
        Create the staff account: user (role nurse), staff record, staff_nurse role,
        and accept the invitation. All four writes commit together or not at all.
        """
        invitation = self._load(StaffInvitation, token)
        self._check_usable(invitation, persist_expiry=True)

        strength = check_password_strength(password)
        if not strength["is_valid"]:
            raise HTTPException(status_code=400, detail="; ".join(strength["feedback"]))

        if self.db.query(User).filter(User.email == invitation.email).first():
            raise HTTPException(status_code=409, detail="An account with this email already exists")

        staff_data = data.model_dump(exclude_unset=True)
        first_name = staff_data.pop("first_name", None) or invitation.first_name
        last_name = staff_data.pop("last_name", None) or invitation.last_name
        staff_data.pop("email", None)
        staff_data.setdefault("job_title", invitation.job_title)

        try:
            user = User(
                email=invitation.email,
                password_hash=hash_password_bcrypt(password),
                first_name=first_name,
                last_name=last_name,
                phone=staff_data.get("phone"),
                role="nurse",
            )
            self.db.add(user)
            self.db.flush()

            staff = StaffMember(
                organization_id=invitation.organization_id,
                user_id=user.id,
                first_name=first_name,
                last_name=last_name,
                email=invitation.email,
                is_active=True,
                **staff_data,
            )
            self.db.add(staff)
            self.db.add(UserRole(user_id=user.id, organization_id=invitation.organization_id, role="staff_nurse"))
            self._mark_accepted(invitation)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Staff onboarding failed for invitation {invitation.id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to complete onboarding") from e

        publish_change("staff_members", "INSERT", staff.id, organization_id=invitation.organization_id)
        logger.info(f"✅ Staff member {staff.id} onboarded from invitation {invitation.id}")
        return OnboardingResult(
            staff_member_id=staff.id,
            user_id=user.id,
            access_token=create_jwt_token({"sub": str(user.id)}),
            token_type="bearer",
        )
