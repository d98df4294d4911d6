"""Invitation router - send (authenticated) and redeem (public, token based) invitations"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_organization, get_current_user
from ...database import get_db
from ...models import Organization, User
from .schemas import (
    ClientInvitationCreate,
    ClientOnboardingComplete,
    ClientProfileUpdate,
    InvitationResponse,
    InvitationSent,
    InvitationValidation,
    OnboardingResult,
    StaffInvitationCreate,
    StaffOnboardingComplete,
)
from .service import InvitationService

router = APIRouter(prefix="/invitations", tags=["Invitations"])


def get_invitation_service(db: Session = Depends(get_db)) -> InvitationService:
    """Dependency injection for InvitationService"""
    return InvitationService(db)


def to_validation(invitation) -> InvitationValidation:
    return InvitationValidation(
        valid=True,
        invitation=InvitationResponse.model_validate(invitation),
        organization_name=invitation.organization.name if invitation.organization else None,
    )


@router.get("")
async def list_pending_invitations(
    organization: Organization = Depends(get_current_organization),
    service: InvitationService = Depends(get_invitation_service),
):
    pending = service.list_pending(organization)
    return {
        key: [InvitationResponse.model_validate(i) for i in invitations]
        for key, invitations in pending.items()
    }


# ============================================================================
# CLIENT INVITATIONS
# ============================================================================


@router.post("/clients", response_model=InvitationSent)
async def send_client_invitation(
    data: ClientInvitationCreate,
    current_user: User = Depends(get_current_user),
    organization: Organization = Depends(get_current_organization),
    service: InvitationService = Depends(get_invitation_service),
):
    invitation, url = await service.send_client_invitation(data, organization, current_user)
    return InvitationSent(invitation=InvitationResponse.model_validate(invitation), onboarding_url=url)


@router.get("/clients/validate", response_model=InvitationValidation)
async def validate_client_invitation(
    token: str = Query(...),
    service: InvitationService = Depends(get_invitation_service),
):
    return to_validation(service.validate_client_invitation(token))


@router.post("/clients/complete", response_model=OnboardingResult)
async def complete_client_onboarding(
    data: ClientOnboardingComplete,
    service: InvitationService = Depends(get_invitation_service),
):
    return service.complete_client_onboarding(data.token, data.client_data)


@router.post("/clients/update-profile", response_model=OnboardingResult)
async def update_client_profile(
    data: ClientProfileUpdate,
    service: InvitationService = Depends(get_invitation_service),
):
    return service.update_client_profile(data.token, data.updates)


# ============================================================================
# STAFF INVITATIONS
# ============================================================================


@router.post("/staff", response_model=InvitationSent)
async def send_staff_invitation(
    data: StaffInvitationCreate,
    current_user: User = Depends(get_current_user),
    organization: Organization = Depends(get_current_organization),
    service: InvitationService = Depends(get_invitation_service),
):
    invitation, url = await service.send_staff_invitation(data, organization, current_user)
    return InvitationSent(invitation=InvitationResponse.model_validate(invitation), onboarding_url=url)


@router.get("/staff/validate", response_model=InvitationValidation)
async def validate_staff_invitation(
    token: str = Query(...),
    service: InvitationService = Depends(get_invitation_service),
):
    return to_validation(service.validate_staff_invitation(token))


@router.post("/staff/complete", response_model=OnboardingResult)
async def complete_staff_onboarding(
    data: StaffOnboardingComplete,
    service: InvitationService = Depends(get_invitation_service),
):
    """Create the staff account from an invitation and return an access token"""
    return service.complete_staff_onboarding(data.token, data.password, data.staff_data)
