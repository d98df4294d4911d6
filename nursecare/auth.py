import logging

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .database import get_db
from .models import Organization, StaffMember, User, UserRole
from .security_utils import verify_jwt_token

logger = logging.getLogger(__name__)

security = HTTPBearer()


def resolve_token_user(db: Session, token: str) -> User:
    """Resolve an access token to an active user or raise 401"""
    payload = verify_jwt_token(token)
    if not payload or "sub" not in payload:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid token subject") from None

    user = db.query(User).filter(User.id == user_id).first()
    if not user or not user.is_active:
        logger.warning(f"⚠️ Token for unknown or inactive user {user_id}")
        raise HTTPException(status_code=401, detail="User not found")

    return user


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the bearer access token to an active user"""
    return resolve_token_user(db, credentials.credentials)


def find_user_organization(db: Session, user: User):
    """
    Organization the user works in: the one they own first,
    otherwise the one they hold a role in. Returns None when neither exists.
    """
    owned = (
        db.query(Organization)
        .filter(Organization.owner_id == user.id)
        .order_by(Organization.id)
        .first()
    )
    if owned:
        return owned

    role = (
        db.query(UserRole)
        .filter(UserRole.user_id == user.id)
        .order_by(UserRole.id)
        .first()
    )
    if role:
        return db.query(Organization).filter(Organization.id == role.organization_id).first()
    return None


async def get_current_organization(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Organization:
    organization = find_user_organization(db, current_user)
    if not organization:
        raise HTTPException(status_code=404, detail="No organization found for this user")
    return organization


def get_user_staff_member(db: Session, user: User):
    """Staff record linked to the user, if any"""
    return (
        db.query(StaffMember)
        .filter(StaffMember.user_id == user.id, StaffMember.is_active.is_(True))
        .first()
    )


async def get_owned_organization(
    current_user: User = Depends(get_current_user),
    organization: Organization = Depends(get_current_organization),
) -> Organization:
    """Current organization, restricted to its owner"""
    if organization.owner_id != current_user.id:
        logger.warning(f"⚠️ User {current_user.id} denied owner action on organization {organization.id}")
        raise HTTPException(status_code=403, detail="Only the organization owner can do this")
    return organization
