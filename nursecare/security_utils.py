"""
Security Utilities
Password hashing, access tokens and input sanitization using industry-standard libraries
"""

import logging
import os
import re
import secrets
from datetime import datetime, timedelta
from typing import Any, Optional

# Input sanitization
import bleach
from bleach.css_sanitizer import CSSSanitizer
from jose import JWTError
from jose import jwt as jose_jwt

# Password hashing
from passlib.context import CryptContext

from .config import ACCESS_TOKEN_EXPIRE_MINUTES, SECRET_KEY

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


# ============================================================================
# PASSWORD SECURITY
# ============================================================================


def hash_password_bcrypt(password: str) -> str:
    """Hash password using bcrypt"""
    return pwd_context.hash(password)


def verify_password_bcrypt(plain_password: str, hashed_password: str) -> bool:
    """Verify password against bcrypt hash"""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except Exception as e:
        logger.error(f"Password verification error: {e}")
        return False


def check_password_strength(password: str) -> dict[str, Any]:
    """
    Check the minimum password rules applied at registration and staff onboarding

    Returns:
        dict with 'is_valid' (bool) and 'feedback' (list of problems)
    """
    feedback = []
    if len(password) < 8:
        feedback.append("Password must be at least 8 characters long")
    if not re.search(r"[A-Za-z]", password):
        feedback.append("Add letters")
    if not re.search(r"\d", password):
        feedback.append("Add numbers")

    return {"is_valid": not feedback, "feedback": feedback}


# ============================================================================
# TOKEN GENERATION
# ============================================================================


def generate_secure_token(length: int = 32) -> str:
    """Generate a cryptographically secure random token"""
    return secrets.token_urlsafe(length)


def create_jwt_token(data: dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed JWT access token

    Args:
        data: Claims to encode (must include 'sub')
        expires_delta: Token lifetime (default ACCESS_TOKEN_EXPIRE_MINUTES)
    """
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire, "iat": datetime.utcnow()})
    return jose_jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def verify_jwt_token(token: str) -> Optional[dict[str, Any]]:
    """
    Verify and decode JWT token

    Returns:
        Decoded payload or None if invalid
    """
    try:
        payload = jose_jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        return payload
    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        return None


# ============================================================================
# INPUT SANITIZATION
# ============================================================================


def sanitize_html(html_content: str, allowed_tags: Optional[list] = None) -> str:
    """
    Sanitize user-authored rich text (notes, messages) to prevent XSS attacks

    Args:
        html_content: Raw HTML content
        allowed_tags: List of allowed HTML tags (default: safe subset)
    """
    if html_content is None:
        return html_content

    if allowed_tags is None:
        allowed_tags = ["p", "br", "strong", "em", "u", "a", "ul", "ol", "li", "blockquote"]

    allowed_attributes = {"a": ["href", "title", "target"]}

    css_sanitizer = CSSSanitizer(allowed_css_properties=["color", "font-weight"])

    return bleach.clean(
        html_content,
        tags=allowed_tags,
        attributes=allowed_attributes,
        css_sanitizer=css_sanitizer,
        strip=True,
    )


def sanitize_filename(filename: str) -> str:
    """
    Sanitize filename to prevent directory traversal and other attacks
    """
    # Remove path components
    filename = os.path.basename(filename or "")

    # Remove or replace dangerous characters
    filename = re.sub(r"[^\w\s\-\.]", "", filename)

    filename = filename.strip(". ")

    if len(filename) > 255:
        name, ext = os.path.splitext(filename)
        filename = name[: 255 - len(ext)] + ext

    if not filename:
        filename = f"file_{generate_secure_token(8)}"

    return filename
