"""
Email Service using Resend
Provides email functionality using MJML templates for responsive design
"""

import logging
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from .config import EMAIL_FROM_ADDRESS, RESEND_API_KEY
from .email_templates import (
    client_invitation_template,
    invoice_template,
    notification_email_template,
    staff_invitation_template,
)

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


class EmailDeliveryError(Exception):
    """Raised when an email could not be handed to the provider"""


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
        if isinstance(result, dict):
            if result.get("errors"):
                logger.warning(f"MJML compilation warnings: {result['errors']}")
            return result.get("html", "")
        html = getattr(result, "html", None)
        if html is not None:
            return html
        return str(result)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise EmailDeliveryError(f"Failed to compile MJML template: {str(e)}") from e


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email through Resend

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (will be compiled to HTML)
        from_address: Optional custom from address

    Returns:
        Send response dict
    """
    if not RESEND_API_KEY:
        logger.error("❌ No email service configured - RESEND_API_KEY missing")
        raise EmailDeliveryError("Email service not configured")

    html_content = compile_mjml_to_html(mjml_content)
    recipients = [to] if isinstance(to, str) else to

    try:
        response = resend.Emails.send(
            {
                "from": from_address or EMAIL_FROM_ADDRESS,
                "to": recipients,
                "subject": subject,
                "html": html_content,
            }
        )
        logger.info(f"✅ Email sent via Resend to {recipients}: {subject}")
        return response
    except Exception as e:
        logger.error(f"❌ Resend failed to send '{subject}' to {recipients}: {e}")
        raise EmailDeliveryError(str(e)) from e


async def send_client_invitation_email(
    to: str, client_name: str, organization_name: str, invited_by_name: str, onboarding_url: str
) -> dict:
    mjml_content = client_invitation_template(
        client_name, organization_name, invited_by_name, onboarding_url
    )
    return await send_email(
        to=to,
        subject=f"You're invited to join {organization_name}",
        mjml_content=mjml_content,
    )


async def send_staff_invitation_email(
    to: str,
    staff_name: str,
    organization_name: str,
    invited_by_name: str,
    job_title: str,
    onboarding_url: str,
) -> dict:
    mjml_content = staff_invitation_template(
        staff_name, organization_name, invited_by_name, job_title, onboarding_url
    )
    return await send_email(
        to=to,
        subject=f"Join {organization_name} on NurseCare",
        mjml_content=mjml_content,
    )


async def send_invoice_email(
    to: str,
    client_name: str,
    organization_name: str,
    invoice_number: str,
    amount: float,
    total_hours: float,
    due_date: str = "",
    currency: str = "USD",
) -> dict:
    """Send invoice details to the client"""
    mjml_content = invoice_template(
        client_name=client_name,
        organization_name=organization_name,
        invoice_number=invoice_number,
        amount=amount,
        total_hours=total_hours,
        due_date=due_date,
        currency=currency,
    )
    return await send_email(
        to=to,
        subject=f"Invoice {invoice_number} from {organization_name}",
        mjml_content=mjml_content,
    )


async def send_notification_email(
    to: str, title: str, message: str, link: Optional[str] = None
) -> dict:
    return await send_email(
        to=to, subject=title, mjml_content=notification_email_template(title, message, link)
    )
