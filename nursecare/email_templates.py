"""
MJML Email Templates
All email templates using MJML for responsive, cross-client compatibility
"""

from typing import Optional

# App theme colors - Blue/Slate color scheme
THEME = {
    "primary": "#2563eb",
    "primary_dark": "#1d4ed8",
    "primary_light": "#dbeafe",
    "background": "#f8fafc",
    "card_bg": "#ffffff",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
}


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section padding="20px 0">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="8px"
              padding="18px 40px"
              font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="-apple-system, BlinkMacSystemFont, 'Segoe UI', 'Helvetica Neue', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="{THEME['card_bg']}" padding="40px 40px 48px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="0 0 16px 0">
              {title}
            </mj-text>

            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="#94a3b8" padding="0">
              Sent by NurseCare on behalf of your care provider.
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def client_invitation_template(
    client_name: str, organization_name: str, invited_by_name: str, onboarding_url: str
) -> str:
    """Invitation for a prospective client to complete their profile"""
    content = f"""
    <mj-text>
      Hi {client_name},
    </mj-text>

    <mj-text>
      {invited_by_name} has invited you to join <strong>{organization_name}</strong>.
      Please complete your profile so your care team can get everything ready for you.
    </mj-text>

    <mj-text font-size="14px" color="{THEME['text_muted']}">
      This invitation link expires in 7 days.
    </mj-text>
    """
    return get_base_template(
        title=f"You're invited to {organization_name}",
        preview_text=f"Complete your profile with {organization_name}",
        content_sections=content,
        cta_url=onboarding_url,
        cta_label="Complete Your Profile",
    )


def staff_invitation_template(
    staff_name: str,
    organization_name: str,
    invited_by_name: str,
    job_title: str,
    onboarding_url: str,
) -> str:
    """Invitation for a new staff member to set up their account"""
    content = f"""
    <mj-text>
      Hi {staff_name},
    </mj-text>

    <mj-text>
      {invited_by_name} has invited you to join <strong>{organization_name}</strong> as
      <strong>{job_title}</strong>.
    </mj-text>

    <mj-text>
      Set up your account to see your shifts, confirm assignments and keep care logs.
    </mj-text>

    <mj-text font-size="14px" color="{THEME['text_muted']}">
      This invitation link expires in 7 days.
    </mj-text>
    """
    return get_base_template(
        title=f"Join {organization_name}",
        preview_text=f"You've been invited to join {organization_name} as {job_title}",
        content_sections=content,
        cta_url=onboarding_url,
        cta_label="Set Up Your Account",
    )


def invoice_template(
    client_name: str,
    organization_name: str,
    invoice_number: str,
    amount: float,
    total_hours: float,
    due_date: str = "",
    currency: str = "USD",
) -> str:
    """Invoice notification for client"""
    due_date_section = ""
    if due_date:
        due_date_section = f"<br/>Due Date: {due_date}"

    content = f"""
    <mj-text>
      Hi {client_name},
    </mj-text>

    <mj-text>
      Please find your invoice from <strong>{organization_name}</strong> below.
    </mj-text>

    <mj-text align="center" font-size="32px" font-weight="700" color="{THEME['text_primary']}" padding="20px 0">
      {currency} {amount:,.2f}
    </mj-text>

    <mj-text font-size="14px" color="{THEME['text_muted']}">
      Invoice: {invoice_number}<br/>
      Total Hours: {total_hours:g}{due_date_section}
    </mj-text>
    """
    return get_base_template(
        title=f"Invoice {invoice_number}",
        preview_text=f"Invoice {invoice_number} from {organization_name}",
        content_sections=content,
    )


def notification_email_template(title: str, message: str, link: Optional[str] = None) -> str:
    """Generic email copy of an in-app notification"""
    content = f"""
    <mj-text>
      {message}
    </mj-text>
    """
    return get_base_template(
        title=title,
        preview_text=title,
        content_sections=content,
        cta_url=link,
        cta_label="Open NurseCare" if link else None,
    )
