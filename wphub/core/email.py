"""Outgoing email via Resend.

Templates are pre-compiled (CSS inlined, HTML minified) by
``scripts/compile_emails.py``; only the compiled files are rendered here.
"""

import logging
from urllib.parse import parse_qs, urlencode, urlparse

import resend

from wphub.core.constants import JinjaCompiledEmailTemplatesEnv
from wphub.core.settings import get_settings

logger = logging.getLogger(__name__)


def _render_template(template_name: str, **context: str) -> str:
    """Render a pre-compiled email template.

    Args:
        template_name: Name of the compiled template file
        **context: Template variables

    Returns:
        Rendered HTML
    """
    template = JinjaCompiledEmailTemplatesEnv.get_template(template_name)
    return template.render(**context)


def _from_address() -> str:
    return f"WP Plugin Hub <noreply@{get_settings().app_domain}>"


def init_resend() -> None:
    """Initialize Resend with API key if available."""
    settings = get_settings()
    if not settings.resend_api_key:
        logger.warning("RESEND_API_KEY not set, outgoing email is disabled")
        return
    resend.api_key = settings.resend_api_key


def _extract_oob_code(firebase_link: str) -> str | None:
    """Extract oobCode from a Firebase action link.

    https://app.firebaseapp.com/__/auth/action?mode=resetPassword&oobCode=ABC123
    """
    params = parse_qs(urlparse(firebase_link).query)
    oob_codes = params.get("oobCode", [])
    return oob_codes[0] if oob_codes else None


def send_password_reset_email(to_email: str, firebase_reset_link: str) -> None:
    """Send password reset email via Resend.

    Args:
        to_email: Recipient email address
        firebase_reset_link: Firebase password reset link (oobCode will be extracted)
    """
    settings = get_settings()
    oob_code = _extract_oob_code(firebase_reset_link)
    reset_url = f"{settings.client_url}/auth/reset-password?" + urlencode(
        {"oobCode": oob_code or ""}
    )

    resend.Emails.send(
        {
            "from": _from_address(),
            "to": to_email,
            "subject": "WP Plugin Hub - Reset Your Password",
            "html": _render_template("password-reset.html", reset_url=reset_url),
        }
    )


def send_team_invite_email(
    *, to_email: str, team_name: str, invited_by: str, team_role: str
) -> None:
    """Send a team invitation email via Resend.

    The link opens the teams page, where pending invites for the signed-in
    email address are listed with accept/decline actions.
    """
    settings = get_settings()
    invite_url = f"{settings.client_url}/teams?" + urlencode({"invite": "pending"})

    resend.Emails.send(
        {
            "from": _from_address(),
            "to": to_email,
            "subject": f"WP Plugin Hub - You have been invited to {team_name}",
            "html": _render_template(
                "team-invite.html",
                team_name=team_name,
                invited_by=invited_by,
                team_role=team_role,
                invite_url=invite_url,
            ),
        }
    )
