"""Transactional email through the Resend HTTP API."""

from html import escape
from typing import Any, Dict, List, Optional, Tuple

import httpx

from b4_platform.core.config import settings
from b4_platform.core.exceptions import APIClientError, APITimeoutError, ConfigurationError
from b4_platform.utils.logging import get_logger

LOGGER = get_logger(__name__)

OPPORTUNITY_APPROVED = "opportunity_approved"
OPPORTUNITY_REJECTED = "opportunity_rejected"
ENTREPRENEUR_STEP_COMPLETE = "entrepreneur_step_complete"
COBUILDER_APPROVED = "cobuilder_approved"
ACCOUNT_DELETION_CODE = "account_deletion_code"

_FOOTER = '<p style="text-align:center;color:#94a3b8;font-size:12px;">B4 Platform - Building the Future Together</p>'


def _layout(heading: str, paragraphs: List[str], cta: Optional[Tuple[str, str]] = None) -> str:
    body = "".join(f"<p>{paragraph}</p>" for paragraph in paragraphs)
    button = ""
    if cta:
        label, href = cta
        button = (
            f'<p style="text-align:center;"><a href="{href}" '
            f'style="background:#0d9488;color:white;padding:14px 28px;border-radius:8px;'
            f'text-decoration:none;font-weight:600;">{label}</a></p>'
        )
    return (
        '<div style="font-family:sans-serif;max-width:600px;margin:0 auto;">'
        f"<h1>{heading}</h1>{body}{button}</div>{_FOOTER}"
    )


def render_email(email_type: str, user_name: str, data: Optional[Dict[str, Any]] = None) -> Tuple[str, str]:
    """Build the subject and HTML body of a notification email.

    Returns:
        (subject, html)
    """
    data = data or {}
    name = escape(user_name or "there")
    idea_title = escape(str(data.get("idea_title") or "Your Idea"))
    profile_url = f"{settings.platform.app_base_url}/profile"

    if email_type == OPPORTUNITY_APPROVED:
        return "🎉 Your Startup Opportunity Has Been Approved!", _layout(
            f"Congratulations, {name}! 🚀",
            [
                f'Great news! Your startup opportunity <strong>"{idea_title}"</strong> has been approved by our admin team.',
                "You now have access to the <strong>Entrepreneur Journey</strong>, a guided process from vision to execution.",
            ],
            ("Start Your Journey", profile_url),
        )

    if email_type == OPPORTUNITY_REJECTED:
        return "Update on Your Startup Opportunity", _layout(
            f"Hi {name},",
            [
                f'Thank you for submitting your startup opportunity <strong>"{idea_title}"</strong>.',
                "After careful review, our admin team has requested some revisions.",
                "Please contact our admin team for more details on how to improve your submission.",
            ],
        )

    if email_type == ENTREPRENEUR_STEP_COMPLETE:
        step_number = data.get("step_number")
        step_name = escape(str(data.get("step_name") or ""))
        return f"🎯 Step {step_number} Complete - {step_name}", _layout(
            f"Great Progress, {name}! 🎯",
            [
                f"You've completed <strong>Step {step_number}: {step_name}</strong> of your entrepreneur journey!",
                "Keep up the momentum and continue to your next step.",
            ],
            ("Continue Journey", profile_url),
        )

    if email_type == COBUILDER_APPROVED:
        return "🎉 You're Now an Approved Co-Builder!", _layout(
            f"Welcome to the Community, {name}! 🎉",
            [
                "Congratulations! You've been approved as a Co-Builder on B4 Platform.",
                "You can now browse co-build opportunities, create your own startup ideas and request an entrepreneur review.",
            ],
            ("View Your Dashboard", profile_url),
        )

    if email_type == ACCOUNT_DELETION_CODE:
        code = escape(str(data.get("code", "")))
        ttl = data.get("ttl_minutes", settings.platform.deletion_code_ttl_minutes)
        return "Account Deletion Confirmation Code", _layout(
            "Account Deletion Request",
            [
                "You requested to permanently delete your B4 Platform account.",
                f'Your confirmation code is: <strong style="font-size:32px;letter-spacing:8px;">{code}</strong>',
                f"This code expires in {ttl} minutes.",
                "Warning: This action is irreversible. All your data will be permanently deleted.",
                "If you did not request this, please ignore this email and your account will remain safe.",
            ],
        )

    return "B4 Platform Update", "<p>You have an update from B4 Platform.</p>"


class EmailService:
    """Sends emails through Resend."""

    def __init__(self):
        self.api_key = settings.email.resend_api_key
        self.api_url = settings.email.resend_api_url
        self.sender = settings.email.sender

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def send(self, to: str, subject: str, html: str) -> Dict[str, Any]:
        """Send one email.

        Raises:
            ConfigurationError: If RESEND_API_KEY is not set
            APITimeoutError: If Resend does not answer in time
            APIClientError: If Resend rejects the request
        """
        if not self.is_configured:
            raise ConfigurationError("Email service not configured")

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.api_url,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json={"from": self.sender, "to": [to], "subject": subject, "html": html},
                    timeout=settings.http_timeout,
                )
        except httpx.TimeoutException as e:
            LOGGER.error(f"Timed out sending email to {to}", exc_info=True)
            raise APITimeoutError("Email provider timed out", original_error=e)
        except httpx.HTTPError as e:
            LOGGER.error(f"Error sending email to {to}: {str(e)}", exc_info=True)
            raise APIClientError(f"Email delivery error: {str(e)}", original_error=e)

        if response.status_code >= 400:
            LOGGER.error(
                f"Resend rejected email: {response.text}",
                extra={"to": to, "status_code": response.status_code}
            )
            raise APIClientError(f"Failed to send email: {response.text}")

        LOGGER.info(f"Email '{subject}' sent to {to}")
        return response.json()

    async def send_notification_email(
        self,
        to: str,
        user_name: str,
        email_type: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        subject, html = render_email(email_type, user_name, data)
        return await self.send(to, subject, html)
