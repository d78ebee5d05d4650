import logging
from datetime import datetime

import httpx

from app.config import settings

logger = logging.getLogger("app.email")


class MailDeliveryError(Exception):
    pass


def send_email(to: str, subject: str, html: str) -> None:
    """
    Send one HTML email through the mail API.

    Without RESEND_API_KEY nothing is sent and the message is only logged,
    which is the development setup.
    """
    if not settings.RESEND_API_KEY:
        logger.info("[DEV] email to=%s subject=%r not sent (no RESEND_API_KEY)", to, subject)
        return

    try:
        resp = httpx.post(
            settings.MAIL_API_URL,
            headers={"Authorization": f"Bearer {settings.RESEND_API_KEY}"},
            json={
                "from": settings.MAIL_FROM,
                "to": [to],
                "subject": subject,
                "html": html,
            },
            timeout=10.0,
        )
        resp.raise_for_status()
    except httpx.HTTPError as exc:
        raise MailDeliveryError(str(exc)) from exc

    logger.info("email sent to=%s subject=%r", to, subject)


def build_reset_url(token: str) -> str:
    return f"{settings.FRONTEND_BASE_URL.rstrip('/')}/auth/reset-password?token={token}"


def render_reset_email(reset_url: str) -> str:
    hours = settings.RESET_TOKEN_EXPIRE_HOURS
    year = datetime.now().year
    return f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; border: 1px solid #e0e0e0; border-radius: 5px;">
  <div style="text-align: center; margin-bottom: 20px;">
    <h1 style="color: #4F46E5; margin-bottom: 10px;">AbiNote</h1>
    <h2 style="color: #333; margin-bottom: 20px;">Password Reset</h2>
  </div>
  <p style="color: #555; font-size: 16px; line-height: 1.5;">Hello,</p>
  <p style="color: #555; font-size: 16px; line-height: 1.5;">
    We received a request to reset the password of your AbiNote account.
    Use the button below to set a new one.
  </p>
  <div style="text-align: center; margin: 30px 0;">
    <a href="{reset_url}"
      style="display: inline-block; padding: 12px 24px; background-color: #4F46E5; color: white; text-decoration: none; border-radius: 5px; font-weight: bold;">
      Create New Password
    </a>
  </div>
  <p style="color: #555; font-size: 16px; line-height: 1.5;">If the button does not work, open this link:</p>
  <p style="background-color: #f5f5f5; padding: 10px; border-radius: 4px; font-size: 14px; word-break: break-all;">{reset_url}</p>
  <p style="color: #555; font-size: 16px; line-height: 1.5;">This link expires in {hours} hours.</p>
  <p style="color: #555; font-size: 16px; line-height: 1.5;">
    If you did not ask for a password reset you can ignore this email.
  </p>
  <div style="margin-top: 40px; padding-top: 20px; border-top: 1px solid #e0e0e0; color: #999; font-size: 14px; text-align: center;">
    <p>&copy; {year} AbiNote. All rights reserved.</p>
  </div>
</div>
"""
