"""Transactional email delivery through the SendGrid v3 API."""

from __future__ import annotations

import logging
import re
from typing import Any

from python_http_client.exceptions import HTTPError
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail, To

from hr_assistant.core.config import settings
from hr_assistant.core.constants import SENDGRID_TIMEOUT_SECONDS
from hr_assistant.core.exceptions import EmailDeliveryError

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]*>")


def strip_html(html: str) -> str:
    """Plain-text fallback for an HTML body."""
    return _TAG_RE.sub("", html)


def _sendgrid_error_message(exc: HTTPError) -> str:
    try:
        body = exc.to_dict
    except (ValueError, AttributeError):
        return str(exc.body)
    errors = body.get("errors") if isinstance(body, dict) else None
    if isinstance(errors, list) and errors:
        return "; ".join(str(err.get("message", err)) for err in errors)
    return str(body)


def send_email(
    to: str,
    subject: str,
    html: str,
    text: str | None = None,
    from_email: str | None = None,
) -> dict[str, Any]:
    """Send one message and return ``{status_code, message_id, to}``.

    Raises ``EmailDeliveryError`` on missing fields, transport failures and
    non-2xx answers from SendGrid.
    """
    sender = from_email or settings.SENDGRID_FROM_EMAIL
    if not sender:
        raise EmailDeliveryError(
            "Sender email is required. Set SENDGRID_FROM_EMAIL."
        )
    if not to:
        raise EmailDeliveryError("Recipient email is required")
    if not subject:
        raise EmailDeliveryError("Email subject is required")
    if not html:
        raise EmailDeliveryError("Email content is required")

    message = Mail(
        from_email=sender,
        to_emails=To(to),
        subject=subject,
        plain_text_content=text or strip_html(html),
        html_content=html,
    )

    sg = SendGridAPIClient(api_key=settings.SENDGRID_API_KEY)
    sg.client.timeout = SENDGRID_TIMEOUT_SECONDS
    try:
        response = sg.client.mail.send.post(request_body=message.get())
    except HTTPError as exc:
        error_message = _sendgrid_error_message(exc)
        logger.error(
            "email_rejected",
            extra={"to": to, "status_code": exc.status_code, "error_message": error_message},
        )
        raise EmailDeliveryError(
            f"SendGrid API error ({exc.status_code}): {error_message}",
            details={"status_code": exc.status_code},
        ) from exc
    except OSError as exc:
        logger.error(
            "email_send_failed",
            extra={"to": to, "error_type": type(exc).__name__, "error_message": str(exc)},
        )
        raise EmailDeliveryError(f"Failed to reach SendGrid: {exc}") from exc

    logger.info(
        "email_sent",
        extra={"to": to, "subject": subject, "status_code": response.status_code},
    )
    return {
        "status_code": response.status_code,
        "message_id": response.headers.get("X-Message-Id"),
        "to": to,
    }
