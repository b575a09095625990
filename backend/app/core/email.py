"""
backend/app/core/email.py

Email Sending Utilities

Handles sending transactional emails for:
- Welcome email after sign-up
- Evaluation report after an evaluation is saved
"""

import logging
from datetime import datetime
from typing import Any

from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape
from pydantic import EmailStr
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import From, Mail, To

from app.core.config import settings

# Logger configuration
logger = logging.getLogger(__name__)

# Jinja2 template environment setup
jinja_env: Environment | None = None
if settings.mail_templates_path.is_dir():
    jinja_env = Environment(
        loader=FileSystemLoader(settings.mail_templates_path),
        autoescape=select_autoescape(["html", "xml"]),
    )
    logger.info(f"Jinja2 environment initialized with templates in: {settings.mail_templates_path}")
else:
    logger.warning(f"Email template directory not found: {settings.mail_templates_path}")


def _sender_name() -> str:
    return settings.MAIL_FROM_NAME or settings.APP_NAME


def _render_template(template_name: str, context: dict[str, Any]) -> str:
    """
    Renders an email template using Jinja2 with provided context.
    Args:
        template_name (str): Name of the template file.
        context (dict[str, Any]): Variables to pass to the template.
    Returns:
        str: Rendered HTML content.
    """
    if not jinja_env:
        logger.error("Jinja2 environment not available")
        raise RuntimeError("Email template environment not initialized")

    try:
        template = jinja_env.get_template(template_name)
        full_context = {
            "year": datetime.now().year,
            "company_name": _sender_name(),
            "app_name": settings.APP_NAME,
            "base_url": str(settings.BASE_URL).rstrip("/"),
            **context,
        }
        return template.render(full_context)
    except TemplateError as e:
        logger.error(f"Failed to render template '{template_name}': {str(e)}")
        raise ValueError(f"Failed to render email template {template_name}") from e


async def _send_email(to_email: EmailStr | str, subject: str, html_content: str) -> None:
    """
    Sends an email using SendGrid API.
    Args:
        to_email: Recipient's email address.
        subject (str): Email subject line.
        html_content (str): HTML content of the email.
    """
    if not settings.EMAILS_ENABLED:
        logger.info(f"Email sending disabled. Skipping send to {to_email} for subject '{subject}'")
        return

    if not settings.SENDGRID_API_KEY:
        logger.error("SendGrid API Key setting is missing")
        raise RuntimeError("Email service configuration missing")

    message = Mail(
        from_email=From(email=str(settings.MAIL_FROM), name=_sender_name()),
        to_emails=To(str(to_email)),
        subject=subject,
        html_content=html_content,
    )

    sg = SendGridAPIClient(settings.SENDGRID_API_KEY)
    response = sg.client.mail.send.post(request_body=message.get())
    logger.info(
        f"Email sent to {to_email} for subject '{subject}' with status code {response.status_code}"
    )
    if response.status_code >= 300:
        logger.error(f"SendGrid API error: Status={response.status_code}, Body={response.body}")
        raise RuntimeError("Failed to send email via provider")


async def send_welcome_email(to_email: EmailStr | str, name: str | None) -> None:
    """
    Sends a welcome email to a newly registered user.
    """
    base_url_str = str(settings.BASE_URL).rstrip("/")
    subject = f"Welcome to {_sender_name()}"
    context = {
        "name": name,
        "dashboard_url": f"{base_url_str}/dashboard",
    }
    html_content = _render_template("welcome.html", context)
    await _send_email(to_email, subject, html_content)
    logger.info(f"Welcome email sent to {to_email}")


async def send_evaluation_report_email(
    to_email: EmailStr | str,
    name: str | None,
    evaluation_id: int,
    property_type_name: str,
    result: dict[str, Any],
) -> None:
    """
    Sends a short summary of a completed evaluation with a link to the full report.

    `result` is the serialized evaluation result (percentage, level, badge, category scores).
    """
    base_url_str = str(settings.BASE_URL).rstrip("/")
    subject = f"Your {property_type_name} evaluation - {_sender_name()}"
    context = {
        "name": name,
        "property_type_name": property_type_name,
        "result": result,
        "report_url": f"{base_url_str}/evaluation-result/{evaluation_id}",
    }
    html_content = _render_template("evaluation_report.html", context)
    await _send_email(to_email, subject, html_content)
    logger.info(f"Evaluation report email sent to {to_email} for evaluation {evaluation_id}")
