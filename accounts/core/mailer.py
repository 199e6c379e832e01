"""
Email adapter for the accounts backend.

Delivery goes through SMTP with the credentials from Settings: implicit TLS
on port 465, STARTTLS on any other port. Callers get a bool back and decide
whether a failed delivery matters.
"""

from __future__ import annotations

from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
import logging
import smtplib
import ssl

from .config import Settings, get_settings

logger = logging.getLogger(__name__)

SMTPS_PORT = 465


def smtp_configured(settings: Settings) -> bool:
    return bool(
        settings.smtp_host
        and settings.smtp_user
        and settings.smtp_password
        and settings.smtp_from
        and settings.smtp_port
    )


def _build_message(sender: str, to_email: str, subject: str, html_body: str, text_body: str | None) -> MIMEMultipart:
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = sender
    msg["To"] = to_email
    msg.attach(MIMEText(text_body or html_body, "plain", "utf-8"))
    msg.attach(MIMEText(html_body, "html", "utf-8"))
    return msg


def _connect(settings: Settings) -> smtplib.SMTP:
    timeout = settings.smtp_timeout_seconds or 10
    context = ssl.create_default_context()
    if settings.smtp_port == SMTPS_PORT:
        return smtplib.SMTP_SSL(settings.smtp_host, settings.smtp_port, context=context, timeout=timeout)
    server = smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=timeout)
    server.ehlo()
    server.starttls(context=context)
    return server


def send_email(subject: str, to_email: str, html_body: str, text_body: str | None = None) -> bool:
    """Send one email; False when SMTP is not configured or delivery fails."""
    settings = get_settings()
    if not smtp_configured(settings):
        logger.warning("SMTP not configured; skipping email to %s", to_email)
        return False
    msg = _build_message(settings.smtp_from, to_email, subject, html_body, text_body)
    try:
        with _connect(settings) as server:
            server.login(settings.smtp_user, settings.smtp_password)
            server.sendmail(settings.smtp_from, [to_email], msg.as_string())
    except (smtplib.SMTPException, OSError) as exc:
        logger.warning("Failed to send email to %s: %s", to_email, exc)
        return False
    logger.info("Sent '%s' to %s", subject, to_email)
    return True
