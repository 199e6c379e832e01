"""Welcome notification sent after a successful registration."""

from __future__ import annotations

import html

from accounts.core import mailer
from accounts.domain.errors import NotificationFailed


class WelcomeNotifier:
    """Sends the welcome email through the SMTP mailer."""

    subject = "Welcome to your new account"

    def send_welcome(self, to_address: str, display_name: str) -> None:
        name = display_name or to_address
        sent = mailer.send_email(
            self.subject,
            to_address,
            self._welcome_html(name),
            f"Hi {name}, your account has been created.",
        )
        if not sent:
            raise NotificationFailed(f"Could not send welcome email to {to_address}")

    def _welcome_html(self, name: str) -> str:
        return f"""
        <p>Hi {html.escape(name)},</p>
        <p>Your account has been created and is ready to use.</p>
        <p>If you did not sign up, please ignore this message.</p>
        """
