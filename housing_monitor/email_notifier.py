from __future__ import annotations

import logging
import smtplib
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape
from typing import Sequence

LOGGER = logging.getLogger(__name__)


class EmailNotifier:
    def __init__(
        self,
        *,
        sender: str,
        password: str,
        recipient: str,
        smtp_host: str = "smtp.gmail.com",
        smtp_port: int = 587,
        timeout_seconds: int = 30,
        dry_run: bool = False,
    ) -> None:
        self.sender = sender
        self.password = password
        self.recipient = recipient
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.timeout_seconds = timeout_seconds
        self.dry_run = dry_run

    def notify(self, subject: str, items: Sequence[str], apply_url: str, source_label: str) -> bool:
        body = render_email_html(subject, items, apply_url=apply_url, source_label=source_label)

        if self.dry_run:
            LOGGER.info("[DRY-RUN] Email '%s' with %s item(s) would be sent", subject, len(items))
            return True

        try:
            self._send(subject, body)
        except (smtplib.SMTPException, OSError) as exc:
            LOGGER.error("Email send failed for '%s' to %s: %s", subject, self.recipient, exc)
            return False

        LOGGER.info("Email '%s' sent to %s", subject, self.recipient)
        return True

    def _send(self, subject: str, html_body: str) -> None:
        message = MIMEMultipart("alternative")
        message["From"] = self.sender
        message["To"] = self.recipient
        message["Subject"] = subject
        message.attach(MIMEText(html_body, "html", "utf-8"))

        with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout_seconds) as server:
            server.starttls()
            server.login(self.sender, self.password)
            server.send_message(message)


def render_email_html(
    subject: str,
    items: Sequence[str],
    *,
    apply_url: str,
    source_label: str,
    checked_at: datetime | None = None,
) -> str:
    checked_at = checked_at or datetime.now()
    rows = "".join(
        f'<li style="font-size:16px; margin:8px 0;">{escape(item)}</li>' for item in items
    )
    return (
        f'<p style="font-size:18px; font-weight:bold;">{escape(subject)}</p>'
        f"<h2>🏠 New Housing at {escape(source_label)}!</h2>"
        "<p><strong>Apply NOW before it fills up:</strong></p>"
        f"<ul>{rows}</ul>"
        f'<a href="{escape(apply_url, quote=True)}" '
        'style="background:#2563eb; color:white; padding:15px 30px; text-decoration:none; '
        "border-radius:6px; display:inline-block; margin-top:20px; font-weight:bold; "
        'font-size:16px;">→ Apply Right Now ←</a>'
        f'<p style="color:#666; margin-top:20px;">Checked at {checked_at:%Y-%m-%d %H:%M:%S}</p>'
    )
