# remen_abs/core/email_client.py
from __future__ import annotations

"""
Outgoing mail for order confirmations.

SMTP settings come from environment variables (read once, at import):

    SMTP_HOST=smtp.gmail.com
    SMTP_PORT=465
    SMTP_USERNAME=orders@remen-abs.com
    SMTP_PASSWORD=<app password>
    SMTP_FROM_EMAIL=orders@remen-abs.com
    SMTP_FROM_NAME=Remen ABS
    SMTP_USE_TLS=false
    SMTP_USE_SSL=true

Callers treat delivery as best-effort: a raised error is logged by the
caller and never undoes the order that triggered the mail.
"""

import os
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage

TRUTHY = {"1", "true", "yes", "y"}


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in TRUTHY


@dataclass(frozen=True)
class SmtpConfig:
    host: str | None
    port: int
    username: str | None
    password: str | None
    from_email: str
    from_name: str
    use_tls: bool
    use_ssl: bool

    @classmethod
    def from_env(cls) -> "SmtpConfig":
        username = os.getenv("SMTP_USERNAME")
        return cls(
            host=os.getenv("SMTP_HOST"),
            port=int(os.getenv("SMTP_PORT", "587")),
            username=username,
            password=os.getenv("SMTP_PASSWORD"),
            from_email=os.getenv("SMTP_FROM_EMAIL", username or ""),
            from_name=os.getenv("SMTP_FROM_NAME", "Remen ABS"),
            use_tls=_env_flag("SMTP_USE_TLS", default=True),
            use_ssl=_env_flag("SMTP_USE_SSL", default=False),
        )

    @property
    def is_complete(self) -> bool:
        return bool(self.host and self.username and self.password)

    @property
    def sender(self) -> str:
        if self.from_email:
            return f"{self.from_name} <{self.from_email}>"
        return self.username or ""


SMTP_CONFIG = SmtpConfig.from_env()


def _open_connection(config: SmtpConfig) -> smtplib.SMTP:
    """
    SSL (typically port 465) wins over STARTTLS (typically port 587).
    Do not enable both.
    """
    if config.use_ssl:
        return smtplib.SMTP_SSL(config.host, config.port, timeout=30)

    server = smtplib.SMTP(config.host, config.port, timeout=30)
    if config.use_tls:
        server.starttls()
    return server


def build_message(
    config: SmtpConfig,
    to_email: str,
    subject: str,
    text_body: str,
    html_body: str | None = None,
) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = config.sender
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.set_content(text_body)
    if html_body:
        msg.add_alternative(html_body, subtype="html")
    return msg


def send_email(
    to_email: str,
    subject: str,
    text_body: str,
    html_body: str | None = None,
    config: SmtpConfig | None = None,
) -> None:
    """
    Send an email to a single recipient.

    Raises
    ------
    RuntimeError:
        If SMTP_HOST / SMTP_USERNAME / SMTP_PASSWORD are not configured.
    smtplib.SMTPException:
        If the underlying SMTP connection or send fails.
    """
    config = config or SMTP_CONFIG
    if not config.is_complete:
        raise RuntimeError(
            "SMTP is not configured correctly. "
            "Please set SMTP_HOST, SMTP_USERNAME, and SMTP_PASSWORD in .env."
        )

    msg = build_message(config, to_email, subject, text_body, html_body)

    server = _open_connection(config)
    try:
        server.login(config.username, config.password)  # type: ignore[arg-type]
        server.send_message(msg)
    finally:
        try:
            server.quit()
        except smtplib.SMTPException:
            # Connection is being torn down anyway.
            pass
