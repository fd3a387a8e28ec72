"""
Email notifications for investors and admins.
"""

from __future__ import annotations

from core.notifications.mailer import (
    LoggingMailSender,
    MailSender,
    ResendMailSender,
    SentMail,
    render_email,
)
from core.notifications.notifier import (
    Dispatch,
    NotificationService,
    describe_locations,
    dispatch_inline,
)


def build_mail_sender(config) -> MailSender:
    """Resend when an API key is configured, otherwise log only."""
    if config.resend_api_key:
        return ResendMailSender(
            api_key=config.resend_api_key,
            mail_from=config.mail_from,
            timeout=config.request_timeout,
        )
    return LoggingMailSender()


__all__ = [
    "LoggingMailSender",
    "MailSender",
    "ResendMailSender",
    "SentMail",
    "render_email",
    "Dispatch",
    "NotificationService",
    "describe_locations",
    "dispatch_inline",
    "build_mail_sender",
]
