"""
Mail Senders - Template-Based Email Delivery

Emails are named templates rendered with Jinja2 from core/notifications/templates
and handed to a sender. Senders:
- ResendMailSender: Resend HTTP API over requests (production)
- LoggingMailSender: renders and logs, keeps a record of sends (development, tests)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final, Optional

import requests
from jinja2 import Environment, FileSystemLoader, select_autoescape

from core.errors import UpstreamFailure


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration
# =============================================================================

TEMPLATES_DIR: Final[Path] = Path(__file__).parent / "templates"

RESEND_API_URL: Final[str] = "https://api.resend.com/emails"

TEMPLATE_NAMES: Final[frozenset[str]] = frozenset({
    "new_investor",
    "initial_matches",
    "new_property_match",
})

_environment = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


def render_email(template_name: str, template_data: dict[str, Any]) -> str:
    """
    Render a named email template to HTML.

    Raises:
        ValueError: If the template name is not known
    """
    if template_name not in TEMPLATE_NAMES:
        raise ValueError(f"Unknown email template: {template_name}")
    template = _environment.get_template(f"{template_name}.html")
    return template.render(**template_data)


# =============================================================================
# Sender Interface
# =============================================================================


class MailSender(ABC):
    """Sends one templated email."""

    @abstractmethod
    def send(
        self,
        to: str,
        subject: str,
        template_name: str,
        template_data: dict[str, Any],
    ) -> bool:
        """
        Send an email.

        Returns:
            True if the mail service accepted the message

        Raises:
            UpstreamFailure: If the mail service cannot be reached
        """


# =============================================================================
# Resend
# =============================================================================


class ResendMailSender(MailSender):
    """Delivers mail through the Resend HTTP API."""

    def __init__(
        self,
        api_key: str,
        mail_from: str,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ):
        self._mail_from = mail_from
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        })

    def send(
        self,
        to: str,
        subject: str,
        template_name: str,
        template_data: dict[str, Any],
    ) -> bool:
        html = render_email(template_name, template_data)

        try:
            response = self._session.post(
                RESEND_API_URL,
                json={
                    "from": self._mail_from,
                    "to": [to],
                    "subject": subject,
                    "html": html,
                },
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise UpstreamFailure(f"Mail service unreachable: {e}", service="mail")

        if response.status_code >= 400:
            logger.error(
                "Mail service rejected %s to %s: %s %s",
                template_name,
                to,
                response.status_code,
                response.text[:200],
            )
            return False

        logger.info("Sent %s email to %s", template_name, to)
        return True


# =============================================================================
# Logging (development)
# =============================================================================


@dataclass(frozen=True)
class SentMail:
    """A message captured by LoggingMailSender."""

    to: str
    subject: str
    template_name: str
    template_data: dict
    html: str


class LoggingMailSender(MailSender):
    """
    Renders mail and logs it instead of delivering.

    Used when no mail API key is configured. The most recent messages are
    kept in `sent` for inspection; older ones are discarded.
    """

    def __init__(self, max_kept: int = 100):
        self.sent: deque[SentMail] = deque(maxlen=max_kept)

    def send(
        self,
        to: str,
        subject: str,
        template_name: str,
        template_data: dict[str, Any],
    ) -> bool:
        html = render_email(template_name, template_data)
        self.sent.append(SentMail(
            to=to,
            subject=subject,
            template_name=template_name,
            template_data=dict(template_data),
            html=html,
        ))
        logger.info("Mail not configured; would send %s to %s: %s", template_name, to, subject)
        return True

    def count(self, template_name: Optional[str] = None) -> int:
        """Number of captured messages, optionally for one template."""
        if template_name is None:
            return len(self.sent)
        return sum(1 for m in self.sent if m.template_name == template_name)
