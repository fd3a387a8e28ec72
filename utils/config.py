"""
Configuration management.
"""

import os
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class Config:
    """
    Application configuration.

    Loads from environment variables with sensible defaults.
    """

    # Server
    host: str = field(default_factory=lambda: os.getenv("HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))
    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")

    # Supabase (data store + auth)
    supabase_url: Optional[str] = field(default_factory=lambda: os.getenv("SUPABASE_URL"))
    supabase_anon_key: Optional[str] = field(default_factory=lambda: os.getenv("SUPABASE_ANON_KEY"))
    supabase_service_role_key: Optional[str] = field(
        default_factory=lambda: os.getenv("SUPABASE_SERVICE_ROLE_KEY")
    )
    request_timeout: int = field(default_factory=lambda: int(os.getenv("REQUEST_TIMEOUT", "30")))

    # Mail
    resend_api_key: Optional[str] = field(default_factory=lambda: os.getenv("RESEND_API_KEY"))
    mail_from: str = field(
        default_factory=lambda: os.getenv(
            "MAIL_FROM", "Ace Properties <noreply@aceinvestmentproperties.co.uk>"
        )
    )
    admin_email: Optional[str] = field(default_factory=lambda: os.getenv("ADMIN_EMAIL"))
    site_url: str = field(
        default_factory=lambda: os.getenv("SITE_URL", "https://aceinvestmentproperties.co.uk")
    )

    # Cron
    cron_secret: Optional[str] = field(default_factory=lambda: os.getenv("CRON_SECRET"))

    # Matching
    match_page_size: int = field(default_factory=lambda: int(os.getenv("MATCH_PAGE_SIZE", "20")))

    # Data
    data_dir: str = field(default_factory=lambda: os.getenv("DATA_DIR", "./data"))

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment."""
        return cls()

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_role_key)

    def to_dict(self) -> dict:
        """Convert config to dictionary. Secrets are reported as set/unset only."""
        return {
            "host": self.host,
            "port": self.port,
            "debug": self.debug,
            "supabase_url": self.supabase_url,
            "supabase_configured": self.supabase_configured,
            "mail_configured": bool(self.resend_api_key),
            "cron_configured": bool(self.cron_secret),
            "admin_email": self.admin_email,
            "site_url": self.site_url,
            "request_timeout": self.request_timeout,
            "match_page_size": self.match_page_size,
            "data_dir": self.data_dir,
        }
