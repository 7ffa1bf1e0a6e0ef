"""Tool server configuration using pydantic-settings.

This module defines the ServerSettings class that reads configuration from
environment variables (and an optional .env file). The GitLab token and
domain are required; everything else has a default.

Settings are resolved once per process lifetime through get_settings().
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

import pydantic
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.toolserver.errors import ConfigurationError


class ServerSettings(BaseSettings):
    """Tool server configuration from environment variables.

    Required fields (must be set via environment variables):
    - gitlab_token: Access token sent as PRIVATE-TOKEN and used for cloning
    - gitlab_domain: GitLab host, e.g. "gitlab.example.com"
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # GitLab Configuration
    # -------------------------------------------------------------------------
    gitlab_token: str
    gitlab_domain: str

    # Per-request timeout for GitLab and Azure REST calls
    http_timeout_seconds: float = 30.0

    # -------------------------------------------------------------------------
    # Git Configuration
    # -------------------------------------------------------------------------
    git_executable: str = "git"
    git_timeout_seconds: int = 300
    git_author_name: str = "toolserver"
    git_author_email: str = "toolserver@localhost"

    # -------------------------------------------------------------------------
    # Budget Provisioning
    # -------------------------------------------------------------------------
    # Parent directory for workspaces; None means the system temp directory
    workspace_base_path: Optional[str] = None

    # Fixed branch pushed for every provisioning run
    budget_branch_name: str = "feature/azure-consumption-budget"

    # -------------------------------------------------------------------------
    # Azure Configuration
    # -------------------------------------------------------------------------
    azure_management_url: str = "https://management.azure.com"

    # -------------------------------------------------------------------------
    # Server Configuration
    # -------------------------------------------------------------------------
    transport: Literal["http", "stdio"] = "http"
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator("gitlab_token")
    @classmethod
    def validate_gitlab_token(cls, v: str) -> str:
        """Validate that the GitLab token is not empty."""
        if not v or not v.strip():
            raise ValueError("gitlab_token cannot be empty")
        return v.strip()

    @field_validator("gitlab_domain")
    @classmethod
    def validate_gitlab_domain(cls, v: str) -> str:
        """Validate that the GitLab domain is not empty."""
        if not v or not v.strip():
            raise ValueError("gitlab_domain cannot be empty")
        return v.strip().rstrip("/")

    @field_validator("workspace_base_path")
    @classmethod
    def validate_workspace_path(cls, v: Optional[str]) -> Optional[str]:
        """Validate that a configured workspace base path is absolute."""
        if v is None or not v.strip():
            return None
        if not Path(v).is_absolute():
            raise ValueError("workspace_base_path must be an absolute path")
        return v

    @field_validator("git_timeout_seconds")
    @classmethod
    def validate_git_timeout(cls, v: int) -> int:
        """Validate that the git timeout is positive."""
        if v < 1:
            raise ValueError("git_timeout_seconds must be at least 1")
        return v

    @field_validator("http_timeout_seconds")
    @classmethod
    def validate_http_timeout(cls, v: float) -> float:
        """Validate that the HTTP timeout is positive."""
        if v <= 0:
            raise ValueError("http_timeout_seconds must be positive")
        return v

    @field_validator("budget_branch_name")
    @classmethod
    def validate_branch_name(cls, v: str) -> str:
        """Validate that the feature branch name is usable."""
        if not v or not v.strip() or " " in v.strip():
            raise ValueError("budget_branch_name must be a single non-empty ref name")
        return v.strip()

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate that port is in valid range."""
        if not 1 <= v <= 65535:
            raise ValueError("port must be between 1 and 65535")
        return v

    @property
    def gitlab_base_url(self) -> str:
        """Base URL of the GitLab instance, defaulting the scheme to https."""
        if self.gitlab_domain.startswith(("http://", "https://")):
            return self.gitlab_domain
        return f"https://{self.gitlab_domain}"

    @property
    def workspace_root(self) -> Optional[Path]:
        if self.workspace_base_path is None:
            return None
        return Path(self.workspace_base_path)


def load_settings(**overrides) -> ServerSettings:
    """Build a ServerSettings instance from the environment.

    Args:
        **overrides: Explicit field values taking precedence over the
            environment (used by tests and embedding callers).

    Returns:
        ServerSettings: Configured settings instance.

    Raises:
        ConfigurationError: If required fields are missing or invalid.
    """
    try:
        return ServerSettings(**overrides)
    except pydantic.ValidationError as exc:
        problems = ", ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        raise ConfigurationError(f"Invalid tool server configuration: {problems}") from exc


@lru_cache(maxsize=1)
def get_settings() -> ServerSettings:
    """Return the process-wide settings, resolving them on first use.

    Raises:
        ConfigurationError: If the GitLab token or domain is missing.
    """
    return load_settings()
