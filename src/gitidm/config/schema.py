"""Configuration schema for gitidm."""

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class GitConfig(BaseModel):
    """How the git configuration store is reached."""

    binary: str = Field(default="git", description="git executable to invoke")
    config_file: str | None = Field(
        default=None,
        description="Use this file instead of the user's global git config",
    )
    min_version: str = Field(
        default="2.10.0",
        description="Oldest git release with core.sshCommand support",
    )


class AgentConfig(BaseModel):
    """SSH agent check configuration."""

    binary: str = Field(default="ssh-add", description="ssh-add executable")
    enabled: bool = Field(
        default=True, description="Warn when an identity's key is not loaded"
    )


class StoreConfig(BaseModel):
    """Key layout inside the git configuration."""

    namespace: str = Field(
        default="gitidm", description="Section holding one subsection per identity"
    )
    active_key: str = Field(
        default="user.activeidm", description="Key naming the active identity"
    )


class AuditConfig(BaseModel):
    """Audit logging configuration."""

    enabled: bool = Field(default=True, description="Enable audit logging")
    log_dir: str = Field(
        default="~/.local/share/gitidm/logs", description="Directory for audit logs"
    )
    redact_patterns: list[str] = Field(
        default_factory=lambda: [
            r"token",
            r"password",
            r"-----BEGIN.*PRIVATE KEY-----",
        ],
        description="Patterns to redact from logs",
    )


class GitIdmConfig(BaseSettings):
    """Main gitidm configuration."""

    git: GitConfig = Field(default_factory=GitConfig)
    agent: AgentConfig = Field(default_factory=AgentConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    audit: AuditConfig = Field(default_factory=AuditConfig)

    class Config:
        env_prefix = "GITIDM_"
        env_nested_delimiter = "__"
