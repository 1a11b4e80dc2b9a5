"""Pydantic models for Vercel webhook deliveries.

Field names follow Vercel's camelCase wire format. Every model allows extra
keys so new upstream fields pass through without failing validation.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DeploymentMeta(BaseModel):
    """Git metadata attached to a deployment."""

    model_config = ConfigDict(extra="allow")

    githubCommitAuthorName: str | None = None
    githubCommitMessage: str | None = None
    githubCommitRef: str | None = None  # branch
    githubCommitSha: str | None = None


class Deployment(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str | None = None
    name: str | None = None  # project name
    url: str | None = None  # unique deployment host, e.g. my-app-git-main-team.vercel.app
    state: str | None = None  # READY, ERROR, CANCELED, BUILDING, QUEUED
    target: str | None = None  # "production", "staging" or null
    alias: list[str] = Field(default_factory=list)
    meta: DeploymentMeta | None = None
    inspectorUrl: str | None = None
    errorMessage: str | None = None


class Project(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str | None = None
    name: str | None = None


class DeploymentErrorInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    code: str | None = None
    message: str | None = None


class Attack(BaseModel):
    """Firewall / DDoS mitigation details for ``attack.detected``."""

    model_config = ConfigDict(extra="allow")

    type: str | None = None  # e.g. "DDOS", "WAF_BLOCK"
    description: str | None = None
    source: str | None = None  # e.g. an IP address
    target: str | None = None  # domain or project name
    mitigation: str | None = None
    inspectorUrl: str | None = None


class WebhookPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    deployment: Deployment | None = None
    project: Project | None = None
    error: DeploymentErrorInfo | None = None
    attack: Attack | None = None
    # Layout for deployment.promoted is unconfirmed; these keys are best guesses.
    promotedAlias: list[str] = Field(default_factory=list)
    previousAliases: list[str] = Field(default_factory=list)


class VercelWebhook(BaseModel):
    """A single webhook delivery. ``type`` is the only required key."""

    model_config = ConfigDict(extra="allow")

    id: str | None = None
    type: str
    createdAt: float | None = None  # epoch milliseconds
    userId: str | None = None
    teamId: str | None = None
    payload: WebhookPayload = Field(default_factory=WebhookPayload)

    @property
    def project_name(self) -> str | None:
        if self.payload.deployment and self.payload.deployment.name:
            return self.payload.deployment.name
        if self.payload.project and self.payload.project.name:
            return self.payload.project.name
        return None

    def raw_payload(self) -> dict[str, Any]:
        """Return the payload as plain JSON data, unknown keys included."""
        return self.payload.model_dump(mode="json", exclude_none=True)
