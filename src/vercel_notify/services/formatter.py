"""Render Vercel webhook events as Telegram MarkdownV2 messages.

Every value taken from the event is escaped on its own before it is placed
into the message, including link labels, link targets and inline code.
"""

from collections.abc import Callable
from datetime import datetime, timezone, tzinfo

from vercel_notify.models.webhook import VercelWebhook
from vercel_notify.services.markdown import code, escape_markdown, link

DEFAULT_TITLE = "ℹ️ *Vercel Notification*"
MISSING_ERROR_MESSAGE = "No specific error message provided."
UNHANDLED_NOTE = r"_Raw payload logged for unhandled event type\. Please check server logs\._"

Renderer = Callable[[VercelWebhook, tzinfo], list[str]]


def format_timestamp(created_at: float | None, tz: tzinfo = timezone.utc) -> str:
    """Format an epoch-milliseconds timestamp for display, or ``N/A`` when it is missing or out of range."""
    if created_at is None:
        return "N/A"
    try:
        moment = datetime.fromtimestamp(created_at / 1000, tz=tz)
    except (OverflowError, OSError, ValueError):
        return "N/A"
    return moment.strftime("%Y-%m-%d %H:%M:%S %Z").strip()


def _time_line(event: VercelWebhook, tz: tzinfo) -> str:
    return f"*Time:* {code(format_timestamp(event.createdAt, tz))}"


def _project_line(event: VercelWebhook, label: str = "Project") -> str:
    return f"*{label}:* {escape_markdown(event.project_name or 'N/A')}"


def _inspector_url(event: VercelWebhook) -> str | None:
    deployment = event.payload.deployment
    if deployment and deployment.inspectorUrl:
        return deployment.inspectorUrl
    attack = event.payload.attack
    if attack and attack.inspectorUrl:
        return attack.inspectorUrl
    return None


def _common_lines(event: VercelWebhook, tz: tzinfo, title: str) -> list[str]:
    """Title, project, deployment and inspector links, and time."""
    lines = [title, _project_line(event)]
    deployment = event.payload.deployment
    if deployment and deployment.url:
        lines.append(f"*Deployment URL:* {link(deployment.url, deployment.url)}")
    inspector_url = _inspector_url(event)
    if inspector_url:
        lines.append(f"*Details:* {link('View on Vercel', inspector_url)}")
    lines.append(_time_line(event, tz))
    return lines


def _domains(aliases: list[str]) -> str:
    return ", ".join(code(alias) for alias in aliases)


def _branch_line(event: VercelWebhook) -> list[str]:
    deployment = event.payload.deployment
    if deployment and deployment.meta and deployment.meta.githubCommitRef:
        return [f"*Branch:* {code(deployment.meta.githubCommitRef)}"]
    return []


# ---------------------------------------------------------------------------
# Per-type renderers
# ---------------------------------------------------------------------------


def _render_created(event: VercelWebhook, tz: tzinfo) -> list[str]:
    lines = _common_lines(event, tz, "🚀 *Deployment Created*")
    lines.extend(_branch_line(event))
    meta = event.payload.deployment.meta if event.payload.deployment else None
    if meta and meta.githubCommitAuthorName:
        lines.append(f"*Author:* {code(meta.githubCommitAuthorName)}")
    if meta and meta.githubCommitMessage and meta.githubCommitMessage.strip():
        # subject line only
        summary = meta.githubCommitMessage.strip().splitlines()[0]
        lines.append(f"*Commit:* {escape_markdown(summary)}")
    return lines


def _succeeded_renderer(title: str) -> Renderer:
    def render(event: VercelWebhook, tz: tzinfo) -> list[str]:
        lines = _common_lines(event, tz, title)
        deployment = event.payload.deployment
        if deployment and deployment.target == "production":
            lines.append("🎯 *Target:* `PRODUCTION`")
        if deployment and deployment.alias:
            lines.append(f"*Domains:* {_domains(deployment.alias)}")
        lines.extend(_branch_line(event))
        return lines

    return render


def _render_error(event: VercelWebhook, tz: tzinfo) -> list[str]:
    lines = _common_lines(event, tz, "❌ *Deployment Error*")
    error = event.payload.error
    deployment = event.payload.deployment
    message = (
        (error.message if error else None)
        or (deployment.errorMessage if deployment else None)
        or MISSING_ERROR_MESSAGE
    )
    lines.append(f"*Error:* {escape_markdown(message)}")
    if error and error.code:
        lines.append(f"*Code:* {code(error.code)}")
    return lines


def _render_canceled(event: VercelWebhook, tz: tzinfo) -> list[str]:
    return _common_lines(event, tz, "🚫 *Deployment Canceled*")


def _render_promoted(event: VercelWebhook, tz: tzinfo) -> list[str]:
    lines = _common_lines(event, tz, "🌟 *Deployment Promoted to Production*")
    deployment = event.payload.deployment
    aliases = (deployment.alias if deployment else []) or event.payload.promotedAlias
    if aliases:
        lines.append(f"*Production Domains:* {_domains(aliases)}")
    if event.payload.previousAliases:
        lines.append(f"*Previous Domains:* {_domains(event.payload.previousAliases)}")
    return lines


def _project_renderer(title: str) -> Renderer:
    def render(event: VercelWebhook, tz: tzinfo) -> list[str]:
        return [title, _project_line(event, "Project Name"), _time_line(event, tz)]

    return render


def _render_attack(event: VercelWebhook, tz: tzinfo) -> list[str]:
    attack = event.payload.attack
    target = (attack.target if attack else None) or event.project_name or "N/A"
    lines = [
        "🛡️ *Security Attack Detected*",
        f"*Project/Target:* {escape_markdown(target)}",
        f"*Attack Type:* {code(attack.type if attack else None)}",
        f"*Description:* {escape_markdown(attack.description if attack else None)}",
    ]
    if attack and attack.source:
        lines.append(f"*Source:* {code(attack.source)}")
    if attack and attack.mitigation:
        lines.append(f"*Mitigation:* {escape_markdown(attack.mitigation)}")
    inspector_url = _inspector_url(event)
    if inspector_url:
        lines.append(f"*Details:* {link('View on Vercel', inspector_url)}")
    lines.append(_time_line(event, tz))
    return lines


def _render_unknown(event: VercelWebhook, tz: tzinfo) -> list[str]:
    lines = _common_lines(event, tz, DEFAULT_TITLE)
    lines.append(f"*Event Type:* {code(event.type)}")
    lines.append(UNHANDLED_NOTE)
    return lines


RENDERERS: dict[str, Renderer] = {
    "deployment.created": _render_created,
    "deployment.succeeded": _succeeded_renderer("✅ *Deployment Succeeded*"),
    "deployment.ready": _succeeded_renderer("✅ *Deployment Ready*"),
    "deployment.error": _render_error,
    "deployment.canceled": _render_canceled,
    "deployment.promoted": _render_promoted,
    "project.created": _project_renderer("🎉 *Project Created*"),
    "project.removed": _project_renderer("🗑️ *Project Removed*"),
    "attack.detected": _render_attack,
}


def is_known_event_type(event_type: str) -> bool:
    return event_type in RENDERERS


def format_vercel_message(event: VercelWebhook, tz: tzinfo = timezone.utc) -> str:
    """Render ``event`` as a MarkdownV2 message. Unknown types use a generic layout."""
    renderer = RENDERERS.get(event.type, _render_unknown)
    return "\n".join(renderer(event, tz))
