"""Escaping for Telegram MarkdownV2.

https://core.telegram.org/bots/api#markdownv2-style
"""

import re

# Characters with meaning in MarkdownV2. The backslash is included so a
# literal backslash in upstream text cannot escape our own formatting.
RESERVED_CHARACTERS = "\\_*[]()~`>#+-=|{}.!"

_RESERVED_RE = re.compile("[" + re.escape(RESERVED_CHARACTERS) + "]")


def escape_markdown(text: object | None) -> str:
    """Prefix every MarkdownV2 reserved character in ``text`` with a backslash.

    ``None`` escapes to an empty string. Non-string values are rendered with
    ``str()`` first.
    """
    if text is None:
        return ""
    return _RESERVED_RE.sub(lambda match: "\\" + match.group(0), str(text))


def code(text: object | None) -> str:
    """Escape ``text`` and wrap it in an inline code span."""
    return f"`{escape_markdown(text)}`"


def link(label: object | None, url: str) -> str:
    """Build an inline link with both label and target escaped."""
    return f"[{escape_markdown(label)}]({escape_markdown(absolute_url(url))})"


def absolute_url(url: str) -> str:
    """Vercel reports deployment hosts without a scheme; links need one."""
    if "://" in url:
        return url
    return f"https://{url}"
