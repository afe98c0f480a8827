# ABOUTME: Detection of tooling-injected text inside user records.
# ABOUTME: Matches a closed set of known wrapper tags and sentinel prefixes.

from __future__ import annotations

import re

INJECTED_TAGS = frozenset(
    {
        "command-name",
        "command-message",
        "command-args",
        "local-command-stdout",
        "local-command-stderr",
        "local-command-caveat",
        "system-reminder",
        "user-prompt-submit-hook",
        "bash-input",
        "bash-stdout",
        "bash-stderr",
        "tool-call",
        "tool-result",
        "task-notification",
        "agent-notification",
        "ide_selection",
        "ide_opened_file",
    }
)

# Text Claude Code writes into user records on its own.
INJECTED_PREFIXES = (
    "[Request interrupted by user",
    "Caveat: The messages below were generated by the user while running local commands",
    "This session is being continued from a previous conversation",
)

_OPENING_TAG = re.compile(r"<([A-Za-z][\w-]*)(?:\s[^<>]*)?>")


def is_system_content(text: str) -> bool:
    """Return True if text was injected by Claude Code or a hook.

    A leading "<" alone is not enough: the text must open with a recognized
    tag and also contain its closing tag, or start with a known sentinel.
    """
    stripped = text.strip()
    if not stripped:
        return False
    if stripped.startswith(INJECTED_PREFIXES):
        return True

    match = _OPENING_TAG.match(stripped)
    if match is None:
        return False
    tag = match.group(1)
    if tag not in INJECTED_TAGS:
        return False
    return f"</{tag}>" in stripped[match.end() :]
