# ABOUTME: Non-blocking clipboard writes through an external tool.
# ABOUTME: The tool is spawned and fed its input; only a background thread awaits its exit.

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
import threading

from .errors import LaunchFailure
from .loaders.base import SessionSummary

logger = logging.getLogger("claude_code_sessions.clipboard")

ENV_CLIPBOARD_COMMAND = "CLAUDE_SESSIONS_CLIPBOARD"

CLIPBOARD_COMMANDS: tuple[tuple[str, ...], ...] = (
    ("pbcopy",),
    ("wl-copy",),
    ("xclip", "-selection", "clipboard"),
    ("xsel", "--clipboard", "--input"),
)


def resolve_clipboard_command() -> list[str]:
    env_value = os.environ.get(ENV_CLIPBOARD_COMMAND)
    if env_value:
        return shlex.split(env_value)
    for command in CLIPBOARD_COMMANDS:
        if command[0] == "wl-copy" and not os.environ.get("WAYLAND_DISPLAY"):
            continue
        if shutil.which(command[0]):
            return list(command)
    raise LaunchFailure(
        "No clipboard tool found (install xclip, xsel or wl-copy, "
        f"or set {ENV_CLIPBOARD_COMMAND})"
    )


def copy_to_clipboard(text: str, cwd: str | None = None) -> subprocess.Popen[bytes]:
    """Hand text to the clipboard tool and return without waiting for it.

    Tools like xclip keep running to serve the selection until something
    pastes it, so waiting on them would hang the caller. A daemon thread
    reaps the tool whenever it does exit. Only a failure to start the tool
    is raised, as LaunchFailure.
    """
    payload = f"cd {shlex.quote(cwd)} && {text}" if cwd else text
    command = resolve_clipboard_command()
    try:
        process = subprocess.Popen(
            command,
            stdin=subprocess.PIPE,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
    except OSError as exc:
        raise LaunchFailure(f"Could not start {command[0]}: {exc}") from exc

    assert process.stdin is not None
    try:
        process.stdin.write(payload.encode("utf-8"))
        process.stdin.close()
    except BrokenPipeError:
        logger.warning("%s closed its input before reading the payload", command[0])
    threading.Thread(target=process.wait, name=f"reap-{command[0]}", daemon=True).start()
    logger.debug("Copied %d characters with %s (pid %d)", len(payload), command[0], process.pid)
    return process


def resume_command(session: SessionSummary) -> str:
    """Shell command that resumes the session from its project directory."""
    return f"cd {shlex.quote(session.project_directory)} && claude --resume {session.session_id}"
