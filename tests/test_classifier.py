# ABOUTME: Tests for detecting tooling-injected text in user records.
# ABOUTME: Recognized wrappers are system content; other markup is authored.

import pytest

from claude_code_sessions.classifier import is_system_content


@pytest.mark.parametrize(
    "text",
    [
        "<command-name>/clear</command-name>\n<command-message>clear</command-message>",
        "<local-command-stdout>ok</local-command-stdout>",
        "<system-reminder>\nRemember the todo list.\n</system-reminder>",
        "  <tool-call>...</tool-call>  ",
        '<task-notification id="3">done</task-notification>',
        "[Request interrupted by user]",
        "[Request interrupted by user for tool use]",
        "Caveat: The messages below were generated by the user while running local commands.",
    ],
)
def test_injected_content_is_system(text: str) -> None:
    assert is_system_content(text)


@pytest.mark.parametrize(
    "text",
    [
        "<div> is rendering twice, can you check?",
        "<3 thanks for the help",
        "<script>alert(1)</script> shows up in the page",
        "<command-name> without a closing tag",
        "<T> generic parameter is wrong",
        "fix the <system-reminder>tag</system-reminder> parser",
        "plain text",
        "",
        "   ",
    ],
)
def test_authored_content_is_not_system(text: str) -> None:
    assert not is_system_content(text)
