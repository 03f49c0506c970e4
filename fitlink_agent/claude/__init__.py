"""Claude briefing module."""

from fitlink_agent.claude.briefing import (
    BriefingFormatError,
    build_briefing_prompt,
    parse_briefing,
    generate_briefing_with_claude,
    time_based_greeting,
    format_briefing_message,
)

__all__ = [
    "BriefingFormatError",
    "build_briefing_prompt",
    "parse_briefing",
    "generate_briefing_with_claude",
    "time_based_greeting",
    "format_briefing_message",
]
