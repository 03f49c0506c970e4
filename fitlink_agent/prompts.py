"""
Prompt files for Fitlink Agent.

Prompts are markdown files under prompts/ next to modal_agent.py when running
locally, and under /root/prompts inside the Modal image.
"""

from functools import lru_cache
from pathlib import Path

from fitlink_agent.config import logger

PROMPT_SEARCH_PATHS = (
    Path("/root/prompts"),
    Path(__file__).parent.parent / "prompts",
)

BRIEFING_PROMPT_NAME = "daily_briefing"


def get_prompts_dir() -> Path:
    for path in PROMPT_SEARCH_PATHS:
        if path.is_dir():
            return path
    searched = ", ".join(str(p) for p in PROMPT_SEARCH_PATHS)
    raise FileNotFoundError(f"Prompts directory not found (searched {searched})")


@lru_cache(maxsize=None)
def load_prompt(name: str) -> str:
    """Read prompts/<name>.md once per process."""
    prompt_file = get_prompts_dir() / f"{name}.md"
    if not prompt_file.exists():
        raise FileNotFoundError(f"Prompt file not found: {prompt_file}")
    return prompt_file.read_text().strip()


def briefing_system_prompt() -> str:
    """System prompt for the daily briefing, empty when the file is missing."""
    try:
        return load_prompt(BRIEFING_PROMPT_NAME)
    except FileNotFoundError as e:
        logger.warning(f"{e}; generating briefing without a system prompt")
        return ""
