"""
Telegram Bot API client for briefing delivery.
"""

import requests
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from fitlink_agent.config import TELEGRAM_API_BASE, logger

# Telegram rejects messages over 4096 chars
MAX_CHUNK_CHARS = 4000


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type((requests.RequestException, requests.Timeout)),
    reraise=True
)
def _post_message(bot_token: str, chat_id: str, text: str, parse_mode: str = None) -> requests.Response:
    payload = {"chat_id": chat_id, "text": text, "disable_web_page_preview": True}
    if parse_mode:
        payload["parse_mode"] = parse_mode

    return requests.post(f"{TELEGRAM_API_BASE}/bot{bot_token}/sendMessage", json=payload, timeout=30)


def split_message(message: str, size: int = MAX_CHUNK_CHARS) -> list:
    """
    Split a message into chunks of at most ``size`` characters.

    Breaks at the last newline inside each window so Markdown spans on a line
    stay intact; a single line longer than ``size`` is cut hard.
    """
    chunks = []
    remaining = message
    while len(remaining) > size:
        cut = remaining.rfind("\n", 0, size)
        if cut <= 0:
            cut = size
        chunks.append(remaining[:cut])
        remaining = remaining[cut:].lstrip("\n")
    if remaining:
        chunks.append(remaining)
    return chunks


def _send_chunk(bot_token: str, chat_id: str, chunk: str) -> bool:
    response = _post_message(bot_token, chat_id, chunk, parse_mode="Markdown")

    if not response.ok and "can't parse entities" in response.text:
        logger.info("Markdown parsing failed, sending as plain text...")
        response = _post_message(bot_token, chat_id, chunk)

    if not response.ok:
        logger.error(f"Telegram API error for chat {chat_id}: {response.status_code} - {response.text}")
    return response.ok


def send_telegram(message: str, bot_token: str, chat_id: str) -> bool:
    """Deliver a Markdown message in order, stopping at the first failed chunk."""
    try:
        return all(_send_chunk(bot_token, chat_id, chunk) for chunk in split_message(message))
    except requests.RequestException as e:
        logger.error(f"Telegram send error for chat {chat_id}: {e}")
        return False
