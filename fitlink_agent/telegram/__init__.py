"""Telegram client module."""

from fitlink_agent.telegram.client import (
    send_telegram,
    split_message,
)

__all__ = [
    "send_telegram",
    "split_message",
]
