# utils/chat_proxy.py
import logging

import requests

from config import CHAT_API_URL, CHAT_MODEL, CHAT_TIMEOUT_SECONDS
from errors import AppError, ServiceUnavailable

logger = logging.getLogger(__name__)

# --- Prompts ---
SYSTEM_PROMPT = (
    "You are CookMate AI. Provide extremely brief, clear, and helpful cooking advice. "
    "Use bullet points if needed. No long introductions. Keep it short and sweet."
)


def ask_assistant(message: str) -> str:
    """
    Forward one user message to the chat endpoint and return the reply text.
    Nothing is kept between calls.
    """
    payload = {
        "model": CHAT_MODEL,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": message},
        ],
        "stream": False,
    }
    try:
        resp = requests.post(CHAT_API_URL, json=payload, timeout=CHAT_TIMEOUT_SECONDS)
    except (requests.ConnectionError, requests.Timeout) as e:
        logger.warning("[chat] endpoint unreachable at %s: %r", CHAT_API_URL, e)
        raise ServiceUnavailable(
            "AI service is currently unavailable. Please try again later."
        ) from e

    if resp.status_code != 200:
        logger.error("[chat] endpoint responded %s: %s", resp.status_code, resp.text)
        raise AppError("Failed to get response from AI assistant")

    try:
        return resp.json()["message"]["content"]
    except (ValueError, KeyError, TypeError) as e:
        logger.error("[chat] unexpected response body: %s", resp.text)
        raise AppError("Failed to get response from AI assistant") from e
