# =============================================
# File: app/services/generation.py
# Purpose: Chat reply from OpenAI (gpt-4o-mini) with timeout, retries and substitute replies
# =============================================
from __future__ import annotations
import os
from typing import Dict, List, Optional, Sequence, Tuple

from loguru import logger
from openai import OpenAI

from ..utils.topics import ConversationTurn

DEFAULT_MODEL = os.getenv("LLM_MODEL", "gpt-4o-mini")
DEFAULT_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.2"))
MAX_TOKENS = int(os.getenv("LLM_MAX_TOKENS", "900"))

SYS_PROMPT = (
    "You are a helpful sales assistant. You handle queries about property, car, "
    "insurance, and medical center services."
)

NOT_CONFIGURED_REPLY = "Sorry, I couldn't process your request. Please try again."
ERROR_REPLY = "Sorry, there was an error processing your request. Please try again later."


def _get_call_limits() -> tuple[float, int]:
    """(timeout seconds, retries); read at call time so tests can tune them."""
    try:
        timeout_s = float(os.getenv("LLM_TIMEOUT_SECONDS", "20"))
    except ValueError:
        timeout_s = 20.0
    try:
        retries = int(os.getenv("LLM_MAX_RETRIES", "1"))
    except ValueError:
        retries = 1
    return timeout_s, retries


def _openai_client() -> OpenAI:
    return OpenAI()


def build_messages(message: str, history: Optional[Sequence[ConversationTurn]] = None) -> List[Dict]:
    msgs: List[Dict] = [{"role": "system", "content": SYS_PROMPT}]
    for turn in history or []:
        msgs.append({"role": turn.role, "content": turn.content})
    msgs.append({"role": "user", "content": message.strip()})
    return msgs


def _chat_completion_with_retry(client, messages) -> Tuple[str | None, str | None, str | None]:
    """
    Try the call up to retries+1 times.
    Returns (text, model, None) or (None, None, last_error).
    """
    timeout_s, retries = _get_call_limits()
    last_err: Exception | None = None
    for attempt in range(max(1, retries + 1)):
        try:
            resp = client.chat.completions.create(
                model=DEFAULT_MODEL,
                temperature=DEFAULT_TEMPERATURE,
                max_tokens=MAX_TOKENS,
                messages=messages,
                timeout=timeout_s,
            )
            text = (resp.choices[0].message.content or "").strip()
            return text, getattr(resp, "model", DEFAULT_MODEL), None
        except Exception as e:
            last_err = e
            logger.warning(f"[generation] attempt={attempt + 1} failed: {e}")
    return None, None, str(last_err) if last_err else "empty response"


def generate_reply(
    message: str, history: Optional[Sequence[ConversationTurn]] = None
) -> Tuple[str, Dict]:
    """
    Returns (reply_text, meta).
    meta: {"model": str | None, "fallback": bool, "error"?: str}
    On any failure the reply is a fixed substitute message and fallback is True.
    """
    if not os.getenv("OPENAI_API_KEY"):
        logger.error("[generation] OPENAI_API_KEY is missing")
        return NOT_CONFIGURED_REPLY, {"model": None, "fallback": True, "error": "not_configured"}

    text, model, err = _chat_completion_with_retry(_openai_client(), build_messages(message, history))
    if not text:
        return ERROR_REPLY, {"model": None, "fallback": True, "error": err or "empty response"}

    logger.info(f"[generation] model={model} chars={len(text)}")
    return text, {"model": model, "fallback": False}
