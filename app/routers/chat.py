# app/routers/chat.py
from __future__ import annotations

import time
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field, field_validator

from app.services.followups import follow_ups_with_strategy
from app.services.generation import generate_reply
from app.utils import slog
from app.utils.markdown import render
from app.utils.metrics import record_chat
from app.utils.topics import ConversationTurn

router = APIRouter(tags=["chat"])


# --------- Schemas ---------

class ChatRequest(BaseModel):
    """
    Incoming chat payload.
    - message: the user's latest message.
    - history: prior turns, oldest first (optional).
    """
    message: str = Field(..., min_length=1, max_length=2000)
    history: Optional[List[ConversationTurn]] = None

    @field_validator("message")
    @classmethod
    def _trim_message(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("message must not be empty")
        return v


class ChatResponse(BaseModel):
    """
    - reply: raw model text (or the substitute message on failure).
    - html: reply rendered by the markdown formatter.
    - followups: up to 3 suggested next questions (empty on failure).
    """
    reply: str
    html: str
    followups: List[str]
    model: Optional[str] = None
    fallback: bool = False


# --------- Route ---------

@router.post("/chat", response_model=ChatResponse)
def post_chat(req: ChatRequest, request: Request) -> ChatResponse:
    t0 = time.time()
    request.state.log_context = {"qhash": slog.qhash(req.message)}

    try:
        reply, meta = generate_reply(req.message, req.history)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

    fallback = bool(meta.get("fallback"))
    latency_ms = int((time.time() - t0) * 1000)
    record_chat(latency_ms=latency_ms, model=meta.get("model"), fallback=fallback)

    followups: List[str] = []
    strategy = None
    if not fallback:
        turns = list(req.history or []) + [
            ConversationTurn(role="user", content=req.message),
            ConversationTurn(role="assistant", content=reply),
        ]
        followups, strategy = follow_ups_with_strategy(reply, turns)

    request.state.log_context.update({
        "model": meta.get("model"),
        "fallback": fallback,
        "followup_strategy": strategy,
    })
    return ChatResponse(
        reply=reply,
        html=render(reply),
        followups=followups,
        model=meta.get("model"),
        fallback=fallback,
    )
