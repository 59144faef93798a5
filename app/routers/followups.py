# app/routers/followups.py
from __future__ import annotations

import random
from typing import List, Literal, Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from app.services.followups import follow_ups_with_strategy
from app.utils import slog
from app.utils.topics import ConversationTurn

router = APIRouter(tags=["followups"])


class FollowUpsRequest(BaseModel):
    """
    - latest: the newest assistant reply.
    - history: prior turns, oldest first; omit it to get the default suggestions.
    - seed: fixes the random pick of the sampled strategy.
    - prefer_stable: try the deterministic property-specific rules first.
    """
    latest: str = Field("", max_length=20000)
    history: Optional[List[ConversationTurn]] = None
    seed: Optional[int] = None
    prefer_stable: bool = True


class FollowUpsResponse(BaseModel):
    followups: List[str]
    strategy: Literal["default", "property", "sampled"]


@router.post("/followups", response_model=FollowUpsResponse)
def post_followups(req: FollowUpsRequest, request: Request) -> FollowUpsResponse:
    rng = random.Random(req.seed) if req.seed is not None else None
    followups, strategy = follow_ups_with_strategy(
        req.latest, req.history, rng=rng, prefer_stable=req.prefer_stable
    )
    request.state.log_context = {
        "qhash": slog.qhash(req.latest),
        "followup_strategy": strategy,
    }
    return FollowUpsResponse(followups=followups, strategy=strategy)
