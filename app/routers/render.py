# app/routers/render.py
from __future__ import annotations

from typing import List

from fastapi import APIRouter
from pydantic import BaseModel, Field

from app.utils.markdown import Block, render, render_blocks
from app.utils.metrics import record_render

router = APIRouter(tags=["render"])


class RenderRequest(BaseModel):
    content: str = Field("", max_length=50000)


class RenderResponse(BaseModel):
    html: str
    blocks: List[Block]


@router.post("/render", response_model=RenderResponse)
def post_render(req: RenderRequest) -> RenderResponse:
    """Escaped HTML plus a per-line block view of the same content."""
    record_render()
    return RenderResponse(html=render(req.content), blocks=render_blocks(req.content))
