# =============================================
# File: app/routers/metrics.py
# Purpose: Liveness + in-process metrics as JSON
# =============================================
from __future__ import annotations
from fastapi import APIRouter
from app.utils.metrics import snapshot

router = APIRouter(tags=["ops"])


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/metrics")
def get_metrics():
    """Counters, follow-up strategy usage and per-endpoint latency."""
    return snapshot()
