# =============================================
# File: app/utils/metrics.py
# Purpose: In-process counters & latency stats for /metrics
# =============================================
from __future__ import annotations
from typing import Dict, Any, List
import threading
import time

_lock = threading.Lock()

_counters: Dict[str, int] = {
    "chat_requests_total": 0,
    "chat_fallback_total": 0,
    "followups_total": 0,
    "renders_total": 0,
}

# Labeled counters
_model_usage: Dict[str, int] = {}           # model -> count
_followup_strategy: Dict[str, int] = {      # how suggestions were chosen
    "default": 0,
    "property": 0,
    "sampled": 0,
}

# Fixed-bucket histogram for model latency (milliseconds), last slot is +inf
_latency_buckets: List[int] = [100, 250, 500, 1000, 2000, 5000, 10000]
_latency_counts: List[int] = [0 for _ in _latency_buckets] + [0]

# Per-endpoint latency samples (bounded)
_MAX_SAMPLES: int = 1000
_endpoint_latency: Dict[str, List[float]] = {}   # "METHOD /path" -> [ms]
_endpoint_counts: Dict[str, int] = {}


def _avg(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _p95(values: List[float]) -> float:
    if not values:
        return 0.0
    xs = sorted(values)
    return xs[int(0.95 * (len(xs) - 1))]


def _observe_latency_ms(ms: int) -> None:
    idx = len(_latency_buckets)
    for i, thr in enumerate(_latency_buckets):
        if ms <= thr:
            idx = i
            break
    _latency_counts[idx] += 1


def record_chat(latency_ms: int, model: str | None, fallback: bool) -> None:
    with _lock:
        _counters["chat_requests_total"] += 1
        if fallback:
            _counters["chat_fallback_total"] += 1
        if model:
            _model_usage[model] = _model_usage.get(model, 0) + 1
        _observe_latency_ms(int(latency_ms))


def record_followups(strategy: str) -> None:
    with _lock:
        _counters["followups_total"] += 1
        _followup_strategy[strategy] = _followup_strategy.get(strategy, 0) + 1


def record_render() -> None:
    with _lock:
        _counters["renders_total"] += 1


def record_endpoint(method: str, path: str, latency_ms: float) -> None:
    key = f"{method.upper()} {path}"
    with _lock:
        _endpoint_counts[key] = _endpoint_counts.get(key, 0) + 1
        buf = _endpoint_latency.setdefault(key, [])
        buf.append(float(latency_ms))
        if len(buf) > _MAX_SAMPLES:
            del buf[: len(buf) - _MAX_SAMPLES]


def snapshot() -> Dict[str, Any]:
    with _lock:
        perf: Dict[str, Dict[str, float]] = {}
        for key, buf in _endpoint_latency.items():
            perf[key] = {
                "count": float(_endpoint_counts.get(key, 0)),
                "avg_latency_ms": _avg(buf),
                "p95_latency_ms": _p95(buf),
            }
        return {
            "counters": dict(_counters),
            "followup_strategy": dict(_followup_strategy),
            "model_usage": dict(_model_usage),
            "model_latency_ms": {
                "buckets": list(_latency_buckets) + ["+Inf"],
                "counts": list(_latency_counts),
            },
            "performance": {
                "endpoints": perf,
                "generated_at": time.time(),
            },
        }


def reset() -> None:
    with _lock:
        for k in _counters:
            _counters[k] = 0
        for k in _followup_strategy:
            _followup_strategy[k] = 0
        _model_usage.clear()
        for i in range(len(_latency_counts)):
            _latency_counts[i] = 0
        _endpoint_latency.clear()
        _endpoint_counts.clear()
