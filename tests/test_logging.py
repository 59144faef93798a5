# =============================================
# File: tests/test_logging.py
# =============================================
import sys, os, json
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from fastapi.testclient import TestClient


def _client():
    from app.main import app
    return TestClient(app)


def _find_json_events(caplog, name: str):
    out = []
    for rec in caplog.records:
        try:
            data = json.loads(rec.message)
        except Exception:
            continue
        if data.get("event") == name:
            out.append(data)
    return out


def test_request_completed_log_carries_context(caplog):
    caplog.set_level("INFO", logger="propchat")
    client = _client()

    r = client.post("/followups", json={"latest": "Hello there", "history": []})
    assert r.status_code == 200
    assert r.headers.get("X-Request-ID")

    events = [e for e in _find_json_events(caplog, "request.completed") if e["path"] == "/followups"]
    assert events
    evt = events[-1]
    assert evt["status"] == 200
    assert evt["request_id"] == r.headers["X-Request-ID"]
    assert isinstance(evt["latency_ms"], int)
    assert evt["followup_strategy"] == "property"
    assert len(evt["qhash"]) == 10


def test_followups_event_does_not_leak_text(caplog):
    caplog.set_level("INFO", logger="propchat")
    client = _client()

    secret = "my salary is 12345 and I like Bishan"
    client.post("/followups", json={"latest": secret})

    events = _find_json_events(caplog, "followups.selected")
    assert events
    assert events[-1]["strategy"] == "default"
    assert events[-1]["count"] == 3
    assert all(secret not in rec.message for rec in caplog.records)
