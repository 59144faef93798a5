# =============================================
# File: tests/test_chat_endpoint.py
# Purpose: /chat wiring with the model adapter stubbed out
# =============================================
import sys, os
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from fastapi.testclient import TestClient

from app.services.generation import ERROR_REPLY


def _mount_client(monkeypatch, reply, meta):
    calls = []

    def _stub_generate_reply(message, history=None):
        calls.append((message, list(history or [])))
        return reply, meta

    import app.routers.chat as chat_mod
    monkeypatch.setattr(chat_mod, "generate_reply", _stub_generate_reply)

    from app.main import app
    return TestClient(app), calls


def test_chat_returns_rendered_reply_and_followups(monkeypatch):
    client, calls = _mount_client(
        monkeypatch,
        "### HDB options\n- **BTO** flats",
        {"model": "stub-model", "fallback": False},
    )
    r = client.post("/chat", json={"message": "  Tell me about HDB  ", "history": []})
    assert r.status_code == 200
    data = r.json()

    assert data["reply"].startswith("### HDB options")
    assert '<h3 class="text-lg font-bold mb-2 mt-3">HDB options</h3>' in data["html"]
    assert "<strong>BTO</strong>" in data["html"]
    assert data["model"] == "stub-model"
    assert data["fallback"] is False
    assert data["followups"][0] == "How does BTO compare to resale HDB in terms of value?"
    assert len(data["followups"]) == 3
    # message is trimmed before reaching the model
    assert calls[0][0] == "Tell me about HDB"


def test_chat_passes_history_to_model(monkeypatch):
    client, calls = _mount_client(monkeypatch, "Sure.", {"model": "stub-model", "fallback": False})
    history = [
        {"role": "user", "content": "Hi"},
        {"role": "assistant", "content": "Hello! How can I help?"},
    ]
    r = client.post("/chat", json={"message": "Condo tips?", "history": history})
    assert r.status_code == 200
    sent = calls[0][1]
    assert [t.role for t in sent] == ["user", "assistant"]
    assert sent[1].content == "Hello! How can I help?"


def test_chat_failure_has_no_followups(monkeypatch):
    client, _ = _mount_client(monkeypatch, ERROR_REPLY, {"model": None, "fallback": True, "error": "boom"})
    r = client.post("/chat", json={"message": "Tell me about HDB"})
    assert r.status_code == 200
    data = r.json()
    assert data["reply"] == ERROR_REPLY
    assert data["fallback"] is True
    assert data["followups"] == []


def test_chat_rejects_blank_message(monkeypatch):
    client, calls = _mount_client(monkeypatch, "unused", {"model": None, "fallback": False})
    r = client.post("/chat", json={"message": "   "})
    assert r.status_code == 422
    assert calls == []


def test_chat_rejects_unknown_role(monkeypatch):
    client, _ = _mount_client(monkeypatch, "unused", {"model": None, "fallback": False})
    r = client.post("/chat", json={"message": "Hi", "history": [{"role": "system", "content": "x"}]})
    assert r.status_code == 422
