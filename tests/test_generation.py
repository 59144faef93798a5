# =============================================
# File: tests/test_generation.py
# Purpose: Model adapter: message building, retries, substitute replies
# =============================================
import sys, os
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from types import SimpleNamespace

import app.services.generation as gen
from app.utils.topics import ConversationTurn


class _FakeClient:
    def __init__(self, replies):
        # each item is a str (answer) or an Exception (raised)
        self._replies = list(replies)
        self.calls = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def _create(self, **kwargs):
        self.calls.append(kwargs)
        item = self._replies.pop(0)
        if isinstance(item, Exception):
            raise item
        msg = SimpleNamespace(content=item)
        return SimpleNamespace(choices=[SimpleNamespace(message=msg)], model="gpt-4o-mini-test")


def test_build_messages_orders_system_history_user():
    history = [
        ConversationTurn(role="user", content="Hi"),
        ConversationTurn(role="assistant", content="Hello"),
    ]
    msgs = gen.build_messages("  Condo tips?  ", history)
    assert [m["role"] for m in msgs] == ["system", "user", "assistant", "user"]
    assert msgs[0]["content"] == gen.SYS_PROMPT
    assert msgs[-1]["content"] == "Condo tips?"


def test_missing_api_key_returns_substitute(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    reply, meta = gen.generate_reply("Hello")
    assert reply == gen.NOT_CONFIGURED_REPLY
    assert meta["fallback"] is True
    assert meta["model"] is None


def test_successful_reply(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    fake = _FakeClient(["  Here is an answer.  "])
    monkeypatch.setattr(gen, "_openai_client", lambda: fake)

    reply, meta = gen.generate_reply("Hello")
    assert reply == "Here is an answer."
    assert meta == {"model": "gpt-4o-mini-test", "fallback": False}
    assert fake.calls[0]["model"] == gen.DEFAULT_MODEL


def test_retries_then_succeeds(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("LLM_MAX_RETRIES", "1")
    fake = _FakeClient([RuntimeError("timeout"), "Second try worked."])
    monkeypatch.setattr(gen, "_openai_client", lambda: fake)

    reply, meta = gen.generate_reply("Hello")
    assert reply == "Second try worked."
    assert len(fake.calls) == 2


def test_all_attempts_fail(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("LLM_MAX_RETRIES", "2")
    fake = _FakeClient([RuntimeError("down")] * 3)
    monkeypatch.setattr(gen, "_openai_client", lambda: fake)

    reply, meta = gen.generate_reply("Hello")
    assert reply == gen.ERROR_REPLY
    assert meta["fallback"] is True
    assert "down" in meta["error"]
    assert len(fake.calls) == 3


def test_timeout_comes_from_env(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("LLM_TIMEOUT_SECONDS", "3.5")
    fake = _FakeClient(["ok"])
    monkeypatch.setattr(gen, "_openai_client", lambda: fake)

    gen.generate_reply("Hello")
    assert fake.calls[0]["timeout"] == 3.5
