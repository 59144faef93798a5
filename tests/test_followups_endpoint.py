# =============================================
# File: tests/test_followups_endpoint.py
# =============================================
import sys, os
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from fastapi.testclient import TestClient
from app.main import app

client = TestClient(app)


def test_followups_defaults_without_history():
    r = client.post("/followups", json={"latest": ""})
    assert r.status_code == 200
    data = r.json()
    assert data["strategy"] == "default"
    assert data["followups"] == [
        "What are the steps to buy a property in Singapore?",
        "Can PRs or foreigners buy property in Singapore?",
        "How much downpayment do I need for a condo or HDB?",
    ]


def test_followups_property_strategy():
    payload = {
        "latest": "BTO flats from HDB are cheaper.",
        "history": [{"role": "user", "content": "Is HDB a good choice?"}],
    }
    r = client.post("/followups", json=payload)
    assert r.status_code == 200
    data = r.json()
    assert data["strategy"] == "property"
    assert data["followups"][0] == "How does BTO compare to resale HDB in terms of value?"


def test_followups_seed_makes_sampling_repeatable():
    payload = {
        "latest": "Condo prices near the MRT vary a lot",
        "history": [{"role": "user", "content": "I want a condo in Bishan"}],
        "seed": 42,
        "prefer_stable": False,
    }
    first = client.post("/followups", json=payload).json()
    second = client.post("/followups", json=payload).json()
    assert first["strategy"] == "sampled"
    assert first["followups"] == second["followups"]
    assert len(set(first["followups"])) == 3
