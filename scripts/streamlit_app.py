# =============================================
# File: scripts/streamlit_app.py
# Purpose: Streamlit chat page for the property assistant
# =============================================

# streamlit_app.py
# -----------------------------------------------------------
# Chat UI that talks to the FastAPI backend:
#   POST /chat  { message: str, history: [{role, content}] }
#     -> { reply, html, followups: [str], model, fallback }
#
# Follow-up suggestions are shown as buttons; clicking one sends it
# through the same path as a typed message.
#
# How to run:
#   streamlit run scripts/streamlit_app.py
# -----------------------------------------------------------

from __future__ import annotations

from typing import Any, Dict, List

import requests
import streamlit as st

NETWORK_ERROR_REPLY = "Sorry, there was an error processing your request. Please try again later."

st.set_page_config(page_title="Sales Assistant", page_icon="🏠", layout="centered")

# ---------- Session state ----------

if "messages" not in st.session_state:
    # [{role, content, html}]
    st.session_state.messages: List[Dict[str, Any]] = []

if "followups" not in st.session_state:
    st.session_state.followups: List[str] = []

if "api_base" not in st.session_state:
    st.session_state.api_base = "http://localhost:8000"

# ---------- Sidebar ----------

st.sidebar.header("Settings")
api_base = st.sidebar.text_input("API base URL", st.session_state.api_base)
st.session_state.api_base = api_base.strip() or st.session_state.api_base
if st.sidebar.button("Clear conversation"):
    st.session_state.messages = []
    st.session_state.followups = []

# ---------- Backend call ----------

def send_message(text: str) -> None:
    history = [{"role": m["role"], "content": m["content"]} for m in st.session_state.messages]
    st.session_state.messages.append({"role": "user", "content": text, "html": None})
    try:
        resp = requests.post(
            f"{st.session_state.api_base.rstrip('/')}/chat",
            json={"message": text, "history": history},
            timeout=60,
        )
        resp.raise_for_status()
        data: Dict[str, Any] = resp.json()
    except requests.RequestException:
        data = {"reply": NETWORK_ERROR_REPLY, "html": None, "followups": []}

    st.session_state.messages.append(
        {"role": "assistant", "content": data.get("reply") or "", "html": data.get("html")}
    )
    st.session_state.followups = list(data.get("followups") or [])

# ---------- Header ----------

st.title("Sales Assistant")
st.caption("Property, Car, Insurance & Medical Services")

if not st.session_state.messages:
    st.info("Welcome! How can I help you today?")

# ---------- Conversation ----------

for msg in st.session_state.messages:
    with st.chat_message(msg["role"]):
        if msg["role"] == "assistant" and msg.get("html"):
            # server-side rendering escapes model output before adding tags
            st.markdown(msg["html"], unsafe_allow_html=True)
        else:
            st.text(msg["content"])

# ---------- Follow-ups ----------

clicked = None
if st.session_state.followups:
    st.caption("You could also ask:")
    for i, q in enumerate(st.session_state.followups):
        if st.button(q, key=f"followup_{len(st.session_state.messages)}_{i}"):
            clicked = q

typed = st.chat_input("Ask about Property, Car, Insurance...")
pending = clicked or (typed.strip() if typed else None)
if pending:
    with st.spinner("Thinking..."):
        send_message(pending)
    st.rerun()
