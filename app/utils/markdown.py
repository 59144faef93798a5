# =============================================
# File: app/utils/markdown.py
# Purpose: Render the small markdown subset the model emits into safe HTML
# =============================================
from __future__ import annotations
import re
from typing import List, Literal

from markupsafe import escape
from pydantic import BaseModel

SECTION_EMOJIS = ("🔎", "🏠", "💰", "📍")

_HEADER_RE = re.compile(r"^###\s+(.+)$", re.MULTILINE)
_BOLD_RE = re.compile(r"\*\*(.+?)\*\*")
_BULLET_RE = re.compile(r"^-\s+(.+)$", re.MULTILINE)
_NUMBERED_RE = re.compile(r"^(\d+)\. (.+)$", re.MULTILINE)
_SECTION_RE = re.compile(
    r"^(" + "|".join(SECTION_EMOJIS) + r")\s+(\d+\. .+)$", re.MULTILINE
)

BlockKind = Literal["heading", "bullet", "numbered", "section", "paragraph", "blank"]


class Block(BaseModel):
    kind: BlockKind
    text: str = ""   # plain text, markers removed
    html: str = ""   # escaped text with inline bold applied


def _escape(content: str) -> str:
    return str(escape(content or ""))


def _bold(html: str) -> str:
    return _BOLD_RE.sub(r"<strong>\1</strong>", html)


def render(content: str) -> str:
    """
    Convert model output to HTML. The input is escaped before any rule runs,
    so the only tags in the result are the ones introduced here.
    Rule order matters: each step sees the output of the previous one.
    """
    html = _escape(content)
    html = _HEADER_RE.sub(r'<h3 class="text-lg font-bold mb-2 mt-3">\1</h3>', html)
    html = _bold(html)
    html = _BULLET_RE.sub(r'<div class="ml-4 my-1">• \1</div>', html)
    html = _NUMBERED_RE.sub(r'<div class="ml-4 my-1">\1. \2</div>', html)
    html = _SECTION_RE.sub(r'<div class="font-bold text-blue-800 mt-3 mb-2">\1 \2</div>', html)
    return html.replace("\n", "<br />")


def _block(kind: BlockKind, text: str) -> Block:
    return Block(kind=kind, text=_BOLD_RE.sub(r"\1", text), html=_bold(_escape(text)))


def render_blocks(content: str) -> List[Block]:
    """One block per input line; lets the UI choose how to display each kind."""
    blocks: List[Block] = []
    for line in (content or "").split("\n"):
        if not line.strip():
            blocks.append(Block(kind="blank"))
            continue
        header = _HEADER_RE.match(line)
        bullet = _BULLET_RE.match(line)
        section = _SECTION_RE.match(line)
        if header:
            blocks.append(_block("heading", header.group(1)))
        elif bullet:
            blocks.append(_block("bullet", bullet.group(1)))
        elif _NUMBERED_RE.match(line):
            blocks.append(_block("numbered", line))
        elif section:
            blocks.append(_block("section", f"{section.group(1)} {section.group(2)}"))
        else:
            blocks.append(_block("paragraph", line))
    return blocks
