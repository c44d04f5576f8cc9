"""Codex CLI rollouts: ~/.codex/sessions/YYYY/MM/DD/*.jsonl.

Rollout files are not grouped by project, so each file's first record
(``session_meta``) is peeked to find the directory it was recorded in.
"""

import json
from pathlib import Path

from contextresume.config import CODEX_PEEK_BYTES
from contextresume.sessions.base import SessionSource, iter_json_lines
from contextresume.sessions.models import Candidate, Fragment, SessionSummary
from contextresume.sessions.preview import render_transcript, user_texts

# payload role -> (content part type carrying the text, fragment role)
MESSAGE_PARTS = {
    "user": ("input_text", "user"),
    "assistant": ("output_text", "assistant"),
}


def read_session_cwd(path: Path, peek_bytes: int = CODEX_PEEK_BYTES) -> str | None:
    """The cwd recorded in a rollout's session_meta line, reading only its head."""
    try:
        with path.open("rb") as f:
            head = f.read(peek_bytes)
        meta = json.loads(head.decode("utf-8", errors="ignore").split("\n", 1)[0])
    except (OSError, ValueError):
        return None
    if not isinstance(meta, dict) or meta.get("type") != "session_meta":
        return None
    payload = meta.get("payload")
    cwd = payload.get("cwd") if isinstance(payload, dict) else None
    return cwd if isinstance(cwd, str) else None


def parse_record(line: str) -> Fragment | None:
    try:
        data = json.loads(line)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict) or data.get("type") != "response_item":
        return None

    payload = data.get("payload")
    if not isinstance(payload, dict) or payload.get("type") != "message":
        return None
    if payload.get("role") not in MESSAGE_PARTS:
        return None

    part_type, role = MESSAGE_PARTS[payload["role"]]
    content = payload.get("content")
    parts = content if isinstance(content, list) else []
    text = next(
        (
            p.get("text") or ""
            for p in parts
            if isinstance(p, dict) and p.get("type") == part_type
        ),
        "",
    )
    if role == "assistant" and not text:
        return None
    return Fragment(role, text)


class CodexSource(SessionSource):
    name = "codex"

    def __init__(self, home: Path | None = None, peek_bytes: int = CODEX_PEEK_BYTES):
        super().__init__(home)
        self.peek_bytes = peek_bytes

    def locate(self, cwd: str) -> list[Candidate]:
        sessions_dir = self.root / "sessions"
        if not sessions_dir.is_dir():
            return []

        candidates = []
        for path in sessions_dir.rglob("*.jsonl"):
            if read_session_cwd(path, self.peek_bytes) != cwd:
                continue
            try:
                candidates.append(Candidate.from_path(path))
            except OSError:
                continue
        return candidates

    def parse(self, candidate: Candidate) -> SessionSummary | None:
        text = candidate.path.read_text(encoding="utf-8", errors="replace")
        fragments = [f for f in map(parse_record, iter_json_lines(text)) if f is not None]
        return self.summarize(
            candidate,
            session_id=candidate.path.stem,
            prompts=user_texts(fragments),
            preview_text=render_transcript(fragments),
        )
