"""Gemini CLI chats: ~/.gemini/tmp/<sha256 of cwd>/chats/*.json."""

import json
from datetime import datetime, timezone

from contextresume.sessions.base import SessionSource, stat_candidates
from contextresume.sessions.models import Candidate, Fragment, SessionSummary
from contextresume.sessions.paths import gemini_project_hash
from contextresume.sessions.preview import user_texts


def content_text(content) -> str:
    """Content is a string, or a list of strings and {"text": ...} parts."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        texts = []
        for part in content:
            if isinstance(part, str):
                texts.append(part)
            elif isinstance(part, dict) and isinstance(part.get("text"), str):
                texts.append(part["text"])
        return " ".join(texts)
    return ""


def parse_message(message) -> Fragment | None:
    if not isinstance(message, dict) or not message.get("content"):
        return None
    role = "user" if message.get("type") == "user" else "assistant"
    return Fragment(role, content_text(message["content"]))


def parse_timestamp(value) -> int | None:
    """ISO-8601 instant to epoch milliseconds. Naive values are taken as UTC."""
    if not isinstance(value, str):
        return None
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


class GeminiSource(SessionSource):
    name = "gemini"

    def locate(self, cwd: str) -> list[Candidate]:
        chats_dir = self.root / "tmp" / gemini_project_hash(cwd) / "chats"
        if not chats_dir.is_dir():
            return []
        return stat_candidates(chats_dir.glob("*.json"))

    def parse(self, candidate: Candidate) -> SessionSummary | None:
        data = json.loads(candidate.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            return None

        messages = data.get("messages")
        fragments = [
            f
            for f in map(parse_message, messages if isinstance(messages, list) else [])
            if f is not None
        ]
        prompts = user_texts(fragments)
        return self.summarize(
            candidate,
            session_id=candidate.path.stem,
            prompts=prompts,
            preview_text="\n\n".join(p for p in prompts if p.strip()),
            timestamp=parse_timestamp(data.get("lastUpdated")),
        )
