"""Claude Code transcripts: ~/.claude/projects/<dash-encoded cwd>/*.jsonl."""

import json

from contextresume.sessions.base import SessionSource, iter_json_lines, stat_candidates
from contextresume.sessions.models import Candidate, Fragment, SessionSummary
from contextresume.sessions.paths import claude_project_dir_name
from contextresume.sessions.preview import render_transcript, user_texts


def content_text(content) -> str:
    """Message content is either plain text or a list of parts with text fields."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return " ".join(
            part.get("text") or "" for part in content if isinstance(part, dict)
        )
    return ""


def parse_record(line: str) -> Fragment | None:
    try:
        data = json.loads(line)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None

    message = data.get("message")
    content = message.get("content") if isinstance(message, dict) else None
    if content:
        role = "user" if data.get("type") == "user" else "assistant"
        return Fragment(role, content_text(content))
    if isinstance(data.get("display"), str) and data["display"]:
        return Fragment("system", data["display"])
    return None


class ClaudeSource(SessionSource):
    name = "claude"

    def locate(self, cwd: str) -> list[Candidate]:
        project_dir = self.root / "projects" / claude_project_dir_name(cwd)
        if not project_dir.is_dir():
            return []
        return stat_candidates(project_dir.glob("*.jsonl"))

    def parse(self, candidate: Candidate) -> SessionSummary | None:
        text = candidate.path.read_text(encoding="utf-8", errors="replace")
        lines = list(iter_json_lines(text))
        if not lines:
            return None

        fragments = [f for f in map(parse_record, lines) if f is not None]
        return self.summarize(
            candidate,
            session_id=candidate.path.stem,
            prompts=user_texts(fragments),
            preview_text=render_transcript(fragments),
        )
