"""Session summary models shared by every source."""

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

SourceName = Literal["claude", "codex", "cursor", "gemini"]
Role = Literal["user", "assistant", "system"]


class SessionSourceError(Exception):
    """An artifact could not be read by its source."""


class StoreQueryError(SessionSourceError):
    """The embedded store query failed or produced too much output."""


@dataclass(frozen=True)
class Fragment:
    """One role-tagged piece of transcript text."""

    role: Role
    text: str


@dataclass(frozen=True)
class Candidate:
    """A located transcript artifact, before parsing."""

    path: Path
    mtime_ms: int

    @classmethod
    def from_path(cls, path: Path) -> "Candidate":
        return cls(path=path, mtime_ms=path.stat().st_mtime_ns // 1_000_000)


class SessionSummary(BaseModel):
    """A normalized summary of one agent transcript."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(description="Transcript file stem, or the chat directory name for cursor")
    title: str = Field(description="First user message, truncated")
    preview: str = Field(description="Middle-elided excerpt of the transcript")
    user_prompts: list[str] = Field(default_factory=list, alias="userPrompts")
    timestamp: int = Field(description="Last activity in milliseconds since the epoch")
    source: SourceName
    path: str = Field(description="Absolute path to the transcript artifact")

    @field_validator("user_prompts")
    @classmethod
    def _drop_blank_prompts(cls, prompts: list[str]) -> list[str]:
        return [p for p in prompts if p.strip()]
