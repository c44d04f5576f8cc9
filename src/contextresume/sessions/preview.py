"""Title and preview shaping shared by all sources."""

from contextresume.config import NEW_SESSION_TITLE, PREVIEW_MAX_CHARS, TITLE_MAX_CHARS
from contextresume.sessions.models import Fragment

ROLE_LABELS = {"user": "User", "assistant": "Assistant", "system": "System"}


def make_title(text: str, max_chars: int = TITLE_MAX_CHARS) -> str:
    """Truncate a title to max_chars, marking the cut with an ellipsis."""
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + "..."


def make_preview(content: str, max_chars: int = PREVIEW_MAX_CHARS) -> str:
    """Keep the start and end of long content, eliding the middle.

    Content within ``max_chars`` is returned as-is. Longer content becomes the
    first and last ``max_chars // 2`` characters around a marker saying how
    many characters were dropped.
    """
    if len(content) <= max_chars:
        return content

    half = max_chars // 2
    omitted = len(content) - 2 * half
    return f"{content[:half]}\n\n... [{omitted} characters omitted] ...\n\n{content[-half:]}"


def first_prompt(prompts: list[str]) -> str:
    """The first non-blank prompt, or the new-session sentinel."""
    for prompt in prompts:
        if prompt.strip():
            return prompt
    return NEW_SESSION_TITLE


def render_transcript(fragments: list[Fragment]) -> str:
    """Interleave fragments as 'Role: text' lines."""
    return "".join(f"{ROLE_LABELS[f.role]}: {f.text}\n" for f in fragments)


def user_texts(fragments: list[Fragment]) -> list[str]:
    return [f.text for f in fragments if f.role == "user"]
