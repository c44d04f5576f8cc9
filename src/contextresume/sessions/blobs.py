"""Decoding of hex-encoded values read from Cursor Agent's store.db.

Metadata is JSON, hex-encoded once by the query and usually once more by
Cursor itself. Blobs are either JSON messages or protobuf-style records whose
first field (tag 0x0A: field 1, length-delimited) holds the message text.
"""

import json
import re
import unicodedata

from contextresume.config import PLAUSIBLE_TEXT_RATIO

LENGTH_DELIMITED_FIELD_1 = 0x0A
JSON_OBJECT_START = ord("{")
MAX_VARINT_BYTES = 10

_HEX = re.compile(r"[0-9a-fA-F]+")
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
_C0_CONTROLS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")
_USER_QUERY = re.compile(r"^<user_query>(.*)</user_query>$", re.DOTALL)
_TEXT_CATEGORIES = ("L", "N", "P")


def hex_to_bytes(value: str) -> bytes | None:
    try:
        return bytes.fromhex(value.strip())
    except ValueError:
        return None


def decode_varint(data: bytes, offset: int = 0) -> tuple[int, int] | None:
    """Base-128 varint at offset. Returns (value, bytes consumed), None if truncated."""
    value = 0
    for i in range(MAX_VARINT_BYTES):
        if offset + i >= len(data):
            return None
        byte = data[offset + i]
        value |= (byte & 0x7F) << (7 * i)
        if not byte & 0x80:
            return value, i + 1
    return None


def is_plausible_text(text: str, min_ratio: float = PLAUSIBLE_TEXT_RATIO) -> bool:
    """Whether decoded text looks human-written rather than misread binary."""
    if not text or "\ufffd" in text:
        return False
    categories = [unicodedata.category(ch) for ch in text]
    readable = sum(1 for c in categories if c.startswith(_TEXT_CATEGORIES) or c == "Zs")
    return readable / len(text) >= min_ratio


def sanitize(text: str) -> str:
    """Strip control characters, surrounding whitespace and <user_query> tags."""
    text = _CONTROL_CHARS.sub("", text).strip()
    match = _USER_QUERY.match(text)
    if match:
        text = match.group(1).strip()
    return text


def decode_metadata(value: str) -> dict | None:
    """Decode the chat metadata row; None when it is not a JSON object."""
    raw = hex_to_bytes(value)
    if raw is None:
        return None
    try:
        text = raw.decode("utf-8").strip()
    except UnicodeDecodeError:
        return None

    candidates = []
    if _HEX.fullmatch(text):
        inner = hex_to_bytes(text)
        if inner is not None:
            candidates.append(inner.decode("utf-8", errors="replace"))
    candidates.append(text)

    for candidate in candidates:
        try:
            meta = json.loads(candidate)
        except ValueError:
            continue
        if isinstance(meta, dict):
            return meta
    return None


def _message_text(content) -> str:
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "\n".join(
            part.get("text") or ""
            for part in content
            if isinstance(part, dict) and part.get("type") == "text"
        )
    return ""


def _decode_json_blob(data: bytes, min_ratio: float) -> str | None:
    try:
        message = json.loads(data.decode("utf-8"))
    except ValueError:
        return None
    if not isinstance(message, dict) or message.get("role") != "user":
        return None
    if not message.get("content"):
        return None

    text = sanitize(_message_text(message["content"]))
    if "<user_info>" in text or not is_plausible_text(text, min_ratio):
        return None
    return text


def _decode_field_blob(data: bytes, min_ratio: float) -> str | None:
    varint = decode_varint(data, 1)
    if varint is None:
        return None
    length, consumed = varint
    start = 1 + consumed
    if start + length > len(data):
        return None

    raw = data[start : start + length].decode("utf-8", errors="replace")
    if _C0_CONTROLS.search(raw):
        return None
    text = sanitize(raw)
    return text if is_plausible_text(text, min_ratio) else None


def decode_blob(value: str, min_ratio: float = PLAUSIBLE_TEXT_RATIO) -> str | None:
    """Recover a user prompt from one hex-encoded blob, or None."""
    data = hex_to_bytes(value)
    if not data:
        return None
    if data[0] == JSON_OBJECT_START:
        return _decode_json_blob(data, min_ratio)
    if data[0] == LENGTH_DELIMITED_FIELD_1:
        return _decode_field_blob(data, min_ratio)
    return None
