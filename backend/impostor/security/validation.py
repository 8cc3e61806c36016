from __future__ import annotations

import re
import unicodedata
import uuid
from typing import Any

from ..config import Config
from ..game.errors import ValidationError


JOIN_CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
ALLOWED_PUNCTUATION = frozenset("-_'.,!?¿¡&()\"")

_join_code_re = re.compile(r"[A-Z0-9]{%d}" % Config.JOIN_CODE_LENGTH)
_whitespace_re = re.compile(r"\s+")


def _allowed(ch: str) -> bool:
    if ch == " " or ch in ALLOWED_PUNCTUATION:
        return True
    # Letters, combining marks and digits of any script.
    return unicodedata.category(ch)[0] in ("L", "M", "N")


def sanitize_text(text: str) -> str:
    """Drop anything outside letters/digits/spaces/limited punctuation."""
    t = unicodedata.normalize("NFC", text or "")
    t = _whitespace_re.sub(" ", t)
    t = "".join(ch for ch in t if _allowed(ch))
    return _whitespace_re.sub(" ", t).strip()


def _clean_text(raw: Any, field: str, max_len: int) -> str:
    if not isinstance(raw, str):
        raise ValidationError(f"{field} must be a string", code=f"invalid_{field}")
    t = raw.strip()
    if not t:
        raise ValidationError(f"{field} is required", code=f"invalid_{field}")
    if len(t) > max_len:
        raise ValidationError(
            f"{field} must be at most {max_len} characters", code=f"invalid_{field}"
        )
    cleaned = sanitize_text(t)
    if not cleaned:
        raise ValidationError(f"{field} contains no usable characters", code=f"invalid_{field}")
    return cleaned


def clean_name(raw: Any) -> str:
    return _clean_text(raw, "name", Config.MAX_NAME_LEN)


def clean_word(raw: Any) -> str:
    return _clean_text(raw, "word", Config.MAX_WORD_LEN)


def clean_words(raw: Any) -> list[str]:
    if not isinstance(raw, list):
        raise ValidationError("words must be a list", code="invalid_words")
    if len(raw) > Config.MAX_WORDS:
        raise ValidationError(
            f"At most {Config.MAX_WORDS} words are allowed", code="too_many_words"
        )
    words: list[str] = []
    for item in raw:
        w = clean_word(item)
        if w not in words:
            words.append(w)
    return words


def clean_impostor_count(raw: Any) -> int:
    # bool is an int subclass; reject it explicitly.
    if isinstance(raw, bool):
        raise ValidationError("impostorCount must be an integer", code="invalid_impostor_count")
    try:
        n = int(raw)
    except (TypeError, ValueError):
        raise ValidationError("impostorCount must be an integer", code="invalid_impostor_count")
    if isinstance(raw, float) and raw != n:
        raise ValidationError("impostorCount must be an integer", code="invalid_impostor_count")
    upper = max(1, Config.MAX_PARTICIPANTS // 2)
    if n < 1 or n > upper:
        raise ValidationError(
            f"impostorCount must be between 1 and {upper}", code="invalid_impostor_count"
        )
    return n


def is_uuid(raw: Any) -> bool:
    if not isinstance(raw, str) or len(raw) != 36:
        return False
    try:
        return str(uuid.UUID(raw)) == raw.lower()
    except ValueError:
        return False


def validate_uuid(raw: Any, field: str) -> str:
    if not is_uuid(raw):
        raise ValidationError(f"{field} is malformed", code=f"invalid_{field}")
    return raw.lower()


def normalize_join_code(raw: Any) -> str:
    code = raw.strip().upper() if isinstance(raw, str) else ""
    if not _join_code_re.fullmatch(code):
        raise ValidationError("Join code must be 6 letters or digits", code="invalid_join_code")
    return code
