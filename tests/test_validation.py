from __future__ import annotations

import uuid

import pytest

from impostor.game.errors import ValidationError
from impostor.security.validation import (
    clean_impostor_count,
    clean_name,
    clean_word,
    clean_words,
    is_uuid,
    normalize_join_code,
    sanitize_text,
    validate_uuid,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("  Ana   María ", "Ana María"),
        ("Bob<script>alert(1)</script>", "Bobscriptalert(1)script"),
        ("Zoë", "Zoë"),
        ("北京", "北京"),
        ("क्षत्रिय", "क्षत्रिय"),
        ("a\x00b\x07c", "abc"),
        ("tab\there", "tab here"),
        ("O'Brien-Smith!", "O'Brien-Smith!"),
        ("party 🎉", "party"),
        ("¿Qué?", "¿Qué?"),
    ],
)
def test_sanitize_text(raw, expected):
    assert sanitize_text(raw) == expected


def test_clean_name_bounds():
    assert clean_name("  Ana ") == "Ana"
    assert clean_name("x" * 50) == "x" * 50
    for bad in ("", "   ", "x" * 51, "<>", 123, None):
        with pytest.raises(ValidationError):
            clean_name(bad)


def test_clean_word_bounds():
    assert clean_word("a" * 100) == "a" * 100
    with pytest.raises(ValidationError):
        clean_word("a" * 101)


def test_clean_words():
    assert clean_words(["sol", " sol ", "luna"]) == ["sol", "luna"]
    with pytest.raises(ValidationError) as exc:
        clean_words([f"w{i}" for i in range(51)])
    assert exc.value.code == "too_many_words"
    with pytest.raises(ValidationError):
        clean_words("sol")
    with pytest.raises(ValidationError):
        clean_words(["sol", ""])


@pytest.mark.parametrize("raw, expected", [("2", 2), (3, 3), (2.0, 2), (15, 15)])
def test_clean_impostor_count_accepts(raw, expected):
    assert clean_impostor_count(raw) == expected


@pytest.mark.parametrize("raw", [True, 0, -1, 16, 2.5, "two", None])
def test_clean_impostor_count_rejects(raw):
    with pytest.raises(ValidationError):
        clean_impostor_count(raw)


def test_join_code_normalised_to_upper():
    assert normalize_join_code(" ab12cd ") == "AB12CD"
    for bad in ("AB12C", "AB12CDE", "AB-12C", "", None, 123456):
        with pytest.raises(ValidationError):
            normalize_join_code(bad)


def test_uuid_validation():
    raw = str(uuid.uuid4())
    assert validate_uuid(raw.upper(), "room") == raw
    assert is_uuid(raw)
    assert not is_uuid("not-a-uuid")
    assert not is_uuid(raw.replace("-", ""))
    with pytest.raises(ValidationError) as exc:
        validate_uuid("'; drop table rooms; --", "room")
    assert exc.value.code == "invalid_room"
