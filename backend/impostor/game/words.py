from __future__ import annotations

import csv
import io
from typing import IO, Iterable, Iterator

from ..config import Config
from .errors import ValidationError


DEFAULT_CATEGORIES: dict[str, list[str]] = {
    "animales": [
        "perro", "gato", "elefante", "jirafa", "delfín", "águila",
        "tortuga", "pingüino", "caballo", "tiburón", "mariposa", "león",
    ],
    "comida": [
        "pizza", "paella", "tacos", "sushi", "helado", "empanada",
        "chocolate", "ensalada", "hamburguesa", "tortilla", "churros", "sopa",
    ],
    "lugares": [
        "playa", "hospital", "aeropuerto", "biblioteca", "cine", "escuela",
        "museo", "supermercado", "estadio", "iglesia", "montaña", "castillo",
    ],
    "profesiones": [
        "médico", "bombero", "profesor", "cocinero", "piloto", "policía",
        "astronauta", "carpintero", "abogado", "fotógrafo", "jardinero", "dentista",
    ],
    "objetos": [
        "paraguas", "reloj", "espejo", "llave", "guitarra", "teléfono",
        "bicicleta", "lámpara", "mochila", "tijeras", "almohada", "cámara",
    ],
    "naturaleza": [
        "sol", "luna", "volcán", "río", "bosque", "desierto",
        "arcoíris", "tormenta", "nieve", "estrella", "océano", "cascada",
    ],
}


class WordBank:
    """Insertion-ordered set of unique, non-empty words."""

    def __init__(
        self,
        words: Iterable[str] | None = None,
        max_words: int | None = None,
        max_word_len: int | None = None,
    ) -> None:
        self.max_words = max_words or Config.MAX_WORDS
        self.max_word_len = max_word_len or Config.MAX_WORD_LEN
        self._words: dict[str, None] = {}
        if words:
            self.replace(words)

    def __len__(self) -> int:
        return len(self._words)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._words))

    def __contains__(self, word: object) -> bool:
        return isinstance(word, str) and word.strip() in self._words

    def __repr__(self) -> str:
        return f"WordBank({list(self._words)!r})"

    def as_list(self) -> list[str]:
        return list(self._words)

    def _check(self, word: str) -> str:
        w = (word or "").strip()
        if len(w) > self.max_word_len:
            raise ValidationError(
                f"Words must be at most {self.max_word_len} characters",
                code="word_too_long",
            )
        return w

    def add(self, word: str) -> bool:
        w = self._check(word)
        if not w or w in self._words:
            return False
        if len(self._words) >= self.max_words:
            raise ValidationError(
                f"The word bank holds at most {self.max_words} words",
                code="word_bank_full",
            )
        self._words[w] = None
        return True

    def remove(self, word: str) -> bool:
        w = (word or "").strip()
        if w in self._words:
            del self._words[w]
            return True
        return False

    def extend(self, words: Iterable[str]) -> list[str]:
        """Add words in order until the bank is full; returns what was added."""
        added: list[str] = []
        for word in words:
            if len(self._words) >= self.max_words:
                break
            w = self._check(word)
            if w and w not in self._words:
                self._words[w] = None
                added.append(w)
        return added

    def replace(self, words: Iterable[str]) -> None:
        staged: dict[str, None] = {}
        for word in words:
            w = self._check(word)
            if w:
                staged[w] = None
        if len(staged) > self.max_words:
            raise ValidationError(
                f"The word bank holds at most {self.max_words} words",
                code="too_many_words",
            )
        self._words = staged

    def clear(self) -> None:
        self._words = {}


def list_categories() -> list[dict]:
    return [
        {"name": name, "count": len(words)}
        for name, words in sorted(DEFAULT_CATEGORIES.items())
    ]


def get_category(name: str) -> list[str] | None:
    words = DEFAULT_CATEGORIES.get((name or "").strip().lower())
    if words is None:
        return None
    return list(words)


def parse_word_rows(
    rows: Iterable[Iterable[object]],
    max_len: int | None = None,
    max_words: int | None = None,
) -> list[str]:
    """First column of each row, trimmed, 1..max_len characters.

    Stops once max_words entries are collected.
    """
    limit = max_len or Config.MAX_IMPORT_WORD_LEN
    cap = max_words or Config.MAX_WORDS
    words: list[str] = []
    for row in rows:
        cells = list(row)
        if not cells or cells[0] is None:
            continue
        word = str(cells[0]).strip()
        if word and len(word) <= limit:
            words.append(word)
            if len(words) >= cap:
                break
    return words


def import_words_csv(
    stream: IO[bytes] | IO[str],
    max_len: int | None = None,
    max_words: int | None = None,
) -> list[str]:
    raw = stream.read()
    if isinstance(raw, bytes):
        try:
            text = raw.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ValidationError("File must be UTF-8 encoded", code="invalid_file") from exc
    else:
        text = raw
    return parse_word_rows(csv.reader(io.StringIO(text)), max_len=max_len, max_words=max_words)
