from __future__ import annotations

from flask import Blueprint, jsonify, request

from ..game import words
from ..game.errors import NotFound, ValidationError

bp = Blueprint("words", __name__)


@bp.get("/words/categories")
def list_categories():
    return jsonify({"categories": words.list_categories()})


@bp.get("/words/categories/<name>")
def get_category(name: str):
    category = words.get_category(name)
    if category is None:
        raise NotFound("Category not found", code="category_not_found")
    return jsonify({"name": name.strip().lower(), "words": category})


@bp.post("/words/import")
def import_words():
    upload = request.files.get("file")
    if upload is None:
        raise ValidationError("A CSV file is required", code="invalid_file")

    imported = words.import_words_csv(upload.stream)
    if not imported:
        raise ValidationError("No valid words found in the file", code="no_words_in_file")
    return jsonify({"words": imported, "count": len(imported)})
