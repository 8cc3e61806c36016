from __future__ import annotations

from flask import Blueprint, jsonify, request

from ..game.errors import ValidationError
from ._context import build_action_request, get_gate

bp = Blueprint("actions", __name__)


@bp.post("/actions")
def dispatch_action():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Body must be a JSON object")

    action = data.get("action")
    if not isinstance(action, str) or not action:
        raise ValidationError("action is required", code="unknown_action")

    payload = {k: v for k, v in data.items() if k != "action"}
    return jsonify(get_gate().dispatch(build_action_request(action, payload)))
