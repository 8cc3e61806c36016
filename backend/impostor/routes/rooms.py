from __future__ import annotations

from flask import Blueprint, jsonify, request

from ._context import build_action_request, get_gate

bp = Blueprint("rooms", __name__)


@bp.post("/rooms")
def create_room():
    data = request.get_json(silent=True) or {}
    req = build_action_request("create_room", {"hostName": data.get("hostName")}, issue_missing_id=True)
    return jsonify(get_gate().dispatch(req)), 201


@bp.post("/rooms/join")
def join_room():
    data = request.get_json(silent=True) or {}
    payload = {"joinCode": data.get("joinCode"), "displayName": data.get("displayName")}
    req = build_action_request("join_room", payload, issue_missing_id=True)
    return jsonify(get_gate().dispatch(req))


@bp.get("/rooms/<code>")
def get_room(code: str):
    req = build_action_request("find_room", {"joinCode": code}, issue_missing_id=True)
    return jsonify(get_gate().dispatch(req))
