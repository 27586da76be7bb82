from __future__ import annotations
import hmac
import re
from flask import Blueprint, current_app, jsonify, request
from ..passes import BadInput, PassConflict, StoreUnavailable, get_pass_store
from ..passes.client import SECRET_HEADER
from ..services.logging_service import log_event


internal_bp = Blueprint("internal", __name__, url_prefix="/internal")

_QUERY_INT = re.compile(r"-?[0-9]+")


def _parse_query_int(name: str):
    raw = (request.args.get(name) or "").strip()
    if not _QUERY_INT.fullmatch(raw):
        return None
    return int(raw)


@internal_bp.before_request
def require_secret():
    expected = current_app.config.get("PASS_SERVICE_SECRET") or ""
    provided = request.headers.get(SECRET_HEADER, "")
    if not expected or not hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8")):
        current_app.logger.warning("internal pass request denied: %s %s", request.method, request.path)
        return jsonify({"error": "unauthorized"}), 401
    return None


# Creates a new pass
@internal_bp.post("/passes")
def insert_pass():
    data = request.get_json(silent=True) or {}

    try:
        get_pass_store().insert(data.get("passKey"), data.get("user_id"), data.get("event_id"))
    except BadInput as e:
        return jsonify({"error": "bad_request", "message": e.message}), 400
    except PassConflict as e:
        return jsonify({"error": "conflict", "message": e.message}), 409
    except StoreUnavailable:
        return jsonify({"error": "server_error", "message": "Failed to insert pass"}), 500

    return jsonify({"ok": True}), 201


# Single-use redemption
@internal_bp.post("/verify")
def verify_pass():
    data = request.get_json(silent=True) or {}
    token = data.get("pass")

    try:
        result = get_pass_store().verify(token)
    except BadInput as e:
        return jsonify({"error": "bad_request", "message": e.message}), 400
    except StoreUnavailable:
        return jsonify({"error": "server_error", "message": "Internal Server Error"}), 500

    if result.valid:
        log_event(
            "pass_verified",
            user_id=result.user_id,
            meta={"event_id": result.event_id, "pass_id": token},
        )
    else:
        log_event("pass_rejected", meta={"pass_id": token})

    return jsonify(result.to_dict()), 200


@internal_bp.get("/getPasses")
def get_passes():
    user_id = _parse_query_int("user_id")
    event_id = _parse_query_int("event_id")

    if user_id is None or event_id is None:
        current_app.logger.info(
            "getPasses bad input: user_id=%r event_id=%r",
            request.args.get("user_id"),
            request.args.get("event_id"),
        )
        return jsonify({"error": "bad_request", "message": "user_id and event_id must be integers"}), 400

    try:
        live = get_pass_store().find_live_pass(user_id, event_id)
    except BadInput as e:
        return jsonify({"error": "bad_request", "message": e.message}), 400
    except StoreUnavailable:
        return jsonify({"error": "server_error", "message": "Internal Server Error"}), 500

    if live is None:
        return jsonify({"exists": False}), 404

    return jsonify(live.to_dict()), 200
