from __future__ import annotations
from typing import Any, Dict
from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required
from ..passes import BadInput, UpstreamFailure, get_pass_issuer
from ..services.logging_service import log_event
from ..security import csrf
from .. import qr


student_bp = Blueprint("student", __name__, url_prefix="/student")


def _bad_request(msg: str):
    return jsonify({"error": "bad_request", "message": msg}), 400


def _upstream_error(msg: str):
    return jsonify({"error": "upstream_error", "message": msg}), 502


def _server_error():
    return jsonify({"error": "server_error", "message": "Failed to issue pass"}), 500


def _issue_for_request():
    """Run issuance for the session user.

    Returns ``(issued, None)`` on success or ``(None, response)`` when the
    request has to be answered with an error.
    """
    data: Dict[str, Any] = request.get_json(silent=True) or {}
    event_id = data.get("eventId")

    try:
        issued = get_pass_issuer().issue_pass(event_id, current_user.id)
    except BadInput as e:
        return None, _bad_request(e.message)
    except UpstreamFailure as e:
        current_app.logger.warning("issue pass upstream failure: %s", e.message)
        return None, _upstream_error(e.message)
    except Exception:
        current_app.logger.exception("issue pass failed")
        return None, _server_error()

    log_event(
        "pass_issued" if issued.created else "pass_reused",
        user_id=current_user.id,
        meta={"event_id": issued.event_id, "pass_id": issued.pass_id},
    )
    return issued, None


@csrf.exempt
@student_bp.post("/issue-pass")
@login_required
def issue_pass():
    issued, error = _issue_for_request()
    if error is not None:
        return error

    return jsonify({"passId": issued.pass_id}), 201 if issued.created else 200


@csrf.exempt
@student_bp.post("/pass-qr")
@login_required
def pass_qr():
    issued, error = _issue_for_request()
    if error is not None:
        return error

    png_b64 = qr.encode_base64(issued.pass_id, **qr.qr_options(current_app.config))

    return jsonify({
        "passId": issued.pass_id,
        "png_base64": png_b64,
        "data_url": qr.data_url(png_b64),
    }), 201 if issued.created else 200
