from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from .errors import BadInput, PassConflict, UpstreamFailure
from .records import LivePass, VerificationResult, is_int

logger = logging.getLogger(__name__)

SECRET_HEADER = "X-Pass-Secret"


class PassServiceClient:
    """Talks to the internal pass service over HTTP.

    Exposes the same operations as :class:`~eventhub.passes.store.PassStore`
    so the issuer and the scanner do not care where passes live. Nothing is
    retried; any answer the client does not understand is an
    :class:`UpstreamFailure`.
    """

    def __init__(self, base_url: str, secret: str = "", timeout: float = 10, session: Any = None):
        if not base_url:
            raise ValueError("base_url is required")
        self.base_url = base_url.rstrip("/")
        self.secret = secret
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()

    @classmethod
    def from_config(cls, config, session: Any = None) -> "PassServiceClient":
        return cls(
            config["PASS_SERVICE_URL"],
            secret=config.get("PASS_SERVICE_SECRET") or "",
            timeout=config.get("PASS_SERVICE_TIMEOUT", 10),
            session=session,
        )

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.secret:
            headers[SECRET_HEADER] = self.secret
        return headers

    def _request(self, method: str, path: str, **kwargs):
        url = f"{self.base_url}{path}"
        try:
            return self.session.request(method, url, headers=self._headers(), timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.warning("pass service unreachable: %s %s: %r", method, path, e)
            raise UpstreamFailure(f"Pass service unreachable: {e}") from e

    @staticmethod
    def _json(resp) -> Dict[str, Any]:
        try:
            data = resp.json()
        except ValueError as e:
            raise UpstreamFailure("Pass service returned a non-JSON body") from e
        if not isinstance(data, dict):
            raise UpstreamFailure("Pass service returned an unexpected body")
        return data

    @staticmethod
    def _unexpected(action: str, resp) -> UpstreamFailure:
        text = getattr(resp, "text", "") or ""
        logger.warning("pass service %s failed: HTTP %s %s", action, resp.status_code, text[:200])
        return UpstreamFailure(f"Pass service {action} returned HTTP {resp.status_code}")

    def find_live_pass(self, user_id: int, event_id: int) -> Optional[LivePass]:
        resp = self._request("GET", "/internal/getPasses", params={"user_id": user_id, "event_id": event_id})

        # 404/410: no reusable pass, caller may create one
        if resp.status_code in (404, 410):
            return None
        if resp.status_code != 200:
            raise self._unexpected("lookup", resp)

        data = self._json(resp)
        pass_id = data.get("pass")
        if not data.get("exists") or not isinstance(pass_id, str) or not pass_id:
            raise UpstreamFailure("Pass service lookup returned no pass")

        live_user_id = data.get("user_id", user_id)
        live_event_id = data.get("event_id", event_id)
        if not is_int(live_user_id) or not is_int(live_event_id):
            raise UpstreamFailure("Pass service lookup returned malformed identities")

        return LivePass(
            pass_id=pass_id,
            user_id=live_user_id,
            event_id=live_event_id,
            valid=bool(data.get("valid", True)),
        )

    def insert(self, pass_id: str, user_id: int, event_id: int) -> None:
        resp = self._request(
            "POST",
            "/internal/passes",
            json={"passKey": pass_id, "user_id": user_id, "event_id": event_id},
        )
        if resp.status_code in (200, 201):
            return
        if resp.status_code == 409:
            raise PassConflict("Pass service reported a conflicting pass")
        if resp.status_code == 400:
            raise BadInput("Pass service rejected the pass payload")
        raise self._unexpected("insert", resp)

    def verify(self, pass_id: str) -> VerificationResult:
        resp = self._request("POST", "/internal/verify", json={"pass": pass_id})
        if resp.status_code == 400:
            raise BadInput("Bad pass value")
        if resp.status_code != 200:
            raise self._unexpected("verify", resp)

        data = self._json(resp)
        if data.get("valid") is not True:
            return VerificationResult(valid=False)

        user_id = data.get("user_id")
        event_id = data.get("event_id")
        if not is_int(user_id) or not is_int(event_id):
            raise UpstreamFailure("Pass service verify returned malformed identities")
        return VerificationResult(valid=True, user_id=user_id, event_id=event_id)
