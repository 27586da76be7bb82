from flask import Flask, current_app

from .client import PassServiceClient
from .errors import (
    BadInput,
    DecodeError,
    InvalidInput,
    PassConflict,
    PassError,
    StoreUnavailable,
    UpstreamFailure,
)
from .issuance import PassIssuer, generate_pass_id
from .records import IssuedPass, LivePass, VerificationResult
from .store import PassStore


def init_app(app: Flask) -> None:
    """Wire the pass store and issuer for this app.

    Issuance goes over HTTP when ``PASS_SERVICE_URL`` is configured and
    straight to the local table otherwise.
    """
    store = PassStore()
    if app.config.get("PASS_SERVICE_URL"):
        backend = PassServiceClient.from_config(app.config)
    else:
        backend = store

    app.extensions["pass_store"] = store
    app.extensions["pass_issuer"] = PassIssuer(backend, prefix=app.config.get("PASS_ID_PREFIX", "p_"))


def get_pass_store() -> PassStore:
    return current_app.extensions["pass_store"]


def get_pass_issuer() -> PassIssuer:
    return current_app.extensions["pass_issuer"]


__all__ = [
    "BadInput",
    "DecodeError",
    "InvalidInput",
    "IssuedPass",
    "LivePass",
    "PassConflict",
    "PassError",
    "PassIssuer",
    "PassServiceClient",
    "PassStore",
    "StoreUnavailable",
    "UpstreamFailure",
    "VerificationResult",
    "generate_pass_id",
    "get_pass_issuer",
    "get_pass_store",
    "init_app",
]
