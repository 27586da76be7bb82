from typing import Any, Dict


class PassError(Exception):
    """Base class for pass subsystem failures.

    ``status_code`` and ``error`` describe how the failure is reported over
    HTTP; ``message`` is the human-readable part.
    """

    status_code = 500
    error = "internal_error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.error, "message": self.message}


class BadInput(PassError):
    status_code = 400
    error = "bad_request"


class InvalidInput(BadInput):
    """Raised by the pass store for malformed ids or tokens."""


class PassConflict(PassError):
    status_code = 409
    error = "conflict"


class StoreUnavailable(PassError):
    error = "store_error"


class UpstreamFailure(PassError):
    status_code = 502
    error = "upstream_error"


class DecodeError(PassError):
    status_code = 422
    error = "decode_error"
