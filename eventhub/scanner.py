from __future__ import annotations

import logging
from typing import Any, Optional

from . import qr
from .passes.records import VerificationResult

logger = logging.getLogger(__name__)


class PassScanner:
    """Staff-side check-in: decode a QR image locally, then redeem the token.

    ``verifier`` needs a ``verify(pass_id)`` method; in production it is a
    :class:`~eventhub.passes.client.PassServiceClient`.
    """

    def __init__(self, verifier: Any, expected_prefix: Optional[str] = None):
        self.verifier = verifier
        self.expected_prefix = expected_prefix

    def decode(self, image: bytes) -> str:
        return qr.decode(image, expected_prefix=self.expected_prefix)

    def scan(self, image: bytes) -> VerificationResult:
        token = self.decode(image)
        result = self.verifier.verify(token)
        if result.valid:
            logger.info("pass accepted for user=%s event=%s", result.user_id, result.event_id)
        else:
            logger.info("pass rejected")
        return result

    def scan_file(self, path: str) -> VerificationResult:
        with open(path, "rb") as fh:
            return self.scan(fh.read())
