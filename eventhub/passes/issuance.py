from __future__ import annotations

import logging
import random
import string
import time
import uuid
from typing import Any, Callable, Optional

from .errors import PassConflict, StoreUnavailable, UpstreamFailure
from .records import IssuedPass, LivePass, coerce_id

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_lowercase


def _base36(n: int) -> str:
    if n == 0:
        return "0"
    out = []
    while n:
        n, r = divmod(n, 36)
        out.append(_BASE36[r])
    return "".join(reversed(out))


def fallback_pass_id(prefix: str = "p_") -> str:
    # 8 random base36 chars, then the millisecond clock
    rand = "".join(random.choice(_BASE36) for _ in range(8))
    return f"{prefix}{rand}{_base36(int(time.time() * 1000))}"


def generate_pass_id(prefix: str = "p_") -> str:
    try:
        return f"{prefix}{uuid.uuid4().hex}"
    except NotImplementedError:
        # no OS randomness source
        logger.warning("uuid4 unavailable, using fallback pass id generator")
        return fallback_pass_id(prefix)


class PassIssuer:
    """Get-or-create passes for a (user, event) pair.

    ``backend`` is anything with ``find_live_pass(user_id, event_id)`` and
    ``insert(pass_id, user_id, event_id)``: the local
    :class:`~eventhub.passes.store.PassStore` or a
    :class:`~eventhub.passes.client.PassServiceClient`.
    """

    def __init__(self, backend: Any, prefix: str = "p_", id_factory: Optional[Callable[[str], str]] = None):
        self.backend = backend
        self.prefix = prefix
        self.id_factory = id_factory or generate_pass_id

    def _find(self, user_id: int, event_id: int) -> Optional[LivePass]:
        try:
            return self.backend.find_live_pass(user_id, event_id)
        except StoreUnavailable as e:
            raise UpstreamFailure(str(e)) from e

    def issue_pass(self, event_id: Any, session_user_id: Any) -> IssuedPass:
        event_id = coerce_id(event_id, "eventId")
        user_id = coerce_id(session_user_id, "userId")

        existing = self._find(user_id, event_id)
        if existing is not None:
            return IssuedPass(pass_id=existing.pass_id, created=False, user_id=user_id, event_id=event_id)

        pass_id = self.id_factory(self.prefix)
        try:
            self.backend.insert(pass_id, user_id, event_id)
        except PassConflict:
            # Lost a race with another issuance for the same pair
            winner = self._find(user_id, event_id)
            if winner is None:
                raise UpstreamFailure("Pass store rejected the new pass")
            logger.info("issuance race for user=%s event=%s, reusing %s", user_id, event_id, winner.pass_id)
            return IssuedPass(pass_id=winner.pass_id, created=False, user_id=user_id, event_id=event_id)
        except StoreUnavailable as e:
            raise UpstreamFailure(str(e)) from e

        return IssuedPass(pass_id=pass_id, created=True, user_id=user_id, event_id=event_id)
