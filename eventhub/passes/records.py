from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Type

from ..models import PASS_ID_MAX_LENGTH
from .errors import BadInput, InvalidInput

_DIGITS = re.compile(r"[0-9]+")

# ids live in signed 32-bit integer columns
INT_MIN = -(2 ** 31)
INT_MAX = 2 ** 31 - 1


@dataclass(frozen=True)
class LivePass:
    pass_id: str
    user_id: int
    event_id: int
    valid: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "exists": True,
            "pass": self.pass_id,
            "user_id": self.user_id,
            "event_id": self.event_id,
            "valid": self.valid,
        }


@dataclass(frozen=True)
class VerificationResult:
    valid: bool
    user_id: Optional[int] = None
    event_id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        if not self.valid:
            return {"valid": False}
        return {"valid": True, "user_id": self.user_id, "event_id": self.event_id}


@dataclass(frozen=True)
class IssuedPass:
    pass_id: str
    created: bool
    user_id: Optional[int] = None
    event_id: Optional[int] = None


def is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def require_int(value: Any, message: str, exc: Type[BadInput] = InvalidInput) -> int:
    if not is_int(value) or not INT_MIN <= value <= INT_MAX:
        raise exc(message)
    return value


def require_pass_id(value: Any, message: str = "Bad pass value", exc: Type[BadInput] = InvalidInput) -> str:
    if not isinstance(value, str) or not value or len(value) > PASS_ID_MAX_LENGTH:
        raise exc(message)
    return value


def coerce_id(value: Any, name: str) -> int:
    """Accept a positive integer, or a string of decimal digits naming one."""
    if is_int(value):
        result = value
    elif isinstance(value, str) and _DIGITS.fullmatch(value.strip()):
        result = int(value.strip())
    else:
        raise BadInput(f"{name} must be an integer")

    if not 0 < result <= INT_MAX:
        raise BadInput(f"{name} must be a positive integer no larger than {INT_MAX}")
    return result
