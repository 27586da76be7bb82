from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..extensions import db
from ..models import Pass, utcnow
from .errors import PassConflict, StoreUnavailable
from .records import LivePass, VerificationResult, require_int, require_pass_id

logger = logging.getLogger(__name__)


class PassStore:
    """Pass records in the ``ticket_passes`` table.

    The store does not enforce the one-live-pass rule itself beyond what the
    live-pass index rejects; callers that want get-or-create semantics go
    through :class:`~eventhub.passes.issuance.PassIssuer`.
    """

    def __init__(self, session: Any = None):
        self._session = session

    @property
    def session(self):
        return self._session if self._session is not None else db.session

    def insert(self, pass_id: Any, user_id: Any, event_id: Any) -> None:
        require_pass_id(pass_id, "Invalid payload - Pass values not valid!")
        require_int(user_id, "Invalid payload - Pass values not valid!")
        require_int(event_id, "Invalid payload - Pass values not valid!")

        try:
            self.session.execute(
                insert(Pass).values(pass_id=pass_id, user_id=user_id, event_id=event_id, valid=True)
            )
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise PassConflict("Pass already exists for this id or user/event pair")
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("insert pass failed")
            raise StoreUnavailable("Failed to insert pass") from e

    def verify(self, pass_id: Any) -> VerificationResult:
        require_pass_id(pass_id)

        try:
            row = self.session.execute(
                select(Pass.user_id, Pass.event_id)
                .where(Pass.pass_id == pass_id, Pass.valid.is_(True))
                .limit(1)
            ).first()
            if row is None:
                # Not found or already used
                return VerificationResult(valid=False)

            # Only the caller whose update flips the flag gets valid=True.
            result = self.session.execute(
                update(Pass)
                .where(Pass.pass_id == pass_id, Pass.valid.is_(True))
                .values(valid=False, used_at=utcnow())
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                self.session.rollback()
                return VerificationResult(valid=False)

            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("verify pass failed")
            raise StoreUnavailable("Failed to verify pass") from e

        return VerificationResult(valid=True, user_id=row.user_id, event_id=row.event_id)

    def find_live_pass(self, user_id: Any, event_id: Any) -> Optional[LivePass]:
        require_int(user_id, "user_id and event_id must be integers")
        require_int(event_id, "user_id and event_id must be integers")

        try:
            row = self.session.scalars(
                select(Pass)
                .where(Pass.user_id == user_id, Pass.event_id == event_id, Pass.valid.is_(True))
                .order_by(Pass.issued_at.asc())
                .limit(1)
            ).first()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("lookup pass failed")
            raise StoreUnavailable("Failed to look up pass") from e

        if row is None:
            return None

        return LivePass(pass_id=row.pass_id, user_id=row.user_id, event_id=row.event_id, valid=bool(row.valid))

