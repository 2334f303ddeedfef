# smartbrain/services/quota_service.py
"""Monthly API quota for the face-detection endpoint.

The quota window is the current calendar month in server-local time: it
opens at midnight on the 1st and closes at the same instant of the next
month. Usage is the number of ledger rows in the window; nothing carries
over between months.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .. import db
from ..repositories.api_request_repository import ApiRequestRepository
from ..repositories.user_repository import UserRepository
from ..utils.exceptions import (
    AuthorizationError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)
from ..utils.logger import setup_logger


def start_of_month(now: datetime) -> datetime:
    return datetime(now.year, now.month, 1)


def next_reset(now: datetime, reset_day: int = 1) -> datetime:
    """First instant of `reset_day` in the month after `now`."""
    if now.month == 12:
        return datetime(now.year + 1, 1, reset_day)
    return datetime(now.year, now.month + 1, reset_day)


# Largest value an INTEGER primary key holds on MySQL
MAX_USER_ID = 2 ** 31 - 1


def parse_user_id(value) -> Optional[int]:
    """Return `value` as a positive int in the id column range, or None."""
    # bool is an int subclass but never an id
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        # isdigit alone admits superscripts and other non-ASCII digits
        if not (value.isascii() and value.isdigit()):
            return None
        value = int(value)
    if isinstance(value, int) and 0 < value <= MAX_USER_ID:
        return value
    return None


@dataclass(frozen=True)
class QuotaStatus:
    authorized: bool
    used: int
    limit: int
    remaining: int
    resets_at: datetime

    @property
    def allowed(self) -> bool:
        return self.authorized and self.used < self.limit


class QuotaService:
    def __init__(self, limit: int = 20, reset_day: int = 1,
                 clock: Callable[[], datetime] = datetime.now):
        self.limit = limit
        self.reset_day = reset_day
        self.clock = clock
        self.user_repository = UserRepository()
        self.ledger = ApiRequestRepository()
        self.logger = setup_logger()

    def _require_id(self, user_id) -> int:
        parsed = parse_user_id(user_id)
        if parsed is None:
            raise ValidationError("Missing or invalid user ID", field="id")
        return parsed

    def _check_user(self, user):
        if user is None:
            raise NotFoundError("User")
        if not user.is_authorized:
            raise AuthorizationError("Unauthorized - User does not have API access")

    def _status(self, user_id: int, now: datetime) -> QuotaStatus:
        used = self.ledger.count_since(user_id, start_of_month(now))
        return QuotaStatus(
            authorized=True,
            used=used,
            limit=self.limit,
            remaining=max(0, self.limit - used),
            resets_at=next_reset(now, self.reset_day),
        )

    def _exceeded(self, status: QuotaStatus) -> RateLimitError:
        return RateLimitError(
            "You have reached your monthly API request limit",
            limit=status.limit,
            reset=status.resets_at,
        )

    def authorize(self, user_id):
        """Service: Authorization gate; returns the user or raises"""
        user_id = self._require_id(user_id)
        user = self.user_repository.get_user_by_id(user_id)
        self._check_user(user)
        return user

    def evaluate(self, user_id) -> QuotaStatus:
        """Service: Usage, limit and reset instant for an authorized user"""
        user = self.authorize(user_id)
        status = self._status(user.id, self.clock())
        self.logger.info(f"Service: Quota for user ID {user.id}: {status.used}/{status.limit} used")
        return status

    def check(self, user_id) -> QuotaStatus:
        """Service: Raise RateLimitError unless a new call is allowed"""
        status = self.evaluate(user_id)
        if not status.allowed:
            raise self._exceeded(status)
        return status

    def reserve(self, user_id, endpoint: str) -> QuotaStatus:
        """Service: Check the quota and record one call in a single transaction.

        The user row is locked first, so concurrent reservations for the same
        user are serialized and cannot both see the last free slot. Returns
        the status as it stands after the new call was recorded.
        """
        user_id = self._require_id(user_id)
        now = self.clock()
        try:
            user = self.user_repository.lock_user(user_id)
            self._check_user(user)
            status = self._status(user_id, now)
            if not status.allowed:
                raise self._exceeded(status)
            self.ledger.add_request(user_id, endpoint, requested_at=now)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        used = status.used + 1
        self.logger.info(f"Service: Recorded {endpoint} call for user ID {user_id} ({used}/{self.limit})")
        return QuotaStatus(
            authorized=True,
            used=used,
            limit=self.limit,
            remaining=max(0, self.limit - used),
            resets_at=status.resets_at,
        )
