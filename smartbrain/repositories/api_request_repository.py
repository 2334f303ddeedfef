# smartbrain/repositories/api_request_repository.py
from sqlalchemy import func, select
from ..core.database import ApiRequest
from .. import db
from ..utils.logger import setup_logger


class ApiRequestRepository:
    """Usage ledger: one row per call to a metered endpoint, never updated."""

    def __init__(self):
        self.logger = setup_logger()

    def count_since(self, user_id, since):
        """Repository: Count a user's recorded calls on or after `since`"""
        try:
            stmt = select(func.count(ApiRequest.id)).where(
                ApiRequest.user_id == user_id,
                ApiRequest.requested_at >= since,
            )
            return db.session.execute(stmt).scalar_one()
        except Exception as e:
            self.logger.error(f"Repository: Failed to count API requests for user ID {user_id}: {str(e)}")
            raise

    def add_request(self, user_id, endpoint, requested_at=None):
        """Repository: Stage a ledger row; caller owns the commit"""
        request_row = ApiRequest(user_id=user_id, endpoint=endpoint)
        if requested_at is not None:
            request_row.requested_at = requested_at
        db.session.add(request_row)
        return request_row
