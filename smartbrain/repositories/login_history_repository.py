# smartbrain/repositories/login_history_repository.py
from sqlalchemy import select
from ..core.database import LoginHistory
from .. import db
from ..utils.logger import setup_logger


class LoginHistoryRepository:
    def __init__(self):
        self.logger = setup_logger()

    def record_attempt(self, user_id, ip_address, success):
        """Repository: Append a login attempt"""
        try:
            attempt = LoginHistory(user_id=user_id, ip_address=ip_address or 'unknown', success=success)
            db.session.add(attempt)
            db.session.commit()
            return attempt
        except Exception as e:
            db.session.rollback()
            self.logger.error(f"Repository: Failed to record login for user ID {user_id}: {str(e)}")
            raise

    def list_for_user(self, user_id):
        stmt = select(LoginHistory).filter_by(user_id=user_id).order_by(LoginHistory.timestamp)
        return db.session.execute(stmt).scalars().all()
