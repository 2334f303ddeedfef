# smartbrain/repositories/user_repository.py
from sqlalchemy import select, update
from ..core.database import User
from .. import db
from ..utils.logger import setup_logger


class UserRepository:
    def __init__(self):
        self.logger = setup_logger()

    def create_user(self, name, email, password_hash, is_authorized=False, entries=0):
        """Repository: Create a new user"""
        try:
            user = User(
                name=name,
                email=email,
                password_hash=password_hash,
                is_authorized=is_authorized,
                entries=entries,
            )
            db.session.add(user)
            db.session.commit()
            self.logger.info(f"Repository: Created user {email}")
            return user
        except Exception as e:
            db.session.rollback()
            self.logger.error(f"Repository: Failed to create user {email}: {str(e)}")
            raise

    def get_user_by_email(self, email):
        """Repository: Get user by email"""
        try:
            return db.session.execute(select(User).filter_by(email=email)).scalar_one_or_none()
        except Exception as e:
            self.logger.error(f"Repository: Failed to get user {email}: {str(e)}")
            raise

    def get_user_by_id(self, user_id):
        """Repository: Get user by ID"""
        try:
            return db.session.get(User, user_id)
        except Exception as e:
            self.logger.error(f"Repository: Failed to get user ID {user_id}: {str(e)}")
            raise

    def lock_user(self, user_id):
        """Repository: Get user by ID holding a row lock until the transaction ends"""
        try:
            stmt = select(User).where(User.id == user_id).with_for_update()
            return db.session.execute(stmt).scalar_one_or_none()
        except Exception as e:
            self.logger.error(f"Repository: Failed to lock user ID {user_id}: {str(e)}")
            raise

    def list_users(self):
        try:
            return db.session.execute(select(User).order_by(User.id)).scalars().all()
        except Exception as e:
            self.logger.error(f"Repository: Failed to list users: {str(e)}")
            raise

    def increment_entries(self, user_id):
        """Repository: Add one to the entry counter; caller owns the commit"""
        result = db.session.execute(
            update(User).where(User.id == user_id).values(entries=User.entries + 1)
        )
        return result.rowcount

    def set_authorized(self, email, is_authorized):
        try:
            user = self.get_user_by_email(email)
            if user is None:
                return None
            user.is_authorized = is_authorized
            db.session.commit()
            self.logger.info(f"Repository: Set API access for {email} to {is_authorized}")
            return user
        except Exception as e:
            db.session.rollback()
            self.logger.error(f"Repository: Failed to update API access for {email}: {str(e)}")
            raise
