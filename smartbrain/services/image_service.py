# smartbrain/services/image_service.py
from .. import db
from ..repositories.image_entry_repository import ImageEntryRepository
from ..repositories.user_repository import UserRepository
from ..utils.exceptions import NotFoundError
from ..utils.logger import setup_logger


class ImageService:
    def __init__(self):
        self.user_repository = UserRepository()
        self.image_entries = ImageEntryRepository()
        self.logger = setup_logger()

    def record_entry(self, user_id, image_url=None, detection_results=None):
        """Service: Increment the user's entries and store the image entry atomically"""
        try:
            if self.user_repository.increment_entries(user_id) == 0:
                raise NotFoundError("User")
            if image_url:
                self.image_entries.add_entry(user_id, image_url, detection_results)
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            self.logger.error(f"Service: Failed to record image entry for user ID {user_id}: {str(e)}")
            raise

        user = self.user_repository.get_user_by_id(user_id)
        self.logger.info(f"Service: User ID {user_id} now has {user.entries} entries")
        return user
