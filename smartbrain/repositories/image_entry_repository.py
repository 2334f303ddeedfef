# smartbrain/repositories/image_entry_repository.py
from ..core.database import ImageEntry
from .. import db


class ImageEntryRepository:
    def add_entry(self, user_id, image_url, detection_results=None):
        """Repository: Stage an image entry; caller owns the commit"""
        entry = ImageEntry(user_id=user_id, image_url=image_url, detection_results=detection_results)
        db.session.add(entry)
        return entry
