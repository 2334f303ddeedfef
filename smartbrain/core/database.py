# smartbrain/core/database.py
from datetime import datetime
from sqlalchemy import text
from .. import db
from ..utils.logger import setup_logger


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    entries = db.Column(db.Integer, nullable=False, default=0)
    joined = db.Column(db.DateTime, nullable=False, default=datetime.now)
    is_authorized = db.Column(db.Boolean, nullable=False, default=False)

    def to_safe_dict(self):
        """User fields that may leave the server (no password hash)."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "entries": self.entries,
            "joined": self.joined.isoformat(),
            "isAuthorized": self.is_authorized,
        }


class LoginHistory(db.Model):
    __tablename__ = 'login_history'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    ip_address = db.Column(db.String(64), nullable=False, default='unknown')
    success = db.Column(db.Boolean, nullable=False)
    timestamp = db.Column(db.DateTime, nullable=False, default=datetime.now)


class ImageEntry(db.Model):
    __tablename__ = 'image_entries'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    image_url = db.Column(db.Text, nullable=False)
    detection_results = db.Column(db.JSON, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)


class ApiRequest(db.Model):
    __tablename__ = 'api_requests'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    endpoint = db.Column(db.String(255), nullable=False)
    requested_at = db.Column(db.DateTime, nullable=False, default=datetime.now, index=True)


def connect(app):
    """Create missing tables and check the store answers."""
    logger = setup_logger()
    with app.app_context():
        try:
            db.create_all()
            db.session.execute(text('SELECT 1'))
            logger.info("Connected to the database successfully")
        except Exception as e:
            logger.error(f"Failed to connect to the database: {str(e)}")
            raise
        finally:
            db.session.remove()


def disconnect(app):
    with app.app_context():
        db.session.remove()
        db.engine.dispose()
    setup_logger().info("Database connections closed")
