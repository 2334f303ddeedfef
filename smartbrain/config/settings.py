# smartbrain/config/settings.py
import os
from dotenv import load_dotenv

load_dotenv()


class ConfigurationError(Exception):
    """Raised at startup when the deployment configuration is unusable."""


def _split_origins(value):
    return [origin.strip() for origin in (value or '').split(',') if origin.strip()]


def _as_bool(value, default):
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    BASE_DIR = os.path.abspath(os.path.dirname(__file__))
    LOGS_PATH = os.getenv('LOGS_PATH', os.path.join(BASE_DIR, '../../logs'))

    # MySQL configuration from .env
    MYSQL_HOST = os.getenv('MYSQL_HOST', 'localhost')
    MYSQL_PORT = os.getenv('MYSQL_PORT', '3306')
    MYSQL_USER = os.getenv('MYSQL_USER', 'root')
    MYSQL_PASSWORD = os.getenv('MYSQL_PASSWORD', '')
    MYSQL_DATABASE = os.getenv('MYSQL_DATABASE', 'smartbrain')

    SQLALCHEMY_DATABASE_URI = os.getenv(
        'DATABASE_URL',
        f"mysql+pymysql://{MYSQL_USER}:{MYSQL_PASSWORD}@{MYSQL_HOST}:{MYSQL_PORT}/{MYSQL_DATABASE}",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    SECRET_KEY = os.getenv('SECRET_KEY', 'your-secret-key')
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'your-jwt-secret-key')
    DEBUG = _as_bool(os.getenv('FLASK_DEBUG'), False)
    PORT = int(os.getenv('PORT', 3000))

    # Security
    ALLOWED_ORIGINS = _split_origins(os.getenv('ALLOWED_ORIGINS'))
    ENFORCE_ORIGIN = _as_bool(os.getenv('ENFORCE_ORIGIN'), True)
    RATE_LIMIT_WINDOW_SECONDS = int(os.getenv('RATE_LIMIT_WINDOW_SECONDS', 15 * 60))
    RATE_LIMIT_MAX_REQUESTS = int(os.getenv('RATE_LIMIT_MAX_REQUESTS', 100))

    # Monthly API quota
    MAX_REQUESTS_PER_MONTH = int(os.getenv('MAX_REQUESTS_PER_MONTH', 20))
    RESET_DAY = int(os.getenv('RESET_DAY', 1))

    # Face detection provider
    CLARIFAI_BASE_URL = os.getenv('CLARIFAI_BASE_URL', 'https://api.clarifai.com')
    CLARIFAI_PAT = os.getenv('CLARIFAI_PAT', '')
    CLARIFAI_USER_ID = os.getenv('CLARIFAI_USER_ID', '')
    CLARIFAI_APP_ID = os.getenv('CLARIFAI_APP_ID', '')
    CLARIFAI_MODEL_ID = os.getenv('CLARIFAI_MODEL_ID', 'face-detection')
    CLARIFAI_MODEL_VERSION_ID = os.getenv('CLARIFAI_MODEL_VERSION_ID', '6dc7e46bc9124c5c8824be4822abe105')
    DETECTOR_TIMEOUT = float(os.getenv('DETECTOR_TIMEOUT', 10))

    @classmethod
    def validate(cls):
        """Fail fast on settings the application cannot run without."""
        if not cls.ALLOWED_ORIGINS:
            raise ConfigurationError('ALLOWED_ORIGINS environment variable is required')
        if cls.MAX_REQUESTS_PER_MONTH < 0:
            raise ConfigurationError('MAX_REQUESTS_PER_MONTH must not be negative')
        # Every month has a day 28
        if not 1 <= cls.RESET_DAY <= 28:
            raise ConfigurationError('RESET_DAY must be between 1 and 28')
        if cls.DETECTOR_TIMEOUT <= 0:
            raise ConfigurationError('DETECTOR_TIMEOUT must be positive')
        if cls.RATE_LIMIT_WINDOW_SECONDS <= 0 or cls.RATE_LIMIT_MAX_REQUESTS <= 0:
            raise ConfigurationError('Rate limit window and count must be positive')


class TestingConfig(Config):
    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SECRET_KEY = 'test-secret-key'
    JWT_SECRET_KEY = 'test-jwt-secret-key-with-enough-length'
    ALLOWED_ORIGINS = ['http://localhost:3000']
    ENFORCE_ORIGIN = True
    RATE_LIMIT_WINDOW_SECONDS = 15 * 60
    RATE_LIMIT_MAX_REQUESTS = 1000
    MAX_REQUESTS_PER_MONTH = 20
    RESET_DAY = 1
    CLARIFAI_PAT = 'test-pat'
    CLARIFAI_USER_ID = 'test-user'
    CLARIFAI_APP_ID = 'test-app'
