from flask_jwt_extended import create_access_token
from ..repositories.user_repository import UserRepository
from ..repositories.login_history_repository import LoginHistoryRepository
from ..utils.exceptions import ValidationError, AuthenticationError, NotFoundError
from ..utils.logger import setup_logger
import bcrypt

MIN_PASSWORD_LENGTH = 5


def hash_password(password):
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')


def verify_password(password_hash, password):
    return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))


def validate_credentials(email, password):
    if '@' not in email:
        raise ValidationError("Invalid email format", field="email")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters", field="password")


class AuthService:
    def __init__(self):
        self.user_repository = UserRepository()
        self.login_history = LoginHistoryRepository()
        self.logger = setup_logger()

    def register(self, name, email, password):
        """Service: Register a new user"""
        try:
            validate_credentials(email, password)
            if self.user_repository.get_user_by_email(email):
                raise ValidationError("User with this email already exists")

            user = self.user_repository.create_user(name, email, hash_password(password))
            self.logger.info(f"User registered: {email}")
            return user
        except Exception as e:
            self.logger.error(f"Registration failed: {str(e)}")
            raise

    def login(self, email, password, ip_address=None):
        """Service: Authenticate user, record the attempt and return (user, JWT token)"""
        try:
            validate_credentials(email, password)
            user = self.user_repository.get_user_by_email(email)
            if not user:
                raise AuthenticationError()

            success = verify_password(user.password_hash, password)
            self.login_history.record_attempt(user.id, ip_address, success)
            if not success:
                raise AuthenticationError()

            # JWT subject must be a string
            token = create_access_token(identity=str(user.id))
            self.logger.info(f"User logged in: {email}")
            return user, token
        except Exception as e:
            self.logger.error(f"Login failed: {str(e)}")
            raise

    def get_user_by_id(self, user_id):
        """Service: Get user by ID"""
        user = self.user_repository.get_user_by_id(user_id)
        if not user:
            raise NotFoundError("User")
        return user

    def list_users(self):
        return self.user_repository.list_users()
