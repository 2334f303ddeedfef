from datetime import datetime
from flask import Flask
from flask_restful import Api
from flask_sqlalchemy import SQLAlchemy
from flask_jwt_extended import JWTManager
from flask_cors import CORS

db = SQLAlchemy()
jwt = JWTManager()

from .config.settings import Config  # noqa: E402
from .utils.logger import setup_logger  # noqa: E402
from .utils.exceptions import handle_api_error  # noqa: E402


class SmartBrainApi(Api):
    """Routes resource errors through the application's error handler."""

    def handle_error(self, e):
        return handle_api_error(e)


def create_app(config_object=Config, detector=None, clock=None):
    config_object.validate()

    app = Flask(__name__)
    app.config.from_object(config_object)

    # Setup logger
    logger = setup_logger(app.config['LOGS_PATH'])
    logger.info("Initializing SmartBrain backend")

    # Initialize CORS
    CORS(app, resources={r"/*": {"origins": app.config['ALLOWED_ORIGINS']}}, supports_credentials=True)

    # Initialize extensions
    db.init_app(app)
    jwt.init_app(app)
    api = SmartBrainApi(app)

    # Register error handler
    app.errorhandler(Exception)(handle_api_error)

    from .api.middleware import register_middleware
    from .services.rate_limiter import InMemoryRateLimiter
    from .services.quota_service import QuotaService
    from .services.detector_service import DetectorService
    from .services.image_service import ImageService
    from .services.detection_pipeline import DetectionPipeline, DETECTION_ENDPOINT

    limiter = InMemoryRateLimiter(
        max_requests=app.config['RATE_LIMIT_MAX_REQUESTS'],
        window_seconds=app.config['RATE_LIMIT_WINDOW_SECONDS'],
    )
    register_middleware(app, limiter)

    # Services are built once here and injected into the resources that need them
    quota_service = QuotaService(
        limit=app.config['MAX_REQUESTS_PER_MONTH'],
        reset_day=app.config['RESET_DAY'],
        clock=clock or datetime.now,
    )
    detector = detector or DetectorService.from_config(app.config)
    pipeline = DetectionPipeline(quota_service, detector, ImageService())
    app.extensions['smartbrain'] = {
        'quota_service': quota_service,
        'detector': detector,
        'pipeline': pipeline,
    }

    # Register API resources
    from .api.resources.health import HealthCheck, UserList
    from .api.resources.auth import Register, Login, CurrentUser
    from .api.resources.profile import Profile
    from .api.resources.image import ImageEntries
    from .api.resources.detection import FaceDetection
    from .api.resources.usage import RemainingRequests

    api.add_resource(HealthCheck, '/')
    api.add_resource(UserList, '/api')
    api.add_resource(Register, '/api/register')
    api.add_resource(Login, '/api/login')
    api.add_resource(CurrentUser, '/api/auth/me')
    api.add_resource(Profile, '/api/profile/<id>')
    api.add_resource(ImageEntries, '/api/image')
    api.add_resource(FaceDetection, DETECTION_ENDPOINT, f'{DETECTION_ENDPOINT}/<id>',
                     resource_class_kwargs={'pipeline': pipeline})
    api.add_resource(RemainingRequests, '/api/requests/remaining',
                     resource_class_kwargs={'quota_service': quota_service})

    from .cli import register_commands
    register_commands(app)

    return app


def shutdown(app):
    """Release the detector's HTTP client and the database connections."""
    from .core.database import disconnect

    detector = app.extensions['smartbrain']['detector']
    close = getattr(detector, 'close', None)
    try:
        if close is not None:
            close()
    finally:
        disconnect(app)
