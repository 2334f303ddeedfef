# smartbrain/utils/exceptions.py
from flask import current_app, jsonify
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
from werkzeug.exceptions import HTTPException
from .logger import setup_logger


class APIError(Exception):
    def __init__(self, message, status_code=400):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self):
        return {"error": self.message}


class ValidationError(APIError):
    """Malformed or missing input."""

    def __init__(self, message, field=None):
        super().__init__(message, status_code=400)
        self.field = field

    def to_dict(self):
        body = super().to_dict()
        if self.field:
            body["field"] = self.field
        return body


class AuthenticationError(APIError):
    def __init__(self, message="Invalid email or password"):
        super().__init__(message, status_code=401)


class AuthorizationError(APIError):
    def __init__(self, message="You are not authorized to perform this action", **context):
        super().__init__(message, status_code=403)
        self.context = context

    def to_dict(self):
        return {"error": self.message, **self.context}


class NotFoundError(APIError):
    def __init__(self, resource="Resource"):
        super().__init__(f"{resource} not found", status_code=404)


class RateLimitError(APIError):
    """Monthly quota exhausted; carries the limit and the reset instant."""

    def __init__(self, message, limit, reset):
        super().__init__(message, status_code=429)
        self.limit = limit
        self.reset = reset

    def to_dict(self):
        return {
            "error": "Rate limit exceeded",
            "message": self.message,
            "limit": self.limit,
            "reset": self.reset.isoformat(),
        }


class DetectionError(APIError):
    def __init__(self, message, status_code=500):
        super().__init__(message, status_code=status_code)


def handle_api_error(error):
    """Single boundary mapping any raised error to a JSON response."""
    if isinstance(error, APIError):
        body, status_code = error.to_dict(), error.status_code
    elif isinstance(error, (JWTExtendedException, PyJWTError)):
        body, status_code = {"error": str(error) or "Invalid token"}, 401
    elif isinstance(error, HTTPException):
        status_code = error.code or 500
        data = getattr(error, 'data', None)
        # reqparse aborts carry per-field messages in data['message']
        if isinstance(data, dict) and isinstance(data.get('message'), dict):
            body = {"error": "Missing required fields", "fields": data['message']}
        else:
            body = {"error": error.description or error.name}
    else:
        setup_logger().error(f"Unhandled error: {str(error)}", exc_info=error)
        body, status_code = {"error": "Internal server error"}, 500
        if current_app.debug:
            body["details"] = str(error)

    if status_code >= 500 and isinstance(error, APIError):
        setup_logger().error(f"[ERROR] {status_code}: {error.message}")

    response = jsonify(body)
    response.status_code = status_code
    return response
