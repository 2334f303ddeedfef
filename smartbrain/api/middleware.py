# smartbrain/api/middleware.py
import math
from flask import jsonify, request
from ..utils.logger import setup_logger

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "cross-origin",
}


def _error(message, status_code, headers=None):
    response = jsonify({"error": message})
    response.status_code = status_code
    for name, value in (headers or {}).items():
        response.headers[name] = value
    return response


def is_allowed_source(origin, referer, allowed_origins):
    """True when the Origin is allowed or the Referer sits under an allowed origin."""
    if origin and origin in allowed_origins:
        return True
    return bool(referer) and any(referer.startswith(allowed) for allowed in allowed_origins)


def register_middleware(app, limiter):
    logger = setup_logger()
    allowed_origins = list(app.config['ALLOWED_ORIGINS'])

    @app.before_request
    def limit_requests():
        result = limiter.check(request.remote_addr or 'unknown')
        if not result.allowed:
            logger.info(f"Rate limited {request.remote_addr} on {request.path}")
            return _error(
                "Too many requests, please try again later.",
                429,
                {"Retry-After": str(math.ceil(result.retry_after or 0))},
            )
        return None

    @app.before_request
    def check_origin():
        if not app.config['ENFORCE_ORIGIN'] or request.method == 'OPTIONS':
            return None
        if not is_allowed_source(request.headers.get('Origin'), request.headers.get('Referer'), allowed_origins):
            logger.info(f"Rejected {request.method} {request.path}: invalid origin")
            return _error("Forbidden: Invalid origin", 403)
        return None

    @app.after_request
    def add_security_headers(response):
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response
